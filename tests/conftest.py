import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.app...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# backend.app.config reads the environment once, at first import; some test
# modules import models at collection time, so this has to happen here.
TEST_DIR = Path(tempfile.mkdtemp(prefix="talentforge-tests-"))
os.environ["DISABLE_DOTENV"] = "1"
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{TEST_DIR / 'test.sqlite3'}"
os.environ["UPLOAD_DIR"] = str(TEST_DIR / "uploads")


@pytest.fixture(scope="session")
def test_db_path() -> Path:
    return TEST_DIR / "test.sqlite3"


@pytest.fixture()
def app(test_db_path: Path) -> FastAPI:
    """
    The real FastAPI app wired to a temporary SQLite DB.

    Startup hooks (admin seeding) only run when a test enters the TestClient
    context manager; plain ``TestClient(app)`` skips them.
    """
    from backend.app import database as db

    engine = create_engine(
        os.environ["DATABASE_URL"],
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    from backend.app import models  # noqa: F401

    db.Base.metadata.drop_all(bind=engine)
    db.Base.metadata.create_all(bind=engine)

    # User ids restart per test, so per-user template settings must not leak.
    shutil.rmtree(os.environ["UPLOAD_DIR"], ignore_errors=True)
    Path(os.environ["UPLOAD_DIR"]).mkdir(parents=True, exist_ok=True)

    from backend.app.config import SESSION_TTL_SECONDS
    from backend.app.main import app as fastapi_app
    from backend.app.services.sessions import SessionStore

    fastapi_app.state.session_store = SessionStore(SESSION_TTL_SECONDS)
    fastapi_app.state.db_init_error = None
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.app import database

    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def make_user(db_session):
    """Insert a user directly and return it; password is always ``Testpass123!``."""
    from backend.app.models.user import User
    from backend.app.utils.security import hash_password

    password_hash = hash_password("Testpass123!")

    def _make(username: str = "staff", *, role: str = "user", email: str | None = None) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=password_hash,
            first_name=username.capitalize(),
            last_name="Tester",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


def auth_headers(user) -> dict:
    from backend.app.utils.jwt import create_user_token

    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture()
def headers_for():
    return auth_headers


@pytest.fixture()
def staff_headers(make_user) -> dict:
    return auth_headers(make_user("staff", role="user"))


@pytest.fixture()
def admin_headers(make_user) -> dict:
    return auth_headers(make_user("boss", role="admin"))
