import os
from pathlib import Path
from dotenv import load_dotenv

# Override=True so edits to backend/.env take effect on process reload.
#
# Tests point DATABASE_URL at a temporary SQLite file and must not be overridden
# by a developer's .env. Set DISABLE_DOTENV=1 to skip loading it.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)


def _env_bool(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip() in {"1", "true", "True", "yes", "YES"}


_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Local SQLite file by default so the API boots out-of-the-box.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "talentforge.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

# Connection pool bounds (ignored for SQLite).
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5") or "5")
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10") or "10")
DB_ECHO = _env_bool("DB_ECHO")

# Auth / JWT
# NOTE: keep a default for local dev so the server can boot even if SECRET_KEY isn't set.
SECRET_KEY = os.getenv("SECRET_KEY", "talentforge-dev-secret-change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440") or "1440")
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "86400") or "86400")
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "tf_session")

# Seed admin account created on first boot when no user with this username exists.
SEED_ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@talentforge.local")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "password123")

# File uploads
# Absolute path; override with UPLOAD_DIR in env (useful for tests).
UPLOAD_DIR = os.getenv("UPLOAD_DIR") or (Path(__file__).resolve().parent.parent / "uploads").as_posix()
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)) or str(5 * 1024 * 1024))

# Resume export
DEFAULT_RESUME_TEMPLATE = os.getenv("DEFAULT_RESUME_TEMPLATE", "modernProfessional")

# Comma-separated extra CORS origins for the staff frontend.
FRONTEND_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGINS", "").split(",")
    if origin.strip()
]

LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
