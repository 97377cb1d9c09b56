import logging

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import SEED_ADMIN_EMAIL, SEED_ADMIN_PASSWORD, SEED_ADMIN_USERNAME
from ..models.user import User
from ..utils.security import hash_password

logger = logging.getLogger(__name__)

# create_all() does not add columns to existing tables; these arrived after the
# first schema and are added in place on older databases.
LATE_COLUMNS = {
    "clients": {
        "vat_number": "VARCHAR(50)",
        "updated_at": "TIMESTAMP",
    },
    "users": {
        "password_change_required": "BOOLEAN NOT NULL DEFAULT FALSE",
    },
    "candidates": {
        "resume_path": "VARCHAR(500)",
    },
    "applications": {
        "resume_path": "VARCHAR(500)",
    },
}


def add_missing_columns(engine) -> list[str]:
    """Best-effort ALTER TABLE for LATE_COLUMNS; returns ``table.column`` added."""
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    added = []
    for table, columns in LATE_COLUMNS.items():
        if table not in tables:
            continue
        existing = {c["name"] for c in inspector.get_columns(table)}
        for column, ddl_type in columns.items():
            if column in existing:
                continue
            try:
                with engine.begin() as conn:
                    conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl_type}"))
                added.append(f"{table}.{column}")
            except SQLAlchemyError as e:
                logger.error("Failed to add column %s.%s: %s", table, column, e)
    if added:
        logger.info("Added columns: %s", ", ".join(added))
    return added


def seed_admin(db: Session) -> User | None:
    """Create the configured admin account when no user holds that username."""
    existing = db.query(User).filter(User.username == SEED_ADMIN_USERNAME).first()
    if existing:
        return None

    admin = User(
        username=SEED_ADMIN_USERNAME,
        email=SEED_ADMIN_EMAIL.strip().lower(),
        password_hash=hash_password(SEED_ADMIN_PASSWORD),
        first_name="Admin",
        last_name="User",
        role="admin",
        password_change_required=True,
    )
    try:
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Seeded admin account '%s'", SEED_ADMIN_USERNAME)
    return admin
