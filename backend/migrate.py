#!/usr/bin/env python3
"""
Bring an existing database up to the current schema.

Creates missing tables, adds columns introduced after the first release and
seeds the admin account. Safe to run repeatedly.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from app.database import SessionLocal, engine, init_db
from app.services.bootstrap import add_missing_columns, seed_admin


def migrate():
    print("Initializing database with all models...")
    init_db()
    print("✓ Tables created")

    added = add_missing_columns(engine)
    if added:
        print(f"✓ Added columns: {', '.join(added)}")
    else:
        print("✓ Columns already up to date")

    db = SessionLocal()
    try:
        admin = seed_admin(db)
    finally:
        db.close()
    if admin:
        print(f"✓ Seeded admin account '{admin.username}' (password change required)")
    else:
        print("✓ Admin account already present")


if __name__ == "__main__":
    migrate()
