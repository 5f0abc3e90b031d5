"""
Check the JaCore PostgreSQL database and seed roles and the admin account.
Run after `alembic upgrade head`: python scripts/init_postgres.py

Create the role and database first if they do not exist:

  sudo -u postgres psql
  CREATE USER jacore WITH PASSWORD 'jacore';
  CREATE DATABASE jacore_db OWNER jacore;
  \q
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from jacore.config import settings
from jacore.core.database import engine
from jacore.main import seed_identity


def main():
    url = settings.get_database_url()
    if not url.startswith("postgresql"):
        print("Database URL is not PostgreSQL. Skipping connection check.")
    else:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            print("PostgreSQL connection OK.")
        except SQLAlchemyError as e:
            print(f"Cannot connect to PostgreSQL: {e}")
            print("\nCreate the database first:")
            print("  psql -U postgres -c \"CREATE USER jacore WITH PASSWORD 'jacore';\"")
            print("  psql -U postgres -c \"CREATE DATABASE jacore_db OWNER jacore;\"")
            sys.exit(1)

    seed_identity()
    print(f"Roles seeded; admin account is {settings.ADMIN_EMAIL}.")


if __name__ == "__main__":
    main()
