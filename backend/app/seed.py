# backend/app/seed.py
# DEV ONLY: python -m app.seed

import os

from app.core.database import SessionLocal, engine, Base
from app.core.identity import get_identity_provider
from app.core.seed import seed_admin_if_empty, seed_reference_data_if_empty
from app.models import asset  # noqa: F401

# make sure tables exist
Base.metadata.create_all(bind=engine)

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin12345")


def main():
    db = SessionLocal()
    try:
        if seed_reference_data_if_empty(db):
            print("Seeded departments and categories")

        admin = seed_admin_if_empty(db, get_identity_provider(), ADMIN_EMAIL, ADMIN_PASSWORD)
        if admin:
            print(f"Created admin: {admin.email} / {ADMIN_PASSWORD}")
    finally:
        db.close()

    print("Database seeded")


if __name__ == "__main__":
    main()
