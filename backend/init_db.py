"""
Database initialization and seeding script for Bondline.

This script creates all database tables and optionally seeds the database
with the admin account and deploys the token from the TOKEN_* settings.

Usage:
    python init_db.py --with-seed
"""

import argparse
import logging
import os

from bondline import crud, models, schemas, service
from bondline.database import Base, SessionLocal, engine


logger = logging.getLogger("init_db")


def init_db(with_seed: bool = False) -> None:
    """Create all tables and optionally seed the database."""
    Base.metadata.create_all(bind=engine)
    if not with_seed:
        return

    db = SessionLocal()
    try:
        admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
        admin = crud.get_account_by_email(db, admin_email)
        if admin is None:
            admin = crud.create_account(
                db,
                schemas.AccountCreate(email=admin_email, password=os.getenv("ADMIN_PASSWORD", "admin12345")),
            )
            logger.info("created admin account %s", admin_email)
        else:
            logger.info("admin account already exists, skipping")

        if db.query(models.TokenState).first() is None:
            token = service.deploy_token(db, admin)
            logger.info("deployed token %s with owner %s", token.symbol, admin_email)
        else:
            logger.info("token already deployed, skipping")
    finally:
        db.close()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Initialize and optionally seed the database")
    parser.add_argument(
        "--with-seed",
        action="store_true",
        help="Create the admin account and deploy the token after initializing tables",
    )
    args = parser.parse_args()
    init_db(with_seed=args.with_seed)


if __name__ == "__main__":
    main()
