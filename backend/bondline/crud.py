"""
CRUD helper functions for the Bondline backend.

These functions abstract direct database interactions, making it easier to
write unit tests and reuse logic across different parts of the application.
"""

from typing import List, Optional

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import models, schemas

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_account(db: Session, account_id: int) -> Optional[models.Account]:
    return db.query(models.Account).filter(models.Account.id == account_id).first()


def get_account_by_email(db: Session, email: str) -> Optional[models.Account]:
    return db.query(models.Account).filter(models.Account.email == email).first()


def create_account(db: Session, account: schemas.AccountCreate) -> models.Account:
    hashed_password = get_password_hash(account.password)
    db_account = models.Account(email=account.email, hashed_password=hashed_password)
    db.add(db_account)
    db.commit()
    db.refresh(db_account)
    return db_account


def get_balance(db: Session, account_id: int) -> int:
    holding = db.query(models.Holding).filter(models.Holding.account_id == account_id).first()
    return holding.balance if holding else 0


def get_recent_events(db: Session, limit: int = 30, event_type: Optional[str] = None) -> List[models.EngineEvent]:
    """Most recent engine events first."""
    q = db.query(models.EngineEvent)
    if event_type:
        q = q.filter(models.EngineEvent.type == event_type)
    return q.order_by(models.EngineEvent.id.desc()).limit(limit).all()
