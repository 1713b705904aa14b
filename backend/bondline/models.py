"""
SQLAlchemy models for Bondline.

These models define the schema for one deployed token: the accounts that
hold it, their ledger balances, the token's reserve state and the durable
log of engine events.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from .database import Base

MAX_UINT256 = 2**256 - 1


class Uint256(TypeDecorator):
    """Unsigned 256-bit integer stored as a decimal string.

    SQLite (and the float conversion SQLAlchemy applies to Numeric there)
    cannot hold 256-bit values exactly, so amounts round-trip as text.
    """

    impl = String(78)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if value < 0 or value > MAX_UINT256:
            raise ValueError(f"{value} is out of uint256 range")
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class Account(Base):
    """A party that can hold the token and receive reserve payouts."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    # Accounts can be barred from receiving reserve payouts (e.g. under review).
    payouts_enabled = Column(Boolean, default=True, nullable=False)

    # Reserve asset the account holds: funds buys, receives sell payouts.
    reserve_credit = Column(Uint256, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    holding = relationship("Holding", back_populates="account", uselist=False, cascade="all, delete-orphan")


class Holding(Base):
    """Ledger balance of one account."""

    __tablename__ = "holdings"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)
    balance = Column(Uint256, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    account = relationship("Account", back_populates="holding")


class TokenState(Base):
    """The deployed token: supply, reserve bookkeeping and admin settings."""

    __tablename__ = "token_state"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=False)

    initial_supply = Column(Uint256, nullable=False, default=0)
    total_supply = Column(Uint256, nullable=False, default=0)

    # Parts per million, 0 < ratio <= 1_000_000
    reserve_ratio_ppm = Column(Integer, nullable=False)

    # Tracked reserve: +deposit on buy, -reimbursement on sell.
    reserve_balance = Column(Uint256, nullable=False)
    # Reserve asset actually in custody; this is what pricing reads.
    reserve_held = Column(Uint256, nullable=False, default=0)

    founder_percentage = Column(Integer, nullable=False, default=10)
    owner_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    beneficiary_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("Account", foreign_keys=[owner_id])
    beneficiary = relationship("Account", foreign_keys=[beneficiary_id])


class EngineEvent(Base):
    """Durable record of an emitted engine event (minted, burned, ...)."""

    __tablename__ = "engine_events"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, index=True, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    payload = Column(Text, nullable=False)  # JSON
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
