"""
Pydantic schemas for Bondline API requests and responses.

These classes validate and serialize data between external clients and
the engine.  Amounts are whole base units (uint256) and travel as JSON
integers.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .models import MAX_UINT256


class AccountBase(BaseModel):
    email: EmailStr


class AccountCreate(AccountBase):
    password: str = Field(..., min_length=8, description="Plaintext password (will be hashed)")


class Account(AccountBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    reserve_credit: int = 0


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


# -----------------------------------------------------------------------------
# Trades


class BuyRequest(BaseModel):
    deposit_amount: int = Field(..., ge=0, le=MAX_UINT256)


class BuyResult(BaseModel):
    deposit_amount: int
    buyer_share: int
    beneficiary_share: int
    total_minted: int


class SellRequest(BaseModel):
    amount: int = Field(..., ge=0, le=MAX_UINT256)


class SellResult(BaseModel):
    amount: int
    reimburse_amount: int


class FounderPercentageUpdate(BaseModel):
    # Range checks are the engine's job so the API reports InvalidPercentage.
    percentage: int


class FundRequest(BaseModel):
    account_id: int
    amount: int = Field(..., ge=0, le=MAX_UINT256)


# -----------------------------------------------------------------------------
# Market


class TokenState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    symbol: str
    initial_supply: int
    total_supply: int
    reserve_ratio_ppm: int
    reserve_balance: int
    reserve_held: int
    founder_percentage: int
    owner_id: int
    beneficiary_id: int
    updated_at: Optional[datetime] = None


class BuyQuote(BaseModel):
    deposit_amount: int
    buyer_share: int
    beneficiary_share: int
    total_minted: int


class SellQuote(BaseModel):
    amount: int
    reimburse_amount: int


class DepthLevel(BaseModel):
    amount: int
    quote: int


class Depth(BaseModel):
    asks: List[DepthLevel]
    bids: List[DepthLevel]
    total_supply: int
    reserve_held: int
    timestamp: datetime


class Position(BaseModel):
    account_id: int
    balance: int
    reserve_credit: int


class EngineEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    account_id: Optional[int] = None
    payload: Dict[str, Any]
    created_at: datetime

    @field_validator("payload", mode="before")
    def parse_payload(cls, v):
        # Stored as a JSON string in the DB
        if isinstance(v, str):
            return json.loads(v)
        return v
