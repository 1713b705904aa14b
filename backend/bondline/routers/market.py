"""Market data endpoints.

Provides token state, buy/sell quotes, orderbook-style depth, the caller's
position and the recent event tape.

There is no orderbook (no limit orders).  Depth is a ladder of curve
quotes at fixed sizes so clients can show a familiar market UI.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import crud, models, schemas, service
from ..auth import current_account
from ..database import get_db
from ..errors import EngineError


router = APIRouter(prefix="/market", tags=["market"])

DEPTH_SIZES = [1, 2, 5, 10, 25, 50, 100]
UNIT = 10**18


@router.get("/token", response_model=schemas.TokenState)
def token_state(db: Session = Depends(get_db)) -> models.TokenState:
    """Supply, reserve balance, custodied reserve and admin settings."""
    return service.get_token(db)


@router.get("/quote/buy", response_model=schemas.BuyQuote)
def quote_buy(amount: int = Query(..., ge=0), db: Session = Depends(get_db)) -> schemas.BuyQuote:
    split = service.estimate_buy_return(db, amount)
    return schemas.BuyQuote(
        deposit_amount=amount,
        buyer_share=split.buyer_share,
        beneficiary_share=split.beneficiary_share,
        total_minted=split.total,
    )


@router.get("/quote/sell", response_model=schemas.SellQuote)
def quote_sell(amount: int = Query(..., ge=0), db: Session = Depends(get_db)) -> schemas.SellQuote:
    return schemas.SellQuote(amount=amount, reimburse_amount=service.estimate_sell_return(db, amount))


@router.get("/depth", response_model=schemas.Depth)
def depth(db: Session = Depends(get_db), levels: int = 6, unit: int = UNIT) -> schemas.Depth:
    """Quote ladder from the bonding curve.

    Asks are deposits of `size * unit` reserve and the buyer share they
    mint; bids are sells of `size * unit` token and the reserve they pay.
    """
    token = service.get_token(db)
    sizes = DEPTH_SIZES[: max(1, min(levels, len(DEPTH_SIZES)))]

    asks: List[schemas.DepthLevel] = []
    bids: List[schemas.DepthLevel] = []
    for size in sizes:
        amount = size * max(unit, 1)
        try:
            split = service.estimate_buy_return(db, amount)
            asks.append(schemas.DepthLevel(amount=amount, quote=split.buyer_share))
            # Sells can't exceed circulating supply
            if amount <= token.total_supply:
                bids.append(schemas.DepthLevel(amount=amount, quote=service.estimate_sell_return(db, amount)))
        except EngineError:
            # Curve can't price this size (e.g. nothing issued yet)
            continue

    return schemas.Depth(
        asks=asks,
        bids=bids,
        total_supply=token.total_supply,
        reserve_held=token.reserve_held,
        timestamp=datetime.utcnow(),
    )


@router.get("/position", response_model=schemas.Position)
def position(
    db: Session = Depends(get_db),
    account: models.Account = Depends(current_account),
) -> schemas.Position:
    """The caller's token balance and withdrawable reserve credit."""
    return schemas.Position(
        account_id=account.id,
        balance=crud.get_balance(db, account.id),
        reserve_credit=account.reserve_credit,
    )


@router.get("/tape", response_model=list[schemas.EngineEvent])
def tape(db: Session = Depends(get_db), limit: int = 30, event_type: str | None = None):
    """Recent engine events, newest first."""
    limit = min(max(limit, 1), 200)
    return crud.get_recent_events(db, limit=limit, event_type=event_type)
