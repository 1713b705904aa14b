"""Trade API routes.

Buy deposits reserve asset and mints token along the bonding curve; sell
burns token and pays the reserve back.  Pricing happens server-side in the
issuance engine and every committed trade is published as a realtime event.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas, service
from ..auth import current_account
from ..database import get_db
from ..ratelimit import TRADE_RATE_LIMIT_PER_MINUTE, rate_limit_dependency


router = APIRouter(prefix="/trades", tags=["trades"])

trade_limit = rate_limit_dependency(scope="trade", limit=TRADE_RATE_LIMIT_PER_MINUTE, window_seconds=60)


@router.post("/buy", response_model=schemas.BuyResult, status_code=status.HTTP_201_CREATED)
def buy(
    payload: schemas.BuyRequest,
    db: Session = Depends(get_db),
    account: models.Account = Depends(current_account),
    _: None = Depends(trade_limit),
) -> schemas.BuyResult:
    """Deposit reserve asset and receive newly minted token."""
    split = service.buy(db, account.id, payload.deposit_amount)
    return schemas.BuyResult(
        deposit_amount=payload.deposit_amount,
        buyer_share=split.buyer_share,
        beneficiary_share=split.beneficiary_share,
        total_minted=split.total,
    )


@router.post("/sell", response_model=schemas.SellResult, status_code=status.HTTP_201_CREATED)
def sell(
    payload: schemas.SellRequest,
    db: Session = Depends(get_db),
    account: models.Account = Depends(current_account),
    _: None = Depends(trade_limit),
) -> schemas.SellResult:
    """Burn token and have the reserve paid out to the caller's credit."""
    reimburse_amount = service.sell(db, account.id, payload.amount)
    return schemas.SellResult(amount=payload.amount, reimburse_amount=reimburse_amount)
