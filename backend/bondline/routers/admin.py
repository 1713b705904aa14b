"""Admin routes.

Owner-only: the founder split of future mints and reserve funding.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas, service
from ..auth import current_account
from ..database import get_db


router = APIRouter(prefix="/admin", tags=["admin"])


@router.put("/founder-percentage", response_model=schemas.TokenState)
def change_founder_percentage(
    payload: schemas.FounderPercentageUpdate,
    db: Session = Depends(get_db),
    account: models.Account = Depends(current_account),
) -> models.TokenState:
    """Set the share of every future mint routed to the beneficiary."""
    return service.change_founder_percentage(db, account.id, payload.percentage)


@router.post("/fund", response_model=schemas.Account)
def fund_account(
    payload: schemas.FundRequest,
    db: Session = Depends(get_db),
    account: models.Account = Depends(current_account),
) -> models.Account:
    """Credit an account with reserve asset received outside the engine."""
    return service.fund_account(db, account.id, payload.account_id, payload.amount)
