"""
Account API routes.

Accounts hold the token and receive reserve payouts.  Registration is
open; everything else needs a bearer token from `/token`.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import current_account
from ..database import get_db


router = APIRouter()


@router.post("", response_model=schemas.Account, status_code=status.HTTP_201_CREATED)
def create_account(account: schemas.AccountCreate, db: Session = Depends(get_db)) -> models.Account:
    """Create a new account.

    If the email is already registered, raise a 400 error.
    """
    if crud.get_account_by_email(db, email=account.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    return crud.create_account(db=db, account=account)


@router.get("/me", response_model=schemas.Account)
def read_current_account(account: models.Account = Depends(current_account)) -> models.Account:
    """Retrieve the currently authenticated account."""
    return account
