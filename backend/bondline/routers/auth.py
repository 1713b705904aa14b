"""Password login returning a short-lived JWT access token."""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import check_credentials, issue_access_token
from ..database import get_db
from ..ratelimit import rate_limit_dependency


router = APIRouter()

login_limit = rate_limit_dependency(scope="login", limit=30, window_seconds=60)


@router.post("/token", response_model=schemas.AccessToken)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
    _: None = Depends(login_limit),
) -> schemas.AccessToken:
    account = check_credentials(db, form_data.username.lower().strip(), form_data.password)
    if account is None or not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token, expires_in = issue_access_token(account)
    return schemas.AccessToken(access_token=access_token, expires_in=expires_in)
