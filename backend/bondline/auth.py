"""Bearer-token authentication.

Access tokens are HS256 JWTs whose subject is the account id.  There are no
refresh tokens: a client logs in again once `exp` has passed.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from . import crud, models
from .database import get_db

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def check_credentials(db: Session, email: str, password: str) -> Optional[models.Account]:
    account = crud.get_account_by_email(db, email=email)
    if account is None or not crud.verify_password(password, account.hashed_password):
        return None
    return account


def issue_access_token(account: models.Account) -> Tuple[str, int]:
    """Return (token, lifetime in seconds) for `account`."""
    lifetime = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(account.id), "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM), int(lifetime.total_seconds())


def current_account(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> models.Account:
    """Resolve the bearer token to an active account, or answer 401."""
    rejected = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        account_id = int(jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])["sub"])
    except (JWTError, KeyError, ValueError):
        raise rejected
    account = crud.get_account(db, account_id)
    if account is None or not account.is_active:
        raise rejected
    return account
