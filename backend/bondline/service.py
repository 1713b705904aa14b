"""Token service: deployment and serialized engine operations.

Routes never drive the engine directly.  Each operation here:

  1. takes the process-wide engine lock,
  2. loads the token row and builds an engine bound to the session,
  3. runs the engine call and commits (or rolls back everything),
  4. publishes the committed events to the realtime channel.

Holding the lock across load, mutate and commit means the supply and
reserve an operation priced against are the ones it writes back.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from typing import Iterator, List, Tuple

from sqlalchemy.orm import Session

from . import models
from .curve import MAX_RESERVE_RATIO, BancorCurve, PricingCurve
from .engine import DEFAULT_FOUNDER_PERCENTAGE, AccessControl, IssuanceEngine, Split
from .errors import TokenNotDeployed
from .events import SqlEventLog
from .ledger import SqlCustody, SqlLedger
from .realtime import publish_event_sync


logger = logging.getLogger(__name__)

# Reserve balance (and seeded custody) of a freshly deployed token,
# independent of any initial supply.
INITIAL_RESERVE_BALANCE = 10**18

TOKEN_NAME = os.getenv("TOKEN_NAME", "Bondline")
TOKEN_SYMBOL = os.getenv("TOKEN_SYMBOL", "BOND")
TOKEN_INITIAL_SUPPLY = int(os.getenv("TOKEN_INITIAL_SUPPLY", str(1_000_000 * 10**18)))
TOKEN_RESERVE_RATIO_PPM = int(os.getenv("TOKEN_RESERVE_RATIO_PPM", "500000"))

_engine_lock = threading.RLock()
_curve: PricingCurve = BancorCurve()


def set_curve(curve: PricingCurve) -> None:
    """Swap the pricing curve used by every engine built from now on."""
    global _curve
    _curve = curve


@contextmanager
def atomic(db: Session) -> Iterator[None]:
    """Serialize against other engine operations and commit all-or-nothing."""
    with _engine_lock:
        try:
            yield
            db.commit()
        except Exception:
            db.rollback()
            raise


def get_token(db: Session) -> models.TokenState:
    token = db.query(models.TokenState).order_by(models.TokenState.id).first()
    if token is None:
        raise TokenNotDeployed()
    return token


def build_engine(db: Session, token: models.TokenState) -> Tuple[IssuanceEngine, SqlEventLog]:
    log = SqlEventLog(db)
    engine = IssuanceEngine(
        state=token,
        ledger=SqlLedger(db, token),
        custody=SqlCustody(db, token),
        curve=_curve,
        access=AccessControl(token.owner_id),
        events=log,
    )
    return engine, log


def _publish(events: List) -> None:
    for event in events:
        publish_event_sync(event.as_dict())


def deploy_token(
    db: Session,
    owner: models.Account,
    name: str = TOKEN_NAME,
    symbol: str = TOKEN_SYMBOL,
    initial_supply: int = TOKEN_INITIAL_SUPPLY,
    reserve_ratio_ppm: int = TOKEN_RESERVE_RATIO_PPM,
) -> models.TokenState:
    """Create the token once and grant the initial supply to its owner.

    The initial supply is not backed by `reserve_balance`; the reserve starts
    at `INITIAL_RESERVE_BALANCE` whatever the grant is.  With no initial
    supply the curve has nothing to price against and every buy fails with
    `PricingFailed`.
    """
    if not 0 < reserve_ratio_ppm <= MAX_RESERVE_RATIO:
        raise ValueError("reserve ratio must be in (0, 1000000]")
    if initial_supply < 0:
        raise ValueError("initial supply must not be negative")

    with atomic(db):
        if db.query(models.TokenState).first() is not None:
            raise ValueError("token already deployed")
        token = models.TokenState(
            name=name,
            symbol=symbol,
            initial_supply=initial_supply,
            total_supply=0,
            reserve_ratio_ppm=reserve_ratio_ppm,
            reserve_balance=INITIAL_RESERVE_BALANCE,
            reserve_held=INITIAL_RESERVE_BALANCE,
            founder_percentage=DEFAULT_FOUNDER_PERCENTAGE,
            owner_id=owner.id,
            beneficiary_id=owner.id,
        )
        db.add(token)
        db.flush()
        if initial_supply > 0:
            SqlLedger(db, token).issue(owner.id, initial_supply)

    db.refresh(token)
    logger.info("deployed %s (%s): initial_supply=%s ratio=%sppm", name, symbol, initial_supply, reserve_ratio_ppm)
    return token


def buy(db: Session, caller_id: int, deposit_amount: int) -> Split:
    with atomic(db):
        engine, log = build_engine(db, get_token(db))
        split = engine.buy(caller_id, deposit_amount)
    _publish(log.pending)
    return split


def sell(db: Session, caller_id: int, amount: int) -> int:
    with atomic(db):
        engine, log = build_engine(db, get_token(db))
        reimburse_amount = engine.sell(caller_id, amount)
    _publish(log.pending)
    return reimburse_amount


def change_founder_percentage(db: Session, caller_id: int, new_percentage: int) -> models.TokenState:
    with atomic(db):
        token = get_token(db)
        engine, log = build_engine(db, token)
        engine.change_founder_percentage(caller_id, new_percentage)
    _publish(log.pending)
    db.refresh(token)
    return token


def estimate_buy_return(db: Session, amount: int) -> Split:
    with _engine_lock:
        engine, _ = build_engine(db, get_token(db))
        return engine.estimate_buy_return(amount)


def estimate_sell_return(db: Session, amount: int) -> int:
    with _engine_lock:
        engine, _ = build_engine(db, get_token(db))
        return engine.estimate_sell_return(amount)


def fund_account(db: Session, caller_id: int, account_id: int, amount: int) -> models.Account:
    """Credit an account with reserve asset settled off-engine.  Owner only."""
    with atomic(db):
        token = get_token(db)
        AccessControl(token.owner_id).require_admin(caller_id)
        SqlCustody(db, token).fund(account_id, amount)
    account = db.get(models.Account, account_id)
    db.refresh(account)
    logger.info("funded account=%s with %s reserve", account_id, amount)
    return account
