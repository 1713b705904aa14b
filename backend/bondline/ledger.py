"""Token ledger and reserve custody backed by the database.

`SqlLedger` is a plain fungible-token ledger: one `Holding` row per account
and the total supply on the token row, kept equal to the sum of holdings.

`SqlCustody` holds the reserve asset deposited with the engine.  A deposit
moves reserve from the payer's credit into custody and a payout moves it
back to the recipient's credit; every check happens before anything is
written, so a refused deposit or payout changes nothing.

Neither class commits.  The caller owns the transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from . import models
from .errors import AccountNotFound, InsufficientBalance, InvalidAmount, PayoutFailed


class SqlLedger:
    def __init__(self, db: Session, token: models.TokenState):
        self.db = db
        self.token = token

    def _holding(self, holder_id: int) -> Optional[models.Holding]:
        return self.db.query(models.Holding).filter(models.Holding.account_id == holder_id).first()

    def balance_of(self, holder_id: int) -> int:
        holding = self._holding(holder_id)
        return holding.balance if holding else 0

    def total_supply(self) -> int:
        return self.token.total_supply

    def issue(self, holder_id: int, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must not be negative")
        holding = self._holding(holder_id)
        if holding is None:
            holding = models.Holding(account_id=holder_id, balance=0)
            self.db.add(holding)
        holding.balance = holding.balance + amount
        self.token.total_supply = self.token.total_supply + amount
        self.db.flush()

    def redeem(self, holder_id: int, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must not be negative")
        holding = self._holding(holder_id)
        balance = holding.balance if holding else 0
        if balance < amount:
            raise InsufficientBalance()
        holding.balance = balance - amount
        self.token.total_supply = self.token.total_supply - amount
        self.db.flush()


class SqlCustody:
    def __init__(self, db: Session, token: models.TokenState):
        self.db = db
        self.token = token

    def held(self) -> int:
        return self.token.reserve_held

    def receive(self, payer_id: int, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must not be negative")
        payer = self.db.get(models.Account, payer_id)
        if payer is None or payer.reserve_credit < amount:
            raise InsufficientBalance("Insufficient reserve credit for deposit")
        payer.reserve_credit = payer.reserve_credit - amount
        self.token.reserve_held = self.token.reserve_held + amount
        self.db.flush()

    def fund(self, account_id: int, amount: int) -> None:
        """Credit reserve asset settled outside the engine (e.g. a bank transfer)."""
        if amount <= 0:
            raise InvalidAmount()
        account = self.db.get(models.Account, account_id)
        if account is None:
            raise AccountNotFound()
        account.reserve_credit = account.reserve_credit + amount
        self.db.flush()

    def pay(self, recipient_id: int, amount: int) -> None:
        if amount > self.token.reserve_held:
            raise PayoutFailed("Insufficient reserve in custody")
        recipient = self.db.get(models.Account, recipient_id)
        if recipient is None or not recipient.is_active or not recipient.payouts_enabled:
            raise PayoutFailed("Recipient cannot receive reserve payouts")
        recipient.reserve_credit = recipient.reserve_credit + amount
        self.token.reserve_held = self.token.reserve_held - amount
        self.db.flush()
