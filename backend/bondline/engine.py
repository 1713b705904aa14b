"""Issuance engine.

Turns reserve deposits into newly issued token and redeemed token back into
reserve payouts, pricing both through an injected `PricingCurve`:

    buy:  deposit -> custody -> curve.purchase_return -> split -> issue
    sell: amount -> curve.sale_return -> payout -> reserve debit -> redeem

Every newly issued batch is split between the buyer and a beneficiary
(the founder) by `founder_percentage`.  Both shares are floored, so up to
one unit of dust is lost per buy; the minted total reported downstream is
always the sum of the two shares, never the curve's raw figure.

Pricing reads the live custodied reserve, while `reserve_balance` tracks
deposits and reimbursements.  A sell pays out before touching any engine
bookkeeping, and a failed payout raises `PayoutFailed` with nothing
changed.

The engine does no locking or committing of its own.  Callers run each
operation inside one serialized transaction (see `service.atomic`).
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Protocol

from .curve import PricingCurve
from .errors import (
    InsufficientBalance,
    InvalidAmount,
    InvalidPercentage,
    PayoutFailed,
    PricingFailed,
    ReserveUnderflow,
    Unauthorized,
)
from .events import Burned, FounderPercentageChanged, Minted


logger = logging.getLogger(__name__)

DEFAULT_FOUNDER_PERCENTAGE = 10


class Split(NamedTuple):
    buyer_share: int
    beneficiary_share: int

    @property
    def total(self) -> int:
        return self.buyer_share + self.beneficiary_share


class ReserveState(Protocol):
    reserve_balance: int
    reserve_ratio_ppm: int
    founder_percentage: int
    beneficiary_id: int


def split_amount_to_founder_and_buyer(amount: int, percentage: int) -> Split:
    """Split a freshly minted amount into (buyer_share, beneficiary_share).

    Both shares are floor divisions of `amount`, so their sum can be one
    unit short of it.  That remainder is dropped on purpose.
    """
    if amount < 0:
        raise InvalidAmount("Amount must not be negative")
    if not 0 <= percentage <= 100:
        raise InvalidPercentage()
    beneficiary_share = amount * percentage // 100
    buyer_share = amount * (100 - percentage) // 100
    return Split(buyer_share, beneficiary_share)


class AccessControl:
    """Single-owner authorization."""

    def __init__(self, owner_id: int):
        self.owner_id = owner_id

    def require_admin(self, caller_id: int) -> None:
        if caller_id != self.owner_id:
            raise Unauthorized()


class IssuanceEngine:
    def __init__(
        self,
        state: ReserveState,
        ledger,
        custody,
        curve: PricingCurve,
        access: AccessControl,
        events,
    ):
        self.state = state
        self.ledger = ledger
        self.custody = custody
        self.curve = curve
        self.access = access
        self.events = events

    # ------------------------------------------------------------------
    # Pricing

    def _purchase(self, supply: int, reserve_held: int, deposit_amount: int) -> int:
        try:
            return self.curve.purchase_return(supply, reserve_held, self.state.reserve_ratio_ppm, deposit_amount)
        except ValueError as exc:
            raise PricingFailed(str(exc)) from exc

    def _sale(self, supply: int, reserve_held: int, amount: int) -> int:
        try:
            return self.curve.sale_return(supply, reserve_held, self.state.reserve_ratio_ppm, amount)
        except ValueError as exc:
            raise PricingFailed(str(exc)) from exc

    def _quote_buy(self, deposit_amount: int, reserve_held: int) -> Split:
        supply = self.ledger.total_supply()
        mint_amount = self._purchase(supply, reserve_held, deposit_amount)
        return split_amount_to_founder_and_buyer(mint_amount, self.state.founder_percentage)

    def estimate_buy_return(self, amount: int) -> Split:
        """Quote what `buy(amount)` would issue right now, without mutating state."""
        if amount < 0:
            raise InvalidAmount("Amount must not be negative")
        # buy() prices after the deposit is in custody
        return self._quote_buy(amount, self.custody.held() + amount)

    def estimate_sell_return(self, amount: int) -> int:
        if amount < 0:
            raise InvalidAmount("Amount must not be negative")
        return self._sale(self.ledger.total_supply(), self.custody.held(), amount)

    def get_reserve_asset_held(self) -> int:
        return self.custody.held()

    # ------------------------------------------------------------------
    # Mutations

    def buy(self, caller_id: int, deposit_amount: int) -> Split:
        if deposit_amount <= 0:
            raise InvalidAmount()

        self.custody.receive(caller_id, deposit_amount)
        split = self._quote_buy(deposit_amount, self.custody.held())

        self.ledger.issue(caller_id, split.buyer_share)
        self.ledger.issue(self.state.beneficiary_id, split.beneficiary_share)
        self.state.reserve_balance = self.state.reserve_balance + deposit_amount

        self.events.emit(
            Minted(
                buyer=caller_id,
                deposited=deposit_amount,
                total_minted=split.total,
                buyer_share=split.buyer_share,
                beneficiary_share=split.beneficiary_share,
            )
        )
        logger.info(
            "buy: account=%s deposit=%s buyer_share=%s beneficiary_share=%s",
            caller_id, deposit_amount, split.buyer_share, split.beneficiary_share,
        )
        return split

    def sell(self, caller_id: int, amount: int) -> int:
        if amount <= 0:
            raise InvalidAmount()
        if self.ledger.balance_of(caller_id) < amount:
            raise InsufficientBalance()

        supply = self.ledger.total_supply()
        reserve_held = self.custody.held()
        reimburse_amount = self._sale(supply, reserve_held, amount)
        if reimburse_amount > self.state.reserve_balance:
            raise ReserveUnderflow()

        # Payout first: nothing of ours changes unless it lands.
        try:
            self.custody.pay(caller_id, reimburse_amount)
        except PayoutFailed as exc:
            logger.warning("sell: payout of %s to account=%s failed: %s", reimburse_amount, caller_id, exc.detail)
            raise

        self.state.reserve_balance = self.state.reserve_balance - reimburse_amount
        self.ledger.redeem(caller_id, amount)

        self.events.emit(Burned(seller=caller_id, amount_burned=amount, amount_reimbursed=reimburse_amount))
        logger.info("sell: account=%s amount=%s reimbursed=%s", caller_id, amount, reimburse_amount)
        return reimburse_amount

    def change_founder_percentage(self, caller_id: int, new_percentage: int) -> None:
        self.access.require_admin(caller_id)
        if not 0 <= new_percentage <= 100:
            raise InvalidPercentage()

        old_percentage = self.state.founder_percentage
        self.state.founder_percentage = new_percentage
        self.events.emit(
            FounderPercentageChanged(
                changed_by=caller_id,
                old_percentage=old_percentage,
                new_percentage=new_percentage,
            )
        )
        logger.info("founder percentage changed from %s to %s", old_percentage, new_percentage)
