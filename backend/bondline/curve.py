"""Bonding curve pricing.

The engine never does curve math itself; it is handed a `PricingCurve` and
asks it two questions:

    purchase_return(supply, reserve_held, ratio, deposit) -> tokens to mint
    sale_return(supply, reserve_held, ratio, amount)      -> reserve to pay

`BancorCurve` is the default continuous-token curve:

    purchase = supply * ((1 + deposit / reserve) ^ (ratio / 1e6) - 1)
    sale     = reserve * (1 - (1 - amount / supply) ^ (1e6 / ratio))

where `ratio` is the reserve ratio in parts per million.  Results are
computed with high precision decimals and floored to whole units, so the
curve never hands out more than the exact formula allows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_FLOOR, Decimal, localcontext


MAX_RESERVE_RATIO = 1_000_000

# 256-bit values have 78 digits; leave room for the fractional part.
PRECISION = 120


class PricingCurve(ABC):
    @abstractmethod
    def purchase_return(self, supply: int, reserve_held: int, reserve_ratio_ppm: int, deposit_amount: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def sale_return(self, supply: int, reserve_held: int, reserve_ratio_ppm: int, sell_amount: int) -> int:
        raise NotImplementedError


def _floor(v: Decimal) -> int:
    return int(v.to_integral_value(rounding=ROUND_FLOOR))


def _validate(supply: int, reserve_held: int, reserve_ratio_ppm: int, amount: int) -> None:
    if supply <= 0:
        raise ValueError("supply must be positive")
    if reserve_held <= 0:
        raise ValueError("reserve must be positive")
    if not 0 < reserve_ratio_ppm <= MAX_RESERVE_RATIO:
        raise ValueError("reserve ratio must be in (0, 1000000]")
    if amount < 0:
        raise ValueError("amount must not be negative")


class BancorCurve(PricingCurve):
    """Constant reserve ratio curve."""

    def purchase_return(self, supply: int, reserve_held: int, reserve_ratio_ppm: int, deposit_amount: int) -> int:
        _validate(supply, reserve_held, reserve_ratio_ppm, deposit_amount)
        if deposit_amount == 0:
            return 0

        # Full reserve: price is constant, exact integer math.
        if reserve_ratio_ppm == MAX_RESERVE_RATIO:
            return supply * deposit_amount // reserve_held

        with localcontext() as ctx:
            ctx.prec = PRECISION
            base = (Decimal(reserve_held) + deposit_amount) / reserve_held
            exponent = Decimal(reserve_ratio_ppm) / MAX_RESERVE_RATIO
            minted = Decimal(supply) * (base ** exponent) - supply
            return max(_floor(minted), 0)

    def sale_return(self, supply: int, reserve_held: int, reserve_ratio_ppm: int, sell_amount: int) -> int:
        _validate(supply, reserve_held, reserve_ratio_ppm, sell_amount)
        if sell_amount > supply:
            raise ValueError("cannot sell more than circulating supply")
        if sell_amount == 0:
            return 0
        if sell_amount == supply:
            return reserve_held

        if reserve_ratio_ppm == MAX_RESERVE_RATIO:
            return reserve_held * sell_amount // supply

        with localcontext() as ctx:
            ctx.prec = PRECISION
            base = Decimal(supply - sell_amount) / supply
            exponent = Decimal(MAX_RESERVE_RATIO) / reserve_ratio_ppm
            reimbursed = Decimal(reserve_held) * (1 - base ** exponent)
            return min(max(_floor(reimbursed), 0), reserve_held)
