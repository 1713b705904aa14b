"""Default Bancor pricing curve."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bondline.curve import MAX_RESERVE_RATIO, BancorCurve

curve = BancorCurve()

SUPPLY = 1_000 * 10**18
RESERVE = 10**18


def test_zero_amounts_return_zero():
    assert curve.purchase_return(SUPPLY, RESERVE, 500_000, 0) == 0
    assert curve.sale_return(SUPPLY, RESERVE, 500_000, 0) == 0


def test_full_reserve_ratio_is_linear():
    assert curve.purchase_return(1000, 500, MAX_RESERVE_RATIO, 100) == 200
    assert curve.sale_return(1000, 500, MAX_RESERVE_RATIO, 100) == 50
    # floors
    assert curve.purchase_return(1000, 300, MAX_RESERVE_RATIO, 100) == 333


def test_half_reserve_ratio_purchase():
    # sqrt(1 + 3) - 1 == 1: minting doubles supply
    minted = curve.purchase_return(1000, 1_000_000, 500_000, 3_000_000)
    assert 999 <= minted <= 1000


def test_half_reserve_ratio_sale():
    # 4e6 * (1 - 0.5 ** 2)
    assert curve.sale_return(1000, 4_000_000, 500_000, 500) == 3_000_000


def test_selling_entire_supply_returns_reserve():
    assert curve.sale_return(SUPPLY, RESERVE, 250_000, SUPPLY) == RESERVE


def test_purchase_is_monotonic_in_deposit():
    deposits = [10**k for k in range(0, 25)]
    minted = [curve.purchase_return(SUPPLY, RESERVE, 300_000, d) for d in deposits]
    assert minted == sorted(minted)


def test_buy_then_sell_does_not_profit():
    deposit = 10**17
    minted = curve.purchase_return(SUPPLY, RESERVE, 500_000, deposit)
    back = curve.sale_return(SUPPLY + minted, RESERVE + deposit, 500_000, minted)
    assert 0 < back <= deposit


@pytest.mark.parametrize(
    "supply,reserve,ratio",
    [(0, RESERVE, 500_000), (SUPPLY, 0, 500_000), (SUPPLY, RESERVE, 0), (SUPPLY, RESERVE, MAX_RESERVE_RATIO + 1)],
)
def test_invalid_state_is_rejected(supply, reserve, ratio):
    with pytest.raises(ValueError):
        curve.purchase_return(supply, reserve, ratio, 10)


def test_cannot_sell_more_than_supply():
    with pytest.raises(ValueError):
        curve.sale_return(1000, 500, 500_000, 1001)


@given(
    supply=st.integers(min_value=1, max_value=10**30),
    reserve=st.integers(min_value=1, max_value=10**30),
    ratio=st.integers(min_value=1, max_value=MAX_RESERVE_RATIO),
    data=st.data(),
)
def test_sale_never_exceeds_reserve(supply, reserve, ratio, data):
    amount = data.draw(st.integers(min_value=0, max_value=supply))
    assert 0 <= curve.sale_return(supply, reserve, ratio, amount) <= reserve
