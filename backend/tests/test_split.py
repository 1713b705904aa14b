"""Founder/buyer split rule."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from bondline.engine import Split, split_amount_to_founder_and_buyer
from bondline.errors import InvalidAmount, InvalidPercentage
from bondline.models import MAX_UINT256

amounts = st.integers(min_value=0, max_value=MAX_UINT256)
percentages = st.integers(min_value=0, max_value=100)


def test_default_split_of_fifty():
    assert split_amount_to_founder_and_buyer(50, 10) == Split(buyer_share=45, beneficiary_share=5)


def test_dust_is_dropped():
    split = split_amount_to_founder_and_buyer(9, 10)
    # 8.1 and 0.9 both floor
    assert split == Split(8, 0)
    assert split.total == 8


def test_edges():
    assert split_amount_to_founder_and_buyer(77, 0) == Split(77, 0)
    assert split_amount_to_founder_and_buyer(77, 100) == Split(0, 77)
    assert split_amount_to_founder_and_buyer(0, 35) == Split(0, 0)


@pytest.mark.parametrize("percentage", [-1, 101, 1000])
def test_percentage_out_of_range(percentage):
    with pytest.raises(InvalidPercentage):
        split_amount_to_founder_and_buyer(100, percentage)


def test_negative_amount():
    with pytest.raises(InvalidAmount):
        split_amount_to_founder_and_buyer(-1, 10)


@given(amounts, percentages)
def test_split_loses_at_most_one_unit(amount, percentage):
    split = split_amount_to_founder_and_buyer(amount, percentage)
    assert split.total <= amount <= split.total + 1


@given(amounts, percentages, percentages)
def test_split_is_monotonic_in_percentage(amount, p1, p2):
    low, high = sorted((p1, p2))
    a = split_amount_to_founder_and_buyer(amount, low)
    b = split_amount_to_founder_and_buyer(amount, high)
    assert b.beneficiary_share >= a.beneficiary_share
    assert b.buyer_share <= a.buyer_share
