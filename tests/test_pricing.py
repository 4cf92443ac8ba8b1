import pytest

from feedviewer.pricing import calculate_price


def test_default_fees():
    result = calculate_price(100)
    assert result.selling_price == pytest.approx(130.0)
    assert result.profit == pytest.approx(9.16)
    assert result.roi == pytest.approx(9.16)
    assert result.markup_percent == 30


def test_custom_markup_without_fees():
    result = calculate_price(
        50, markup_percent=100, ebay_fee_percent=0, paypal_fee_percent=0, paypal_fixed_fee=0
    )
    assert result.selling_price == pytest.approx(100.0)
    assert result.profit == pytest.approx(50.0)
    assert result.roi == pytest.approx(100.0)


def test_free_item_has_zero_roi():
    result = calculate_price(0)
    assert result.selling_price == 0
    assert result.profit == pytest.approx(-0.3)
    assert result.roi == 0


def test_half_pennies_round_up():
    result = calculate_price(
        0.25, markup_percent=50, ebay_fee_percent=0, paypal_fee_percent=0, paypal_fixed_fee=0
    )
    assert result.selling_price == 0.38
    assert result.profit == 0.13
