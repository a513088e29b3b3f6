from decimal import Decimal

import pytest

from catalog_admin.utils.discount import (
    discount_percent_from_prices,
    format_discount_percentage,
    format_money,
    format_price_display,
    rounded_discount_percent,
    savings_amount,
    selling_price_from_discount,
    to_decimal,
    validate_price,
)


def test_to_decimal_rejects_blank_and_non_finite_values():
    assert to_decimal(" 12.50 ") == Decimal("12.50")
    assert to_decimal(0.1) == Decimal("0.1")
    for value in (None, "", "   ", "abc", "NaN", "Infinity", float("nan"), True, [1]):
        assert to_decimal(value) is None


def test_selling_price_rounds_to_two_decimals():
    assert selling_price_from_discount(1000, 25) == Decimal("750.00")
    assert selling_price_from_discount("199.99", "12.5") == Decimal("174.99")


def test_selling_price_unrounded_variant_keeps_precision():
    assert selling_price_from_discount("199.99", "12.5", rounded=False) == Decimal("174.99125")


@pytest.mark.parametrize("price", ["0", "10.005", "99.99", 1234])
def test_zero_discount_returns_original_price(price):
    assert selling_price_from_discount(price, 0) == Decimal(str(price))


def test_selling_price_clamps_discount_and_degrades_safely():
    assert selling_price_from_discount(500, 150) == Decimal("0")
    assert selling_price_from_discount(100, -5) == Decimal("100")
    assert selling_price_from_discount(100, "") == Decimal("100")
    assert selling_price_from_discount("abc", 10) == Decimal("0")
    assert selling_price_from_discount(-50, 10) == Decimal("0")


def test_huge_prices_do_not_raise():
    assert selling_price_from_discount("9e999999", 50) == Decimal("4.5e999999")
    assert selling_price_from_discount("9e999999", 50, rounded=False) == Decimal("4.5e999999")
    assert selling_price_from_discount("1e999999999", 50) == Decimal("1e999999999")
    assert discount_percent_from_prices("9e999999", "1") == "100"
    assert rounded_discount_percent("9e40", "1") == 100
    assert format_money("9e999999") == ""
    assert format_price_display("9e999999") == "₹0"


def test_discount_from_prices_keeps_full_precision():
    assert discount_percent_from_prices(1000, 900) == "10"
    assert discount_percent_from_prices(1000, 750) == "25"
    assert discount_percent_from_prices(1000, "666.67") == "33.333"
    assert discount_percent_from_prices(3, 2).startswith("33.3333333333")


@pytest.mark.parametrize(
    "original, selling",
    [(100, 100), (100, 150), (0, 10), (-5, 1), ("NaN", 1), (100, "Infinity"), (100, None), ("", 5)],
)
def test_discount_from_prices_is_zero_for_degenerate_inputs(original, selling):
    assert discount_percent_from_prices(original, selling) == "0"


def test_discount_from_prices_never_exceeds_hundred():
    assert discount_percent_from_prices(100, 0) == "100"
    assert discount_percent_from_prices(100, -20) == "100"


@pytest.mark.parametrize("price", [50, "199.99", 1000, "2499.50"])
@pytest.mark.parametrize("discount", ["0", "0.5", "12.5", "33.333", "99.9"])
def test_percentage_survives_price_round_trip(price, discount):
    selling = selling_price_from_discount(price, discount)
    recovered = Decimal(discount_percent_from_prices(price, selling))
    assert abs(recovered - Decimal(discount)) <= Decimal("0.01")


def test_format_discount_percentage_strips_trailing_zeros():
    assert format_discount_percentage(12.5) == "12.5"
    assert format_discount_percentage("10.000000") == "10"
    assert format_discount_percentage(100) == "100"
    assert format_discount_percentage("33.3333333333") == "33.333333"
    assert format_discount_percentage("1.23456789", max_decimals=2) == "1.23"


@pytest.mark.parametrize("value", [0, "0", None, "", "abc", "0.0000004"])
def test_format_discount_percentage_zero_and_invalid(value):
    assert format_discount_percentage(value) == "0"


def test_format_money_for_editable_fields():
    assert format_money("750") == "750.00"
    assert format_money(12.345) == "12.35"
    assert format_money(5, decimal_places=0) == "5"
    assert format_money("") == ""
    assert format_money(None) == ""
    assert format_money("x") == ""


def test_format_price_display_uses_indian_grouping():
    assert format_price_display(100000) == "₹1,00,000.00"
    assert format_price_display("1234567.891") == "₹12,34,567.89"
    assert format_price_display(999) == "₹999.00"
    assert format_price_display(-1500) == "-₹1,500.00"
    assert format_price_display(None) == "₹0"
    assert format_price_display("abc") == "₹0"


def test_rounded_discount_percent_for_badges():
    assert rounded_discount_percent(200, 150) == 25
    assert rounded_discount_percent(1000, 666) == 33
    assert rounded_discount_percent(1000, 995) == 1
    assert rounded_discount_percent(None, 10) == 0
    assert rounded_discount_percent(100, 0) == 0
    assert rounded_discount_percent(100, 120) == 0
    assert rounded_discount_percent(100, 100) == 0


def test_savings_amount_is_never_negative():
    assert savings_amount(1000, 750) == Decimal("250")
    assert savings_amount(100, 120) == Decimal("0.00")
    assert savings_amount(None, 120) == Decimal("0.00")


def test_validate_price_messages():
    assert validate_price("", required=True) == "Price is required"
    assert validate_price(None) is None
    assert validate_price("abc", field_name="Selling price") == "Selling price must be a valid number"
    assert validate_price("-1") == "Price must be at least 0"
    assert validate_price("150", max_value=100, field_name="Discount") == "Discount cannot exceed 100"
    assert validate_price("50", min_value=0, max_value=100) is None
    assert validate_price(0, required=True) is None
