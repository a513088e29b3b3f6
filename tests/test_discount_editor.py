from decimal import Decimal

import pytest

from catalog_admin.services.discount_editor import (
    DISCOUNT_TOO_HIGH,
    DISCOUNT_TOO_LOW,
    DiscountField,
    DiscountFieldController,
)
from catalog_admin.services.errors import DiscountValidationError


def test_new_editor_starts_without_discount():
    editor = DiscountFieldController("p1", 1000)

    assert editor.has_existing_discount is False
    assert editor.state.discount_percent == Decimal("0")
    assert editor.state.selling_price == Decimal("1000")
    assert editor.state.driving_field is DiscountField.DISCOUNT_PERCENTAGE


def test_existing_discount_price_initialises_percentage():
    editor = DiscountFieldController("p1", 1000, 800)

    assert editor.has_existing_discount is True
    assert editor.state.discount_percent == Decimal("20")
    assert editor.state.selling_price == Decimal("800")
    assert editor.state.driving_field is DiscountField.SELLING_PRICE


def test_discount_price_at_or_above_list_price_is_not_a_discount():
    assert DiscountFieldController("p1", 1000, 1000).has_existing_discount is False
    assert DiscountFieldController("p1", 1000, 1200).has_existing_discount is False


def test_percentage_edit_then_price_edit_keeps_fields_consistent():
    editor = DiscountFieldController("p1", 1000)

    state = editor.on_discount_percent_edited("25")
    assert state.selling_price == Decimal("750.00")
    assert state.selling_price_display == "750.00"
    assert state.driving_field is DiscountField.DISCOUNT_PERCENTAGE

    state = editor.on_selling_price_edited("900")
    assert state.discount_percent == Decimal("10")
    assert state.discount_percent_display == "10"
    assert state.selling_price == Decimal("900")
    assert state.driving_field is DiscountField.SELLING_PRICE
    assert state.original_price == Decimal("1000")


def test_empty_or_invalid_input_counts_as_zero():
    editor = DiscountFieldController("p1", 1000)

    state = editor.on_discount_percent_edited("")
    assert state.discount_percent == Decimal("0")
    assert state.selling_price == Decimal("1000")

    state = editor.on_selling_price_edited("abc")
    assert state.selling_price == Decimal("0")
    assert state.discount_percent == Decimal("100")


def test_selling_price_edit_keeps_unrounded_percentage_until_blur():
    editor = DiscountFieldController("p1", 3)

    state = editor.on_selling_price_edited("2")
    assert str(state.discount_percent).startswith("33.3333333333")
    assert state.discount_percent_display == "33.333333"

    state = editor.on_blur(DiscountField.DISCOUNT_PERCENTAGE)
    assert state.discount_percent == Decimal("33.333333")
    assert state.selling_price == Decimal("2")


def test_blur_on_selling_price_leaves_percentage_alone():
    editor = DiscountFieldController("p1", 1000)
    editor.on_selling_price_edited("912.345")
    assert editor.state.discount_percent == Decimal("8.7655")

    state = editor.on_blur("sellingPrice")
    assert state.selling_price == Decimal("912.35")
    assert state.discount_percent == Decimal("8.7655")


def test_edit_with_blur():
    editor = DiscountFieldController("p1", 1000)

    state = editor.edit("discountPercentage", "12.5000", blur=True)

    assert state.discount_percent == Decimal("12.5")
    assert state.selling_price == Decimal("875.00")


def test_state_to_dict_uses_display_formats():
    editor = DiscountFieldController("p1", 100000)
    editor.on_discount_percent_edited("10")

    assert editor.state.to_dict() == {
        "originalPrice": "100000.00",
        "discountPercentage": "10",
        "sellingPrice": "90000.00",
        "drivingField": "discountPercentage",
        "originalPriceDisplay": "₹1,00,000.00",
        "sellingPriceDisplay": "₹90,000.00",
    }


@pytest.mark.parametrize(
    "discount, message",
    [("0", DISCOUNT_TOO_LOW), ("-5", DISCOUNT_TOO_LOW), ("100", DISCOUNT_TOO_HIGH), ("150", DISCOUNT_TOO_HIGH)],
)
def test_apply_is_rejected_locally(fake_service, discount, message):
    editor = DiscountFieldController("p1", 1000)
    editor.on_discount_percent_edited(discount)

    with pytest.raises(DiscountValidationError) as exc_info:
        editor.apply(fake_service)

    assert exc_info.value.message == message
    assert fake_service.calls == []


def test_apply_sends_current_percentage(fake_service):
    editor = DiscountFieldController("p1", 1000)
    editor.on_discount_percent_edited("25")

    result = editor.apply(fake_service)

    assert result == {"success": True, "productId": "p1"}
    assert fake_service.calls == [("apply", "p1", Decimal("25"))]


def test_remove_without_existing_discount_is_a_no_op(fake_service):
    editor = DiscountFieldController("p1", 1000)

    assert editor.remove(fake_service) is None
    assert fake_service.calls == []


def test_remove_existing_discount(fake_service):
    editor = DiscountFieldController("p1", 1000, 750)

    editor.remove(fake_service)

    assert fake_service.calls == [("remove", "p1")]


@pytest.mark.parametrize(
    "edit, raw, message",
    [
        ("discountPercentage", "", "Discount percentage is required"),
        ("discountPercentage", "abc", "Discount percentage must be a valid number"),
        ("sellingPrice", "1200", "Selling price cannot exceed 1000"),
        ("sellingPrice", "-1", "Selling price must be at least 0"),
        ("sellingPrice", "1000", DISCOUNT_TOO_LOW),
    ],
)
def test_apply_checks_what_was_typed(fake_service, edit, raw, message):
    editor = DiscountFieldController("p1", 1000)
    editor.edit(edit, raw)

    with pytest.raises(DiscountValidationError) as exc_info:
        editor.apply(fake_service)

    assert exc_info.value.message == message
    assert fake_service.calls == []


def test_apply_before_any_edit_needs_a_percentage(fake_service):
    with pytest.raises(DiscountValidationError) as exc_info:
        DiscountFieldController("p1", 1000).apply(fake_service)

    assert exc_info.value.message == "Discount percentage is required"


def test_existing_discount_can_be_applied_again(fake_service):
    DiscountFieldController("p1", 1000, 800).apply(fake_service)

    assert fake_service.calls == [("apply", "p1", Decimal("20"))]


def test_live_selling_price_is_not_rounded():
    editor = DiscountFieldController("p1", 999)
    editor.on_discount_percent_edited("12.5")

    assert editor.live_selling_price == Decimal("874.125")
    assert editor.state.selling_price == Decimal("874.13")

    editor.on_selling_price_edited("900")
    assert editor.live_selling_price == Decimal("900")
