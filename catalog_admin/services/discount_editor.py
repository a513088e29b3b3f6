"""
Single product discount editor

Keeps original price, discount percentage and selling price consistent while
the admin edits either of the two editable fields. Whichever field was edited
last drives the other one.
"""
import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from catalog_admin.services.discount_client import DiscountService
from catalog_admin.services.errors import DiscountValidationError
from catalog_admin.utils.discount import (
    HUNDRED,
    ZERO,
    Number,
    discount_percent_from_prices,
    format_discount_percentage,
    format_money,
    format_price_display,
    selling_price_from_discount,
    to_decimal,
    validate_price,
)

logger = logging.getLogger(__name__)

DISCOUNT_TOO_LOW = "Please enter a valid discount percentage greater than 0."
DISCOUNT_TOO_HIGH = "Discount percentage cannot be 100% or greater."


class DiscountField(str, Enum):
    DISCOUNT_PERCENTAGE = "discountPercentage"
    SELLING_PRICE = "sellingPrice"


@dataclass(frozen=True)
class ProductDiscountState:
    original_price: Decimal
    discount_percent: Decimal
    selling_price: Decimal
    driving_field: DiscountField

    @property
    def discount_percent_display(self) -> str:
        return format_discount_percentage(self.discount_percent)

    @property
    def selling_price_display(self) -> str:
        return format_money(self.selling_price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalPrice": format_money(self.original_price),
            "discountPercentage": self.discount_percent_display,
            "sellingPrice": self.selling_price_display,
            "drivingField": self.driving_field.value,
            "originalPriceDisplay": format_price_display(self.original_price),
            "sellingPriceDisplay": format_price_display(self.selling_price),
        }


def _parse_or_zero(raw: Number) -> Decimal:
    return to_decimal(raw) or ZERO


class DiscountFieldController:
    """
    State machine behind the "Manage Product Discount" editor.

    The original price is fixed for the lifetime of the controller; it is
    changed only through the product edit flow.
    """

    def __init__(self, product_id: str, original_price: Number, discount_price: Number = None):
        self.product_id = product_id
        price = _parse_or_zero(original_price)
        current = to_decimal(discount_price)

        # A stored discount price below the list price means a discount is active
        self.has_existing_discount = current is not None and ZERO < current < price
        # what the admin last typed into the driving field
        self._raw_input = current if self.has_existing_discount else None
        if self.has_existing_discount:
            self._state = ProductDiscountState(
                original_price=price,
                discount_percent=Decimal(discount_percent_from_prices(price, current)),
                selling_price=current,
                driving_field=DiscountField.SELLING_PRICE,
            )
        else:
            self._state = ProductDiscountState(
                original_price=price,
                discount_percent=ZERO,
                selling_price=price,
                driving_field=DiscountField.DISCOUNT_PERCENTAGE,
            )

    @property
    def state(self) -> ProductDiscountState:
        return self._state

    @property
    def live_selling_price(self) -> Decimal:
        """Unrounded selling price shown while the percentage is being typed"""
        if self._state.driving_field is DiscountField.SELLING_PRICE:
            return self._state.selling_price
        return selling_price_from_discount(self._state.original_price, self._state.discount_percent, rounded=False)

    def on_discount_percent_edited(self, raw_input: Number) -> ProductDiscountState:
        self._raw_input = raw_input
        discount = _parse_or_zero(raw_input)
        self._state = replace(
            self._state,
            discount_percent=discount,
            selling_price=selling_price_from_discount(self._state.original_price, discount),
            driving_field=DiscountField.DISCOUNT_PERCENTAGE,
        )
        return self._state

    def on_selling_price_edited(self, raw_input: Number) -> ProductDiscountState:
        self._raw_input = raw_input
        selling_price = _parse_or_zero(raw_input)
        self._state = replace(
            self._state,
            selling_price=selling_price,
            discount_percent=Decimal(discount_percent_from_prices(self._state.original_price, selling_price)),
            driving_field=DiscountField.SELLING_PRICE,
        )
        return self._state

    def on_blur(self, field: DiscountField) -> ProductDiscountState:
        """Round the blurred field to its display precision, leaving the other alone"""
        field = DiscountField(field)
        if field is DiscountField.DISCOUNT_PERCENTAGE:
            self._state = replace(
                self._state,
                discount_percent=Decimal(format_discount_percentage(self._state.discount_percent)),
            )
        else:
            self._state = replace(
                self._state,
                selling_price=Decimal(format_money(self._state.selling_price) or "0"),
            )
        return self._state

    def edit(self, field: DiscountField, raw_input: Number, blur: bool = False) -> ProductDiscountState:
        field = DiscountField(field)
        if field is DiscountField.DISCOUNT_PERCENTAGE:
            self.on_discount_percent_edited(raw_input)
        else:
            self.on_selling_price_edited(raw_input)
        if blur:
            self.on_blur(field)
        return self._state

    def validate_for_apply(self) -> Decimal:
        if self._state.driving_field is DiscountField.SELLING_PRICE:
            problem = validate_price(
                self._raw_input,
                required=True,
                min_value=0,
                max_value=self._state.original_price,
                field_name="Selling price",
            )
        else:
            problem = validate_price(self._raw_input, required=True, min_value=None, field_name="Discount percentage")
        if problem:
            raise DiscountValidationError(problem)

        discount = self._state.discount_percent
        if discount <= 0:
            raise DiscountValidationError(DISCOUNT_TOO_LOW)
        if discount >= HUNDRED:
            raise DiscountValidationError(DISCOUNT_TOO_HIGH)
        return discount

    def apply(self, service: DiscountService) -> Dict[str, Any]:
        """
        Submit the current discount for this product.

        Raises DiscountValidationError without calling the service when the
        percentage is outside (0, 100).
        """
        discount = self.validate_for_apply()
        logger.info(f"Applying {format_discount_percentage(discount)}% discount to product {self.product_id}")
        return service.apply_discount(self.product_id, discount)

    def remove(self, service: DiscountService) -> Optional[Dict[str, Any]]:
        """Remove the product's discount; returns None when there was none to remove"""
        if not self.has_existing_discount:
            logger.debug(f"Product {self.product_id} has no discount to remove")
            return None
        logger.info(f"Removing discount from product {self.product_id}")
        return service.remove_discount(self.product_id)
