"""
Discount and price calculation utilities

Every function here is pure and never raises: invalid input degrades to a
zero discount, an unchanged price or an empty string.
"""
from decimal import Decimal, DecimalException, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Union

Number = Union[Decimal, int, float, str, None]

HUNDRED = Decimal("100")
ZERO = Decimal("0")
CURRENCY_SYMBOL = "₹"


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a user or API supplied number.

    Returns None for None, blank strings, non-numeric text and
    non-finite values (NaN, Infinity).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, Decimal(float) would expose binary noise
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def _quantize(value: Decimal, places: int) -> Optional[Decimal]:
    try:
        return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except DecimalException:
        # more digits than the context precision allows
        return None


def _plain(value: Decimal) -> str:
    # Fixed-point text without exponent or trailing zeros ("10", "33.5")
    text = format(value.normalize(), "f")
    return "0" if text in ("", "-0") else text


def selling_price_from_discount(original_price: Number, discount_percent: Number, rounded: bool = True) -> Decimal:
    """
    Calculate the selling price for a discount percentage.

    Args:
        original_price: List price before any discount
        discount_percent: Discount percentage, clamped to 0-100
        rounded: Round to 2 decimal places (False gives the live preview value)

    Returns:
        Selling price. The original price is returned untouched when the
        discount is zero or negative.
    """
    price = to_decimal(original_price)
    if price is None or price <= 0:
        return ZERO

    discount = to_decimal(discount_percent) or ZERO
    if discount <= 0:
        return price

    discount = min(discount, HUNDRED)
    try:
        # scale by the fraction first so price * discount cannot overflow
        selling_price = price - price * (discount / HUNDRED)
    except DecimalException:
        return price

    if not rounded:
        return selling_price
    return _quantize(selling_price, 2) or selling_price


def discount_percent_from_prices(original_price: Number, selling_price: Number) -> str:
    """
    Calculate the discount percentage between a list price and a selling price.

    Args:
        original_price: List price before any discount
        selling_price: Price charged to the customer

    Returns:
        Discount percentage as a decimal string with full precision, so
        repeated edits do not drift. "0" when the original price is not
        positive, either value is invalid, or the selling price is at or
        above the original price.
    """
    price = to_decimal(original_price)
    selling = to_decimal(selling_price)

    if price is None or selling is None or price <= 0:
        return "0"

    # No discount if selling price >= original price
    if selling >= price:
        return "0"

    selling = max(selling, ZERO)
    try:
        discount = ((price - selling) / price) * HUNDRED
    except DecimalException:
        return "0"
    return _plain(discount)


def format_discount_percentage(value: Number, max_decimals: int = 6) -> str:
    """
    Format a discount percentage with at most max_decimals places.

    Trailing zeros and a dangling decimal point are stripped, so 12.500000
    becomes "12.5" and 10.0 becomes "10".
    """
    number = to_decimal(value)
    if number is None:
        return "0"

    rounded = _quantize(number, max(max_decimals, 0))
    if rounded is None:
        return _plain(number)

    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_money(value: Number, decimal_places: int = 2) -> str:
    """
    Format a money value for an editable field.

    Empty or invalid input gives an empty string so the field stays blank.
    """
    number = to_decimal(value)
    if number is None:
        return ""

    rounded = _quantize(number, max(decimal_places, 0))
    if rounded is None:
        return ""
    return format(rounded, "f")


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_price_display(value: Number) -> str:
    """
    Format a price for read-only display, e.g. "₹1,00,000.00".

    Missing or invalid values display as "₹0".
    """
    number = to_decimal(value)
    if number is None:
        return f"{CURRENCY_SYMBOL}0"

    text = format_money(abs(number))
    if not text:
        return f"{CURRENCY_SYMBOL}0"

    whole, _, fraction = text.partition(".")
    sign = "-" if number < 0 and text.strip("0.") else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(whole)}.{fraction}"


def rounded_discount_percent(original_price: Number, selling_price: Number) -> int:
    """Whole-number discount used for "% OFF" badges, never negative."""
    price = to_decimal(original_price)
    selling = to_decimal(selling_price)
    if not price or not selling or price < 0 or selling >= price:
        return 0

    discount = _quantize(((price - max(selling, ZERO)) / price) * HUNDRED, 0)
    return int(discount) if discount is not None else 0


def savings_amount(original_price: Number, selling_price: Number) -> Decimal:
    """
    Calculate amount saved.

    Args:
        original_price: List price before any discount
        selling_price: Actual selling price

    Returns:
        Amount saved, never negative
    """
    price = to_decimal(original_price)
    selling = to_decimal(selling_price)
    if not price or not selling:
        return Decimal("0.00")

    if selling >= price:
        return Decimal("0.00")

    return price - max(selling, ZERO)


def validate_price(
    value: Number,
    required: bool = False,
    min_value: Optional[Number] = 0,
    max_value: Optional[Number] = None,
    field_name: str = "Price",
) -> Optional[str]:
    """
    Validate a price or percentage input.

    Returns:
        A user-facing error message, or None when the value is acceptable
    """
    is_blank = value is None or (isinstance(value, str) and not value.strip())
    if is_blank:
        return f"{field_name} is required" if required else None

    number = to_decimal(value)
    if number is None:
        return f"{field_name} must be a valid number"

    minimum = to_decimal(min_value)
    if minimum is not None and number < minimum:
        return f"{field_name} must be at least {min_value}"

    maximum = to_decimal(max_value)
    if maximum is not None and number > maximum:
        return f"{field_name} cannot exceed {max_value}"

    return None
