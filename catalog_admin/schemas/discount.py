"""
Discount Management Schemas
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Any
from decimal import Decimal
from catalog_admin.services.bulk_discount import BulkDiscountMode
from catalog_admin.services.discount_editor import DiscountField


def _raw_input(value: Any) -> Any:
    # Editors send whatever is in the input box; numbers are kept as text
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        raise ValueError("must be a number or a string")
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    raise ValueError("must be a number or a string")


class DiscountPreviewRequest(BaseModel):
    originalPrice: Decimal = Field(..., ge=0)
    discountPrice: Optional[Decimal] = None  # current discounted price, if any
    editedField: DiscountField
    value: Optional[str] = None
    blur: bool = False

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v):
        return _raw_input(v)


class ProductDiscountApply(BaseModel):
    originalPrice: Decimal = Field(..., gt=0)
    discountPrice: Optional[Decimal] = None
    discountPercentage: Optional[str] = None
    sellingPrice: Optional[str] = None  # edit by price instead of percentage

    @field_validator("discountPercentage", "sellingPrice", mode="before")
    @classmethod
    def coerce_raw(cls, v):
        return _raw_input(v)

    @model_validator(mode="after")
    def require_one_field(self):
        if self.discountPercentage is None and self.sellingPrice is None:
            raise ValueError("Either discountPercentage or sellingPrice is required")
        return self


class BulkDiscountRequest(BaseModel):
    productIds: List[str] = Field(default_factory=list)
    mode: BulkDiscountMode = BulkDiscountMode.APPLY_PERCENTAGE
    discountPercentage: Optional[str] = None  # defaults to DEFAULT_BULK_DISCOUNT

    @field_validator("discountPercentage", mode="before")
    @classmethod
    def coerce_discount(cls, v):
        return _raw_input(v)


class DiscountedProductResponse(BaseModel):
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[Decimal] = None
    discountPrice: Optional[Decimal] = None
    discountPercentage: int = 0
    savings: Decimal = Decimal("0.00")
    priceDisplay: str
    discountPriceDisplay: str
