"""Catalog Models - Pydantic models for inventory payloads."""
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _to_decimal(value) -> Decimal:
    """Convert a JSON number/string to Decimal without float noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"invalid price: {value!r}") from e


class Product(BaseModel):
    """Product as returned by GET products/{id}.

    The storefront API names the fields `title` and `image`; both spellings
    are accepted.
    """
    id: int
    name: str = Field(validation_alias=AliasChoices("name", "title"))
    price: Decimal
    image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("image_url", "imageUrl", "image")
    )
    amount: int = 0  # cart-local quantity, never set by the catalog

    class Config:
        extra = "ignore"  # Ignore unknown fields from the API

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)


class StockRecord(BaseModel):
    """Warehouse quantity for a product id (GET stock/{id})."""
    id: int
    amount: int

    class Config:
        extra = "ignore"
