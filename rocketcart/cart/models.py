"""Cart models: immutable line items, versioned snapshots, operation results."""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional, Tuple

from rocketcart.models import Product, _to_decimal


@dataclass(frozen=True)
class CartItem:
    """A product plus the quantity chosen by the shopper (amount >= 1)."""
    id: int
    name: str
    price: Decimal
    image_url: Optional[str] = None
    amount: int = 1

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise TypeError(f"CartItem.id must be int, got {self.id!r}")
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"CartItem.amount must be int, got {self.amount!r}")
        if self.amount < 1:
            raise ValueError(f"CartItem.amount must be >= 1, got {self.amount}")
        # Normalize numeric fields
        object.__setattr__(self, "price", _to_decimal(self.price))

    @classmethod
    def from_product(cls, product: Product, amount: int = 1) -> "CartItem":
        """Build a cart line from catalog metadata."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            amount=amount,
        )

    def with_amount(self, amount: int) -> "CartItem":
        return replace(self, amount=amount)

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape (fixed key order)."""
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "imageUrl": self.image_url,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        """Create from a persisted dict; accepts the storefront spellings too."""
        if not isinstance(data, dict):
            raise TypeError(f"cart item must be an object, got {type(data).__name__}")
        name = data.get("name", data.get("title"))
        if not isinstance(name, str):
            raise KeyError("name")
        return cls(
            id=data["id"],
            name=name,
            price=_to_decimal(data["price"]),
            image_url=data.get("imageUrl", data.get("image")),
            amount=data["amount"],
        )


@dataclass(frozen=True)
class CartSnapshot:
    """
    Committed cart state.

    Items are an ordered tuple unique by id; most recently added goes last.
    `version` grows by one on every commit so observers can detect changes.
    """
    items: Tuple[CartItem, ...] = field(default_factory=tuple)
    version: int = 0

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate product ids in cart: {ids}")

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, product_id: object) -> bool:
        return self.find(product_id) is not None

    def find(self, product_id) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == product_id), None)

    @property
    def cart_size(self) -> int:
        """Number of distinct products (header badge count)."""
        return len(self.items)

    @property
    def total_units(self) -> int:
        return sum(item.amount for item in self.items)

    def appended(self, item: CartItem) -> Tuple[CartItem, ...]:
        return self.items + (item,)

    def replaced(self, product_id: int, amount: int) -> Tuple[CartItem, ...]:
        return tuple(
            item.with_amount(amount) if item.id == product_id else item
            for item in self.items
        )

    def removed(self, product_id: int) -> Tuple[CartItem, ...]:
        return tuple(item for item in self.items if item.id != product_id)

    def to_list(self) -> list:
        return [item.to_dict() for item in self.items]


class Outcome(str, Enum):
    """
    How a cart operation ended.

    - updated: new state committed and persisted
    - unchanged: silent no-op (amount <= 0)
    - not_found: product missing from the catalog or from the cart
    - out_of_stock: requested quantity exceeds observed stock
    - failed: gateway or storage failure
    """
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    NOT_FOUND = "not_found"
    OUT_OF_STOCK = "out_of_stock"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one store operation plus the snapshot visible afterwards."""
    outcome: Outcome
    snapshot: CartSnapshot
    message: Optional[str] = None  # notification text, None when silent

    @property
    def ok(self) -> bool:
        """True for committed changes and deliberate no-ops."""
        return self.outcome in (Outcome.UPDATED, Outcome.UNCHANGED)

    @property
    def changed(self) -> bool:
        return self.outcome is Outcome.UPDATED
