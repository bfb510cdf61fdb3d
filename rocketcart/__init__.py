"""rocketcart - client-side shopping cart reconciled against a remote inventory."""
from rocketcart.cart import CartItem, CartSnapshot, CartStore, OperationResult, Outcome
from rocketcart.inventory import HttpInventoryGateway, InMemoryInventoryGateway, InventoryGateway
from rocketcart.models import Product, StockRecord

__version__ = "1.0.0"

__all__ = [
    "CartItem",
    "CartSnapshot",
    "CartStore",
    "OperationResult",
    "Outcome",
    "HttpInventoryGateway",
    "InMemoryInventoryGateway",
    "InventoryGateway",
    "Product",
    "StockRecord",
]
