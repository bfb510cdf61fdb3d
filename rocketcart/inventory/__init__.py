"""Inventory package: gateway contract, HTTP client, in-memory source."""
from .gateway import HttpInventoryGateway, InventoryGateway
from .memory import InMemoryInventoryGateway

__all__ = [
    "InventoryGateway",
    "HttpInventoryGateway",
    "InMemoryInventoryGateway",
]
