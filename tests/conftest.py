"""Pytest configuration and fixtures"""
import os
from decimal import Decimal

import pytest

# Keep tests independent from a developer .env
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("NOTIFY_LANGUAGE", "en")

from rocketcart.cart import CartItem, CartStore, MemoryCartStorage, encode_cart
from rocketcart.inventory import InMemoryInventoryGateway
from rocketcart.models import Product
from rocketcart.notifications import CollectingNotifier


@pytest.fixture
def sample_products():
    """Catalog used by most store tests"""
    return [
        Product(id=1, title="Tênis de Caminhada Leve Confortável", price=179.9,
                image="https://cdn.example.com/tenis1.jpg"),
        Product(id=2, title="Tênis VR Caminhada Confortável Detalhes Couro Masculino",
                price=139.9, image="https://cdn.example.com/tenis2.jpg"),
        Product(id=3, title="Tênis Adidas Duramo Lite 2.0", price=219.9,
                image="https://cdn.example.com/tenis3.jpg"),
    ]


@pytest.fixture
def inventory(sample_products):
    """In-memory inventory: stock 5 / 3 / 1 for products 1 / 2 / 3"""
    return InMemoryInventoryGateway(sample_products, stock={1: 5, 2: 3, 3: 1})


@pytest.fixture
def storage():
    """Empty in-memory persistence slot"""
    return MemoryCartStorage()


@pytest.fixture
def notifier():
    """Notification sink that records messages"""
    return CollectingNotifier()


@pytest.fixture
def make_item():
    """Factory for cart lines"""
    def factory(product_id: int, amount: int = 1) -> CartItem:
        return CartItem(
            id=product_id,
            name=f"Product {product_id}",
            price=Decimal("100.00"),
            image_url=f"https://cdn.example.com/{product_id}.jpg",
            amount=amount,
        )
    return factory


@pytest.fixture
def open_store(inventory, storage, notifier):
    """Async factory: seed the storage slot, then open a hydrated store"""
    async def factory(items=(), **kwargs) -> CartStore:
        if items:
            storage.raw = encode_cart(items)
        kwargs.setdefault("notify", notifier)
        kwargs.setdefault("language", "en")
        return await CartStore.open(inventory, storage, **kwargs)
    return factory
