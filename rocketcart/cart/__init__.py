"""Cart package: models, storage slots, and the cart store."""
from .models import CartItem, CartSnapshot, OperationResult, Outcome
from .service import CartStore
from .storage import (
    CartStorage,
    FileCartStorage,
    MemoryCartStorage,
    RedisCartStorage,
    build_storage,
    decode_cart,
    encode_cart,
)

__all__ = [
    "CartItem",
    "CartSnapshot",
    "OperationResult",
    "Outcome",
    "CartStore",
    "CartStorage",
    "FileCartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
    "build_storage",
    "decode_cart",
    "encode_cart",
]
