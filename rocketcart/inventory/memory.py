"""In-memory inventory for tests, demos and offline sessions."""
import asyncio
from typing import Dict, Iterable, List, Optional

from rocketcart.models import Product, StockRecord

from .gateway import InventoryGateway


class InMemoryInventoryGateway(InventoryGateway):
    """
    Serves products and stock levels from dicts.

    Every call sleeps for `latency` seconds (0 still yields to the event
    loop), so concurrent store operations interleave like real network I/O.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        stock: Optional[Dict[int, int]] = None,
        latency: float = 0.0,
    ):
        self.products: Dict[int, Product] = {p.id: p for p in products}
        self.stock: Dict[int, int] = dict(stock or {})
        self.latency = latency
        self.calls: List[tuple] = []

    def set_stock(self, product_id: int, amount: int) -> None:
        self.stock[product_id] = amount

    async def fetch_product(self, product_id: int) -> Optional[Product]:
        self.calls.append(("product", product_id))
        await asyncio.sleep(self.latency)
        return self.products.get(product_id)

    async def fetch_stock(self, product_id: int) -> Optional[StockRecord]:
        self.calls.append(("stock", product_id))
        await asyncio.sleep(self.latency)
        if product_id not in self.stock:
            return None
        return StockRecord(id=product_id, amount=self.stock[product_id])

    async def fetch_all_stock(self) -> List[StockRecord]:
        self.calls.append(("stock", None))
        await asyncio.sleep(self.latency)
        return [StockRecord(id=pid, amount=amount) for pid, amount in self.stock.items()]
