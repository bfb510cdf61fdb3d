"""
Cart Store - owns the cart state and its three mutations.

Each operation:
1. reads the committed snapshot and queries the inventory gateway
2. computes the new item sequence on a copy
3. saves it through the storage slot, then swaps it into the visible state

Failures never escape an operation: the visible state is left as it was,
one message goes to the notification sink, and the returned
OperationResult tells the caller what happened.

A store built with the plain constructor loads the persisted cart before
its first operation runs, so a commit never overwrites a slot it has not
read.

Concurrency: operations are not serialized against each other. Each one
builds its result from the snapshot it read, so two overlapping adds of
the same product both commit amount=1 (last writer wins on the whole
sequence). Pass serialize_per_product=True to queue mutations per product
id and rebase every commit onto the latest snapshot instead.
"""
import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from rocketcart.errors import (
    ERROR_ADD_FAILED,
    ERROR_OUT_OF_STOCK,
    ERROR_REMOVE_FAILED,
    ERROR_UPDATE_FAILED,
    CartError,
    GatewayFailure,
    OutOfStock,
    ProductNotFound,
    ProductNotInCart,
    StorageFailure,
)
from rocketcart.inventory import InventoryGateway
from rocketcart.logging import get_logger, sanitize_id_for_logging
from rocketcart.models import StockRecord
from rocketcart.notifications import (
    LoggingNotifier,
    Notifier,
    default_language,
    detect_language,
    get_text,
)

from .models import CartItem, CartSnapshot, OperationResult, Outcome
from .storage import CartStorage

logger = get_logger(__name__)

Mutation = Callable[[CartSnapshot], Tuple[CartItem, ...]]


def _upsert(item: CartItem) -> Mutation:
    """Mutation that sets `item` in place, or appends it when absent."""
    def apply(snapshot: CartSnapshot) -> Tuple[CartItem, ...]:
        if item.id in snapshot:
            return snapshot.replaced(item.id, item.amount)
        return snapshot.appended(item)
    return apply


@dataclass
class _ProductQueue:
    """Per-product lock plus the number of operations holding or awaiting it."""
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class CartStore:
    """
    Client-side cart state manager.

    Usage:
        store = await CartStore.open(gateway, storage, notify=toast)
        await store.add_product(1)
        await store.update_product_amount(1, 3)
        await store.remove_product(1)
        store.cart  # tuple of CartItem, read-only
    """

    def __init__(
        self,
        gateway: InventoryGateway,
        storage: CartStorage,
        notify: Optional[Notifier] = None,
        language: Optional[str] = None,
        serialize_per_product: bool = False,
    ):
        self.gateway = gateway
        self.storage = storage
        self.notify = notify or LoggingNotifier()
        self.language = detect_language(language) if language else default_language()
        self.serialize_per_product = serialize_per_product

        self._snapshot = CartSnapshot()
        self._hydrated = False
        self._commit_lock = asyncio.Lock()
        self._product_locks: Dict[int, _ProductQueue] = {}
        self._pending = 0

    @classmethod
    async def open(
        cls,
        gateway: InventoryGateway,
        storage: CartStorage,
        **kwargs,
    ) -> "CartStore":
        """Create a store and hydrate it from storage."""
        store = cls(gateway, storage, **kwargs)
        await store.hydrate()
        return store

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def cart(self) -> Tuple[CartItem, ...]:
        """Committed items in insertion order."""
        return self._snapshot.items

    @property
    def cart_size(self) -> int:
        """Distinct products in the cart."""
        return self._snapshot.cart_size

    @property
    def version(self) -> int:
        return self._snapshot.version

    @property
    def pending(self) -> int:
        """Operations currently in flight."""
        return self._pending

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def hydrate(self) -> CartSnapshot:
        """
        Replace the visible state with the persisted cart.

        Corrupt data loads as an empty cart (the storage logs it). If the
        slot cannot be reached the current state is kept.
        """
        try:
            return await self._load()
        except StorageFailure as e:
            logger.error(f"Cart hydration failed, keeping current state: {e}")
            return self._snapshot

    async def _load(self, only_if_needed: bool = False) -> CartSnapshot:
        """
        Load and publish the persisted cart under the commit lock.

        Holding the lock keeps a commit from landing between the read and
        the swap. Raises StorageFailure when the slot cannot be read.
        """
        async with self._commit_lock:
            if only_if_needed and self._hydrated:
                return self._snapshot
            items = await self.storage.load()
            self._snapshot = CartSnapshot(
                items=tuple(items), version=self._snapshot.version + 1
            )
            self._hydrated = True
            snapshot = self._snapshot

        logger.info(f"Cart hydrated with {len(snapshot)} item(s)")
        return snapshot

    async def _ensure_hydrated(self) -> None:
        # First operation on a store that never loaded its slot
        if not self._hydrated:
            await self._load(only_if_needed=True)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_product(self, product_id: int) -> OperationResult:
        """Add one unit of a product, appending it when not yet in the cart."""
        async with self._mutating(product_id):
            try:
                return await self._add(product_id)
            except ProductNotFound:
                logger.warning(f"Add rejected: product {sanitize_id_for_logging(product_id)} not found")
                return self._reject(Outcome.NOT_FOUND, ERROR_ADD_FAILED)
            except OutOfStock as e:
                logger.warning(f"Add rejected for product {sanitize_id_for_logging(product_id)}: {e}")
                return self._reject(Outcome.OUT_OF_STOCK, ERROR_OUT_OF_STOCK)
            except CartError as e:
                logger.warning(f"Add failed for product {sanitize_id_for_logging(product_id)}: {e}")
                return self._reject(Outcome.FAILED, ERROR_ADD_FAILED)
            except Exception:
                logger.exception(f"Unexpected error adding product {sanitize_id_for_logging(product_id)}")
                return self._reject(Outcome.FAILED, ERROR_ADD_FAILED)

    async def remove_product(self, product_id: int) -> OperationResult:
        """Remove a product line. Never checks inventory."""
        async with self._mutating(product_id):
            try:
                await self._ensure_hydrated()
                base = self._snapshot
                if product_id not in base:
                    raise ProductNotInCart(product_id=product_id)
                return await self._commit(base, lambda snapshot: snapshot.removed(product_id))
            except ProductNotInCart:
                logger.warning(f"Remove rejected: product {sanitize_id_for_logging(product_id)} not in cart")
                return self._reject(Outcome.NOT_FOUND, ERROR_REMOVE_FAILED)
            except CartError as e:
                logger.warning(f"Remove failed for product {sanitize_id_for_logging(product_id)}: {e}")
                return self._reject(Outcome.FAILED, ERROR_REMOVE_FAILED)
            except Exception:
                logger.exception(f"Unexpected error removing product {sanitize_id_for_logging(product_id)}")
                return self._reject(Outcome.FAILED, ERROR_REMOVE_FAILED)

    async def update_product_amount(self, product_id: int, amount: int) -> OperationResult:
        """
        Set the quantity of a product already in the cart.

        amount <= 0 is a silent no-op (steppers must not go below one;
        use remove_product to delete a line).
        """
        async with self._mutating(product_id):
            try:
                return await self._update(product_id, amount)
            except ProductNotInCart:
                logger.warning(f"Update rejected: product {sanitize_id_for_logging(product_id)} not in cart")
                return self._reject(Outcome.NOT_FOUND, ERROR_UPDATE_FAILED)
            except OutOfStock as e:
                logger.warning(f"Update rejected for product {sanitize_id_for_logging(product_id)}: {e}")
                return self._reject(Outcome.OUT_OF_STOCK, ERROR_OUT_OF_STOCK)
            except CartError as e:
                logger.warning(f"Update failed for product {sanitize_id_for_logging(product_id)}: {e}")
                return self._reject(Outcome.FAILED, ERROR_UPDATE_FAILED)
            except Exception:
                logger.exception(f"Unexpected error updating product {sanitize_id_for_logging(product_id)}")
                return self._reject(Outcome.FAILED, ERROR_UPDATE_FAILED)

    async def check_stock(self) -> Optional[Dict[int, int]]:
        """
        Compare the cart against the full stock listing.

        Returns:
            {product_id: available} for every line whose amount exceeds the
            current stock (products missing from the listing count as 0),
            or None when the cart or the listing could not be read. Never
            mutates.
        """
        try:
            await self._ensure_hydrated()
            records = await self.gateway.fetch_all_stock()
        except (GatewayFailure, StorageFailure) as e:
            logger.warning(f"Stock check failed: {e}")
            return None

        available = {record.id: record.amount for record in records}
        return {
            item.id: available.get(item.id, 0)
            for item in self._snapshot
            if item.amount > available.get(item.id, 0)
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _add(self, product_id: int) -> OperationResult:
        await self._ensure_hydrated()
        product = await self.gateway.fetch_product(product_id)
        if product is None:
            raise ProductNotFound(product_id=product_id)

        base = self._snapshot
        existing = base.find(product_id)
        desired = existing.amount + 1 if existing else 1

        stock = await self._require_stock(product_id)
        if stock.amount < desired:
            raise OutOfStock(product_id, requested=desired, available=stock.amount)

        if existing is None:
            # Fresh details for the new line
            details = await self.gateway.fetch_product(product_id)
            if details is None:
                raise ProductNotFound(product_id=product_id)
            item = CartItem.from_product(details, amount=1)
        else:
            item = existing.with_amount(desired)

        return await self._commit(base, _upsert(item))

    async def _update(self, product_id: int, amount: int) -> OperationResult:
        await self._ensure_hydrated()
        base = self._snapshot
        existing = base.find(product_id)
        if existing is None:
            raise ProductNotInCart(product_id=product_id)

        if isinstance(amount, bool) or not isinstance(amount, int):
            raise CartError(f"amount must be an integer, got {amount!r}", product_id=product_id)

        if amount <= 0:
            return OperationResult(Outcome.UNCHANGED, self._snapshot)

        stock = await self._require_stock(product_id)
        if stock.amount < amount:
            raise OutOfStock(product_id, requested=amount, available=stock.amount)

        return await self._commit(base, lambda snapshot: snapshot.replaced(product_id, amount))

    async def _require_stock(self, product_id: int) -> StockRecord:
        stock = await self.gateway.fetch_stock(product_id)
        if stock is None:
            raise GatewayFailure(f"No stock record for product {product_id}", product_id=product_id)
        return stock

    async def _commit(self, base: CartSnapshot, mutation: Mutation) -> OperationResult:
        """
        Save and publish the mutated sequence.

        Commits run one at a time so the visible snapshot always matches the
        last successful save. The new snapshot is only published after
        `save` returns; a StorageFailure leaves the visible state untouched.
        """
        async with self._commit_lock:
            source = self._snapshot if self.serialize_per_product else base
            candidate = CartSnapshot(
                items=mutation(source), version=self._snapshot.version + 1
            )
            await self.storage.save(candidate.items)
            self._snapshot = candidate

        logger.info(
            f"Cart committed: version={candidate.version}, items={len(candidate)}, "
            f"units={candidate.total_units}"
        )
        return OperationResult(Outcome.UPDATED, candidate)

    def _reject(self, outcome: Outcome, message_key: str) -> OperationResult:
        message = get_text(message_key, self.language)
        try:
            self.notify(message)
        except Exception:
            logger.exception("Notification sink raised")
        return OperationResult(outcome, self._snapshot, message)

    @asynccontextmanager
    async def _mutating(self, product_id: int):
        """Track in-flight operations; queue per product when serialized."""
        self._pending += 1
        try:
            if self.serialize_per_product:
                queue = self._product_locks.get(product_id)
                if queue is None:
                    queue = self._product_locks[product_id] = _ProductQueue()
                queue.users += 1
                try:
                    async with queue.lock:
                        yield
                finally:
                    queue.users -= 1
                    # Nobody holds or waits on it any more
                    if queue.users == 0:
                        del self._product_locks[product_id]
            else:
                yield
        finally:
            self._pending -= 1
