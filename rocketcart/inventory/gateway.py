"""
Inventory Gateway - read-only client for product and stock data.

Wire contract:
    GET products/{id}  -> Product JSON
    GET stock/{id}     -> StockRecord JSON
    GET stock          -> list of StockRecord

A missing resource (HTTP 404) is returned as None. Everything else that
goes wrong (transport error, other 4xx/5xx, bad JSON, schema mismatch)
raises GatewayFailure. The gateway never retries.
"""
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from rocketcart import config
from rocketcart.errors import GatewayFailure
from rocketcart.logging import get_logger, sanitize_id_for_logging
from rocketcart.models import Product, StockRecord

logger = get_logger(__name__)

# Constants
NO_RESPONSE_BODY = "No response body"


class InventoryGateway:
    """Base class for inventory sources used by the cart store."""

    async def fetch_product(self, product_id: int) -> Optional[Product]:
        raise NotImplementedError

    async def fetch_stock(self, product_id: int) -> Optional[StockRecord]:
        raise NotImplementedError

    async def fetch_all_stock(self) -> List[StockRecord]:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release connections. No-op for sources without any."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


class HttpInventoryGateway(InventoryGateway):
    """
    httpx-backed gateway for the storefront inventory API.

    Usage:
        async with HttpInventoryGateway("http://localhost:3333") as gateway:
            product = await gateway.fetch_product(1)
            stock = await gateway.fetch_stock(1)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or config.inventory_api_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else config.inventory_timeout()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client (lazy initialization)."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str) -> Optional[Any]:
        """GET a resource. Returns parsed JSON, or None on 404."""
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as e:
            logger.warning(f"Inventory request {path} failed: {e}")
            raise GatewayFailure(f"Inventory unreachable: {e}") from e

        if response.status_code == 404:
            return None

        if response.status_code >= 400:
            error_text = response.text[:200] if response.text else NO_RESPONSE_BODY
            logger.warning(f"Inventory {path} returned {response.status_code}: {error_text}")
            raise GatewayFailure(f"Inventory returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"Inventory {path} returned invalid JSON: {e}")
            raise GatewayFailure(f"Malformed inventory payload: {e}") from e

        # json-server style empty object for unknown ids
        if data is None or data == {}:
            return None
        return data

    async def fetch_product(self, product_id: int) -> Optional[Product]:
        """Fetch catalog metadata for one product."""
        data = await self._get(f"/products/{product_id}")
        if data is None:
            logger.info(f"Product {sanitize_id_for_logging(product_id)} not found")
            return None
        try:
            return Product.model_validate(data)
        except ValidationError as e:
            raise GatewayFailure(f"Malformed product payload: {e}") from e

    async def fetch_stock(self, product_id: int) -> Optional[StockRecord]:
        """Fetch the warehouse quantity for one product."""
        data = await self._get(f"/stock/{product_id}")
        if data is None:
            return None
        try:
            return StockRecord.model_validate(data)
        except ValidationError as e:
            raise GatewayFailure(f"Malformed stock payload: {e}") from e

    async def fetch_all_stock(self) -> List[StockRecord]:
        """Fetch stock levels for the whole catalog."""
        data = await self._get("/stock")
        if data is None:
            return []
        if not isinstance(data, list):
            raise GatewayFailure(f"Stock listing must be a list, got {type(data).__name__}")
        try:
            return [StockRecord.model_validate(entry) for entry in data]
        except ValidationError as e:
            raise GatewayFailure(f"Malformed stock payload: {e}") from e
