"""Table API client — async access to the product table endpoints.

Returns raw HTML fragments. Success and failure are told apart by status
class alone; an error body is only read for its display text.
"""

import logging

import httpx

from product_grid.client.fragments import extract_text
from product_grid.domain.entities import EditableField, QueryParams
from product_grid.domain.exceptions import TableRequestError

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/api/v1/products"


class TableApiClient:
    """Infrastructure adapter for the product table HTTP endpoints.

    Uses an injected ``httpx.AsyncClient`` when given one (tests pass a
    client over ``MockTransport`` or ``ASGITransport``); otherwise creates a
    pooled client on first use and closes it in ``aclose``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8030",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create (and keep) a new one."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "TableApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def fetch_table(self, params: QueryParams) -> str:
        """GET the table fragment for a view."""
        return await self._send("GET", PRODUCTS_PATH, params)

    async def update_field(
        self, row_id: int, field: EditableField, raw_value: str, params: QueryParams
    ) -> str:
        """PATCH one field; the view parameters scope the returned totals."""
        return await self._send(
            "PATCH",
            f"{PRODUCTS_PATH}/{row_id}/{field.value}",
            params,
            json={"value": raw_value},
        )

    async def delete_row(self, row_id: int, params: QueryParams) -> str:
        """DELETE a product and receive the refreshed table for the same view."""
        return await self._send("DELETE", f"{PRODUCTS_PATH}/{row_id}", params)

    async def _send(
        self,
        method: str,
        path: str,
        params: QueryParams,
        json: dict | None = None,
    ) -> str:
        url = f"{self._base_url}{path}"
        client = self._get_client()
        try:
            response = await client.request(method, url, params=params.to_query(), json=json)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TableRequestError(0, f"Network error: {type(exc).__name__}") from exc

        if response.status_code >= 400 or response.status_code < 200:
            self._raise_request_error(response)
        return response.text

    @staticmethod
    def _raise_request_error(response: httpx.Response) -> None:
        """Raise a TableRequestError carrying the body's text for display."""
        message = extract_text(response.text) or response.reason_phrase
        logger.info(
            "%s %s -> %d %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
            message,
        )
        raise TableRequestError(response.status_code, message)
