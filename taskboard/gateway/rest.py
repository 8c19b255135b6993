"""PostgREST gateway for a hosted data store.

Talks to the REST interface a hosted Postgres (e.g. Supabase) exposes at
``{url}/rest/v1/{table}``. Row-level owner filtering is enforced by the
store's access policies, so queries carry no owner predicate here; the
signed-in user's access token identifies the caller.

For the PostgREST query syntax, see: https://postgrest.org/en/stable/references/api/tables_views.html
"""

import logging
from typing import Any

import httpx

from ..auth.session import SessionProvider
from ..utils.errors import AuthError, FetchError
from .base import to_json_row, to_json_value, validate_column, validate_table, writable_fields

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"
DEFAULT_TIMEOUT = 10.0  # seconds


class RestGateway:
    """Data gateway backed by a PostgREST endpoint.

    Usage:
        async with RestGateway(url, anon_key, sessions) as gateway:
            rows = await gateway.select("tasks", order_by="created_at", ascending=False)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        sessions: SessionProvider,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the gateway.

        Args:
            base_url: Data store URL (e.g., https://xyz.supabase.co)
            api_key: Public API key sent as the ``apikey`` header
            sessions: Source of the bearer token for the signed-in user
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/") + REST_PATH
        self._api_key = api_key
        self._sessions = sessions
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self, *, returning: bool = False) -> dict[str, str]:
        token = self._sessions.access_token or self._api_key
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    @staticmethod
    def _filter_params(filters: dict[str, Any] | None) -> dict[str, str]:
        params: dict[str, str] = {}
        for column, value in (filters or {}).items():
            value = to_json_value(value)
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[validate_column(column)] = f"eq.{value}"
        return params

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        returning: bool = False,
    ) -> list[dict[str, Any]]:
        """Send one request and return the decoded rows.

        Raises:
            AuthError: If the store rejects the credentials (401/403).
            FetchError: On transport failures and any other error status.
        """
        validate_table(table)
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                f"/{table}",
                params=params,
                json=json,
                headers=self._headers(returning=returning),
            )
        except httpx.TimeoutException as e:
            error_msg = f"{method} {table} timed out: {e}"
            logger.warning(error_msg)
            raise FetchError(error_msg) from e
        except httpx.HTTPError as e:
            error_msg = f"{method} {table} failed: {e}"
            logger.warning(error_msg)
            raise FetchError(error_msg) from e

        if response.status_code in (401, 403):
            logger.warning(f"{method} {table} rejected with status {response.status_code}")
            raise AuthError(self._error_message(response))

        if response.status_code >= 400:
            error_msg = self._error_message(response)
            logger.warning(f"{method} {table} returned status {response.status_code}: {error_msg}")
            raise FetchError(error_msg)

        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON from data store: {e}") from e
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the store's own error message over the raw body."""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return body.get("message") or body.get("error_description") or str(body)
        return str(body)

    async def select(
        self,
        table: str,
        *,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        ascending: bool = True,
    ) -> list[dict[str, Any]]:
        params = {"select": "*", **self._filter_params(filters)}
        params["order"] = f"{validate_column(order_by)}.{'asc' if ascending else 'desc'}"
        rows = await self._request("GET", table, params=params)
        logger.debug(f"Fetched {len(rows)} rows from {table}")
        return rows

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        payload = to_json_row(writable_fields(table, row))
        rows = await self._request("POST", table, json=payload, returning=True)
        if not rows:
            raise FetchError(f"Data store returned no row for insert into {table}")
        return rows[0]

    async def update(
        self, table: str, row_id: str, changes: dict[str, Any]
    ) -> dict[str, Any] | None:
        payload = to_json_row(writable_fields(table, changes))
        rows = await self._request(
            "PATCH",
            table,
            params=self._filter_params({"id": row_id}),
            json=payload,
            returning=True,
        )
        return rows[0] if rows else None

    async def delete(self, table: str, filters: dict[str, Any]) -> int:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        rows = await self._request(
            "DELETE", table, params=self._filter_params(filters), returning=True
        )
        return len(rows)

    async def __aenter__(self) -> "RestGateway":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - closes the HTTP client."""
        await self.close()
