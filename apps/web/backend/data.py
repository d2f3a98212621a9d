"""
Data client - row queries against the backend's REST interface.

Tables are addressed by name under `/rest/v1`; filters are equality
predicates. Requests carry the visitor's access token when signed in so row
level security scopes results to them.
"""

import json
import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import httpx

from apps.web.backend.exceptions import BackendAPIError, RecordNotFound

logger = logging.getLogger(__name__)

Row = dict[str, Any]


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DataClient:
    """
    Query interface over the backend's tables.

    Usage:
        rows = await data.select("orders", filters={"user_id": uid})
        order = await data.select_one("orders", filters={"id": order_id})
    """

    SERVICE = "data"
    SINGLE_OBJECT = "application/vnd.pgrst.object+json"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        token_getter: Callable[[], str | None] | None = None,
    ) -> None:
        self._client = http_client
        self._base_url = f"{base_url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._token_getter = token_getter

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        token = self._token_getter() if self._token_getter else None
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: Mapping[str, str] | None = None,
        content: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(
                method,
                f"{self._base_url}/{table}",
                params=params,
                content=content,
                headers=self._headers(headers),
            )
        except httpx.RequestError as e:
            raise BackendAPIError(
                f"Request to {table} failed: {e}", service=self.SERVICE
            ) from e

    def _raise_for_status(self, response: httpx.Response, table: str) -> None:
        if response.is_error:
            raise BackendAPIError(
                f"Query on {table} failed: {response.status_code}",
                service=self.SERVICE,
                status_code=response.status_code,
                response_body=response.text,
            )

    def _json(self, response: httpx.Response, table: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendAPIError(
                f"Unreadable response from {table}",
                service=self.SERVICE,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    @staticmethod
    def _params(columns: str, filters: Mapping[str, Any] | None) -> dict[str, str]:
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{_filter_value(value)}"
        return params

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = "created_at",
        descending: bool = True,
    ) -> list[Row]:
        """
        Select rows matching every equality filter.

        Args:
            table: Table name.
            columns: Column list, may include embedded joins.
            filters: column -> value equality predicates.
            order_by: Sort column (None for backend order).
            descending: Sort direction.

        Returns:
            Zero or more rows.

        Raises:
            BackendAPIError: If the request fails.
        """
        params = self._params(columns, filters)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"

        response = await self._request("GET", table, params=params)
        self._raise_for_status(response, table)
        rows: list[Row] = self._json(response, table)
        return rows

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any],
    ) -> Row:
        """
        Select exactly one row.

        Raises:
            RecordNotFound: If zero or several rows match.
            BackendAPIError: If the request fails otherwise.
        """
        response = await self._request(
            "GET",
            table,
            params=self._params(columns, filters),
            headers={"Accept": self.SINGLE_OBJECT},
        )
        if response.status_code == 406:
            raise RecordNotFound(
                f"No single {table} row matches {dict(filters)}",
                service=self.SERVICE,
                status_code=406,
                response_body=response.text,
            )
        self._raise_for_status(response, table)
        row: Row = self._json(response, table)
        return row

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """
        Insert one row and return it as stored.

        Raises:
            BackendAPIError: If the insert is rejected.
        """
        response = await self._request(
            "POST",
            table,
            content=json.dumps(dict(row), default=_json_default),
            headers={
                "Content-Type": "application/json",
                "Accept": self.SINGLE_OBJECT,
                "Prefer": "return=representation",
            },
        )
        self._raise_for_status(response, table)
        created: Row = self._json(response, table)
        logger.info("Inserted %s row %s", table, created.get("id"))
        return created
