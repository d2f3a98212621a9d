"""Invoice endpoint client - lookup, on-demand generation, and view links."""

import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from ordering_schemas import Invoice
from pydantic import ValidationError

from apps.web.backend.exceptions import BackendAPIError

logger = logging.getLogger(__name__)


def invoice_view_url(base_url: str, invoice_id: str, auto_print: bool = False) -> str:
    """
    Link to an invoice's HTML rendering.

    With auto_print the page opens the browser's print dialog as soon as it
    loads; templates open it in a new tab either way.
    """
    params = {"format": "html"}
    if auto_print:
        params["auto_print"] = "true"
    return f"{base_url.rstrip('/')}/{invoice_id}?{urlencode(params)}"


class InvoiceClient:
    """
    Client for the invoice endpoint.

    Both calls answer with an envelope `{"success": bool, "invoice": {...}}`.
    Generation is idempotent by order id on the endpoint's side.
    """

    SERVICE = "invoice"

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._client = http_client
        self._base_url = base_url.rstrip("/")

    def _payload(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendAPIError(
                "Unreadable invoice response",
                service=self.SERVICE,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    def _unwrap(self, payload: Any) -> Invoice | None:
        if not isinstance(payload, dict):
            return None
        if not payload.get("success") or not payload.get("invoice"):
            return None
        try:
            return Invoice.model_validate(payload["invoice"])
        except ValidationError as e:
            raise BackendAPIError(
                f"Malformed invoice payload: {e.error_count()} errors",
                service=self.SERVICE,
            ) from e

    async def get_for_order(self, order_id: str) -> Invoice | None:
        """
        Look up the invoice generated for an order.

        Returns:
            The invoice, or None when none exists yet.

        Raises:
            BackendAPIError: If the endpoint is unreachable or errors.
        """
        try:
            response = await self._client.get(
                self._base_url, params={"order_id": order_id}
            )
        except httpx.RequestError as e:
            raise BackendAPIError(
                f"Invoice lookup request failed: {e}", service=self.SERVICE
            ) from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise BackendAPIError(
                f"Invoice lookup failed: {response.status_code}",
                service=self.SERVICE,
                status_code=response.status_code,
                response_body=response.text,
            )
        return self._unwrap(self._payload(response))

    async def create(self, order_id: str) -> Invoice | None:
        """
        Ask the endpoint to generate (or return the existing) invoice.

        Returns:
            The invoice, or None when the endpoint reports no success.

        Raises:
            BackendAPIError: If the endpoint is unreachable or errors.
        """
        try:
            response = await self._client.post(
                self._base_url, json={"order_id": order_id}
            )
        except httpx.RequestError as e:
            raise BackendAPIError(
                f"Invoice generation request failed: {e}", service=self.SERVICE
            ) from e

        if response.is_error:
            raise BackendAPIError(
                f"Invoice generation failed: {response.status_code}",
                service=self.SERVICE,
                status_code=response.status_code,
                response_body=response.text,
            )
        invoice = self._unwrap(self._payload(response))
        if invoice is not None:
            logger.info("Invoice %s ready for order %s", invoice.invoice_number, order_id)
        return invoice

    def view_url(self, invoice_id: str, auto_print: bool = False) -> str:
        return invoice_view_url(self._base_url, invoice_id, auto_print)
