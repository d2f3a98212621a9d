"""Backend service adapters - identity, rows, and invoices."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from django.conf import settings
from django.http import HttpRequest

import httpx

from apps.web.backend.auth import SessionProvider, Subscription
from apps.web.backend.data import DataClient
from apps.web.backend.exceptions import (
    BackendAPIError,
    BackendAuthError,
    BackendError,
    RecordNotFound,
)
from apps.web.backend.invoices import InvoiceClient, invoice_view_url

__all__ = [
    "Backend",
    "BackendAPIError",
    "BackendAuthError",
    "BackendError",
    "DataClient",
    "InvoiceClient",
    "RecordNotFound",
    "SessionProvider",
    "Subscription",
    "invoice_view_url",
    "open_backend",
]


@dataclass
class Backend:
    """The three backend collaborators, bound to one visitor."""

    auth: SessionProvider
    data: DataClient
    invoices: InvoiceClient


@asynccontextmanager
async def open_backend(request: HttpRequest) -> AsyncIterator[Backend]:
    """
    Build backend adapters for a request, sharing one HTTP client.

    The client is closed when the block exits. Sessions are kept in the
    visitor's Django session.

    Usage:
        async with open_backend(request) as backend:
            session = await backend.auth.get_session()
    """
    async with httpx.AsyncClient(timeout=settings.BACKEND_TIMEOUT) as http_client:
        auth = SessionProvider(
            http_client,
            settings.BACKEND_URL,
            settings.BACKEND_ANON_KEY,
            storage=request.session,
        )
        yield Backend(
            auth=auth,
            data=DataClient(
                http_client,
                settings.BACKEND_URL,
                settings.BACKEND_ANON_KEY,
                token_getter=lambda: auth.access_token,
            ),
            invoices=InvoiceClient(http_client, settings.INVOICE_API_URL),
        )
