"""
Pytest configuration for Django app tests.

The backend service is never contacted: `backend_api` mocks every HTTP call
with respx, and `sign_in` seeds the visitor's signed-cookie session.
"""

from collections.abc import Callable, Iterator
from typing import Any

from django.conf import settings
from django.test import Client as DjangoTestClient

import pytest
import respx
from ordering_schemas import AuthSession

from apps.web.backend.auth import SESSION_KEY
from apps.web.backend.tests.factories import AuthSessionFactory


@pytest.fixture
def backend_api() -> Iterator[respx.MockRouter]:
    """Mock the backend service and invoice endpoint for one test."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def http_client() -> DjangoTestClient:
    """Django test client for page requests."""
    return DjangoTestClient()


@pytest.fixture
def write_session(http_client: DjangoTestClient) -> Callable[[dict[str, Any]], None]:
    """Merge values into the test client's signed-cookie session."""

    def _write(values: dict[str, Any]) -> None:
        session = http_client.session
        session.update(values)
        session.save()
        http_client.cookies[settings.SESSION_COOKIE_NAME] = session.session_key

    return _write


@pytest.fixture
def sign_in(write_session: Callable[[dict[str, Any]], None]) -> Callable[..., AuthSession]:
    """Store a live session for the test client's visitor."""

    def _sign_in(**kwargs: Any) -> AuthSession:
        auth_session = AuthSessionFactory(**kwargs)
        write_session({SESSION_KEY: auth_session.model_dump(mode="json")})
        return auth_session

    return _sign_in
