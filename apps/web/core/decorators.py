"""
Decorators for request handling and backend access.
"""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render

from apps.web.backend import Backend, BackendAuthError, open_backend

logger = logging.getLogger(__name__)

AsyncView = Callable[..., Awaitable[HttpResponse]]


def render_error(
    request: HttpRequest,
    message: str,
    status: int = 503,
    title: str = "Error",
) -> HttpResponse:
    """Full-page error with a "Try Again" action that reloads the page."""
    return render(
        request,
        "core/error.html",
        {"title": title, "error": message, "retry_url": request.get_full_path()},
        status=status,
    )


def with_backend(view_func: AsyncView) -> AsyncView:
    """
    Decorator that opens the backend adapters for the request.

    The view receives them as its second positional argument and the HTTP
    client is closed when the view returns, on every exit path.

    Usage:
        @with_backend
        async def order_status(request, backend):
            ...
    """

    @wraps(view_func)
    async def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        async with open_backend(request) as backend:
            return await view_func(request, backend, *args, **kwargs)

    return wrapper


def session_required(
    redirect_to: str | Callable[..., str],
) -> Callable[[AsyncView], AsyncView]:
    """
    Decorator that requires a signed-in visitor.

    Must sit below @with_backend. Without a session the visitor is
    redirected (redirect_to may be a callable receiving the view's URL
    kwargs); a failing session lookup renders the retryable error page.
    The view receives the session after the backend.

    Usage:
        @with_backend
        @session_required(redirect_to="/")
        async def dashboard(request, backend, session):
            ...
    """

    def decorator(view_func: AsyncView) -> AsyncView:
        @wraps(view_func)
        async def wrapper(
            request: HttpRequest, backend: Backend, *args: Any, **kwargs: Any
        ) -> HttpResponse:
            try:
                session = await backend.auth.get_session()
            except BackendAuthError as e:
                logger.error("Session error: %s", e.message)
                return render_error(request, f"Authentication error: {e.message}")

            if session is None:
                target = redirect_to(**kwargs) if callable(redirect_to) else redirect_to
                logger.info("No user session, redirecting to %s", target)
                return redirect(target)

            return await view_func(request, backend, session, *args, **kwargs)

        return wrapper

    return decorator
