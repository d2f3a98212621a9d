"""
Decorators for restaurant-scoped views.
"""

import logging
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render

from apps.web.backend import Backend, BackendAPIError, RecordNotFound
from apps.web.core.decorators import AsyncView, render_error
from apps.web.restaurant.services import get_restaurant

logger = logging.getLogger(__name__)


def restaurant_required(view_func: AsyncView) -> AsyncView:
    """
    Decorator that resolves the `slug` URL kwarg to a restaurant.

    Must sit below @with_backend. Unknown slugs render a 404 page. The view
    receives the restaurant right after the backend, in place of `slug`.

    Usage:
        @with_backend
        @restaurant_required
        async def menu(request, backend, restaurant):
            ...
    """

    @wraps(view_func)
    async def wrapper(
        request: HttpRequest, backend: Backend, *args: Any, slug: str, **kwargs: Any
    ) -> HttpResponse:
        try:
            restaurant = await get_restaurant(backend.data, slug)
        except RecordNotFound:
            logger.info("Unknown restaurant slug: %s", slug)
            return render(
                request, "restaurant/not_found.html", {"slug": slug}, status=404
            )
        except BackendAPIError as e:
            logger.error("Restaurant lookup failed for %s: %s", slug, e.message)
            return render_error(request, "Failed to load restaurant")

        return await view_func(request, backend, restaurant, *args, **kwargs)

    return wrapper
