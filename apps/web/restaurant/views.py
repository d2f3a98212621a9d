"""
Menu views - browse a restaurant's dishes and build a cart.

Full page views return complete HTML on initial load.
HTMX requests return just the cart partial.
"""

import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from ordering_schemas import CartItem, Restaurant, cart_total

from apps.web.backend import Backend, BackendAPIError, RecordNotFound
from apps.web.core.decorators import render_error, with_backend
from apps.web.restaurant.cart import (
    add_dish,
    item_count,
    load_cart,
    remove_dish,
    save_cart,
)
from apps.web.restaurant.decorators import restaurant_required
from apps.web.restaurant.services import get_dish, list_dishes

logger = logging.getLogger(__name__)


def _cart_context(restaurant: Restaurant, items: list[CartItem]) -> dict:
    return {
        "restaurant": restaurant,
        "cart": items,
        "cart_total": cart_total(items),
        "cart_count": item_count(items),
    }


@require_GET
@with_backend
@restaurant_required
async def menu(request: HttpRequest, backend: Backend, restaurant: Restaurant) -> HttpResponse:
    """
    GET /<slug>/menu/

    Menu page with the visitor's cart alongside.
    """
    try:
        dishes = await list_dishes(backend.data, restaurant)
    except BackendAPIError as e:
        logger.error("Menu load failed for %s: %s", restaurant.slug, e.message)
        return render_error(request, "Failed to load menu")

    context = _cart_context(restaurant, load_cart(request.session, restaurant.slug))
    context["dishes"] = dishes
    return render(request, "restaurant/menu.html", context)


@require_POST
@with_backend
@restaurant_required
async def update_cart(
    request: HttpRequest, backend: Backend, restaurant: Restaurant
) -> HttpResponse:
    """
    POST /<slug>/menu/cart/

    Add or remove one of a dish. Form fields: dish_id, action (add|remove).
    """
    dish_id = request.POST.get("dish_id", "").strip()
    action = request.POST.get("action", "add")
    items = load_cart(request.session, restaurant.slug)

    if action == "remove":
        items = remove_dish(items, dish_id)
    else:
        try:
            dish = await get_dish(backend.data, restaurant, dish_id)
        except RecordNotFound:
            return HttpResponse("Dish not found", status=404)
        except BackendAPIError as e:
            logger.error("Dish lookup failed for %s: %s", dish_id, e.message)
            return render_error(request, "Failed to update cart")
        if not dish.is_available:
            return HttpResponse("Dish is not available", status=409)
        items = add_dish(items, dish)

    save_cart(request.session, restaurant.slug, items)

    if request.headers.get("HX-Request"):
        return render(
            request,
            "restaurant/partials/cart.html",
            _cart_context(restaurant, items),
        )
    return redirect("restaurant:menu", slug=restaurant.slug)
