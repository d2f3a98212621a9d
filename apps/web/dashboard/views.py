"""
Dashboard views - a signed-in customer's orders and invoices.
"""

import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from ordering_schemas import AuthSession, Restaurant

from apps.web.backend import Backend, BackendAPIError
from apps.web.core.decorators import render_error, session_required, with_backend
from apps.web.dashboard.services import summarize_invoices, summarize_orders
from apps.web.orders.services import list_invoices, list_orders
from apps.web.orders.status import dedupe_invoices, invoices_by_order
from apps.web.restaurant.decorators import restaurant_required

logger = logging.getLogger(__name__)


def _menu_url(slug: str) -> str:
    return reverse("restaurant:menu", kwargs={"slug": slug})


@require_GET
@with_backend
@session_required(redirect_to="/")
async def home(request: HttpRequest, backend: Backend, session: AuthSession) -> HttpResponse:
    """
    GET /dashboard/

    Every invoice the customer holds, across restaurants.
    """
    try:
        invoices = await list_invoices(backend.data, session.user.id)
    except BackendAPIError as e:
        logger.error("Error fetching invoices for %s: %s", session.user.id, e.message)
        return render_error(request, f"Failed to load invoices: {e.message}")

    invoices = dedupe_invoices(invoices)
    return render(
        request,
        "dashboard/home.html",
        {
            "user": session.user,
            "invoices": invoices,
            "summary": summarize_invoices(invoices),
        },
    )


@require_POST
@with_backend
async def sign_out(request: HttpRequest, backend: Backend) -> HttpResponse:
    """
    POST /dashboard/sign-out/

    Sign out and return to the public home page.
    """
    await backend.auth.sign_out()
    return redirect("/")


@require_GET
@with_backend
@session_required(redirect_to=_menu_url)
@restaurant_required
async def restaurant_dashboard(
    request: HttpRequest,
    backend: Backend,
    restaurant: Restaurant,
    session: AuthSession,
) -> HttpResponse:
    """
    GET /<slug>/user/

    The customer's orders at one restaurant, each with its invoice if any.
    Order and invoice lists degrade to empty when they fail to load.
    """
    user_id = session.user.id
    try:
        orders = await list_orders(backend.data, user_id, restaurant.id)
    except BackendAPIError as e:
        logger.warning("Error fetching orders for %s: %s", user_id, e.message)
        orders = []

    try:
        invoices = dedupe_invoices(
            await list_invoices(backend.data, user_id, restaurant.id)
        )
    except BackendAPIError as e:
        logger.warning("Error fetching invoices for %s: %s", user_id, e.message)
        invoices = []

    by_order = invoices_by_order(invoices)
    return render(
        request,
        "dashboard/restaurant.html",
        {
            "restaurant": restaurant,
            "user": session.user,
            "rows": [(order, by_order.get(order.id)) for order in orders],
            "summary": summarize_orders(orders, invoices),
        },
    )


@require_POST
@with_backend
async def restaurant_sign_out(request: HttpRequest, backend: Backend, slug: str) -> HttpResponse:
    """
    POST /<slug>/user/sign-out/

    Sign out and return to the restaurant's menu.
    """
    await backend.auth.sign_out()
    return redirect(_menu_url(slug))
