"""
Checkout views - thin request adapters around CheckoutWorkflow.

Each request rebuilds the workflow from the state saved in the visitor's
session, subscribes it to auth changes for the length of the request, runs
one action, and saves the state back.

Full page views return complete HTML on initial load.
HTMX requests return just the checkout panel.
"""

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from ordering_schemas import AuthUser, CustomerInfo, Order, Restaurant, cart_total

from apps.web.backend import Backend, BackendAPIError, BackendAuthError
from apps.web.checkout.workflow import AuthStep, CheckoutState, CheckoutWorkflow
from apps.web.core.decorators import render_error, with_backend
from apps.web.core.querystring import with_params, without_params
from apps.web.restaurant.cart import clear_cart, load_cart
from apps.web.restaurant.decorators import restaurant_required
from apps.web.restaurant.services import place_order

logger = logging.getLogger(__name__)

STATE_KEY = "checkout.{slug}"
PLACE_ORDER_FAILED_MESSAGE = "Failed to place order. Please try again."


def _state_key(restaurant: Restaurant) -> str:
    return STATE_KEY.format(slug=restaurant.slug)


def _load_state(request: HttpRequest, restaurant: Restaurant) -> CheckoutState | None:
    raw = request.session.get(_state_key(restaurant))
    return CheckoutState.model_validate(raw) if raw else None


def _save_state(request: HttpRequest, workflow: CheckoutWorkflow) -> None:
    request.session[_state_key(workflow.restaurant)] = workflow.state.model_dump(
        mode="json"
    )


def _checkout_url(restaurant: Restaurant) -> str:
    return reverse("checkout:checkout", kwargs={"slug": restaurant.slug})


def _build_workflow(
    request: HttpRequest,
    backend: Backend,
    restaurant: Restaurant,
    state: CheckoutState | None,
) -> CheckoutWorkflow:
    cart = load_cart(request.session, restaurant.slug)

    async def on_place_order(customer: CustomerInfo, user: AuthUser | None) -> Order:
        return await place_order(backend.data, restaurant, cart, customer, user)

    def on_close() -> None:
        request.session.pop(_state_key(restaurant), None)

    return CheckoutWorkflow(
        cart=cart,
        restaurant=restaurant,
        auth=backend.auth,
        on_close=on_close,
        on_place_order=on_place_order,
        get_cart_total=lambda: cart_total(cart),
        redirect_to=request.build_absolute_uri(_checkout_url(restaurant)),
        state=state,
        cooldown_seconds=settings.MAGIC_LINK_COOLDOWN_SECONDS,
    )


def _render(request: HttpRequest, workflow: CheckoutWorkflow) -> HttpResponse:
    context = {
        "workflow": workflow,
        "state": workflow.state,
        "restaurant": workflow.restaurant,
        "cart": workflow.cart,
        "total": workflow.total,
        "checkout_url": _checkout_url(workflow.restaurant),
    }
    if request.headers.get("HX-Request"):
        return render(request, "checkout/partials/panel.html", context)
    return render(request, "checkout/checkout.html", context)


def _navigate(request: HttpRequest, url: str) -> HttpResponse:
    """Leave checkout; HTMX needs a client-side redirect to swap the page."""
    if request.headers.get("HX-Request"):
        response = HttpResponse(status=204)
        response["HX-Redirect"] = url
        return response
    return redirect(url)


def _after_action(request: HttpRequest, workflow: CheckoutWorkflow) -> HttpResponse:
    """Panel for HTMX, a redirect back to the checkout page otherwise."""
    _save_state(request, workflow)
    if request.headers.get("HX-Request"):
        return _render(request, workflow)
    return redirect(_checkout_url(workflow.restaurant))


@require_GET
@with_backend
@restaurant_required
async def checkout(request: HttpRequest, backend: Backend, restaurant: Restaurant) -> HttpResponse:
    """
    GET /<slug>/menu/checkout/

    Opens checkout, resumes it, or completes a magic-link sign-in when the
    link's `code` is in the query string.
    """
    state = _load_state(request, restaurant)
    workflow = _build_workflow(request, backend, restaurant, state)
    if not workflow.cart and state is None:
        return redirect("restaurant:menu", slug=restaurant.slug)

    location = request.get_full_path()
    try:
        with workflow.subscribed():
            # Exchange the landing's code before any stored session is consulted.
            workflow.state.location = location
            signed_in = await backend.auth.initialize(request.GET)
            if signed_in is None:
                if state is None or "email" in request.GET:
                    await workflow.mount(location, request.GET)
                elif workflow.step is AuthStep.WAITING:
                    await workflow.check_session()
    except BackendAuthError as e:
        logger.error("Session error: %s", e.message)
        return render_error(request, f"Authentication error: {e.message}")

    _save_state(request, workflow)

    target = without_params(workflow.state.location, "code")
    if target != location:
        return redirect(target)

    return _render(request, workflow)


def _resume(
    request: HttpRequest, backend: Backend, restaurant: Restaurant
) -> CheckoutWorkflow | None:
    state = _load_state(request, restaurant)
    if state is None:
        return None
    return _build_workflow(request, backend, restaurant, state)


@require_POST
@with_backend
@restaurant_required
async def submit_email(
    request: HttpRequest, backend: Backend, restaurant: Restaurant
) -> HttpResponse:
    """
    POST /<slug>/menu/checkout/email/

    Form field: email.
    """
    workflow = _resume(request, backend, restaurant)
    if workflow is None:
        return redirect(_checkout_url(restaurant))

    with workflow.subscribed():
        await workflow.submit_email(request.POST.get("email", ""))
    return _after_action(request, workflow)


@require_POST
@with_backend
@restaurant_required
async def resend(request: HttpRequest, backend: Backend, restaurant: Restaurant) -> HttpResponse:
    """POST /<slug>/menu/checkout/resend/"""
    workflow = _resume(request, backend, restaurant)
    if workflow is None:
        return redirect(_checkout_url(restaurant))

    with workflow.subscribed():
        await workflow.resend()
    return _after_action(request, workflow)


@require_POST
@with_backend
@restaurant_required
async def submit_details(
    request: HttpRequest, backend: Backend, restaurant: Restaurant
) -> HttpResponse:
    """
    POST /<slug>/menu/checkout/details/

    Form fields: name, phone, table_number. Places the order and sends the
    customer to the status page.
    """
    workflow = _resume(request, backend, restaurant)
    if workflow is None:
        return redirect(_checkout_url(restaurant))
    if not workflow.cart:
        return redirect("restaurant:menu", slug=restaurant.slug)

    try:
        with workflow.subscribed():
            order = await workflow.submit_details(
                request.POST.get("name", ""),
                request.POST.get("phone", ""),
                request.POST.get("table_number", ""),
            )
    except BackendAPIError as e:
        logger.error("Order placement failed at %s: %s", restaurant.slug, e.message)
        workflow.state.error = PLACE_ORDER_FAILED_MESSAGE
        order = None

    if order is None:
        return _after_action(request, workflow)

    clear_cart(request.session, restaurant.slug)
    workflow.close()
    return _navigate(
        request, with_params(reverse("orders:payment_status"), order_id=order.id)
    )


@require_POST
@with_backend
@restaurant_required
async def back(request: HttpRequest, backend: Backend, restaurant: Restaurant) -> HttpResponse:
    """POST /<slug>/menu/checkout/back/"""
    workflow = _resume(request, backend, restaurant)
    if workflow is None:
        return redirect(_checkout_url(restaurant))

    workflow.back()
    return _after_action(request, workflow)


@require_POST
@with_backend
@restaurant_required
async def close(request: HttpRequest, backend: Backend, restaurant: Restaurant) -> HttpResponse:
    """
    POST /<slug>/menu/checkout/close/

    Dismiss checkout and return to the menu; the cart is kept.
    """
    workflow = _resume(request, backend, restaurant)
    if workflow is not None:
        workflow.close()
    return _navigate(request, reverse("restaurant:menu", kwargs={"slug": restaurant.slug}))
