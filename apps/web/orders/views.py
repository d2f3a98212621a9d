"""
Order status views - the landing page after checkout.

The page polls itself while payment is in flight; HTMX requests get only
the status panel back.
"""

import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from apps.web.backend import Backend, BackendAPIError, RecordNotFound
from apps.web.core.decorators import render_error, with_backend
from apps.web.core.querystring import with_params
from apps.web.orders.services import find_invoice, generate_invoice, get_order
from apps.web.orders.status import IN_FLIGHT, describe_payment_status

logger = logging.getLogger(__name__)


def _not_found(request: HttpRequest, message: str) -> HttpResponse:
    return render(request, "orders/not_found.html", {"message": message}, status=404)


@require_GET
@with_backend
async def payment_status(request: HttpRequest, backend: Backend) -> HttpResponse:
    """
    GET /payment/success/?order_id=<id>

    Order summary, payment state, and invoice actions.
    - Full page on initial load and manual refresh
    - Just the status panel on HTMX polls
    """
    order_id = request.GET.get("order_id", "").strip()
    if not order_id:
        return _not_found(request, "Order ID not found")

    try:
        order = await get_order(backend.data, order_id)
    except RecordNotFound:
        logger.info("Order %s not found", order_id)
        return _not_found(request, "Failed to load order details")
    except BackendAPIError as e:
        logger.error("Error fetching order %s: %s", order_id, e.message)
        return render_error(request, "Failed to load order details")

    invoice = None
    if order.is_paid:
        invoice = await find_invoice(backend.invoices, order.id)

    context = {
        "order": order,
        "invoice": invoice,
        "display": describe_payment_status(order.payment_status),
        "polling": order.payment_status in IN_FLIGHT,
        "poll_seconds": settings.ORDER_STATUS_POLL_SECONDS,
        "refresh_url": with_params(reverse("orders:payment_status"), order_id=order.id),
    }

    if request.headers.get("HX-Request"):
        return render(request, "orders/partials/status.html", context)

    return render(request, "orders/payment_status.html", context)


@require_POST
@with_backend
async def create_invoice(request: HttpRequest, backend: Backend) -> HttpResponse:
    """
    POST /payment/success/invoice/

    Generate the invoice for a paid order. Form field: order_id.
    HTMX requests get the invoice panel, others are sent back to the page.
    """
    order_id = request.POST.get("order_id", "").strip()
    if not order_id:
        return HttpResponseBadRequest("order_id is required")

    error = None
    try:
        invoice = await generate_invoice(backend.invoices, order_id)
    except BackendAPIError as e:
        logger.error("Error generating invoice for %s: %s", order_id, e.message)
        invoice = None
        error = "Failed to generate invoice. Please try again."

    if request.headers.get("HX-Request"):
        return render(
            request,
            "orders/partials/invoice.html",
            {"invoice": invoice, "order_id": order_id, "invoice_error": error},
        )

    return redirect(with_params(reverse("orders:payment_status"), order_id=order_id))
