"""
Payment and order status presentation.

Maps raw gateway strings to what the status page and dashboards show.
Unknown values never raise; they fall through to a neutral display.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from ordering_schemas import Invoice, PaymentStatus


@dataclass(frozen=True)
class PaymentStatusDisplay:
    kind: str
    icon: str
    color: str
    title: str
    message: str
    show_refresh: bool


SUCCESS_DISPLAY = PaymentStatusDisplay(
    kind="success",
    icon="check",
    color="green",
    title="Payment Successful!",
    message="Your payment has been processed successfully.",
    show_refresh=False,
)
FAILED_DISPLAY = PaymentStatusDisplay(
    kind="failed",
    icon="x",
    color="red",
    title="Payment Failed",
    message="Your payment could not be processed. Please try again.",
    show_refresh=True,
)
PROCESSING_DISPLAY = PaymentStatusDisplay(
    kind="pending",
    icon="clock",
    color="yellow",
    title="Payment Processing",
    message="We're confirming your payment. Please wait...",
    show_refresh=True,
)
CONFIRMED_DISPLAY = PaymentStatusDisplay(
    kind="confirmed",
    icon="check",
    color="blue",
    title="Order Confirmed",
    message="Your order has been placed successfully.",
    show_refresh=False,
)

_DISPLAYS = {
    PaymentStatus.SUCCESS.value: SUCCESS_DISPLAY,
    PaymentStatus.FAILED.value: FAILED_DISPLAY,
    PaymentStatus.PENDING.value: PROCESSING_DISPLAY,
    PaymentStatus.PROCESSING.value: PROCESSING_DISPLAY,
}

# Statuses the status page keeps polling for.
IN_FLIGHT = {PaymentStatus.PENDING.value, PaymentStatus.PROCESSING.value}

_BADGE_SUCCESS = {"SUCCESS", "paid", "confirmed"}
_BADGE_PENDING = {"PENDING", "pending"}


def describe_payment_status(status: str | None) -> PaymentStatusDisplay:
    """Display for a payment status; anything unrecognised is "confirmed"."""
    return _DISPLAYS.get(status or "", CONFIRMED_DISPLAY)


def badge_for_status(status: str | None) -> str:
    """Badge kind for dashboards: success, pending or failed."""
    if status in _BADGE_SUCCESS:
        return "success"
    if status in _BADGE_PENDING:
        return "pending"
    return "failed"


def dedupe_invoices(invoices: Iterable[Invoice]) -> list[Invoice]:
    """
    One invoice per order, keeping the first seen.

    Rows arrive newest first, so the latest invoice for each order wins.
    Invoices without an order id are kept as they are.
    """
    seen: set[str] = set()
    unique = []
    for invoice in invoices:
        if invoice.order_id:
            if invoice.order_id in seen:
                continue
            seen.add(invoice.order_id)
        unique.append(invoice)
    return unique


def invoices_by_order(invoices: Iterable[Invoice]) -> dict[str, Invoice]:
    return {
        invoice.order_id: invoice
        for invoice in dedupe_invoices(invoices)
        if invoice.order_id
    }
