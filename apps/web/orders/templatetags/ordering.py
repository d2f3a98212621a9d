"""Template filters for money, statuses, and invoice links."""

from decimal import Decimal, InvalidOperation

from django import template
from django.conf import settings

from apps.web.backend import invoice_view_url
from apps.web.orders.status import badge_for_status

register = template.Library()

CURRENCY_SYMBOL = "₹"


@register.filter
def money(value) -> str:
    """Format an amount in rupees with two decimals, e.g. 1234.5 -> ₹1,234.50."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return ""
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


@register.filter
def short_id(value) -> str:
    """Last eight characters of an identifier, upper-cased."""
    return str(value or "")[-8:].upper()


@register.filter
def status_badge(status) -> str:
    return badge_for_status(status)


@register.filter
def invoice_url(invoice_id) -> str:
    return invoice_view_url(settings.INVOICE_API_URL, str(invoice_id))


@register.filter
def invoice_print_url(invoice_id) -> str:
    return invoice_view_url(settings.INVOICE_API_URL, str(invoice_id), auto_print=True)
