"""
Dashboard summaries - read-only rollups over a user's orders and invoices.
"""

from dataclasses import dataclass
from decimal import Decimal

from ordering_schemas import Invoice, Order


@dataclass(frozen=True)
class InvoiceSummary:
    count: int
    total_spent: Decimal
    paid_count: int


@dataclass(frozen=True)
class OrderSummary:
    order_count: int
    total_spent: Decimal
    invoice_count: int


def summarize_invoices(invoices: list[Invoice]) -> InvoiceSummary:
    return InvoiceSummary(
        count=len(invoices),
        total_spent=sum((inv.total_amount for inv in invoices), Decimal("0.00")),
        paid_count=sum(1 for inv in invoices if inv.payment_status == "paid"),
    )


def summarize_orders(orders: list[Order], invoices: list[Invoice]) -> OrderSummary:
    return OrderSummary(
        order_count=len(orders),
        total_spent=sum((order.total_amount for order in orders), Decimal("0.00")),
        invoice_count=len(invoices),
    )
