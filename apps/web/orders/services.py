"""
Order and invoice reads, plus on-demand invoice generation.

Primary reads raise; the views decide how to surface them. Secondary reads
(an order's invoice, a dashboard's order list) degrade to empty results.
"""

import logging

from ordering_schemas import Invoice, Order

from apps.web.backend import BackendAPIError, DataClient, InvoiceClient

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "*, restaurants!inner(name, slug)"


async def get_order(data: DataClient, order_id: str) -> Order:
    """
    Load one order with its restaurant's name and slug.

    Raises:
        RecordNotFound: If no order has this id.
        BackendAPIError: If the lookup fails.
    """
    row = await data.select_one(
        "orders", columns=ORDER_COLUMNS, filters={"id": order_id}
    )
    return Order.model_validate(row)


async def find_invoice(invoices: InvoiceClient, order_id: str) -> Invoice | None:
    """The order's invoice if one exists; lookup failures count as none."""
    try:
        return await invoices.get_for_order(order_id)
    except BackendAPIError as e:
        logger.warning("Invoice lookup for order %s failed: %s", order_id, e.message)
        return None


async def generate_invoice(invoices: InvoiceClient, order_id: str) -> Invoice | None:
    """
    Request an invoice for a paid order.

    Raises:
        BackendAPIError: If the invoice endpoint fails.
    """
    logger.info("Generating invoice for order %s", order_id)
    return await invoices.create(order_id)


async def list_invoices(
    data: DataClient, user_id: str, restaurant_id: str | None = None
) -> list[Invoice]:
    """
    A user's invoices, newest first, optionally for one restaurant.

    Raises:
        BackendAPIError: If the query fails.
    """
    filters = {"user_id": user_id}
    if restaurant_id:
        filters["restaurant_id"] = restaurant_id
    rows = await data.select("invoices", filters=filters)
    return [Invoice.model_validate(row) for row in rows]


async def list_orders(data: DataClient, user_id: str, restaurant_id: str) -> list[Order]:
    """
    A user's orders at one restaurant, newest first.

    Raises:
        BackendAPIError: If the query fails.
    """
    rows = await data.select(
        "orders", filters={"user_id": user_id, "restaurant_id": restaurant_id}
    )
    return [Order.model_validate(row) for row in rows]
