"""
Restaurant services - menu reads and order placement.

Business logic lives here, views only translate requests and responses.
"""

import logging

from ordering_schemas import (
    AuthUser,
    CartItem,
    CustomerInfo,
    Dish,
    Order,
    OrderStatus,
    Restaurant,
    cart_total,
)

from apps.web.backend import DataClient

logger = logging.getLogger(__name__)


async def get_restaurant(data: DataClient, slug: str) -> Restaurant:
    """
    Raises:
        RecordNotFound: If no restaurant has this slug.
        BackendAPIError: If the lookup fails.
    """
    row = await data.select_one(
        "restaurants", columns="id, name, slug", filters={"slug": slug}
    )
    return Restaurant.model_validate(row)


async def list_dishes(data: DataClient, restaurant: Restaurant) -> list[Dish]:
    """Available dishes, grouped by category then name."""
    rows = await data.select(
        "dishes",
        filters={"restaurant_id": restaurant.id, "is_available": True},
        order_by="name",
        descending=False,
    )
    dishes = [Dish.model_validate(row) for row in rows]
    return sorted(dishes, key=lambda dish: (dish.category or "", dish.name))


async def get_dish(data: DataClient, restaurant: Restaurant, dish_id: str) -> Dish:
    """
    Raises:
        RecordNotFound: If the dish is not on this restaurant's menu.
    """
    row = await data.select_one(
        "dishes", filters={"id": dish_id, "restaurant_id": restaurant.id}
    )
    return Dish.model_validate(row)


async def place_order(
    data: DataClient,
    restaurant: Restaurant,
    cart: list[CartItem],
    customer: CustomerInfo,
    user: AuthUser | None,
) -> Order:
    """
    Record a pending order for the cart.

    Payment starts unknown (null) and is filled in by the payment gateway.

    Raises:
        BackendAPIError: If the insert is rejected.
    """
    row = await data.insert(
        "orders",
        {
            "restaurant_id": restaurant.id,
            "user_id": user.id if user else None,
            "customer_name": customer.name.strip(),
            "customer_email": customer.email or (user.email if user else None),
            "customer_phone": customer.phone.strip(),
            "table_number": customer.table_number.strip(),
            "items": [
                {
                    "dish_id": item.dish.id,
                    "dish_name": item.dish.name,
                    "price": item.dish.price,
                    "quantity": item.quantity,
                    "preparation_time": item.dish.preparation_time,
                }
                for item in cart
            ],
            "total_amount": cart_total(cart),
            "status": OrderStatus.PENDING.value,
            "payment_status": None,
        },
    )
    order = Order.model_validate(row)
    logger.info(
        "Order %s placed at %s for %s", order.id, restaurant.slug, order.total_amount
    )
    return order
