"""Ordering Schemas - Pydantic models for data contracts."""

from ordering_schemas.auth import AuthChangeEvent, AuthSession, AuthUser
from ordering_schemas.menu import CartItem, Dish, Restaurant, cart_total
from ordering_schemas.orders import (
    CustomerInfo,
    Invoice,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    RestaurantRef,
)

__all__ = [
    # Auth
    "AuthChangeEvent",
    "AuthSession",
    "AuthUser",
    # Menu
    "CartItem",
    "Dish",
    "Restaurant",
    "cart_total",
    # Orders
    "CustomerInfo",
    "Invoice",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "RestaurantRef",
]
