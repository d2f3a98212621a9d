"""
Visitor cart - kept in the Django session, one cart per restaurant.

Only dish snapshots and quantities are stored; prices are re-read from the
backend each time a dish is added.
"""

from collections.abc import MutableMapping
from typing import Any

from ordering_schemas import CartItem, Dish

CART_KEY = "cart.{slug}"


def _key(slug: str) -> str:
    return CART_KEY.format(slug=slug)


def load_cart(session: MutableMapping[str, Any], slug: str) -> list[CartItem]:
    """Cart items for a restaurant, oldest first."""
    return [CartItem.model_validate(raw) for raw in session.get(_key(slug), [])]


def save_cart(session: MutableMapping[str, Any], slug: str, items: list[CartItem]) -> None:
    if items:
        session[_key(slug)] = [item.model_dump(mode="json") for item in items]
    else:
        session.pop(_key(slug), None)


def clear_cart(session: MutableMapping[str, Any], slug: str) -> None:
    session.pop(_key(slug), None)


def add_dish(items: list[CartItem], dish: Dish) -> list[CartItem]:
    """Add one of `dish`, refreshing the stored snapshot."""
    updated = []
    found = False
    for item in items:
        if item.dish.id == dish.id:
            updated.append(CartItem(dish=dish, quantity=item.quantity + 1))
            found = True
        else:
            updated.append(item)
    if not found:
        updated.append(CartItem(dish=dish, quantity=1))
    return updated


def remove_dish(items: list[CartItem], dish_id: str) -> list[CartItem]:
    """Take one of the dish away; the line disappears at zero."""
    updated = []
    for item in items:
        if item.dish.id != dish_id:
            updated.append(item)
        elif item.quantity > 1:
            updated.append(CartItem(dish=item.dish, quantity=item.quantity - 1))
    return updated


def item_count(items: list[CartItem]) -> int:
    return sum(item.quantity for item in items)
