"""Factory classes for menu schemas."""

from decimal import Decimal

import factory
from ordering_schemas import CartItem, Dish, Restaurant


class RestaurantFactory(factory.Factory):
    """Factory for Restaurant."""

    class Meta:
        model = Restaurant

    id = factory.Faker("uuid4")
    slug = factory.Sequence(lambda n: f"restaurant-{n}")
    name = factory.Sequence(lambda n: f"Restaurant {n}")


class DishFactory(factory.Factory):
    """Factory for Dish."""

    class Meta:
        model = Dish

    id = factory.Faker("uuid4")
    name = factory.Sequence(lambda n: f"Dish {n}")
    price = Decimal("250.00")
    preparation_time = 15
    description = factory.Faker("sentence")
    category = "Mains"
    is_available = True


class CartItemFactory(factory.Factory):
    """Factory for CartItem."""

    class Meta:
        model = CartItem

    dish = factory.SubFactory(DishFactory)
    quantity = 1
