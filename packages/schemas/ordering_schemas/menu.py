"""Menu schemas - restaurants, dishes, and the visitor's cart."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

CENT = Decimal("0.01")


class Restaurant(BaseModel):
    """A tenant restaurant, addressed publicly by its slug."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    slug: str


class Dish(BaseModel):
    """A dish on a restaurant's menu."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    price: Decimal
    preparation_time: int = Field(default=0, description="Minutes")
    description: str | None = None
    category: str | None = None
    image_url: str | None = None
    is_available: bool = True


class CartItem(BaseModel):
    """A dish and how many of it the customer wants."""

    dish: Dish
    quantity: int = Field(..., ge=1)

    @property
    def line_total(self) -> Decimal:
        """Unit price times quantity, to the cent."""
        return (self.dish.price * self.quantity).quantize(CENT)


def cart_total(items: list[CartItem]) -> Decimal:
    """
    Sum of unit price times quantity over the cart, to two decimal places.

    An empty cart totals 0.00.
    """
    total = sum((item.dish.price * item.quantity for item in items), Decimal("0"))
    return total.quantize(CENT)
