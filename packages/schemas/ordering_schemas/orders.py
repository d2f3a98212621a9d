"""Order and invoice schemas - rows owned by the backend service."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# =============================================================================
# Enums
# =============================================================================


class PaymentStatus(str, Enum):
    """Payment state reported by the payment gateway."""

    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# Checkout
# =============================================================================


class CustomerInfo(BaseModel):
    """Details the customer types in before the order is placed."""

    name: str = ""
    phone: str = ""
    table_number: str = ""
    email: str = ""

    def missing_required(self) -> list[str]:
        """Names of required fields that are blank after trimming."""
        return [
            field
            for field in ("name", "phone", "table_number")
            if not getattr(self, field).strip()
        ]


# =============================================================================
# Orders
# =============================================================================


class RestaurantRef(BaseModel):
    """Restaurant columns joined onto an order row."""

    model_config = ConfigDict(extra="ignore")

    name: str
    slug: str


class OrderItem(BaseModel):
    """Snapshot of a dish as it was ordered."""

    model_config = ConfigDict(extra="ignore")

    dish_id: str | None = None
    dish_name: str
    price: Decimal
    quantity: int = 1
    preparation_time: int = 0

    @property
    def line_total(self) -> Decimal:
        return (self.price * self.quantity).quantize(Decimal("0.01"))


class Order(BaseModel):
    """
    An order row.

    payment_status is kept as the raw string so unknown gateway values
    survive display; compare against PaymentStatus members.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    table_number: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    total_amount: Decimal
    payment_status: str | None = None
    status: str = OrderStatus.PENDING.value
    created_at: datetime
    restaurant_id: str | None = None
    user_id: str | None = None
    restaurant: RestaurantRef | None = Field(
        default=None,
        validation_alias=AliasChoices("restaurant", "restaurants"),
    )

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.SUCCESS.value

    @property
    def estimated_minutes(self) -> int:
        """Longest preparation time across the ordered dishes."""
        return max((item.preparation_time for item in self.items), default=0)

    @property
    def display_status(self) -> str:
        """Payment status when known, otherwise the lifecycle status."""
        return self.payment_status or self.status


# =============================================================================
# Invoices
# =============================================================================


class Invoice(BaseModel):
    """An invoice generated for exactly one order."""

    model_config = ConfigDict(extra="ignore")

    id: str
    order_id: str = ""
    invoice_number: str
    customer_name: str = ""
    customer_email: str | None = None
    customer_phone: str | None = None
    restaurant_name: str = ""
    items: list[dict[str, Any]] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    total_amount: Decimal
    payment_status: str = ""
    created_at: datetime | None = None
