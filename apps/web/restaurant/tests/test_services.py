"""Tests for restaurant services - menu reads and order placement."""

import json
from decimal import Decimal

import httpx
import pytest
import respx
from ordering_schemas import CustomerInfo

from apps.web.backend import BackendAPIError, DataClient
from apps.web.backend.tests.factories import AuthUserFactory
from apps.web.restaurant.services import list_dishes, place_order
from apps.web.restaurant.tests.factories import (
    CartItemFactory,
    DishFactory,
    RestaurantFactory,
)

BASE_URL = "https://backend.test"
REST_URL = f"{BASE_URL}/rest/v1"


@pytest.fixture
def data() -> DataClient:
    return DataClient(httpx.AsyncClient(), BASE_URL, "anon-key")


@pytest.fixture
def restaurant():
    return RestaurantFactory(id="rest-1", slug="spice-route")


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(
        name=" Asha ", phone="9876543210", table_number="4", email="guest@example.com"
    )


@pytest.mark.asyncio
@respx.mock
async def test_list_dishes_groups_by_category(data, restaurant):
    rows = [
        DishFactory(name="Naan", category="Breads").model_dump(mode="json"),
        DishFactory(name="Biryani", category="Mains").model_dump(mode="json"),
        DishFactory(name="Aloo Paratha", category="Breads").model_dump(mode="json"),
    ]
    respx.get(f"{REST_URL}/dishes").mock(return_value=httpx.Response(200, json=rows))

    dishes = await list_dishes(data, restaurant)

    assert [d.name for d in dishes] == ["Aloo Paratha", "Naan", "Biryani"]


@pytest.mark.asyncio
@respx.mock
async def test_place_order_inserts_pending_order(data, restaurant, customer):
    user = AuthUserFactory(id="user-1")
    cart = [
        CartItemFactory(
            dish=DishFactory(id="d1", name="Biryani", price=Decimal("320.00"), preparation_time=25),
            quantity=2,
        )
    ]
    route = respx.post(f"{REST_URL}/orders").mock(
        return_value=httpx.Response(
            201,
            json={
                "id": "order-1",
                "customer_name": "Asha",
                "items": [{"dish_name": "Biryani", "price": 320, "quantity": 2}],
                "total_amount": 640,
                "status": "pending",
                "payment_status": None,
                "created_at": "2024-03-01T19:30:00+00:00",
            },
        )
    )

    order = await place_order(data, restaurant, cart, customer, user)

    body = json.loads(route.calls.last.request.content)
    assert body["restaurant_id"] == "rest-1"
    assert body["user_id"] == "user-1"
    assert body["customer_name"] == "Asha"
    assert body["customer_email"] == "guest@example.com"
    assert body["table_number"] == "4"
    assert body["total_amount"] == "640.00"
    assert body["status"] == "pending"
    assert body["payment_status"] is None
    assert body["items"] == [
        {
            "dish_id": "d1",
            "dish_name": "Biryani",
            "price": "320.00",
            "quantity": 2,
            "preparation_time": 25,
        }
    ]
    assert order.id == "order-1"
    assert order.total_amount == Decimal("640")


@pytest.mark.asyncio
@respx.mock
async def test_place_order_rejected(data, restaurant, customer):
    respx.post(f"{REST_URL}/orders").mock(return_value=httpx.Response(401, json={}))

    with pytest.raises(BackendAPIError):
        await place_order(data, restaurant, [CartItemFactory()], customer, None)
