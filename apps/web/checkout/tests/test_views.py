"""
Integration tests for checkout views.
"""

import json
from decimal import Decimal

from django.conf import settings
from django.urls import reverse

import httpx
import pytest
from ordering_schemas import CustomerInfo

from apps.web.backend.auth import VERIFIER_KEY
from apps.web.backend.tests.factories import AuthUserFactory
from apps.web.checkout.workflow import AuthStep, CheckoutState
from apps.web.restaurant.tests.factories import CartItemFactory, DishFactory, RestaurantFactory

REST_URL = f"{settings.BACKEND_URL}/rest/v1"
AUTH_URL = f"{settings.BACKEND_URL}/auth/v1"
STATE_KEY = "checkout.spice-route"
CART_KEY = "cart.spice-route"


def checkout_url(action: str | None = None) -> str:
    name = f"checkout:{action}" if action else "checkout:checkout"
    return reverse(name, kwargs={"slug": "spice-route"})


def session_payload(email: str) -> dict:
    return {
        "access_token": "access-abc",
        "refresh_token": "refresh-xyz",
        "expires_in": 3600,
        "user": AuthUserFactory(email=email).model_dump(mode="json"),
    }


@pytest.fixture
def restaurant_api(backend_api):
    restaurant = RestaurantFactory(id="rest-1", slug="spice-route", name="Spice Route")
    backend_api.get(f"{REST_URL}/restaurants").mock(
        return_value=httpx.Response(200, json=restaurant.model_dump(mode="json"))
    )
    return backend_api


@pytest.fixture
def with_cart(write_session):
    item = CartItemFactory(
        dish=DishFactory(id="d1", name="Biryani", price=Decimal("320.00")), quantity=2
    )
    write_session({CART_KEY: [item.model_dump(mode="json")]})
    return [item]


@pytest.fixture
def save_state(write_session):
    def _save(state: CheckoutState) -> None:
        write_session({STATE_KEY: state.model_dump(mode="json")})

    return _save


@pytest.fixture
def details_state(sign_in, save_state):
    """Signed-in visitor on the details step."""
    auth_session = sign_in(user=AuthUserFactory(id="user-1", email="guest@example.com"))
    state = CheckoutState(
        step=AuthStep.DETAILS,
        email="guest@example.com",
        customer=CustomerInfo(email="guest@example.com"),
        user=auth_session.user,
    )
    save_state(state)
    return state


class TestOpenCheckout:
    """Tests for GET /<slug>/menu/checkout/."""

    def test_empty_cart_goes_back_to_menu(self, http_client, restaurant_api):
        response = http_client.get(checkout_url())

        assert response.status_code == 302
        assert response.url == reverse("restaurant:menu", kwargs={"slug": "spice-route"})

    def test_signed_out_visitor_sees_email_step(self, http_client, restaurant_api, with_cart):
        response = http_client.get(checkout_url())

        content = response.content.decode()
        assert response.status_code == 200
        assert "Verify your email" in content
        assert "Biryani x 2" in content
        assert "Total: ₹640.00" in content
        assert http_client.session[STATE_KEY]["step"] == "email"

    def test_signed_in_visitor_skips_to_details(
        self, http_client, restaurant_api, with_cart, sign_in
    ):
        sign_in(user=AuthUserFactory(email="regular@example.com"))

        response = http_client.get(checkout_url())

        assert b"Email (Verified)" in response.content
        assert b"regular@example.com" in response.content

    def test_magic_link_landing_signs_in_and_cleans_url(
        self, http_client, restaurant_api, with_cart, write_session, save_state
    ):
        save_state(CheckoutState(step=AuthStep.WAITING, email="guest@example.com"))
        write_session({VERIFIER_KEY: "pkce-verifier"})
        restaurant_api.post(f"{AUTH_URL}/token").mock(
            return_value=httpx.Response(200, json=session_payload("guest@example.com"))
        )

        response = http_client.get(f"{checkout_url()}?email=guest%40example.com&code=abc")

        assert response.status_code == 302
        assert response.url == checkout_url()
        state = http_client.session[STATE_KEY]
        assert state["step"] == "details"
        assert state["customer"]["email"] == "guest@example.com"

    def test_stale_link_keeps_waiting(
        self, http_client, restaurant_api, with_cart, write_session, save_state
    ):
        save_state(CheckoutState(step=AuthStep.WAITING, email="guest@example.com"))
        write_session({VERIFIER_KEY: "pkce-verifier"})
        restaurant_api.post(f"{AUTH_URL}/token").mock(
            return_value=httpx.Response(403, json={"msg": "Email link is invalid or has expired"})
        )

        response = http_client.get(f"{checkout_url()}?email=guest%40example.com&code=old")

        assert response.status_code == 302
        assert response.url == f"{checkout_url()}?email=guest%40example.com"
        assert http_client.session[STATE_KEY]["step"] == "waiting"

    def test_magic_link_landing_replaces_leftover_session(
        self, http_client, restaurant_api, with_cart, write_session, save_state, sign_in
    ):
        sign_in(user=AuthUserFactory(email="b@example.com"))
        save_state(CheckoutState(step=AuthStep.WAITING, email="a@example.com"))
        write_session({VERIFIER_KEY: "pkce-verifier"})
        restaurant_api.post(f"{AUTH_URL}/token").mock(
            return_value=httpx.Response(200, json=session_payload("a@example.com"))
        )

        response = http_client.get(f"{checkout_url()}?email=a%40example.com&code=abc")

        assert response.status_code == 302
        assert response.url == checkout_url()
        state = http_client.session[STATE_KEY]
        assert state["step"] == "details"
        assert state["customer"]["email"] == "a@example.com"
        assert state["user"]["email"] == "a@example.com"

    def test_waiting_ignores_someone_elses_session(
        self, http_client, restaurant_api, with_cart, save_state, sign_in
    ):
        sign_in(user=AuthUserFactory(email="b@example.com"))
        save_state(CheckoutState(step=AuthStep.WAITING, email="a@example.com"))

        response = http_client.get(checkout_url())

        state = http_client.session[STATE_KEY]
        assert response.status_code == 200
        assert b"Check your email" in response.content
        assert state["step"] == "waiting"
        assert state["user"] is None

    def test_reload_with_matching_session_drops_email_param(
        self, http_client, restaurant_api, with_cart, save_state, sign_in
    ):
        sign_in(user=AuthUserFactory(email="a@example.com"))
        save_state(CheckoutState(step=AuthStep.WAITING, email="a@example.com"))

        response = http_client.get(f"{checkout_url()}?email=a%40example.com")

        assert response.status_code == 302
        assert response.url == checkout_url()
        assert http_client.session[STATE_KEY]["step"] == "details"

    def test_session_outage_shows_error(self, http_client, restaurant_api, with_cart, sign_in):
        sign_in(expires_at=1)
        restaurant_api.post(f"{AUTH_URL}/token").mock(return_value=httpx.Response(500, json={}))

        response = http_client.get(checkout_url())

        assert response.status_code == 503
        assert b"Authentication error" in response.content
        assert b"Try Again" in response.content


class TestEmailStep:
    """Tests for sending and resending the magic link."""

    def test_submit_email_sends_link_and_waits(
        self, http_client, restaurant_api, with_cart, save_state
    ):
        save_state(CheckoutState())
        otp = restaurant_api.post(f"{AUTH_URL}/otp").mock(
            return_value=httpx.Response(200, json={})
        )

        response = http_client.post(
            checkout_url("email"), {"email": "guest@example.com"}, HTTP_HX_REQUEST="true"
        )

        content = response.content.decode()
        assert otp.call_count == 1
        assert json.loads(otp.calls.last.request.content)["email"] == "guest@example.com"
        assert "Check your email" in content
        assert "Resend in" in content
        assert 'hx-trigger="every 5s"' in content
        assert http_client.session[STATE_KEY]["magic_link_sent"] is True

    def test_send_failure_shows_inline_error(
        self, http_client, restaurant_api, with_cart, save_state
    ):
        save_state(CheckoutState())
        restaurant_api.post(f"{AUTH_URL}/otp").mock(
            return_value=httpx.Response(429, json={"msg": "Email rate limit exceeded"})
        )

        response = http_client.post(
            checkout_url("email"), {"email": "guest@example.com"}, HTTP_HX_REQUEST="true"
        )

        assert response.status_code == 200
        assert b"Email rate limit exceeded" in response.content
        assert b"Verify your email" in response.content

    def test_resend_during_cooldown_sends_nothing(
        self, http_client, restaurant_api, with_cart, save_state
    ):
        state = CheckoutState(step=AuthStep.WAITING, email="guest@example.com")
        state.cooldown.restart(9_999_999_999)
        save_state(state)
        otp = restaurant_api.post(f"{AUTH_URL}/otp")

        response = http_client.post(checkout_url("resend"))

        assert response.status_code == 302
        assert otp.call_count == 0

    def test_resend_after_cooldown(self, http_client, restaurant_api, with_cart, save_state):
        state = CheckoutState(step=AuthStep.WAITING, email="guest@example.com")
        state.cooldown.restart(1_000)
        save_state(state)
        otp = restaurant_api.post(f"{AUTH_URL}/otp").mock(
            return_value=httpx.Response(200, json={})
        )

        http_client.post(checkout_url("resend"))

        assert otp.call_count == 1
        assert http_client.session[STATE_KEY]["cooldown"]["started_at"] > 1_000

    def test_action_without_open_checkout_redirects(self, http_client, restaurant_api):
        response = http_client.post(checkout_url("email"), {"email": "guest@example.com"})

        assert response.status_code == 302
        assert response.url == checkout_url()


class TestDetailsStep:
    """Tests for placing the order."""

    def test_missing_fields_show_error(
        self, http_client, restaurant_api, with_cart, details_state
    ):
        insert = restaurant_api.post(f"{REST_URL}/orders")

        response = http_client.post(
            checkout_url("details"),
            {"name": "Asha", "phone": "", "table_number": "4"},
            HTTP_HX_REQUEST="true",
        )

        assert response.status_code == 200
        assert b"Please fill in all required fields" in response.content
        assert insert.call_count == 0

    def test_places_order_and_redirects_to_status(
        self, http_client, restaurant_api, with_cart, details_state
    ):
        insert = restaurant_api.post(f"{REST_URL}/orders").mock(
            return_value=httpx.Response(
                201,
                json={
                    "id": "order-1",
                    "customer_name": "Asha",
                    "total_amount": 640,
                    "created_at": "2024-03-01T19:30:00+00:00",
                },
            )
        )

        response = http_client.post(
            checkout_url("details"),
            {"name": "Asha", "phone": "9876543210", "table_number": "4"},
        )

        assert response.status_code == 302
        assert response.url == f"{reverse('orders:payment_status')}?order_id=order-1"
        assert insert.call_count == 1
        body = json.loads(insert.calls.last.request.content)
        assert body["user_id"] == "user-1"
        assert body["customer_email"] == "guest@example.com"
        assert body["total_amount"] == "640.00"
        session = http_client.session
        assert CART_KEY not in session
        assert STATE_KEY not in session

    def test_htmx_order_uses_client_redirect(
        self, http_client, restaurant_api, with_cart, details_state
    ):
        restaurant_api.post(f"{REST_URL}/orders").mock(
            return_value=httpx.Response(
                201,
                json={
                    "id": "order-1",
                    "customer_name": "Asha",
                    "total_amount": 640,
                    "created_at": "2024-03-01T19:30:00+00:00",
                },
            )
        )

        response = http_client.post(
            checkout_url("details"),
            {"name": "Asha", "phone": "9876543210", "table_number": "4"},
            HTTP_HX_REQUEST="true",
        )

        assert response.status_code == 204
        assert response["HX-Redirect"] == f"{reverse('orders:payment_status')}?order_id=order-1"

    def test_rejected_order_keeps_details(
        self, http_client, restaurant_api, with_cart, details_state
    ):
        restaurant_api.post(f"{REST_URL}/orders").mock(return_value=httpx.Response(500))

        response = http_client.post(
            checkout_url("details"),
            {"name": "Asha", "phone": "9876543210", "table_number": "4"},
            HTTP_HX_REQUEST="true",
        )

        assert b"Failed to place order" in response.content
        assert http_client.session[CART_KEY]


class TestNavigation:
    """Tests for back and close."""

    def test_back_from_details(self, http_client, restaurant_api, with_cart, details_state):
        response = http_client.post(checkout_url("back"), HTTP_HX_REQUEST="true")

        assert b"Verify your email" in response.content
        assert http_client.session[STATE_KEY]["customer"]["email"] == ""

    def test_close_keeps_cart(self, http_client, restaurant_api, with_cart, save_state):
        save_state(CheckoutState())

        response = http_client.post(checkout_url("close"))

        assert response.status_code == 302
        assert response.url == reverse("restaurant:menu", kwargs={"slug": "spice-route"})
        assert STATE_KEY not in http_client.session
        assert http_client.session[CART_KEY]