"""
Checkout workflow - email verification in front of order placement.

    email --link sent--> waiting --SIGNED_IN--> details --submit--> caller
      |                                           ^
      +---------- session matches email ----------+

    back (from waiting or details) returns to email.

The workflow never looks at link tokens. It trusts two signals only: a
SIGNED_IN notification from the session provider, or an existing session
whose email matches the one typed in. Placing the order is delegated to the
caller's on_place_order callback.

State is a pydantic model so views can persist it between requests; the
auth subscription lives only inside `subscribed()`.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any

from ordering_schemas import (
    AuthChangeEvent,
    AuthSession,
    AuthUser,
    CartItem,
    CustomerInfo,
    Restaurant,
)
from pydantic import BaseModel, Field

from apps.web.backend import BackendError, SessionProvider, Subscription
from apps.web.core.querystring import with_params, without_params

logger = logging.getLogger(__name__)

RESEND_COOLDOWN_SECONDS = 60
REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
SEND_FAILED_MESSAGE = "Failed to send magic link"
RESEND_FAILED_MESSAGE = "Failed to resend magic link"

PlaceOrder = Callable[[CustomerInfo, AuthUser | None], Awaitable[Any]]


def _same_email(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


class AuthStep(str, Enum):
    """Where the customer is in the verification flow."""

    EMAIL = "email"
    WAITING = "waiting"
    DETAILS = "details"
    # Declared for completeness; DETAILS already means "verified".
    AUTHENTICATED = "authenticated"


class ResendCooldown(BaseModel):
    """
    Countdown gating magic-link resends.

    Stored as the moment of the last send, so the remaining count is
    non-increasing between requests without a ticking timer.
    """

    seconds: int = RESEND_COOLDOWN_SECONDS
    started_at: float | None = None

    def remaining(self, now: float) -> int:
        if self.started_at is None:
            return 0
        elapsed = max(0, int(now - self.started_at))
        return max(0, self.seconds - elapsed)

    def restart(self, now: float) -> None:
        self.started_at = now


class CheckoutState(BaseModel):
    """Everything the checkout dialog remembers between requests."""

    step: AuthStep = AuthStep.EMAIL
    email: str = ""
    magic_link_sent: bool = False
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    user: AuthUser | None = None
    error: str | None = None
    cooldown: ResendCooldown = Field(default_factory=ResendCooldown)
    location: str = ""


class CheckoutWorkflow:
    """
    Drive a customer from a cart to a placed order, gated on a verified email.

    Usage:
        workflow = CheckoutWorkflow(cart=..., restaurant=..., auth=provider, ...)
        with workflow.subscribed():
            await workflow.mount(request.get_full_path(), request.GET)
            await workflow.submit_email("guest@example.com")
    """

    def __init__(
        self,
        *,
        cart: Sequence[CartItem],
        restaurant: Restaurant,
        auth: SessionProvider,
        on_close: Callable[[], None],
        on_place_order: PlaceOrder,
        get_cart_total: Callable[[], Decimal],
        redirect_to: str,
        state: CheckoutState | None = None,
        clock: Callable[[], float] = time.time,
        cooldown_seconds: int = RESEND_COOLDOWN_SECONDS,
    ) -> None:
        """
        Args:
            cart: Items being checked out; not modified here.
            restaurant: Restaurant the order is for.
            auth: Session provider used for sign-in and notifications.
            on_close: Called when the customer dismisses checkout.
            on_place_order: Caller's order placement, given the customer
                details and the verified user.
            get_cart_total: Total shown in the order summary.
            redirect_to: Absolute URL magic links land on.
            state: Persisted state to resume; a fresh one otherwise.
            clock: Unix seconds, for the resend cooldown.
            cooldown_seconds: Length of the resend cooldown.
        """
        self.cart = tuple(cart)
        self.restaurant = restaurant
        self._auth = auth
        self._on_close = on_close
        self._on_place_order = on_place_order
        self._get_cart_total = get_cart_total
        self._redirect_to = redirect_to
        self._clock = clock
        self.state = state or CheckoutState(
            cooldown=ResendCooldown(seconds=cooldown_seconds)
        )

    # =========================================================================
    # Read-only views of state
    # =========================================================================

    @property
    def step(self) -> AuthStep:
        return self.state.step

    @property
    def cooldown_remaining(self) -> int:
        return self.state.cooldown.remaining(self._clock())

    @property
    def can_resend(self) -> bool:
        return self.state.step is AuthStep.WAITING and self.cooldown_remaining == 0

    @property
    def total(self) -> Decimal:
        return self._get_cart_total().quantize(Decimal("0.01"))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @contextmanager
    def subscribed(self) -> Iterator[Subscription]:
        """
        Listen for auth changes for the duration of the block.

        The subscription is released on every exit path, exceptions included.
        """
        subscription = self._auth.on_auth_state_change(self._on_auth_change)
        try:
            yield subscription
        finally:
            subscription.unsubscribe()

    async def mount(self, location: str, params: Mapping[str, str]) -> None:
        """
        Initialise a freshly opened checkout.

        An `email` parameter means the customer came back from a magic link:
        resume waiting for that address. An existing session skips straight
        to details, but only if it belongs to that address when one is given.
        """
        self.state.location = location
        email_from_url = params.get("email")
        if email_from_url:
            self.state.email = email_from_url
            self._enter(AuthStep.WAITING)

        await self.check_session()

    async def check_session(self) -> bool:
        """
        Move to details if the visitor already holds a session.

        While waiting for a link, only a session for the address being
        verified counts; a session held by someone else leaves the step
        alone. Covers links opened in another tab, where the sign-in
        notification went to a different request.
        """
        session = await self._auth.get_session()
        if session is None:
            return False
        if self.state.step is AuthStep.WAITING and not _same_email(
            session.user.email, self.state.email
        ):
            logger.debug("Session is for another address; still waiting")
            return False
        self.state.user = session.user
        self.state.customer.email = session.user.email or self.state.email
        self.state.error = None
        self._enter(AuthStep.DETAILS)
        self.state.location = without_params(self.state.location, "email")
        return True

    def _on_auth_change(self, event: AuthChangeEvent, session: AuthSession | None) -> None:
        if event is AuthChangeEvent.SIGNED_IN and session is not None:
            current = self.state.user
            if (
                self.state.step is AuthStep.DETAILS
                and current is not None
                and current.id == session.user.id
            ):
                logger.debug("Already on details; ignoring %s", event.value)
                return
            self.state.user = session.user
            self.state.customer.email = session.user.email or ""
            if session.user.email:
                self.state.email = session.user.email
            self.state.error = None
            self._enter(AuthStep.DETAILS)
            self.state.location = without_params(self.state.location, "email")
        elif event is AuthChangeEvent.SIGNED_OUT:
            self.state.user = None
            self._enter(AuthStep.EMAIL)

    def _enter(self, step: AuthStep) -> None:
        if step is not self.state.step:
            logger.info(
                "Checkout %s: %s -> %s",
                self.restaurant.slug,
                self.state.step.value,
                step.value,
            )
        self.state.step = step

    # =========================================================================
    # Customer actions
    # =========================================================================

    async def _send_link(self, email: str) -> None:
        await self._auth.sign_in_with_otp(
            email,
            redirect_to=with_params(self._redirect_to, email=email),
            should_create_user=True,
            data={
                "restaurant_id": self.restaurant.id,
                "restaurant_name": self.restaurant.name,
            },
        )

    async def submit_email(self, email: str) -> None:
        """
        Verify `email`: reuse a matching session, otherwise email a link.

        Failures leave the step unchanged and set state.error.
        """
        email = email.strip()
        self.state.email = email
        if not email:
            return

        self.state.error = None
        try:
            current = await self._auth.get_user()
            if current is not None and _same_email(current.email, email):
                self.state.user = current
                self.state.customer.email = email
                self._enter(AuthStep.DETAILS)
                return

            await self._send_link(email)
        except BackendError as e:
            logger.error("Email submission error: %s", e.message)
            self.state.error = e.message or SEND_FAILED_MESSAGE
            return

        self.state.magic_link_sent = True
        self._enter(AuthStep.WAITING)
        self.state.cooldown.restart(self._clock())

    async def resend(self) -> bool:
        """
        Send another link once the cooldown has run out.

        Returns:
            True if a link was dispatched.
        """
        if not self.can_resend:
            return False

        self.state.error = None
        try:
            await self._send_link(self.state.email)
        except BackendError as e:
            logger.error("Resend magic link error: %s", e.message)
            self.state.error = e.message or RESEND_FAILED_MESSAGE
            return False

        self.state.cooldown.restart(self._clock())
        return True

    async def submit_details(self, name: str, phone: str, table_number: str) -> Any:
        """
        Hand the order to the caller once name, phone and table are filled in.

        Returns:
            Whatever on_place_order returns, or None when validation failed
            (state.error is set) or the customer is not verified yet.
        """
        if self.state.step is not AuthStep.DETAILS:
            return None

        self.state.customer = self.state.customer.model_copy(
            update={"name": name, "phone": phone, "table_number": table_number}
        )
        if self.state.customer.missing_required():
            self.state.error = REQUIRED_FIELDS_MESSAGE
            return None

        self.state.error = None
        return await self._on_place_order(
            self.state.customer.model_copy(), self.state.user
        )

    def back(self) -> None:
        """Return to the email step, dropping the details draft if any."""
        if self.state.step is AuthStep.WAITING:
            self._enter(AuthStep.EMAIL)
            self.state.magic_link_sent = False
            self.state.error = None
        elif self.state.step is AuthStep.DETAILS:
            self._enter(AuthStep.EMAIL)
            self.state.customer = CustomerInfo()
            self.state.error = None

    def close(self) -> None:
        self._on_close()
