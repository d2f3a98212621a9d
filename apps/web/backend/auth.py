"""
Session provider - the backend's identity service.

Issues and refreshes sessions, dispatches magic-link emails, and notifies
subscribers when the visitor signs in or out. Sessions live in a per-visitor
storage mapping (the Django session in production, a dict in tests).
"""

import base64
import hashlib
import logging
import secrets
import time
from collections.abc import Callable, Mapping
from typing import Any, Protocol

import httpx
from ordering_schemas import AuthChangeEvent, AuthSession, AuthUser
from pydantic import ValidationError

from apps.web.backend.exceptions import BackendAuthError

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthChangeEvent, AuthSession | None], None]

SESSION_KEY = "auth.session"
VERIFIER_KEY = "auth.code_verifier"


class SessionStorage(Protocol):
    """The slice of the mapping protocol the provider needs."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def __setitem__(self, key: str, value: Any) -> None: ...

    def pop(self, key: str, default: Any = None) -> Any: ...


class Subscription:
    """Registration handle returned by on_auth_state_change."""

    def __init__(self, provider: "SessionProvider", callback: AuthListener) -> None:
        self._provider = provider
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Release the listener. Safe to call more than once."""
        if self.active:
            self.active = False
            self._provider._remove_listener(self)


def _code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _error_message(response: httpx.Response, default: str) -> str:
    """Pull the human-readable message out of an auth error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or default
    if isinstance(data, dict):
        for key in ("msg", "error_description", "message", "error"):
            if data.get(key):
                return str(data[key])
    return default


class SessionProvider:
    """
    Client for the backend identity service (`/auth/v1`).

    Sign-in is passwordless: sign_in_with_otp() emails a one-time link that
    lands back on the app with a `code` parameter, which
    exchange_code_for_session() trades for a session (PKCE flow).
    """

    SERVICE = "auth"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        storage: SessionStorage,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the provider.

        Args:
            http_client: Shared HTTP client (injected; tests mock it with respx).
            base_url: Backend project URL, without the `/auth/v1` suffix.
            api_key: Public API key sent with every request.
            storage: Per-visitor mapping holding the session and PKCE verifier.
            clock: Returns unix seconds; used for token expiry checks.
        """
        self._client = http_client
        self._base_url = f"{base_url.rstrip('/')}/auth/v1"
        self._api_key = api_key
        self._storage = storage
        self._clock = clock
        self._listeners: list[Subscription] = []

    # =========================================================================
    # Notifications
    # =========================================================================

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        """
        Register a listener for sign-in, sign-out, and refresh events.

        Returns:
            Subscription whose unsubscribe() is the disposer.
        """
        subscription = Subscription(self, callback)
        self._listeners.append(subscription)
        return subscription

    def _remove_listener(self, subscription: Subscription) -> None:
        if subscription in self._listeners:
            self._listeners.remove(subscription)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, event: AuthChangeEvent, session: AuthSession | None) -> None:
        logger.debug("Auth event %s (%d listeners)", event.value, len(self._listeners))
        for subscription in list(self._listeners):
            subscription.callback(event, session)

    # =========================================================================
    # Storage
    # =========================================================================

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {access_token or self._api_key}",
        }

    def _stored_session(self) -> AuthSession | None:
        raw = self._storage.get(SESSION_KEY)
        if not raw:
            return None
        try:
            return AuthSession.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding unreadable stored session")
            self._storage.pop(SESSION_KEY, None)
            return None

    def _save_session(self, session: AuthSession) -> None:
        self._storage[SESSION_KEY] = session.model_dump(mode="json")

    def _clear(self) -> None:
        self._storage.pop(SESSION_KEY, None)
        self._storage.pop(VERIFIER_KEY, None)

    def _body(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendAuthError(
                f"Unreadable auth response: {response.status_code}", service=self.SERVICE
            ) from e

    def _parse_session(self, data: Any) -> AuthSession:
        if not isinstance(data, dict):
            raise BackendAuthError("Malformed session in auth response", service=self.SERVICE)
        if data.get("expires_at") is None and data.get("expires_in"):
            data = {**data, "expires_at": int(self._clock()) + int(data["expires_in"])}
        try:
            return AuthSession.model_validate(data)
        except ValidationError as e:
            raise BackendAuthError(
                "Malformed session in auth response", service=self.SERVICE
            ) from e

    @property
    def access_token(self) -> str | None:
        """Access token of the stored session, without refreshing it."""
        session = self._stored_session()
        return session.access_token if session else None

    # =========================================================================
    # Sessions
    # =========================================================================

    async def get_session(self) -> AuthSession | None:
        """
        Return the visitor's session, refreshing an expired access token.

        Returns:
            The current session, or None when the visitor is not signed in
            (including when the refresh token has been revoked).

        Raises:
            BackendAuthError: If the refresh request fails for other reasons.
        """
        session = self._stored_session()
        if session is None:
            return None
        if not session.is_expired(self._clock()):
            return session
        return await self._refresh(session)

    async def _refresh(self, session: AuthSession) -> AuthSession | None:
        try:
            response = await self._client.post(
                f"{self._base_url}/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": session.refresh_token},
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            raise BackendAuthError(
                f"Session refresh request failed: {e}", service=self.SERVICE
            ) from e

        if response.status_code in (400, 401, 403):
            logger.info("Refresh token rejected (%s); signing out", response.status_code)
            self._clear()
            self._notify(AuthChangeEvent.SIGNED_OUT, None)
            return None
        if response.is_error:
            raise BackendAuthError(
                _error_message(response, f"Session refresh failed: {response.status_code}"),
                service=self.SERVICE,
            )

        refreshed = self._parse_session(self._body(response))
        self._save_session(refreshed)
        self._notify(AuthChangeEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    async def get_user(self) -> AuthUser | None:
        """
        Fetch the user behind the current session from the identity service.

        Returns:
            The verified user, or None without a (valid) session.

        Raises:
            BackendAuthError: If the lookup fails.
        """
        session = await self.get_session()
        if session is None:
            return None

        try:
            response = await self._client.get(
                f"{self._base_url}/user",
                headers=self._headers(session.access_token),
            )
        except httpx.RequestError as e:
            raise BackendAuthError(
                f"User lookup request failed: {e}", service=self.SERVICE
            ) from e

        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise BackendAuthError(
                _error_message(response, f"User lookup failed: {response.status_code}"),
                service=self.SERVICE,
            )
        try:
            return AuthUser.model_validate(self._body(response))
        except ValidationError as e:
            raise BackendAuthError(
                "Malformed user in auth response", service=self.SERVICE
            ) from e

    async def sign_in_with_otp(
        self,
        email: str,
        *,
        redirect_to: str,
        should_create_user: bool = True,
        data: dict[str, Any] | None = None,
    ) -> None:
        """
        Email a one-time sign-in link.

        Args:
            email: Recipient address.
            redirect_to: Where the link lands after verification.
            should_create_user: Create the account if it does not exist.
            data: Metadata stored on a newly created user.

        Raises:
            BackendAuthError: If the identity service refuses or is unreachable.
        """
        verifier = secrets.token_urlsafe(48)
        self._storage[VERIFIER_KEY] = verifier

        try:
            response = await self._client.post(
                f"{self._base_url}/otp",
                params={"redirect_to": redirect_to},
                json={
                    "email": email,
                    "create_user": should_create_user,
                    "data": data or {},
                    "code_challenge": _code_challenge(verifier),
                    "code_challenge_method": "s256",
                },
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            raise BackendAuthError(
                f"Magic link request failed: {e}", service=self.SERVICE
            ) from e

        if response.is_error:
            raise BackendAuthError(
                _error_message(response, "Failed to send magic link"),
                service=self.SERVICE,
            )
        logger.info("Magic link dispatched (redirect_to=%s)", redirect_to)

    async def exchange_code_for_session(self, code: str) -> AuthSession:
        """
        Trade the code from a magic-link landing for a session.

        Emits SIGNED_IN to subscribers on success.

        Raises:
            BackendAuthError: If no verifier is stored or the code is rejected.
        """
        verifier = self._storage.get(VERIFIER_KEY)
        if not verifier:
            raise BackendAuthError(
                "No sign-in is pending for this browser", service=self.SERVICE
            )

        try:
            response = await self._client.post(
                f"{self._base_url}/token",
                params={"grant_type": "pkce"},
                json={"auth_code": code, "code_verifier": verifier},
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            raise BackendAuthError(
                f"Code exchange request failed: {e}", service=self.SERVICE
            ) from e

        if response.is_error:
            raise BackendAuthError(
                _error_message(response, "Sign-in link is invalid or has expired"),
                service=self.SERVICE,
            )

        session = self._parse_session(self._body(response))
        self._save_session(session)
        self._storage.pop(VERIFIER_KEY, None)
        self._notify(AuthChangeEvent.SIGNED_IN, session)
        return session

    async def initialize(self, params: Mapping[str, str]) -> AuthSession | None:
        """
        Detect a magic-link landing and complete the sign-in.

        A stale or reused code is logged and ignored; the visitor simply
        stays signed out.
        """
        code = params.get("code")
        if not code:
            return None
        try:
            return await self.exchange_code_for_session(code)
        except BackendAuthError as e:
            logger.warning("Ignoring sign-in code from landing URL: %s", e.message)
            return None

    async def sign_out(self) -> None:
        """Revoke the session (best effort), clear storage, emit SIGNED_OUT."""
        session = self._stored_session()
        if session is not None:
            try:
                response = await self._client.post(
                    f"{self._base_url}/logout",
                    headers=self._headers(session.access_token),
                )
                if response.is_error:
                    logger.warning("Logout returned %s", response.status_code)
            except httpx.RequestError as e:
                logger.warning("Logout request failed: %s", e)

        self._clear()
        self._notify(AuthChangeEvent.SIGNED_OUT, None)
