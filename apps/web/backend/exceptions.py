"""Backend service exceptions."""


class BackendError(Exception):
    """Base exception for backend-as-a-service errors."""

    def __init__(self, message: str, service: str | None = None) -> None:
        self.message = message
        self.service = service
        super().__init__(message)


class BackendAuthError(BackendError):
    """Session, token, or sign-in request failed."""


class BackendAPIError(BackendError):
    """Request to the backend failed."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        super().__init__(message, service)
        self.status_code = status_code
        self.response_body = response_body


class RecordNotFound(BackendAPIError):
    """A single-row lookup matched zero (or more than one) rows."""
