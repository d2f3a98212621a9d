"""Auth schemas - sessions issued by the backend's identity service."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthChangeEvent(str, Enum):
    """Notifications emitted when the stored session changes."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthUser(BaseModel):
    """Verified identity. Presence implies the email was confirmed."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    created_at: datetime | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class AuthSession(BaseModel):
    """Token pair plus the user it belongs to."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: int | None = Field(default=None, description="Unix seconds")
    user: AuthUser

    def is_expired(self, now: float, margin: int = 10) -> bool:
        """True when the access token expires within `margin` seconds."""
        if self.expires_at is None:
            return False
        return self.expires_at - margin <= now
