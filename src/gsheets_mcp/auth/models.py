"""Token models for the OAuth refresh exchange."""

from pydantic import BaseModel, ConfigDict, Field


def redact(secret: str | None) -> str:
    """Mask a credential for log output, keeping only a short prefix."""
    if not secret:
        return "<none>"
    return f"{secret[:4]}***"


class TokenResponse(BaseModel):
    """Response body of a successful token refresh.

    Instances are immutable; the servers only ever read ``access_token``.
    Credentials are excluded from ``repr()`` so the model is safe to log.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(repr=False)
    expires_in: int
    refresh_token: str | None = Field(default=None, repr=False)
    scope: str
    token_type: str
