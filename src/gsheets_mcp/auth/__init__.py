"""OAuth token exchange for the Drive and Sheets servers.

The servers themselves never refresh tokens; they accept a bearer access
token. This package provides the one-shot refresh used by the CLI.

Quick Start:
    ```python
    from gsheets_mcp.auth import GoogleAuthService

    service = GoogleAuthService(
        client_id="your-client-id",
        client_secret="your-client-secret",  # pragma: allowlist secret
    )
    token = await service.refresh_token("your-refresh-token")
    ```
"""

from gsheets_mcp.auth.models import TokenResponse, redact
from gsheets_mcp.auth.token_exchange import GOOGLE_TOKEN_URL, GoogleAuthService

__all__ = [
    "GoogleAuthService",
    "TokenResponse",
    "GOOGLE_TOKEN_URL",
    "redact",
]
