"""Access token and session context extraction from request metadata."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from gsheets_mcp.errors import MissingCredential

ACCESS_TOKEN_KEY = "access_token"


@dataclass(frozen=True)
class AccessContext:
    """Credentials and session-scoped values for one tool invocation.

    Attributes:
        access_token: Bearer token used for the remote call.
        context: Request ``_meta`` values (spreadsheet_id, sheet, range, ...).
    """

    access_token: str = field(repr=False)
    context: Mapping[str, Any] = field(default_factory=dict, repr=False)


def meta_to_dict(meta: Any) -> dict[str, Any]:
    """Flatten a request ``_meta`` object into a plain dict.

    The protocol layer hands metadata over as a pydantic model with extra
    fields allowed; tests and in-process callers may pass a mapping.
    """
    if meta is None:
        return {}
    if isinstance(meta, BaseModel):
        return meta.model_dump(exclude_none=True)
    if isinstance(meta, Mapping):
        return dict(meta)
    return {}


def resolve_access(meta: Mapping[str, Any] | None, session_token: str | None = None) -> AccessContext:
    """Resolve the access token and context for an invocation.

    Args:
        meta: Request metadata, or None when the request carried none.
        session_token: Token bound to the server session. When set, the
            per-request ``access_token`` is not consulted.

    Returns:
        AccessContext with the token and the metadata mapping.

    Raises:
        MissingCredential: If no string token is available.
    """
    context = dict(meta) if meta else {}

    if session_token is not None:
        return AccessContext(access_token=session_token, context=context)

    token = context.get(ACCESS_TOKEN_KEY)
    if not isinstance(token, str) or not token:
        raise MissingCredential()

    return AccessContext(access_token=token, context=context)
