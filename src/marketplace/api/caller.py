"""Resolve the authenticated caller from request headers.

Authentication itself happens upstream; the gateway forwards the user id
and role as ``X-User-Id`` and ``X-User-Role``.
"""

from fastapi import Header

from marketplace.errors import NotAuthenticated
from marketplace.identity.access import Caller, Role


def current_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller:
    if not x_user_id or not x_user_role:
        raise NotAuthenticated("Authentication required")
    try:
        role = Role(x_user_role.strip().lower())
    except ValueError:
        raise NotAuthenticated(f"Unknown role '{x_user_role}'") from None
    return Caller.of(x_user_id, role)


def command_caller(caller: Caller) -> dict:
    """Caller fields as carried on every command."""
    return {"caller_id": caller.user_id, "caller_role": caller.role.value}
