"""
Caller identity, as forwarded by the upstream gateway.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

from ..core.config import settings


@dataclass
class Caller:
    """Identity of the requesting user."""

    user_id: Optional[str]
    role: Optional[str] = None

    @property
    def is_privileged(self) -> bool:
        return self.role in settings.occupancy.privileged_roles


async def get_caller(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Caller:
    """Read the caller from request headers."""
    return Caller(user_id=x_user_id or None, role=(x_user_role or "").lower() or None)


async def require_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Caller:
    """Like get_caller, but the user id is mandatory."""
    caller = await get_caller(x_user_id, x_user_role)
    if not caller.user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    return caller


async def require_privileged(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Caller:
    """Caller must hold a privileged role (librarian, admin)."""
    caller = await get_caller(x_user_id, x_user_role)
    if not caller.is_privileged:
        raise HTTPException(status_code=403, detail="Librarian or admin role required")
    return caller
