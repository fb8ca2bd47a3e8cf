"""
hangout.engine.roles — Role Hierarchy Rules
============================================

Pure authorization rules over the ranked :class:`Role` enum
(owner > admin > member).  The service-side guard in
:mod:`hangout.services.permissions` looks the roles up and calls these.
"""

from __future__ import annotations

from hangout.database.models import Role
from hangout.errors import PermissionDenied, ValidationError

__all__ = [
    "ASSIGNABLE_ROLES",
    "Role",
    "check_can_leave",
    "check_can_remove",
    "check_minimum_role",
    "parse_role",
]

# Roles an owner may hand out with a plain role change.  Ownership moves
# only through a transfer.
ASSIGNABLE_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.MEMBER})


def parse_role(value: str) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}") from None


def check_minimum_role(role: str, minimum: Role) -> None:
    """Raise :class:`PermissionDenied` unless *role* ranks at least *minimum*."""
    if not Role(role).at_least(minimum):
        raise PermissionDenied(f"Requires {minimum.value} role or higher")


def check_can_remove(actor_role: str, target_role: str) -> None:
    """Admins may remove plain members; owners may remove anyone but themselves.

    The caller is responsible for rejecting self-removal.
    """
    actor = Role(actor_role)
    target = Role(target_role)
    check_minimum_role(actor, Role.ADMIN)
    if target == Role.OWNER:
        raise PermissionDenied("The owner cannot be removed")
    if actor == Role.ADMIN and target != Role.MEMBER:
        raise PermissionDenied("Admins can only remove members")


def check_can_leave(role: str) -> None:
    if Role(role) == Role.OWNER:
        raise PermissionDenied("The owner must transfer ownership before leaving")
