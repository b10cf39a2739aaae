"""Role sets and branch scoping shared by every feature module."""

from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import SessionUser

BRANCH_ADMIN_ROLES = (Role.SUPER_ADMIN, Role.BRANCH_ADMIN)
REGISTRAR_ROLES = (Role.SUPER_ADMIN, Role.BRANCH_ADMIN, Role.REGISTRAR)
CASHIER_ROLES = (Role.SUPER_ADMIN, Role.BRANCH_ADMIN, Role.REGISTRAR, Role.CASHIER)

# Staff roles whose writes are limited to their own branch.
BRANCH_SCOPED_ROLES = frozenset({Role.BRANCH_ADMIN, Role.REGISTRAR, Role.CASHIER})


def branch_scope(actor: SessionUser) -> Optional[int]:
    """Branch filter for reads: ``None`` means every branch."""
    if actor.role == Role.SUPER_ADMIN:
        return None
    return actor.branch_id


def can_access_branch(actor: SessionUser, branch_id: Optional[int]) -> bool:
    if actor.role == Role.SUPER_ADMIN:
        return True
    return actor.branch_id is not None and actor.branch_id == branch_id


def ensure_branch_write(actor: SessionUser, branch_id: int) -> None:
    if actor.role in BRANCH_SCOPED_ROLES and actor.branch_id != branch_id:
        raise AuthorizationError("Access denied to this branch", branch_id=branch_id)
