"""Route dependencies that put the permission gate in front of handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import Depends, Request

from pickplay.core.errors import PermissionDenied
from pickplay.core.security import get_current_user
from pickplay.models.user import User
from pickplay.services.permissions import EntityKind, Operation, PermissionDecision, check_permission

logger = logging.getLogger(__name__)


def bind_actor(request: Request, user: User) -> None:
    """Expose the acting user to later pipeline stages (audit)."""
    request.state.actor_id = user.id


def enforce_permission(user: User, entity: EntityKind, operation: Operation) -> PermissionDecision:
    decision = check_permission(user.role_name, entity, operation)
    if not decision.allowed:
        logger.info(
            "[AUTH] Denied %s %s for user_id=%s role=%s reason=%s",
            operation.value,
            entity.value,
            user.id,
            user.role_name,
            decision.reason,
        )
        raise PermissionDenied(decision.message or "Forbidden", code=decision.reason)
    return decision


def require_permission(entity: EntityKind, operation: Operation) -> Callable[..., User]:
    """Build a dependency that rejects callers the role matrix does not allow."""

    def _checker(request: Request, current_user: User = Depends(get_current_user)) -> User:
        enforce_permission(current_user, entity, operation)
        bind_actor(request, current_user)
        return current_user

    return _checker
