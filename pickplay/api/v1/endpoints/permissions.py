"""Permission lookups used by the admin UI to hide forbidden actions."""

from fastapi import APIRouter, Depends, Query

from pickplay.core.security import get_current_user
from pickplay.models.user import User
from pickplay.schemas.auth import PermissionCheckResponse
from pickplay.services.permissions import check_permission

router: APIRouter = APIRouter()


@router.get("/check", response_model=PermissionCheckResponse)
def check(
    entity: str = Query(...),
    operation: str = Query(...),
    current_user: User = Depends(get_current_user),
) -> PermissionCheckResponse:
    decision = check_permission(current_user.role_name, entity, operation)
    return PermissionCheckResponse(
        role=current_user.role_name,
        entity=entity,
        operation=operation,
        allowed=decision.allowed,
        reason=decision.reason,
        message=decision.message,
    )
