"""Audit trail reporting endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from pickplay.auth import require_permission
from pickplay.core.errors import NotFoundError
from pickplay.db.session import get_db
from pickplay.models.audit_log import AuditAction
from pickplay.models.user import User
from pickplay.schemas.audit import (
    AuditActionResponse,
    AuditAggregateResponse,
    AuditEntryResponse,
    AuditLogListResponse,
    AuditSummaryResponse,
)
from pickplay.services.audit_service import AuditFilters, AuditRecorder
from pickplay.services.permissions import EntityKind, Operation

router: APIRouter = APIRouter()
DEFAULT_PAGE_LIMIT = 50
DEFAULT_DETAIL_LIMIT = 20


def get_audit_recorder(request: Request) -> AuditRecorder:
    return request.app.state.audit_recorder


def _listing(views: list) -> AuditLogListResponse:
    return AuditLogListResponse(
        total=len(views),
        logs=[AuditEntryResponse.model_validate(view, from_attributes=True) for view in views],
    )


@router.get("", response_model=AuditLogListResponse)
def get_audit_logs(
    actor_id: int | None = Query(default=None),
    action_id: int | None = Query(default=None),
    target_id: int | None = Query(default=None),
    since: datetime | None = Query(default=None),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.LIST)),
) -> AuditLogListResponse:
    filters = AuditFilters(actor_id=actor_id, action_id=action_id, target_id=target_id, since=since, limit=limit)
    return _listing(recorder.query(db, filters))


@router.get("/stats", response_model=AuditAggregateResponse)
def get_audit_stats(
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.LIST)),
) -> AuditAggregateResponse:
    return AuditAggregateResponse.model_validate(recorder.aggregate(db), from_attributes=True)


@router.get("/summary", response_model=AuditSummaryResponse)
def get_audit_summary(
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.LIST)),
) -> AuditSummaryResponse:
    return AuditSummaryResponse.model_validate(recorder.summary(db), from_attributes=True)


@router.get("/actions", response_model=list[AuditActionResponse])
def get_audit_actions(
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.LIST)),
) -> list[AuditAction]:
    return recorder.list_actions(db)


@router.get("/actors/{actor_id}", response_model=AuditLogListResponse)
def get_audit_logs_for_actor(
    actor_id: int,
    limit: int = Query(default=DEFAULT_DETAIL_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.SEARCH)),
) -> AuditLogListResponse:
    views = recorder.logs_for_actor(db, actor_id, limit=limit)
    if not views:
        raise NotFoundError("No audit entries found for this user", details={"actor_id": actor_id})
    return _listing(views)


@router.get("/products/{product_id}", response_model=AuditLogListResponse)
def get_audit_logs_for_product(
    product_id: int,
    limit: int = Query(default=DEFAULT_DETAIL_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    recorder: AuditRecorder = Depends(get_audit_recorder),
    _: User = Depends(require_permission(EntityKind.AUDIT, Operation.SEARCH)),
) -> AuditLogListResponse:
    views = recorder.logs_for_target(db, product_id, limit=limit)
    if not views:
        raise NotFoundError("No audit entries found for this product", details={"product_id": product_id})
    return _listing(views)
