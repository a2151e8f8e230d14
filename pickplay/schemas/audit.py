"""Audit trail API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AuditEntryResponse(BaseModel):
    """One audit entry in display form."""

    id: int
    timestamp: datetime
    actor_id: int | None
    actor_name: str
    actor_email: str | None
    action_id: int
    action_name: str
    target_id: int | None
    target_name: str
    target_exists: bool

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    total: int
    logs: list[AuditEntryResponse]


class AuditAggregateResponse(BaseModel):
    total_actions: int
    by_action: dict[str, int]
    by_actor: dict[str, int]
    by_target: dict[str, int]
    recent: list[AuditEntryResponse]

    model_config = ConfigDict(from_attributes=True)


class AuditSummaryResponse(BaseModel):
    period_days: int
    since: datetime
    total_actions: int
    recent_activity: list[AuditEntryResponse]
    general: AuditAggregateResponse

    model_config = ConfigDict(from_attributes=True)


class AuditActionResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
