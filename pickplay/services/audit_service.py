"""Audit recorder: append catalog mutation entries and answer reporting queries.

Recording is best effort relative to the operation that triggered it. Every
failure is logged and turned into a ``None`` result so the caller's
response is never affected. Deletions are never audited.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from pickplay.core.config import settings
from pickplay.core.errors import AuditFailure
from pickplay.models.audit_log import AUDITED_ACTIONS, AuditAction, AuditLogEntry
from pickplay.models.catalog import Product
from pickplay.models.user import User
from pickplay.utils.time import utcnow, window_start

logger = logging.getLogger(__name__)

TARGET_TYPE_PRODUCT = "product"


def deleted_target_label(target_id: int | None, target_type: str = TARGET_TYPE_PRODUCT) -> str:
    if target_id is None:
        return "-"
    return f"deleted {target_type} #{target_id}"


@dataclass(frozen=True)
class AuditFilters:
    actor_id: int | None = None
    action_id: int | None = None
    target_id: int | None = None
    since: datetime | None = None
    limit: int | None = None


@dataclass(frozen=True)
class AuditEntryView:
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


@dataclass
class AuditAggregate:
    total_actions: int = 0
    by_action: dict[str, int] = field(default_factory=dict)
    by_actor: dict[str, int] = field(default_factory=dict)
    by_target: dict[str, int] = field(default_factory=dict)
    recent: list[AuditEntryView] = field(default_factory=list)


@dataclass
class AuditSummary:
    period_days: int
    since: datetime
    total_actions: int
    recent_activity: list[AuditEntryView]
    general: AuditAggregate


class AuditRecorder:
    """Constructed once and shared by whatever composes the request layer."""

    def __init__(
        self,
        *,
        default_limit: int | None = None,
        window_size: int | None = None,
        recent_count: int | None = None,
        summary_days: int | None = None,
    ) -> None:
        self.default_limit = default_limit or settings.audit_default_limit
        self.window_size = window_size or settings.audit_window_size
        self.recent_count = recent_count or settings.audit_recent_count
        self.summary_days = summary_days or settings.audit_summary_days

    def record(self, db: Session, actor_id: int | None, action_kind: str, target_id: int | None) -> AuditLogEntry | None:
        """Append one audit entry. Never raises."""
        try:
            entry = self._append(db, actor_id, action_kind, target_id)
        except AuditFailure as exc:
            db.rollback()
            logger.warning("[AUDIT] Not recorded (%s): %s", exc.code, exc.message)
            return None
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "[AUDIT] Storage error recording action=%s actor_id=%s target_id=%s",
                action_kind,
                actor_id,
                target_id,
            )
            return None
        logger.info("[AUDIT] Recorded %s by user_id=%s on product_id=%s", action_kind, actor_id, target_id)
        return entry

    def _append(self, db: Session, actor_id: int | None, action_kind: str, target_id: int | None) -> AuditLogEntry:
        if action_kind not in AUDITED_ACTIONS:
            raise AuditFailure(f"Action '{action_kind}' is not audited", code="unsupported_action")
        if actor_id is None:
            raise AuditFailure("Actor id is required", code="missing_actor")
        if target_id is None:
            raise AuditFailure("Target id is required", code="missing_target")

        action = db.scalar(select(AuditAction).where(AuditAction.name == action_kind).limit(1))
        if action is None:
            raise AuditFailure(f"Action '{action_kind}' is not seeded", code="unknown_action")
        actor = db.get(User, actor_id)
        if actor is None:
            raise AuditFailure(f"User {actor_id} not found", code="unknown_actor")
        if db.get(Product, target_id) is None:
            raise AuditFailure(f"Product {target_id} not found", code="unknown_target")

        entry = AuditLogEntry(
            actor_user_id=actor.id,
            actor_identifier=actor.username,
            action_id=action.id,
            target_type=TARGET_TYPE_PRODUCT,
            target_id=target_id,
            timestamp=utcnow(),
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    def query(self, db: Session, filters: AuditFilters | None = None) -> list[AuditEntryView]:
        """Return matching entries, newest first, joined with display names."""
        filters = filters or AuditFilters()
        target = aliased(Product)
        stmt = (
            select(AuditLogEntry, User, AuditAction, target)
            .join(AuditAction, AuditLogEntry.action_id == AuditAction.id)
            .outerjoin(User, AuditLogEntry.actor_user_id == User.id)
            .outerjoin(target, AuditLogEntry.target_id == target.id)
        )
        if filters.actor_id is not None:
            stmt = stmt.where(AuditLogEntry.actor_user_id == filters.actor_id)
        if filters.action_id is not None:
            stmt = stmt.where(AuditLogEntry.action_id == filters.action_id)
        if filters.target_id is not None:
            stmt = stmt.where(AuditLogEntry.target_id == filters.target_id)
        if filters.since is not None:
            stmt = stmt.where(AuditLogEntry.timestamp >= filters.since)
        stmt = stmt.order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc()).limit(filters.limit or self.default_limit)

        return [self._to_view(entry, actor, action, product) for entry, actor, action, product in db.execute(stmt).all()]

    @staticmethod
    def _to_view(entry: AuditLogEntry, actor: User | None, action: AuditAction, product: Product | None) -> AuditEntryView:
        return AuditEntryView(
            id=entry.id,
            timestamp=entry.timestamp,
            actor_id=entry.actor_user_id,
            actor_name=actor.username if actor is not None else entry.actor_identifier or "-",
            actor_email=actor.email if actor is not None else None,
            action_id=action.id,
            action_name=action.name,
            target_id=entry.target_id,
            target_name=product.name if product is not None else deleted_target_label(entry.target_id, entry.target_type),
            target_exists=product is not None,
        )

    def aggregate(self, db: Session) -> AuditAggregate:
        """Counts over the most recent window of entries plus the latest few."""
        views = self.query(db, AuditFilters(limit=self.window_size))
        return AuditAggregate(
            total_actions=len(views),
            by_action=dict(Counter(view.action_name for view in views)),
            by_actor=dict(Counter(view.actor_name for view in views)),
            by_target=dict(Counter(view.target_name for view in views)),
            recent=views[: self.recent_count],
        )

    def summary(self, db: Session, now: datetime | None = None) -> AuditSummary:
        """Activity over the last ``summary_days`` days alongside the general aggregate."""
        since = window_start(self.summary_days, now)
        recent = self.query(db, AuditFilters(since=since, limit=100))
        return AuditSummary(
            period_days=self.summary_days,
            since=since,
            total_actions=len(recent),
            recent_activity=recent[:5],
            general=self.aggregate(db),
        )

    def logs_for_actor(self, db: Session, actor_id: int, limit: int = 20) -> list[AuditEntryView]:
        return self.query(db, AuditFilters(actor_id=actor_id, limit=limit))

    def logs_for_target(self, db: Session, target_id: int, limit: int = 20) -> list[AuditEntryView]:
        return self.query(db, AuditFilters(target_id=target_id, limit=limit))

    def list_actions(self, db: Session) -> list[AuditAction]:
        return list(db.scalars(select(AuditAction).order_by(AuditAction.id.asc())).all())
