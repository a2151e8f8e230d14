"""Append-only audit trail of catalog create/update actions."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pickplay.db.base import Base

AUDITED_ACTIONS = ("create", "update")


class AuditAction(Base):
    """Fixed action vocabulary. Deletes and reads are never part of it."""

    __tablename__ = "audit_actions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)


class AuditLogEntry(Base):
    """Stores an immutable trail of catalog mutations."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True, default=lambda: datetime.now(timezone.utc)
    )
    actor_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    action_id: Mapped[int] = mapped_column(ForeignKey("audit_actions.id"), nullable=False)
    target_type: Mapped[str] = mapped_column(String(32), nullable=False, default="product")
    # Not a constrained FK: the original id must survive deletion of the target.
    target_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    actor: Mapped["User | None"] = relationship()
    action: Mapped[AuditAction] = relationship(lazy="joined")
