"""Audit recorder tests: appends, reporting queries and the deleted-target fallback."""

from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from pickplay.core.security import get_password_hash
from pickplay.db.base import Base
from pickplay.db.seed import ensure_seed_data
from pickplay.models import AuditAction, AuditLogEntry, Product, User
from pickplay.services.audit_service import AuditFilters, AuditRecorder, deleted_target_label
from pickplay.services.catalog_service import create_product, delete_product
from pickplay.services.user_service import create_user
from pickplay.utils.time import utcnow


def _session_factory(tmp_path: Path) -> sessionmaker:
    engine = create_engine(f"sqlite:///{tmp_path / 'audit.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with session_local() as db:
        ensure_seed_data(db)
        db.add(Product(id=1, name="Console", price=Decimal("1500"), image="console.png"))
        db.add(Product(id=2, name="Kart", price=Decimal("80"), image="kart.png"))
        db.commit()
    return session_local


def _staff(db: Session, username: str, role_name: str = "restocker") -> User:
    return create_user(db, username, get_password_hash("secret123"), role_name, email=f"{username}@pickplay.test")


def _entry_count(db: Session) -> int:
    return db.scalar(select(func.count(AuditLogEntry.id)))


def _action_id(db: Session, name: str) -> int:
    return db.scalar(select(AuditAction.id).where(AuditAction.name == name))


def test_record_appends_one_entry(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        user = _staff(db, "stock")
        entry = recorder.record(db, user.id, "create", 1)

        assert entry is not None
        assert entry.actor_user_id == user.id
        assert entry.actor_identifier == "stock"
        assert entry.action.name == "create"
        assert entry.target_id == 1
        assert _entry_count(db) == 1


def test_record_refuses_unaudited_or_unresolvable_input(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        user = _staff(db, "stock")

        assert recorder.record(db, user.id, "delete", 1) is None
        assert recorder.record(db, None, "create", 1) is None
        assert recorder.record(db, user.id, "create", None) is None
        assert recorder.record(db, 999, "create", 1) is None
        assert recorder.record(db, user.id, "update", 404) is None
        assert _entry_count(db) == 0


def test_query_filters_and_orders_newest_first(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        stock = _staff(db, "stock")
        other = _staff(db, "other")
        recorder.record(db, stock.id, "create", 1)
        recorder.record(db, stock.id, "update", 1)
        recorder.record(db, other.id, "create", 2)

        everything = recorder.query(db)
        by_actor = recorder.query(db, AuditFilters(actor_id=stock.id))
        updates = recorder.query(db, AuditFilters(action_id=_action_id(db, "update")))
        combined = recorder.query(db, AuditFilters(actor_id=stock.id, target_id=2))
        limited = recorder.query(db, AuditFilters(limit=1))

    assert [view.target_name for view in everything] == ["Kart", "Console", "Console"]
    assert everything[0].actor_name == "other"
    assert everything[0].actor_email == "other@pickplay.test"
    assert {view.actor_id for view in by_actor} == {stock.id}
    assert len(by_actor) == 2
    assert [view.action_name for view in updates] == ["update"]
    assert combined == []
    assert len(limited) == 1
    assert limited[0].id == everything[0].id


def test_entries_survive_target_deletion_with_fallback_label(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        user = _staff(db, "stock")
        recorder.record(db, user.id, "create", 2)
        delete_product(db, 2)

        views = recorder.logs_for_target(db, 2)

        assert _entry_count(db) == 1

    assert len(views) == 1
    assert views[0].target_id == 2
    assert views[0].target_exists is False
    assert views[0].target_name == deleted_target_label(2) == "deleted product #2"


def test_aggregate_counts_by_action_actor_and_target(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder(recent_count=2)
    with session_local() as db:
        stock = _staff(db, "stock")
        other = _staff(db, "other")
        recorder.record(db, stock.id, "create", 1)
        recorder.record(db, stock.id, "update", 1)
        recorder.record(db, other.id, "update", 2)

        aggregate = recorder.aggregate(db)

    assert aggregate.total_actions == 3
    assert aggregate.by_action == {"create": 1, "update": 2}
    assert aggregate.by_actor == {"stock": 2, "other": 1}
    assert aggregate.by_target == {"Console": 2, "Kart": 1}
    assert len(aggregate.recent) == 2


def test_aggregate_window_is_bounded(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder(window_size=2)
    with session_local() as db:
        user = _staff(db, "stock")
        for _ in range(3):
            recorder.record(db, user.id, "update", 1)

        assert recorder.aggregate(db).total_actions == 2


def test_summary_covers_trailing_window_only(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder(summary_days=7)
    now = utcnow()
    with session_local() as db:
        user = _staff(db, "stock")
        recorder.record(db, user.id, "create", 1)
        db.add(
            AuditLogEntry(
                actor_user_id=user.id,
                actor_identifier=user.username,
                action_id=_action_id(db, "update"),
                target_type="product",
                target_id=1,
                timestamp=now - timedelta(days=10),
            )
        )
        db.commit()

        summary = recorder.summary(db, now=now)

    assert summary.period_days == 7
    assert summary.total_actions == 1
    assert [view.action_name for view in summary.recent_activity] == ["create"]
    assert summary.general.total_actions == 2


def test_per_actor_view_and_action_vocabulary(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        stock = _staff(db, "stock")
        idle = _staff(db, "idle")
        recorder.record(db, stock.id, "create", 1)

        assert len(recorder.logs_for_actor(db, stock.id)) == 1
        assert recorder.logs_for_actor(db, idle.id) == []
        assert [action.name for action in recorder.list_actions(db)] == ["create", "update"]


def test_deleted_product_id_is_not_reused(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    recorder = AuditRecorder()
    with session_local() as db:
        user = _staff(db, "stock")
        recorder.record(db, user.id, "update", 2)
        delete_product(db, 2)
        replacement = create_product(db, name="Skates", price=Decimal("40"), image="skates.png")

        views = recorder.logs_for_target(db, 2)

    assert replacement.id != 2
    assert len(views) == 1
    assert views[0].target_exists is False
    assert views[0].target_name == "deleted product #2"
