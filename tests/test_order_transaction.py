"""Order transaction engine tests against a real SQLite session."""

from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pickplay.core.errors import ConflictError, NotFoundError, ValidationError
from pickplay.db.base import Base
from pickplay.models import Order, OrderLine, PaymentMethod, Product
from pickplay.schemas.order import OrderLinePayload
from pickplay.services import order_service
from pickplay.services.catalog_service import update_product
from pickplay.services.order_service import delete_order, get_order, submit_order


def _session_factory(tmp_path: Path) -> sessionmaker:
    engine = create_engine(f"sqlite:///{tmp_path / 'orders_engine.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _seed_catalog(db: Session, *, active: bool = True) -> None:
    db.add(PaymentMethod(id=1, name="Cash", is_active=True))
    db.add(PaymentMethod(id=2, name="Voucher", is_active=False))
    db.add(Product(id=10, name="Console", price=Decimal("1500"), image="console.png", is_active=active))
    db.add(Product(id=11, name="Controller", price=Decimal("250.50"), image="pad.png", is_active=True))
    db.commit()


def _counts(db: Session) -> tuple[int, int]:
    return db.scalar(select(func.count(Order.id))), db.scalar(select(func.count(OrderLine.id)))


def _line(product_id: int, quantity: int) -> OrderLinePayload:
    return OrderLinePayload(product_id=product_id, quantity=quantity)


def test_single_line_order_snapshots_price_and_total(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 2)])

        order = get_order(db, summary.order_id)

    assert summary.customer_name == "Ana"
    assert summary.total == Decimal("3000")
    assert summary.created_at is not None
    assert order is not None
    assert len(order.lines) == 1
    assert order.lines[0].unit_price == Decimal("1500")
    assert order.lines[0].quantity == 2
    assert order.total_amount == Decimal("3000")


def test_total_equals_sum_of_line_subtotals(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(
            db,
            customer_name="  Bruno  ",
            payment_method_id=1,
            lines=[_line(10, 1), _line(11, 3)],
        )
        order = get_order(db, summary.order_id)

    assert order.customer_name == "Bruno"
    assert order.total_amount == sum(line.unit_price * line.quantity for line in order.lines)
    assert order.total_amount == Decimal("2251.50")


def test_duplicate_product_lines_are_not_merged(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 1), _line(10, 1)])
        order = get_order(db, summary.order_id)

    assert [line.quantity for line in order.lines] == [1, 1]
    assert [line.product_id for line in order.lines] == [10, 10]
    assert summary.total == Decimal("3000")


def test_inactive_product_aborts_without_rows(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db, active=False)
        before = _counts(db)

        with pytest.raises(ConflictError) as exc_info:
            submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(11, 1), _line(10, 2)])

        after = _counts(db)

    assert before == after == (0, 0)
    assert "Console" in exc_info.value.message
    assert exc_info.value.details == {"line": 2, "product_id": 10}


def test_missing_product_reports_offending_line(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)

        with pytest.raises(NotFoundError) as exc_info:
            submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 1), _line(99, 1)])

        assert _counts(db) == (0, 0)

    assert exc_info.value.details == {"line": 2, "product_id": 99}
    assert "99" in exc_info.value.message


@pytest.mark.parametrize(
    ("customer_name", "payment_method_id", "lines", "field"),
    [
        ("", 1, [_line(10, 1)], "customer_name"),
        ("   ", 1, [_line(10, 1)], "customer_name"),
        ("Ana", None, [_line(10, 1)], "payment_method_id"),
        ("Ana", 1, [], "lines"),
        ("Ana", 1, None, "lines"),
        ("Ana", 1, [_line(10, 0)], "quantity"),
        ("Ana", 1, [_line(10, 1), _line(11, -3)], "quantity"),
    ],
)
def test_structural_validation_rejects_before_any_lookup(
    tmp_path: Path, customer_name, payment_method_id, lines, field
) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)

        with pytest.raises(ValidationError) as exc_info:
            submit_order(db, customer_name=customer_name, payment_method_id=payment_method_id, lines=lines)

        assert _counts(db) == (0, 0)

    assert exc_info.value.details["field"] == field


def test_boolean_quantity_is_not_an_integer() -> None:
    class _Line:
        product_id = 10
        quantity = True

    with pytest.raises(ValidationError):
        order_service.validate_submission("Ana", 1, [_Line()])


def test_large_quantity_is_accepted(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(11, 10_000)])

    assert summary.total == Decimal("2505000.00")


def test_payment_method_must_exist_and_be_active(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)

        with pytest.raises(NotFoundError):
            submit_order(db, customer_name="Ana", payment_method_id=42, lines=[_line(10, 1)])
        with pytest.raises(ConflictError):
            submit_order(db, customer_name="Ana", payment_method_id=2, lines=[_line(10, 1)])

        assert _counts(db) == (0, 0)


def test_price_change_does_not_touch_existing_orders(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 2)])
        update_product(db, 10, {"price": Decimal("1999.99")})

    with session_local() as db:
        order = get_order(db, summary.order_id)
        product = db.get(Product, 10)

        assert product.price == Decimal("1999.99")
        assert order.lines[0].unit_price == Decimal("1500")
        assert order.total_amount == Decimal("3000")


def test_failure_while_writing_lines_rolls_back_order(tmp_path: Path, monkeypatch) -> None:
    session_local = _session_factory(tmp_path)

    def _broken_line(**kwargs):
        raise SQLAlchemyError("disk full")

    with session_local() as db:
        _seed_catalog(db)
        monkeypatch.setattr(order_service, "OrderLine", _broken_line)

        with pytest.raises(SQLAlchemyError):
            submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 1)])

    with session_local() as db:
        assert _counts(db) == (0, 0)


def test_delete_order_removes_its_lines(tmp_path: Path) -> None:
    session_local = _session_factory(tmp_path)
    with session_local() as db:
        _seed_catalog(db)
        summary = submit_order(db, customer_name="Ana", payment_method_id=1, lines=[_line(10, 1), _line(11, 1)])
        delete_order(db, summary.order_id)

        assert _counts(db) == (0, 0)
        with pytest.raises(NotFoundError):
            delete_order(db, summary.order_id)
