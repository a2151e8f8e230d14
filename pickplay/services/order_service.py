"""Order transaction engine.

Turns a customer submission into one Order plus its OrderLines inside a
single transaction. Every line is validated against live catalog state and
priced from it before anything is written; the unit price read during
validation is copied into the line so later catalog edits never reach
historical orders. This module is the only writer of ``orders`` and
``order_lines``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from pickplay.core.errors import ConflictError, NotFoundError, ValidationError
from pickplay.models.catalog import Product
from pickplay.models.order import Order, OrderLine
from pickplay.services.catalog_service import get_payment_method_by_id, get_product_by_id

logger = logging.getLogger(__name__)


class LineRequest(Protocol):
    product_id: Any
    quantity: Any


@dataclass(frozen=True)
class PricedLine:
    position: int
    product: Product
    quantity: int
    unit_price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderSummary:
    order_id: int
    customer_name: str
    total: Decimal
    created_at: datetime


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return _is_int(value) and value > 0


def validate_submission(customer_name: Any, payment_method_id: Any, lines: Sequence[LineRequest] | None) -> str:
    """Structural checks. Returns the normalized customer name."""
    name = customer_name.strip() if isinstance(customer_name, str) else ""
    if not name:
        raise ValidationError("Customer name is required", details={"field": "customer_name"})
    if payment_method_id is None:
        raise ValidationError("Payment method is required", details={"field": "payment_method_id"})
    if not _is_int(payment_method_id):
        raise ValidationError("Payment method id must be an integer", details={"field": "payment_method_id"})
    if not lines:
        raise ValidationError("An order must contain at least one product", details={"field": "lines"})
    for position, line in enumerate(lines, start=1):
        if line.product_id is None:
            raise ValidationError(
                f"Line {position} is missing a product id",
                details={"field": "product_id", "line": position},
            )
        if not _is_int(line.product_id):
            raise ValidationError(
                f"Line {position}: product id must be an integer",
                details={"field": "product_id", "line": position},
            )
        if not _is_positive_int(line.quantity):
            raise ValidationError(
                f"Line {position}: quantity must be a positive integer",
                details={"field": "quantity", "line": position, "product_id": line.product_id},
            )
    return name


def price_lines(db: Session, lines: Sequence[LineRequest]) -> list[PricedLine]:
    """Validate each line against the catalog, in input order, and snapshot its price."""
    priced: list[PricedLine] = []
    for position, line in enumerate(lines, start=1):
        product = get_product_by_id(db, line.product_id)
        if product is None:
            raise NotFoundError(
                f"Product with id {line.product_id} not found (line {position})",
                details={"line": position, "product_id": line.product_id},
            )
        if not product.is_active:
            raise ConflictError(
                f"Product '{product.name}' is not active (line {position})",
                details={"line": position, "product_id": product.id},
            )
        priced.append(PricedLine(position=position, product=product, quantity=line.quantity, unit_price=Decimal(product.price)))
    return priced


def _ensure_payment_method(db: Session, payment_method_id: int) -> None:
    payment_method = get_payment_method_by_id(db, payment_method_id)
    if payment_method is None:
        raise NotFoundError(
            f"Payment method with id {payment_method_id} not found",
            details={"payment_method_id": payment_method_id},
        )
    if not payment_method.is_active:
        raise ConflictError(
            f"Payment method '{payment_method.name}' is not active",
            details={"payment_method_id": payment_method_id},
        )


def submit_order(
    db: Session,
    *,
    customer_name: str | None,
    payment_method_id: int | None,
    lines: Sequence[LineRequest] | None,
) -> OrderSummary:
    """Validate, price and persist an order atomically.

    Raises ``ValidationError``, ``NotFoundError`` or ``ConflictError`` before
    any row is written. Storage failures roll the whole unit back and are
    re-raised.
    """
    name = validate_submission(customer_name, payment_method_id, lines)
    _ensure_payment_method(db, payment_method_id)
    priced = price_lines(db, lines)
    total = sum((line.subtotal for line in priced), Decimal("0"))

    try:
        order = Order(customer_name=name, total_amount=total, payment_method_id=payment_method_id)
        db.add(order)
        db.flush()
        db.add_all(
            OrderLine(
                order_id=order.id,
                product_id=line.product.id,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in priced
        )
        db.flush()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[ORDER] Failed to persist order for customer=%s; rolled back", name)
        raise

    db.refresh(order)
    logger.info("[ORDER] Created order_id=%s lines=%s total=%s", order.id, len(priced), total)
    return OrderSummary(order_id=order.id, customer_name=order.customer_name, total=total, created_at=order.created_at)


def get_order(db: Session, order_id: int) -> Order | None:
    """Return an order with its lines and payment method loaded."""
    return db.scalar(
        select(Order)
        .where(Order.id == order_id)
        .options(selectinload(Order.lines).selectinload(OrderLine.product), selectinload(Order.payment_method))
    )


def list_orders(db: Session, *, limit: int = 100) -> list[Order]:
    return list(
        db.scalars(
            select(Order)
            .options(selectinload(Order.lines), selectinload(Order.payment_method))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        ).all()
    )


def search_orders(db: Session, customer: str, *, limit: int = 100) -> list[Order]:
    return list(
        db.scalars(
            select(Order)
            .where(Order.customer_name.ilike(f"%{customer.strip()}%"))
            .options(selectinload(Order.lines), selectinload(Order.payment_method))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        ).all()
    )


def delete_order(db: Session, order_id: int) -> None:
    """Delete an order; its lines go with it."""
    order = db.get(Order, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    db.delete(order)
    db.commit()
    logger.info("[ORDER] Deleted order_id=%s", order_id)
