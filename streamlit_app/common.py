"""Shared helpers for the Streamlit storefront and audit dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from pickplay.db import session as db_session
from pickplay.db.base import Base
from pickplay.db.seed import ensure_seed_data
from pickplay.schemas.order import OrderLinePayload


def get_session() -> Session:
    """Open a session, creating the schema and vocabularies on first use."""
    Base.metadata.create_all(bind=db_session.engine)
    db = db_session.open_session()
    ensure_seed_data(db)
    return db


def now_string() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M")


def format_money(amount: Decimal | int | float) -> str:
    return f"${Decimal(amount):,.2f}"


def build_order_lines(quantities: dict[int, int]) -> list[OrderLinePayload]:
    """Turn the product -> quantity form state into order lines, skipping zeros."""
    return [
        OrderLinePayload(product_id=product_id, quantity=int(quantity))
        for product_id, quantity in quantities.items()
        if int(quantity) > 0
    ]


@dataclass
class DashboardSession:
    """Signed-in staff member for one dashboard browser session."""

    user_id: int
    username: str
    role: str
