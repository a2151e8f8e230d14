"""Catalog store: product and payment method lookups plus product administration."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pickplay.core.errors import ConflictError, NotFoundError
from pickplay.models.catalog import PaymentMethod, Product


def get_product_by_id(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def get_payment_method_by_id(db: Session, payment_method_id: int) -> PaymentMethod | None:
    return db.get(PaymentMethod, payment_method_id)


def list_products(db: Session, *, active_only: bool = False) -> list[Product]:
    stmt = select(Product).order_by(Product.id.asc())
    if active_only:
        stmt = stmt.where(Product.is_active.is_(True))
    return list(db.scalars(stmt).all())


def search_products(db: Session, query: str, *, active_only: bool = True) -> list[Product]:
    """Case-insensitive name/description search for the storefront."""
    pattern = f"%{query.strip()}%"
    stmt = (
        select(Product)
        .where(Product.name.ilike(pattern) | Product.description.ilike(pattern))
        .order_by(Product.name.asc())
    )
    if active_only:
        stmt = stmt.where(Product.is_active.is_(True))
    return list(db.scalars(stmt).all())


def list_active_payment_methods(db: Session) -> list[PaymentMethod]:
    return list(db.scalars(select(PaymentMethod).where(PaymentMethod.is_active.is_(True)).order_by(PaymentMethod.id.asc())).all())


def _commit_product(db: Session, product: Product) -> Product:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"A product named '{product.name}' already exists", details={"name": product.name}) from exc
    db.refresh(product)
    return product


def create_product(
    db: Session,
    *,
    name: str,
    price: Decimal,
    image: str,
    description: str | None = None,
    is_active: bool = True,
) -> Product:
    """Create and persist a product."""
    product = Product(name=name.strip(), price=price, image=image, description=description, is_active=is_active)
    db.add(product)
    return _commit_product(db, product)


def update_product(db: Session, product_id: int, changes: dict) -> Product:
    """Apply a partial update to an existing product."""
    product = get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    for field, value in changes.items():
        if value is None and field != "description":
            continue
        setattr(product, field, value.strip() if field == "name" and isinstance(value, str) else value)
    return _commit_product(db, product)


def delete_product(db: Session, product_id: int) -> None:
    product = get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    db.delete(product)
    db.commit()
