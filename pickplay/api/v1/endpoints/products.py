"""Product catalog endpoints. Mutations are gated and picked up by the audit stage."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from pickplay.auth import require_permission
from pickplay.core.errors import NotFoundError
from pickplay.db.session import get_db
from pickplay.models.catalog import Product
from pickplay.models.user import User
from pickplay.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from pickplay.services.catalog_service import (
    create_product,
    delete_product,
    get_product_by_id,
    list_products,
    search_products,
    update_product,
)
from pickplay.services.permissions import EntityKind, Operation

router: APIRouter = APIRouter()


@router.get("", response_model=list[ProductResponse])
def get_products(db: Session = Depends(get_db)) -> list[Product]:
    return list_products(db)


@router.get("/active", response_model=list[ProductResponse])
def get_active_products(db: Session = Depends(get_db)) -> list[Product]:
    return list_products(db, active_only=True)


@router.get("/search", response_model=list[ProductResponse])
def find_products(q: str = Query(min_length=1), db: Session = Depends(get_db)) -> list[Product]:
    return search_products(db, q)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)) -> Product:
    product = get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found", details={"product_id": product_id})
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.PRODUCT, Operation.CREATE)),
) -> Product:
    return create_product(
        db,
        name=payload.name,
        price=payload.price,
        image=payload.image,
        description=payload.description,
        is_active=payload.is_active,
    )


@router.put("/{product_id}", response_model=ProductResponse)
def edit_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.PRODUCT, Operation.UPDATE)),
) -> Product:
    return update_product(db, product_id, payload.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_product(
    product_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.PRODUCT, Operation.DELETE)),
) -> Response:
    delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
