"""Order endpoints."""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from pickplay.auth import bind_actor, enforce_permission, require_permission
from pickplay.core.errors import NotFoundError
from pickplay.core.security import get_optional_user
from pickplay.db.session import get_db
from pickplay.models.order import Order
from pickplay.models.user import User
from pickplay.schemas.order import OrderCreate, OrderCreatedResponse, OrderLineResponse, OrderResponse
from pickplay.services.order_service import delete_order, get_order, list_orders, search_orders, submit_order
from pickplay.services.permissions import EntityKind, Operation

router: APIRouter = APIRouter()


def _serialize_order(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        created_at=order.created_at,
        customer_name=order.customer_name,
        total_amount=order.total_amount,
        payment_method_id=order.payment_method_id,
        payment_method_name=order.payment_method.name if order.payment_method is not None else None,
        lines=[
            OrderLineResponse(
                id=line.id,
                product_id=line.product_id,
                product_name=line.product.name if line.product is not None else None,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in order.lines
        ],
    )


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> OrderCreatedResponse:
    """Storefront checkout. Staff tokens are refused by the order-create rule."""
    if current_user is not None:
        enforce_permission(current_user, EntityKind.ORDER, Operation.CREATE)
        bind_actor(request, current_user)
    summary = submit_order(
        db,
        customer_name=payload.customer_name,
        payment_method_id=payload.payment_method_id,
        lines=payload.lines,
    )
    return OrderCreatedResponse(
        order_id=summary.order_id,
        customer_name=summary.customer_name,
        total=summary.total,
        created_at=summary.created_at,
    )


@router.get("", response_model=list[OrderResponse])
def get_orders(
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.ORDER, Operation.LIST)),
) -> list[OrderResponse]:
    return [_serialize_order(order) for order in list_orders(db, limit=limit)]


@router.get("/search", response_model=list[OrderResponse])
def find_orders(
    customer: str = Query(min_length=1),
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.ORDER, Operation.SEARCH)),
) -> list[OrderResponse]:
    return [_serialize_order(order) for order in search_orders(db, customer)]


@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(order_id: int, db: Session = Depends(get_db)) -> OrderResponse:
    """Line detail read path for the storefront confirmation page."""
    order = get_order(db, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found", details={"order_id": order_id})
    return _serialize_order(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_order(
    order_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_permission(EntityKind.ORDER, Operation.DELETE)),
) -> Response:
    delete_order(db, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
