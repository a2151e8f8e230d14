"""Payment method lookups for the storefront."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pickplay.db.session import get_db
from pickplay.models.catalog import PaymentMethod
from pickplay.schemas.product import PaymentMethodResponse
from pickplay.services.catalog_service import list_active_payment_methods

router: APIRouter = APIRouter()


@router.get("/active", response_model=list[PaymentMethodResponse])
def get_active_payment_methods(db: Session = Depends(get_db)) -> list[PaymentMethod]:
    return list_active_payment_methods(db)
