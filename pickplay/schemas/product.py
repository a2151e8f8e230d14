"""Product and payment method API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ProductCreate(BaseModel):
    """Payload for creating a product."""

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image: str = ""
    description: str | None = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    """Partial product update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    image: str | None = None
    description: str | None = None
    is_active: bool | None = None


class ProductResponse(BaseModel):
    """Serialized product."""

    id: int
    name: str
    price: Decimal
    image: str
    description: str | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class PaymentMethodResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)
