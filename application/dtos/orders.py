"""
Order DTOs (Pydantic v2) exchanged by the checkout and order routes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from application.dtos.payments import Charge


class CartItem(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    price: int = Field(ge=0, description="Unit price in centavos")


class CheckoutRequest(BaseModel):
    user_id: str = Field(min_length=1)
    seller_pix_key: Optional[str] = None
    items: list[CartItem] = Field(min_length=1)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    quantity: int
    price: int


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    total: int
    status: str
    id_transacao: Optional[str] = None
    created_at: Optional[datetime] = None


class CheckoutResult(BaseModel):
    order: OrderResponse
    # None when the order was saved but the charge could not be created
    charge: Optional[Charge] = None


class UpdateOrderStatus(BaseModel):
    status: str = Field(min_length=1, max_length=50)
