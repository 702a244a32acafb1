"""
订单路由 - 结账、订单查询与支付状态同步
"""
from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_order_service
from application.dtos.orders import (
    CheckoutRequest,
    OrderItemResponse,
    OrderResponse,
    UpdateOrderStatus,
)
from application.services.order_service import OrderService
from core.config import settings
from core.response import success_response


router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/checkout", status_code=status.HTTP_201_CREATED, summary="Checkout with Pix split")
async def checkout(payload: CheckoutRequest, service: OrderService = Depends(get_order_service)):
    result = await service.checkout(payload)
    message = "Pedido criado" if result.charge else "Pedido criado, mas a cobrança Pix falhou"
    return success_response(data=result.model_dump(mode="json", by_alias=True), message=message)


@router.get("", summary="List user orders")
async def list_orders(
    user_id: str = Query(..., min_length=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: OrderService = Depends(get_order_service),
):
    orders = await service.list_user_orders(user_id, skip=skip, limit=limit)
    return success_response(data=[OrderResponse.model_validate(o).model_dump(mode="json") for o in orders])


@router.get("/{order_id}", summary="Get order")
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    return success_response(data=OrderResponse.model_validate(order).model_dump(mode="json"))


@router.get("/{order_id}/items", summary="Get order items")
async def get_order_items(order_id: str, service: OrderService = Depends(get_order_service)):
    items = await service.get_order_items(order_id)
    return success_response(data=[OrderItemResponse.model_validate(i).model_dump(mode="json") for i in items])


@router.patch("/{order_id}/status", summary="Update order status")
async def update_order_status(
    order_id: str,
    payload: UpdateOrderStatus,
    service: OrderService = Depends(get_order_service),
):
    order = await service.update_order_status(order_id, payload.status)
    return success_response(data=OrderResponse.model_validate(order).model_dump(mode="json"), message="Status atualizado")


@router.post("/{order_id}/sync-payment", summary="Sync payment status from OpenPix")
async def sync_payment(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.sync_payment_status(order_id)
    return success_response(data=OrderResponse.model_validate(order).model_dump(mode="json"))
