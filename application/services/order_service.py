"""
订单应用服务（application/services）- 结账、订单查询与支付状态同步
"""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Callable, List, Optional

from application.dtos.orders import CheckoutRequest, CheckoutResult, OrderResponse
from application.dtos.payments import Charge, CreateCharge, Split
from application.ports.payment_gateway import PixGateway
from core.logging_config import get_logger
from domain.common.exceptions import (
    DomainValidationException,
    OrderNotFoundException,
    OrderWithoutTransactionException,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.entity import Order, OrderItem
from domain.order.service import compute_split, normalize_pix_key
from infrastructure.external.payments.exceptions import PaymentProviderError
from shared.codes.payment_codes import translate_charge_status


logger = get_logger(__name__)

SPLIT_TYPE_SUB_ACCOUNT = "SPLIT_SUB_ACCOUNT"


class OrderService:
    """订单应用服务 - 编排订单仓储与 Pix 网关"""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: PixGateway,
        *,
        fee_rate: Decimal,
        main_pix_key: Optional[str] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self.gateway = gateway
        self.fee_rate = fee_rate
        self.main_pix_key = normalize_pix_key(main_pix_key or "")

    async def checkout(self, req: CheckoutRequest) -> CheckoutResult:
        """创建订单并发起分账收款。

        收款失败时订单仍保留（状态为等待支付、无 id_transacao），
        返回结果中 charge 为 None。
        """
        seller_key = normalize_pix_key(req.seller_pix_key or "") or self.main_pix_key
        if not seller_key:
            raise DomainValidationException(
                "Nenhuma chave Pix disponível para o split (vendedor ou principal).",
                field="seller_pix_key",
            )

        items = [OrderItem(product_id=i.product_id, quantity=i.quantity, price=i.price) for i in req.items]
        draft = Order.from_items(req.user_id, items)
        async with self._uow_factory() as uow:
            order = await uow.order_repository.create(draft)

        parts = compute_split(order.total, self.fee_rate)
        charge_req = CreateCharge(
            value=order.total,
            correlation_id=str(uuid.uuid4()),
            splits=[Split(pix_key=seller_key, value=parts.seller, split_type=SPLIT_TYPE_SUB_ACCOUNT)],
        )
        charge: Optional[Charge] = None
        try:
            charge = await self.gateway.create_charge_with_split(charge_req)
        except PaymentProviderError as exc:
            logger.error(
                "checkout_charge_failed",
                order_id=order.id,
                kind=exc.kind.value,
                status_code=exc.status_code,
            )
            return CheckoutResult(order=OrderResponse.model_validate(order), charge=None)

        if charge.reference:
            async with self._uow_factory() as uow:
                await uow.order_repository.set_transaction(order.id, charge.reference)
            order.attach_transaction(charge.reference)
        else:
            logger.warning("checkout_charge_without_reference", order_id=order.id)

        logger.info(
            "checkout_completed",
            order_id=order.id,
            total=order.total,
            platform_part=parts.platform,
            seller_part=parts.seller,
            transaction_id=order.id_transacao,
        )
        return CheckoutResult(order=OrderResponse.model_validate(order), charge=charge)

    async def list_user_orders(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Order]:
        async with self._uow_factory(readonly=True) as uow:
            return await uow.order_repository.list_by_user(user_id, skip=skip, limit=limit)

    async def get_order(self, order_id: str) -> Order:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    async def get_order_items(self, order_id: str) -> List[OrderItem]:
        async with self._uow_factory(readonly=True) as uow:
            if await uow.order_repository.get_by_id(order_id) is None:
                raise OrderNotFoundException(order_id)
            return await uow.order_repository.list_items(order_id)

    async def update_order_status(self, order_id: str, status: str) -> Order:
        """卖家手动修改订单状态（自由文本）"""
        order = await self.get_order(order_id)
        order.change_status(status)
        async with self._uow_factory() as uow:
            await uow.order_repository.update_status(order_id, order.status)
        logger.info("order_status_changed", order_id=order_id, status=order.status)
        return order

    async def sync_payment_status(self, order_id: str) -> Order:
        """向 OpenPix 查询收款状态并写回订单"""
        order = await self.get_order(order_id)
        if not order.id_transacao:
            raise OrderWithoutTransactionException(order_id)

        charge = await self.gateway.get_charge(order.id_transacao)
        status = translate_charge_status(charge.status)
        if status != order.status:
            async with self._uow_factory() as uow:
                await uow.order_repository.update_status(order_id, status)
            logger.info(
                "order_payment_synced",
                order_id=order_id,
                charge_status=charge.status,
                status=status,
            )
        order.change_status(status)
        return order

    async def sync_pending(self, limit: int = 100) -> int:
        """同步所有等待支付的订单，返回状态发生变化的订单数"""
        async with self._uow_factory(readonly=True) as uow:
            pending = await uow.order_repository.list_awaiting_payment(limit=limit)

        changed = 0
        for order in pending:
            try:
                synced = await self.sync_payment_status(order.id)
            except PaymentProviderError as exc:
                logger.warning(
                    "order_payment_sync_failed",
                    order_id=order.id,
                    kind=exc.kind.value,
                    status_code=exc.status_code,
                )
                continue
            if synced.status != order.status:
                changed += 1
        logger.info("pending_orders_synced", checked=len(pending), changed=changed)
        return changed
