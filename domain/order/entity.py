"""
订单领域实体 - 订单聚合根

订单状态是自由文本（展示字符串），不是受控状态机：支付状态由 OpenPix
管理，本地只记录翻译后的展示值。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List

from domain.common.exceptions import DomainValidationException
from shared.codes.payment_codes import (
    ORDER_STATUS_AWAITING_PAYMENT,
    ORDER_STATUS_PAYMENT_CONFIRMED,
    ORDER_STATUS_EXPIRED,
)


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class OrderItem:
    """订单明细 - Order 聚合的一部分（金额单位：分）"""

    product_id: str
    quantity: int
    price: int
    id: Optional[str] = None
    order_id: Optional[str] = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise DomainValidationException(
                f"商品数量必须大于0: {self.quantity}",
                field="quantity"
            )
        if self.price < 0:
            raise DomainValidationException(
                f"商品价格不能为负: {self.price}",
                field="price"
            )

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


@dataclass
class Order:
    """
    订单聚合根

    业务规则：
    1. 总额（分）等于所有明细 price * quantity 之和
    2. id_transacao 关联 OpenPix 的 transactionID，可为空
    3. status 为展示字符串，由结账、Webhook 与轮询写入
    """

    id: Optional[str]
    user_id: str
    total: int
    status: str = ORDER_STATUS_AWAITING_PAYMENT
    id_transacao: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.total < 0:
            raise DomainValidationException(
                f"订单总额不能为负: {self.total}",
                field="total"
            )
        self.created_at = _ensure_utc(self.created_at)
        self.updated_at = _ensure_utc(self.updated_at)

    @classmethod
    def from_items(cls, user_id: str, items: List[OrderItem]) -> "Order":
        """根据购物车明细创建待支付订单"""
        if not items:
            raise DomainValidationException("订单至少需要一个商品", field="items")
        total = sum(item.subtotal for item in items)
        if total <= 0:
            raise DomainValidationException("Valor total do pedido deve ser maior que zero", field="items")
        return cls(id=None, user_id=user_id, total=total, items=list(items))

    def attach_transaction(self, transaction_id: str) -> None:
        self.id_transacao = transaction_id
        self.updated_at = datetime.now(timezone.utc)

    def change_status(self, status: str) -> None:
        if not status or not status.strip():
            raise DomainValidationException("订单状态不能为空", field="status")
        self.status = status.strip()
        self.updated_at = datetime.now(timezone.utc)

    def is_awaiting_payment(self) -> bool:
        return self.status == ORDER_STATUS_AWAITING_PAYMENT

    def is_paid(self) -> bool:
        return self.status == ORDER_STATUS_PAYMENT_CONFIRMED

    def is_expired(self) -> bool:
        return self.status == ORDER_STATUS_EXPIRED
