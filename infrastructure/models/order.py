"""
订单数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class OrderModel(Base):
    """
    订单数据库模型

    金额单位为分；status 为展示字符串（如 "Aguardando Pagamento"）
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(64), nullable=False, index=True, comment="用户ID")
    total = Column(Integer, nullable=False, comment="订单总额（分）")
    status = Column(String(64), nullable=False, comment="订单展示状态")
    id_transacao = Column(String(128), nullable=True, index=True, comment="OpenPix transactionID")

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<OrderModel(id='{self.id}', user_id='{self.user_id}', "
            f"total={self.total}, status='{self.status}')>"
        )


class OrderItemModel(Base):
    """订单明细数据库模型"""
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="关联的订单ID"
    )
    product_id = Column(String(64), nullable=False, comment="商品ID")
    quantity = Column(Integer, nullable=False, comment="数量")
    price = Column(Integer, nullable=False, comment="单价（分）")

    order = relationship("OrderModel", back_populates="items")

    def __repr__(self):
        return (
            f"<OrderItemModel(id='{self.id}', order_id='{self.order_id}', "
            f"product_id='{self.product_id}', quantity={self.quantity})>"
        )
