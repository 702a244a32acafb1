"""
订单仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Optional, List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.order.entity import Order, OrderItem
from domain.order.repository import OrderRepository
from infrastructure.models.order import OrderModel, OrderItemModel
from shared.codes.payment_codes import ORDER_STATUS_AWAITING_PAYMENT
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyOrderRepository(OrderRepository):
    """订单仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _item_to_entity(self, model: OrderItemModel) -> OrderItem:
        return OrderItem(
            id=model.id,
            order_id=model.order_id,
            product_id=model.product_id,
            quantity=model.quantity,
            price=model.price,
        )

    def _to_entity(self, model: OrderModel, *, with_items: bool = True) -> Order:
        """将数据库模型转换为领域实体"""
        return Order(
            id=model.id,
            user_id=model.user_id,
            total=model.total,
            status=model.status,
            id_transacao=model.id_transacao,
            items=[self._item_to_entity(i) for i in model.items] if with_items else [],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, order: Order) -> Order:
        """创建订单及其明细"""
        db_order = OrderModel(
            user_id=order.user_id,
            total=order.total,
            status=order.status,
            id_transacao=order.id_transacao,
        )
        if order.id:
            db_order.id = order.id
        db_order.items = [
            OrderItemModel(product_id=i.product_id, quantity=i.quantity, price=i.price)
            for i in order.items
        ]
        self.session.add(db_order)
        # id and timestamps are python-side defaults, populated by the flush
        await self.session.flush()
        logger.info("order_created", order_id=db_order.id, user_id=db_order.user_id, total=db_order.total)
        return self._to_entity(db_order)

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """根据ID获取订单"""
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.id == order_id)
        )
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    async def list_items(self, order_id: str) -> List[OrderItem]:
        result = await self.session.execute(
            select(OrderItemModel).where(OrderItemModel.order_id == order_id)
        )
        return [self._item_to_entity(m) for m in result.scalars().all()]

    async def list_by_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Order]:
        result = await self.session.execute(
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def list_awaiting_payment(self, limit: int = 100) -> List[Order]:
        result = await self.session.execute(
            select(OrderModel)
            .where(
                OrderModel.status == ORDER_STATUS_AWAITING_PAYMENT,
                OrderModel.id_transacao.is_not(None),
            )
            .order_by(OrderModel.created_at.asc())
            .limit(limit)
        )
        return [self._to_entity(m, with_items=False) for m in result.scalars().all()]

    async def set_transaction(self, order_id: str, transaction_id: str) -> None:
        await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(id_transacao=transaction_id)
        )

    async def update_status(self, order_id: str, status: str) -> bool:
        result = await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(status=status)
        )
        return (result.rowcount or 0) > 0

    async def update_status_by_transaction(self, transaction_id: str, status: str) -> int:
        result = await self.session.execute(
            update(OrderModel)
            .where(OrderModel.id_transacao == transaction_id)
            .values(status=status)
        )
        affected = result.rowcount or 0
        logger.info(
            "order_status_updated_by_transaction",
            transaction_id=transaction_id,
            status=status,
            affected=affected,
        )
        return affected
