"""
订单仓储接口 - 定义订单数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Order, OrderItem


class OrderRepository(ABC):
    """订单仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """创建订单及其明细"""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """根据ID获取订单"""
        pass

    @abstractmethod
    async def list_items(self, order_id: str) -> List[OrderItem]:
        """获取订单明细"""
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Order]:
        """获取用户订单，按创建时间倒序"""
        pass

    @abstractmethod
    async def list_awaiting_payment(self, limit: int = 100) -> List[Order]:
        """获取仍在等待支付且已关联交易的订单"""
        pass

    @abstractmethod
    async def set_transaction(self, order_id: str, transaction_id: str) -> None:
        """记录订单的 id_transacao"""
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: str) -> bool:
        """按订单ID更新状态，返回是否命中"""
        pass

    @abstractmethod
    async def update_status_by_transaction(self, transaction_id: str, status: str) -> int:
        """按 id_transacao 更新状态，返回受影响行数"""
        pass
