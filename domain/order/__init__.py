"""Order domain exports."""
from .entity import Order, OrderItem
from .repository import OrderRepository

__all__ = ["Order", "OrderItem", "OrderRepository"]
