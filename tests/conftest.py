"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OPENPIX__APP_ID", "test-app-id")
os.environ.setdefault("OPENPIX__MAIN_PIX_KEY", "plataforma@arena.test")

import copy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

import pytest

from application.dtos.payments import (
    Charge,
    CreateCharge,
    CreateSubAccount,
    SubAccount,
    TransactionPage,
    TransactionQuery,
    UpdateSubAccount,
    Withdrawal,
)
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.entity import Order, OrderItem
from domain.order.repository import OrderRepository
from shared.codes.payment_codes import ORDER_STATUS_AWAITING_PAYMENT


class InMemoryOrderRepository(OrderRepository):
    """Dict-backed order store shared by every unit of work of a test."""

    def __init__(self) -> None:
        self.orders: dict[str, Order] = {}
        self.calls: list[str] = []
        self._seq = 0

    async def create(self, order: Order) -> Order:
        self.calls.append("create")
        self._seq += 1
        stored = copy.deepcopy(order)
        stored.id = stored.id or f"order-{self._seq}"
        stored.created_at = datetime.now(timezone.utc)
        for idx, item in enumerate(stored.items, start=1):
            item.id = f"{stored.id}-item-{idx}"
            item.order_id = stored.id
        self.orders[stored.id] = stored
        return copy.deepcopy(stored)

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        self.calls.append("get_by_id")
        order = self.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def list_items(self, order_id: str) -> List[OrderItem]:
        self.calls.append("list_items")
        order = self.orders.get(order_id)
        return copy.deepcopy(order.items) if order else []

    async def list_by_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Order]:
        self.calls.append("list_by_user")
        found = [o for o in self.orders.values() if o.user_id == user_id]
        found.sort(key=lambda o: o.created_at, reverse=True)
        return copy.deepcopy(found[skip: skip + limit])

    async def list_awaiting_payment(self, limit: int = 100) -> List[Order]:
        self.calls.append("list_awaiting_payment")
        found = [
            o for o in self.orders.values()
            if o.status == ORDER_STATUS_AWAITING_PAYMENT and o.id_transacao
        ]
        return copy.deepcopy(found[:limit])

    async def set_transaction(self, order_id: str, transaction_id: str) -> None:
        self.calls.append("set_transaction")
        if order_id in self.orders:
            self.orders[order_id].id_transacao = transaction_id

    async def update_status(self, order_id: str, status: str) -> bool:
        self.calls.append("update_status")
        if order_id not in self.orders:
            return False
        self.orders[order_id].status = status
        return True

    async def update_status_by_transaction(self, transaction_id: str, status: str) -> int:
        self.calls.append("update_status_by_transaction")
        affected = 0
        for order in self.orders.values():
            if order.id_transacao == transaction_id:
                order.status = status
                affected += 1
        return affected


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, repository: InMemoryOrderRepository, *, readonly: bool = False) -> None:
        super().__init__(readonly=readonly)
        self.order_repository = repository

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self._committed = False


class StubGateway:
    """PixGateway stand-in recording calls; responses are configurable per test."""

    provider = "stub"

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.sub_accounts: list[SubAccount] = []
        self.charge_status = "ACTIVE"
        self.charge_error: Optional[Exception] = None
        self.balance = 0
        self.closed = False

    async def create_sub_account(self, req: CreateSubAccount) -> SubAccount:
        self.calls.append(("create_sub_account", req.name, req.pix_key))
        account = SubAccount(id=f"sub-{len(self.sub_accounts) + 1}", name=req.name, pix_key=req.pix_key, balance=0)
        self.sub_accounts.append(account)
        return account

    async def list_sub_accounts(self) -> list[SubAccount]:
        self.calls.append(("list_sub_accounts",))
        return list(self.sub_accounts)

    async def update_sub_account(self, sub_account_id: str, req: UpdateSubAccount) -> SubAccount:
        self.calls.append(("update_sub_account", sub_account_id))
        return SubAccount(id=sub_account_id, name=req.name or "x", pix_key=req.pix_key or "k")

    async def delete_sub_account(self, sub_account_id: str) -> None:
        self.calls.append(("delete_sub_account", sub_account_id))

    async def create_charge_with_split(self, req: CreateCharge) -> Charge:
        self.calls.append(("create_charge_with_split", req))
        if self.charge_error is not None:
            raise self.charge_error
        return Charge(
            correlation_id=req.correlation_id,
            value=req.value,
            status="ACTIVE",
            transaction_id=f"tx-{req.correlation_id[:8]}",
            br_code="000201...",
            qr_code_image="https://api.openpix.com.br/openpix/charge/brcode/image/x.png",
            splits=req.splits,
        )

    async def get_charge(self, transaction_id: str) -> Charge:
        self.calls.append(("get_charge", transaction_id))
        return Charge(value=100, status=self.charge_status, transaction_id=transaction_id)

    async def get_sub_account_balance(self, pix_key: str) -> int:
        self.calls.append(("get_sub_account_balance", pix_key))
        return self.balance

    async def withdraw_from_sub_account(self, pix_key: str, value: Optional[int] = None) -> Withdrawal:
        self.calls.append(("withdraw_from_sub_account", pix_key, value))
        return Withdrawal(status="CREATED", value=value if value is not None else self.balance)

    async def list_transactions(self, query: TransactionQuery) -> TransactionPage:
        self.calls.append(("list_transactions", query.to_params()))
        return TransactionPage()

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def uow_factory(order_repository):
    def _factory(readonly: bool = False) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(order_repository, readonly=readonly)
    return _factory


@pytest.fixture
def stub_gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def fee_rate() -> Decimal:
    return Decimal("0.15")
