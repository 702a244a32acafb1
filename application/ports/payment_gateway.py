"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

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


@runtime_checkable
class PixGateway(Protocol):
    """Gateway protocol for Pix providers with split/sub-account support.

    Every call is a single independent request; implementations keep no
    state between calls beyond the HTTP connection pool.
    """

    provider: str

    async def create_sub_account(self, req: CreateSubAccount) -> SubAccount: ...

    async def list_sub_accounts(self) -> list[SubAccount]: ...

    async def update_sub_account(self, sub_account_id: str, req: UpdateSubAccount) -> SubAccount: ...

    async def delete_sub_account(self, sub_account_id: str) -> None: ...

    async def create_charge_with_split(self, req: CreateCharge) -> Charge: ...

    async def get_charge(self, transaction_id: str) -> Charge: ...

    async def get_sub_account_balance(self, pix_key: str) -> int: ...

    async def withdraw_from_sub_account(self, pix_key: str, value: Optional[int] = None) -> Withdrawal: ...

    async def list_transactions(self, query: TransactionQuery) -> TransactionPage: ...

    async def aclose(self) -> None: ...
