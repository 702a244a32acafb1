"""
Application service orchestrating Pix payment use-cases.

This class depends only on the application PixGateway port and DTOs.
Gateway implementations are provided by infrastructure and must be injected
from the composition root (API/tasks), keeping dependencies one-way.
"""
from __future__ import annotations

from typing import Optional

from application.dtos.payments import (
    Charge,
    CreateCharge,
    CreateSubAccount,
    SavePaymentSettings,
    SubAccount,
    TransactionPage,
    TransactionQuery,
    UpdateSubAccount,
    Withdrawal,
)
from application.ports.payment_gateway import PixGateway
from core.logging_config import get_logger
from domain.common.exceptions import SplitExceedsTotalException
from domain.order.service import ensure_valid_pix_key, normalize_pix_key


logger = get_logger(__name__)


class PaymentService:
    def __init__(self, gateway: PixGateway) -> None:
        self.gateway = gateway

    async def create_sub_account(self, req: CreateSubAccount) -> SubAccount:
        logger.info("subaccount_create_request", name=req.name, provider=self.gateway.provider)
        return await self.gateway.create_sub_account(req)

    async def list_sub_accounts(self) -> list[SubAccount]:
        return await self.gateway.list_sub_accounts()

    async def find_or_create_sub_account(self, req: CreateSubAccount) -> SubAccount:
        """Return the sub-account registered for the Pix key, creating it only when absent."""
        key = normalize_pix_key(req.pix_key)
        for account in await self.gateway.list_sub_accounts():
            if normalize_pix_key(account.pix_key) == key:
                logger.info("subaccount_found", name=account.name, pix_key=key)
                return account
        return await self.gateway.create_sub_account(req)

    async def manage_user_sub_account(self, user_id: str, pix_key: str) -> SubAccount:
        """Create a sub-account named after the user. Existing accounts are not looked up."""
        key = normalize_pix_key(pix_key)
        logger.info("user_subaccount_create", user_id=user_id, pix_key=key)
        return await self.gateway.create_sub_account(CreateSubAccount(name=user_id, pix_key=key))

    async def save_payment_settings(self, user_id: str, req: SavePaymentSettings) -> SubAccount:
        key = ensure_valid_pix_key(req.pix_key, req.pix_key_type)
        return await self.manage_user_sub_account(user_id, key)

    async def update_sub_account(self, sub_account_id: str, req: UpdateSubAccount) -> SubAccount:
        return await self.gateway.update_sub_account(sub_account_id, req)

    async def delete_sub_account(self, sub_account_id: str) -> None:
        await self.gateway.delete_sub_account(sub_account_id)
        logger.info("subaccount_deleted", sub_account_id=sub_account_id)

    async def create_charge(self, req: CreateCharge) -> Charge:
        if req.splits_total > req.value:
            raise SplitExceedsTotalException(req.splits_total, req.value)
        logger.info(
            "charge_create_request",
            correlation_id=req.correlation_id,
            value=req.value,
            provider=self.gateway.provider,
        )
        charge = await self.gateway.create_charge_with_split(req)
        logger.info(
            "charge_create_response",
            correlation_id=req.correlation_id,
            transaction_id=charge.reference,
            status=charge.status,
        )
        return charge

    async def get_charge_status(self, transaction_id: str) -> Charge:
        return await self.gateway.get_charge(transaction_id)

    async def get_sub_account_balance(self, pix_key: str) -> int:
        return await self.gateway.get_sub_account_balance(pix_key)

    async def withdraw(self, pix_key: str, value: Optional[int] = None) -> Withdrawal:
        logger.info("subaccount_withdraw_request", pix_key=normalize_pix_key(pix_key), value=value)
        return await self.gateway.withdraw_from_sub_account(pix_key, value)

    async def list_transactions(self, query: TransactionQuery) -> TransactionPage:
        return await self.gateway.list_transactions(query)

    async def aclose(self) -> None:
        await self.gateway.aclose()
