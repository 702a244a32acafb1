"""
Payments API routes.

Sub-accounts, split charges, balances/withdrawals and the transaction
listing on top of the application PaymentService. Keep this thin: no HTTP
client details here.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from api.dependencies import get_payment_service
from application.dtos.payments import (
    CreateCharge,
    CreateSubAccount,
    SavePaymentSettings,
    TransactionQuery,
    UpdateSubAccount,
)
from application.services.payment_service import PaymentService
from core.response import success_response


router = APIRouter(prefix="/payments", tags=["Payments"])


class WithdrawRequest(BaseModel):
    # Omitted: the whole balance is withdrawn
    value: Optional[int] = Field(default=None, gt=0)


@router.post("/subaccounts", summary="Create sub-account")
async def create_sub_account(payload: CreateSubAccount, service: PaymentService = Depends(get_payment_service)):
    account = await service.create_sub_account(payload)
    return success_response(data=account.model_dump(mode="json", by_alias=True), message="Subconta criada")


@router.post("/subaccounts/find-or-create", summary="Find or create sub-account")
async def find_or_create_sub_account(payload: CreateSubAccount, service: PaymentService = Depends(get_payment_service)):
    account = await service.find_or_create_sub_account(payload)
    return success_response(data=account.model_dump(mode="json", by_alias=True))


@router.get("/subaccounts", summary="List sub-accounts")
async def list_sub_accounts(service: PaymentService = Depends(get_payment_service)):
    accounts = await service.list_sub_accounts()
    return success_response(data=[a.model_dump(mode="json", by_alias=True) for a in accounts])


@router.put("/subaccounts/{sub_account_id}", summary="Update sub-account")
async def update_sub_account(
    sub_account_id: str,
    payload: UpdateSubAccount,
    service: PaymentService = Depends(get_payment_service),
):
    account = await service.update_sub_account(sub_account_id, payload)
    return success_response(data=account.model_dump(mode="json", by_alias=True), message="Subconta atualizada")


@router.delete("/subaccounts/{sub_account_id}", summary="Delete sub-account")
async def delete_sub_account(sub_account_id: str, service: PaymentService = Depends(get_payment_service)):
    await service.delete_sub_account(sub_account_id)
    return success_response(data={"id": sub_account_id}, message="Subconta removida")


@router.get("/subaccounts/{pix_key}/balance", summary="Sub-account balance")
async def get_sub_account_balance(pix_key: str, service: PaymentService = Depends(get_payment_service)):
    balance = await service.get_sub_account_balance(pix_key)
    return success_response(data={"pix_key": pix_key, "balance": balance})


@router.post("/subaccounts/{pix_key}/withdraw", summary="Withdraw from sub-account")
async def withdraw_from_sub_account(
    pix_key: str,
    payload: Optional[WithdrawRequest] = None,
    service: PaymentService = Depends(get_payment_service),
):
    withdrawal = await service.withdraw(pix_key, payload.value if payload else None)
    return success_response(data=withdrawal.model_dump(mode="json", by_alias=True), message="Saque solicitado")


@router.put("/settings/{user_id}", summary="Save payment settings")
async def save_payment_settings(
    user_id: str,
    payload: SavePaymentSettings,
    service: PaymentService = Depends(get_payment_service),
):
    account = await service.save_payment_settings(user_id, payload)
    return success_response(
        data={
            "pix_key": account.pix_key,
            "pix_key_type": payload.pix_key_type,
            "sub_account": account.model_dump(mode="json", by_alias=True),
        },
        message="Configurações de pagamento salvas",
    )


@router.post("/charges", summary="Create split charge")
async def create_charge(payload: CreateCharge, service: PaymentService = Depends(get_payment_service)):
    charge = await service.create_charge(payload)
    return success_response(data=charge.model_dump(mode="json", by_alias=True), message="Cobrança criada")


@router.get("/charges/{transaction_id}", summary="Charge status")
async def get_charge(transaction_id: str, service: PaymentService = Depends(get_payment_service)):
    charge = await service.get_charge_status(transaction_id)
    return success_response(data=charge.model_dump(mode="json", by_alias=True))


@router.get("/transactions", summary="List transactions")
async def list_transactions(
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    charge: Optional[str] = Query(default=None),
    pix_qr_code: Optional[str] = Query(default=None),
    withdrawal: Optional[str] = Query(default=None),
    skip: Optional[int] = Query(default=None, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    service: PaymentService = Depends(get_payment_service),
):
    query = TransactionQuery(
        start=start,
        end=end,
        charge=charge,
        pix_qr_code=pix_qr_code,
        withdrawal=withdrawal,
        skip=skip,
        limit=limit,
    )
    page = await service.list_transactions(query)
    return success_response(data=page.model_dump(mode="json", by_alias=True))
