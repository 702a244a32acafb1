"""
OpenPix (Woovi) adapter over the REST API v1 using httpx.

Covers sub-accounts, split charges, sub-account balance/withdrawal and the
transaction listing. Each method is one request; non-2xx answers raise
OpenPixError with the HTTP status and the raw body.
"""
from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

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
from core.settings import OpenPixSettings
from domain.common.exceptions import DomainValidationException, SplitExceedsTotalException
from domain.order.service import normalize_pix_key
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import OpenPixError, OpenPixErrorKind


# The provider reports "no sub-accounts" as an error payload
NO_SUB_ACCOUNTS_MARKERS = (
    "não foram encontradas subcontas",
    "no subaccounts found",
    "subcontas não encontradas",
)


def _path_key(value: str) -> str:
    return quote(value, safe="@+")


class OpenPixClient(BasePaymentClient):
    provider = "openpix"

    def __init__(self, config: OpenPixSettings, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not config.app_id:
            raise RuntimeError("Credenciais OpenPix não configuradas (OPENPIX__APP_ID).")
        super().__init__(
            base_url=config.base_url,
            headers={"Authorization": config.app_id},
            timeouts=config.timeouts.model_dump(),
            retry={"max": config.retry.max, "base": config.retry.base_backoff},
            transport=transport,
        )
        self.config = config

    # Sub-accounts

    async def create_sub_account(self, req: CreateSubAccount) -> SubAccount:
        action = "Falha ao criar subconta"
        payload = {"name": req.name, "pixKey": normalize_pix_key(req.pix_key)}
        self._log("openpix_subaccount_create", name=req.name, pix_key=payload["pixKey"])
        response = await self._send("POST", "/subaccount", action=action, json=payload)
        self._raise_for_status(response, action)
        data = self._json(response, action)
        raw = data.get("subAccount") or data.get("SubAccount")
        if not raw:
            # An empty 2xx answer means the key was already registered
            raise OpenPixError(
                action,
                status_code=response.status_code,
                body=response.text,
                kind=OpenPixErrorKind.CONFLICT,
            )
        return SubAccount.model_validate(raw)

    async def list_sub_accounts(self) -> list[SubAccount]:
        action = "Falha ao buscar subcontas"
        response = await self._send("GET", "/subaccount", action=action)
        if not response.is_success:
            body = response.text
            lowered = body.lower()
            if response.status_code == 404 or any(marker in lowered for marker in NO_SUB_ACCOUNTS_MARKERS):
                self._log("openpix_subaccounts_empty", status_code=response.status_code)
                return []
            raise OpenPixError(action, status_code=response.status_code, body=body)
        data = self._json(response, action)
        return [SubAccount.model_validate(item) for item in data.get("subAccounts") or []]

    async def update_sub_account(self, sub_account_id: str, req: UpdateSubAccount) -> SubAccount:
        action = "Falha ao atualizar subconta"
        payload = req.model_dump(by_alias=True, exclude_none=True)
        if "pixKey" in payload:
            payload["pixKey"] = normalize_pix_key(payload["pixKey"])
        response = await self._send("PUT", f"/subaccount/{_path_key(sub_account_id)}", action=action, json=payload)
        self._raise_for_status(response, action)
        data = self._json(response, action)
        raw = data.get("subAccount") or data.get("SubAccount")
        if not raw:
            raise OpenPixError(action, status_code=response.status_code, body=response.text, kind=OpenPixErrorKind.UNKNOWN)
        return SubAccount.model_validate(raw)

    async def delete_sub_account(self, sub_account_id: str) -> None:
        action = "Falha ao deletar subconta"
        response = await self._send("DELETE", f"/subaccount/{_path_key(sub_account_id)}", action=action)
        self._raise_for_status(response, action)
        self._log("openpix_subaccount_deleted", sub_account_id=sub_account_id)

    async def get_sub_account_balance(self, pix_key: str) -> int:
        action = "Falha ao buscar saldo da subconta"
        key = normalize_pix_key(pix_key)
        response = await self._send("GET", f"/subaccount/{_path_key(key)}", action=action)
        self._raise_for_status(response, action)
        data = self._json(response, action)
        raw = data.get("SubAccount") or data.get("subAccount") or {}
        return int(raw.get("balance") or 0)

    async def withdraw_from_sub_account(self, pix_key: str, value: Optional[int] = None) -> Withdrawal:
        action = "Falha ao sacar da subconta"
        if value is not None and value <= 0:
            raise DomainValidationException(f"Valor de saque inválido: {value}", field="value")
        key = normalize_pix_key(pix_key)
        payload = {"value": value} if value is not None else None
        response = await self._send("POST", f"/subaccount/{_path_key(key)}/withdraw", action=action, json=payload)
        self._raise_for_status(response, action)
        data = self._json(response, action)
        raw = data.get("transaction") or data.get("withdraw") or data
        withdrawal = Withdrawal.model_validate(raw)
        self._log("openpix_withdraw_requested", pix_key=key, value=withdrawal.value, status=withdrawal.status)
        return withdrawal

    # Charges

    async def create_charge_with_split(self, req: CreateCharge) -> Charge:
        action = "Falha ao criar cobrança"
        if req.splits_total > req.value:
            raise SplitExceedsTotalException(req.splits_total, req.value)
        body: dict[str, Any] = {
            "value": req.value,
            "correlationID": req.correlation_id,
            "splits": [s.model_dump(by_alias=True, exclude_none=True) for s in req.splits],
        }
        if req.additional_info:
            body["additionalInfo"] = req.additional_info
        response = await self._send("POST", "/charge", action=action, json=body)
        self._raise_for_status(response, action)
        charge = self._charge_from(self._json(response, action), response, action)
        self._log(
            "openpix_charge_created",
            correlation_id=req.correlation_id,
            value=charge.value,
            status=charge.status,
            splits=len(req.splits),
        )
        return charge

    async def get_charge(self, transaction_id: str) -> Charge:
        action = "Falha ao buscar cobrança"
        response = await self._send("GET", f"/charge/{_path_key(transaction_id)}", action=action)
        self._raise_for_status(response, action)
        return self._charge_from(self._json(response, action), response, action)

    # Transactions

    async def list_transactions(self, query: TransactionQuery) -> TransactionPage:
        action = "Falha ao listar transações"
        response = await self._send("GET", "/transaction", action=action, params=query.to_params())
        self._raise_for_status(response, action)
        return TransactionPage.model_validate(self._json(response, action))

    def _charge_from(self, data: dict[str, Any], response: httpx.Response, action: str) -> Charge:
        raw = data.get("charge")
        if not isinstance(raw, dict):
            raise OpenPixError(action, status_code=response.status_code, body=response.text, kind=OpenPixErrorKind.UNKNOWN)
        # brCode is sometimes only returned next to the charge object
        if not raw.get("brCode") and data.get("brCode"):
            raw = {**raw, "brCode": data["brCode"]}
        return Charge.model_validate(raw)
