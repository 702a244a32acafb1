"""
Payment DTOs (Pydantic v2) used at application boundaries.

Field names are snake_case in Python and camelCase on the wire, matching
the OpenPix REST payloads (`correlationID`, `brCode`, `pixKey`, ...).
Amounts are always integers in centavos.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Split(_WireModel):
    pix_key: str = Field(alias="pixKey")
    value: int = Field(ge=0)
    split_type: Optional[str] = Field(default=None, alias="splitType")

    @field_validator("pix_key")
    @classmethod
    def _strip_pix_key(cls, v: str) -> str:
        return v.strip()


class CreateCharge(_WireModel):
    value: int = Field(gt=0)
    correlation_id: str = Field(alias="correlationID", min_length=1)
    splits: list[Split] = Field(default_factory=list)
    additional_info: Optional[list[dict[str, Any]] | dict[str, Any]] = Field(default=None, alias="additionalInfo")

    @property
    def splits_total(self) -> int:
        return sum(s.value for s in self.splits)


class Charge(_WireModel):
    correlation_id: Optional[str] = Field(default=None, alias="correlationID")
    value: int
    status: str
    transaction_id: Optional[str] = Field(default=None, alias="transactionID")
    identifier: Optional[str] = None
    global_id: Optional[str] = Field(default=None, alias="globalID")
    expires_date: Optional[datetime] = Field(default=None, alias="expiresDate")
    br_code: Optional[str] = Field(default=None, alias="brCode")
    qr_code_image: Optional[str] = Field(default=None, alias="qrCodeImage")
    payment_link_url: Optional[str] = Field(default=None, alias="paymentLinkUrl")
    splits: list[Split] = Field(default_factory=list)

    @property
    def reference(self) -> Optional[str]:
        """Identifier later echoed back by webhooks (stored as id_transacao)."""
        return self.transaction_id or self.identifier


class CreateSubAccount(_WireModel):
    name: str = Field(min_length=1)
    pix_key: str = Field(alias="pixKey", min_length=1)

    @field_validator("pix_key")
    @classmethod
    def _strip_pix_key(cls, v: str) -> str:
        return v.strip()


class UpdateSubAccount(_WireModel):
    name: Optional[str] = None
    pix_key: Optional[str] = Field(default=None, alias="pixKey")


class SubAccount(_WireModel):
    id: Optional[str] = None
    name: str
    pix_key: str = Field(alias="pixKey")
    balance: Optional[int] = None


class Withdrawal(_WireModel):
    status: str
    value: int
    correlation_id: Optional[str] = Field(default=None, alias="correlationID")
    destination_alias: Optional[str] = Field(default=None, alias="destinationAlias")
    comment: Optional[str] = None


class TransactionQuery(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    charge: Optional[str] = None
    pix_qr_code: Optional[str] = None
    withdrawal: Optional[str] = None
    skip: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, ge=1)

    def to_params(self) -> dict[str, Any]:
        params = {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "charge": self.charge,
            "pixQrCode": self.pix_qr_code,
            "withdrawal": self.withdrawal,
            "skip": self.skip,
            "limit": self.limit,
        }
        return {k: v for k, v in params.items() if v is not None}


class Transaction(_WireModel):
    type: Optional[str] = None
    value: int
    time: Optional[datetime] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionID")
    end_to_end_id: Optional[str] = Field(default=None, alias="endToEndId")
    global_id: Optional[str] = Field(default=None, alias="globalID")
    charge: Optional[dict[str, Any]] = None
    withdraw: Optional[dict[str, Any]] = None


class PageInfo(_WireModel):
    skip: int = 0
    limit: int = 0
    total_count: int = Field(default=0, alias="totalCount")
    has_previous_page: bool = Field(default=False, alias="hasPreviousPage")
    has_next_page: bool = Field(default=False, alias="hasNextPage")


class TransactionPage(_WireModel):
    transactions: list[Transaction] = Field(default_factory=list)
    page_info: PageInfo = Field(
        default_factory=PageInfo,
        validation_alias=AliasChoices("pageInfo", "page_info"),
        serialization_alias="pageInfo",
    )


class SavePaymentSettings(BaseModel):
    pix_key: str = Field(min_length=1)
    pix_key_type: str = Field(default="EMAIL")

    @field_validator("pix_key_type")
    @classmethod
    def _upper_key_type(cls, v: str) -> str:
        return (v or "").upper()
