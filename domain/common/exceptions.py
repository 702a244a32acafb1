"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class OrderNotFoundException(BusinessException):
    def __init__(self, order_id: Optional[str] = None):
        details = {"order_id": order_id} if order_id else None
        super().__init__(
            code=BusinessCode.ORDER_NOT_FOUND,
            message="Pedido não encontrado",
            error_type="OrderNotFound",
            details=details,
        )


class OrderWithoutTransactionException(BusinessException):
    def __init__(self, order_id: str):
        super().__init__(
            code=BusinessCode.ORDER_WITHOUT_TRANSACTION,
            message="Pedido sem cobrança Pix associada",
            error_type="OrderWithoutTransaction",
            details={"order_id": order_id},
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class SplitExceedsTotalException(BusinessException):
    def __init__(self, splits_total: int, value: int):
        super().__init__(
            code=PaymentCode.SPLIT_EXCEEDS_TOTAL,
            message=f"Soma dos splits ({splits_total}) maior que o valor total ({value}).",
            error_type="SplitExceedsTotal",
            details={"splits_total": splits_total, "value": value},
            field="splits",
        )


class InvalidPixKeyException(BusinessException):
    def __init__(self, key_type: str):
        super().__init__(
            code=PaymentCode.INVALID_PIX_KEY,
            message=f"Chave Pix inválida para o tipo {key_type}",
            error_type="InvalidPixKey",
            details={"key_type": key_type},
            field="pix_key",
        )
