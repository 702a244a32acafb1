"""
API依赖项 - 组装应用服务（组合根）
"""
from typing import AsyncIterator, Callable, Optional

from fastapi import Depends

from application.ports.payment_gateway import PixGateway
from application.services.order_service import OrderService
from application.services.payment_service import PaymentService
from application.services.webhook_service import WebhookService
from core.settings import payment_settings
from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.external.payments import get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


class LazyPixGateway:
    """首次调用网关方法时才创建客户端；只读订单接口不需要 OpenPix 凭证"""

    def __init__(self, factory: Callable[[], PixGateway]) -> None:
        self._factory = factory
        self._gateway: Optional[PixGateway] = None

    @property
    def created(self) -> bool:
        return self._gateway is not None

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        if self._gateway is None:
            self._gateway = self._factory()
        return getattr(self._gateway, name)

    async def aclose(self) -> None:
        if self._gateway is not None:
            await self._gateway.aclose()


def get_uow_factory() -> Callable[..., AbstractUnitOfWork]:
    return SQLAlchemyUnitOfWork


async def get_pix_gateway() -> AsyncIterator[PixGateway]:
    """每个请求一个网关客户端，请求结束后关闭连接池"""
    gateway = LazyPixGateway(get_payment_gateway)
    try:
        yield gateway
    finally:
        await gateway.aclose()


async def get_payment_service(gateway: PixGateway = Depends(get_pix_gateway)) -> PaymentService:
    return PaymentService(gateway=gateway)


async def get_order_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
    gateway: PixGateway = Depends(get_pix_gateway),
) -> OrderService:
    return OrderService(
        uow_factory,
        gateway,
        fee_rate=payment_settings.openpix.platform_fee_rate,
        main_pix_key=payment_settings.openpix.main_pix_key,
    )


async def get_webhook_service(
    uow_factory: Callable[..., AbstractUnitOfWork] = Depends(get_uow_factory),
) -> WebhookService:
    return WebhookService(
        uow_factory,
        signing_key=payment_settings.webhook.signing_key,
        ip_allowlist=payment_settings.webhook.ip_allowlist or (),
    )
