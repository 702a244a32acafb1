import pytest

from application.dtos.payments import CreateCharge, CreateSubAccount, SavePaymentSettings, SubAccount, Split
from application.services.payment_service import PaymentService
from domain.common.exceptions import InvalidPixKeyException, SplitExceedsTotalException


@pytest.mark.asyncio
async def test_find_or_create_returns_existing_account(stub_gateway):
    stub_gateway.sub_accounts = [SubAccount(id="sub-9", name="u1", pix_key="loja@arena.test")]
    service = PaymentService(gateway=stub_gateway)

    account = await service.find_or_create_sub_account(CreateSubAccount(name="u1", pix_key=" loja@arena.test "))

    assert account.id == "sub-9"
    assert [c[0] for c in stub_gateway.calls] == ["list_sub_accounts"]


@pytest.mark.asyncio
async def test_find_or_create_creates_when_absent(stub_gateway):
    service = PaymentService(gateway=stub_gateway)

    account = await service.find_or_create_sub_account(CreateSubAccount(name="u1", pix_key="loja@arena.test"))

    assert account.pix_key == "loja@arena.test"
    assert [c[0] for c in stub_gateway.calls] == ["list_sub_accounts", "create_sub_account"]


@pytest.mark.asyncio
async def test_manage_user_sub_account_always_creates(stub_gateway):
    service = PaymentService(gateway=stub_gateway)

    await service.manage_user_sub_account("user-1", " loja@arena.test")
    await service.manage_user_sub_account("user-1", "loja@arena.test")

    creates = [c for c in stub_gateway.calls if c[0] == "create_sub_account"]
    assert creates == [
        ("create_sub_account", "user-1", "loja@arena.test"),
        ("create_sub_account", "user-1", "loja@arena.test"),
    ]


@pytest.mark.asyncio
async def test_save_payment_settings_validates_key_type(stub_gateway):
    service = PaymentService(gateway=stub_gateway)

    with pytest.raises(InvalidPixKeyException):
        await service.save_payment_settings("user-1", SavePaymentSettings(pix_key="12345", pix_key_type="cpf"))
    assert stub_gateway.calls == []

    account = await service.save_payment_settings(
        "user-1", SavePaymentSettings(pix_key="123.456.789-09", pix_key_type="cpf")
    )
    assert account.name == "user-1"


@pytest.mark.asyncio
async def test_create_charge_rejects_split_above_total(stub_gateway):
    service = PaymentService(gateway=stub_gateway)
    req = CreateCharge(value=100, correlation_id="c-1", splits=[Split(pix_key="k", value=101)])

    with pytest.raises(SplitExceedsTotalException):
        await service.create_charge(req)
    assert stub_gateway.calls == []


@pytest.mark.asyncio
async def test_withdraw_and_close_delegate(stub_gateway):
    stub_gateway.balance = 700
    service = PaymentService(gateway=stub_gateway)

    withdrawal = await service.withdraw("loja@arena.test")
    await service.aclose()

    assert withdrawal.value == 700
    assert stub_gateway.closed is True
