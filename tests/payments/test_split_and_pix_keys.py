from decimal import Decimal

import pytest

from domain.common.exceptions import DomainValidationException, InvalidPixKeyException
from domain.order.service import compute_split, ensure_valid_pix_key, is_valid_pix_key, normalize_pix_key
from shared.codes.payment_codes import translate_charge_status


@pytest.mark.parametrize(
    "total, platform, seller",
    [
        (10000, 1500, 8500),
        (0, 0, 0),
        (1, 0, 1),
        (10, 2, 8),  # 1.5 rounds half-up
        (30, 5, 25),  # 4.5 rounds half-up
        (999, 150, 849),
    ],
)
def test_compute_split_rounds_half_up(total, platform, seller):
    parts = compute_split(total, Decimal("0.15"))
    assert (parts.platform, parts.seller) == (platform, seller)
    assert parts.platform + parts.seller == total


def test_compute_split_rejects_invalid_rate():
    with pytest.raises(DomainValidationException):
        compute_split(100, Decimal("1.5"))


def test_normalize_pix_key_only_trims():
    assert normalize_pix_key("  Loja@Arena.test \n") == "Loja@Arena.test"
    assert normalize_pix_key("+55 11 99999-0000") == "+55 11 99999-0000"


@pytest.mark.parametrize(
    "key, key_type, valid",
    [
        ("loja@arena.test", "EMAIL", True),
        ("loja@arena", "EMAIL", False),
        ("123.456.789-09", "CPF", True),
        ("1234567890", "CPF", False),
        ("12.345.678/0001-95", "CNPJ", True),
        ("+55 11 99999-0000", "PHONE", True),
        ("123", "PHONE", False),
        ("a" * 32, "RANDOM", True),
        ("a" * 31, "RANDOM", False),
        ("loja@arena.test", "OTHER", False),
        ("   ", "EMAIL", False),
    ],
)
def test_pix_key_validation(key, key_type, valid):
    assert is_valid_pix_key(key, key_type) is valid


def test_ensure_valid_pix_key_raises_with_type():
    with pytest.raises(InvalidPixKeyException) as exc_info:
        ensure_valid_pix_key("nope", "CPF")
    assert exc_info.value.details == {"key_type": "CPF"}


@pytest.mark.parametrize(
    "status, expected",
    [
        ("COMPLETED", "Pagamento Confirmado"),
        ("completed", "Pagamento Confirmado"),
        ("EXPIRED", "Expirado"),
        ("ACTIVE", "Aguardando Pagamento"),
        ("PENDING", "Aguardando Pagamento"),
        ("SOMETHING_NEW", "Aguardando Pagamento"),
        (None, "Aguardando Pagamento"),
        (1, "Aguardando Pagamento"),
        ({"status": "COMPLETED"}, "Aguardando Pagamento"),
    ],
)
def test_translate_charge_status(status, expected):
    assert translate_charge_status(status) == expected
