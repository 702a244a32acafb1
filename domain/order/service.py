"""
订单领域服务 - 分账计算与 Pix 键校验
"""
from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from domain.common.exceptions import DomainValidationException, InvalidPixKeyException


PIX_KEY_TYPES = ("EMAIL", "CPF", "CNPJ", "PHONE", "RANDOM")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_NON_DIGIT_RE = re.compile(r"\D")


class SplitParts(NamedTuple):
    platform: int
    seller: int


def compute_split(total: int, fee_rate: Decimal | float | str) -> SplitParts:
    """拆分订单总额（分）：平台抽成按四舍五入（half-up）计算，其余归卖家。"""
    if total < 0:
        raise DomainValidationException(f"订单总额不能为负: {total}", field="total")
    rate = Decimal(str(fee_rate))
    if rate < 0 or rate > 1:
        raise DomainValidationException(f"平台费率必须在0到1之间: {rate}", field="fee_rate")
    platform = int((Decimal(total) * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return SplitParts(platform=platform, seller=total - platform)


def normalize_pix_key(pix_key: str) -> str:
    """Pix 键只去除首尾空白，保持用户输入的原样。"""
    if not pix_key:
        return pix_key
    return pix_key.strip()


def is_valid_pix_key(pix_key: str, key_type: str) -> bool:
    key = normalize_pix_key(pix_key or "")
    if not key:
        return False
    kind = (key_type or "").upper()
    if kind == "EMAIL":
        return bool(_EMAIL_RE.match(key))
    if kind == "CPF":
        return len(_NON_DIGIT_RE.sub("", key)) == 11
    if kind == "CNPJ":
        return len(_NON_DIGIT_RE.sub("", key)) == 14
    if kind == "PHONE":
        return 10 <= len(_NON_DIGIT_RE.sub("", key)) <= 13
    if kind == "RANDOM":
        return len(key) >= 32
    return False


def ensure_valid_pix_key(pix_key: str, key_type: str) -> str:
    """校验并返回规范化后的 Pix 键，非法时抛出 InvalidPixKeyException。"""
    if not is_valid_pix_key(pix_key, key_type):
        raise InvalidPixKeyException(key_type)
    return normalize_pix_key(pix_key)
