"""간체/번체 변환 및 전각→반각 정규화

OpenCC(s2hk / hk2s) 래퍼. 번체는 홍콩 표기를 사용한다.
"""

from opencc import OpenCC
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

_s2t = OpenCC("s2hk")
_t2s = OpenCC("hk2s")

# 전각 영문/숫자 → 반각 (Ａ→A, ０→0), 전각 공백 → 반각 공백
_HALF_WIDTH_TABLE = {
    **{code: code - 0xFEE0 for code in range(0xFF10, 0xFF1A)},
    **{code: code - 0xFEE0 for code in range(0xFF21, 0xFF3B)},
    **{code: code - 0xFEE0 for code in range(0xFF41, 0xFF5B)},
    0x3000: 0x20,
}


def to_traditional(text: str) -> str:
    """간체 → 번체(HK)"""
    if not text:
        return ""
    return _s2t.convert(text)


def to_simplified(text: str) -> str:
    """번체 → 간체"""
    if not text:
        return ""
    return _t2s.convert(text)


def normalize_to_half_width(text: str) -> str:
    """전각 영문자/숫자/공백을 반각으로 변환

    Examples:
        >>> normalize_to_half_width("妻的風箏線（７）")
        '妻的風箏線（7）'
    """
    if not text:
        return text
    return text.translate(_HALF_WIDTH_TABLE)
