"""한자 숫자 변환

"一百二十六" ↔ 126. 챕터 번호 추출에서 사용.
"""

from novel_archiver.errors import InvalidInputError

# 정규식 문자 클래스 본문 (모든 챕터 패턴에서 공유)
DIGIT_CHARS = "零〇一二两兩三四五六七八九十百千万萬0-9０-９"

DIGITS = {
    "零": 0, "〇": 0,
    "一": 1, "二": 2, "两": 2, "兩": 2, "三": 3, "四": 4,
    "五": 5, "六": 6, "七": 7, "八": 8, "九": 9,
}
POWERS = {"十": 10, "百": 100, "千": 1000}
MYRIADS = {"万": 10000, "萬": 10000}

_RENDER_DIGITS = "零一二三四五六七八九"


def _to_ascii_digits(text: str) -> str:
    return "".join(
        chr(ord(ch) - 0xFEE0) if "０" <= ch <= "９" else ch
        for ch in text
    )


def chinese_to_int(text: str) -> int:
    """한자 숫자 문자열을 정수로 변환

    아라비아/전각 숫자만으로 이루어진 경우 그대로 파싱하고, 그 외에는
    자릿수 누적 방식으로 계산한다. 알 수 없는 문자는 건너뛴다.

    Args:
        text: 변환할 문자열 (예: "一百二十六", "126", "１２６")

    Returns:
        정수 값. 비어 있거나 해석할 수 없으면 0

    Examples:
        >>> chinese_to_int("十二")
        12
        >>> chinese_to_int("一百零五")
        105
        >>> chinese_to_int("三万五千")
        35000
    """
    if not text or not isinstance(text, str):
        return 0

    normalized = _to_ascii_digits(text.strip())
    if normalized.isascii() and normalized.isdigit():
        # int() 자릿수 제한 (기본 4300자) 초과
        try:
            return int(normalized)
        except ValueError:
            return 0

    total = 0
    section = 0
    digit = 0
    for ch in normalized:
        if ch in DIGITS:
            digit = DIGITS[ch]
        elif ch.isascii() and ch.isdigit():
            digit = int(ch)
        elif ch in POWERS:
            section += (digit or 1) * POWERS[ch]
            digit = 0
        elif ch in MYRIADS:
            total = (total + section + digit) * MYRIADS[ch]
            section = 0
            digit = 0

    return total + section + digit


def _render_section(value: int) -> str:
    # 0 < value < 10000
    out = ""
    pending_zero = False
    for unit, unit_char in ((1000, "千"), (100, "百"), (10, "十"), (1, "")):
        d = value // unit % 10
        if d == 0:
            if out:
                pending_zero = True
            continue
        if pending_zero:
            out += "零"
            pending_zero = False
        out += _RENDER_DIGITS[d] + unit_char
    return out


def int_to_chinese(value: int) -> str:
    """정수를 한자 숫자로 변환 (chinese_to_int 의 역함수)

    Raises:
        InvalidInputError: 음수 또는 정수가 아닌 값

    Examples:
        >>> int_to_chinese(12)
        '十二'
        >>> int_to_chinese(10005)
        '一万零五'
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError(f"Expected a non-negative integer, got {value!r}")
    if value == 0:
        return "零"

    high, low = divmod(value, 10000)
    if high:
        result = int_to_chinese(high) + "万"
        if low:
            if low < 1000:
                result += "零"
            result += _render_section(low)
    else:
        result = _render_section(low)

    # 一十二 → 十二
    if result.startswith("一十"):
        result = result[1:]
    return result
