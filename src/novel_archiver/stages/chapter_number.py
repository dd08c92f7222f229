"""챕터 번호 추출

제목 문자열에서 챕터 표식(第126章, （黑暗 4）, 第十二 ...)을 찾아
번호, 시리즈, 終 여부를 반환한다.

우선순위가 있는 전략(strategy) 목록을 순서대로 시도하며, 각 전략은
독립적으로 테스트할 수 있는 함수이다.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from novel_archiver.stages.chapter import DEFAULT_SERIES, FINAL_CHAPTER_NUMBER
from novel_archiver.stages.numerals import DIGIT_CHARS, chinese_to_int
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

CHAPTER_UNITS = "章回集話话篇部卷"
OPEN_BRACKETS = "(（{｛【〔〖〝「『"
CLOSE_BRACKETS = ")）}｝】〕〗〞」』"

_D = f"[{DIGIT_CHARS}]"
_OPEN = f"[{re.escape(OPEN_BRACKETS)}]"
_CLOSE = f"[{re.escape(CLOSE_BRACKETS)}]"
_NOT_BRACKET = f"[^{re.escape(OPEN_BRACKETS + CLOSE_BRACKETS)}]"

STANDARD_MARKER_RE = re.compile(rf"第\s*({_D}+)\s*([{CHAPTER_UNITS}])")
# （3）, （黑暗 4）, 【終】, （44-46）
BRACKET_NUMERAL_RE = re.compile(
    rf"{_OPEN}\s*({_NOT_BRACKET}*?)\s*({_D}+|[終终])(?:\s*[-－~～]\s*{_D}+)?\s*{_CLOSE}"
)
BARE_MARKER_RE = re.compile(rf"第\s*({_D}+)(?=\s|$|[：:])")
FINAL_MARKER_RE = re.compile(rf"[終终]([{CHAPTER_UNITS}])")

# 괄호 안 라벨 중 본편으로 간주하는 것
OFFICIAL_LABELS = {"正篇", "正傳", "正传", "正文", "第"}
IGNORED_LABELS = ("待續", "待续")

SIDE_STORY_KEYWORDS = ("番外", "外傳", "外传")
DOUJIN_KEYWORDS = ("同人誌", "同人志", "同人", "doujinshi")


@dataclass
class ChapterMatch:
    """챕터 번호 추출 결과

    Attributes:
        number: 챕터 번호 (終 은 FINAL_CHAPTER_NUMBER)
        format: 단위 문자 (章/回/集 ..., 괄호 표기는 "")
        series: 시리즈 이름
        is_final: 終 여부
        full_match: 매칭된 원문 조각
    """
    number: int
    format: str = ""
    series: str = DEFAULT_SERIES
    is_final: bool = False
    full_match: str = ""


def _bracket_label(match: re.Match) -> str:
    label = match.group(1).strip()
    if label.endswith("第"):
        label = label[:-1].strip()
    return "" if label in OFFICIAL_LABELS else label


def extract_series_type(title: str) -> str:
    """제목에서 시리즈 이름 추출

    괄호 안 라벨 → 외전 키워드 → 동인 키워드 순으로 확인하고,
    해당 사항이 없으면 "official".

    Examples:
        >>> extract_series_type("（黑暗6）")
        '黑暗'
        >>> extract_series_type("番外（1）")
        '番外'
    """
    if not title:
        return DEFAULT_SERIES

    for match in BRACKET_NUMERAL_RE.finditer(title):
        label = _bracket_label(match)
        if label and not any(ignored in label for ignored in IGNORED_LABELS):
            return label

    if any(keyword in title for keyword in SIDE_STORY_KEYWORDS):
        return "番外"

    lowered = title.lower()
    if any(keyword in lowered for keyword in DOUJIN_KEYWORDS):
        return "doujinshii"

    return DEFAULT_SERIES


def _final(title: str, fmt: str, full_match: str, series: Optional[str] = None) -> ChapterMatch:
    return ChapterMatch(
        number=FINAL_CHAPTER_NUMBER,
        format=fmt,
        series=series or extract_series_type(title),
        is_final=True,
        full_match=full_match,
    )


def standard_marker(title: str) -> Optional[ChapterMatch]:
    """第<숫자><단위> (第126章, 第十二回)"""
    for match in STANDARD_MARKER_RE.finditer(title):
        number = chinese_to_int(match.group(1))
        if number > 0:
            return ChapterMatch(
                number=number,
                format=match.group(2),
                series=extract_series_type(title),
                full_match=match.group(0),
            )
    return None


def bracket_numeral(title: str) -> Optional[ChapterMatch]:
    """괄호로 감싼 숫자 또는 終 (（3）, （黑暗 4）, 【終】)"""
    for match in BRACKET_NUMERAL_RE.finditer(title):
        label = _bracket_label(match)
        if any(ignored in label for ignored in IGNORED_LABELS):
            continue
        series = label or extract_series_type(title)

        numeral = match.group(2)
        if numeral in ("終", "终"):
            return _final(title, "", match.group(0), series)

        number = chinese_to_int(numeral)
        if number > 0:
            return ChapterMatch(number=number, series=series, full_match=match.group(0))
    return None


def bare_marker(title: str) -> Optional[ChapterMatch]:
    """단위 없는 第<숫자> (第十二 xxx)"""
    for match in BARE_MARKER_RE.finditer(title):
        number = chinese_to_int(match.group(1))
        if number > 0:
            return ChapterMatch(
                number=number,
                series=extract_series_type(title),
                full_match=match.group(0),
            )
    return None


def final_marker(title: str) -> Optional[ChapterMatch]:
    """단독 終章 / 終回"""
    match = FINAL_MARKER_RE.search(title)
    if match:
        return _final(title, match.group(1), match.group(0))
    return None


CHAPTER_NUMBER_STRATEGIES: List[Tuple[str, Callable[[str], Optional[ChapterMatch]]]] = [
    ("standard_marker", standard_marker),
    ("bracket_numeral", bracket_numeral),
    ("bare_marker", bare_marker),
    ("final_marker", final_marker),
]


def extract_chapter_number(title: str) -> Optional[ChapterMatch]:
    """제목에서 챕터 번호 추출

    Args:
        title: 챕터/스레드 제목

    Returns:
        ChapterMatch, 표식이 없으면 None

    Examples:
        >>> extract_chapter_number("第126章").number
        126
        >>> extract_chapter_number("（黑暗 4）").series
        '黑暗'
        >>> extract_chapter_number("正文") is None
        True
    """
    if not title or not isinstance(title, str):
        return None

    for name, strategy in CHAPTER_NUMBER_STRATEGIES:
        result = strategy(title)
        if result is not None:
            logger.debug(f"Chapter number [{name}]: '{title[:50]}' → {result.series}:{result.number}")
            return result
    return None


def normalize_chapter_title(title: str) -> str:
    """제목 앞의 【태그】 / [태그] 제거"""
    if not title:
        return ""
    normalized = title.strip()
    normalized = re.sub(r"^【.*?】", "", normalized)
    normalized = re.sub(r"^\[.*?\]", "", normalized)
    return normalized.strip()
