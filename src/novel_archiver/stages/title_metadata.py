"""스레드/문서 제목 메타데이터 파서

"都市猎艳人生 第126章 丝袜诱惑 - 禁忌書屋" 같은 제목에서
책 이름, 챕터 번호, 챕터 이름, 시리즈, 終 여부를 추출한다.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from novel_archiver.stages.chapter import DEFAULT_SERIES
from novel_archiver.stages.chapter_number import (
    CHAPTER_UNITS,
    ChapterMatch,
    extract_chapter_number,
)
from novel_archiver.stages.numerals import DIGIT_CHARS
from novel_archiver.utils.converter import normalize_to_half_width
from novel_archiver.utils.text_cleaner import clean_book_name, collapse_whitespace, strip_site_suffix
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

_D = f"[{DIGIT_CHARS}]"

# bookname（N）chaptername
BOOKNAME_BRACKET_RE = re.compile(rf"^(.+?)\s*[（(]\s*({_D}+)\s*[）)]\s*(.*)$")
# bookname 第N章 chaptername
BOOKNAME_SPACED_RE = re.compile(rf"^(.+?)\s+第{_D}+[{CHAPTER_UNITS}]\s+(.+)$")

PENDING_MARK_RE = re.compile(r"[（(]待[續续][）)]")
SEPARATOR_CHARS = " -－–—:：、.·|"

# detect_book_name 패턴 (우선순위 순)
BOOK_NAME_PATTERNS = [
    # "都市猎艳人生 第126章" → "都市猎艳人生"
    re.compile(rf"^(.+?)\s*第{_D}+[{CHAPTER_UNITS}]"),
    # "书名（第126章）" → "书名"
    re.compile(rf"^(.+?)[（(]第{_D}+[{CHAPTER_UNITS}][）)]"),
    # "书名 - 第126章" → "书名"
    re.compile(rf"^(.+?)\s*[-－]\s*第{_D}+[{CHAPTER_UNITS}]"),
    # "书名 126" → "书名"
    re.compile(rf"^(.+?)\s+{_D}+$"),
    # 구분자 앞까지
    re.compile(r"^(.+?)(?:\s*[第（(【]|$)"),
]


@dataclass
class TitleMetadata:
    """제목에서 추출한 메타데이터"""
    book_name: Optional[str] = None
    chapter_number: Optional[int] = None
    chapter_name: Optional[str] = None
    series: str = DEFAULT_SERIES
    is_final: bool = False


def _clean_chapter_name(text: str) -> str:
    name = PENDING_MARK_RE.sub("", text or "")
    return name.strip(SEPARATOR_CHARS).strip()


def _split_bookname_bracket(title: str, match: Optional[ChapterMatch]) -> Tuple[str, str]:
    m = BOOKNAME_BRACKET_RE.match(title)
    if not m:
        return "", ""
    return m.group(1), m.group(3)


def _split_around_marker(title: str, match: Optional[ChapterMatch]) -> Tuple[str, str]:
    if not match or not match.full_match:
        return "", ""
    index = title.find(match.full_match)
    if index < 0:
        return "", ""
    return title[:index], title[index + len(match.full_match):]


def _split_spaced(title: str, match: Optional[ChapterMatch]) -> Tuple[str, str]:
    m = BOOKNAME_SPACED_RE.match(title)
    if not m:
        return "", ""
    return m.group(1), m.group(2)


NAME_SPLIT_STRATEGIES: List[Tuple[str, Callable[[str, Optional[ChapterMatch]], Tuple[str, str]]]] = [
    ("bookname_bracket", _split_bookname_bracket),
    ("around_marker", _split_around_marker),
    ("bookname_spaced", _split_spaced),
]


def parse_title_metadata(raw_title: str) -> Optional[TitleMetadata]:
    """스레드/문서 제목 파싱

    Args:
        raw_title: 원본 제목

    Returns:
        TitleMetadata, 번호도 이름도 얻지 못하면 None

    Examples:
        >>> meta = parse_title_metadata("妻的風箏線（７）三十天的免費妓女")
        >>> (meta.book_name, meta.chapter_number, meta.chapter_name)
        ('妻的風箏線', 7, '三十天的免費妓女')
    """
    if not raw_title or not isinstance(raw_title, str):
        return None

    title = normalize_to_half_width(raw_title)
    title = strip_site_suffix(title)
    title = collapse_whitespace(title)
    if not title:
        return None

    match = extract_chapter_number(title)

    book_name = ""
    chapter_name = ""
    for strategy_name, split in NAME_SPLIT_STRATEGIES:
        before, after = split(title, match)
        book_name = clean_book_name(before.strip(SEPARATOR_CHARS))
        chapter_name = _clean_chapter_name(after)
        if book_name or chapter_name:
            logger.debug(f"Title split [{strategy_name}]: '{title}' → book='{book_name}', name='{chapter_name}'")
            break

    is_final = bool(match and match.is_final)
    chapter_number = match.number if match and not match.is_final else None

    if chapter_number is None and not is_final and not book_name and not chapter_name:
        logger.debug(f"No title metadata: '{raw_title[:100]}'")
        return None

    return TitleMetadata(
        book_name=book_name or None,
        chapter_number=chapter_number,
        chapter_name=chapter_name or None,
        series=match.series if match else DEFAULT_SERIES,
        is_final=is_final,
    )


def detect_book_name(thread_title: str) -> Optional[str]:
    """스레드 제목에서 책 이름 감지

    Returns:
        2글자 이상의 책 이름, 감지 실패 시 None

    Examples:
        >>> detect_book_name("都市猎艳人生 第126章")
        '都市猎艳人生'
    """
    if not thread_title:
        return None

    for pattern in BOOK_NAME_PATTERNS:
        m = pattern.match(thread_title)
        if m and m.group(1):
            book_name = clean_book_name(m.group(1))
            if len(book_name) >= 2:
                return book_name
    return None
