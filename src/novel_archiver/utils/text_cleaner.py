"""텍스트 정리 유틸리티

스레드 제목/파일명에서 사이트 접미사, 공백, 불필요한 괄호를 정리하는 함수
"""

import re
import unicodedata
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

# 사이트가 제목 뒤에 붙이는 접미사 (예: "xxx 第3章 - 禁忌書屋")
SITE_SUFFIX_PATTERNS = [
    re.compile(r"\s*[-－–—]\s*禁忌[书書]屋.*$", re.IGNORECASE),
    re.compile(r"\s*[-－–—]\s*禁忌[书書]坊.*$", re.IGNORECASE),
]

TITLE_MAX_LENGTH = 20


def strip_site_suffix(text: str) -> str:
    """사이트 접미사 제거

    Examples:
        >>> strip_site_suffix("都市猎艳人生 第126章 丝袜诱惑 - 禁忌書屋")
        '都市猎艳人生 第126章 丝袜诱惑'
    """
    if not text:
        return ""
    result = text
    for pattern in SITE_SUFFIX_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def collapse_whitespace(text: str) -> str:
    """다중 공백을 단일 공백으로"""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def truncate_to_max(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """문자 단위로 최대 길이까지 자르기

    코드 포인트 단위로 자르므로 멀티바이트 문자가 쪼개지지 않으며,
    잘린 위치 바로 뒤가 결합 문자(combining mark)이면 앞 글자까지 함께 뺀다.

    Examples:
        >>> truncate_to_max("一二三四五六七八九十一二三四五六七八九十一二", 20)
        '一二三四五六七八九十一二三四五六七八九十'
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text

    cut = max_length
    while cut > 0 and unicodedata.combining(text[cut]):
        cut -= 1
    return text[:cut]


def clean_book_name(name: str) -> str:
    """책 이름 끝의 구분자, 괄호, 【】 태그 정리

    Examples:
        >>> clean_book_name("都市猎艳人生 - ")
        '都市猎艳人生'
        >>> clean_book_name("书名（上）")
        '书名'
    """
    if not name:
        return ""
    cleaned = name.strip()
    cleaned = re.sub(r"\s*[-－]\s*$", "", cleaned)
    cleaned = re.sub(r"\s*[（(].*?[）)]\s*$", "", cleaned)
    cleaned = re.sub(r"\s*【.*?】\s*$", "", cleaned)
    cleaned = re.sub(r"^【.*?】\s*", "", cleaned)
    return cleaned.strip()
