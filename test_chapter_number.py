"""챕터 번호 추출 테스트

전략 함수(standard_marker, bracket_numeral, bare_marker, final_marker)를
각각 검증하고, extract_chapter_number 의 우선순위를 확인한다.
"""

from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER
from novel_archiver.stages.chapter_number import (
    CHAPTER_NUMBER_STRATEGIES,
    bare_marker,
    bracket_numeral,
    extract_chapter_number,
    extract_series_type,
    final_marker,
    normalize_chapter_title,
    standard_marker,
)


def test_extract_standard():
    """第126章 형식"""
    result = extract_chapter_number("第126章")
    assert result.number == 126
    assert result.format == "章"
    assert result.series == "official"
    assert result.is_final is False

    assert extract_chapter_number("都市猎艳人生 第一百二十六章 丝袜诱惑").number == 126
    assert extract_chapter_number("第十二回").format == "回"
    assert extract_chapter_number("第 3 集").number == 3


def test_extract_bracket():
    """괄호 숫자 형식"""
    result = extract_chapter_number("（黑暗 4）")
    assert result.number == 4
    assert result.series == "黑暗"

    assert extract_chapter_number("妻的風箏線（７）").number == 7
    assert extract_chapter_number("【3】").series == "official"
    assert extract_chapter_number("(正文 5)").series == "official"

    final = extract_chapter_number("【終】")
    assert final.is_final is True
    assert final.number == FINAL_CHAPTER_NUMBER

    # 범위 표기는 시작 번호
    assert extract_chapter_number("（44-46）").number == 44


def test_extract_none():
    """표식이 없으면 None"""
    assert extract_chapter_number("正文") is None
    assert extract_chapter_number("") is None
    assert extract_chapter_number(None) is None
    assert extract_chapter_number("（待續）") is None
    assert extract_chapter_number("第零章") is None


def test_strategies_in_isolation():
    """각 전략은 단독으로 동작"""
    assert [name for name, _ in CHAPTER_NUMBER_STRATEGIES] == [
        "standard_marker", "bracket_numeral", "bare_marker", "final_marker",
    ]

    assert standard_marker("第8章").number == 8
    assert standard_marker("（8）") is None

    assert bracket_numeral("（8）").number == 8
    assert bracket_numeral("第8章") is None
    assert bracket_numeral("（待续 8）") is None

    assert bare_marker("第十二 重逢").number == 12
    assert bare_marker("第十二：重逢").number == 12
    assert bare_marker("第十二章") is None

    result = final_marker("終章 大結局")
    assert result.is_final is True
    assert result.format == "章"
    assert final_marker("最終") is None


def test_strategy_priority():
    """第N章 이 괄호 숫자보다 우선"""
    result = extract_chapter_number("书名（3）第5章")
    assert result.number == 5
    assert result.format == "章"


def test_extract_series_type():
    """시리즈 판별"""
    assert extract_series_type("（黑暗6）") == "黑暗"
    assert extract_series_type("番外 第1章") == "番外"
    assert extract_series_type("外傳（2）") == "番外"
    assert extract_series_type("某某外传 第3章") == "番外"
    assert extract_series_type("同人 第1章") == "doujinshii"
    assert extract_series_type("第1章") == "official"
    assert extract_series_type("") == "official"


def test_normalize_chapter_title():
    """앞쪽 태그 제거"""
    assert normalize_chapter_title("【連載】第3章 重逢") == "第3章 重逢"
    assert normalize_chapter_title("[原創] 第3章") == "第3章"
    assert normalize_chapter_title("") == ""


def main():
    """테스트 실행"""
    print("=" * 50)
    print("Chapter Number Extraction Tests")
    print("=" * 50)

    test_extract_standard()
    test_extract_bracket()
    test_extract_none()
    test_strategies_in_isolation()
    test_strategy_priority()
    test_extract_series_type()
    test_normalize_chapter_title()

    print("=" * 50)
    print("✅ All tests passed!")
    print("=" * 50)


if __name__ == "__main__":
    main()
