"""텍스트 정리 유틸리티 테스트

text_cleaner / converter 함수 검증
"""

from novel_archiver.utils.converter import normalize_to_half_width, to_simplified, to_traditional
from novel_archiver.utils.text_cleaner import (
    clean_book_name,
    collapse_whitespace,
    strip_site_suffix,
    truncate_to_max,
)


def test_strip_site_suffix():
    """사이트 접미사 제거"""
    assert strip_site_suffix("都市猎艳人生 第126章 丝袜诱惑 - 禁忌書屋") == "都市猎艳人生 第126章 丝袜诱惑"
    assert strip_site_suffix("书名 第1章 — 禁忌书坊 (cool18)") == "书名 第1章"
    assert strip_site_suffix("书名 第1章") == "书名 第1章"
    assert strip_site_suffix("") == ""

    print("✅ All strip_site_suffix tests passed!")


def test_collapse_whitespace():
    """다중 공백 정리"""
    assert collapse_whitespace("  书名   第1章\t 重逢 ") == "书名 第1章 重逢"
    assert collapse_whitespace("") == ""


def test_truncate_to_max():
    """최대 20자, 멀티바이트 문자는 쪼개지지 않음"""
    text = "一二三四五六七八九十" * 3
    assert truncate_to_max(text) == text[:20]
    assert len(truncate_to_max(text)) == 20
    assert truncate_to_max("短标题") == "短标题"
    assert truncate_to_max("😀" * 25) == "😀" * 20
    assert truncate_to_max("") == ""

    # 잘린 위치 뒤가 결합 문자이면 앞 글자까지 제외
    combined = "a" * 19 + "e\u0301" + "b"
    assert truncate_to_max(combined) == "a" * 19


def test_clean_book_name():
    """책 이름 정리"""
    assert clean_book_name("都市猎艳人生 - ") == "都市猎艳人生"
    assert clean_book_name("书名（上）") == "书名"
    assert clean_book_name("【連載】书名") == "书名"
    assert clean_book_name("书名【完】") == "书名"
    assert clean_book_name("") == ""


def test_converter():
    """간체/번체 변환, 전각→반각"""
    assert to_traditional("简体中文") == "簡體中文"
    assert to_simplified("簡體中文") == "简体中文"
    assert to_traditional("") == ""
    assert to_simplified("") == ""

    assert normalize_to_half_width("妻的風箏線（７）") == "妻的風箏線（7）"
    assert normalize_to_half_width("ＡＢＣ　ｘｙｚ１２３") == "ABC xyz123"
    assert normalize_to_half_width("") == ""


def main():
    """테스트 실행"""
    print("=" * 50)
    print("Text Cleaner Utility Tests")
    print("=" * 50)

    test_strip_site_suffix()
    test_collapse_whitespace()
    test_truncate_to_max()
    test_clean_book_name()
    test_converter()

    print("=" * 50)
    print("✅ All tests passed!")
    print("=" * 50)


if __name__ == "__main__":
    main()
