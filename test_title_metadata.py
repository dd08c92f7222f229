"""제목 메타데이터 파서 테스트"""

from novel_archiver.stages.title_metadata import detect_book_name, parse_title_metadata


def test_parse_bookname_bracket():
    """书名（N）章节名 형식 (전각 숫자 포함)"""
    meta = parse_title_metadata("妻的風箏線（７）三十天的免費妓女")
    assert meta.book_name == "妻的風箏線"
    assert meta.chapter_number == 7
    assert meta.chapter_name == "三十天的免費妓女"
    assert meta.series == "official"
    assert meta.is_final is False


def test_parse_standard_with_site_suffix():
    """사이트 접미사 제거 후 第N章 기준 분리"""
    meta = parse_title_metadata("都市猎艳人生 第126章 丝袜诱惑 - 禁忌書屋")
    assert meta.book_name == "都市猎艳人生"
    assert meta.chapter_number == 126
    assert meta.chapter_name == "丝袜诱惑"


def test_parse_series_only():
    """괄호 라벨만 있는 제목"""
    meta = parse_title_metadata("（黑暗 4）")
    assert meta.book_name is None
    assert meta.chapter_number == 4
    assert meta.series == "黑暗"


def test_parse_final():
    """終章 은 번호 없이 is_final"""
    meta = parse_title_metadata("某某传奇 終章")
    assert meta.is_final is True
    assert meta.chapter_number is None
    assert meta.book_name == "某某传奇"


def test_parse_nothing():
    """아무 정보도 없으면 None"""
    assert parse_title_metadata("") is None
    assert parse_title_metadata(None) is None
    assert parse_title_metadata("   ") is None
    assert parse_title_metadata("hello") is None


def test_detect_book_name():
    """스레드 제목에서 책 이름"""
    assert detect_book_name("都市猎艳人生 第126章") == "都市猎艳人生"
    assert detect_book_name("书名 - 第3章") == "书名"
    assert detect_book_name("书名 126") == "书名"
    assert detect_book_name("【連載】都市猎艳人生 第1章") == "都市猎艳人生"
    assert detect_book_name("A 第1章") is None
    assert detect_book_name("") is None


if __name__ == "__main__":
    test_parse_bookname_bracket()
    test_parse_standard_with_site_suffix()
    test_parse_series_only()
    test_parse_final()
    test_parse_nothing()
    test_detect_book_name()
    print("✅ Title metadata tests passed!")
