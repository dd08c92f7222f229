"""본문 재포맷 테스트

제목 줄 교체, 사이트 문구 제거, 줄바꿈, 멱등성 검증
"""

import pytest
from novel_archiver.errors import InvalidInputError
from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER
from novel_archiver.stages.reformatter import (
    LINE_WRAP_WIDTH,
    apply_patterns,
    build_chapter_title,
    reformat_chapter_content,
)


def test_build_chapter_title():
    """정규 제목 생성"""
    assert build_chapter_title(12, "丝袜诱惑") == "第12章 丝袜诱惑"
    assert build_chapter_title(12) == "第12章"
    assert build_chapter_title(FINAL_CHAPTER_NUMBER, "", is_final=True) == "終章"
    assert build_chapter_title(FINAL_CHAPTER_NUMBER, "大結局") == "終章 大結局"
    assert build_chapter_title(None) == "第未知章"

    long_title = build_chapter_title(1, "名" * 30)
    assert len(long_title) == 20
    assert long_title.startswith("第1章 名")


def test_reformat_basic():
    """제목 줄 교체 + 잡음 제거 + 줄바꿈"""
    raw = "第3章 重逢\n\n　　他来了～\ncool18.com\n" + "字" * 170
    result = reformat_chapter_content(raw, "第3章 重逢", convert_to_traditional=False)

    paragraphs = result.split("\n\n")
    assert paragraphs[0] == "# 第3章 重逢"
    assert paragraphs[1] == "他来了"
    assert paragraphs[2:] == ["字" * LINE_WRAP_WIDTH, "字" * LINE_WRAP_WIDTH, "字" * 10]
    assert "cool18" not in result
    assert result.count("# ") == 1


def test_reformat_removes_leading_headings():
    """원래 제목 줄 하나와 뒤따르는 "#" 줄만 제거"""
    raw = "第3章\n# 旧标题\n正文开始"
    result = reformat_chapter_content(raw, "第3章 重逢", convert_to_traditional=False)
    assert result == "# 第3章 重逢\n\n正文开始"


def test_reformat_keeps_heading_like_body():
    """제목 뒤 본문 줄이 第N回 처럼 시작해도 지우지 않음"""
    result = reformat_chapter_content("第3章\n第一回合开始了\n内容", "第3章", convert_to_traditional=False)
    assert result == "# 第3章\n\n第一回合开始了\n\n内容"
    assert reformat_chapter_content(result, "第3章", convert_to_traditional=False) == result

    result = reformat_chapter_content("第3章\n（3）\n正文", "第3章", convert_to_traditional=False)
    assert result == "# 第3章\n\n（3）\n\n正文"


def test_reformat_idempotent():
    """자기 출력에 다시 적용해도 결과가 같음"""
    raw = "第5章 出发\n他来了，我们走吧。\n\n" + "长" * 200 + "\n结尾"
    title = "第5章 出发"

    for convert in (False, True):
        once = reformat_chapter_content(raw, title, convert_to_traditional=convert)
        twice = reformat_chapter_content(once, title, convert_to_traditional=convert)
        assert once == twice
        assert once.count("# ") == 1


def test_reformat_traditional():
    """번체 변환"""
    result = reformat_chapter_content("简体中文", "第1章", convert_to_traditional=True)
    assert result == "# 第1章\n\n簡體中文"


def test_reformat_title_truncated():
    """제목은 최대 20자"""
    result = reformat_chapter_content("内容", "第1章 " + "名" * 30, convert_to_traditional=False)
    heading = result.split("\n\n")[0]
    assert heading == "# " + ("第1章 " + "名" * 30)[:20]


def test_reformat_invalid_input():
    """문자열이 아닌 입력은 InvalidInputError"""
    with pytest.raises(InvalidInputError):
        reformat_chapter_content(None, "第1章")
    with pytest.raises(InvalidInputError):
        reformat_chapter_content("内容", 123)


def test_reformat_empty_body():
    """빈 본문은 제목 줄만"""
    assert reformat_chapter_content("", "第1章", convert_to_traditional=False) == "# 第1章"


def test_apply_patterns():
    """스레드 전체 텍스트 포맷 규칙"""
    text = "第1章 开始\n\n\n内容～\n（2）\n更多"
    assert apply_patterns(text) == "# 第1章 开始\n内容\n# （2）\n更多"
    assert apply_patterns("") == ""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
