"""파일 분석 테스트"""

import tempfile
from pathlib import Path

import pytest
from novel_archiver.stages.file_analyzer import (
    analyze_file,
    extract_book_name_from_filename,
    extract_metadata,
    html_to_text,
    read_file_content,
)

SAMPLE = "作者：某人\n分类：都市\n\n第1章 开始\n内容一\n第2章 继续\n内容二\n"


def _write(tmp_dir: str, name: str, data: bytes) -> str:
    path = Path(tmp_dir) / name
    path.write_bytes(data)
    return str(path)


def test_read_file_content_encodings():
    """UTF-8 자동 감지, 지정 인코딩(GBK)"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        utf8 = _write(tmp_dir, "a.txt", SAMPLE.encode("utf-8"))
        assert read_file_content(utf8) == SAMPLE

        gbk = _write(tmp_dir, "b.txt", SAMPLE.encode("gbk"))
        assert read_file_content(gbk, encoding="gbk") == SAMPLE

        with pytest.raises(FileNotFoundError):
            read_file_content(str(Path(tmp_dir) / "missing.txt"))


def test_read_html():
    """HTML 은 태그를 제거한 텍스트"""
    html = "<html><head><style>p{}</style><script>x()</script></head><body><p>第1章</p><p>内容&amp;</p></body></html>"
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = _write(tmp_dir, "a.html", html.encode("utf-8"))
        text = read_file_content(path)
    assert "第1章\n内容&" in text
    assert "x()" not in text
    assert "<" not in text

    assert html_to_text("a<br/>b") == "a\nb"
    assert html_to_text("") == ""


def test_html_to_text_attribute_with_bracket():
    """속성 값의 '>' 가 본문에 새지 않음"""
    text = html_to_text('<p><a title="a>b">第1章</a></p><p>正文</p><noscript>x</noscript>')
    assert text == "第1章\n正文"
    assert 'b">' not in text


def test_extract_book_name_from_filename():
    """파일명에서 책 이름"""
    assert extract_book_name_from_filename("都市猎艳人生 第126章.txt") == "都市猎艳人生"
    assert extract_book_name_from_filename("file-123-妻的風箏線（７）.txt") == "妻的風箏線"
    assert extract_book_name_from_filename("x.txt") is None
    assert extract_book_name_from_filename("") is None


def test_extract_metadata():
    """본문 앞부분 메타데이터"""
    content = "书名\n作者：某人\n分类：都市\n简介：一个故事\n来源 https://example.com/a 看\n"
    metadata = extract_metadata(content)
    assert metadata == {
        "author": "某人",
        "category": "都市",
        "description": "一个故事",
        "source_url": "https://example.com/a",
    }
    assert extract_metadata("") == {}


def test_analyze_file():
    """책 이름 + 메타데이터 + 챕터"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = _write(tmp_dir, "upload.txt", SAMPLE.encode("utf-8"))
        analysis = analyze_file(path, original_filename="都市猎艳人生 第1章.txt")

    assert analysis.book_name == "都市猎艳人生"
    assert analysis.metadata["author"] == "某人"
    assert analysis.total_chapters == 2
    assert [c.number for c in analysis.chapters] == [1, 2]
    assert analysis.chapters[0].name == "开始"
    assert analysis.file_size == len(SAMPLE.encode("utf-8"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
