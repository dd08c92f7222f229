"""청크 생성 테스트"""

from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER
from novel_archiver.stages.chunker import (
    create_chunks_from_chapters,
    generate_chunk_filename,
    generate_toc,
    sort_chapters_for_export,
)


def _chapter(number, lines=3, title=None):
    title = title or ("終章" if number == FINAL_CHAPTER_NUMBER else f"第{number}章")
    body = "\n".join(f"内容{number}-{i}" for i in range(lines - 1))
    return {"number": number, "title": title, "content": f"# {title}\n{body}"}


def test_sort_chapters_for_export():
    """번호순, 終章 은 맨 뒤"""
    chapters = [_chapter(3), _chapter(FINAL_CHAPTER_NUMBER), _chapter(1), _chapter(2)]
    numbers = [c["number"] for c in sort_chapters_for_export(chapters)]
    assert numbers == [1, 2, 3, FINAL_CHAPTER_NUMBER]


def test_generate_toc():
    """목차"""
    toc = generate_toc([_chapter(1), {"number": 2, "title": "重逢"}, _chapter(FINAL_CHAPTER_NUMBER)])
    assert toc.startswith("# 目錄")
    assert "- [第1章](#第1章)" in toc
    assert "- [第2章 重逢](#第2章-重逢)" in toc
    assert "- [終章](#終章)" in toc
    assert generate_toc([]) == ""


def test_chunks_keep_chapters_intact():
    """챕터는 쪼개지지 않고 chunk_size 를 넘으면 새 청크"""
    chapters = [_chapter(n, lines=4) for n in range(1, 6)]
    chunks = create_chunks_from_chapters(chapters, "某书", chunk_size=9, convert_to_traditional=False)

    # 4줄 + 빈 줄 + 4줄 = 9줄 → 청크당 2챕터
    assert [c.chapter_count for c in chunks] == [2, 2, 1]
    assert all(c.total_chunks == 3 for c in chunks)
    assert (chunks[0].first_chapter, chunks[0].last_chapter) == (1, 2)
    assert (chunks[2].first_chapter, chunks[2].last_chapter) == (5, 5)

    # 전체 기준 줄 범위가 이어짐
    assert (chunks[0].line_start, chunks[0].line_end) == (1, 9)
    assert chunks[1].line_start == 10
    assert chunks[0].chapters[1].line_start == 6

    for chunk in chunks:
        assert f"第 {chunk.chunk_number} / 3 塊" in chunk.content
        assert chunk.content.startswith("【某书】")


def test_oversized_chapter_alone():
    """chunk_size 보다 긴 챕터도 그대로 한 청크"""
    chunks = create_chunks_from_chapters([_chapter(1, lines=50)], "某书", chunk_size=10, convert_to_traditional=False)
    assert len(chunks) == 1
    assert "内容1-48" in chunks[0].content


def test_chunk_header_metadata():
    """메타데이터 머리말"""
    metadata = {"author": "某人", "category": "都市", "description": "简介"}
    chunks = create_chunks_from_chapters([_chapter(1)], "某书", metadata=metadata, convert_to_traditional=False)
    content = chunks[0].content
    assert content.startswith("【某书】(1) 作者：某人")
    assert "**分類：** 都市" in content
    assert "**章節範圍：** 第 1 章" in content


def test_heading_added_once():
    """제목 없는 본문에는 '# 제목' 한 번만 추가"""
    chapters = [{"number": 1, "title": "第1章 开始", "content": "正文"}]
    chunks = create_chunks_from_chapters(chapters, "某书", convert_to_traditional=False)
    assert chunks[0].content.endswith("# 第1章 开始\n正文")


def test_empty_chapters():
    assert create_chunks_from_chapters([], "某书") == []


def test_generate_chunk_filename():
    """청크 파일명"""
    assert generate_chunk_filename("某书", 1) == "某书.md"
    assert generate_chunk_filename("某书", 2) == "某书_2.md"
    assert generate_chunk_filename('某:书?', 3) == "某书_3.md"
    assert generate_chunk_filename("", 4) == "chunk_4.md"


if __name__ == "__main__":
    test_sort_chapters_for_export()
    test_generate_toc()
    test_chunks_keep_chapters_intact()
    test_oversized_chapter_alone()
    test_chunk_header_metadata()
    test_heading_added_once()
    test_empty_chapters()
    test_generate_chunk_filename()
    print("✅ Chunker tests passed!")
