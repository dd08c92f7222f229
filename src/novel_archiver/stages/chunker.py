"""챕터 묶음(청크) 내보내기

챕터를 자르지 않고 이어 붙이다가 chunk_size 줄을 넘으면 새 청크를 시작한다.
각 청크 앞에는 책 제목 줄, 메타데이터, 청크 정보, 전체 목차가 붙는다.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER
from novel_archiver.utils.converter import to_traditional
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 1000
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


@dataclass
class ChunkChapter:
    """청크 안의 챕터 위치 (line_start/line_end 는 전체 기준 1부터)"""
    number: Optional[int]
    title: str
    line_start: int
    line_end: int


@dataclass
class Chunk:
    """청크 하나"""
    chunk_number: int
    content: str
    line_start: int
    line_end: int
    total_chunks: int = 0
    first_chapter: Optional[int] = None
    last_chapter: Optional[int] = None
    chapters: List[ChunkChapter] = field(default_factory=list)

    @property
    def chapter_count(self) -> int:
        return len(self.chapters)


def _field(chapter: Any, *names: str, default: Any = None) -> Any:
    for name in names:
        if isinstance(chapter, dict):
            value = chapter.get(name)
        else:
            value = getattr(chapter, name, None)
        if value is not None:
            return value
    return default


def _number(chapter: Any) -> int:
    return _field(chapter, "number", "chapter_number", default=0)


def _title(chapter: Any) -> str:
    return _field(chapter, "title", "chapter_title", default="")


def sort_chapters_for_export(chapters: Sequence[Any]) -> List[Any]:
    """일반 챕터는 번호 오름차순, 終章(-1)은 원래 순서대로 맨 뒤"""
    regular = [ch for ch in chapters if _number(ch) != FINAL_CHAPTER_NUMBER]
    finals = [ch for ch in chapters if _number(ch) == FINAL_CHAPTER_NUMBER]
    return sorted(regular, key=_number) + finals


def generate_toc(chapters: Sequence[Any]) -> str:
    """목차 마크다운 생성"""
    if not chapters:
        return ""

    lines = ["# 目錄", "", "[[toc]]", "", "## 章節目錄", ""]
    for chapter in chapters:
        number = _number(chapter)
        title = _title(chapter)
        unit = _field(chapter, "format", "chapter_format", default="章")
        anchor = re.sub(r"\s+", "-", title)
        if number == FINAL_CHAPTER_NUMBER:
            label = title or "終章"
            lines.append(f"- [{label}](#{anchor or label})")
        elif number and title and not title.startswith(f"第{number}{unit}"):
            lines.append(f"- [第{number}{unit} {title}](#第{number}{unit}-{anchor})")
        elif number and title:
            lines.append(f"- [{title}](#{anchor})")
        elif number:
            lines.append(f"- [第{number}{unit}](#第{number}{unit})")
    lines.extend(["", "---", "", ""])
    return "\n".join(lines)


def _chapter_range(first: Optional[int], last: Optional[int]) -> str:
    if first is None or last is None:
        return ""
    if first == last:
        return f"({first})"
    return f"({first} - {last})"


def build_chunk_header(
    book_title: str,
    metadata: Dict[str, str],
    chunk: Chunk,
    chunk_size: int,
    toc: str,
) -> str:
    """청크 머리말 (책 제목 줄, 메타데이터, 청크 정보, 목차)"""
    parts: List[str] = []

    if book_title:
        author = f" 作者：{metadata['author']}" if metadata.get("author") else ""
        parts.append(f"【{book_title}】{_chapter_range(chunk.first_chapter, chunk.last_chapter)}{author}")

    if any(metadata.get(key) for key in ("author", "category", "description")):
        parts.append("---")
        if metadata.get("author"):
            parts.append(f"**作者：** {metadata['author']}")
        if metadata.get("category"):
            parts.append(f"**分類：** {metadata['category']}")
        if metadata.get("description"):
            parts.append(f"**簡介：** {metadata['description']}")
        parts.append("---")

    parts.append(f"**分塊資訊：** 第 {chunk.chunk_number} / {chunk.total_chunks} 塊")
    if chunk.first_chapter is not None and chunk.last_chapter is not None:
        if chunk.first_chapter == chunk.last_chapter:
            parts.append(f"**章節範圍：** 第 {chunk.first_chapter} 章")
        else:
            parts.append(f"**章節範圍：** 第 {chunk.first_chapter} 章 至 第 {chunk.last_chapter} 章")
    parts.append(f"**行數範圍：** 第 {chunk.line_start} 行 至 第 {chunk.line_end} 行")
    parts.append(f"**最大行數：** {chunk_size} 行")
    parts.append("---")

    header = "\n\n".join(parts) + "\n\n"
    return header + toc


def _chapter_block(chapter: Any, seen: set) -> str:
    # 이미 "# " 제목이 있는 본문은 그대로, 없으면 처음 나올 때 한 번 붙인다
    content = _field(chapter, "content", default="") or ""
    number = _number(chapter)
    if content.lstrip().startswith("#") or number in seen:
        seen.add(number)
        return content
    seen.add(number)
    title = _title(chapter) or f"第{number}章"
    return f"# {title}\n{content}"


def create_chunks_from_chapters(
    chapters: Sequence[Any],
    book_title: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    metadata: Optional[Dict[str, str]] = None,
    convert_to_traditional: bool = True,
) -> List[Chunk]:
    """챕터 목록으로 청크 생성

    챕터는 쪼개지 않는다. 현재 청크가 비어 있으면 chunk_size 보다 긴 챕터도
    그대로 넣는다. 챕터 사이에는 빈 줄 하나를 둔다.

    Args:
        chapters: number/title/content 를 가진 객체 또는 dict
        book_title: 책 제목
        chunk_size: 청크당 최대 줄 수
        metadata: author / category / description
        convert_to_traditional: 청크 내용 번체 변환 여부

    Returns:
        Chunk 리스트 (total_chunks 는 모두 최종 개수)
    """
    if not chapters:
        return []
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    metadata = metadata or {}
    ordered = sort_chapters_for_export(chapters)
    toc = generate_toc(ordered)
    seen: set = set()
    prepared = [(chapter, _chapter_block(chapter, seen)) for chapter in ordered]

    groups: List[List[tuple]] = []
    current: List[tuple] = []
    current_lines = 0
    for chapter, block in prepared:
        block_lines = len(block.split("\n"))
        needed = block_lines + (1 if current else 0)
        if current and current_lines + needed > chunk_size:
            groups.append(current)
            current, current_lines = [], 0
            needed = block_lines
        current.append((chapter, block))
        current_lines += needed
    if current:
        groups.append(current)

    chunks: List[Chunk] = []
    master_line = 0
    for index, group in enumerate(groups, start=1):
        blocks: List[str] = []
        positions: List[ChunkChapter] = []
        chunk_start = master_line + 1
        for chapter, block in group:
            if blocks:
                master_line += 1
            block_lines = len(block.split("\n"))
            positions.append(ChunkChapter(
                number=_number(chapter),
                title=_title(chapter),
                line_start=master_line + 1,
                line_end=master_line + block_lines,
            ))
            master_line += block_lines
            blocks.append(block)

        numbers = sorted(p.number for p in positions if p.number is not None and p.number != FINAL_CHAPTER_NUMBER)
        chunks.append(Chunk(
            chunk_number=index,
            content="\n\n".join(blocks),
            line_start=chunk_start,
            line_end=master_line,
            first_chapter=numbers[0] if numbers else None,
            last_chapter=numbers[-1] if numbers else None,
            chapters=positions,
        ))

    total = len(chunks)
    for chunk in chunks:
        chunk.total_chunks = total
        body = build_chunk_header(book_title, metadata, chunk, chunk_size, toc) + chunk.content
        chunk.content = to_traditional(body) if convert_to_traditional else body

    logger.info(f"Created {total} chunks for '{book_title}' ({len(ordered)} chapters, chunk_size={chunk_size})")
    return chunks


def generate_chunk_filename(book_name: str, chunk_number: int) -> str:
    """청크 파일명 ("書名.md", "書名_2.md")"""
    clean_name = INVALID_FILENAME_CHARS.sub("", book_name or "").strip()
    if not clean_name:
        return f"chunk_{chunk_number}.md"
    if chunk_number == 1:
        return f"{clean_name}.md"
    return f"{clean_name}_{chunk_number}.md"
