"""챕터 분할기

원문 텍스트를 한 줄씩 훑으며 챕터 제목 줄을 감지하고, 같은 (시리즈, 번호)가
다시 나오면 시리즈 정책에 따라 더 긴 쪽을 남기거나 번호를 밀어낸다.

- "official" 시리즈(및 終 챕터): 중복 재게시가 많으므로 더 긴 본문을 유지
- 그 외 시리즈(외전, 다른 결말 등): 실제로 이어지는 새 내용이므로 다음 빈 번호로 이동
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from novel_archiver.errors import InvalidInputError
from novel_archiver.stages.chapter import (
    DEFAULT_SERIES,
    FINAL_CHAPTER_NUMBER,
    ChapterCandidate,
    chapter_key,
)
from novel_archiver.stages.chapter_number import (
    BRACKET_NUMERAL_RE,
    CHAPTER_UNITS,
    CLOSE_BRACKETS,
    IGNORED_LABELS,
    OPEN_BRACKETS,
    ChapterMatch,
    extract_chapter_number,
    extract_series_type,
)
from novel_archiver.stages.numerals import DIGIT_CHARS, chinese_to_int
from novel_archiver.stages.title_metadata import TitleMetadata
from novel_archiver.utils.converter import normalize_to_half_width, to_simplified
from novel_archiver.utils.text_cleaner import truncate_to_max
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

_D = f"[{DIGIT_CHARS}]"

# (a) 第N章 계열 표식 (줄 맨 앞, 마크다운 # 허용)
MARKER_HEADING_RE = re.compile(
    rf"^(?:#{{1,3}}\s*)?(?:第\s*({_D}+)\s*(?:[{CHAPTER_UNITS}]|(?=[\s：:]|$))|[終终][{CHAPTER_UNITS}])"
)
# bookname（N）chaptername
BOOKNAME_HEADING_RE = re.compile(rf"^(.+?)[（(]\s*({_D}+)\s*[）)](.+)$")
BALANCED_BRACKET_RE = re.compile(
    f"[{re.escape(OPEN_BRACKETS)}][^{re.escape(OPEN_BRACKETS + CLOSE_BRACKETS)}]*[{re.escape(CLOSE_BRACKETS)}]"
)
SENTENCE_END_RE = re.compile(r"[。！？!?]")
PENDING_MARK_RE = re.compile(r"[（(]待[續续][）)]")
NAME_STRIP_CHARS = " \t-－–—:：、.·|"


@dataclass
class _Heading:
    """감지된 제목 줄"""
    match: ChapterMatch
    name: str = ""
    book_name: Optional[str] = None


@dataclass
class _PendingReplacement:
    """이미 확정된 키와 경쟁하는 후보"""
    key: str
    chapter: ChapterCandidate
    lines: List[str] = field(default_factory=list)


@dataclass
class _ScanState:
    """segment() 호출 1회분 상태 (호출 간 공유 없음)"""
    output: List[ChapterCandidate] = field(default_factory=list)
    seen_keys: Set[str] = field(default_factory=set)
    chapters_by_key: Dict[str, ChapterCandidate] = field(default_factory=dict)
    index_by_key: Dict[str, int] = field(default_factory=dict)
    current: Optional[ChapterCandidate] = None
    current_lines: List[str] = field(default_factory=list)
    pending: Optional[_PendingReplacement] = None
    headings_found: int = 0
    replaced: int = 0
    discarded: int = 0
    renumbered: int = 0

    def append(self, line: str) -> None:
        if self.pending is not None:
            self.pending.lines.append(line)
        elif self.current is not None:
            self.current_lines.append(line)


def format_chapter_title(number: int, is_final: bool = False) -> str:
    """"第12章" / "終章" """
    return "終章" if is_final else f"第{number}章"


def _clean_name(text: str) -> str:
    name = PENDING_MARK_RE.sub("", text or "")
    return truncate_to_max(name.strip(NAME_STRIP_CHARS).strip())


class ChapterSegmenter:
    """원문을 챕터 후보 목록으로 분할

    인스턴스는 상태를 갖지 않으며, 모든 스캔 상태는 segment() 호출마다 새로 만든다.
    여러 워커에서 같은 인스턴스를 동시에 사용해도 안전하다.
    """

    # BRACKET 계열 제목으로 인정하는 최대 줄 길이 (긴 본문 줄의 괄호 숫자 오탐 방지)
    HEADING_MAX_LENGTH = 80

    def segment(
        self,
        full_text: str,
        first_chapter_metadata: Optional[TitleMetadata] = None,
    ) -> List[ChapterCandidate]:
        """텍스트를 챕터 후보로 분할

        Args:
            full_text: 원문 전체
            first_chapter_metadata: 스레드/문서 제목에서 얻은 메타데이터 (첫 챕터에만 병합)

        Returns:
            ChapterCandidate 목록 (입력이 비어 있으면 빈 목록)

        Raises:
            InvalidInputError: full_text 가 문자열이 아닐 때
        """
        if not isinstance(full_text, str):
            raise InvalidInputError(f"full_text must be str, got {type(full_text).__name__}")
        if not full_text.strip():
            return []

        lines = [line.rstrip("\r") for line in full_text.split("\n")]
        state = _ScanState()

        for line_no, line in enumerate(lines, start=1):
            heading = self.detect_heading(line.strip())
            if heading is None:
                state.append(line)
                continue
            state.headings_found += 1
            self._start_chapter(state, heading, line_no, line)

        self._close_pending(state, len(lines))
        self._close_current(state, len(lines))

        if state.headings_found == 0:
            logger.debug(f"No chapter headings found, treating {len(lines)} lines as chapter 1")
            state.output.append(self._whole_text_chapter(full_text, len(lines)))

        chapters = state.output
        if first_chapter_metadata is not None and chapters:
            self._merge_first_chapter_metadata(chapters, first_chapter_metadata)

        logger.info(
            f"Segmented {len(lines)} lines → {len(chapters)} chapters "
            f"(headings={state.headings_found}, replaced={state.replaced}, "
            f"discarded={state.discarded}, renumbered={state.renumbered})"
        )
        return chapters

    # ------------------------------------------------------------------
    # 제목 감지
    # ------------------------------------------------------------------

    def detect_heading(self, line: str) -> Optional[_Heading]:
        """한 줄이 챕터 제목인지 판정

        (a) 第N章 계열 표식, (b) 괄호 숫자 표식 순으로 확인한다.
        어느 쪽도 아니면 괄호가 있어도 본문으로 취급한다.
        """
        if not line:
            return None

        marker = MARKER_HEADING_RE.match(line)
        if marker:
            return self._marker_heading(line, marker)

        if len(line) <= self.HEADING_MAX_LENGTH and not SENTENCE_END_RE.search(line):
            bracket = BRACKET_NUMERAL_RE.search(line)
            if bracket:
                return self._bracket_heading(line, bracket)

        if BALANCED_BRACKET_RE.search(line):
            logger.debug(f"Bracketed body line kept as text: '{line[:40]}'")
        return None

    def _marker_heading(self, line: str, marker: re.Match) -> Optional[_Heading]:
        local = extract_chapter_number(marker.group(0).lstrip("#").strip())
        if local is not None:
            info = ChapterMatch(
                number=local.number,
                format=local.format,
                series=extract_series_type(line),
                is_final=local.is_final,
                full_match=local.full_match,
            )
        elif marker.group(1):
            # 第零章 등 추출 실패 시 직접 파싱한 번호로 기본 레코드 구성
            info = ChapterMatch(number=chinese_to_int(marker.group(1)), full_match=marker.group(0))
        else:
            return None
        return _Heading(match=info, name=_clean_name(line[marker.end():]))

    def _bracket_heading(self, line: str, bracket: re.Match) -> Optional[_Heading]:
        if any(ignored in bracket.group(1) for ignored in IGNORED_LABELS):
            return None

        info = extract_chapter_number(line)
        if info is None:
            local_number = chinese_to_int(bracket.group(2))
            if local_number <= 0:
                return None
            info = ChapterMatch(number=local_number, full_match=bracket.group(0))

        book = BOOKNAME_HEADING_RE.match(line)
        if book:
            return _Heading(
                match=info,
                name=_clean_name(book.group(3)),
                book_name=normalize_to_half_width(book.group(1).strip()) or None,
            )
        return _Heading(match=info, name=_clean_name(line[bracket.end():]))

    # ------------------------------------------------------------------
    # 상태 전이
    # ------------------------------------------------------------------

    def _start_chapter(self, state: _ScanState, heading: _Heading, line_no: int, line: str) -> None:
        info = heading.match
        series = info.series or DEFAULT_SERIES
        is_final = info.is_final
        number = FINAL_CHAPTER_NUMBER if is_final else info.number
        key = chapter_key(series, number, is_final)

        if key in state.seen_keys:
            if series == DEFAULT_SERIES or is_final:
                # 같은 챕터의 재게시: 일단 보류하고 끝날 때 길이 비교
                self._close_pending(state, line_no - 1)
                self._close_current(state, line_no - 1)
                candidate = self._new_candidate(heading, series, number, is_final, line_no)
                state.pending = _PendingReplacement(key=key, chapter=candidate, lines=[line])
                logger.debug(f"Line {line_no}: duplicate {key}, holding as pending replacement")
                return

            detected = number
            while chapter_key(series, number) in state.seen_keys:
                number += 1
            key = chapter_key(series, number)
            state.renumbered += 1
            logger.info(f"Line {line_no}: {series}:{detected} already used, renumbered to {number}")

        self._close_pending(state, line_no - 1)
        self._close_current(state, line_no - 1)

        state.seen_keys.add(key)
        state.current = self._new_candidate(heading, series, number, is_final, line_no)
        state.current_lines = [line]

    def _new_candidate(
        self,
        heading: _Heading,
        series: str,
        number: int,
        is_final: bool,
        line_no: int,
    ) -> ChapterCandidate:
        title = format_chapter_title(number, is_final)
        return ChapterCandidate(
            number=number,
            series=series,
            is_final=is_final,
            title=title,
            title_simplified=to_simplified(title),
            name=heading.name,
            extracted_book_name=heading.book_name,
            line_start=line_no,
            line_end=line_no,
        )

    def _close_current(self, state: _ScanState, end_line: int) -> None:
        chapter = state.current
        if chapter is None:
            return
        chapter.line_end = max(end_line, chapter.line_start)
        chapter.content = "\n".join(state.current_lines)

        state.index_by_key[chapter.key] = len(state.output)
        state.output.append(chapter)
        state.chapters_by_key[chapter.key] = chapter
        state.current = None
        state.current_lines = []

    def _close_pending(self, state: _ScanState, end_line: int) -> None:
        pending = state.pending
        if pending is None:
            return
        state.pending = None

        candidate = pending.chapter
        candidate.line_end = max(end_line, candidate.line_start)
        candidate.content = "\n".join(pending.lines)

        existing = state.chapters_by_key[pending.key]
        if len(candidate.content) > len(existing.content):
            if not candidate.name:
                candidate.name = existing.name
            if not candidate.extracted_book_name:
                candidate.extracted_book_name = existing.extracted_book_name
            state.output[state.index_by_key[pending.key]] = candidate
            state.chapters_by_key[pending.key] = candidate
            state.replaced += 1
            logger.info(
                f"Duplicate {pending.key}: kept longer version at lines "
                f"{candidate.line_start}-{candidate.line_end} "
                f"({len(candidate.content)} > {len(existing.content)} chars)"
            )
        else:
            state.discarded += 1
            logger.debug(
                f"Duplicate {pending.key}: discarded lines {candidate.line_start}-{candidate.line_end} "
                f"({len(candidate.content)} <= {len(existing.content)} chars)"
            )

    def _whole_text_chapter(self, full_text: str, line_count: int) -> ChapterCandidate:
        title = format_chapter_title(1)
        return ChapterCandidate(
            number=1,
            title=title,
            title_simplified=to_simplified(title),
            line_start=1,
            line_end=line_count,
            content=full_text,
        )

    def _merge_first_chapter_metadata(self, chapters: List[ChapterCandidate], meta: TitleMetadata) -> None:
        first = chapters[0]

        if meta.book_name and not first.extracted_book_name:
            first.extracted_book_name = meta.book_name
        if meta.chapter_name and not first.name:
            first.name = truncate_to_max(meta.chapter_name)

        is_final = first.is_final or meta.is_final
        series = meta.series if meta.series and meta.series != DEFAULT_SERIES else first.series
        if is_final:
            number = FINAL_CHAPTER_NUMBER
        else:
            number = meta.chapter_number if meta.chapter_number else first.number

        key = chapter_key(series, number, is_final)
        if key == first.key:
            return
        if any(other.key == key for other in chapters[1:]):
            logger.warning(f"Title metadata {key} collides with a later chapter, keeping {first.key}")
            return

        first.number = number
        first.series = series
        first.is_final = is_final
        first.title = format_chapter_title(number, is_final)
        first.title_simplified = to_simplified(first.title)


def detect_chapters(
    full_text: str,
    first_chapter_metadata: Optional[TitleMetadata] = None,
) -> List[ChapterCandidate]:
    """텍스트에서 챕터 감지 (ChapterSegmenter().segment 래퍼)

    Examples:
        >>> [c.number for c in detect_chapters("第1章\\n内容\\n第2章\\n内容")]
        [1, 2]
    """
    return ChapterSegmenter().segment(full_text, first_chapter_metadata)
