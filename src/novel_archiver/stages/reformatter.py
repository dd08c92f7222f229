"""챕터 본문 재포맷

- 간체 → 번체 변환 (선택)
- 사이트가 삽입한 문구 제거
- 기존 제목 줄을 정규 제목 줄("# 第12章 名稱") 하나로 교체
- 긴 줄 줄바꿈, 문단 사이 빈 줄

같은 제목으로 두 번 적용해도 결과가 같다 (제목 줄이 중복되지 않음).
"""

import re
from typing import List, Optional
from novel_archiver.errors import InvalidInputError
from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER
from novel_archiver.stages.chapter_number import BRACKET_NUMERAL_RE
from novel_archiver.stages.splitter import MARKER_HEADING_RE
from novel_archiver.utils.converter import to_traditional
from novel_archiver.utils.text_cleaner import TITLE_MAX_LENGTH, truncate_to_max
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

LINE_WRAP_WIDTH = 80

# 본문에서 제거할 사이트 삽입 문구
NOISE_PATTERNS = [
    (re.compile(r"cool18\.com", re.IGNORECASE), ""),
    (re.compile(r"^\s*[-－–—]*\s*禁忌[书書][屋坊].*$", re.MULTILINE), ""),
    (re.compile(r"[~～]"), ""),
    (re.compile(r"　"), ""),
]

# 스레드 전체 텍스트용 포맷 규칙 (apply_patterns)
THREAD_PATTERNS = [
    (re.compile(r"[~～]"), ""),
    (re.compile(r"　"), ""),
    (re.compile(r"\n[ \t]*(?=\n)"), ""),
    (re.compile(r"^(第[零一二三四五六七八九十百千万两0-9]+(?:章|回|集|話|篇|部|卷)[^\n]*)$", re.MULTILINE), r"# \1"),
    (re.compile(r"^([（(【〔〖〝「『][零一二三四五六七八九十百千万两0-9-]+[）)】〕〗〞」』])\s*$", re.MULTILINE), r"# \1"),
]


def build_chapter_title(number: Optional[int], name: str = "", is_final: bool = False) -> str:
    """"第N章 名稱" 형식 제목 생성 (최대 20자)

    이름은 접두사("第N章 ") 길이를 뺀 만큼만 남긴다.

    Examples:
        >>> build_chapter_title(12, "丝袜诱惑")
        '第12章 丝袜诱惑'
        >>> build_chapter_title(FINAL_CHAPTER_NUMBER, "", is_final=True)
        '終章'
    """
    if is_final or number == FINAL_CHAPTER_NUMBER:
        prefix = "終章"
    else:
        prefix = f"第{number if number is not None else '未知'}章"

    name = truncate_to_max((name or "").strip())
    if not name:
        return truncate_to_max(prefix)
    room = max(0, TITLE_MAX_LENGTH - len(prefix) - 1)
    return truncate_to_max(f"{prefix} {truncate_to_max(name, room)}".strip())


def _is_heading_line(line: str, title: str) -> bool:
    if line.startswith("#"):
        return True
    if title and (line == title or line.startswith(title)):
        return True
    if MARKER_HEADING_RE.match(line):
        return True
    bracket = BRACKET_NUMERAL_RE.match(line)
    return bool(bracket and bracket.end() == len(line))


def _wrap(line: str, width: int = LINE_WRAP_WIDTH) -> List[str]:
    pieces = (line[i:i + width].strip() for i in range(0, len(line), width))
    return [piece for piece in pieces if piece]


def reformat_chapter_content(
    raw_body: str,
    canonical_title: str,
    convert_to_traditional: bool = True,
    verbose: bool = False,
) -> str:
    """챕터 본문 재포맷

    Args:
        raw_body: 원문 본문 (제목 줄 포함 가능)
        canonical_title: 정규 제목 (예: "第126章 絲襪誘惑")
        convert_to_traditional: 번체 변환 여부
        verbose: 진단 로그 출력 여부

    Returns:
        "# 제목" 으로 시작하는 본문

    Raises:
        InvalidInputError: raw_body 가 문자열이 아닐 때
    """
    if not isinstance(raw_body, str):
        raise InvalidInputError(f"raw_body must be str, got {type(raw_body).__name__}")
    if canonical_title is not None and not isinstance(canonical_title, str):
        raise InvalidInputError(f"canonical_title must be str, got {type(canonical_title).__name__}")

    title = (canonical_title or "").strip().lstrip("#").strip()
    body = raw_body.replace("\r\n", "\n").replace("\r", "\n")

    if convert_to_traditional:
        body = to_traditional(body)
        title = to_traditional(title)
    title = truncate_to_max(title)

    for pattern, replacement in NOISE_PATTERNS:
        body = pattern.sub(replacement, body)

    lines = [line.strip() for line in body.split("\n")]
    lines = [line for line in lines if line]

    # 원래 제목 줄은 하나만 제거. 이후로는 "#" 줄과 정규 제목 중복만 제거
    removed_headings = []
    if lines and _is_heading_line(lines[0], title):
        removed_headings.append(lines.pop(0))
    while lines and (lines[0].startswith("#") or (title and lines[0] == title)):
        removed_headings.append(lines.pop(0))

    paragraphs: List[str] = []
    for line in lines:
        paragraphs.extend(_wrap(line))

    parts = []
    if title:
        parts.append(f"# {title}")
    parts.extend(paragraphs)
    result = "\n\n".join(parts)

    if verbose:
        logger.info(
            f"Reformat '{title}': input_lines={len(raw_body.splitlines())}, "
            f"paragraphs={len(paragraphs)}, removed_headings={removed_headings[:3]}, "
            f"traditional={convert_to_traditional}, chars={len(result)}"
        )
    return result


def apply_patterns(text: str) -> str:
    """스레드 전체 텍스트에 포맷 규칙 적용

    빈 줄 제거, 第N章 / （N） 줄을 마크다운 제목으로 변환한다.
    """
    if not text:
        return ""
    processed = text
    for pattern, replacement in THREAD_PATTERNS:
        processed = pattern.sub(replacement, processed)
    return processed.strip()
