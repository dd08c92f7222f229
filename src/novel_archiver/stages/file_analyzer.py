"""업로드 파일 분석

파일을 읽어 책 이름, 메타데이터(작가/분류/소개/URL)를 추출하고
챕터를 감지한다.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import chardet
from bs4 import BeautifulSoup
from novel_archiver.stages.chapter import ChapterCandidate
from novel_archiver.stages.splitter import detect_chapters
from novel_archiver.stages.title_metadata import detect_book_name
from novel_archiver.utils.converter import normalize_to_half_width
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

HTML_EXTENSIONS = {".html", ".htm"}
NON_TEXT_TAGS = ["script", "style", "noscript"]
BLOCK_TAGS = ["p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr"]
ENCODING_SAMPLE_SIZE = 64 * 1024
ENCODING_MIN_CONFIDENCE = 0.7

METADATA_SCAN_LINES = 100
AUTHOR_PATTERNS = [
    re.compile(r"作者\s*[：:]\s*(.+)"),
    re.compile(r"^(.+?)\s*[著編]$"),
]
CATEGORY_RE = re.compile(r"(?:分類|分类|類型|类型|類別|类别)\s*[：:]\s*(.+)")
DESCRIPTION_RE = re.compile(r"(?:簡介|简介|描述|內容|内容)\s*[：:]\s*(.+)")
URL_RE = re.compile(r"(https?://[^\s]+)")


@dataclass
class FileAnalysis:
    """파일 분석 결과"""
    book_name: str
    metadata: Dict[str, str] = field(default_factory=dict)
    chapters: List[ChapterCandidate] = field(default_factory=list)
    file_size: int = 0
    encoding: Optional[str] = None

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)


def detect_encoding(raw: bytes) -> Optional[str]:
    """chardet 로 인코딩 감지 (신뢰도 0.7 미만이면 None)"""
    if not raw:
        return None
    result = chardet.detect(raw[:ENCODING_SAMPLE_SIZE])
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0
    if encoding and confidence > ENCODING_MIN_CONFIDENCE:
        logger.debug(f"Encoding detected: {encoding} ({confidence:.2f})")
        return encoding
    logger.debug(f"Low confidence encoding: {encoding} ({confidence:.2f})")
    return None


def html_to_text(content: str) -> str:
    """HTML 에서 script/style 을 빼고 본문 텍스트만 추출

    <br> 과 블록 요소 끝은 줄바꿈으로 바꿔 챕터 제목 줄이 유지되게 한다.
    """
    if not content:
        return ""
    soup = BeautifulSoup(content, "lxml")
    for tag in soup(NON_TEXT_TAGS):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.append("\n")

    container = soup.body or soup
    return container.get_text().strip()


def read_file_content(file_path: str, encoding: Optional[str] = None, default_encoding: str = "utf-8") -> str:
    """파일 내용을 텍스트로 읽기

    Args:
        file_path: 파일 경로 (.txt / .md / .html)
        encoding: 지정 인코딩 (None 이면 chardet 감지 → default_encoding)
        default_encoding: 감지 실패 시 사용할 인코딩

    Raises:
        FileNotFoundError: 파일이 없을 때
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    raw = path.read_bytes()
    encoding = encoding or detect_encoding(raw) or default_encoding
    content = raw.decode(encoding, errors="replace")

    if path.suffix.lower() in HTML_EXTENSIONS:
        return html_to_text(content)
    return content


def extract_book_name_from_filename(filename: str) -> Optional[str]:
    """파일명에서 책 이름 추출

    Examples:
        >>> extract_book_name_from_filename("都市猎艳人生 第126章.txt")
        '都市猎艳人生'
    """
    if not filename:
        return None

    stem = Path(filename).stem
    stem = re.sub(r"^file-\d+-", "", stem)

    detected = detect_book_name(stem)
    if detected:
        return normalize_to_half_width(detected)

    book_name = re.sub(r"第[零一二三四五六七八九十百千万两0-9]+(?:章|回|集|話|篇|部|卷)", "", stem)
    book_name = re.sub(r"[（(【〔〖〝「『].*?[）)】〕〗〞」』]", "", book_name)
    book_name = re.sub(r"\s*[-－]\s*", " ", book_name)
    book_name = normalize_to_half_width(book_name.strip())
    return book_name if len(book_name) >= 2 else None


def extract_metadata(content: str) -> Dict[str, str]:
    """본문 앞부분(100줄)에서 작가, 분류, 소개, 출처 URL 추출"""
    metadata: Dict[str, str] = {}
    if not content:
        return metadata

    for line in content.split("\n")[:METADATA_SCAN_LINES]:
        line = line.strip()
        if not line:
            continue

        if "author" not in metadata:
            for pattern in AUTHOR_PATTERNS:
                m = pattern.search(line)
                if m and m.group(1).strip():
                    metadata["author"] = m.group(1).strip()
                    break

        if "category" not in metadata:
            m = CATEGORY_RE.search(line)
            if m:
                metadata["category"] = m.group(1).strip()

        if "description" not in metadata:
            m = DESCRIPTION_RE.search(line)
            if m:
                metadata["description"] = m.group(1).strip()

        if "source_url" not in metadata:
            m = URL_RE.search(line)
            if m:
                metadata["source_url"] = m.group(1).strip()

    return metadata


def analyze_file(
    file_path: str,
    original_filename: Optional[str] = None,
    encoding: Optional[str] = None,
    default_encoding: str = "utf-8",
) -> FileAnalysis:
    """업로드 파일 분석

    책 이름은 파일명 → 본문 앞 10줄 → 첫 챕터 제목 줄 순으로 찾는다.

    Args:
        file_path: 파일 경로
        original_filename: 업로드 당시 파일명 (없으면 file_path 의 이름)
        encoding: 지정 인코딩
        default_encoding: 감지 실패 시 인코딩

    Returns:
        FileAnalysis
    """
    path = Path(file_path)
    filename = original_filename or path.name
    content = read_file_content(file_path, encoding=encoding, default_encoding=default_encoding)

    book_name = extract_book_name_from_filename(filename)
    first_lines = content.split("\n")[:10]
    if not book_name:
        for line in first_lines:
            book_name = detect_book_name(line.strip())
            if book_name:
                break

    chapters = detect_chapters(content)
    if not book_name and chapters and chapters[0].extracted_book_name:
        book_name = chapters[0].extracted_book_name

    book_name = normalize_to_half_width((book_name or Path(filename).stem).strip())
    analysis = FileAnalysis(
        book_name=book_name,
        metadata=extract_metadata(content),
        chapters=chapters,
        file_size=path.stat().st_size,
        encoding=encoding,
    )
    logger.info(f"Analyzed {filename}: book='{book_name}', chapters={analysis.total_chapters}")
    return analysis
