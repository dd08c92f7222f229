"""챕터 데이터 구조

분할기가 생성하는 챕터 후보(ChapterCandidate)
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_SERIES = "official"

# 終(완결) 챕터의 번호 자리표시자
FINAL_CHAPTER_NUMBER = -1
FINAL_KEY = "終"


def chapter_key(series: str, number: Optional[int], is_final: bool = False) -> str:
    """(시리즈, 번호) 고유 키. 예: "official:12", "official:終" """
    return f"{series}:{FINAL_KEY if is_final else number}"


@dataclass
class ChapterCandidate:
    """분할 과정에서 감지된 한 챕터

    Attributes:
        number: 챕터 번호 (終 챕터는 FINAL_CHAPTER_NUMBER)
        series: 번호 체계 이름 (기본 "official", 외전 등은 별도 번호)
        is_final: 終 챕터 여부
        title: 표시용 제목 ("第12章" / "終章")
        title_simplified: 제목의 간체 표기
        name: 챕터 이름 (최대 20자)
        extracted_book_name: 제목 줄에서 추출한 책 이름
        line_start: 시작 줄 (1부터, 제목 줄 포함)
        line_end: 끝 줄 (1부터, 포함)
        content: 해당 범위의 원문 (재포맷 전)
    """
    number: int
    series: str = DEFAULT_SERIES
    is_final: bool = False
    title: str = ""
    title_simplified: str = ""
    name: str = ""
    extracted_book_name: Optional[str] = None
    line_start: int = 1
    line_end: int = 1
    content: str = ""

    @property
    def key(self) -> str:
        return chapter_key(self.series, self.number, self.is_final)

    @property
    def length(self) -> int:
        return len(self.content)

    def __repr__(self):
        return (
            f"<ChapterCandidate {self.key}: {self.title} {self.name!r} "
            f"(lines {self.line_start}-{self.line_end}, {self.length} chars)>"
        )
