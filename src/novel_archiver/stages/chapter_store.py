"""챕터 저장소

books / book_tags / chapters 테이블 읽기·쓰기. 같은 (책, 시리즈, 번호)
챕터가 이미 있으면 resolve_conflict 결과에 따라 생성/갱신/무시/새 번호 저장.
"""

import sqlite3
import threading
from typing import Dict, Iterable, List, Optional, Union
from novel_archiver.db.schema import Database
from novel_archiver.errors import InvalidArgumentError
from novel_archiver.stages.chapter import FINAL_CHAPTER_NUMBER, ChapterCandidate
from novel_archiver.stages.conflict import ConflictAction, Resolution, ResolutionOutcome, resolve_conflict
from novel_archiver.stages.reformatter import build_chapter_title
from novel_archiver.utils.converter import to_simplified, to_traditional
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

BOOK_METADATA_FIELDS = ("author", "category", "description", "source_url")


class ChapterStore:
    """챕터 저장소"""

    def __init__(self, db: Database):
        """
        Args:
            db: Database 인스턴스 (스키마 초기화는 여기서 수행)
        """
        self.db = db
        self.db.initialize_schema()
        self._lock = threading.Lock()

    @property
    def conn(self) -> sqlite3.Connection:
        return self.db.connect()

    # ------------------------------------------------------------------
    # books
    # ------------------------------------------------------------------
    def find_book(self, book_name: str) -> Optional[sqlite3.Row]:
        """책 이름(간체/번체 무관)으로 책 조회"""
        if not book_name:
            return None
        cursor = self.conn.execute(
            "SELECT * FROM books WHERE book_name_simplified = ?",
            (to_simplified(book_name.strip()),)
        )
        return cursor.fetchone()

    def get_or_create_book(self, book_name: str, metadata: Optional[Dict[str, str]] = None) -> int:
        """책 조회, 없으면 생성

        metadata 는 비어 있는 컬럼만 채운다.

        Returns:
            book id

        Raises:
            InvalidArgumentError: 책 이름이 비어 있을 때
        """
        if not book_name or not book_name.strip():
            raise InvalidArgumentError("book_name must not be empty")
        metadata = {k: v for k, v in (metadata or {}).items() if k in BOOK_METADATA_FIELDS and v}

        with self._lock:
            book = self.find_book(book_name)
            if book is None:
                cursor = self.conn.execute("""
                    INSERT INTO books (book_name_simplified, book_name_traditional, author, category, description, source_url)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    to_simplified(book_name.strip()),
                    to_traditional(book_name.strip()),
                    metadata.get("author"),
                    metadata.get("category"),
                    metadata.get("description"),
                    metadata.get("source_url"),
                ))
                self.conn.commit()
                logger.info(f"✅ Book created: {book_name} (id={cursor.lastrowid})")
                return cursor.lastrowid

            missing = {k: v for k, v in metadata.items() if not book[k]}
            if missing:
                assignments = ", ".join(f"{k} = ?" for k in missing)
                self.conn.execute(
                    f"UPDATE books SET {assignments} WHERE id = ?",
                    (*missing.values(), book["id"])
                )
                self.conn.commit()
                logger.debug(f"Book {book['id']} metadata filled: {list(missing)}")
            return book["id"]

    def add_tags(self, book_id: int, tags: Iterable[str]) -> int:
        """태그 추가 (이미 있는 태그는 무시)

        Returns:
            새로 추가된 태그 수
        """
        added = 0
        with self._lock:
            for tag in tags:
                cursor = self.conn.execute(
                    "INSERT OR IGNORE INTO book_tags (book_id, tag) VALUES (?, ?)",
                    (book_id, tag)
                )
                added += cursor.rowcount
            self.conn.commit()
        return added

    def list_tags(self, book_id: int) -> List[str]:
        cursor = self.conn.execute("SELECT tag FROM book_tags WHERE book_id = ? ORDER BY id", (book_id,))
        return [row["tag"] for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # chapters
    # ------------------------------------------------------------------
    def find_chapter(self, book_id: int, series: str, chapter_number: int) -> Optional[sqlite3.Row]:
        cursor = self.conn.execute(
            "SELECT * FROM chapters WHERE book_id = ? AND series = ? AND chapter_number = ?",
            (book_id, series, chapter_number)
        )
        return cursor.fetchone()

    def list_chapters(self, book_id: int, series: Optional[str] = None) -> List[sqlite3.Row]:
        """챕터 목록 (시리즈별 번호순, 終章은 각 시리즈 마지막)"""
        query = "SELECT * FROM chapters WHERE book_id = ?"
        params: list = [book_id]
        if series is not None:
            query += " AND series = ?"
            params.append(series)
        query += " ORDER BY series, chapter_number = ?, chapter_number"
        params.append(FINAL_CHAPTER_NUMBER)
        return self.conn.execute(query, params).fetchall()

    def save_candidate(
        self,
        book_id: int,
        candidate: ChapterCandidate,
        content: str,
        action: Union[ConflictAction, str, None] = None,
        new_number: Optional[int] = None,
        source_url: Optional[str] = None,
    ) -> Resolution:
        """챕터 저장 (충돌 시 action 에 따라 처리)

        Args:
            book_id: 책 id
            candidate: 분할기가 만든 ChapterCandidate
            content: 재포맷된 본문
            action: "overwrite" / "discard" / "new_number" / None
            new_number: action 이 "new_number" 일 때 번호
            source_url: 출처 URL

        Returns:
            Resolution

        Raises:
            InvalidArgumentError: 잘못된 action/new_number, 새 번호가 이미 사용 중일 때
        """
        with self._lock:
            existing = self.find_chapter(book_id, candidate.series, candidate.number)
            resolution = resolve_conflict(existing, candidate, action, new_number)

            if resolution.outcome is ResolutionOutcome.SKIP:
                logger.info(f"Skipped existing chapter {candidate.key} (book {book_id})")
                return resolution

            number = resolution.effective_number
            title = build_chapter_title(number, candidate.name, candidate.is_final and number == FINAL_CHAPTER_NUMBER)
            values = (
                to_traditional(title),
                to_simplified(title),
                candidate.name,
                content,
                candidate.line_start,
                candidate.line_end,
                source_url,
            )

            if resolution.outcome is ResolutionOutcome.UPDATE:
                self.conn.execute("""
                    UPDATE chapters
                    SET chapter_title = ?, chapter_title_simplified = ?, chapter_name = ?, content = ?,
                        line_start = ?, line_end = ?, source_url = COALESCE(?, source_url),
                        status = 'downloaded', updated_at = datetime('now','localtime')
                    WHERE id = ?
                """, (*values, existing["id"]))
            else:
                if resolution.outcome is ResolutionOutcome.RENUMBER and \
                        self.find_chapter(book_id, candidate.series, number) is not None:
                    raise InvalidArgumentError(
                        f"Chapter {candidate.series}:{number} already exists in book {book_id}"
                    )
                self.conn.execute("""
                    INSERT INTO chapters
                    (book_id, series, chapter_number, chapter_title, chapter_title_simplified, chapter_name,
                     content, line_start, line_end, source_url, status)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'downloaded')
                """, (book_id, candidate.series, number, *values))

            self._touch_book(book_id)
            self.conn.commit()

        logger.info(f"✅ Chapter {candidate.series}:{number} {resolution.outcome.value} (book {book_id})")
        return resolution

    def _touch_book(self, book_id: int) -> None:
        self.conn.execute("""
            UPDATE books
            SET total_chapters = (SELECT COUNT(*) FROM chapters WHERE book_id = ?),
                last_updated = datetime('now','localtime')
            WHERE id = ?
        """, (book_id, book_id))
