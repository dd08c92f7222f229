"""SQLite 데이터베이스 스키마 정의 및 초기화

3개 테이블:
1. books - 책 (간체 이름 기준 유일)
2. book_tags - 책 태그
3. chapters - 챕터 ((book_id, series, chapter_number) 유일)
"""

import sqlite3
from pathlib import Path
from typing import Optional
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

CHAPTER_STATUSES = ("pending", "downloading", "downloaded", "completed", "failed")

# DB 스키마 정의
SCHEMA_SQL = """
-- ============================================
-- 책 테이블
-- ============================================
CREATE TABLE IF NOT EXISTS books (
  id                    INTEGER PRIMARY KEY AUTOINCREMENT,
  book_name_simplified  TEXT NOT NULL UNIQUE,
  book_name_traditional TEXT,
  author                TEXT,
  category              TEXT,
  description           TEXT,
  source_url            TEXT,
  total_chapters        INTEGER DEFAULT 0,
  last_updated          TEXT,
  created_at            TEXT DEFAULT (datetime('now','localtime'))
);

-- ============================================
-- 책 태그
-- ============================================
CREATE TABLE IF NOT EXISTS book_tags (
  id              INTEGER PRIMARY KEY AUTOINCREMENT,
  book_id         INTEGER NOT NULL,
  tag             TEXT NOT NULL,
  FOREIGN KEY (book_id) REFERENCES books(id) ON DELETE CASCADE,
  UNIQUE(book_id, tag)
);

CREATE INDEX IF NOT EXISTS idx_book_tags_book_id ON book_tags(book_id);

-- ============================================
-- 챕터 테이블
-- ============================================
CREATE TABLE IF NOT EXISTS chapters (
  id                        INTEGER PRIMARY KEY AUTOINCREMENT,
  book_id                   INTEGER NOT NULL,
  series                    TEXT NOT NULL DEFAULT 'official',
  chapter_number            INTEGER NOT NULL,
  chapter_title             TEXT,
  chapter_title_simplified  TEXT,
  chapter_name              TEXT,
  content                   TEXT,
  line_start                INTEGER,
  line_end                  INTEGER,
  source_url                TEXT,
  status                    TEXT DEFAULT 'pending',
  created_at                TEXT DEFAULT (datetime('now','localtime')),
  updated_at                TEXT DEFAULT (datetime('now','localtime')),
  FOREIGN KEY (book_id) REFERENCES books(id) ON DELETE CASCADE,
  UNIQUE(book_id, series, chapter_number)
);

CREATE INDEX IF NOT EXISTS idx_chapters_book_id ON chapters(book_id);
CREATE INDEX IF NOT EXISTS idx_chapters_status ON chapters(status);
"""


class Database:
    """SQLite 데이터베이스 관리 클래스"""

    def __init__(self, db_path: str = "data/novel_archiver.db"):
        """
        Args:
            db_path: 데이터베이스 파일 경로 (":memory:" 가능)
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn: Optional[sqlite3.Connection] = None
        logger.info(f"Database initialized: {self.db_path}")

    def connect(self) -> sqlite3.Connection:
        """데이터베이스 연결

        Returns:
            sqlite3.Connection 객체
        """
        if self.conn is None:
            self.conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False
            )
            self.conn.row_factory = sqlite3.Row  # dict-like 접근
            self.conn.execute("PRAGMA foreign_keys = ON")
            logger.debug(f"Connected to database: {self.db_path}")
        return self.conn

    def initialize_schema(self) -> None:
        """스키마 초기화 (테이블 생성 및 마이그레이션)"""
        logger.info("Initializing database schema...")
        conn = self.connect()
        conn.executescript(SCHEMA_SQL)

        # 마이그레이션: 예전 DB 에 없는 컬럼 추가
        cursor = conn.cursor()
        cursor.execute("PRAGMA table_info(chapters)")
        columns = [row[1] for row in cursor.fetchall()]
        if "chapter_name" not in columns:
            logger.info("Migrating: Adding 'chapter_name' column to 'chapters' table")
            cursor.execute("ALTER TABLE chapters ADD COLUMN chapter_name TEXT")
        conn.commit()

        logger.info("✅ Database schema initialized successfully")

    def close(self) -> None:
        """데이터베이스 연결 종료"""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Database connection closed")

    def __enter__(self):
        """Context manager 진입"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager 종료"""
        self.close()


def get_database(db_path: str = "data/novel_archiver.db") -> Database:
    """데이터베이스 인스턴스 반환

    Example:
        >>> from novel_archiver.db.schema import get_database
        >>> db = get_database()
        >>> db.initialize_schema()
    """
    return Database(db_path)
