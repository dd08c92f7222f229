"""DB 스키마 및 Config 로더 테스트"""

import logging
import tempfile
from pathlib import Path

import pytest
from novel_archiver.config import loader
from novel_archiver.config.loader import Config, configure_logging, load_config, save_config
from novel_archiver.db.schema import get_database
from novel_archiver.utils.logger import setup_logging


def test_database():
    """데이터베이스 스키마 테스트"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        db = get_database(str(Path(tmp_dir) / "sub" / "test.db"))
        db.initialize_schema()
        db.initialize_schema()

        conn = db.connect()
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = {row[0] for row in cursor.fetchall()}
        assert {"books", "book_tags", "chapters"} <= tables
        db.close()


def test_load_and_save_config():
    """설정 저장 후 다시 읽기"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = str(Path(tmp_dir) / "config.yml")
        config = Config.default()
        config.processing.max_workers = 8
        config.processing.default_conflict_action = "discard"
        save_config(config, path)

        loaded = load_config(path)
        assert loaded.processing.max_workers == 8
        assert loaded.processing.default_conflict_action == "discard"
        assert loaded.paths.database == config.paths.database


def test_partial_config_uses_defaults():
    """파일에 없는 항목은 기본값"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / "config.yml"
        path.write_text("processing:\n  chunk_size: 500\n", encoding="utf-8")
        config = load_config(str(path))
        assert config.processing.chunk_size == 500
        assert config.processing.max_workers == Config.default().processing.max_workers
        assert config.logging.console_level == "INFO"


def test_missing_config():
    """명시한 파일이 없으면 FileNotFoundError"""
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/config.yml")


def test_get_config_singleton(monkeypatch, tmp_path):
    """config/config.yml 이 없으면 기본 설정"""
    monkeypatch.chdir(tmp_path)
    loader.reset_config()
    try:
        config = loader.get_config()
        assert config == Config.default()
        assert loader.get_config() is config
    finally:
        loader.reset_config()


def test_configure_logging_from_yaml():
    """config.yml 의 로그 경로/레벨이 실제 핸들러에 적용됨"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        path = Path(tmp_dir) / "config.yml"
        log_dir = Path(tmp_dir) / "logs"
        path.write_text(
            f"paths:\n  logs: {log_dir.as_posix()}\n"
            "logging:\n  file_level: WARNING\n  console_level: ERROR\n",
            encoding="utf-8",
        )
        try:
            log_file = configure_logging(load_config(str(path)))
            root = logging.getLogger()
            assert sorted(handler.level for handler in root.handlers) == [logging.WARNING, logging.ERROR]
            assert log_file.parent == log_dir
            assert log_file.exists()
        finally:
            setup_logging()
