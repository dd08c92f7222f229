"""전역 로깅 설정 모듈

모든 모듈에서 `from novel_archiver.utils.logger import get_logger` 로 사용.

임포트 시점에는 기본값(data/logs, 파일 DEBUG / 콘솔 INFO)으로 초기화되고,
CLI 가 config.yml 을 읽은 뒤 `setup_logging(...)` 을 다시 호출해
paths.logs / logging.file_level / logging.console_level 을 적용한다.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

# 기본 로그 디렉토리 (NOVEL_ARCHIVER_LOG_DIR 로 변경 가능)
LOG_DIR = Path(os.environ.get("NOVEL_ARCHIVER_LOG_DIR", "data/logs"))

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"


def log_file_for(log_dir: Union[str, Path]) -> Path:
    """날짜별 로그 파일 경로 (예: data/logs/2026-10-18.log)"""
    return Path(log_dir) / f"{datetime.now().strftime('%Y-%m-%d')}.log"


_own_handlers: List[logging.Handler] = []


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def setup_logging(
    level: str = "DEBUG",
    console_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """전역 로깅 설정

    기존 핸들러를 모두 제거하고 파일 + 콘솔 핸들러를 새로 단다.

    Args:
        level: 파일 로그 레벨 (DEBUG/INFO/WARNING/ERROR)
        console_level: 콘솔 로그 레벨
        log_dir: 로그 디렉토리 (None 이면 LOG_DIR)

    Returns:
        로그 파일 경로

    Raises:
        ValueError: 알 수 없는 레벨 이름
    """
    file_level = _level(level)
    stream_level = _level(console_level)

    directory = Path(log_dir) if log_dir else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_file = log_file_for(directory)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # 기존 핸들러 제거 (직접 만든 핸들러만 닫음)
    root_logger.handlers.clear()
    while _own_handlers:
        _own_handlers.pop().close()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(stream_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    for handler in (file_handler, console_handler):
        root_logger.addHandler(handler)
        _own_handlers.append(handler)

    root_logger.debug(f"Logging initialized: file={log_file}, level={level}, console={console_level}")
    return log_file


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """로거 인스턴스 반환

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("章節分割完成")
    """
    return logging.getLogger(name or "novel_archiver")


# 모듈 임포트 시 기본값으로 초기화
setup_logging()
