"""로거 테스트 스크립트"""

import logging
import tempfile

import pytest
from novel_archiver.utils.logger import LOG_DIR, get_logger, setup_logging


def test_logger():
    """파일 + 콘솔 핸들러 설정"""
    log_file = setup_logging(level="DEBUG", console_level="WARNING")
    logger = get_logger(__name__)

    logger.debug("디버그 메시지 (파일에만 기록)")
    logger.info("정보 메시지 (파일에만 기록)")
    logger.warning("경고 메시지")

    root = logging.getLogger()
    levels = sorted(handler.level for handler in root.handlers)
    assert levels == [logging.DEBUG, logging.WARNING]
    assert log_file.parent == LOG_DIR

    for handler in root.handlers:
        handler.flush()
    assert "디버그 메시지" in log_file.read_text(encoding="utf-8")

    setup_logging()


def test_logger_custom_dir():
    """로그 디렉토리 지정, 재설정 시 핸들러가 쌓이지 않음"""
    with tempfile.TemporaryDirectory() as tmp_dir:
        log_file = setup_logging(level="INFO", console_level="ERROR", log_dir=f"{tmp_dir}/logs")
        setup_logging(level="INFO", console_level="ERROR", log_dir=f"{tmp_dir}/logs")
        assert len(logging.getLogger().handlers) == 2

        get_logger("novel_archiver.test").info("사용자 지정 경로")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "사용자 지정 경로" in log_file.read_text(encoding="utf-8")
        setup_logging()


def test_logger_unknown_level():
    """알 수 없는 레벨 이름은 ValueError"""
    with pytest.raises(ValueError):
        setup_logging(level="LOUD")


if __name__ == "__main__":
    test_logger()
    print("\n✅ 로거 테스트 완료!")
    print(f"📁 로그 파일 확인: {LOG_DIR}/")
