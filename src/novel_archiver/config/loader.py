"""설정 파일 로더 (YAML)

config.yml 을 읽어서 Python 객체로 변환
"""

import yaml
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field, asdict
from novel_archiver.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yml"


@dataclass
class PathsConfig:
    """경로 설정"""
    database: str = "data/novel_archiver.db"
    logs: str = "data/logs"
    output_folder: str = "data/output"


@dataclass
class ProcessingConfig:
    """처리 옵션"""
    max_workers: int = 4
    chunk_size: int = 1000
    convert_to_traditional: bool = True
    verbose_reformat: bool = False
    default_encoding: str = "utf-8"
    auto_detect_encoding: bool = True
    default_conflict_action: Optional[str] = None


@dataclass
class LoggingConfig:
    """로깅 설정"""
    file_level: str = "DEBUG"
    console_level: str = "INFO"


@dataclass
class Config:
    """전체 설정"""
    paths: PathsConfig = field(default_factory=PathsConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> "Config":
        return cls()


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """config.yml 로드

    파일에 없는 항목은 기본값을 쓴다.

    Args:
        config_path: 설정 파일 경로

    Returns:
        Config 객체

    Raises:
        FileNotFoundError: 설정 파일이 없을 때
        yaml.YAMLError: YAML 파싱 에러
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    config = Config(
        paths=PathsConfig(**data.get("paths", {})),
        processing=ProcessingConfig(**data.get("processing", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )

    logger.info(f"✅ Config loaded: database={config.paths.database}, workers={config.processing.max_workers}")
    return config


# 전역 설정 인스턴스 (싱글톤)
_config: Optional[Config] = None


def get_config() -> Config:
    """전역 설정 인스턴스 반환 (싱글톤)

    config/config.yml 이 없으면 기본 설정을 쓴다.

    Example:
        >>> from novel_archiver.config.loader import get_config
        >>> config = get_config()
        >>> print(config.paths.database)
    """
    global _config
    if _config is None:
        if Path(DEFAULT_CONFIG_PATH).exists():
            _config = load_config(DEFAULT_CONFIG_PATH)
        else:
            logger.debug(f"{DEFAULT_CONFIG_PATH} not found, using defaults")
            _config = Config.default()
    return _config


def reset_config() -> None:
    """싱글톤 초기화 (테스트용)"""
    global _config
    _config = None


def save_config(config: Config, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """config.yml 저장

    Args:
        config: Config 객체
        config_path: 설정 파일 경로
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {
        "paths": asdict(config.paths),
        "processing": asdict(config.processing),
        "logging": asdict(config.logging),
    }

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    logger.info(f"✅ Config saved: {config_path}")


def configure_logging(config: Config) -> Path:
    """설정의 로그 경로/레벨로 전역 로깅 재설정

    Returns:
        로그 파일 경로
    """
    log_file = setup_logging(
        level=config.logging.file_level,
        console_level=config.logging.console_level,
        log_dir=config.paths.logs,
    )
    logger.debug(f"Logging configured from config: {log_file}")
    return log_file
