"""로깅 설정"""
import logging
import sys
from pathlib import Path

from ..config import settings


def setup_logger(name: str, level: str = "INFO", log_dir: Path = Path("logs")) -> logging.Logger:
    """콘솔 + 파일 로거 설정"""

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 이미 핸들러가 있으면 추가하지 않음 (중복 방지)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_dir.mkdir(exist_ok=True)
    file_handler = logging.FileHandler(log_dir / "app.log")
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


# 전역 로거 인스턴스
logger = setup_logger("room_design_api", settings.log_level)
