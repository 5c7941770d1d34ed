"""
Настройка логирования через loguru.
"""
import sys
from typing import Optional
from loguru import logger
from osmaps.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(level: Optional[str] = None, to_file: bool = True) -> None:
    """
    Настраивает логирование через loguru.

    Args:
        level: Уровень логирования (по умолчанию settings.LOG_LEVEL)
        to_file: Писать ли лог в файл с ротацией
    """
    level = level or settings.LOG_LEVEL

    # Удаляем стандартный обработчик
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if to_file:
        settings.LOGS_DIR.mkdir(exist_ok=True)
        logger.add(
            settings.LOG_FILE,
            format=FILE_FORMAT,
            level=level,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression="zip",
            encoding="utf-8",
        )

    logger.info(f"Логирование настроено (уровень {level})")


__all__ = ["logger", "setup_logger"]
