"""
Настройки и конфигурация фасада карт.
"""
import os
from pathlib import Path
from dotenv import load_dotenv
from loguru import logger

# Загрузка переменных окружения
load_dotenv()

# Базовые пути
BASE_DIR = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = BASE_DIR / "logs"

# Поддерживаемые провайдеры карт
PROVIDER_MEMORY = "memory"
PROVIDER_PLAYWRIGHT = "playwright"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Некорректное значение {name}={value!r}, используется {default}")
        return default


class Settings:
    """Класс для хранения настроек фасада карт."""

    # Провайдер карт: memory (симуляция) или playwright (Google Maps в браузере)
    MAP_PROVIDER: str = os.getenv("MAP_PROVIDER", PROVIDER_MEMORY).lower()
    GOOGLE_MAPS_API_KEY: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    # headless=False требует графический интерфейс (Xvfb на Linux серверах)
    BROWSER_HEADLESS: bool = _env_bool("BROWSER_HEADLESS", "true")
    # Контейнеры карт на странице браузера (через запятую или пробел)
    MAP_CONTAINERS: str = os.getenv("MAP_CONTAINERS", "map")

    # Параметры карт
    DEFAULT_ZOOM: int = _env_int("DEFAULT_ZOOM", 8)
    # Центрировать карту на новом маркере при добавлении
    CENTER_ON_MARKER: bool = _env_bool("CENTER_ON_MARKER", "true")
    # Порог длины очереди отложенных вызовов заглушки для предупреждения (0 - выключено)
    PENDING_CALLBACKS_WARN_THRESHOLD: int = _env_int("PENDING_CALLBACKS_WARN_THRESHOLD", 100)

    # Пути
    BASE_DIR: Path = BASE_DIR
    LOGS_DIR: Path = LOGS_DIR

    # Логирование
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Path = LOGS_DIR / "osmaps.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"

    @classmethod
    def validate(cls) -> None:
        """Проверяет корректность настроек."""
        if cls.MAP_PROVIDER not in (PROVIDER_MEMORY, PROVIDER_PLAYWRIGHT):
            raise ValueError(f"Неизвестный провайдер карт MAP_PROVIDER={cls.MAP_PROVIDER!r}")
        if cls.is_browser_provider() and not cls.GOOGLE_MAPS_API_KEY:
            raise ValueError("GOOGLE_MAPS_API_KEY не найден в переменных окружения!")

    @classmethod
    def is_browser_provider(cls) -> bool:
        """Проверяет, используется ли провайдер на основе браузера."""
        return cls.MAP_PROVIDER == PROVIDER_PLAYWRIGHT

    @classmethod
    def get_container_ids(cls) -> list[str]:
        """
        Получает список контейнеров карт из переменной окружения MAP_CONTAINERS.

        Формат в .env: MAP_CONTAINERS=map,overview
        Или через пробел: MAP_CONTAINERS=map overview
        """
        ids_str = cls.MAP_CONTAINERS.replace(",", " ").strip()
        return [container_id for container_id in ids_str.split() if container_id]


# Экземпляр настроек
settings = Settings()
