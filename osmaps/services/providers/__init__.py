"""
Провайдеры карт: симуляция в памяти и Google Maps в браузере.
"""
from typing import Optional

from osmaps.config.settings import settings
from osmaps.services.providers.base import MapProvider, STATUS_OK, STATUS_ZERO_RESULTS
from osmaps.services.providers.memory import MemoryMapProvider


def create_provider(container_ids: Optional[list[str]] = None) -> MapProvider:
    """
    Создает провайдер карт согласно настройкам (MAP_PROVIDER).

    Args:
        container_ids: Контейнеры карт для страницы браузера (только для playwright)
    """
    if not settings.is_browser_provider():
        return MemoryMapProvider()

    # Импортируем здесь, чтобы режим симуляции не требовал Playwright
    from osmaps.services.providers.browser_manager import BrowserManager
    from osmaps.services.providers.playwright_provider import PlaywrightMapProvider

    manager = BrowserManager()
    page = manager.open_map_page(settings.GOOGLE_MAPS_API_KEY, container_ids or settings.get_container_ids())
    return PlaywrightMapProvider(page, manager)


__all__ = [
    "MapProvider",
    "MemoryMapProvider",
    "STATUS_OK",
    "STATUS_ZERO_RESULTS",
    "create_provider",
]
