"""
Менеджер браузера для провайдера Google Maps.
Запускает Chromium через Playwright и открывает страницу с картографическим API.
"""
import html
import os
import platform
from typing import Optional
from loguru import logger

from playwright.sync_api import Browser, BrowserContext, Page, Playwright

from osmaps.config.settings import settings
from osmaps.services.facade.exceptions import ProviderError

GOOGLE_MAPS_SCRIPT_URL = "https://maps.googleapis.com/maps/api/js"

MAP_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>html, body {{ margin: 0; height: 100%; }} .osmaps-container {{ width: 100%; height: {height}px; }}</style>
<script src="{script_url}?key={api_key}"></script>
</head>
<body>
{containers}
</body>
</html>
"""


def build_map_page(api_key: str, container_ids: list[str], height: int = 600) -> str:
    """Формирует HTML страницы с контейнерами карт и скриптом Google Maps."""
    containers = "\n".join(
        f'<div id="{html.escape(container_id)}" class="osmaps-container"></div>'
        for container_id in container_ids
    )
    return MAP_PAGE_TEMPLATE.format(
        height=height,
        script_url=GOOGLE_MAPS_SCRIPT_URL,
        api_key=html.escape(api_key),
        containers=containers,
    )


class BrowserManager:
    """Менеджер браузера Playwright для страниц с картами."""

    def __init__(self, headless: Optional[bool] = None):
        self._headless = settings.BROWSER_HEADLESS if headless is None else headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    def get_browser(self) -> Browser:
        """
        Получить экземпляр браузера.
        Создает браузер при первом вызове.
        """
        if self._browser is None:
            self._init_browser()
        return self._browser

    def _init_browser(self) -> None:
        """Инициализирует браузер Playwright."""
        try:
            from playwright.sync_api import sync_playwright

            if not self._headless and platform.system() == "Linux" and not os.getenv("DISPLAY"):
                logger.warning(
                    "⚠️ DISPLAY не установлен, а BROWSER_HEADLESS=false! Браузеру нужен графический интерфейс.\n"
                    "Для Linux сервера используйте Xvfb: xvfb-run -a python run.py"
                )

            if self._playwright is None:
                self._playwright = sync_playwright().start()
                logger.debug("Playwright инициализирован")

            if self._browser is None:
                self._browser = self._playwright.chromium.launch(headless=self._headless)
                logger.info("Браузер Playwright (Chromium) инициализирован")

        except ImportError:
            raise ProviderError(
                "Playwright не установлен. Установите: pip install playwright && playwright install chromium"
            )
        except Exception as e:
            logger.error(f"Ошибка инициализации браузера: {e}")
            raise ProviderError(f"Не удалось инициализировать браузер: {str(e)}")

    def create_context(self, **kwargs) -> BrowserContext:
        """
        Создает новый контекст браузера.

        Args:
            **kwargs: Параметры для создания контекста (viewport, locale и т.д.)
        """
        context_options = {"viewport": {"width": 1280, "height": 800}, **kwargs}
        context = self.get_browser().new_context(**context_options)
        logger.debug("Создан новый контекст браузера")
        return context

    def open_map_page(self, api_key: str, container_ids: list[str], timeout: int = 30000) -> Page:
        """
        Открывает страницу с контейнерами карт и ждет загрузки Google Maps API.

        Args:
            api_key: Ключ Google Maps JavaScript API
            container_ids: Идентификаторы контейнеров карт на странице
            timeout: Таймаут ожидания в миллисекундах

        Raises:
            ProviderError: Если страница или API не загрузились
        """
        page = self.create_context().new_page()
        try:
            page.set_content(build_map_page(api_key, container_ids), wait_until="load", timeout=timeout)
            page.wait_for_function(
                "() => Boolean(window.google && window.google.maps && window.google.maps.Map)",
                timeout=timeout,
            )
        except Exception as e:
            logger.error(f"Google Maps API не загрузился: {e}")
            raise ProviderError(f"Не удалось загрузить страницу карт: {str(e)}")
        logger.info(f"Страница карт загружена, контейнеров: {len(container_ids)}")
        return page

    def close(self) -> None:
        """Закрывает браузер и освобождает ресурсы."""
        if self._browser:
            try:
                self._browser.close()
                logger.info("Браузер закрыт")
            except Exception as e:
                logger.warning(f"Ошибка при закрытии браузера: {e}")
            self._browser = None

        if self._playwright:
            try:
                self._playwright.stop()
                logger.debug("Playwright остановлен")
            except Exception as e:
                logger.warning(f"Ошибка при остановке Playwright: {e}")
            self._playwright = None
