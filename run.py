"""
Точка входа для демонстрации фасада карт.
Запуск: python run.py

Провайдер выбирается через MAP_PROVIDER в .env (memory или playwright).
Операции регистрируются до готовности окружения и выполняются после сигнала.
"""
import sys
from loguru import logger

from osmaps.config.settings import settings
from osmaps.utils.logger import setup_logger
from osmaps.services.facade import OSMapsAPI, OSMapsError
from osmaps.services.providers import MemoryMapProvider, create_provider

MAP_ID = "main"
MOSCOW = {"lat": 55.7558, "lng": 37.6173}
PLACES = {
    "Москва, Красная площадь": MOSCOW,
    "Москва, Парк Горького": {"lat": 55.7298, "lng": 37.6011},
    "Москва, ВДНХ": {"lat": 55.8263, "lng": 37.6377},
}


def build_demo(api: OSMapsAPI, container_id: str) -> None:
    """Регистрирует карту, маркеры, маршрут и область."""
    api.create_map(MAP_ID, container_id, zoom=11, center=MOSCOW)

    # Подписка на маркер, который еще не добавлен
    api.add_marker_event(MAP_ID, "park", "click", lambda *args: logger.info(f"Клик по маркеру park: {args}"))
    api.add_map_event(MAP_ID, "click", lambda *args: logger.info(f"Клик по карте: {args}"))

    for marker_id, address in (("square", "Москва, Красная площадь"), ("park", "Москва, Парк Горького")):
        api.extend_bounds_with_marker(MAP_ID, "overview", marker_id)
        api.add_marker(MAP_ID, marker_id, {"position": PLACES[address], "title": address})

    api.add_route(
        MAP_ID,
        "to-vdnh",
        {"origin": PLACES["Москва, Красная площадь"], "destination": PLACES["Москва, ВДНХ"], "travelMode": "DRIVING"},
        on_ready=lambda route: logger.info(
            f"Маршрут готов, длительность: {api.get_route_duration_seconds(MAP_ID, route.id)} сек"
        ),
    )
    api.extend_bounds_with_route(MAP_ID, "overview", "to-vdnh")
    api.fit_to_bounds(MAP_ID, "overview")

    api.geocode("Москва, ВДНХ", lambda results, status: logger.info(f"Геокодирование ({status}): {results}"))


def main() -> int:
    """Главная функция демонстрации."""
    setup_logger()

    try:
        settings.validate()
    except ValueError as e:
        logger.error(f"❌ Ошибка конфигурации: {e}")
        return 1

    logger.info(f"🚀 Запуск фасада карт (провайдер: {settings.MAP_PROVIDER})")
    container_id = settings.get_container_ids()[0]

    provider = create_provider([container_id])
    if isinstance(provider, MemoryMapProvider):
        provider.add_places(PLACES)

    try:
        api = OSMapsAPI(provider)
        build_demo(api, container_id)

        if isinstance(provider, MemoryMapProvider):
            # Симуляция: загрузка окружения, ответ сервиса маршрутов, завершение отрисовки
            provider.load()
            provider.complete_routes()
            provider.trigger(api.get_map(MAP_ID).backing, provider.SETTLED_EVENT)
        else:
            provider.page.wait_for_timeout(5000)

        handle = api.get_map(MAP_ID)
        logger.info(
            f"✅ Карта '{MAP_ID}': маркеров {len(handle.markers)}, маршрутов {len(handle.routes)}, "
            f"областей {len(handle.bounds)}"
        )
        return 0
    except OSMapsError as e:
        logger.error(f"❌ Ошибка фасада карт: {e}")
        return 1
    finally:
        provider.close()
        logger.info("👋 Работа завершена")


if __name__ == "__main__":
    sys.exit(main())
