"""
Общие фикстуры тестов фасада карт.
"""
import pytest
from loguru import logger

from osmaps.services.facade import OSMapsAPI
from osmaps.services.providers import MemoryMapProvider

MOSCOW = {"lat": 55.7558, "lng": 37.6173}
PLACES = {
    "Красная площадь": MOSCOW,
    "Парк Горького": {"lat": 55.7298, "lng": 37.6011},
    "ВДНХ": {"lat": 55.8263, "lng": 37.6377},
}


@pytest.fixture
def provider():
    return MemoryMapProvider(places=PLACES)


@pytest.fixture
def api(provider):
    """Фасад до сигнала готовности окружения."""
    return OSMapsAPI(provider)


@pytest.fixture
def ready_api(api, provider):
    """Фасад после сигнала готовности окружения."""
    provider.load()
    return api


@pytest.fixture
def log_messages():
    """Сообщения loguru, записанные во время теста."""
    messages = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
