"""
Контракт провайдера карт.

Фасад не рисует карты и не считает маршруты сам: все объекты создает
провайдер. Объекты провайдера должны поддерживать следующие методы:

    карта:             set_center(point)
    маркер:            set_map(map | None), get_position() -> LatLng
    геокодер:          geocode(request, callback(results, status))
    сервис маршрутов:  route(request, callback(response, status))
    отрисовщик:        set_map(map | None), set_directions(response),
                       get_directions() -> DirectionsResult
    агрегат области:   extend(point), union(envelope), is_empty()
"""
from abc import ABC, abstractmethod
from typing import Any, Callable

# Статус успешного ответа сервисов геокодирования и маршрутов
STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"


class MapProvider(ABC):
    """Адаптер к внешнему картографическому API."""

    name = "base"

    # Событие, которым карта сообщает о завершении отрисовки
    SETTLED_EVENT = "idle"

    @abstractmethod
    def construct_map(self, container_id: str, options: dict) -> Any:
        """Создает карту в контейнере с указанными параметрами."""

    @abstractmethod
    def construct_marker(self, options: dict) -> Any:
        """Создает маркер. options["map"] - карта, на которую он добавляется."""

    @abstractmethod
    def construct_geocoder(self) -> Any:
        ...

    @abstractmethod
    def construct_routing_service(self) -> Any:
        ...

    @abstractmethod
    def construct_route_renderer(self) -> Any:
        ...

    @abstractmethod
    def construct_bounds(self) -> Any:
        """Создает пустой агрегат области."""

    @abstractmethod
    def add_listener(self, target: Any, event_name: str, handler: Callable[..., Any]) -> Any:
        """Подписывает обработчик на событие объекта провайдера."""

    @abstractmethod
    def add_listener_once(self, target: Any, event_name: str, handler: Callable[..., Any]) -> Any:
        """Подписывает обработчик на первое срабатывание события."""

    @abstractmethod
    def fit_bounds(self, map_obj: Any, bounds: Any) -> None:
        """Подгоняет видимую часть карты под агрегат области."""

    def watch_environment(self, callback: Callable[[], Any]) -> None:
        """
        Подписывает callback на сигнал полной загрузки окружения.

        По умолчанию провайдер сигнала не подает: хост сам вызывает
        OSMapsAPI.environment_ready().
        """

    def close(self) -> None:
        """Освобождает ресурсы провайдера."""
