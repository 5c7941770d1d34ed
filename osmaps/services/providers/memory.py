"""
Провайдер карт в памяти (режим симуляции).

Не требует браузера и ключа API: объекты провайдера - обычные объекты Python,
события вызываются явно через trigger(), ответы сервиса маршрутов приходят
по complete_route()/complete_routes() (или сразу, если auto_complete_routes).
"""
from collections import deque
from itertools import count
from weakref import WeakKeyDictionary
from typing import Any, Callable, Optional
from loguru import logger

from osmaps.models.geo import DirectionsResult, Envelope, Itinerary, Leg, LatLng
from osmaps.services.providers.base import MapProvider, STATUS_OK, STATUS_ZERO_RESULTS


class MemoryMap:
    def __init__(self, container_id: str, options: dict):
        self.container_id = container_id
        self.options = options
        self.zoom = options.get("zoom")
        center = options.get("center")
        self.center: Optional[LatLng] = LatLng.parse(center) if center is not None else None
        self.viewport: Optional[Envelope] = None

    def __repr__(self) -> str:
        return f"<MemoryMap '{self.container_id}' zoom={self.zoom} center={self.center}>"

    def set_center(self, point: Any) -> None:
        self.center = LatLng.parse(point)

    def fit_bounds(self, envelope: Envelope) -> None:
        self.viewport = envelope
        self.center = LatLng((envelope.south + envelope.north) / 2, (envelope.west + envelope.east) / 2)


class MemoryMarker:
    def __init__(self, options: dict):
        self.options = options
        self.position = LatLng.parse(options["position"])
        self.map: Optional[MemoryMap] = options.get("map")

    def __repr__(self) -> str:
        return f"<MemoryMarker {self.position}>"

    def set_map(self, map_obj: Optional[MemoryMap]) -> None:
        self.map = map_obj

    def get_position(self) -> LatLng:
        return self.position


class MemoryBounds:
    """Агрегат области: оболочка всех добавленных точек и областей."""

    def __init__(self):
        self.envelope: Optional[Envelope] = None

    def __repr__(self) -> str:
        return f"<MemoryBounds {self.envelope}>"

    def extend(self, point: Any) -> None:
        self.union(Envelope.from_points(LatLng.parse(point)))

    def union(self, other: Any) -> None:
        envelope = other.envelope if isinstance(other, MemoryBounds) else other
        if envelope is None:
            return
        if self.envelope is None:
            self.envelope = envelope
            return
        self.envelope = Envelope(
            min(self.envelope.south, envelope.south),
            min(self.envelope.west, envelope.west),
            max(self.envelope.north, envelope.north),
            max(self.envelope.east, envelope.east),
        )

    def is_empty(self) -> bool:
        return self.envelope is None

    def contains(self, point: Any) -> bool:
        return self.envelope is not None and self.envelope.contains(LatLng.parse(point))


class MemoryRouteRenderer:
    def __init__(self):
        self.map: Optional[MemoryMap] = None
        self.directions: Optional[DirectionsResult] = None

    def set_map(self, map_obj: Optional[MemoryMap]) -> None:
        self.map = map_obj

    def set_directions(self, response: DirectionsResult) -> None:
        self.directions = response

    def get_directions(self) -> DirectionsResult:
        return self.directions or DirectionsResult()


class MemoryGeocoder:
    def __init__(self, provider: "MemoryMapProvider"):
        self._provider = provider

    def geocode(self, request: dict, callback: Callable[[list, str], None]) -> None:
        results = self._provider.lookup_geocode(request)
        callback(results, STATUS_OK if results else STATUS_ZERO_RESULTS)


class MemoryRoutingService:
    def __init__(self, provider: "MemoryMapProvider"):
        self._provider = provider

    def route(self, request: dict, callback: Callable[[Any, str], None]) -> None:
        self._provider.enqueue_route(request, callback)


class MemoryMapProvider(MapProvider):
    """Провайдер карт в памяти."""

    name = "memory"

    def __init__(
        self,
        places: Optional[dict[str, Any]] = None,
        auto_complete_routes: bool = False,
    ):
        """
        Args:
            places: Справочник геокодера {адрес: координаты}
            auto_complete_routes: Отвечать на запросы маршрутов сразу
        """
        self.places: dict[str, LatLng] = {}
        self.add_places(places or {})
        self.auto_complete_routes = auto_complete_routes
        self.maps: list[MemoryMap] = []
        self.markers: list[MemoryMarker] = []
        self.geocoders_created = 0
        self.routing_services_created = 0
        self._pending_routes: deque = deque()
        # Ключ - сам объект провайдера, запись исчезает вместе с объектом
        self._listeners: WeakKeyDictionary = WeakKeyDictionary()
        self._listener_ids = count(1)
        self._environment_callbacks: list[Callable[[], Any]] = []
        self.loaded = False

    # Создание объектов

    def construct_map(self, container_id: str, options: dict) -> MemoryMap:
        map_obj = MemoryMap(container_id, options)
        self.maps.append(map_obj)
        return map_obj

    def construct_marker(self, options: dict) -> MemoryMarker:
        marker = MemoryMarker(options)
        self.markers.append(marker)
        return marker

    def construct_geocoder(self) -> MemoryGeocoder:
        self.geocoders_created += 1
        return MemoryGeocoder(self)

    def construct_routing_service(self) -> MemoryRoutingService:
        self.routing_services_created += 1
        return MemoryRoutingService(self)

    def construct_route_renderer(self) -> MemoryRouteRenderer:
        return MemoryRouteRenderer()

    def construct_bounds(self) -> MemoryBounds:
        return MemoryBounds()

    def fit_bounds(self, map_obj: MemoryMap, bounds: MemoryBounds) -> None:
        if bounds.envelope is not None:
            map_obj.fit_bounds(bounds.envelope)

    # Окружение

    def watch_environment(self, callback: Callable[[], Any]) -> None:
        if self.loaded:
            callback()
        else:
            self._environment_callbacks.append(callback)

    def load(self) -> None:
        """Имитирует полную загрузку окружения."""
        if self.loaded:
            logger.warning("Окружение провайдера уже загружено")
            return
        self.loaded = True
        callbacks, self._environment_callbacks = self._environment_callbacks, []
        for callback in callbacks:
            callback()

    # События

    def add_listener(self, target: Any, event_name: str, handler: Callable[..., Any]) -> int:
        return self._subscribe(target, event_name, handler, once=False)

    def add_listener_once(self, target: Any, event_name: str, handler: Callable[..., Any]) -> int:
        return self._subscribe(target, event_name, handler, once=True)

    def _subscribe(self, target: Any, event_name: str, handler: Callable[..., Any], once: bool) -> int:
        listener_id = next(self._listener_ids)
        events = self._listeners.setdefault(target, {})
        events.setdefault(event_name, []).append((listener_id, handler, once))
        return listener_id

    def listener_count(self, target: Any, event_name: str) -> int:
        return len(self._listeners.get(target, {}).get(event_name, []))

    def trigger(self, target: Any, event_name: str, *args: Any) -> int:
        """
        Вызывает обработчики события объекта.

        Returns:
            Количество вызванных обработчиков
        """
        listeners = self._listeners.get(target, {}).get(event_name, [])
        current = list(listeners)
        listeners[:] = [item for item in listeners if not item[2]]
        for _, handler, _ in current:
            handler(*args)
        return len(current)

    # Геокодер

    def add_places(self, places: dict[str, Any]) -> None:
        """Добавляет адреса в справочник геокодера."""
        self.places.update({address: LatLng.parse(point) for address, point in places.items()})

    def lookup_geocode(self, request: dict) -> list[dict]:
        if request.get("address") is not None:
            point = self.places.get(request["address"])
            if point is None:
                return []
            return [{"formatted_address": request["address"], "location": point}]

        location = request.get("location")
        if location is None:
            return []
        location = LatLng.parse(location)
        return [
            {"formatted_address": address, "location": point}
            for address, point in self.places.items()
            if point == location
        ]

    # Маршруты

    @property
    def pending_routes(self) -> int:
        return len(self._pending_routes)

    def enqueue_route(self, request: dict, callback: Callable[[Any, str], None]) -> None:
        if self.auto_complete_routes:
            callback(self.default_directions(request), STATUS_OK)
            return
        self._pending_routes.append((request, callback))

    def complete_route(
        self,
        response: Optional[DirectionsResult] = None,
        status: str = STATUS_OK,
    ) -> dict:
        """
        Отвечает на самый старый ожидающий запрос маршрута.

        Returns:
            Запрос, на который был дан ответ

        Raises:
            IndexError: Если ожидающих запросов нет
        """
        request, callback = self._pending_routes.popleft()
        if response is None and status == STATUS_OK:
            response = self.default_directions(request)
        callback(response, status)
        return request

    def complete_routes(self) -> int:
        """Отвечает на все ожидающие запросы маршрутов ответом по умолчанию."""
        completed = 0
        while self._pending_routes:
            self.complete_route()
            completed += 1
        return completed

    def default_directions(self, request: dict) -> DirectionsResult:
        """Прямой маршрут от origin до destination без оценки длительности."""
        try:
            origin = self._resolve_place(request["origin"])
            destination = self._resolve_place(request["destination"])
        except (KeyError, ValueError) as e:
            logger.debug(f"Маршрут не построен в симуляции: {e}")
            return DirectionsResult()
        return DirectionsResult(routes=[
            Itinerary(legs=[Leg()], bounds=Envelope.from_points(origin, destination))
        ])

    def _resolve_place(self, value: Any) -> LatLng:
        if isinstance(value, str):
            if value not in self.places:
                raise ValueError(f"Адрес '{value}' не найден в справочнике")
            return self.places[value]
        return LatLng.parse(value)
