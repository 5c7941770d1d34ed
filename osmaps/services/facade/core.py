"""
Фасад карт: реестр карт и публичные операции над картами, маркерами,
маршрутами и областями.

Все операции можно вызывать до того, как провайдер карт готов: они
откладываются до создания соответствующего объекта и выполняются
строго в порядке поступления.
"""
from collections import deque
from typing import Any, Callable, Optional
from loguru import logger

from osmaps.config.settings import settings
from osmaps.models.geo import DirectionsResult, LatLng
from osmaps.services.facade.exceptions import MapNotFoundError, ProviderError, RouteNotFoundError
from osmaps.services.facade.handles import BoundsHandle, DeferredHandle
from osmaps.services.facade.registry import MapHandle
from osmaps.services.facade.signals import ReadySignal
from osmaps.services.providers.base import MapProvider, STATUS_OK
from osmaps.utils.options import deep_merge, parse_zoom


class OSMapsAPI:
    """Реестр карт и точка входа для всех операций фасада."""

    def __init__(self, provider: MapProvider):
        self.provider = provider
        self.maps: dict[str, MapHandle] = {}
        self._init_queue: deque[str] = deque()
        self._environment = ReadySignal("environment")
        self._environment.subscribe(self._initialize_pending_maps)
        self._geocoder = None
        provider.watch_environment(self.environment_ready)

    @property
    def is_ready(self) -> bool:
        return self._environment.fired

    # Карты

    def create_map(
        self,
        map_id: str,
        container_id: str,
        zoom: Any = None,
        center: Any = None,
        options: Optional[dict] = None,
    ) -> MapHandle:
        """
        Создает карту с идентификатором map_id.

        Если окружение уже готово, карта провайдера создается сразу, иначе
        карта ставится в очередь инициализации и до сигнала готовности
        существует как заглушка. Повторное создание карты с тем же
        идентификатором игнорируется.

        Args:
            map_id: Идентификатор карты
            container_id: Идентификатор контейнера, в котором рисуется карта
            zoom: Масштаб (некорректный или нулевой заменяется масштабом по умолчанию)
            center: Центр карты
            options: Дополнительные параметры карты, имеют приоритет над zoom/center

        Returns:
            Дескриптор карты
        """
        existing = self.maps.get(map_id)
        if existing is not None:
            logger.info(f"Карта '{map_id}' уже была создана ранее, повторное создание проигнорировано")
            return existing

        required = {"zoom": parse_zoom(zoom)}
        if center is not None:
            required["center"] = center.to_dict() if isinstance(center, LatLng) else center
        map_options = deep_merge(required, options)

        handle = MapHandle(map_id, container_id, map_options, self.provider.construct_bounds)
        self.maps[map_id] = handle

        if self.is_ready:
            self._construct_map(handle)
        else:
            self._init_queue.append(map_id)
            logger.debug(f"Карта '{map_id}' поставлена в очередь инициализации")
        return handle

    def environment_ready(self) -> bool:
        """
        Сигнал окружения о полной загрузке: создает все карты из очереди
        инициализации и выполняет их отложенные вызовы.

        Срабатывает один раз; повторные вызовы игнорируются.
        """
        return self._environment.fire(self)

    def _initialize_pending_maps(self, _: Any = None) -> None:
        logger.info(f"Окружение готово, карт в очереди инициализации: {len(self._init_queue)}")
        while self._init_queue:
            handle = self.maps[self._init_queue.popleft()]
            try:
                self._construct_map(handle)
            except ProviderError:
                logger.exception(f"Карта '{handle.map_id}': провайдер не смог создать карту")

    def _construct_map(self, handle: MapHandle) -> None:
        map_obj = self.provider.construct_map(handle.container_id, handle.options)
        self.provider.add_listener_once(
            map_obj, self.provider.SETTLED_EVENT, lambda *args: handle.settled.fire(handle)
        )
        handle.resolve(map_obj)
        logger.info(f"Карта '{handle.map_id}' создана")

    def find_map(self, map_id: str) -> Optional[MapHandle]:
        return self.maps.get(map_id)

    def get_map(self, map_id: str) -> MapHandle:
        """
        Возвращает карту по идентификатору.

        Raises:
            MapNotFoundError: Если карта не создавалась
        """
        handle = self.maps.get(map_id)
        if handle is None:
            raise MapNotFoundError(map_id)
        return handle

    def on_map_ready(self, map_id: str, callback: Callable[[MapHandle], None]) -> None:
        """Выполняет callback(handle) после создания карты (или сразу, если она уже создана)."""
        self.get_map(map_id).execute_on_load(callback)

    def add_map_event(self, map_id: str, event_name: str, handler: Callable[..., Any]) -> None:
        """Подписывает обработчик на событие карты (после ее создания)."""
        self.get_map(map_id).execute_on_load(
            lambda handle: self.provider.add_listener(handle.backing, event_name, handler)
        )

    # Геокодирование

    def _get_geocoder(self):
        if self._geocoder is None:
            self._geocoder = self.provider.construct_geocoder()
        return self._geocoder

    def geocode(self, address: str, callback: Callable[[list, str], None]) -> None:
        """Ищет координаты по адресу; callback(results, status)."""
        self._get_geocoder().geocode({"address": address}, callback)

    def reverse_geocode(self, point: Any, callback: Callable[[list, str], None]) -> None:
        """Ищет адрес по координатам; callback(results, status)."""
        self._get_geocoder().geocode({"location": LatLng.parse(point)}, callback)

    # Маркеры

    def add_marker(self, map_id: str, marker_id: str, marker_options: dict) -> None:
        """
        Добавляет маркер на карту (после ее создания).

        Если на маркер уже подписывались (есть заглушка), отложенные вызовы
        выполняются сразу после создания маркера. Повторное добавление
        существующего маркера игнорируется.

        Raises:
            MapNotFoundError: Если карта не создавалась
        """
        try:
            map_handle = self.get_map(map_id)
        except MapNotFoundError:
            logger.error(f"Попытка добавить маркер '{marker_id}' на несуществующую карту '{map_id}'")
            raise

        def create_marker(handle: MapHandle) -> None:
            if handle.markers.is_real(marker_id):
                logger.info(f"Маркер '{marker_id}' (карта '{map_id}') уже был добавлен ранее")
                return
            if settings.CENTER_ON_MARKER and "position" in marker_options:
                handle.backing.set_center(marker_options["position"])
            marker = self.provider.construct_marker({**marker_options, "map": handle.backing})
            handle.markers.add_real(marker_id, marker)
            logger.debug(f"Маркер '{marker_id}' добавлен на карту '{map_id}'")

        map_handle.execute_on_load(create_marker)

    def remove_marker(self, map_id: str, marker_id: str) -> None:
        """Удаляет маркер с карты (после ее создания). Неизвестный маркер игнорируется."""
        self.get_map(map_id).execute_on_load(
            lambda handle: self._remove_entity(handle.markers, marker_id)
        )

    def add_marker_event(
        self,
        map_id: str,
        marker_id: str,
        event_name: str,
        handler: Callable[..., Any],
    ) -> None:
        """
        Подписывает обработчик на событие маркера.

        Маркер может быть еще не добавлен: тогда создается заглушка, и
        обработчик подключается ровно один раз сразу после создания маркера.
        """
        marker = self.get_map(map_id).markers.find_or_stub(marker_id)
        marker.execute_on_load(
            lambda handle: self.provider.add_listener(handle.backing, event_name, handler)
        )

    # Маршруты

    def add_route(
        self,
        map_id: str,
        route_id: str,
        request: dict,
        on_ready: Optional[Callable[[DeferredHandle], None]] = None,
    ) -> None:
        """
        Запрашивает маршрут у сервиса маршрутов и отрисовывает его на карте.

        Для каждого вызова создается новый сервис маршрутов, поэтому
        несколько маршрутов на одной карте можно запрашивать одновременно.

        Args:
            map_id: Идентификатор карты
            route_id: Идентификатор маршрута
            request: Параметры запроса маршрута (origin, destination, ...)
            on_ready: Вызывается с дескриптором маршрута после отрисовки
        """
        def request_route(handle: MapHandle) -> None:
            service = self.provider.construct_routing_service()
            service.route(request, lambda response, status: self._on_route_response(
                handle, route_id, response, status, on_ready
            ))

        self.get_map(map_id).execute_on_load(request_route)

    def _on_route_response(
        self,
        handle: MapHandle,
        route_id: str,
        response: Any,
        status: str,
        on_ready: Optional[Callable[[DeferredHandle], None]],
    ) -> None:
        if status != STATUS_OK:
            logger.warning(f"Запрос маршрута '{route_id}' (карта '{handle.map_id}') завершился со статусом \"{status}\"")
            return

        if handle.routes.is_real(route_id):
            logger.info(f"Маршрут '{route_id}' (карта '{handle.map_id}') уже был добавлен ранее")
            return

        renderer = self.provider.construct_route_renderer()
        renderer.set_map(handle.backing)
        renderer.set_directions(response)
        route = handle.routes.add_real(route_id, renderer)
        logger.debug(f"Маршрут '{route_id}' отрисован на карте '{handle.map_id}'")

        if on_ready is not None:
            on_ready(route)

    def remove_route(self, map_id: str, route_id: str) -> None:
        """Удаляет маршрут с карты (после ее создания). Неизвестный маршрут игнорируется."""
        self.get_map(map_id).execute_on_load(
            lambda handle: self._remove_entity(handle.routes, route_id)
        )

    def add_route_event(
        self,
        map_id: str,
        route_id: str,
        event_name: str,
        handler: Callable[..., Any],
    ) -> None:
        """Подписывает обработчик на событие отрисовщика маршрута (см. add_marker_event)."""
        route = self.get_map(map_id).routes.find_or_stub(route_id)
        route.execute_on_load(
            lambda handle: self.provider.add_listener(handle.backing, event_name, handler)
        )

    def get_route_duration_seconds(self, map_id: str, route_id: str) -> int:
        """
        Длительность первого варианта маршрута в секундах.

        Returns:
            Сумма длительностей участков (0, если вариантов или участков нет)

        Raises:
            MapNotFoundError: Если карта не создавалась
            RouteNotFoundError: Если маршрут не добавлялся или еще не отрисован
        """
        route = self.get_map(map_id).routes.get(route_id)
        if not route.is_real:
            raise RouteNotFoundError(route_id, map_id)
        itinerary = self._directions_of(route).first()
        return itinerary.duration_seconds() if itinerary else 0

    @staticmethod
    def _directions_of(route: DeferredHandle) -> DirectionsResult:
        return route.backing.get_directions() or DirectionsResult()

    @staticmethod
    def _remove_entity(registry, entity_id: str) -> None:
        handle = registry.remove(entity_id)
        if handle is None:
            logger.warning(f"{registry.kind} '{entity_id}' (карта '{registry.map_id}') не найден, удалять нечего")
            return
        if handle.is_real:
            handle.backing.set_map(None)
        else:
            logger.info(
                f"{registry.kind} '{entity_id}' (карта '{registry.map_id}') удален до создания, "
                f"отброшено отложенных вызовов: {handle.pending_count}"
            )

    # Области

    def create_bounds(self, map_id: str, bounds_id: str) -> BoundsHandle:
        """Создает новую пустую область (существующая область заменяется)."""
        return self.get_map(map_id).bounds.create(bounds_id)

    def get_bounds(self, map_id: str, bounds_id: str) -> BoundsHandle:
        return self.get_map(map_id).bounds.get(bounds_id)

    def extend_bounds_with_marker(self, map_id: str, bounds_id: str, marker_id: str) -> None:
        """Добавляет позицию маркера в область (после создания маркера)."""
        map_handle = self.get_map(map_id)
        map_handle.bounds.get_or_create(bounds_id)
        marker = map_handle.markers.find_or_stub(marker_id)
        # Область ищется заново: create_bounds мог заменить ее до создания маркера
        marker.execute_on_load(
            lambda handle: map_handle.bounds.get_or_create(bounds_id).extend(handle.backing.get_position())
        )

    def extend_bounds_with_route(self, map_id: str, bounds_id: str, route_id: str) -> None:
        """Добавляет оболочку первого варианта маршрута в область (после отрисовки маршрута)."""
        map_handle = self.get_map(map_id)
        map_handle.bounds.get_or_create(bounds_id)
        route = map_handle.routes.find_or_stub(route_id)

        def extend(handle: DeferredHandle) -> None:
            itinerary = self._directions_of(handle).first()
            if itinerary is None or itinerary.bounds is None:
                logger.debug(f"Маршрут '{route_id}' без вариантов, область '{bounds_id}' не изменена")
                return
            map_handle.bounds.get_or_create(bounds_id).union(itinerary.bounds)

        route.execute_on_load(extend)

    def fit_to_bounds(self, map_id: str, bounds_id: str) -> None:
        """
        Подгоняет видимую часть карты под область.

        Выполняется после создания карты и сигнала завершения ее отрисовки;
        используется состояние области на момент этого сигнала.
        """
        def fit(handle: MapHandle) -> None:
            bounds = handle.bounds.get_or_create(bounds_id)
            if bounds.is_empty():
                logger.info(f"Область '{bounds_id}' (карта '{map_id}') пуста, подгонка пропущена")
                return
            self.provider.fit_bounds(handle.backing, bounds.aggregate)

        self.get_map(map_id).execute_on_load(lambda handle: handle.when_settled(fit))
