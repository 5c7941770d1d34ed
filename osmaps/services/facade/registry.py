"""
Реестры объектов карты: маркеры, маршруты и области.
"""
from typing import Any, Callable, Iterator, Optional
from loguru import logger

from osmaps.services.facade.exceptions import (
    AlreadyExistsError,
    BoundsNotFoundError,
    MarkerNotFoundError,
    NotFoundError,
    RouteNotFoundError,
)
from osmaps.services.facade.handles import (
    BoundsHandle,
    DeferredHandle,
    MarkerHandle,
    RouteHandle,
)
from osmaps.services.facade.signals import ReadySignal


class EntityRegistry:
    """
    Реестр дескрипторов одного типа в пределах карты.

    Поддерживает заглушки: на объект можно сослаться (подписаться на события,
    добавить в область) до того, как он будет создан.
    """

    def __init__(
        self,
        map_id: str,
        handle_cls: type[DeferredHandle],
        not_found_cls: type[NotFoundError],
    ):
        self.map_id = map_id
        self._handle_cls = handle_cls
        self._not_found_cls = not_found_cls
        self._handles: dict[str, DeferredHandle] = {}

    @property
    def kind(self) -> str:
        return self._handle_cls.kind

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handles))

    def find(self, entity_id: str) -> Optional[DeferredHandle]:
        """Дескриптор по идентификатору или None, если его нет."""
        return self._handles.get(entity_id)

    def get(self, entity_id: str) -> DeferredHandle:
        """
        Дескриптор по идентификатору.

        Raises:
            NotFoundError: Если дескриптор не зарегистрирован
        """
        handle = self._handles.get(entity_id)
        if handle is None:
            raise self._not_found_cls(entity_id, self.map_id)
        return handle

    def is_real(self, entity_id: str) -> bool:
        handle = self._handles.get(entity_id)
        return handle is not None and handle.is_real

    def get_or_create_stub(self, entity_id: str) -> DeferredHandle:
        """
        Создает заглушку, если дескриптора с таким идентификатором нет.

        Повторный вызов для существующей заглушки возвращает ее же
        (с той же очередью вызовов).

        Raises:
            AlreadyExistsError: Если объект уже создан
        """
        handle = self._handles.get(entity_id)
        if handle is None:
            handle = self._handle_cls(entity_id)
            self._handles[entity_id] = handle
            logger.debug(f"{self.kind} '{entity_id}' (карта '{self.map_id}'): создана заглушка")
            return handle

        if handle.is_real:
            raise AlreadyExistsError(self.kind, entity_id)

        logger.info(
            f"{self.kind} '{entity_id}' (карта '{self.map_id}'): "
            f"попытка создать заглушку для уже существующей заглушки"
        )
        return handle

    def find_or_stub(self, entity_id: str) -> DeferredHandle:
        """
        Существующий дескриптор (созданный или заглушка) либо новая заглушка.

        AlreadyExistsError здесь означает нарушение порядка операций
        и не перехватывается.
        """
        handle = self.find(entity_id)
        if handle is not None:
            return handle
        return self.get_or_create_stub(entity_id)

    def add_real(self, entity_id: str, backing: Any) -> DeferredHandle:
        """
        Регистрирует созданный объект провайдера.

        Если есть заглушка, объект привязывается к ней и накопленные вызовы
        выполняются по порядку. Если объект уже создан, вызов игнорируется.

        Returns:
            Дескриптор, зарегистрированный под этим идентификатором
        """
        handle = self._handles.get(entity_id)
        if handle is None:
            handle = self._handle_cls(entity_id, backing)
            self._handles[entity_id] = handle
            return handle

        if handle.is_real:
            logger.info(f"{self.kind} '{entity_id}' (карта '{self.map_id}') уже был добавлен ранее")
            return handle

        handle.resolve(backing)
        return handle

    def remove(self, entity_id: str) -> Optional[DeferredHandle]:
        """Удаляет дескриптор из реестра и возвращает его (None, если его не было)."""
        return self._handles.pop(entity_id, None)


class BoundsRegistry:
    """Реестр областей карты. Агрегат области создается при первом обращении."""

    def __init__(self, map_id: str, aggregate_factory: Callable[[], Any]):
        self.map_id = map_id
        self._aggregate_factory = aggregate_factory
        self._handles: dict[str, BoundsHandle] = {}

    def __contains__(self, bounds_id: str) -> bool:
        return bounds_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def find(self, bounds_id: str) -> Optional[BoundsHandle]:
        return self._handles.get(bounds_id)

    def get(self, bounds_id: str) -> BoundsHandle:
        handle = self._handles.get(bounds_id)
        if handle is None:
            raise BoundsNotFoundError(bounds_id, self.map_id)
        return handle

    def get_or_create(self, bounds_id: str) -> BoundsHandle:
        handle = self._handles.get(bounds_id)
        if handle is None:
            handle = self.create(bounds_id)
        return handle

    def create(self, bounds_id: str) -> BoundsHandle:
        """Создает новую пустую область, заменяя существующую."""
        if bounds_id in self._handles:
            logger.debug(f"Область '{bounds_id}' (карта '{self.map_id}') пересоздана пустой")
        handle = BoundsHandle(bounds_id, self._aggregate_factory())
        self._handles[bounds_id] = handle
        return handle


class MapHandle(DeferredHandle):
    """
    Дескриптор карты.

    Владеет реестрами маркеров, маршрутов и областей этой карты.
    Реестры доступны сразу, даже пока сама карта еще не создана.
    """

    kind = "Карта"

    def __init__(
        self,
        map_id: str,
        container_id: Optional[str],
        options: dict,
        bounds_factory: Callable[[], Any],
        backing: Any = None,
    ):
        super().__init__(map_id, backing)
        self.container_id = container_id
        self.options = options
        self.markers = EntityRegistry(map_id, MarkerHandle, MarkerNotFoundError)
        self.routes = EntityRegistry(map_id, RouteHandle, RouteNotFoundError)
        self.bounds = BoundsRegistry(map_id, bounds_factory)
        # Одноразовый сигнал провайдера о том, что отрисовка карты завершена
        self.settled = ReadySignal(f"settled:{map_id}")

    @property
    def map_id(self) -> str:
        return self.id

    def when_settled(self, callback: Callable[["MapHandle"], None]) -> None:
        """Выполняет callback(handle) после сигнала завершения отрисовки карты."""
        self.settled.subscribe(lambda _: callback(self))
