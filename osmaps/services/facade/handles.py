"""
Дескрипторы объектов провайдера, которые могут быть еще не созданы.

Состояние дескриптора - явный вариант: Stub (объекта нет, копятся вызовы)
или Real (объект провайдера создан). Переход Stub -> Real происходит
не более одного раза.
"""
from dataclasses import dataclass, field
from typing import Any, Callable
from loguru import logger

from osmaps.config.settings import settings
from osmaps.services.facade.exceptions import AlreadyExistsError


@dataclass
class Stub:
    """Заглушка: объекта провайдера еще нет."""

    callbacks: list[Callable[["DeferredHandle"], None]] = field(default_factory=list)


@dataclass(frozen=True)
class Real:
    """Объект провайдера создан."""

    backing: Any


class DeferredHandle:
    """Дескриптор с отложенным выполнением вызовов до создания объекта провайдера."""

    kind = "Объект"

    def __init__(self, handle_id: str, backing: Any = None):
        self.id = handle_id
        self._state: Stub | Real = Stub() if backing is None else Real(backing)
        self._queue_warned = False

    def __repr__(self) -> str:
        state = "real" if self.is_real else f"stub, pending={self.pending_count}"
        return f"<{type(self).__name__} '{self.id}' ({state})>"

    @property
    def is_real(self) -> bool:
        return isinstance(self._state, Real)

    @property
    def is_stub(self) -> bool:
        return isinstance(self._state, Stub)

    @property
    def backing(self) -> Any:
        """Объект провайдера или None для заглушки."""
        return self._state.backing if isinstance(self._state, Real) else None

    @property
    def pending_count(self) -> int:
        return len(self._state.callbacks) if isinstance(self._state, Stub) else 0

    def execute_on_load(self, callback: Callable[["DeferredHandle"], None]) -> None:
        """
        Выполняет callback(handle) сразу, если объект провайдера создан,
        иначе ставит его в очередь до создания объекта.
        """
        state = self._state
        if isinstance(state, Real):
            callback(self)
            return

        state.callbacks.append(callback)
        self._check_queue_size(len(state.callbacks))

    def resolve(self, backing: Any) -> int:
        """
        Привязывает объект провайдера к заглушке и выполняет накопленные вызовы.

        Состояние переключается до выполнения очереди, поэтому вызовы
        execute_on_load изнутри очереди выполняются сразу.
        Ошибка в одном вызове логируется и не прерывает остальные.

        Args:
            backing: Созданный объект провайдера

        Returns:
            Количество выполненных отложенных вызовов

        Raises:
            AlreadyExistsError: Если дескриптор уже привязан к объекту
        """
        if backing is None:
            raise ValueError(f"{self.kind} '{self.id}': нельзя привязать пустой объект")
        state = self._state
        if isinstance(state, Real):
            raise AlreadyExistsError(self.kind, self.id)

        self._state = Real(backing)
        if state.callbacks:
            logger.debug(f"{self.kind} '{self.id}': объект создан, выполняем отложенные вызовы: {len(state.callbacks)}")
        for callback in state.callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception(f"{self.kind} '{self.id}': ошибка в отложенном вызове, продолжаем очередь")
        return len(state.callbacks)

    def _check_queue_size(self, size: int) -> None:
        threshold = settings.PENDING_CALLBACKS_WARN_THRESHOLD
        if threshold and size >= threshold and not self._queue_warned:
            self._queue_warned = True
            logger.warning(
                f"{self.kind} '{self.id}': объект все еще не создан, в очереди уже {size} отложенных вызовов"
            )


class MarkerHandle(DeferredHandle):
    kind = "Маркер"


class RouteHandle(DeferredHandle):
    kind = "Маршрут"


class BoundsHandle:
    """
    Область для подгонки видимой части карты.

    Агрегат существует сразу (может быть пустым), поэтому отложенного
    состояния у области нет.
    """

    kind = "Область"

    def __init__(self, bounds_id: str, aggregate: Any):
        self.id = bounds_id
        self.aggregate = aggregate

    def __repr__(self) -> str:
        return f"<BoundsHandle '{self.id}'>"

    def extend(self, point: Any) -> None:
        self.aggregate.extend(point)

    def union(self, envelope: Any) -> None:
        self.aggregate.union(envelope)

    def is_empty(self) -> bool:
        return self.aggregate.is_empty()
