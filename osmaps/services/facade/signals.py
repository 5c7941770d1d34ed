"""
Одноразовый сигнал готовности.
"""
from typing import Any, Callable
from loguru import logger


class ReadySignal:
    """
    Сигнал, который срабатывает не более одного раза.

    Подписчики, добавленные до срабатывания, вызываются в порядке подписки
    в момент срабатывания. Подписчики, добавленные после, вызываются сразу.
    """

    def __init__(self, name: str):
        self.name = name
        self._fired = False
        self._value: Any = None
        self._subscribers: list[Callable[[Any], None]] = []

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def value(self) -> Any:
        return self._value

    @property
    def pending_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Callable[[Any], None]) -> None:
        if self._fired:
            callback(self._value)
        else:
            self._subscribers.append(callback)

    def fire(self, value: Any = None) -> bool:
        """
        Срабатывает сигнал и вызывает ожидающих подписчиков.

        Returns:
            False если сигнал уже срабатывал (повторный вызов игнорируется)
        """
        if self._fired:
            logger.warning(f"Сигнал '{self.name}' уже срабатывал, повторный вызов проигнорирован")
            return False

        self._fired = True
        self._value = value
        subscribers, self._subscribers = self._subscribers, []
        logger.debug(f"Сигнал '{self.name}' сработал, подписчиков: {len(subscribers)}")
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception(f"Сигнал '{self.name}': ошибка в подписчике, продолжаем")
        return True
