"""
Исключения фасада карт.
"""


class OSMapsError(Exception):
    """Базовое исключение фасада карт."""
    pass


class NotFoundError(OSMapsError):
    """Объект с указанным идентификатором не зарегистрирован."""

    kind = "Объект"

    def __init__(self, entity_id: str, map_id: str | None = None):
        self.entity_id = entity_id
        self.map_id = map_id
        where = f" (карта '{map_id}')" if map_id is not None else ""
        super().__init__(f"{self.kind} '{entity_id}'{where}: объект еще не создан")


class MapNotFoundError(NotFoundError):
    kind = "Карта"


class MarkerNotFoundError(NotFoundError):
    kind = "Маркер"


class RouteNotFoundError(NotFoundError):
    kind = "Маршрут"


class BoundsNotFoundError(NotFoundError):
    kind = "Область"


class AlreadyExistsError(OSMapsError):
    """Объект с указанным идентификатором уже создан (не заглушка)."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} с идентификатором '{entity_id}' уже существует")


class ProviderError(OSMapsError):
    """Ошибка провайдера карт (браузер, JavaScript API)."""
    pass
