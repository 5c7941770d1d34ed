"""
Фасад карт с отложенной инициализацией объектов провайдера.
"""
from typing import Optional

from osmaps.services.facade.core import OSMapsAPI
from osmaps.services.facade.exceptions import (
    AlreadyExistsError,
    BoundsNotFoundError,
    MapNotFoundError,
    MarkerNotFoundError,
    NotFoundError,
    OSMapsError,
    ProviderError,
    RouteNotFoundError,
)
from osmaps.services.facade.handles import BoundsHandle, DeferredHandle, MarkerHandle, RouteHandle
from osmaps.services.facade.registry import BoundsRegistry, EntityRegistry, MapHandle
from osmaps.services.facade.signals import ReadySignal
from osmaps.services.providers.base import MapProvider


def create_maps_api(provider: Optional[MapProvider] = None) -> OSMapsAPI:
    """
    Создает фасад карт (один на приложение или сессию).

    Без явного провайдера используется провайдер из настроек.
    """
    if provider is None:
        from osmaps.services.providers import create_provider
        provider = create_provider()
    return OSMapsAPI(provider)


__all__ = [
    "OSMapsAPI",
    "MapHandle",
    "MarkerHandle",
    "RouteHandle",
    "BoundsHandle",
    "DeferredHandle",
    "EntityRegistry",
    "BoundsRegistry",
    "ReadySignal",
    "OSMapsError",
    "NotFoundError",
    "MapNotFoundError",
    "MarkerNotFoundError",
    "RouteNotFoundError",
    "BoundsNotFoundError",
    "AlreadyExistsError",
    "ProviderError",
    "create_maps_api",
]
