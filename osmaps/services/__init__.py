"""
Сервисы фасада карт.
"""
from osmaps.services.facade import (
    OSMapsAPI,
    MapHandle,
    OSMapsError,
    NotFoundError,
    AlreadyExistsError,
    create_maps_api,
)
from osmaps.services.providers import MapProvider, MemoryMapProvider, create_provider

__all__ = [
    "OSMapsAPI",
    "MapHandle",
    "OSMapsError",
    "NotFoundError",
    "AlreadyExistsError",
    "create_maps_api",
    "MapProvider",
    "MemoryMapProvider",
    "create_provider",
]
