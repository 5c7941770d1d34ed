"""
Модели географических данных, которыми обмениваются фасад и провайдер карт.
"""
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class LatLng:
    """Географическая точка."""

    lat: float
    lng: float

    @classmethod
    def parse(cls, value: Union["LatLng", dict, tuple, list]) -> "LatLng":
        """
        Создает точку из словаря {lat, lng}, кортежа (lat, lng) или другой точки.

        Raises:
            ValueError: Если значение не похоже на точку
        """
        if isinstance(value, LatLng):
            return value
        if isinstance(value, dict) and "lat" in value and "lng" in value:
            return cls(float(value["lat"]), float(value["lng"]))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(float(value[0]), float(value[1]))
        raise ValueError(f"Не удалось распознать координаты: {value!r}")

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Envelope:
    """Прямоугольная оболочка (south-west / north-east)."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, *points: LatLng) -> "Envelope":
        if not points:
            raise ValueError("Оболочка требует хотя бы одну точку")
        lats = [p.lat for p in points]
        lngs = [p.lng for p in points]
        return cls(min(lats), min(lngs), max(lats), max(lngs))

    @classmethod
    def from_dict(cls, data: dict) -> "Envelope":
        return cls(
            float(data["south"]), float(data["west"]),
            float(data["north"]), float(data["east"]),
        )

    def contains(self, point: LatLng) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east

    def to_dict(self) -> dict:
        return {"south": self.south, "west": self.west, "north": self.north, "east": self.east}


@dataclass
class Leg:
    """Участок маршрута."""

    duration_seconds: Optional[int] = None  # Может отсутствовать в ответе сервиса
    distance_meters: Optional[int] = None


@dataclass
class Itinerary:
    """Один вариант маршрута, предложенный сервисом."""

    legs: list[Leg] = field(default_factory=list)
    bounds: Optional[Envelope] = None

    def duration_seconds(self) -> int:
        """Суммарная длительность всех участков (участки без длительности пропускаются)."""
        return sum(leg.duration_seconds for leg in self.legs if leg.duration_seconds)


@dataclass
class DirectionsResult:
    """Ответ сервиса маршрутов."""

    routes: list[Itinerary] = field(default_factory=list)

    def first(self) -> Optional[Itinerary]:
        """Первый вариант маршрута или None, если вариантов нет."""
        return self.routes[0] if self.routes else None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DirectionsResult":
        """
        Разбирает ответ в формате Google Maps:
        {routes: [{legs: [{duration: {value}}, ...], bounds: {...}}]}
        """
        if not data:
            return cls()
        routes = []
        for route in data.get("routes") or []:
            legs = [
                Leg(
                    duration_seconds=(leg.get("duration") or {}).get("value"),
                    distance_meters=(leg.get("distance") or {}).get("value"),
                )
                for leg in route.get("legs") or []
            ]
            bounds = route.get("bounds")
            routes.append(Itinerary(legs=legs, bounds=Envelope.from_dict(bounds) if bounds else None))
        return cls(routes=routes)
