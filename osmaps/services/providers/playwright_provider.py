"""
Провайдер Google Maps, работающий в странице браузера через Playwright.

Объекты провайдера - обертки над JSHandle объектов google.maps.*,
события JavaScript передаются в Python через page.expose_function.
"""
from itertools import count
from typing import Any, Callable, Optional
from loguru import logger

from playwright.sync_api import Error as PlaywrightError, JSHandle, Page

from osmaps.models.geo import DirectionsResult, Envelope, LatLng
from osmaps.services.facade.exceptions import ProviderError
from osmaps.services.providers.base import MapProvider

DISPATCH_FUNCTION = "__osmapsDispatch"

CONSTRUCT_MAP_JS = """(a) => {
    const el = document.getElementById(a.container);
    if (!el) throw new Error(`container '${a.container}' not found`);
    return new google.maps.Map(el, a.options);
}"""

ADD_LISTENER_JS = """(target, a) => {
    const subscribe = a.once ? google.maps.event.addListenerOnce : google.maps.event.addListener;
    subscribe(target, a.event, (...args) => window[a.dispatch](a.token, args.map(
        (x) => (x && x.latLng) ? x.latLng.toJSON() : null
    )));
}"""

GEOCODE_JS = """async (req) => {
    try {
        const r = await new google.maps.Geocoder().geocode(req);
        return {status: 'OK', results: r.results.map((x) => ({
            formatted_address: x.formatted_address,
            location: x.geometry.location.toJSON(),
        }))};
    } catch (e) {
        return {status: e.code || 'ERROR', results: []};
    }
}"""

ROUTE_JS = """async (req) => {
    try {
        return {status: 'OK', response: await new google.maps.DirectionsService().route(req)};
    } catch (e) {
        return {status: e.code || 'ERROR', response: null};
    }
}"""

GET_DIRECTIONS_JS = """(r) => {
    const d = r.getDirections();
    if (!d) return null;
    return {routes: d.routes.map((route) => ({
        legs: route.legs.map((leg) => ({
            duration: leg.duration ? {value: leg.duration.value} : null,
            distance: leg.distance ? {value: leg.distance.value} : null,
        })),
        bounds: route.bounds ? route.bounds.toJSON() : null,
    }))};
}"""


def to_js(value: Any) -> Any:
    """Приводит значение к аргументу evaluate: точки в литералы, обертки в JSHandle."""
    if isinstance(value, (LatLng, Envelope)):
        return value.to_dict()
    if isinstance(value, JSObject):
        return value.handle
    if isinstance(value, dict):
        return {key: to_js(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_js(item) for item in value]
    return value


def _evaluate(target: Any, script: str, arg: Any = None, handle: bool = False) -> Any:
    try:
        if handle:
            return target.evaluate_handle(script, to_js(arg))
        return target.evaluate(script, to_js(arg))
    except PlaywrightError as e:
        logger.error(f"Ошибка выполнения JavaScript в странице карт: {e}")
        raise ProviderError(f"Ошибка Google Maps API: {str(e)}") from e


class JSObject:
    """Обертка над объектом google.maps.* в странице."""

    def __init__(self, handle: JSHandle):
        self.handle = handle

    def call(self, script: str, arg: Any = None) -> Any:
        return _evaluate(self.handle, script, arg)


class BrowserMap(JSObject):
    def set_center(self, point: Any) -> None:
        self.call("(m, p) => m.setCenter(p)", LatLng.parse(point))


class BrowserOverlay(JSObject):
    """Маркер или отрисовщик маршрута: объекты, которые можно убрать с карты."""

    def set_map(self, map_obj: Optional[BrowserMap]) -> None:
        self.call("(o, m) => o.setMap(m)", map_obj)


class BrowserMarker(BrowserOverlay):
    def get_position(self) -> LatLng:
        return LatLng.parse(self.call("(m) => m.getPosition().toJSON()"))


class BrowserRouteRenderer(BrowserOverlay):
    def set_directions(self, response: JSHandle) -> None:
        self.call("(r, d) => r.setDirections(d)", response)

    def get_directions(self) -> DirectionsResult:
        return DirectionsResult.from_dict(self.call(GET_DIRECTIONS_JS))


class BrowserBounds(JSObject):
    def extend(self, point: Any) -> None:
        self.call("(b, p) => { b.extend(p); }", LatLng.parse(point))

    def union(self, envelope: Envelope) -> None:
        self.call("(b, e) => { b.union(e); }", envelope)

    def is_empty(self) -> bool:
        return bool(self.call("(b) => b.isEmpty()"))


class BrowserGeocoder:
    def __init__(self, page: Page):
        self._page = page

    def geocode(self, request: dict, callback: Callable[[list, str], None]) -> None:
        answer = _evaluate(self._page, GEOCODE_JS, request)
        results = [
            {"formatted_address": item["formatted_address"], "location": LatLng.parse(item["location"])}
            for item in answer["results"]
        ]
        callback(results, answer["status"])


class BrowserRoutingService:
    def __init__(self, page: Page):
        self._page = page

    def route(self, request: dict, callback: Callable[[Any, str], None]) -> None:
        answer = _evaluate(self._page, ROUTE_JS, request, handle=True)
        try:
            status = _evaluate(answer, "(a) => a.status")
            response = answer.get_property("response")
        finally:
            answer.dispose()
        callback(response, status)


class PlaywrightMapProvider(MapProvider):
    """Провайдер Google Maps JavaScript API в странице Playwright."""

    name = "playwright"

    def __init__(self, page: Page, browser_manager: Optional[Any] = None):
        """
        Args:
            page: Страница с загруженным (или загружающимся) Google Maps API
            browser_manager: Менеджер браузера, который закрывается вместе с провайдером
        """
        self.page = page
        self._browser_manager = browser_manager
        self._handlers: dict[int, tuple[Callable[..., Any], bool]] = {}
        self._tokens = count(1)
        page.expose_function(DISPATCH_FUNCTION, self._dispatch)

    def _dispatch(self, token: int, args: list) -> None:
        entry = self._handlers.get(token)
        if entry is None:
            logger.debug(f"Событие для неизвестного обработчика {token} проигнорировано")
            return
        handler, once = entry
        if once:
            del self._handlers[token]
        handler(*[LatLng.parse(arg) if arg else None for arg in args])

    def construct_map(self, container_id: str, options: dict) -> BrowserMap:
        return BrowserMap(_evaluate(
            self.page, CONSTRUCT_MAP_JS, {"container": container_id, "options": options}, handle=True
        ))

    def construct_marker(self, options: dict) -> BrowserMarker:
        return BrowserMarker(_evaluate(self.page, "(o) => new google.maps.Marker(o)", options, handle=True))

    def construct_geocoder(self) -> BrowserGeocoder:
        return BrowserGeocoder(self.page)

    def construct_routing_service(self) -> BrowserRoutingService:
        return BrowserRoutingService(self.page)

    def construct_route_renderer(self) -> BrowserRouteRenderer:
        return BrowserRouteRenderer(_evaluate(
            self.page, "() => new google.maps.DirectionsRenderer()", handle=True
        ))

    def construct_bounds(self) -> BrowserBounds:
        return BrowserBounds(_evaluate(self.page, "() => new google.maps.LatLngBounds()", handle=True))

    def add_listener(self, target: JSObject, event_name: str, handler: Callable[..., Any]) -> int:
        return self._subscribe(target, event_name, handler, once=False)

    def add_listener_once(self, target: JSObject, event_name: str, handler: Callable[..., Any]) -> int:
        return self._subscribe(target, event_name, handler, once=True)

    def _subscribe(self, target: JSObject, event_name: str, handler: Callable[..., Any], once: bool) -> int:
        token = next(self._tokens)
        self._handlers[token] = (handler, once)
        target.call(ADD_LISTENER_JS, {
            "event": event_name,
            "token": token,
            "once": once,
            "dispatch": DISPATCH_FUNCTION,
        })
        return token

    def fit_bounds(self, map_obj: BrowserMap, bounds: BrowserBounds) -> None:
        map_obj.call("(m, b) => m.fitBounds(b)", bounds)

    def watch_environment(self, callback: Callable[[], Any]) -> None:
        if _evaluate(self.page, "() => Boolean(window.google && window.google.maps)"):
            callback()
        else:
            self.page.once("load", lambda _: callback())

    def close(self) -> None:
        if self._browser_manager is not None:
            self._browser_manager.close()
            self._browser_manager = None
