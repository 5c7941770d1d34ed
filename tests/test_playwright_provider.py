"""
Тесты провайдера Google Maps на Playwright (страница заменена MagicMock).
"""
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from osmaps.models.geo import Envelope, LatLng
from osmaps.services.facade import OSMapsAPI, ProviderError
from osmaps.services.providers.browser_manager import build_map_page
from osmaps.services.providers.playwright_provider import (
    ADD_LISTENER_JS,
    DISPATCH_FUNCTION,
    BrowserMap,
    PlaywrightMapProvider,
    to_js,
)


@pytest.fixture
def page():
    page = MagicMock()
    page.evaluate.return_value = True
    page.evaluate_handle.side_effect = lambda *args, **kwargs: MagicMock()
    return page


@pytest.fixture
def browser_provider(page):
    return PlaywrightMapProvider(page)


class TestSerialization:

    def test_to_js_converts_nested_values(self):
        handle = MagicMock()
        value = to_js({
            "position": LatLng(1, 2),
            "map": BrowserMap(handle),
            "waypoints": [{"location": LatLng(3, 4)}],
            "bounds": Envelope(1, 2, 3, 4),
        })
        assert value == {
            "position": {"lat": 1, "lng": 2},
            "map": handle,
            "waypoints": [{"location": {"lat": 3, "lng": 4}}],
            "bounds": {"south": 1, "west": 2, "north": 3, "east": 4},
        }

    def test_map_page_contains_containers(self):
        html = build_map_page("KEY", ["map", "overview"])
        assert 'id="map"' in html
        assert 'id="overview"' in html
        assert "key=KEY" in html


class TestListeners:

    def test_dispatch_function_exposed(self, page, browser_provider):
        page.expose_function.assert_called_once_with(DISPATCH_FUNCTION, browser_provider._dispatch)

    def test_listener_receives_converted_args(self, browser_provider):
        target = BrowserMap(MagicMock())
        calls = []
        token = browser_provider.add_listener(target, "click", lambda *args: calls.append(args))

        script, arg = target.handle.evaluate.call_args.args
        assert script == ADD_LISTENER_JS
        assert arg == {"event": "click", "token": token, "once": False, "dispatch": DISPATCH_FUNCTION}

        browser_provider._dispatch(token, [{"lat": 1, "lng": 2}, None])
        browser_provider._dispatch(token, [])
        assert calls == [(LatLng(1, 2), None), ()]

    def test_once_listener_is_dropped_after_first_call(self, browser_provider):
        target = BrowserMap(MagicMock())
        calls = []
        token = browser_provider.add_listener_once(target, "idle", lambda *args: calls.append("idle"))

        browser_provider._dispatch(token, [])
        browser_provider._dispatch(token, [])
        assert calls == ["idle"]


class TestObjects:

    def test_javascript_errors_are_wrapped(self, page, browser_provider):
        page.evaluate_handle.side_effect = PlaywrightError("boom")
        with pytest.raises(ProviderError):
            browser_provider.construct_map("map", {"zoom": 8})

    def test_route_response_is_passed_to_callback(self, page, browser_provider):
        answer = MagicMock()
        answer.evaluate.return_value = "OK"
        page.evaluate_handle.side_effect = None
        page.evaluate_handle.return_value = answer
        responses = []

        browser_provider.construct_routing_service().route(
            {"origin": LatLng(1, 2), "destination": "ВДНХ"},
            lambda response, status: responses.append((response, status)),
        )
        assert responses == [(answer.get_property.return_value, "OK")]
        answer.get_property.assert_called_once_with("response")
        answer.dispose.assert_called_once_with()
        assert page.evaluate_handle.call_args.args[1] == {
            "origin": {"lat": 1, "lng": 2}, "destination": "ВДНХ",
        }

    def test_renderer_directions_are_parsed(self, browser_provider):
        renderer = browser_provider.construct_route_renderer()
        renderer.handle.evaluate.return_value = {"routes": [{
            "legs": [{"duration": {"value": 30}}, {"duration": {"value": 12}}],
            "bounds": {"south": 1, "west": 2, "north": 3, "east": 4},
        }]}
        itinerary = renderer.get_directions().first()
        assert itinerary.duration_seconds() == 42
        assert itinerary.bounds == Envelope(1, 2, 3, 4)

    def test_geocode_results_are_converted(self, page, browser_provider):
        page.evaluate.return_value = {
            "status": "OK",
            "results": [{"formatted_address": "ВДНХ", "location": {"lat": 55.8, "lng": 37.6}}],
        }
        answers = []
        browser_provider.construct_geocoder().geocode({"address": "ВДНХ"}, lambda r, s: answers.append((r, s)))
        assert answers == [([{"formatted_address": "ВДНХ", "location": LatLng(55.8, 37.6)}], "OK")]


class TestWithFacade:

    def test_loaded_page_makes_api_ready(self, page, browser_provider):
        api = OSMapsAPI(browser_provider)
        assert api.is_ready

        handle = api.create_map("m1", "map", zoom=5, center={"lat": 1, "lng": 2})
        assert handle.is_real
        script, arg = page.evaluate_handle.call_args_list[-1].args
        assert arg == {"container": "map", "options": {"zoom": 5, "center": {"lat": 1, "lng": 2}}}

    def test_page_load_event_triggers_ready(self, page):
        page.evaluate.return_value = False
        provider = PlaywrightMapProvider(page)
        api = OSMapsAPI(provider)
        assert not api.is_ready

        event, handler = page.once.call_args.args
        assert event == "load"
        handler(page)
        assert api.is_ready

    def test_close_closes_browser_manager(self, page):
        manager = MagicMock()
        provider = PlaywrightMapProvider(page, manager)
        provider.close()
        provider.close()
        manager.close.assert_called_once_with()
