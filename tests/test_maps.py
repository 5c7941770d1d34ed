"""
Тесты реестра карт и сигнала готовности окружения.
"""
import pytest

from osmaps.config.settings import settings
from osmaps.models.geo import LatLng
from osmaps.services.facade import MapNotFoundError, ProviderError

from tests.conftest import MOSCOW


class TestCreateMap:

    def test_map_is_stub_until_environment_ready(self, api, provider):
        handle = api.create_map("m1", "map", zoom=5, center=MOSCOW)
        assert handle.is_stub
        assert provider.maps == []

        provider.load()
        assert handle.is_real
        assert handle.backing.zoom == 5
        assert handle.backing.center == LatLng.parse(MOSCOW)
        assert handle.backing.container_id == "map"

    def test_map_created_synchronously_when_ready(self, ready_api):
        handle = ready_api.create_map("m1", "map", zoom=5, center=MOSCOW)
        assert handle.is_real

    def test_options_override_defaults_deeply(self, ready_api):
        handle = ready_api.create_map(
            "m1", "map", zoom=5, center=MOSCOW,
            options={"zoom": 12, "center": {"lat": 1.0}, "mapTypeId": "satellite"},
        )
        assert handle.options == {
            "zoom": 12,
            "center": {"lat": 1.0, "lng": MOSCOW["lng"]},
            "mapTypeId": "satellite",
        }

    def test_invalid_zoom_falls_back_to_default(self, ready_api):
        handle = ready_api.create_map("m1", "map", zoom="abc", center=MOSCOW)
        assert handle.options["zoom"] == settings.DEFAULT_ZOOM

    def test_infinite_zoom_falls_back_to_default(self, ready_api):
        handle = ready_api.create_map("m1", "map", zoom="inf", center=MOSCOW)
        assert handle.options["zoom"] == settings.DEFAULT_ZOOM
        assert handle.backing.zoom == settings.DEFAULT_ZOOM

    def test_recreate_returns_existing_handle(self, ready_api, provider, log_messages):
        first = ready_api.create_map("m1", "map", zoom=5, center=MOSCOW)
        second = ready_api.create_map("m1", "other", zoom=9, center=MOSCOW)
        assert second is first
        assert len(provider.maps) == 1
        assert any("повторное создание проигнорировано" in m for m in log_messages)


class TestGetMap:

    def test_get_unknown_map_raises(self, api):
        with pytest.raises(MapNotFoundError):
            api.get_map("missing")
        assert api.find_map("missing") is None

    def test_operations_on_unknown_map_raise(self, api):
        with pytest.raises(MapNotFoundError):
            api.on_map_ready("missing", lambda h: None)
        with pytest.raises(MapNotFoundError):
            api.add_marker("missing", "mk1", {"position": MOSCOW})
        with pytest.raises(MapNotFoundError):
            api.get_route_duration_seconds("missing", "r1")


class TestEnvironmentReady:

    def test_callbacks_run_after_ready_in_order(self, api, provider):
        api.create_map("m1", "map", center=MOSCOW)
        calls = []
        api.on_map_ready("m1", lambda h: calls.append(("first", h.backing is not None)))
        api.on_map_ready("m1", lambda h: calls.append(("second", h.backing is not None)))
        assert calls == []

        provider.load()
        assert calls == [("first", True), ("second", True)]

        api.on_map_ready("m1", lambda h: calls.append(("after", True)))
        assert calls[-1] == ("after", True)

    def test_maps_initialized_in_creation_order(self, api, provider):
        order = []
        for map_id in ("a", "b", "c"):
            api.create_map(map_id, f"container-{map_id}", center=MOSCOW)
            api.on_map_ready(map_id, lambda h: order.append(h.map_id))

        assert api.environment_ready() is True
        assert order == ["a", "b", "c"]
        assert [m.container_id for m in provider.maps] == ["container-a", "container-b", "container-c"]

    def test_ready_fires_only_once(self, api, provider):
        api.create_map("m1", "map", center=MOSCOW)
        provider.load()
        assert api.is_ready
        assert api.environment_ready() is False
        assert len(provider.maps) == 1

    def test_map_created_from_ready_callback_is_immediate(self, api, provider):
        api.create_map("m1", "map", center=MOSCOW)
        created = []
        api.on_map_ready("m1", lambda h: created.append(api.create_map("m2", "map2", center=MOSCOW)))

        provider.load()
        assert created[0].is_real

    def test_api_over_loaded_provider_is_ready(self, provider):
        from osmaps.services.facade import OSMapsAPI

        provider.load()
        api = OSMapsAPI(provider)
        assert api.is_ready
        assert api.create_map("m1", "map", center=MOSCOW).is_real

    def test_failing_ready_callback_does_not_stop_initialization(self, api, provider, log_messages):
        calls = []

        def broken(handle):
            raise RuntimeError("сбой в обработчике")

        api.create_map("a", "container-a", center=MOSCOW)
        api.create_map("b", "container-b", center=MOSCOW)
        api.on_map_ready("a", broken)
        api.on_map_ready("a", lambda h: calls.append("a"))
        api.on_map_ready("b", lambda h: calls.append("b"))

        provider.load()
        assert api.get_map("a").is_real
        assert api.get_map("b").is_real
        assert calls == ["a", "b"]
        assert any("ошибка в отложенном вызове" in m for m in log_messages)

    def test_provider_failure_on_one_map_does_not_strand_others(self, api, provider, monkeypatch):
        construct = provider.construct_map

        def flaky(container_id, options):
            if container_id == "broken":
                raise ProviderError("контейнер не найден")
            return construct(container_id, options)

        monkeypatch.setattr(provider, "construct_map", flaky)
        api.create_map("a", "broken", center=MOSCOW)
        api.create_map("b", "container-b", center=MOSCOW)

        provider.load()
        assert api.get_map("a").is_stub
        assert api.get_map("b").is_real


class TestMapEvents:

    def test_map_event_attached_after_ready(self, api, provider):
        api.create_map("m1", "map", center=MOSCOW)
        clicks = []
        api.add_map_event("m1", "click", lambda *args: clicks.append(args))

        provider.load()
        backing = api.get_map("m1").backing
        assert provider.trigger(backing, "click", "event") == 1
        assert clicks == [("event",)]

    def test_settled_signal_fires_once(self, ready_api, provider):
        handle = ready_api.create_map("m1", "map", center=MOSCOW)
        settled = []
        handle.when_settled(lambda h: settled.append(h.map_id))

        provider.trigger(handle.backing, provider.SETTLED_EVENT)
        provider.trigger(handle.backing, provider.SETTLED_EVENT)
        assert settled == ["m1"]
        assert handle.settled.fired
