"""
Тесты реестров маркеров, маршрутов и областей.
"""
import pytest

from osmaps.services.facade import (
    AlreadyExistsError,
    BoundsNotFoundError,
    BoundsRegistry,
    EntityRegistry,
    MarkerHandle,
    MarkerNotFoundError,
)
from osmaps.services.providers.memory import MemoryBounds


@pytest.fixture
def markers():
    return EntityRegistry("m1", MarkerHandle, MarkerNotFoundError)


class TestLookup:

    def test_get_unknown_raises_not_found(self, markers):
        with pytest.raises(MarkerNotFoundError) as exc_info:
            markers.get("mk1")
        assert exc_info.value.entity_id == "mk1"
        assert exc_info.value.map_id == "m1"

    def test_find_unknown_returns_none(self, markers):
        assert markers.find("mk1") is None
        assert "mk1" not in markers


class TestStubs:

    def test_get_or_create_stub_creates_stub(self, markers):
        stub = markers.get_or_create_stub("mk1")
        assert stub.is_stub
        assert markers.get("mk1") is stub

    def test_get_or_create_stub_is_idempotent(self, markers, log_messages):
        stub = markers.get_or_create_stub("mk1")
        stub.execute_on_load(lambda h: None)

        again = markers.get_or_create_stub("mk1")
        assert again is stub
        assert again.pending_count == 1
        assert any("уже существующей заглушки" in m for m in log_messages)

    def test_get_or_create_stub_on_real_raises(self, markers):
        markers.add_real("mk1", "marker")
        with pytest.raises(AlreadyExistsError):
            markers.get_or_create_stub("mk1")

    def test_find_or_stub_returns_real_handle(self, markers):
        real = markers.add_real("mk1", "marker")
        assert markers.find_or_stub("mk1") is real


class TestAddReal:

    def test_add_real_without_stub(self, markers):
        handle = markers.add_real("mk1", "marker")
        assert handle.is_real
        assert handle.backing == "marker"

    def test_add_real_resolves_stub_in_order(self, markers):
        stub = markers.get_or_create_stub("mk1")
        calls = []
        stub.execute_on_load(lambda h: calls.append(("a", h.backing)))
        stub.execute_on_load(lambda h: calls.append(("b", h.backing)))

        handle = markers.add_real("mk1", "marker")
        assert handle is stub
        assert calls == [("a", "marker"), ("b", "marker")]
        assert handle.is_real

    def test_add_real_on_real_is_noop(self, markers, log_messages):
        first = markers.add_real("mk1", "marker")
        second = markers.add_real("mk1", "other")
        assert second is first
        assert first.backing == "marker"
        assert any("уже был добавлен ранее" in m for m in log_messages)

    def test_remove_then_add_gives_fresh_handle(self, markers):
        stub = markers.get_or_create_stub("mk1")
        calls = []
        stub.execute_on_load(lambda h: calls.append("old"))
        assert markers.remove("mk1") is stub

        handle = markers.add_real("mk1", "marker")
        assert handle is not stub
        assert handle.pending_count == 0
        assert calls == []

    def test_remove_unknown_returns_none(self, markers):
        assert markers.remove("missing") is None


class TestBoundsRegistry:

    def test_get_or_create_is_idempotent(self):
        registry = BoundsRegistry("m1", MemoryBounds)
        first = registry.get_or_create("b1")
        assert registry.get_or_create("b1") is first
        assert registry.get("b1") is first

    def test_create_replaces_with_empty_aggregate(self):
        registry = BoundsRegistry("m1", MemoryBounds)
        first = registry.get_or_create("b1")
        first.extend({"lat": 1, "lng": 2})
        assert not first.is_empty()

        fresh = registry.create("b1")
        assert fresh is not first
        assert fresh.is_empty()
        assert registry.get("b1") is fresh

    def test_get_unknown_raises(self):
        registry = BoundsRegistry("m1", MemoryBounds)
        with pytest.raises(BoundsNotFoundError):
            registry.get("b1")
