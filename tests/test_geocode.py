"""
Тесты геокодирования через фасад.
"""
from osmaps.models.geo import LatLng
from osmaps.services.providers import STATUS_OK, STATUS_ZERO_RESULTS

from tests.conftest import PLACES


class TestGeocode:

    def test_geocode_address(self, api):
        answers = []
        api.geocode("ВДНХ", lambda results, status: answers.append((results, status)))

        results, status = answers[0]
        assert status == STATUS_OK
        assert results[0]["location"] == LatLng.parse(PLACES["ВДНХ"])

    def test_unknown_address(self, api):
        answers = []
        api.geocode("Нигде", lambda results, status: answers.append((results, status)))
        assert answers == [([], STATUS_ZERO_RESULTS)]

    def test_reverse_geocode(self, api):
        answers = []
        api.reverse_geocode((55.7298, 37.6011), lambda results, status: answers.append(results))
        assert answers[0][0]["formatted_address"] == "Парк Горького"

    def test_geocoder_is_created_once(self, api, provider):
        api.geocode("ВДНХ", lambda *args: None)
        api.reverse_geocode(PLACES["ВДНХ"], lambda *args: None)
        assert provider.geocoders_created == 1
