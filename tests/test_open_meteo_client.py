import unittest

import requests

from airsense.data_sources import open_meteo_client


class DummyResp:
    def __init__(self, payload, status_error=None):
        self._payload = payload
        self._status_error = status_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        return self._payload


class RecordingSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.resp


def _make_geocoding_payload():
    return {
        "results": [
            {"id": 1275004, "name": "Kolkata", "latitude": 22.56263, "longitude": 88.36304, "country": "India"},
        ],
        "generationtime_ms": 0.5,
    }


def _make_weather_payload():
    return {
        "latitude": 22.5,
        "longitude": 88.375,
        "current": {
            "time": "2024-01-01T12:00",
            "interval": 900,
            "temperature_2m": 28.4,
            "wind_speed_10m": 9.7,
            "relative_humidity_2m": 61,
        },
        "current_units": {
            "time": "iso8601",
            "interval": "seconds",
            "temperature_2m": "°C",
            "wind_speed_10m": "km/h",
            "relative_humidity_2m": "%",
        },
    }


class TestOpenMeteoClient(unittest.TestCase):
    def setUp(self):
        self._orig_session = open_meteo_client.session

    def tearDown(self):
        open_meteo_client.session = self._orig_session

    def test_geocode_city(self):
        fake = RecordingSession(DummyResp(_make_geocoding_payload()))
        open_meteo_client.session = fake

        loc = open_meteo_client.geocode_city("Kolkata", timeout=2.0)
        self.assertEqual(loc.name, "Kolkata")
        self.assertAlmostEqual(loc.latitude, 22.56263)
        self.assertAlmostEqual(loc.longitude, 88.36304)
        self.assertEqual(fake.calls[0]["params"], {"name": "Kolkata", "count": 1})
        self.assertEqual(fake.calls[0]["timeout"], 2.0)
        self.assertEqual(fake.calls[0]["url"], open_meteo_client.OPEN_METEO_GEOCODING_URL)

    def test_geocode_city_without_results(self):
        open_meteo_client.session = RecordingSession(DummyResp({"generationtime_ms": 0.2}))
        self.assertIsNone(open_meteo_client.geocode_city("Atlantis"))

    def test_geocode_city_propagates_http_errors(self):
        err = requests.HTTPError("503 Server Error")
        open_meteo_client.session = RecordingSession(DummyResp({}, status_error=err))
        with self.assertRaises(requests.HTTPError):
            open_meteo_client.geocode_city("Kolkata")

    def test_fetch_weather(self):
        fake = RecordingSession(DummyResp(_make_weather_payload()))
        open_meteo_client.session = fake

        reading = open_meteo_client.fetch_weather(22.5, 88.4, url="https://example.test/forecast")
        self.assertEqual(reading.temp, 28.4)
        self.assertEqual(reading.wind_speed, 9.7)
        self.assertEqual(reading.humidity, 61)
        params = fake.calls[0]["params"]
        self.assertEqual(params["current"], "temperature_2m,wind_speed_10m,relative_humidity_2m")
        self.assertEqual((params["latitude"], params["longitude"]), (22.5, 88.4))
        self.assertEqual(fake.calls[0]["url"], "https://example.test/forecast")

    def test_fetch_weather_missing_fields_are_none(self):
        open_meteo_client.session = RecordingSession(DummyResp({"current": {"temperature_2m": 20.0}}))
        reading = open_meteo_client.fetch_weather(0, 0)
        self.assertEqual(reading.temp, 20.0)
        self.assertIsNone(reading.wind_speed)
        self.assertIsNone(reading.humidity)

    def test_unexpected_units_are_logged(self):
        payload = _make_weather_payload()
        payload["current_units"]["wind_speed_10m"] = "mp/h"
        open_meteo_client.session = RecordingSession(DummyResp(payload))

        with self.assertLogs(open_meteo_client.__name__, level="WARNING") as logs:
            open_meteo_client.fetch_weather(0, 0)
        self.assertIn("Unexpected Open-Meteo unit", logs.output[0])


if __name__ == "__main__":
    unittest.main()
