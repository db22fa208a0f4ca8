"""
Unit tests for the earthquake API client.

requests.get is mocked; every failure mode must end in an empty result
rather than an exception.
"""

import datetime
import unittest.mock as mock

import pytest
import requests

from quakemap.api.quake_client import (
    day_url,
    fetch_day,
    fetch_day_checked,
    fetch_latest_date,
    fetch_status,
)

API = "https://api.example.test"


def _response(status_code=200, payload=None, json_error=False):
    resp = mock.MagicMock()
    resp.status_code = status_code
    resp.text = "body"
    if json_error:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def day_payload():
    return [
        {"lat": "28.1", "lon": "-16.4", "mag": "2.1", "depth": "10", "fecha": "01/02/2024", "hora": "03:04:05", "title": "TENERIFE"},
        {"lat": 27.7, "lon": -18.0, "mag": 1.4, "depth": 5, "fecha": "01/02/2024", "hora": "06:00:00", "title": "EL HIERRO"},
    ]


class TestDayUrl:
    """Test day endpoint URL building."""

    def test_query_style(self):
        assert day_url("01/02/2024", API + "/") == (f"{API}/day", {"date": "01/02/2024"})

    def test_path_style(self):
        assert day_url("01/02/2024", API, style="path") == (f"{API}/day/01/02/2024", None)


class TestFetchDay:
    """Test fetch_day and fetch_day_checked."""

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_success(self, mock_get, day_payload):
        mock_get.return_value = _response(payload=day_payload)

        records, ok = fetch_day_checked("01/02/2024", API, timeout=5)

        assert ok is True
        assert len(records) == 2
        assert records[0].location == "TENERIFE"
        assert records[0].magnitude == pytest.approx(2.1)
        mock_get.assert_called_once_with(f"{API}/day", params={"date": "01/02/2024"}, timeout=5)

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_path_style_request(self, mock_get, day_payload):
        mock_get.return_value = _response(payload=day_payload)

        fetch_day("01/02/2024", API, timeout=5, style="path")

        mock_get.assert_called_once_with(f"{API}/day/01/02/2024", params=None, timeout=5)

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_empty_day(self, mock_get):
        """A day with no events is an empty list, not a failure."""
        mock_get.return_value = _response(payload=[])

        records, ok = fetch_day_checked("01/01/2099", API)

        assert records == []
        assert ok is True

    @mock.patch("quakemap.api.quake_client.requests.get")
    @pytest.mark.parametrize("status_code", [404, 500, 503])
    def test_non_200(self, mock_get, status_code):
        mock_get.return_value = _response(status_code=status_code, payload=[{"lat": 1, "lon": 2}])

        records, ok = fetch_day_checked("01/02/2024", API)

        assert records == []
        assert ok is False

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_non_json(self, mock_get):
        mock_get.return_value = _response(json_error=True)
        assert fetch_day_checked("01/02/2024", API) == ([], False)

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_non_list_payload(self, mock_get):
        mock_get.return_value = _response(payload={"error": "bad date"})
        assert fetch_day_checked("01/02/2024", API) == ([], False)

    @mock.patch("quakemap.api.quake_client.requests.get")
    @pytest.mark.parametrize(
        "error", [requests.ConnectionError("down"), requests.Timeout("slow")]
    )
    def test_transport_error(self, mock_get, error):
        mock_get.side_effect = error
        assert fetch_day("01/02/2024", API) == []


class TestFetchStatus:
    """Test fetch_status."""

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = _response(payload={"last_update": 1700000000, "today": 5, "total": 12000})

        snapshot = fetch_status(API, timeout=3)

        assert snapshot.count_today == 5
        assert snapshot.count_total == 12000
        assert snapshot.last_update == datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=datetime.timezone.utc)
        mock_get.assert_called_once_with(f"{API}/status", params=None, timeout=3)

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_failure_is_none(self, mock_get):
        mock_get.return_value = _response(status_code=502)
        assert fetch_status(API) is None

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_transport_error_is_none(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("down")
        assert fetch_status(API) is None

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_fields_absent_is_not_none(self, mock_get):
        """An object without known keys is a snapshot with empty fields, not a failure."""
        mock_get.return_value = _response(payload={"unexpected": True})

        snapshot = fetch_status(API)

        assert snapshot is not None
        assert snapshot.last_update is None
        assert snapshot.count_today is None
        assert snapshot.count_total is None


class TestFetchLatestDate:
    """Test fetch_latest_date."""

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_success(self, mock_get):
        mock_get.return_value = _response(payload={"latest": "14/11/2023"})
        assert fetch_latest_date(API) == datetime.date(2023, 11, 14)

    @mock.patch("quakemap.api.quake_client.requests.get")
    @pytest.mark.parametrize("payload", [{"latest": "2023-11-14"}, {}, ["14/11/2023"]])
    def test_unusable_payload(self, mock_get, payload):
        mock_get.return_value = _response(payload=payload)
        assert fetch_latest_date(API) is None

    @mock.patch("quakemap.api.quake_client.requests.get")
    def test_failure(self, mock_get):
        mock_get.return_value = _response(status_code=404)
        assert fetch_latest_date(API) is None
