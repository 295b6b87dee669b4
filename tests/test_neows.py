"""Tests for the NeoWs client and feed ingestion."""

import copy
from datetime import date

import httpx
import pytest

from cosmic_watch import neows
from cosmic_watch.neows import FeedError, NeoWsClient, ingest_feed


def _client(handler, **kwargs):
    return NeoWsClient(api_key="test-key", timeout=5, transport=httpx.MockTransport(handler), **kwargs)


class TestFetchFeed:
    def test_passes_dates_and_key(self, feed_payload):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=feed_payload)

        client = _client(handler)
        data = client.fetch_feed(date(2026, 10, 19), date(2026, 10, 20))

        assert data == feed_payload
        params = seen[0].url.params
        assert params["start_date"] == "2026-10-19"
        assert params["end_date"] == "2026-10-20"
        assert params["api_key"] == "test-key"
        assert seen[0].url.path == "/neo/rest/v1/feed"

    def test_start_date_defaults_to_today(self, monkeypatch):
        seen = []
        monkeypatch.setattr(neows, "_today_utc", lambda: date(2030, 1, 2))

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        _client(handler).fetch_feed()
        assert seen[0].url.params["start_date"] == "2030-01-02"
        assert "end_date" not in seen[0].url.params

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("NASA_API_KEY", "env-key")
        assert NeoWsClient().api_key == "env-key"

    @pytest.mark.parametrize("status,message", [
        (403, "NASA API: Forbidden. Uplink key invalid."),
        (429, "NASA API: Rate limit exceeded."),
        (500, "NASA network error: 500"),
        (404, "NASA network error: 404"),
    ])
    def test_http_errors_mapped(self, status, message):
        client = _client(lambda request: httpx.Response(status, text="nope"))
        with pytest.raises(FeedError) as excinfo:
            client.fetch_feed(date(2026, 10, 19))
        assert str(excinfo.value) == message
        assert excinfo.value.status_code == status

    def test_transport_error_mapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FeedError, match="NASA network error"):
            _client(handler).fetch_feed(date(2026, 10, 19))

    def test_non_json_body_mapped(self):
        client = _client(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(FeedError, match="malformed"):
            client.fetch_feed(date(2026, 10, 19))

    def test_successful_response_cached(self, feed_payload):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=feed_payload)

        client = _client(handler, cache_ttl=60)
        client.fetch_feed(date(2026, 10, 19))
        client.fetch_feed(date(2026, 10, 19))
        client.fetch_feed(date(2026, 10, 20))
        assert len(calls) == 2

    def test_failures_not_cached(self, feed_payload):
        responses = [httpx.Response(429), httpx.Response(200, json=feed_payload)]
        client = _client(lambda request: responses.pop(0), cache_ttl=60)

        with pytest.raises(FeedError):
            client.fetch_feed(date(2026, 10, 19))
        assert client.fetch_feed(date(2026, 10, 19)) == feed_payload

    def test_zero_ttl_disables_cache(self, feed_payload):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=feed_payload)

        client = _client(handler, cache_ttl=0)
        client.fetch_feed(date(2026, 10, 19))
        client.fetch_feed(date(2026, 10, 19))
        assert len(calls) == 2

    def test_zero_ttl_stores_nothing(self, feed_payload):
        client = _client(lambda request: httpx.Response(200, json=feed_payload), cache_ttl=0)
        for day in range(1, 29):
            client.fetch_feed(date(2026, 2, day))
        assert client.cache_size == 0

    def test_expired_windows_evicted(self, feed_payload, monkeypatch):
        clock = [1000.0]
        monkeypatch.setattr(neows.time, "time", lambda: clock[0])
        client = _client(lambda request: httpx.Response(200, json=feed_payload), cache_ttl=60)

        client.fetch_feed(date(2026, 10, 19))
        client.fetch_feed(date(2026, 10, 20))
        assert client.cache_size == 2

        clock[0] += 61
        client.fetch_feed(date(2026, 10, 21))
        assert client.cache_size == 1

    def test_cache_is_bounded(self, feed_payload):
        client = _client(lambda request: httpx.Response(200, json=feed_payload), cache_ttl=3600)
        for offset in range(neows.MAX_CACHE_ENTRIES + 10):
            client.fetch_feed(date.fromordinal(date(2026, 1, 1).toordinal() + offset))
        assert client.cache_size == neows.MAX_CACHE_ENTRIES


class TestIngestFeed:
    def test_flattens_in_upstream_order(self, feed_payload):
        assert [n["id"] for n in ingest_feed(feed_payload)] == ["1", "2", "3", "4"]

    def test_attaches_scores(self, feed_payload):
        scores = {n["id"]: n["risk_score"] for n in ingest_feed(feed_payload)}
        assert scores == {"1": 88, "2": 3, "3": 24, "4": 81}

    def test_input_not_mutated(self, feed_payload):
        before = copy.deepcopy(feed_payload)
        ingest_feed(feed_payload)
        assert feed_payload == before

    def test_upstream_fields_carried_through(self, feed_payload):
        first = ingest_feed(feed_payload)[0]
        assert first["neo_reference_id"] == "1"
        assert first["close_approach_data"][0]["orbiting_body"] == "Earth"

    @pytest.mark.parametrize("payload", [
        {},
        {"near_earth_objects": []},
        {"near_earth_objects": {"2026-10-19": None}},
        {"near_earth_objects": {"2026-10-19": ["junk", 3]}},
        None,
    ])
    def test_missing_or_malformed_sections(self, payload):
        assert ingest_feed(payload) == []
