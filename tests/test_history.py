"""Search history tests."""

import pytest

from poiquery.main import app
from poiquery.schemas.search import SearchQuery
from poiquery.services.database import get_session_factory
from poiquery.services.history import SearchHistoryRecorder

NYC = (40.7128, -74.0060)


@pytest.mark.integration
class TestHistoryEndpoint:

    def test_searches_are_recorded_newest_first(self, client, user_headers, make_query):
        first = make_query(*NYC, radius=500)
        second = make_query(*NYC)
        client.post("/api/search", json=first, headers=user_headers)
        client.post("/api/search", json=second, headers=user_headers)

        response = client.get("/api/search/history", headers=user_headers)

        assert response.status_code == 200
        entries = response.json()
        assert len(entries) == 2
        assert entries[0]["query"]["encryptedLat"] == second["encryptedLat"]
        assert entries[0]["query"]["encryptedRadius"] is None
        assert entries[1]["query"]["encryptedRadius"] == first["encryptedRadius"]
        assert entries[0]["timestamp"] >= entries[1]["timestamp"]

    def test_failed_search_is_still_recorded(self, client, user_headers):
        query = {"encryptedLat": "bad", "encryptedLng": "bad"}
        assert client.post("/api/search", json=query, headers=user_headers).status_code == 400

        entries = client.get("/api/search/history", headers=user_headers).json()

        assert len(entries) == 1
        assert entries[0]["query"]["encryptedLat"] == "bad"

    def test_history_is_per_user(self, client, register, make_query):
        alice, alice_user = register("alice@example.com")
        bob, _ = register("bob@example.com")
        client.post("/api/search", json=make_query(*NYC), headers=alice)

        assert client.get("/api/search/history", headers=bob).json() == []
        entries = client.get("/api/search/history", headers=alice).json()
        assert entries[0]["userId"] == alice_user["id"]

    def test_requires_authentication(self, client):
        assert client.get("/api/search/history").status_code == 401


class TestRecorder:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_store_failure_is_swallowed(self):
        def broken_factory():
            raise RuntimeError("database unavailable")

        recorder = SearchHistoryRecorder(broken_factory)
        query = SearchQuery(encrypted_lat="a", encrypted_lng="b")

        assert await recorder.record("user-id", query) is None

    @pytest.mark.integration
    def test_search_succeeds_when_history_fails(
        self, client, admin_headers, user_headers, make_poi, make_query
    ):
        client.post("/api/pois", json=make_poi(*NYC), headers=admin_headers)

        def broken_factory():
            raise RuntimeError("database unavailable")

        app.dependency_overrides[get_session_factory] = lambda: broken_factory
        response = client.post("/api/search", json=make_query(*NYC), headers=user_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1
