"""
Geo-filter search tests.

Unit tests drive filter_by_distance with in-memory POI objects; the
API tests go through POST /api/search with an encrypted query.
"""

import pytest

from poiquery.core.exceptions import InvalidRadiusException, ValidationException
from poiquery.models.base import utcnow
from poiquery.models.poi import POI
from poiquery.schemas.search import SearchQuery
from poiquery.services.geo import haversine_meters
from poiquery.services.search import GeoSearchService, filter_by_distance

NYC = (40.7128, -74.0060)
LONDON = (51.5074, -0.1278)
# Roughly 5 km and 15 km north of NYC
NYC_5KM = (40.7578, -74.0060)
NYC_15KM = (40.8478, -74.0060)


def build_poi(cipher, poi_id, lat=None, lng=None, encrypted=None):
    if encrypted is None:
        encrypted = cipher.encrypt(lat, lng)
    now = utcnow()
    return POI(
        id=poi_id,
        encrypted_lat=encrypted[0],
        encrypted_lng=encrypted[1],
        name=f"POI {poi_id}",
        created_by="admin-id",
        created_at=now,
        updated_at=now,
    )


# =============================================================================
# UNIT TESTS
# =============================================================================

@pytest.mark.unit
class TestFilterByDistance:

    def test_empty_input(self, cipher):
        results, stats = filter_by_distance([], NYC, 1000, cipher)
        assert results == []
        assert stats.total == 0

    def test_nearest_first(self, cipher):
        pois = [
            build_poi(cipher, "far", *NYC_15KM),
            build_poi(cipher, "here", *NYC),
            build_poi(cipher, "near", *NYC_5KM),
        ]
        results, stats = filter_by_distance(pois, NYC, 20000, cipher)

        assert [r.id for r in results] == ["here", "near", "far"]
        distances = [r.distance for r in results]
        assert distances == sorted(distances)
        assert stats.within_radius == 3

    def test_results_within_radius_and_excluded_outside(self, cipher):
        points = {"a": NYC, "b": NYC_5KM, "c": NYC_15KM, "d": LONDON}
        pois = [build_poi(cipher, key, *point) for key, point in points.items()]
        radius = 10000

        results, _ = filter_by_distance(pois, NYC, radius, cipher)
        kept = {r.id for r in results}

        for result in results:
            assert result.distance * 1000 <= radius
        for key, point in points.items():
            if key not in kept:
                assert haversine_meters(*NYC, *point) > radius

    def test_radius_is_inclusive(self, cipher):
        poi = build_poi(cipher, "edge", 1.0, 0.0)
        radius = haversine_meters(0.0, 0.0, 1.0, 0.0)
        results, _ = filter_by_distance([poi], (0.0, 0.0), radius, cipher)
        assert [r.id for r in results] == ["edge"]

    def test_boundary_points_kept_with_distance_inside_radius(self, cipher):
        for step in range(1, 400):
            lat = step / 100
            radius = haversine_meters(0.0, 0.0, lat, 0.0)
            poi = build_poi(cipher, "edge", lat, 0.0)

            results, _ = filter_by_distance([poi], (0.0, 0.0), radius, cipher)

            assert len(results) == 1, lat
            assert results[0].distance * 1000 <= radius, lat
            assert results[0].distance == pytest.approx(radius / 1000)

    def test_distance_in_kilometers(self, cipher):
        poi = build_poi(cipher, "one-degree", 1.0, 0.0)
        results, _ = filter_by_distance([poi], (0.0, 0.0), 200000, cipher)
        assert results[0].distance == pytest.approx(111.19, abs=0.01)

    def test_malformed_records_skipped(self, cipher):
        pois = [
            build_poi(cipher, "ok-1", *NYC),
            build_poi(cipher, "broken", encrypted=("garbage", "garbage")),
            build_poi(cipher, "ok-2", *NYC_5KM),
        ]
        results, stats = filter_by_distance(pois, NYC, 10000, cipher)

        assert [r.id for r in results] == ["ok-1", "ok-2"]
        assert stats.total == 3
        assert stats.processed == 2
        assert stats.skipped_invalid == 1

    def test_all_invalid(self, cipher):
        pois = [build_poi(cipher, str(i), encrypted=("x", "y")) for i in range(3)]
        results, stats = filter_by_distance(pois, NYC, 10000, cipher)
        assert results == []
        assert stats.skipped_invalid == 3

    def test_ciphertext_returned_unchanged(self, cipher):
        poi = build_poi(cipher, "here", *NYC)
        results, _ = filter_by_distance([poi], NYC, 1000, cipher)
        assert results[0].encrypted_lat == poi.encrypted_lat
        assert results[0].encrypted_lng == poi.encrypted_lng


@pytest.mark.unit
class TestDecryptParameters:

    def service(self, cipher):
        return GeoSearchService(store=None, cipher=cipher, history=None)

    def test_default_radius(self, cipher, make_query):
        center, radius = self.service(cipher).decrypt_parameters(SearchQuery(**make_query(*NYC)))
        assert center == NYC
        assert radius == 10000.0

    def test_explicit_radius(self, cipher, make_query):
        query = SearchQuery(**make_query(*NYC, radius=250))
        _, radius = self.service(cipher).decrypt_parameters(query)
        assert radius == 250.0

    @pytest.mark.parametrize("radius", ["0", "-10"])
    def test_non_positive_radius(self, cipher, make_query, radius):
        query = make_query(*NYC)
        query["encryptedRadius"] = cipher.encrypt_text(radius)
        with pytest.raises(InvalidRadiusException):
            self.service(cipher).decrypt_parameters(SearchQuery(**query))

    def test_undecryptable_center(self, cipher):
        query = SearchQuery(encryptedLat="bad", encryptedLng="bad")
        with pytest.raises(ValidationException, match="Invalid search parameters"):
            self.service(cipher).decrypt_parameters(query)

    def test_undecryptable_radius(self, cipher, make_query):
        query = make_query(*NYC)
        query["encryptedRadius"] = "bad"
        with pytest.raises(ValidationException, match="Invalid search parameters"):
            self.service(cipher).decrypt_parameters(SearchQuery(**query))


# =============================================================================
# API TESTS
# =============================================================================

@pytest.mark.integration
class TestSearchEndpoint:

    def test_requires_authentication(self, client, make_query):
        response = client.post("/api/search", json=make_query(*NYC))
        assert response.status_code == 401
        assert "error" in response.json()

    def test_poi_at_center(self, client, admin_headers, user_headers, make_poi, make_query):
        client.post("/api/pois", json=make_poi(*NYC, name="NYC"), headers=admin_headers)

        response = client.post(
            "/api/search", json=make_query(*NYC, radius=1000), headers=user_headers
        )

        assert response.status_code == 200
        results = response.json()
        assert len(results) == 1
        assert results[0]["name"] == "NYC"
        assert results[0]["distance"] == pytest.approx(0.0, abs=1e-6)
        assert "encryptedLat" in results[0]

    def test_far_poi_excluded(self, client, admin_headers, user_headers, make_poi, make_query):
        client.post("/api/pois", json=make_poi(*LONDON, name="London"), headers=admin_headers)

        response = client.post(
            "/api/search", json=make_query(*NYC, radius=1000), headers=user_headers
        )

        assert response.status_code == 200
        assert response.json() == []

    def test_malformed_poi_dropped(self, client, admin_headers, user_headers, make_poi, make_query):
        broken = make_poi(*NYC, name="Broken")
        broken["encryptedLat"] = "not-a-ciphertext"
        bulk = [make_poi(*NYC, name="A"), broken, make_poi(*NYC_5KM, name="B")]
        client.post("/api/pois/bulk", json={"pois": bulk}, headers=admin_headers)

        response = client.post(
            "/api/search", json=make_query(*NYC, radius=10000), headers=user_headers
        )

        assert response.status_code == 200
        assert [r["name"] for r in response.json()] == ["A", "B"]

    def test_default_radius_applies(self, client, admin_headers, user_headers, make_poi, make_query):
        bulk = [make_poi(*NYC_5KM, name="5km"), make_poi(*NYC_15KM, name="15km")]
        client.post("/api/pois/bulk", json={"pois": bulk}, headers=admin_headers)

        response = client.post("/api/search", json=make_query(*NYC), headers=user_headers)

        assert [r["name"] for r in response.json()] == ["5km"]

    def test_empty_store(self, client, user_headers, make_query):
        response = client.post("/api/search", json=make_query(*NYC), headers=user_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_zero_radius_rejected(self, client, user_headers, cipher, make_query):
        query = make_query(*NYC)
        query["encryptedRadius"] = cipher.encrypt_text("0")

        response = client.post("/api/search", json=query, headers=user_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Search radius must be greater than zero"

    def test_bad_center_rejected(self, client, user_headers):
        response = client.post(
            "/api/search",
            json={"encryptedLat": "bad", "encryptedLng": "bad"},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid search parameters"

    def test_missing_field_rejected(self, client, user_headers):
        response = client.post("/api/search", json={"encryptedLat": "x"}, headers=user_headers)
        assert response.status_code == 400
        assert "encryptedLng" in response.json()["error"]
