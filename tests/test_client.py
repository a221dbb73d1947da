"""
API client tests.

The HTTP session is mocked; the tests check what the client sends
(always ciphertext) and how it reads the server's answers.
"""

import json
from unittest.mock import MagicMock

import pytest
import requests

from poiquery.client import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    POIQueryClient,
    ServerError,
    ValidationError,
)

pytestmark = pytest.mark.unit

NYC = (40.7128, -74.0060)


def make_response(status_code, body):
    response = requests.Response()
    response.status_code = status_code
    response._content = json.dumps(body).encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    return response


@pytest.fixture
def api():
    client = POIQueryClient("http://testserver/", passphrase="your-private-key")
    client.session.request = MagicMock()
    return client


def sent_json(api, call_index=-1):
    return api.session.request.call_args_list[call_index].kwargs["json"]


class TestAuth:

    def test_login_keeps_token(self, api):
        api.session.request.return_value = make_response(
            200, {"user": {"id": "u1", "email": "a@example.com"}, "token": "tok"}
        )

        user = api.login("a@example.com", "secret123")

        assert user["id"] == "u1"
        assert api.session.headers["Authorization"] == "Bearer tok"
        method, url = api.session.request.call_args.args
        assert (method, url) == ("POST", "http://testserver/api/auth/login")

    def test_logout_drops_token(self, api):
        api.session.request.return_value = make_response(200, {"message": "Logged out successfully"})
        api._set_token("tok")

        api.logout()

        assert "Authorization" not in api.session.headers


class TestPOIs:

    def test_add_poi_sends_ciphertext(self, api, cipher):
        api.session.request.return_value = make_response(200, {"id": "p1"})

        api.add_poi(*NYC, name="City Hall", category="civic")

        body = sent_json(api)
        assert body["name"] == "City Hall"
        assert body["category"] == "civic"
        assert "description" not in body
        assert cipher.decrypt(body["encryptedLat"], body["encryptedLng"]) == (40.7128, -74.006)

    def test_update_requires_both_coordinates(self, api):
        with pytest.raises(ValueError):
            api.update_poi("p1", lat=40.0)

    def test_list_pois_params(self, api):
        api.session.request.return_value = make_response(
            200, {"pois": [], "lastDoc": None, "hasMore": False}
        )

        api.list_pois(page_size=5, last_doc="abc")

        assert api.session.request.call_args.kwargs["params"] == {"pageSize": 5, "lastDoc": "abc"}


class TestSearch:

    def test_query_encrypted_and_results_decrypted(self, api, cipher):
        encrypted_lat, encrypted_lng = cipher.encrypt(*NYC)
        api.session.request.return_value = make_response(200, [{
            "id": "p1",
            "name": "City Hall",
            "encryptedLat": encrypted_lat,
            "encryptedLng": encrypted_lng,
            "distance": 0.0,
        }])

        hits = api.search(*NYC, radius_meters=1000)

        query = sent_json(api)
        assert cipher.decrypt(query["encryptedLat"], query["encryptedLng"]) == (40.7128, -74.006)
        assert cipher.decrypt_scalar(query["encryptedRadius"]) == 1000.0
        assert len(hits) == 1
        assert (hits[0].lat, hits[0].lng) == (40.7128, -74.006)
        assert hits[0].distance == 0.0

    def test_non_positive_radius_not_sent(self, api):
        with pytest.raises(ValueError):
            api.search(*NYC, radius_meters=0)
        api.session.request.assert_not_called()

    def test_radius_omitted_when_not_given(self, api):
        api.session.request.return_value = make_response(200, [])
        api.search(*NYC)
        assert "encryptedRadius" not in sent_json(api)

    def test_undecryptable_result_kept_without_coordinates(self, api):
        api.session.request.return_value = make_response(200, [{
            "id": "p1", "name": "Odd", "encryptedLat": "x", "encryptedLng": "y", "distance": 1.0,
        }])

        hits = api.search(*NYC)

        assert hits[0].lat is None
        assert hits[0].lng is None


class TestErrors:

    @pytest.mark.parametrize("status,error_class", [
        (400, ValidationError),
        (401, AuthenticationError),
        (403, AuthorizationError),
        (404, NotFoundError),
        (500, ServerError),
    ])
    def test_status_mapping(self, api, status, error_class):
        api.session.request.return_value = make_response(
            status, {"error": "boom", "request_id": "r1"}
        )

        with pytest.raises(error_class) as exc_info:
            api.profile()

        assert exc_info.value.message == "boom"
        assert exc_info.value.status_code == status

    def test_network_error_raised_without_second_attempt(self, api):
        api.session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(APIError, match="Network error"):
            api.health_check()

        assert api.session.request.call_count == 1

    def test_timed_out_write_is_not_resent(self, api):
        api.session.request.side_effect = [
            requests.exceptions.ReadTimeout("timed out"),
            make_response(201, {"id": "p1"}),
        ]

        with pytest.raises(APIError, match="Network error"):
            api.add_poi(40.7128, -74.0060, name="NYC")

        api.session.request.assert_called_once()
        method, url = api.session.request.call_args.args
        assert (method, url) == ("POST", "http://testserver/api/pois")
