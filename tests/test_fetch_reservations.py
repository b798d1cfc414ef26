import base64

import pytest
import requests

from consent_api import errors
from consent_api.feed import ReservationFeedClient, merge_consents

from conftest import SIGNATURE, consent_payload

QUERY = {
    "requestorId": "agent-7",
    "companyAccountNumber": "C-0042",
    "startDate": "2025-09-01",
    "endDate": "2025-09-07",
}

FEED_ROWS = [
    {
        "baseid": "1001",
        "reservationid": "R00101",
        "companyName": "Sample Aviation LLC",
        "customerAccountNumber": "C-0042",
        "tailNumber": "N123SA",
        "reservationStatus": "Confirmed",
        "arrivalDetails": {"estimatedArrivalTimeUTC": "2025-09-01T14:00:00Z"},
        "departureDetails": {"estimatedDepartureTimeUTC": "2025-09-02T09:30:00Z"},
        "products": [{"productID": "FUEL"}],
    },
    {
        "baseid": "1002",
        "reservationid": 555,
        "companyName": "Other Jet Co",
        "tailNumber": "N9XY",
        "reservationStatus": "Pending",
    },
]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def feed(app):
    session = FakeSession(FakeResponse(payload={"data": FEED_ROWS}))
    app.extensions["reservation_feed"] = ReservationFeedClient(
        "https://feed.example.com/", "feed-key", session=session
    )
    return session


def test_requires_token(client, feed):
    assert client.get("/fetchReservations", query_string=QUERY).status_code == 401


@pytest.mark.parametrize("missing", sorted(QUERY))
def test_missing_params(client, auth_headers, feed, missing):
    query = {k: v for k, v in QUERY.items() if k != missing}
    r = client.get("/fetchReservations", query_string=query, headers=auth_headers)
    assert r.status_code == 400
    body = r.get_json()
    assert body["code"] == "MISSING_PARAMS"
    assert body["error"] == "requestorId, companyAccountNumber, startDate, and endDate are required query params"
    assert feed.calls == []


def test_passes_query_to_feed(client, auth_headers, feed):
    client.get("/fetchReservations", query_string=QUERY, headers=auth_headers)

    (url, kwargs), = feed.calls
    assert url == "https://feed.example.com/ops/v1/dashboard/fbo-operations"
    assert kwargs["params"] == {
        "requestor-id": "agent-7",
        "company-account-number": "C-0042",
        "startDate": "2025-09-01",
        "endDate": "2025-09-07",
    }
    assert kwargs["headers"]["Authorization"] == "Bearer feed-key"


def test_merges_stored_consent(client, auth_headers, feed):
    client.post("/consents", json=consent_payload("R00101"), headers=auth_headers)

    r = client.get("/fetchReservations", query_string=QUERY, headers=auth_headers)
    assert r.status_code == 200
    first, second = r.get_json()["data"]

    assert first["reservationId"] == "R00101"
    assert first["baseId"] == "1001"
    assert first["reservationName"] == "Sample Aviation LLC"
    assert first["status"] == "Confirmed"
    assert first["products"] == [{"productID": "FUEL"}]
    assert first["consent"]["name"] == "Jane Doe"
    assert first["consent"]["termsVersion"] == "2025-08-27-v1"
    assert "signature" not in first["consent"]

    assert second["reservationId"] == "555"
    assert second["products"] == []
    assert "consent" not in second


def test_include_signature(client, auth_headers, feed):
    client.post("/consents", json=consent_payload("R00101"), headers=auth_headers)

    query = {**QUERY, "includeSignature": "true"}
    first = client.get("/fetchReservations", query_string=query, headers=auth_headers).get_json()["data"][0]
    assert base64.b64decode(first["consent"]["signature"]) == SIGNATURE


def test_empty_feed(client, auth_headers, feed):
    feed.response = FakeResponse(payload={"data": None})
    r = client.get("/fetchReservations", query_string=QUERY, headers=auth_headers)
    assert r.status_code == 200
    assert r.get_json() == {"data": []}


@pytest.mark.parametrize("response, error", [
    (FakeResponse(status_code=502, reason="Bad Gateway"), None),
    (FakeResponse(payload=ValueError("not json")), None),
    (None, requests.ConnectionError("refused")),
    (None, requests.Timeout("slow")),
])
def test_upstream_failures(client, auth_headers, feed, response, error):
    feed.response = response
    feed.error = error
    r = client.get("/fetchReservations", query_string=QUERY, headers=auth_headers)
    assert r.status_code == 500
    assert r.get_json() == {"error": "Reservation feed unavailable", "code": "UPSTREAM_ERROR"}


def test_unconfigured_feed():
    client = ReservationFeedClient("", "", session=FakeSession())
    with pytest.raises(errors.UpstreamError, match="not configured"):
        client.fetch("a", "b", "c", "d")


def test_merge_consents_skips_rows_without_id():
    merged = merge_consents([{"tailNumber": "N1"}], {"R1": {"name": "x"}})
    assert merged[0]["reservationId"] is None
    assert "consent" not in merged[0]
