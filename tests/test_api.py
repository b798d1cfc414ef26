import uuid

from consent_api.extensions import db
from consent_api.models import BaseEmailPreference, BaseMapping

from conftest import NO_EMAIL_TOKEN, consent_payload

ADMIN_HEADERS = {"x-client-id": "admin-client", "x-client-secret": "admin-secret"}


def _unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


def _register(app, email: str, bases: str | None = None):
    with app.app_context():
        db.session.add(BaseEmailPreference(email=email, base_preference=bases))
        db.session.commit()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json().get("status") == "ok"


def test_base_mapping_lists_bases_in_order(app, client):
    with app.app_context():
        db.session.add_all([
            BaseMapping(base_id="2001", icao="EGGW", iata="LTN", active=True),
            BaseMapping(base_id="1001", icao="KBED", iata="BED", active=False),
        ])
        db.session.commit()

    r = client.get("/base-mapping")
    assert r.status_code == 200
    body = r.get_json()
    assert body["count"] == 2
    assert [b["baseId"] for b in body["bases"]] == ["1001", "2001"]
    assert body["bases"][0]["active"] is False
    assert body["bases"][1]["icao"] == "EGGW"
    assert "companyCode" in body["bases"][0]
    assert "base_id" not in body["bases"][0]


def test_base_mapping_empty(client):
    assert client.get("/base-mapping").get_json() == {"count": 0, "bases": []}


def test_base_email_requires_admin_credentials_401(client):
    r = client.post("/base-email", json={"email": _unique_email("ops")})
    assert r.status_code == 401
    assert r.get_json()["error"] == "Unauthorized: Invalid client credentials"

    r = client.post(
        "/base-email",
        json={"email": _unique_email("ops")},
        headers={**ADMIN_HEADERS, "x-client-secret": "wrong"},
    )
    assert r.status_code == 401


def test_base_email_disabled_without_configured_credentials_401(app, client):
    app.config["ADMIN_CLIENT_SECRET"] = ""
    r = client.post("/base-email", json={"email": _unique_email("ops")}, headers=ADMIN_HEADERS)
    assert r.status_code == 401


def test_base_email_register_201_then_existing_200(client):
    email = _unique_email("Ops")
    r = client.post("/base-email", json={"email": email}, headers=ADMIN_HEADERS)
    assert r.status_code == 201
    body = r.get_json()
    assert body["ok"] is True
    assert body["data"]["email"] == email.lower()
    assert isinstance(body["data"]["id"], int)

    r = client.post("/base-email", json={"email": email.upper()}, headers=ADMIN_HEADERS)
    assert r.status_code == 200
    assert r.get_json() == {"message": "Email already exists"}


def test_base_email_invalid_email_400(client):
    r = client.post("/base-email", json={"email": "not-an-email"}, headers=ADMIN_HEADERS)
    assert r.status_code == 400
    assert r.get_json()["code"] == "VALIDATION_ERROR"


def test_base_preferences_requires_token_401(client):
    assert client.get("/base-preferences").status_code == 401
    r = client.get("/base-preferences", headers={"Authorization": "Token abc"})
    assert r.status_code == 401


def test_base_preferences_unregistered_404(client, auth_headers):
    r = client.get("/base-preferences", headers=auth_headers)
    assert r.status_code == 404
    assert r.get_json()["error"] == "Email not found or not configured"

    r = client.post("/base-preferences", json={"basePreferences": ["1001"]}, headers=auth_headers)
    assert r.status_code == 404
    assert r.get_json()["error"] == "Email not found. Contact admin to add your email first."


def test_base_preferences_token_without_email_400(client):
    r = client.get("/base-preferences", headers={"Authorization": f"Bearer {NO_EMAIL_TOKEN}"})
    assert r.status_code == 400
    assert r.get_json()["error"] == "User email not found in token"


def test_base_preferences_rejects_non_list_400(app, client, auth_headers):
    _register(app, "agent@example.com")
    r = client.post("/base-preferences", json={"basePreferences": "1001"}, headers=auth_headers)
    assert r.status_code == 400


def test_base_preferences_update_then_read(app, client, auth_headers):
    _register(app, "agent@example.com", "9999")

    r = client.post(
        "/base-preferences",
        json={"basePreferences": [" 1001", "", "2001 "]},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.get_json()["data"]["basePreferences"] == ["1001", "2001"]

    r = client.get("/base-preferences", headers=auth_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["email"] == "agent@example.com"
    assert body["basePreferences"] == ["1001", "2001"]
    assert body["updatedAt"].endswith("Z")


def test_base_preferences_cleared(app, client, auth_headers):
    _register(app, "agent@example.com", "1001,2001")
    client.post("/base-preferences", json={"basePreferences": []}, headers=auth_headers)
    assert client.get("/base-preferences", headers=auth_headers).get_json()["basePreferences"] == []


def test_consent_reservations_requires_token_401(client):
    assert client.get("/consentReservations").status_code == 401


def test_consent_reservations_search(client, auth_headers):
    client.post("/consents", json=consent_payload("R00101"), headers=auth_headers)
    other = consent_payload("R00202", fullName="Percy_Pilot")
    other["reservation"]["tailNumber"] = "N777ZZ"
    client.post("/consents", json=other, headers=auth_headers)

    r = client.get("/consentReservations", headers=auth_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body["count"] == 2
    assert {row["reservationId"] for row in body["data"]} == {"R00101", "R00202"}

    r = client.get("/consentReservations", query_string={"searchText": "n777"}, headers=auth_headers)
    rows = r.get_json()["data"]
    assert [row["reservationId"] for row in rows] == ["R00202"]
    assert rows[0]["consent"]["name"] == "Percy_Pilot"
    assert rows[0]["tailNumber"] == "N777ZZ"


def test_consent_reservations_search_treats_wildcards_literally(client, auth_headers):
    client.post("/consents", json=consent_payload("R00101"), headers=auth_headers)
    client.post("/consents", json=consent_payload("R00202", fullName="Percy_Pilot"), headers=auth_headers)

    rows = client.get("/consentReservations", query_string={"searchText": "_"}, headers=auth_headers).get_json()["data"]
    assert [row["reservationId"] for row in rows] == ["R00202"]

    rows = client.get("/consentReservations", query_string={"searchText": "%"}, headers=auth_headers).get_json()["data"]
    assert rows == []


def test_unknown_route_404(client):
    r = client.get("/api/unknown")
    assert r.status_code == 404
    assert r.get_json()["code"] == "NOT_FOUND"


def test_cors_header_on_simple_request(client):
    r = client.get("/health", headers={"Origin": "https://app.example.com"})
    assert r.headers["Access-Control-Allow-Origin"] == "*"
