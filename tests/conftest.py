import base64

import pytest

from consent_api import errors
from consent_api.app import create_app
from consent_api.config import Config
from consent_api.extensions import db


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ALLOW_ORIGIN = "*"
    ADMIN_CLIENT_ID = "admin-client"
    ADMIN_CLIENT_SECRET = "admin-secret"
    RESERVATION_FEED_URL = "https://feed.example.com"
    RESERVATION_FEED_API_KEY = "feed-key"
    LOG_LEVEL = "WARNING"


USER_TOKEN = "user-token"
NO_EMAIL_TOKEN = "no-email-token"

# 37 bytes of signature image
SIGNATURE = b"\x89PNG\r\n\x1a\n" + b"consent-signature-payload-ok!"


class StubVerifier:
    """Accepts a fixed set of tokens in place of the JWKS-backed verifier."""

    def __init__(self, tokens: dict):
        self.tokens = tokens

    def verify(self, token: str) -> dict:
        if token == "expired":
            raise errors.TokenExpired()
        claims = self.tokens.get(token)
        if claims is None:
            raise errors.InvalidToken()
        return claims


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions["claims_verifier"] = StubVerifier({
        USER_TOKEN: {"sub": "u-1", "preferred_username": "Agent@Example.com", "name": "Agent"},
        NO_EMAIL_TOKEN: {"sub": "svc-1"},
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def consent_payload(reservation_id: str = "R00101", **overrides) -> dict:
    payload = {
        "reservation": {
            "reservationId": reservation_id,
            "baseId": "1001",
            "companyName": "Sample Aviation LLC",
            "customerAccountNumber": "C-0042",
            "tailNumber": "N123SA",
            "reservationStatus": "Confirmed",
            "fboName": "Signature BED",
            "arrivalDetails": {"estimatedArrivalTimeUTC": "2025-09-01T14:00:00Z", "actualArrivalTimeUTC": ""},
            "departureDetails": {"estimatedDepartureTimeUTC": "2025-09-02T09:30:00Z"},
        },
        "products": [
            {"productID": "FUEL", "productName": "Jet-A Fuel", "quantity": "300", "quotedPrice": "1950.50"},
            {"productID": "GPU", "productName": "Ground Power", "onArrival": "true"},
        ],
        "fullName": "Jane Doe",
        "termsText": "I accept the ground handling terms.",
        "termsVersion": "2025-08-27-v1",
        "geoLocation": "42.4699,-71.2890",
        "signatureBase64": b64(SIGNATURE),
    }
    payload.update(overrides)
    return payload
