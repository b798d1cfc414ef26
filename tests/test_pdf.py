import base64
import io
from decimal import Decimal

import pytest
from PIL import Image

from consent_api import errors
from consent_api.pdf import render_consent_pdf
from consent_api.schemas import ConsentPdfRequest


def _png() -> str:
    buf = io.BytesIO()
    Image.new("RGB", (300, 100), "white").save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _document(**overrides) -> dict:
    doc = {
        "reservationId": "R00101",
        "status": "Confirmed",
        "tailNumber": "N123SA",
        "reservationName": "Sample Aviation LLC",
        "customerName": "Jane Doe",
        "fboName": "Signature BED",
        "aircraftType": "G650",
        "estimatedArrival": "2025-09-01 14:00 UTC",
        "services": [
            {"productName": "Jet-A Fuel", "quantity": 300, "serviceDate": "2025-09-01", "quotedPrice": 1950.5},
            {"productName": "Ground Power <GPU> & cables", "quantity": 1, "quotedPrice": None},
        ],
        "termsVersion": "2025-08-27-v1",
        "terms": "1. Services are billed on completion.\n\n2. Fuel prices are estimates.",
        "signatureBase64": "data:image/png;base64," + _png(),
    }
    doc.update(overrides)
    return doc


def test_generate_pdf(client):
    r = client.post("/generate-consent-pdf", json=_document())
    assert r.status_code == 200
    assert r.mimetype == "application/pdf"
    assert r.headers["Content-Disposition"] == "inline; filename=consent.pdf"
    assert r.data.startswith(b"%PDF")


def test_generate_pdf_without_signature(client):
    r = client.post("/generate-consent-pdf", json=_document(signatureBase64=None, services=None))
    assert r.status_code == 200
    assert r.data.startswith(b"%PDF")


def test_unreadable_signature_400(client):
    bogus = base64.b64encode(b"definitely not an image").decode("ascii")
    r = client.post("/generate-consent-pdf", json=_document(signatureBase64=bogus))
    assert r.status_code == 400
    assert r.get_json()["error"] == "signatureBase64 is not a readable image"


def test_invalid_body_400(client):
    r = client.post("/generate-consent-pdf", data="x", headers={"Content-Type": "application/json"})
    assert r.status_code == 400

    r = client.post("/generate-consent-pdf", json=_document(services="many"))
    assert r.status_code == 400
    assert r.get_json()["code"] == "VALIDATION_ERROR"


def test_estimated_total():
    doc = ConsentPdfRequest.model_validate(_document())
    assert doc.estimated_total() == Decimal("1950.5")
    assert doc.services[1].quoted_price == Decimal("0")


def test_render_direct():
    pdf = render_consent_pdf(ConsentPdfRequest.model_validate(_document(terms=None)))
    assert pdf.startswith(b"%PDF")


def test_render_bad_image_raises_validation_error():
    doc = ConsentPdfRequest.model_validate(_document(signatureBase64="AAAA"))
    with pytest.raises(errors.ValidationError):
        render_consent_pdf(doc)
