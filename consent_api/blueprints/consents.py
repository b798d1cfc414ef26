from flask import Blueprint, request, jsonify, current_app
from ..extensions import db
from ..http import jerror, json_body, query_flag
from ..auth import verify_request
from ..schemas import ConsentSubmission
from ..store import WriteOutcome, get_reservation_view, record_consent
from ..utils.signature import decode_signature

bp = Blueprint("consents", __name__)


@bp.get("")
def get_consent():
    """
    Reservation with its base, services and consent.
    Query: ?reservationId=R00101&includeSignature=true
    """
    reservation_id = (request.args.get("reservationId") or "").strip()
    if not reservation_id:
        return jerror(400, "MISSING_RESERVATION_ID", "reservationId query param is required")

    view = get_reservation_view(db.session, reservation_id, include_signature=query_flag("includeSignature"))
    return jsonify(view)


@bp.post("")
def create_consent():
    verify_request()

    data = ConsentSubmission.model_validate(json_body())

    max_bytes = current_app.config["MAX_SIGNATURE_BYTES"]
    signature = decode_signature(data.signature_base64, max_bytes)

    result = record_consent(
        db.session,
        data,
        signature,
        channel=current_app.config["CONSENT_CHANNEL"],
        max_bytes=max_bytes,
    )

    status = 201 if result.outcome is WriteOutcome.INSERTED else 200
    return jsonify(ok=True, reservationId=data.reservation.reservation_id, consent=result.consent), status
