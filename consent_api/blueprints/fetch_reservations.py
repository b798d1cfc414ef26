from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError
from ..extensions import db
from ..http import jerror, query_flag, validation_details
from ..auth import verify_request
from ..schemas import FeedQuery
from ..store import consents_by_reservation_no
from ..feed import feed_reservation_id, merge_consents

bp = Blueprint("fetch_reservations", __name__)

@bp.get("")
def fetch_reservations():
    verify_request()

    try:
        query = FeedQuery.model_validate(request.args.to_dict())
    except ValidationError as e:
        return jerror(
            400,
            "MISSING_PARAMS",
            "requestorId, companyAccountNumber, startDate, and endDate are required query params",
            details=validation_details(e),
        )

    feed = current_app.extensions["reservation_feed"]
    reservations = feed.fetch(
        query.requestor_id,
        query.company_account_number,
        query.start_date,
        query.end_date,
    )

    ids = [rid for rid in (feed_reservation_id(r) for r in reservations) if rid]
    consents = consents_by_reservation_no(db.session, ids, include_signature=query_flag("includeSignature"))

    return jsonify(data=merge_consents(reservations, consents))
