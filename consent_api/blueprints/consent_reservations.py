from flask import Blueprint, request, jsonify, current_app
from ..extensions import db
from ..auth import verify_request
from ..store import search_reservations

bp = Blueprint("consent_reservations", __name__)

@bp.get("")
def list_consent_reservations():
    """
    Newest reservations with their consent, if any.
    Query: ?searchText=N123 (reservation no, tail number, name or signer)
    """
    verify_request()

    data = search_reservations(db.session, request.args.get("searchText"), current_app.config["SEARCH_LIMIT"])
    return jsonify(data=data, count=len(data))
