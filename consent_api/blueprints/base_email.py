from flask import Blueprint, jsonify
from ..extensions import db
from ..models import BaseEmailPreference
from ..http import jerror, json_body
from ..auth import check_admin
from ..schemas import BaseEmailRequest
from ..store import dialect_insert
from ..utils.time import api_iso_z, utcnow


bp = Blueprint("base_email", __name__)

@bp.post("")
def register_email():
    """Admin-only: registers an address that may later choose its bases."""
    if not check_admin():
        return jerror(401, "UNAUTHORIZED", "Unauthorized: Invalid client credentials")

    data = BaseEmailRequest.model_validate(json_body())

    t = BaseEmailPreference.__table__
    now = utcnow()

    stmt = dialect_insert(db.session, t).values(
        email=data.email.lower(),
        created_at=now,
        updated_at=now,
    ).on_conflict_do_nothing(
        index_elements=[t.c.email],
    ).returning(t.c.id, t.c.email, t.c.created_at)

    row = db.session.execute(stmt).first()
    db.session.commit()

    if row is None:
        return jsonify(message="Email already exists"), 200

    return jsonify(ok=True, data={"id": row.id, "email": row.email, "createdAt": api_iso_z(row.created_at)}), 201
