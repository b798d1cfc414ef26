from flask import Blueprint, jsonify
from sqlalchemy import select, update
from .. import errors
from ..extensions import db
from ..models import BaseEmailPreference
from ..http import json_body
from ..auth import verify_request, claims_email
from ..schemas import BasePreferencesRequest
from ..utils.time import api_iso_z, utcnow

bp = Blueprint("base_preferences", __name__)


def _split_codes(csv: str | None) -> list[str]:
    return [code.strip() for code in (csv or "").split(",") if code.strip()]


def _caller_email() -> str:
    email = claims_email(verify_request())
    if not email:
        raise errors.ValidationError("User email not found in token")
    return email


@bp.get("")
def get_preferences():
    email = _caller_email()
    pref = db.session.execute(
        select(BaseEmailPreference).where(BaseEmailPreference.email == email)
    ).scalar_one_or_none()
    if pref is None:
        raise errors.NotFound("Email not found or not configured")

    return jsonify(
        email=pref.email,
        basePreferences=_split_codes(pref.base_preference),
        updatedAt=api_iso_z(pref.updated_at),
    )


@bp.post("")
def update_preferences():
    """
    Replaces the caller's base subscriptions. The address must already be
    registered through /base-email.
    """
    email = _caller_email()
    data = BasePreferencesRequest.model_validate(json_body())
    codes = data.normalized()

    t = BaseEmailPreference.__table__
    stmt = (
        update(t)
        .where(t.c.email == email)
        .values(base_preference=",".join(codes), updated_at=utcnow())
        .returning(t.c.email, t.c.base_preference, t.c.updated_at)
    )
    row = db.session.execute(stmt).first()
    if row is None:
        db.session.rollback()
        raise errors.NotFound("Email not found. Contact admin to add your email first.")
    db.session.commit()

    return jsonify(ok=True, data={
        "email": row.email,
        "basePreferences": _split_codes(row.base_preference),
        "updatedAt": api_iso_z(row.updated_at),
    })
