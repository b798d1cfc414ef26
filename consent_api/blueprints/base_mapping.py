from flask import Blueprint, jsonify
from sqlalchemy import select
from ..extensions import db
from ..models import BaseMapping
from ..store import base_dict

bp = Blueprint("base_mapping", __name__)

@bp.get("")
def list_bases():
    """
    All bases ordered by base id. Keys are camelCase (baseId, companyCode,
    baseTimeZone, ...), not the snake_case column names.
    """
    bases = db.session.execute(
        select(BaseMapping).order_by(BaseMapping.base_id.asc())
    ).scalars().all()
    return jsonify(count=len(bases), bases=[base_dict(b) for b in bases])
