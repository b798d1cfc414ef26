from flask import Blueprint, Response
from ..http import json_body
from ..schemas import ConsentPdfRequest
from ..pdf import render_consent_pdf

bp = Blueprint("consent_pdf", __name__)

@bp.post("")
def generate_consent_pdf():
    document = ConsentPdfRequest.model_validate(json_body())
    pdf = render_consent_pdf(document)
    return Response(
        pdf,
        status=200,
        mimetype="application/pdf",
        headers={"Content-Disposition": "inline; filename=consent.pdf"},
    )
