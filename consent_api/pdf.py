import base64
import io
import logging
from datetime import date
from decimal import Decimal
from html import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from . import errors
from .schemas import ConsentPdfRequest
from .utils.signature import strip_data_uri

logger = logging.getLogger(__name__)

BRAND_BLUE = colors.HexColor("#134C8D")
BRAND_NAVY = colors.HexColor("#00263D")
HEADER_FILL = colors.HexColor("#F4F6F8")
GRID = colors.HexColor("#DDDDDD")

MARGIN = 18 * mm
FRAME_WIDTH = A4[0] - 2 * MARGIN

FOOTER_TEXT = "This electronic signature constitutes legal acceptance of the above terms."


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ConsentTitle", parent=base["Heading1"], fontSize=18, textColor=BRAND_BLUE),
        "section": ParagraphStyle("ConsentSection", parent=base["Heading2"], fontSize=13, textColor=BRAND_NAVY, spaceBefore=10),
        "body": ParagraphStyle("ConsentBody", parent=base["Normal"], fontSize=10, leading=13),
        "terms": ParagraphStyle("ConsentTerms", parent=base["Normal"], fontSize=8, leading=11),
        "footer": ParagraphStyle("ConsentFooter", parent=base["Normal"], fontSize=8, textColor=colors.grey, alignment=1),
    }


def _text(value) -> str:
    return escape("" if value is None else str(value))


def _money(value: Decimal) -> str:
    return f"${Decimal(value):,.2f}"


def _details(pairs: list[tuple[str, object]], style) -> Table:
    """Two-column grid of label/value paragraphs."""
    cells = [Paragraph(f"<b>{label}:</b> {_text(value)}", style) for label, value in pairs]
    rows = [cells[i:i + 2] + [""] * (2 - len(cells[i:i + 2])) for i in range(0, len(cells), 2)]
    table = Table(rows, colWidths=[FRAME_WIDTH / 2] * 2)
    table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return table


def _services_table(document: ConsentPdfRequest, style) -> Table:
    rows = [["Product", "Qty", "Service Date", "Quoted Price"]]
    for line in document.services:
        rows.append([
            Paragraph(_text(line.product_name), style),
            _text(line.quantity),
            _text(line.service_date),
            _money(line.quoted_price),
        ])
    rows.append(["", "", "Estimated Total", _money(document.estimated_total())])

    table = Table(rows, colWidths=[FRAME_WIDTH * f for f in (0.45, 0.10, 0.25, 0.20)], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -2), 0.5, GRID),
        ("ALIGN", (2, -1), (2, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    return table


def _signature_image(signature_base64: str) -> Image:
    raw = base64.b64decode(strip_data_uri(signature_base64))
    reader = ImageReader(io.BytesIO(raw))
    width, height = reader.getSize()
    target_h = 20 * mm
    return Image(io.BytesIO(raw), width=target_h * width / height, height=target_h, hAlign="LEFT")


def render_consent_pdf(document: ConsentPdfRequest) -> bytes:
    styles = _styles()
    story = [Paragraph("Reservation Consent", styles["title"])]

    story.append(Paragraph("Reservation Details", styles["section"]))
    story.append(_details([
        ("ID", document.reservation_id),
        ("Status", document.status),
        ("Tail", document.tail_number),
        ("Name", document.reservation_name),
    ], styles["body"]))

    story.append(Paragraph("Customer Information", styles["section"]))
    story.append(_details([
        ("Name", document.customer_name),
        ("FBO", document.fbo_name),
    ], styles["body"]))

    story.append(Paragraph("Flight Information", styles["section"]))
    story.append(_details([
        ("Type", document.aircraft_type),
        ("Estimated Arrival", document.estimated_arrival),
        ("Actual Arrival", document.actual_arrival),
        ("Estimated Departure", document.estimated_departure),
        ("Actual Departure", document.actual_departure),
    ], styles["body"]))

    story.append(Paragraph("Service Details", styles["section"]))
    story.append(_services_table(document, styles["body"]))

    story.append(Paragraph(f"Terms &amp; Conditions {_text(document.terms_version)}", styles["section"]))
    for block in (document.terms or "").split("\n\n"):
        if block.strip():
            story.append(Paragraph(_text(block).replace("\n", "<br/>"), styles["terms"]))

    story.append(Paragraph("Customer Signature", styles["section"]))
    if document.signature_base64:
        try:
            story.append(_signature_image(document.signature_base64))
        except Exception as e:
            raise errors.ValidationError("signatureBase64 is not a readable image") from e
    else:
        story.append(Paragraph("[Signature Not Provided]", styles["body"]))
    story.append(Paragraph(f"<b>Name:</b> {_text(document.customer_name)}", styles["body"]))
    story.append(Paragraph(f"<b>Date:</b> {date.today().isoformat()}", styles["body"]))

    story.append(Spacer(1, 12 * mm))
    story.append(Paragraph(FOOTER_TEXT, styles["footer"]))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title="Reservation Consent",
    )
    try:
        doc.build(story)
    except Exception as e:
        logger.exception("PDF generation failed for reservation %s", document.reservation_id)
        raise errors.UpstreamError("Failed to generate PDF") from e
    return buffer.getvalue()
