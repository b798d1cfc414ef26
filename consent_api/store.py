import enum
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete, insert, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload

from . import errors
from .models import BaseMapping, Consent, Reservation, ReservationService
from .schemas import ConsentSubmission, ReservationIn, ServiceItemIn
from .utils.signature import encode_signature
from .utils.time import api_iso_z, utcnow

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Consent already exists for this reservation. Use overwrite=true to replace."


class WriteOutcome(enum.Enum):
    INSERTED = "inserted"
    REPLACED = "replaced"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ConsentWrite:
    outcome: WriteOutcome
    consent: dict | None = None


def dialect_insert(session: Session, table):
    """Dialect-specific INSERT that supports ON CONFLICT."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    raise RuntimeError(f"ON CONFLICT upserts are not supported on {dialect}")


# --- writes -----------------------------------------------------------------

def upsert_reservation(session: Session, reservation: ReservationIn) -> uuid.UUID:
    """Inserts or updates a reservation by its external id and returns the internal id."""
    reservation_no = (reservation.reservation_id or "").strip()
    if not reservation_no:
        raise errors.ValidationError("reservation.reservationId is required")

    t = Reservation.__table__
    now = utcnow()
    values = reservation.columns()

    ins = dialect_insert(session, t).values(
        reservation_no=reservation_no,
        created_at=now,
        updated_at=now,
        **values,
    )
    update_set = {t.c[name]: ins.excluded[name] for name in values}
    update_set[t.c.updated_at] = now

    stmt = ins.on_conflict_do_update(
        index_elements=[t.c.reservation_no],
        set_=update_set,
    ).returning(t.c.id)
    return session.execute(stmt).scalar_one()


def _service_row(reservation_id: uuid.UUID, position: int, item: ServiceItemIn, now) -> dict:
    return {
        "reservation_id": reservation_id,
        "position": position,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "product_status": item.product_status,
        "quantity": item.quantity if item.quantity is not None else 1,
        "service_date": item.service_date,
        "subcase_id": item.subcase_id,
        "for_arrival_or_departure": item.for_arrival_or_departure,
        "dsf_product_name": item.dsf_product_name,
        "service_request_details": item.service_request_details,
        "vendor_name": item.vendor_name,
        "on_arrival": item.on_arrival,
        "on_departure": item.on_departure,
        "phone_number": item.phone_number,
        "email_address": item.email_address,
        "quoted_price": item.quoted_price if item.quoted_price is not None else 0,
        "special_instruction_value": item.special_instruction_value,
        "vendor_rep": item.vendor_rep,
        "crew_meal_count": item.crew_meal_count,
        "pax_meal_count": item.pax_meal_count,
        "crew_or_passenger": item.crew_or_passenger,
        "created_at": now,
    }


def replace_services(session: Session, reservation_id: uuid.UUID, items: list[ServiceItemIn]) -> None:
    """Swaps the full set of line items of a reservation for ``items``, in order."""
    t = ReservationService.__table__
    session.execute(delete(t).where(t.c.reservation_id == reservation_id))
    if not items:
        return
    now = utcnow()
    rows = [_service_row(reservation_id, position, item, now) for position, item in enumerate(items)]
    session.execute(insert(t), rows)


def write_consent(
    session: Session,
    reservation_id: uuid.UUID,
    *,
    full_name: str,
    terms_text: str,
    terms_version: str,
    geo_location: str | None,
    signature: bytes,
    overwrite: bool,
    channel: str,
    max_bytes: int,
) -> ConsentWrite:
    """
    Records the consent of a reservation.

    With ``overwrite`` an existing consent is replaced in place and its
    ``updated_at`` refreshed; its creation time is kept. Without it an
    existing consent leaves the store untouched and the result is
    ``WriteOutcome.CONFLICT``.
    """
    missing = [
        name for name, value in (
            ("fullName", full_name),
            ("termsText", terms_text),
            ("termsVersion", terms_version),
            ("signatureBase64", signature),
        )
        if not value or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise errors.ValidationError(f"{', '.join(missing)} required")
    if len(signature) > max_bytes:
        raise errors.PayloadTooLarge(f"Signature too large (max {max_bytes // (1024 * 1024)}MB)")

    t = Consent.__table__
    now = utcnow()
    ins = dialect_insert(session, t).values(
        reservation_id=reservation_id,
        full_name=full_name,
        terms_and_conditions=terms_text,
        terms_version=terms_version,
        geo_location=geo_location,
        channel=channel,
        signature_image=signature,
        created_at=now,
        updated_at=now,
    )
    returned = (t.c.id, t.c.terms_version, t.c.geo_location, t.c.channel, t.c.created_at, t.c.updated_at)

    if overwrite:
        existing = session.execute(
            select(t.c.id).where(t.c.reservation_id == reservation_id).with_for_update()
        ).first()
        stmt = ins.on_conflict_do_update(
            index_elements=[t.c.reservation_id],
            set_={
                t.c.full_name: ins.excluded.full_name,
                t.c.terms_and_conditions: ins.excluded.terms_and_conditions,
                t.c.terms_version: ins.excluded.terms_version,
                t.c.geo_location: ins.excluded.geo_location,
                t.c.channel: ins.excluded.channel,
                t.c.signature_image: ins.excluded.signature_image,
                t.c.updated_at: now,
            },
        ).returning(*returned)
        row = session.execute(stmt).one()
        outcome = WriteOutcome.REPLACED if existing else WriteOutcome.INSERTED
    else:
        stmt = ins.on_conflict_do_nothing(index_elements=[t.c.reservation_id]).returning(*returned)
        row = session.execute(stmt).first()
        if row is None:
            return ConsentWrite(WriteOutcome.CONFLICT)
        outcome = WriteOutcome.INSERTED

    return ConsentWrite(outcome, {
        "id": str(row.id),
        "termsVersion": row.terms_version,
        "geoLocation": row.geo_location,
        "channel": row.channel,
        "createdAt": api_iso_z(row.created_at),
        "updatedAt": api_iso_z(row.updated_at),
    })


def record_consent(
    session: Session,
    submission: ConsentSubmission,
    signature: bytes,
    *,
    channel: str,
    max_bytes: int,
) -> ConsentWrite:
    """Upserts the reservation, replaces its services and writes the consent as one unit of work."""
    reservation_no = submission.reservation.reservation_id
    try:
        reservation_id = upsert_reservation(session, submission.reservation)
        replace_services(session, reservation_id, submission.products)
        result = write_consent(
            session,
            reservation_id,
            full_name=submission.full_name,
            terms_text=submission.terms_text,
            terms_version=submission.terms_version,
            geo_location=submission.geo_location,
            signature=signature,
            overwrite=submission.overwrite,
            channel=channel,
            max_bytes=max_bytes,
        )
        if result.outcome is WriteOutcome.CONFLICT:
            raise errors.Conflict(CONFLICT_MESSAGE)
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("Consent transaction for %s rolled back", reservation_no)
        raise

    logger.info("Consent %s for reservation %s", result.outcome.value, reservation_no)
    return result


# --- reads ------------------------------------------------------------------

def reservation_dict(r: Reservation) -> dict:
    return {
        "reservationId": r.reservation_no,
        "baseId": r.base_id,
        "reservationName": r.reservation_name,
        "customerAccountNumber": r.customer_account_number,
        "tailNumber": r.tail_number,
        "status": r.status,
        "reservationType": r.reservation_type,
        "createdAt": api_iso_z(r.created_at),
        "updatedAt": api_iso_z(r.updated_at),
        "estimatedArrival": api_iso_z(r.est_arrival_at),
        "actualArrival": api_iso_z(r.act_arrival_at),
        "estimatedDeparture": api_iso_z(r.est_departure_at),
        "actualDeparture": api_iso_z(r.act_departure_at),
        "fboName": r.fbo_name,
        "resCreatedDate": api_iso_z(r.res_created_date),
        "flightName": r.flight_name,
        "flightModel": r.flight_model,
        "flightType": r.flight_type,
    }


def base_dict(b: BaseMapping) -> dict:
    return {
        "baseId": b.base_id,
        "companyCode": b.company_code,
        "baseNumber": b.base_number,
        "iata": b.iata,
        "icao": b.icao,
        "region": b.region,
        "businessDivision": b.business_division,
        "baseDescription": b.base_description,
        "fboName": b.fbo_name,
        "city": b.city,
        "state": b.state,
        "active": b.active,
        "currencyCode": b.currency_code,
        "defaultUnits": b.default_units,
        "baseCountry": b.base_country,
        "baseTimeZone": b.base_time_zone,
    }


def service_dict(s: ReservationService) -> dict:
    return {
        "id": str(s.id),
        "productId": s.product_id,
        "productName": s.product_name,
        "productStatus": s.product_status,
        "quantity": s.quantity,
        "serviceDate": api_iso_z(s.service_date),
        "forArrivalOrDeparture": s.for_arrival_or_departure,
        "vendorName": s.vendor_name,
        "onArrival": s.on_arrival,
        "onDeparture": s.on_departure,
        "quotedPrice": float(s.quoted_price) if s.quoted_price is not None else None,
        "specialInstruction": s.special_instruction_value,
        "crewMealCount": s.crew_meal_count,
        "paxMealCount": s.pax_meal_count,
        "crewOrPassenger": s.crew_or_passenger,
    }


def consent_dict(c: Consent, include_signature: bool = False) -> dict:
    data = {
        "id": str(c.id),
        "fullName": c.full_name,
        "termsVersion": c.terms_version,
        "termsAndConditions": c.terms_and_conditions,
        "geoLocation": c.geo_location,
        "channel": c.channel,
        "createdAt": api_iso_z(c.created_at),
        "updatedAt": api_iso_z(c.updated_at),
    }
    if include_signature:
        data["signature"] = encode_signature(c.signature_image)
    return data


def get_reservation_view(session: Session, reservation_no: str, include_signature: bool = False) -> dict:
    """Reservation joined with its base, services and consent."""
    reservation = session.execute(
        select(Reservation)
        .options(selectinload(Reservation.services), selectinload(Reservation.consent))
        .where(Reservation.reservation_no == reservation_no)
    ).scalar_one_or_none()
    if reservation is None:
        raise errors.NotFound("Reservation or consent not found")

    base = session.get(BaseMapping, reservation.base_id) if reservation.base_id else None
    consent = reservation.consent

    return {
        "reservation": reservation_dict(reservation),
        "baseDetails": base_dict(base) if base else None,
        "services": [service_dict(s) for s in reservation.services],
        "consent": consent_dict(consent, include_signature) if consent else None,
    }


_SEARCH_FIELDS = (
    "reservationId", "baseId", "reservationName", "customerAccountNumber", "tailNumber", "status",
    "createdAt", "estimatedArrival", "actualArrival", "estimatedDeparture", "actualDeparture",
)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_reservations(session: Session, search_text: str | None, limit: int) -> list[dict]:
    """Newest reservations with their consent summary, optionally filtered by free text."""
    stmt = select(Reservation, Consent).outerjoin(Consent, Consent.reservation_id == Reservation.id)
    if search_text and search_text.strip():
        pattern = _like_pattern(search_text.strip())
        stmt = stmt.where(or_(
            Reservation.reservation_no.ilike(pattern, escape="\\"),
            Reservation.tail_number.ilike(pattern, escape="\\"),
            Reservation.reservation_name.ilike(pattern, escape="\\"),
            Consent.full_name.ilike(pattern, escape="\\"),
        ))
    stmt = stmt.order_by(Reservation.created_at.desc()).limit(limit)

    data = []
    for reservation, consent in session.execute(stmt).all():
        full = reservation_dict(reservation)
        item = {key: full[key] for key in _SEARCH_FIELDS}
        item["consent"] = {
            "id": str(consent.id),
            "name": consent.full_name,
            "termsVersion": consent.terms_version,
            "geoLocation": consent.geo_location,
            "createdAt": api_iso_z(consent.created_at),
        } if consent else None
        data.append(item)
    return data


def consents_by_reservation_no(session: Session, reservation_nos: list[str], include_signature: bool = False) -> dict[str, dict]:
    """Consent summaries keyed by external reservation id."""
    if not reservation_nos:
        return {}
    rows = session.execute(
        select(Reservation.reservation_no, Consent)
        .join(Consent, Consent.reservation_id == Reservation.id)
        .where(Reservation.reservation_no.in_(reservation_nos))
    ).all()

    found = {}
    for reservation_no, consent in rows:
        summary = {
            "name": consent.full_name,
            "termsVersion": consent.terms_version,
            "geoLocation": consent.geo_location,
            "createdAt": api_iso_z(consent.created_at),
        }
        if include_signature:
            summary["signature"] = encode_signature(consent.signature_image)
        found[reservation_no] = summary
    return found
