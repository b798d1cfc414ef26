
import uuid
from sqlalchemy import UniqueConstraint, Uuid, func
from sqlalchemy.orm import deferred
from .extensions import db

class Reservation(db.Model):
    __tablename__ = "reservations"
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_no = db.Column(db.String(64), nullable=False, unique=True, index=True)
    base_id = db.Column(db.String(32), index=True)
    reservation_name = db.Column(db.String(255))
    customer_account_number = db.Column(db.String(64))
    tail_number = db.Column(db.String(32), index=True)
    status = db.Column(db.String(64))
    reservation_type = db.Column(db.String(64))
    est_arrival_at = db.Column(db.DateTime(timezone=True))
    act_arrival_at = db.Column(db.DateTime(timezone=True))
    est_departure_at = db.Column(db.DateTime(timezone=True))
    act_departure_at = db.Column(db.DateTime(timezone=True))
    fbo_name = db.Column(db.String(255))
    res_created_date = db.Column(db.DateTime(timezone=True))
    flight_name = db.Column(db.String(255))
    flight_model = db.Column(db.String(255))
    flight_type = db.Column(db.String(64))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    services = db.relationship(
        "ReservationService",
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationService.position",
    )
    consent = db.relationship("Consent", back_populates="reservation", uselist=False, cascade="all, delete-orphan")

class ReservationService(db.Model):
    __tablename__ = "reservation_services"
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id = db.Column(Uuid, db.ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    product_id = db.Column(db.String(64))
    product_name = db.Column(db.String(255))
    product_status = db.Column(db.String(64))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    service_date = db.Column(db.DateTime(timezone=True))
    subcase_id = db.Column(db.String(64))
    for_arrival_or_departure = db.Column(db.String(32))
    dsf_product_name = db.Column(db.String(255))
    service_request_details = db.Column(db.Text)
    vendor_name = db.Column(db.String(255))
    on_arrival = db.Column(db.Boolean, nullable=False, default=False)
    on_departure = db.Column(db.Boolean, nullable=False, default=False)
    phone_number = db.Column(db.String(64))
    email_address = db.Column(db.String(255))
    quoted_price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    special_instruction_value = db.Column(db.Text)
    vendor_rep = db.Column(db.String(255))
    crew_meal_count = db.Column(db.Integer)
    pax_meal_count = db.Column(db.Integer)
    crew_or_passenger = db.Column(db.String(32))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    reservation = db.relationship("Reservation", back_populates="services")

class Consent(db.Model):
    __tablename__ = "consents"
    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id = db.Column(Uuid, db.ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    terms_and_conditions = db.Column(db.Text, nullable=False)
    terms_version = db.Column(db.String(64), nullable=False)
    geo_location = db.Column(db.String(255))
    channel = db.Column(db.String(64), nullable=False)
    signature_image = deferred(db.Column(db.LargeBinary, nullable=False))

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    reservation = db.relationship("Reservation", back_populates="consent")

    __table_args__ = (
        UniqueConstraint("reservation_id", name="uq_consents_reservation"),
    )

class BaseMapping(db.Model):
    __tablename__ = "base_mapping"
    base_id = db.Column(db.String(32), primary_key=True)
    company_code = db.Column(db.String(32))
    base_number = db.Column(db.String(32))
    iata = db.Column(db.String(8))
    icao = db.Column(db.String(8))
    region = db.Column(db.String(64))
    business_division = db.Column(db.String(64))
    base_description = db.Column(db.String(255))
    fbo_name = db.Column(db.String(255))
    city = db.Column(db.String(128))
    state = db.Column(db.String(64))
    active = db.Column(db.Boolean, nullable=False, default=True)
    currency_code = db.Column(db.String(8))
    default_units = db.Column(db.String(16))
    base_country = db.Column(db.String(64))
    base_time_zone = db.Column(db.String(64))

class BaseEmailPreference(db.Model):
    __tablename__ = "base_email_preferences"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    base_preference = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
