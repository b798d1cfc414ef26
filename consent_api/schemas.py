from datetime import datetime, timezone
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from .utils.time import to_utc


def _loose_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in ("true", "1", "yes")


class InboundModel(BaseModel):
    """Base for request payloads. Legacy aliases resolve to one canonical field
    and blank strings are treated as missing before any field validation."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("*", mode="after")
    @classmethod
    def _datetimes_in_utc(cls, v):
        if isinstance(v, datetime):
            return to_utc(v).astimezone(timezone.utc)
        return v


class ArrivalDetails(InboundModel):
    estimated: datetime | None = Field(None, validation_alias=AliasChoices("estimatedArrivalTimeUTC", "estimatedArrivalTime"))
    actual: datetime | None = Field(None, validation_alias=AliasChoices("actualArrivalTimeUTC", "actualArrivalTime"))


class DepartureDetails(InboundModel):
    estimated: datetime | None = Field(None, validation_alias=AliasChoices("estimatedDepartureTimeUTC", "estimatedDepartureTime"))
    actual: datetime | None = Field(None, validation_alias=AliasChoices("actualDepartureTimeUTC", "actualDepartureTime"))


class ReservationIn(InboundModel):
    reservation_id: str = Field(..., min_length=1, max_length=64, validation_alias=AliasChoices("reservationId", "reservationid"))
    base_id: str | None = Field(None, max_length=32, validation_alias=AliasChoices("baseId", "baseid"))
    reservation_name: str | None = Field(None, max_length=255, validation_alias=AliasChoices("companyName", "reservationName"))
    customer_account_number: str | None = Field(None, max_length=64, validation_alias="customerAccountNumber")
    tail_number: str | None = Field(None, max_length=32, validation_alias="tailNumber")
    status: str | None = Field(None, max_length=64, validation_alias=AliasChoices("status", "reservationStatus"))
    reservation_type: str | None = Field(None, max_length=64, validation_alias="reservationType")
    fbo_name: str | None = Field(None, max_length=255, validation_alias="fboName")
    created_date: datetime | None = Field(None, validation_alias="createdDate")
    flight_name: str | None = Field(None, max_length=255, validation_alias="flightName")
    flight_model: str | None = Field(None, max_length=255, validation_alias="flightModel")
    flight_type: str | None = Field(None, max_length=64, validation_alias="flightType")
    arrival: ArrivalDetails = Field(default_factory=ArrivalDetails, validation_alias="arrivalDetails")
    departure: DepartureDetails = Field(default_factory=DepartureDetails, validation_alias="departureDetails")

    @field_validator("arrival", "departure", mode="before")
    @classmethod
    def _null_details(cls, v):
        return {} if v is None else v

    def columns(self) -> dict:
        """Mutable reservation attributes keyed by column name."""
        return {
            "base_id": self.base_id,
            "reservation_name": self.reservation_name,
            "customer_account_number": self.customer_account_number,
            "tail_number": self.tail_number,
            "status": self.status,
            "reservation_type": self.reservation_type,
            "est_arrival_at": self.arrival.estimated,
            "act_arrival_at": self.arrival.actual,
            "est_departure_at": self.departure.estimated,
            "act_departure_at": self.departure.actual,
            "fbo_name": self.fbo_name,
            "res_created_date": self.created_date,
            "flight_name": self.flight_name,
            "flight_model": self.flight_model,
            "flight_type": self.flight_type,
        }


class ServiceItemIn(InboundModel):
    product_id: str | None = Field(None, max_length=64, validation_alias=AliasChoices("productID", "productId"))
    product_name: str | None = Field(None, max_length=255, validation_alias="productName")
    product_status: str | None = Field(None, max_length=64, validation_alias="productStatus")
    quantity: int | None = Field(None, ge=0)
    service_date: datetime | None = Field(None, validation_alias=AliasChoices("serviceDateUTC", "serviceDate"))
    subcase_id: str | None = Field(None, max_length=64, validation_alias="subcaseId")
    for_arrival_or_departure: str | None = Field(None, max_length=32, validation_alias=AliasChoices("forArrivalorDeparture", "forArrivalOrDeparture"))
    dsf_product_name: str | None = Field(None, max_length=255, validation_alias="dsfProductName")
    service_request_details: str | None = Field(None, validation_alias="serviceRequestDetails")
    vendor_name: str | None = Field(None, max_length=255, validation_alias="vendorName")
    on_arrival: bool = Field(False, validation_alias="onArrival")
    on_departure: bool = Field(False, validation_alias="onDeparture")
    phone_number: str | None = Field(None, max_length=64, validation_alias="phoneNumber")
    email_address: str | None = Field(None, max_length=255, validation_alias="emailAddress")
    quoted_price: Decimal | None = Field(None, validation_alias="quotedPrice")
    special_instruction_value: str | None = Field(None, validation_alias=AliasChoices("specialInstructionValue", "specialInstruction"))
    vendor_rep: str | None = Field(None, max_length=255, validation_alias="vendorRep")
    crew_meal_count: int | None = Field(None, validation_alias="crewMealCount")
    pax_meal_count: int | None = Field(None, validation_alias="paxMealCount")
    crew_or_passenger: str | None = Field(None, max_length=32, validation_alias=AliasChoices("crewOrPassanger", "crewOrPassenger"))

    @field_validator("on_arrival", "on_departure", mode="before")
    @classmethod
    def _flags(cls, v):
        return _loose_bool(v)


class ConsentSubmission(InboundModel):
    reservation: ReservationIn
    products: list[ServiceItemIn] = Field(default_factory=list, validation_alias=AliasChoices("products", "services"))
    full_name: str = Field(..., min_length=1, max_length=255, validation_alias="fullName")
    terms_text: str = Field(..., min_length=1, validation_alias=AliasChoices("termsText", "termsAndConditions"))
    terms_version: str = Field(..., min_length=1, max_length=64, validation_alias="termsVersion")
    signature_base64: str = Field(..., min_length=1, validation_alias="signatureBase64")
    geo_location: str | None = Field(None, max_length=255, validation_alias="geoLocation")
    overwrite: bool = False

    @model_validator(mode="before")
    @classmethod
    def _lift_bare_reservation_id(cls, data):
        # older clients post the reservation id at the top level
        if isinstance(data, dict) and not isinstance(data.get("reservation"), dict):
            rid = data.get("reservationId", data.get("reservationid"))
            if rid is not None:
                data = {**data, "reservation": {"reservationId": rid}}
        return data

    @field_validator("products", mode="before")
    @classmethod
    def _null_products(cls, v):
        return [] if v is None else v

    @field_validator("overwrite", mode="before")
    @classmethod
    def _overwrite_flag(cls, v):
        return _loose_bool(v)


class BaseEmailRequest(InboundModel):
    email: EmailStr


class BasePreferencesRequest(InboundModel):
    base_preferences: list[str] = Field(..., validation_alias="basePreferences")

    def normalized(self) -> list[str]:
        return [code.strip() for code in self.base_preferences if code and code.strip()]


class FeedQuery(InboundModel):
    requestor_id: str = Field(..., min_length=1, validation_alias="requestorId")
    company_account_number: str = Field(..., min_length=1, validation_alias="companyAccountNumber")
    start_date: str = Field(..., min_length=1, validation_alias="startDate")
    end_date: str = Field(..., min_length=1, validation_alias="endDate")


class PdfServiceLine(InboundModel):
    product_name: str | None = Field(None, validation_alias="productName")
    quantity: int | None = None
    service_date: str | None = Field(None, validation_alias="serviceDate")
    quoted_price: Decimal = Field(Decimal("0"), validation_alias="quotedPrice")

    @field_validator("quoted_price", mode="before")
    @classmethod
    def _null_price(cls, v):
        return 0 if v is None else v


class ConsentPdfRequest(InboundModel):
    reservation_id: str | None = Field(None, validation_alias="reservationId")
    status: str | None = None
    tail_number: str | None = Field(None, validation_alias="tailNumber")
    reservation_name: str | None = Field(None, validation_alias="reservationName")
    customer_name: str | None = Field(None, validation_alias=AliasChoices("customerName", "fullName"))
    fbo_name: str | None = Field(None, validation_alias="fboName")
    aircraft_type: str | None = Field(None, validation_alias="aircraftType")
    estimated_arrival: str | None = Field(None, validation_alias="estimatedArrival")
    actual_arrival: str | None = Field(None, validation_alias="actualArrival")
    estimated_departure: str | None = Field(None, validation_alias="estimatedDeparture")
    actual_departure: str | None = Field(None, validation_alias="actualDeparture")
    services: list[PdfServiceLine] = Field(default_factory=list)
    terms_version: str | None = Field(None, validation_alias="termsVersion")
    terms: str | None = Field(None, validation_alias=AliasChoices("terms", "termsText"))
    signature_base64: str | None = Field(None, validation_alias="signatureBase64")

    @field_validator("services", mode="before")
    @classmethod
    def _null_services(cls, v):
        return [] if v is None else v

    def estimated_total(self) -> Decimal:
        return sum((line.quoted_price for line in self.services), Decimal("0"))
