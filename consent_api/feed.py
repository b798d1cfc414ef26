import logging

import requests

from . import errors

logger = logging.getLogger(__name__)

FBO_OPERATIONS_PATH = "/ops/v1/dashboard/fbo-operations"


class ReservationFeedClient:
    """Read-only client for the upstream FBO operations feed."""

    def __init__(self, base_url: str, api_key: str, timeout: float = 15.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, requestor_id: str, company_account_number: str, start_date: str, end_date: str) -> list[dict]:
        if not self.base_url:
            raise errors.UpstreamError("Reservation feed is not configured")

        try:
            resp = self.session.get(
                f"{self.base_url}{FBO_OPERATIONS_PATH}",
                params={
                    "requestor-id": requestor_id,
                    "company-account-number": company_account_number,
                    "startDate": start_date,
                    "endDate": end_date,
                },
                headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Reservation feed request failed: %s", e)
            raise errors.UpstreamError("Reservation feed unavailable") from e

        if not resp.ok:
            logger.warning("Reservation feed returned %s %s", resp.status_code, resp.reason)
            raise errors.UpstreamError("Reservation feed unavailable")

        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("Reservation feed returned a non-JSON body")
            raise errors.UpstreamError("Reservation feed unavailable") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        return [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []


def feed_reservation_id(r: dict) -> str | None:
    value = r.get("reservationid", r.get("reservationId"))
    return str(value) if value not in (None, "") else None


def merge_consents(reservations: list[dict], consents: dict[str, dict]) -> list[dict]:
    """Shapes feed reservations for the client and attaches stored consent where present."""
    merged = []
    for r in reservations:
        reservation_no = feed_reservation_id(r)
        item = {
            "baseId": r.get("baseid", r.get("baseId")),
            "reservationId": reservation_no,
            "reservationName": r.get("companyName", r.get("reservationName")),
            "customerAccountNumber": r.get("customerAccountNumber"),
            "tailNumber": r.get("tailNumber"),
            "status": r.get("reservationStatus", r.get("status")),
            "arrivalDetails": r.get("arrivalDetails"),
            "departureDetails": r.get("departureDetails"),
            "products": r.get("products") or [],
        }
        consent = consents.get(reservation_no) if reservation_no else None
        if consent:
            item["consent"] = consent
        merged.append(item)
    return merged
