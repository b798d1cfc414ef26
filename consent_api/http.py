import logging

from flask import jsonify, request
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException, MethodNotAllowed

from . import errors

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def jerror(status: int, code: str, message: str, details=None):
    payload = {"error": message, "code": code}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def json_body() -> dict:
    """Returns the JSON object body of the current request or raises a 400."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise errors.ValidationError("Missing or invalid JSON payload.")
    return payload


def query_flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in _TRUTHY


def validation_details(exc: ValidationError) -> list[dict]:
    return [
        {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]


def register_error_handlers(app):
    @app.errorhandler(errors.ApiError)
    def handle_api_error(e: errors.ApiError):
        if e.status >= 500:
            logger.error("%s: %s", e.code, e.__cause__ or e.message)
        return jerror(e.status, e.code, e.message, e.details)

    @app.errorhandler(ValidationError)
    def handle_schema_error(e: ValidationError):
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", validation_details(e))

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        code = (e.name or "error").upper().replace(" ", "_")
        response, status = jerror(e.code or 500, code, e.description or e.name)
        if isinstance(e, MethodNotAllowed) and e.valid_methods:
            response.headers["Allow"] = ", ".join(sorted(e.valid_methods))
        return response, status

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jerror(500, "INTERNAL_ERROR", "Server error")
