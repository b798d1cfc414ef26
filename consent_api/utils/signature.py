import base64
import binascii

from .. import errors


def strip_data_uri(value: str) -> str:
    """Drops a ``data:image/png;base64,`` style prefix if present."""
    value = value.strip()
    if "," in value:
        value = value.split(",", 1)[1]
    return "".join(value.split())


def decode_signature(value: str, limit: int) -> bytes:
    """Decodes a base64 signature image and enforces the size limit on the raw bytes."""
    if not value or not value.strip():
        raise errors.ValidationError("signatureBase64 is required")
    try:
        raw = base64.b64decode(strip_data_uri(value), validate=True)
    except (binascii.Error, ValueError) as e:
        raise errors.ValidationError("signatureBase64 is not valid base64") from e
    if not raw:
        raise errors.ValidationError("signatureBase64 is empty")
    if len(raw) > limit:
        raise errors.PayloadTooLarge(f"Signature too large (max {limit // (1024 * 1024)}MB)")
    return raw


def encode_signature(raw: bytes | None) -> str | None:
    return base64.b64encode(raw).decode("ascii") if raw is not None else None
