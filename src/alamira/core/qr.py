"""Decoding of the onboarding QR code."""

from __future__ import annotations

import json
import logging
from typing import Any

from alamira.errors import InvalidPayloadError
from alamira.models import QRPayload

logger = logging.getLogger(__name__)

REQUIRED_STRING_FIELDS = ("ap_ssid", "ap_pass", "device_id")


def _is_whole_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def parse_qr_payload(raw: str) -> QRPayload | None:
    """Parse the JSON text of a scanned QR code.

    Returns None when the text is not JSON, or when ``ap_ssid``, ``ap_pass``
    and ``device_id`` are not strings or ``api_port`` is not a whole number.
    Unknown fields are ignored; ``ip`` is kept only when it is a string.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Failed to parse QR payload: %r", raw)
        return None

    if not isinstance(data, dict):
        logger.warning("QR payload is not a JSON object: %r", raw)
        return None

    port = data.get("api_port")
    strings_ok = all(
        isinstance(data.get(name), str) for name in REQUIRED_STRING_FIELDS
    )
    if not strings_ok or not _is_whole_number(port):
        logger.warning("QR payload missing required fields: %s", sorted(data))
        return None

    ip = data.get("ip")
    return QRPayload(
        ap_ssid=data["ap_ssid"],
        ap_pass=data["ap_pass"],
        device_id=data["device_id"],
        api_port=int(port),
        ip=ip if isinstance(ip, str) and ip else None,
    )


def require_qr_payload(raw: str) -> QRPayload:
    payload = parse_qr_payload(raw)
    if payload is None:
        raise InvalidPayloadError("Invalid QR code")
    return payload


def encode_qr_payload(payload: QRPayload) -> str:
    return json.dumps(payload.model_dump(exclude_none=True))
