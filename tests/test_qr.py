from __future__ import annotations

import json

import pytest

from alamira.core import encode_qr_payload, parse_qr_payload, require_qr_payload
from alamira.errors import InvalidPayloadError

VALID = {
    "ap_ssid": "ALAMIRA-SIM",
    "ap_pass": "simulator",
    "device_id": "ALM-DEMO-001",
    "api_port": 8080,
}


def test_parse_valid_payload():
    payload = parse_qr_payload(json.dumps(VALID))

    assert payload is not None
    assert payload.ap_ssid == "ALAMIRA-SIM"
    assert payload.ap_pass == "simulator"
    assert payload.device_id == "ALM-DEMO-001"
    assert payload.api_port == 8080
    assert payload.ip is None


def test_parse_keeps_ip_and_ignores_extra_fields():
    raw = json.dumps({**VALID, "ip": "10.0.0.5", "brightness": 75})

    payload = parse_qr_payload(raw)

    assert payload is not None
    assert payload.ip == "10.0.0.5"
    assert not hasattr(payload, "brightness")


@pytest.mark.parametrize("field", ["ap_ssid", "ap_pass", "device_id", "api_port"])
def test_parse_missing_field_returns_none(field):
    data = {k: v for k, v in VALID.items() if k != field}
    assert parse_qr_payload(json.dumps(data)) is None


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("ap_ssid", 42),
        ("ap_pass", None),
        ("device_id", ["ALM"]),
        ("api_port", "8080"),
        ("api_port", True),
        ("api_port", 80.5),
    ],
)
def test_parse_mistyped_field_returns_none(field, value):
    data = {**VALID, field: value}
    assert parse_qr_payload(json.dumps(data)) is None


def test_parse_whole_float_port():
    payload = parse_qr_payload(json.dumps({**VALID, "api_port": 8080.0}))
    assert payload is not None
    assert payload.api_port == 8080


@pytest.mark.parametrize("raw", ["", "not json", "[1, 2]", "null"])
def test_parse_garbage_returns_none(raw):
    assert parse_qr_payload(raw) is None


def test_require_raises_on_invalid():
    with pytest.raises(InvalidPayloadError):
        require_qr_payload("{}")


def test_encode_omits_missing_ip():
    payload = require_qr_payload(json.dumps(VALID))
    assert json.loads(encode_qr_payload(payload)) == VALID
