"""Canned device used by the simulated onboarding path."""

from __future__ import annotations

from dataclasses import dataclass

from alamira.models import DeviceInfo, FirmwareUpdateInfo, QRPayload


@dataclass(frozen=True)
class SimulatedDevice:
    qr_payload: QRPayload
    device_info: DeviceInfo
    firmware_update: FirmwareUpdateInfo


DEMO_DEVICE = SimulatedDevice(
    qr_payload=QRPayload(
        ap_ssid="ALAMIRA-SIM",
        ap_pass="simulator",
        device_id="ALM-DEMO-001",
        api_port=8080,
        ip="192.168.1.100",
    ),
    device_info=DeviceInfo(
        device_id="ALM-DEMO-001",
        model="Alamira MFD-7",
        firmware_version="1.2.0",
        serial="ALM-2026-DEMO-001",
    ),
    firmware_update=FirmwareUpdateInfo(
        current_version="1.2.0",
        available_version="1.3.0",
        update_available=True,
        release_notes="Improved NMEA 2000 parsing, night mode, bug fixes.",
    ),
)


def get_simulated_device() -> SimulatedDevice:
    return SimulatedDevice(
        qr_payload=DEMO_DEVICE.qr_payload.model_copy(),
        device_info=DEMO_DEVICE.device_info.model_copy(),
        firmware_update=DEMO_DEVICE.firmware_update.model_copy(),
    )
