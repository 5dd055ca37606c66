"""Wire models for the device control API and the onboarding QR code."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Security(str, Enum):
    OPEN = "Open"
    WEP = "WEP"
    WPA = "WPA"
    WPA2 = "WPA2"
    WPA3 = "WPA3"


class QRPayload(BaseModel):
    """Contents of the QR code shown on the device screen while in AP mode."""

    model_config = {"frozen": True}

    ap_ssid: str
    ap_pass: str
    device_id: str
    api_port: int
    ip: str | None = None


class DeviceInfo(BaseModel):
    device_id: str
    model: str
    firmware_version: str
    serial: str


class WifiNetwork(BaseModel):
    ssid: str
    rssi: int  # dBm
    security: Security

    @property
    def is_open(self) -> bool:
        return self.security is Security.OPEN


class WifiScanResponse(BaseModel):
    networks: list[WifiNetwork] = Field(default_factory=list)


class ProvisionRequest(BaseModel):
    ssid: str
    password: str


class ProvisionResult(BaseModel):
    """Outcome of handing credentials to the device.

    ``ip`` is the address the device was assigned on the target network.
    """

    success: bool
    ip: str = ""


class DeviceStatus(BaseModel):
    uptime: int
    wifi_rssi: int
    ip: str
    ssid: str
