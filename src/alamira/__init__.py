"""alamira - onboard marine displays onto WiFi and keep track of paired devices."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import (
    DeviceSimulator,
    DeviceTransport,
    OnboardingFlow,
    ProvisioningService,
    parse_qr_payload,
)
from .models import OnboardingSession, OnboardingStep, PairedDevice, QRPayload
from .storage import Database, DeviceRegistry

__all__ = [
    "Database",
    "DeviceRegistry",
    "DeviceSimulator",
    "DeviceTransport",
    "OnboardingFlow",
    "OnboardingSession",
    "OnboardingStep",
    "PairedDevice",
    "ProvisioningService",
    "QRPayload",
    "Settings",
    "__version__",
    "get_settings",
    "parse_qr_payload",
]

__version__ = version("alamira")
