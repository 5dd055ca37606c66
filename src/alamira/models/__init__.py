"""Data models for Alamira."""

from alamira.models.device import (
    DEFAULT_CONNECTION_PORTS,
    ConnectionType,
    DataConnection,
    FirmwareUpdateInfo,
    PairedDevice,
)
from alamira.models.onboarding import (
    TRANSITIONS,
    OnboardingSession,
    OnboardingStep,
    can_transition,
)
from alamira.models.wifi import (
    DeviceInfo,
    DeviceStatus,
    ProvisionRequest,
    ProvisionResult,
    QRPayload,
    Security,
    WifiNetwork,
    WifiScanResponse,
)

__all__ = [
    "DEFAULT_CONNECTION_PORTS",
    "TRANSITIONS",
    "ConnectionType",
    "DataConnection",
    "DeviceInfo",
    "DeviceStatus",
    "FirmwareUpdateInfo",
    "OnboardingSession",
    "OnboardingStep",
    "PairedDevice",
    "ProvisionRequest",
    "ProvisionResult",
    "QRPayload",
    "Security",
    "WifiNetwork",
    "WifiScanResponse",
    "can_transition",
]
