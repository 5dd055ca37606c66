"""Onboarding session state and the legal step graph."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum

from alamira.models.device import FirmwareUpdateInfo
from alamira.models.wifi import DeviceInfo, QRPayload, WifiNetwork


class OnboardingStep(str, Enum):
    SCAN = "scan"
    CONNECTING = "connecting"
    PRODUCT_INFO = "product-info"
    FIRMWARE_UPDATE = "firmware-update"
    WIFI_SETUP = "wifi-setup"
    VERIFYING = "verifying"
    NAME = "name"
    CONFIGURE = "configure"
    COMPLETE = "complete"

    @property
    def is_terminal(self) -> bool:
        return self is OnboardingStep.COMPLETE


# Forward edges only. Cancel (any non-terminal step -> scan) and reset are
# handled separately.
TRANSITIONS: dict[OnboardingStep, frozenset[OnboardingStep]] = {
    OnboardingStep.SCAN: frozenset(
        {OnboardingStep.CONNECTING, OnboardingStep.PRODUCT_INFO}
    ),
    OnboardingStep.CONNECTING: frozenset(
        {OnboardingStep.PRODUCT_INFO, OnboardingStep.SCAN}
    ),
    OnboardingStep.PRODUCT_INFO: frozenset({OnboardingStep.FIRMWARE_UPDATE}),
    OnboardingStep.FIRMWARE_UPDATE: frozenset(
        {OnboardingStep.WIFI_SETUP, OnboardingStep.NAME}
    ),
    OnboardingStep.WIFI_SETUP: frozenset(
        {OnboardingStep.WIFI_SETUP, OnboardingStep.VERIFYING}
    ),
    OnboardingStep.VERIFYING: frozenset(
        {OnboardingStep.NAME, OnboardingStep.WIFI_SETUP}
    ),
    OnboardingStep.NAME: frozenset({OnboardingStep.CONFIGURE}),
    OnboardingStep.CONFIGURE: frozenset({OnboardingStep.COMPLETE}),
    OnboardingStep.COMPLETE: frozenset(),
}


def can_transition(current: OnboardingStep, target: OnboardingStep) -> bool:
    return target in TRANSITIONS[current]


@dataclass
class OnboardingSession:
    """Working memory of the single live onboarding session.

    ``token`` survives :meth:`reset` and is bumped by it, so results of
    requests started before a reset can be recognised as stale.
    """

    step: OnboardingStep = OnboardingStep.SCAN
    qr_data: QRPayload | None = None
    device_info: DeviceInfo | None = None
    networks: list[WifiNetwork] = field(default_factory=list)
    selected_ssid: str | None = None
    device_name: str = ""
    error: str | None = None
    is_loading: bool = False
    assigned_ip: str | None = None
    firmware_update: FirmwareUpdateInfo | None = None
    firmware_progress: int = 0
    simulated: bool = False
    token: int = 0

    def reset(self) -> None:
        fresh = OnboardingSession()
        for item in fields(self):
            if item.name != "token":
                setattr(self, item.name, getattr(fresh, item.name))
        self.token += 1

    def find_network(self, ssid: str) -> WifiNetwork | None:
        return next((n for n in self.networks if n.ssid == ssid), None)
