from __future__ import annotations

from .demo import DEMO_DEVICE, SimulatedDevice, get_simulated_device
from .onboarding import OnboardingFlow
from .provisioning import ProvisioningService
from .qr import encode_qr_payload, parse_qr_payload, require_qr_payload
from .simulator import DeviceSimulator, DeviceState, detect_local_ip, run_simulator
from .transport import DeviceTransport

__all__ = [
    "DEMO_DEVICE",
    "DeviceSimulator",
    "DeviceState",
    "DeviceTransport",
    "OnboardingFlow",
    "ProvisioningService",
    "SimulatedDevice",
    "detect_local_ip",
    "encode_qr_payload",
    "get_simulated_device",
    "parse_qr_payload",
    "require_qr_payload",
    "run_simulator",
]
