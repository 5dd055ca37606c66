"""Onboarding state machine driving the provisioning handshake."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from alamira.errors import (
    InvalidTransitionError,
    OnboardingBusyError,
    OnboardingError,
    ProvisioningFailedError,
    TransportError,
)
from alamira.models import (
    FirmwareUpdateInfo,
    OnboardingSession,
    OnboardingStep,
    PairedDevice,
    WifiNetwork,
    can_transition,
)
from alamira.storage import DeviceRegistry

from .demo import get_simulated_device
from .provisioning import ProvisioningService
from .qr import parse_qr_payload

logger = logging.getLogger(__name__)

PROGRESS_STEP = 10
PROGRESS_INTERVAL = 0.3

ProgressCallback = Callable[[int], None]


class OnboardingFlow:
    """Holds the live onboarding session and the actions that move it along.

    Remote failures never raise: they set ``session.error`` and move the
    session back one step so the user can retry. Calling an action in the
    wrong step raises InvalidTransitionError, and calling one while another
    is in flight raises OnboardingBusyError.

    Each awaited result is applied only if the session token is unchanged,
    so a response arriving after cancel() cannot touch the new session.
    """

    def __init__(
        self,
        service: ProvisioningService,
        registry: DeviceRegistry,
        session: OnboardingSession | None = None,
        latest_firmware_version: str | None = None,
        allow_simulated: bool = True,
        progress_interval: float = PROGRESS_INTERVAL,
    ) -> None:
        self.service = service
        self.registry = registry
        self.session = session or OnboardingSession()
        self.latest_firmware_version = latest_firmware_version
        self.allow_simulated = allow_simulated
        self.progress_interval = progress_interval

    @property
    def step(self) -> OnboardingStep:
        return self.session.step

    def _transition(self, target: OnboardingStep) -> None:
        current = self.session.step
        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)
        self.session.step = target
        self.session.error = None
        logger.debug("Onboarding step %s -> %s", current.value, target.value)

    def _require_step(self, expected: OnboardingStep, target: OnboardingStep) -> None:
        if self.session.step is not expected:
            raise InvalidTransitionError(self.session.step.value, target.value)

    def _ensure_idle(self) -> None:
        if self.session.is_loading:
            raise OnboardingBusyError()

    def _begin(self) -> int:
        self._ensure_idle()
        self.session.error = None
        self.session.is_loading = True
        return self.session.token

    def _is_current(self, token: int) -> bool:
        if token != self.session.token:
            logger.info("Discarding result of a cancelled onboarding attempt")
            return False
        return True

    def _finish(self, token: int) -> None:
        if token == self.session.token:
            self.session.is_loading = False

    def reset(self) -> None:
        """Return the session to its initial values, whatever its step."""
        self.session.reset()
        logger.debug("Onboarding session reset")

    def cancel(self) -> None:
        if self.session.step.is_terminal:
            raise InvalidTransitionError(
                self.session.step.value, OnboardingStep.SCAN.value
            )
        logger.info("Onboarding cancelled at step '%s'", self.session.step.value)
        self.reset()

    async def handle_qr_scan(self, raw: str) -> bool:
        """Start a new session from scanned QR text and identify the device."""
        self._ensure_idle()
        payload = parse_qr_payload(raw)
        if payload is None:
            self.session.error = "Invalid QR code"
            return False

        self.reset()
        self.session.qr_data = payload
        self._transition(OnboardingStep.CONNECTING)
        token = self._begin()
        try:
            info = await self.service.connect_to_device(payload)
        except TransportError as exc:
            if self._is_current(token):
                self._transition(OnboardingStep.SCAN)
                self.session.error = f"Failed to connect to device: {exc}"
            return False
        finally:
            self._finish(token)

        if not self._is_current(token):
            return False
        self.session.device_info = info
        self._transition(OnboardingStep.PRODUCT_INFO)
        return True

    def simulate_device(self) -> None:
        """Load the demo device; later steps make no network calls."""
        if not self.allow_simulated:
            raise OnboardingError("Simulated onboarding is disabled")
        self._ensure_idle()
        self.reset()

        device = get_simulated_device()
        self.session.qr_data = device.qr_payload
        self.session.device_info = device.device_info
        self.session.firmware_update = device.firmware_update
        self.session.simulated = True
        self._transition(OnboardingStep.PRODUCT_INFO)
        logger.info("Loaded simulated device %s", device.device_info.device_id)

    def check_firmware_update(self) -> FirmwareUpdateInfo:
        self._ensure_idle()
        self._require_step(OnboardingStep.PRODUCT_INFO, OnboardingStep.FIRMWARE_UPDATE)
        info = self.session.device_info
        if info is None:
            raise OnboardingError("No device identified")

        if self.session.firmware_update is None:
            latest = self.latest_firmware_version or info.firmware_version
            self.session.firmware_update = FirmwareUpdateInfo(
                current_version=info.firmware_version,
                available_version=latest,
                update_available=latest != info.firmware_version,
            )

        self._transition(OnboardingStep.FIRMWARE_UPDATE)
        return self.session.firmware_update

    async def apply_firmware_update(
        self, on_progress: ProgressCallback | None = None
    ) -> None:
        """Run the firmware progress indicator to 100%.

        Progress is cosmetic only: nothing is sent to the device. The loop
        stops early if the session is reset or leaves the firmware step.
        """
        self._require_step(OnboardingStep.FIRMWARE_UPDATE, OnboardingStep.WIFI_SETUP)
        update = self.session.firmware_update
        if update is None or not update.update_available:
            raise OnboardingError("No firmware update available")

        token = self.session.token
        logger.info(
            "Applying firmware %s -> %s",
            update.current_version,
            update.available_version,
        )
        self.session.firmware_progress = 0
        while self.session.firmware_progress < 100:
            await asyncio.sleep(self.progress_interval)
            if token != self.session.token:
                return
            if self.session.step is not OnboardingStep.FIRMWARE_UPDATE:
                return
            self.session.firmware_progress = min(
                100, self.session.firmware_progress + PROGRESS_STEP
            )
            if on_progress is not None:
                on_progress(self.session.firmware_progress)

    async def advance_past_firmware(self) -> bool:
        """Leave the firmware step, scanning networks for the WiFi step.

        A simulated session goes straight to naming instead.
        """
        self._require_step(OnboardingStep.FIRMWARE_UPDATE, OnboardingStep.WIFI_SETUP)
        if self.session.simulated:
            self._ensure_idle()
            qr_data = self.session.qr_data
            self.session.assigned_ip = qr_data.ip if qr_data else None
            self._transition(OnboardingStep.NAME)
            return True

        return await self._scan(OnboardingStep.WIFI_SETUP)

    async def skip_firmware_update(self) -> bool:
        logger.info("Firmware update skipped")
        return await self.advance_past_firmware()

    async def rescan_networks(self) -> bool:
        self._require_step(OnboardingStep.WIFI_SETUP, OnboardingStep.WIFI_SETUP)
        return await self._scan(OnboardingStep.WIFI_SETUP)

    async def _scan(self, target: OnboardingStep) -> bool:
        qr_data = self.session.qr_data
        if qr_data is None:
            raise OnboardingError("No device connection data")

        token = self._begin()
        try:
            networks = await self.service.scan_networks(qr_data)
        except TransportError as exc:
            if self._is_current(token):
                self.session.error = f"Failed to scan WiFi networks: {exc}"
            return False
        finally:
            self._finish(token)

        if not self._is_current(token):
            return False
        self.session.networks = networks
        self._transition(target)
        return True

    def _resolve_password(
        self, network: WifiNetwork | None, password: str | None
    ) -> str | None:
        if network is not None and network.is_open:
            return ""
        if network is not None and not password:
            return None
        return password

    async def send_credentials(self, ssid: str, password: str | None = None) -> bool:
        """Provision the device for ``ssid`` and verify it on that network.

        Open networks are provisioned with an empty password whatever is
        passed. On failure the session returns to the WiFi step.
        """
        self._require_step(OnboardingStep.WIFI_SETUP, OnboardingStep.VERIFYING)
        self._ensure_idle()
        qr_data = self.session.qr_data
        if qr_data is None:
            raise OnboardingError("No device connection data")

        network = self.session.find_network(ssid)
        resolved = self._resolve_password(network, password)
        if resolved is None:
            self.session.error = f'A password is required for "{ssid}"'
            return False

        expected_id = (
            self.session.device_info.device_id if self.session.device_info else None
        )
        self.session.selected_ssid = ssid
        self._transition(OnboardingStep.VERIFYING)
        token = self._begin()
        try:
            try:
                result = await self.service.provision(qr_data, ssid, resolved)
            except ProvisioningFailedError as exc:
                return self._rollback_credentials(token, str(exc))
            except TransportError as exc:
                return self._rollback_credentials(
                    token, f"Failed to provision WiFi: {exc}"
                )
            if not self._is_current(token):
                return False
            self.session.assigned_ip = result.ip

            try:
                info = await self.service.verify_connection(
                    result.ip, qr_data.api_port, expected_id
                )
            except TransportError as exc:
                return self._rollback_credentials(
                    token, f'Device did not come online on "{ssid}": {exc}'
                )
        finally:
            self._finish(token)

        if not self._is_current(token):
            return False
        self.session.device_info = info
        self._transition(OnboardingStep.NAME)
        return True

    def _rollback_credentials(self, token: int, message: str) -> bool:
        if self._is_current(token):
            self._transition(OnboardingStep.WIFI_SETUP)
            self.session.assigned_ip = None
            self.session.error = message
        return False

    def name_device(self, name: str) -> None:
        self._ensure_idle()
        self._require_step(OnboardingStep.NAME, OnboardingStep.CONFIGURE)
        self.session.device_name = name.strip()
        self._transition(OnboardingStep.CONFIGURE)

    def complete_onboarding(self) -> PairedDevice:
        """Persist the onboarded device and finish the session."""
        self._ensure_idle()
        self._require_step(OnboardingStep.CONFIGURE, OnboardingStep.COMPLETE)
        info = self.session.device_info
        qr_data = self.session.qr_data
        if info is None or qr_data is None:
            raise OnboardingError("No verified device to pair")

        device = PairedDevice(
            id=info.device_id,
            name=self.session.device_name or info.model,
            ip=self.session.assigned_ip or self.service.ap_host_for(qr_data),
            port=qr_data.api_port,
            model=info.model,
            firmware_version=info.firmware_version,
            serial=info.serial,
            paired_at=datetime.now(timezone.utc),
        )
        self.registry.add(device)
        self._transition(OnboardingStep.COMPLETE)
        logger.info("Onboarding complete for %s (%s)", device.name, device.id)
        return device
