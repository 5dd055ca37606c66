from __future__ import annotations

import asyncio
from typing import Any

import pytest

from alamira.config import get_settings
from alamira.core import OnboardingFlow, ProvisioningService
from alamira.models import (
    DeviceInfo,
    DeviceStatus,
    ProvisionRequest,
    ProvisionResult,
    Security,
    WifiNetwork,
)
from alamira.storage import Database, DeviceRegistry

AP_HOST = "192.168.4.1"
HOME_IP = "192.168.1.100"

QR_JSON = (
    '{"ap_ssid":"ALAMIRA-SIM","ap_pass":"simulator",'
    '"device_id":"ALM-DEMO-001","api_port":8080}'
)

DEMO_INFO = DeviceInfo(
    device_id="ALM-DEMO-001",
    model="Alamira MFD-7",
    firmware_version="1.2.0",
    serial="ALM-2026-DEMO-001",
)

NETWORKS = [
    WifiNetwork(ssid="HomeNetwork", rssi=-42, security=Security.WPA2),
    WifiNetwork(ssid="Marina_WiFi", rssi=-58, security=Security.WPA2),
    WifiNetwork(ssid="Guest_Open", rssi=-71, security=Security.OPEN),
]


class FakeTransport:
    """Stands in for DeviceTransport, answering per host."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.info_by_host: dict[str, DeviceInfo] = {
            AP_HOST: DEMO_INFO,
            HOME_IP: DEMO_INFO,
        }
        self.networks: list[WifiNetwork] = list(NETWORKS)
        self.provision_result = ProvisionResult(success=True, ip=HOME_IP)
        self.failures: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None

    async def _enter(self, op: str, host: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        failure = self.failures.get(f"{op}@{host}") or self.failures.get(op)
        if failure is not None:
            raise failure

    async def get_device_info(self, host: str, port: int) -> DeviceInfo:
        self.calls.append(("info", host, port))
        await self._enter("info", host)
        return self.info_by_host[host]

    async def scan_networks(self, host: str, port: int) -> list[WifiNetwork]:
        self.calls.append(("scan", host, port))
        await self._enter("scan", host)
        return list(self.networks)

    async def provision(
        self, host: str, port: int, request: ProvisionRequest
    ) -> ProvisionResult:
        self.calls.append(("provision", host, port, request.ssid, request.password))
        await self._enter("provision", host)
        return self.provision_result

    async def get_status(self, host: str, port: int) -> DeviceStatus:
        self.calls.append(("status", host, port))
        await self._enter("status", host)
        return DeviceStatus(uptime=10, wifi_rssi=-45, ip=host, ssid="HomeNetwork")


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("ALAMIRA_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry(tmp_path) -> DeviceRegistry:
    return DeviceRegistry(Database(tmp_path / "data"))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def flow(transport: FakeTransport, registry: DeviceRegistry) -> OnboardingFlow:
    service = ProvisioningService(transport, ap_host=AP_HOST)  # type: ignore[arg-type]
    return OnboardingFlow(service, registry, progress_interval=0)
