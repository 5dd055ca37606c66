"""Simulated display implementing the device side of the control API."""

from __future__ import annotations

import asyncio
import ipaddress
import json
import logging
import socket
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from alamira.models import (
    DeviceInfo,
    DeviceStatus,
    ProvisionResult,
    QRPayload,
    Security,
    WifiNetwork,
    WifiScanResponse,
)

from .transport import INFO_PATH, PROVISION_PATH, SCAN_PATH, STATUS_PATH

logger = logging.getLogger(__name__)

MESSAGE_PATH = "/api/message"
SIMULATOR_AP_SSID = "ALAMIRA-SIM"
SIMULATOR_AP_PASS = "simulator"
SIMULATOR_RSSI = -45
FALLBACK_IP = "127.0.0.1"
REQUEST_LOG_SIZE = 500

SCAN_NETWORKS = (
    WifiNetwork(ssid="HomeNetwork", rssi=-42, security=Security.WPA2),
    WifiNetwork(ssid="Marina_WiFi", rssi=-58, security=Security.WPA2),
    WifiNetwork(ssid="Guest_Open", rssi=-71, security=Security.OPEN),
)


@dataclass
class DeviceState:
    """In-memory identity and network state of the simulated display."""

    device_id: str = "ALM-SIM-001"
    model: str = "Alamira Display Simulator"
    firmware_version: str = "1.0.0"
    serial: str = "SIM-2026-001"
    brightness: int = 75
    status: str = "running"
    current_ip: str = "0.0.0.0"
    provisioned_ssid: str | None = None
    last_message: str | None = None
    started_at: float = field(default_factory=time.monotonic)

    def device_info(self) -> DeviceInfo:
        return DeviceInfo(
            device_id=self.device_id,
            model=self.model,
            firmware_version=self.firmware_version,
            serial=self.serial,
        )

    def device_status(self) -> DeviceStatus:
        return DeviceStatus(
            uptime=int(time.monotonic() - self.started_at),
            wifi_rssi=SIMULATOR_RSSI,
            ip=self.current_ip,
            ssid=self.provisioned_ssid or "SimulatorAP",
        )

    def provision(self, ssid: str) -> None:
        self.provisioned_ssid = ssid

    def qr_payload(self, port: int) -> QRPayload:
        return QRPayload(
            ap_ssid=SIMULATOR_AP_SSID,
            ap_pass=SIMULATOR_AP_PASS,
            device_id=self.device_id,
            api_port=port,
            ip=self.current_ip,
        )


@dataclass
class RequestLogEntry:
    timestamp: datetime
    method: str
    path: str
    status: int
    source_ip: str | None = None
    body: Any = None
    response: Any = None


RequestCallback = Callable[[RequestLogEntry], None]


class DeviceSimulator:
    """aiohttp server answering the same endpoints as a real display.

    Provisioning succeeds for any non-empty SSID and reports the
    simulator's own address, since it never leaves the controller's network.
    """

    def __init__(
        self,
        state: DeviceState | None = None,
        host: str = "0.0.0.0",
        port: int = 8080,
        on_request: RequestCallback | None = None,
        request_log_size: int = REQUEST_LOG_SIZE,
    ) -> None:
        self.state = state or DeviceState()
        self.host = host
        self.port = port
        self.on_request = on_request
        self.request_log: deque[RequestLogEntry] = deque(maxlen=request_log_size)
        self._runner: web.AppRunner | None = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(INFO_PATH, self._handle_info)
        app.router.add_get(SCAN_PATH, self._handle_scan)
        app.router.add_post(PROVISION_PATH, self._handle_provision)
        app.router.add_get(STATUS_PATH, self._handle_status)
        app.router.add_post(MESSAGE_PATH, self._handle_message)
        app.router.add_route("*", "/{tail:.*}", self._handle_not_found)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(
            "Simulator '%s' listening on http://%s:%d",
            self.state.device_id,
            self.host,
            self.port,
        )

    async def stop(self) -> None:
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Simulator '%s' stopped", self.state.device_id)

    async def run_forever(self) -> None:
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    def _respond(
        self,
        request: web.Request,
        payload: dict[str, Any],
        body: Any = None,
        status: int = 200,
    ) -> web.Response:
        entry = RequestLogEntry(
            timestamp=datetime.now(timezone.utc),
            method=request.method,
            path=request.path,
            status=status,
            source_ip=request.remote,
            body=body,
            response=payload,
        )
        self.request_log.append(entry)
        logger.info(
            "%s %s -> %d %s", entry.method, entry.path, status, json.dumps(payload)
        )
        if self.on_request is not None:
            self.on_request(entry)
        return web.json_response(payload, status=status)

    async def _read_body(self, request: web.Request) -> Any:
        text = await request.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text

    async def _handle_info(self, request: web.Request) -> web.Response:
        return self._respond(request, self.state.device_info().model_dump())

    async def _handle_scan(self, request: web.Request) -> web.Response:
        scan = WifiScanResponse(networks=list(SCAN_NETWORKS))
        return self._respond(request, scan.model_dump(mode="json"))

    async def _handle_provision(self, request: web.Request) -> web.Response:
        body = await self._read_body(request)
        ssid = body.get("ssid") if isinstance(body, dict) else None
        if not isinstance(ssid, str) or not ssid:
            result = ProvisionResult(success=False, ip="")
        else:
            self.state.provision(ssid)
            result = ProvisionResult(success=True, ip=self.state.current_ip)
            logger.info('Provisioned for network "%s"', ssid)
        logged_body = (
            {**body, "password": "***"}
            if isinstance(body, dict) and "password" in body
            else body
        )
        return self._respond(request, result.model_dump(), logged_body)

    async def _handle_status(self, request: web.Request) -> web.Response:
        return self._respond(request, self.state.device_status().model_dump())

    async def _handle_message(self, request: web.Request) -> web.Response:
        body = await self._read_body(request)
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            self.state.last_message = body["message"]
        return self._respond(request, {"received": True}, body)

    async def _handle_not_found(self, request: web.Request) -> web.Response:
        return self._respond(
            request, {"error": "Not Found", "path": request.path}, status=404
        )


def detect_local_ip() -> str:
    """Best-effort address of this host on the local network."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            local_ip = sock.getsockname()[0]
        ipaddress.ip_address(local_ip)
        logger.debug("Detected local IP: %s", local_ip)
        return local_ip
    except (OSError, ValueError):
        logger.warning("Could not detect local IP, using %s", FALLBACK_IP)
        return FALLBACK_IP


async def run_simulator(
    host: str = "0.0.0.0",
    port: int = 8080,
    state: DeviceState | None = None,
    on_request: RequestCallback | None = None,
) -> None:
    simulator = DeviceSimulator(
        state=state, host=host, port=port, on_request=on_request
    )
    await simulator.run_forever()
