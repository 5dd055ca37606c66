"""HTTP transport for the device control API."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Literal, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from alamira.errors import (
    HttpError,
    InvalidResponseError,
    NetworkError,
    RequestTimeoutError,
)
from alamira.models import (
    DeviceInfo,
    DeviceStatus,
    ProvisionRequest,
    ProvisionResult,
    WifiNetwork,
    WifiScanResponse,
)
from alamira.utils.redaction import mask_secret

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

INFO_PATH = "/api/info"
SCAN_PATH = "/api/wifi/scan"
PROVISION_PATH = "/api/provision"
STATUS_PATH = "/api/status"

Method = Literal["GET", "POST"]
ModelT = TypeVar("ModelT", bound=BaseModel)


def build_url(host: str, port: int, path: str) -> str:
    return f"http://{host}:{port}{path}"


class DeviceTransport:
    """Issues single, non-retried requests to a device with a fixed timeout.

    A new client session is opened per call: the controller hops between the
    device's access point and the target network, so pooled connections
    would point at an address that is no longer reachable.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    async def call(
        self,
        method: Method,
        host: str,
        port: int,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = build_url(host, port, path)
        started = time.monotonic()
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.request(method, url, json=body) as response:
                    if response.status < 200 or response.status >= 300:
                        text = await response.text(errors="replace")
                        raise HttpError(response.status, text or "No response body")
                    try:
                        return await response.json(content_type=None)
                    except ValueError as exc:
                        raise InvalidResponseError(url, "body is not JSON") from exc
        except (asyncio.TimeoutError, TimeoutError) as exc:
            elapsed_ms = int((time.monotonic() - started) * 1000)
            raise RequestTimeoutError(method, url, elapsed_ms) from exc
        except aiohttp.ClientError as exc:
            raise NetworkError(exc) from exc
        except OSError as exc:
            raise NetworkError(exc) from exc

    async def _call_model(
        self,
        model: type[ModelT],
        method: Method,
        host: str,
        port: int,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> ModelT:
        data = await self.call(method, host, port, path, body)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise InvalidResponseError(build_url(host, port, path), str(exc)) from exc

    async def get_device_info(self, host: str, port: int) -> DeviceInfo:
        logger.info("GET %s", build_url(host, port, INFO_PATH))
        info = await self._call_model(DeviceInfo, "GET", host, port, INFO_PATH)
        logger.info("Device info received: %s (%s)", info.model, info.device_id)
        return info

    async def scan_networks(self, host: str, port: int) -> list[WifiNetwork]:
        logger.info("GET %s", build_url(host, port, SCAN_PATH))
        data = await self._call_model(WifiScanResponse, "GET", host, port, SCAN_PATH)
        logger.info("Scan complete: found %d networks", len(data.networks))
        return data.networks

    async def provision(
        self, host: str, port: int, request: ProvisionRequest
    ) -> ProvisionResult:
        logger.info(
            "POST %s (ssid: %s, password: %s)",
            build_url(host, port, PROVISION_PATH),
            request.ssid,
            mask_secret(request.password),
        )
        return await self._call_model(
            ProvisionResult,
            "POST",
            host,
            port,
            PROVISION_PATH,
            request.model_dump(),
        )

    async def get_status(self, host: str, port: int) -> DeviceStatus:
        logger.info("GET %s", build_url(host, port, STATUS_PATH))
        status = await self._call_model(DeviceStatus, "GET", host, port, STATUS_PATH)
        logger.info(
            "Device status: ssid=%s, ip=%s, rssi=%d",
            status.ssid,
            status.ip,
            status.wifi_rssi,
        )
        return status
