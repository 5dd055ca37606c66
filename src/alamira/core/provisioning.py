"""The four-call WiFi provisioning handshake."""

from __future__ import annotations

import logging

from alamira.config import DEFAULT_AP_HOST
from alamira.errors import ProvisioningFailedError
from alamira.models import (
    DeviceInfo,
    ProvisionRequest,
    ProvisionResult,
    QRPayload,
    WifiNetwork,
)

from .transport import DeviceTransport

logger = logging.getLogger(__name__)


class ProvisioningService:
    """Sequences identify, scan, provision and verify against one device.

    The first three calls go to the device's access point address; the last
    one goes to the address the device reports after joining the target
    network. No retries are made here.
    """

    def __init__(
        self, transport: DeviceTransport, ap_host: str = DEFAULT_AP_HOST
    ) -> None:
        self.transport = transport
        self.ap_host = ap_host

    def ap_host_for(self, qr_data: QRPayload) -> str:
        return qr_data.ip or self.ap_host

    async def connect_to_device(self, qr_data: QRPayload) -> DeviceInfo:
        host = self.ap_host_for(qr_data)
        logger.info(
            "Connecting to device AP %s at %s:%d",
            qr_data.ap_ssid,
            host,
            qr_data.api_port,
        )
        info = await self.transport.get_device_info(host, qr_data.api_port)
        logger.info(
            "Connected to device %s (%s v%s)",
            info.device_id,
            info.model,
            info.firmware_version,
        )
        return info

    async def scan_networks(self, qr_data: QRPayload) -> list[WifiNetwork]:
        host = self.ap_host_for(qr_data)
        logger.info("Scanning for WiFi networks via %s:%d", host, qr_data.api_port)
        networks = await self.transport.scan_networks(host, qr_data.api_port)
        if not networks:
            logger.warning("Device reports no visible networks")
        return networks

    async def provision(
        self, qr_data: QRPayload, ssid: str, password: str
    ) -> ProvisionResult:
        """Hand credentials to the device.

        Raises ProvisioningFailedError when the device answers with
        ``success=false``, or claims success without an assigned address.
        """
        host = self.ap_host_for(qr_data)
        logger.info(
            'Provisioning device at %s:%d for network "%s"',
            host,
            qr_data.api_port,
            ssid,
        )
        result = await self.transport.provision(
            host, qr_data.api_port, ProvisionRequest(ssid=ssid, password=password)
        )
        if not result.success or not result.ip:
            logger.warning('Provisioning failed for network "%s"', ssid)
            raise ProvisioningFailedError(ssid)

        logger.info("Provisioning succeeded, device IP: %s", result.ip)
        return result

    async def verify_connection(
        self, host: str, port: int, expected_device_id: str | None = None
    ) -> DeviceInfo:
        """Identify the device again at its new address on the target network.

        A different ``device_id`` is logged but not rejected.
        """
        logger.info("Verifying device reachable at %s:%d", host, port)
        info = await self.transport.get_device_info(host, port)
        if expected_device_id is not None and info.device_id != expected_device_id:
            logger.warning(
                "Device at %s reports id %s, expected %s",
                host,
                info.device_id,
                expected_device_id,
            )
        logger.info("Device %s verified on network at %s", info.device_id, host)
        return info
