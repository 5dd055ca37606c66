"""Exception hierarchy for onboarding and device control."""

from __future__ import annotations


class AlamiraError(Exception):
    """Base class for all Alamira errors."""


class InvalidPayloadError(AlamiraError):
    """Scanned QR code does not contain a valid onboarding payload."""


class TransportError(AlamiraError):
    """A request to the device control API did not produce a usable response."""


class HttpError(TransportError):
    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"HTTP {status}: {body}")
        self.status = status
        self.body = body


class RequestTimeoutError(TransportError):
    def __init__(self, method: str, url: str, elapsed_ms: int) -> None:
        super().__init__(f"Request timed out after {elapsed_ms}ms: {method} {url}")
        self.method = method
        self.url = url
        self.elapsed_ms = elapsed_ms


class NetworkError(TransportError):
    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class InvalidResponseError(TransportError):
    """Response body does not match the device API contract."""

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Invalid response from {url}: {detail}")
        self.url = url
        self.detail = detail


class ProvisioningFailedError(AlamiraError):
    """Device accepted the request but reported that provisioning failed."""

    def __init__(self, ssid: str) -> None:
        super().__init__(f'Provisioning failed for network "{ssid}"')
        self.ssid = ssid


class OnboardingError(AlamiraError):
    """Onboarding action used out of order."""


class InvalidTransitionError(OnboardingError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move onboarding from '{current}' to '{target}'")
        self.current = current
        self.target = target


class OnboardingBusyError(OnboardingError):
    def __init__(self) -> None:
        super().__init__("Another onboarding action is already in progress")
