from __future__ import annotations

from dataclasses import dataclass

MASK = "********"


def mask_secret(value: str) -> str:
    """Hide a WiFi password in logs, keeping only whether one was given."""
    return MASK if value else "<empty>"


@dataclass
class Redactor:
    enabled: bool = True

    def redact_ip(self, ip: str) -> str:
        if not self.enabled:
            return ip
        parts = ip.split(".")
        if len(parts) == 4 and all(part.isdigit() for part in parts):
            return f"x.x.x.{parts[3]}"
        return ip

    def redact_serial(self, serial: str) -> str:
        if not self.enabled or len(serial) <= 4:
            return serial
        return "*" * (len(serial) - 4) + serial[-4:]

    def redact_version(self, version: str | None) -> str:
        if not self.enabled:
            return "" if version is None else version
        if version is None or "." not in version:
            return "" if version is None else version
        major = version.split(".", 1)[0]
        return f"{major}.x"
