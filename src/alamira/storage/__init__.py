from __future__ import annotations

from .database import Database
from .registry import STORAGE_KEY, DeviceRegistry

__all__ = ["STORAGE_KEY", "Database", "DeviceRegistry"]
