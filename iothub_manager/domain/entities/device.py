"""Domain entities for devices held in the IoT Hub registry."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from iothub_manager.domain.entities.errors import DeviceValidationError

# IoT Hub device identity rules: up to 128 ASCII characters from this set.
DEVICE_ID_PATTERN = re.compile(r"[A-Za-z0-9\-.%_#*?!(),:=@$']{1,128}")


def strip_metadata(properties: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop registry bookkeeping keys such as ``$metadata`` and ``$version``."""
    if not properties:
        return {}
    return {
        key: value for key, value in properties.items() if not key.startswith("$")
    }


def validate_device_id(device_id: Optional[str]) -> str:
    """
    Ensure ``device_id`` is a usable registry identity.

    Raises:
        DeviceValidationError: If the id is missing or malformed.
    """
    if device_id is None or not device_id.strip():
        raise DeviceValidationError("Device ID must be provided.")
    if not DEVICE_ID_PATTERN.fullmatch(device_id):
        raise DeviceValidationError(
            "Device ID contains unsupported characters or exceeds 128 characters.",
            details={"device_id": device_id},
        )
    return device_id


@dataclass(slots=True)
class Device:
    """A device identity together with its twin state."""

    id: str
    etag: Optional[str] = None
    tags: Dict[str, Any] = field(default_factory=dict)
    desired_properties: Dict[str, Any] = field(default_factory=dict)
    reported_properties: Dict[str, Any] = field(default_factory=dict)
    enabled: bool = True
    connected: bool = False
    last_activity: Optional[datetime] = None
    iot_hub_hostname: Optional[str] = None


@dataclass(slots=True)
class DeviceList:
    """One page of devices returned by the registry."""

    items: List[Device] = field(default_factory=list)
    continuation_token: Optional[str] = None
