from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import copy  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402

from iothub_manager.domain.entities.device import Device, DeviceList  # noqa: E402
from iothub_manager.domain.entities.errors import DeviceNotFoundError  # noqa: E402
from iothub_manager.domain.gateways.device_registry_gateway import (  # noqa: E402
    IDeviceRegistryGateway,
)

FAKE_HUB_HOSTNAME = "contoso.azure-devices.net"


class FakeDeviceRegistryGateway(IDeviceRegistryGateway):
    """In-memory registry recording the native queries it receives."""

    def __init__(self, devices: Optional[List[Device]] = None) -> None:
        self.devices: Dict[str, Device] = {}
        self.queries: List[str] = []
        self.continuation_tokens: List[Optional[str]] = []
        self.upserts: List[Device] = []
        self.next_continuation_token: Optional[str] = None
        self._version = 0
        for device in devices or []:
            self.devices[device.id] = device

    async def get_device(self, device_id: str) -> Device:
        if device_id not in self.devices:
            raise DeviceNotFoundError(device_id)
        return copy.deepcopy(self.devices[device_id])

    async def upsert_device(self, device: Device) -> Device:
        self.upserts.append(device)
        self._version += 1
        existing = self.devices.get(device.id)
        stored = Device(
            id=device.id,
            etag=f"etag-{self._version}",
            tags=dict(device.tags),
            desired_properties=dict(device.desired_properties),
            reported_properties=dict(existing.reported_properties) if existing else {},
            iot_hub_hostname=FAKE_HUB_HOSTNAME,
        )
        self.devices[device.id] = stored
        return copy.deepcopy(stored)

    async def delete_device(self, device_id: str) -> None:
        if device_id not in self.devices:
            raise DeviceNotFoundError(device_id)
        del self.devices[device_id]

    async def list_devices(
        self, query: str, continuation_token: Optional[str] = None
    ) -> DeviceList:
        self.queries.append(query)
        self.continuation_tokens.append(continuation_token)
        return DeviceList(
            items=[copy.deepcopy(device) for device in self.devices.values()],
            continuation_token=self.next_continuation_token,
        )

    async def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_device_count": len(self.devices),
            "enabled_device_count": len(self.devices),
            "disabled_device_count": 0,
        }


@pytest.fixture()
def sample_device() -> Device:
    return Device(
        id="testDevice1",
        etag="AAAAAAAAAAE=",
        tags={"Floor": "10F", "Building": 43},
        desired_properties={"config": {"TelemetryInterval": 10}},
        reported_properties={"Firmware": "1.0.2"},
        connected=True,
        last_activity=datetime(2024, 9, 9, 12, 0, tzinfo=timezone.utc),
        iot_hub_hostname=FAKE_HUB_HOSTNAME,
    )


@pytest.fixture()
def fake_registry(sample_device: Device) -> FakeDeviceRegistryGateway:
    return FakeDeviceRegistryGateway([sample_device])


@pytest.fixture()
def empty_registry() -> FakeDeviceRegistryGateway:
    return FakeDeviceRegistryGateway()
