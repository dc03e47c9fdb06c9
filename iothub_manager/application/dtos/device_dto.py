"""
Device DTOs - Application Layer

Data Transfer Objects for the device REST representation. Field names on
the wire are PascalCase (``Id``, ``Tags``, ``Properties.Desired``) while the
Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from iothub_manager.domain.entities.device import Device, DeviceList, strip_metadata


class DevicePropertiesDTO(BaseModel):
    """Desired and reported twin properties."""

    desired: Dict[str, Any] = Field(
        default_factory=dict,
        alias="Desired",
        description="Properties set by operators or back-end services",
    )
    reported: Dict[str, Any] = Field(
        default_factory=dict,
        alias="Reported",
        description="Properties reported by the device (read only)",
    )

    @field_validator("desired", "reported", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "Desired": {"config": {"TelemetryInterval": 10}},
                "Reported": {"Device": {"Location": {"Latitude": 47.6}}},
            }
        },
    }


class DeviceRegistryDTO(BaseModel):
    """DTO for a device identity together with its twin."""

    id: Optional[str] = Field(default=None, alias="Id", description="Device ID")
    etag: Optional[str] = Field(
        default=None,
        alias="Etag",
        description="Twin etag; when sent back, the update is conditional",
    )
    enabled: bool = Field(default=True, alias="Enabled", description="Device status")
    connected: bool = Field(
        default=False, alias="Connected", description="Device connection state"
    )
    last_activity: Optional[datetime] = Field(
        default=None, alias="LastActivity", description="Last device activity"
    )
    iot_hub_hostname: Optional[str] = Field(
        default=None, alias="IoTHubHostName", description="Owning IoT Hub"
    )
    tags: Dict[str, Any] = Field(
        default_factory=dict, alias="Tags", description="Device tags"
    )
    properties: DevicePropertiesDTO = Field(
        default_factory=DevicePropertiesDTO,
        alias="Properties",
        description="Twin properties",
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def from_domain(cls, device: Device) -> "DeviceRegistryDTO":
        return cls(
            id=device.id,
            etag=device.etag,
            enabled=device.enabled,
            connected=device.connected,
            last_activity=device.last_activity,
            iot_hub_hostname=device.iot_hub_hostname,
            tags=dict(device.tags),
            properties=DevicePropertiesDTO(
                desired=strip_metadata(device.desired_properties),
                reported=strip_metadata(device.reported_properties),
            ),
        )

    def to_domain(self, device_id: str) -> Device:
        """
        Build the device to store. Reported properties belong to the device
        itself and are never taken from a client payload.
        """
        return Device(
            id=device_id,
            etag=self.etag,
            tags=dict(self.tags),
            desired_properties=strip_metadata(self.properties.desired),
        )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "Id": "testDevice1",
                "Etag": "AAAAAAAAAAE=",
                "Enabled": True,
                "Connected": False,
                "LastActivity": "2024-09-09T12:00:00Z",
                "IoTHubHostName": "contoso.azure-devices.net",
                "Tags": {"Floor": "10F"},
                "Properties": {
                    "Desired": {"config": {"TelemetryInterval": 10}},
                    "Reported": {},
                },
            }
        },
    }


class DeviceListDTO(BaseModel):
    """DTO for a page of devices."""

    items: List[DeviceRegistryDTO] = Field(
        default_factory=list, alias="Items", description="Devices in this page"
    )
    continuation_token: Optional[str] = Field(
        default=None,
        alias="ContinuationToken",
        description="Token to send as x-ms-continuation for the next page",
    )

    @classmethod
    def from_domain(cls, devices: DeviceList) -> "DeviceListDTO":
        return cls(
            items=[DeviceRegistryDTO.from_domain(device) for device in devices.items],
            continuation_token=devices.continuation_token,
        )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "Items": [{"Id": "testDevice1", "Tags": {"Floor": "10F"}}],
                "ContinuationToken": None,
            }
        },
    }
