"""
Device Registry Gateway Interface - Domain Layer

This module defines the interface for communicating with the device
registry (IoT Hub identity registry and device twins).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from iothub_manager.domain.entities.device import Device, DeviceList


class IDeviceRegistryGateway(ABC):
    """Interface for Device Registry Gateway."""

    @abstractmethod
    async def get_device(self, device_id: str) -> Device:
        """
        Retrieve a device and its twin.

        Raises:
            DeviceNotFoundError: If the device does not exist
            RegistryUnavailableError: If the registry cannot be reached
        """
        pass

    @abstractmethod
    async def upsert_device(self, device: Device) -> Device:
        """
        Create the device identity if missing, then replace its tags and
        desired properties with the ones in ``device``.

        Returns:
            Device: The stored representation, server-assigned fields included
        """
        pass

    @abstractmethod
    async def delete_device(self, device_id: str) -> None:
        """
        Delete a device identity.

        Raises:
            DeviceNotFoundError: If the device does not exist
        """
        pass

    @abstractmethod
    async def list_devices(
        self, query: str, continuation_token: Optional[str] = None
    ) -> DeviceList:
        """
        Run a native registry query and return one page of devices.

        Args:
            query: Query in the registry's own language
            continuation_token: Token of the page to fetch, if any
        """
        pass

    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Return registry statistics; used as a reachability check."""
        pass
