"""
Device Use Cases - Application Layer

Translate device requests into device registry operations. Queries are
validated and translated locally before anything reaches the registry.
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject

from iothub_manager.application.dtos.device_dto import (
    DeviceListDTO,
    DeviceRegistryDTO,
)
from iothub_manager.domain.entities.device import validate_device_id
from iothub_manager.domain.entities.errors import (
    DeviceNotFoundError,
    DeviceValidationError,
)
from iothub_manager.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iothub_manager.domain.services.query_translator import QueryInput, translate
from iothub_manager.shared import get_logger

logger = get_logger(__name__)


class GetDeviceUseCase:
    """Use case for retrieving a single device."""

    @inject
    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway = Provide["device_registry_gateway"],
    ):
        self.registry_gateway = registry_gateway

    async def execute(self, device_id: str) -> DeviceRegistryDTO:
        """
        Retrieve a device with its twin.

        Raises:
            DeviceValidationError: If the id is malformed
            DeviceNotFoundError: If the device does not exist
        """
        device = await self.registry_gateway.get_device(validate_device_id(device_id))
        return DeviceRegistryDTO.from_domain(device)


class ListDevicesUseCase:
    """Use case for listing devices, optionally filtered by a query."""

    @inject
    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway = Provide["device_registry_gateway"],
    ):
        self.registry_gateway = registry_gateway

    async def execute(
        self,
        query: QueryInput = None,
        continuation_token: Optional[str] = None,
    ) -> DeviceListDTO:
        """
        List devices matching ``query``.

        Args:
            query: Clause string, JSON clause array (encoded or decoded),
                or None for every device
            continuation_token: Registry paging token from a previous page

        Returns:
            DeviceListDTO: One page of devices

        Raises:
            InvalidQuerySyntaxError: If the query cannot be translated
        """
        native_query = translate(query)
        logger.info(
            "devices.list.query_translated",
            query=native_query,
            has_continuation=continuation_token is not None,
        )

        devices = await self.registry_gateway.list_devices(
            native_query, continuation_token
        )

        logger.info(
            "devices.list.retrieved",
            count=len(devices.items),
            has_more=devices.continuation_token is not None,
        )
        return DeviceListDTO.from_domain(devices)


class CreateOrUpdateDeviceUseCase:
    """Use case for creating a device or replacing its tags and desired state."""

    @inject
    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway = Provide["device_registry_gateway"],
    ):
        self.registry_gateway = registry_gateway

    async def execute(
        self, device_dto: DeviceRegistryDTO, device_id: Optional[str] = None
    ) -> DeviceRegistryDTO:
        """
        Upsert a device. Tags and desired properties are fully replaced by
        the ones in the payload; reported properties are ignored.

        Args:
            device_dto: Device payload
            device_id: Id from the URL; when omitted the payload Id is used

        Raises:
            DeviceValidationError: If the id is missing, malformed or does
                not match the payload Id
        """
        if device_id is not None and device_dto.id and device_dto.id != device_id:
            raise DeviceValidationError(
                "Device ID in the body does not match the ID in the URL.",
                details={"device_id": device_id, "body_id": device_dto.id},
            )
        target_id = validate_device_id(device_id or device_dto.id)

        if device_dto.properties.reported:
            logger.debug(
                "devices.upsert.reported_ignored",
                device_id=target_id,
                keys=sorted(device_dto.properties.reported),
            )

        stored = await self.registry_gateway.upsert_device(
            device_dto.to_domain(target_id)
        )

        logger.info(
            "devices.upsert.completed",
            device_id=target_id,
            tag_count=len(stored.tags),
        )
        return DeviceRegistryDTO.from_domain(stored)


class DeleteDeviceUseCase:
    """Use case for deleting a device. Deleting a missing device succeeds."""

    @inject
    def __init__(
        self,
        registry_gateway: IDeviceRegistryGateway = Provide["device_registry_gateway"],
    ):
        self.registry_gateway = registry_gateway

    async def execute(self, device_id: str) -> None:
        validate_device_id(device_id)
        try:
            await self.registry_gateway.delete_device(device_id)
        except DeviceNotFoundError:
            logger.info("devices.delete.already_absent", device_id=device_id)
            return
        logger.info("devices.delete.completed", device_id=device_id)
