"""IoT Hub registry gateway implementation - Infrastructure layer."""

from __future__ import annotations

import base64
import re
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import httpx

from iothub_manager.domain.entities.device import Device, DeviceList, strip_metadata
from iothub_manager.domain.entities.errors import (
    DeviceConflictError,
    DeviceNotFoundError,
    DomainError,
    RegistryOperationError,
    RegistryUnavailableError,
)
from iothub_manager.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iothub_manager.infrastructure.gateways.iothub_credentials import (
    IoTHubConnectionString,
)
from iothub_manager.shared import CONTINUATION_TOKEN_HEADER, get_logger

logger = get_logger(__name__)

DEFAULT_API_VERSION = "2021-04-12"
MAX_ITEM_COUNT_HEADER = "x-ms-max-item-count"

# IoT Hub reports devices that never connected with the minimum timestamp.
_NEVER_ACTIVE_PREFIX = "0001-01-01"
_FRACTION_PATTERN = re.compile(r"\.(\d{6})\d+")
_UNAVAILABLE_STATUSES = {429, 500, 502, 503, 504}


def _device_path(collection: str, device_id: str) -> str:
    # Ids may contain #, ? and %, which must not leak into the URL structure.
    return f"/{collection}/{quote(device_id, safe='')}"


def _ensure_quoted(etag: str) -> str:
    if len(etag) > 1 and etag[0] == '"' and etag[-1] == '"':
        return etag
    return f'"{etag}"'


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    if value.startswith(_NEVER_ACTIVE_PREFIX):
        return None
    normalized = _FRACTION_PATTERN.sub(r".\1", value.replace("Z", "+00:00"))
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        logger.debug("iothub.timestamp.unparseable", value=value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _generate_key() -> str:
    return base64.b64encode(secrets.token_bytes(32)).decode("utf-8")


class IoTHubRegistryGateway(IDeviceRegistryGateway):
    """HTTP client for the IoT Hub service REST API."""

    def __init__(
        self,
        connection_string: str,
        timeout: float = 30.0,
        page_size: int = 100,
        api_version: str = DEFAULT_API_VERSION,
    ):
        """
        Initialize IoT Hub Registry Gateway.

        The connection string is parsed on first use so the service can
        start (and report its status) without credentials.

        Args:
            connection_string: IoT Hub service connection string
            timeout: Per-request timeout in seconds
            page_size: Maximum twins requested per query page
            api_version: IoT Hub REST API version
        """
        self._connection_string = connection_string
        self._credentials: Optional[IoTHubConnectionString] = None
        self.timeout = timeout
        self.page_size = page_size
        self.api_version = api_version

    @property
    def credentials(self) -> IoTHubConnectionString:
        if self._credentials is None:
            self._credentials = IoTHubConnectionString.parse(self._connection_string)
        return self._credentials

    @property
    def host_name(self) -> str:
        return self.credentials.host_name

    async def get_device(self, device_id: str) -> Device:
        response = await self._send(
            "GET",
            _device_path("twins", device_id),
            operation="get",
            device_id=device_id,
        )
        return self._parse_twin(response.json())

    async def upsert_device(self, device: Device) -> Device:
        try:
            await self._send(
                "GET",
                _device_path("twins", device.id),
                operation="lookup",
                device_id=device.id,
            )
        except DeviceNotFoundError:
            await self._create_identity(device.id)

        payload = {
            "tags": dict(device.tags),
            "properties": {"desired": strip_metadata(device.desired_properties)},
        }
        response = await self._send(
            "PUT",
            _device_path("twins", device.id),
            operation="replace_twin",
            device_id=device.id,
            json=payload,
            headers={"If-Match": _ensure_quoted(device.etag or "*")},
        )
        return self._parse_twin(response.json())

    async def delete_device(self, device_id: str) -> None:
        await self._send(
            "DELETE",
            _device_path("devices", device_id),
            operation="delete",
            device_id=device_id,
            headers={"If-Match": _ensure_quoted("*")},
        )

    async def list_devices(
        self, query: str, continuation_token: Optional[str] = None
    ) -> DeviceList:
        headers = {MAX_ITEM_COUNT_HEADER: str(self.page_size)}
        if continuation_token:
            headers[CONTINUATION_TOKEN_HEADER] = continuation_token

        response = await self._send(
            "POST",
            "/devices/query",
            operation="query",
            json={"query": query},
            headers=headers,
        )

        payload = response.json()
        items: List[Device] = [
            self._parse_twin(item) for item in payload or [] if isinstance(item, dict)
        ]
        next_token = response.headers.get(CONTINUATION_TOKEN_HEADER) or None
        return DeviceList(items=items, continuation_token=next_token)

    async def get_statistics(self) -> Dict[str, Any]:
        response = await self._send("GET", "/statistics/devices", operation="stats")
        payload = response.json() or {}
        return {
            "total_device_count": payload.get("totalDeviceCount", 0),
            "enabled_device_count": payload.get("enabledDeviceCount", 0),
            "disabled_device_count": payload.get("disabledDeviceCount", 0),
        }

    async def _create_identity(self, device_id: str) -> None:
        payload = {
            "deviceId": device_id,
            "status": "enabled",
            "authentication": {
                "type": "sas",
                "symmetricKey": {
                    "primaryKey": _generate_key(),
                    "secondaryKey": _generate_key(),
                },
            },
            "capabilities": {"iotEdge": False},
        }
        try:
            await self._send(
                "PUT",
                _device_path("devices", device_id),
                operation="create",
                device_id=device_id,
                json=payload,
            )
        except DeviceConflictError:
            # Created concurrently by another writer; the twin update follows.
            logger.info("iothub.device.create_raced", device_id=device_id)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        device_id: Optional[str] = None,
        json: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        credentials = self.credentials
        url = f"https://{credentials.host_name}{path}"
        request_headers = {
            "Authorization": credentials.generate_sas_token(),
            "Content-Type": "application/json",
            **(headers or {}),
        }
        params = {"api-version": self.api_version}

        logger.info(
            "iothub.request",
            operation=operation,
            method=method,
            url=url,
            device_id=device_id,
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, url, params=params, headers=request_headers, json=json
                )
                response.raise_for_status()
                logger.debug(
                    "iothub.response",
                    operation=operation,
                    status_code=response.status_code,
                )
                return response

        except httpx.HTTPStatusError as e:
            error = self._map_status_error(e.response, operation, device_id)
            log = logger.info if isinstance(error, DeviceNotFoundError) else logger.error
            log(
                "iothub.http_error",
                operation=operation,
                device_id=device_id,
                status_code=e.response.status_code,
                response_text=e.response.text,
                url=url,
            )
            raise error from e

        except httpx.TimeoutException as e:
            logger.error(
                "iothub.timeout", operation=operation, url=url, error=str(e), exc_info=e
            )
            raise RegistryUnavailableError(
                f"IoT Hub did not answer within {self.timeout} seconds",
                details={"operation": operation},
            ) from e

        except httpx.RequestError as e:
            logger.error(
                "iothub.request_error",
                operation=operation,
                url=url,
                error=str(e),
                exc_info=e,
            )
            raise RegistryUnavailableError(
                f"Failed to communicate with IoT Hub: {str(e)}",
                details={"operation": operation},
            ) from e

    def _map_status_error(
        self, response: httpx.Response, operation: str, device_id: Optional[str]
    ) -> DomainError:
        status_code = response.status_code
        details: Dict[str, Any] = {
            "operation": operation,
            "upstream_status": status_code,
        }
        registry_message = self._registry_message(response)
        if registry_message:
            details["upstream_message"] = registry_message

        if status_code == 404 and device_id is not None:
            return DeviceNotFoundError(device_id, details)
        if status_code in (409, 412):
            return DeviceConflictError(
                f"IoT Hub rejected the {operation} of device {device_id} "
                "because of a conflicting change",
                details,
            )
        if status_code in _UNAVAILABLE_STATUSES:
            return RegistryUnavailableError(
                f"IoT Hub is unavailable (HTTP {status_code})", details
            )
        return RegistryOperationError(
            f"IoT Hub returned HTTP {status_code} for {operation}",
            details,
            client_error=status_code == 400,
        )

    @staticmethod
    def _registry_message(response: httpx.Response) -> Optional[str]:
        try:
            payload = response.json()
        except ValueError:
            return response.text or None
        if isinstance(payload, dict):
            message = payload.get("Message") or payload.get("message")
            return str(message) if message else None
        return None

    def _parse_twin(self, data: Dict[str, Any]) -> Device:
        properties = data.get("properties") or {}
        return Device(
            id=str(data.get("deviceId", "")),
            etag=data.get("etag"),
            tags=dict(data.get("tags") or {}),
            desired_properties=strip_metadata(properties.get("desired")),
            reported_properties=strip_metadata(properties.get("reported")),
            enabled=str(data.get("status", "enabled")).lower() == "enabled",
            connected=str(data.get("connectionState", "")).lower() == "connected",
            last_activity=_parse_timestamp(data.get("lastActivityTime")),
            iot_hub_hostname=self.host_name,
        )
