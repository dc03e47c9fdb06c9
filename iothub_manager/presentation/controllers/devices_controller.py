"""
Devices Router - Presentation Layer

REST endpoints for device CRUD and device queries. Domain errors are
mapped to HTTP status codes; error bodies carry a machine-readable code.
"""

import json
from typing import Any, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from iothub_manager.application.dtos.device_dto import (
    DeviceListDTO,
    DeviceRegistryDTO,
)
from iothub_manager.application.use_cases.device_use_cases import (
    CreateOrUpdateDeviceUseCase,
    DeleteDeviceUseCase,
    GetDeviceUseCase,
    ListDevicesUseCase,
)
from iothub_manager.domain.entities.errors import (
    DeviceConflictError,
    DeviceNotFoundError,
    DeviceValidationError,
    DomainError,
    InvalidQuerySyntaxError,
    RegistryOperationError,
    RegistryUnavailableError,
)
from iothub_manager.shared import CONTINUATION_TOKEN_HEADER, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/devices", tags=["Devices"])

_QUERY_BODY_OPENAPI = {
    "requestBody": {
        "required": True,
        "content": {
            "text/plain": {
                "schema": {"type": "string"},
                "example": "tags.Floor = '10F'",
            },
            "application/json": {
                "schema": {},
                "example": [{"Key": "tags.Floor", "Operator": "EQ", "Value": "10F"}],
            },
        },
    }
}


def _status_for(error: DomainError) -> int:
    if isinstance(error, (InvalidQuerySyntaxError, DeviceValidationError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, DeviceNotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, DeviceConflictError):
        return status.HTTP_409_CONFLICT
    if isinstance(error, RegistryUnavailableError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(error, RegistryOperationError) and error.client_error:
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_502_BAD_GATEWAY


def _to_http_exception(error: DomainError, event: str, **context: Any) -> HTTPException:
    status_code = _status_for(error)
    log = logger.warning if status_code < 500 else logger.error
    log(event, code=error.code, error=error.message, status_code=status_code, **context)
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message, **error.details},
    )


def _internal_error(error: Exception, event: str, **context: Any) -> HTTPException:
    logger.error(event, error=str(error), exc_info=error, **context)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


def _decode_query_body(body: bytes) -> str:
    """
    Accept a raw clause string, a JSON-encoded string, or a JSON clause
    array (left encoded; the translator decodes it).
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidQuerySyntaxError(
            body.decode("utf-8", errors="replace"), "body must be UTF-8 text"
        ) from exc

    stripped = text.strip()
    if stripped.startswith('"'):
        try:
            decoded = json.loads(stripped)
        except ValueError as exc:
            raise InvalidQuerySyntaxError(text, "malformed JSON string") from exc
        if isinstance(decoded, str):
            return decoded
    return text


@router.get("", response_model=DeviceListDTO)
@inject
async def list_devices(
    query: Optional[str] = Query(
        default=None,
        description=(
            "Clause string (e.g. tags.Floor = '10F') "
            "or JSON array of {Key, Operator, Value} clauses"
        ),
    ),
    continuation_token: Optional[str] = Header(
        default=None,
        alias=CONTINUATION_TOKEN_HEADER,
        description="Continuation token returned by the previous page",
    ),
    list_devices_use_case: ListDevicesUseCase = Depends(
        Provide["list_devices_use_case"]
    ),
) -> DeviceListDTO:
    """
    List devices, optionally filtered.

    Without ``query`` every device is returned; ``query=[]`` is equivalent.
    Malformed queries are rejected with 400 and never reach IoT Hub.
    """
    logger.info("devices.list.requested", query=query)
    try:
        return await list_devices_use_case.execute(query, continuation_token)
    except DomainError as e:
        raise _to_http_exception(e, "devices.list.failed", query=query) from e
    except Exception as e:
        raise _internal_error(e, "devices.list.unexpected_error", query=query) from e


@router.post(
    "/query", response_model=DeviceListDTO, openapi_extra=_QUERY_BODY_OPENAPI
)
@inject
async def query_devices(
    request: Request,
    continuation_token: Optional[str] = Header(
        default=None,
        alias=CONTINUATION_TOKEN_HEADER,
        description="Continuation token returned by the previous page",
    ),
    list_devices_use_case: ListDevicesUseCase = Depends(
        Provide["list_devices_use_case"]
    ),
) -> DeviceListDTO:
    """Query devices with the clause string (or clause array) in the body."""
    body = await request.body()
    try:
        query = _decode_query_body(body)
        logger.info("devices.query.requested", query=query)
        return await list_devices_use_case.execute(query, continuation_token)
    except DomainError as e:
        raise _to_http_exception(e, "devices.query.failed") from e
    except Exception as e:
        raise _internal_error(e, "devices.query.unexpected_error") from e


@router.get("/{device_id}", response_model=DeviceRegistryDTO)
@inject
async def get_device(
    device_id: str,
    get_device_use_case: GetDeviceUseCase = Depends(Provide["get_device_use_case"]),
) -> DeviceRegistryDTO:
    """Get a device with its tags and twin properties."""
    try:
        return await get_device_use_case.execute(device_id)
    except DomainError as e:
        raise _to_http_exception(e, "devices.get.failed", device_id=device_id) from e
    except Exception as e:
        raise _internal_error(
            e, "devices.get.unexpected_error", device_id=device_id
        ) from e


@router.put("/{device_id}", response_model=DeviceRegistryDTO)
@inject
async def put_device(
    device_id: str,
    device_dto: DeviceRegistryDTO,
    create_or_update_device_use_case: CreateOrUpdateDeviceUseCase = Depends(
        Provide["create_or_update_device_use_case"]
    ),
) -> DeviceRegistryDTO:
    """
    Create or update a device.

    Tags and desired properties are replaced as a whole: keys missing from
    the payload are removed. Reported properties in the payload are ignored.
    """
    logger.info("devices.put.requested", device_id=device_id)
    try:
        return await create_or_update_device_use_case.execute(device_dto, device_id)
    except DomainError as e:
        raise _to_http_exception(e, "devices.put.failed", device_id=device_id) from e
    except Exception as e:
        raise _internal_error(
            e, "devices.put.unexpected_error", device_id=device_id
        ) from e


@router.post("", response_model=DeviceRegistryDTO)
@inject
async def post_device(
    device_dto: DeviceRegistryDTO,
    create_or_update_device_use_case: CreateOrUpdateDeviceUseCase = Depends(
        Provide["create_or_update_device_use_case"]
    ),
) -> DeviceRegistryDTO:
    """Create (or update) the device whose ``Id`` is given in the body."""
    logger.info("devices.post.requested", device_id=device_dto.id)
    try:
        return await create_or_update_device_use_case.execute(device_dto)
    except DomainError as e:
        raise _to_http_exception(
            e, "devices.post.failed", device_id=device_dto.id
        ) from e
    except Exception as e:
        raise _internal_error(
            e, "devices.post.unexpected_error", device_id=device_dto.id
        ) from e


@router.delete("/{device_id}", status_code=status.HTTP_200_OK)
@inject
async def delete_device(
    device_id: str,
    delete_device_use_case: DeleteDeviceUseCase = Depends(
        Provide["delete_device_use_case"]
    ),
) -> None:
    """Delete a device. Deleting a device that does not exist succeeds."""
    logger.info("devices.delete.requested", device_id=device_id)
    try:
        await delete_device_use_case.execute(device_id)
    except DomainError as e:
        raise _to_http_exception(
            e, "devices.delete.failed", device_id=device_id
        ) from e
    except Exception as e:
        raise _internal_error(
            e, "devices.delete.unexpected_error", device_id=device_id
        ) from e
