from __future__ import annotations

import json

import pytest
from fastapi import HTTPException, Request

from iothub_manager.application.dtos.device_dto import DeviceRegistryDTO
from iothub_manager.application.use_cases.device_use_cases import (
    CreateOrUpdateDeviceUseCase,
    DeleteDeviceUseCase,
    GetDeviceUseCase,
    ListDevicesUseCase,
)
from iothub_manager.domain.entities.errors import (
    DeviceConflictError,
    RegistryOperationError,
    RegistryUnavailableError,
)
from iothub_manager.presentation.controllers.devices_controller import (
    delete_device,
    get_device,
    list_devices,
    post_device,
    put_device,
    query_devices,
)


def _request_with_body(body: bytes) -> Request:
    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/v1/devices/query",
        "headers": [],
        "query_string": b"",
        "server": ("test", 80),
    }
    return Request(scope, receive)


class _Failing(GetDeviceUseCase):
    def __init__(self, error: Exception):
        self.error = error

    async def execute(self, device_id: str) -> DeviceRegistryDTO:
        raise self.error


@pytest.mark.asyncio
async def test_get_device_returns_dto(fake_registry) -> None:
    dto = await get_device(
        device_id="testDevice1",
        get_device_use_case=GetDeviceUseCase(registry_gateway=fake_registry),
    )
    assert dto.id == "testDevice1"


@pytest.mark.asyncio
async def test_get_missing_device_maps_to_404(fake_registry) -> None:
    with pytest.raises(HTTPException) as exc:
        await get_device(
            device_id="foobar",
            get_device_use_case=GetDeviceUseCase(registry_gateway=fake_registry),
        )
    assert exc.value.status_code == 404
    assert exc.value.detail["code"] == "NotFound"
    assert exc.value.detail["device_id"] == "foobar"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (DeviceConflictError("etag mismatch"), 409, "Conflict"),
        (RegistryUnavailableError("down"), 503, "UpstreamUnavailable"),
        (RegistryOperationError("rejected", client_error=True), 400, "UpstreamError"),
        (RegistryOperationError("failed"), 502, "UpstreamError"),
    ],
)
async def test_registry_errors_map_to_status_codes(
    error, status_code: int, code: str
) -> None:
    with pytest.raises(HTTPException) as exc:
        await get_device(device_id="dev", get_device_use_case=_Failing(error))
    assert exc.value.status_code == status_code
    assert exc.value.detail["code"] == code


@pytest.mark.asyncio
async def test_unexpected_errors_map_to_500() -> None:
    with pytest.raises(HTTPException) as exc:
        await get_device(
            device_id="dev", get_device_use_case=_Failing(RuntimeError("boom"))
        )
    assert exc.value.status_code == 500
    assert exc.value.detail == "Internal server error"


@pytest.mark.asyncio
async def test_list_devices_with_invalid_query_maps_to_400(fake_registry) -> None:
    with pytest.raises(HTTPException) as exc:
        await list_devices(
            query="abc",
            continuation_token=None,
            list_devices_use_case=ListDevicesUseCase(registry_gateway=fake_registry),
        )
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "InvalidQuerySyntax"
    assert fake_registry.queries == []


@pytest.mark.asyncio
async def test_list_devices_forwards_query_and_token(fake_registry) -> None:
    page = await list_devices(
        query="tags.Floor = '10F'",
        continuation_token="token-1",
        list_devices_use_case=ListDevicesUseCase(registry_gateway=fake_registry),
    )
    assert [item.id for item in page.items] == ["testDevice1"]
    assert fake_registry.continuation_tokens == ["token-1"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "expected_query"),
    [
        (b"tags.Floor = '10F'", "SELECT * FROM devices WHERE tags.Floor = '10F'"),
        (
            json.dumps("tags.Floor = '10F'").encode(),
            "SELECT * FROM devices WHERE tags.Floor = '10F'",
        ),
        (
            json.dumps([{"Key": "tags.Floor", "Operator": "EQ", "Value": "10F"}]).encode(),
            "SELECT * FROM devices WHERE tags.Floor = '10F'",
        ),
        (b"", "SELECT * FROM devices"),
    ],
)
async def test_query_devices_accepts_every_body_form(
    fake_registry, body: bytes, expected_query: str
) -> None:
    await query_devices(
        request=_request_with_body(body),
        continuation_token=None,
        list_devices_use_case=ListDevicesUseCase(registry_gateway=fake_registry),
    )
    assert fake_registry.queries == [expected_query]


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"\xff\xfe", b'"unterminated', b"[{]"])
async def test_query_devices_rejects_undecodable_bodies(
    fake_registry, body: bytes
) -> None:
    with pytest.raises(HTTPException) as exc:
        await query_devices(
            request=_request_with_body(body),
            continuation_token=None,
            list_devices_use_case=ListDevicesUseCase(registry_gateway=fake_registry),
        )
    assert exc.value.status_code == 400
    assert fake_registry.queries == []


@pytest.mark.asyncio
async def test_put_device_rejects_mismatched_ids(empty_registry) -> None:
    with pytest.raises(HTTPException) as exc:
        await put_device(
            device_id="dev",
            device_dto=DeviceRegistryDTO(id="other"),
            create_or_update_device_use_case=CreateOrUpdateDeviceUseCase(
                registry_gateway=empty_registry
            ),
        )
    assert exc.value.status_code == 400
    assert exc.value.detail["code"] == "InvalidDevice"


@pytest.mark.asyncio
async def test_post_device_creates_from_body_id(empty_registry) -> None:
    dto = await post_device(
        device_dto=DeviceRegistryDTO(id="testDevice123"),
        create_or_update_device_use_case=CreateOrUpdateDeviceUseCase(
            registry_gateway=empty_registry
        ),
    )
    assert dto.id == "testDevice123"


@pytest.mark.asyncio
async def test_delete_missing_device_succeeds(empty_registry) -> None:
    result = await delete_device(
        device_id="ghost",
        delete_device_use_case=DeleteDeviceUseCase(registry_gateway=empty_registry),
    )
    assert result is None
