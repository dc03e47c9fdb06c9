from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException, Request

from iothub_manager.application.models import SystemInfo
from iothub_manager.application.use_cases.health_use_cases import (
    GetApplicationStatusUseCase,
)
from iothub_manager.domain.entities.health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from iothub_manager.presentation.controllers.system_controller import get_status


class _HealthService:
    def __init__(self, status: ServiceStatus):
        self._health = SystemHealth(
            status=status,
            dependencies=[DependencyStatus(name="iothub", status=status)],
        )

    async def evaluate(self) -> SystemHealth:
        return self._health


class _BrokenHealthService:
    async def evaluate(self) -> SystemHealth:
        raise RuntimeError("boom")


def _request() -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/v1/status",
        "headers": [],
        "query_string": b"",
        "server": ("test", 80),
        "app": SimpleNamespace(
            state=SimpleNamespace(started_at=datetime.now(timezone.utc))
        ),
    }
    return Request(scope)


def _system_info() -> SystemInfo:
    return SystemInfo(
        title="IoT Hub Manager",
        version="1.0",
        environment="dev",
        git_commit="abc",
        build_time="now",
    )


@pytest.mark.asyncio
async def test_status_endpoint_reports_registry_outage() -> None:
    use_case = GetApplicationStatusUseCase(
        _HealthService(ServiceStatus.DOWN), _system_info()
    )

    dto = await get_status(
        request=_request(), get_application_status_use_case=use_case
    )

    assert dto.name == "IoT Hub Manager"
    assert dto.status is ServiceStatus.DOWN
    assert dto.dependencies[0].name == "iothub"


@pytest.mark.asyncio
async def test_status_endpoint_failure_maps_to_500() -> None:
    use_case = GetApplicationStatusUseCase(_BrokenHealthService(), _system_info())

    with pytest.raises(HTTPException) as exc:
        await get_status(request=_request(), get_application_status_use_case=use_case)

    assert exc.value.status_code == 500
