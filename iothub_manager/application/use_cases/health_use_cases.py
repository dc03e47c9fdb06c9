"""Use case for the status endpoint."""

from datetime import datetime, timezone
from typing import Optional

from iothub_manager.application.dtos.health_dto import ApplicationStatusDTO
from iothub_manager.application.models import SystemInfo
from iothub_manager.domain.entities.health import ApplicationStatus
from iothub_manager.domain.ports.health_check import IHealthCheckService


class GetApplicationStatusUseCase:
    """Use case responsible for returning application status."""

    def __init__(
        self,
        health_check_service: IHealthCheckService,
        system_info: SystemInfo,
    ) -> None:
        self._health_check_service = health_check_service
        self._info = system_info

    async def execute(self, started_at: Optional[datetime]) -> ApplicationStatusDTO:
        system_health = await self._health_check_service.evaluate()

        now = datetime.now(timezone.utc)
        started = started_at or now
        uptime_seconds = max(0.0, (now - started).total_seconds())

        status = ApplicationStatus(
            name=self._info.title,
            version=self._info.version,
            environment=self._info.environment,
            git_commit=self._info.git_commit,
            build_time=self._info.build_time,
            started_at=started,
            uptime_seconds=uptime_seconds,
            status=system_health.status,
            dependencies=system_health.dependencies,
        )

        return ApplicationStatusDTO.from_domain(status)
