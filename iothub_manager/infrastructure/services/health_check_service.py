"""Infrastructure implementation for system health checks."""

from __future__ import annotations

from time import perf_counter
from typing import Iterable

from iothub_manager.domain.entities.health import (
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)
from iothub_manager.domain.gateways.device_registry_gateway import (
    IDeviceRegistryGateway,
)
from iothub_manager.domain.ports.health_check import IHealthCheckService
from iothub_manager.shared import get_logger

logger = get_logger(__name__)


class HealthCheckService(IHealthCheckService):
    """Collect health information for the device registry."""

    def __init__(self, registry_gateway: IDeviceRegistryGateway) -> None:
        self._registry_gateway = registry_gateway

    async def evaluate(self) -> SystemHealth:
        dependencies = [await self._check_registry()]
        return SystemHealth(
            status=self._aggregate_status(dependencies), dependencies=dependencies
        )

    def _aggregate_status(self, statuses: Iterable[DependencyStatus]) -> ServiceStatus:
        if any(status.status == ServiceStatus.DOWN for status in statuses):
            return ServiceStatus.DOWN
        return ServiceStatus.UP

    async def _check_registry(self) -> DependencyStatus:
        start = perf_counter()
        try:
            statistics = await self._registry_gateway.get_statistics()
        except Exception as exc:
            latency_ms = (perf_counter() - start) * 1000
            logger.warning("health.iothub.unreachable", error=str(exc))
            return DependencyStatus(
                name="iothub",
                status=ServiceStatus.DOWN,
                message=f"IoT Hub registry check failed: {exc}",
                latency_ms=latency_ms,
            )

        latency_ms = (perf_counter() - start) * 1000
        return DependencyStatus(
            name="iothub",
            status=ServiceStatus.UP,
            message="IoT Hub registry reachable",
            latency_ms=latency_ms,
            details=statistics,
        )
