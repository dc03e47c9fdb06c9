"""DTOs for the status endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from iothub_manager.domain.entities.health import (
    ApplicationStatus,
    DependencyStatus,
    ServiceStatus,
)


class DependencyStatusDTO(BaseModel):
    """Serializable representation of a dependency health check."""

    name: str = Field(description="Dependency identifier")
    status: ServiceStatus = Field(description="Aggregated status for the dependency")
    message: Optional[str] = Field(
        default=None, description="Human readable status note"
    )
    checked_at: datetime = Field(description="Timestamp of the last check")
    latency_ms: Optional[float] = Field(
        default=None, description="Latency in milliseconds"
    )
    details: Dict[str, Any] = Field(
        default_factory=dict, description="Additional metrics"
    )

    @classmethod
    def from_domain(cls, status: DependencyStatus) -> "DependencyStatusDTO":
        return cls(
            name=status.name,
            status=status.status,
            message=status.message,
            checked_at=status.checked_at,
            latency_ms=status.latency_ms,
            details=status.details,
        )


class ApplicationStatusDTO(BaseModel):
    """DTO representing the /v1/status response payload."""

    name: str = Field(description="Application name")
    version: str = Field(description="Application version")
    environment: str = Field(description="Current deployment environment")
    git_commit: str = Field(description="Git commit hash")
    build_time: str = Field(description="Build timestamp")
    started_at: datetime = Field(description="Application start timestamp")
    uptime_seconds: float = Field(description="Uptime in seconds")
    status: ServiceStatus = Field(description="Overall system status")
    dependencies: List[DependencyStatusDTO] = Field(
        default_factory=list, description="Dependency status snapshot"
    )

    @classmethod
    def from_domain(cls, status: ApplicationStatus) -> "ApplicationStatusDTO":
        return cls(
            name=status.name,
            version=status.version,
            environment=status.environment,
            git_commit=status.git_commit,
            build_time=status.build_time,
            started_at=status.started_at,
            uptime_seconds=status.uptime_seconds,
            status=status.status,
            dependencies=[
                DependencyStatusDTO.from_domain(dep) for dep in status.dependencies
            ],
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "IoT Hub Manager",
                "version": "1.0.0",
                "environment": "production",
                "git_commit": "abc123",
                "build_time": "2024-09-09T12:00:00Z",
                "started_at": "2024-09-09T12:00:00Z",
                "uptime_seconds": 3600.0,
                "status": "up",
                "dependencies": [
                    {
                        "name": "iothub",
                        "status": "up",
                        "message": "IoT Hub registry reachable",
                        "checked_at": "2024-09-09T13:00:00Z",
                        "latency_ms": 85.1,
                        "details": {"total_device_count": 12},
                    }
                ],
            }
        }
    }
