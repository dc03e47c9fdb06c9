"""
Use Cases Package - Application Layer

Use cases orchestrate device registry operations and health checks.
"""

from .device_use_cases import (
    CreateOrUpdateDeviceUseCase,
    DeleteDeviceUseCase,
    GetDeviceUseCase,
    ListDevicesUseCase,
)
from .health_use_cases import GetApplicationStatusUseCase

__all__ = [
    "GetDeviceUseCase",
    "ListDevicesUseCase",
    "CreateOrUpdateDeviceUseCase",
    "DeleteDeviceUseCase",
    "GetApplicationStatusUseCase",
]
