"""
DTOs Package - Application Layer

Data Transfer Objects exchanged between the application layer and the
presentation layer.
"""

from .device_dto import DeviceListDTO, DevicePropertiesDTO, DeviceRegistryDTO
from .health_dto import ApplicationStatusDTO, DependencyStatusDTO

__all__ = [
    "DeviceRegistryDTO",
    "DevicePropertiesDTO",
    "DeviceListDTO",
    "ApplicationStatusDTO",
    "DependencyStatusDTO",
]
