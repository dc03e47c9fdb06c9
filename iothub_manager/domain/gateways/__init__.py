"""
Gateways Package - Domain Layer

Interfaces for communicating with external services. Implementations
live in the infrastructure layer.
"""

from .device_registry_gateway import IDeviceRegistryGateway

__all__ = ["IDeviceRegistryGateway"]
