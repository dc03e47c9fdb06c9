"""
Gateways Package - Infrastructure Layer

Implementations of the domain gateway interfaces.
"""

from .iothub_credentials import IoTHubConnectionString
from .iothub_registry_gateway import IoTHubRegistryGateway

__all__ = ["IoTHubConnectionString", "IoTHubRegistryGateway"]
