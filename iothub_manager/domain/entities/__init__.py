"""
Domain Entities Package

Devices, query clauses, health value objects and domain errors.
"""

from .device import (
    Device,
    DeviceList,
    strip_metadata,
    validate_device_id,
)
from .errors import (
    DeviceConflictError,
    DeviceNotFoundError,
    DeviceValidationError,
    DomainError,
    InvalidQuerySyntaxError,
    RegistryOperationError,
    RegistryUnavailableError,
)
from .health import ApplicationStatus, DependencyStatus, ServiceStatus, SystemHealth
from .query import QueryClause, QueryOperator, QueryValue

__all__ = [
    "Device",
    "DeviceList",
    "strip_metadata",
    "validate_device_id",
    "QueryClause",
    "QueryOperator",
    "QueryValue",
    "ApplicationStatus",
    "DependencyStatus",
    "ServiceStatus",
    "SystemHealth",
    "DomainError",
    "InvalidQuerySyntaxError",
    "DeviceValidationError",
    "DeviceNotFoundError",
    "DeviceConflictError",
    "RegistryUnavailableError",
    "RegistryOperationError",
]
