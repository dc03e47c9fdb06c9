"""
Domain Layer Package

Core rules of the device manager: device and query entities, the query
translator and the contracts for the device registry and health checks.
No dependencies on frameworks or infrastructure concerns.
"""

from iothub_manager.domain import entities, gateways, ports, services

__all__ = ["entities", "gateways", "ports", "services"]
