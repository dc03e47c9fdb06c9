"""
IoT Hub Manager

HTTP facade over the Azure IoT Hub device registry: device CRUD, twin
tag/desired-property updates and device queries by clause.

Layer Structure:
- Domain: Device and query entities, query translation, gateway contracts
- Application: Use cases and DTOs
- Infrastructure: IoT Hub registry gateway and health checks
- Presentation: FastAPI controllers for the REST API
- Shared: Cross-cutting concerns and shared utilities
- Main: Composition root, application entry point and configuration
"""

__version__ = "1.0.0"
