"""
Controllers Package - Presentation Layer

FastAPI routers translating HTTP requests into use case calls and domain
errors into HTTP responses.
"""

from .devices_controller import router as devices_router
from .system_controller import router as system_router

__all__ = ["devices_router", "system_router"]
