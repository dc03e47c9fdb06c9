"""
Application Layer Package

Use cases that orchestrate device registry operations, and the DTOs
they exchange with the presentation layer.
"""

from iothub_manager.application import dtos, models, use_cases

__all__ = ["dtos", "use_cases", "models"]
