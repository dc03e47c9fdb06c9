"""
Presentation Layer Package

HTTP routers and request/response mapping for the device API.
"""

from iothub_manager.presentation import controllers

__all__ = ["controllers"]
