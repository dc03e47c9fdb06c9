"""
Infrastructure Layer Package

Adapters to the outside world: the IoT Hub registry REST gateway and
the health check service built on top of it.
"""
