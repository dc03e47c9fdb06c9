"""
Dependency container injection module - Main Layer

Composition root wiring the IoT Hub gateway, services and use cases.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from iothub_manager.application.models import SystemInfo
from iothub_manager.application.use_cases.device_use_cases import (
    CreateOrUpdateDeviceUseCase,
    DeleteDeviceUseCase,
    GetDeviceUseCase,
    ListDevicesUseCase,
)
from iothub_manager.application.use_cases.health_use_cases import (
    GetApplicationStatusUseCase,
)
from iothub_manager.infrastructure.gateways.iothub_registry_gateway import (
    IoTHubRegistryGateway,
)
from iothub_manager.infrastructure.services.health_check_service import (
    HealthCheckService,
)
from iothub_manager.shared import get_logger

from .config import AppSettings

logger = get_logger(__name__)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependency-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()

    # Gateways
    device_registry_gateway = providers.Singleton(
        IoTHubRegistryGateway,
        connection_string=config.iothub.connection_string,
        timeout=config.iothub.timeout,
        page_size=config.iothub.page_size,
    )

    # Application (use cases)
    get_device_use_case = providers.Factory(
        GetDeviceUseCase,
        registry_gateway=device_registry_gateway,
    )

    list_devices_use_case = providers.Factory(
        ListDevicesUseCase,
        registry_gateway=device_registry_gateway,
    )

    create_or_update_device_use_case = providers.Factory(
        CreateOrUpdateDeviceUseCase,
        registry_gateway=device_registry_gateway,
    )

    delete_device_use_case = providers.Factory(
        DeleteDeviceUseCase,
        registry_gateway=device_registry_gateway,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        registry_gateway=device_registry_gateway,
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.ge.title,
        version=config.ge.version,
        environment=providers.Callable(
            lambda env: env.value if hasattr(env, "value") else str(env),
            config.environment,
        ),
        git_commit=config.ge.git_commit,
        build_time=config.ge.build_time,
    )

    get_application_status_use_case = providers.Factory(
        GetApplicationStatusUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Lifecycle of the container resources, used by the FastAPI lifespan.

    The registry connection string is parsed lazily, so a missing or broken
    one does not prevent startup; it surfaces on ``/v1/status`` instead.
    """
    container = get_container()
    gateway = container.device_registry_gateway()

    try:
        logger.info(
            "container.registry.ready",
            gateway=type(gateway).__name__,
            configured=bool(container.config.iothub.connection_string()),
        )
        yield container
    finally:
        logger.info("container.resources.shutdown")
