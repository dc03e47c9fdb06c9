from __future__ import annotations

import pytest
from dependency_injector import providers

from iothub_manager.application.use_cases.device_use_cases import ListDevicesUseCase
from iothub_manager.infrastructure.gateways.iothub_registry_gateway import (
    IoTHubRegistryGateway,
)
from iothub_manager.main.config import AppSettings, IoTHubSettings
from iothub_manager.main.container import app_lifespan, get_container, init_container


def test_init_container_configures_gateway() -> None:
    settings = AppSettings(
        iothub=IoTHubSettings(
            connection_string="HostName=h;SharedAccessKeyName=n;SharedAccessKey=a2V5",
            timeout=7,
            page_size=20,
        )
    )
    container = init_container(settings)

    gateway = container.device_registry_gateway()

    assert get_container() is container
    assert isinstance(gateway, IoTHubRegistryGateway)
    assert gateway.timeout == 7
    assert gateway.page_size == 20
    assert gateway.host_name == "h"
    assert container.device_registry_gateway() is gateway


def test_use_cases_share_the_gateway(empty_registry) -> None:
    container = init_container(AppSettings())
    container.device_registry_gateway.override(providers.Object(empty_registry))

    use_case = container.list_devices_use_case()

    assert isinstance(use_case, ListDevicesUseCase)
    assert use_case.registry_gateway is empty_registry


def test_system_info_uses_plain_environment_value() -> None:
    container = init_container(AppSettings(environment="production"))
    assert container.system_info().environment == "production"


@pytest.mark.asyncio
async def test_app_lifespan_yields_container() -> None:
    container = init_container(AppSettings())

    async with app_lifespan() as active:
        assert active is container


def test_get_container_without_init_raises(monkeypatch) -> None:
    monkeypatch.setattr("iothub_manager.main.container._app_container", None)
    with pytest.raises(RuntimeError):
        get_container()
