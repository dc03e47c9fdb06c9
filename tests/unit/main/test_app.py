from __future__ import annotations

import pytest
from fastapi.middleware.cors import CORSMiddleware

from iothub_manager.main import app as module_app
from iothub_manager.main.app import create_app
from iothub_manager.main.config import AppSettings, CorsSettings


def _route_paths(app) -> set:
    return {route.path for route in app.routes}


@pytest.mark.asyncio
async def test_create_app_initializes_lifespan() -> None:
    app = create_app()
    assert app.title == "IoT Hub Manager"

    async with app.router.lifespan_context(app):
        assert app.state.started_at is not None
        assert app.state.container is not None

    # Module-level app is instantiated on import
    assert isinstance(module_app.app, type(app))


def test_routes_are_versioned() -> None:
    paths = _route_paths(create_app())
    assert {
        "/v1/devices",
        "/v1/devices/query",
        "/v1/devices/{device_id}",
        "/v1/status",
    } <= paths


def test_cors_disabled_without_origins() -> None:
    app = create_app()
    assert not any(m.cls is CORSMiddleware for m in app.user_middleware)


def test_cors_whitelist_from_settings(monkeypatch) -> None:
    settings = AppSettings(
        cors=CorsSettings(origins=["https://portal.example.com"], methods=["GET"])
    )
    monkeypatch.setattr("iothub_manager.main.app.get_settings", lambda: settings)

    app = create_app()

    cors = [m for m in app.user_middleware if m.cls is CORSMiddleware]
    assert len(cors) == 1
    assert cors[0].kwargs["allow_origins"] == ["https://portal.example.com"]
    assert cors[0].kwargs["allow_methods"] == ["GET"]
