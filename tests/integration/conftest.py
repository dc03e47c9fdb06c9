"""
Fixtures for the integration suite, which drives a deployed service over
HTTP. Pull request builds have no IoT Hub credentials, so the suite only
runs when a target hostname is configured outside of a PR build.
"""

from __future__ import annotations

import os
from typing import Iterator

import httpx
import pytest
from ws_settings import IntegrationSettings


@pytest.fixture(scope="session")
def integration_settings() -> IntegrationSettings:
    return IntegrationSettings.from_environ(os.environ)


@pytest.fixture()
def ws_client(integration_settings: IntegrationSettings) -> Iterator[httpx.Client]:
    if not integration_settings.credentials_available:
        pytest.skip(
            "IoT Hub credentials are not available "
            "(no service hostname configured or pull request build)"
        )
    with httpx.Client(base_url=integration_settings.hostname, timeout=30.0) as client:
        yield client
