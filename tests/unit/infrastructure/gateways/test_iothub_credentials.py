from __future__ import annotations

import base64
import hashlib
import hmac
from urllib.parse import parse_qs

import pytest

from iothub_manager.domain.entities.errors import RegistryUnavailableError
from iothub_manager.infrastructure.gateways.iothub_credentials import (
    IoTHubConnectionString,
)

KEY = base64.b64encode(b"secret-key").decode("utf-8")
CONNECTION_STRING = (
    f"HostName=contoso.azure-devices.net;SharedAccessKeyName=iothubowner;"
    f"SharedAccessKey={KEY}"
)


def test_parse_connection_string() -> None:
    credentials = IoTHubConnectionString.parse(CONNECTION_STRING)
    assert credentials.host_name == "contoso.azure-devices.net"
    assert credentials.shared_access_key_name == "iothubowner"
    assert credentials.shared_access_key == KEY


@pytest.mark.parametrize("value", [None, "", "   "])
def test_parse_missing_connection_string(value) -> None:
    with pytest.raises(RegistryUnavailableError):
        IoTHubConnectionString.parse(value)


def test_parse_incomplete_connection_string_lists_missing_parts() -> None:
    with pytest.raises(RegistryUnavailableError) as exc:
        IoTHubConnectionString.parse("HostName=contoso.azure-devices.net")
    assert exc.value.details["missing"] == ["SharedAccessKeyName", "SharedAccessKey"]


def test_parse_rejects_key_that_is_not_base64() -> None:
    with pytest.raises(RegistryUnavailableError):
        IoTHubConnectionString.parse(
            "HostName=h;SharedAccessKeyName=n;SharedAccessKey=not*base64"
        )


def test_generate_sas_token_signs_host_and_expiry() -> None:
    credentials = IoTHubConnectionString.parse(CONNECTION_STRING)

    token = credentials.generate_sas_token(ttl_seconds=60, now=1_000)

    assert token.startswith("SharedAccessSignature ")
    fields = {
        name: values[0]
        for name, values in parse_qs(token.split(" ", 1)[1]).items()
    }
    assert fields["sr"] == "contoso.azure-devices.net"
    assert fields["se"] == "1060"
    assert fields["skn"] == "iothubowner"
    expected = base64.b64encode(
        hmac.new(
            b"secret-key", b"contoso.azure-devices.net\n1060", hashlib.sha256
        ).digest()
    ).decode("utf-8")
    assert fields["sig"] == expected
