"""IoT Hub connection string parsing and shared access signatures."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote_plus

from iothub_manager.domain.entities.errors import RegistryUnavailableError

DEFAULT_TOKEN_TTL_SECONDS = 3600


@dataclass(frozen=True)
class IoTHubConnectionString:
    """Service connection string, e.g. copied from the ``iothubowner`` policy."""

    host_name: str
    shared_access_key_name: str
    shared_access_key: str

    @classmethod
    def parse(cls, connection_string: Optional[str]) -> "IoTHubConnectionString":
        """
        Parse ``HostName=...;SharedAccessKeyName=...;SharedAccessKey=...``.

        Raises:
            RegistryUnavailableError: If the string is missing or incomplete.
        """
        if not connection_string or not connection_string.strip():
            raise RegistryUnavailableError(
                "IoT Hub connection string is not configured."
            )

        parts: Dict[str, str] = {}
        for segment in connection_string.strip().split(";"):
            if not segment:
                continue
            name, _, value = segment.partition("=")
            parts[name.strip()] = value.strip()

        missing = [
            name
            for name in ("HostName", "SharedAccessKeyName", "SharedAccessKey")
            if not parts.get(name)
        ]
        if missing:
            raise RegistryUnavailableError(
                "IoT Hub connection string is incomplete.",
                details={"missing": missing},
            )

        try:
            base64.b64decode(parts["SharedAccessKey"], validate=True)
        except ValueError as exc:
            raise RegistryUnavailableError(
                "IoT Hub shared access key is not valid base64."
            ) from exc

        return cls(
            host_name=parts["HostName"],
            shared_access_key_name=parts["SharedAccessKeyName"],
            shared_access_key=parts["SharedAccessKey"],
        )

    def generate_sas_token(
        self, ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS, now: Optional[float] = None
    ) -> str:
        """Build a ``SharedAccessSignature`` authorization header value."""
        expiry = int((now if now is not None else time.time()) + ttl_seconds)
        resource = quote_plus(self.host_name)
        to_sign = f"{resource}\n{expiry}".encode("utf-8")
        key = base64.b64decode(self.shared_access_key)
        signature = base64.b64encode(
            hmac.new(key, to_sign, hashlib.sha256).digest()
        ).decode("utf-8")
        return (
            f"SharedAccessSignature sr={resource}&sig={quote_plus(signature)}"
            f"&se={expiry}&skn={self.shared_access_key_name}"
        )
