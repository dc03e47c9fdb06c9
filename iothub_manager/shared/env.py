"""Environment utilities for resolving Docker secret files.

The IoT Hub connection string is usually mounted as a secret, e.g.
``IOTHUB_CONNECTION_STRING_FILE=/run/secrets/iothub``. Any ``KEY_FILE``
variable is resolved into ``KEY`` unless ``KEY`` is already set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, MutableMapping, Optional

logger = logging.getLogger(__name__)

SECRET_FILE_SUFFIX = "_FILE"


def read_secret_file(key: str, file_path: str) -> Optional[str]:
    """Read a secret file, returning ``None`` (and logging) on failure."""
    try:
        return Path(file_path).read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        logger.warning(
            "env.secret_file.missing",
            extra={"key": key, "path": file_path, "error": str(exc)},
        )
    except UnicodeDecodeError as exc:
        logger.warning(
            "env.secret_file.decode_failed",
            extra={"key": key, "path": file_path, "error": str(exc)},
        )
    except OSError as exc:
        logger.warning(
            "env.secret_file.load_failed",
            extra={"key": key, "path": file_path, "error": str(exc)},
        )
    return None


def load_secret_file_variables(
    environ: Optional[MutableMapping[str, str]] = None,
) -> List[str]:
    """
    Expose the contents of every ``KEY_FILE`` secret as ``KEY``.

    Args:
        environ: Mapping to read and update, ``os.environ`` by default.

    Returns:
        Names of the variables that were populated.
    """
    target = os.environ if environ is None else environ
    resolved: List[str] = []

    for key, file_path in list(target.items()):
        if not key.endswith(SECRET_FILE_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(SECRET_FILE_SUFFIX)]
        if target.get(target_key):
            continue
        value = read_secret_file(key, file_path)
        if value is not None:
            target[target_key] = value
            resolved.append(target_key)

    return resolved


# Resolve on import so settings classes see the secrets.
load_secret_file_variables()
