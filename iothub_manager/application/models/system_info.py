"""Lightweight settings structures consumed by the application layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SystemInfo:
    """Subset of configuration required by the status use case."""

    title: str
    version: str
    environment: str
    git_commit: str
    build_time: str
