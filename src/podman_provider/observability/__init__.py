"""Observability utilities for the Podman provider."""

from podman_provider.observability.logging import (
    StructuredLogger,
    get_logger,
    enable_structured_logging,
    disable_structured_logging,
)

__all__ = [
    "StructuredLogger",
    "get_logger",
    "enable_structured_logging",
    "disable_structured_logging",
]
