"""Structured logging for resource lifecycle events.

Emits JSON-formatted logs for:
- Remote objects created, read, updated and deleted
- Resources found absent during a read
- Failed lifecycle operations

Event fields carry ids, names and types only. Values are encoded with
``default=str`` so a ``SecretStr`` that slips in renders masked.
"""

import json
import sys
from datetime import datetime, timezone
from typing import Optional


class StructuredLogger:
    """Structured logger that emits JSON logs."""

    def __init__(self, enabled: bool = True, output=None):
        """Initialize structured logger.

        Args:
            enabled: Whether to enable logging
            output: Output stream (default: sys.stderr)
        """
        self.enabled = enabled
        self.output = output or sys.stderr

    def _log(self, level: str, event: str, **kwargs):
        if not self.enabled:
            return

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "event": event,
            **kwargs,
        }

        print(json.dumps(log_entry, default=str), file=self.output)

    def log_resource_created(self, resource_type: str, resource_id: str, name: Optional[str] = None):
        self._log("INFO", "resource_created", resource_type=resource_type, id=resource_id, name=name)

    def log_resource_read(self, resource_type: str, resource_id: str, name: Optional[str] = None):
        self._log("INFO", "resource_read", resource_type=resource_type, id=resource_id, name=name)

    def log_resource_absent(self, resource_type: str, resource_id: str):
        """Log a resource whose remote object no longer exists."""
        self._log("WARNING", "resource_absent", resource_type=resource_type, id=resource_id)

    def log_resource_updated(self, resource_type: str, resource_id: str, changed: list[str]):
        self._log("INFO", "resource_updated", resource_type=resource_type, id=resource_id, changed=changed)

    def log_resource_deleted(self, resource_type: str, resource_id: str, already_absent: bool = False):
        self._log(
            "INFO",
            "resource_deleted",
            resource_type=resource_type,
            id=resource_id,
            already_absent=already_absent,
        )

    def log_operation_failed(self, resource_type: str, operation: str, error: str, resource_id: Optional[str] = None):
        self._log(
            "ERROR",
            "operation_failed",
            resource_type=resource_type,
            operation=operation,
            id=resource_id,
            error=error,
        )


# Global logger instance
_logger = StructuredLogger(enabled=False)  # Disabled by default


def get_logger() -> StructuredLogger:
    """Get global structured logger instance."""
    return _logger


def enable_structured_logging(output=None):
    """Enable structured logging.

    Args:
        output: Output stream (default: sys.stderr)
    """
    global _logger
    _logger = StructuredLogger(enabled=True, output=output)


def disable_structured_logging():
    """Disable structured logging."""
    global _logger
    _logger.enabled = False
