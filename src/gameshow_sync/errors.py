"""
gameshow_sync.errors — Custom exception classes
================================================

Defines the exception hierarchy for the session core.
Each exception stores full context for structured logging.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import json


class GameShowError(Exception):
    """Base exception for all gameshow_sync errors."""
    pass


class InvalidActionError(GameShowError):
    """Raised in strict mode when an action violates the reducer contract."""

    def __init__(
        self,
        action_type: str,
        action_payload: Dict[str, Any],
        violations: List[str],
    ):
        self.action_type = action_type
        self.action_payload = action_payload
        self.violations = violations
        super().__init__(
            f"Invalid action '{action_type}': {violations}"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="INVALID_ACTION",
            operation=self.action_type,
            payload=self.action_payload,
            details=self.violations,
        )


class SyncError(GameShowError):
    """Raised by a sync channel when a transport operation fails.

    Never fatal: the reconciler catches it and reports a warning.
    """

    def __init__(self, operation: str, reason: str, payload: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.reason = reason
        self.payload = payload or {}
        super().__init__(f"Sync operation '{operation}' failed: {reason}")

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="SYNC_FAILURE",
            operation=self.operation,
            payload=self.payload,
            details=[self.reason],
        )


class PersistenceError(GameShowError):
    """Raised when the persistence collaborator cannot complete a write or read."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Persistence operation '{operation}' failed: {reason}")


class VideoRoomError(GameShowError):
    """Raised by a video provider; converted to a VideoResult by the session."""
    pass


class ConfigError(GameShowError):
    """Raised when session configuration is missing or invalid."""
    pass


def _format_error_block(
    error_type: str,
    operation: str,
    payload: Dict[str, Any],
    details: Optional[List[str]],
) -> str:
    """Format a structured error block for the log."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        f" {error_type}",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Operation:    {operation}",
        "",
        " ── PAYLOAD " + "─" * 52,
        _indent_json(payload),
    ]

    if details:
        lines.append("")
        lines.append(" ── DETAILS " + "─" * 52)
        for detail in details:
            lines.append(f" • {detail}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
