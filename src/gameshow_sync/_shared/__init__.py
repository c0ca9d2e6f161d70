# Area: Shared
"""
Shared utilities used by the core, sync and persistence layers.

This package contains:
- Logging configuration
- Sync message envelope helpers
- Session configuration loading
"""

from .config import (
    PRESENCE_TIMEOUT_SECONDS,
    SessionConfig,
    load_config,
)
from .logging_config import setup_logging, log_error_block
from .protocol import (
    SYNC_PROTOCOL,
    MessageKind,
    build_envelope,
    current_timestamp,
    decode_envelope,
    encode_envelope,
    generate_message_id,
    now_ms,
)

__all__ = [
    "PRESENCE_TIMEOUT_SECONDS",
    "SessionConfig",
    "load_config",
    "setup_logging",
    "log_error_block",
    "SYNC_PROTOCOL",
    "MessageKind",
    "build_envelope",
    "current_timestamp",
    "decode_envelope",
    "encode_envelope",
    "generate_message_id",
    "now_ms",
]
