"""Telemetry: logging setup and request-id log context."""

from files_api.shared.telemetry.logging import (
    RequestIdFilter,
    request_id_var,
    setup_logging,
)

__all__ = ["RequestIdFilter", "request_id_var", "setup_logging"]
