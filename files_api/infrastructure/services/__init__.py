"""Infrastructure services implementing application service ports."""

from files_api.infrastructure.services.action_log_service import ActionLogService

__all__ = ["ActionLogService"]
