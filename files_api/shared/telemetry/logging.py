"""Logging configuration for the application.

Every record carries the current request id (or "-" outside a request)
through RequestIdFilter, so store failures can be traced back to the
X-Request-ID the client saw.
"""

import logging
import sys
from contextvars import ContextVar

from files_api.core.config import get_settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Attach request_id from the context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise LOG_LEVEL.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = (
        logging.DEBUG
        if settings.debug
        else logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    logging.basicConfig(level=log_level, format=LOG_FORMAT, handlers=[handler])
    # boto's wire logging is noisy at DEBUG
    logging.getLogger("botocore").setLevel(max(log_level, logging.INFO))
