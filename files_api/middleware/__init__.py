"""HTTP middleware: timeout, request size limit, request ID.

Applied in main app; order matters (last added = outermost).
"""

from files_api.middleware.request_id import RequestIDMiddleware
from files_api.middleware.request_size_limit import RequestSizeLimitMiddleware
from files_api.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "TimeoutMiddleware",
]
