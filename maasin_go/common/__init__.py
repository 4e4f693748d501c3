"""
Общие утилиты, константы, ошибки и логгер.
"""

from maasin_go.common.logger import get_logger, log_info, log_error, log_warning, log_debug, setup_logging
from maasin_go.common.constants import TypeMsg
from maasin_go.common.errors import (
    CommuteError,
    NotFoundError,
    PermissionDenied,
    ServiceUnavailable,
    StoreUnavailable,
    Unauthenticated,
    ValidationError,
)

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "setup_logging",
    "TypeMsg",
    "CommuteError",
    "NotFoundError",
    "PermissionDenied",
    "ServiceUnavailable",
    "StoreUnavailable",
    "Unauthenticated",
    "ValidationError",
]
