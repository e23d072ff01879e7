from .error_log import ErrorItem, ErrorLog

__all__ = [
    "ErrorItem",
    "ErrorLog",
]
