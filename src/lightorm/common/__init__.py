"""Common utilities and exceptions for lightorm.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All errors are LightORMError
    instances carrying an ErrorCode, structured details and, for driver
    failures, the original exception as ``cause``.
"""

from lightorm.common.exceptions import (
    ErrorCode,
    LightORMError,
    # Helper functions
    configuration_error,
    connection_error,
    query_execution_error,
    unsupported_driver_error,
)

__all__ = [
    "ErrorCode",
    "LightORMError",
    "configuration_error",
    "connection_error",
    "query_execution_error",
    "unsupported_driver_error",
]
