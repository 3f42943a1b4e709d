from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for lightorm operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors
        CONNECTION_*: Connection establishment and handle errors
        EXECUTION_*: Statement execution errors reported by the driver
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    CONFIG_MISSING = "CONFIG_002"
    UNSUPPORTED_DRIVER = "CONFIG_003"

    # Connection errors
    CONNECTION_ERROR = "CONNECTION_001"

    # Execution errors
    QUERY_EXECUTION_ERROR = "EXECUTION_001"


class LightORMError(Exception):
    """Base exception for all lightorm errors.

    This exception class uses error codes for categorization
    instead of creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception (e.g. the driver error)
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.QUERY_EXECUTION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """Initialize lightorm error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

        # Lazy import to avoid circular dependency
        from lightorm.logging import get_logger
        logger = get_logger(__name__)
        logger.error(
            message,
            extra={"error_code": error_code.value, "details": self.details},
            exc_info=cause is not None,
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


def _truncate(query: str, limit: int = 500) -> str:
    return query[:limit] + "..." if len(query) > limit else query


def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
    **kwargs
) -> LightORMError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key or connection name that caused the error
        error_code: One of the CONFIG_* codes
        **kwargs: Additional error details

    Returns:
        LightORMError with a configuration error code
    """
    details = kwargs.get('details', {})
    if config_key:
        details["config_key"] = config_key

    return LightORMError(
        message=message,
        error_code=error_code,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def unsupported_driver_error(driver: str, **kwargs) -> LightORMError:
    """Create an unsupported driver error.

    Args:
        driver: Driver name that is not supported
        **kwargs: Additional error details

    Returns:
        LightORMError with UNSUPPORTED_DRIVER code
    """
    details = kwargs.get('details', {})
    details["driver"] = driver

    return LightORMError(
        message=f"Unsupported database driver: {driver}",
        error_code=ErrorCode.UNSUPPORTED_DRIVER,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def connection_error(
    message: str,
    driver: Optional[str] = None,
    host: Optional[str] = None,
    **kwargs
) -> LightORMError:
    """Create a connection error.

    Args:
        message: Error message
        driver: Driver that failed to connect
        host: Host or database file that failed
        **kwargs: Additional error details

    Returns:
        LightORMError with CONNECTION_ERROR code
    """
    details = kwargs.get('details', {})
    if driver:
        details["driver"] = driver
    if host:
        details["host"] = host

    return LightORMError(
        message=message,
        error_code=ErrorCode.CONNECTION_ERROR,
        details=details,
        **{k: v for k, v in kwargs.items() if k != 'details'}
    )


def query_execution_error(
    query: str,
    original_error: Exception,
    **kwargs
) -> LightORMError:
    """Create a query execution error.

    The driver's own message is kept in the error message so callers see
    exactly what the database reported.

    Args:
        query: SQL statement that failed
        original_error: The underlying exception
        **kwargs: Additional error details

    Returns:
        LightORMError with QUERY_EXECUTION_ERROR code
    """
    details = kwargs.get('details', {})
    details["query"] = _truncate(query)

    driver_error = getattr(original_error, "orig", None) or original_error

    return LightORMError(
        message=f"Query execution failed: {str(driver_error)}",
        error_code=ErrorCode.QUERY_EXECUTION_ERROR,
        details=details,
        cause=original_error,
        **{k: v for k, v in kwargs.items() if k not in ['details', 'cause']}
    )
