"""Custom exceptions for ClusterRec.

Defines specific exception types for the master/worker protocol, the
scoring pipeline and the API layer.
"""

from typing import Any, Dict, Optional


class ClusterRecException(Exception):
    """Base exception for ClusterRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class WorkerConnectionError(ClusterRecException):
    """Raised when a worker cannot be reached or the probe times out."""

    def __init__(self, address: str, error: Optional[Exception] = None):
        reason = str(error) if error is not None else "unreachable"
        message = f"Cannot connect to worker '{address}': {reason}"
        super().__init__(
            message=message,
            status_code=503,
            details={
                "address": address,
                "error": reason,
                "error_type": type(error).__name__ if error is not None else None,
            },
        )
        self.address = address


class TransportError(ClusterRecException):
    """Raised when a write or read fails in the middle of an exchange."""

    def __init__(self, address: str, stage: str, error: Optional[Exception] = None):
        reason = str(error) if error is not None else "connection closed"
        message = f"Transport failure with worker '{address}' during {stage}: {reason}"
        super().__init__(
            message=message,
            status_code=502,
            details={"address": address, "stage": stage, "error": reason},
        )
        self.address = address
        self.stage = stage


class DecodeError(ClusterRecException):
    """Raised when a framed payload cannot be decoded."""

    def __init__(self, source: str, error: Exception):
        message = f"Malformed payload from '{source}': {str(error)}"
        super().__init__(
            message=message,
            status_code=502,
            details={
                "source": source,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
        self.source = source


class DegenerateScaleError(ClusterRecException):
    """Raised when min-max scaling sees a single distinct value."""

    def __init__(self, value: float):
        message = f"Cannot min-max scale: minimum equals maximum ({value})"
        super().__init__(message=message, status_code=500, details={"value": value})
        self.value = value


class InvalidArgumentError(ClusterRecException):
    """Raised when an operation receives an out-of-range argument."""

    def __init__(self, name: str, value: Any, reason: str):
        message = f"Invalid value for '{name}': {value!r} ({reason})"
        super().__init__(
            message=message,
            status_code=400,
            details={"argument": name, "value": value, "reason": reason},
        )


class DatasetError(ClusterRecException):
    """Raised when the ratings dataset is missing or malformed."""

    def __init__(self, path: str, reason: str):
        message = f"Cannot load ratings from '{path}': {reason}"
        super().__init__(
            message=message,
            status_code=503,
            details={"path": path, "reason": reason},
        )
