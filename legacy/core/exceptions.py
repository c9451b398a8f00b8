"""Custom exception classes for the legacy web application."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional


class LegacyAppError(Exception):
    """Base exception for the application."""

    http_status: int = 500
    title: str = "Internal Server Error"

    def __init__(
        self, message: str, recoverable: bool = False, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application error.

        Args:
            message: Error message
            recoverable: Whether the caller may succeed by trying again later
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    @property
    def error_type_uri(self) -> str:
        """RFC 7807 problem type derived from the class name."""
        name = re.sub(r"(?<!^)(?=[A-Z])", "-", self.__class__.__name__).lower()
        return f"urn:legacy:error:{name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors - all of them abort startup
class ConfigurationError(LegacyAppError):
    """Configuration error."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


class MissingPropertyError(ConfigurationError):
    """Required properties are missing from the properties store."""

    def __init__(self, keys: Iterable[str], source: Optional[str] = None):
        """
        Initialize missing property error.

        Args:
            keys: Dotted property keys that could not be resolved
            source: Properties file that was consulted
        """
        self.keys = sorted(keys)
        message = f"Missing required properties: {', '.join(self.keys)}"
        if source:
            message += f" (source: {source})"
        super().__init__(message, details={"keys": self.keys, "source": source})


class InvalidPropertyError(ConfigurationError):
    """A property is present but its value is unusable."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Invalid property '{key}': {reason}", details={"key": key})


class ComponentScanError(ConfigurationError):
    """A component was registered outside its context's scan roots."""

    def __init__(self, component: str, context: str, reason: str):
        self.component = component
        self.context = context
        super().__init__(
            f"Component '{component}' cannot be registered in the {context} context: {reason}",
            details={"component": component, "context": context},
        )


class NoSuchComponentError(ConfigurationError):
    """No context in the hierarchy can supply the requested type."""

    def __init__(self, component: str, context: str):
        self.component = component
        super().__init__(
            f"No component of type '{component}' available in the {context} context",
            details={"component": component, "context": context},
        )


class RouteConflictError(ConfigurationError):
    """A default view route and a handler claim the same path."""

    def __init__(self, path: str, view_name: str):
        self.path = path
        self.view_name = view_name
        super().__init__(
            f"Path '{path}' is mapped both to view '{view_name}' and to a request handler",
            details={"path": path, "view_name": view_name},
        )


class UploadDirectoryError(ConfigurationError):
    """The upload staging directory cannot be created."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(
            f"Cannot create upload directory '{path}': {reason}", details={"path": path}
        )


# Database Errors
class DatabaseError(LegacyAppError):
    """Base class for database-related errors."""

    def __init__(
        self,
        message: str = "Database error occurred",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class DatabaseConnectionError(DatabaseError):
    """Raised when the pool cannot establish its connections."""

    def __init__(self, message: str = "Failed to connect to database"):
        super().__init__(message, recoverable=False)


class DatabaseNotConnectedError(DatabaseError):
    """Raised when operation attempted without an open pool."""

    http_status = 503
    title = "Service Unavailable"

    def __init__(self):
        super().__init__(
            "Database connection pool is not open. Call open() first.", recoverable=False
        )


class DatabasePoolTimeoutError(DatabaseError):
    """Raised when the connection pool is exhausted and the wait times out."""

    http_status = 503
    title = "Service Unavailable"

    def __init__(self, timeout: float, pool_size: int):
        super().__init__(
            f"Database connection pool exhausted after {timeout}s (pool size: {pool_size})",
            recoverable=True,
            details={"timeout": timeout, "pool_size": pool_size},
        )


# Multipart Errors
class MultipartError(LegacyAppError):
    """Base class for file upload parsing errors."""

    http_status = 400
    title = "Bad Request"

    def __init__(
        self,
        message: str = "Failed to parse multipart request",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


class MultipartParseError(MultipartError):
    """The multipart body is malformed."""


class MaxUploadSizeExceededError(MultipartError):
    """An uploaded file or the whole request exceeds its size limit."""

    http_status = 413
    title = "Payload Too Large"

    def __init__(self, limit: int, scope: str = "request"):
        """
        Initialize upload size error.

        Args:
            limit: Limit in bytes that was exceeded
            scope: Either "file" or "request"
        """
        self.limit = limit
        self.scope = scope
        super().__init__(
            f"Maximum upload size exceeded: {scope} limit is {limit} bytes",
            details={"limit": limit, "scope": scope},
        )
