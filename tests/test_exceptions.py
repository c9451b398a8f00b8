"""Tests for custom exceptions."""

import pytest

from legacy.core.exceptions import (
    ComponentScanError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseNotConnectedError,
    DatabasePoolTimeoutError,
    LegacyAppError,
    MaxUploadSizeExceededError,
    MissingPropertyError,
    MultipartParseError,
    NoSuchComponentError,
    RouteConflictError,
    UploadDirectoryError,
)


def test_legacy_app_error():
    """Test LegacyAppError base exception."""
    error = LegacyAppError("Test error")
    assert error.message == "Test error"
    assert error.recoverable is False
    assert error.http_status == 500
    assert str(error) == "Test error"


def test_error_type_uri_from_class_name():
    """Test problem type URI derivation."""
    assert LegacyAppError("x").error_type_uri == "urn:legacy:error:legacy-app-error"
    assert MultipartParseError().error_type_uri == "urn:legacy:error:multipart-parse-error"


def test_to_dict():
    """Test to_dict serialization."""
    error = LegacyAppError("Boom", recoverable=True, details={"key": "value"})
    data = error.to_dict()
    assert data["error"] == "LegacyAppError"
    assert data["message"] == "Boom"
    assert data["recoverable"] is True
    assert data["details"] == {"key": "value"}
    assert "timestamp" in data


def test_missing_property_error_sorts_keys():
    """Test MissingPropertyError lists every missing key."""
    error = MissingPropertyError(["db.url", "db.driver"], source="database.properties")
    assert error.keys == ["db.driver", "db.url"]
    assert "db.driver, db.url" in error.message
    assert "database.properties" in error.message
    assert isinstance(error, ConfigurationError)


@pytest.mark.parametrize(
    "error",
    [
        MissingPropertyError(["db.url"]),
        ComponentScanError("HealthController", "root", "excluded"),
        NoSuchComponentError("HealthService", "web"),
        RouteConflictError("/", "index"),
        UploadDirectoryError("/srv/upload", "read-only file system"),
    ],
)
def test_startup_errors_are_configuration_errors(error):
    """Test that every startup failure is a non-recoverable ConfigurationError."""
    assert isinstance(error, ConfigurationError)
    assert error.recoverable is False


def test_route_conflict_error():
    """Test RouteConflictError attributes."""
    error = RouteConflictError("/", "index")
    assert error.path == "/"
    assert error.view_name == "index"
    assert "'/'" in error.message


def test_database_errors():
    """Test database error status codes."""
    assert DatabaseConnectionError().http_status == 500
    assert DatabaseNotConnectedError().http_status == 503
    timeout = DatabasePoolTimeoutError(timeout=30.0, pool_size=10)
    assert timeout.http_status == 503
    assert timeout.recoverable is True
    assert timeout.details == {"timeout": 30.0, "pool_size": 10}


def test_max_upload_size_exceeded_error():
    """Test MaxUploadSizeExceededError."""
    error = MaxUploadSizeExceededError(20971520, scope="file")
    assert error.http_status == 413
    assert error.limit == 20971520
    assert error.scope == "file"
    assert error.details == {"limit": 20971520, "scope": "file"}


def test_multipart_parse_error_is_bad_request():
    """Test MultipartParseError status."""
    assert MultipartParseError("Missing boundary").http_status == 400
