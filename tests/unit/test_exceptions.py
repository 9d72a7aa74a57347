"""Unit tests for custom exception hierarchy"""
import logging
import pytest
from datetime import datetime
from fitcoach.exceptions import (
    ProgressionError,
    ValidationError,
    ConfigurationError,
    PersistenceError,
    ConcurrentUpdateError,
)


class TestProgressionError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = ProgressionError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = ProgressionError(
            message="Save failed",
            user_id="u-1",
            operation="complete_activity",
            context={"activity_date": "2024-03-15"},
            user_message="Could not save your workout"
        )
        assert error.user_id == "u-1"
        assert error.operation == "complete_activity"
        assert error.context["activity_date"] == "2024-03-15"
        assert error.user_message == "Could not save your workout"

    def test_exception_with_cause(self):
        """Test exception wrapping another exception"""
        original_error = ValueError("Invalid value")
        error = ProgressionError(message="Validation failed", cause=original_error)
        assert error.cause == original_error

    def test_logs_on_creation(self, caplog):
        """Test errors log themselves with structured context"""
        with caplog.at_level(logging.ERROR, logger="fitcoach.exceptions"):
            ProgressionError("Boom", user_id="u-9")

        assert "ProgressionError: Boom" in caplog.text
        assert caplog.records[-1].user_id == "u-9"


class TestValidationError:
    """Test validation error"""

    def test_validation_error(self):
        """Test validation error with field"""
        error = ValidationError(message="Must be non-negative", field="pushups", value=-5)
        assert error.field == "pushups"
        assert error.value == -5
        assert "Invalid pushups" in error.user_message
        assert isinstance(error, ProgressionError)


class TestConfigurationError:

    def test_configuration_error(self):
        error = ConfigurationError("Ranks overlap", config_key="ranks")
        assert error.config_key == "ranks"
        assert "not properly configured" in error.user_message


class TestPersistenceErrors:
    """Test persistence-related errors"""

    def test_concurrent_update_is_persistence_error(self):
        """Test callers catching PersistenceError also see conflicts"""
        error = ConcurrentUpdateError(expected_version=4, user_id="u-1")
        assert isinstance(error, PersistenceError)
        assert error.expected_version == 4
        assert error.context["expected_version"] == 4

    def test_persistence_error_user_message(self):
        error = PersistenceError("Write failed")
        assert "saving your progress" in error.user_message

