"""
Standardized exception hierarchy for the progression engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class ProgressionError(Exception):
    """
    Base exception for all fitcoach errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise ProgressionError(
            message="Failed to save progression",
            user_id="u-123",
            operation="complete_activity",
            context={"activity_date": "2024-01-15"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)


# ==========================================
# Validation Errors (engine input)
# ==========================================

class ValidationError(ProgressionError):
    """
    Raised when engine input fails validation

    Examples:
    - Negative pushup count from the assessment flow
    - Non-integer XP value
    - A timestamp passed where a calendar date is expected

    Example:
        raise ValidationError(
            message="Must be a non-negative integer",
            field="pushups",
            value=-5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": repr(value)},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(ProgressionError):
    """Rank bands, badge catalogue or environment settings are invalid"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class PersistenceError(ProgressionError):
    """Storing or loading progression state failed"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault(
            "user_message",
            "We encountered an issue saving your progress. Please try again."
        )
        super().__init__(message=message, **kwargs)


class ConcurrentUpdateError(PersistenceError):
    """Progression row changed since it was read (version mismatch)"""

    def __init__(
        self,
        message: str = "Progression was modified concurrently",
        expected_version: Optional[int] = None,
        **kwargs
    ):
        self.expected_version = expected_version
        super().__init__(
            message=message,
            context={"expected_version": expected_version},
            **kwargs
        )

