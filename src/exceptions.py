"""
Exception hierarchy for the wellness gamification engine

Every error carries the operation and user it relates to, logs itself when
created and serializes to a dict for the command line output.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class WellnessAgentError(Exception):
    """
    Base exception for all wellness engine errors

    Example:
        raise WellnessAgentError(
            message="Failed to save user progress",
            user_id="user_123",
            operation="save_user_state",
            context={"session_mode": "voice"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        self._log_error()

    def _log_error(self) -> None:
        extra = {
            "error_type": self.__class__.__name__,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
        }
        logger.error(
            f"{self.__class__.__name__} during {self.operation or 'unknown operation'}: {self.message}",
            extra=extra,
            exc_info=self.cause,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Structured form printed by the command line entry point"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


# ==========================================
# Validation Errors (Input Snapshots)
# ==========================================

class ValidationError(WellnessAgentError):
    """
    Raised when an input snapshot or session record cannot be parsed

    Example:
        raise ValidationError(
            message="Session file is not valid JSON",
            field="session",
            value="session.json"
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
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class DatabaseError(WellnessAgentError):
    """
    Base class for storage-related errors
    """
    pass


class QueryError(DatabaseError):
    """Reading or writing a user document failed"""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        **kwargs
    ):
        self.query = query
        super().__init__(
            message=message,
            context={"query": query},
            **kwargs
        )


class RecordNotFoundError(DatabaseError):
    """Requested user document does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(WellnessAgentError):
    """System configuration or rule catalog is invalid"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> WellnessAgentError:
    """
    Wrap store exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate WellnessAgentError subclass

    Example:
        try:
            await store.save_user_state(state)
        except Exception as e:
            raise wrap_external_exception(
                e,
                operation="save_user_state",
                user_id=state.user_id,
            )
    """
    if isinstance(error, WellnessAgentError):
        return error

    if isinstance(error, KeyError):
        return RecordNotFoundError(
            message=f"{operation} failed: missing record {error}",
            record_type="User",
            record_id=user_id,
            user_id=user_id,
            operation=operation,
            cause=error
        )
    elif isinstance(error, (OSError, TimeoutError)):
        return QueryError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return DatabaseError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
