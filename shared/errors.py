"""
Shared error handling for the rollout engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class RolloutException(Exception):
    """Base exception for the rollout engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(RolloutException):
    """Invalid engine configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class StoreConnectionError(RolloutException):
    """Key-value store could not be reached."""

    def __init__(self, store: str, message: str = "Store connection failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_CONNECTION_ERROR", f"{store}: {message}", details)
