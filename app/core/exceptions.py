"""
Core exceptions for ConversAI.
Custom exception classes for structured error handling.
"""

from typing import Optional, Dict, Any


class ConversAIException(Exception):
    """Base exception for ConversAI errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "CONVERSAI_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Not Found Exceptions
# =========================

class NotFoundException(ConversAIException):
    """Base exception for missing records."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=404,
            details=details
        )


class ConversationNotFoundException(NotFoundException):
    """Raised when a conversation id does not exist."""

    def __init__(self, conversation_id: str):
        super().__init__(
            message="Conversation not found",
            error_code="CONVERSATION_NOT_FOUND",
            details={"conversation_id": conversation_id}
        )


class AgentNotFoundException(NotFoundException):
    """Raised when an agent id does not exist for the caller."""

    def __init__(self, agent_id: str):
        super().__init__(
            message="Agent not found",
            error_code="AGENT_NOT_FOUND",
            details={"agent_id": agent_id}
        )


# =========================
# Upstream Exceptions
# =========================

class UpstreamUnavailableException(ConversAIException):
    """Base exception for failed calls to external providers."""

    def __init__(self, message: str, error_code: str = "UPSTREAM_UNAVAILABLE", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=503,
            details=details
        )


class LLMException(UpstreamUnavailableException):
    """Base exception for LLM errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="LLM_ERROR", details=details)


class LLMAPIException(LLMException):
    """Raised when the chat API returns an error."""

    def __init__(self, api_error: str):
        super().__init__(
            message=f"LLM API error: {api_error}",
            details={"api_error": api_error}
        )


class LLMTimeoutException(LLMException):
    """Raised when LLM processing times out."""

    def __init__(self, timeout_seconds: float):
        super().__init__(
            message=f"LLM processing timed out after {timeout_seconds} seconds",
            details={"timeout_seconds": timeout_seconds}
        )


class LLMRateLimitException(LLMException):
    """Raised when LLM API rate limit is exceeded."""

    def __init__(self, retry_after: Optional[float] = None):
        super().__init__(
            message="LLM API rate limit exceeded",
            details={"retry_after_seconds": retry_after}
        )


class TTSException(UpstreamUnavailableException):
    """Raised when speech synthesis fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code="TTS_ERROR", details=details)


class RoomServiceException(UpstreamUnavailableException):
    """Raised when a LiveKit room call fails."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Room service '{operation}' failed: {error}",
            error_code="ROOM_SERVICE_ERROR",
            details={"operation": operation, "error": error}
        )


# =========================
# Request Exceptions
# =========================

class ValidationException(ConversAIException):
    """Raised when a request is missing required fields."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details=details
        )


class AuthenticationException(ConversAIException):
    """Raised when a bearer token cannot be resolved to a user."""

    def __init__(self, reason: str):
        super().__init__(
            message="Please authenticate.",
            error_code="AUTHENTICATION_ERROR",
            status_code=401,
            details={"reason": reason}
        )


# =========================
# Infrastructure Exceptions
# =========================

class StorageException(ConversAIException):
    """Raised when a database read or write fails."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Storage operation '{operation}' failed",
            error_code="STORAGE_ERROR",
            status_code=500,
            details={"operation": operation, "error": error}
        )


class ConfigurationException(ConversAIException):
    """Raised when a required setting is missing."""

    def __init__(self, setting: str):
        super().__init__(
            message=f"{setting} is not configured",
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            details={"setting": setting}
        )
