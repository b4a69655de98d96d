"""Error handling utilities for the agent chat demos."""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Enumeration of error types raised by the agent chat layer."""

    # Bedrock API Errors
    BEDROCK_RATE_LIMIT = "BEDROCK_RATE_LIMIT"
    BEDROCK_TIMEOUT = "BEDROCK_TIMEOUT"
    BEDROCK_AUTH_ERROR = "BEDROCK_AUTH_ERROR"
    BEDROCK_MODEL_ERROR = "BEDROCK_MODEL_ERROR"
    BEDROCK_INVALID_REQUEST = "BEDROCK_INVALID_REQUEST"
    BEDROCK_SERVICE_ERROR = "BEDROCK_SERVICE_ERROR"
    BEDROCK_TOOL_LOOP_EXCEEDED = "BEDROCK_TOOL_LOOP_EXCEEDED"

    # Conversation Errors
    INVALID_SEQUENCE = "INVALID_SEQUENCE"

    # Strategy Errors
    STRATEGY_PARSE_FAILED = "STRATEGY_PARSE_FAILED"

    # Orchestration Errors
    CHAT_ALREADY_COMPLETED = "CHAT_ALREADY_COMPLETED"
    CHAT_ALREADY_RUNNING = "CHAT_ALREADY_RUNNING"

    # Configuration Errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # General Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorContext:
    """
    Context information for errors in the agent chat layer.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Human-readable error message
        recoverable: Whether the error can be recovered from
        fallback_action: Optional description of fallback action taken
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    recoverable: bool
    fallback_action: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error context
        """
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "fallback_action": self.fallback_action,
            "details": self.details or {},
            "original_exception": str(self.original_exception) if self.original_exception else None
        }


class AgentChatError(Exception):
    """
    Base exception for all agent chat errors.

    Wraps errors with an ErrorContext so callers can tell recoverable
    conditions from fatal ones.

    Attributes:
        context: ErrorContext with detailed error information
    """

    def __init__(self, context: ErrorContext):
        self.context = context
        super().__init__(context.message)

    def __str__(self) -> str:
        base = f"{self.context.error_type.value}: {self.context.message}"
        if self.context.fallback_action:
            base += f" (Fallback: {self.context.fallback_action})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        return self.context.to_dict()


class RemoteCallError(AgentChatError):
    """Exception for failed language model calls (network, throttling, bad completions)."""

    @classmethod
    def from_client_error(
        cls,
        error: Exception,
        operation: str,
        recoverable: bool = False,
        fallback_action: Optional[str] = None
    ) -> "RemoteCallError":
        """
        Create RemoteCallError from boto3 ClientError.

        Args:
            error: Original boto3 ClientError
            operation: Description of operation that failed
            recoverable: Whether error is recoverable
            fallback_action: Optional fallback action description

        Returns:
            RemoteCallError instance
        """
        error_code = "Unknown"
        error_message = str(error)

        if hasattr(error, 'response'):
            error_info = error.response.get("Error", {})
            error_code = error_info.get("Code", "Unknown")
            error_message = error_info.get("Message", str(error))

        error_type_map = {
            "ThrottlingException": ErrorType.BEDROCK_RATE_LIMIT,
            "TooManyRequestsException": ErrorType.BEDROCK_RATE_LIMIT,
            "RequestTimeout": ErrorType.BEDROCK_TIMEOUT,
            "RequestTimeoutException": ErrorType.BEDROCK_TIMEOUT,
            "UnauthorizedException": ErrorType.BEDROCK_AUTH_ERROR,
            "AccessDeniedException": ErrorType.BEDROCK_AUTH_ERROR,
            "ValidationException": ErrorType.BEDROCK_INVALID_REQUEST,
            "ModelNotReadyException": ErrorType.BEDROCK_MODEL_ERROR,
            "ModelTimeoutException": ErrorType.BEDROCK_TIMEOUT,
            "ModelErrorException": ErrorType.BEDROCK_MODEL_ERROR,
            "ServiceUnavailableException": ErrorType.BEDROCK_SERVICE_ERROR,
            "InternalServerException": ErrorType.BEDROCK_SERVICE_ERROR,
        }

        error_type = error_type_map.get(error_code, ErrorType.BEDROCK_SERVICE_ERROR)

        context = ErrorContext(
            error_type=error_type,
            message=f"Bedrock API error during {operation}: {error_message}",
            recoverable=recoverable,
            fallback_action=fallback_action,
            details={
                "error_code": error_code,
                "operation": operation
            },
            original_exception=error
        )

        return cls(context)

    @classmethod
    def unexpected(cls, error: Exception, operation: str) -> "RemoteCallError":
        """Wrap a non-ClientError failure raised while talking to the model."""
        context = ErrorContext(
            error_type=ErrorType.BEDROCK_SERVICE_ERROR,
            message=f"Unexpected error during {operation}: {str(error)}",
            recoverable=False,
            details={"operation": operation},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def tool_loop_exceeded(cls, max_tool_rounds: int) -> "RemoteCallError":
        context = ErrorContext(
            error_type=ErrorType.BEDROCK_TOOL_LOOP_EXCEEDED,
            message=f"Model kept requesting tools after {max_tool_rounds} rounds",
            recoverable=False,
            details={"max_tool_rounds": max_tool_rounds}
        )
        return cls(context)


class InvalidSequenceError(AgentChatError):
    """Raised when a message is appended out of sequence order."""

    @classmethod
    def out_of_order(cls, sequence_number: int, last_sequence_number: int) -> "InvalidSequenceError":
        context = ErrorContext(
            error_type=ErrorType.INVALID_SEQUENCE,
            message=(
                f"Message sequence number {sequence_number} must be greater than "
                f"the last appended sequence number {last_sequence_number}"
            ),
            recoverable=False,
            details={
                "sequence_number": sequence_number,
                "last_sequence_number": last_sequence_number
            }
        )
        return cls(context)


class StrategyParseError(AgentChatError):
    """Raised when a strategy response cannot be parsed into a decision."""

    @classmethod
    def unknown_agent(
        cls,
        raw_result: str,
        eligible_names: list,
        fallback_action: Optional[str] = None
    ) -> "StrategyParseError":
        """
        Create error for a selection result that names no eligible agent.

        Args:
            raw_result: Text returned by the selection function
            eligible_names: Names the result was matched against
            fallback_action: Optional fallback action description

        Returns:
            StrategyParseError instance
        """
        context = ErrorContext(
            error_type=ErrorType.STRATEGY_PARSE_FAILED,
            message=f"Selection result {raw_result!r} does not name an eligible agent",
            recoverable=True,
            fallback_action=fallback_action or "Select next agent in round-robin order",
            details={"raw_result": raw_result, "eligible_names": list(eligible_names)}
        )
        return cls(context)


class ChatStateError(AgentChatError):
    """Raised when a group chat is invoked in a state that does not allow it."""

    @classmethod
    def already_completed(cls, state: str) -> "ChatStateError":
        context = ErrorContext(
            error_type=ErrorType.CHAT_ALREADY_COMPLETED,
            message=f"Chat is already in terminal state {state}; create a new chat to run again",
            recoverable=False,
            details={"state": state}
        )
        return cls(context)

    @classmethod
    def already_running(cls) -> "ChatStateError":
        context = ErrorContext(
            error_type=ErrorType.CHAT_ALREADY_RUNNING,
            message="Chat is already running",
            recoverable=False
        )
        return cls(context)


class ConfigError(AgentChatError):
    """Exception for missing or invalid configuration."""

    @classmethod
    def missing(cls, config_path: str, error: Optional[Exception] = None) -> "ConfigError":
        context = ErrorContext(
            error_type=ErrorType.CONFIG_MISSING,
            message=f"Configuration file not found: {config_path}",
            recoverable=False,
            details={"config_path": config_path},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def invalid(cls, key: str, reason: str, error: Optional[Exception] = None) -> "ConfigError":
        context = ErrorContext(
            error_type=ErrorType.CONFIG_INVALID,
            message=f"Invalid configuration value for '{key}': {reason}",
            recoverable=False,
            details={"key": key},
            original_exception=error
        )
        return cls(context)
