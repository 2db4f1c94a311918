"""
Custom Exception Hierarchy for the linkerd-link provider

Every failure of a lifecycle operation is raised as one of these types and
handed back to the orchestration engine, which owns retry policy. The
hierarchy keeps error codes and context so the transport adapter can render
structured responses.
"""

from typing import Any, Dict, List, Optional


class LinkProviderError(Exception):
    """
    Base exception class for all provider errors.

    Provides structured error information including context, error codes,
    and optional recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recovery_suggestion: Optional[str] = None,
    ) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with error context
            cause: Optional underlying exception that caused this error
            recovery_suggestion: Optional suggestion for error recovery
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.recovery_suggestion = recovery_suggestion

    def __str__(self) -> str:
        """Return a formatted error message with context."""
        result = self.message
        if self.error_code:
            result = f"[{self.error_code}] {result}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            result += f" (context: {context_str})"
        if self.cause:
            result += f" (caused by: {self.cause})"
        if self.recovery_suggestion:
            result += f" (suggestion: {self.recovery_suggestion})"
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "recovery_suggestion": self.recovery_suggestion,
        }


# Validation-related exceptions
class ValidationError(LinkProviderError):
    """Base class for input validation errors. Raised before any subprocess runs."""

    pass


class UnknownResourceTypeError(ValidationError):
    """Raised when a request addresses a resource type this provider does not own."""

    def __init__(
        self, message: str, resource_type: Optional[str] = None, **kwargs: Any
    ) -> None:
        context = kwargs.get("context", {})
        if resource_type is not None:
            context["resource_type"] = resource_type
        kwargs["context"] = context
        kwargs.setdefault("error_code", "UNKNOWN_RESOURCE_TYPE")
        super().__init__(message, **kwargs)
        self.resource_type = resource_type


class InvalidCredentialFormatError(ValidationError):
    """Raised when a kubeconfig field is neither a string nor a structure."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        observed_type: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if field:
            context["field"] = field
        if observed_type:
            context["observed_type"] = observed_type
        kwargs["context"] = context
        kwargs.setdefault("error_code", "INVALID_CREDENTIAL_FORMAT")
        kwargs.setdefault(
            "recovery_suggestion",
            "Pass the kubeconfig either as a serialized string or as a structure",
        )
        super().__init__(message, **kwargs)
        self.field = field
        self.observed_type = observed_type


class MissingPropertyError(ValidationError):
    """Raised when a required property is absent from a property map."""

    def __init__(
        self, message: str, missing_keys: Optional[List[str]] = None, **kwargs: Any
    ) -> None:
        context = kwargs.get("context", {})
        if missing_keys:
            context["missing_keys"] = missing_keys
        kwargs["context"] = context
        kwargs.setdefault("error_code", "MISSING_PROPERTY")
        super().__init__(message, **kwargs)
        self.missing_keys = missing_keys or []


class NormalizationError(LinkProviderError):
    """Raised when a credential cannot be parsed or serialized."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        if field:
            context["field"] = field
        kwargs["context"] = context
        kwargs.setdefault("error_code", "NORMALIZATION_FAILED")
        super().__init__(message, **kwargs)
        self.field = field


# Process-related exceptions
class SubprocessError(LinkProviderError):
    """Raised when the generator or applier tool exits non-zero."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if command:
            context["command"] = " ".join(command)
        if returncode is not None:
            context["returncode"] = returncode
        kwargs["context"] = context
        kwargs.setdefault("error_code", "SUBPROCESS_FAILED")
        if stderr and stderr.strip() not in message:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message, **kwargs)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class OperationTimeoutError(SubprocessError):
    """Raised when a pipeline stage exceeds its configured timeout."""

    def __init__(
        self, message: str, timeout_value: Optional[int] = None, **kwargs: Any
    ) -> None:
        context = kwargs.get("context", {})
        if timeout_value:
            context["timeout"] = f"{timeout_value}s"
        kwargs["context"] = context
        kwargs.setdefault("error_code", "OPERATION_TIMEOUT")
        super().__init__(message, **kwargs)
        self.timeout_value = timeout_value


class TransportError(LinkProviderError):
    """Raised when a request envelope or property map cannot be decoded."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "TRANSPORT_ERROR")
        super().__init__(message, **kwargs)


class UpdateError(LinkProviderError):
    """Raised when the delete-then-create sequence of an update fails.

    ``inconsistent`` is True when the old link was already torn down and the
    new one could not be created; the resource then exists nowhere and must be
    reconciled by the operator.
    """

    def __init__(
        self,
        message: str,
        phase: str,
        inconsistent: bool = False,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        context["phase"] = phase
        if inconsistent:
            context["inconsistent"] = True
        kwargs["context"] = context
        kwargs.setdefault(
            "error_code",
            "UPDATE_LEFT_INCONSISTENT" if inconsistent else "UPDATE_FAILED",
        )
        if inconsistent:
            kwargs.setdefault(
                "recovery_suggestion",
                "The previous link was removed; re-run the update or recreate the link",
            )
        super().__init__(message, **kwargs)
        self.phase = phase
        self.inconsistent = inconsistent


class ConfigError(LinkProviderError):
    """Configuration loading or validation error."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "INVALID_CONFIG")
        kwargs.setdefault(
            "recovery_suggestion", "Check configuration file and environment variables"
        )
        super().__init__(message, **kwargs)


__all__ = [
    "ConfigError",
    "InvalidCredentialFormatError",
    "LinkProviderError",
    "MissingPropertyError",
    "NormalizationError",
    "OperationTimeoutError",
    "SubprocessError",
    "TransportError",
    "UnknownResourceTypeError",
    "UpdateError",
    "ValidationError",
]
