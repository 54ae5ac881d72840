"""
Inflow Unified Error Classification System.

This module provides a hierarchy of exceptions for the failures that can
occur while preparing and executing a workflow run.

Error Categories:
-----------------
1. Retryable Errors: Transient failures that may succeed on retry
   - Rate limiting (HTTP 429)
   - Service unavailable (HTTP 503)
   - Connection failures and timeouts

2. Permanent Errors: Failures that won't succeed on retry
   - Invalid or incomplete node configuration
   - Cyclic workflow graphs
   - Node types without a registered executor
   - Missing workflows

The step runner retries RetryableError subclasses under its retry policy
and fails immediately on PermanentError subclasses.

Usage:
------
    from inflow.errors import ConfigurationError, TransientError

    if not config.endpoint:
        raise ConfigurationError("HTTP Request node: No endpoint configured")

    try:
        response = await client.request(method, endpoint)
    except httpx.RequestError as e:
        raise TransientError("HTTP request failed", original_error=e)
"""

from typing import Any


class InflowError(Exception):
    """
    Base exception for all Inflow errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error (optional)
        original_error: The underlying exception that caused this error (optional)
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.original_error:
            base += f" | Caused by: {type(self.original_error).__name__}: {self.original_error}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None
        }


# =============================================================================
# Retryable Errors - Transient failures that may succeed on retry
# =============================================================================

class RetryableError(InflowError):
    """
    Base class for errors that may succeed on retry.

    Attributes:
        retry_after: Suggested wait time before retry (seconds), if known
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)
        self.retry_after = retry_after


class TransientError(RetryableError):
    """
    Generic retryable error for failures of external calls inside a step.

    Use this when the error is known to be transient but doesn't fit
    other specific categories.
    """
    pass


class RateLimitError(RetryableError):
    """
    Raised when an upstream API rate limit is exceeded (HTTP 429).

    The retry_after attribute carries the Retry-After header value when
    the server provided one; the retry policy honors it.
    """

    def __init__(
        self,
        message: str = "API rate limit exceeded",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after, details, original_error)


class ServiceUnavailableError(RetryableError):
    """Raised when an upstream service is temporarily unavailable (HTTP 503)."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after, details, original_error)


class ConnectionError(RetryableError):
    """
    Raised when connection to an upstream service fails.

    This includes DNS resolution failures, refused connections and
    unreachable networks.
    """

    def __init__(
        self,
        message: str = "Failed to connect to service",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, retry_after=None, details=details, original_error=original_error)


class TimeoutError(RetryableError):
    """
    Raised when an upstream call exceeds its time limit.

    Attributes:
        timeout: The timeout value that was exceeded (seconds)
    """

    def __init__(
        self,
        message: str = "Request timed out",
        timeout: float | None = None,
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        details = details or {}
        details["timeout"] = timeout
        super().__init__(message, retry_after=None, details=details, original_error=original_error)
        self.timeout = timeout


# =============================================================================
# Permanent Errors - Failures that won't succeed on retry
# =============================================================================

class PermanentError(InflowError):
    """
    Base class for errors that will not succeed on retry.

    Raising one of these inside a step makes the step runner skip its
    retry policy and fail the run immediately.
    """
    pass


class ConfigurationError(PermanentError):
    """
    Raised when a node's configuration is incomplete or invalid.

    Common causes:
    - Missing required field (endpoint, prompt)
    - Unsupported value (HTTP method, AI provider)
    - Missing API credentials
    """

    def __init__(
        self,
        message: str = "Configuration error",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class InvalidRequestError(PermanentError):
    """Raised when an upstream API rejects a request (HTTP 400/422)."""

    def __init__(
        self,
        message: str = "Invalid request parameters",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class AuthenticationError(PermanentError):
    """Raised when an upstream API refuses credentials (HTTP 401/403)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


class NotFoundError(PermanentError):
    """Raised when an upstream resource is not found (HTTP 404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
        original_error: Exception | None = None
    ):
        super().__init__(message, details, original_error)


# =============================================================================
# Workflow Errors
# =============================================================================

class CycleError(PermanentError):
    """
    Raised when the connection graph of a workflow is not acyclic.

    Attributes:
        cycle_nodes: IDs of the nodes that could not be scheduled
    """

    def __init__(
        self,
        cycle_nodes: list[str],
        message: str | None = None,
    ):
        self.cycle_nodes = list(cycle_nodes)
        message = message or f"Workflow contains a cycle involving nodes: {', '.join(self.cycle_nodes)}"
        super().__init__(message, details={"cycle_nodes": self.cycle_nodes})


class InvalidWorkflowError(PermanentError):
    """Raised when node IDs are duplicated or a connection points at an unknown node."""
    pass


class WorkflowNotFoundError(PermanentError):
    """Raised by a workflow store when the requested workflow does not exist."""

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}", details={"workflow_id": workflow_id})
        self.workflow_id = workflow_id


class UnknownNodeTypeError(PermanentError):
    """Raised when no executor is registered for a node type."""

    def __init__(self, node_type: str):
        super().__init__(
            f"No executor found for node type: {node_type}",
            details={"node_type": str(node_type)},
        )
        self.node_type = node_type


class InvalidExecutorOutputError(PermanentError):
    """Raised when an executor returns something other than a context mapping."""
    pass


class StepRetriesExhaustedError(PermanentError):
    """
    Raised by the step runner when a retryable failure persists past the
    retry policy's attempt cap.

    Attributes:
        step_name: Name of the step that failed
        attempts: Number of attempts made
    """

    def __init__(self, step_name: str, attempts: int, original_error: Exception):
        super().__init__(
            f"Step '{step_name}' failed after {attempts} attempts",
            details={"step_name": step_name, "attempts": attempts},
            original_error=original_error,
        )
        self.step_name = step_name
        self.attempts = attempts


class RunStateError(PermanentError):
    """Raised on an illegal run state transition."""
    pass


class WorkflowExecutionError(InflowError):
    """
    Raised by the trigger entry point when a run ends in the FAILED state.

    Attributes:
        result: The ExecutionResult of the failed run
    """

    def __init__(self, result: Any):
        error = result.error
        super().__init__(
            f"Workflow {result.workflow_id} failed: {error.message if isinstance(error, InflowError) else error}",
            details={"run_id": result.run_id, "failed_node_id": result.failed_node_id},
            original_error=error,
        )
        self.result = result


# =============================================================================
# Helper Functions
# =============================================================================

def is_retryable(error: Exception) -> bool:
    """
    Check if an error is retryable.

    Args:
        error: The exception to check

    Returns:
        True if the error is an instance of RetryableError
    """
    return isinstance(error, RetryableError)


def classify_http_error(status_code: int, message: str = "", headers: dict | None = None) -> InflowError:
    """
    Classify an HTTP error based on status code.

    Args:
        status_code: HTTP status code
        message: Error message from response
        headers: Response headers (used to extract Retry-After)

    Returns:
        Appropriate InflowError subclass instance

    Example:
        if response.status_code >= 400:
            raise classify_http_error(
                response.status_code,
                response.text,
                dict(response.headers)
            )
    """
    headers = headers or {}
    retry_after = None

    for name, value in headers.items():
        if name.lower() == "retry-after":
            try:
                retry_after = float(value)
            except (ValueError, TypeError):
                pass

    details = {"status_code": status_code}

    if status_code == 429:
        return RateLimitError(
            message=message or "API rate limit exceeded",
            retry_after=retry_after,
            details=details
        )
    elif status_code in (401, 403):
        return AuthenticationError(
            message=message or f"Authentication failed (HTTP {status_code})",
            details=details
        )
    elif status_code in (400, 422):
        return InvalidRequestError(
            message=message or "Invalid request parameters",
            details=details
        )
    elif status_code == 404:
        return NotFoundError(
            message=message or "Resource not found",
            details=details
        )
    elif status_code == 408:
        return TimeoutError(
            message=message or "Request timed out (HTTP 408)",
            details=details
        )
    elif status_code == 503:
        return ServiceUnavailableError(
            message=message or "Service temporarily unavailable",
            retry_after=retry_after,
            details=details
        )
    elif status_code >= 500:
        return TransientError(
            message=message or f"Server error (HTTP {status_code})",
            details=details
        )
    else:
        return PermanentError(
            message=message or f"HTTP error {status_code}",
            details=details
        )


def wrap_exception(
    error: Exception,
    context: str = "",
    retryable: bool | None = None
) -> InflowError:
    """
    Wrap a generic exception in an appropriate InflowError.

    InflowErrors are returned unchanged. Otherwise the exception type and
    message decide the category; unknown errors default to permanent so a
    bug inside a step cannot retry forever.

    Args:
        error: The original exception
        context: Additional context about where the error occurred
        retryable: Override retryability detection (None = auto-detect)

    Returns:
        InflowError instance wrapping the original error
    """
    if isinstance(error, InflowError):
        return error

    error_str = str(error).lower()
    error_type = type(error).__name__

    message = f"{context}: {error}" if context else str(error)

    if retryable is True:
        return TransientError(message=message, original_error=error)
    elif retryable is False:
        return PermanentError(message=message, original_error=error)

    if "timeout" in error_str or "timed out" in error_str or "Timeout" in error_type:
        return TimeoutError(message=message, original_error=error)

    if error_type in ("ConnectionError", "ConnectError", "ConnectionRefusedError", "ConnectionResetError"):
        return ConnectionError(message=message, original_error=error)

    if any(x in error_str for x in ["rate limit", "too many requests"]):
        return RateLimitError(message=message, original_error=error)

    return PermanentError(message=message, original_error=error)
