"""urlauthz error-code hierarchy.

Every failure the rule engine can surface is a concrete exception class
carrying a stable error code.

Hierarchy
---------
::

    UrlAuthzError
    +-- ConfigurationError    (AZ-C1xx)
    +-- EvaluationError       (AZ-E2xx)
    +-- AccessDeniedError     (AZ-D3xx)

Configuration errors are raised while rules are being registered and
compiled, i.e. at application startup.  Evaluation errors are raised at
request time when an access requirement cannot be resolved against the
security context.

Usage
-----
Raise concrete subclasses directly::

    raise InvalidArgument("role cannot be empty")

Catch by category::

    try:
        ...
    except EvaluationError:
        # handles MissingCapability, UnknownFunction
        ...
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class UrlAuthzError(Exception):
    """Base exception for all urlauthz errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"AZ-C100"``.
    http_status : int
        Recommended HTTP status code for this error.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "AZ-000"
    http_status: int = 500
    message: str = "Unknown authorization error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error into a JSON-friendly error envelope."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class ConfigurationError(UrlAuthzError):
    """AZ-C1xx -- Rule configuration errors (startup only)."""

    code = "AZ-C1XX"
    http_status = 500


class EvaluationError(UrlAuthzError):
    """AZ-E2xx -- Access requirement evaluation errors (request time)."""

    code = "AZ-E2XX"
    http_status = 500


class AccessDeniedError(UrlAuthzError):
    """AZ-D3xx -- The authorization decision was negative."""

    code = "AZ-D3XX"
    http_status = 403


# ===================================================================
# AZ-C1xx  Configuration Errors
# ===================================================================

class InvalidArgument(ConfigurationError):
    """AZ-C100 -- A configuration call received an unusable argument."""

    code = "AZ-C100"
    message = "Invalid argument supplied to the authorization configuration"
    resolution = "Fix the offending rule definition and restart."


class IllegalState(ConfigurationError):
    """AZ-C101 -- The operation is not allowed in the current state."""

    code = "AZ-C101"
    message = "Operation not permitted in the current configuration state"
    resolution = (
        "Register every rule before the registry is compiled."
    )


class InvalidExpression(ConfigurationError):
    """AZ-C102 -- A raw access expression could not be parsed."""

    code = "AZ-C102"
    message = "Access expression is malformed"
    resolution = (
        "Use only the supported functions combined with and/or/not."
    )


# ===================================================================
# AZ-E2xx  Evaluation Errors
# ===================================================================

class MissingCapability(EvaluationError):
    """AZ-E200 -- The context does not provide what the expression needs."""

    code = "AZ-E200"
    message = "Security context does not provide the required capability"
    resolution = (
        "Ensure the request and security context carry the data the "
        "access requirement references."
    )


class UnknownFunction(EvaluationError):
    """AZ-E201 -- The expression calls a function the handler does not know."""

    code = "AZ-E201"
    message = "Access expression references an unknown function"
    resolution = "Register the function with the expression handler."


# ===================================================================
# AZ-D3xx  Access Denied
# ===================================================================

class AccessDenied(AccessDeniedError):
    """AZ-D300 -- Access to the requested resource was denied."""

    code = "AZ-D300"
    message = "Access is denied"
    resolution = (
        "Authenticate with a principal holding the required authorities."
    )

