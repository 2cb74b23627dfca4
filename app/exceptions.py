# =============================================================================
# app/exceptions.py - Harness Exceptions
# =============================================================================
# Exceptions raised by the harness and the handler that turns them into
# JSON responses. Anything that is not a HarnessException is left alone so the
# full traceback reaches the developer.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class HarnessException(Exception):
    """
    Base exception for the harness.

    Carries a machine-readable code, an HTTP status and an optional
    suggestion telling the reader how to fix the problem.
    """

    def __init__(
        self,
        message: str,
        code: str = "HARNESS_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Boot Exceptions
# =============================================================================

class ConfigurationError(HarnessException):
    """Raised at boot when a setting names something that doesn't exist."""

    def __init__(self, setting: str, value: str, allowed: list[str]):
        super().__init__(
            message=f"Unknown {setting}: {value}",
            code="CONFIGURATION_ERROR",
            status_code=500,
            suggestion=f"Use one of: {', '.join(allowed)}",
            details={"setting": setting, "value": value, "allowed": allowed}
        )


# =============================================================================
# Example Exceptions
# =============================================================================

class ExampleNotFoundError(HarnessException):
    """Raised when loading an example the chapter doesn't have."""

    def __init__(self, example_id: str, available: list[str]):
        super().__init__(
            message=f"Example not found: {example_id}",
            code="EXAMPLE_NOT_FOUND",
            status_code=404,
            suggestion=(
                f"Available examples: {', '.join(available)}" if available
                else "This chapter has no examples"
            ),
            details={"example_id": example_id, "available": available}
        )


# =============================================================================
# Storage Exceptions
# =============================================================================

class BlobNotFoundError(HarnessException):
    """Raised when a blob record or its file doesn't exist."""

    def __init__(self, key: str):
        super().__init__(
            message=f"Blob not found: {key}",
            code="BLOB_NOT_FOUND",
            status_code=404,
            details={"key": key}
        )


class InvalidSignatureError(HarnessException):
    """Raised when a signed blob key was tampered with."""

    def __init__(self, signed_key: str):
        super().__init__(
            message="Invalid blob signature",
            code="INVALID_SIGNATURE",
            status_code=404,
            suggestion="Build blob URLs with StorageService.signed_key()",
            details={"signed_key": signed_key}
        )


class StorageIntegrityError(HarnessException):
    """Raised when uploaded bytes don't match the expected checksum."""

    def __init__(self, key: str, expected: str, actual: str):
        super().__init__(
            message=f"Checksum mismatch for blob {key}",
            code="STORAGE_INTEGRITY_ERROR",
            status_code=422,
            details={"key": key, "expected": expected, "actual": actual}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def harness_exception_handler(
    request: Request,
    exc: HarnessException
) -> JSONResponse:
    """
    Convert HarnessException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
