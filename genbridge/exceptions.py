"""
Custom exception hierarchy for GenBridge.

Structured error handling with clear categories:
- Configuration errors (caught at construction, before any network call)
- Dispatch errors (no content generator for the requested provider)
- Translation call errors (a vendor call failed during generate/stream/embed)

Validation of an adapter config is NOT an error: see
`genbridge.llm.validation.ValidationResult`, which is returned, never raised.

Usage:
    from genbridge.exceptions import TranslationCallError

    try:
        response = await generator.generate_content(model=m, contents=c)
    except TranslationCallError as e:
        logger.warning("generation failed", extra={"status_code": e.status_code})
"""

from __future__ import annotations

from typing import Optional


class GenBridgeError(Exception):
    """
    Base exception for all GenBridge errors.

    All custom exceptions inherit from this, so you can catch
    `GenBridgeError` to handle any library-specific error.
    """

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


# ── Configuration Errors ──────────────────────────────────────────


class ConfigurationError(GenBridgeError):
    """
    Raised when a content generator cannot be built from its config.

    Examples:
    - Empty API key for the selected provider
    - Profile file missing, empty, or not matching the schema
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider


class UnsupportedProviderError(GenBridgeError):
    """
    Raised when the factory has no dispatch target for a provider
    (or auth type).
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider


# ── Translation Errors ────────────────────────────────────────────


class TranslationCallError(GenBridgeError):
    """
    Raised when the underlying vendor call fails.

    Carries the originating operation (e.g. "generate_content") and,
    when the vendor reported one, the HTTP status code. Never retried
    internally; the caller decides what to do.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message, details=details)
        self.provider = provider
        self.operation = operation
        self.status_code = status_code
