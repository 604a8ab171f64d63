"""DealScope error hierarchy.

All project exceptions inherit from DealScopeError, so the session boundary can
turn any failure into a message with a single ``except DealScopeError``.

Hierarchy:
    DealScopeError
    ├── ConfigError
    ├── InferenceError
    │   ├── SizeLimitExceeded
    │   ├── TransientServiceError
    │   ├── MalformedResponse
    │   ├── IncompleteResponse
    │   └── InferenceServiceError
    ├── UnsupportedInputFormat
    ├── InputParseError
    ├── StateError
    │   ├── DealModelNotReady
    │   ├── AnalysisInProgress
    │   └── DuplicateRowId
    └── UnknownDealField
"""

from __future__ import annotations


class DealScopeError(Exception):
    """Base class for all DealScope errors."""


class ConfigError(DealScopeError):
    """Invalid or incomplete configuration."""


# =============================================================================
# Inference errors
# =============================================================================

class InferenceError(DealScopeError):
    """Base class for failures of a model inference call."""


class SizeLimitExceeded(InferenceError):
    """Input is larger than the gateway accepts; raised before any network call."""

    def __init__(self, message: str, size: int = 0, limit: int = 0):
        super().__init__(message)
        self.size = size
        self.limit = limit


class TransientServiceError(InferenceError):
    """Empty response or server overload. Surfaced only after retries are exhausted."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class MalformedResponse(InferenceError):
    """The response could not be parsed as JSON or does not match the schema."""


class IncompleteResponse(InferenceError):
    """The response parsed but lacks required top-level fields."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class InferenceServiceError(InferenceError):
    """Non-transient failure reported by the model service."""


# =============================================================================
# Input and state errors
# =============================================================================

class UnsupportedInputFormat(DealScopeError):
    """A file type the text extractor cannot decode."""


class InputParseError(DealScopeError):
    """A CRM export that cannot be parsed as CSV."""


class StateError(DealScopeError):
    """Operation not allowed in the current application state."""


class DealModelNotReady(StateError):
    """Transcript analysis requested before a dashboard analysis succeeded."""


class AnalysisInProgress(StateError):
    """Another analysis is already running in this session."""


class DuplicateRowId(StateError):
    """A row id handed to the row store is already in use."""


class UnknownDealField(DealScopeError, ValueError):
    """A suggested change names a field that deals do not have."""

    def __init__(self, field_name: str):
        super().__init__(f"Unknown deal field: {field_name!r}")
        self.field_name = field_name
