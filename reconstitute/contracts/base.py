"""
Base Contracts and Error Taxonomy

Shared error types used across all layers.

ERROR POLICY:
=============
- InvalidSpec is the ONLY failure a selection caller must handle
- A missing original index is data (a flag + a count), never an exception
- Harvest non-convergence is a stop reason, never an exception
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Optional


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """Explicit error codes, one per failure family."""
    # Selection
    INVALID_SPEC = auto()
    MISSING_ORIGINAL_INDEX = auto()

    # Storage
    MALFORMED_TRANSCRIPT = auto()

    # Extraction
    SNAPSHOT_UNAVAILABLE = auto()

    # Configuration
    INVALID_CONFIG = auto()


class ReconstitutionError(Exception):
    """Base class for every error raised by this package."""

    code: ErrorCode = ErrorCode.INVALID_CONFIG

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {
            'code': self.code.name,
            'message': self.message,
        }


class InvalidSpec(ReconstitutionError):
    """A range spec that parsed to an empty index set."""

    code = ErrorCode.INVALID_SPEC

    def __init__(self, spec: Optional[str]):
        self.spec = spec
        super().__init__(f'range spec parsed to empty set: {spec!r}')


class TranscriptFormatError(ReconstitutionError):
    """A persisted transcript could not be read back."""

    code = ErrorCode.MALFORMED_TRANSCRIPT


class SnapshotUnavailable(ReconstitutionError):
    """A snapshot could not be read or fetched."""

    code = ErrorCode.SNAPSHOT_UNAVAILABLE


class ConfigError(ReconstitutionError):
    """A configuration value is missing or out of range."""

    code = ErrorCode.INVALID_CONFIG
