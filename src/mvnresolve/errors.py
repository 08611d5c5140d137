"""Error taxonomy for dependency resolution.

Every error carries the phase it was raised in and the coordinate or path it
concerns, so callers can report failures without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Phase(Enum):
    """Resolution phase an error was raised in."""
    INPUT = "input"
    METADATA_FETCH = "metadata fetch"
    DECODE = "decode"
    EXPANSION = "dependency expansion"
    ARTIFACT_DOWNLOAD = "artifact download"


class ResolutionError(Exception):
    """Base class for every fatal resolution failure."""

    default_phase: Optional[Phase] = None

    def __init__(self, message: str, *, target: Optional[str] = None, phase: Optional[Phase] = None):
        super().__init__(message)
        self.message = message
        self.target = target
        self.phase = phase or self.default_phase
        self.coordinate: Optional[str] = None

    def with_context(self, phase: Phase, coordinate: Optional[str] = None) -> "ResolutionError":
        """Attach phase and coordinate; an already-set coordinate is kept."""
        self.phase = phase
        if coordinate and not self.coordinate:
            self.coordinate = coordinate
        return self

    def __str__(self) -> str:
        parts = []
        if self.phase is not None:
            parts.append(f"[{self.phase.value}]")
        if self.coordinate:
            parts.append(f"{self.coordinate}:")
        parts.append(self.message)
        return " ".join(parts)


class InputFormatError(ResolutionError, ValueError):
    """Raised when a seed coordinate is not of the form groupId:artifactId:version."""
    default_phase = Phase.INPUT


class DecodeError(ResolutionError):
    """Raised when POM bytes are not a valid project document."""
    default_phase = Phase.DECODE


class NotFoundError(ResolutionError):
    """Raised when no cache entry exists and every repository failed for a path."""
    default_phase = Phase.METADATA_FETCH


class CacheWriteError(ResolutionError):
    """Raised when the local cache cannot hold a path: a write fails or an entry is unreadable."""
    default_phase = Phase.METADATA_FETCH


class ResolutionCancelled(ResolutionError):
    """Raised when a cancellation signal aborts a resolution."""
