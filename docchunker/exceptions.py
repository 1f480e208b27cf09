"""
Custom Exceptions for the Chunking Engine.

The engine is synchronous and does no I/O, so every failure is local
and raised before any text is processed. Degenerate text (empty input,
no sentence terminators, a single giant paragraph) is never an error.

Exception Hierarchy:
    ChunkingError (base)
    ├── InvalidOptionsError
    ├── UnsupportedStrategyError
    └── ChunkingCancelledError

Usage:
    from docchunker.exceptions import ChunkingError, InvalidOptionsError

    try:
        result = chunker.chunk(text, options)
    except InvalidOptionsError as e:
        print(f"Rejected options: {e.message}")
    except ChunkingError as e:
        print(f"Chunking failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class ChunkingError(Exception):
    """
    Base exception for all chunking-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
    """

    def __init__(
        self,
        message: str = "A chunking error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)


# =============================================================================
# OPTION ERRORS
# =============================================================================


class InvalidOptionsError(ChunkingError):
    """
    Raised when chunking options or document inputs are malformed.

    Examples: non-positive max_chunk_size, overlap_size >= max_chunk_size,
    page offsets outside the text.

    Attributes:
        field: Name of the offending option, if known
    """

    def __init__(
        self,
        message: str = "Invalid chunking options",
        field: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.field = field
        super().__init__(message, details)


class UnsupportedStrategyError(ChunkingError):
    """
    Raised when a strategy name does not map to a known strategy.

    Unknown names are never silently substituted.

    Attributes:
        strategy: The rejected strategy name
    """

    def __init__(self, strategy: object, supported: Optional[list[str]] = None):
        self.strategy = strategy
        self.supported = supported or []
        details = f"supported: {', '.join(self.supported)}" if self.supported else None
        super().__init__(f"Unsupported chunking strategy: {strategy!r}", details)


# =============================================================================
# CANCELLATION
# =============================================================================


class ChunkingCancelledError(ChunkingError):
    """
    Raised when a caller cancels chunking between chunk emissions.

    Chunks emitted before cancellation are complete; no partial chunk
    is ever produced.

    Attributes:
        chunks_emitted: Number of chunks produced before cancellation
    """

    def __init__(self, chunks_emitted: int = 0):
        self.chunks_emitted = chunks_emitted
        super().__init__(
            "Chunking was cancelled",
            details=f"{chunks_emitted} chunk(s) emitted before cancellation",
        )


# =============================================================================
# UTILITIES
# =============================================================================


def format_error_chain(error: Exception) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current: Optional[BaseException] = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        if current.__cause__:
            current = current.__cause__
            depth += 1
        else:
            break

    return "\n".join(lines)
