"""
Data Models for the Chunking Engine

Defines:
1. Enums - ChunkingStrategy, StructuralRole, DocumentDomain
2. ChunkingOptions - Per-call strategy, size and overlap settings
3. DocumentText - Caller-owned text plus page-boundary offsets
4. Span - Half-open character range produced by the segmenter
5. Chunk - A single output segment with scores and metadata
6. ChunkingResult - Complete chunking output with statistics

Design Principles:
- Pydantic v2 for validation and serialization
- All sizes are measured in characters; token budgets are converted
  with CHARS_PER_TOKEN (see ChunkingOptions.from_tokens)
- A chunk's content is always text[start_offset:end_offset] of the
  (filtered) document text, never a rewritten copy

Usage:
    options = ChunkingOptions(strategy="paragraph", max_chunk_size=800)
    result = DocumentChunker().chunk(text, options)
    print(result.to_json())
"""

import bisect
import json
import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator, model_validator

from .exceptions import InvalidOptionsError, UnsupportedStrategyError

# Conversion factor for callers that think in tokens. Roughly four
# characters per token for English prose with BPE tokenizers.
CHARS_PER_TOKEN = 4

MAX_TECHNICAL_KEYWORDS = 5


# =============================================================================
# ENUMS
# =============================================================================


class ChunkingStrategy(str, Enum):
    """
    Available segmentation strategies.

    AUTO inspects the document and picks PARAGRAPH, SEMANTIC or
    INTELLIGENT. FIXED_SIZE is only ever chosen explicitly.
    """

    AUTO = "auto"
    FIXED_SIZE = "fixed_size"
    PARAGRAPH = "paragraph"
    SEMANTIC = "semantic"
    INTELLIGENT = "intelligent"

    @classmethod
    def parse(cls, value: Any) -> "ChunkingStrategy":
        """
        Resolve a strategy from an enum member or a name.

        Accepts "fixed_size", "FixedSize", "fixed-size" etc. Raises
        UnsupportedStrategyError for anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = re.sub(r"[\s_\-]+", "", value).lower()
            for member in cls:
                if member.value.replace("_", "") == key:
                    return member
        raise UnsupportedStrategyError(value, supported=[m.value for m in cls])


class StructuralRole(str, Enum):
    """Content shape of a chunk."""

    CONTENT = "content"
    HEADING = "heading"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    LIST = "list"


class DocumentDomain(str, Enum):
    """Coarse subject-matter classification of a whole document."""

    GENERAL = "General"
    TECHNICAL = "Technical"
    BUSINESS = "Business"
    ACADEMIC = "Academic"


# =============================================================================
# INPUTS
# =============================================================================


class ChunkingOptions(BaseModel):
    """
    Per-call chunking configuration.

    Sizes are character counts. Invalid combinations are rejected on
    construction with InvalidOptionsError.
    """

    strategy: ChunkingStrategy = Field(
        ChunkingStrategy.AUTO,
        description="Segmentation strategy (auto picks one from document signals)",
    )
    max_chunk_size: int = Field(
        1024,
        description="Maximum core (pre-overlap) chunk size in characters",
    )
    overlap_size: int = Field(
        128,
        description="Maximum characters of the previous chunk prepended to each chunk",
    )
    preserve_structure: bool = Field(
        True,
        description="Keep headings, code blocks and tables intact (intelligent strategy)",
    )
    min_sentences_per_chunk: int = Field(
        1,
        description="Body sentences a semantic chunk needs before it may close at a paragraph end",
    )

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, value: Any) -> ChunkingStrategy:
        return ChunkingStrategy.parse(value)

    @model_validator(mode="wrap")
    @classmethod
    def _raise_as_options_error(cls, data: Any, handler: Any) -> "ChunkingOptions":
        try:
            return handler(data)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or None
            raise InvalidOptionsError(
                f"{field or 'options'}: {error['msg']}",
                field=field,
                details=f"{exc.error_count()} validation error(s)",
            ) from exc

    def model_post_init(self, __context: Any) -> None:
        self.validate_bounds()

    def validate_bounds(self) -> None:
        """Check size relationships; raises InvalidOptionsError."""
        if self.max_chunk_size <= 0:
            raise InvalidOptionsError(
                f"max_chunk_size must be positive, got {self.max_chunk_size}",
                field="max_chunk_size",
            )
        if self.overlap_size < 0:
            raise InvalidOptionsError(
                f"overlap_size must not be negative, got {self.overlap_size}",
                field="overlap_size",
            )
        if self.overlap_size >= self.max_chunk_size:
            raise InvalidOptionsError(
                f"overlap_size ({self.overlap_size}) must be less than "
                f"max_chunk_size ({self.max_chunk_size})",
                field="overlap_size",
            )
        if self.min_sentences_per_chunk < 1:
            raise InvalidOptionsError(
                f"min_sentences_per_chunk must be at least 1, got {self.min_sentences_per_chunk}",
                field="min_sentences_per_chunk",
            )

    @classmethod
    def from_tokens(
        cls,
        max_tokens: int,
        overlap_tokens: int = 0,
        **kwargs: Any,
    ) -> "ChunkingOptions":
        """Build options from token budgets using CHARS_PER_TOKEN."""
        return cls(
            max_chunk_size=max_tokens * CHARS_PER_TOKEN,
            overlap_size=overlap_tokens * CHARS_PER_TOKEN,
            **kwargs,
        )


class DocumentText(BaseModel):
    """
    Extracted plain text plus the offsets where each physical page starts.

    The engine never mutates it; it only slices by offset ranges.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Extracted document text")
    page_offsets: list[int] = Field(
        default_factory=list,
        description="Character offsets where each page starts, strictly increasing",
    )

    def model_post_init(self, __context: Any) -> None:
        previous = -1
        for offset in self.page_offsets:
            if offset < 0 or offset > len(self.text):
                raise InvalidOptionsError(
                    f"page offset {offset} outside text of length {len(self.text)}",
                    field="page_offsets",
                )
            if offset <= previous:
                raise InvalidOptionsError(
                    "page offsets must be strictly increasing",
                    field="page_offsets",
                    details=f"{offset} follows {previous}",
                )
            previous = offset

    @property
    def page_count(self) -> int:
        return len(self.page_offsets)

    def page_for_offset(self, offset: int) -> Optional[int]:
        """1-based page containing the character at offset."""
        return page_for_offset(self.page_offsets, offset)


def page_for_offset(page_offsets: list[int], offset: int) -> Optional[int]:
    """1-based page number for a character offset, None without offsets."""
    if not page_offsets:
        return None
    return max(1, bisect.bisect_right(page_offsets, offset))


def pages_for_range(page_offsets: list[int], start: int, end: int) -> list[int]:
    """1-based pages touched by the characters in [start, end)."""
    if not page_offsets or end <= start:
        return []
    first = page_for_offset(page_offsets, start)
    last = page_for_offset(page_offsets, end - 1)
    return list(range(first, last + 1))


# =============================================================================
# SEGMENTS
# =============================================================================


@dataclass(frozen=True)
class Span:
    """Half-open character range [start, end) over the document text."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


# =============================================================================
# OUTPUT
# =============================================================================


class Chunk(BaseModel):
    """
    A single chunk ready for embedding.

    content == text[start_offset:end_offset]. The first overlap_length
    characters repeat the tail of the previous chunk's core content.
    """

    index: int = Field(..., description="Zero-based position in the output sequence", ge=0)
    content: str = Field(..., description="Chunk text including injected overlap", min_length=1)
    start_offset: int = Field(..., description="Start of content in the document text", ge=0)
    end_offset: int = Field(..., description="End (exclusive) of content in the document text")
    core_start_offset: int = Field(..., description="Start of the pre-overlap core range")
    has_overlap_with_previous: bool = False
    structural_role: StructuralRole = StructuralRole.CONTENT
    quality_score: float = Field(0.0, ge=0.0, le=1.0)
    completeness_score: float = Field(0.0, ge=0.0, le=1.0)
    density: float = Field(0.0, ge=0.0, le=1.0)
    boundary_score: float = Field(0.0, ge=0.0, le=1.0)
    technical_keywords: list[str] = Field(
        default_factory=list,
        max_length=MAX_TECHNICAL_KEYWORDS,
    )
    document_domain: DocumentDomain = DocumentDomain.GENERAL
    page_numbers: list[int] = Field(
        default_factory=list,
        description="1-based pages the core range touches",
    )
    strategy: ChunkingStrategy = ChunkingStrategy.SEMANTIC
    token_count: Optional[int] = Field(
        None,
        description="tiktoken count of content, when token counting is enabled",
    )

    @model_validator(mode="after")
    def validate_offsets(self) -> "Chunk":
        """Ensure offsets are ordered and agree with the content."""
        if not self.start_offset <= self.core_start_offset < self.end_offset:
            raise ValueError(
                f"offsets must satisfy start <= core_start < end, got "
                f"{self.start_offset}/{self.core_start_offset}/{self.end_offset}"
            )
        if len(self.content) != self.end_offset - self.start_offset:
            raise ValueError("content length does not match its offset range")
        return self

    @computed_field
    @property
    def overlap_length(self) -> int:
        """Characters injected from the previous chunk."""
        return self.core_start_offset - self.start_offset

    @property
    def core_content(self) -> str:
        """Content without the injected overlap."""
        return self.content[self.overlap_length:]

    @property
    def core_length(self) -> int:
        return self.end_offset - self.core_start_offset

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ChunkingStats(BaseModel):
    """Statistics about the chunking process."""
    total_chunks: int = 0
    total_characters: int = 0
    avg_chunk_size: float = 0.0
    min_chunk_size: int = 0
    max_chunk_size: int = 0
    total_sentences: int = 0
    total_paragraphs: int = 0
    total_pages: int = 0
    lines_filtered: int = 0
    total_tokens: Optional[int] = None


class DetectedPattern(BaseModel):
    """A repeating line found by the noise filter's analysis pass."""
    original_text: str
    normalized_text: str
    occurrences: int
    ratio: float
    would_be_filtered: bool


class StrategySelection(BaseModel):
    """Why the auto selector picked a strategy."""
    strategy: ChunkingStrategy
    reasons: list[str] = Field(default_factory=list)
    has_headings: bool = False
    paragraph_count: int = 0
    average_paragraph_length: float = 0.0
    average_sentence_length: float = 0.0
    text_length: int = 0


class QualityWeights(BaseModel):
    """
    Weights combining completeness, density and boundary sharpness
    into quality_score. Normalized by their sum when applied.
    """
    completeness: float = 0.5
    density: float = 0.2
    boundary: float = 0.3

    def model_post_init(self, __context: Any) -> None:
        for name in ("completeness", "density", "boundary"):
            if getattr(self, name) < 0:
                raise InvalidOptionsError(f"quality weight {name} must not be negative", field=name)
        if self.completeness + self.density + self.boundary <= 0:
            raise InvalidOptionsError("quality weights must have a positive sum")

    def normalized(self) -> tuple[float, float, float]:
        total = self.completeness + self.density + self.boundary
        return (self.completeness / total, self.density / total, self.boundary / total)


class ChunkScores(BaseModel):
    """Per-chunk scores computed by the quality scorer."""
    completeness: float
    density: float
    boundary: float
    quality: float
    structural_role: StructuralRole


class QualityReport(BaseModel):
    """Document-level aggregate of chunk scores."""
    average_completeness: float = 0.0
    average_density: float = 0.0
    average_quality: float = 0.0
    boundary_quality: float = 0.0
    size_consistency: float = 0.0
    overlap_ratio: float = 0.0
    role_distribution: dict[str, int] = Field(default_factory=dict)


class DocumentSummary(BaseModel):
    """Document-level view derived from the chunk sequence."""
    document_domain: DocumentDomain = DocumentDomain.GENERAL
    technical_keywords: list[str] = Field(default_factory=list)
    total_chunks: int = 0
    average_quality: float = 0.0


def summarize_chunks(chunks: list[Chunk]) -> DocumentSummary:
    """Reduce a chunk sequence into a DocumentSummary."""
    if not chunks:
        return DocumentSummary()

    counts: Counter[str] = Counter()
    surface: dict[str, str] = {}
    for chunk in chunks:
        for keyword in chunk.technical_keywords:
            key = keyword.lower()
            counts[key] += 1
            surface.setdefault(key, keyword)

    # Counter.most_common keeps first-seen order among ties
    keywords = [surface[key] for key, _ in counts.most_common()]
    return DocumentSummary(
        document_domain=chunks[0].document_domain,
        technical_keywords=keywords,
        total_chunks=len(chunks),
        average_quality=sum(c.quality_score for c in chunks) / len(chunks),
    )


class ChunkingResult(BaseModel):
    """
    Complete result of chunking a document.

    The chunk list is a plain list and can be iterated any number of times.
    """
    options: ChunkingOptions
    strategy: ChunkingStrategy = Field(
        ...,
        description="Concrete strategy that produced the chunks",
    )
    selection: Optional[StrategySelection] = Field(
        None,
        description="Auto selection details when strategy was auto",
    )
    filtered_text: str = Field(
        "",
        description="Text after noise filtering; chunk offsets index into it",
    )
    chunks: list[Chunk] = Field(default_factory=list)
    stats: ChunkingStats = Field(default_factory=ChunkingStats)
    quality: QualityReport = Field(default_factory=QualityReport)

    @property
    def total_chunks(self) -> int:
        return len(self.chunks)

    def get_chunk(self, index: int) -> Optional[Chunk]:
        if 0 <= index < len(self.chunks):
            return self.chunks[index]
        return None

    def get_neighbors(self, index: int) -> tuple[Optional[Chunk], Optional[Chunk]]:
        """Previous and next chunks for context expansion."""
        if self.get_chunk(index) is None:
            return None, None
        return self.get_chunk(index - 1), self.get_chunk(index + 1)

    def summary(self) -> DocumentSummary:
        return summarize_chunks(self.chunks)

    def reconstruct_text(self) -> str:
        """Concatenate core contents; equals filtered_text for non-blank input."""
        return "".join(chunk.core_content for chunk in self.chunks)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)
