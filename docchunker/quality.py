"""
Chunk Quality Scoring

Pure functions of a chunk's core content and its immediate neighbours:

- completeness: 1.0 minus 1/3 for each of: ends mid-word or on a comma,
  contains an ellipsis, starts lowercase. Floor 0.0
- density: share of word tokens that are not stopwords
- boundary: half a point each for a sharp start (after a sentence end or
  line break) and a sharp end (sentence end, line break or end of text)
- quality: weighted mean of the three (QualityWeights, normalized)

build_quality_report() aggregates the scores over a whole chunk list.
"""

import re
from collections import Counter
from statistics import mean, pstdev
from typing import Optional, Union

from .models import Chunk, ChunkScores, QualityReport, QualityWeights, StructuralRole
from .sentence_splitter import ends_with_terminator
from .structure import classify_role

COMPLETENESS_CHECKS = 3

_TOKEN = re.compile(r"[^\W_]+(?:['’-][^\W_]+)*")
_ELLIPSIS = re.compile(r"\.{3}|…")

# English and German function words.
STOPWORDS = frozenset({
    "a", "about", "above", "after", "again", "all", "also", "am", "an", "and",
    "any", "are", "as", "at", "be", "because", "been", "before", "being",
    "below", "between", "both", "but", "by", "can", "could", "did", "do",
    "does", "doing", "down", "during", "each", "few", "for", "from",
    "further", "had", "has", "have", "having", "he", "her", "here", "hers",
    "him", "his", "how", "i", "if", "in", "into", "is", "it", "its", "just",
    "me", "more", "most", "my", "no", "nor", "not", "now", "of", "off", "on",
    "once", "only", "or", "other", "our", "ours", "out", "over", "own",
    "same", "she", "should", "so", "some", "such", "than", "that", "the",
    "their", "theirs", "them", "then", "there", "these", "they", "this",
    "those", "through", "to", "too", "under", "until", "up", "very", "was",
    "we", "were", "what", "when", "where", "which", "while", "who", "whom",
    "why", "will", "with", "would", "you", "your", "yours",
    "der", "die", "das", "den", "dem", "des", "ein", "eine", "einer",
    "eines", "einem", "einen", "und", "oder", "aber", "ist", "sind", "war",
    "im", "zu", "zum", "zur", "mit", "von", "auf", "für", "nicht",
    "es", "sie", "er", "wir", "ich", "auch", "als", "wie", "bei", "nach",
})

ChunkLike = Union[Chunk, str]


def _core(chunk: Optional[ChunkLike]) -> Optional[str]:
    if chunk is None:
        return None
    if isinstance(chunk, Chunk):
        return chunk.core_content
    return chunk


def completeness_score(text: str) -> float:
    """Penalise truncated endings, ellipses and lowercase starts."""
    stripped = text.strip()
    if not stripped:
        return 0.0

    penalties = 0
    last = stripped[-1]
    if last == "," or last.isalnum():
        penalties += 1
    if _ELLIPSIS.search(stripped):
        penalties += 1
    if stripped[0].islower():
        penalties += 1
    return max(0.0, 1.0 - penalties / COMPLETENESS_CHECKS)


def density_score(text: str) -> float:
    """Non-stopword tokens over all tokens; 0.0 without tokens."""
    tokens = _TOKEN.findall(text)
    if not tokens:
        return 0.0
    content = [token for token in tokens if token.lower() not in STOPWORDS]
    return len(content) / len(tokens)


def _ends_at_line_break(text: str) -> bool:
    trailing = text[len(text.rstrip()):]
    return "\n" in trailing


def _starts_at_line_break(text: str) -> bool:
    leading = text[:len(text) - len(text.lstrip())]
    return "\n" in leading


def boundary_score(
    text: str,
    previous: Optional[str] = None,
    next_text: Optional[str] = None,
) -> float:
    """Sharpness of the chunk's two edges, 0.0 / 0.5 / 1.0."""
    stripped = text.strip()
    if not stripped:
        return 0.0

    sharp_start = (
        previous is None
        or ends_with_terminator(previous)
        or _ends_at_line_break(previous)
        or _starts_at_line_break(text)
    ) and not stripped[0].islower()

    sharp_end = (
        next_text is None
        or ends_with_terminator(stripped)
        or _ends_at_line_break(text)
        or _starts_at_line_break(next_text)
    )
    return (int(sharp_start) + int(sharp_end)) / 2


def score_chunk(
    chunk: ChunkLike,
    previous: Optional[ChunkLike] = None,
    next_chunk: Optional[ChunkLike] = None,
    weights: Optional[QualityWeights] = None,
    structural_role: Optional[StructuralRole] = None,
) -> ChunkScores:
    """
    Score one chunk given its neighbours.

    Args:
        chunk: The chunk, or its core content.
        previous: Previous chunk (or core content); None for the first.
        next_chunk: Next chunk (or core content); None for the last.
        weights: Combination weights, defaults to QualityWeights().
        structural_role: Role already known to the caller; classified
            from the text when omitted.

    Returns:
        ChunkScores with every score in [0, 1].
    """
    text = _core(chunk) or ""
    weights = weights or QualityWeights()

    completeness = completeness_score(text)
    density = density_score(text)
    boundary = boundary_score(text, _core(previous), _core(next_chunk))

    w_completeness, w_density, w_boundary = weights.normalized()
    quality = w_completeness * completeness + w_density * density + w_boundary * boundary

    return ChunkScores(
        completeness=completeness,
        density=density,
        boundary=boundary,
        quality=min(1.0, max(0.0, quality)),
        structural_role=structural_role or classify_role(text),
    )


def build_quality_report(chunks: list[Chunk]) -> QualityReport:
    """Aggregate per-chunk scores into a document-level report."""
    if not chunks:
        return QualityReport()

    sizes = [chunk.core_length for chunk in chunks]
    average_size = mean(sizes)
    size_consistency = 1.0
    if len(sizes) > 1 and average_size > 0:
        size_consistency = max(0.0, 1.0 - pstdev(sizes) / average_size)

    overlap_ratio = 0.0
    if len(chunks) > 1:
        overlap_ratio = sum(1 for chunk in chunks[1:] if chunk.has_overlap_with_previous) / (len(chunks) - 1)

    roles = Counter(chunk.structural_role.value for chunk in chunks)
    return QualityReport(
        average_completeness=mean(chunk.completeness_score for chunk in chunks),
        average_density=mean(chunk.density for chunk in chunks),
        average_quality=mean(chunk.quality_score for chunk in chunks),
        boundary_quality=mean(chunk.boundary_score for chunk in chunks),
        size_consistency=size_consistency,
        overlap_ratio=overlap_ratio,
        role_distribution=dict(roles),
    )
