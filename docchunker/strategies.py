"""
Chunking Strategies

Each strategy turns a DocumentAnalysis into the ordered core ranges of
the output chunks. Core ranges partition the text: consecutive, no gaps,
first starts at 0, last ends at len(text). Overlap is added afterwards
by the overlap injector, so no strategy deals with it (fixed-size only
reserves room for it).

Strategies:
- FIXED_SIZE: windows of max_chunk_size - overlap_size characters,
  cut at a word start where one is in the back half of the window
- PARAGRAPH: packs whole paragraphs; oversized ones go through the
  window cutter, preferring sentence ends
- SEMANTIC: packs sentences and closes a chunk at a paragraph end once
  it holds min_sentences_per_chunk body sentences
- INTELLIGENT: packs structural units; new chunk at every heading, code
  blocks and tables stay whole when they fit, oversized ones split on
  line/row boundaries

Size bound: a core never exceeds max_chunk_size, except for whitespace
that cannot go anywhere else without forming a whitespace-only chunk
(trailing whitespace of the document, blank runs longer than a window).
"""

import bisect
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from .exceptions import UnsupportedStrategyError
from .logging_config import get_logger
from .models import ChunkingOptions, ChunkingStrategy, Span, StructuralRole
from .sentence_splitter import sentences_within
from .structure import DocumentAnalysis, line_units

logger = get_logger(__name__)

BreakRule = Callable[[int, int], bool]
BoundaryFunction = Callable[[DocumentAnalysis, ChunkingOptions], list[Span]]


# =============================================================================
# CUTTING AND PACKING
# =============================================================================


def _cut_point(
    text: str,
    first: int,
    limit: int,
    sentence_ends: Optional[Sequence[int]] = None,
) -> int:
    """Best cut in (first, limit]: sentence end, then word start, then limit."""
    floor = first + max(1, (limit - first) // 2)

    if sentence_ends:
        i = bisect.bisect_right(sentence_ends, limit) - 1
        if i >= 0 and sentence_ends[i] >= floor:
            cut = sentence_ends[i]
            while cut < limit and text[cut].isspace():
                cut += 1
            return cut

    for pos in range(limit, floor - 1, -1):
        if text[pos - 1].isspace() and not text[pos].isspace():
            return pos
    return limit


def split_window(
    text: str,
    start: int,
    end: int,
    size: int,
    sentence_ends: Optional[Sequence[int]] = None,
) -> list[Span]:
    """
    Cut [start, end) into consecutive pieces of at most size characters.

    Args:
        text: Document text.
        start: Region start.
        end: Region end (exclusive).
        size: Window width.
        sentence_ends: Sorted sentence end offsets; when given, pieces end
            on a sentence boundary where one lies in the back half.

    Returns:
        Spans partitioning the region. The last one may be shorter.
    """
    pieces: list[Span] = []
    pos = start
    while end - pos > size:
        first = pos
        while first < end and text[first].isspace():
            first += 1
        limit = first + size if first - pos >= size else pos + size
        if limit >= end:
            break
        cut = _cut_point(text, max(first, pos), limit, sentence_ends)
        pieces.append(Span(pos, cut))
        pos = cut
    pieces.append(Span(pos, end))
    return pieces


def pack_units(
    text: str,
    units: Sequence[Span],
    size: int,
    break_before: Optional[BreakRule] = None,
    sentence_ends: Optional[Sequence[int]] = None,
) -> list[Span]:
    """
    Greedily pack units into cores of at most size characters.

    Whitespace between units goes to the earlier chunk as far as it fits.
    A unit that cannot fit even in an empty chunk is cut with
    split_window.

    Args:
        text: Document text.
        units: Ordered, non-overlapping spans without surrounding whitespace.
        size: Core size bound.
        break_before: break_before(k, first) -> True forces a new chunk
            before unit k when the open chunk started at unit first.
        sentence_ends: Passed to split_window for oversized units.
    """
    if not units:
        return []

    cores: list[Span] = []
    start = 0
    first_unit: Optional[int] = None

    def close(at: int) -> None:
        nonlocal start, first_unit
        cut = min(at, start + size)
        cores.append(Span(start, cut))
        start = cut
        first_unit = None

    for k, unit in enumerate(units):
        if first_unit is not None and break_before is not None and break_before(k, first_unit):
            close(unit.start)

        if unit.end - start <= size:
            if first_unit is None:
                first_unit = k
            continue

        if first_unit is not None:
            close(unit.start)
            if unit.end - start <= size:
                first_unit = k
                continue

        pieces = split_window(text, start, unit.end, size, sentence_ends)
        cores.extend(pieces[:-1])
        start = pieces[-1].start
        first_unit = k

    cores.append(Span(start, len(text)))
    return cores


# =============================================================================
# STRATEGIES
# =============================================================================


def fixed_size_boundaries(analysis: DocumentAnalysis, options: ChunkingOptions) -> list[Span]:
    """Sliding window; each core leaves room for the overlap in front of it."""
    text = analysis.text
    if not text.strip():
        return []
    step = options.max_chunk_size - options.overlap_size
    return split_window(text, 0, len(text), step)


def paragraph_boundaries(analysis: DocumentAnalysis, options: ChunkingOptions) -> list[Span]:
    """Whole paragraphs per chunk, as many as fit."""
    return pack_units(
        analysis.text,
        analysis.paragraph_units,
        options.max_chunk_size,
        sentence_ends=analysis.sentence_ends,
    )


def _paragraph_first_flags(analysis: DocumentAnalysis, units: Sequence[Span]) -> list[bool]:
    starts = {paragraph.start for paragraph in analysis.paragraphs}
    return [unit.start in starts for unit in units]


def _heading_flags(analysis: DocumentAnalysis, units: Sequence[Span]) -> list[bool]:
    headings = [b.span for b in analysis.blocks if b.role == StructuralRole.HEADING]
    heading_starts = [span.start for span in headings]
    flags = []
    for unit in units:
        i = bisect.bisect_right(heading_starts, unit.start) - 1
        flags.append(i >= 0 and headings[i].start <= unit.start < headings[i].end)
    return flags


def _prefix_counts(flags: Sequence[bool]) -> list[int]:
    counts = [0]
    for flag in flags:
        counts.append(counts[-1] + int(flag))
    return counts


def semantic_boundaries(analysis: DocumentAnalysis, options: ChunkingOptions) -> list[Span]:
    """Sentences packed up to the size bound, closing at paragraph ends."""
    units = analysis.sentences
    paragraph_first = _paragraph_first_flags(analysis, units)
    body = _prefix_counts([not flag for flag in _heading_flags(analysis, units)])
    min_sentences = options.min_sentences_per_chunk

    def break_before(k: int, first: int) -> bool:
        return paragraph_first[k] and body[k] - body[first] >= min_sentences

    return pack_units(
        analysis.text,
        units,
        options.max_chunk_size,
        break_before=break_before,
        sentence_ends=analysis.sentence_ends,
    )


def _structural_units(analysis: DocumentAnalysis, size: int) -> tuple[list[Span], list[bool]]:
    """Packing units for the intelligent strategy and their heading flags."""
    text = analysis.text
    units: list[Span] = []
    headings: list[bool] = []
    for block in analysis.blocks:
        if block.role == StructuralRole.HEADING:
            parts = [block.span]
        elif block.role in (StructuralRole.CODE_BLOCK, StructuralRole.TABLE):
            parts = [block.span] if block.span.length <= size else line_units(text, block.span)
        elif block.role == StructuralRole.LIST:
            parts = line_units(text, block.span)
        else:
            parts = sentences_within(text, block.span)
        units.extend(parts)
        headings.extend([block.role == StructuralRole.HEADING] * len(parts))
    return units, headings


def intelligent_boundaries(analysis: DocumentAnalysis, options: ChunkingOptions) -> list[Span]:
    """Structure-aware packing: headings open chunks, code and tables stay whole."""
    size = options.max_chunk_size
    if not options.preserve_structure:
        return pack_units(analysis.text, analysis.sentences, size, sentence_ends=analysis.sentence_ends)

    units, headings = _structural_units(analysis, size)
    body = _prefix_counts([not flag for flag in headings])

    def break_before(k: int, first: int) -> bool:
        # Consecutive headings stay together with the body that follows
        return headings[k] and body[k] - body[first] > 0

    return pack_units(
        analysis.text,
        units,
        size,
        break_before=break_before,
        sentence_ends=analysis.sentence_ends,
    )


STRATEGIES: Mapping[ChunkingStrategy, BoundaryFunction] = MappingProxyType({
    ChunkingStrategy.FIXED_SIZE: fixed_size_boundaries,
    ChunkingStrategy.PARAGRAPH: paragraph_boundaries,
    ChunkingStrategy.SEMANTIC: semantic_boundaries,
    ChunkingStrategy.INTELLIGENT: intelligent_boundaries,
})


def compute_boundaries(
    analysis: DocumentAnalysis,
    options: ChunkingOptions,
    strategy: ChunkingStrategy,
) -> list[Span]:
    """
    Core ranges for a concrete strategy.

    AUTO must be resolved by the selector first.
    """
    try:
        boundary_function = STRATEGIES[strategy]
    except KeyError:
        raise UnsupportedStrategyError(
            strategy.value if isinstance(strategy, ChunkingStrategy) else strategy,
            supported=[s.value for s in STRATEGIES],
        ) from None

    cores = boundary_function(analysis, options)
    logger.debug("%s produced %d core range(s)", strategy.value, len(cores))
    return cores
