"""
Overlap Injection

Given the ordered core ranges of a chunk sequence, decides how far each
chunk's stored content reaches back into the previous chunk's core.

Rules:
- At most overlap_size characters are taken, always from the previous
  core only (never from the chunk before it)
- The injected region starts on a sentence start when one is in reach,
  otherwise on a word start; never mid-word. When neither exists the
  chunk gets no overlap
- The previous core is never repeated in full
"""

import bisect
from typing import Optional, Sequence

from .models import Span


def overlap_start(
    text: str,
    previous: Span,
    core: Span,
    overlap_size: int,
    sentence_starts: Optional[Sequence[int]] = None,
) -> int:
    """
    Start offset of the content for core, given the previous core.

    Returns core.start when no overlap can be injected.
    """
    upper = core.start
    if overlap_size <= 0 or previous.end != upper:
        return upper
    lower = max(previous.start + 1, upper - overlap_size)
    if lower >= upper:
        return upper

    if sentence_starts:
        i = bisect.bisect_left(sentence_starts, lower)
        if i < len(sentence_starts) and sentence_starts[i] < upper:
            return sentence_starts[i]

    for pos in range(lower, upper):
        if text[pos - 1].isspace() and not text[pos].isspace():
            return pos
    return upper


def inject_overlap(
    text: str,
    cores: Sequence[Span],
    overlap_size: int,
    sentence_starts: Optional[Sequence[int]] = None,
) -> list[int]:
    """
    Content start offset for every core.

    The first chunk never carries overlap. The result is non-decreasing
    and each value lies within the previous core.
    """
    if not cores:
        return []
    starts = [cores[0].start]
    for previous, core in zip(cores, cores[1:]):
        starts.append(overlap_start(text, previous, core, overlap_size, sentence_starts))
    return starts
