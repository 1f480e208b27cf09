"""
Repetitive Header/Footer Filter

Removes running headers and footers (lines repeated across pages) from
extracted text before chunking, so they do not pollute every chunk and
its embedding.

Design:
- Lines are normalized (dates, page-number tokens in several languages
  and remaining digit runs become placeholders) so "Page 3 of 10" and
  "Page 4 of 10" collapse to the same key
- A key is noise when it occurs on at least repetition_threshold of the
  pages and at least twice
- Long lines (> max_line_length) are treated as real content
- Empty lines are always kept; they carry paragraph boundaries
- Opt-in: disabled unless NoiseFilterConfig.enabled is set

Usage:
    from docchunker.noise_filter import NoiseFilter
    from docchunker.config import NoiseFilterConfig

    noise_filter = NoiseFilter(NoiseFilterConfig(enabled=True))
    cleaned = noise_filter.filter(text, page_count=12)
"""

import bisect
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from .config import NoiseFilterConfig
from .logging_config import get_logger
from .models import DetectedPattern, DocumentText

logger = get_logger(__name__)

PAGE_PLACEHOLDER = "PAGE_NUM"
DATE_PLACEHOLDER = "DATE"
DIGIT_PLACEHOLDER = "#"

# Dates first, so "2024/01/15" is not mistaken for a "N/M" page counter.
_DATE_PATTERNS = (
    re.compile(r"\d{4}[-/.]\d{1,2}[-/.]\d{1,2}"),
    re.compile(r"\d{1,2}[-/.]\d{1,2}[-/.]\d{4}"),
)

_PAGE_PATTERNS = (
    re.compile(r"page\s*\d+(?:\s*(?:of|/)\s*\d+)?", re.IGNORECASE),
    re.compile(r"seite\s*\d+(?:\s*(?:von|/)\s*\d+)?", re.IGNORECASE),
    re.compile(r"\d+\s*페이지"),
    re.compile(r"페이지\s*\d+"),
    re.compile(r"第\s*\d+\s*页"),
    re.compile(r"\b\d+\s*/\s*\d+\b"),
)

_DIGIT_RUN = re.compile(r"\d+")
_WHITESPACE = re.compile(r"\s+")


def normalize_line(line: str) -> str:
    """Collapse the variable parts of a line into placeholders."""
    normalized = line.strip()
    for pattern in _DATE_PATTERNS:
        normalized = pattern.sub(DATE_PLACEHOLDER, normalized)
    for pattern in _PAGE_PATTERNS:
        normalized = pattern.sub(PAGE_PLACEHOLDER, normalized)
    normalized = _DIGIT_RUN.sub(DIGIT_PLACEHOLDER, normalized)
    return _WHITESPACE.sub(" ", normalized)


def _compile_patterns(patterns: list[str]) -> list[re.Pattern]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.warning("Skipping invalid filter pattern %r: %s", pattern, exc)
    return compiled


@dataclass
class FilteredDocument:
    """Filtered text with page offsets remapped onto it."""
    text: str
    page_offsets: list[int] = field(default_factory=list)
    lines_removed: int = 0


class NoiseFilter:
    """Detects and removes repeating header/footer lines."""

    def __init__(self, config: Optional[NoiseFilterConfig] = None):
        self.config = config or NoiseFilterConfig()
        self._preserve = _compile_patterns(self.config.preserve_patterns)
        self._remove = _compile_patterns(self.config.remove_patterns)

    def filter(self, text: str, page_count: int) -> str:
        """
        Remove repeating header/footer lines.

        Args:
            text: Extracted document text.
            page_count: Number of physical pages in the source document.

        Returns:
            The filtered text (unchanged when the filter does not apply).
        """
        keep = self._plan(text, page_count)
        if keep is None:
            return text
        lines = text.split("\n")
        return "\n".join(line for line, kept in zip(lines, keep) if kept)

    def filter_document(
        self,
        document: DocumentText,
        page_count: Optional[int] = None,
    ) -> FilteredDocument:
        """
        Filter a DocumentText, remapping its page offsets onto the result.

        page_count overrides document.page_count, for text that arrives
        without page offsets.
        """
        text = document.text
        pages = document.page_count if page_count is None else page_count
        keep = self._plan(text, pages)
        if keep is None:
            return FilteredDocument(text=text, page_offsets=list(document.page_offsets))

        lines = text.split("\n")
        old_starts: list[int] = []
        new_starts: list[int] = []
        old_pos = 0
        new_pos = 0
        kept_lines: list[str] = []
        for line, kept in zip(lines, keep):
            old_starts.append(old_pos)
            new_starts.append(new_pos)
            old_pos += len(line) + 1
            if kept:
                kept_lines.append(line)
                new_pos += len(line) + 1

        filtered = "\n".join(kept_lines)

        # Offsets inside a removed line move to the start of the next kept line.
        # Pages made entirely of noise therefore share an offset with the next page.
        remapped: list[int] = []
        for offset in document.page_offsets:
            line_no = bisect.bisect_right(old_starts, offset) - 1
            if keep[line_no]:
                new_offset = new_starts[line_no] + (offset - old_starts[line_no])
            else:
                new_offset = new_starts[line_no]
            remapped.append(min(new_offset, len(filtered)))

        removed = keep.count(False)
        logger.info("Noise filter removed %d line(s) across %d page(s)", removed, pages)
        return FilteredDocument(text=filtered, page_offsets=remapped, lines_removed=removed)

    def analyze_patterns(self, text: str, page_count: int) -> list[DetectedPattern]:
        """
        Report repeating normalized lines without modifying anything.

        Intended for diagnostics and threshold tuning.
        """
        if not text or not text.strip() or page_count < 2:
            return []

        counts, originals = self._count_candidates(text.split("\n"))
        patterns = []
        for normalized, occurrences in counts.most_common():
            if occurrences < 2:
                continue
            ratio = occurrences / page_count
            patterns.append(DetectedPattern(
                original_text=originals[normalized],
                normalized_text=normalized,
                occurrences=occurrences,
                ratio=ratio,
                would_be_filtered=(
                    ratio >= self.config.repetition_threshold
                    and not self._is_preserved(originals[normalized], normalized)
                ),
            ))
        return patterns

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _plan(self, text: str, page_count: int) -> Optional[list[bool]]:
        """Keep flag per line, or None when the filter does not apply."""
        if not self.config.enabled:
            return None
        if not text or not text.strip():
            return None
        if page_count < self.config.min_page_count:
            return None

        lines = text.split("\n")
        counts, _ = self._count_candidates(lines)
        noise_keys = {
            normalized
            for normalized, occurrences in counts.items()
            if occurrences >= 2 and occurrences / page_count >= self.config.repetition_threshold
        }

        keep: list[bool] = []
        for line in lines:
            if not line.strip():
                keep.append(True)
                continue
            normalized = normalize_line(line)
            if self._is_preserved(line.strip(), normalized):
                keep.append(True)
            elif len(line) <= self.config.max_line_length and normalized in noise_keys:
                keep.append(False)
            elif any(pattern.search(line) for pattern in self._remove):
                keep.append(False)
            else:
                keep.append(True)
        return keep

    def _count_candidates(self, lines: list[str]) -> tuple[Counter, dict[str, str]]:
        counts: Counter = Counter()
        originals: dict[str, str] = {}
        for line in lines:
            if not line.strip() or len(line) > self.config.max_line_length:
                continue
            normalized = normalize_line(line)
            counts[normalized] += 1
            originals.setdefault(normalized, line.strip())
        return counts, originals

    def _is_preserved(self, line: str, normalized: str) -> bool:
        return any(
            pattern.search(line) or pattern.search(normalized)
            for pattern in self._preserve
        )
