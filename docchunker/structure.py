"""
Structural Block Detection

Splits plain text into typed blocks (headings, code blocks, tables,
lists, body paragraphs) for the intelligent strategy, the auto selector
and structural-role classification of finished chunks.

Recognized shapes:
- Headings: markdown "#", setext underlines, numbered sections
  ("2.3 Method", "Chapter 4"), short ALL-CAPS lines and title-case
  lines standing alone before body text
- Code blocks: ``` / ~~~ fences, or indented regions after a blank line
- Tables: pipe-delimited rows, or runs of tab-aligned multi-column lines
- Lists: "-", "*", "+", "•", "1." / "1)" / "a)" items with continuations

Usage:
    from docchunker.structure import parse_blocks, classify_role

    blocks = parse_blocks(text)
    role = classify_role("| a | b |\\n|---|---|\\n| 1 | 2 |")  # StructuralRole.TABLE
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from .models import Span, StructuralRole
from .sentence_splitter import ends_with_terminator, paragraph_spans, sentence_spans

_FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_MD_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+\S")
_SETEXT_UNDERLINE = re.compile(r"^\s{0,3}(?:={3,}|-{3,})\s*$")
_LIST_ITEM = re.compile(r"^\s*(?:[-*+•▪◦‣]|\d{1,3}[.)]|[a-zA-Z][.)])\s+\S")
_INDENTED = re.compile(r"^(?: {4}|\t)\s*\S")
_PIPE_ROW = re.compile(r"^\s*\|?[^|\n]*\|[^|\n]*\|")
_TAB_ROW = re.compile(r"\S\t+\S")
_NUMBERED_SECTION = re.compile(
    r"^(?:(?:chapter|section|part|appendix)\s+[\dIVXLC]+[.:]?"
    r"|\d+(?:\.\d+)+\.?"
    r"|[IVXLC]+\.)\s+\S",
    re.IGNORECASE,
)

_MINOR_WORDS = frozenset({
    "a", "an", "and", "as", "at", "by", "for", "from", "in", "into", "of",
    "on", "or", "the", "to", "vs", "with", "via",
})

MAX_HEADING_LENGTH = 80


@dataclass(frozen=True)
class Block:
    """A typed region of the text; span excludes surrounding whitespace."""

    role: StructuralRole
    span: Span


def _line_spans(text: str) -> list[tuple[int, int]]:
    spans = []
    pos = 0
    for line in text.split("\n"):
        spans.append((pos, pos + len(line)))
        pos += len(line) + 1
    return spans


def _is_table_row(line: str) -> bool:
    return bool(_PIPE_ROW.match(line)) and line.count("|") >= 2


def _is_tab_row(line: str) -> bool:
    return bool(_TAB_ROW.search(line.strip()))


def _is_title_case(stripped: str) -> bool:
    words = stripped.split()
    if not words or len(words) > 10:
        return False
    significant = [w for w in words if w.lower() not in _MINOR_WORDS]
    if not significant:
        return False
    has_capital = False
    for word in significant:
        first = word.lstrip("(\"'“‘[")[:1]
        if not first:
            continue
        if first.isalpha():
            if not first.isupper():
                return False
            has_capital = True
    return has_capital


def _is_all_caps(stripped: str) -> bool:
    letters = [c for c in stripped if c.isalpha()]
    return len(letters) >= 2 and all(c.isupper() for c in letters)


def is_heading_line(line: str, next_line: Optional[str] = None) -> bool:
    """
    True when a single line reads as a heading.

    Args:
        line: Candidate line.
        next_line: The following line; None at end of text. Plain-text
            headings (numbered, ALL-CAPS, title case) must be followed
            by something, and title-case ones by a blank line.
    """
    stripped = line.strip()
    if not stripped:
        return False
    if _MD_HEADING.match(line):
        return True
    if next_line is None:
        return False
    if len(stripped) > MAX_HEADING_LENGTH or stripped.endswith((",", ";")):
        return False
    if ends_with_terminator(stripped):
        return False
    if _NUMBERED_SECTION.match(stripped):
        return len(stripped.split()) <= 12 and not _LIST_ITEM.match(next_line)
    if len(stripped) > 60:
        return False
    if _is_all_caps(stripped):
        return True
    return not next_line.strip() and _is_title_case(stripped)


def parse_blocks(text: str) -> list[Block]:
    """
    Split text into ordered, non-overlapping typed blocks.

    Every non-whitespace character belongs to exactly one block.
    """
    if not text or not text.strip():
        return []

    lines = _line_spans(text)
    n = len(lines)
    blocks: list[Block] = []

    def line(k: int) -> str:
        start, end = lines[k]
        return text[start:end]

    def blank(k: int) -> bool:
        return not line(k).strip()

    def add(role: StructuralRole, first: int, last: int) -> None:
        start = lines[first][0]
        end = lines[last][1]
        while start < end and text[start].isspace():
            start += 1
        while end > start and text[end - 1].isspace():
            end -= 1
        if start < end:
            blocks.append(Block(role, Span(start, end)))

    paragraph_start: Optional[int] = None

    def flush(upto: int) -> None:
        nonlocal paragraph_start
        if paragraph_start is not None:
            add(StructuralRole.CONTENT, paragraph_start, upto - 1)
            paragraph_start = None

    i = 0
    while i < n:
        current = line(i)
        if blank(i):
            flush(i)
            i += 1
            continue

        fence = _FENCE.match(current)
        if fence:
            flush(i)
            marker = fence.group(1)[0] * 3
            j = i + 1
            while j < n and not line(j).lstrip().startswith(marker):
                j += 1
            last = min(j, n - 1)
            add(StructuralRole.CODE_BLOCK, i, last)
            i = last + 1
            continue

        if _MD_HEADING.match(current):
            flush(i)
            add(StructuralRole.HEADING, i, i)
            i += 1
            continue

        next_line = line(i + 1) if i + 1 < n else None
        if (
            paragraph_start is None
            and next_line is not None
            and _SETEXT_UNDERLINE.match(next_line)
            and len(current.strip()) <= MAX_HEADING_LENGTH
            and not _is_table_row(current)
            and not _LIST_ITEM.match(current)
        ):
            add(StructuralRole.HEADING, i, i + 1)
            i += 2
            continue

        if _is_table_row(current) or (
            _is_tab_row(current) and next_line is not None and _is_tab_row(next_line)
        ):
            flush(i)
            pipe = _is_table_row(current)
            j = i + 1
            while j < n and (_is_table_row(line(j)) if pipe else _is_tab_row(line(j))):
                j += 1
            add(StructuralRole.TABLE, i, j - 1)
            i = j
            continue

        if paragraph_start is None and (i == 0 or blank(i - 1)) and is_heading_line(current, next_line):
            add(StructuralRole.HEADING, i, i)
            i += 1
            continue

        if _LIST_ITEM.match(current):
            flush(i)
            j = i + 1
            while j < n and not blank(j) and (
                _LIST_ITEM.match(line(j)) or line(j)[:1] in (" ", "\t")
            ):
                j += 1
            add(StructuralRole.LIST, i, j - 1)
            i = j
            continue

        if paragraph_start is None and _INDENTED.match(current) and (i == 0 or blank(i - 1)):
            j = i + 1
            while j < n and (
                _INDENTED.match(line(j))
                or (blank(j) and j + 1 < n and _INDENTED.match(line(j + 1)))
            ):
                j += 1
            add(StructuralRole.CODE_BLOCK, i, j - 1)
            i = j
            continue

        if paragraph_start is None:
            paragraph_start = i
        i += 1

    flush(n)
    return blocks


def line_units(text: str, span: Span) -> list[Span]:
    """Non-blank lines inside a span, keeping indentation."""
    units = []
    pos = span.start
    for raw in text[span.start:span.end].split("\n"):
        start = pos
        end = pos + len(raw.rstrip())
        if raw.strip():
            units.append(Span(start, end))
        pos += len(raw) + 1
    return units


def role_for_range(blocks: list[Block], start: int, end: int) -> StructuralRole:
    """
    Dominant role of the blocks overlapping [start, end).

    Headings only win when nothing else is in range.
    """
    weights: Counter = Counter()
    for block in blocks:
        if block.span.end <= start:
            continue
        if block.span.start >= end:
            break
        overlap = min(end, block.span.end) - max(start, block.span.start)
        if overlap > 0:
            weights[block.role] += overlap

    body = [(role, weight) for role, weight in weights.items() if role != StructuralRole.HEADING]
    if body:
        return max(body, key=lambda item: item[1])[0]
    if weights:
        return StructuralRole.HEADING
    return StructuralRole.CONTENT


def classify_role(text: str) -> StructuralRole:
    """Structural role of a standalone piece of text."""
    stripped = text.strip()
    if not stripped:
        return StructuralRole.CONTENT
    blocks = parse_blocks(text)
    if len(blocks) == 1 and blocks[0].role == StructuralRole.CONTENT:
        # A lone short line with nothing after it still reads as a heading
        if "\n" not in stripped and (_MD_HEADING.match(stripped) or _NUMBERED_SECTION.match(stripped)
                                     or _is_all_caps(stripped)) and not ends_with_terminator(stripped):
            return StructuralRole.HEADING
    return role_for_range(blocks, 0, len(text))


def has_heading_markers(blocks: list[Block]) -> bool:
    return any(block.role == StructuralRole.HEADING for block in blocks)


@dataclass
class DocumentAnalysis:
    """
    Segmentation of one document, computed once and shared by the
    selector, the strategies, the overlap injector and the scorer.
    """

    text: str
    sentences: list[Span]
    paragraphs: list[Span]
    paragraph_units: list[Span]
    blocks: list[Block]
    sentence_starts: list[int] = field(default_factory=list)
    sentence_ends: list[int] = field(default_factory=list)

    @classmethod
    def build(cls, text: str, long_paragraph_threshold: Optional[int] = None) -> "DocumentAnalysis":
        sentences = sentence_spans(text)
        paragraphs = paragraph_spans(text)
        if long_paragraph_threshold:
            paragraph_units = paragraph_spans(text, max_length=long_paragraph_threshold)
        else:
            paragraph_units = list(paragraphs)
        return cls(
            text=text,
            sentences=sentences,
            paragraphs=paragraphs,
            paragraph_units=paragraph_units,
            blocks=parse_blocks(text),
            sentence_starts=[span.start for span in sentences],
            sentence_ends=[span.end for span in sentences],
        )
