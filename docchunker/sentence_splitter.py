"""
Sentence and Paragraph Segmenter

Regex-based boundary detection that returns character spans into the
original text, so every downstream stage can slice the source instead
of rebuilding strings.

Design:
- Locate each terminator (. ! ? and full-width 。！？) followed by
  whitespace or end of text, then slice between consecutive boundaries.
  Text without terminators is one sentence per paragraph, never lost
- Protect abbreviations (Dr., e.g., z.B.), initials and list
  enumerators ("1. ") from triggering false splits
- A dot followed by a lowercase word is not a boundary
- Sentences never cross a blank-line paragraph break
- No external dependencies (no spaCy, no NLTK)

Usage:
    from docchunker.sentence_splitter import split_sentences, sentence_spans

    split_sentences("Dr. Smith arrived. He sat down.")
    # ["Dr. Smith arrived.", "He sat down."]
"""

import re
from typing import Optional

from .models import Span

_TERMINATOR = re.compile(
    r"[.!?]+[\"'”’)\]]*(?=\s|$)"
    r"|[。！？]+[\"'”’」』)\]]*"
)

_PARAGRAPH_BREAK = re.compile(r"\n[ \t\r\f\v]*\n\s*")

_ENDS_WITH_TERMINATOR = re.compile(r"(?:[.!?]+|[。！？]+)[\"'”’」』)\]]*$")

# Abbreviations that should NOT end a sentence (compared lowercased,
# without the trailing dot).
_ABBREVIATIONS = frozenset({
    # Titles
    "mr", "mrs", "ms", "dr", "prof", "sr", "jr", "st", "rev", "gen", "col", "lt",
    # Latin / references
    "e.g", "i.e", "etc", "vs", "cf", "al", "viz", "approx", "ca",
    "fig", "figs", "eq", "eqs", "no", "nos", "vol", "vols", "pp", "ch", "sec", "ref",
    # Organisations
    "inc", "ltd", "co", "corp", "dept", "univ", "est",
    # Months (abbreviated)
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
    # German
    "z.b", "d.h", "u.a", "bzw", "usw", "vgl", "ggf", "nr", "abs", "inkl", "evtl",
})

_MULTI_ABBREV = re.compile(r"(?:[^\W\d_]\.)+[^\W\d_]")
_INITIAL = re.compile(r"[^\W\d_]")
_INITIAL_TOKEN = re.compile(r"[^\W\d_]\.")

# Lowercase words that commonly introduce a name ("by J. Smith")
_NAME_LEADS = frozenset({"by", "von", "van", "de", "du"})


def _preceding_token(text: str, pos: int) -> tuple[str, int]:
    start = pos
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    return text[start:pos], start


def _is_initial(text: str, letter: str, token_start: int) -> bool:
    """
    True when a single letter before a dot is a name initial or a
    line-start enumerator, not the last word of a sentence ("plan B.").
    """
    line_start = text.rfind("\n", 0, token_start) + 1
    pos = token_start
    while pos > line_start and text[pos - 1].isspace():
        pos -= 1
    if pos == line_start:
        return True
    if not letter.isupper():
        return False

    previous, _ = _preceding_token(text, pos)
    previous = previous.lstrip("(\"'“‘[")
    if previous.lower() in _NAME_LEADS or previous.rstrip(".").lower() in _ABBREVIATIONS:
        return True
    if _INITIAL_TOKEN.fullmatch(previous):
        return True
    return previous[:1].isupper() and not _ENDS_WITH_TERMINATOR.search(previous)


def _is_protected(text: str, match: re.Match) -> bool:
    """True when a terminator match is an abbreviation or enumerator dot."""
    if match.group().rstrip("\"'”’)]") != ".":
        return False

    token, token_start = _preceding_token(text, match.start())
    word = token.lstrip("(\"'“‘[")
    bare = word.lower()
    if bare in _ABBREVIATIONS:
        return True
    if _MULTI_ABBREV.fullmatch(bare):
        return True
    if _INITIAL.fullmatch(bare) and _is_initial(text, word, token_start):
        return True

    if bare.isdigit() and len(bare) <= 3:
        line_start = text.rfind("\n", 0, token_start) + 1
        if not text[line_start:token_start].strip():
            return True

    # "ca. drei Euro", "approx. ten": a lowercase continuation is not a new sentence
    rest = text[match.end():match.end() + 40].lstrip()
    if rest and rest[0].islower():
        return True
    return False


def _trimmed(text: str, start: int, end: int) -> Optional[Span]:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    if start >= end:
        return None
    return Span(start, end)


def _raw_paragraphs(text: str) -> list[Span]:
    spans: list[Span] = []
    cursor = 0
    for match in _PARAGRAPH_BREAK.finditer(text):
        span = _trimmed(text, cursor, match.start())
        if span:
            spans.append(span)
        cursor = match.end()
    span = _trimmed(text, cursor, len(text))
    if span:
        spans.append(span)
    return spans


def _sentences_in(text: str, start: int, end: int) -> list[Span]:
    spans: list[Span] = []
    cursor = start
    for match in _TERMINATOR.finditer(text, start, end):
        if _is_protected(text, match):
            continue
        span = _trimmed(text, cursor, match.end())
        if span:
            spans.append(span)
        cursor = match.end()
    tail = _trimmed(text, cursor, end)
    if tail:
        spans.append(tail)
    return spans


def sentence_spans(text: str) -> list[Span]:
    """
    Locate sentences as spans over text.

    Spans exclude surrounding whitespace, never overlap and are ordered.
    A paragraph without any terminator is a single span.
    """
    if not text or not text.strip():
        return []
    spans: list[Span] = []
    for paragraph in _raw_paragraphs(text):
        spans.extend(_sentences_in(text, paragraph.start, paragraph.end))
    return spans


def paragraph_spans(text: str, max_length: Optional[int] = None) -> list[Span]:
    """
    Locate paragraphs (runs separated by blank lines) as spans.

    Args:
        text: Source text.
        max_length: When set, a paragraph longer than this is split into
            groups of whole sentences, each no longer than max_length
            unless a single sentence already is.

    Returns:
        Ordered, non-overlapping spans without surrounding whitespace.
    """
    if not text or not text.strip():
        return []

    paragraphs = _raw_paragraphs(text)
    if max_length is None:
        return paragraphs

    result: list[Span] = []
    for paragraph in paragraphs:
        if paragraph.length <= max_length:
            result.append(paragraph)
            continue
        group_start: Optional[int] = None
        group_end = paragraph.start
        for sentence in _sentences_in(text, paragraph.start, paragraph.end):
            if group_start is not None and sentence.end - group_start > max_length:
                result.append(Span(group_start, group_end))
                group_start = None
            if group_start is None:
                group_start = sentence.start
            group_end = sentence.end
        if group_start is not None:
            result.append(Span(group_start, group_end))
    return result


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentence strings.

    Args:
        text: Input text to split into sentences.

    Returns:
        List of sentence strings. Empty/whitespace input returns empty list.
        Each sentence is stripped of leading/trailing whitespace.
    """
    if not text:
        return []
    return [span.slice(text) for span in sentence_spans(text)]


def split_paragraphs(text: str) -> list[str]:
    """Split text into paragraph strings at blank lines."""
    if not text:
        return []
    return [span.slice(text) for span in paragraph_spans(text)]


def ends_with_terminator(text: str) -> bool:
    """True when text (ignoring trailing whitespace) ends a sentence."""
    return bool(_ENDS_WITH_TERMINATOR.search(text.rstrip()))


def sentences_within(text: str, span: Span) -> list[Span]:
    """Sentence spans inside one region, e.g. a single structural block."""
    return _sentences_in(text, span.start, span.end)
