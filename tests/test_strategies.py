"""Tests for docchunker.strategies."""

import pytest

from docchunker.exceptions import UnsupportedStrategyError
from docchunker.models import ChunkingOptions, ChunkingStrategy, Span
from docchunker.strategies import (
    STRATEGIES,
    compute_boundaries,
    fixed_size_boundaries,
    intelligent_boundaries,
    pack_units,
    paragraph_boundaries,
    semantic_boundaries,
    split_window,
)
from docchunker.structure import DocumentAnalysis

# 50 characters
SENTENCE = "The quick brown fox jumps over the lazy dog again."
# 101 characters
PARAGRAPH = f"{SENTENCE} {SENTENCE}"
# Three paragraphs: [0, 101), [103, 204), [206, 307)
THREE_PARAGRAPHS = "\n\n".join([PARAGRAPH] * 3)


def _options(max_size: int = 256, overlap: int = 0, **kwargs) -> ChunkingOptions:
    return ChunkingOptions(max_chunk_size=max_size, overlap_size=overlap, **kwargs)


def _assert_partition(cores: list[Span], text: str) -> None:
    assert cores[0].start == 0
    assert cores[-1].end == len(text)
    for left, right in zip(cores, cores[1:]):
        assert left.end == right.start
        assert left.length > 0


class TestSplitWindow:
    def test_cuts_at_word_starts(self):
        text = "word " * 50
        pieces = split_window(text, 0, len(text), 42)

        _assert_partition(pieces, text)
        assert all(piece.length <= 42 for piece in pieces)
        assert all(piece.start % 5 == 0 for piece in pieces)

    def test_hard_cut_without_whitespace(self):
        pieces = split_window("x" * 100, 0, 100, 30)
        assert pieces == [Span(0, 30), Span(30, 60), Span(60, 90), Span(90, 100)]

    def test_prefers_sentence_end(self):
        text = "Aaaa bbbb. Cccc dddd eeee ffff gggg."
        assert split_window(text, 0, len(text), 20, sentence_ends=[10, 36])[0] == Span(0, 11)
        assert split_window(text, 0, len(text), 20)[0] == Span(0, 16)

    def test_short_region_untouched(self):
        assert split_window("short text", 0, 10, 50) == [Span(0, 10)]


class TestPackUnits:
    TEXT = "One. Two. Three."
    UNITS = [Span(0, 4), Span(5, 9), Span(10, 16)]

    def test_everything_fits(self):
        assert pack_units(self.TEXT, self.UNITS, 100) == [Span(0, 16)]

    def test_gap_goes_to_earlier_chunk(self):
        assert pack_units(self.TEXT, self.UNITS, 10) == [Span(0, 10), Span(10, 16)]

    def test_break_rule(self):
        cores = pack_units(self.TEXT, self.UNITS, 100, break_before=lambda k, first: k == 2)
        assert cores == [Span(0, 10), Span(10, 16)]

    def test_oversized_unit_is_split(self):
        text = "Short. " + "x" * 30
        cores = pack_units(text, [Span(0, 6), Span(7, 37)], 10)
        assert cores == [Span(0, 7), Span(7, 17), Span(17, 27), Span(27, 37)]

    def test_no_units(self):
        assert pack_units("   ", [], 10) == []


class TestFixedSize:
    def test_windows_leave_room_for_overlap(self):
        text = "word " * 49 + "word"
        cores = fixed_size_boundaries(DocumentAnalysis.build(text), _options(50, 10))

        _assert_partition(cores, text)
        assert all(core.length <= 40 for core in cores)
        for core in cores[1:]:
            assert text[core.start - 1] == " " and text[core.start] == "w"

    def test_blank_text(self):
        assert fixed_size_boundaries(DocumentAnalysis.build("  \n "), _options()) == []


class TestParagraph:
    def test_packs_whole_paragraphs(self):
        analysis = DocumentAnalysis.build(THREE_PARAGRAPHS)
        cores = paragraph_boundaries(analysis, _options(256))

        assert cores == [Span(0, 206), Span(206, 307)]

    def test_oversized_paragraph_cut_at_sentence_ends(self):
        analysis = DocumentAnalysis.build(THREE_PARAGRAPHS)
        cores = paragraph_boundaries(analysis, _options(80))

        _assert_partition(cores, THREE_PARAGRAPHS)
        for core in cores:
            assert core.length <= 80
            assert core.slice(THREE_PARAGRAPHS).strip().endswith(".")


class TestSemantic:
    TEXT = "Alpha one. Alpha two.\n\nBeta one. Beta two."

    def test_closes_at_paragraph_end(self):
        cores = semantic_boundaries(DocumentAnalysis.build(self.TEXT), _options(1000))
        assert [core.slice(self.TEXT) for core in cores] == [
            "Alpha one. Alpha two.\n\n",
            "Beta one. Beta two.",
        ]

    def test_min_sentences_keeps_paragraphs_together(self):
        options = _options(1000, min_sentences_per_chunk=3)
        cores = semantic_boundaries(DocumentAnalysis.build(self.TEXT), options)
        assert cores == [Span(0, len(self.TEXT))]

    def test_heading_is_not_a_body_sentence(self):
        text = "# Intro\n\nFirst body sentence. Second body sentence."
        cores = semantic_boundaries(DocumentAnalysis.build(text), _options(1000))
        assert len(cores) == 1

    def test_many_sentences_do_not_collapse(self):
        text = "\n\n".join(f"Paragraph {i} has one sentence." for i in range(6))
        cores = semantic_boundaries(DocumentAnalysis.build(text), _options(1000))
        assert len(cores) > 1
        _assert_partition(cores, text)


class TestIntelligent:
    def test_new_chunk_at_heading(self):
        text = "# One\n\nBody of one.\n\n# Two\n\nBody of two."
        cores = intelligent_boundaries(DocumentAnalysis.build(text), _options(1000))
        assert cores == [Span(0, 21), Span(21, 40)]

    def test_consecutive_headings_stay_together(self):
        text = "# Guide\n## Setup\n\nInstall it."
        cores = intelligent_boundaries(DocumentAnalysis.build(text), _options(1000))
        assert len(cores) == 1

    def test_code_block_kept_whole(self):
        code = "```\n" + "x = 1\n" * 5 + "```"
        text = f"Intro sentence here.\n\n{code}\n\nAfter text."
        cores = intelligent_boundaries(DocumentAnalysis.build(text), _options(40))

        _assert_partition(cores, text)
        assert any(core.slice(text).strip() == code for core in cores)

    def test_oversized_table_split_on_rows(self):
        text = "\n".join(["| a | b |"] * 6)
        cores = intelligent_boundaries(DocumentAnalysis.build(text), _options(30))

        _assert_partition(cores, text)
        assert len(cores) > 1
        for core in cores:
            assert core.length <= 30
            assert core.slice(text).startswith("|")

    def test_without_structure_preservation(self):
        text = "# One\n\nBody of one.\n\n# Two\n\nBody of two."
        options = _options(1000, preserve_structure=False)
        assert intelligent_boundaries(DocumentAnalysis.build(text), options) == [Span(0, 40)]


class TestComputeBoundaries:
    def test_registry_covers_concrete_strategies(self):
        assert set(STRATEGIES) == {
            ChunkingStrategy.FIXED_SIZE,
            ChunkingStrategy.PARAGRAPH,
            ChunkingStrategy.SEMANTIC,
            ChunkingStrategy.INTELLIGENT,
        }

    def test_auto_rejected(self):
        analysis = DocumentAnalysis.build("Some text.")
        with pytest.raises(UnsupportedStrategyError):
            compute_boundaries(analysis, _options(), ChunkingStrategy.AUTO)

    @pytest.mark.parametrize("strategy", list(STRATEGIES))
    def test_every_strategy_partitions(self, strategy):
        analysis = DocumentAnalysis.build(THREE_PARAGRAPHS)
        cores = compute_boundaries(analysis, _options(120, 20), strategy)

        _assert_partition(cores, THREE_PARAGRAPHS)
        assert all(core.length <= 120 for core in cores)
