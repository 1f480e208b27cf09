"""Tests for docchunker.structure."""

from docchunker.models import StructuralRole
from docchunker.structure import (
    DocumentAnalysis,
    classify_role,
    is_heading_line,
    parse_blocks,
    role_for_range,
)


def _roles(text: str) -> list[StructuralRole]:
    return [block.role for block in parse_blocks(text)]


class TestHeadingLines:
    def test_markdown_heading(self):
        assert is_heading_line("## Installation")
        assert is_heading_line("# Title", "Body text.")

    def test_numbered_section(self):
        assert is_heading_line("2.3 Evaluation Method", "The method works as follows.")
        assert is_heading_line("Chapter 4 Results", "")

    def test_all_caps(self):
        assert is_heading_line("INTRODUCTION", "This document explains the setup.")

    def test_title_case_needs_blank_line(self):
        assert is_heading_line("Getting Started", "")
        assert not is_heading_line("Getting Started", "continues on the next line")

    def test_sentence_is_not_heading(self):
        assert not is_heading_line("This is a complete sentence.", "")

    def test_plain_heading_needs_following_text(self):
        assert not is_heading_line("INTRODUCTION", None)

    def test_long_line_is_not_heading(self):
        assert not is_heading_line("WORD " * 30, "")

    def test_line_starting_with_year_is_not_heading(self):
        assert not is_heading_line("2023 revenue increased by twelve percent compared with", "the prior year.")


class TestParseBlocks:
    def test_empty(self):
        assert parse_blocks("") == []
        assert parse_blocks("  \n\n ") == []

    def test_paragraphs(self):
        assert _roles("First paragraph.\n\nSecond paragraph.") == [
            StructuralRole.CONTENT,
            StructuralRole.CONTENT,
        ]

    def test_markdown_heading_and_body(self):
        text = "# Overview\nThe system reads files.\n\nIt writes chunks."
        assert _roles(text) == [
            StructuralRole.HEADING,
            StructuralRole.CONTENT,
            StructuralRole.CONTENT,
        ]

    def test_setext_heading(self):
        text = "Overview\n========\n\nBody text here."
        blocks = parse_blocks(text)
        assert blocks[0].role == StructuralRole.HEADING
        assert blocks[0].span.slice(text) == "Overview\n========"

    def test_fenced_code_block(self):
        text = "Run this:\n\n```python\nprint('a')\n\nprint('b')\n```\n\nDone."
        blocks = parse_blocks(text)
        code = [b for b in blocks if b.role == StructuralRole.CODE_BLOCK]
        assert len(code) == 1
        assert code[0].span.slice(text).startswith("```python")
        assert code[0].span.slice(text).endswith("```")

    def test_unclosed_fence_runs_to_end(self):
        text = "Intro.\n\n```\ncode line\nmore code"
        assert _roles(text)[-1] == StructuralRole.CODE_BLOCK

    def test_indented_code_block(self):
        text = "Example follows.\n\n    x = 1\n    y = 2\n\nAfter."
        assert StructuralRole.CODE_BLOCK in _roles(text)

    def test_pipe_table(self):
        text = "Results:\n\n| name | value |\n|------|-------|\n| a    | 1     |\n\nEnd."
        blocks = parse_blocks(text)
        table = [b for b in blocks if b.role == StructuralRole.TABLE]
        assert len(table) == 1
        assert table[0].span.slice(text).count("\n") == 2

    def test_tab_table(self):
        text = "name\tvalue\tunit\nalpha\t1\tkg\nbeta\t2\tkg"
        assert _roles(text) == [StructuralRole.TABLE]

    def test_bullet_list(self):
        text = "Steps:\n\n- install\n- configure\n  with options\n- run"
        blocks = parse_blocks(text)
        assert blocks[-1].role == StructuralRole.LIST
        assert blocks[-1].span.slice(text).endswith("- run")

    def test_numbered_list(self):
        text = "1. First step\n2. Second step\n3. Third step"
        assert _roles(text) == [StructuralRole.LIST]

    def test_wrapped_prose_starting_with_number(self):
        text = "2023 was a good year for us\nbecause sales grew in every region."
        assert _roles(text) == [StructuralRole.CONTENT]

    def test_blocks_cover_all_non_whitespace(self):
        text = "# T\n\nBody one.\n\n- a\n- b\n\n| x | y |\n\nEnd."
        covered = "".join(block.span.slice(text) for block in parse_blocks(text))
        assert covered.replace("\n", "").replace(" ", "") == text.replace("\n", "").replace(" ", "")

    def test_blocks_ordered(self):
        text = "# A\n\nText.\n\n```\ncode\n```\n\n- item"
        blocks = parse_blocks(text)
        for left, right in zip(blocks, blocks[1:]):
            assert left.span.end <= right.span.start


class TestClassifyRole:
    def test_plain_content(self):
        assert classify_role("Just a normal sentence. And another one.") == StructuralRole.CONTENT

    def test_table(self):
        assert classify_role("| a | b |\n|---|---|\n| 1 | 2 |") == StructuralRole.TABLE

    def test_code(self):
        assert classify_role("```\nfor i in range(3):\n    print(i)\n```") == StructuralRole.CODE_BLOCK

    def test_list(self):
        assert classify_role("- one\n- two\n- three") == StructuralRole.LIST

    def test_heading_only(self):
        assert classify_role("# Installation") == StructuralRole.HEADING
        assert classify_role("INSTALLATION") == StructuralRole.HEADING

    def test_heading_with_body_is_content(self):
        assert classify_role("# Setup\n\nInstall the package and run it.") == StructuralRole.CONTENT

    def test_empty(self):
        assert classify_role("   ") == StructuralRole.CONTENT


class TestRoleForRange:
    def test_dominant_role_wins(self):
        text = "Short intro.\n\n| a | b |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |"
        blocks = parse_blocks(text)
        assert role_for_range(blocks, 0, len(text)) == StructuralRole.TABLE

    def test_range_without_blocks(self):
        assert role_for_range([], 0, 10) == StructuralRole.CONTENT


class TestDocumentAnalysis:
    def test_build(self):
        text = "# Title\n\nFirst sentence. Second sentence.\n\nThird one."
        analysis = DocumentAnalysis.build(text)
        assert len(analysis.paragraphs) == 3
        assert analysis.sentence_starts == [s.start for s in analysis.sentences]
        assert analysis.sentence_ends == [s.end for s in analysis.sentences]
        assert analysis.blocks[0].role == StructuralRole.HEADING

    def test_long_paragraph_threshold(self):
        text = " ".join(f"Sentence {i} is fairly ordinary." for i in range(40))
        analysis = DocumentAnalysis.build(text, long_paragraph_threshold=200)
        assert len(analysis.paragraphs) == 1
        assert len(analysis.paragraph_units) > 1
