"""
Auto Strategy Selection

Picks a concrete strategy from document signals:
1. Heading markers, code blocks or tables -> INTELLIGENT
2. Long average paragraphs -> INTELLIGENT
3. Several blank-line separated paragraphs -> PARAGRAPH
4. Anything else -> SEMANTIC

FIXED_SIZE is never selected automatically.
"""

from typing import Optional

from .logging_config import get_logger
from .models import ChunkingStrategy, StrategySelection, StructuralRole
from .structure import DocumentAnalysis, has_heading_markers

logger = get_logger(__name__)

DEFAULT_LONG_PARAGRAPH_THRESHOLD = 1500
MIN_WELL_FORMED_PARAGRAPHS = 2


def select_strategy(
    text: str,
    analysis: Optional[DocumentAnalysis] = None,
    long_paragraph_threshold: int = DEFAULT_LONG_PARAGRAPH_THRESHOLD,
) -> StrategySelection:
    """
    Choose PARAGRAPH, SEMANTIC or INTELLIGENT for a document.

    Args:
        text: Document text (after noise filtering).
        analysis: Precomputed segmentation of text, built when omitted.
        long_paragraph_threshold: Average paragraph length (characters)
            from which a document counts as long-form.

    Returns:
        StrategySelection with the choice, the reasons and the signals.
    """
    if analysis is None:
        analysis = DocumentAnalysis.build(text)

    paragraphs = analysis.paragraphs
    sentences = analysis.sentences
    has_headings = has_heading_markers(analysis.blocks)
    has_code_or_tables = any(
        block.role in (StructuralRole.CODE_BLOCK, StructuralRole.TABLE)
        for block in analysis.blocks
    )
    avg_paragraph = sum(p.length for p in paragraphs) / len(paragraphs) if paragraphs else 0.0
    avg_sentence = sum(s.length for s in sentences) / len(sentences) if sentences else 0.0

    reasons: list[str] = []
    if has_headings:
        reasons.append("heading markers detected")
    if has_code_or_tables:
        reasons.append("code blocks or tables detected")
    if avg_paragraph > long_paragraph_threshold:
        reasons.append(f"average paragraph length {avg_paragraph:.0f} exceeds {long_paragraph_threshold}")

    if reasons:
        strategy = ChunkingStrategy.INTELLIGENT
    elif len(paragraphs) >= MIN_WELL_FORMED_PARAGRAPHS:
        strategy = ChunkingStrategy.PARAGRAPH
        reasons.append(f"{len(paragraphs)} blank-line separated paragraphs")
    else:
        strategy = ChunkingStrategy.SEMANTIC
        reasons.append("no paragraph structure")

    logger.debug("Auto selected %s: %s", strategy.value, "; ".join(reasons))
    return StrategySelection(
        strategy=strategy,
        reasons=reasons,
        has_headings=has_headings,
        paragraph_count=len(paragraphs),
        average_paragraph_length=avg_paragraph,
        average_sentence_length=avg_sentence,
        text_length=len(text),
    )
