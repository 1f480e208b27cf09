"""
docchunker - Structure-aware document chunking for RAG

Splits extracted document text into bounded, overlapping chunks with
structural role, quality scores, document domain, technical keywords
and page numbers. Pure in-memory and deterministic: the same text and
options always give the same chunks.

Quick Start:
    from docchunker import DocumentChunker, ChunkingOptions

    chunker = DocumentChunker()
    result = chunker.chunk(text, ChunkingOptions(max_chunk_size=1024, overlap_size=128))
    print(result.strategy, result.total_chunks)
    print(result.to_json())
"""

__version__ = "1.0.0"

from .chunker import DocumentChunker, split_regions
from .config import EngineConfig, NoiseFilterConfig
from .exceptions import (
    ChunkingCancelledError,
    ChunkingError,
    InvalidOptionsError,
    UnsupportedStrategyError,
)
from .logging_config import get_logger, setup_logging
from .models import (
    Chunk,
    ChunkingOptions,
    ChunkingResult,
    ChunkingStats,
    ChunkingStrategy,
    DocumentDomain,
    DocumentSummary,
    DocumentText,
    QualityReport,
    QualityWeights,
    StructuralRole,
    summarize_chunks,
)
from .noise_filter import NoiseFilter
from .selector import select_strategy
from .sentence_splitter import split_paragraphs, split_sentences
from .token_counter import count_tokens

__all__ = [
    "__version__",
    "DocumentChunker",
    "split_regions",
    "EngineConfig",
    "NoiseFilterConfig",
    "ChunkingError",
    "InvalidOptionsError",
    "UnsupportedStrategyError",
    "ChunkingCancelledError",
    "setup_logging",
    "get_logger",
    "Chunk",
    "ChunkingOptions",
    "ChunkingResult",
    "ChunkingStats",
    "ChunkingStrategy",
    "DocumentDomain",
    "DocumentSummary",
    "DocumentText",
    "QualityReport",
    "QualityWeights",
    "StructuralRole",
    "summarize_chunks",
    "NoiseFilter",
    "select_strategy",
    "split_sentences",
    "split_paragraphs",
    "count_tokens",
]
