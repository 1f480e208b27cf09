"""
Document Chunker - Orchestration of the chunking engine

Takes plain text (or a DocumentText with page offsets) and produces a
ChunkingResult: ordered, overlapping chunks with structural role,
quality scores, domain, keywords and page numbers.

Algorithm:
1. Validate options (before any text is touched).
2. Remove repeating headers/footers (opt-in noise filter), remapping
   page offsets onto the filtered text.
3. Segment once: sentences, paragraphs, structural blocks.
4. Resolve AUTO to a concrete strategy and compute core ranges.
5. Inject overlap from the previous chunk's core.
6. Build each chunk: role, scores against its neighbours, keywords,
   pages, optional token count.

The chunker holds configuration only; every call is independent, so
one instance can serve many threads.

Usage:
    from docchunker import DocumentChunker, ChunkingOptions

    chunker = DocumentChunker()
    result = chunker.chunk(text, ChunkingOptions(strategy="paragraph", max_chunk_size=800))
    for chunk in result.chunks:
        print(chunk.index, chunk.quality_score, chunk.content[:60])

    # Large documents, one chunk at a time
    for chunk in chunker.iter_chunks(text, cancel_event=stop_event):
        store(chunk)
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Protocol, Union

from .config import EngineConfig
from .exceptions import ChunkingCancelledError, InvalidOptionsError
from .logging_config import get_logger
from .models import (
    Chunk,
    ChunkingOptions,
    ChunkingResult,
    ChunkingStats,
    ChunkingStrategy,
    DocumentDomain,
    DocumentText,
    Span,
    StrategySelection,
    pages_for_range,
)
from .noise_filter import NoiseFilter
from .overlap import inject_overlap
from .quality import build_quality_report, score_chunk
from .selector import select_strategy
from .sentence_splitter import paragraph_spans
from .strategies import compute_boundaries
from .structure import DocumentAnalysis, role_for_range
from .token_counter import count_tokens
from .vocabulary import detect_document_domain, extract_technical_keywords

logger = get_logger(__name__)


class CancelSignal(Protocol):
    """Anything with is_set(), e.g. threading.Event or asyncio.Event."""

    def is_set(self) -> bool: ...


@dataclass
class _ChunkPlan:
    """Everything decided before the first chunk is emitted."""
    options: ChunkingOptions
    text: str
    analysis: DocumentAnalysis
    strategy: ChunkingStrategy
    selection: Optional[StrategySelection]
    cores: list[Span]
    starts: list[int]
    domain: DocumentDomain
    page_offsets: list[int] = field(default_factory=list)
    page_count: int = 0
    lines_removed: int = 0


class DocumentChunker:
    """
    Splits document text into overlapping, structure-aware chunks
    with quality scores and metadata for RAG retrieval.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.noise_filter = NoiseFilter(self.config.noise_filter)

    def chunk(
        self,
        document: Union[str, DocumentText],
        options: Optional[ChunkingOptions] = None,
        page_count: Optional[int] = None,
        cancel_event: Optional[CancelSignal] = None,
    ) -> ChunkingResult:
        """
        Chunk a document.

        Args:
            document: Plain text, or DocumentText carrying page offsets.
            options: Per-call options; defaults to ChunkingOptions().
            page_count: Physical page count for the noise filter when
                document has no page offsets.
            cancel_event: Checked between chunk emissions; when set,
                ChunkingCancelledError is raised.

        Returns:
            ChunkingResult with chunks, statistics and quality report.

        Raises:
            InvalidOptionsError: Options are inconsistent.
            UnsupportedStrategyError: Strategy cannot be dispatched.
            ChunkingCancelledError: cancel_event was set.
        """
        plan = self._prepare(document, options, page_count)
        chunks = list(self._emit(plan, cancel_event))

        stats = self._compute_stats(plan, chunks)
        quality = build_quality_report(chunks)
        logger.info(
            "Chunked %d characters into %d chunk(s) with %s strategy",
            len(plan.text), len(chunks), plan.strategy.value,
        )

        return ChunkingResult(
            options=plan.options,
            strategy=plan.strategy,
            selection=plan.selection,
            filtered_text=plan.text,
            chunks=chunks,
            stats=stats,
            quality=quality,
        )

    def iter_chunks(
        self,
        document: Union[str, DocumentText],
        options: Optional[ChunkingOptions] = None,
        page_count: Optional[int] = None,
        cancel_event: Optional[CancelSignal] = None,
    ) -> Iterator[Chunk]:
        """
        Lazily produce the same chunks as chunk().

        Options are validated and boundaries computed on call, so errors
        surface here rather than on the first next().
        """
        plan = self._prepare(document, options, page_count)
        return self._emit(plan, cancel_event)

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _prepare(
        self,
        document: Union[str, DocumentText],
        options: Optional[ChunkingOptions],
        page_count: Optional[int],
    ) -> _ChunkPlan:
        options = options or ChunkingOptions()
        options.validate_bounds()

        if not isinstance(document, DocumentText):
            document = DocumentText(text=document)

        # Step 1: Noise filtering
        filtered = self.noise_filter.filter_document(document, page_count)
        text = filtered.text

        # Step 2: Segmentation
        analysis = DocumentAnalysis.build(text, self.config.long_paragraph_threshold)

        # Step 3: Strategy resolution
        selection = None
        strategy = options.strategy
        if strategy == ChunkingStrategy.AUTO:
            selection = select_strategy(text, analysis, self.config.auto_long_paragraph_threshold)
            strategy = selection.strategy

        # Step 4: Boundaries and overlap
        cores = compute_boundaries(analysis, options, strategy) if text.strip() else []
        starts = inject_overlap(text, cores, options.overlap_size, analysis.sentence_starts)

        return _ChunkPlan(
            options=options,
            text=text,
            analysis=analysis,
            strategy=strategy,
            selection=selection,
            cores=cores,
            starts=starts,
            domain=detect_document_domain(text),
            page_offsets=filtered.page_offsets,
            page_count=document.page_count if page_count is None else page_count,
            lines_removed=filtered.lines_removed,
        )

    def _emit(self, plan: _ChunkPlan, cancel_event: Optional[CancelSignal]) -> Iterator[Chunk]:
        for index in range(len(plan.cores)):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Chunking cancelled after %d chunk(s)", index)
                raise ChunkingCancelledError(chunks_emitted=index)
            yield self._build_chunk(plan, index)

    def _build_chunk(self, plan: _ChunkPlan, index: int) -> Chunk:
        text = plan.text
        core = plan.cores[index]
        start = plan.starts[index]
        core_text = core.slice(text)
        previous = plan.cores[index - 1].slice(text) if index > 0 else None
        following = plan.cores[index + 1].slice(text) if index + 1 < len(plan.cores) else None

        role = role_for_range(plan.analysis.blocks, core.start, core.end)
        scores = score_chunk(core_text, previous, following, self.config.quality_weights, role)
        content = text[start:core.end]

        chunk = Chunk(
            index=index,
            content=content,
            start_offset=start,
            end_offset=core.end,
            core_start_offset=core.start,
            has_overlap_with_previous=start < core.start,
            structural_role=scores.structural_role,
            quality_score=scores.quality,
            completeness_score=scores.completeness,
            density=scores.density,
            boundary_score=scores.boundary,
            technical_keywords=extract_technical_keywords(core_text),
            document_domain=plan.domain,
            page_numbers=pages_for_range(plan.page_offsets, core.start, core.end),
            strategy=plan.strategy,
            token_count=count_tokens(content) if self.config.count_tokens else None,
        )
        logger.debug(
            "Chunk %d [%d:%d) role=%s quality=%.2f",
            index, core.start, core.end, chunk.structural_role.value, chunk.quality_score,
        )
        return chunk

    def _compute_stats(self, plan: _ChunkPlan, chunks: list[Chunk]) -> ChunkingStats:
        sizes = [chunk.core_length for chunk in chunks]
        total_tokens = None
        if self.config.count_tokens:
            total_tokens = sum(chunk.token_count or 0 for chunk in chunks)

        return ChunkingStats(
            total_chunks=len(chunks),
            total_characters=len(plan.text),
            avg_chunk_size=sum(sizes) / len(sizes) if sizes else 0.0,
            min_chunk_size=min(sizes) if sizes else 0,
            max_chunk_size=max(sizes) if sizes else 0,
            total_sentences=len(plan.analysis.sentences),
            total_paragraphs=len(plan.analysis.paragraphs),
            total_pages=plan.page_count,
            lines_filtered=plan.lines_removed,
            total_tokens=total_tokens,
        )


def split_regions(text: str, target_size: int) -> list[Span]:
    """
    Cut text into regions of roughly target_size characters at paragraph starts.

    Regions partition the text and can be chunked independently (e.g. in
    a process pool) without a paragraph straddling two regions. A single
    paragraph longer than target_size forms its own region.
    """
    if target_size <= 0:
        raise InvalidOptionsError(f"target_size must be positive, got {target_size}", field="target_size")
    if not text:
        return []

    regions: list[Span] = []
    start = 0
    for paragraph in paragraph_spans(text):
        if paragraph.start > start and paragraph.end - start > target_size:
            regions.append(Span(start, paragraph.start))
            start = paragraph.start
    regions.append(Span(start, len(text)))
    return regions
