"""
Token Counting

Chunk boundaries are measured in characters. Token counts are reported
alongside for callers budgeting LLM context windows, using tiktoken's
cl100k_base encoding. Loading the encoding may download its BPE file
once, so counting is opt-in (EngineConfig.count_tokens).

Usage:
    from docchunker.token_counter import count_tokens, estimate_tokens

    count_tokens("Chunk boundaries are measured in characters.")   # exact
    estimate_tokens("Chunk boundaries are measured in characters.")  # len // 4
"""

import tiktoken

from .models import CHARS_PER_TOKEN

ENCODING_NAME = "cl100k_base"

# Loaded on first use and shared afterwards; tiktoken encoders are thread-safe.
_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    global _encoder
    if _encoder is None:
        _encoder = tiktoken.get_encoding(ENCODING_NAME)
    return _encoder


def count_tokens(text: str) -> int:
    """
    Exact cl100k_base token count of text.

    Args:
        text: Any string, typically a chunk's content.

    Returns:
        Number of tokens, 0 for empty text.
    """
    if not text:
        return 0
    return len(_get_encoder().encode(text))


def count_tokens_batch(texts: list[str]) -> list[int]:
    """Token counts for several texts, in input order."""
    if not texts:
        return []
    encoder = _get_encoder()
    return [len(tokens) for tokens in encoder.encode_batch(texts)]


def estimate_tokens(text: str) -> int:
    """Tokenizer-free estimate from the CHARS_PER_TOKEN factor."""
    if not text:
        return 0
    return max(1, len(text) // CHARS_PER_TOKEN)
