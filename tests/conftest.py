"""
Pytest fixtures for docchunker tests.
"""

import pytest

from docchunker import DocumentChunker, EngineConfig, NoiseFilterConfig


SAMPLE_MARKDOWN = """# Deployment Guide

This guide explains how to deploy the API service. It covers Docker images and Kubernetes manifests.

## Requirements

- Python 3.10 or newer
- Docker 24
- A Kubernetes cluster

## Configuration

Set the environment variables before starting the server. The defaults work for local development.

```
export API_PORT=8080
export API_HOST=0.0.0.0
```

| Variable | Default |
|----------|---------|
| API_PORT | 8080    |
| API_HOST | 0.0.0.0 |

The service reads its configuration once at startup."""


SAMPLE_SENTENCE = "The quick brown fox jumps over the lazy dog again."


@pytest.fixture
def sample_markdown():
    """A small structured document with headings, a list, code and a table."""
    return SAMPLE_MARKDOWN


@pytest.fixture
def sample_paragraphs():
    """Three paragraphs of four 50-character sentences each."""
    paragraph = " ".join([SAMPLE_SENTENCE] * 4)
    return "\n\n".join([paragraph] * 3)


@pytest.fixture
def chunker():
    """A chunker with default configuration."""
    return DocumentChunker()


@pytest.fixture
def filtering_chunker():
    """A chunker with the header/footer filter enabled."""
    return DocumentChunker(EngineConfig(noise_filter=NoiseFilterConfig(enabled=True)))
