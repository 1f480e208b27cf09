"""
Keyword Vocabularies

Immutable keyword tables plus the two lexical classifiers built on them:
document domain detection and per-chunk technical keyword extraction.
The tables are module constants built once at import and never mutated,
so they are safe to share between threads.

Usage:
    from docchunker.vocabulary import detect_document_domain, extract_technical_keywords

    detect_document_domain("The REST API endpoint queries the database.")
    # DocumentDomain.TECHNICAL
    extract_technical_keywords("Deploy the API with Docker. The API is REST.")
    # ["API", "Docker", "REST"]
"""

import re
from collections import Counter
from types import MappingProxyType
from typing import Mapping

from .models import MAX_TECHNICAL_KEYWORDS, DocumentDomain

TECHNICAL_CATEGORIES: Mapping[str, frozenset[str]] = MappingProxyType({
    "API": frozenset({
        "api", "apis", "endpoint", "endpoints", "rest", "restful", "graphql",
        "grpc", "webhook", "webhooks", "http", "https", "json", "sdk",
    }),
    "Database": frozenset({
        "database", "databases", "sql", "nosql", "query", "queries", "schema",
        "postgresql", "postgres", "mysql", "mongodb", "redis", "sqlite",
    }),
    "Frontend": frozenset({
        "ui", "frontend", "react", "vue", "angular", "css", "html",
        "javascript", "typescript", "component", "components",
    }),
    "Backend": frozenset({
        "server", "servers", "backend", "microservice", "microservices",
        "middleware", "django", "flask", "fastapi",
    }),
    "DevOps": frozenset({
        "docker", "kubernetes", "deployment", "deployments", "pipeline",
        "pipelines", "terraform", "container", "containers", "helm", "devops",
    }),
    "AI/ML": frozenset({
        "ai", "ml", "embedding", "embeddings", "vector", "vectors", "neural",
        "llm", "llms", "transformer", "transformers", "inference",
    }),
})

TECHNICAL_TERMS: frozenset[str] = frozenset().union(*TECHNICAL_CATEGORIES.values())

BUSINESS_TERMS: frozenset[str] = frozenset({
    "business", "stakeholder", "stakeholders", "strategy", "strategic",
    "revenue", "profit", "market", "customer", "customers", "sales",
    "budget", "roi", "kpi", "kpis", "milestone", "milestones", "objective",
    "objectives", "planning", "timeline", "investment", "quarterly",
    "forecast", "management", "requirement", "requirements",
})

ACADEMIC_TERMS: frozenset[str] = frozenset({
    "research", "study", "studies", "abstract", "methodology", "literature",
    "hypothesis", "hypotheses", "theoretical", "theory", "experiment",
    "experiments", "empirical", "findings", "citation", "citations",
    "journal", "dissertation", "thesis", "peer-reviewed",
})

# Checked in this order; on equal counts the earlier domain wins.
_DOMAIN_VOCABULARIES: tuple[tuple[DocumentDomain, frozenset[str]], ...] = (
    (DocumentDomain.ACADEMIC, ACADEMIC_TERMS),
    (DocumentDomain.BUSINESS, BUSINESS_TERMS),
    (DocumentDomain.TECHNICAL, TECHNICAL_TERMS),
)

# A domain needs at least this many hits, and this share of all words.
MIN_DOMAIN_HITS = 2
MIN_DOMAIN_DENSITY = 0.002

_WORD = re.compile(r"[^\W_]+(?:-[^\W_]+)*")


def _words(text: str) -> list[str]:
    return _WORD.findall(text)


def detect_document_domain(text: str) -> DocumentDomain:
    """
    Classify text as Technical, Business, Academic or General.

    Counts whole-word, case-insensitive hits against each vocabulary and
    picks the domain with the most hits.
    """
    words = [word.lower() for word in _words(text)]
    if not words:
        return DocumentDomain.GENERAL

    counts = Counter(words)
    best = DocumentDomain.GENERAL
    best_hits = 0
    for domain, vocabulary in _DOMAIN_VOCABULARIES:
        hits = sum(counts[term] for term in vocabulary)
        if hits > best_hits:
            best, best_hits = domain, hits

    if best_hits < MIN_DOMAIN_HITS or best_hits / len(words) < MIN_DOMAIN_DENSITY:
        return DocumentDomain.GENERAL
    return best


def extract_technical_keywords(text: str, limit: int = MAX_TECHNICAL_KEYWORDS) -> list[str]:
    """
    Technical vocabulary terms found in text.

    Ranked by occurrence count, then first appearance. Matching is
    case-insensitive; each term is reported once, in the spelling of
    its first occurrence.
    """
    counts: Counter[str] = Counter()
    surface: dict[str, str] = {}
    for word in _words(text):
        key = word.lower()
        if key in TECHNICAL_TERMS:
            counts[key] += 1
            surface.setdefault(key, word)

    ranked = counts.most_common(limit)
    return [surface[key] for key, _ in ranked]
