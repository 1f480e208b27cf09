"""Tests for docchunker.vocabulary."""

import pytest

from docchunker.models import DocumentDomain
from docchunker.vocabulary import (
    ACADEMIC_TERMS,
    BUSINESS_TERMS,
    TECHNICAL_CATEGORIES,
    TECHNICAL_TERMS,
    detect_document_domain,
    extract_technical_keywords,
)


class TestVocabularyTables:
    def test_categories(self):
        assert set(TECHNICAL_CATEGORIES) == {"API", "Database", "Frontend", "Backend", "DevOps", "AI/ML"}

    def test_category_terms(self):
        assert {"api", "endpoint", "rest", "graphql"} <= TECHNICAL_CATEGORIES["API"]
        assert {"docker", "kubernetes", "deployment", "pipeline"} <= TECHNICAL_CATEGORIES["DevOps"]

    def test_tables_are_immutable(self):
        with pytest.raises(TypeError):
            TECHNICAL_CATEGORIES["New"] = frozenset({"x"})
        assert isinstance(TECHNICAL_TERMS, frozenset)
        assert isinstance(BUSINESS_TERMS, frozenset)
        assert isinstance(ACADEMIC_TERMS, frozenset)


class TestDetectDocumentDomain:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("The REST API endpoint queries the database schema.", DocumentDomain.TECHNICAL),
            ("Requirement analysis and stakeholder management", DocumentDomain.BUSINESS),
            ("Our research tests the hypothesis with a new methodology.", DocumentDomain.ACADEMIC),
            ("The weather was pleasant and we walked along the river.", DocumentDomain.GENERAL),
        ],
    )
    def test_domains(self, text, expected):
        assert detect_document_domain(text) == expected

    def test_empty_text(self):
        assert detect_document_domain("") == DocumentDomain.GENERAL

    def test_single_hit_is_general(self):
        assert detect_document_domain("We met at the server room for lunch.") == DocumentDomain.GENERAL

    def test_case_insensitive_whole_words(self):
        assert detect_document_domain("DOCKER and KUBERNETES run the PIPELINE.") == DocumentDomain.TECHNICAL
        # "rapid" contains "api" but is not the word
        assert detect_document_domain("rapid rapid rapid growth") == DocumentDomain.GENERAL

    def test_majority_wins(self):
        text = (
            "The study reviews the literature. The research hypothesis guides the "
            "methodology. The API was used once."
        )
        assert detect_document_domain(text) == DocumentDomain.ACADEMIC

    def test_sparse_hits_in_long_text_are_general(self):
        filler = "The quiet village slept under a pale moon. " * 200
        assert detect_document_domain(filler + "The API endpoint.") == DocumentDomain.GENERAL


class TestExtractTechnicalKeywords:
    def test_ranked_by_count(self):
        text = "Deploy the API with Docker. The API is REST. The API scales."
        assert extract_technical_keywords(text) == ["API", "Docker", "REST"]

    def test_deduplicated_case_insensitively(self):
        keywords = extract_technical_keywords("docker Docker DOCKER")
        assert keywords == ["docker"]

    def test_limit_of_five(self):
        text = "api sql react docker kubernetes embedding graphql redis"
        assert len(extract_technical_keywords(text)) == 5

    def test_ties_keep_first_appearance(self):
        assert extract_technical_keywords("redis then sql then vue") == ["redis", "sql", "vue"]

    def test_no_keywords(self):
        assert extract_technical_keywords("A plain sentence about gardens.") == []

    def test_custom_limit(self):
        assert extract_technical_keywords("api sql react", limit=2) == ["api", "sql"]
