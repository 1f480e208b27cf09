"""Tests for docchunker.config."""

import os

import pytest

from docchunker.config import EngineConfig, NoiseFilterConfig
from docchunker.models import QualityWeights

_ENV_VARS = [
    "DOCCHUNKER_FILTER_ENABLED",
    "DOCCHUNKER_FILTER_THRESHOLD",
    "DOCCHUNKER_FILTER_MIN_PAGES",
    "DOCCHUNKER_FILTER_MAX_LINE_LENGTH",
    "DOCCHUNKER_FILTER_PRESERVE",
    "DOCCHUNKER_FILTER_REMOVE",
    "DOCCHUNKER_WEIGHT_COMPLETENESS",
    "DOCCHUNKER_WEIGHT_DENSITY",
    "DOCCHUNKER_WEIGHT_BOUNDARY",
    "DOCCHUNKER_COUNT_TOKENS",
    "DOCCHUNKER_LONG_PARAGRAPH_THRESHOLD",
    "DOCCHUNKER_AUTO_LONG_PARAGRAPH_THRESHOLD",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestNoiseFilterConfig:
    def test_defaults(self):
        config = NoiseFilterConfig()
        assert config.enabled is False
        assert config.repetition_threshold == 0.5
        assert config.min_page_count == 3
        assert config.max_line_length == 200
        assert config.preserve_patterns == []
        assert config.remove_patterns == []

    def test_from_env_defaults(self):
        assert NoiseFilterConfig.from_env() == NoiseFilterConfig()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCCHUNKER_FILTER_ENABLED", "true")
        monkeypatch.setenv("DOCCHUNKER_FILTER_THRESHOLD", "0.7")
        monkeypatch.setenv("DOCCHUNKER_FILTER_MIN_PAGES", "4")
        monkeypatch.setenv("DOCCHUNKER_FILTER_PRESERVE", f"^Chapter{os.pathsep}^Kapitel")

        config = NoiseFilterConfig.from_env()
        assert config.enabled is True
        assert config.repetition_threshold == 0.7
        assert config.min_page_count == 4
        assert config.preserve_patterns == ["^Chapter", "^Kapitel"]
        assert config.remove_patterns == []

    @pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("0", False), ("off", False)])
    def test_enabled_values(self, monkeypatch, value, expected):
        monkeypatch.setenv("DOCCHUNKER_FILTER_ENABLED", value)
        assert NoiseFilterConfig.from_env().enabled is expected


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.noise_filter == NoiseFilterConfig()
        assert config.quality_weights == QualityWeights()
        assert config.count_tokens is False
        assert config.long_paragraph_threshold == 2000
        assert config.auto_long_paragraph_threshold == 1500

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DOCCHUNKER_WEIGHT_DENSITY", "0.5")
        monkeypatch.setenv("DOCCHUNKER_COUNT_TOKENS", "on")
        monkeypatch.setenv("DOCCHUNKER_AUTO_LONG_PARAGRAPH_THRESHOLD", "900")
        monkeypatch.setenv("DOCCHUNKER_FILTER_ENABLED", "1")

        config = EngineConfig.from_env()
        assert config.quality_weights.density == 0.5
        assert config.quality_weights.completeness == 0.5
        assert config.count_tokens is True
        assert config.auto_long_paragraph_threshold == 900
        assert config.long_paragraph_threshold == 2000
        assert config.noise_filter.enabled is True

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("DOCCHUNKER_FILTER_MIN_PAGES", "three")
        with pytest.raises(ValueError):
            EngineConfig.from_env()
