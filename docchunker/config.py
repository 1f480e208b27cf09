from dataclasses import dataclass, field
import os

from .models import QualityWeights


def _bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


def _list(name: str) -> list[str]:
    value = os.environ.get(name)
    if not value:
        return []
    return [item for item in value.split(os.pathsep) if item]


@dataclass
class NoiseFilterConfig:
    enabled: bool = False
    repetition_threshold: float = 0.5
    min_page_count: int = 3
    max_line_length: int = 200
    preserve_patterns: list[str] = field(default_factory=list)
    remove_patterns: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "NoiseFilterConfig":
        return cls(
            enabled=_bool("DOCCHUNKER_FILTER_ENABLED", cls.enabled),
            repetition_threshold=_float("DOCCHUNKER_FILTER_THRESHOLD", cls.repetition_threshold),
            min_page_count=_int("DOCCHUNKER_FILTER_MIN_PAGES", cls.min_page_count),
            max_line_length=_int("DOCCHUNKER_FILTER_MAX_LINE_LENGTH", cls.max_line_length),
            preserve_patterns=_list("DOCCHUNKER_FILTER_PRESERVE"),
            remove_patterns=_list("DOCCHUNKER_FILTER_REMOVE"),
        )


@dataclass
class EngineConfig:
    noise_filter: NoiseFilterConfig = field(default_factory=NoiseFilterConfig)
    quality_weights: QualityWeights = field(default_factory=QualityWeights)
    count_tokens: bool = False
    long_paragraph_threshold: int = 2000
    auto_long_paragraph_threshold: int = 1500

    @classmethod
    def from_env(cls) -> "EngineConfig":
        defaults = QualityWeights()
        return cls(
            noise_filter=NoiseFilterConfig.from_env(),
            quality_weights=QualityWeights(
                completeness=_float("DOCCHUNKER_WEIGHT_COMPLETENESS", defaults.completeness),
                density=_float("DOCCHUNKER_WEIGHT_DENSITY", defaults.density),
                boundary=_float("DOCCHUNKER_WEIGHT_BOUNDARY", defaults.boundary),
            ),
            count_tokens=_bool("DOCCHUNKER_COUNT_TOKENS", cls.count_tokens),
            long_paragraph_threshold=_int(
                "DOCCHUNKER_LONG_PARAGRAPH_THRESHOLD", cls.long_paragraph_threshold
            ),
            auto_long_paragraph_threshold=_int(
                "DOCCHUNKER_AUTO_LONG_PARAGRAPH_THRESHOLD", cls.auto_long_paragraph_threshold
            ),
        )
