"""Scoring and selection strategies."""
from .scoring import (
    ContentQualityStrategy,
    FileTypeStrategy,
    ScoringStrategy,
    SourcePenaltyStrategy,
    classify_source,
    default_strategies,
)
from .selection import DiversitySelection, SelectionPolicy, TopScoreSelection

__all__ = [
    "ContentQualityStrategy",
    "FileTypeStrategy",
    "ScoringStrategy",
    "SourcePenaltyStrategy",
    "classify_source",
    "default_strategies",
    "DiversitySelection",
    "SelectionPolicy",
    "TopScoreSelection",
]
