import logging
from abc import ABC, abstractmethod

from ..models.document import Document, SourceCategory
from ..patterns import (
    DOWNLOAD_RE,
    TRACKER_RE,
    URL_RE,
    WIKI_RE,
    WORD_RE,
    looks_like_policy,
)

logger = logging.getLogger(__name__)

WORD_EXTENSIONS = {"doc", "docx"}


def classify_source(document: Document) -> SourceCategory:
    """Tag a chunk as tracker noise, authoritative text, or unknown."""
    if TRACKER_RE.search(document.filename) or TRACKER_RE.search(document.content):
        return SourceCategory.TRACKER
    if looks_like_policy(document.content):
        return SourceCategory.AUTHORITATIVE
    return SourceCategory.UNKNOWN


class ScoringStrategy(ABC):
    """Base class for multiplicative scoring strategies."""

    @abstractmethod
    def factor(self, document: Document, category: SourceCategory) -> float:
        """Multiplier applied to the running adjusted score."""
        ...


class SourcePenaltyStrategy(ScoringStrategy):
    """Suppress issue-tracker content, boost everything else."""

    def __init__(self, penalty: float = 0.05, boost: float = 5.0):
        """Initialize strategy.

        Args:
            penalty: Multiplier for tracker-sourced chunks.
            boost: Multiplier for all other chunks.
        """
        self._penalty = penalty
        self._boost = boost

    def factor(self, document: Document, category: SourceCategory) -> float:
        if category is SourceCategory.TRACKER:
            return self._penalty
        return self._boost


class ContentQualityStrategy(ScoringStrategy):
    """Favour prose over link farms and navigation chunks."""

    def __init__(self, policy_multiplier: float = 2.0):
        self._policy_multiplier = policy_multiplier

    def factor(self, document: Document, category: SourceCategory) -> float:
        text = document.content
        word_count = len(WORD_RE.findall(text))
        noise = len(URL_RE.findall(text)) + len(DOWNLOAD_RE.findall(text))
        quality = word_count / max(1, noise)
        if category is SourceCategory.AUTHORITATIVE:
            quality *= self._policy_multiplier
        return quality


class FileTypeStrategy(ScoringStrategy):
    """Weight by source format authority."""

    def __init__(
        self,
        pdf: float = 2.0,
        word: float = 1.8,
        wiki: float = 0.7,
    ):
        self._pdf = pdf
        self._word = word
        self._wiki = wiki

    def factor(self, document: Document, category: SourceCategory) -> float:
        ext = document.extension
        if ext == "pdf":
            return self._pdf
        if ext in WORD_EXTENSIONS:
            return self._word
        if ext == "wiki" or WIKI_RE.search(document.filename):
            return self._wiki
        return 1.0


def default_strategies(
    penalty: float = 0.05,
    boost: float = 5.0,
    policy_multiplier: float = 2.0,
    pdf: float = 2.0,
    word: float = 1.8,
    wiki: float = 0.7,
) -> list[ScoringStrategy]:
    """Source penalty, content quality, file type, in that order."""
    return [
        SourcePenaltyStrategy(penalty, boost),
        ContentQualityStrategy(policy_multiplier),
        FileTypeStrategy(pdf, word, wiki),
    ]
