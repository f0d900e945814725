"""Document ranker - heuristic rescoring with must-keep preservation."""

import logging
import re
from typing import Optional

from ..models.document import ScoredCandidate, SearchHit, dedupe_by_key
from ..patterns import has_ip, has_url, is_url_question
from ..strategies.scoring import ScoringStrategy, classify_source, default_strategies

logger = logging.getLogger(__name__)

STOPWORDS = frozenset(
    """
    a about above after again all am an and any are as at be because been before
    being below between both but by can could did do does doing down during each
    few for from further get got had has have having he her here hers him his how
    i if in into is it its itself just me more most my no nor not now of off on
    once only or other our ours out over own same she should so some such than
    that the their theirs them then there these they this those through to too
    under until up very was we were what when where which while who whom why will
    with would you your yours please tell know need want give find show many much
    """.split()
)

TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9_-]*")
QUOTED_RE = re.compile(r'"([^"]{2,})"')
PAREN_ENTITY_RE = re.compile(r"\b([A-Z][\w.-]*\s*\([^()]{1,60}\))")


def question_terms(question: str) -> list[str]:
    """Non-stopword lowercase tokens of a question."""
    terms = []
    for token in TOKEN_RE.findall(question.lower()):
        if token in STOPWORDS or len(token) < 2:
            continue
        if token not in terms:
            terms.append(token)
    return terms


def quoted_entities(question: str) -> list[str]:
    """Quoted and parenthetical phrases, matched as whole substrings."""
    phrases = QUOTED_RE.findall(question) + PAREN_ENTITY_RE.findall(question)
    return [p.strip().lower() for p in phrases if p.strip()]


class DocumentRanker:
    """Rescore hits, then select with must-keep preservation."""

    def __init__(
        self,
        strategies: Optional[list[ScoringStrategy]] = None,
        top_k: int = 20,
        final_n: int = 12,
        compact_max_lines: int = 8,
        must_keep_phrases: Optional[list[str]] = None,
    ):
        """Initialize ranker.

        Args:
            strategies: Multiplicative scoring strategies, applied in order.
            top_k: Rank window a must-keep document has to fall inside.
            final_n: Size of the base selection.
            compact_max_lines: Max non-blank lines of a compact record.
            must_keep_phrases: Domain substrings that always count as an
                exact match.
        """
        self._strategies = default_strategies() if strategies is None else strategies
        self._top_k = top_k
        self._final_n = final_n
        self._compact_max_lines = compact_max_lines
        self._must_keep_phrases = [p.lower() for p in (must_keep_phrases or [])]

    def _has_exact_match(
        self, hit: SearchHit, terms: list[str], entities: list[str]
    ) -> bool:
        doc = hit.document
        haystack = f"{doc.content}\n{doc.filename}".lower()

        if any(term in haystack for term in terms):
            return True
        if any(entity in haystack for entity in entities):
            return True
        return any(phrase in haystack for phrase in self._must_keep_phrases)

    def _is_compact(self, hit: SearchHit) -> bool:
        lines = [line for line in hit.document.content.splitlines() if line.strip()]
        return len(lines) <= self._compact_max_lines

    def score(self, question: str, hit: SearchHit) -> ScoredCandidate:
        """Compute flags and adjusted score for one hit."""
        return self._score(
            hit,
            is_url_question(question),
            question_terms(question),
            quoted_entities(question),
        )

    def _score(
        self,
        hit: SearchHit,
        url_question: bool,
        terms: list[str],
        entities: list[str],
    ) -> ScoredCandidate:
        doc = hit.document
        category = classify_source(doc)

        adjusted = hit.score
        for strategy in self._strategies:
            adjusted *= strategy.factor(doc, category)

        url = has_url(doc.content)
        ip = has_ip(doc.content)

        candidate = ScoredCandidate(
            hit=hit,
            adjusted_score=adjusted,
            category=category,
            has_url=url,
            has_ip=ip,
            has_exact_match=self._has_exact_match(hit, terms, entities),
            is_compact_record=url_question and (url or ip) and self._is_compact(hit),
        )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Scored {doc.filename}#{doc.chunk_index}: raw={hit.score:.3f} "
                f"adjusted={adjusted:.3f} category={category.value} "
                f"exact={candidate.has_exact_match} compact={candidate.is_compact_record}"
            )
        return candidate

    def rank(self, question: str, hits: list[SearchHit]) -> list[ScoredCandidate]:
        """Rescore and select candidates.

        Must-keep and URL-flagged documents are preserved only when they
        also rank inside the top-K window; the base selection is the
        top-N of the full ranking. Preserved items come first.

        Args:
            question: Original user question.
            hits: Deduplicated search hits.

        Returns:
            Final ordered, deduplicated candidates.
        """
        if not hits:
            return []

        url_question = is_url_question(question)
        terms = question_terms(question)
        entities = quoted_entities(question)
        candidates = [self._score(h, url_question, terms, entities) for h in hits]
        ranked = sorted(candidates, key=lambda c: c.adjusted_score, reverse=True)
        top_ranked = ranked[: self._top_k]

        preserved_url: list[ScoredCandidate] = []
        if url_question:
            preserved_url = [
                c for c in top_ranked if c.has_endpoint or c.is_compact_record
            ]
        preserved_must = [c for c in top_ranked if c.has_exact_match]

        base = ranked[: self._final_n]
        final = dedupe_by_key(preserved_url + preserved_must + base)

        logger.info(
            f"Ranking: {len(hits)} hits -> top{self._top_k}={len(top_ranked)} "
            f"url_kept={len(preserved_url)} must_keep={len(preserved_must)} "
            f"final={len(final)}"
        )
        return final
