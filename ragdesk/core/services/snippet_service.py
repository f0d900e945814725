"""Snippet builder - bounded, deduplicated, source-diverse citation units."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..cards import cardize, should_cardize
from ..models.document import ScoredCandidate, Snippet
from ..patterns import NAME_LINE_RE, has_endpoint, is_url_question
from ..strategies.selection import (
    DiversitySelection,
    SelectionPolicy,
    TopScoreSelection,
)

logger = logging.getLogger(__name__)

INJECTED_SCORE = 1e9


def rolling_hash(text: str) -> int:
    """31-based polynomial string hash, 32-bit."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


@dataclass(frozen=True)
class _Draft:
    filename: str
    text: str
    score: float
    page: Optional[int] = None
    section: Optional[str] = None


class SnippetBuilder:
    """Turns ranked candidates into at most `max_snippets` snippets."""

    def __init__(
        self,
        max_snippets: int = 8,
        max_chars: int = 1000,
        min_chars: int = 120,
        url_min_chars: int = 40,
        per_doc_cap: int = 3,
        diversity: bool = True,
        url_window: int = 2,
        selection: Optional[SelectionPolicy] = None,
    ):
        """Initialize builder.

        Args:
            max_snippets: Upper bound on returned snippets.
            max_chars: Truncation length per snippet.
            min_chars: Minimum snippet length.
            url_min_chars: Relaxed minimum for URL-seeking questions
                (the effective value never exceeds min_chars).
            per_doc_cap: Max snippets from one filename.
            diversity: Round-robin across documents instead of a global
                top-score pick.
            url_window: Lines scanned around a URL for the last-resort
                micro-snippet.
            selection: Explicit selection policy, overrides `diversity`.
        """
        self._max_snippets = max_snippets
        self._max_chars = max_chars
        self._min_chars = min_chars
        self._url_min_chars = min(url_min_chars, min_chars)
        self._per_doc_cap = per_doc_cap
        self._url_window = url_window
        if selection is None:
            selection = DiversitySelection() if diversity else TopScoreSelection()
        self._selection = selection

    def _compact(self, text: str) -> str:
        """Reduce an oversized reference card to its name/endpoint lines."""
        if len(text) <= self._max_chars or not should_cardize(text):
            return text

        lines: list[str] = []
        section = None
        for card in cardize(text):
            if card.section and card.section != section:
                section = card.section
                lines.append(section)
            lines.extend([card.name, card.endpoint])
        return "\n".join(lines) or text

    def _normalize(self, candidates: list[ScoredCandidate]) -> list[_Draft]:
        drafts = []
        for c in candidates:
            text = self._compact(c.document.content.strip())[: self._max_chars]
            if not text:
                continue
            drafts.append(
                _Draft(
                    filename=c.document.filename,
                    text=text,
                    score=c.adjusted_score,
                    page=c.document.page_number,
                    section=c.document.section,
                )
            )
        return drafts

    def _passes_length(self, draft: _Draft, url_question: bool) -> bool:
        if has_endpoint(draft.text):
            return True
        minimum = self._url_min_chars if url_question else self._min_chars
        return len(draft.text) >= minimum

    @staticmethod
    def _dedupe(drafts: list[_Draft]) -> list[_Draft]:
        """Collapse identical texts, keeping the higher-scored copy."""
        by_hash: dict[int, _Draft] = {}
        for draft in drafts:
            key = rolling_hash(draft.text)
            current = by_hash.get(key)
            if current is None or draft.score > current.score:
                by_hash[key] = draft
        return list(by_hash.values())

    def _group(self, drafts: list[_Draft]) -> list[list[_Draft]]:
        """Per-filename groups, capped, best group first."""
        groups: dict[str, list[_Draft]] = {}
        for draft in drafts:
            groups.setdefault(draft.filename, []).append(draft)

        capped = []
        for group in groups.values():
            group.sort(key=lambda d: d.score, reverse=True)
            capped.append(group[: self._per_doc_cap])

        capped.sort(key=lambda g: g[0].score, reverse=True)
        return capped

    def _last_resort(self, candidates: list[ScoredCandidate]) -> Optional[_Draft]:
        """One micro-snippet around a URL/IP line, name-like neighbours first."""
        fallback: Optional[_Draft] = None
        # Neighbour lines are clipped so the endpoint line survives truncation.
        budget = max(1, self._max_chars // (2 * self._url_window + 1))

        for c in candidates:
            lines = [line.strip() for line in c.document.content.splitlines()]
            for i, line in enumerate(lines):
                if not has_endpoint(line):
                    continue

                start = max(0, i - self._url_window)
                end = min(len(lines), i + self._url_window + 1)
                window = [
                    w if j == i else w[:budget]
                    for j, w in enumerate(lines[start:end], start)
                    if w
                ]
                draft = _Draft(
                    filename=c.document.filename,
                    text="\n".join(window)[: self._max_chars],
                    score=INJECTED_SCORE,
                    page=c.document.page_number,
                    section=c.document.section,
                )

                if any(NAME_LINE_RE.match(w) for w in lines[start:i]):
                    return draft
                if fallback is None:
                    fallback = draft

        return fallback

    def _with_injected(
        self, injected: _Draft, selected: list[_Draft], limit: int
    ) -> list[_Draft]:
        """Put the injected draft first, still honouring both caps."""
        result = [injected]
        counts = {injected.filename: 1}
        for draft in selected:
            if len(result) >= limit:
                break
            if counts.get(draft.filename, 0) >= self._per_doc_cap:
                continue
            counts[draft.filename] = counts.get(draft.filename, 0) + 1
            result.append(draft)
        return result

    def build(
        self,
        question: str,
        candidates: list[ScoredCandidate],
        max_snippets: Optional[int] = None,
    ) -> list[Snippet]:
        """Build citable snippets.

        Args:
            question: User question, decides URL-seeking relaxations.
            candidates: Ranked candidates from the ranker.
            max_snippets: Per-call result cap; never above the configured one.

        Returns:
            Snippets with ids 1..N.
        """
        url_question = is_url_question(question)
        limit = self._max_snippets
        if max_snippets is not None:
            limit = max(1, min(max_snippets, limit))

        drafts = self._normalize(candidates)
        kept = [d for d in drafts if self._passes_length(d, url_question)]
        unique = self._dedupe(kept)
        groups = self._group(unique)
        selected = self._selection.select(groups, limit)

        if url_question and not any(has_endpoint(d.text) for d in selected):
            injected = self._last_resort(candidates)
            if injected is not None:
                logger.info(f"Injected last-resort URL snippet from {injected.filename}")
                selected = self._with_injected(injected, selected, limit)

        snippets = [
            Snippet(
                id=i,
                filename=d.filename,
                text=d.text,
                page=d.page,
                section=d.section,
                score=d.score,
            )
            for i, d in enumerate(selected, 1)
        ]

        logger.info(
            f"Snippets: {len(drafts)} drafts -> {len(kept)} kept -> "
            f"{len(unique)} unique -> {len(snippets)} selected"
        )
        return snippets
