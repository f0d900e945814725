"""LLM relevance filter - optional pass between ranking and snippet building."""

import asyncio
import json
import logging
import random
import re
from typing import Any

from ..exceptions import ConfigurationError, UpstreamError
from ..models.document import ScoredCandidate
from ..protocols.llm import LLMProtocol

logger = logging.getLogger(__name__)

FILTER_SYSTEM_PROMPT = """You judge whether document excerpts help answer a question.
Return strict JSON only, no prose, in this shape:
{"results": [{"docId": "<id>", "decision": "RELEVANT" | "NOT_RELEVANT", "score": <0..1>, "reason": "<short>"}]}
Judge every excerpt. Use RELEVANT only when the excerpt contains information
that directly answers or clearly supports an answer to the question."""

CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_judgements(raw: str) -> dict[str, dict[str, Any]]:
    """Parse the LLM's JSON verdicts into docId -> verdict.

    Raises:
        ValueError: Output is not the expected JSON object.
    """
    cleaned = CODE_FENCE_RE.sub("", raw.strip())
    data = json.loads(cleaned)
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise ValueError("Missing 'results' list in relevance output")

    verdicts = {}
    for item in results:
        if isinstance(item, dict) and "docId" in item:
            verdicts[str(item["docId"])] = item
    return verdicts


class RelevanceFilter:
    """Batches candidates through the LLM and keeps the relevant ones."""

    def __init__(
        self,
        llm: LLMProtocol,
        enabled: bool = False,
        batch_size: int = 4,
        max_chars: int = 1000,
        concurrency: int = 3,
        min_score: float = 0.5,
        retries: int = 2,
        timeout: float = 25.0,
        max_tokens: int = 600,
        has_credentials: bool = True,
    ):
        """Initialize filter.

        Args:
            llm: Chat-completion client.
            enabled: When False the filter returns its input untouched.
            batch_size: Documents judged per LLM call.
            max_chars: Excerpt clip length.
            concurrency: Batches in flight at once.
            min_score: Lowest LLM score that still counts as relevant.
            retries: Extra attempts on 429/5xx.
            timeout: Per-call LLM timeout in seconds.
            max_tokens: Response budget per call.
            has_credentials: Whether an LLM key is configured.
        """
        self._llm = llm
        self._enabled = enabled
        self._batch_size = max(1, batch_size)
        self._max_chars = max_chars
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self._min_score = min_score
        self._retries = retries
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._has_credentials = has_credentials

    @property
    def active(self) -> bool:
        return self._enabled and self._has_credentials

    def _build_prompt(self, question: str, batch: list[ScoredCandidate]) -> str:
        parts = [f"Question: {question}", "", "Excerpts:"]
        for i, candidate in enumerate(batch):
            text = candidate.document.content[: self._max_chars]
            parts.append(
                f'--- docId: "{i}" (file: {candidate.document.filename}) ---\n{text}'
            )
        return "\n".join(parts)

    async def _call_with_backoff(self, prompt: str) -> str:
        attempt = 0
        while True:
            try:
                return await self._llm.complete_chat(
                    FILTER_SYSTEM_PROMPT,
                    prompt,
                    self._max_tokens,
                    0.0,
                    self._timeout,
                )
            except UpstreamError as e:
                if not e.retryable or attempt >= self._retries:
                    raise
                delay = 0.3 * (2 ** attempt) + random.uniform(0, 0.2)
                logger.warning(
                    f"Relevance call failed with {e.status_code}, "
                    f"retry {attempt + 1}/{self._retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _judge_batch(
        self, question: str, batch: list[ScoredCandidate]
    ) -> list[tuple[ScoredCandidate, float]]:
        """Return kept candidates with their LLM score; a failure keeps all."""
        async with self._semaphore:
            try:
                raw = await self._call_with_backoff(self._build_prompt(question, batch))
                verdicts = parse_judgements(raw)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.warning(f"Relevance batch failed, passing through: {e}")
                return [(c, 0.0) for c in batch]

        kept = []
        for i, candidate in enumerate(batch):
            verdict = verdicts.get(str(i))
            if verdict is None:
                continue
            try:
                score = max(0.0, min(1.0, float(verdict.get("score", 0))))
            except (TypeError, ValueError):
                score = 0.0
            decision = str(verdict.get("decision", "")).strip().upper()
            if decision == "RELEVANT" and score >= self._min_score:
                kept.append((candidate, score))
        return kept

    async def filter(
        self, question: str, candidates: list[ScoredCandidate]
    ) -> list[ScoredCandidate]:
        """Keep candidates the LLM judges relevant.

        Args:
            question: User question.
            candidates: Ranked candidates.

        Returns:
            Kept candidates ordered by raw search score plus LLM score.
            Input unchanged when the filter is inactive.
        """
        if not candidates or not self.active:
            return candidates

        batches = [
            candidates[i:i + self._batch_size]
            for i in range(0, len(candidates), self._batch_size)
        ]
        results = await asyncio.gather(
            *(self._judge_batch(question, batch) for batch in batches)
        )

        kept = [pair for batch in results for pair in batch]
        kept.sort(key=lambda pair: pair[0].score + pair[1], reverse=True)

        logger.info(
            f"Relevance filter: {len(candidates)} in -> {len(kept)} kept "
            f"({len(batches)} batches)"
        )
        return [candidate for candidate, _ in kept]
