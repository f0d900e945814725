"""Answer composer - prompt assembly and grounding check around the LLM call."""

import logging
import re
from typing import Optional

from ..cards import ServiceCard, cardize
from ..exceptions import ConfigurationError
from ..models.answer import ComposedAnswer
from ..models.chat import ConversationTurn
from ..models.document import Snippet
from ..protocols.llm import LLMProtocol

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a document assistant for an internal knowledge base.

Rules:
- Answer ONLY from the numbered snippets provided. Do not use outside knowledge.
- Cite every factual claim with the snippet id in the form [#id], e.g. [#2].
- Only cite ids that appear in the snippets.
- Use short bullet points.
- If the snippets do not contain the answer, say so plainly and stop.
- When a service endpoint list is provided, copy URLs and IPs exactly."""

PROMPT_TEMPLATE = """{history}Snippets:

{snippets}
{endpoints}
---
Question: {question}"""

APOLOGY = (
    "I'm sorry, but I encountered an error while generating the response. "
    "Please try again later."
)

HEDGE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bneed more (?:information|details|context)\b",
        r"\bplease provide\b",
        r"\bnot enough (?:information|context)\b",
        r"\binsufficient (?:information|context)\b",
        r"\bcould(?:n't| not) find\b",
        r"\b(?:do|does) not (?:contain|include|mention)\b",
        r"\bno (?:relevant )?information (?:about|on|regarding)\b",
        r"\bcan(?:no|')t (?:answer|determine)\b",
    )
]


def is_hedged(text: str) -> bool:
    """True when the answer admits it has no grounded content."""
    return any(p.search(text) for p in HEDGE_PATTERNS)


class AnswerComposer:
    """Builds the grounded prompt and calls the LLM."""

    def __init__(
        self,
        llm: LLMProtocol,
        max_tokens: int = 800,
        temperature: float = 0.2,
        timeout: float = 30.0,
        history_tail: int = 6,
        history_clip: int = 300,
    ):
        """Initialize composer.

        Args:
            llm: Chat-completion client.
            max_tokens: Response budget.
            temperature: Sampling temperature.
            timeout: LLM call timeout in seconds.
            history_tail: Most recent turns included in the prompt.
            history_clip: Max characters kept per history turn.
        """
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._history_tail = history_tail
        self._history_clip = history_clip

    @staticmethod
    def extract_cards(snippets: list[Snippet]) -> list[ServiceCard]:
        cards: list[ServiceCard] = []
        seen: set[str] = set()
        for snippet in snippets:
            for card in cardize(snippet.text):
                if card.key not in seen:
                    seen.add(card.key)
                    cards.append(card)
        return cards

    @staticmethod
    def format_snippets(snippets: list[Snippet]) -> str:
        return "\n\n".join(f"{s.header}\n{s.text}" for s in snippets)

    def format_history(self, history: list[ConversationTurn]) -> str:
        if not history:
            return ""
        lines = ["Recent conversation:"]
        for turn in history[-self._history_tail:]:
            content = turn.content
            if len(content) > self._history_clip:
                content = content[: self._history_clip] + "..."
            lines.append(f"{turn.role}: {content}")
        return "\n".join(lines) + "\n\n"

    def build_prompt(
        self,
        question: str,
        snippets: list[Snippet],
        history: Optional[list[ConversationTurn]] = None,
    ) -> str:
        """Render the user prompt: history, snippets, endpoint list, question."""
        cards = self.extract_cards(snippets)
        endpoints = ""
        if cards:
            rows = [f"- {c.name} -> {c.endpoint}" for c in cards]
            endpoints = "\nService endpoints:\n" + "\n".join(rows) + "\n"

        return PROMPT_TEMPLATE.format(
            history=self.format_history(history or []),
            snippets=self.format_snippets(snippets),
            endpoints=endpoints,
            question=question,
        )

    async def compose(
        self,
        question: str,
        snippets: list[Snippet],
        history: Optional[list[ConversationTurn]] = None,
    ) -> ComposedAnswer:
        """Generate an answer from snippets.

        Args:
            question: User question.
            snippets: Citable snippets.
            history: Session turns, oldest first.

        Returns:
            Answer text and whether it is grounded. LLM failures give an
            apology that is never grounded.

        Raises:
            ConfigurationError: LLM credentials are missing.
        """
        prompt = self.build_prompt(question, snippets, history)

        try:
            text = await self._llm.complete_chat(
                SYSTEM_PROMPT,
                prompt,
                self._max_tokens,
                self._temperature,
                self._timeout,
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.error(f"LLM call failed: {e}")
            return ComposedAnswer(text=APOLOGY, grounded=False)

        text = (text or "").strip()
        grounded = bool(text) and bool(snippets) and not is_hedged(text)
        if not grounded:
            logger.info("Answer hedged or empty, sources suppressed")
        return ComposedAnswer(text=text, grounded=grounded)
