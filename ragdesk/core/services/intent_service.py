"""Intent classifier - short-circuits questions that need no retrieval."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from ..models.intent import Intent, IntentResult, IntentRule

logger = logging.getLogger(__name__)

DEFAULT_GREETINGS = [
    "hi",
    "hello",
    "hey",
    "hiya",
    "yo",
    "good morning",
    "good afternoon",
    "good evening",
    "thanks",
    "thank you",
    "thanks a lot",
    "thank you very much",
    "thx",
    "ty",
    "cheers",
    "bye",
    "goodbye",
    "see you",
]

DEFAULT_RULES = [
    {"name": "capabilities", "intent": "meta_question",
     "pattern": r"\bwhat (?:can|do) you (?:do|know)\b"},
    {"name": "identity", "intent": "meta_question",
     "pattern": r"\b(?:who|what) are you\b"},
    {"name": "how_it_works", "intent": "meta_question",
     "pattern": r"\bhow do you work\b"},
    {"name": "what_to_ask", "intent": "meta_question",
     "pattern": r"\bwhat (?:kind of |sort of )?(?:questions|things) can i ask\b"},
    {"name": "help", "intent": "meta_question",
     "pattern": r"^\s*help\s*[?!.]*\s*$"},
    {"name": "profanity", "intent": "out_of_scope",
     "pattern": r"\b(?:fuck|shit|bitch|bastard|asshole|dickhead)\w*"},
    {"name": "self_harm", "intent": "out_of_scope",
     "pattern": r"\b(?:kill myself|suicid\w*|self[- ]harm|hurt myself|end my life)\b"},
    {"name": "unrelated", "intent": "out_of_scope",
     "pattern": r"\b(?:weather|stock prices?|lottery|horoscope|recipes?|sports? scores?|tell me a joke)\b"},
    {"name": "credentials", "intent": "out_of_scope",
     "pattern": r"\b(?:give|send|share|tell|show|reveal|leak)\b.*\b(?:passwords?|credentials?|api[- ]?keys?|access tokens?|secrets?)\b"},
]

DEFAULT_RESPONSES = {
    "greeting": (
        "Hello! Ask me anything about the uploaded documents and I'll answer "
        "with citations."
    ),
    "meta_question": (
        "I answer questions using only the documents that have been uploaded, "
        "and I cite the snippets I rely on. Try asking something specific, "
        "for example about a policy, a procedure or a service endpoint."
    ),
    "clarify": (
        "Could you ask a clearer question? A few words about what you are "
        "looking for in the documents will do."
    ),
    "out_of_scope": (
        "I can only help with questions about the uploaded documents."
    ),
    "self_harm": (
        "I can only help with questions about the uploaded documents. "
        "If you are going through a difficult time, please reach out to "
        "someone you trust or a local support line."
    ),
    "credentials": (
        "I can't share credentials or other secrets. Please use your "
        "team's approved secret store or ask an administrator."
    ),
}


class IntentClassifier:
    """Ordered rules: greeting vocabulary -> regex table -> length check."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        min_length: int = 3,
    ):
        """Initialize classifier.

        Args:
            config_path: Optional JSON file overriding greetings, rules
                and responses.
            min_length: Trimmed questions shorter than this ask for a
                clearer question.
        """
        self._min_length = min_length
        config = self._load_config(config_path)
        self._greetings = {
            g.strip().lower() for g in config.get("greetings", DEFAULT_GREETINGS)
        }
        self._rules = self._compile_rules(config.get("rules", DEFAULT_RULES))
        self._responses = {**DEFAULT_RESPONSES, **config.get("responses", {})}

    def _load_config(self, path: Optional[str]) -> dict[str, Any]:
        """Load rule overrides from JSON."""
        if not path:
            return {}

        config_file = Path(path)
        if not config_file.exists():
            logger.warning(f"Intent config {path} not found, using defaults")
            return {}

        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
        logger.info(f"Intent config loaded from {path}")
        return config

    @staticmethod
    def _compile_rules(raw_rules: list[dict]) -> list[IntentRule]:
        rules = []
        for raw in raw_rules:
            rules.append(
                IntentRule(
                    name=raw["name"],
                    pattern=re.compile(raw["pattern"], re.IGNORECASE),
                    intent=Intent(raw["intent"]),
                )
            )
        return rules

    @property
    def rules(self) -> list[IntentRule]:
        return list(self._rules)

    def classify(self, question: str) -> IntentResult:
        """Decide whether a question needs retrieval.

        Args:
            question: Raw user question.

        Returns:
            Intent with a canned response for non-document intents.
        """
        text = (question or "").strip()
        normalized = text.lower().rstrip("!.? ")

        if normalized in self._greetings:
            logger.info(f"[intent] greeting: '{text[:40]}'")
            return IntentResult(
                Intent.GREETING, self._responses["greeting"], "greeting"
            )

        for rule in self._rules:
            if rule.pattern.search(text):
                logger.info(f"[intent] {rule.intent.value} via rule '{rule.name}'")
                if rule.intent is Intent.DOCUMENT_QUESTION:
                    return IntentResult(Intent.DOCUMENT_QUESTION, matched_rule=rule.name)
                # Rule-specific response wins over the intent's default.
                response = self._responses.get(
                    rule.name, self._responses.get(rule.intent.value)
                )
                return IntentResult(rule.intent, response, rule.name)

        if len(text) < self._min_length:
            logger.info(f"[intent] too short ({len(text)} chars)")
            return IntentResult(
                Intent.META_QUESTION, self._responses["clarify"], "too_short"
            )

        return IntentResult(Intent.DOCUMENT_QUESTION)
