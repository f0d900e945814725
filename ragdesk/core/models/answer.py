"""Request/response models for the answer pipeline."""
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import InvalidRequestError
from .document import Snippet


@dataclass
class AnswerRequest:
    """Transport-agnostic question request."""
    question: str
    top: int = 5
    session_id: str = "default"

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], default_top: int = 5, max_top: int = 8
    ) -> "AnswerRequest":
        """Validate a raw payload.

        Raises:
            InvalidRequestError: If the question is missing or top is not an int.
        """
        question = data.get("question")
        if not isinstance(question, str) or not question.strip():
            raise InvalidRequestError("Question parameter is required")

        raw_top = data.get("top")
        if raw_top is None or raw_top == "":
            top = default_top
        else:
            try:
                top = int(raw_top)
            except (TypeError, ValueError) as e:
                raise InvalidRequestError(f"Invalid top value: {raw_top!r}") from e
        top = max(1, min(max_top, top))

        session_id = data.get("sessionId") or "default"
        return cls(question=question.strip(), top=top, session_id=str(session_id))


@dataclass(frozen=True)
class Source:
    """Cited snippet as exposed to the caller."""
    id: int
    filename: str
    page: Optional[int]
    section: Optional[str]
    preview: str

    @classmethod
    def from_snippet(cls, snippet: Snippet, preview_chars: int = 200) -> "Source":
        return cls(
            id=snippet.id,
            filename=snippet.filename,
            page=snippet.page,
            section=snippet.section,
            preview=snippet.preview(preview_chars),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "page": self.page,
            "section": self.section,
            "preview": self.preview,
        }


@dataclass(frozen=True)
class ComposedAnswer:
    """LLM output plus whether it is grounded in the snippets."""
    text: str
    grounded: bool


@dataclass
class AnswerResponse:
    """Successful pipeline response."""
    question: str
    response: str
    session_id: str
    sources: list[Source] = field(default_factory=list)
    search_results: int = 0
    intent: Optional[str] = None
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        data = {
            "success": self.success,
            "question": self.question,
            "response": self.response,
            "sessionId": self.session_id,
            "sources": [s.to_dict() for s in self.sources],
            "searchResults": self.search_results,
        }
        if self.intent is not None:
            data["intent"] = self.intent
        return data


def error_response(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}
