"""Tests for domain models."""

import pytest

from ragdesk.core.exceptions import InvalidRequestError, UpstreamError
from ragdesk.core.models import (
    AnswerRequest,
    AnswerResponse,
    Document,
    Snippet,
    Source,
    dedupe_by_key,
)
from ragdesk.core.models.chat import ConversationTurn, Session

from tests.fakes import make_hit


class TestIdentityKey:
    """Test document identity used for cross-source dedup."""

    def test_id_wins_when_present(self):
        doc = Document(filename="a.pdf", content="hello", id="doc-1")
        assert doc.identity_key == "doc-1"

    def test_falls_back_to_filename_and_content_prefix(self):
        content = "x" * 150
        doc = Document(filename="a.pdf", content=content)
        assert doc.identity_key == "a.pdf" + "x" * 100

    def test_same_chunk_from_two_sources_shares_key(self):
        a = make_hit("a.pdf", "same content", score=0.9)
        b = make_hit("a.pdf", "same content", score=0.2)
        assert a.identity_key == b.identity_key

    def test_from_dict_reads_camel_case(self):
        doc = Document.from_dict(
            {"id": "d-0", "filename": "f.docx", "content": "c", "chunkIndex": 3, "pageNumber": 2}
        )
        assert doc.chunk_index == 3
        assert doc.page_number == 2
        assert doc.extension == "docx"


class TestDedupe:
    """Test identity-key deduplication."""

    def test_first_occurrence_wins(self):
        first = make_hit("a.pdf", "text", score=0.1, id="1")
        second = make_hit("a.pdf", "text", score=0.9, id="1")
        assert dedupe_by_key([first, second]) == [first]

    def test_idempotent(self):
        hits = [
            make_hit("a.pdf", "alpha", id="1"),
            make_hit("b.pdf", "beta"),
            make_hit("a.pdf", "alpha", id="1"),
            make_hit("b.pdf", "beta"),
            make_hit("c.pdf", "gamma", id="3"),
        ]
        once = dedupe_by_key(hits)
        assert dedupe_by_key(once) == once
        assert len(once) == 3

    def test_empty(self):
        assert dedupe_by_key([]) == []


class TestSnippet:
    """Test snippet rendering."""

    def test_header_with_page_and_section(self):
        s = Snippet(id=2, filename="policy.pdf", text="t", page=4, section="Leave")
        assert s.header == "[#2] (policy.pdf p4 §Leave)"

    def test_header_without_location(self):
        s = Snippet(id=1, filename="notes.txt", text="t")
        assert s.header == "[#1] (notes.txt)"

    def test_source_preview_is_clipped(self):
        s = Snippet(id=1, filename="a.txt", text="y" * 300)
        source = Source.from_snippet(s)
        assert source.preview == "y" * 200 + "..."
        assert source.to_dict()["id"] == 1


class TestSession:
    """Test session FIFO truncation."""

    def test_cap_evicts_oldest(self):
        session = Session(session_id="s", max_turns=3)
        for i in range(5):
            session.add(ConversationTurn("user", f"m{i}"))
        assert [t.content for t in session.turns] == ["m2", "m3", "m4"]

    def test_evict_oldest(self):
        session = Session(session_id="s")
        for i in range(3):
            session.add(ConversationTurn("user", f"m{i}"))
        evicted = session.evict_oldest(2)
        assert [t.content for t in evicted] == ["m0", "m1"]
        assert [t.content for t in session.turns] == ["m2"]


class TestAnswerRequest:
    """Test request validation."""

    def test_defaults(self):
        req = AnswerRequest.from_dict({"question": "  What is NOR?  "})
        assert req.question == "What is NOR?"
        assert req.top == 5
        assert req.session_id == "default"

    def test_session_id_and_top(self):
        req = AnswerRequest.from_dict({"question": "q?", "top": "3", "sessionId": "abc"})
        assert req.top == 3
        assert req.session_id == "abc"

    @pytest.mark.parametrize("raw,expected", [(0, 1), (-4, 1), (8, 8), (50, 8)])
    def test_top_is_clamped(self, raw, expected):
        assert AnswerRequest.from_dict({"question": "q?", "top": raw}).top == expected

    @pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}, {"question": 42}])
    def test_missing_question_rejected(self, payload):
        with pytest.raises(InvalidRequestError, match="Question parameter is required"):
            AnswerRequest.from_dict(payload)

    def test_bad_top_rejected(self):
        with pytest.raises(InvalidRequestError):
            AnswerRequest.from_dict({"question": "q?", "top": "many"})


class TestAnswerResponse:
    """Test response serialization."""

    def test_intent_only_when_set(self):
        plain = AnswerResponse(question="q", response="r", session_id="s").to_dict()
        assert "intent" not in plain
        assert plain["searchResults"] == 0
        assert plain["sessionId"] == "s"

        routed = AnswerResponse(
            question="q", response="r", session_id="s", intent="greeting"
        ).to_dict()
        assert routed["intent"] == "greeting"


class TestUpstreamError:
    """Test retryability of upstream failures."""

    @pytest.mark.parametrize("status,retryable", [(429, True), (500, True), (503, True), (400, False), (None, False)])
    def test_retryable(self, status, retryable):
        assert UpstreamError("x", status_code=status).retryable is retryable
