"""Tests for the snippet builder."""

from collections import Counter

import pytest

from ragdesk.core.services.snippet_service import SnippetBuilder, rolling_hash
from ragdesk.core.strategies.selection import DiversitySelection, TopScoreSelection

from tests.fakes import make_candidate, prose

URL = "https://billing.example.com/login"


class TestRollingHash:
    """Test the snippet hash."""

    def test_deterministic_and_32_bit(self):
        assert rolling_hash("abc") == rolling_hash("abc")
        assert rolling_hash("abc") == (97 * 31 * 31 + 98 * 31 + 99)
        assert 0 <= rolling_hash(prose(500)) < 2 ** 32

    def test_differs_for_different_text(self):
        assert rolling_hash("abc") != rolling_hash("abd")


class TestCaps:
    """Test count and per-document caps."""

    def _pool(self, files=5, per_file=6):
        return [
            make_candidate(
                f"doc{f}.pdf",
                prose(40, word=f"d{f}c{c}w"),
                score=float(100 - f * 10 - c),
            )
            for f in range(files)
            for c in range(per_file)
        ]

    @pytest.mark.parametrize("diversity", [True, False])
    def test_snippet_cap_invariant(self, diversity):
        builder = SnippetBuilder(max_snippets=8, per_doc_cap=3, diversity=diversity)
        snippets = builder.build("explain the documents", self._pool())

        assert len(snippets) <= 8
        assert max(Counter(s.filename for s in snippets).values()) <= 3

    def test_diversity_round_robin(self):
        builder = SnippetBuilder(max_snippets=4, per_doc_cap=3)
        snippets = builder.build("explain the documents", self._pool(files=2, per_file=3))

        assert [s.filename for s in snippets] == ["doc0.pdf", "doc1.pdf", "doc0.pdf", "doc1.pdf"]

    @pytest.mark.parametrize("requested,expected", [(1, 1), (5, 5), (20, 8)])
    def test_per_call_cap_never_exceeds_configured(self, requested, expected):
        builder = SnippetBuilder(max_snippets=8, per_doc_cap=3)
        snippets = builder.build("explain the documents", self._pool(), requested)
        assert len(snippets) == expected

    def test_ids_are_sequential(self):
        snippets = SnippetBuilder().build("explain", self._pool(files=3, per_file=2))
        assert [s.id for s in snippets] == list(range(1, len(snippets) + 1))

    def test_truncation(self):
        builder = SnippetBuilder(max_chars=200)
        snippets = builder.build("explain", [make_candidate("a.pdf", prose(300))])
        assert len(snippets[0].text) == 200


class TestLengthFilter:
    """Test minimum-length rules."""

    def test_short_snippet_dropped(self):
        snippets = SnippetBuilder().build("explain the policy", [make_candidate("a.txt", "x" * 60)])
        assert snippets == []

    def test_url_question_relaxes_minimum(self):
        snippets = SnippetBuilder().build("which link do I use", [make_candidate("a.txt", "y" * 60)])
        assert len(snippets) == 1

    def test_endpoint_always_kept(self):
        snippets = SnippetBuilder().build("explain the policy", [make_candidate("a.txt", "VPN 10.0.0.1")])
        assert snippets[0].text == "VPN 10.0.0.1"


class TestDedup:
    """Test hash dedup."""

    def test_duplicate_keeps_higher_score(self):
        text = prose(40)
        snippets = SnippetBuilder().build(
            "explain",
            [make_candidate("low.txt", text, score=1.0), make_candidate("high.txt", text, score=2.0)],
        )
        assert len(snippets) == 1
        assert snippets[0].filename == "high.txt"


class TestUrlGuarantee:
    """Test last-resort URL injection."""

    def test_url_beyond_truncation_is_injected(self):
        content = prose(200) + "\nBilling Portal\n" + URL + "\nSupport hours 9-5"
        builder = SnippetBuilder(max_chars=1000)

        snippets = builder.build("What is the URL for billing?", [make_candidate("ref.txt", content)])

        assert any(URL in s.text for s in snippets)
        assert snippets[0].score == 1e9
        assert "Billing Portal" in snippets[0].text

    def test_short_candidates_with_url_survive(self):
        candidates = [
            make_candidate("card.txt", "Billing\n" + URL),
            make_candidate("other.txt", "too short"),
        ]
        snippets = SnippetBuilder(min_chars=120).build("billing link?", candidates)
        assert any(URL in s.text for s in snippets)

    def test_name_line_window_preferred(self):
        first = make_candidate("a.txt", prose(200) + "\n" + "see https://first.example.com now, " + prose(5))
        second = make_candidate("b.txt", prose(200) + "\nPayroll\nhttps://payroll.example.com")
        snippets = SnippetBuilder().build("payroll url", [first, second])

        assert "https://payroll.example.com" in snippets[0].text

    def test_no_injection_for_plain_questions(self):
        content = prose(200) + "\nBilling Portal\n" + URL
        snippets = SnippetBuilder().build("explain billing", [make_candidate("ref.txt", content)])
        assert all(URL not in s.text for s in snippets)

    def test_injection_respects_caps(self):
        candidates = [
            make_candidate("ref.txt", prose(200, word=f"c{i}w") + "\nBilling Portal\n" + URL, score=10 - i)
            for i in range(4)
        ]
        snippets = SnippetBuilder(max_snippets=3, per_doc_cap=3).build("billing url", candidates)

        assert len(snippets) == 3
        assert URL in snippets[0].text
        assert Counter(s.filename for s in snippets)["ref.txt"] == 3


class TestSelectionPolicies:
    """Test selection policies directly."""

    def test_top_score_flattens(self):
        a = [make_candidate("a", "x", score=5.0), make_candidate("a", "y", score=1.0)]
        b = [make_candidate("b", "z", score=3.0)]
        picked = TopScoreSelection().select([a, b], 2)
        assert [c.score for c in picked] == [5.0, 3.0]

    def test_diversity_stops_at_max(self):
        groups = [[1, 2, 3], [4, 5], [6]]
        wrapped = [[make_candidate(str(v), "t", score=float(v)) for v in g] for g in groups]
        picked = DiversitySelection().select(wrapped, 4)
        assert [int(c.score) for c in picked] == [1, 4, 6, 2]


class TestReferenceCards:
    """Test compaction of oversized endpoint lists."""

    def _card_list(self, n=20):
        return "\n".join(
            f"Service {i}\nhttps://svc{i}.example.com\n"
            "Owned by the platform team, paged through the weekly on-call rotation."
            for i in range(n)
        )

    def test_endpoints_survive_truncation(self):
        content = self._card_list()
        assert len(content) > 1000

        snippets = SnippetBuilder(max_chars=1000).build(
            "explain the services", [make_candidate("catalogue.txt", content)]
        )

        text = snippets[0].text
        assert "Service 19\nhttps://svc19.example.com" in text
        assert "on-call rotation" not in text

    def test_short_card_list_kept_verbatim(self):
        content = self._card_list(n=3)
        snippets = SnippetBuilder(max_chars=1000).build(
            "explain the services", [make_candidate("catalogue.txt", content)]
        )
        assert snippets[0].text == content
