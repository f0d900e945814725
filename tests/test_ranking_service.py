"""Tests for the document ranker and its scoring strategies."""

import pytest

from ragdesk.core.models.document import Document, SourceCategory
from ragdesk.core.services.ranking_service import (
    DocumentRanker,
    question_terms,
    quoted_entities,
)
from ragdesk.core.strategies.scoring import (
    ContentQualityStrategy,
    FileTypeStrategy,
    SourcePenaltyStrategy,
    classify_source,
)

from tests.fakes import make_hit

TRACKER_CONTENT = (
    "Vacation days request for the team, see "
    "project-tracker.example/browse/TEC-123 for status"
)


class TestClassifySource:
    """Test source categorisation."""

    def test_tracker_by_content(self):
        doc = Document(filename="export.html", content=TRACKER_CONTENT)
        assert classify_source(doc) is SourceCategory.TRACKER

    def test_tracker_by_filename(self):
        doc = Document(filename="jira.example.com/browse/OPS-9", content="notes")
        assert classify_source(doc) is SourceCategory.TRACKER

    def test_plain_browse_word_is_not_tracker(self):
        doc = Document(filename="guide.txt", content="Browse the catalogue for TEC-123 items")
        assert classify_source(doc) is not SourceCategory.TRACKER

    @pytest.mark.parametrize(
        "content",
        [
            "1.2 Annual leave accrues monthly",
            "Employees are entitled to 25 days of leave",
            "Effective date: 1 January",
            "Staff must report absences",
        ],
    )
    def test_policy_patterns(self, content):
        doc = Document(filename="handbook.pdf", content=content)
        assert classify_source(doc) is SourceCategory.AUTHORITATIVE

    def test_unknown(self):
        doc = Document(filename="notes.txt", content="20 days of sunshine last year")
        assert classify_source(doc) is SourceCategory.UNKNOWN


class TestStrategies:
    """Test individual multipliers."""

    def test_source_penalty(self):
        strategy = SourcePenaltyStrategy(penalty=0.05, boost=5.0)
        doc = Document(filename="a.txt", content="x")
        assert strategy.factor(doc, SourceCategory.TRACKER) == 0.05
        assert strategy.factor(doc, SourceCategory.UNKNOWN) == 5.0
        assert strategy.factor(doc, SourceCategory.AUTHORITATIVE) == 5.0

    def test_content_quality_penalises_links(self):
        strategy = ContentQualityStrategy(policy_multiplier=2.0)
        prose = Document(filename="a.txt", content="one two three four five six")
        links = Document(
            filename="b.txt",
            content="https://a.example https://b.example download here now please",
        )
        assert strategy.factor(prose, SourceCategory.UNKNOWN) == 6
        # 6 words / (2 urls + 1 download)
        assert strategy.factor(links, SourceCategory.UNKNOWN) == 2
        assert strategy.factor(prose, SourceCategory.AUTHORITATIVE) == 12

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("policy.pdf", 2.0),
            ("guide.docx", 1.8),
            ("old.doc", 1.8),
            ("confluence-export.html", 0.7),
            ("notes.txt", 1.0),
        ],
    )
    def test_file_type(self, filename, expected):
        doc = Document(filename=filename, content="x")
        assert FileTypeStrategy().factor(doc, SourceCategory.UNKNOWN) == expected


class TestQuestionTerms:
    """Test must-keep term extraction."""

    def test_stopwords_removed(self):
        assert question_terms("How many vacation days do I get?") == ["vacation", "days"]

    def test_quoted_entities(self):
        assert quoted_entities('Where is "Payroll Portal"?') == ["payroll portal"]


class TestRanking:
    """Test scoring pipeline and selection funnel."""

    def test_policy_outranks_tracker_despite_lower_raw_score(self):
        policy = make_hit("policy.pdf", "Vacation policy: 20 days per year", 0.9, id="p")
        tracker = make_hit("tracker-export.html", TRACKER_CONTENT, 0.95, id="t")
        unrelated = make_hit("kitchen.txt", "Office kitchen cleaning rota for the second floor", 0.3, id="u")

        ranked = DocumentRanker().rank(
            "How many vacation days do I get?", [tracker, unrelated, policy]
        )
        names = [c.document.filename for c in ranked]

        assert names.index("policy.pdf") < names.index("tracker-export.html")
        tracker_candidate = ranked[names.index("tracker-export.html")]
        assert tracker_candidate.is_penalized_source

    def test_empty(self):
        assert DocumentRanker().rank("anything", []) == []

    def _pool(self, target_score):
        fillers = [
            make_hit(f"filler-{i}.txt", f"generic filler text number {i}", 100.0 - i, id=f"f{i}")
            for i in range(24)
        ]
        target = make_hit("zebra.txt", "The zebra handbook covers stripes", target_score, id="z")
        return fillers + [target]

    def test_must_keep_within_top_k_is_preserved(self):
        # 16 fillers score above the target: rank 17, outside final_n=12.
        ranker = DocumentRanker(strategies=[], top_k=20, final_n=12)
        ranked = ranker.rank("Where is the zebra handbook?", self._pool(84.5))

        ids = [c.document.id for c in ranked]
        assert "z" in ids
        assert ids[0] == "z"
        assert len(ranked) == 13

    def test_must_keep_below_top_k_is_not_forced(self):
        ranker = DocumentRanker(strategies=[], top_k=20, final_n=12)
        ranked = ranker.rank("Where is the zebra handbook?", self._pool(0.5))

        ids = [c.document.id for c in ranked]
        assert "z" not in ids
        assert len(ranked) == 12

    def test_must_keep_phrase(self):
        ranker = DocumentRanker(strategies=[], must_keep_phrases=["Service Catalogue"])
        hit = make_hit("a.txt", "see the service catalogue", 1.0, id="a")
        candidate = ranker.score("unrelated question words", hit)
        assert candidate.has_exact_match

    def test_exact_match_is_substring(self):
        ranker = DocumentRanker(strategies=[])
        hit = make_hit("a.txt", "Vacations are approved by managers", 1.0)
        assert ranker.score("vacation", hit).has_exact_match

    def test_inflected_match_within_top_k_is_preserved(self):
        fillers = [
            make_hit(f"filler-{i}.txt", f"generic filler text number {i}", 100.0 - i, id=f"f{i}")
            for i in range(24)
        ]
        target = make_hit("leave.txt", "Vacations are approved by managers", 84.5, id="z")
        ranker = DocumentRanker(strategies=[], top_k=20, final_n=12)

        ranked = ranker.rank("vacation", fillers + [target])

        assert "z" in [c.document.id for c in ranked]

    def test_url_question_preserves_compact_records(self):
        ranker = DocumentRanker(strategies=[], top_k=20, final_n=1)
        best = make_hit("a.txt", "long text without any address " * 5, 10.0, id="a")
        card = make_hit("card.txt", "Payroll\nhttps://payroll.example.com", 5.0, id="card")

        ranked = ranker.rank("what is the payroll link", [best, card])

        assert [c.document.id for c in ranked] == ["card", "a"]
        assert ranked[0].is_compact_record
        assert ranked[0].has_url

    def test_output_has_no_duplicates(self):
        ranker = DocumentRanker(strategies=[], top_k=20, final_n=12)
        ranked = ranker.rank("zebra handbook", self._pool(99.5))
        keys = [c.identity_key for c in ranked]
        assert len(keys) == len(set(keys))
