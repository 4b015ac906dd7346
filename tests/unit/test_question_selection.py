"""
Unit tests for question selection with fallback
"""
import pytest

from examly.database import Database
from examly.services.selection import (
    build_fallback_tiers,
    find_questions_with_fallback,
    load_questions,
    resolve_chapter_ids,
)
from tests.fakes import FakeSupabaseClient, mcq


def question_bank():
    """Ten MCQs for sub-1: two model/hard, one model/easy, seven book/easy"""
    rows = []
    for number in range(1, 11):
        question_id = f"q{number:02d}"
        if number in (3, 7):
            rows.append(mcq(question_id, source_type="model_paper", difficulty="hard"))
        elif number == 5:
            rows.append(mcq(question_id, source_type="model_paper", difficulty="easy"))
        else:
            rows.append(mcq(question_id, source_type="book", difficulty="easy", chapter_id="ch-2"))
    rows.append(mcq("z-other", subject_id="sub-2"))
    return FakeSupabaseClient({"questions": rows})


class TestFallbackTiers:
    """Test construction of the relaxed filter sets"""

    def test_tiers_relax_in_order(self):
        tiers = build_fallback_tiers("mcq", "sub-1", ["ch-1"], "model", "hard")

        assert tiers == [
            ({"question_type": "mcq", "subject_id": "sub-1", "source_type": "model_paper", "difficulty": "hard"}, ["ch-1"]),
            ({"question_type": "mcq", "subject_id": "sub-1", "source_type": "model_paper"}, ["ch-1"]),
            ({"question_type": "mcq", "subject_id": "sub-1"}, ["ch-1"]),
            ({"question_type": "mcq", "subject_id": "sub-1"}, []),
        ]

    def test_identical_tiers_are_skipped(self):
        """With no optional filters every tier is the same query"""
        tiers = build_fallback_tiers("mcq", "sub-1", [], "all", "any")

        assert tiers == [({"question_type": "mcq", "subject_id": "sub-1"}, [])]

    def test_source_type_is_mapped(self):
        tiers = build_fallback_tiers("short", "sub-1", [], "past", None)

        assert tiers[0][0]["source_type"] == "past_paper"
        assert "difficulty" not in tiers[0][0]

    @pytest.mark.parametrize("option,expected", [
        ("custom", ["ch-1", "ch-2"]),
        ("single_chapter", ["ch-1", "ch-2"]),
        ("full_book", []),
        (None, []),
    ])
    def test_resolve_chapter_ids(self, option, expected):
        assert resolve_chapter_ids(option, ["ch-1", "ch-2"]) == expected


class TestFindQuestionsWithFallback:
    """Test tiered selection against the in-memory bank"""

    def test_first_tier_satisfies_request(self):
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", [], "model", "hard", 2)

        assert result == ["q07", "q03"]
        assert len(client.selects("questions")) == 1

    def test_relaxes_until_count_is_met(self):
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", [], "model", "hard", 3)

        assert result == ["q07", "q05", "q03"]
        assert len(client.selects("questions")) == 2

    def test_falls_back_to_subject_and_type(self):
        """Two hard model rows among ten: the last tier supplies five rows"""
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", [], "model", "hard", 5)

        assert result == ["q10", "q09", "q08", "q07", "q06"]
        assert all(question_id.startswith("q") for question_id in result)

    def test_returns_best_effort_when_bank_is_short(self):
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", ["ch-1"], "book", "easy", 50)

        assert len(result) == 10
        assert result == sorted(result, reverse=True)

    def test_chapter_filter_dropped_only_in_last_tier(self):
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", ["ch-1"], "all", "any", 3)

        # ch-1 holds q03, q05, q07
        assert result == ["q07", "q05", "q03"]

    def test_empty_first_tier_still_finds_rows(self):
        client = question_bank()

        result = find_questions_with_fallback(Database(client), "mcq", "sub-1", ["missing"], "past", "hard", 1)

        assert result == ["q10"]

    def test_deterministic(self):
        client = question_bank()
        db = Database(client)

        first = find_questions_with_fallback(db, "mcq", "sub-1", [], "model", "hard", 4)
        second = find_questions_with_fallback(db, "mcq", "sub-1", [], "model", "hard", 4)

        assert first == second

    @pytest.mark.parametrize("count", [0, -3])
    def test_non_positive_count(self, count):
        client = question_bank()

        assert find_questions_with_fallback(Database(client), "mcq", "sub-1", [], "all", "any", count) == []
        assert client.queries == []

    def test_unknown_subject_returns_empty(self):
        client = question_bank()

        assert find_questions_with_fallback(Database(client), "mcq", "nope", [], "all", "any", 5) == []

    def test_database_errors_propagate(self):
        client = question_bank()
        client.fail_tables.add("questions")

        with pytest.raises(Exception):
            find_questions_with_fallback(Database(client), "mcq", "sub-1", [], "all", "any", 5)


class TestLoadQuestions:

    def test_preserves_requested_order(self):
        client = question_bank()

        questions = load_questions(Database(client), ["q03", "q01", "q02"])

        assert [q.id for q in questions] == ["q03", "q01", "q02"]

    def test_drops_unknown_ids(self):
        client = question_bank()

        questions = load_questions(Database(client), ["q01", "ghost", "q02"])

        assert [q.id for q in questions] == ["q01", "q02"]

    def test_empty_ids_skip_query(self):
        client = question_bank()

        assert load_questions(Database(client), []) == []
        assert client.queries == []
