"""Cascading thresholds and the manual-scan path."""

import asyncio

from clrag.core.models.enums import KnowledgeCategory, SearchStrategy
from clrag.search.matcher import CategoryMatcher

TABLE = "r1_job_examples"
THRESHOLDS = [0.3, 0.2, 0.1, 0.05]


def test_accepts_first_non_empty_threshold(store, rows):
    row = rows["cover_letters"]
    store.scripted[TABLE] = {
        0.1: [
            {**row(1, "first"), "similarity": 0.12},
            {**row(2, "second"), "similarity": 0.18},
        ],
        0.05: [{**row(3, "never"), "similarity": 0.07}],
    }
    matcher = CategoryMatcher(store)

    outcome = asyncio.run(
        matcher.search_with_outcome(KnowledgeCategory.COVER_LETTERS, [1.0, 0.0], THRESHOLDS, 4)
    )

    assert [c.id for c in outcome.candidates] == [2, 1]
    assert [c[2] for c in store.calls_for("similarity_search")] == [0.3, 0.2, 0.1]
    assert store.calls_for("select_recent") == []
    assert outcome.strategy == SearchStrategy.INDEXED
    assert outcome.accepted_threshold == 0.1
    assert outcome.thresholds_tried == [0.3, 0.2, 0.1]


def test_results_sorted_and_never_below_accepted_threshold(store, rows):
    row = rows["cover_letters"]
    store.scripted[TABLE] = {
        0.3: [
            {**row(1, "a"), "similarity": 0.31},
            {**row(2, "b"), "similarity": 0.25},
            {**row(3, "c"), "similarity": 0.8},
        ],
    }
    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("cover_letters", [1.0, 0.0], THRESHOLDS, 4)
    )

    similarities = [c.similarity for c in outcome.candidates]
    assert similarities == sorted(similarities, reverse=True)
    assert min(similarities) >= 0.3
    assert outcome.skipped_rows == 1


def test_manual_scan_when_every_threshold_is_empty(store, rows):
    row = rows["cover_letters"]
    store.scripted[TABLE] = {}
    store.tables[TABLE] = [
        row(1, "close", embedding=[0.9, 0.1], created_at="2024-03-01T00:00:00+00:00"),
        row(2, "exact", embedding=[1.0, 0.0], created_at="2024-02-01T00:00:00+00:00"),
        row(3, "no embedding", embedding=None, created_at="2024-04-01T00:00:00+00:00"),
        row(4, "wrong size", embedding=[1.0, 0.0, 0.0], created_at="2024-05-01T00:00:00+00:00"),
        row(5, "far", embedding=[0.0, 1.0], created_at="2024-01-01T00:00:00+00:00"),
    ]

    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("cover_letters", [1.0, 0.0], THRESHOLDS, 2)
    )

    assert len(store.calls_for("similarity_search")) == 4
    assert store.calls_for("select_recent") == [("select_recent", TABLE, 20)]
    assert [c.id for c in outcome.candidates] == [2, 1]
    assert outcome.strategy == SearchStrategy.MANUAL_SCAN
    assert outcome.skipped_rows == 2


def test_manual_scan_not_used_when_a_threshold_matches(store, rows):
    store.tables[TABLE] = [rows["cover_letters"](1, "x", embedding=[1.0, 0.0])]
    candidates = asyncio.run(
        CategoryMatcher(store).search("cover_letters", [1.0, 0.0], THRESHOLDS, 4)
    )
    assert [c.id for c in candidates] == [1]
    assert store.calls_for("select_recent") == []


def test_empty_table_returns_empty(store):
    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("skills", [1.0, 0.0], [0.2, 0.1], 8)
    )
    assert outcome.candidates == []
    assert outcome.strategy == SearchStrategy.NONE
    assert outcome.errors == []


def test_store_errors_fall_through_to_manual_scan(store, rows):
    store.tables["r3_skills"] = [rows["skills"](1, "python", embedding=[1.0, 0.0])]
    store.failures[("similarity_search", "r3_skills")] = RuntimeError("index offline")

    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("skills", [1.0, 0.0], [0.2, 0.1], 8)
    )

    assert [c.id for c in outcome.candidates] == [1]
    assert outcome.strategy == SearchStrategy.MANUAL_SCAN
    assert len(outcome.errors) == 2
    assert "index offline" in outcome.errors[0]


def test_manual_scan_failure_is_absorbed(store):
    store.failures[("similarity_search", "r3_skills")] = RuntimeError("down")
    store.failures[("select_recent", "r3_skills")] = RuntimeError("down")

    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("skills", [1.0, 0.0], [0.2], 8)
    )

    assert outcome.candidates == []
    assert len(outcome.errors) == 2


def test_timeouts_are_recorded(store):
    store.delays["r3_skills"] = 0.2
    outcome = asyncio.run(
        CategoryMatcher(store, timeout=0.01).search_with_outcome("skills", [1.0, 0.0], [0.2], 8)
    )
    assert outcome.candidates == []
    assert any("timed out" in e for e in outcome.errors)


def test_explicit_table(store, rows):
    store.tables["web_r2_projects"] = [rows["projects"](7, "site", embedding=[1.0, 0.0])]
    candidates = asyncio.run(
        CategoryMatcher(store).search("projects", [1.0, 0.0], [0.3], 3, table="web_r2_projects")
    )
    assert [c.id for c in candidates] == [7]


def test_malformed_similarity_rows_are_skipped(store, rows):
    row = rows["projects"]
    store.scripted["r2_past_projects"] = {
        0.3: [
            {**row(1, "unparseable"), "similarity": "n/a"},
            {**row(2, "not a number"), "similarity": float("nan")},
            {**row(3, "missing")},
            {**row(4, "valid"), "similarity": 0.4},
        ],
    }

    outcome = asyncio.run(
        CategoryMatcher(store).search_with_outcome("projects", [1.0, 0.0], THRESHOLDS, 4)
    )

    assert [c.id for c in outcome.candidates] == [4]
    assert outcome.skipped_rows == 3
    assert outcome.accepted_threshold == 0.3
