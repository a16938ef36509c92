"""Tests for structural change summaries between workflow snapshots."""

from __future__ import annotations

from services.state.workflow_versions.changes import (
    UNAVAILABLE_SUMMARY,
    diff_documents,
    documents_equal,
    summarize_changes,
)


def test_initial_snapshot_reports_every_element_as_added() -> None:
    summary = summarize_changes(None, {"name": "Welcome", "steps": ["A", "B"]})

    assert summary.is_initial is True
    assert summary.complete is True
    assert summary.added == 3
    assert summary.removed == 0
    assert summary.modified == 0
    assert summary.added_paths == ("$.name", "$.steps[0]", "$.steps[1]")
    assert summary.summary == "Initial snapshot: 3 elements added"


def test_initial_empty_snapshot_has_no_elements() -> None:
    summary = summarize_changes(None, {})

    assert summary.is_initial is True
    assert summary.has_changes is False
    assert summary.summary == "Initial snapshot: 0 elements added"


def test_appended_step_is_a_single_addition() -> None:
    summary = summarize_changes({"steps": ["A", "B"]}, {"steps": ["A", "B", "C"]})

    assert summary.is_initial is False
    assert (summary.added, summary.removed, summary.modified) == (1, 0, 0)
    assert summary.added_paths == ("$.steps[2]",)
    assert summary.summary == "1 added"


def test_step_removed_from_the_front_is_a_single_removal() -> None:
    summary = summarize_changes({"steps": ["A", "B", "C"]}, {"steps": ["B", "C"]})

    assert (summary.added, summary.removed, summary.modified) == (0, 1, 0)
    assert summary.removed_paths == ("$.steps[0]",)


def test_step_inserted_at_the_front_is_a_single_addition() -> None:
    summary = summarize_changes({"steps": ["A", "B"]}, {"steps": ["C", "A", "B"]})

    assert (summary.added, summary.removed, summary.modified) == (1, 0, 0)
    assert summary.added_paths == ("$.steps[0]",)


def test_replaced_middle_step_is_one_modification_among_unchanged_neighbours() -> None:
    changes = diff_documents(
        {"steps": [{"type": "DELAY"}, {"type": "EMAIL"}, {"type": "TASK"}]},
        {"steps": [{"type": "DELAY"}, {"type": "SMS"}, {"type": "TASK"}, {"type": "END"}]},
    )

    assert [(change.path, change.kind) for change in changes] == [
        ("$.steps[1]", "modified"),
        ("$.steps[3]", "added"),
    ]
    assert changes[0].old_value == {"type": "EMAIL"}


def test_missing_and_changed_fields_are_removals_and_modifications() -> None:
    summary = summarize_changes(
        {"name": "Old", "enabled": True, "legacy": {"a": 1, "b": 2}},
        {"name": "New", "enabled": True},
    )

    assert summary.removed_paths == ("$.legacy.a", "$.legacy.b")
    assert summary.modified_paths == ("$.name",)
    assert summary.summary == "2 removed, 1 modified"


def test_identical_documents_report_no_changes() -> None:
    document = {"steps": [{"id": 1, "type": "DELAY"}], "enabled": False}

    summary = summarize_changes(document, dict(document))

    assert summary.has_changes is False
    assert summary.summary == "No changes"


def test_keyed_list_items_are_matched_by_identity_not_position() -> None:
    previous = {
        "actions": [
            {"actionId": 1, "type": "DELAY", "delayMillis": 1000},
            {"actionId": 2, "type": "EMAIL"},
        ]
    }
    current = {
        "actions": [
            {"actionId": 3, "type": "TASK"},
            {"actionId": 2, "type": "EMAIL"},
            {"actionId": 1, "type": "DELAY", "delayMillis": 5000},
        ]
    }

    changes = diff_documents(previous, current)

    assert [(change.path, change.kind) for change in changes] == [
        ("$.actions[actionId=1]", "modified"),
        ("$.actions[actionId=3]", "added"),
    ]
    assert changes[0].old_value == {"actionId": 1, "type": "DELAY", "delayMillis": 1000}


def test_duplicate_identity_keys_fall_back_to_value_alignment() -> None:
    changes = diff_documents(
        {"steps": [{"id": "a"}, {"id": "a"}]},
        {"steps": [{"id": "a"}]},
    )

    assert [(change.path, change.kind) for change in changes] == [
        ("$.steps[1]", "removed"),
    ]


def test_booleans_and_numbers_are_distinct_values() -> None:
    summary = summarize_changes({"flag": 1, "nested": [True]}, {"flag": True, "nested": [1]})

    assert summary.modified_paths == ("$.flag", "$.nested[0]")


def test_type_change_counts_as_one_modification() -> None:
    summary = summarize_changes({"steps": ["A"]}, {"steps": "A"})

    assert summary.modified_paths == ("$.steps",)


def test_unwalkable_payload_degrades_to_incomplete_summary() -> None:
    class _Exploding(dict):
        def items(self):  # type: ignore[override]
            raise RuntimeError("boom")

    summary = summarize_changes({"a": 1}, _Exploding(a=2))

    assert summary.complete is False
    assert summary.has_changes is False
    assert summary.summary == UNAVAILABLE_SUMMARY


def test_documents_equal_distinguishes_booleans_from_numbers() -> None:
    assert documents_equal({"enabled": 1, "steps": ["A"]}, {"enabled": 1, "steps": ["A"]})
    assert not documents_equal({"enabled": 1}, {"enabled": True})
    assert not documents_equal({"steps": ["A", "B"]}, {"steps": ["B", "A"]})
