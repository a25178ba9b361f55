# tests/test_task_parser.py

from __future__ import annotations

import json
import logging

import pytest

from task_board.tasks.task_models import TaskRecord, TaskStatus
from task_board.tasks.task_parser import parse_task


def _parse(data, fallback_id: str = "7") -> TaskRecord | None:
    return parse_task(json.dumps(data), fallback_id)


def test_minimal_record_gets_defaults() -> None:
    task = _parse({"subject": "Write docs"})
    assert task == TaskRecord(id="7", subject="Write docs")
    assert task.status is TaskStatus.PENDING
    assert task.description == ""
    assert task.active_form is None
    assert task.blocks == ()
    assert task.blocked_by == ()


@pytest.mark.parametrize(
    "raw_status",
    [None, 3, 1.5, "done", "IN_PROGRESS", "", ["completed"], {"s": "pending"}, True],
)
def test_invalid_status_falls_back_to_pending(raw_status) -> None:
    task = _parse({"subject": "s", "status": raw_status})
    assert task is not None
    assert task.status is TaskStatus.PENDING


def test_absent_status_is_pending() -> None:
    task = _parse({"subject": "s"})
    assert task is not None and task.status is TaskStatus.PENDING


@pytest.mark.parametrize("status", ["pending", "in_progress", "completed"])
def test_valid_status_is_kept(status: str) -> None:
    task = _parse({"subject": "s", "status": status})
    assert task is not None
    assert task.status.value == status


@pytest.mark.parametrize("data", [{}, {"subject": None}, {"subject": 12}, {"subject": ["a"]}])
def test_missing_or_non_string_subject_is_rejected(data, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="task_board.tasks.task_parser"):
        assert _parse(data) is None
    assert "missing subject" in caplog.text


@pytest.mark.parametrize(
    ("raw_id", "expected"),
    [
        ("abc", "abc"),
        (12, "12"),
        (3.0, "3"),
        (2.5, "2.5"),
        (True, "fallback"),
        (None, "fallback"),
        ([1], "fallback"),
        ({"id": 1}, "fallback"),
    ],
)
def test_id_coercion(raw_id, expected: str) -> None:
    task = _parse({"id": raw_id, "subject": "s"}, fallback_id="fallback")
    assert task is not None
    assert task.id == expected


def test_missing_id_uses_fallback() -> None:
    task = _parse({"subject": "s"}, fallback_id="from-filename")
    assert task is not None and task.id == "from-filename"


def test_dependency_lists_are_coerced_to_strings() -> None:
    task = _parse({"subject": "s", "blocks": [1, "2", 3.0, True, None], "blockedBy": ["9"]})
    assert task is not None
    assert task.blocks == ("1", "2", "3", "true", "null")
    assert task.blocked_by == ("9",)


@pytest.mark.parametrize("value", ["1,2", 5, None, {"a": 1}])
def test_non_list_dependencies_become_empty(value) -> None:
    task = _parse({"subject": "s", "blocks": value, "blockedBy": value})
    assert task is not None
    assert task.blocks == ()
    assert task.blocked_by == ()


def test_optional_fields_are_normalized_or_dropped() -> None:
    task = _parse({"subject": "s", "description": 42, "activeForm": 1})
    assert task is not None
    assert task.description == ""
    assert task.active_form is None

    task = _parse({"subject": "s", "description": "d", "activeForm": "Writing docs"})
    assert task is not None
    assert task.description == "d"
    assert task.active_form == "Writing docs"


def test_unknown_fields_are_ignored() -> None:
    task = _parse({"subject": "s", "owner": "me", "metadata": {"x": 1}})
    assert task == TaskRecord(id="7", subject="s")


@pytest.mark.parametrize("raw", ["{not json", "", "[1, 2]", '"text"', "null", "42"])
def test_unusable_documents_return_none(raw: str) -> None:
    assert parse_task(raw, "1") is None


def test_bytes_input_is_decoded() -> None:
    task = parse_task('{"subject": "Grüße"}'.encode("utf-8"), "1")
    assert task is not None and task.subject == "Grüße"


def test_invalid_utf8_returns_none() -> None:
    assert parse_task(b'{"subject": "\xff"}', "1") is None


def test_deeply_nested_document_returns_none(caplog) -> None:
    with caplog.at_level(logging.ERROR):
        assert parse_task("[" * 100000, "1") is None
    assert "Error parsing task file 1" in caplog.text


def test_to_dict_uses_wire_names() -> None:
    task = _parse(
        {
            "id": 4,
            "subject": "s",
            "status": "in_progress",
            "activeForm": "Doing s",
            "blocks": [5],
            "blockedBy": [1],
        }
    )
    assert task is not None
    assert task.to_dict() == {
        "id": "4",
        "subject": "s",
        "description": "",
        "status": "in_progress",
        "activeForm": "Doing s",
        "blocks": ["5"],
        "blockedBy": ["1"],
    }
    assert "activeForm" not in _parse({"subject": "s"}).to_dict()
