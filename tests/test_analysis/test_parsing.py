"""Tests for parsing model output into analysis results."""

import pytest

from papermind.infrastructure.analysis.parsing import DEFAULT_SUMMARY, extract_json_object, parse_analysis
from papermind.modules.common.exceptions import AnalysisError
from papermind.modules.common.schemas import Priority


def test_fenced_block_wins_over_prose():
    text = 'Example: {"summary": "wrong"}\n```json\n{"summary": "right"}\n```'

    assert extract_json_object(text) == {"summary": "right"}


def test_bare_json_object_in_prose():
    text = 'Sure! {"summary": "A notice", "tags": ["tax"]} Hope that helps.'

    assert extract_json_object(text)["summary"] == "A notice"


def test_no_json_object():
    with pytest.raises(AnalysisError):
        extract_json_object("I am unable to analyze this document.")


def test_parse_analysis_defaults():
    analysis = parse_analysis("{}")

    assert analysis.summary == DEFAULT_SUMMARY
    assert analysis.action_items == []
    assert analysis.tags == []


def test_parse_analysis_summary_list_joined():
    analysis = parse_analysis('{"summary": ["First point", " ", "Second point"]}')

    assert analysis.summary == "First point\nSecond point"


def test_parse_analysis_action_items_normalized():
    analysis = parse_analysis(
        """{
          "actionItems": [
            {"task": "Pay fine", "dueDate": "2025-02-01", "priority": "HIGH"},
            {"task": "Appeal", "due_date": "2025-02-10", "priority": "asap"},
            {"task": "   "},
            {"dueDate": "2025-03-01"},
            "not an object"
          ]
        }"""
    )

    assert [item.task for item in analysis.action_items] == ["Pay fine", "Appeal"]
    assert analysis.action_items[0].priority == Priority.HIGH
    assert analysis.action_items[1].due_date == "2025-02-10"
    assert analysis.action_items[1].priority is None


def test_parse_analysis_tags_deduplicated():
    analysis = parse_analysis('{"tags": ["tax", " tax ", "", 2025, true, null, "legal"]}')

    assert analysis.tags == ["tax", "2025", "legal"]


def test_parse_analysis_wrong_shapes_ignored():
    analysis = parse_analysis('{"summary": "ok", "actionItems": "none", "tags": "tax"}')

    assert analysis.action_items == []
    assert analysis.tags == []
