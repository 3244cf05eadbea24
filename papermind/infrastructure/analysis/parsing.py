"""Turning free-form model output into a ``DocumentAnalysis``."""

import json
import re
from typing import Any, Dict, List, Optional

from ...modules.common.exceptions import AnalysisError
from ...modules.document.schemas import ActionItem, DocumentAnalysis

DEFAULT_SUMMARY = "No summary provided"

_FENCED_BLOCK = re.compile(r"```(?:json)?[ \t]*\r?\n(.*?)\r?\n?[ \t]*```", re.DOTALL | re.IGNORECASE)


def _first_json_object(text: str) -> Optional[Dict[str, Any]]:
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the first well-formed JSON object in ``text``.

    A fenced code block wins over any object found in the surrounding prose.

    Raises:
        AnalysisError: If no JSON object can be parsed.
    """
    for match in _FENCED_BLOCK.finditer(text):
        parsed = _first_json_object(match.group(1))
        if parsed is not None:
            return parsed

    parsed = _first_json_object(text)
    if parsed is None:
        raise AnalysisError(f"Model response contained no JSON object: {text[:200]!r}")
    return parsed


def _normalize_summary(value: Any) -> str:
    if isinstance(value, list):
        lines = [str(item).strip() for item in value if str(item).strip()]
        return "\n".join(lines) or DEFAULT_SUMMARY
    if isinstance(value, str) and value.strip():
        return value.strip()
    if value is None or value == "":
        return DEFAULT_SUMMARY
    return str(value)


def _normalize_action_items(value: Any) -> List[ActionItem]:
    if not isinstance(value, list):
        return []

    items: List[ActionItem] = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        task = raw.get("task")
        if not isinstance(task, str) or not task.strip():
            continue
        due_date = raw.get("dueDate", raw.get("due_date"))
        items.append(
            ActionItem(
                task=task.strip(),
                due_date=str(due_date).strip() if due_date not in (None, "") else None,
                priority=raw.get("priority") if isinstance(raw.get("priority"), str) else None,
            )
        )
    return items


def _normalize_tags(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []

    tags: List[str] = []
    for raw in value:
        if isinstance(raw, (str, int, float)) and not isinstance(raw, bool):
            tag = str(raw).strip()
            if tag and tag not in tags:
                tags.append(tag)
    return tags


def parse_analysis(text: str) -> DocumentAnalysis:
    """Parse a model response into summary, action items and tags, applying defaults."""
    payload = extract_json_object(text)
    return DocumentAnalysis(
        summary=_normalize_summary(payload.get("summary")),
        action_items=_normalize_action_items(payload.get("actionItems", payload.get("action_items"))),
        tags=_normalize_tags(payload.get("tags")),
    )
