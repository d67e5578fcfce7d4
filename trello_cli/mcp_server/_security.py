"""Security: injection detection, output tagging, input validation."""

from __future__ import annotations

import re

from trello_cli import CliError

_INJECTION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"^(system|assistant|user)\s*:", re.IGNORECASE | re.MULTILINE),
        "role label",
    ),
    (
        re.compile(
            r"<\s*/?\s*(system|instruction|admin|prompt|tool_call|function_call)",
            re.IGNORECASE,
        ),
        "XML-like directive tag",
    ),
    (
        re.compile(
            r"ignore\s+(all\s+)?(previous|prior|above)\s+(instructions|prompts|rules)",
            re.IGNORECASE,
        ),
        "override directive",
    ),
]


def _check_injection(text: str) -> list[str]:
    """Return descriptions of prompt-injection patterns found in *text*.

    Short strings (< 10 chars) are skipped.
    """
    if len(text) < 10:
        return []
    return [desc for pattern, desc in _INJECTION_PATTERNS if pattern.search(text)]


def _tag_user_text(text: str | None) -> str | None:
    """Wrap user-authored text in [USER_DATA] boundary markers."""
    if text is None:
        return None
    return f"[USER_DATA]{text}[/USER_DATA]"


_USER_TEXT_FIELDS = {"name", "desc"}


def _sanitize_entity(entity: dict, warnings: list[str], path: str) -> dict:
    out = dict(entity)
    for field in _USER_TEXT_FIELDS:
        if isinstance(out.get(field), str):
            for desc in _check_injection(out[field]):
                warnings.append(f"{path}.{field}: {desc}")
            out[field] = _tag_user_text(out[field])
    for child_key in ("lists", "cards"):
        children = out.get(child_key)
        if isinstance(children, (list, tuple)):
            out[child_key] = [
                _sanitize_entity(c, warnings, f"{path}.{child_key}") if isinstance(c, dict) else c
                for c in children
            ]
    return out


def _sanitize_show(result: dict) -> dict:
    """Tag names/descriptions in a show() result; add _safety_warnings on hits."""
    if not isinstance(result, dict) or result.get("ok") is False:
        return result
    warnings: list[str] = []
    out = dict(result)
    for key in ("board", "card"):
        if isinstance(out.get(key), dict):
            out[key] = _sanitize_entity(out[key], warnings, key)
    for key in ("lists", "matches"):
        if isinstance(out.get(key), list):
            out[key] = [_sanitize_entity(e, warnings, key) for e in out[key]]
    if warnings:
        out["_safety_warnings"] = warnings
    return out


def _tag_result(result: dict) -> dict:
    """Tag remote text in link, attachment, and mutation results.

    Covers the entity name, edited fields, attachment names and label names.
    Error envelopes pass through untouched.
    """
    if not isinstance(result, dict) or result.get("ok") is False:
        return result
    warnings: list[str] = []
    out = _sanitize_entity(result, warnings, "result")
    if isinstance(out.get("fields"), dict):
        out["fields"] = _sanitize_entity(out["fields"], warnings, "fields")
    if isinstance(out.get("attachments"), list):
        out["attachments"] = [
            _sanitize_entity(a, warnings, "attachments") if isinstance(a, dict) else a
            for a in out["attachments"]
        ]
    for key in ("applied", "removed", "skipped"):
        if isinstance(out.get(key), list):
            out[key] = [_tag_user_text(v) for v in out[key]]
    if warnings:
        out["_safety_warnings"] = warnings
    return out


_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INPUT_LIMITS = {
    "name": 16_384,
    "desc": 16_384,
    "pattern": 500,
}


def _validate_input(text: str, field: str) -> str:
    """Strip control characters and enforce length limits.

    Raises CliError if text is not a string or exceeds the field limit.
    """
    if not isinstance(text, str):
        raise CliError(f"[ERROR] {field} must be a string")
    cleaned = _CONTROL_RE.sub("", text)
    limit = _INPUT_LIMITS.get(field, 16_384)
    if len(cleaned) > limit:
        raise CliError(f"[ERROR] {field} exceeds maximum length of {limit} characters")
    return cleaned
