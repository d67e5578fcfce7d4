"""Column layout for board listings."""

import re

from trello_cli.formatters._colors import Colors, paint

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator."""
    if not s:
        return ""
    return s[: maxlen - 1] + "…" if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from remote text.
    Preserves newlines (\\n) and tabs (\\t)."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s))


def _cell(entity, key):
    value = key(entity) if callable(key) else entity.get(key)
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else ""
    return _sanitize_str(value) if isinstance(value, str) else str(value)


def _table(columns, entities, footer=None):
    """Lay out entity dicts in aligned columns.

    columns: (header, width, key) triples. key is a dict key or a callable
    taking the entity. Cells longer than their width are truncated; the last
    column is never padded. Rows of closed entities are dimmed as a whole so
    the padding stays outside the escape codes.
    """
    last = len(columns) - 1
    heads = [name if i == last else f"{name:<{width}}" for i, (name, width, _) in enumerate(columns)]
    head = " ".join(heads)
    lines = [paint(head, Colors.bold), "-" * max(len(head), 60)]
    for entity in entities:
        cells = []
        for i, (_, width, key) in enumerate(columns):
            text = _cell(entity, key)
            cells.append(text if i == last else f"{_trunc(text, width):<{width}}")
        row = " ".join(cells).rstrip()
        lines.append(paint(row, Colors.dim) if entity.get("closed") else row)
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)
