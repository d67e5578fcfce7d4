"""Core output dispatchers."""

import json
import sys

from trello_cli import config
from trello_cli.formatters._colors import Colors, paint, paint_err


def pretty_print(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def output(data, formatter=None, fmt="text"):
    """Output data in requested format."""
    if fmt == "text" and formatter:
        print(formatter(data))
    else:
        pretty_print(data)


def warn(message):
    """Print a non-fatal notice to stderr unless --quiet."""
    if config.RUNTIME_QUIET:
        return
    print(paint_err(f"[WARN] {message}", Colors.yellow), file=sys.stderr)


def mutation_response(action, kind=None, entity_id=None, details=None, data=None,
                      fmt="text", closing=False):
    """Print a mutation confirmation.

    Closures are shown in yellow and always carry the id of the closed item.
    """
    if fmt == "json":
        payload = {
            "ok": True,
            "mutation": {"action": action, "kind": kind, "id": entity_id, "details": details},
        }
        if data:
            payload["data"] = data
        pretty_print(payload)
        return
    if config.RUNTIME_QUIET:
        return

    parts = [action]
    if kind and entity_id:
        parts.append(f"{kind} {entity_id}")
    if details:
        parts.append(details)
    summary = "OK: " + ": ".join(parts)
    print(paint(summary, Colors.yellow if closing else Colors.green))
