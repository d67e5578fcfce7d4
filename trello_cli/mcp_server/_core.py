"""Core helpers: client caching, _call dispatcher, response contract."""

from __future__ import annotations

from trello_cli import AmbiguousError, CliError, SetupError, TrelloClient
from trello_cli.config import CONTRACT_SCHEMA_VERSION
from trello_cli.mcp_server._security import _tag_user_text

_client: TrelloClient | None = None


def _get_client() -> TrelloClient:
    """Return a cached TrelloClient, creating one on first use."""
    global _client
    if _client is None:
        _client = TrelloClient()
    return _client


def _contract_error(message: str, error_type: str = "error") -> dict:
    """Return a stable MCP error envelope."""
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "error": {
            "type": error_type,
            "message": message,
        },
    }


def _finalize_tool_result(result):
    """Add contract metadata (ok/schema_version) to dict responses.

    Lists are wrapped as {"ok", "schema_version", "data"}.
    """
    if isinstance(result, dict):
        out = dict(result)
        out.setdefault("ok", True)
        out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
        return out
    return {"ok": True, "schema_version": CONTRACT_SCHEMA_VERSION, "data": result}


_ALLOWED_METHODS = {
    "me",
    "list_boards",
    "show",
    "url",
    "list_attachments",
    "create",
    "edit_card",
    "close",
    "reopen",
    "label",
}


def _call(method_name: str, *args, **kwargs):
    """Call a TrelloClient method, converting exceptions to error dicts."""
    if method_name not in _ALLOWED_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
        return getattr(client, method_name)(*args, **kwargs)
    except SetupError as e:
        return _contract_error(str(e), "setup")
    except AmbiguousError as e:
        # Lists remote names of every candidate.
        return _contract_error(_tag_user_text(str(e)), e.kind)
    except CliError as e:
        return _contract_error(str(e), getattr(e, "kind", "error"))
    except Exception as e:
        return _contract_error(f"Unexpected error: {e}", "error")
