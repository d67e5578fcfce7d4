"""Write tools: create, edit, close/reopen, labels."""

from __future__ import annotations

from trello_cli import CliError
from trello_cli.mcp_server._core import _call, _contract_error, _finalize_tool_result
from trello_cli.mcp_server._security import _tag_result, _validate_input
from trello_cli.mcp_server._tools_read import _patterns


def create(
    name: str,
    board: str | None = None,
    list_name: str | None = None,
    desc: str = "",
) -> dict:
    """Create a board, a list on a board, or a card in a list.

    Omit board to create a board; give board only to create a list;
    give board and list_name to create a card.

    Args:
        name: Name of the new item (max 16384 chars).
        board: Board name pattern.
        list_name: List name pattern.
        desc: Card description (cards only).

    Returns:
        Dict with ok, kind, id, name.
    """
    try:
        name = _validate_input(name, "name")
        desc = _validate_input(desc, "desc")
        p = _patterns(board=board, list_name=list_name)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(
            _call("create", name, board=p["board"], list_name=p["list_name"], desc=desc)
        )
    )


def edit_card(
    board: str,
    list_name: str,
    card: str,
    name: str | None = None,
    desc: str | None = None,
    max_retries: int | None = None,
) -> dict:
    """Change a card's name and/or description.

    The card is re-read before writing; if it changed remotely the edit is
    retried against the latest version up to max_retries attempts.

    Returns:
        Dict with ok, card_id, attempts, changed, fields, name.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
        if name is not None:
            name = _validate_input(name, "name")
        if desc is not None:
            desc = _validate_input(desc, "desc")
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call(
        "edit_card",
        p["board"],
        p["list_name"],
        p["card"],
        name=name,
        desc=desc,
        max_retries=max_retries,
    )
    return _finalize_tool_result(_tag_result(result))


def close(board: str, list_name: str | None = None, card: str | None = None) -> dict:
    """Close (archive) the deepest addressed board, list, or card.

    Returns:
        Dict with ok, action, kind, id, name, changed.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(_call("close", p["board"], p["list_name"], p["card"]))
    )


def reopen(board: str, list_name: str | None = None, card: str | None = None) -> dict:
    """Reopen a closed board, list, or card. Closed items are matched too.

    Returns:
        Dict with ok, action, kind, id, name, changed.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(_call("reopen", p["board"], p["list_name"], p["card"]))
    )


def label_card(
    board: str,
    list_name: str,
    card: str,
    labels: list[str],
    remove: bool = False,
) -> dict:
    """Apply (or remove, with remove=True) board labels on a card.

    Args:
        labels: Label name patterns.

    Returns:
        Dict with ok, card_id, applied|removed, skipped.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
        labels = [_validate_input(lb, "pattern") for lb in labels]
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(
            _call("label", p["board"], p["list_name"], p["card"], labels, remove=remove)
        )
    )


def register(mcp):
    """Register all write tools with the FastMCP instance."""
    mcp.tool()(create)
    mcp.tool()(edit_card)
    mcp.tool()(close)
    mcp.tool()(reopen)
    mcp.tool()(label_card)
