"""Read tools: boards, show, links, attachments."""

from __future__ import annotations

from trello_cli import CliError
from trello_cli.mcp_server._core import _call, _contract_error, _finalize_tool_result
from trello_cli.mcp_server._security import (
    _sanitize_show,
    _tag_result,
    _tag_user_text,
    _validate_input,
)


def _patterns(**patterns):
    """Validate name and label patterns; None entries pass through."""
    return {
        key: (_validate_input(value, "pattern") if value is not None else None)
        for key, value in patterns.items()
    }


def get_account() -> dict:
    """Get the Trello member owning the configured token.

    Returns:
        Dict with id, username, full_name.
    """
    return _finalize_tool_result(_call("me"))


def list_boards(include_closed: bool = False) -> dict:
    """List the member's boards.

    Args:
        include_closed: True to include closed (archived) boards.

    Returns:
        Dict with data (list of boards: id, name, closed, url).
    """
    result = _call("list_boards", include_closed=include_closed)
    if isinstance(result, list):
        result = [dict(b, name=_tag_user_text(b.get("name"))) for b in result]
    return _finalize_tool_result(result)


def show(
    board: str,
    list_name: str | None = None,
    card: str | None = None,
    label: str | None = None,
    include_closed: bool = False,
) -> dict:
    """Show a board with its lists and cards, the lists matching a pattern, or one card.

    Patterns are case-insensitive; an exact name wins over partial matches
    and '*' matches any run of characters.

    Args:
        board: Board name pattern.
        list_name: List name pattern ('*' for every list).
        card: Card name pattern (needs list_name).
        label: Regex; only cards with a matching label are kept.
        include_closed: True to include closed items.

    Returns:
        Dict with kind (board, lists, card, matches) and the matching payload.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card, label=label)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    result = _call(
        "show",
        p["board"],
        p["list_name"],
        p["card"],
        label=p["label"],
        include_closed=include_closed,
    )
    return _finalize_tool_result(_sanitize_show(result))


def get_url(board: str, list_name: str | None = None, card: str | None = None) -> dict:
    """Get the shareable link of a board, list (its board's link), or card.

    Returns:
        Dict with kind, id, name, url.
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(_call("url", p["board"], p["list_name"], p["card"]))
    )


def list_attachments(board: str, list_name: str, card: str) -> dict:
    """List a card's attachments.

    Returns:
        Dict with card_id and attachments (id, name, url).
    """
    try:
        p = _patterns(board=board, list_name=list_name, card=card)
    except CliError as e:
        return _finalize_tool_result(_contract_error(str(e), "error"))
    return _finalize_tool_result(
        _tag_result(_call("list_attachments", p["board"], p["list_name"], p["card"]))
    )


def register(mcp):
    """Register all read tools with the FastMCP instance."""
    mcp.tool()(get_account)
    mcp.tool()(list_boards)
    mcp.tool()(show)
    mcp.tool()(get_url)
    mcp.tool()(list_attachments)
