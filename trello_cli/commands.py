"""
Command implementations for trello-cli.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (TrelloClient). These thin wrappers
handle argparse → keyword args, interactive input, and formatter dispatch.
"""

from trello_cli import config
from trello_cli.api import _check_token, _mask_token
from trello_cli.client import TrelloClient
from trello_cli.editor import edit_contents
from trello_cli.exceptions import CliError, SetupError
from trello_cli.formatters import (
    format_attachments,
    format_boards_table,
    format_member,
    format_show,
    format_url,
    mutation_response,
    output,
    warn,
)
from trello_cli.matching import MatchOptions
from trello_cli.models import CardContents


def _client(ns):
    """Build a TrelloClient honoring the global matching flags."""
    options = MatchOptions.from_config(
        case_sensitive=True if getattr(ns, "case_sensitive", False) else None,
        mode="regex" if getattr(ns, "regex", False) else None,
    )
    policy = "first" if getattr(ns, "first", False) else None
    return TrelloClient(validate_token=False, match_options=options, ambiguous_policy=policy)


def _report_conflict(attempt, max_retries):
    if attempt < max_retries:
        warn(
            f"Card changed remotely during the edit (attempt {attempt}/{max_retries}); "
            "retrying against the latest version."
        )


def _prompt_name(kind):
    try:
        name = input(f"Name of the new {kind}: ").strip()
    except EOFError:
        name = ""
    if not name:
        raise CliError(f"[ERROR] A {kind} name is required.")
    return name


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def cmd_setup(ns):
    """Prompt for API key and token, validate them, and save them to .env."""
    print("Get your API key and a token at https://trello.com/power-ups/admin\n")
    current_key = config.API_KEY
    prompt = f"API key [{_mask_token(current_key)}]: " if current_key else "API key: "
    key = input(prompt).strip() or current_key
    token = input("Token: ").strip() or config.TOKEN
    if not key or not token:
        raise SetupError("[SETUP_NEEDED] Both an API key and a token are required.")
    config.API_KEY, config.TOKEN = key, token
    member = _check_token()
    config.save_env_value("TRELLO_API_KEY", key)
    config.save_env_value("TRELLO_TOKEN", token)
    print(f"Saved credentials to {config.ENV_PATH} (member {member.get('id')}).")


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


def cmd_me(ns):
    output(_client(ns).me(), format_member, ns.format)


def cmd_boards(ns):
    output(_client(ns).list_boards(include_closed=ns.closed), format_boards_table, ns.format)


def cmd_show(ns):
    result = _client(ns).show(
        ns.board,
        ns.list,
        ns.card,
        label=ns.label,
        include_closed=ns.closed,
    )
    output(result, format_show, ns.format)


def cmd_url(ns):
    output(_client(ns).url(ns.board, ns.list, ns.card), format_url, ns.format)


def cmd_attachments(ns):
    result = _client(ns).list_attachments(ns.board, ns.list, ns.card)
    output(result, lambda r: format_attachments(r["attachments"]), ns.format)


# ---------------------------------------------------------------------------
# Mutation commands
# ---------------------------------------------------------------------------


def cmd_create(ns):
    client = _client(ns)
    if ns.board is None:
        kind = "board"
    elif ns.list is None:
        kind = "list"
    else:
        kind = "card"
    name, desc = ns.name, ns.desc or ""
    if name is None:
        if kind == "card":
            contents = edit_contents(CardContents(name="", desc=desc))
            name, desc = contents.name, contents.desc
        else:
            name = _prompt_name(kind)
    result = client.create(name, board=ns.board, list_name=ns.list, desc=desc)
    mutation_response("Created", kind, result["id"], f"name='{result['name']}'", result,
                      ns.format)


def cmd_edit(ns):
    editor = None
    if ns.name is None and ns.desc is None:
        editor = edit_contents
    result = _client(ns).edit_card(
        ns.board,
        ns.list,
        ns.card,
        name=ns.name,
        desc=ns.desc,
        editor=editor,
        max_retries=ns.max_retries,
        on_conflict=_report_conflict,
    )
    if not result["changed"]:
        mutation_response("Unchanged", "card", result["card_id"], None, result, ns.format)
        return
    detail = f"fields={','.join(sorted(result['fields']))}"
    if result["attempts"] > 1:
        detail += f", attempts={result['attempts']}"
    mutation_response("Updated", "card", result["card_id"], detail, result, ns.format)


def cmd_close(ns):
    result = _client(ns).close(
        ns.board, ns.list, ns.card, max_retries=ns.max_retries, on_conflict=_report_conflict
    )
    action = "Closed" if result["changed"] else "Already closed"
    mutation_response(action, result["kind"], result["id"], f"name='{result['name']}'",
                      result, ns.format, closing=True)


def cmd_open(ns):
    result = _client(ns).reopen(
        ns.board, ns.list, ns.card, max_retries=ns.max_retries, on_conflict=_report_conflict
    )
    action = "Reopened" if result["changed"] else "Already open"
    mutation_response(action, result["kind"], result["id"], f"name='{result['name']}'",
                      result, ns.format)


def cmd_label(ns):
    result = _client(ns).label(ns.board, ns.list, ns.card, ns.labels, remove=ns.remove)
    changed = result.get("removed" if ns.remove else "applied", [])
    for name in result["skipped"]:
        state = "not on" if ns.remove else "already on"
        warn(f"Label '{name}' {state} card {result['card_id']}.")
    action = "Removed labels" if ns.remove else "Applied labels"
    mutation_response(action, "card", result["card_id"], ", ".join(changed) or None, result,
                      ns.format)


def cmd_attach(ns):
    result = _client(ns).attach(ns.board, ns.list, ns.card, ns.path)
    attachment = result["attachment"]
    mutation_response("Attached", "card", result["card_id"],
                      f"{attachment['name']} ({attachment['url']})", result, ns.format)
