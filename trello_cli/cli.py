"""
trello-cli: command-line client for Trello boards, lists, and cards
"""

import argparse
import json
import sys

from trello_cli import config
from trello_cli.api import _check_token
from trello_cli.commands import (
    cmd_attach,
    cmd_attachments,
    cmd_boards,
    cmd_close,
    cmd_create,
    cmd_edit,
    cmd_label,
    cmd_me,
    cmd_open,
    cmd_setup,
    cmd_show,
    cmd_url,
)
from trello_cli.exceptions import CliError
from trello_cli.formatters import Colors, paint_err

HELP_TEXT = """\
Usage: trello-cli <command> [args...]

Boards, lists, and cards are addressed by name patterns. Matching is
case-insensitive; an exact name wins over partial matches, and '*' matches
any run of characters (e.g. "Sprint*"). Use '*' as the list pattern to
address every list on a board.

Global flags:
  --format text|json      Output format (default: text)
  --no-color              Disable ANSI colors
  --case-sensitive        Match names case-sensitively
  --regex                 Treat patterns as regular expressions
  --first                 Pick the first match instead of listing ambiguous ones
  --quiet, -q             Suppress confirmations and warnings
  --verbose, -v           Log HTTP requests to stderr
  --version               Show version number

Commands:
  setup                                - Save your Trello API key and token
  me                                   - Show the member owning the token
  boards                               - List boards
    --closed                             Include closed boards
  show <board> [list] [card]           - Show a board, lists, or a card
    --label <regex>                      Only cards with a matching label
    --closed                             Include closed items
  create [board] [list]                - Create a board, a list, or a card
    -n, --name <text>                    Name (card: opens $EDITOR when omitted)
    -d, --desc <text>                    Card description
  edit <board> <list> <card>           - Edit a card (opens $EDITOR by default)
    -n, --name <text>                    New name
    -d, --desc <text>                    New description
    --max-retries <n>                    Attempts when the card changes remotely
  close <board> [list] [card]          - Close the item and print its id
  open <board> [list] [card]           - Reopen a closed item
  url <board> [list] [card]            - Print a shareable link
  label <board> <list> <card> <label>... - Apply labels to a card
    --remove                             Remove the labels instead
  attachments <board> <list> <card>    - List a card's attachments
  attach <board> <list> <card> <path>  - Upload a file to a card
"""


# ---------------------------------------------------------------------------
# Global flag extraction (before argparse, so flags work after subcommand)
# ---------------------------------------------------------------------------

_BOOL_FLAGS = {
    "--no-color": "no_color",
    "--case-sensitive": "case_sensitive",
    "--regex": "regex",
    "--first": "first",
    "--quiet": "quiet",
    "-q": "quiet",
    "--verbose": "verbose",
    "-v": "verbose",
}


def _extract_global_flags(argv):
    """Extract global flags from argv regardless of position.

    Returns (format_str, flags, remaining_argv) where flags maps each
    boolean flag name to its value. Handles --version directly.
    """
    fmt = "text"
    flags = {name: False for name in set(_BOOL_FLAGS.values())}
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--version":
            print(f"trello-cli {config.VERSION}")
            sys.exit(0)
        elif arg in _BOOL_FLAGS:
            flags[_BOOL_FLAGS[arg]] = True
        elif arg == "--format" and i + 1 < len(argv):
            fmt = argv[i + 1]
            if fmt not in config.VALID_FORMATS:
                raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: text, json")
            i += 2
            continue
        else:
            remaining.append(arg)
        i += 1
    if flags["quiet"] and flags["verbose"]:
        raise CliError("[ERROR] --quiet and --verbose are mutually exclusive.")
    return fmt, flags, remaining


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


class _SubcommandParser(argparse.ArgumentParser):
    """Subparser that raises CliError instead of printing full help text."""

    def error(self, message):
        raise CliError(f"[ERROR] {message}")


def _positive_int(value):
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be a positive integer") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def _add_path(p, min_depth=1, max_depth=3):
    """Add board/list/card positional pattern arguments."""
    for depth, name in enumerate(("board", "list", "card"), start=1):
        if depth > max_depth:
            p.set_defaults(**{name: None})
        elif depth <= min_depth:
            p.add_argument(name)
        else:
            p.add_argument(name, nargs="?")


def build_parser():
    parser = _SubcommandParser(
        prog="trello-cli",
        description="Command-line client for Trello boards, lists, and cards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("--help", "-h", action="store_true", dest="show_help")
    sub = parser.add_subparsers(dest="command", parser_class=_SubcommandParser)

    # --- setup / me / version ---
    sub.add_parser("setup").set_defaults(func=cmd_setup)
    sub.add_parser("me").set_defaults(func=cmd_me)
    sub.add_parser("version").set_defaults(func=None)

    # --- boards ---
    p = sub.add_parser("boards")
    p.add_argument("--closed", action="store_true")
    p.set_defaults(func=cmd_boards)

    # --- show ---
    p = sub.add_parser("show")
    _add_path(p)
    p.add_argument("--label")
    p.add_argument("--closed", action="store_true")
    p.set_defaults(func=cmd_show)

    # --- create ---
    p = sub.add_parser("create")
    _add_path(p, min_depth=0, max_depth=2)
    p.add_argument("--name", "-n")
    p.add_argument("--desc", "-d")
    p.set_defaults(func=cmd_create)

    # --- edit ---
    p = sub.add_parser("edit")
    _add_path(p, min_depth=3)
    p.add_argument("--name", "-n")
    p.add_argument("--desc", "-d")
    p.add_argument("--max-retries", type=_positive_int, dest="max_retries")
    p.set_defaults(func=cmd_edit)

    # --- close / open ---
    for name, func in (("close", cmd_close), ("open", cmd_open)):
        p = sub.add_parser(name)
        _add_path(p)
        p.add_argument("--max-retries", type=_positive_int, dest="max_retries")
        p.set_defaults(func=func)

    # --- url ---
    p = sub.add_parser("url")
    _add_path(p)
    p.set_defaults(func=cmd_url)

    # --- label ---
    p = sub.add_parser("label")
    _add_path(p, min_depth=3)
    p.add_argument("labels", nargs="+")
    p.add_argument("--remove", action="store_true")
    p.set_defaults(func=cmd_label)

    # --- attachments / attach ---
    p = sub.add_parser("attachments")
    _add_path(p, min_depth=3)
    p.set_defaults(func=cmd_attachments)

    p = sub.add_parser("attach")
    _add_path(p, min_depth=3)
    p.add_argument("path")
    p.set_defaults(func=cmd_attach)

    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

NO_TOKEN_COMMANDS = {"setup", "version"}


def _emit_cli_error(err, fmt):
    msg = str(err)
    if fmt == "json":
        payload = {
            "ok": False,
            "schema_version": config.CONTRACT_SCHEMA_VERSION,
            "error": {
                "type": getattr(err, "kind", "error"),
                "message": msg,
                "exit_code": getattr(err, "exit_code", 1),
            },
        }
        print(json.dumps(payload, ensure_ascii=False), file=sys.stderr)
        return
    print(paint_err(msg, Colors.red), file=sys.stderr)


def main(argv=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(HELP_TEXT)
        sys.exit(0)

    # Settled before flag parsing so its own errors honor --no-color.
    config.STDERR_COLOR_ENABLED = (
        config.COLOR_ENABLED and "--no-color" not in argv and sys.stderr.isatty()
    )
    fmt = "text"
    try:
        fmt, flags, remaining_argv = _extract_global_flags(argv)
        config.RUNTIME_QUIET = flags["quiet"]
        if flags["verbose"]:
            config.HTTP_LOG_ENABLED = True
        config.COLOR_ENABLED = (
            config.COLOR_ENABLED
            and not flags["no_color"]
            and fmt == "text"
            and sys.stdout.isatty()
        )

        if not remaining_argv:
            print(HELP_TEXT)
            sys.exit(0)

        parser = build_parser()
        ns = parser.parse_args(remaining_argv)
        ns.format = fmt
        for name in ("case_sensitive", "regex", "first"):
            setattr(ns, name, flags[name])

        if ns.show_help or not ns.command:
            print(HELP_TEXT)
            sys.exit(0)

        cmd = ns.command

        if cmd == "version":
            print(f"trello-cli {config.VERSION}")
            sys.exit(0)

        if cmd not in NO_TOKEN_COMMANDS:
            _check_token()

        handler = getattr(ns, "func", None)
        if handler:
            handler(ns)
        else:
            raise CliError(f"[ERROR] Unknown command: {cmd}")

    except CliError as e:
        _emit_cli_error(e, fmt)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
