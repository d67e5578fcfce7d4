"""trello-cli: command-line client for Trello boards, lists, and cards."""

from trello_cli.client import TrelloClient
from trello_cli.config import VERSION
from trello_cli.exceptions import (
    AmbiguousError,
    CliError,
    ConflictExhaustedError,
    NotFoundError,
    RemoteConflictError,
    RemoteError,
    SetupError,
)
from trello_cli.matching import MatchOptions, MatchResult, resolve
from trello_cli.updater import UpdateOutcome, UpdateState, update_card

__all__ = [
    "VERSION",
    "TrelloClient",
    "AmbiguousError",
    "CliError",
    "ConflictExhaustedError",
    "NotFoundError",
    "RemoteConflictError",
    "RemoteError",
    "SetupError",
    "MatchOptions",
    "MatchResult",
    "resolve",
    "UpdateOutcome",
    "UpdateState",
    "update_card",
]
