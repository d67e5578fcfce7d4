"""
TrelloClient: public Python API for trello-cli.

Resolves board/list/card name patterns and performs reads and mutations
through TrelloRemote. All methods return plain dicts suitable for JSON
serialization and raise CliError subclasses on failure.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from trello_cli import config
from trello_cli.api import _check_token
from trello_cli.exceptions import CliError
from trello_cli.matching import MatchOptions, MatchResult, resolve
from trello_cli.models import CardContents, CardRevision, ResolvedPath
from trello_cli.remote import TrelloRemote
from trello_cli.updater import update_card


def _matches_payload(result: MatchResult) -> dict[str, Any]:
    return {
        "kind": "matches",
        "entity_kind": result.kind,
        "pattern": result.pattern,
        "matches": [
            {"id": m.id, "name": m.name, "closed": getattr(m, "closed", False)}
            for m in result.matches
        ],
    }


class TrelloClient:
    """Public API surface for Trello boards, lists, and cards.

    Board, list, and card arguments are name patterns resolved with
    trello_cli.matching. Raises CliError/SetupError on failure.
    """

    def __init__(
        self,
        *,
        validate_token=True,
        remote: TrelloRemote | None = None,
        match_options: MatchOptions | None = None,
        ambiguous_policy: str | None = None,
    ):
        """Initialize the client.

        Args:
            validate_token: If True, check the API key/token before use.
            remote: Resource layer; a TrelloRemote over the HTTP API by default.
            match_options: Pattern matching options; configured defaults if omitted.
            ambiguous_policy: "list" or "first"; configured default if omitted.
        """
        if validate_token:
            _check_token()
        self.remote = remote or TrelloRemote()
        self.options = match_options or MatchOptions.from_config()
        self.policy = ambiguous_policy or config.AMBIGUOUS_POLICY
        if self.policy not in config.VALID_AMBIGUOUS_POLICIES:
            raise CliError(f"[ERROR] Invalid ambiguity policy '{self.policy}'. Use list or first.")

    # -------------------------------------------------------------------
    # Resolution helpers
    # -------------------------------------------------------------------

    def _resolve(self, pattern, candidates, kind) -> MatchResult:
        return resolve(pattern, candidates, kind, self.options)

    def _find_board(self, pattern, include_closed=False):
        boards = self.remote.list_boards(include_closed=include_closed)
        return self._resolve(pattern, boards, "board").one(self.policy)

    def resolve_path(self, board, list_name=None, card=None, include_closed=False) -> ResolvedPath:
        """Resolve a board [list [card]] pattern chain to exactly one item per level."""
        if card is not None and list_name is None:
            raise CliError("[ERROR] A card pattern needs a list pattern.")
        found_board = self._find_board(board, include_closed)
        if list_name is None:
            return ResolvedPath(board=found_board)
        lists = self.remote.list_lists(found_board.id, include_closed=include_closed)
        found_list = self._resolve(list_name, lists, "list").one(self.policy)
        if card is None:
            return ResolvedPath(board=found_board, trello_list=found_list)
        cards = self.remote.list_cards(found_list.id, include_closed=include_closed)
        found_card = self._resolve(card, cards, "card").one(self.policy)
        return ResolvedPath(board=found_board, trello_list=found_list, card=found_card)

    def resolve_card(self, board, list_name, card, include_closed=False):
        return self.resolve_path(board, list_name, card, include_closed).card

    # -------------------------------------------------------------------
    # Read commands
    # -------------------------------------------------------------------

    def me(self) -> dict[str, Any]:
        member = self.remote.me()
        return {"id": member.id, "username": member.username, "full_name": member.full_name}

    def list_boards(self, *, include_closed: bool = False) -> list[dict[str, Any]]:
        return [b.to_dict() for b in self.remote.list_boards(include_closed=include_closed)]

    def show(
        self,
        board: str,
        list_name: str | None = None,
        card: str | None = None,
        *,
        label: str | None = None,
        include_closed: bool = False,
    ) -> dict[str, Any]:
        """Show a board with its lists, the lists matching a pattern, or a card.

        Multiple matches at the deepest level are returned for display
        (kind "matches"); a list pattern matching several lists shows them
        all. Ambiguity at an outer level follows the ambiguity policy.

        Returns:
            dict with "kind" one of board, lists, card, matches.
        """
        if card is not None and list_name is None:
            raise CliError("[ERROR] A card pattern needs a list pattern.")
        boards = self.remote.list_boards(include_closed=include_closed)
        board_result = self._resolve(board, boards, "board")
        if list_name is None and board_result.is_ambiguous and self.policy == "list":
            return _matches_payload(board_result)
        found_board = board_result.one(self.policy)

        lists = self.remote.list_lists(found_board.id, cards=True, include_closed=include_closed)
        if list_name is None:
            shown = found_board.with_lists(lists)
            if label:
                shown = shown.filter_labels(label)
            return {"kind": "board", "board": shown.to_dict()}

        list_result = self._resolve(list_name, lists, "list")
        if card is None:
            matched = [lst.filter_labels(label) if label else lst for lst in list_result]
            return {
                "kind": "lists",
                "board": {"id": found_board.id, "name": found_board.name, "url": found_board.url},
                "lists": [lst.to_dict() for lst in matched],
            }

        found_list = list_result.one(self.policy)
        card_result = self._resolve(card, found_list.cards or (), "card")
        if card_result.is_ambiguous and self.policy == "list":
            return _matches_payload(card_result)
        return {"kind": "card", "card": card_result.one(self.policy).to_dict()}

    def url(self, board: str, list_name: str | None = None, card: str | None = None):
        """Return the shareable URL of the deepest addressed item.

        Lists have no URL of their own; their board's URL is returned.
        """
        path = self.resolve_path(board, list_name, card)
        kind, entity = path.deepest
        link = path.board.url if kind == "list" else entity.url
        return {"kind": kind, "id": entity.id, "name": entity.name, "url": link}

    def list_attachments(self, board: str, list_name: str, card: str) -> dict[str, Any]:
        found = self.resolve_card(board, list_name, card)
        attachments = self.remote.list_attachments(found.id)
        return {
            "card_id": found.id,
            "attachments": [{"id": a.id, "name": a.name, "url": a.url} for a in attachments],
        }

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def create(
        self,
        name: str,
        *,
        board: str | None = None,
        list_name: str | None = None,
        desc: str = "",
    ) -> dict[str, Any]:
        """Create a board, a list in *board*, or a card in *board*/*list_name*."""
        name = (name or "").strip()
        if not name:
            raise CliError("[ERROR] Name cannot be empty.")
        if board is None:
            if list_name is not None:
                raise CliError("[ERROR] A list pattern needs a board pattern.")
            created = self.remote.create_board(name)
            return {"ok": True, "kind": "board", "id": created.id, "name": created.name,
                    "url": created.url}
        if list_name is None:
            found_board = self._find_board(board)
            created = self.remote.create_list(found_board.id, name)
            return {"ok": True, "kind": "list", "id": created.id, "name": created.name,
                    "board_id": found_board.id}
        path = self.resolve_path(board, list_name)
        created = self.remote.create_card(path.trello_list.id, name, desc)
        return {"ok": True, "kind": "card", "id": created.id, "name": created.name,
                "url": created.url, "list_id": path.trello_list.id}

    def edit_card(
        self,
        board: str,
        list_name: str,
        card: str,
        *,
        name: str | None = None,
        desc: str | None = None,
        editor: Callable[[CardContents], CardContents] | None = None,
        max_retries: int | None = None,
        on_conflict: Callable[[int, int], None] | None = None,
    ) -> dict[str, Any]:
        """Edit a card's name/description with conflict-safe retries.

        With *editor*, the user edits the freshest contents on every attempt;
        otherwise *name*/*desc* replace the current values.
        """
        if editor is None and name is None and desc is None:
            raise CliError("[ERROR] Nothing to edit. Use --name, --desc, or the editor.")
        if name is not None and not name.strip():
            raise CliError("[ERROR] Card name cannot be empty.")
        found = self.resolve_card(board, list_name, card)

        def mutation(revision: CardRevision) -> dict[str, Any]:
            if editor is not None:
                contents = editor(CardContents(name=revision.name, desc=revision.desc))
                return {"name": contents.name, "desc": contents.desc}
            fields: dict[str, Any] = {}
            if name is not None:
                fields["name"] = name.strip()
            if desc is not None:
                fields["desc"] = desc
            return fields

        outcome = update_card(self.remote, found.id, mutation, max_retries, on_conflict)
        return outcome.to_dict()

    def _set_closed(self, closed, board, list_name, card, max_retries, on_conflict):
        path = self.resolve_path(board, list_name, card, include_closed=not closed)
        kind, entity = path.deepest
        if kind == "card":
            outcome = update_card(
                self.remote, entity.id, lambda _rev: {"closed": closed}, max_retries, on_conflict
            )
            changed = outcome.changed
        else:
            self.remote.set_closed(kind, entity.id, closed)
            changed = entity.closed != closed
        return {
            "ok": True,
            "action": "closed" if closed else "reopened",
            "kind": kind,
            "id": entity.id,
            "name": entity.name,
            "changed": changed,
        }

    def close(self, board, list_name=None, card=None, *, max_retries=None, on_conflict=None):
        """Close (archive) the deepest addressed item. Returns its id."""
        return self._set_closed(True, board, list_name, card, max_retries, on_conflict)

    def reopen(self, board, list_name=None, card=None, *, max_retries=None, on_conflict=None):
        """Reopen a closed board, list, or card. Closed items are matched too."""
        return self._set_closed(False, board, list_name, card, max_retries, on_conflict)

    def label(
        self,
        board: str,
        list_name: str,
        card: str,
        labels: list[str],
        *,
        remove: bool = False,
    ) -> dict[str, Any]:
        """Apply (or remove) board labels, matched by name pattern, on a card."""
        if not labels:
            raise CliError("[ERROR] No label patterns given.")
        path = self.resolve_path(board, list_name, card)
        board_labels = self.remote.list_labels(path.board.id)
        current = {lb.id for lb in path.card.labels}
        changed, skipped = [], []
        for pattern in labels:
            found = self._resolve(pattern, board_labels, "label").one(self.policy)
            display = found.name or found.color or found.id
            if remove:
                if found.id not in current:
                    skipped.append(display)
                    continue
                self.remote.remove_label(path.card.id, found.id)
                current.discard(found.id)
            else:
                if found.id in current:
                    skipped.append(display)
                    continue
                self.remote.apply_label(path.card.id, found.id)
                current.add(found.id)
            changed.append(display)
        return {
            "ok": True,
            "card_id": path.card.id,
            "removed" if remove else "applied": changed,
            "skipped": skipped,
        }

    def attach(self, board: str, list_name: str, card: str, path: str) -> dict[str, Any]:
        found = self.resolve_card(board, list_name, card)
        attachment = self.remote.attach_file(found.id, path)
        return {
            "ok": True,
            "card_id": found.id,
            "attachment": {"id": attachment.id, "name": attachment.name, "url": attachment.url},
        }
