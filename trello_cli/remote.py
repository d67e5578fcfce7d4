"""
Trello REST resources used by trello-cli.

TrelloRemote wraps api.trello_request and converts JSON into models.
It is the only place that knows Trello endpoint paths and field lists.
"""

from __future__ import annotations

import os

from trello_cli import config
from trello_cli.api import encode_multipart, trello_request
from trello_cli.exceptions import CliError, RemoteConflictError, RemoteError
from trello_cli.models import (
    Attachment,
    Board,
    Card,
    CardRevision,
    Label,
    Member,
    TrelloList,
)

_CLOSABLE_PATHS = {"board": "boards", "list": "lists", "card": "cards"}
_WRITABLE_CARD_FIELDS = {"name", "desc", "closed"}


def _expect_list(result, operation):
    if isinstance(result, list):
        return result
    raise RemoteError(
        f"Unexpected {operation} response shape: expected JSON array, "
        f"got {type(result).__name__}.",
        category="malformed",
    )


def _expect_object(result, operation):
    if isinstance(result, dict):
        return result
    raise RemoteError(
        f"Unexpected {operation} response shape: expected JSON object, "
        f"got {type(result).__name__}.",
        category="malformed",
    )


class TrelloRemote:
    """Thin resource layer over the Trello API."""

    def __init__(self, request=trello_request):
        self._request = request

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------

    def me(self) -> Member:
        data = self._request("members/me", {"fields": "id,username,fullName"})
        return Member.from_api(_expect_object(data, "member"))

    def list_boards(self, include_closed=False) -> list[Board]:
        params = {"filter": "all" if include_closed else "open", "fields": config.BOARD_FIELDS}
        data = self._request("members/me/boards", params)
        return [Board.from_api(b) for b in _expect_list(data, "boards")]

    def list_lists(self, board_id, cards=False, include_closed=False) -> list[TrelloList]:
        params = {"fields": config.LIST_FIELDS, "filter": "all" if include_closed else "open"}
        if cards:
            params["cards"] = "all" if include_closed else "open"
            params["card_fields"] = config.CARD_FIELDS
        data = self._request(f"boards/{board_id}/lists", params)
        return [TrelloList.from_api(lst) for lst in _expect_list(data, "lists")]

    def list_cards(self, list_id, include_closed=False) -> list[Card]:
        params = {"fields": config.CARD_FIELDS, "filter": "all" if include_closed else "open"}
        data = self._request(f"lists/{list_id}/cards", params)
        return [Card.from_api(c) for c in _expect_list(data, "cards")]

    def list_labels(self, board_id) -> list[Label]:
        data = self._request(f"boards/{board_id}/labels", {"fields": config.LABEL_FIELDS})
        return [Label.from_api(lb) for lb in _expect_list(data, "labels")]

    def get_card(self, card_id) -> Card:
        data = self._request(f"cards/{card_id}", {"fields": config.CARD_FIELDS})
        return Card.from_api(_expect_object(data, "card"))

    def list_attachments(self, card_id) -> list[Attachment]:
        data = self._request(
            f"cards/{card_id}/attachments", {"fields": config.ATTACHMENT_FIELDS}
        )
        return [Attachment.from_api(a) for a in _expect_list(data, "attachments")]

    # -------------------------------------------------------------------
    # Optimistic-concurrency card access
    # -------------------------------------------------------------------

    def read_card(self, card_id) -> CardRevision:
        return CardRevision.from_card(self.get_card(card_id))

    def write_card(self, card_id, fields, expected: CardRevision) -> Card:
        """Write *fields* to a card unless it changed since *expected* was read.

        Trello has no conditional PUT, so the current revision is fetched and
        compared first. Raises RemoteConflictError on mismatch or when the
        server answers 409/412.
        """
        unknown = set(fields) - _WRITABLE_CARD_FIELDS
        if unknown:
            raise CliError(f"[ERROR] Cannot write card field(s): {', '.join(sorted(unknown))}")
        current = self.read_card(card_id)
        if current.fingerprint() != expected.fingerprint():
            raise RemoteConflictError(card_id)
        try:
            data = self._request(f"cards/{card_id}", data=dict(fields), method="PUT")
        except RemoteConflictError as e:
            raise RemoteConflictError(card_id, str(e)) from e
        return Card.from_api(_expect_object(data, "card update"))

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------

    def create_board(self, name) -> Board:
        data = self._request("boards", data={"name": name}, method="POST")
        return Board.from_api(_expect_object(data, "board create"))

    def create_list(self, board_id, name) -> TrelloList:
        data = self._request("lists", data={"name": name, "idBoard": board_id}, method="POST")
        return TrelloList.from_api(_expect_object(data, "list create"))

    def create_card(self, list_id, name, desc="") -> Card:
        payload = {"name": name, "desc": desc or "", "idList": list_id}
        data = self._request("cards", data=payload, method="POST")
        return Card.from_api(_expect_object(data, "card create"))

    def set_closed(self, kind, entity_id, closed=True):
        """Close (archive) or reopen a board, list, or card. Returns the raw object."""
        path = _CLOSABLE_PATHS.get(kind)
        if path is None:
            raise CliError(f"[ERROR] Cannot close a {kind}.")
        data = self._request(f"{path}/{entity_id}", data={"closed": closed}, method="PUT")
        return _expect_object(data, f"{kind} update")

    def apply_label(self, card_id, label_id):
        self._request(f"cards/{card_id}/idLabels", data={"value": label_id}, method="POST")

    def remove_label(self, card_id, label_id):
        self._request(f"cards/{card_id}/idLabels/{label_id}", method="DELETE")

    def attach_file(self, card_id, path) -> Attachment:
        if not os.path.isfile(path):
            raise CliError(f"[ERROR] File not found: {path}")
        with open(path, "rb") as f:
            content = f.read()
        filename = os.path.basename(path)
        body = encode_multipart({"name": filename}, "file", filename, content)
        data = self._request(f"cards/{card_id}/attachments", data=body, method="POST")
        return Attachment.from_api(_expect_object(data, "attachment"))
