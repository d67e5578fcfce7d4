"""Tests for client.py: TrelloClient over an in-memory remote."""

import dataclasses
from unittest.mock import patch

import pytest

from trello_cli.client import TrelloClient
from trello_cli.exceptions import (
    AmbiguousError,
    CliError,
    NotFoundError,
    RemoteConflictError,
)
from trello_cli.matching import MatchOptions
from trello_cli.models import (
    Attachment,
    Board,
    Card,
    CardContents,
    CardRevision,
    Label,
    Member,
    TrelloList,
)

_FRONTEND = Label("lb1", "frontend", "green")
_BACKEND = Label("lb2", "backend", "blue")


class FakeRemote:
    """In-memory TrelloRemote with a product board and two sprint boards."""

    def __init__(self):
        self.boards = [
            Board("b1", "Product Roadmap", url="https://trello.com/b/b1"),
            Board("b2", "Sprint 1", url="https://trello.com/b/b2"),
            Board("b3", "Sprint 2", url="https://trello.com/b/b3"),
            Board("b4", "Archive", closed=True, url="https://trello.com/b/b4"),
        ]
        self.lists = {
            "b1": [
                TrelloList("L1", "Backlog"),
                TrelloList("L2", "In Progress"),
                TrelloList("L3", "Done"),
            ],
            "b2": [TrelloList("L4", "Backlog")],
        }
        self.cards = {
            "L1": [
                Card("c1", "Login page", "OAuth flow", labels=(_FRONTEND,), url="https://trello.com/c/c1",
                     date_last_activity="v1"),
                Card("c2", "Login API", url="https://trello.com/c/c2", date_last_activity="v1"),
                Card("c3", "Old idea", closed=True, date_last_activity="v1"),
            ],
            "L2": [Card("c4", "Payments", date_last_activity="v1")],
        }
        self.labels = {"b1": [_FRONTEND, _BACKEND]}
        self.calls = []
        self.conflicts = 0

    # Reads

    def me(self):
        return Member("m1", "ada", "Ada Lovelace")

    def list_boards(self, include_closed=False):
        return [b for b in self.boards if include_closed or not b.closed]

    def list_lists(self, board_id, cards=False, include_closed=False):
        result = []
        for lst in self.lists.get(board_id, []):
            if lst.closed and not include_closed:
                continue
            if cards:
                lst = dataclasses.replace(lst, cards=tuple(self.list_cards(lst.id, include_closed)))
            result.append(lst)
        return result

    def list_cards(self, list_id, include_closed=False):
        return [c for c in self.cards.get(list_id, []) if include_closed or not c.closed]

    def list_labels(self, board_id):
        return list(self.labels.get(board_id, []))

    def list_attachments(self, card_id):
        return [Attachment("a1", "mockup.pdf", "https://trello.com/a/a1")]

    def _locate(self, card_id):
        for list_id, cards in self.cards.items():
            for i, card in enumerate(cards):
                if card.id == card_id:
                    return list_id, i
        raise AssertionError(f"unknown card {card_id}")

    def read_card(self, card_id):
        list_id, i = self._locate(card_id)
        return CardRevision.from_card(self.cards[list_id][i])

    def write_card(self, card_id, fields, expected):
        self.calls.append(("write_card", card_id, dict(fields)))
        list_id, i = self._locate(card_id)
        if self.conflicts:
            self.conflicts -= 1
            raise RemoteConflictError(card_id)
        if self.read_card(card_id).fingerprint() != expected.fingerprint():
            raise RemoteConflictError(card_id)
        card = dataclasses.replace(self.cards[list_id][i], date_last_activity="v2", **fields)
        self.cards[list_id][i] = card
        return card

    # Mutations

    def create_board(self, name):
        self.calls.append(("create_board", name))
        return Board("b9", name, url="https://trello.com/b/b9")

    def create_list(self, board_id, name):
        self.calls.append(("create_list", board_id, name))
        return TrelloList("L9", name)

    def create_card(self, list_id, name, desc=""):
        self.calls.append(("create_card", list_id, name, desc))
        return Card("c9", name, desc, url="https://trello.com/c/c9")

    def set_closed(self, kind, entity_id, closed=True):
        self.calls.append(("set_closed", kind, entity_id, closed))
        return {"id": entity_id, "closed": closed}

    def apply_label(self, card_id, label_id):
        self.calls.append(("apply_label", card_id, label_id))

    def remove_label(self, card_id, label_id):
        self.calls.append(("remove_label", card_id, label_id))

    def attach_file(self, card_id, path):
        self.calls.append(("attach_file", card_id, path))
        return Attachment("a2", "notes.txt", "https://trello.com/a/a2")


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def client(remote):
    return TrelloClient(validate_token=False, remote=remote)


class TestInit:
    @patch("trello_cli.client._check_token")
    def test_validates_token_by_default(self, mock_check):
        TrelloClient(remote=FakeRemote())
        mock_check.assert_called_once()

    def test_invalid_policy(self):
        with pytest.raises(CliError, match="ambiguity policy"):
            TrelloClient(validate_token=False, remote=FakeRemote(), ambiguous_policy="random")


class TestShow:
    def test_board_with_lists_and_open_cards(self, client):
        result = client.show("roadmap")
        assert result["kind"] == "board"
        board = result["board"]
        assert board["name"] == "Product Roadmap"
        assert [lst["name"] for lst in board["lists"]] == ["Backlog", "In Progress", "Done"]
        assert [c["id"] for c in board["lists"][0]["cards"]] == ["c1", "c2"]

    def test_closed_items_included_on_request(self, client):
        result = client.show("roadmap", include_closed=True)
        assert [c["id"] for c in result["board"]["lists"][0]["cards"]] == ["c1", "c2", "c3"]

    def test_ambiguous_board_lists_matches(self, client):
        result = client.show("sprint")
        assert result["kind"] == "matches"
        assert result["entity_kind"] == "board"
        assert [m["id"] for m in result["matches"]] == ["b2", "b3"]

    def test_ambiguous_board_first_policy(self, remote):
        client = TrelloClient(validate_token=False, remote=remote, ambiguous_policy="first")
        assert client.show("sprint")["board"]["id"] == "b2"

    def test_ambiguous_board_with_list_pattern_raises(self, client):
        with pytest.raises(AmbiguousError):
            client.show("sprint", "backlog")

    def test_every_list(self, client):
        result = client.show("roadmap", "*")
        assert result["kind"] == "lists"
        assert len(result["lists"]) == 3
        assert result["board"]["id"] == "b1"

    def test_every_list_in_regex_mode(self, remote):
        client = TrelloClient(
            validate_token=False, remote=remote, match_options=MatchOptions(mode="regex")
        )
        result = client.show("roadmap", "*")
        assert [lst["name"] for lst in result["lists"]] == ["Backlog", "In Progress", "Done"]

    def test_list_pattern_shows_all_matching_lists(self, client):
        result = client.show("roadmap", "o")
        assert [lst["name"] for lst in result["lists"]] == ["Backlog", "In Progress", "Done"]

    def test_label_filter(self, client):
        result = client.show("roadmap", "backlog", label="front")
        assert [c["id"] for c in result["lists"][0]["cards"]] == ["c1"]

    def test_board_label_filter(self, client):
        result = client.show("roadmap", label="^frontend$")
        assert [len(lst["cards"]) for lst in result["board"]["lists"]] == [1, 0, 0]

    def test_single_card(self, client):
        result = client.show("roadmap", "backlog", "login page")
        assert result == {"kind": "card", "card": client.remote.cards["L1"][0].to_dict()}

    def test_ambiguous_card_lists_matches(self, client):
        result = client.show("roadmap", "backlog", "login")
        assert result["kind"] == "matches"
        assert result["entity_kind"] == "card"
        assert len(result["matches"]) == 2

    def test_card_needs_list(self, client):
        with pytest.raises(CliError, match="needs a list"):
            client.show("roadmap", None, "login")

    def test_board_not_found(self, client):
        with pytest.raises(NotFoundError):
            client.show("nothing like this")

    def test_closed_board_hidden(self, client):
        with pytest.raises(NotFoundError):
            client.show("archive")

    def test_case_sensitive_options(self, remote):
        client = TrelloClient(
            validate_token=False, remote=remote, match_options=MatchOptions(case_sensitive=True)
        )
        with pytest.raises(NotFoundError):
            client.show("roadmap")


class TestReads:
    def test_me(self, client):
        assert client.me() == {"id": "m1", "username": "ada", "full_name": "Ada Lovelace"}

    def test_list_boards(self, client):
        assert [b["id"] for b in client.list_boards()] == ["b1", "b2", "b3"]
        assert len(client.list_boards(include_closed=True)) == 4

    def test_url_board(self, client):
        assert client.url("roadmap")["url"] == "https://trello.com/b/b1"

    def test_url_list_uses_board(self, client):
        result = client.url("roadmap", "done")
        assert result["kind"] == "list"
        assert result["url"] == "https://trello.com/b/b1"

    def test_url_card(self, client):
        assert client.url("roadmap", "backlog", "login api")["url"] == "https://trello.com/c/c2"

    def test_url_ambiguous_card_raises(self, client):
        with pytest.raises(AmbiguousError):
            client.url("roadmap", "backlog", "login")

    def test_list_attachments(self, client):
        result = client.list_attachments("roadmap", "backlog", "login page")
        assert result["card_id"] == "c1"
        assert result["attachments"][0]["name"] == "mockup.pdf"


class TestCreate:
    def test_board(self, client, remote):
        result = client.create("New Board")
        assert result["kind"] == "board"
        assert remote.calls == [("create_board", "New Board")]

    def test_list(self, client, remote):
        result = client.create("Later", board="roadmap")
        assert result == {"ok": True, "kind": "list", "id": "L9", "name": "Later", "board_id": "b1"}

    def test_card(self, client, remote):
        result = client.create(" Signup ", board="roadmap", list_name="backlog", desc="body")
        assert result["kind"] == "card"
        assert remote.calls == [("create_card", "L1", "Signup", "body")]

    def test_empty_name(self, client):
        with pytest.raises(CliError, match="Name cannot be empty"):
            client.create("  ")

    def test_list_without_board(self, client):
        with pytest.raises(CliError, match="needs a board"):
            client.create("x", list_name="backlog")


class TestEditCard:
    def test_rename(self, client, remote):
        result = client.edit_card("roadmap", "backlog", "login page", name="Sign-in page")
        assert result["changed"] is True
        assert result["fields"] == {"name": "Sign-in page"}
        assert remote.cards["L1"][0].name == "Sign-in page"

    def test_unchanged(self, client, remote):
        result = client.edit_card("roadmap", "backlog", "login page", desc="OAuth flow")
        assert result["changed"] is False
        assert remote.calls == []

    def test_editor_sees_fresh_contents_each_attempt(self, client, remote):
        remote.conflicts = 1
        seen = []

        def editor(contents):
            seen.append(contents)
            return CardContents(contents.name, contents.desc + "\nMore")

        result = client.edit_card("roadmap", "backlog", "login page", editor=editor)
        assert result["attempts"] == 2
        assert seen == [CardContents("Login page", "OAuth flow")] * 2
        assert remote.cards["L1"][0].desc == "OAuth flow\nMore"

    def test_nothing_to_edit(self, client):
        with pytest.raises(CliError, match="Nothing to edit"):
            client.edit_card("roadmap", "backlog", "login page")

    def test_blank_name(self, client):
        with pytest.raises(CliError, match="cannot be empty"):
            client.edit_card("roadmap", "backlog", "login page", name=" ")


class TestCloseReopen:
    def test_close_card_goes_through_updater(self, client, remote):
        result = client.close("roadmap", "backlog", "login api")
        assert result == {
            "ok": True,
            "action": "closed",
            "kind": "card",
            "id": "c2",
            "name": "Login API",
            "changed": True,
        }
        assert remote.calls == [("write_card", "c2", {"closed": True})]

    def test_close_list(self, client, remote):
        result = client.close("roadmap", "done")
        assert result["kind"] == "list"
        assert remote.calls == [("set_closed", "list", "L3", True)]

    def test_close_board(self, client, remote):
        assert client.close("roadmap")["id"] == "b1"
        assert remote.calls == [("set_closed", "board", "b1", True)]

    def test_reopen_matches_closed_card(self, client, remote):
        result = client.reopen("roadmap", "backlog", "old idea")
        assert result["id"] == "c3"
        assert result["action"] == "reopened"
        assert remote.cards["L1"][2].closed is False

    def test_reopen_closed_board(self, client, remote):
        result = client.reopen("archive")
        assert result["changed"] is True
        assert remote.calls == [("set_closed", "board", "b4", False)]


class TestLabel:
    def test_apply_skips_present(self, client, remote):
        result = client.label("roadmap", "backlog", "login page", ["back", "front"])
        assert result["applied"] == ["backend"]
        assert result["skipped"] == ["frontend"]
        assert remote.calls == [("apply_label", "c1", "lb2")]

    def test_remove(self, client, remote):
        result = client.label("roadmap", "backlog", "login page", ["frontend", "backend"],
                              remove=True)
        assert result["removed"] == ["frontend"]
        assert result["skipped"] == ["backend"]
        assert remote.calls == [("remove_label", "c1", "lb1")]

    def test_unknown_label(self, client):
        with pytest.raises(NotFoundError):
            client.label("roadmap", "backlog", "login page", ["urgent"])

    def test_no_labels(self, client):
        with pytest.raises(CliError):
            client.label("roadmap", "backlog", "login page", [])


class TestAttach:
    def test_attach(self, client, remote):
        result = client.attach("roadmap", "backlog", "login page", "/tmp/notes.txt")
        assert result["attachment"]["id"] == "a2"
        assert remote.calls == [("attach_file", "c1", "/tmp/notes.txt")]
