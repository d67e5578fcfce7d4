"""
Typed models for Trello entities, card revisions, and editor buffers.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

from trello_cli.exceptions import CardParseError, CliError

NAME_DELIMITER = "="


@dataclass(frozen=True)
class Label:
    id: str
    name: str
    color: str | None = None

    @classmethod
    def from_api(cls, data):
        return cls(id=data.get("id", ""), name=data.get("name") or "", color=data.get("color"))


@dataclass(frozen=True)
class Card:
    id: str
    name: str
    desc: str = ""
    closed: bool = False
    url: str = ""
    labels: tuple[Label, ...] = ()
    id_list: str | None = None
    id_board: str | None = None
    date_last_activity: str | None = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            desc=data.get("desc") or "",
            closed=bool(data.get("closed", False)),
            url=data.get("url") or "",
            labels=tuple(Label.from_api(lb) for lb in data.get("labels") or []),
            id_list=data.get("idList"),
            id_board=data.get("idBoard"),
            date_last_activity=data.get("dateLastActivity"),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class TrelloList:
    id: str
    name: str
    closed: bool = False
    cards: tuple[Card, ...] | None = None

    @classmethod
    def from_api(cls, data):
        cards = data.get("cards")
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            closed=bool(data.get("closed", False)),
            cards=None if cards is None else tuple(Card.from_api(c) for c in cards),
        )

    def filter_labels(self, label_pattern):
        """Return a copy keeping only cards with a label matching *label_pattern*.

        The pattern is a case-insensitive regular expression.
        """
        try:
            regex = re.compile(label_pattern, re.IGNORECASE)
        except re.error as e:
            raise CliError(f"[ERROR] Invalid label filter '{label_pattern}': {e}") from None
        if self.cards is None:
            return self
        kept = tuple(c for c in self.cards if any(regex.search(lb.name) for lb in c.labels))
        return TrelloList(id=self.id, name=self.name, closed=self.closed, cards=kept)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Board:
    id: str
    name: str
    closed: bool = False
    url: str = ""
    lists: tuple[TrelloList, ...] | None = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=data.get("id", ""),
            name=data.get("name") or "",
            closed=bool(data.get("closed", False)),
            url=data.get("url") or "",
        )

    def with_lists(self, lists):
        return Board(id=self.id, name=self.name, closed=self.closed, url=self.url,
                     lists=tuple(lists))

    def filter_labels(self, label_pattern):
        if self.lists is None:
            return self
        return self.with_lists(lst.filter_labels(label_pattern) for lst in self.lists)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Attachment:
    id: str
    name: str
    url: str = ""

    @classmethod
    def from_api(cls, data):
        return cls(id=data.get("id", ""), name=data.get("name") or "", url=data.get("url") or "")


@dataclass(frozen=True)
class Member:
    id: str
    username: str
    full_name: str = ""

    @classmethod
    def from_api(cls, data):
        return cls(
            id=data.get("id", ""),
            username=data.get("username") or "",
            full_name=data.get("fullName") or "",
        )


@dataclass(frozen=True)
class CardRevision:
    """Snapshot of a card's mutable fields plus the version Trello reports."""

    card_id: str
    name: str
    desc: str
    closed: bool
    version: str | None = None

    @classmethod
    def from_card(cls, card: Card) -> CardRevision:
        return cls(
            card_id=card.id,
            name=card.name,
            desc=card.desc,
            closed=card.closed,
            version=card.date_last_activity,
        )

    def fingerprint(self):
        return (self.version, self.name, self.desc, self.closed)

    def changed_fields(self, fields):
        """Return only the entries of *fields* that differ from this revision."""
        return {k: v for k, v in fields.items() if getattr(self, k, object()) != v}


@dataclass(frozen=True)
class CardContents:
    """Name and description as edited by the user."""

    name: str
    desc: str = ""

    def render(self):
        return "\n".join([header(self.name, NAME_DELIMITER), self.desc])

    @classmethod
    def parse(cls, buffer):
        """Parse an edited ``name\\n====\\ndesc`` buffer back into contents.

        Every line before the first line made only of '=' belongs to the name,
        so the underline does not have to match the name length. The rest of
        the buffer is the description.
        """
        lines = buffer.split("\n")
        name_lines = [lines.pop(0)]
        found = False
        while lines:
            line = lines.pop(0)
            stripped = line.strip()
            if stripped and set(stripped) == {NAME_DELIMITER}:
                found = True
                break
            name_lines.append(line)
        if not found:
            raise CardParseError("Unable to find name delimiter '===='")
        name = "\n".join(name_lines).strip()
        if not name:
            raise CardParseError("Card name cannot be empty")
        return cls(name=name, desc="\n".join(lines).rstrip("\n"))


@dataclass(frozen=True)
class ResolvedPath:
    """The board, list and card addressed by one command line."""

    board: Board
    trello_list: TrelloList | None = None
    card: Card | None = None

    @property
    def deepest(self):
        """Return (kind, entity) for the most specific item addressed."""
        if self.card is not None:
            return "card", self.card
        if self.trello_list is not None:
            return "list", self.trello_list
        return "board", self.board


def header(text, char):
    """Underline *text* with *char* repeated to the text width."""
    width = max((len(line) for line in text.split("\n")), default=0)
    return f"{text}\n{char * max(width, 1)}"


def title(text):
    """Frame *text* with '=' rules above and below."""
    rule = "=" * max(len(text), 1)
    return f"{rule}\n{text}\n{rule}"
