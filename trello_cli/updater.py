"""
Conflict-safe read-modify-write of Trello cards.

Each cycle reads the card, applies a mutation to the fresh revision and
writes the result back. If the card changed remotely in between, the write
is rejected and the cycle starts again from the read, up to ``max_retries``
write attempts in total. Other remote errors abort immediately.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from trello_cli import config
from trello_cli.exceptions import CliError, ConflictExhaustedError, RemoteConflictError
from trello_cli.models import Card, CardRevision


class UpdateState(enum.Enum):
    READ = "read"
    APPLY = "apply"
    WRITE = "write"
    CONFLICT = "conflict"
    SUCCESS = "success"
    FATAL = "fatal"


@dataclass
class UpdateOutcome:
    card_id: str
    attempts: int = 0
    revision: CardRevision | None = None
    card: Card | None = None
    fields: dict[str, Any] = field(default_factory=dict)
    changed: bool = False
    states: list[UpdateState] = field(default_factory=list)

    def to_dict(self):
        return {
            "ok": True,
            "card_id": self.card_id,
            "attempts": self.attempts,
            "changed": self.changed,
            "fields": dict(self.fields),
            "name": self.card.name if self.card else (self.revision.name if self.revision else None),
        }


Mutation = Callable[[CardRevision], dict]


def update_card(
    remote,
    card_id: str,
    mutation: Mutation,
    max_retries: int | None = None,
    on_conflict: Callable[[int, int], None] | None = None,
) -> UpdateOutcome:
    """Apply *mutation* to a card, retrying the whole cycle on conflicts.

    Args:
        remote: Object with ``read_card(card_id)`` and
            ``write_card(card_id, fields, expected)``.
        card_id: Card to update.
        mutation: Function of the current revision returning the fields to
            write. Returning an empty dict leaves the card untouched.
        max_retries: Total number of write attempts before giving up.
        on_conflict: Called with (attempt, max_retries) after each conflict.

    Returns:
        UpdateOutcome describing the successful write.

    Raises:
        ConflictExhaustedError: every attempt conflicted.
    """
    if max_retries is None:
        max_retries = config.UPDATE_MAX_RETRIES
    if max_retries < 1:
        raise CliError("[ERROR] max_retries must be at least 1.")

    outcome = UpdateOutcome(card_id=card_id)
    state = UpdateState.READ
    revision = None
    fields: dict[str, Any] = {}

    while True:
        outcome.states.append(state)

        if state is UpdateState.READ:
            revision = remote.read_card(card_id)
            outcome.revision = revision
            state = UpdateState.APPLY

        elif state is UpdateState.APPLY:
            fields = revision.changed_fields(mutation(revision) or {})
            outcome.fields = fields
            if not fields:
                state = UpdateState.SUCCESS
            else:
                state = UpdateState.WRITE

        elif state is UpdateState.WRITE:
            outcome.attempts += 1
            try:
                outcome.card = remote.write_card(card_id, fields, expected=revision)
            except RemoteConflictError:
                state = UpdateState.CONFLICT
            except Exception:
                outcome.states.append(UpdateState.FATAL)
                raise
            else:
                outcome.changed = True
                outcome.revision = CardRevision.from_card(outcome.card)
                state = UpdateState.SUCCESS

        elif state is UpdateState.CONFLICT:
            if on_conflict is not None:
                on_conflict(outcome.attempts, max_retries)
            if outcome.attempts >= max_retries:
                outcome.states.append(UpdateState.FATAL)
                raise ConflictExhaustedError(card_id, outcome.attempts)
            state = UpdateState.READ

        else:
            return outcome
