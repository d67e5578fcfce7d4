"""
trello-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
Every user-facing message starts with a bracketed tag naming its kind.
"""


class CliError(Exception):
    """Exit code 1: validation, not-found, network, parse errors."""

    exit_code = 1
    kind = "error"


class SetupError(CliError):
    """Exit code 2: invalid credentials, no config."""

    exit_code = 2
    kind = "setup_needed"


class NotFoundError(CliError):
    """A pattern matched no candidate of the searched kind."""

    kind = "not_found"

    def __init__(self, pattern, entity_kind):
        self.pattern = pattern
        self.entity_kind = entity_kind
        super().__init__(f"[NOT_FOUND] No {entity_kind} matches pattern '{pattern}'.")


class AmbiguousError(CliError):
    """A pattern matched several candidates where exactly one was needed."""

    kind = "ambiguous"

    def __init__(self, pattern, entity_kind, matches):
        self.pattern = pattern
        self.entity_kind = entity_kind
        self.matches = list(matches)
        lines = [
            f"[AMBIGUOUS] {len(self.matches)} {entity_kind}s match pattern '{pattern}':"
        ]
        for entity in self.matches:
            lines.append(f"  - {entity.name} ({entity.id})")
        lines.append("Refine the pattern or pass --first to pick the first match.")
        super().__init__("\n".join(lines))


class ConflictExhaustedError(CliError):
    """Every write attempt of a read-modify-write cycle hit a conflict."""

    kind = "conflict_exhausted"

    def __init__(self, card_id, attempts):
        self.card_id = card_id
        self.attempts = attempts
        super().__init__(
            f"[CONFLICT] Card {card_id} kept changing remotely; "
            f"gave up after {attempts} attempt(s)."
        )


class RemoteError(CliError):
    """Any Trello API failure that is not a concurrent-modification conflict."""

    kind = "remote_error"

    def __init__(self, message, category="http", status=None):
        self.category = category
        self.status = status
        super().__init__(f"[REMOTE_ERROR:{category}] {message}")


class RemoteConflictError(RemoteError):
    """The remote card changed since it was read."""

    kind = "conflict"

    def __init__(self, card_id, message=None):
        self.card_id = card_id
        super().__init__(
            message or f"Card {card_id} was modified since it was read.",
            category="conflict",
            status=409,
        )


class CardParseError(CliError):
    """An edited card buffer could not be parsed back into name/description."""

    kind = "card_parse"

    def __init__(self, message):
        super().__init__(f"[ERROR] {message}")


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
