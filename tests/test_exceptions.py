"""Tests for the exception hierarchy, tags, and re-exports."""

from trello_cli.exceptions import (
    AmbiguousError,
    CardParseError,
    CliError,
    ConflictExhaustedError,
    HTTPError,
    NotFoundError,
    RemoteConflictError,
    RemoteError,
    SetupError,
)
from trello_cli.models import Board


class TestExceptionHierarchy:
    def test_setup_error_is_cli_error(self):
        assert issubclass(SetupError, CliError)

    def test_http_error_not_cli_error(self):
        assert not issubclass(HTTPError, CliError)

    def test_exit_codes(self):
        assert CliError.exit_code == 1
        assert SetupError.exit_code == 2
        assert NotFoundError.exit_code == 1

    def test_conflict_is_remote_error(self):
        assert issubclass(RemoteConflictError, RemoteError)


class TestMessages:
    def test_not_found(self):
        err = NotFoundError("Sprnt", "board")
        assert str(err) == "[NOT_FOUND] No board matches pattern 'Sprnt'."
        assert err.kind == "not_found"

    def test_ambiguous_lists_every_match(self):
        matches = [Board(id="b1", name="Sprint 1"), Board(id="b2", name="Sprint 2")]
        err = AmbiguousError("Sprint", "board", matches)
        text = str(err)
        assert text.startswith("[AMBIGUOUS] 2 boards match pattern 'Sprint':")
        assert "  - Sprint 1 (b1)" in text
        assert "  - Sprint 2 (b2)" in text
        assert "--first" in text
        assert err.matches == matches

    def test_conflict_exhausted(self):
        err = ConflictExhaustedError("c1", 3)
        assert str(err).startswith("[CONFLICT] Card c1")
        assert err.attempts == 3

    def test_remote_error_category(self):
        err = RemoteError("boom", category="network")
        assert str(err) == "[REMOTE_ERROR:network] boom"
        assert err.status is None

    def test_remote_conflict_defaults(self):
        err = RemoteConflictError("c1")
        assert err.category == "conflict"
        assert err.status == 409
        assert "c1" in str(err)

    def test_card_parse_error(self):
        assert str(CardParseError("bad")) == "[ERROR] bad"


class TestReExports:
    def test_config_re_exports_cli_error(self):
        from trello_cli.config import CliError as ConfigCliError

        assert ConfigCliError is CliError

    def test_package_re_exports(self):
        import trello_cli

        assert trello_cli.SetupError is SetupError
        assert trello_cli.AmbiguousError is AmbiguousError
