"""Tests for cli.py: global flags, argparse, dispatch."""

import json
from unittest.mock import patch

import pytest

from trello_cli import config
from trello_cli.cli import _emit_cli_error, _extract_global_flags, build_parser, main
from trello_cli.exceptions import CliError, NotFoundError, SetupError


class TestExtractGlobalFlags:
    def test_no_flags(self):
        fmt, flags, remaining = _extract_global_flags(["boards"])
        assert fmt == "text"
        assert not any(flags.values())
        assert remaining == ["boards"]

    def test_flags_anywhere(self):
        fmt, flags, remaining = _extract_global_flags(
            ["show", "--format", "json", "ops", "--regex", "-q", "--first"]
        )
        assert fmt == "json"
        assert flags["regex"] and flags["quiet"] and flags["first"]
        assert not flags["case_sensitive"]
        assert remaining == ["show", "ops"]

    def test_invalid_format(self):
        with pytest.raises(CliError, match="Invalid format"):
            _extract_global_flags(["--format", "csv", "boards"])

    def test_quiet_and_verbose_conflict(self):
        with pytest.raises(CliError, match="mutually exclusive"):
            _extract_global_flags(["-q", "-v", "boards"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _extract_global_flags(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == f"trello-cli {config.VERSION}"


class TestParser:
    def test_show_path_depths(self):
        ns = build_parser().parse_args(["show", "ops"])
        assert (ns.board, ns.list, ns.card) == ("ops", None, None)
        ns = build_parser().parse_args(["show", "ops", "todo", "bug", "--label", "ui"])
        assert (ns.board, ns.list, ns.card, ns.label) == ("ops", "todo", "bug", "ui")

    def test_create_without_positionals(self):
        ns = build_parser().parse_args(["create", "-n", "Board"])
        assert (ns.board, ns.list, ns.card, ns.name) == (None, None, None, "Board")

    def test_create_rejects_card_pattern(self):
        with pytest.raises(CliError):
            build_parser().parse_args(["create", "a", "b", "c"])

    def test_edit_requires_card(self):
        with pytest.raises(CliError):
            build_parser().parse_args(["edit", "ops", "todo"])

    def test_max_retries_positive(self):
        with pytest.raises(CliError):
            build_parser().parse_args(["edit", "a", "b", "c", "--max-retries", "0"])
        ns = build_parser().parse_args(["close", "a", "--max-retries", "2"])
        assert ns.max_retries == 2

    def test_label(self):
        ns = build_parser().parse_args(["label", "a", "b", "c", "bug", "ui", "--remove"])
        assert ns.labels == ["bug", "ui"]
        assert ns.remove is True

    def test_unknown_command(self):
        with pytest.raises(CliError):
            build_parser().parse_args(["frobnicate"])


class TestEmitCliError:
    def test_text(self, capsys):
        _emit_cli_error(CliError("[ERROR] bad"), "text")
        assert capsys.readouterr().err == "[ERROR] bad\n"

    def test_json(self, capsys):
        _emit_cli_error(NotFoundError("x", "board"), "json")
        payload = json.loads(capsys.readouterr().err)
        assert payload["ok"] is False
        assert payload["error"]["type"] == "not_found"
        assert payload["error"]["exit_code"] == 1

    def test_text_colored_when_stderr_color_enabled(self, capsys, monkeypatch):
        monkeypatch.setattr(config, "STDERR_COLOR_ENABLED", True)
        _emit_cli_error(CliError("[ERROR] bad"), "text")
        assert capsys.readouterr().err == "\033[31m[ERROR] bad\033[0m\n"


class TestErrorColor:
    def _run(self, argv, monkeypatch, stderr_tty):
        monkeypatch.setattr(config, "COLOR_ENABLED", True)
        monkeypatch.setattr("sys.stderr.isatty", lambda: stderr_tty)
        monkeypatch.setattr("sys.stdout.isatty", lambda: not stderr_tty)
        with pytest.raises(SystemExit):
            main(argv)

    def test_no_color_applies_to_flag_parsing_errors(self, capsys, monkeypatch):
        self._run(["boards", "--format", "csv", "--no-color"], monkeypatch, stderr_tty=True)
        err = capsys.readouterr().err
        assert "Invalid format" in err
        assert "\033" not in err

    def test_follows_stderr_terminal(self, capsys, monkeypatch):
        self._run(["boards", "--format", "csv"], monkeypatch, stderr_tty=True)
        assert capsys.readouterr().err.startswith("\033[31m")

    def test_plain_when_stderr_redirected(self, capsys, monkeypatch):
        self._run(["boards", "--format", "csv"], monkeypatch, stderr_tty=False)
        assert "\033" not in capsys.readouterr().err


class TestMain:
    def test_no_args_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "Usage: trello-cli" in capsys.readouterr().out

    @patch("trello_cli.cli._check_token")
    @patch("trello_cli.cli.cmd_boards")
    def test_dispatches_with_flags(self, mock_cmd, mock_check):
        main(["boards", "--closed", "--first", "--format", "json"])
        mock_check.assert_called_once()
        ns = mock_cmd.call_args.args[0]
        assert ns.closed is True
        assert ns.first is True
        assert ns.regex is False
        assert ns.format == "json"

    @patch("trello_cli.cli._check_token")
    @patch("trello_cli.commands.TrelloClient")
    def test_end_to_end_boards(self, MockClient, mock_check, capsys):
        MockClient.return_value.list_boards.return_value = [
            {"id": "b1", "name": "Ops", "closed": False, "url": "https://x"}
        ]
        main(["boards", "--format", "json"])
        assert json.loads(capsys.readouterr().out)[0]["id"] == "b1"
        MockClient.return_value.list_boards.assert_called_once_with(include_closed=False)

    @patch("trello_cli.cli._check_token")
    @patch("trello_cli.commands.TrelloClient")
    def test_cli_error_exit_code(self, MockClient, mock_check, capsys):
        MockClient.return_value.show.side_effect = NotFoundError("zzz", "board")
        with pytest.raises(SystemExit) as exc_info:
            main(["show", "zzz"])
        assert exc_info.value.code == 1
        assert "[NOT_FOUND]" in capsys.readouterr().err

    @patch("trello_cli.cli._check_token", side_effect=SetupError("[SETUP_NEEDED] x"))
    def test_setup_error_exit_code(self, mock_check):
        with pytest.raises(SystemExit) as exc_info:
            main(["boards"])
        assert exc_info.value.code == 2

    @patch("trello_cli.cli._check_token")
    def test_version_command_skips_token(self, mock_check, capsys):
        with pytest.raises(SystemExit):
            main(["version"])
        mock_check.assert_not_called()

    @patch("trello_cli.cli._check_token")
    @patch("trello_cli.commands.TrelloClient")
    def test_verbose_enables_http_log(self, MockClient, mock_check):
        MockClient.return_value.list_boards.return_value = []
        main(["boards", "-v"])
        assert config.HTTP_LOG_ENABLED is True
