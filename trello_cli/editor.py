"""
Edit card contents in the user's $EDITOR.

The buffer is ``name``, a line of '=' and the description. A buffer that
cannot be parsed back offers the user another try instead of losing the
edit.
"""

import os
import shlex
import subprocess
import sys
import tempfile

from trello_cli.exceptions import CardParseError, CliError
from trello_cli.models import CardContents

DEFAULT_EDITOR = "vi"


def _editor_command():
    return os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR


def open_in_editor(text, suffix=".md"):
    """Write *text* to a temp file, open the editor on it, return the saved text."""
    fd, path = tempfile.mkstemp(prefix="trello-card-", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        cmd = shlex.split(_editor_command()) + [path]
        try:
            completed = subprocess.run(cmd, check=False)
        except FileNotFoundError as e:
            raise CliError(f"[ERROR] Editor not found: {cmd[0]}. Set $EDITOR.") from e
        if completed.returncode != 0:
            raise CliError(f"[ERROR] Editor exited with status {completed.returncode}.")
        with open(path, encoding="utf-8") as f:
            return f.read()
    finally:
        try:
            os.remove(path)
        except OSError:
            pass


def confirm(prompt, default=True):
    """Ask a yes/no question on the terminal."""
    suffix = " [Y/n] " if default else " [y/N] "
    try:
        answer = input(prompt + suffix).strip().lower()
    except EOFError:
        return False
    if not answer:
        return default
    return answer in ("y", "yes")


def edit_contents(initial: CardContents, edit=open_in_editor, ask=confirm) -> CardContents:
    """Let the user edit *initial* until the buffer parses.

    Raises:
        CardParseError: the buffer was invalid and the user declined a retry.
    """
    buffer = initial.render()
    while True:
        buffer = edit(buffer)
        try:
            return CardContents.parse(buffer)
        except CardParseError as e:
            print(str(e), file=sys.stderr)
            if not ask("Edit the card again?"):
                raise
