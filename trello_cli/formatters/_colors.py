"""ANSI color codes for terminal output."""

from trello_cli import config


class Colors:
    reset = "\033[0m"
    bold = "\033[1m"
    dim = "\033[2m"
    red = "\033[31m"
    green = "\033[32m"
    yellow = "\033[33m"
    blue = "\033[34m"
    magenta = "\033[35m"
    cyan = "\033[36m"


# Trello label colors mapped onto the 8-color palette.
LABEL_COLORS = {
    "green": Colors.green,
    "lime": Colors.green,
    "yellow": Colors.yellow,
    "orange": Colors.yellow,
    "red": Colors.red,
    "purple": Colors.magenta,
    "pink": Colors.magenta,
    "blue": Colors.blue,
    "sky": Colors.cyan,
    "black": Colors.dim,
}


def _wrap(text, styles, enabled):
    if not text or not styles or not enabled:
        return text
    return "".join(styles) + text + Colors.reset


def paint(text, *styles):
    """Wrap *text* in the given styles when color output is enabled."""
    return _wrap(text, styles, config.COLOR_ENABLED)


def paint_err(text, *styles):
    """Like paint, for text written to stderr."""
    return _wrap(text, styles, config.STDERR_COLOR_ENABLED)



def label_color(color_name):
    return LABEL_COLORS.get((color_name or "").lower(), Colors.bold)
