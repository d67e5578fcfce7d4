"""Output formatting package for trello-cli.

Re-exports all public names so consumers can do:
    from trello_cli.formatters import format_show
"""

from trello_cli.formatters._colors import (
    LABEL_COLORS,
    Colors,
    label_color,
    paint,
    paint_err,
)
from trello_cli.formatters._core import mutation_response, output, pretty_print, warn
from trello_cli.formatters._entities import (
    format_attachments,
    format_board,
    format_boards_table,
    format_card,
    format_card_line,
    format_label,
    format_list,
    format_matches,
    format_member,
    format_show,
    format_url,
)
from trello_cli.formatters._table import _CONTROL_RE, _sanitize_str, _table, _trunc

__all__ = [
    "LABEL_COLORS",
    "Colors",
    "_CONTROL_RE",
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_attachments",
    "format_board",
    "format_boards_table",
    "format_card",
    "format_card_line",
    "format_label",
    "format_list",
    "format_matches",
    "format_member",
    "format_show",
    "format_url",
    "label_color",
    "mutation_response",
    "output",
    "paint",
    "paint_err",
    "pretty_print",
    "warn",
]
