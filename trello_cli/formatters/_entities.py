"""Text renderers for boards, lists, cards, and their satellites."""

from trello_cli.formatters._colors import Colors, label_color, paint
from trello_cli.formatters._table import _sanitize_str, _table
from trello_cli.models import header, title


def _name(entity):
    name = _sanitize_str(entity.get("name") or "")
    if entity.get("closed"):
        name = f"{name} (closed)"
    return name


def format_label(label):
    text = f"[{_sanitize_str(label.get('name') or label.get('color') or '?')}]"
    return paint(text, label_color(label.get("color")))


def format_card_line(card):
    """One ``* name [...] [label]`` line for a card inside a list."""
    extras = []
    if card.get("desc"):
        extras.append(paint("[...]", Colors.dim))
    for label in card.get("labels") or []:
        extras.append(format_label(label))
    line = f"* {_name(card)} {' '.join(extras)}".rstrip()
    return paint(line, Colors.dim) if card.get("closed") else line


def format_list(trello_list):
    lines = [paint(header(_name(trello_list), "-"), Colors.bold)]
    for card in trello_list.get("cards") or []:
        lines.append(format_card_line(card))
    return "\n".join(lines)


def format_board(board):
    lines = [paint(title(_name(board)), Colors.bold)]
    for trello_list in board.get("lists") or []:
        lines.append("")
        lines.append(format_list(trello_list))
    return "\n".join(lines)


def format_card(card):
    text = "\n".join([header(_name(card), "="), _sanitize_str(card.get("desc") or "")])
    labels = card.get("labels") or []
    if labels:
        text = text.rstrip("\n") + "\n\n" + " ".join(format_label(lb) for lb in labels)
    return text.rstrip("\n")


def format_matches(result):
    """List every candidate matched by an ambiguous pattern."""
    matches = result.get("matches") or []
    kind = result.get("entity_kind", "item")
    lines = [f"{len(matches)} {kind}s match pattern '{result.get('pattern', '')}':"]
    for m in matches:
        lines.append(f"  - {_name(m)} {paint('(' + m.get('id', '') + ')', Colors.dim)}")
    return "\n".join(lines)


def format_show(result):
    """Render the result of TrelloClient.show() by its kind."""
    kind = result.get("kind")
    if kind == "matches":
        return format_matches(result)
    if kind == "board":
        return format_board(result["board"])
    if kind == "lists":
        return "\n\n".join(format_list(lst) for lst in result.get("lists") or [])
    if kind == "card":
        return format_card(result["card"])
    return ""


_BOARD_COLUMNS = [
    ("Name", 36, "name"),
    ("Closed", 6, "closed"),
    ("ID", 24, "id"),
    ("URL", 0, "url"),
]


def format_boards_table(boards):
    if not boards:
        return "No boards found."
    closed = sum(1 for b in boards if b.get("closed"))
    footer = f"Total: {len(boards)} boards"
    if closed:
        footer += f" ({closed} closed)"
    return _table(_BOARD_COLUMNS, boards, footer)


def format_attachments(attachments):
    if not attachments:
        return "No attachments."
    lines = []
    for a in attachments:
        lines.append(header(_sanitize_str(a.get("name") or ""), "-"))
        lines.append(a.get("url", ""))
        lines.append("")
    return "\n".join(lines).rstrip("\n")


def format_member(member):
    full_name = member.get("full_name") or ""
    suffix = f" ({_sanitize_str(full_name)})" if full_name else ""
    username = paint(_sanitize_str(member.get("username", "")), Colors.bold)
    return f"{username}{suffix}\nID: {member.get('id', '')}"


def format_url(result):
    return result.get("url", "")
