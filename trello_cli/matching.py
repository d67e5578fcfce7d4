"""
Name-pattern resolution for boards, lists, cards, and labels.

A pattern is matched against the ``name`` of each candidate. In glob mode
(the default) a pattern without the wildcard first looks for names equal to
it and falls back to substring matches; a pattern with the wildcard must
match the whole name, the wildcard standing for any run of characters.
Regex mode searches each name with the pattern as a regular expression.
Matching folds case unless asked to be case-sensitive.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from trello_cli import config
from trello_cli.exceptions import AmbiguousError, CliError, NotFoundError


@dataclass(frozen=True)
class MatchOptions:
    case_sensitive: bool = False
    mode: str = "glob"
    wildcard: str = "*"

    @classmethod
    def from_config(cls, **overrides) -> MatchOptions:
        """Build options from configured defaults; ``None`` overrides are ignored."""
        values = {
            "case_sensitive": config.MATCH_CASE_SENSITIVE,
            "mode": config.MATCH_MODE,
            "wildcard": config.MATCH_WILDCARD,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values["mode"] not in config.VALID_MATCH_MODES:
            raise CliError(
                f"[ERROR] Invalid match mode '{values['mode']}'. "
                f"Valid: {', '.join(sorted(config.VALID_MATCH_MODES))}"
            )
        if not values["wildcard"]:
            raise CliError("[ERROR] Wildcard token cannot be empty.")
        return cls(**values)


@dataclass(frozen=True)
class MatchResult:
    pattern: str
    kind: str
    matches: tuple[Any, ...]

    def __len__(self):
        return len(self.matches)

    def __iter__(self):
        return iter(self.matches)

    @property
    def is_ambiguous(self) -> bool:
        return len(self.matches) > 1

    def one(self, policy: str | None = None):
        """Return the single match, or apply the ambiguity *policy*.

        ``"list"`` raises AmbiguousError carrying every match; ``"first"``
        picks the first candidate in remote order.
        """
        policy = policy or config.AMBIGUOUS_POLICY
        if len(self.matches) == 1 or (self.matches and policy == "first"):
            return self.matches[0]
        raise AmbiguousError(self.pattern, self.kind, self.matches)


def _fold(text: str, case_sensitive: bool) -> str:
    return text if case_sensitive else text.casefold()


def has_wildcard(pattern: str, options: MatchOptions) -> bool:
    return options.mode == "glob" and options.wildcard in pattern


def compile_glob(pattern: str, options: MatchOptions) -> re.Pattern:
    """Translate a wildcard pattern into an anchored regex over folded names."""
    wildcard = _fold(options.wildcard, options.case_sensitive)
    pieces = _fold(pattern, options.case_sensitive).split(wildcard)
    return re.compile("^" + ".*".join(re.escape(p) for p in pieces) + "$", re.DOTALL)


def _match_glob(pattern: str, candidates: Sequence[Any], options: MatchOptions) -> list:
    if has_wildcard(pattern, options):
        regex = compile_glob(pattern, options)
        return [c for c in candidates if regex.match(_fold(c.name, options.case_sensitive))]

    target = _fold(pattern, options.case_sensitive)
    exact = [c for c in candidates if _fold(c.name, options.case_sensitive) == target]
    if exact:
        return exact
    return [c for c in candidates if target in _fold(c.name, options.case_sensitive)]


def _match_regex(pattern: str, candidates: Sequence[Any], options: MatchOptions) -> list:
    flags = 0 if options.case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(pattern, flags)
    except re.error as e:
        raise CliError(f"[ERROR] Invalid regular expression '{pattern}': {e}") from None
    return [c for c in candidates if regex.search(c.name)]


def resolve(
    pattern: str,
    candidates: Iterable[Any],
    kind: str = "board",
    options: MatchOptions | None = None,
) -> MatchResult:
    """Match *pattern* against the names of *candidates*.

    Args:
        pattern: User-supplied name fragment.
        candidates: Objects exposing ``id`` and ``name``.
        kind: Entity kind searched, used in error messages.
        options: Matching options; configured defaults when omitted.

    Returns:
        MatchResult with every matching candidate, in candidate order.
        A pattern consisting of the wildcard alone matches every candidate
        in either mode.

    Raises:
        NotFoundError: when nothing matches.
    """
    if pattern is None or pattern == "":
        raise CliError(f"[ERROR] Empty {kind} pattern.")
    options = options or MatchOptions.from_config()
    pool = list(candidates)
    if pattern == options.wildcard:
        found = pool
    elif options.mode == "regex":
        found = _match_regex(pattern, pool, options)
    else:
        found = _match_glob(pattern, pool, options)
    if not found:
        raise NotFoundError(pattern, kind)
    return MatchResult(pattern=pattern, kind=kind, matches=tuple(found))


def resolve_one(pattern, candidates, kind="board", options=None, policy=None):
    """Resolve *pattern* to exactly one candidate (see MatchResult.one)."""
    return resolve(pattern, candidates, kind, options).one(policy)
