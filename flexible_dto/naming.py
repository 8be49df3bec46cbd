"""Property name normalization and whitelist resolution."""

import re
from typing import Any, Optional, Sequence

from .errors import PropertyNotAllowed

WILDCARD = "*"

_LOWER_WORD = re.compile(r"[a-z]+")
_WORD_START = re.compile(r"(^|\s)(\S)")
_WHITESPACE = re.compile(r"\s+")
_BEFORE_UPPER = re.compile(r"(.)(?=[A-Z])")


def snake(value: str) -> str:
    """Convert ``firstName``, ``first name`` or ``FirstName`` to ``first_name``."""
    if _LOWER_WORD.fullmatch(value):
        return value

    value = _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), value)
    value = _WHITESPACE.sub("", value)
    return _BEFORE_UPPER.sub(r"\1_", value).lower()


def camel(value: str) -> str:
    """Convert ``first_name`` or ``first-name`` to ``firstName``."""
    words = value.replace("-", " ").replace("_", " ").split(" ")
    studly = "".join(word[:1].upper() + word[1:] for word in words)
    return studly[:1].lower() + studly[1:]


def is_wildcard(whitelist: Sequence[str]) -> bool:
    return tuple(whitelist) == (WILDCARD,)


def names_match(candidate: Any, entry: str, case_sensitive: bool = True) -> bool:
    """Check whether ``candidate`` names the whitelist ``entry``."""
    if candidate == entry:
        return True
    if case_sensitive or not isinstance(candidate, str):
        return False
    return (
        snake(candidate) == snake(entry)
        or camel(candidate) == camel(entry)
        or snake(candidate.lower()) == snake(entry.lower())
    )


def resolve_property(
    candidate: Any,
    whitelist: Sequence[str],
    case_sensitive: bool = True,
    ignore_non_permitted: bool = False,
) -> Optional[str]:
    """Return the whitelist spelling of ``candidate``.

    The first matching whitelist entry wins. When nothing matches, returns
    ``None`` if ``ignore_non_permitted`` is set and raises
    :class:`PropertyNotAllowed` otherwise.
    """
    if is_wildcard(whitelist):
        return candidate

    for entry in whitelist:
        if names_match(candidate, entry, case_sensitive):
            return entry

    if ignore_non_permitted:
        return None
    raise PropertyNotAllowed(candidate)
