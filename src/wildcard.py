"""Single-star filename expansion."""
from __future__ import annotations

import os
import stat
from typing import List, Tuple

WILDCARD = "*"


def _split_dir(token: str) -> Tuple[str, str, bool]:
    # (directory part, name part, had a directory part)
    slash = token.rfind("/")
    if slash < 0:
        return "", token, False
    return token[:slash], token[slash + 1:], True


def has_wildcard(token: str) -> bool:
    """True when the name part of token (after the last '/') contains '*'."""
    return WILDCARD in _split_dir(token)[1]


def _matches(name: str, prefix: str, suffix: str) -> bool:
    if len(name) < len(prefix) + len(suffix):
        return False
    return name.startswith(prefix) and name.endswith(suffix)


def expand_wildcard(token: str) -> List[str]:
    """Expand a glob token against its directory.

    Only the first '*' in the name part is a wildcard; any later '*' is
    literal. Hidden entries and anything that is not a regular file are
    skipped. Results are sorted. An unreadable directory yields [].
    A token without '*' in its name part is returned unchanged.
    """
    dirpart, namepart, has_dir = _split_dir(token)
    star = namepart.find(WILDCARD)
    if star < 0:
        return [token]
    prefix, suffix = namepart[:star], namepart[star + 1:]

    if has_dir:
        listing_dir = dirpart or "/"
    else:
        listing_dir = "."
    try:
        entries = os.listdir(listing_dir)
    except OSError:
        return []

    matches: List[str] = []
    for name in entries:
        if name.startswith(".") or not _matches(name, prefix, suffix):
            continue
        full = f"{dirpart}/{name}" if has_dir else name
        try:
            mode = os.stat(full).st_mode
        except OSError:
            continue
        if stat.S_ISREG(mode):
            matches.append(full)
    matches.sort()
    return matches
