"""Tokenization and pipeline grouping utilities for mysh.

A raw input line is first normalized so that every operator character is
surrounded by whitespace, then split on whitespace into a flat token list.
Wildcard tokens are expanded in place. The token list is later split into
at most two pipeline stages.
"""
from __future__ import annotations

import re
from typing import List, Optional, Tuple

from wildcard import expand_wildcard, has_wildcard

# Recognized operator characters
OPERATORS = {"|", "<", ">"}
PIPE = "|"
WHITESPACE = " \t\n"
WHITESPACE_RUN = re.compile(r"[ \t\n]+")

MAX_TOKENS = 1000
MAX_TOKEN_LENGTH = 1000


# --- Preprocessing ---

def normalize_operators(line: str) -> str:
    """Return a copy of line with whitespace around every operator character.

    A space is inserted before an operator unless the previous character is
    already whitespace (or it starts the line), and after it unless the next
    character is whitespace (or it ends the line). Applying this twice gives
    the same result as applying it once.
    """
    out: List[str] = []
    n = len(line)
    for i, ch in enumerate(line):
        if ch not in OPERATORS:
            out.append(ch)
            continue
        if out and out[-1] not in WHITESPACE:
            out.append(" ")
        out.append(ch)
        if i + 1 < n and line[i + 1] not in WHITESPACE:
            out.append(" ")
    return "".join(out)


# --- Tokenization ---

def tokenize(line: str) -> List[str]:
    """Split a line into tokens, expanding wildcard tokens.

    A wildcard token with no matches contributes nothing. Tokens beyond
    MAX_TOKENS - 1 are dropped.
    """
    tokens: List[str] = []
    limit = MAX_TOKENS - 1
    words = [w for w in WHITESPACE_RUN.split(normalize_operators(line)) if w]
    for word in words:
        if len(tokens) >= limit:
            break
        if len(word) > MAX_TOKEN_LENGTH:
            raise ValueError(f"token too long: {word[:20]}...")
        if has_wildcard(word):
            tokens.extend(expand_wildcard(word))
        else:
            tokens.append(word)
    del tokens[limit:]
    return tokens


# --- Grouping ---

def split_pipeline(tokens: List[str]) -> Tuple[List[str], Optional[List[str]]]:
    """Split tokens at the first pipe into (stage_a, stage_b).

    stage_b is None when the line has no pipe. Only a single pipe is
    supported; empty stages and a second pipe raise ValueError.
    """
    if PIPE not in tokens:
        return tokens, None
    idx = tokens.index(PIPE)
    stage_a = tokens[:idx]
    stage_b = tokens[idx + 1:]
    if not stage_a or not stage_b:
        raise ValueError("missing command around '|'")
    if PIPE in stage_b:
        raise ValueError("only one pipe is supported")
    return stage_a, stage_b
