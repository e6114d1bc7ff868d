"""Glob-style pattern matching used by condition functions such as ``pat()``."""

from __future__ import annotations

import functools
import os
import re

__all__ = ["match"]


def match(pattern: str, s: str) -> bool:
    """Return whether ``s`` matches the shell-style ``pattern``.

    Path separators are stripped from both arguments before matching, and a
    malformed pattern never matches.
    """
    if pattern == "*":
        return True
    s = s.replace(os.sep, "")
    pattern = pattern.replace(os.sep, "")
    regex = _compile(pattern)
    return regex is not None and regex.fullmatch(s) is not None


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            parts.append(".*")
            i += 1
        elif char == "?":
            parts.append(".")
            i += 1
        elif char == "\\":
            if i + 1 >= n:
                return None
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        elif char == "[":
            char_class, i = _parse_class(pattern, i + 1)
            if char_class is None:
                return None
            parts.append(char_class)
        else:
            parts.append(re.escape(char))
            i += 1
    return re.compile("(?s)" + "".join(parts))


def _parse_class(pattern: str, i: int) -> tuple[str | None, int]:
    n = len(pattern)
    negate = i < n and pattern[i] == "^"
    if negate:
        i += 1
    ranges: list[tuple[str, str]] = []
    while True:
        if i < n and pattern[i] == "]" and ranges:
            body = "".join(
                re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}"
                for lo, hi in ranges
            )
            return ("[^" if negate else "[") + body + "]", i + 1
        lo, i = _class_char(pattern, i)
        if lo is None:
            return None, i
        hi = lo
        if i < n and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
            if hi is None or hi < lo:
                return None, i
        ranges.append((lo, hi))


def _class_char(pattern: str, i: int) -> tuple[str | None, int]:
    n = len(pattern)
    if i >= n or pattern[i] in "-]":
        return None, i
    if pattern[i] == "\\":
        i += 1
        if i >= n:
            return None, i
    return pattern[i], i + 1