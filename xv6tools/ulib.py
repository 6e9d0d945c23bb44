"""Small string and input helpers."""

from __future__ import annotations

from itertools import takewhile, zip_longest
from typing import TextIO


def atoi(s: str) -> int:
    """Value of the leading run of decimal digits; 0 if there is none."""
    n = 0
    for ch in takewhile(lambda c: "0" <= c <= "9", s):
        n = n * 10 + ord(ch) - ord("0")
    return n


def _as_bytes(s: str | bytes) -> bytes:
    return s.encode("utf-8", "surrogateescape") if isinstance(s, str) else bytes(s)


def strcmp(p: str | bytes, q: str | bytes) -> int:
    """Difference of the first differing bytes, stopping at a NUL byte."""
    for a, b in zip_longest(_as_bytes(p), _as_bytes(q), fillvalue=0):
        if a == 0 or a != b:
            return a - b
    return 0


def gets(stream: TextIO, max: int) -> str:
    """Read up to ``max - 1`` characters, stopping after a newline or carriage return."""
    chars: list[str] = []
    while len(chars) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        chars.append(c)
        if c in ("\n", "\r"):
            break
    return "".join(chars)