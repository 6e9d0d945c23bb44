"""Search text for lines matching a simple regular expression.

Patterns understand ``^``, ``.``, ``*`` and ``$``.
"""

from __future__ import annotations

import sys
from typing import TextIO

BUFSIZE = 1024


def _matchhere(re: str, i: int, text: str, j: int) -> bool:
    """Whether ``re[i:]`` matches at the start of ``text[j:]``."""
    while True:
        if i == len(re):
            return True
        if i + 1 < len(re) and re[i + 1] == "*":
            return _matchstar(re[i], re, i + 2, text, j)
        if re[i] == "$" and i + 1 == len(re):
            return j == len(text)
        if j < len(text) and (re[i] == "." or re[i] == text[j]):
            i += 1
            j += 1
            continue
        return False


def _matchstar(c: str, re: str, i: int, text: str, j: int) -> bool:
    """Whether ``c*`` followed by ``re[i:]`` matches at the start of ``text[j:]``."""
    while True:
        if _matchhere(re, i, text, j):
            return True
        if not (j < len(text) and (text[j] == c or c == ".")):
            return False
        j += 1


def match(re: str, text: str) -> bool:
    """Whether ``re`` matches anywhere in ``text``."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, j) for j in range(len(text) + 1))


def grep(pattern: str, stream: TextIO, out: TextIO) -> None:
    """Write to ``out`` every newline-terminated line of ``stream`` that matches.

    Input is read through a buffer of BUFSIZE characters; a line without a
    final newline, or a buffer's worth of text without one, is dropped.
    """
    buf = ""
    while True:
        chunk = stream.read(BUFSIZE - len(buf))
        if not chunk:
            break
        buf += chunk
        *complete, rest = buf.split("\n")
        for line in complete:
            if match(pattern, line):
                out.write(line + "\n")
        buf = rest if complete else ""


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("usage: grep pattern [file ...]", file=sys.stderr)
        return 1
    pattern, paths = args[0], args[1:]
    if not paths:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for path in paths:
        try:
            stream = open(path, encoding="utf-8", errors="surrogateescape", newline="")
        except OSError:
            print(f"grep: cannot open {path}")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())