"""Small text tools: word counting, concatenation, echoing and name formatting."""

from __future__ import annotations

from collections.abc import Iterable
from typing import IO, AnyStr

from xv6tools.fsformat import DIRSIZ

# NUL separates words too, like the other whitespace bytes.
_SEPARATORS = frozenset(b" \r\t\n\v\0")
_CHUNK = 512


def _as_bytes(data: str | bytes) -> bytes:
    return data.encode("utf-8", "surrogateescape") if isinstance(data, str) else bytes(data)


def word_count(data: str | bytes) -> tuple[int, int, int]:
    """Numbers of lines, words and bytes in ``data``."""
    raw = _as_bytes(data)
    words = 0
    inword = False
    for byte in raw:
        if byte in _SEPARATORS:
            inword = False
        elif not inword:
            words += 1
            inword = True
    return raw.count(b"\n"), words, len(raw)


def wc_line(data: str | bytes, name: str) -> str:
    """The report line for ``data``, without a trailing newline."""
    lines, words, chars = word_count(data)
    return f"{lines} {words} {chars} {name}"


def cat(streams: Iterable[IO[AnyStr]], out: IO[AnyStr]) -> None:
    """Copy every stream in turn to ``out``."""
    for stream in streams:
        while chunk := stream.read(_CHUNK):
            out.write(chunk)


def echo(args: Iterable[str]) -> str:
    """Arguments separated by spaces and ended by a newline; nothing for none."""
    args = list(args)
    return " ".join(args) + "\n" if args else ""


def fmtname(path: str) -> str:
    """Last component of ``path``, padded with blanks to DIRSIZ characters."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)