"""Minimal formatted output that understands %d, %x, %p, %s, %c and %%."""

from __future__ import annotations

from typing import Any, TextIO

_DIGITS = "0123456789ABCDEF"
_MASK = 0xFFFFFFFF


def _printint(value: int, base: int, signed: bool) -> str:
    x = int(value) & _MASK
    negative = False
    if signed and x & 0x80000000:
        negative = True
        x = (-(x - (_MASK + 1))) & _MASK
    digits = []
    while True:
        digits.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("%c needs a single character")
        return value
    return chr(int(value) & 0xFF)


def format(fmt: str, *args: Any) -> str:
    """Render ``fmt`` with ``args``; unknown conversions are printed as is."""
    remaining = iter(args)

    def take() -> Any:
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    out: list[str] = []
    pending = False
    for c in fmt:
        if not pending:
            if c == "%":
                pending = True
            else:
                out.append(c)
            continue
        pending = False
        if c == "d":
            out.append(_printint(take(), 10, True))
        elif c in ("x", "p"):
            out.append(_printint(take(), 16, False))
        elif c == "s":
            s = take()
            s = "(null)" if s is None else str(s)
            out.append(s.split("\0", 1)[0])
        elif c == "c":
            out.append(_char(take()))
        elif c == "%":
            out.append("%")
        else:
            out.append("%" + c)
    return "".join(out)


def fprintf(stream: TextIO, fmt: str, *args: Any) -> None:
    """Write the formatted text to ``stream``."""
    stream.write(format(fmt, *args))