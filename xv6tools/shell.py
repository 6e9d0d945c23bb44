"""Tokenizer and parser for the command language of the shell."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from xv6tools.fsformat import OpenFlag

MAXARGS = 10
WHITESPACE = frozenset(" \t\r\n\v")
SYMBOLS = frozenset("<|>&;()")


class ShellSyntaxError(ValueError):
    """A command line that cannot be parsed."""

    def __init__(self, message: str, leftovers: str | None = None) -> None:
        super().__init__(message)
        self.leftovers = leftovers


@dataclass(frozen=True)
class Token:
    """A token: ``kind`` is a symbol, ``+`` for ``>>``, or ``a`` for a word."""

    kind: str
    text: str
    start: int


@dataclass
class ExecCmd:
    argv: list[str] = field(default_factory=list)


@dataclass
class RedirCmd:
    cmd: Command
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    left: Command
    right: Command


@dataclass
class ListCmd:
    left: Command
    right: Command


@dataclass
class BackCmd:
    cmd: Command


Command = Union[ExecCmd, RedirCmd, PipeCmd, ListCmd, BackCmd]


def _truncate(line: str) -> str:
    return line.split("\0", 1)[0]


def tokenize(line: str) -> list[Token]:
    """Split a command line into tokens."""
    line = _truncate(line)
    tokens: list[Token] = []
    i, n = 0, len(line)
    while True:
        while i < n and line[i] in WHITESPACE:
            i += 1
        if i >= n:
            return tokens
        start = i
        c = line[i]
        if c in "|();&<":
            kind = c
            i += 1
        elif c == ">":
            i += 1
            if i < n and line[i] == ">":
                kind = "+"
                i += 1
            else:
                kind = ">"
        else:
            kind = "a"
            while i < n and line[i] not in WHITESPACE and line[i] not in SYMBOLS:
                i += 1
        tokens.append(Token(kind, line[start:i], start))


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def peek(self, kinds: str) -> bool:
        return self.pos < len(self.tokens) and self.tokens[self.pos].kind in kinds

    def next(self) -> Token | None:
        if self.pos >= len(self.tokens):
            return None
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def line(self) -> Command:
        cmd = self.pipe()
        while self.peek("&"):
            self.next()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.next()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self) -> Command:
        cmd = self.exec()
        if self.peek("|"):
            self.next()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd: Command) -> Command:
        while self.peek("<>+"):
            tok = self.next()
            target = self.next()
            if target is None or target.kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            assert tok is not None
            if tok.kind == "<":
                cmd = RedirCmd(cmd, target.text, OpenFlag.RDONLY, 0)
            else:
                cmd = RedirCmd(cmd, target.text, OpenFlag.WRONLY | OpenFlag.CREATE, 1)
        return cmd

    def block(self) -> Command:
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.next()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.next()
        return self.redirs(cmd)

    def exec(self) -> Command:
        if self.peek("("):
            return self.block()
        cmd = ExecCmd()
        ret = self.redirs(cmd)
        while not self.peek("|)&;"):
            tok = self.next()
            if tok is None:
                break
            if tok.kind != "a":
                raise ShellSyntaxError("syntax")
            cmd.argv.append(tok.text)
            if len(cmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse_command(line: str) -> Command:
    """Parse a whole command line into a command tree."""
    line = _truncate(line)
    parser = _Parser(tokenize(line))
    cmd = parser.line()
    rest = parser.next()
    if rest is not None:
        raise ShellSyntaxError("syntax", leftovers=line[rest.start :])
    return cmd