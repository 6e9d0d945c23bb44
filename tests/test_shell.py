import pytest

from xv6tools.fsformat import OpenFlag
from xv6tools.shell import (
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    ShellSyntaxError,
    parse_command,
    tokenize,
)

WRITE = OpenFlag.WRONLY | OpenFlag.CREATE


def test_tokenize_kinds():
    assert [t.kind for t in tokenize("cat<in>>out|wc &")] == [
        "a", "<", "a", "+", "a", "|", "a", "&",
    ]


def test_tokenize_texts_round_trip_without_whitespace():
    line = "ls -l > f ; (a | b) &"
    assert "".join(t.text for t in tokenize(line)) == line.replace(" ", "")


def test_tokenize_stops_at_nul():
    assert [t.text for t in tokenize("a b\0c")] == ["a", "b"]


def test_simple_exec():
    assert parse_command("echo hi there\n") == ExecCmd(["echo", "hi", "there"])


def test_empty_line():
    assert parse_command("\n") == ExecCmd([])


def test_pipe_is_right_nested():
    assert parse_command("a | b | c") == PipeCmd(
        ExecCmd(["a"]), PipeCmd(ExecCmd(["b"]), ExecCmd(["c"]))
    )


def test_redirections_wrap_in_order():
    assert parse_command("< in a > out b") == RedirCmd(
        RedirCmd(ExecCmd(["a", "b"]), "in", OpenFlag.RDONLY, 0), "out", WRITE, 1
    )


def test_append_redirect_opens_for_writing():
    assert parse_command("a >> log") == RedirCmd(ExecCmd(["a"]), "log", WRITE, 1)


def test_list_and_background():
    assert parse_command("a ; b & &") == ListCmd(
        ExecCmd(["a"]), BackCmd(BackCmd(ExecCmd(["b"])))
    )


def test_block_with_redirect():
    assert parse_command("(a ; b) > out") == RedirCmd(
        ListCmd(ExecCmd(["a"]), ExecCmd(["b"])), "out", WRITE, 1
    )


def test_missing_redirect_file():
    with pytest.raises(ShellSyntaxError, match="missing file for redirection"):
        parse_command("a >")


def test_missing_close_paren():
    with pytest.raises(ShellSyntaxError, match="missing \\)"):
        parse_command("(a")


def test_leftovers():
    with pytest.raises(ShellSyntaxError) as info:
        parse_command("a ) b")
    assert info.value.leftovers == ") b"


def test_paren_inside_arguments():
    with pytest.raises(ShellSyntaxError, match="^syntax$"):
        parse_command("a (b)")


def test_argument_limit():
    words = [f"w{n}" for n in range(9)]
    assert parse_command(" ".join(words)) == ExecCmd(words)
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(words + ["extra"]))