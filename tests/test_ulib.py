import io

from xv6tools.ulib import atoi, gets, strcmp


def test_atoi_digits():
    assert atoi("123") == 123


def test_atoi_stops_at_non_digit():
    assert atoi("42abc") == 42


def test_atoi_no_digits():
    assert atoi("") == 0
    assert atoi("-5") == 0
    assert atoi(" 7") == 0


def test_strcmp_equal():
    assert strcmp("echo", "echo") == 0


def test_strcmp_order():
    assert strcmp("a", "b") < 0
    assert strcmp("b", "a") > 0


def test_strcmp_prefix():
    assert strcmp("abc", "ab") == ord("c")
    assert strcmp("ab", "abc") == -ord("c")


def test_strcmp_stops_at_nul():
    assert strcmp("ab\0x", "ab\0y") == 0


def test_strcmp_bytes():
    assert strcmp(b"x", b"x") == 0


def test_gets_line():
    stream = io.StringIO("hello\nworld")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world"


def test_gets_carriage_return():
    assert gets(io.StringIO("ab\rcd"), 100) == "ab\r"


def test_gets_limit():
    stream = io.StringIO("abcdef")
    assert gets(stream, 4) == "abc"
    assert gets(stream, 4) == "def"


def test_gets_eof_and_tiny_max():
    assert gets(io.StringIO(""), 10) == ""
    assert gets(io.StringIO("abc"), 1) == ""