import io

import pytest

from xv6tools.printf import format, fprintf


def test_plain_text():
    assert format("hello\n") == "hello\n"


@pytest.mark.parametrize("value", [0, 42, -7, 123456, -2147483648, 2147483647])
def test_decimal(value):
    assert format("%d", value) == str(value)


def test_decimal_wraps_to_32_bits():
    assert format("%d", 2**31) == str(-(2**31))
    assert format("%d", 2**32 + 5) == "5"


def test_hex_is_uppercase():
    assert format("%x", 255) == "FF"


def test_hex_is_unsigned():
    assert format("%x", -1) == "FFFFFFFF"


def test_pointer_matches_hex():
    assert format("%p", 4096) == format("%x", 4096)


def test_string_and_null():
    assert format("[%s]", "abc") == "[abc]"
    assert format("%s", None) == "(null)"


def test_char():
    assert format("%c", 65) == "A"
    assert format("%c", "z") == "z"


def test_percent_and_unknown():
    assert format("100%%") == "100%"
    assert format("%q") == "%q"


def test_trailing_percent_dropped():
    assert format("abc%") == "abc"


def test_mixed():
    assert format("%s=%d\n", "x", 3) == "x=3\n"


def test_missing_argument():
    with pytest.raises(TypeError):
        format("%d %d", 1)


def test_fprintf_writes_stream():
    stream = io.StringIO()
    fprintf(stream, "cat: cannot open %s\n", "foo")
    fprintf(stream, "%d", 9)
    assert stream.getvalue() == "cat: cannot open foo\n9"