"""
Tests for the token dispenser.
"""

import pytest

from cosmos.config.dispenser import DirectiveError, Dispenser
from cosmos.config.lexer import tokenize


def dispenser(source: str) -> Dispenser:
    return Dispenser(tokenize("test.conf", source))


def test_cursor_starts_before_first_token() -> None:
    d = dispenser("a b")
    assert d.val() == ""
    assert d.token() is None
    assert d.line() == 0
    assert d.next()
    assert d.val() == "a"


def test_next_and_prev() -> None:
    d = dispenser("a b\nc")
    assert [d.next() and d.val() for _ in range(3)] == ["a", "b", "c"]
    assert not d.next()
    assert d.val() == "c"
    assert d.prev()
    assert d.val() == "b"
    assert d.prev()
    assert not d.prev()
    assert d.val() == "a"


def test_next_arg_stays_on_line() -> None:
    d = dispenser("listen :80 :81\nlisten :82")
    assert d.next()
    assert d.next_arg()
    assert d.val() == ":80"
    assert d.next_arg()
    assert d.val() == ":81"
    assert not d.next_arg()
    assert d.val() == ":81"
    assert d.next()
    assert d.val() == "listen"
    assert d.line() == 2


def test_next_arg_does_not_consume_open_brace() -> None:
    d = dispenser("listen :80 {\n\tmetrics\n}")
    d.next()
    assert d.next_arg()
    assert not d.next_arg()
    assert d.val() == ":80"


def test_next_arg_allows_quoted_brace() -> None:
    d = dispenser('respond "{"')
    d.next()
    assert d.next_arg()
    assert d.val() == "{"


def test_next_arg_at_end() -> None:
    d = dispenser("a")
    d.next()
    assert not d.next_arg()
    assert not Dispenser([]).next_arg()


def test_next_line() -> None:
    d = dispenser("a b\nc")
    assert d.next_line()
    assert d.val() == "a"
    assert not d.next_line()
    d.next()
    assert d.next_line()
    assert d.val() == "c"
    assert not d.next_line()


def test_next_block_walks_sub_directives() -> None:
    d = dispenser("listen :80 {\n\tmetrics\n\tpath /m\n}\nlisten :81")
    d.next()
    d.next_arg()
    nesting = d.nesting()
    assert nesting == 0

    seen = []
    while d.next_block(nesting):
        seen.append(d.val())
        assert d.nesting() == 1

    assert seen == ["metrics", "path", "/m"]
    assert d.val() == "}"
    assert d.nesting() == 0
    assert d.next()
    assert d.val() == "listen"


def test_next_block_with_nested_blocks() -> None:
    d = dispenser("a {\n\tb {\n\t\tc\n\t}\n\td\n}\ne")
    d.next()

    seen = []
    while d.next_block(0):
        seen.append((d.val(), d.nesting()))

    assert seen == [("b", 1), ("{", 2), ("c", 2), ("}", 1), ("d", 1)]
    assert d.nesting() == 0
    d.next()
    assert d.val() == "e"


def test_next_block_starting_with_nested_block() -> None:
    d = dispenser("a {\n{\nb\n}\nc\n}\nd")
    d.next()

    seen = []
    while d.next_block(0):
        seen.append((d.val(), d.nesting()))

    assert seen == [("{", 2), ("b", 2), ("}", 1), ("c", 1)]
    assert d.val() == "}"
    assert d.nesting() == 0
    assert d.next()
    assert d.val() == "d"


def test_next_block_without_block() -> None:
    d = dispenser("listen :80\nlisten :81")
    d.next()
    d.next_arg()
    assert not d.next_block(d.nesting())
    assert d.val() == ":80"
    assert d.next()
    assert d.val() == "listen"


def test_next_block_with_empty_block() -> None:
    d = dispenser("listen :80 {\n}\nlisten :81")
    d.next()
    d.next_arg()
    assert not d.next_block(d.nesting())
    assert d.val() == "}"
    assert d.nesting() == 0
    d.next()
    assert d.val() == "listen"


def test_next_block_ignores_brace_on_next_line() -> None:
    d = dispenser("listen :80\n{\n}")
    d.next()
    d.next_arg()
    assert not d.next_block(0)
    assert d.val() == ":80"


def test_args() -> None:
    d = dispenser("output file /var/log/cosmos.log\nnext")
    d.next()
    assert d.args(2) == ["file", "/var/log/cosmos.log"]

    d.reset()
    d.next()
    assert d.args(3) is None


def test_remaining_args() -> None:
    d = dispenser("a b c {\n}")
    d.next()
    assert d.remaining_args() == ["b", "c"]
    assert d.remaining_args() == []


def test_reset() -> None:
    d = dispenser("a {\n\tb\n}")
    d.next()
    d.next_block(0)
    assert d.nesting() == 1
    d.reset()
    assert d.nesting() == 0
    assert d.token() is None
    d.next()
    assert d.val() == "a"


def test_position_accessors() -> None:
    d = dispenser("a\n\nb")
    d.next()
    d.next()
    assert d.line() == 3
    assert d.filename() == "test.conf"
    assert d.token().text == "b"


def test_error_builders_return_errors() -> None:
    d = dispenser("listen\n")
    d.next()

    err = d.arg_err()
    assert isinstance(err, DirectiveError)
    assert str(err) == "test.conf:1 - Error during parsing: wrong argument count or unexpected line ending after 'listen'"
    assert err.filename == "test.conf"
    assert err.line == 1

    assert str(d.errf("unknown %s %r", "thing", "x")) == "test.conf:1 - Error during parsing: unknown thing 'x'"
    assert str(d.syntax_err("{")) == "test.conf:1 - Syntax error: unexpected token 'listen', expecting '{'"
    assert str(d.eof_err()) == "test.conf:1 - Unexpected EOF"


def test_arg_err_on_open_brace() -> None:
    d = dispenser("listen {")
    d.next()
    d.next()
    assert "unexpected token '{'" in str(d.arg_err())


def test_directive_error_without_position() -> None:
    with pytest.raises(DirectiveError, match="^plain$"):
        raise DirectiveError("plain")
