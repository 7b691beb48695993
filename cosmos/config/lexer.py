"""
Lexer (tokenizer) for the cosmos configuration syntax.

Supports:
- Bare words (directive names, arguments, addresses, paths)
- Double-quoted strings (only \\" is unescaped, other escapes are kept)
- Backtick strings (raw, no escape processing)
- Structural braces, emitted as standalone tokens when surrounded by space
- Line comments (#) starting at the beginning of a token
- Line continuation with a trailing backslash
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator


BYTE_ORDER_MARK = "\ufeff"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""

    filename: str
    line: int
    text: str
    quote: str = ""  # Delimiter that wrapped the token, if any

    def __repr__(self) -> str:
        return f"Token({self.text!r}, {self.filename}:{self.line})"

    @property
    def is_open_brace(self) -> bool:
        return self.text == "{" and not self.quote

    @property
    def is_close_brace(self) -> bool:
        return self.text == "}" and not self.quote

    @property
    def end_line(self) -> int:
        """Line on which the token ends (quoted tokens may span lines)."""
        return self.line + self.text.count("\n")


def on_new_line(previous: Token, token: Token) -> bool:
    """Check whether token starts on a later line than previous ends."""
    return previous.filename != token.filename or previous.end_line < token.line


@dataclass
class _TokenState:
    """Per-token scanner state; discarded once the token is emitted."""

    text: list[str] = field(default_factory=list)
    line: int = 0
    quote: str = ""
    comment: bool = False
    quoted: bool = False
    backtick: bool = False
    escaped: bool = False


class Lexer:
    """
    Tokenizer for the cosmos configuration syntax.

    Example config:
        log {
            level debug
        }

        http {
            listen :8080 {
                metrics
            }
        }

    Line numbers survive across tokens: a newline advances the counter by one
    plus the number of escaped newlines seen since the previous real one.
    """

    def __init__(self, source: str, filename: str = "<string>"):
        if source.startswith(BYTE_ORDER_MARK):
            source = source[1:]
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.skipped_lines = 0

    def _newline(self) -> None:
        self.line += 1 + self.skipped_lines
        self.skipped_lines = 0

    def _consume(self, state: _TokenState, char: str) -> bool:
        """Feed one character into state. Returns True when the token is complete."""
        if char == "\\" and not state.escaped and not state.backtick:
            state.escaped = True
            return False

        if state.quoted or state.backtick:
            if state.quoted and state.escaped:
                # Everything is literal inside quotes except the quote itself
                if char != '"':
                    state.text.append("\\")
                state.escaped = False
            elif (state.quoted and char == '"') or (state.backtick and char == "`"):
                return True
            if char == "\n":
                self._newline()
            state.text.append(char)
            return False

        if char.isspace():
            if char == "\r":
                return False
            if char == "\n":
                if state.escaped:
                    self.skipped_lines += 1
                    state.escaped = False
                else:
                    self._newline()
                state.comment = False
            return bool(state.text)

        if char == "#" and not state.text:
            state.comment = True
        if state.comment:
            return False

        if not state.text:
            state.line = self.line
            if char == '"':
                state.quoted = True
                state.quote = char
                return False
            if char == "`":
                state.backtick = True
                state.quote = char
                return False

        if state.escaped:
            state.text.append("\\")
            state.escaped = False

        state.text.append(char)
        return False

    def _make_token(self, state: _TokenState) -> Token:
        return Token(
            filename=self.filename,
            line=state.line,
            text="".join(state.text),
            quote=state.quote,
        )

    def next_token(self) -> Token | None:
        """Get the next token from the source, or None at end of input."""
        state = _TokenState()

        while self.pos < len(self.source):
            char = self.source[self.pos]
            self.pos += 1
            if self._consume(state, char):
                return self._make_token(state)

        # EOF flushes the token in progress, even inside unterminated quotes
        if state.text:
            return self._make_token(state)
        return None

    def tokenize(self) -> Iterator[Token]:
        """Generate all tokens from the source."""
        while True:
            token = self.next_token()
            if token is None:
                break
            yield token

    def __iter__(self) -> Iterator[Token]:
        """Allow iteration over tokens."""
        return self.tokenize()


def decode(data: bytes | str) -> str:
    """Decode raw configuration bytes; invalid UTF-8 is replaced, never fatal."""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")


def tokenize(filename: str, data: bytes | str) -> list[Token]:
    """Convenience function to tokenize raw configuration input."""
    return list(Lexer(decode(data), filename))


def tokenize_file(path: str | Path) -> list[Token]:
    """Read and tokenize a file. OSError from the read propagates unchanged."""
    path = Path(path)
    return tokenize(str(path), path.read_bytes())
