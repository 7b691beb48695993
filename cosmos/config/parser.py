"""
Block model builder for the cosmos configuration syntax.

Groups lexer tokens into top-level blocks, each holding an ordered list of
segments (directive lines). Nested braces are kept as tokens inside the
segments so directive consumers can walk sub-blocks with a Dispenser.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from ..logging import get_logger
from .dispenser import Dispenser
from .lexer import Token, on_new_line, tokenize


logger = get_logger("config.parser")


class ParseError(Exception):
    """Exception raised for structural errors in a configuration document."""

    def __init__(self, message: str, token: Token | None = None):
        self.token = token
        if token:
            super().__init__(f"{token.filename}:{token.line} - {message}")
        else:
            super().__init__(message)


class Segment(tuple):
    """
    One logical statement: a directive name followed by its arguments.

    Examples:
        level debug          -> Segment(level, debug)
        listen :8080 {       -> Segment(listen, :8080, {)
        }                    -> Segment(})
    """

    def __new__(cls, tokens: Iterable[Token]):
        tokens = tuple(tokens)
        if not tokens:
            raise ValueError("a segment must contain at least one token")
        return super().__new__(cls, tokens)

    def __repr__(self) -> str:
        return f"Segment({', '.join(t.text for t in self)})"

    @property
    def directive(self) -> str:
        """Name of the directive (text of the first token)."""
        return self[0].text

    @property
    def args(self) -> list[str]:
        return [t.text for t in self[1:]]

    @property
    def line(self) -> int:
        return self[0].line


@dataclass(frozen=True)
class Block:
    """
    A top-level block with its header keys and contents.

    Examples:
        log { ... }                -> Block(keys=("log",), ...)
        a.example b.example { ... } -> Block(keys=("a.example", "b.example"), ...)
        debug on                   -> Block(keys=("debug", "on"), segments=(Segment(debug, on),))
    """

    keys: tuple[str, ...] = ()
    segments: tuple[Segment, ...] = ()
    line: int = 0

    def __repr__(self) -> str:
        return f"Block({self.keys}, segments={len(self.segments)})"

    def has_key(self, key: str) -> bool:
        return key in self.keys

    def get_segment(self, name: str) -> Segment | None:
        """Get first segment whose directive is name."""
        for s in self.segments:
            if s.directive == name:
                return s
        return None

    def get_segments(self, name: str) -> list[Segment]:
        """Get all segments whose directive is name."""
        return [s for s in self.segments if s.directive == name]

    def tokens(self) -> list[Token]:
        """All tokens of the block body, flattened in source order."""
        return [t for s in self.segments for t in s]

    def dispenser(self) -> Dispenser:
        return Dispenser(self.tokens())


@dataclass(frozen=True)
class Config:
    """
    Root document: the top-level blocks in source order.
    """

    blocks: tuple[Block, ...] = ()
    filename: str = "<string>"

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> Block:
        return self.blocks[index]

    def key(self, key: str) -> Block:
        """
        Get the first block carrying key.

        A missing key yields an empty Block so consumers can fall back to
        their defaults without a None check.
        """
        for b in self.blocks:
            if key in b.keys:
                return b
        return Block()

    @property
    def keys(self) -> list[str]:
        """All keys of all blocks, in order."""
        return [k for b in self.blocks for k in b.keys]


class ConfigParser:
    """
    Groups a token list into blocks and segments.

    Grammar (newlines are significant, braces are standalone tokens):
        document := block*
        block    := header ['{' body '}']
        header   := WORD* NEWLINE
        body     := (line | line '{' body '}')*
        line     := WORD+ NEWLINE
    """

    def __init__(self, tokens: list[Token], filename: str = "<string>"):
        self.tokens = tokens
        self.filename = filename
        self.pos = 0

    def _peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _check_open_brace(self) -> bool:
        token = self._peek()
        return token is not None and token.is_open_brace

    def parse(self) -> Config:
        """Parse the entire token list."""
        blocks = []
        while self._peek() is not None:
            blocks.append(self._parse_block())
        return Config(blocks=tuple(blocks), filename=self.filename)

    def _parse_block(self) -> Block:
        header = self._parse_header()
        keys = tuple(t.text for t in header if t.text)

        if self._check_open_brace():
            opener = self._advance()
            line = header[0].line if header else opener.line
            return Block(keys=keys, segments=self._parse_body(opener), line=line)

        # Flat statement without braces: the header is its only segment
        return Block(keys=keys, segments=(Segment(header),), line=header[0].line)

    def _parse_header(self) -> list[Token]:
        """Collect the tokens of the header line, stopping before any '{'."""
        header: list[Token] = []

        while True:
            token = self._peek()
            if token is None or token.is_open_brace:
                break
            if header and on_new_line(header[-1], token):
                break
            if token.is_close_brace:
                raise ParseError("Unexpected '}' because no matching opening brace", token)
            if not token.quote and token.text.endswith("{"):
                raise ParseError(
                    f"Block keys cannot end with a curly brace: '{token.text}' - "
                    "put a space between the key and the brace",
                    token,
                )
            header.append(self._advance())

        return header

    def _parse_body(self, opener: Token) -> tuple[Segment, ...]:
        """Parse segments after opener up to and including its matching '}'."""
        segments: list[Segment] = []
        current: list[Token] = []
        nesting = 0

        def flush() -> None:
            if current:
                segments.append(Segment(current))
                current.clear()

        while True:
            token = self._peek()
            if token is None:
                raise ParseError(f"Unexpected EOF, block opened on line {opener.line} is not closed", opener)
            self._advance()

            if token.is_close_brace:
                flush()
                if nesting == 0:
                    break
                nesting -= 1
                segments.append(Segment([token]))
            elif token.is_open_brace:
                # A brace on the next line still belongs to the directive above
                current.append(token)
                flush()
                nesting += 1
            else:
                if current and on_new_line(current[-1], token):
                    flush()
                current.append(token)

        return tuple(segments)


def parse(filename: str, data: bytes | str) -> Config:
    """
    Parse raw configuration input.

    Args:
        filename: Name used in tokens and error messages
        data: Configuration source

    Returns:
        Parsed Config

    Raises:
        ParseError: On unbalanced braces or a malformed block header
    """
    tokens = tokenize(filename, data)
    config = ConfigParser(tokens, filename).parse()
    logger.debug(f"Parsed {len(config)} blocks ({len(tokens)} tokens) from {filename}")
    return config


def parse_file(path: str | Path) -> Config:
    """
    Parse a configuration file.

    Args:
        path: Path to the configuration file

    Returns:
        Parsed Config
    """
    path = Path(path)
    return parse(str(path), path.read_bytes())
