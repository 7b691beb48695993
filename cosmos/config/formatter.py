"""
Canonical formatter for cosmos configuration files.

Works directly on the raw text rather than on parsed blocks so comments,
quoted spans and escapes come out exactly as they went in. Layout rules:
- one tab of indentation per brace level
- an opening brace sits on its header line, preceded by one space
- a closing brace sits on its own line
- one blank line after every top-level block, at most one blank line elsewhere
- output ends with exactly one newline

Unbalanced braces are not an error; the remainder is indented on a best
effort basis.
"""

from dataclasses import dataclass, field


INDENT = "\t"


@dataclass
class _FormatState:
    """Scanner and writer state for a single format() call."""

    out: list[str] = field(default_factory=list)
    last: str = ""  # Last character written

    space: bool = True  # Current/previous character was whitespace
    beginning_of_line: bool = True

    open_brace: bool = False  # Current word is or started with '{'
    open_brace_written: bool = False
    open_brace_space: bool = False  # Non-newline space before the brace

    newlines: int = 0  # Newlines consumed since the last write

    comment: bool = False
    quoted: bool = False
    backtick: bool = False
    escaped: bool = False

    nesting: int = 0
    closed_block: bool = False  # Last structural write closed a top-level block

    def write(self, char: str) -> None:
        self.out.append(char)
        self.last = char

    def indent(self) -> None:
        for _ in range(self.nesting):
            self.write(INDENT)

    def next_line(self) -> None:
        self.write("\n")
        self.beginning_of_line = True


def _flush_open_brace(state: _FormatState) -> None:
    """Write a pending opening brace at the end of its header line."""
    if state.nesting == 0 and state.last == "}":
        state.next_line()
        state.next_line()

    state.open_brace = False
    if state.beginning_of_line:
        state.indent()
    elif not state.open_brace_space:
        state.write(" ")
    state.write("{")
    state.open_brace_written = True


def _feed(state: _FormatState, char: str) -> None:
    """Process one input character."""
    if state.comment:
        if char == "\n":
            state.comment = False
            state.space = True
            state.next_line()
        else:
            state.write(char)
        return

    if state.backtick:
        if char == "`":
            state.backtick = False
        state.write(char)
        return

    if char == "\\" and not state.escaped:
        if state.space:
            state.write(" ")
            state.space = False
        state.write(char)
        state.escaped = True
        return

    if state.escaped:
        state.write(char)
        state.escaped = False
        return

    if state.quoted:
        if char == '"':
            state.quoted = False
        state.write(char)
        return

    if state.space and char == '"':
        state.quoted = True
    elif state.space and char == "`":
        state.backtick = True

    if char.isspace():
        state.space = True
        if char == "\n":
            state.newlines += 1
        return

    space_prior = state.space
    state.space = False

    # Past this point the character is a regular one: not whitespace, not
    # escaped, and not inside a quoted span or a comment.

    if char == "#":
        state.comment = True

    if state.open_brace and space_prior and not state.open_brace_written:
        _flush_open_brace(state)
        state.next_line()
        state.newlines = 0
        state.nesting += 1

    if char == "{":
        state.open_brace = True
        state.open_brace_written = False
        state.open_brace_space = space_prior and not state.beginning_of_line
        if state.open_brace_space:
            state.write(" ")
        return

    if char == "}" and (space_prior or not state.open_brace):
        if state.last != "\n":
            state.next_line()
        if state.nesting > 0:
            state.nesting -= 1
        state.indent()
        state.write("}")
        state.newlines = 0
        state.closed_block = state.nesting == 0
        return

    # A top-level block is always followed by a blank line
    if state.closed_block and state.newlines:
        state.newlines = 2
    state.closed_block = False

    for _ in range(min(state.newlines, 2)):
        state.next_line()
    state.newlines = 0

    if state.beginning_of_line:
        state.indent()
    if state.nesting == 0 and state.last == "}" and state.beginning_of_line:
        state.next_line()
        state.next_line()

    if not state.beginning_of_line and space_prior:
        state.write(" ")

    if state.open_brace and not state.open_brace_written:
        state.write("{")
        state.open_brace_written = True

    state.write(char)
    state.beginning_of_line = False


def format_text(source: str) -> str:
    """Format configuration source text. Never raises."""
    state = _FormatState()

    for char in source.strip():
        _feed(state, char)

    # A brace that ends the input is still pending
    if state.open_brace and not state.open_brace_written:
        _flush_open_brace(state)

    # No leading or trailing space is needed, but the file must end with a
    # newline because newlines are significant to the syntax
    return "".join(state.out).strip() + "\n"


def format(data: bytes) -> bytes:
    """
    Format raw configuration bytes into canonical layout.

    Bytes that are not valid UTF-8 pass through unchanged.
    """
    source = data.decode("utf-8", errors="surrogateescape")
    return format_text(source).encode("utf-8", errors="surrogateescape")
