"""
Cursor-based navigation over a flat list of tokens.

Directive-specific code walks a block's tokens with a Dispenser instead of
re-parsing them. Brace depth is tracked as a counter rather than a tree.
"""

from .lexer import Token, on_new_line


class DirectiveError(Exception):
    """Exception raised by directive consumers for malformed directives."""

    def __init__(self, message: str, filename: str = "", line: int = 0):
        self.filename = filename
        self.line = line
        if filename or line:
            super().__init__(f"{filename}:{line} - {message}")
        else:
            super().__init__(message)


class Dispenser:
    """
    Sequential cursor over tokens.

    The cursor starts before the first token, so next() must be called
    before the first val(). A typical consumer:

        d = Dispenser(block.tokens())
        while d.next():
            if d.val() == "listen":
                if not d.next_arg():
                    raise d.arg_err()
                address = d.val()
                nesting = d.nesting()
                while d.next_block(nesting):
                    ...

    The dispenser never raises; the error builders return a DirectiveError
    for the caller to raise. Not safe for use by more than one consumer.
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = list(tokens)
        self.cursor = -1
        self._nesting = 0

    def __repr__(self) -> str:
        return f"Dispenser(cursor={self.cursor}, nesting={self._nesting}, tokens={len(self.tokens)})"

    def next(self) -> bool:
        """Advance to the next token. Returns False if there are none left."""
        if self.cursor < len(self.tokens) - 1:
            self.cursor += 1
            return True
        return False

    def prev(self) -> bool:
        """Step back one token. Returns False at the first token."""
        if self.cursor > 0:
            self.cursor -= 1
            return True
        return False

    def _next_on_same_line(self) -> bool:
        if self.cursor < 0:
            return self.next()
        if self.cursor >= len(self.tokens) - 1:
            return False
        if on_new_line(self.tokens[self.cursor], self.tokens[self.cursor + 1]):
            return False
        self.cursor += 1
        return True

    def next_arg(self) -> bool:
        """
        Advance only if the next token is on the same line.

        An opening brace is not an argument: the cursor is rolled back and
        False is returned so the caller can hand over to next_block().
        """
        if not self._next_on_same_line():
            return False
        if self.tokens[self.cursor].is_open_brace:
            self.cursor -= 1
            return False
        return True

    def next_line(self) -> bool:
        """Advance only if the next token starts a new line."""
        if self.cursor < 0:
            return self.next()
        if self.cursor >= len(self.tokens) - 1:
            return False
        if not on_new_line(self.tokens[self.cursor], self.tokens[self.cursor + 1]):
            return False
        self.cursor += 1
        return True

    def next_block(self, at_nesting: int) -> bool:
        """
        Step through the block opened right after the current line.

        Returns True for every token inside the block and False once the
        closing brace at the starting depth has been consumed. at_nesting is
        the value of nesting() taken before the loop.
        """
        if self._nesting > at_nesting:
            if not self.next():
                return False
            token = self.tokens[self.cursor]
            if token.is_close_brace:
                self._nesting -= 1
            elif token.is_open_brace:
                self._nesting += 1
            return self._nesting > at_nesting

        # The block must open on the same line
        if not self._next_on_same_line():
            return False
        if not self.tokens[self.cursor].is_open_brace:
            self.cursor -= 1
            return False
        if not self.next():
            return False
        if self.tokens[self.cursor].is_close_brace:
            # Opened and closed right away
            return False
        self._nesting += 1
        if self.tokens[self.cursor].is_open_brace:
            # First token inside is itself a sub-block
            self._nesting += 1
        return True

    def nesting(self) -> int:
        """Current brace depth relative to where the dispenser started."""
        return self._nesting

    def val(self) -> str:
        """Text of the current token, or an empty string if out of range."""
        token = self.token()
        return token.text if token else ""

    def token(self) -> Token | None:
        if 0 <= self.cursor < len(self.tokens):
            return self.tokens[self.cursor]
        return None

    def line(self) -> int:
        token = self.token()
        return token.line if token else 0

    def filename(self) -> str:
        token = self.token()
        return token.filename if token else ""

    def args(self, count: int) -> list[str] | None:
        """
        Collect exactly count arguments from the current line.

        Returns None if the line ends early; the cursor is left where
        collection stopped.
        """
        values = []
        for _ in range(count):
            if not self.next_arg():
                return None
            values.append(self.val())
        return values

    def remaining_args(self) -> list[str]:
        """Collect all remaining arguments on the current line."""
        values = []
        while self.next_arg():
            values.append(self.val())
        return values

    def reset(self) -> None:
        """Rewind to before the first token."""
        self.cursor = -1
        self._nesting = 0

    # Error builders. These return, they do not raise.

    def err(self, message: str) -> DirectiveError:
        return DirectiveError(f"Error during parsing: {message}", self.filename(), self.line())

    def errf(self, template: str, *args: object) -> DirectiveError:
        return self.err(template % args)

    def arg_err(self) -> DirectiveError:
        if self.val() == "{":
            return self.err("unexpected token '{', expecting argument")
        return self.err(f"wrong argument count or unexpected line ending after '{self.val()}'")

    def syntax_err(self, expected: str) -> DirectiveError:
        return DirectiveError(
            f"Syntax error: unexpected token '{self.val()}', expecting '{expected}'",
            self.filename(),
            self.line(),
        )

    def eof_err(self) -> DirectiveError:
        return DirectiveError("Unexpected EOF", self.filename(), self.line())
