"""Checks on a raw command line before it is tokenized."""

from __future__ import annotations

from minishell.printr import printr
from minishell.tokens import is_stoken, is_whitespace

_QUOTE_NOT_CLOSED = "syntax error, quote not close"
_UNEXPECTED_EOF = "minishell: syntax error: unexpected end of file"


class ShellSyntaxError(Exception):
    """A command line the shell refuses to run."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


def _unexpected(ch: str) -> ShellSyntaxError:
    return ShellSyntaxError(f"minishell: syntax error near unexpected token `{ch}'")


class _Scanner:
    def __init__(self, line: str) -> None:
        self.line = line
        self.i = 0

    def at(self, offset: int = 0) -> str:
        pos = self.i + offset
        return self.line[pos] if pos < len(self.line) else ""

    def skip_whitespace(self) -> None:
        while self.at() and is_whitespace(self.at()):
            self.i += 1

    def quote(self) -> None:
        q = self.at()
        if q not in ('"', "'"):
            return
        self.i += 1
        while self.at() and self.at() != q:
            self.i += 1
        if not self.at():
            raise ShellSyntaxError(_QUOTE_NOT_CLOSED)
        self.i += 1

    def redirection(self, sign: str) -> None:
        if self.at() != sign:
            return
        self.i += 2 if self.at(1) == sign else 1
        self.skip_whitespace()
        if self.at() in ("", sign):
            raise _unexpected(self.at())

    def pipe(self) -> None:
        if self.at() != "|":
            return
        if self.i == 0:
            raise _unexpected("|")
        self.i += 1
        if self.at() == "|":
            raise _unexpected("|")
        self.skip_whitespace()
        if self.at() in ("", "|"):
            raise ShellSyntaxError(_UNEXPECTED_EOF)


def check_syntax(line: str | None) -> None:
    """Raise ShellSyntaxError when quotes, redirections or pipes are malformed."""
    if line is None:
        raise ShellSyntaxError()
    if line in ("!", ":"):
        raise ShellSyntaxError()
    scanner = _Scanner(line)
    while scanner.at():
        while scanner.at() and (is_whitespace(scanner.at()) or not is_stoken(scanner.at())):
            scanner.i += 1
        scanner.quote()
        scanner.redirection(">")
        scanner.redirection("<")
        scanner.pipe()


def syntax_ok(line: str | None) -> bool:
    """Return True for a well-formed line; otherwise report the error and return False."""
    try:
        check_syntax(line)
    except ShellSyntaxError as err:
        if err.message:
            printr("%s\n", err.message)
        return False
    return True