"""Token kinds, the token record and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence


class TokenType(IntEnum):
    """Kind of a lexical token produced by the parser."""

    NOTHING = 0
    CMD = 1
    STRING = 2
    OUTFILE = 3
    OUTFILE_APPEND = 4
    HEREDOC = 5
    INFILE = 6
    PIPE = 7
    FILE = 8
    DELIMITER = 9


REDIRECTIONS = frozenset(
    {TokenType.OUTFILE, TokenType.OUTFILE_APPEND, TokenType.INFILE, TokenType.HEREDOC}
)

BUILTINS = frozenset({"exit", "echo", "cd", "pwd", "env", "export", "unset"})

_WHITESPACE = frozenset(" \t\n\v\f\r")
_SPECIAL = frozenset("\"'|><$")
_SYNTAX_SPECIAL = frozenset("\"'|><")


@dataclass
class Token:
    """One token of a command line; ``space`` is true when whitespace follows it."""

    type: TokenType
    content: str | None = None
    space: bool = False


def is_whitespace(c: str) -> bool:
    """Return True for a space, tab, newline, vertical tab, form feed or CR."""
    return c in _WHITESPACE


def is_token(c: str) -> bool:
    """Return True for a quote, pipe, redirection sign or dollar sign."""
    return c in _SPECIAL


def is_stoken(c: str) -> bool:
    """Return True for a character the syntax checker looks at."""
    return c in _SYNTAX_SPECIAL


def is_builtin(token: Token) -> bool:
    """Return True when the token names one of the shell's builtins."""
    if token.type == TokenType.NOTHING:
        return False
    return token.content in BUILTINS


def count_commands(tokens: Iterable[Token]) -> int:
    """Return the number of commands in a pipeline: one more than its pipes."""
    return 1 + sum(1 for token in tokens if token.type == TokenType.PIPE)


def size_without_redirections(tokens: Sequence[Token]) -> int:
    """Count the tokens of the first command that are not redirections or files."""
    count = 0
    for token in tokens:
        if token.type == TokenType.PIPE:
            break
        if token.type not in REDIRECTIONS and token.type != TokenType.FILE:
            count += 1
    return count