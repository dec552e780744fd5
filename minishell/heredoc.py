"""Here-documents: reading their lines into a temporary file."""

from __future__ import annotations

import os
from typing import Callable, MutableSequence

from minishell.printr import printr
from minishell.tokens import Token, TokenType

HEREDOC_FILE = "heredoc.tmp"
HEREDOC_PROMPT = "> "


class HeredocInterrupted(Exception):
    """Reading a here-document was interrupted by the user."""


def read_heredoc(
    delimiter: str,
    read_line: Callable[[str], str | None],
    path: str = HEREDOC_FILE,
) -> str:
    """Copy lines from ``read_line`` into ``path`` until ``delimiter``; return ``path``.

    ``read_line`` returns None at end of input and raises KeyboardInterrupt on
    interruption, in which case the file is removed and HeredocInterrupted raised.
    """
    fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
    try:
        with os.fdopen(fd, "w") as out:
            while True:
                line = read_line(HEREDOC_PROMPT)
                if line is None:
                    printr("minishell: warning: here-document at line 1 ")
                    printr("delimited by end-of-file (wanted `%s')\n", delimiter)
                    break
                if line == delimiter:
                    break
                out.write(line)
                out.write("\n")
    except KeyboardInterrupt:
        try:
            os.unlink(path)
        except OSError:
            pass
        raise HeredocInterrupted(delimiter) from None
    return path


def _is_heredoc_input(tokens: MutableSequence[Token], index: int) -> bool:
    token = tokens[index]
    return (
        token.type == TokenType.INFILE
        and index + 1 < len(tokens)
        and tokens[index + 1].content == HEREDOC_FILE
    )


def mark_heredocs(tokens: MutableSequence[Token]) -> None:
    """When two or more inputs read the here-document file, retype them as HEREDOC."""
    count = sum(1 for index in range(len(tokens)) if _is_heredoc_input(tokens, index))
    if count < 2:
        return
    for index in range(min(count + 1, len(tokens))):
        if _is_heredoc_input(tokens, index):
            tokens[index].type = TokenType.HEREDOC