"""Opening the files named by redirections."""

from __future__ import annotations

import os
import sys
from typing import Sequence

from minishell.heredoc import HEREDOC_FILE
from minishell.tokens import Token, TokenType

STDOUT_FD = 1
_OUTPUTS = (TokenType.OUTFILE, TokenType.OUTFILE_APPEND)


def open_outfile(token_type: TokenType, filename: str) -> int:
    """Open ``filename`` for ``>`` (truncate) or ``>>`` (append); other types give 1.

    Raises OSError when the file cannot be opened.
    """
    if token_type == TokenType.OUTFILE:
        return os.open(filename, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
    if token_type == TokenType.OUTFILE_APPEND:
        return os.open(filename, os.O_CREAT | os.O_WRONLY | os.O_APPEND, 0o644)
    return STDOUT_FD


def open_infile(filename: str) -> int:
    """Open ``filename`` for reading; the here-document file is unlinked once open."""
    fd = os.open(filename, os.O_RDONLY)
    if filename == HEREDOC_FILE:
        os.unlink(HEREDOC_FILE)
    return fd


def _first_command(tokens: Sequence[Token]) -> list[Token]:
    command = []
    for token in tokens:
        if token.type == TokenType.PIPE:
            break
        command.append(token)
    return command


def _output_targets(tokens: Sequence[Token]) -> list[tuple[TokenType, str]]:
    command = _first_command(tokens)
    return [
        (token.type, following.content or "")
        for token, following in zip(command, command[1:])
        if token.type in _OUTPUTS and following.type == TokenType.FILE
    ]


def count_outfiles(tokens: Sequence[Token]) -> int:
    """Count the output redirections of the first command that name a file."""
    return len(_output_targets(tokens))


def output_fd(tokens: Sequence[Token]) -> int:
    """Create every output file of the first command; return the last one's fd, or 1."""
    targets = _output_targets(tokens)
    if not targets:
        return STDOUT_FD
    for kind, name in targets[:-1]:
        os.close(open_outfile(kind, name))
    kind, name = targets[-1]
    return open_outfile(kind, name)


def _report(err: OSError) -> None:
    sys.stderr.write(f"open: {err.strerror}\n")
    sys.stderr.flush()


def _replace(current: int | None, new: int) -> int:
    if current is not None:
        os.close(current)
    return new


def apply_redirections(tokens: Sequence[Token]) -> tuple[int | None, int | None]:
    """Open the first command's redirections in order; return (stdin fd, stdout fd).

    A slot is None when not redirected; the caller closes returned fds. A failing
    output is reported and skipped; a failing input is reported and its OSError raised.
    """
    command = _first_command(tokens)
    stdin_fd: int | None = None
    stdout_fd: int | None = None
    try:
        for token, following in zip(command, command[1:]):
            name = following.content or ""
            if token.type in _OUTPUTS:
                try:
                    stdout_fd = _replace(stdout_fd, open_outfile(token.type, name))
                except OSError as err:
                    _report(err)
            elif token.type == TokenType.INFILE:
                try:
                    stdin_fd = _replace(stdin_fd, open_infile(name))
                except OSError as err:
                    _report(err)
                    raise
    except OSError:
        for fd in (stdin_fd, stdout_fd):
            if fd is not None:
                os.close(fd)
        raise
    return stdin_fd, stdout_fd