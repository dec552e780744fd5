"""Running commands: finding programs, wiring pipelines and collecting statuses."""

from __future__ import annotations

import os
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, NoReturn, Sequence

from minishell.builtins import ShellExit, run_builtin
from minishell.env import Environment
from minishell.printr import printr
from minishell.redirect import apply_redirections
from minishell.state import ShellState
from minishell.textutils import atoi, escape_newlines, itoa, split
from minishell.tokens import Token, TokenType, is_builtin

NOT_FOUND = 127
PERMISSION_DENIED = 126
_SELF_NAMES = ("./minishell", "minishell")
_ARGV_TYPES = (TokenType.CMD, TokenType.STRING)
_SIGQUIT = getattr(signal, "SIGQUIT", 3)
_SIGINT_STATUS = 128 + signal.SIGINT
_SIGQUIT_STATUS = 128 + _SIGQUIT


class CommandNotFound(Exception):
    """A command that cannot be run; ``status`` is 127 or 126."""

    def __init__(self, name: str, status: int = NOT_FOUND) -> None:
        reason = "Permission denied" if status == PERMISSION_DENIED else "command not found"
        self.name = name
        self.status = status
        self.message = f"minishell : {escape_newlines(name)} : {reason}"
        super().__init__(self.message)


def command_argv(tokens: Sequence[Token]) -> list[str]:
    """Return the argument vector of the command: its name and the words right after it."""
    start = None
    for index, token in enumerate(tokens):
        if token.type in (TokenType.NOTHING, TokenType.PIPE):
            break
        if token.type == TokenType.CMD:
            start = index
            break
    if start is None:
        return []
    argv = []
    for token in tokens[start:]:
        if token.type not in _ARGV_TYPES:
            break
        argv.append(token.content or "")
    return argv


def find_command(name: str, env: Environment) -> str:
    """Return the path to run for ``name``, searching PATH and then ``name`` itself.

    Raises CommandNotFound with status 127 when nothing is found and 126 when
    the file exists but is not executable.
    """
    for directory in split(env.path(), ":"):
        candidate = f"{directory}/{name}"
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
    if not os.path.exists(name):
        raise CommandNotFound(name)
    if not os.access(name, os.X_OK):
        raise CommandNotFound(name, PERMISSION_DENIED)
    if os.path.isdir(name):
        raise CommandNotFound(name)
    return name


def split_pipeline(tokens: Sequence[Token]) -> list[list[Token]]:
    """Cut the tokens at each pipe; every command's tokens end with a NOTHING token."""
    segments: list[list[Token]] = [[]]
    for token in tokens:
        if token.type == TokenType.PIPE:
            segments.append([])
        else:
            segments[-1].append(token)
    for segment in segments:
        if not segment or segment[-1].type != TokenType.NOTHING:
            segment.append(Token(TokenType.NOTHING))
    return segments


def wait_status(returncode: int) -> int:
    """Turn a return code (negative for a signal) into a shell status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _flush() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError):
            pass


def _close_pipes(pipes: Sequence[tuple[int, int]]) -> None:
    for read_end, write_end in pipes:
        for fd in (read_end, write_end):
            try:
                os.close(fd)
            except OSError:
                pass


@contextmanager
def _ignored_signals() -> Iterator[None]:
    saved = {}
    for sig in (signal.SIGINT, _SIGQUIT):
        try:
            saved[sig] = signal.signal(sig, signal.SIG_IGN)
        except (ValueError, OSError):
            pass
    try:
        yield
    finally:
        for sig, handler in saved.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


def _execute(argv: list[str], env: Environment) -> int:
    if argv[0] in _SELF_NAMES:
        current = env.get("SHLVL")
        level = atoi(current) if current is not None else 1
        env.set("SHLVL", itoa(level + 1))
    try:
        path = find_command(argv[0], env)
    except CommandNotFound as err:
        printr("%s\n", err.message)
        return err.status
    environ = {
        key: "" if value is None else value
        for key, value in env.items()
        if key and "=" not in key
    }
    _flush()
    try:
        os.execve(path, argv, environ)
    except (OSError, ValueError):
        pass
    printr("%s\n", CommandNotFound(argv[0]).message)
    return NOT_FOUND


def _child(
    tokens: list[Token],
    segment: list[Token],
    index: int,
    pipes: Sequence[tuple[int, int]],
    state: ShellState,
) -> int:
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_DFL)
    if index > 0:
        os.dup2(pipes[index - 1][0], 0)
    if index < len(pipes):
        os.dup2(pipes[index][1], 1)
    _close_pipes(pipes)
    sys.stdout = open(1, "w", closefd=False)
    sys.stderr = open(2, "w", closefd=False)
    try:
        stdin_fd, stdout_fd = apply_redirections(segment)
    except OSError:
        return 1
    for fd, target in ((stdin_fd, 0), (stdout_fd, 1)):
        if fd is not None:
            os.dup2(fd, target)
            os.close(fd)
    state.tokens = tokens
    first = segment[0]
    if first.type == TokenType.NOTHING:
        sys.stdout.write("\n")
        return 0
    if is_builtin(first):
        return run_builtin(segment, state)
    argv = command_argv(segment)
    if not argv:
        return 0
    return _execute(argv, state.env)


def _run_child(
    tokens: list[Token],
    segment: list[Token],
    index: int,
    pipes: Sequence[tuple[int, int]],
    state: ShellState,
) -> NoReturn:
    code = 1
    try:
        code = _child(tokens, segment, index, pipes, state)
    except ShellExit as done:
        code = done.code
    except BaseException:
        code = 1
    finally:
        _flush()
        os._exit(code & 0xFF)


def _wait(pid: int) -> int:
    try:
        _, raw = os.waitpid(pid, 0)
    except ChildProcessError:
        return 1
    return wait_status(os.waitstatus_to_exitcode(raw))


def run_pipeline(tokens: Sequence[Token], state: ShellState) -> int:
    """Run each command of the line in its own process, connected by pipes.

    The status of the last command becomes the shell's status and is returned.
    Raises OSError when a process cannot be started.
    """
    tokens = list(tokens)
    segments = split_pipeline(tokens)
    state.nb_cmd = len(segments)
    pipes = [os.pipe() for _ in range(len(segments) - 1)]
    pids: list[int] = []
    statuses: list[int] = []
    _flush()
    with _ignored_signals():
        try:
            for index, segment in enumerate(segments):
                try:
                    pid = os.fork()
                except OSError as err:
                    sys.stderr.write(f"fork failed: {err.strerror}\n")
                    sys.stderr.flush()
                    raise
                if pid == 0:
                    _run_child(tokens, segment, index, pipes, state)
                pids.append(pid)
        finally:
            _close_pipes(pipes)
            statuses = [_wait(pid) for pid in pids]
    state.sigint = any(status == _SIGINT_STATUS for status in statuses)
    state.sigquit = any(status == _SIGQUIT_STATUS for status in statuses)
    if state.sigint:
        sys.stderr.write("\n")
    elif state.sigquit:
        sys.stderr.write("Quit (core dumped)\n")
    sys.stderr.flush()
    state.status = statuses[-1] if statuses else 1
    return state.status