"""The interactive loop and the handling of one command line."""

from __future__ import annotations

import os
import signal
import sys
from typing import Callable, Sequence

from minishell.builtins import ShellExit, run_builtin, update_last_argument
from minishell.env import Environment
from minishell.executor import run_pipeline
from minishell.heredoc import HeredocInterrupted, mark_heredocs
from minishell.parser import tokenize
from minishell.printr import printr
from minishell.state import ShellState
from minishell.syntax import ShellSyntaxError, syntax_ok
from minishell.tokens import count_commands, is_builtin

PROMPT = "minishell$ "
SYNTAX_STATUS = 2
INTERRUPTED_STATUS = 130

ReadLine = Callable[[str], "str | None"]


def _prompt_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def run_line(line: str, state: ShellState, read_line: ReadLine | None = None) -> int:
    """Check, tokenize and run one command line; return the new status.

    Raises ShellExit when the line runs ``exit`` in the shell itself.
    """
    reader = read_line or _prompt_line
    state.line = line
    try:
        if not syntax_ok(line):
            state.status = SYNTAX_STATUS
            return state.status
        if line == "":
            return state.status
        try:
            tokens = tokenize(line, state.env, state.status, reader)
        except HeredocInterrupted:
            state.status = INTERRUPTED_STATUS
            return state.status
        except ShellSyntaxError as err:
            printr("%s\n", err.message)
            state.status = SYNTAX_STATUS
            return state.status
        if not tokens[0].content:
            return state.status
        mark_heredocs(tokens)
        state.tokens = tokens
        state.nb_cmd = count_commands(tokens)
        if state.nb_cmd == 1 and is_builtin(tokens[0]):
            run_builtin(tokens, state)
        else:
            run_pipeline(tokens, state)
        update_last_argument(tokens, state.env)
        return state.status
    finally:
        state.reset_line()


def repl(state: ShellState | None = None, read_line: ReadLine | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the exit code."""
    if state is None:
        state = ShellState()
    reader = read_line or _prompt_line
    while True:
        try:
            line = reader(PROMPT)
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            sys.stdout.flush()
            state.status = INTERRUPTED_STATUS
            continue
        if line is None:
            sys.stdout.write("exit\n")
            sys.stdout.flush()
            return 0
        try:
            run_line(line, state, reader)
        except ShellExit as done:
            return done.code


def _ignore_job_signals() -> None:
    for name in ("SIGQUIT", "SIGTSTP"):
        sig = getattr(signal, name, None)
        if sig is not None:
            try:
                signal.signal(sig, signal.SIG_IGN)
            except (ValueError, OSError):
                pass


def main(argv: Sequence[str] | None = None) -> int:
    """Start the interactive shell; it takes no arguments."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        printr("Error: too many arguments\n")
        return 1
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    _ignore_job_signals()
    env = Environment.from_envp(f"{key}={value}" for key, value in os.environ.items())
    try:
        return repl(ShellState(env=env))
    except OSError:
        return 1


if __name__ == "__main__":
    raise SystemExit(main())