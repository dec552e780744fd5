"""The shell's builtin commands: echo, cd, pwd, env, export, unset and exit."""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from minishell.env import Environment
from minishell.printr import printr
from minishell.redirect import STDOUT_FD, output_fd
from minishell.state import ShellState
from minishell.textutils import atol_exit, is_num
from minishell.tokens import Token, TokenType, size_without_redirections

_KEY_CHARS = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
_ENV_ALLOWED_NEXT = frozenset(
    {
        TokenType.NOTHING,
        TokenType.PIPE,
        TokenType.INFILE,
        TokenType.HEREDOC,
        TokenType.OUTFILE,
        TokenType.OUTFILE_APPEND,
    }
)
_TOO_MANY = 4


class ShellExit(Exception):
    """Raised by ``exit``: the shell should stop with ``code``."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def _following(tokens: Sequence[Token]) -> Token:
    return tokens[1] if len(tokens) > 1 else Token(TokenType.NOTHING)


def _open_output(tokens: Sequence[Token]) -> int | None:
    try:
        return output_fd(tokens)
    except OSError as err:
        sys.stderr.write(f"open: {err.strerror}\n")
        sys.stderr.flush()
        return None


def _close(fd: int) -> None:
    if fd != STDOUT_FD:
        os.close(fd)


@contextmanager
def _writer(fd: int) -> Iterator[Callable[[str], object]]:
    if fd == STDOUT_FD:
        yield sys.stdout.write
        sys.stdout.flush()
    else:
        with os.fdopen(fd, "w") as out:
            yield out.write


def _print_env(env: Environment, fd: int) -> None:
    with _writer(fd) as write:
        for key, value in env.items():
            write(f"{key}={'' if value is None else value}\n")


def is_n_flag(text: str | None) -> bool:
    """Return True for "-" followed only by "n" characters (a bare "-" counts)."""
    if not text or text[0] != "-":
        return False
    return all(ch == "n" for ch in text[1:])


def get_key_value(text: str) -> tuple[str, str | None]:
    """Split an export argument at its first "="; without "=" the value is None."""
    if "=" not in text:
        return text, None
    index = text.index("=")
    key = "=" if index == 0 else text[:index]
    return key, text[index + 1:]


def check_key(key: str) -> bool:
    """Return True when ``key`` is a valid variable name for export."""
    if key[:1].isdigit() and key[:1] in _KEY_CHARS or key[:1] == "-":
        return False
    return all(ch in _KEY_CHARS for ch in key)


def builtin_echo(tokens: Sequence[Token]) -> int:
    """Print the command's words separated by spaces; leading -n flags drop the newline."""
    fd = _open_output(tokens)
    if fd is None:
        return 2
    rest = list(tokens[1:])
    with _writer(fd) as write:
        if not rest or rest[0].type == TokenType.NOTHING:
            write("\n")
            return 0
        no_newline = False
        while rest and rest[0].type == TokenType.STRING and is_n_flag(rest[0].content):
            no_newline = True
            rest.pop(0)
        for index, token in enumerate(rest):
            if token.type == TokenType.PIPE:
                break
            if token.type != TokenType.STRING:
                continue
            write(token.content or "")
            if index + 1 < len(rest) and rest[index + 1].type == TokenType.STRING:
                write(" ")
        if not no_newline:
            write("\n")
    return 0


def _update_pwd(env: Environment, key: str) -> None:
    try:
        cwd = os.getcwd()
    except OSError:
        return
    env.set(key, cwd)


def builtin_cd(tokens: Sequence[Token], env: Environment) -> int:
    """Change directory to the argument, or to $HOME; update OLDPWD and PWD."""
    fd = _open_output(tokens)
    if fd is None:
        return 2
    _close(fd)
    if size_without_redirections(tokens) >= _TOO_MANY:
        printr("minishell: cd: too many arguments\n")
        return 1
    _update_pwd(env, "OLDPWD")
    target = _following(tokens)
    if not target.content and target.type != TokenType.PIPE:
        home = os.environ.get("HOME")
        try:
            if not home:
                raise OSError("HOME not set")
            os.chdir(home)
        except OSError:
            printr("minishell: cd: HOME not set\n")
            return 1
    else:
        try:
            os.chdir(target.content or "")
        except OSError:
            if target.type != TokenType.PIPE:
                printr(
                    "minishell : cd  %s: No such file or directory\n", target.content
                )
                return 1
    _update_pwd(env, "PWD")
    return 0


def builtin_pwd(tokens: Sequence[Token]) -> int:
    """Print the current working directory."""
    fd = _open_output(tokens)
    if fd is None:
        printr("minishell: Error : failed open fd\n")
        return 2
    try:
        cwd = os.getcwd()
    except OSError as err:
        _close(fd)
        sys.stderr.write(f"getcwd error: {err.strerror}\n")
        sys.stderr.flush()
        return 1
    with _writer(fd) as write:
        write(cwd + "\n")
    return 0


def builtin_env(tokens: Sequence[Token], env: Environment) -> int:
    """Print every variable as KEY=VALUE; any argument is an error."""
    fd = _open_output(tokens)
    if fd is None:
        return 2
    if _following(tokens).type not in _ENV_ALLOWED_NEXT:
        _close(fd)
        printr("minishell: env: too many arguments\n")
        return 1
    _print_env(env, fd)
    return 0


def builtin_export(tokens: Sequence[Token], env: Environment) -> int:
    """Set variables from KEY=VALUE words, or list them all when given none."""
    fd = _open_output(tokens)
    if fd is None:
        return 2
    if _following(tokens).type != TokenType.STRING:
        _print_env(env, fd)
        return 0
    _close(fd)
    for token in tokens[1:]:
        if token.type != TokenType.STRING:
            break
        key, value = get_key_value(token.content or "")
        if not check_key(key):
            printr("minishell : export : %s : not a valid identifier\n", key)
            return 1
        if value is None and key in env:
            continue
        env.set(key, value)
    return 0


def builtin_unset(tokens: Sequence[Token], env: Environment) -> int:
    """Remove each named variable."""
    fd = _open_output(tokens)
    if fd is None:
        return 2
    _close(fd)
    for token in tokens[1:]:
        if token.type != TokenType.STRING:
            break
        env.unset(token.content or "")
    return 0


def builtin_exit(tokens: Sequence[Token], state: ShellState) -> int:
    """Raise ShellExit with the requested code; return 1 on too many arguments."""
    fd = _open_output(tokens)
    if fd is not None:
        _close(fd)
    line_tokens = state.tokens or list(tokens)
    if not any(token.type == TokenType.PIPE for token in line_tokens):
        sys.stdout.write("exit\n")
        sys.stdout.flush()
    argument = _following(tokens)
    if argument.content and not is_num(argument.content):
        printr("bash : exit : numeric argument required\n")
        raise ShellExit(2)
    if size_without_redirections(tokens) >= _TOO_MANY:
        printr("minishell: exit: too many arguments\n")
        return 1
    if argument.type != TokenType.NOTHING and argument.content is not None:
        number, overflow = atol_exit(argument.content)
        if is_num(argument.content) and not overflow:
            raise ShellExit(number & 0xFF)
    raise ShellExit(0)


def run_builtin(tokens: Sequence[Token], state: ShellState) -> int:
    """Run the builtin named by the first token, store its status and return it."""
    name = tokens[0].content if tokens else None
    handlers: dict[str, Callable[[], int]] = {
        "exit": lambda: builtin_exit(tokens, state),
        "echo": lambda: builtin_echo(tokens),
        "cd": lambda: builtin_cd(tokens, state.env),
        "pwd": lambda: builtin_pwd(tokens),
        "env": lambda: builtin_env(tokens, state.env),
        "export": lambda: builtin_export(tokens, state.env),
        "unset": lambda: builtin_unset(tokens, state.env),
    }
    handler = handlers.get(name or "")
    if handler is None:
        raise ValueError(f"not a builtin: {name!r}")
    state.status = handler()
    return state.status


def update_last_argument(tokens: Sequence[Token], env: Environment) -> None:
    """Set "_" to the last argument of a single command, or to its name."""
    command: str | None = None
    argument: str | None = None
    for token in tokens:
        if token.type == TokenType.NOTHING:
            break
        if token.type == TokenType.PIPE:
            return
        if token.type == TokenType.CMD:
            command = token.content
        elif token.type == TokenType.STRING:
            argument = token.content
    if command and argument is None:
        env.set("_", command)
    elif command:
        env.set("_", argument)
    else:
        env.set("_", "")