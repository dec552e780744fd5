"""Turning a command line into tokens, with quoting and variable expansion."""

from __future__ import annotations

from typing import Callable, Sequence

from minishell.env import Environment
from minishell.heredoc import HEREDOC_FILE, read_heredoc
from minishell.printr import printr
from minishell.syntax import ShellSyntaxError
from minishell.textutils import checkalnum, itoa
from minishell.tokens import (
    REDIRECTIONS,
    Token,
    TokenType,
    is_token,
    is_whitespace,
)

ReadLine = Callable[[str], "str | None"]

_QUOTE_NOT_CLOSED = "syntax error, quote not close"
_NOT_MERGED = REDIRECTIONS | {TokenType.PIPE}
_AFTER_REDIRECTION = frozenset(
    {TokenType.INFILE, TokenType.OUTFILE, TokenType.OUTFILE_APPEND}
)


def _prompt_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def lookup(name: str, env: Environment) -> str:
    """Return the value of variable ``name``; an empty name gives "$", a missing one ""."""
    if name == "":
        return "$"
    return env.get(name) or ""


def _variable(text: str, env: Environment, status: int) -> tuple[str, int]:
    """Expand the variable at the start of ``text``; return (value, characters used)."""
    if text.startswith("$?"):
        return itoa(status), 2
    end = 1
    while end < len(text) and checkalnum(text[end]):
        end += 1
    return lookup(text[1:end], env), end


def expand_variable(text: str, env: Environment, status: int) -> str:
    """Expand the ``$NAME`` or ``$?`` at the start of ``text``."""
    return _variable(text, env, status)[0]


def expand_double_quote(text: str, env: Environment, status: int) -> str:
    """Expand the variables in the inside of a double-quoted string."""
    parts = []
    pos = 0
    while pos < len(text):
        if text[pos] == "$":
            value, used = _variable(text[pos:], env, status)
            parts.append(value)
            pos += used
        else:
            end = text.find("$", pos)
            if end < 0:
                end = len(text)
            parts.append(text[pos:end])
            pos = end
    return "".join(parts)


def choose_type(tokens: Sequence[Token]) -> TokenType:
    """Return the type the next word takes, given the tokens before it."""
    if not tokens:
        return TokenType.CMD
    last = tokens[-1].type
    if last in _AFTER_REDIRECTION:
        return TokenType.FILE
    if last in (TokenType.PIPE, TokenType.FILE):
        return TokenType.CMD
    if last == TokenType.HEREDOC:
        return TokenType.DELIMITER
    return TokenType.STRING


def merge_tokens(tokens: Sequence[Token]) -> list[Token]:
    """Join each token not followed by whitespace with the next word.

    Empty tokens never keep a following space. Redirections and pipes are
    never absorbed; the merged token keeps the type of the first one.
    """
    merged: list[Token] = []
    current: Token | None = None
    for token in tokens:
        space = False if (token.content or "") == "" else token.space
        token = Token(token.type, token.content, space)
        if current is None:
            current = token
        elif not current.space and token.type not in _NOT_MERGED:
            current.content = (current.content or "") + (token.content or "")
            current.space = token.space
        else:
            merged.append(current)
            current = token
    if current is not None:
        merged.append(current)
    return merged


def _report_misplaced_redirections(tokens: Sequence[Token]) -> None:
    for token, following in zip(tokens, tokens[1:]):
        if token.type in REDIRECTIONS and following.type in _NOT_MERGED:
            printr(
                "minishell: syntax error near unexpected token %s'\n",
                following.content,
            )
            return


class _Lexer:
    def __init__(
        self, line: str, env: Environment, status: int, read_line: ReadLine
    ) -> None:
        self.line = line
        self.env = env
        self.status = status
        self.read_line = read_line
        self.pos = 0
        self.tokens: list[Token] = []

    def at(self) -> str:
        return self.line[self.pos] if self.pos < len(self.line) else ""

    def add(self, kind: TokenType, content: str | None, space: bool) -> None:
        self.tokens.append(Token(kind, content, space))

    def closing(self, quote: str) -> int:
        end = self.line.find(quote, self.pos)
        if end < 0:
            raise ShellSyntaxError(_QUOTE_NOT_CLOSED)
        return end

    def run(self) -> list[Token]:
        while self.pos < len(self.line):
            while self.at() and is_whitespace(self.at()):
                self.pos += 1
            self.single_quote()
            self.double_quote()
            self.redirection()
            self.pipe()
            self.dollar()
            self.word()
        return self.tokens

    def single_quote(self) -> None:
        if self.at() != "'":
            return
        kind = choose_type(self.tokens)
        self.pos += 1
        end = self.closing("'")
        content = self.line[self.pos:end]
        self.pos = end + 1
        if content == "":
            kind = TokenType.NOTHING
        self.add(kind, content, is_whitespace(self.at()))

    def double_quote(self) -> None:
        if self.at() != '"':
            return
        kind = choose_type(self.tokens)
        self.pos += 1
        end = self.closing('"')
        content = expand_double_quote(self.line[self.pos:end], self.env, self.status)
        self.pos = end + 1
        if content == "":
            kind = TokenType.NOTHING
        self.add(kind, content, is_whitespace(self.at()))

    def redirection(self) -> None:
        sign = self.at()
        if sign not in (">", "<") or sign == "":
            return
        start = self.pos
        while self.at() == sign:
            self.pos += 1
        double = self.pos - start == 2
        if sign == ">":
            kind = TokenType.OUTFILE_APPEND if double else TokenType.OUTFILE
        else:
            kind = TokenType.HEREDOC if double else TokenType.INFILE
        self.add(kind, self.line[start:self.pos], True)

    def pipe(self) -> None:
        if self.at() == "|":
            self.add(TokenType.PIPE, "|", True)
            self.pos += 1

    def dollar(self) -> None:
        if self.at() != "$":
            return
        content, used = _variable(self.line[self.pos:], self.env, self.status)
        self.pos += used
        self.add(choose_type(self.tokens), content, is_whitespace(self.at()))

    def word(self) -> None:
        if not self.at() or is_whitespace(self.at()):
            return
        start = self.pos
        while self.at() and not is_whitespace(self.at()) and not is_token(self.at()):
            self.pos += 1
        space = is_whitespace(self.at())
        content = self.line[start:self.pos]
        if choose_type(self.tokens) == TokenType.DELIMITER:
            self.heredoc(content)
        else:
            self.add(choose_type(self.tokens), content, space)

    def heredoc(self, delimiter: str) -> None:
        read_heredoc(delimiter, self.read_line)
        last = self.tokens[-1]
        last.content = "<"
        last.type = TokenType.INFILE
        self.add(TokenType.FILE, HEREDOC_FILE, True)


def tokenize(
    line: str,
    env: Environment,
    status: int = 0,
    read_line: ReadLine | None = None,
) -> list[Token]:
    """Split ``line`` into tokens ending with a NOTHING token.

    Here-documents are read through ``read_line`` as they are met. Raises
    ShellSyntaxError for an unclosed quote and HeredocInterrupted when a
    here-document is interrupted.
    """
    lexer = _Lexer(line, env, status, read_line or _prompt_line)
    tokens = merge_tokens(lexer.run())
    _report_misplaced_redirections(tokens)
    tokens.append(Token(TokenType.NOTHING, None, False))
    return tokens