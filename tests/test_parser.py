import pytest

from minishell.env import Environment
from minishell.heredoc import HEREDOC_FILE, HeredocInterrupted
from minishell.parser import (
    choose_type,
    expand_double_quote,
    expand_variable,
    lookup,
    merge_tokens,
    tokenize,
)
from minishell.syntax import ShellSyntaxError
from minishell.tokens import Token, TokenType


@pytest.fixture
def env():
    return Environment([("HOME", "/home/user"), ("USER", "alice")])


def _types(tokens):
    return [t.type for t in tokens]


def _contents(tokens):
    return [t.content for t in tokens]


def _reader(lines):
    it = iter(lines)

    def read_line(prompt):
        return next(it, None)

    return read_line


def test_lookup(env):
    assert lookup("", env) == "$"
    assert lookup("HOME", env) == "/home/user"
    assert lookup("MISSING", env) == ""


def test_expand_variable(env):
    assert expand_variable("$?", env, 42) == "42"
    assert expand_variable("$HOME/x", env, 0) == "/home/user"
    assert expand_variable("$", env, 0) == "$"
    assert expand_variable("$NOPE", env, 0) == ""


def test_expand_double_quote(env):
    assert expand_double_quote("hi $USER!", env, 0) == "hi alice!"
    assert expand_double_quote("$?x", env, 3) == "3x"
    assert expand_double_quote("plain", env, 0) == "plain"
    assert expand_double_quote("", env, 0) == ""


def test_choose_type():
    assert choose_type([]) == TokenType.CMD
    assert choose_type([Token(TokenType.PIPE, "|")]) == TokenType.CMD
    assert choose_type([Token(TokenType.FILE, "f")]) == TokenType.CMD
    assert choose_type([Token(TokenType.INFILE, "<")]) == TokenType.FILE
    assert choose_type([Token(TokenType.OUTFILE_APPEND, ">>")]) == TokenType.FILE
    assert choose_type([Token(TokenType.HEREDOC, "<<")]) == TokenType.DELIMITER
    assert choose_type([Token(TokenType.CMD, "ls")]) == TokenType.STRING


def test_merge_joins_unspaced_tokens():
    tokens = [
        Token(TokenType.STRING, "a", False),
        Token(TokenType.STRING, "b", True),
        Token(TokenType.STRING, "c", False),
    ]
    merged = merge_tokens(tokens)
    assert _contents(merged) == ["ab", "c"]
    assert merged[0].space is True


def test_merge_keeps_pipes_apart():
    tokens = [Token(TokenType.STRING, "a", False), Token(TokenType.PIPE, "|", True)]
    assert _contents(merge_tokens(tokens)) == ["a", "|"]


def test_merge_empty_token_loses_space():
    tokens = [Token(TokenType.STRING, "", True), Token(TokenType.STRING, "x", True)]
    merged = merge_tokens(tokens)
    assert _contents(merged) == ["x"]
    assert merged[0].type == TokenType.STRING


def test_tokenize_simple_command(env):
    tokens = tokenize("echo hello world", env)
    assert _types(tokens) == [
        TokenType.CMD,
        TokenType.STRING,
        TokenType.STRING,
        TokenType.NOTHING,
    ]
    assert _contents(tokens) == ["echo", "hello", "world", None]


def test_tokenize_pipeline(env):
    tokens = tokenize("ls | wc -l", env)
    assert _types(tokens) == [
        TokenType.CMD,
        TokenType.PIPE,
        TokenType.CMD,
        TokenType.STRING,
        TokenType.NOTHING,
    ]


def test_tokenize_redirections(env):
    tokens = tokenize("cat < in > out >> log", env)
    assert _types(tokens)[:-1] == [
        TokenType.CMD,
        TokenType.INFILE,
        TokenType.FILE,
        TokenType.OUTFILE,
        TokenType.FILE,
        TokenType.OUTFILE_APPEND,
        TokenType.FILE,
    ]
    assert _contents(tokens)[:-1] == ["cat", "<", "in", ">", "out", ">>", "log"]


def test_tokenize_joins_quotes(env):
    tokens = tokenize("echo \"a\"'b'c", env)
    assert _contents(tokens) == ["echo", "abc", None]
    assert tokens[1].type == TokenType.STRING


def test_single_quotes_do_not_expand(env):
    assert tokenize("echo '$HOME'", env)[1].content == "$HOME"
    assert tokenize('echo "$HOME"', env)[1].content == "/home/user"


def test_dollar_joined_with_word(env):
    tokens = tokenize("echo $HOME/x", env)
    assert _contents(tokens) == ["echo", "/home/user/x", None]


def test_status_expansion(env):
    assert tokenize("echo $?", env, 7)[1].content == "7"


def test_empty_quotes_give_nothing(env):
    tokens = tokenize('echo ""', env)
    assert _types(tokens) == [TokenType.CMD, TokenType.NOTHING, TokenType.NOTHING]


def test_unclosed_quote_raises(env):
    with pytest.raises(ShellSyntaxError):
        tokenize("echo 'abc", env)


def test_heredoc(env, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    tokens = tokenize("cat << EOF", env, 0, _reader(["a", "b", "EOF"]))
    assert _types(tokens) == [
        TokenType.CMD,
        TokenType.INFILE,
        TokenType.FILE,
        TokenType.NOTHING,
    ]
    assert _contents(tokens)[:3] == ["cat", "<", HEREDOC_FILE]
    assert (tmp_path / HEREDOC_FILE).read_text() == "a\nb\n"


def test_heredoc_interrupted(env, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    def read_line(prompt):
        raise KeyboardInterrupt

    with pytest.raises(HeredocInterrupted):
        tokenize("cat << EOF", env, 0, read_line)
    assert not (tmp_path / HEREDOC_FILE).exists()


def test_misplaced_redirection_reported(env, capsys):
    tokens = tokenize("ls > | wc", env)
    assert TokenType.PIPE in _types(tokens)
    assert "syntax error near unexpected token" in capsys.readouterr().err