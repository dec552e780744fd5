import pytest

from minishell.syntax import ShellSyntaxError, check_syntax, syntax_ok


@pytest.mark.parametrize(
    "line",
    ["ls -l", "echo 'a | b'", 'echo "x > y"', "cat << EOF", "ls | wc -l", "echo a >> out", ""],
)
def test_valid_lines(line):
    assert syntax_ok(line) is True


@pytest.mark.parametrize("line", ["echo 'abc", 'echo "abc'])
def test_unclosed_quote(line):
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax(line)
    assert info.value.message == "syntax error, quote not close"


def test_leading_pipe():
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax("| ls")
    assert info.value.message == "minishell: syntax error near unexpected token `|'"


def test_double_pipe():
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax("ls || wc")
    assert info.value.message == "minishell: syntax error near unexpected token `|'"


def test_trailing_pipe():
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax("ls |  ")
    assert info.value.message == "minishell: syntax error: unexpected end of file"


def test_triple_redirection():
    with pytest.raises(ShellSyntaxError) as info:
        check_syntax("echo >>> out")
    assert info.value.message == "minishell: syntax error near unexpected token `>'"


@pytest.mark.parametrize("line", ["ls >", "cat <", "cat <<  ", "ls > <"])
def test_redirection_without_target(line):
    assert syntax_ok(line) is False


@pytest.mark.parametrize("line", ["!", ":", None])
def test_rejected_without_message(line, capsys):
    assert syntax_ok(line) is False
    assert capsys.readouterr().err == ""


def test_syntax_ok_reports_on_stderr(capsys):
    assert syntax_ok("echo 'x") is False
    assert capsys.readouterr().err == "syntax error, quote not close\n"