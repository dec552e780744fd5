import pytest

from minishell.textutils import (
    atoi,
    atol_exit,
    checkalnum,
    escape_newlines,
    is_num,
    itoa,
    split,
)


@pytest.mark.parametrize("n", [0, 1, -1, 42, -999, 2147483647, -2147483648])
def test_itoa_atoi_round_trip(n):
    assert atoi(itoa(n)) == n
    assert itoa(n) == str(n)


def test_itoa_int_min():
    assert itoa(-2147483648) == "-2147483648"


def test_atoi_skips_whitespace_and_stops_at_garbage():
    assert atoi("  \t-42abc") == -42
    assert atoi("+7") == 7


def test_atoi_without_digits():
    assert atoi("abc") == 0
    assert atoi("") == 0


def test_atol_exit_plain():
    assert atol_exit("42") == (42, False)
    assert atol_exit("  -42") == (-42, False)


def test_atol_exit_max_value():
    assert atol_exit("9223372036854775807") == (9223372036854775807, False)


@pytest.mark.parametrize("text", ["9223372036854775808", "-9223372036854775808"])
def test_atol_exit_overflow_flag(text):
    _, overflow = atol_exit(text)
    assert overflow is True


@pytest.mark.parametrize("text", ["123", "-12", "+5", "1" * 19, "+", ""])
def test_is_num_accepts(text):
    assert is_num(text) is True


@pytest.mark.parametrize("text", ["12a", "1" * 20, "--1", " 1", "abc"])
def test_is_num_rejects(text):
    assert is_num(text) is False


def test_split_keeps_inner_empty_fields():
    assert split("a::b", ":") == ["a", "", "b"]


def test_split_drops_trailing_empty_field():
    assert split("a:", ":") == ["a"]
    assert split("", ":") == []


@pytest.mark.parametrize("text", ["/usr/bin:/bin", ":a", "single", "x::y:z"])
def test_split_join_round_trip(text):
    assert ":".join(split(text, ":")) == text


def test_escape_newlines():
    assert escape_newlines("a\nb") == "a\\nb"
    assert "\n" not in escape_newlines("\n\n")
    assert escape_newlines("plain") == "plain"


@pytest.mark.parametrize("c", ["a", "Z", "5", "_"])
def test_checkalnum_accepts(c):
    assert checkalnum(c) is True


@pytest.mark.parametrize("c", ["-", "", "$", " ", "é"])
def test_checkalnum_rejects(c):
    assert checkalnum(c) is False