"""String and number helpers with the shell's C-like integer semantics."""

from __future__ import annotations

_INT32 = 1 << 32
_INT64 = 1 << 64
_WHITESPACE = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset("0123456789")
_WORD = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz_")
_OVERFLOW_LIMIT = 922337203685477580


def _wrap32(value: int) -> int:
    return (value + (1 << 31)) % _INT32 - (1 << 31)


def _wrap64(value: int) -> int:
    return (value + (1 << 63)) % _INT64 - (1 << 63)


def _sign_and_digits(text: str) -> tuple[int, str]:
    stripped = text.lstrip(" \t\n\v\f\r")
    sign = 1
    if stripped[:1] in ("+", "-"):
        if stripped[0] == "-":
            sign = -1
        stripped = stripped[1:]
    digits = []
    for ch in stripped:
        if ch not in _DIGITS:
            break
        digits.append(ch)
    return sign, "".join(digits)


def itoa(n: int) -> str:
    """Return the decimal text of ``n`` taken as a 32-bit int."""
    return str(_wrap32(int(n)))


def atoi(text: str) -> int:
    """Parse leading whitespace, an optional sign and digits; wraps at 32 bits."""
    sign, digits = _sign_and_digits(text)
    number = 0
    for ch in digits:
        number = _wrap32(number * 10 + int(ch))
    return _wrap32(number * sign)


def atol_exit(text: str) -> tuple[int, bool]:
    """Parse an exit code as a 64-bit value; also report whether it overflowed."""
    sign, digits = _sign_and_digits(text)
    number = 0
    overflow = False
    for ch in digits:
        if ch > "7" and number >= _OVERFLOW_LIMIT:
            overflow = True
        number = _wrap64(number * 10 + int(ch))
    return _wrap64(number * sign), overflow


def is_num(text: str) -> bool:
    """Return True for an optional sign followed by at most 19 digits."""
    body = text[1:] if text[:1] in ("+", "-") else text
    return all(ch in _DIGITS for ch in body) and len(body) <= 19


def split(text: str, sep: str) -> list[str]:
    """Split on ``sep`` keeping empty fields, but without a trailing empty one."""
    if not text:
        return []
    parts = text.split(sep)
    if text.endswith(sep):
        parts.pop()
    return parts


def escape_newlines(text: str) -> str:
    """Replace each newline with a backslash followed by ``n``."""
    return text.replace("\n", "\\n")


def checkalnum(c: str) -> bool:
    """Return True for an ASCII letter, digit or underscore."""
    return c in _WORD