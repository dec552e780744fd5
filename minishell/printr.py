"""A small printf used for error messages, written to standard error."""

from __future__ import annotations

import sys
from typing import Any, Callable, Iterator

_UINT32 = 1 << 32


def _int32(value: int) -> int:
    return (int(value) + (1 << 31)) % _UINT32 - (1 << 31)


def _char(value: Any) -> str:
    if isinstance(value, str):
        return value[:1]
    return chr(int(value) & 0xFF)


def _string(value: Any) -> str:
    return "(null)" if value is None else str(value)


_CONVERTERS: dict[str, Callable[[Any], str]] = {
    "c": _char,
    "s": _string,
    "d": lambda v: str(_int32(v)),
    "i": lambda v: str(_int32(v)),
    "u": lambda v: str(int(v) % _UINT32),
    "x": lambda v: format(int(v) % _UINT32, "x"),
    "X": lambda v: format(int(v) % _UINT32, "X"),
}


def _convert(conversion: str, values: Iterator[Any]) -> str:
    if conversion == "%":
        return "%"
    converter = _CONVERTERS.get(conversion)
    if converter is None:
        return ""
    try:
        value = next(values)
    except StopIteration:
        raise TypeError(f"not enough arguments for %{conversion}") from None
    return converter(value)


def format_printr(fmt: str, *args: Any) -> str:
    """Expand %c, %s, %d, %i, %u, %x, %X and %% in ``fmt``; unknown ones vanish."""
    if fmt is None or fmt == "%":
        raise ValueError("invalid format string")
    values = iter(args)
    chars = iter(fmt)
    out = []
    for ch in chars:
        if ch == "%":
            out.append(_convert(next(chars, ""), values))
        else:
            out.append(ch)
    return "".join(out)


def printr(fmt: str, *args: Any) -> int:
    """Write the formatted message to standard error; return its length."""
    text = format_printr(fmt, *args)
    sys.stderr.write(text)
    sys.stderr.flush()
    return len(text)