"""The shell's environment: an ordered table of variables."""

from __future__ import annotations

import os
from typing import Iterable, Iterator

DEFAULT_PATH = "."


class Environment:
    """Ordered environment variables; a value of None means "declared, unset"."""

    def __init__(self, items: Iterable[tuple[str, str | None]] | None = None) -> None:
        self._vars: dict[str, str | None] = dict(items or ())

    @classmethod
    def from_envp(cls, envp: Iterable[str] | None) -> "Environment":
        """Build from ``KEY=VALUE`` strings; an empty list yields a minimal set."""
        entries = list(envp or ())
        if not entries:
            try:
                cwd: str | None = os.getcwd()
            except OSError:
                cwd = None
            return cls([("PWD", cwd), ("SHLVL", "1"), ("_", "./minishell")])
        env = cls()
        for entry in entries:
            key, _, value = entry.partition("=")
            env._vars.setdefault(key, value)
        return env

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None when it is absent or has no value."""
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Set ``key``; a new key goes to the end, an existing one keeps its place."""
        self._vars[key] = value

    def unset(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._vars.pop(key, None)

    def items(self) -> list[tuple[str, str | None]]:
        """Return the variables as (key, value) pairs in order."""
        return list(self._vars.items())

    def to_envp(self) -> list[str]:
        """Return the variables as ``KEY=VALUE`` strings, as passed to programs."""
        return [f"{key}={'' if value is None else value}" for key, value in self._vars.items()]

    def path(self) -> str:
        """Return the PATH value, or "." when PATH is not defined."""
        if "PATH" not in self._vars:
            return DEFAULT_PATH
        return self._vars["PATH"] or ""

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"Environment({self.items()!r})"