"""State carried by the shell between command lines."""

from __future__ import annotations

from dataclasses import dataclass, field

from minishell.env import Environment
from minishell.tokens import Token


@dataclass
class ShellState:
    """The environment, the current line and its tokens, and the last status."""

    env: Environment = field(default_factory=Environment)
    line: str | None = None
    tokens: list[Token] = field(default_factory=list)
    status: int = 0
    nb_cmd: int = 0
    sigint: bool = False
    sigquit: bool = False

    @property
    def envp(self) -> list[str]:
        """The environment as ``KEY=VALUE`` strings."""
        return self.env.to_envp()

    def reset_line(self) -> None:
        """Forget everything about the line just run, keeping env and status."""
        self.line = None
        self.tokens = []
        self.nb_cmd = 0
        self.sigint = False
        self.sigquit = False