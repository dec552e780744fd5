"""An interactive shell with pipelines, redirections, here-documents, variable expansion and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "env",
    "executor",
    "heredoc",
    "parser",
    "printr",
    "redirect",
    "shell",
    "state",
    "syntax",
    "textutils",
    "tokens",
]