# minishell

A small interactive shell in the spirit of `bash`, written in pure Python
for POSIX systems (it uses `fork`, `pipe` and `execve`).

## Features

- Command lookup through `PATH` (or the current directory when `PATH` is
  not set), reporting `command not found` (status 127) and
  `Permission denied` (status 126)
- Pipelines: `ls -l | grep py | wc -l`, each command in its own process;
  the status of the last command becomes `$?`
- Redirections: `<`, `>`, `>>` and here-documents `<<`
- Single quotes (literal) and double quotes (with `$VAR` expansion)
- Variable expansion, including `$?` for the last exit status
- Builtins: `echo` (with `-n`), `cd`, `pwd`, `env`, `export`, `unset`, `exit`
- Syntax checking of unclosed quotes and misplaced `|`, `<`, `>` before
  anything runs (status 2)
- `Ctrl-C` at the prompt abandons the line and sets the status to 130;
  `Ctrl-D` prints `exit` and leaves the shell
- Line editing through Python's `readline` module when it is available

## Installation

```
pip install .
```

## Usage

Start the shell with no arguments:

```
minishell
```

```
minishell$ export GREETING=hello
minishell$ echo "$GREETING world" > out.txt
minishell$ cat < out.txt | tr a-z A-Z
HELLO WORLD
minishell$ cat << EOF
> first line
> EOF
first line
minishell$ exit
```

Passing any argument prints `Error: too many arguments` and exits with
status 1.

Here-documents are written to a file named `heredoc.tmp` in the current
directory, which is removed once the command has opened it.

## Using it from Python

```python
from minishell.state import ShellState
from minishell.shell import run_line

state = ShellState()
status = run_line("echo hi | cat", state)
```

- `minishell.shell.run_line(line, state, read_line)` checks, tokenizes and
  runs one line and returns its status; `exit` raises
  `minishell.builtins.ShellExit`.
- `minishell.shell.repl(state, read_line)` runs the prompt loop and returns
  the exit code.
- `minishell.parser.tokenize(line, env, status, read_line)` turns a line into
  `minishell.tokens.Token` objects.
- `minishell.syntax.check_syntax(line)` raises
  `minishell.syntax.ShellSyntaxError` for a malformed line.
- `minishell.env.Environment` holds the shell's variables in order.
- `minishell.executor.run_pipeline(tokens, state)` runs a tokenized line in
  child processes.

`read_line` is a callable taking a prompt and returning a line, or `None`
at end of input; it defaults to `input`.

## What it does not do

- No command lists or conditionals: `;`, `&&`, `||` and `&` are not
  special and are passed to commands as ordinary text.
- No globbing, tilde expansion, subshells, command substitution or
  backslash escapes.
- No job control and no script files: the shell only reads commands
  interactively from its prompt.
- History is kept only for the running session; nothing is saved to disk.

## Running the tests

```
pip install .[test]
pytest
```