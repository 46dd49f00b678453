from __future__ import annotations

from typing import Any

CLEAR_SEQUENCE = "\x1b[2J\x1b[H"


def run_echo(shell: Any, args: list[str]) -> int:
    if args:
        shell.write(" ".join(args) + "\n")
        return 0
    text = shell.read_all()
    shell.write(text + ("\n" if text and not text.endswith("\n") else ""))
    return 0


def run_help(shell: Any, args: list[str]) -> int:
    if args:
        command = shell.command(args[0])
        if command is None:
            shell.write_stderr(f"help: no such command: {args[0]}\n")
            return 1
        shell.write(f"{command.name}: {command.description}\n" if command.description else f"{command.name}\n")
        shell.write(command.usage())
        return 0
    commands = list(shell.registry)
    width = max((len(c.name) for c in commands), default=0)
    lines = ["Available commands:"] + [
        f"  {c.name.ljust(width)}  {c.description}".rstrip() for c in commands
    ]
    shell.write("\n".join(lines) + "\n")
    return 0


def run_exit(shell: Any, args: list[str]) -> int:
    code = 0
    if args:
        try:
            code = int(args[0])
        except ValueError:
            shell.write_stderr(f"exit: numeric argument required: {args[0]}\n")
            return 1
    return shell.exit(code)


def run_clear(shell: Any, _args: list[str]) -> int:
    shell.write(CLEAR_SEQUENCE)
    return 0


def run_true(_shell: Any, _args: list[str]) -> int:
    return 0


def run_false(_shell: Any, _args: list[str]) -> int:
    return 1
