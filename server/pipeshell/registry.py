from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence

logger = logging.getLogger(__name__)

CommandFunc = Callable[[Any, list[str]], Optional[int]]


@dataclass
class OptionSpec:
    name: str
    short_name: str = ""
    description: str = ""

    def __eq__(self, other: object) -> bool:
        # same long name, or the same non-empty short name
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return self.name == other.name or (bool(self.short_name) and self.short_name == other.short_name)

    __hash__ = None  # type: ignore[assignment]


@dataclass
class SubCommandSpec:
    name: str
    description: str = ""


class Command:
    """A named shell command.

    Options and sub-commands are descriptive only: they feed ``help`` and
    completion, arguments are never validated against them.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self.options: list[OptionSpec] = []
        self.subcommands: list[SubCommandSpec] = []

    def invoke(self, shell: Any, args: list[str]) -> Optional[int]:
        raise NotImplementedError

    def add_option(self, name: str, short_name: str = "", description: str = "") -> None:
        opt = OptionSpec(name, short_name, description)
        self.options = [o for o in self.options if o != opt]
        self.options.append(opt)
        self.options.sort(key=lambda o: o.name)

    def remove_option(self, name: str = "", short_name: str = "") -> None:
        if not name and not short_name:
            return
        self.options = [
            o for o in self.options
            if not ((name and o.name == name) or (short_name and o.short_name == short_name))
        ]

    def add_subcommand(self, name: str, description: str = "") -> None:
        self.remove_subcommand(name)
        self.subcommands.append(SubCommandSpec(name, description))
        self.subcommands.sort(key=lambda s: s.name)

    def remove_subcommand(self, name: str) -> None:
        self.subcommands = [s for s in self.subcommands if s.name != name]

    def match(self, text: str) -> list[str]:
        """Sub-command names and options starting with ``text``."""
        names = [s.name for s in self.subcommands]
        for opt in self.options:
            names.append(f"--{opt.name}")
            if opt.short_name:
                names.append(f"-{opt.short_name}")
        return sorted(n for n in names if n.startswith(text))

    def usage(self) -> str:
        """Sub-command and option table, or ``""`` when the command has neither."""
        lines: list[str] = []
        if self.subcommands:
            width = max(len(s.name) for s in self.subcommands)
            lines.append("sub commands:")
            lines += [f"  {s.name.ljust(width)}  {s.description}".rstrip() for s in self.subcommands]
        if self.options:
            heads = [
                (f"-{o.short_name}, " if o.short_name else "    ") + f"--{o.name}"
                for o in self.options
            ]
            width = max(len(h) for h in heads)
            lines.append("options:")
            lines += [
                f"  {head.ljust(width)}  {o.description}".rstrip()
                for head, o in zip(heads, self.options)
            ]
        return "\n".join(lines) + "\n" if lines else ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class FunctionCommand(Command):
    def __init__(self, name: str, func: CommandFunc, description: str = ""):
        super().__init__(name, description)
        self.func = func

    def invoke(self, shell: Any, args: list[str]) -> Optional[int]:
        return self.func(shell, args)


class CommandRegistry:
    def __init__(self, commands: Sequence[Command] = ()):
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.insert(command)

    def insert(self, command: Command) -> Command:
        if command.name in self._commands:
            logger.debug("replacing command %s", command.name)
        self._commands[command.name] = command
        return command

    def add(self, name: str, func: CommandFunc, description: str = "") -> Command:
        return self.insert(FunctionCommand(name, func, description))

    def take(self, name: str) -> Optional[Command]:
        return self._commands.pop(name, None)

    def lookup(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def contains(self, name: str) -> bool:
        return name in self._commands

    def names(self) -> list[str]:
        return sorted(self._commands)

    def complete_name(self, prefix: str) -> list[str]:
        return [name for name in self.names() if name.startswith(prefix)]

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return (self._commands[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._commands)
