from __future__ import annotations

from ..registry import CommandFunc, CommandRegistry
from .base import run_clear, run_echo, run_exit, run_false, run_help, run_true
from .flow import run_seq
from .text import run_cat, run_grep, run_head, run_tail, run_wc

COMMANDS: dict[str, tuple[CommandFunc, str]] = {
    "exit": (run_exit, "exit the shell with an optional code"),
    "echo": (run_echo, "print arguments, or copy input when given none"),
    "help": (run_help, "list commands or show help for one"),
    "clear": (run_clear, "clear the screen"),
    "true": (run_true, "do nothing, successfully"),
    "false": (run_false, "do nothing, unsuccessfully"),
    "cat": (run_cat, "copy input to output"),
    "grep": (run_grep, "print input lines containing a pattern"),
    "head": (run_head, "print the first lines of input"),
    "tail": (run_tail, "print the last lines of input"),
    "wc": (run_wc, "count input lines"),
    "seq": (run_seq, "print a sequence of numbers"),
}


def register_builtins(registry: CommandRegistry) -> CommandRegistry:
    for name, (func, description) in COMMANDS.items():
        registry.add(name, func, description)
    for name in ("head", "tail"):
        registry.lookup(name).add_option("lines", "n", "number of lines")
    registry.lookup("grep").add_option("ignore-case", "i", "match case-insensitively")
    registry.lookup("wc").add_option("lines", "l", "count lines")
    return registry
