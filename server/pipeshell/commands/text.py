from __future__ import annotations

from typing import Any, Optional


def _read_lines(shell: Any) -> list[str]:
    lines: list[str] = []
    while True:
        line = shell.read_line()
        if line is None:
            return lines
        lines.append(line)


def _write_lines(shell: Any, lines: list[str]) -> None:
    if lines:
        shell.write("\n".join(lines) + "\n")


def run_cat(shell: Any, _args: list[str]) -> int:
    shell.write(shell.read_all())
    return 0


def run_grep(shell: Any, args: list[str]) -> int:
    ignore_case = False
    i = 0
    while i < len(args) and args[i].startswith("-"):
        if args[i] in ("-i", "--ignore-case"):
            ignore_case = True
        i += 1
    if i >= len(args):
        shell.write_stderr("grep: pattern required\n")
        return 2
    pattern = args[i]
    if ignore_case:
        pattern_cmp = pattern.lower()
        lines = [line for line in _read_lines(shell) if pattern_cmp in line.lower()]
    else:
        lines = [line for line in _read_lines(shell) if pattern in line]
    _write_lines(shell, lines)
    return 0 if lines else 1


def _parse_n(args: list[str], default: int = 10) -> tuple[Optional[int], list[str]]:
    if len(args) >= 2 and args[0] in ("-n", "--lines"):
        try:
            return max(0, int(args[1])), args[2:]
        except ValueError:
            return None, args
    return default, args


def run_head(shell: Any, args: list[str]) -> int:
    n, _rest = _parse_n(args, 10)
    if n is None:
        shell.write_stderr(f"head: invalid number of lines: {args[1]}\n")
        return 1
    _write_lines(shell, _read_lines(shell)[:n])
    return 0


def run_tail(shell: Any, args: list[str]) -> int:
    n, _rest = _parse_n(args, 10)
    if n is None:
        shell.write_stderr(f"tail: invalid number of lines: {args[1]}\n")
        return 1
    lines = _read_lines(shell)
    _write_lines(shell, lines[-n:] if n > 0 else [])
    return 0


def run_wc(shell: Any, args: list[str]) -> int:
    rest = [a for a in args if a not in ("-l", "--lines")]
    if rest:
        shell.write_stderr("wc: only -l is supported\n")
        return 1
    shell.write(f"{len(_read_lines(shell))}\n")
    return 0
