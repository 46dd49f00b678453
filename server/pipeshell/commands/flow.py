from __future__ import annotations

from typing import Any


def run_seq(shell: Any, args: list[str]) -> int:
    if not args:
        shell.write_stderr("seq: start end [step] required\n")
        return 1

    try:
        if len(args) == 1:
            start = 1
            end = int(args[0])
            step = 1
        elif len(args) == 2:
            start = int(args[0])
            end = int(args[1])
            step = 1 if end >= start else -1
        else:
            start = int(args[0])
            end = int(args[1])
            step = int(args[2])
    except ValueError:
        shell.write_stderr("seq: numeric arguments required\n")
        return 1

    if step == 0:
        shell.write_stderr("seq: step must not be 0\n")
        return 1

    values: list[str] = []
    i = start
    while (step > 0 and i <= end) or (step < 0 and i >= end):
        values.append(str(i))
        i += step

    if values:
        shell.write("\n".join(values) + "\n")
    return 0
