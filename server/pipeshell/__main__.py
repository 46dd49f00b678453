from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from . import Shell
from .completion import CommandCompleter
from .config import ShellConfig


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="pipeshell", description="interactive command shell")
    parser.add_argument("-c", dest="command", help="run one line and exit")
    parser.add_argument("--prompt", help="prompt text")
    parser.add_argument("--short-circuit", action="store_true", help="skip ranges like a POSIX shell")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = ShellConfig.from_env()
    updates = {}
    if args.prompt is not None:
        updates["prompt"] = args.prompt
    if args.short_circuit:
        updates["short_circuit"] = True
    config = config.model_copy(update=updates)

    with Shell(config=config) as shell:
        if args.command is not None:
            outcome = shell.run_line(args.command)
            return outcome.code
        if sys.stdin.isatty():
            CommandCompleter(shell.registry).install()
        return shell.exec()


if __name__ == "__main__":
    sys.exit(main())
