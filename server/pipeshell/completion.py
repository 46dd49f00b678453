from __future__ import annotations

import logging
from typing import Optional

from .lexer import split_words
from .registry import CommandRegistry

logger = logging.getLogger(__name__)

_STAGE_BREAKS = ("||", "&&", "|")


class CommandCompleter:
    """Completion candidates for a line editor, bound to one registry."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry
        self._matches: list[str] = []

    def candidates(self, text: str, at_command_position: bool, command: Optional[str] = None) -> list[str]:
        if at_command_position:
            return self.registry.complete_name(text)
        target = self.registry.lookup(command) if command else None
        if target is None:
            return []
        return target.match(text)

    def candidates_for_line(self, line: str, text: str) -> list[str]:
        """Candidates for ``text`` at the end of the partial ``line``."""
        head = line[: len(line) - len(text)] if text and line.endswith(text) else line
        # only the stage being typed matters
        for op in _STAGE_BREAKS:
            head = head.rsplit(op, 1)[-1]
        try:
            words = split_words(head)
        except ValueError:
            return []
        if not words:
            return self.candidates(text, True)
        return self.candidates(text, False, words[0])

    def complete(self, text: str, state: int) -> Optional[str]:
        """``readline`` style: call with state 0, 1, ... until ``None``."""
        if state == 0:
            line = self._line_buffer()
            self._matches = self.candidates_for_line(line if line is not None else text, text)
        if state < len(self._matches):
            return self._matches[state]
        return None

    @staticmethod
    def _line_buffer() -> Optional[str]:
        try:
            import readline
        except ImportError:
            return None
        return readline.get_line_buffer()[: readline.get_endidx()]

    def install(self, key: str = "tab") -> bool:
        try:
            import readline
        except ImportError:
            logger.info("readline unavailable, completion disabled")
            return False
        readline.set_completer(self.complete)
        readline.set_completer_delims(" \t\n|&()")
        readline.parse_and_bind(f"{key}: complete")
        return True
