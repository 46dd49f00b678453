from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .errors import DanglingOperatorError, EmptyCommandLineError, EmptyStageError, UnknownCommandError
from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

KnownCommand = Callable[[str], bool]


@dataclass(frozen=True)
class Stage:
    tokens: tuple[Token, ...]

    @property
    def name(self) -> str:
        return self.tokens[0].text

    @property
    def args(self) -> list[str]:
        return [token.text for token in self.tokens[1:]]

    @property
    def argv(self) -> list[str]:
        return [token.text for token in self.tokens]


@dataclass
class PipelineRange:
    stages: list[Stage] = field(default_factory=list)
    # operator joining this range to the previous one
    boundary: Optional[TokenKind] = None


def parse(tokens: Sequence[Token], known_command: KnownCommand) -> list[PipelineRange]:
    """Group ``tokens`` into pipeline ranges.

    Every stage's command name is checked with ``known_command`` as soon as the
    stage starts, so a bad line is rejected before anything runs.
    """
    if not tokens:
        raise EmptyCommandLineError()

    ranges: list[PipelineRange] = []
    current = PipelineRange()
    words: list[Token] = []
    pending_operator: Optional[Token] = None

    for token in tokens:
        if token.kind is TokenKind.WORD:
            if not words and not known_command(token.text):
                raise UnknownCommandError(token.text)
            words.append(token)
            pending_operator = None
            continue

        if not words:
            raise EmptyStageError(token.text)
        current.stages.append(Stage(tuple(words)))
        words = []
        pending_operator = token
        if token.kind is TokenKind.PIPE:
            continue
        ranges.append(current)
        current = PipelineRange(boundary=token.kind)

    if pending_operator is not None:
        raise DanglingOperatorError(pending_operator.text)
    current.stages.append(Stage(tuple(words)))
    ranges.append(current)
    logger.debug(
        "parsed %d range(s): %s",
        len(ranges),
        [[stage.argv for stage in rng.stages] for rng in ranges],
    )
    return ranges


def parse_command_line(command: str, known_command: KnownCommand) -> list[PipelineRange]:
    """Tokenize and parse one input line; a blank line gives no ranges."""
    tokens, err = tokenize(command or "")
    err.check()
    if not tokens:
        return []
    return parse(tokens, known_command)
