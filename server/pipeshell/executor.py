"""Run parsed pipeline ranges against a shell session.

Exit requests travel back as :class:`Terminate` values instead of escaping as
exceptions, so every caller has to decide what to do with them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from .errors import SessionExit, WriteToClosedPipeError
from .lexer import TokenKind
from .parser import PipelineRange, Stage
from .registry import CommandRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Continue:
    code: int = 0


@dataclass(frozen=True)
class Terminate:
    code: int = 0


Outcome = Union[Continue, Terminate]


def _as_code(value: Optional[int]) -> int:
    if value is None:
        return 0
    return int(value)


def combine(prev_ok: bool, new_ok: bool, operator: Optional[TokenKind]) -> int:
    """Fold two range results joined by ``&&`` or ``||`` into 0 or 1."""
    if operator is TokenKind.AND:
        return int(not (prev_ok and new_ok))
    if operator is TokenKind.OR:
        return int(not (prev_ok or new_ok))
    raise ValueError(f"not a boundary operator: {operator}")


def _run_stage(stage: Stage, registry: CommandRegistry, session: Any) -> int:
    command = registry.lookup(stage.name)
    if command is None:
        # parse() already checked the name; the registry changed since
        session.write_stderr(f"{stage.name}: command not found\n")
        return 127
    logger.debug("dispatching %s %s", stage.name, stage.args)
    try:
        return _as_code(command.invoke(session, stage.args))
    except WriteToClosedPipeError as exc:
        session.write_stderr(f"{stage.name}: {exc}\n")
        return 1


def run_range(rng: PipelineRange, registry: CommandRegistry, session: Any) -> Outcome:
    """Run every stage of ``rng``; the result is the OR of the stage codes."""
    pipeline = session.pipeline
    pipeline.clear_all()
    pipeline.open()
    code = 0
    try:
        last = len(rng.stages) - 1
        for index, stage in enumerate(rng.stages):
            pipeline.advance(last=index == last)
            try:
                code |= _run_stage(stage, registry, session)
            except SessionExit as exc:
                logger.debug("%s requested exit with code %d", stage.name, exc.code)
                return Terminate(exc.code)
    finally:
        pipeline.close()
    return Continue(code)


def run_all(
    ranges: Sequence[PipelineRange],
    registry: CommandRegistry,
    session: Any,
    short_circuit: bool = False,
) -> Outcome:
    """Run all ranges and fold their results.

    Every range runs, whatever the running result is, unless ``short_circuit``
    is set. With a single range its raw code is returned unchanged.
    """
    if not ranges:
        return Continue(0)
    outcome = run_range(ranges[0], registry, session)
    if isinstance(outcome, Terminate) or len(ranges) == 1:
        return outcome
    result = outcome.code
    for rng in ranges[1:]:
        prev_ok = result == 0
        if short_circuit and (
            (rng.boundary is TokenKind.AND and not prev_ok)
            or (rng.boundary is TokenKind.OR and prev_ok)
        ):
            logger.debug("skipping range after %s", rng.boundary.value)
            result = int(not prev_ok)
            continue
        outcome = run_range(rng, registry, session)
        if isinstance(outcome, Terminate):
            return outcome
        result = combine(prev_ok, outcome.code == 0, rng.boundary)
    return Continue(result)
