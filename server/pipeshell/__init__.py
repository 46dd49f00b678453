from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable, Optional, Sequence, TextIO, Union

from .commands import register_builtins
from .config import ShellConfig
from .errors import SessionExit, ShellError, WriteToClosedPipeError
from .executor import Continue, Outcome, Terminate, run_all
from .limits import check_input_limit, check_stage_limit
from .parser import parse_command_line
from .pipeline import Endpoint, Pipeline, TextSource
from .registry import Command, CommandFunc, CommandRegistry, FunctionCommand

__all__ = [
    "Command",
    "CommandRegistry",
    "Continue",
    "FunctionCommand",
    "SessionExit",
    "Shell",
    "ShellConfig",
    "ShellError",
    "Terminate",
    "lines_from",
]

logger = logging.getLogger(__name__)

LineSource = Callable[[], Optional[str]]


def lines_from(lines: Iterable[str]) -> LineSource:
    """A line source yielding ``lines`` and then ``None``."""
    it = iter(lines)
    return lambda: next(it, None)


class Shell:
    """One interactive shell session.

    The session owns its command registry and the two pipe buffers. Buffers
    passed in through ``buffers`` are borrowed and are not closed by
    :meth:`close`.
    """

    def __init__(
        self,
        config: Optional[ShellConfig] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        buffers: Optional[Sequence[TextIO]] = None,
        registry: Optional[CommandRegistry] = None,
        line_source: Optional[LineSource] = None,
    ):
        self.config = config or ShellConfig()
        self.prompt = self.config.prompt
        self.stdout = sys.stdout if stdout is None else stdout
        self.stderr = sys.stderr if stderr is None else stderr
        self.stdin = sys.stdin if stdin is None else stdin
        buffer1, buffer2 = buffers if buffers is not None else (None, None)
        self.pipeline = Pipeline(buffer1, buffer2)
        self.registry = registry if registry is not None else register_builtins(CommandRegistry())
        self.line_source = line_source
        self.last_return_code = 0

    @property
    def stdin(self) -> TextIO:
        return self._stdin

    @stdin.setter
    def stdin(self, stream: TextIO) -> None:
        self._stdin = stream
        self._stdin_source = TextSource(stream)

    # -- commands ---------------------------------------------------------

    def insert_command(
        self,
        command: Union[str, Command],
        func: Optional[CommandFunc] = None,
        description: str = "",
    ) -> Command:
        """Register a command object, or a ``(name, func)`` pair.

        An existing command with the same name is replaced.
        """
        if isinstance(command, Command):
            return self.registry.insert(command)
        if func is None:
            raise TypeError("insert_command() needs a function when given a name")
        return self.registry.add(command, func, description)

    def command(self, name: str) -> Optional[Command]:
        return self.registry.lookup(name)

    def contains(self, name: str) -> bool:
        return self.registry.contains(name)

    def take(self, name: str) -> Optional[Command]:
        return self.registry.take(name)

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    # -- i/o surface used by commands --------------------------------------

    def _output(self) -> TextIO:
        buf = self.pipeline.output_buffer()
        if buf is not None:
            return buf
        if self.pipeline.opened and self.pipeline.state.output is Endpoint.CLOSED:
            raise WriteToClosedPipeError()
        if self.stdout is None:
            raise WriteToClosedPipeError("no output stream available")
        return self.stdout

    def _input(self) -> TextSource:
        buf = self.pipeline.input_buffer()
        return buf.source if buf is not None else self._stdin_source

    def write(self, text: str) -> None:
        self._output().write(text)

    def print(self, *values, sep: str = " ", end: str = "\n") -> None:
        self.write(sep.join(str(v) for v in values) + end)

    def write_stderr(self, text: str) -> None:
        """Write to stderr; never goes through the pipeline."""
        if self.stderr is not None:
            self.stderr.write(text)

    def read_line(self) -> Optional[str]:
        return self._input().read_line()

    def read_token(self) -> Optional[str]:
        return self._input().read_token()

    def read_all(self) -> str:
        return self._input().read_all()

    def exit(self, code: int = 0) -> int:
        raise SessionExit(code)

    # -- execution ----------------------------------------------------------

    def execute(self, command: str) -> Outcome:
        """Run one line; syntax, parse and limit errors raise before any stage runs."""
        check_input_limit(command or "", self.config.max_input_chars)
        ranges = parse_command_line(command or "", self.registry.contains)
        if not ranges:
            return Continue(self.last_return_code)
        check_stage_limit(sum(len(r.stages) for r in ranges), self.config.max_pipe_stages)
        outcome = run_all(ranges, self.registry, self, short_circuit=self.config.short_circuit)
        self.last_return_code = outcome.code
        if self.stdout is not None:
            self.stdout.flush()
        return outcome

    def run_line(self, command: str) -> Outcome:
        """Like :meth:`execute`, with line-level errors reported on stderr."""
        try:
            return self.execute(command)
        except ShellError as exc:
            logger.warning("rejected line %r: %s", command, exc)
            self.write_stderr(f"{exc}\n")
            self.last_return_code = 1
            return Continue(1)

    def _prompt_line(self) -> Optional[str]:
        try:
            return input(self.prompt)
        except EOFError:
            return None
        except KeyboardInterrupt:
            self.write_stderr("\n")
            return ""

    def exec(self, line_source: Optional[LineSource] = None) -> int:
        """Read and run lines until the source is exhausted or ``exit`` runs."""
        next_line = line_source or self.line_source or self._prompt_line
        logger.info("shell loop started")
        while True:
            line = next_line()
            if line is None:
                code = self.last_return_code
                break
            if not line.strip():
                continue
            outcome = self.run_line(line)
            if isinstance(outcome, Terminate):
                code = outcome.code
                break
        logger.info("shell loop finished with code %d", code)
        return code

    def close(self) -> None:
        self.pipeline.release()

    def __enter__(self) -> "Shell":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
