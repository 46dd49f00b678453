"""In-process pipes between the stages of one pipeline range.

Two :class:`PipeBuffer` objects are reused for every range a session runs.
Which of them a stage reads from and writes to is tracked by an immutable
:class:`PipeState`, moved along by the pure functions :func:`open_pipeline`,
:func:`advance_stage` and :func:`close_pipeline`. Stage ``n`` always writes to
the buffer that is not holding its own input, and stage ``n + 1`` then reads
exactly that buffer. The last stage of a range writes to the real output.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO


class Endpoint(Enum):
    BUFFER_1 = "buffer1"
    BUFFER_2 = "buffer2"
    STDIN = "stdin"
    STDOUT = "stdout"
    CLOSED = "closed"

    @property
    def is_buffer(self) -> bool:
        return self in (Endpoint.BUFFER_1, Endpoint.BUFFER_2)


@dataclass(frozen=True)
class PipeState:
    input: Endpoint = Endpoint.STDIN
    output: Endpoint = Endpoint.CLOSED
    opened: bool = False


def _other_buffer(endpoint: Endpoint) -> Endpoint:
    return Endpoint.BUFFER_2 if endpoint is Endpoint.BUFFER_1 else Endpoint.BUFFER_1


def open_pipeline() -> PipeState:
    return PipeState(input=Endpoint.STDIN, output=Endpoint.CLOSED, opened=True)


def advance_stage(state: PipeState, last: bool) -> PipeState:
    """Route the ends for the next stage.

    The input moves onto the buffer the previous stage wrote, if any. The
    output goes to the other buffer, or to the real output for the last stage.
    """
    if not state.opened:
        return state
    source = state.output if state.output.is_buffer else state.input
    target = Endpoint.STDOUT if last else _other_buffer(source)
    return PipeState(input=source, output=target, opened=True)


def close_pipeline(state: PipeState) -> PipeState:
    return PipeState()


class TextSource:
    """Line and word reads over anything with ``readline()``.

    Keeps the unread rest of the current line, so a ``read_token()`` followed
    by ``read_line()`` returns the remainder of that line.
    """

    def __init__(self, stream):
        self.stream = stream
        self._pending = ""

    def reset(self) -> None:
        self._pending = ""

    def _next_line(self) -> str:
        if self._pending:
            line, self._pending = self._pending, ""
            return line
        return self.stream.readline()

    def read_line(self) -> Optional[str]:
        line = self._next_line()
        if line == "":
            return None
        return line[:-1] if line.endswith("\n") else line

    def read_token(self) -> Optional[str]:
        while True:
            text = self._next_line()
            if text == "":
                return None
            parts = text.split(None, 1)
            if not parts:
                continue
            self._pending = parts[1] if len(parts) > 1 else ""
            return parts[0]

    def read_all(self) -> str:
        chunks: list[str] = []
        while True:
            line = self._next_line()
            if line == "":
                return "".join(chunks)
            chunks.append(line)


class PipeBuffer:
    """In-memory sink and source with separate write and read cursors.

    A caller-supplied stream is borrowed: it is cleared between ranges but
    never closed by the buffer.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.owned = stream is None
        self.stream: TextIO = io.StringIO() if stream is None else stream
        self._read_pos = 0
        self.source = TextSource(self)

    def write(self, text: str) -> int:
        self.stream.seek(0, io.SEEK_END)
        return self.stream.write(text)

    def flush(self) -> None:
        self.stream.flush()

    def readline(self) -> str:
        self.stream.seek(self._read_pos)
        line = self.stream.readline()
        self._read_pos = self.stream.tell()
        return line

    def getvalue(self) -> str:
        self.stream.seek(0)
        return self.stream.read()

    def clear(self) -> None:
        self.stream.seek(0)
        self.stream.truncate()
        self._read_pos = 0
        self.source.reset()

    def close(self) -> None:
        if self.owned:
            self.stream.close()


class Pipeline:
    def __init__(self, buffer1: Optional[TextIO] = None, buffer2: Optional[TextIO] = None):
        self._buffers: dict[Endpoint, PipeBuffer] = {
            Endpoint.BUFFER_1: PipeBuffer(buffer1),
            Endpoint.BUFFER_2: PipeBuffer(buffer2),
        }
        self.state = PipeState()

    @property
    def opened(self) -> bool:
        return self.state.opened

    def buffer(self, endpoint: Endpoint) -> PipeBuffer:
        return self._buffers[endpoint]

    def clear_all(self) -> None:
        for buf in self._buffers.values():
            buf.clear()

    def open(self) -> None:
        self.state = open_pipeline()

    def advance(self, last: bool) -> None:
        self.state = advance_stage(self.state, last)
        if self.state.output.is_buffer:
            # whatever the stage before last left unread is stale now
            self._buffers[self.state.output].clear()

    def close(self) -> None:
        self.state = close_pipeline(self.state)

    def output_buffer(self) -> Optional[PipeBuffer]:
        if self.opened and self.state.output.is_buffer:
            return self._buffers[self.state.output]
        return None

    def input_buffer(self) -> Optional[PipeBuffer]:
        if self.opened and self.state.input.is_buffer:
            return self._buffers[self.state.input]
        return None

    def release(self) -> None:
        for buf in self._buffers.values():
            buf.close()
