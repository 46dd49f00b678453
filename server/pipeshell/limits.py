from __future__ import annotations

from .errors import LimitExceededError

MAX_INPUT_CHARS = 1250
MAX_PIPE_STAGES = 8
MAX_OUTPUT_BYTES = 50_000


def check_input_limit(command: str, limit: int = MAX_INPUT_CHARS) -> None:
    if len(command or "") > limit:
        raise LimitExceededError(f"command too long (max {limit})")


def check_stage_limit(stage_count: int, limit: int = MAX_PIPE_STAGES) -> None:
    if stage_count > limit:
        raise LimitExceededError(f"too many pipeline stages (max {limit})")


def truncate_output(text: str, limit: int = MAX_OUTPUT_BYTES) -> tuple[str, bool]:
    raw = (text or "").encode("utf-8")
    if len(raw) <= limit:
        return text or "", False
    clipped = raw[:limit].decode("utf-8", errors="ignore")
    return clipped + "\n...(truncated)\n", True
