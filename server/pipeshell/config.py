from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

from .limits import MAX_INPUT_CHARS, MAX_OUTPUT_BYTES, MAX_PIPE_STAGES

ENV_PREFIX = "PIPESHELL_"


class ShellConfig(BaseModel):
    prompt: str = "CLI> "
    max_input_chars: int = Field(default=MAX_INPUT_CHARS, ge=1)
    max_pipe_stages: int = Field(default=MAX_PIPE_STAGES, ge=1)
    max_output_bytes: int = Field(default=MAX_OUTPUT_BYTES, ge=1)
    # conventional &&/|| skipping; off keeps every range running
    short_circuit: bool = False
    session_ttl_sec: int = Field(default=7 * 24 * 3600, ge=1)
    rate_window_sec: int = Field(default=5, ge=1)
    rate_max: int = Field(default=25, ge=1)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ShellConfig":
        """Build a config from ``PIPESHELL_<FIELD>`` variables, e.g. ``PIPESHELL_PROMPT``."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls(**values)
