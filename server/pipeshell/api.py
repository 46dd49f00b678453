from __future__ import annotations

import io
import logging
import secrets
import threading
import time
from typing import Any, Optional

from fastapi import FastAPI, Header
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import Shell, Terminate
from .config import ShellConfig
from .limits import truncate_output

logger = logging.getLogger(__name__)

CONFIG = ShellConfig.from_env()

app = FastAPI(title="pipeshell API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------
# Error handling (envelope)
# -----------------------------
class APIError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


@app.exception_handler(APIError)
async def api_error_handler(_, exc: APIError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "error": {"code": exc.code, "message": exc.message, "details": exc.details},
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "ok": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "invalid request body",
                "details": {"errors": exc.errors()},
            },
        },
    )


def ok(data: Any):
    return {"ok": True, "data": data}


# -----------------------------
# In-memory session store
# -----------------------------
# token -> session dict
_sessions: dict[str, dict[str, Any]] = {}


def _now() -> float:
    return time.time()


def _new_token() -> str:
    return secrets.token_urlsafe(32)


def build_shell() -> Shell:
    """Shell used for new sessions; streams are swapped in per request."""
    return Shell(config=CONFIG, stdin=io.StringIO(), stdout=io.StringIO(), stderr=io.StringIO())


def _get_session(authorization: Optional[str]) -> tuple[str, dict[str, Any]]:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise APIError("UNAUTHORIZED", "Authorization: Bearer <token> is required", 401)

    token = authorization.split(" ", 1)[1].strip()
    s = _sessions.get(token)
    if not s:
        raise APIError("UNAUTHORIZED", "unknown or expired session, call /session again", 401)

    if s["expiresAt"] < _now():
        _drop_session(token)
        raise APIError("UNAUTHORIZED", "session expired, call /session again", 401)

    s["lastSeenAt"] = _now()
    return token, s


def _drop_session(token: str) -> None:
    s = _sessions.pop(token, None)
    if s:
        s["shell"].close()
        logger.info("session closed")


def _rate_limit_terminal(session: dict[str, Any]):
    now = _now()
    window = session.setdefault("terminalRate", [])
    window[:] = [t for t in window if now - t <= CONFIG.rate_window_sec]
    if len(window) >= CONFIG.rate_max:
        raise APIError("RATE_LIMITED", "too many terminal requests, slow down", 429)
    window.append(now)


# -----------------------------
# Request models
# -----------------------------
class SessionCreateReq(BaseModel):
    client: Optional[dict[str, Any]] = None


class TerminalExecReq(BaseModel):
    command: str = Field(..., min_length=1, max_length=CONFIG.max_input_chars)
    stdin: str = Field(default="", max_length=CONFIG.max_output_bytes)


# -----------------------------
# Routes
# -----------------------------
@app.get("/api/v1/health")
def health():
    return ok({"status": "ok"})


@app.post("/api/v1/session")
def create_session(req: SessionCreateReq = SessionCreateReq()):
    token = _new_token()
    _sessions[token] = {
        "createdAt": _now(),
        "lastSeenAt": _now(),
        "expiresAt": _now() + CONFIG.session_ttl_sec,
        "client": req.client or {},
        "shell": build_shell(),
        "terminated": False,
        "terminalRate": [],
        # one line at a time per session
        "lock": threading.Lock(),
    }
    logger.info("session created")
    return ok({"sessionToken": token, "expiresInSec": CONFIG.session_ttl_sec})


@app.delete("/api/v1/session")
def delete_session(authorization: Optional[str] = Header(None)):
    token, _ = _get_session(authorization)
    _drop_session(token)
    return ok({"message": "session closed"})


@app.get("/api/v1/commands")
def list_commands(authorization: Optional[str] = Header(None)):
    _, session = _get_session(authorization)
    commands = [
        {"name": c.name, "description": c.description, "usage": c.usage()}
        for c in session["shell"].registry
    ]
    return ok({"commands": commands})


@app.post("/api/v1/terminal/exec")
def terminal_exec(req: TerminalExecReq, authorization: Optional[str] = Header(None)):
    _, session = _get_session(authorization)
    _rate_limit_terminal(session)

    shell: Shell = session["shell"]
    with session["lock"]:
        if session["terminated"]:
            raise APIError("SESSION_TERMINATED", "the shell has exited, create a new session", 409)

        shell.stdin = io.StringIO(req.stdin)
        shell.stdout = io.StringIO()
        shell.stderr = io.StringIO()
        outcome = shell.run_line(req.command.strip())
        if isinstance(outcome, Terminate):
            session["terminated"] = True
        out_text = shell.stdout.getvalue()
        err_text = shell.stderr.getvalue()

    stdout, truncated = truncate_output(out_text, CONFIG.max_output_bytes)
    stderr, _ = truncate_output(err_text, CONFIG.max_output_bytes)
    return ok(
        {
            "stdout": stdout,
            "stderr": stderr,
            "exitCode": outcome.code,
            "terminated": session["terminated"],
            "truncated": truncated,
        }
    )
