from __future__ import annotations

from typing import Optional


class ShellError(ValueError):
    """Line-level failure: reported to the user, the shell keeps running."""


class LineSyntaxError(ShellError):
    def __init__(self, quote: str):
        self.quote = quote
        super().__init__(f"syntax error: unbalanced quote {quote}")


class ParseError(ShellError):
    pass


class EmptyCommandLineError(ParseError):
    def __init__(self) -> None:
        super().__init__("parse error: empty command line")


class UnknownCommandError(ParseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name}: command not found")


class EmptyStageError(ParseError):
    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"parse error: missing command before '{operator}'")


class DanglingOperatorError(ParseError):
    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"parse error: missing command after '{operator}'")


class LimitExceededError(ShellError):
    pass


class WriteToClosedPipeError(ShellError):
    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "write to a closed pipe")


class SessionExit(Exception):
    """Raised by ``exit`` to leave the read loop with ``code``."""

    def __init__(self, code: int = 0):
        self.code = code
        super().__init__(f"session exit requested with code {code}")
