"""Split one command line into word and operator tokens.

Quoting follows the usual shell conventions with two flavours:

* ``'...'`` is copied raw. Only ``\\'`` and ``\\\\`` collapse, every other
  backslash sequence is kept as written.
* ``"..."`` is copied cooked. ``\\a \\b \\t \\n \\v \\f \\r`` are interpreted and
  any other escaped character is copied literally.

Outside quotes a backslash copies the next character verbatim. ``|``, ``||``
and ``&&`` are operators only when they stand alone, so ``1||echo`` is one
word.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import LineSyntaxError


class TokenKind(Enum):
    WORD = "word"
    PIPE = "|"
    AND = "&&"
    OR = "||"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str

    @property
    def is_operator(self) -> bool:
        return self.kind is not TokenKind.WORD


class SyntaxErrorKind(Enum):
    OK = 0
    UNBALANCED_QUOTE = 1


@dataclass(frozen=True)
class CommandSyntaxError:
    kind: SyntaxErrorKind = SyntaxErrorKind.OK
    quote: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is SyntaxErrorKind.OK

    def check(self) -> None:
        if not self.ok:
            raise LineSyntaxError(self.quote or "")

    def __str__(self) -> str:
        if self.ok:
            return "ok"
        return f"unbalanced quote: {self.quote}"


SYNTAX_OK = CommandSyntaxError()

# \b is not isspace() but still ends a word
_WHITESPACE = " \t\n\f\r\v\b"
# no grouping support, parentheses only separate words
_BOUNDARIES = "()"
_COOKED_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
}
_OPERATORS = {"|": TokenKind.PIPE, "||": TokenKind.OR, "&&": TokenKind.AND}


def _operator_at(text: str, i: int) -> Optional[str]:
    """The operator starting at ``i`` if it stands alone, else ``None``."""
    for op in ("||", "&&", "|"):
        if text.startswith(op, i):
            end = i + len(op)
            if end == len(text) or text[end] in _WHITESPACE or text[end] in _BOUNDARIES:
                return op
            return None
    return None


def _copy_raw(text: str, i: int, out: list[str]) -> tuple[int, bool]:
    while i < len(text):
        ch = text[i]
        if ch == "'":
            return i + 1, True
        if ch == "\\":
            if i + 1 >= len(text):
                return len(text), False
            nxt = text[i + 1]
            if nxt not in ("\\", "'"):
                out.append("\\")
            out.append(nxt)
            i += 2
            continue
        out.append(ch)
        i += 1
    return i, False


def _copy_cooked(text: str, i: int, out: list[str]) -> tuple[int, bool]:
    while i < len(text):
        ch = text[i]
        if ch == '"':
            return i + 1, True
        if ch == "\\":
            if i + 1 >= len(text):
                return len(text), False
            nxt = text[i + 1]
            out.append(_COOKED_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return i, False


def tokenize(line: str) -> tuple[list[Token], CommandSyntaxError]:
    """Tokenize ``line``; errors are returned, never raised.

    On an unbalanced quote the tokens completed before the open quote are
    returned together with the error.
    """
    text = line or ""
    tokens: list[Token] = []
    chars: list[str] = []
    # a quoted empty string still makes a word
    in_word = False

    def flush() -> None:
        nonlocal in_word
        if in_word:
            tokens.append(Token(TokenKind.WORD, "".join(chars)))
        chars.clear()
        in_word = False

    i = 0
    while i < len(text):
        ch = text[i]
        if ch in _WHITESPACE or ch in _BOUNDARIES:
            flush()
            i += 1
            continue
        if ch == "\\":
            # a trailing backslash is dropped
            if i + 1 < len(text):
                chars.append(text[i + 1])
                in_word = True
            i += 2
            continue
        if ch == "'" or ch == '"':
            copy = _copy_raw if ch == "'" else _copy_cooked
            i, closed = copy(text, i + 1, chars)
            if not closed:
                return tokens, CommandSyntaxError(SyntaxErrorKind.UNBALANCED_QUOTE, ch)
            in_word = True
            continue
        if not in_word and ch in "|&":
            op = _operator_at(text, i)
            if op is not None:
                tokens.append(Token(_OPERATORS[op], op))
                i += len(op)
                continue
        chars.append(ch)
        in_word = True
        i += 1
    flush()
    return tokens, SYNTAX_OK


def split_words(line: str) -> list[str]:
    """Return the token texts of ``line``, raising on unbalanced quotes."""
    tokens, err = tokenize(line)
    err.check()
    return [token.text for token in tokens]
