"""
JS/TS 词法扫描

Splits a window of source text into tokens, trivia included, so that the
parser can rebuild the text losslessly. Regex literals are told apart from
division by the previous significant token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

WS = "ws"
COMMENT = "comment"
STRING = "string"
TEMPLATE = "template"
NUMBER = "number"
IDENT = "ident"
PUNCT = "punct"
REGEX = "regex"
EOF = "eof"

TRIVIA = (WS, COMMENT)

PUNCTUATORS = sorted(
    [
        ">>>=", "...", "===", "!==", "**=", "<<=", ">>=", ">>>", "&&=", "||=", "??=",
        "=>", "==", "!=", "<=", ">=", "&&", "||", "??", "?.", "++", "--",
        "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "**", "<<", ">>",
        "{", "}", "(", ")", "[", "]", ";", ",", "<", ">", "+", "-", "*", "/",
        "%", "&", "|", "^", "!", "~", "?", ":", "=", ".", "@", "#",
    ],
    key=len,
    reverse=True,
)

# 这些关键字之后的 / 开始正则字面量
KEYWORDS_BEFORE_EXPRESSION = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
})

_NUMBER_RE = re.compile(
    r"0[xXbBoO][0-9a-fA-F_]+n?|(?:\d[\d_]*\.?[\d_]*|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?n?"
)
_WS_RE = re.compile(r"\s+")


@dataclass
class Token:
    type: str
    text: str
    start: int
    end: int
    newline_before: bool = False

    def is_punct(self, *texts: str) -> bool:
        return self.type == PUNCT and self.text in texts

    def is_word(self, *texts: str) -> bool:
        return self.type == IDENT and self.text in texts


def is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$" or (ord(ch) > 127 and ch.isalnum())


def is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$\u200c\u200d"


def scan_string(source: str, pos: int, end: int) -> int:
    """Return the end offset of the quoted string starting at ``pos``."""
    quote = source[pos]
    i = pos + 1
    while i < end:
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n":
            return i
        i += 1
    return end


def scan_template(source: str, pos: int, end: int) -> int:
    """Return the end offset of the template literal starting at ``pos``."""
    i = pos + 1
    while i < end:
        ch = source[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "`":
            return i + 1
        if ch == "$" and source.startswith("{", i + 1):
            i = scan_braced(source, i + 2, end)
            continue
        i += 1
    return end


def scan_braced(source: str, pos: int, end: int) -> int:
    """Skip an expression up to the ``}`` closing an already opened brace."""
    depth = 1
    i = pos
    while i < end:
        ch = source[i]
        if ch in "'\"":
            i = scan_string(source, i, end)
            continue
        if ch == "`":
            i = scan_template(source, i, end)
            continue
        if source.startswith("//", i):
            nl = source.find("\n", i, end)
            i = end if nl == -1 else nl
            continue
        if source.startswith("/*", i):
            close = source.find("*/", i + 2, end)
            i = end if close == -1 else close + 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return end


class ScriptLexer:
    """JS/TS 词法器（窗口 [start, end)）"""

    def __init__(self, source: str, start: int = 0, end: Optional[int] = None):
        self.source = source
        self.pos = start
        self.end = len(source) if end is None else end
        self._prev: Optional[Token] = None

    def reset(self, pos: int, prev: Optional[Token] = None) -> None:
        self.pos = pos
        self._prev = prev

    def _regex_allowed(self) -> bool:
        prev = self._prev
        if prev is None:
            return True
        if prev.type == PUNCT:
            return prev.text not in (")", "]", "}")
        if prev.type == IDENT:
            return prev.text in KEYWORDS_BEFORE_EXPRESSION
        return False

    def _scan_regex(self, pos: int) -> Optional[int]:
        src = self.source
        i = pos + 1
        in_class = False
        while i < self.end:
            ch = src[i]
            if ch == "\n":
                return None
            if ch == "\\":
                i += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                i += 1
                while i < self.end and is_identifier_part(src[i]):
                    i += 1
                return i
            i += 1
        return None

    def next(self) -> Token:
        src = self.source
        pos = self.pos
        if pos >= self.end:
            return Token(EOF, "", pos, pos)
        ch = src[pos]

        if ch.isspace():
            m = _WS_RE.match(src, pos, self.end)
            return self._emit(WS, m.end())
        if src.startswith("//", pos):
            nl = src.find("\n", pos, self.end)
            return self._emit(COMMENT, self.end if nl == -1 else nl)
        if src.startswith("/*", pos):
            close = src.find("*/", pos + 2, self.end)
            return self._emit(COMMENT, self.end if close == -1 else close + 2)
        if ch in "'\"":
            return self._emit(STRING, scan_string(src, pos, self.end))
        if ch == "`":
            return self._emit(TEMPLATE, scan_template(src, pos, self.end))
        if ch.isdigit() or (ch == "." and pos + 1 < self.end and src[pos + 1].isdigit()):
            m = _NUMBER_RE.match(src, pos, self.end)
            return self._emit(NUMBER, m.end() if m and m.end() > pos else pos + 1)
        if is_identifier_start(ch) or ch == "\\":
            i = pos + 1
            while i < self.end and is_identifier_part(src[i]):
                i += 1
            return self._emit(IDENT, i)
        if ch == "/" and self._regex_allowed():
            regex_end = self._scan_regex(pos)
            if regex_end is not None:
                return self._emit(REGEX, regex_end)
        for punct in PUNCTUATORS:
            if src.startswith(punct, pos) and pos + len(punct) <= self.end:
                return self._emit(PUNCT, pos + len(punct))
        return self._emit(PUNCT, pos + 1)

    def _emit(self, type_: str, end: int) -> Token:
        token = Token(type_, self.source[self.pos:end], self.pos, end)
        self.pos = end
        if type_ not in TRIVIA:
            self._prev = token
        return token
