"""Reader and writer for PHP array language files.

Laravel keeps translations as ``lang/<locale>/<name>.php`` files that
``return`` a (possibly nested) array literal::

    <?php

    return [
        'welcome' => 'Welcome',
        'auth' => [
            'failed' => 'These credentials do not match our records.',
        ],
    ];

Only the literal subset such files use is understood: short and long
array syntax, quoted strings (with ``.`` concatenation), numbers,
``true``/``false``/``null`` and comments. Anything needing a PHP runtime
(function calls, constants, variables, heredocs) is rejected with
:class:`FileShapeError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from langtranslator.core.tree import Branch, tree_from_data
from langtranslator.errors import FileShapeError

INDENT = "    "

_IDENT_RE = re.compile(r"[A-Za-z_\\][A-Za-z0-9_\\]*")
_NUMBER_RE = re.compile(r"0[xX][0-9a-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?|\.\d[\d_]*")
_INT_KEY_RE = re.compile(r"0|-?[1-9]\d*")

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}

# Punctuation, longest first.
_PUNCT = ("=>", "[", "]", "(", ")", ",", ";", ".", "-", "+", "=")


@dataclass
class _Token:
    kind: str  # "string" | "number" | "ident" | "punct" | "end"
    value: object
    line: int


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1

    def error(self, msg: str) -> FileShapeError:
        return FileShapeError(f"line {self.line}: {msg}")

    def _advance(self, n: int) -> str:
        chunk = self.text[self.pos:self.pos + n]
        self.line += chunk.count("\n")
        self.pos += n
        return chunk

    def _skip_trivia(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n":
                self._advance(1)
            elif text.startswith("//", self.pos) or (ch == "#" and not text.startswith("#[", self.pos)):
                end = text.find("\n", self.pos)
                self._advance((end if end != -1 else len(text)) - self.pos)
            elif text.startswith("/*", self.pos):
                end = text.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("unterminated comment")
                self._advance(end + 2 - self.pos)
            else:
                break

    def tokens(self) -> list[_Token]:
        result: list[_Token] = []
        text = self.text
        while True:
            self._skip_trivia()
            if self.pos >= len(text) or text.startswith("?>", self.pos):
                result.append(_Token("end", None, self.line))
                return result

            ch = text[self.pos]
            line = self.line
            if ch == "'":
                result.append(_Token("string", self._single_quoted(), line))
            elif ch == '"':
                result.append(_Token("string", self._double_quoted(), line))
            elif text.startswith("<<<", self.pos):
                raise self.error("heredoc/nowdoc strings are not supported")
            elif ch.isdigit() or (ch == "." and text[self.pos + 1:self.pos + 2].isdigit()):
                m = _NUMBER_RE.match(text, self.pos)
                assert m is not None
                raw = self._advance(m.end() - m.start()).replace("_", "")
                if raw[:2] in ("0x", "0X"):
                    value: object = int(raw, 16)
                elif any(c in raw for c in ".eE"):
                    value = float(raw)
                else:
                    value = int(raw)
                result.append(_Token("number", value, line))
            elif ch == "$":
                raise self.error("variables are not supported")
            else:
                m = _IDENT_RE.match(text, self.pos)
                if m:
                    result.append(_Token("ident", self._advance(m.end() - m.start()), line))
                    continue
                for punct in _PUNCT:
                    if text.startswith(punct, self.pos):
                        result.append(_Token("punct", self._advance(len(punct)), line))
                        break
                else:
                    raise self.error(f"unexpected character {ch!r}")

    def _single_quoted(self) -> str:
        text = self.text
        i = self.pos + 1
        out: list[str] = []
        while i < len(text):
            ch = text[i]
            if ch == "\\" and i + 1 < len(text) and text[i + 1] in "\\'":
                out.append(text[i + 1])
                i += 2
            elif ch == "'":
                self._advance(i + 1 - self.pos)
                return "".join(out)
            else:
                out.append(ch)
                i += 1
        raise self.error("unterminated string")

    def _double_quoted(self) -> str:
        text = self.text
        i = self.pos + 1
        out: list[str] = []
        while i < len(text):
            ch = text[i]
            if ch == '"':
                self._advance(i + 1 - self.pos)
                return "".join(out)
            if ch == "$" and i + 1 < len(text) and (text[i + 1] == "{" or text[i + 1].isalpha() or text[i + 1] == "_"):
                raise self.error("variable interpolation is not supported")
            if ch == "\\" and i + 1 < len(text):
                nxt = text[i + 1]
                if nxt in _DOUBLE_QUOTE_ESCAPES:
                    out.append(_DOUBLE_QUOTE_ESCAPES[nxt])
                    i += 2
                    continue
                m = re.match(r"[0-7]{1,3}", text[i + 1:i + 4])
                if m:
                    out.append(chr(int(m.group(), 8) & 0xFF))
                    i += 1 + len(m.group())
                    continue
                m = re.match(r"x([0-9a-fA-F]{1,2})", text[i + 1:i + 4])
                if m:
                    out.append(chr(int(m.group(1), 16)))
                    i += 1 + len(m.group())
                    continue
                m = re.match(r"u\{([0-9a-fA-F]+)\}", text[i + 1:])
                if m:
                    out.append(chr(int(m.group(1), 16)))
                    i += 1 + len(m.group())
                    continue
            out.append(ch)
            i += 1
        raise self.error("unterminated string")


class _Parser:
    def __init__(self, tokens: list[_Token]) -> None:
        self.tokens = tokens
        self.i = 0

    @property
    def current(self) -> _Token:
        return self.tokens[self.i]

    def error(self, msg: str) -> FileShapeError:
        return FileShapeError(f"line {self.current.line}: {msg}")

    def next(self) -> _Token:
        tok = self.tokens[self.i]
        if tok.kind != "end":
            self.i += 1
        return tok

    def accept(self, kind: str, value: object = None) -> bool:
        tok = self.current
        if tok.kind == kind and (value is None or tok.value == value):
            self.i += 1
            return True
        return False

    def expect(self, kind: str, value: object = None) -> _Token:
        tok = self.current
        if tok.kind != kind or (value is not None and tok.value != value):
            want = value if value is not None else kind
            raise self.error(f"expected {want!r}, got {tok.value!r}")
        return self.next()

    def parse_file(self) -> object:
        # Skip leading statements (namespace, use, declare) up to ``return``.
        while not (self.current.kind == "ident" and str(self.current.value).lower() == "return"):
            if self.current.kind == "end":
                raise self.error("file does not return a value")
            while not self.accept("punct", ";"):
                if self.current.kind == "end":
                    raise self.error("file does not return a value")
                self.next()
        self.next()
        value = self.parse_expression()
        if not self.accept("punct", ";") and self.current.kind != "end":
            raise self.error(f"expected ';', got {self.current.value!r}")
        return value

    def parse_expression(self) -> object:
        value = self.parse_term()
        while self.accept("punct", "."):
            right = self.parse_term()
            if isinstance(value, dict) or isinstance(right, dict):
                raise self.error("cannot concatenate arrays")
            value = _php_str(value) + _php_str(right)
        return value

    def parse_term(self) -> object:
        tok = self.current
        if tok.kind in ("string", "number"):
            self.next()
            return tok.value
        if tok.kind == "punct" and tok.value in ("-", "+"):
            self.next()
            num = self.expect("number").value
            return -num if tok.value == "-" else num  # type: ignore[operator]
        if tok.kind == "punct" and tok.value == "[":
            self.next()
            return self.parse_entries("]")
        if tok.kind == "punct" and tok.value == "(":
            self.next()
            value = self.parse_expression()
            self.expect("punct", ")")
            return value
        if tok.kind == "ident":
            word = str(tok.value).lower()
            if word == "array":
                self.next()
                self.expect("punct", "(")
                return self.parse_entries(")")
            if word in ("true", "false", "null"):
                self.next()
                return {"true": True, "false": False, "null": None}[word]
            raise self.error(f"unsupported expression {tok.value!r}")
        raise self.error(f"unexpected {tok.value!r}")

    def parse_entries(self, closing: str) -> dict:
        entries: dict = {}
        next_index = 0
        while not self.accept("punct", closing):
            first = self.parse_expression()
            if self.accept("punct", "=>"):
                key = _php_key(first)
                if key is None:
                    raise self.error("array keys must be strings or integers")
                value = self.parse_expression()
            else:
                key, value = str(next_index), first
            if _INT_KEY_RE.fullmatch(key):
                next_index = max(next_index, int(key) + 1)
            entries[key] = value
            if not self.accept("punct", ","):
                self.expect("punct", closing)
                break
        return entries


def _php_str(value: object) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    return str(value)


def _php_key(value: object) -> str | None:
    if isinstance(value, dict):
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return str(int(value))
    return _php_str(value)


def _strip_open_tag(text: str) -> str:
    stripped = text.lstrip("\ufeff")
    if stripped.startswith("<?php"):
        return stripped[len("<?php"):]
    if stripped.startswith("<?"):
        return stripped[2:]
    raise FileShapeError("missing '<?php' open tag")


def parse_php_value(text: str) -> object:
    """Evaluate the value returned by a PHP lang file, without a PHP runtime."""
    tokens = _Lexer(_strip_open_tag(text)).tokens()
    return _Parser(tokens).parse_file()


def parse_php(text: str) -> Branch:
    """Parse PHP lang file source into a tree.

    Raises:
        FileShapeError: If the source is not a literal array lang file.
    """
    return tree_from_data(parse_php_value(text))


def quote(value: str) -> str:
    """Single-quote a PHP string, escaping backslashes and quotes."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _format_key(key: str) -> str:
    if _INT_KEY_RE.fullmatch(key):
        return key
    return quote(key)


def array_to_php(tree: Branch, depth: int = 0) -> str:
    """Render a tree as a PHP short-syntax array literal."""
    if not tree.children:
        return "[]"
    indent = INDENT * depth
    items = []
    for key, node in tree.items():
        if isinstance(node, Branch):
            rendered = array_to_php(node, depth + 1)
        else:
            rendered = quote(node.value)
        items.append(f"{indent}{INDENT}{_format_key(key)} => {rendered}")
    return "[\n" + ",\n".join(items) + f",\n{indent}]"


def dump_php(tree: Branch) -> str:
    """Serialize a tree as a complete PHP lang file."""
    return "<?php\n\nreturn " + array_to_php(tree) + ";\n"
