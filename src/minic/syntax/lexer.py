# MiniC - lexer
# -------------
# Convierte el texto fuente en una secuencia perezosa de tokens con
# línea/columna (base 1). Los caracteres desconocidos generan un
# LexError y se saltan de uno en uno: el lexer nunca detiene el análisis.
from __future__ import annotations

import logging

from minic.config import DEFAULT_CONFIG
from minic.diagnostics import LEX_ERROR, PHASE_LEX, DiagnosticBag
from minic.syntax.tokens import (
    KEYWORDS,
    MULTI_OPS,
    SINGLE_OPS,
    TK_CHAR_LIT,
    TK_DIRECTIVE,
    TK_EOF,
    TK_FLOAT_LIT,
    TK_IDENT,
    TK_INT_LIT,
    TK_STRING_LIT,
    Token,
)

logger = logging.getLogger(__name__)


def _is_digit(c):
    return "0" <= c <= "9"


def _is_alpha(c):
    return ("a" <= c <= "z") or ("A" <= c <= "Z") or c == "_"


def _is_alnum(c):
    return _is_alpha(c) or _is_digit(c)


class Lexer:
    def __init__(self, source, config=None):
        self.source = source
        self.config = config or DEFAULT_CONFIG
        self.diagnostics = DiagnosticBag(PHASE_LEX)
        self.reset()

    # vuelve al inicio del texto; descarta los diagnósticos anteriores
    def reset(self):
        self.pos = 0
        self.line = 1
        self.col = 1
        self.at_line_start = True
        self.diagnostics = DiagnosticBag(PHASE_LEX)

    def _peek(self, k=0):
        i = self.pos + k
        if i < len(self.source):
            return self.source[i]
        return ""

    # avanza un carácter actualizando línea/columna
    def _advance(self):
        c = self.source[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.col = 1
            self.at_line_start = True
        else:
            self.col += 1
        return c

    def _error(self, line, col, msg):
        self.diagnostics.report(LEX_ERROR, line, col, msg)

    # materializa toda la secuencia (incluye el EOF)
    def tokenize(self):
        return list(self.tokens())

    def tokens(self):
        """Genera los tokens de forma perezosa; el último es siempre EOF."""
        count = 0
        while True:
            tok = self._next_token()
            count += 1
            yield tok
            if tok.kind == TK_EOF:
                logger.debug(
                    "lexer: %d tokens, %d errores léxicos", count, len(self.diagnostics)
                )
                return

    def _skip_trivia(self):
        while self.pos < len(self.source):
            c = self._peek()
            if c == "\n" or c == " " or c == "\t" or c == "\r" or c == "\f" or c == "\v":
                self._advance()
                continue
            if c == "/" and self._peek(1) == "/":
                while self.pos < len(self.source) and self._peek() != "\n":
                    self._advance()
                continue
            if c == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                # sin cierre: el comentario llega hasta el final del texto
                while self.pos < len(self.source):
                    if self._peek() == "*" and self._peek(1) == "/":
                        self._advance()
                        self._advance()
                        break
                    self._advance()
                continue
            return

    def _next_token(self):
        while True:
            self._skip_trivia()
            if self.pos >= len(self.source):
                return Token(TK_EOF, "", self.line, self.col)

            line = self.line
            col = self.col
            start = self.pos
            c = self._peek()

            # directiva de preprocesador: '#' como primer carácter visible de la línea
            if c == "#" and self.at_line_start:
                while self.pos < len(self.source) and self._peek() != "\n":
                    self._advance()
                return Token(TK_DIRECTIVE, self.source[start:self.pos].rstrip(), line, col)

            self.at_line_start = False

            if _is_digit(c) or (c == "." and _is_digit(self._peek(1))):
                return self._number(start, line, col)

            if _is_alpha(c):
                while self.pos < len(self.source) and _is_alnum(self._peek()):
                    self._advance()
                word = self.source[start:self.pos]
                if word in KEYWORDS:
                    return Token(word, word, line, col)
                return Token(TK_IDENT, word, line, col)

            if c == '"':
                return self._quoted('"', TK_STRING_LIT, start, line, col)

            if c == "'":
                return self._quoted("'", TK_CHAR_LIT, start, line, col)

            two = c + self._peek(1)
            if two in MULTI_OPS:
                self._advance()
                self._advance()
                return Token(two, two, line, col)

            if c in SINGLE_OPS:
                self._advance()
                return Token(c, c, line, col)

            # carácter desconocido: se reporta y se salta
            self._advance()
            self._error(line, col, "Carácter no reconocido: " + repr(c))

    # enteros y flotantes: 3.14, 3., .5, 1e5, 2.5E-3
    def _number(self, start, line, col):
        kind = TK_INT_LIT
        while _is_digit(self._peek()):
            self._advance()
        if self._peek() == ".":
            kind = TK_FLOAT_LIT
            self._advance()
            while _is_digit(self._peek()):
                self._advance()
        # el exponente sólo cuenta si le siguen dígitos
        if self._peek() != "" and self._peek() in "eE":
            k = 1
            if self._peek(1) != "" and self._peek(1) in "+-":
                k = 2
            if _is_digit(self._peek(k)):
                kind = TK_FLOAT_LIT
                while k > 0:
                    self._advance()
                    k -= 1
                while _is_digit(self._peek()):
                    self._advance()
        return Token(kind, self.source[start:self.pos], line, col)

    # literal de cadena o de carácter; sin cierre se corta al final de la línea
    def _quoted(self, quote, kind, start, line, col):
        self._advance()
        while self.pos < len(self.source):
            c = self._peek()
            if c == "\n":
                break
            if c == "\\" and self._peek(1) != "" and self._peek(1) != "\n":
                self._advance()
                self._advance()
                continue
            self._advance()
            if c == quote:
                return Token(kind, self.source[start:self.pos], line, col)
        if kind == TK_STRING_LIT:
            self._error(line, col, "Literal de cadena sin cerrar")
        else:
            self._error(line, col, "Literal de carácter sin cerrar")
        return Token(kind, self.source[start:self.pos], line, col)
