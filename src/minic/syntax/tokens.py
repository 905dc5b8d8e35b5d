# MiniC - tokens
# --------------
# Tipos de token y tablas fijas (palabras clave, operadores). Son
# constantes de módulo: se comparten en sólo lectura entre análisis.
from __future__ import annotations

from dataclasses import dataclass

# tipos de token que no son palabra clave ni símbolo
TK_IDENT = "IDENT"
TK_INT_LIT = "INT_LIT"
TK_FLOAT_LIT = "FLOAT_LIT"
TK_CHAR_LIT = "CHAR_LIT"
TK_STRING_LIT = "STRING_LIT"
TK_DIRECTIVE = "DIRECTIVE"
TK_EOF = "EOF"

TYPE_KEYWORDS = frozenset({"int", "float", "char", "double", "void"})
STORAGE_KEYWORDS = frozenset({"static", "const"})
CONTROL_KEYWORDS = frozenset({"if", "else", "while", "for", "return", "break"})

KEYWORDS = TYPE_KEYWORDS | STORAGE_KEYWORDS | CONTROL_KEYWORDS

# palabras clave con las que puede empezar una sentencia (puntos de sincronización)
STATEMENT_KEYWORDS = TYPE_KEYWORDS | STORAGE_KEYWORDS | frozenset(
    {"if", "while", "for", "return", "break"}
)

# operadores de dos caracteres; se resuelven con un carácter de lookahead
MULTI_OPS = ("==", "!=", "<=", ">=", "&&", "||")

SINGLE_OPS = frozenset("+-*/%=<>!&|^~(){}[];,")

LITERAL_KINDS = frozenset({TK_INT_LIT, TK_FLOAT_LIT, TK_CHAR_LIT, TK_STRING_LIT})


@dataclass(frozen=True)
class Token:
    kind: str
    lexeme: str
    line: int
    column: int

    # columna justo después del último carácter del token
    @property
    def end_column(self):
        return self.column + len(self.lexeme)


# nombres T_* usados en el volcado de tokens
_CODE_NAMES = {
    "int": "T_INT",
    "float": "T_FLOAT",
    "char": "T_CHAR",
    "double": "T_DOUBLE",
    "void": "T_VOID",
    "static": "T_STATIC",
    "const": "T_CONST",
    "if": "T_IF",
    "else": "T_ELSE",
    "while": "T_WHILE",
    "for": "T_FOR",
    "return": "T_RETURN",
    "break": "T_BREAK",
    "=": "T_ASSIGNOP",
    "==": "T_EQUALSOP",
    "!=": "T_NOTEQUALSOP",
    "<=": "T_LESSEQOP",
    ">=": "T_GREATEREQOP",
    "<": "T_LESSOP",
    ">": "T_GREATEROP",
    "&&": "T_ANDOP",
    "||": "T_OROP",
    "&": "T_BITANDOP",
    "|": "T_BITOROP",
    "^": "T_BITXOROP",
    "~": "T_BITNOTOP",
    "!": "T_NOTOP",
    "+": "T_PLUSOP",
    "-": "T_MINUSOP",
    "*": "T_MULOP",
    "/": "T_DIVOP",
    "%": "T_MODOP",
    "(": "T_PARENL",
    ")": "T_PARENR",
    "{": "T_BRACEL",
    "}": "T_BRACER",
    "[": "T_BRACKETL",
    "]": "T_BRACKETR",
    ",": "T_COMMA",
    ";": "T_SEMICOLON",
    TK_EOF: "T_EOF",
}


# representa un token con el formato T_* (p. ej. T_IDENTIFIER("x"))
def token_code(tok):
    if tok.kind == TK_IDENT:
        return 'T_IDENTIFIER("' + tok.lexeme + '")'
    if tok.kind == TK_INT_LIT:
        return "T_INTLIT(" + tok.lexeme + ")"
    if tok.kind == TK_FLOAT_LIT:
        return "T_FLOATLIT(" + tok.lexeme + ")"
    if tok.kind == TK_CHAR_LIT:
        return "T_CHARLIT(" + tok.lexeme + ")"
    if tok.kind == TK_STRING_LIT:
        return "T_STRINGLIT(" + tok.lexeme + ")"
    if tok.kind == TK_DIRECTIVE:
        return 'T_DIRECTIVE("' + tok.lexeme + '")'
    return _CODE_NAMES.get(tok.kind, "T_UNKNOWN")
