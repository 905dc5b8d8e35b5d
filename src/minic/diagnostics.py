# MiniC - diagnósticos
# --------------------
# Registro de diagnóstico, categorías por fase y el agregador que
# combina/ordena los diagnósticos de lexer, parser y checker.
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

# fases (orden de desempate al ordenar)
PHASE_LEX = "lex"
PHASE_SYNTAX = "syntax"
PHASE_SEMANTIC = "semantic"

PHASE_RANK = {PHASE_LEX: 0, PHASE_SYNTAX: 1, PHASE_SEMANTIC: 2}

# léxicas
LEX_ERROR = "LexError"

# sintácticas
MISSING_SEMICOLON = "MissingSemicolon"
MISSING_TYPE = "MissingType"
MISSING_IDENTIFIER = "MissingIdentifier"
MISSING_EXPRESSION = "MissingExpression"
MISSING_OPERAND = "MissingOperand"
MISSING_PAREN = "MissingParen"
MISSING_BRACE = "MissingBrace"
MISSING_CONDITION = "MissingCondition"
UNEXPECTED_TOKEN = "UnexpectedToken"

# semánticas
VARIABLE_REDEFINITION = "VariableRedefinition"
FUNCTION_REDEFINITION = "FunctionRedefinition"
UNDEFINED_VARIABLE = "UndefinedVariable"
UNDEFINED_FUNCTION = "UndefinedFunction"
BREAK_OUTSIDE_LOOP = "BreakOutsideLoop"
ARGUMENT_COUNT_MISMATCH = "ArgumentCountMismatch"


@dataclass(frozen=True)
class Diagnostic:
    category: str
    line: int
    column: int
    message: str
    phase: str = PHASE_SYNTAX
    severity: str = "error"

    def __str__(self):
        return "[" + str(self.line) + ":" + str(self.column) + "] " + self.category + ": " + self.message

    def key(self):
        return (self.category, self.line, self.column)

    def to_dict(self):
        return {
            "category": self.category,
            "severity": self.severity,
            "phase": self.phase,
            "line": self.line,
            "col": self.column,
            "message": self.message,
        }


# colector append-only usado por cada fase
class DiagnosticBag:
    def __init__(self, phase):
        self.phase = phase
        self.items: List[Diagnostic] = []

    def report(self, category, line, column, message):
        d = Diagnostic(category, max(1, int(line)), max(1, int(column)), message, self.phase)
        self.items.append(d)
        return d

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)


def _sort_key(d: Diagnostic):
    return (d.line, d.column, PHASE_RANK.get(d.phase, len(PHASE_RANK)))


# une grupos de diagnósticos: orden estable por (línea, columna, fase)
# y elimina colisiones exactas (categoría, línea, columna)
def merge_diagnostics(*groups: Iterable[Diagnostic]) -> List[Diagnostic]:
    merged: List[Diagnostic] = []
    for g in groups:
        merged.extend(g)
    merged.sort(key=_sort_key)
    seen = set()
    out: List[Diagnostic] = []
    for d in merged:
        k = d.key()
        if k in seen:
            continue
        seen.add(k)
        out.append(d)
    return out
