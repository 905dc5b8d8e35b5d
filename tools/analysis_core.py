# tools/analysis_core.py
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# -- Asegura que podamos importar src/minic/... sin instalar el paquete --
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from minic.config import AnalyzerConfig
from minic.diagnostics import (
    ARGUMENT_COUNT_MISMATCH,
    BREAK_OUTSIDE_LOOP,
    FUNCTION_REDEFINITION,
    LEX_ERROR,
    MISSING_BRACE,
    MISSING_CONDITION,
    MISSING_EXPRESSION,
    MISSING_IDENTIFIER,
    MISSING_OPERAND,
    MISSING_PAREN,
    MISSING_SEMICOLON,
    MISSING_TYPE,
    PHASE_SEMANTIC,
    UNDEFINED_FUNCTION,
    UNDEFINED_VARIABLE,
    UNEXPECTED_TOKEN,
    VARIABLE_REDEFINITION,
)
from minic.pipeline import analyze_source
from minic.sema.astviz import DotBuilder
from minic.syntax.lexer import Lexer
from minic.syntax.tokens import (
    LITERAL_KINDS,
    TK_DIRECTIVE,
    TK_EOF,
    TK_IDENT,
    TK_INT_LIT,
    TK_STRING_LIT,
    token_code,
)


# Tokens
def collect_tokens(code: str) -> List[Dict[str, Any]]:
    toks = []
    for t in Lexer(code).tokens():
        if t.kind == TK_EOF:
            break
        toks.append(
            {
                "text": t.lexeme,
                "line": t.line,
                "col": t.column,
                "kind": t.kind,
                "code": token_code(t),
            }
        )
    return toks


# volcado T_* con un token por línea
def token_dump(code: str) -> str:
    out: List[str] = []
    for t in Lexer(code).tokens():
        if t.kind == TK_DIRECTIVE:
            continue
        out.append(token_code(t))
    return "\n".join(out)


# busca token en posición (línea, columna)
def find_token_at(code: str, line: int, col: int):
    for t in Lexer(code).tokens():
        if t.kind == TK_EOF:
            return None
        if t.line == line:
            length = len(t.lexeme)
            if length < 1:
                length = 1
            if col >= t.column and col < (t.column + length):
                return t
        if t.line > line:
            return None
    return None


# hover en posición (línea, columna); usa el resumen de scopes del checker
def hover_at(code: str, line: int, col: int) -> Dict[str, Any]:
    tok = find_token_at(code, line, col)
    if tok is None:
        return {"token": None, "kind": None, "type": None}

    text = tok.lexeme
    if tok.kind in LITERAL_KINDS:
        typ = "int" if tok.kind == TK_INT_LIT else None
        if tok.kind == TK_STRING_LIT:
            typ = "string"
        return {"token": text, "kind": "Literal", "type": typ}
    if tok.kind != TK_IDENT:
        return {"token": text, "kind": "keyword/operator", "type": None}

    result = analyze_source(code, AnalyzerConfig(record_scopes=True))
    best = None
    for scope in result.scopes:
        for s in scope["symbols"]:
            if s["name"] != text or s["line"] is None or s["line"] > line:
                continue
            # la declaración más cercana por encima gana
            if best is None or s["line"] >= best["line"]:
                best = s
        for f in scope.get("functions", []):
            if f["name"] == text:
                return {"token": text, "kind": "function", "type": f["return_type"]}
    if best is not None:
        return {"token": text, "kind": best["kind"], "type": best["type"]}
    return {"token": text, "kind": "identifier", "type": None}


# Análisis principal
def analyze_internal(
    code: str,
    include_ast: bool = True,
    include_scopes: bool = True,
    include_tokens: bool = False,
    options: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    data = dict(options or {})
    if include_scopes:
        data["record_scopes"] = True
    config = AnalyzerConfig.from_mapping(data)
    result = analyze_source(code, config)

    dot = DotBuilder().build(result.program) if include_ast else None

    syntax = []
    for d in result.diagnostics:
        if d.phase != PHASE_SEMANTIC:
            syntax.append(d.to_dict())

    out: Dict[str, Any] = {
        "syntaxErrors": syntax,
        "semanticErrors": [str(d) for d in result.semantic_diagnostics],
        "diagnostics": [d.to_dict() for d in result.diagnostics],
        "astDot": dot,
        "scopes": result.scopes if include_scopes else None,
        "tokens": collect_tokens(code) if include_tokens else None,
        "includes": list(result.program.includes),
    }
    return out


# sugerencias por categoría; los mensajes de la UI van en español
_HINTS = {
    LEX_ERROR: ("Carácter inválido", "Elimina el carácter o cierra el literal."),
    MISSING_SEMICOLON: ("Falta ';'", "Agrega `;` al final de la sentencia."),
    MISSING_TYPE: ("Falta el tipo", "Antepón un tipo: `int`, `float`, `char`, `double` o `void`."),
    MISSING_IDENTIFIER: ("Falta el nombre", "Agrega un identificador después del tipo."),
    MISSING_EXPRESSION: ("Falta la expresión", "Completa el valor, p. ej. `= 0` o `return 0;`."),
    MISSING_OPERAND: ("Falta un operando", "Completa el operando derecho del operador."),
    MISSING_PAREN: ("Paréntesis sin cerrar", "Agrega el `(` o `)` que falta."),
    MISSING_BRACE: ("Llave sin cerrar", "Agrega `}` para cerrar el bloque o la función."),
    MISSING_CONDITION: ("Condición vacía", "Escribe una condición dentro de `( )`."),
    UNEXPECTED_TOKEN: ("Token inesperado", "Revisa la sintaxis cerca de este punto."),
    VARIABLE_REDEFINITION: ("Variable redefinida", "Renómbrala o elimina la declaración repetida."),
    FUNCTION_REDEFINITION: ("Función redefinida", "Deja una sola definición (los prototipos sí pueden repetirse)."),
    UNDEFINED_VARIABLE: ("Variable no declarada", "Declárala antes de su uso en un ámbito visible."),
    UNDEFINED_FUNCTION: ("Función no declarada", "Defínela antes de la llamada, declara un prototipo o incluye su cabecera."),
    BREAK_OUTSIDE_LOOP: ("break fuera de bucle", "Usa `break` sólo dentro de `while` o `for`."),
    ARGUMENT_COUNT_MISMATCH: ("Número de argumentos incorrecto", "Pasa tantos argumentos como parámetros declara la función."),
}


# Quick-Fixes a partir de los diagnósticos estructurados
def suggest_fixes(diagnostics: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    fixes: List[Dict[str, Any]] = []
    i = 0
    while i < len(diagnostics):
        d = diagnostics[i]
        hint = _HINTS.get(d.get("category", ""))
        if hint is not None:
            title, detail = hint
            if d.get("category") == UNDEFINED_FUNCTION and "printf" in d.get("message", ""):
                detail = "Agrega `#include <stdio.h>` al inicio del archivo."
            fixes.append(
                {
                    "kind": "info",
                    "title": title,
                    "detail": detail,
                    "line": d.get("line"),
                    "col": d.get("col"),
                }
            )
        i += 1
    return fixes


# Formateador: reindenta según las llaves reales (ignora las de cadenas y comentarios)
def format_code(code: str, indent_unit: str = "    ") -> str:
    lines = code.split("\n")
    opens_at: Dict[int, int] = {}
    closes_at: Dict[int, int] = {}
    leading_close: Dict[int, int] = {}
    last_line = -1
    for t in Lexer(code).tokens():
        if t.kind == TK_EOF:
            break
        if t.kind == "{":
            opens_at[t.line] = opens_at.get(t.line, 0) + 1
        elif t.kind == "}":
            closes_at[t.line] = closes_at.get(t.line, 0) + 1
            if last_line != t.line:
                leading_close[t.line] = 1
        last_line = t.line

    out: List[str] = []
    indent = 0
    i = 0
    while i < len(lines):
        lineno = i + 1
        text = lines[i].strip()
        level = indent - leading_close.get(lineno, 0)
        if level < 0:
            level = 0
        if text == "":
            out.append("")
        else:
            out.append(indent_unit * level + text)
        indent = indent + opens_at.get(lineno, 0) - closes_at.get(lineno, 0)
        if indent < 0:
            indent = 0
        i += 1
    return "\n".join(out)
