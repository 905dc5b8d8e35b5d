# MiniC - pipeline
# ----------------
# Une las fases: texto -> tokens -> AST (+ errores sintácticos) ->
# errores semánticos -> lista combinada. Cada análisis construye sus
# propios lexer/parser/checker; sólo la config se comparte.
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from minic.config import DEFAULT_CONFIG, AnalyzerConfig
from minic.diagnostics import Diagnostic, merge_diagnostics
from minic.sema.ast import Program
from minic.sema.checker import Checker
from minic.syntax.lexer import Lexer
from minic.syntax.parser import Parser

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    program: Program
    diagnostics: List[Diagnostic]
    lex_diagnostics: List[Diagnostic] = field(default_factory=list)
    syntax_diagnostics: List[Diagnostic] = field(default_factory=list)
    semantic_diagnostics: List[Diagnostic] = field(default_factory=list)
    scopes: List[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.diagnostics) == 0


def analyze_source(text: str, config: Optional[AnalyzerConfig] = None) -> AnalysisResult:
    cfg = config or DEFAULT_CONFIG
    lexer = Lexer(text, cfg)
    parser = Parser(lexer.tokens(), cfg)
    program = parser.parse()
    # el checker corre aunque haya errores sintácticos: el AST es parcial pero válido
    checker = Checker(cfg)
    checker.run(program)
    merged = merge_diagnostics(lexer.diagnostics, parser.diagnostics, checker.diagnostics)
    logger.debug(
        "análisis: %d léxicos, %d sintácticos, %d semánticos -> %d",
        len(lexer.diagnostics),
        len(parser.diagnostics),
        len(checker.diagnostics),
        len(merged),
    )
    return AnalysisResult(
        program=program,
        diagnostics=merged,
        lex_diagnostics=list(lexer.diagnostics),
        syntax_diagnostics=list(parser.diagnostics),
        semantic_diagnostics=list(checker.diagnostics),
        scopes=list(checker.scope_report),
    )


def diagnostics_of(text: str, config: Optional[AnalyzerConfig] = None) -> List[Diagnostic]:
    return analyze_source(text, config).diagnostics


def analyze_many(
    sources: Mapping[str, str],
    config: Optional[AnalyzerConfig] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, AnalysisResult]:
    """Analiza varios textos en paralelo.

    Devuelve ``nombre -> AnalysisResult`` en el orden de ``sources``. Cada
    tarea es independiente; el resultado es idéntico al de ejecutarlas en
    secuencia.
    """
    if not sources:
        return {}
    cfg = config or DEFAULT_CONFIG
    logger.info("Analizando %d fuentes", len(sources))
    done: Dict[str, AnalysisResult] = {}
    workers = max_workers if max_workers is not None else min(4, len(sources))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_name = {
            executor.submit(analyze_source, text, cfg): name for name, text in sources.items()
        }
        for future in as_completed(future_to_name):
            name = future_to_name[future]
            done[name] = future.result()
            logger.debug("%s: %d diagnósticos", name, len(done[name].diagnostics))
    results = {name: done[name] for name in sources}
    failed = sum(1 for r in results.values() if not r.ok)
    logger.info("Analizadas %d fuentes, %d con diagnósticos", len(results), failed)
    return results
