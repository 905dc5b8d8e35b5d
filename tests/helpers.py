from pathlib import Path

from minic.pipeline import analyze_source

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def errors_of(src: str, config=None):
    return [str(d) for d in analyze_source(src, config).diagnostics]


def categories_of(src: str, config=None):
    return [d.category for d in analyze_source(src, config).diagnostics]


def positions_of(src: str, config=None):
    return [(d.category, d.line, d.column) for d in analyze_source(src, config).diagnostics]
