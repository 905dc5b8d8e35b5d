import pytest

from helpers import categories_of, positions_of
from minic.config import AnalyzerConfig
from minic.sema.ast import BinaryExpr, ForStmt, FunctionDecl, Identifier, Literal, VarDecl
from minic.syntax.lexer import Lexer
from minic.syntax.parser import Parser, TokenStream


def parse(src, config=None):
    p = Parser(Lexer(src).tokens(), config)
    prog = p.parse()
    return prog, p.diagnostics.items


def test_valid_program_builds_ast():
    prog, diags = parse("int add(int a, int b);\nint add(int a, int b) { return a + b; }")
    assert diags == []
    assert len(prog.statements) == 2
    proto, fn = prog.statements
    assert isinstance(proto, FunctionDecl) and proto.body is None
    assert fn.is_definition()
    assert [p.name for p in fn.params] == ["a", "b"]
    assert [p.type_ann for p in fn.params] == ["int", "int"]


def test_precedence_and_right_assoc_assignment():
    prog, diags = parse("void f() { int a; int b; a = b = 1 + 2 * 3; }")
    assert diags == []
    stmt = prog.statements[0].body.statements[2]
    e = stmt.expr
    assert isinstance(e, BinaryExpr) and e.op == "="
    assert isinstance(e.left, Identifier) and e.left.name == "a"
    inner = e.right
    assert inner.op == "=" and inner.left.name == "b"
    plus = inner.right
    assert plus.op == "+"
    assert isinstance(plus.left, Literal) and plus.left.value == 1
    assert plus.right.op == "*"


def test_logical_binds_looser_than_comparison():
    prog, _ = parse("int x = 1 < 2 && 3 == 3 || 0;")
    init = prog.statements[0].init
    assert init.op == "||"
    assert init.left.op == "&&"
    assert init.left.left.op == "<"
    assert init.left.right.op == "=="


def test_comma_declarations_and_storage():
    prog, diags = parse("static const int a = 1, b, c = a;")
    assert diags == []
    names = [d.name for d in prog.statements]
    assert names == ["a", "b", "c"]
    assert all(isinstance(d, VarDecl) for d in prog.statements)
    assert prog.statements[0].storage == ["static", "const"]
    assert prog.statements[1].init is None


def test_for_with_declaration_init():
    prog, diags = parse("void f() { for (int i = 0; i < 3; i = i + 1) { break; } }")
    assert diags == []
    loop = prog.statements[0].body.statements[0]
    assert isinstance(loop, ForStmt)
    assert isinstance(loop.init, VarDecl) and loop.init.name == "i"


def test_includes_are_recorded():
    prog, diags = parse('#include <stdio.h>\n#include "mine.h"\nint x;')
    assert diags == []
    assert prog.includes == ["stdio.h", "mine.h"]


def test_include_rejected_by_policy():
    cfg = AnalyzerConfig(include_policy="reject")
    prog, diags = parse("#include <stdio.h>\nint x;", cfg)
    assert [(d.category, d.line, d.column) for d in diags] == [("UnexpectedToken", 1, 1)]
    assert prog.includes == []


def test_missing_semicolon_is_inserted():
    src = "int main() {\n    int x = 5\n    return x;\n}\n"
    assert positions_of(src) == [("MissingSemicolon", 2, 14)]


def test_missing_semicolon_with_same_line_garbage_resyncs():
    src = "void f() { int x = 5 6; int y = 2; y = x; }"
    assert categories_of(src) == ["MissingSemicolon"]


def test_missing_type_keeps_declaration():
    src = "z = 10;\nint main() { return z; }"
    assert positions_of(src) == [("MissingType", 1, 1)]


def test_unknown_type_name_is_missing_type():
    src = "integer x = 5;\nint main() { return x; }"
    assert positions_of(src) == [("MissingType", 1, 1)]


def test_missing_identifier():
    assert positions_of("int = 20;\nint y;") == [("MissingIdentifier", 1, 5)]


def test_missing_expression_after_assign():
    assert positions_of("int a = ;") == [("MissingExpression", 1, 9)]


def test_missing_expression_in_non_void_return():
    assert positions_of("int f() { return; }") == [("MissingExpression", 1, 17)]
    assert positions_of("void g() { return; }") == []


def test_missing_operand():
    assert positions_of("int b = 5 + ;") == [("MissingOperand", 1, 13)]
    assert positions_of("int c = -;") == [("MissingOperand", 1, 10)]


def test_one_diagnostic_per_statement():
    src = "void f() { int a = 5 + * 3; int b = 1; }"
    assert categories_of(src) == ["MissingOperand"]


def test_missing_paren_in_parameter_list():
    src = "int add(int a, int b {\n    return a + b;\n}\n"
    assert positions_of(src) == [("MissingParen", 1, 21)]


def test_missing_paren_in_call_keeps_call():
    src = "int add(int a, int b) { return a + b; }\nvoid f() { int x = add(5, 10; }"
    assert categories_of(src) == ["MissingParen"]


def test_missing_open_paren_after_if():
    src = "void f() { int x = 1; if x > 0) { x = 2; } }"
    assert categories_of(src) == ["MissingParen"]


def test_missing_condition():
    src = "void f() {\n    if () { return; }\n    while () { }\n}"
    assert positions_of(src) == [("MissingCondition", 2, 9), ("MissingCondition", 3, 12)]


def test_missing_brace_at_eof():
    src = "int main() {\n    int x = 1;\n"
    assert positions_of(src) == [("MissingBrace", 2, 15)]


def test_missing_brace_before_next_function():
    src = (
        "void f() {\n"
        "    int x = 1;\n"
        "\n"
        "int g() {\n"
        "    return 2;\n"
        "}\n"
        "int main() { return g(); }\n"
    )
    assert positions_of(src) == [("MissingBrace", 2, 15)]


def test_missing_brace_in_nested_block_reported_once():
    src = "void f() {\n    {\n        int x = 1;\n}\nint g() { return 0; }\n"
    assert positions_of(src) == [("MissingBrace", 4, 2)]


def test_local_prototype_is_one_error_not_missing_brace():
    src = "int main() { int g(int a); return 0; }"
    assert positions_of(src) == [("UnexpectedToken", 1, 19)]


def test_header_with_broken_params_still_closes_block():
    src = "void f() {\n    int x = 1;\n\nint g(int a {\n    return a;\n}\n"
    assert categories_of(src) == ["MissingBrace", "MissingParen"]


def test_stray_close_brace_at_top_level():
    assert positions_of("int a;\n}\nint b;") == [("UnexpectedToken", 2, 1)]


def test_forward_progress_on_unexpected_token():
    src = "int x;\nvoid f() { ) x = 1; }"
    assert categories_of(src) == ["UnexpectedToken"]


@pytest.mark.parametrize(
    "src",
    [
        ")))(((}}}{{{ ;;; int",
        "int f( { { {",
        "if while for return break else",
        "int x = (((;",
        "void f() { for ( ; ; }",
        "int",
        "",
    ],
)
def test_garbage_always_terminates(src):
    prog, diags = parse(src)
    assert prog is not None
    if src.strip() == "":
        assert diags == []


def test_token_stream_peek_and_advance():
    ts = TokenStream(Lexer("int a;").tokens())
    assert ts.peek().kind == "int"
    assert ts.peek(2).kind == ";"
    assert ts.peek(10).kind == "EOF"
    ts.advance()
    assert ts.peek().kind == "IDENT"
    assert ts.consumed == 1
    ts.advance()
    ts.advance()
    assert ts.advance().kind == "EOF"
    assert ts.advance().kind == "EOF"
    assert ts.consumed == 3


def test_token_stream_synthesizes_eof():
    toks = Lexer("int a").tokenize()[:-1]
    ts = TokenStream(toks)
    ts.advance()
    ts.advance()
    eof = ts.peek()
    assert eof.kind == "EOF"
    assert (eof.line, eof.column) == (1, 6)
