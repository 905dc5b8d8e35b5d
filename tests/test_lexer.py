from minic.syntax.lexer import Lexer
from minic.syntax.tokens import token_code


def kinds(src):
    return [t.kind for t in Lexer(src).tokens()]


def test_keywords_idents_and_literals():
    toks = Lexer("int x = 42; float y = 3.14; char c = 'a';").tokenize()
    assert [t.kind for t in toks] == [
        "int", "IDENT", "=", "INT_LIT", ";",
        "float", "IDENT", "=", "FLOAT_LIT", ";",
        "char", "IDENT", "=", "CHAR_LIT", ";",
        "EOF",
    ]
    assert toks[3].lexeme == "42"
    assert toks[8].lexeme == "3.14"
    assert toks[13].lexeme == "'a'"


def test_positions_are_one_based():
    toks = Lexer("int a;\n  a = 1;").tokenize()
    assert (toks[0].line, toks[0].column) == (1, 1)
    assert (toks[1].line, toks[1].column) == (1, 5)
    assert (toks[3].line, toks[3].column) == (2, 3)
    assert toks[1].end_column == 6


def test_two_char_operators_use_one_char_lookahead():
    assert kinds("a<=b >= c == d != e && f || g") == [
        "IDENT", "<=", "IDENT", ">=", "IDENT", "==", "IDENT", "!=",
        "IDENT", "&&", "IDENT", "||", "IDENT", "EOF",
    ]
    assert kinds("a<b>c=d!e&f|g^h~i") == [
        "IDENT", "<", "IDENT", ">", "IDENT", "=", "IDENT", "!",
        "IDENT", "&", "IDENT", "|", "IDENT", "^", "IDENT", "~", "IDENT", "EOF",
    ]


def test_comments_and_whitespace_are_skipped():
    src = "int a; // comentario\n/* bloque\n multi */ int b;"
    toks = Lexer(src).tokenize()
    assert [t.kind for t in toks] == ["int", "IDENT", ";", "int", "IDENT", ";", "EOF"]
    assert toks[3].line == 3


def test_string_literal_with_escapes():
    toks = Lexer('printf("c = %d\\n", c);').tokenize()
    assert toks[2].kind == "STRING_LIT"
    assert toks[2].lexeme == '"c = %d\\n"'


def test_directive_only_at_line_start():
    toks = Lexer("#include <stdio.h>\nint main;").tokenize()
    assert toks[0].kind == "DIRECTIVE"
    assert toks[0].lexeme == "#include <stdio.h>"
    assert toks[1].kind == "int"


def test_unknown_character_reports_and_skips():
    lx = Lexer("int a @ = 1;")
    toks = lx.tokenize()
    assert [t.kind for t in toks] == ["int", "IDENT", "=", "INT_LIT", ";", "EOF"]
    assert len(lx.diagnostics) == 1
    d = lx.diagnostics.items[0]
    assert d.category == "LexError"
    assert (d.line, d.column) == (1, 7)


def test_unterminated_string_stops_at_end_of_line():
    lx = Lexer('char s = "abc\nint x;')
    toks = lx.tokenize()
    assert toks[3].kind == "STRING_LIT"
    assert toks[4].kind == "int"
    assert lx.diagnostics.items[0].category == "LexError"


def test_eof_is_last_and_only_once():
    toks = Lexer("").tokenize()
    assert [t.kind for t in toks] == ["EOF"]
    assert (toks[0].line, toks[0].column) == (1, 1)


def test_tokens_are_lazy():
    gen = Lexer("int a; int b;").tokens()
    first = next(gen)
    assert first.kind == "int"


def test_token_codes():
    toks = Lexer('int x = 5; "s"').tokenize()
    assert [token_code(t) for t in toks] == [
        "T_INT",
        'T_IDENTIFIER("x")',
        "T_ASSIGNOP",
        "T_INTLIT(5)",
        "T_SEMICOLON",
        'T_STRINGLIT("s")',
        "T_EOF",
    ]


def test_reset_restarts_the_scan():
    lx = Lexer("int a @ = 1;\nfloat b;")
    first = lx.tokenize()
    assert len(lx.diagnostics) == 1
    lx.reset()
    second = lx.tokenize()
    assert [(t.kind, t.lexeme, t.line, t.column) for t in second] == [
        (t.kind, t.lexeme, t.line, t.column) for t in first
    ]
    assert len(lx.diagnostics) == 1


def test_float_forms():
    toks = Lexer("3. .5 1e5 2.5E-3 7e+2").tokenize()
    assert [t.kind for t in toks] == ["FLOAT_LIT"] * 5 + ["EOF"]
    assert [t.lexeme for t in toks[:-1]] == ["3.", ".5", "1e5", "2.5E-3", "7e+2"]


def test_exponent_needs_digits():
    assert kinds("1e x") == ["INT_LIT", "IDENT", "IDENT", "EOF"]
