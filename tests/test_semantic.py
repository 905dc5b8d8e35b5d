import pytest
from helpers import categories_of, errors_of, positions_of
from minic.config import AnalyzerConfig
from minic.pipeline import analyze_source
from minic.sema.checker import Checker
from minic.syntax.lexer import Lexer
from minic.syntax.parser import Parser


def test_shadowing_in_nested_block_ok():
    src = r"""
    int main() {
      int a = 10;
      {
        int a = 20;
        int b = a;
      }
      return a;
    }
    """
    errs = errors_of(src)
    assert errs == []


def test_redefinition_in_same_scope_err():
    src = r"""
    int main() {
      int a = 1;
      int a = 2;
      return a;
    }
    """
    errs = errors_of(src)
    assert categories_of(src) == ["VariableRedefinition"]
    assert any("Redefinición de la variable 'a'" in e for e in errs)


def test_block_names_torn_down_after_close():
    src = r"""
    int main() {
      { int b = 1; }
      return b;
    }
    """
    assert categories_of(src) == ["UndefinedVariable"]


def test_params_share_scope_with_body():
    src = "int f(int a) { int a = 2; return a; }"
    assert categories_of(src) == ["VariableRedefinition"]


def test_duplicate_parameter_err():
    src = "int f(int a, int a) { return a; }"
    errs = errors_of(src)
    assert categories_of(src) == ["VariableRedefinition"]
    assert any("Parámetro duplicado 'a'" in e for e in errs)


def test_param_visible_in_nested_block():
    src = "int f(int a) { { int b = a; } return a; }"
    assert errors_of(src) == []


def test_global_visible_from_function():
    src = "int g = 1;\nint main() { g = g + 1; return g; }"
    assert errors_of(src) == []


def test_initializer_sees_its_own_name():
    assert errors_of("int main() { int x = x; return 0; }") == []


def test_assignment_target_must_be_declared():
    src = "int main() { y = 3; return 0; }"
    assert positions_of(src) == [("UndefinedVariable", 1, 14)]


def test_undefined_function_err():
    src = "int main() { foo(); return 0; }"
    errs = errors_of(src)
    assert categories_of(src) == ["UndefinedFunction"]
    assert any("'foo'" in e for e in errs)


def test_forward_call_rejected_by_default():
    src = "int main() { return g(); }\nint g() { return 1; }"
    assert categories_of(src) == ["UndefinedFunction"]


def test_forward_call_allowed_by_config():
    src = "int main() { return g(); }\nint g() { return 1; }"
    cfg = AnalyzerConfig(allow_forward_calls=True)
    assert categories_of(src, cfg) == []


def test_prototype_enables_early_call():
    src = "int g();\nint main() { return g(); }\nint g() { return 1; }"
    assert errors_of(src) == []


def test_prototypes_never_conflict():
    src = "int g(int a);\nint g(int a);\nint g(int a) { return a; }"
    assert errors_of(src) == []


def test_function_redefinition_err():
    src = "int g() { return 1; }\nint g() { return 2; }"
    assert positions_of(src) == [("FunctionRedefinition", 2, 1)]


def test_recursion_resolves_own_name():
    src = "int fact(int n) { if (n <= 1) { return 1; } return n * fact(n - 1); }"
    assert errors_of(src) == []


def test_function_and_variable_namespaces_are_disjoint():
    src = "int f() { return 1; }\nint main() { int f = 2; return f + f(); }"
    assert errors_of(src) == []


def test_variable_is_not_callable():
    src = "int main() { int v = 1; return v(); }"
    assert categories_of(src) == ["UndefinedFunction"]


def test_function_name_is_not_a_variable():
    src = "int f() { return 1; }\nint main() { return f; }"
    assert categories_of(src) == ["UndefinedVariable"]


def test_printf_needs_stdio():
    call = 'int main() { printf("%d", 1); return 0; }'
    assert errors_of("#include <stdio.h>\n" + call) == []
    assert categories_of(call) == ["UndefinedFunction"]


def test_custom_header_builtins():
    cfg = AnalyzerConfig(header_builtins={"mylib.h": ("hello",)})
    src = '#include "mylib.h"\nint main() { hello(); return 0; }'
    assert categories_of(src, cfg) == []
    assert categories_of("#include <stdio.h>\nint main() { printf(); return 0; }", cfg) == [
        "UndefinedFunction"
    ]


def test_rejected_include_provides_no_builtins():
    cfg = AnalyzerConfig(include_policy="reject")
    src = '#include <stdio.h>\nint main() { printf("x"); return 0; }'
    assert categories_of(src, cfg) == ["UnexpectedToken", "UndefinedFunction"]


def test_user_definition_of_builtin_is_allowed():
    src = "#include <stdio.h>\nint puts(int s) { return s; }\nint main() { return puts(1); }"
    assert errors_of(src) == []


@pytest.mark.parametrize(
    "body",
    [
        "while (1) { break; }",
        "for (;;) { if (1) { break; } }",
        "while (1) break;",
    ],
)
def test_break_inside_loop_ok(body):
    assert errors_of("void f() { " + body + " }") == []


def test_break_outside_loop_err():
    src = "void f() {\n  if (1) { break; }\n}"
    errs = errors_of(src)
    assert positions_of(src) == [("BreakOutsideLoop", 2, 12)]
    assert any("break sólo puede usarse dentro de bucles" in e for e in errs)


def test_for_header_scope_is_closed_after_loop():
    src = "int main() { for (int i = 0; i < 3; i = i + 1) { } return i; }"
    assert categories_of(src) == ["UndefinedVariable"]


def test_for_header_declaration_visible_in_body():
    src = "int main() { int s = 0; for (int i = 0; i < 3; i = i + 1) { s = s + i; } return s; }"
    assert errors_of(src) == []


def test_unbraced_branch_gets_its_own_scope():
    src = "int main() { if (1) int t = 1; return t; }"
    assert categories_of(src) == ["UndefinedVariable"]


def test_semantic_errors_survive_syntax_errors():
    src = "int main() {\n    int x = 5\n    return y;\n}"
    assert categories_of(src) == ["MissingSemicolon", "UndefinedVariable"]


def test_scope_report_records_closed_scopes():
    src = "int g;\nint main() { int a; { int b; } return 0; }"
    result = analyze_source(src, AnalyzerConfig(record_scopes=True))
    kinds = [s["kind"] for s in result.scopes]
    assert kinds == ["block", "function", "global"]
    block, fn, glob = result.scopes
    assert [s["name"] for s in block["symbols"]] == ["b"]
    assert block["depth"] == 2
    assert [s["name"] for s in fn["symbols"]] == ["a"]
    assert [s["name"] for s in glob["symbols"]] == ["g"]
    assert [f["name"] for f in glob["functions"]] == ["main"]


def test_scope_report_off_by_default():
    assert analyze_source("int main() { return 0; }").scopes == []


def test_checker_errors_are_formatted():
    p = Parser(Lexer("int main() { return q; }").tokens())
    checker = Checker()
    checker.run(p.parse())
    assert checker.errors == ["[1:21] UndefinedVariable: Uso de variable no declarada: 'q'"]


def test_long_left_deep_sum_is_walked_without_recursion():
    terms = " + ".join(["x"] * 1000)
    src = "int main() { int x = 1; int y = " + terms + "; return y + z; }"
    assert positions_of(src) == [("UndefinedVariable", 1, 4043)]


def test_argument_count_mismatch():
    src = "int add(int a, int b) { return a + b; }\nint main() { return add(1); }"
    errs = errors_of(src)
    assert positions_of(src) == [("ArgumentCountMismatch", 2, 21)]
    assert any("espera 2 argumento(s), se pasaron 1" in e for e in errs)


def test_arity_comes_from_prototype():
    src = "int g(int a);\nint main() { return g(1, 2) + g(3); }\nint g(int a) { return a; }"
    assert positions_of(src) == [("ArgumentCountMismatch", 2, 21)]


def test_void_parameter_list_takes_no_arguments():
    src = "int g(void) { return 1; }\nint main() { return g() + g(1); }"
    assert categories_of(src) == ["ArgumentCountMismatch"]


def test_header_builtins_have_no_fixed_arity():
    src = '#include <stdio.h>\nint main() { printf("%d %d", 1, 2); printf("x"); return 0; }'
    assert errors_of(src) == []


def test_broken_call_skips_arity_check():
    src = "int add(int a, int b) { return a + b; }\nvoid f() { int x = add(5; }"
    assert categories_of(src) == ["MissingParen"]


def test_forward_call_arity_not_checked():
    src = "int main() { return g(1, 2, 3); }\nint g() { return 1; }"
    cfg = AnalyzerConfig(allow_forward_calls=True)
    assert categories_of(src, cfg) == []


def test_scope_report_names_owner_and_builtin_header():
    src = "#include <stdio.h>\nint sq(int v) { return v * v; }"
    result = analyze_source(src, AnalyzerConfig(record_scopes=True))
    fn, glob = result.scopes
    assert fn["function"] == "sq"
    by_name = {f["name"]: f for f in glob["functions"]}
    assert by_name["sq"]["params"] == ["v"]
    assert by_name["sq"]["header"] is None
    assert by_name["printf"]["header"] == "stdio.h"
    assert by_name["printf"]["params"] is None
