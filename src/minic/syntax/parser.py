# MiniC - parser descendente recursivo
# ------------------------------------
# Construye el AST a partir de la secuencia perezosa de tokens y reporta
# un diagnóstico por defecto independiente. Recuperación en modo pánico:
# tras un error se suprimen los siguientes hasta el final de la sentencia
# y se descartan tokens hasta un token de sincronización.
from __future__ import annotations

import logging
from collections import deque

from minic.config import DEFAULT_CONFIG
from minic.diagnostics import (
    MISSING_BRACE,
    MISSING_CONDITION,
    MISSING_EXPRESSION,
    MISSING_IDENTIFIER,
    MISSING_OPERAND,
    MISSING_PAREN,
    MISSING_SEMICOLON,
    MISSING_TYPE,
    PHASE_SYNTAX,
    UNEXPECTED_TOKEN,
    DiagnosticBag,
)
from minic.sema.ast import (
    BinaryExpr,
    Block,
    BreakStmt,
    CallExpr,
    ExprStmt,
    ForStmt,
    FunctionDecl,
    Identifier,
    IfStmt,
    Literal,
    Loc,
    Param,
    Program,
    ReturnStmt,
    UnaryExpr,
    VarDecl,
    WhileStmt,
    loc_of,
)
from minic.syntax.tokens import (
    LITERAL_KINDS,
    STATEMENT_KEYWORDS,
    STORAGE_KEYWORDS,
    TK_CHAR_LIT,
    TK_DIRECTIVE,
    TK_EOF,
    TK_FLOAT_LIT,
    TK_IDENT,
    TK_INT_LIT,
    Token,
    TYPE_KEYWORDS,
)

logger = logging.getLogger(__name__)

# niveles de precedencia binaria, de menor a mayor
BINARY_LEVELS = (
    ("||",),
    ("&&",),
    ("|",),
    ("^",),
    ("&",),
    ("==", "!="),
    ("<", ">", "<=", ">="),
    ("+", "-"),
    ("*", "/", "%"),
)

UNARY_OPS = ("-", "+", "!", "~")


def _describe(tok):
    if tok.kind == TK_EOF:
        return "fin de archivo"
    return "'" + tok.lexeme + "'"


def can_start_expression(tok):
    return (
        tok.kind in LITERAL_KINDS
        or tok.kind == TK_IDENT
        or tok.kind == "("
        or tok.kind in UNARY_OPS
    )


class TokenStream:
    """Buffer de lookahead acotado sobre un iterable perezoso de tokens."""

    def __init__(self, tokens):
        self._it = iter(tokens)
        self._buf = deque()
        self._eof = None
        self._last = None
        self.consumed = 0

    def _fill(self, k):
        while len(self._buf) <= k and self._eof is None:
            tok = next(self._it, None)
            if tok is None:
                # secuencia sin EOF explícito: se sintetiza tras el último token
                if self._last is None:
                    tok = Token(TK_EOF, "", 1, 1)
                else:
                    tok = Token(TK_EOF, "", self._last.line, self._last.end_column)
            if tok.kind == TK_EOF:
                self._eof = tok
            self._last = tok
            self._buf.append(tok)

    def peek(self, k=0):
        self._fill(k)
        if k < len(self._buf):
            return self._buf[k]
        return self._eof

    def advance(self):
        tok = self.peek()
        if tok.kind != TK_EOF:
            self._buf.popleft()
            self.consumed += 1
        return tok


class Parser:
    def __init__(self, tokens, config=None):
        self.config = config or DEFAULT_CONFIG
        self.diagnostics = DiagnosticBag(PHASE_SYNTAX)
        self.includes = []
        self.ts = TokenStream(self._filter_directives(tokens))
        self.prev = None
        self.panic = False
        self.unwinding = False
        self.depth = 0
        self.fn_ret_type = None

    # las directivas se procesan al vuelo y no llegan a la gramática
    def _filter_directives(self, tokens):
        for tok in tokens:
            if tok.kind == TK_DIRECTIVE:
                self._directive(tok)
                continue
            yield tok

    def _directive(self, tok):
        text = tok.lexeme[1:].strip()
        if not text.startswith("include"):
            return
        if self.config.include_policy == "reject":
            self.diagnostics.report(
                UNEXPECTED_TOKEN,
                tok.line,
                tok.column,
                "Directiva #include no permitida: " + tok.lexeme,
            )
            return
        header = text[len("include"):].strip()
        if len(header) >= 2 and header[0] in "<\"" and header[-1] in ">\"":
            header = header[1:-1].strip()
        self.includes.append(header)

    # utilidades de tokens
    def _cur(self):
        return self.ts.peek()

    def _peek(self, k):
        return self.ts.peek(k)

    def _check(self, *kinds):
        return self.ts.peek().kind in kinds

    def _advance(self):
        tok = self.ts.advance()
        if tok.kind != TK_EOF:
            self.prev = tok
        return tok

    def _match(self, *kinds):
        if self._check(*kinds):
            return self._advance()
        return None

    # registra un error si no estamos ya en modo pánico
    def _error(self, category, tok, msg):
        if self.panic:
            return
        self.diagnostics.report(category, tok.line, tok.column, msg)
        self.panic = True

    # error de token ausente: se ubica justo después del token anterior
    def _error_after_prev(self, category, msg):
        if self.prev is None:
            self._error(category, self._cur(), msg)
            return
        if self.panic:
            return
        self.diagnostics.report(category, self.prev.line, self.prev.end_column, msg)
        self.panic = True

    def _at_sync_point(self, tok):
        return tok.kind in ("}", TK_EOF) or tok.kind in STATEMENT_KEYWORDS

    # 'tipo ident (' (con calificadores opcionales): cabecera de función
    def _at_function_header(self):
        i = 0
        while self._peek(i).kind in STORAGE_KEYWORDS:
            i += 1
        if not (
            self._peek(i).kind in TYPE_KEYWORDS
            and self._peek(i + 1).kind == TK_IDENT
            and self._peek(i + 2).kind == "("
        ):
            return False
        # sólo cuenta como cabecera si tras la lista de parámetros viene '{'
        i += 3
        depth = 1
        while True:
            k = self._peek(i).kind
            if k == "{":
                return True
            if k == ";" or k == "}" or k == TK_EOF:
                return False
            if k == "(":
                depth += 1
            elif k == ")":
                depth -= 1
                if depth == 0:
                    return self._peek(i + 1).kind == "{"
            i += 1

    # sincronización a nivel de sentencia
    def _sync_statement(self):
        depth = 0
        while not self._check(TK_EOF):
            if depth == 0:
                if self.prev is not None and self.prev.kind == ";":
                    return
                cur = self._cur()
                if cur.kind == "}" or cur.kind in STATEMENT_KEYWORDS:
                    return
            tok = self._advance()
            if tok.kind == "{":
                depth += 1
            elif tok.kind == "}":
                depth -= 1
                if depth == 0:
                    return

    # sincronización a nivel de declaración externa
    def _sync_declaration(self):
        depth = 0
        while not self._check(TK_EOF):
            if depth == 0:
                if self.prev is not None and self.prev.kind in (";", "}"):
                    return
                cur = self._cur()
                if cur.kind in TYPE_KEYWORDS or cur.kind in STORAGE_KEYWORDS:
                    return
            tok = self._advance()
            if tok.kind == "{":
                depth += 1
            elif tok.kind == "}":
                if depth > 0:
                    depth -= 1
                if depth == 0:
                    return

    def _expect_semicolon(self, what, force_insert=False):
        if self._match(";"):
            return True
        if self.panic:
            return False
        cur = self._cur()
        self._error_after_prev(MISSING_SEMICOLON, "Falta ';' después de " + what)
        # inserción: el ';' se da por puesto si lo que sigue es un punto seguro
        if force_insert or cur.line > self.prev.line or self._at_sync_point(cur):
            self.panic = False
        return False

    # programa
    def parse(self):
        statements = []
        while not self._check(TK_EOF):
            start = self.ts.consumed
            statements.extend(self._external())
            if self.ts.consumed == start:
                tok = self._cur()
                self._error(UNEXPECTED_TOKEN, tok, "Token inesperado " + _describe(tok) + " a nivel superior")
                self._advance()
                self.panic = False
            elif self.panic:
                self._sync_declaration()
                self.panic = False
            self.unwinding = False
        # fuerza la lectura del EOF para procesar directivas finales
        self._cur()
        logger.debug(
            "parser: %d declaraciones, %d errores sintácticos",
            len(statements),
            len(self.diagnostics),
        )
        return Program(Loc(1, 1), statements, list(self.includes))

    def _external(self):
        cur = self._cur()
        if cur.kind in TYPE_KEYWORDS or cur.kind in STORAGE_KEYWORDS or cur.kind == TK_IDENT:
            return self._declaration(top_level=True)
        if cur.kind == ";":
            self._advance()
            return []
        if cur.kind == "}":
            self._error(UNEXPECTED_TOKEN, cur, "Llave de cierre '}' sin bloque abierto")
            self._advance()
            return []
        return []

    # declaraciones
    def _declaration(self, top_level=False, in_for=False):
        first = self._cur()
        storage = []
        while self._check(*STORAGE_KEYWORDS):
            storage.append(self._advance().kind)

        cur = self._cur()
        type_ann = None
        if cur.kind in TYPE_KEYWORDS:
            type_ann = self._advance().kind
        elif cur.kind == TK_IDENT and self._peek(1).kind == TK_IDENT:
            self._error(MISSING_TYPE, cur, "Tipo desconocido '" + cur.lexeme + "' en la declaración")
            self._advance()
        elif cur.kind == TK_IDENT:
            self._error(MISSING_TYPE, cur, "Falta el tipo en la declaración de '" + cur.lexeme + "'")
        else:
            self._error(MISSING_TYPE, cur, "Falta el tipo antes de " + _describe(cur))

        cur = self._cur()
        if cur.kind != TK_IDENT:
            self._error(MISSING_IDENTIFIER, cur, "Falta el identificador antes de " + _describe(cur))
            return []
        name_tok = self._advance()

        if self._check("("):
            if top_level:
                return [self._function(first, type_ann, name_tok, storage)]
            self._error(UNEXPECTED_TOKEN, self._cur(), "Declaración de función dentro de un bloque")
            return []
        return self._declarators(first, type_ann, name_tok, storage, in_for)

    def _declarators(self, first, type_ann, name_tok, storage, in_for=False):
        decls = []
        lead = first
        while True:
            init = None
            if self._match("="):
                init = self._initializer()
            decls.append(VarDecl(loc_of(lead), type_ann, name_tok.lexeme, init, storage))
            if self.panic or not self._match(","):
                break
            cur = self._cur()
            if cur.kind != TK_IDENT:
                self._error(MISSING_IDENTIFIER, cur, "Falta el identificador después de ','")
                break
            name_tok = self._advance()
            lead = name_tok
        self._expect_semicolon("la declaración de '" + decls[-1].name + "'", force_insert=in_for)
        return decls

    def _initializer(self):
        cur = self._cur()
        if not can_start_expression(cur):
            self._error(MISSING_EXPRESSION, cur, "Falta la expresión después de '='")
            return None
        return self._expression()

    def _function(self, first, ret_type, name_tok, storage):
        self._advance()  # '('
        reported = len(self.diagnostics)
        params = self._params(name_tok.lexeme)
        # con errores en la cabecera la aridad no es fiable
        params_complete = len(self.diagnostics) == reported
        body = None
        if self._check("{"):
            # el error de la cabecera (si hubo) ya se reportó; el cuerpo es independiente
            self.panic = False
            saved = self.fn_ret_type
            self.fn_ret_type = ret_type
            body = self._block()
            self.fn_ret_type = saved
            self.unwinding = False
            self.panic = False
        else:
            self._expect_semicolon("el prototipo de '" + name_tok.lexeme + "'")
        return FunctionDecl(
            loc_of(first), name_tok.lexeme, ret_type, params, body, storage, params_complete
        )

    def _params(self, fname):
        params = []
        if self._match(")"):
            return params
        if self._check("void") and self._peek(1).kind == ")":
            self._advance()
            self._advance()
            return params
        while True:
            p = self._param()
            if p is not None:
                params.append(p)
            if self._match(","):
                continue
            if self._match(")"):
                break
            self._error_after_prev(
                MISSING_PAREN, "Falta ')' al cerrar los parámetros de '" + fname + "'"
            )
            while not self._check("{", ";", "}", TK_EOF):
                if self._match(")"):
                    break
                self._advance()
            break
        return params

    def _param(self):
        first = self._cur()
        while self._check(*STORAGE_KEYWORDS):
            self._advance()
        cur = self._cur()
        type_ann = None
        if cur.kind in TYPE_KEYWORDS:
            type_ann = self._advance().kind
        elif cur.kind == TK_IDENT and self._peek(1).kind == TK_IDENT:
            self._error(MISSING_TYPE, cur, "Tipo desconocido '" + cur.lexeme + "' en el parámetro")
            self._advance()
        elif cur.kind == TK_IDENT:
            self._error(MISSING_TYPE, cur, "Falta el tipo del parámetro '" + cur.lexeme + "'")
        else:
            self._error(UNEXPECTED_TOKEN, cur, "Se esperaba un parámetro, se encontró " + _describe(cur))
            return None
        cur = self._cur()
        if cur.kind != TK_IDENT:
            self._error(MISSING_IDENTIFIER, cur, "Falta el nombre del parámetro antes de " + _describe(cur))
            return None
        name_tok = self._advance()
        return Param(loc_of(first), name_tok.lexeme, type_ann)

    # bloques y sentencias
    def _block(self):
        lbrace = self._advance()  # '{'
        self.depth += 1
        statements = []
        while True:
            if self.unwinding:
                break
            cur = self._cur()
            if cur.kind == "}":
                self._advance()
                break
            if cur.kind == TK_EOF:
                self.panic = False
                self._error_after_prev(
                    MISSING_BRACE,
                    "Falta '}' al final del bloque (fin de archivo con "
                    + str(self.depth)
                    + " bloque(s) abierto(s))",
                )
                self.unwinding = True
                break
            if self._at_function_header():
                self.panic = False
                name = self._peek_function_name()
                self._error_after_prev(
                    MISSING_BRACE, "Falta '}' antes de la definición de '" + name + "'"
                )
                self.unwinding = True
                break
            statements.extend(self._guarded_statement())
        self.depth -= 1
        return Block(loc_of(lbrace), statements)

    def _peek_function_name(self):
        i = 0
        while self._peek(i).kind in STORAGE_KEYWORDS:
            i += 1
        return self._peek(i + 1).lexeme

    # parsea una sentencia garantizando progreso y resincronizando tras errores
    def _guarded_statement(self):
        start = self.ts.consumed
        result = self._statement()
        if self.ts.consumed == start:
            tok = self._cur()
            self._error(UNEXPECTED_TOKEN, tok, "Token inesperado " + _describe(tok))
            self._advance()
            self.panic = False
        elif self.panic:
            self._sync_statement()
            self.panic = False
        if result is None:
            return []
        if isinstance(result, list):
            return result
        return [result]

    def _statement(self):
        cur = self._cur()
        k = cur.kind
        if k == "{":
            return self._block()
        if k == "if":
            return self._if()
        if k == "while":
            return self._while()
        if k == "for":
            return self._for()
        if k == "return":
            return self._return()
        if k == "break":
            tok = self._advance()
            self._expect_semicolon("'break'")
            return BreakStmt(loc_of(tok))
        if k == ";":
            self._advance()
            return None
        if k == "else":
            self._error(UNEXPECTED_TOKEN, cur, "'else' sin 'if' previo")
            self._advance()
            return None
        if k in TYPE_KEYWORDS or k in STORAGE_KEYWORDS:
            return self._declaration()
        if k == TK_IDENT and self._peek(1).kind == TK_IDENT:
            return self._declaration()
        return self._expr_statement()

    # cuerpo de if/while/for: una sentencia; las declaraciones sueltas van en un bloque
    def _body(self):
        if self.unwinding or self._at_function_header():
            return None
        if self._check("}", TK_EOF):
            # sin cuerpo: la llave pertenece al bloque que encierra
            self._error(UNEXPECTED_TOKEN, self._cur(), "Falta el cuerpo de la sentencia antes de " + _describe(self._cur()))
            self.panic = False
            return None
        start_tok = self._cur()
        stmts = self._guarded_statement()
        if len(stmts) == 1:
            return stmts[0]
        if len(stmts) == 0:
            return None
        return Block(loc_of(start_tok), stmts)

    def _expr_statement(self):
        first = self._cur()
        if not can_start_expression(first):
            self._error(UNEXPECTED_TOKEN, first, "Token inesperado " + _describe(first))
            return None
        expr = self._expression()
        self._expect_semicolon("la expresión")
        return ExprStmt(loc_of(first), expr)

    # '(' cond ')' de if/while
    def _paren_condition(self, keyword):
        if not self._match("("):
            self._error_after_prev(MISSING_PAREN, "Falta '(' después de '" + keyword + "'")
            cond = None
            if can_start_expression(self._cur()):
                cond = self._expression()
            self._recover_to_body()
            return cond
        if self._check(")"):
            self._error(MISSING_CONDITION, self._cur(), "Condición vacía en '" + keyword + "'")
            self._advance()
            self.panic = False
            return None
        cond = self._expression()
        if self._match(")"):
            self.panic = False
            return cond
        self._error_after_prev(
            MISSING_PAREN, "Falta ')' después de la condición de '" + keyword + "'"
        )
        self._recover_to_body()
        return cond

    # descarta hasta el inicio del cuerpo (o consume el ')' pendiente)
    def _recover_to_body(self):
        while not self._check("{", ";", "}", TK_EOF) and self._cur().kind not in STATEMENT_KEYWORDS:
            if self._match(")"):
                break
            self._advance()
        self.panic = False

    def _if(self):
        tok = self._advance()
        cond = self._paren_condition("if")
        then_branch = self._body()
        else_branch = None
        if not self.unwinding and self._match("else"):
            else_branch = self._body()
        return IfStmt(loc_of(tok), cond, then_branch, else_branch)

    def _while(self):
        tok = self._advance()
        cond = self._paren_condition("while")
        body = self._body()
        return WhileStmt(loc_of(tok), cond, body)

    def _for(self):
        tok = self._advance()
        if not self._match("("):
            self._error_after_prev(MISSING_PAREN, "Falta '(' después de 'for'")
            self._recover_to_body()
            return ForStmt(loc_of(tok), None, None, None, self._body())

        init = None
        cur = self._cur()
        if self._match(";"):
            pass
        elif cur.kind in TYPE_KEYWORDS or cur.kind in STORAGE_KEYWORDS:
            decls = self._declaration(in_for=True)
            if len(decls) == 1:
                init = decls[0]
            elif len(decls) > 1:
                init = Block(loc_of(cur), decls)
        elif can_start_expression(cur):
            init = ExprStmt(loc_of(cur), self._expression())
            self._expect_semicolon("la inicialización del 'for'", force_insert=True)
        else:
            self._error(UNEXPECTED_TOKEN, cur, "Token inesperado " + _describe(cur) + " en 'for'")

        cond = None
        if self._match(";"):
            pass
        else:
            if can_start_expression(self._cur()):
                cond = self._expression()
            self._expect_semicolon("la condición del 'for'", force_insert=True)

        step = None
        if not self._check(")") and can_start_expression(self._cur()):
            step = self._expression()
        if self._match(")"):
            self.panic = False
        else:
            self._error_after_prev(MISSING_PAREN, "Falta ')' al cerrar la cabecera del 'for'")
            self._recover_to_body()
        body = self._body()
        return ForStmt(loc_of(tok), init, cond, step, body)

    def _return(self):
        tok = self._advance()
        cur = self._cur()
        if cur.kind == ";":
            rt = self.fn_ret_type
            if rt is not None and rt != "void":
                self._error(
                    MISSING_EXPRESSION,
                    cur,
                    "Falta la expresión del return en una función que retorna '" + rt + "'",
                )
            self._advance()
            return ReturnStmt(loc_of(tok), None)
        value = None
        if can_start_expression(cur):
            value = self._expression()
        self._expect_semicolon("'return'")
        return ReturnStmt(loc_of(tok), value)

    # expresiones
    def _expression(self):
        return self._assignment()

    def _assignment(self):
        left = self._binary(0)
        if not self._check("="):
            return left
        op = self._advance()
        if left is not None and not isinstance(left, Identifier):
            self._error(UNEXPECTED_TOKEN, op, "Destino de asignación inválido")
        cur = self._cur()
        if not can_start_expression(cur):
            self._error(MISSING_EXPRESSION, cur, "Falta la expresión después de '='")
            return left
        right = self._assignment()
        loc = left.loc if left is not None else loc_of(op)
        return BinaryExpr(loc, "=", left, right)

    def _binary(self, level):
        if level == len(BINARY_LEVELS):
            return self._unary()
        ops = BINARY_LEVELS[level]
        left = self._binary(level + 1)
        while self._cur().kind in ops:
            op = self._advance()
            cur = self._cur()
            if not can_start_expression(cur):
                self._error(
                    MISSING_OPERAND,
                    cur,
                    "Falta el operando derecho de '" + op.kind + "' antes de " + _describe(cur),
                )
                return left
            right = self._binary(level + 1)
            loc = left.loc if left is not None else loc_of(op)
            left = BinaryExpr(loc, op.kind, left, right)
        return left

    def _unary(self):
        cur = self._cur()
        if cur.kind in UNARY_OPS:
            op = self._advance()
            nxt = self._cur()
            if not can_start_expression(nxt):
                self._error(
                    MISSING_OPERAND, nxt, "Falta el operando de '" + op.kind + "' antes de " + _describe(nxt)
                )
                return None
            return UnaryExpr(loc_of(op), op.kind, self._unary())
        return self._primary()

    def _primary(self):
        cur = self._cur()
        if cur.kind in LITERAL_KINDS:
            tok = self._advance()
            if tok.kind == TK_INT_LIT:
                return Literal(loc_of(tok), int(tok.lexeme), "int")
            if tok.kind == TK_FLOAT_LIT:
                return Literal(loc_of(tok), float(tok.lexeme), "float")
            if tok.kind == TK_CHAR_LIT:
                return Literal(loc_of(tok), tok.lexeme, "char")
            return Literal(loc_of(tok), tok.lexeme, "string")
        if cur.kind == TK_IDENT:
            tok = self._advance()
            if self._check("("):
                return self._call(tok)
            return Identifier(loc_of(tok), tok.lexeme)
        if cur.kind == "(":
            self._advance()
            inner = None
            if can_start_expression(self._cur()):
                inner = self._expression()
            else:
                self._error(MISSING_EXPRESSION, self._cur(), "Falta la expresión entre paréntesis")
                return None
            if not self._match(")"):
                self._error_after_prev(MISSING_PAREN, "Falta ')' al cerrar la expresión")
            return inner
        self._error(UNEXPECTED_TOKEN, cur, "Se esperaba una expresión, se encontró " + _describe(cur))
        return None

    def _call(self, name_tok):
        self._advance()  # '('
        args = []
        if self._match(")"):
            return CallExpr(loc_of(name_tok), name_tok.lexeme, args)
        complete = False
        while True:
            cur = self._cur()
            if not can_start_expression(cur):
                self._error(MISSING_EXPRESSION, cur, "Falta un argumento en la llamada a '" + name_tok.lexeme + "'")
                break
            args.append(self._expression())
            if self.panic:
                break
            if self._match(","):
                continue
            if self._match(")"):
                complete = True
                break
            self._error_after_prev(
                MISSING_PAREN, "Falta ')' al cerrar la llamada a '" + name_tok.lexeme + "'"
            )
            break
        return CallExpr(loc_of(name_tok), name_tok.lexeme, args, complete)
