# cheker semantico: recorre el AST con una pila de scopes
import logging

from minic.config import DEFAULT_CONFIG
from minic.diagnostics import (
    ARGUMENT_COUNT_MISMATCH,
    BREAK_OUTSIDE_LOOP,
    FUNCTION_REDEFINITION,
    PHASE_SEMANTIC,
    UNDEFINED_FUNCTION,
    UNDEFINED_VARIABLE,
    VARIABLE_REDEFINITION,
    DiagnosticBag,
)
from minic.sema.symbols import (
    Env,
    FunctionSymbol,
    ParamSymbol,
    RedefinitionError,
    VarSymbol,
)

logger = logging.getLogger(__name__)


# clase principal del verificador semántico
class Checker:
    def __init__(self, config=None):
        self.config = config or DEFAULT_CONFIG
        self.diagnostics = DiagnosticBag(PHASE_SEMANTIC)
        self.env = Env()
        self.loop_depth = 0
        self.scope_report = []
        self._forward = set()

    # errores formateados "[l:c] Categoría: mensaje"
    @property
    def errors(self):
        return [str(d) for d in self.diagnostics]

    # registra un error con ubicación
    def err(self, loc, category, msg):
        self.diagnostics.report(category, loc.line, loc.col, msg)

    # ejecuta los dos pases: colección (opcional) y chequeo
    def run(self, root):
        if self.config.allow_forward_calls:
            self._collect(root)
        self.visit(root)
        logger.debug(
            "checker: %d errores semánticos, %d scopes registrados",
            len(self.diagnostics),
            len(self.scope_report),
        )
        return self.diagnostics.items

    # recoge los nombres de todas las funciones del programa
    def _collect(self, root):
        i = 0
        while i < len(root.statements):
            s = root.statements[i]
            if s.__class__.__name__ == "FunctionDecl":
                self._forward.add(s.name)
            i += 1

    # declara las funciones que aportan las cabeceras incluidas
    def _declare_builtins(self, includes):
        i = 0
        while i < len(includes):
            header = includes[i]
            names = self.config.builtins_for(header)
            j = 0
            while j < len(names):
                if self.env.lookup_function(names[j]) is None:
                    f = FunctionSymbol(names[j], None)
                    f.is_builtin = True
                    f.header = header
                    self.env.add_function(f)
                j += 1
            i += 1

    # saca el scope actual y, si se pide, guarda su resumen
    def _pop(self):
        depth = self.env.depth()
        s = self.env.pop()
        if s is not None and self.config.record_scopes:
            self.scope_report.append(s.summary(depth))
        return s

    # despacha a visit_* según el tipo de nodo
    def visit(self, node):
        if node is None:
            return None
        name = node.__class__.__name__
        m = getattr(self, "visit_" + name, None)
        if m is not None:
            return m(node)
        return None

    # programa / bloque
    def visit_Program(self, n):
        self.env.push_global()
        self._declare_builtins(n.includes)
        i = 0
        while i < len(n.statements):
            self.visit(n.statements[i])
            i += 1
        self._pop()
        return None

    def visit_Block(self, n):
        self.env.push_block()
        self._visit_list(n.statements)
        self._pop()
        return None

    def _visit_list(self, statements):
        i = 0
        while i < len(statements):
            self.visit(statements[i])
            i += 1

    # sentencia hija de if/while/for: si no es bloque igual abre un ámbito
    def _visit_substatement(self, n):
        if n is None:
            return
        if n.__class__.__name__ == "Block":
            self.visit(n)
            return
        self.env.push_block()
        self.visit(n)
        self._pop()

    # declaraciones
    def visit_VarDecl(self, n):
        sym = VarSymbol(n.name, n.type_ann, n.loc)
        try:
            self.env.scope.declare(sym)
        except RedefinitionError as e:
            prev = e.previous
            where = ""
            if prev.loc is not None:
                where = " (declarada en la línea " + str(prev.loc.line) + ")"
            self.err(
                n.loc,
                VARIABLE_REDEFINITION,
                "Redefinición de la variable '" + n.name + "' en el mismo ámbito" + where,
            )
            self.env.scope.replace(sym)
        # el nombre ya es visible dentro de su propio inicializador
        self.visit(n.init)
        return None

    # funciones
    def visit_FunctionDecl(self, n):
        fun_sym = self.env.lookup_function(n.name)
        if fun_sym is None:
            fun_sym = FunctionSymbol(n.name, n.ret_type, n.loc)
            self.env.add_function(fun_sym)

        if n.body is None:
            # los prototipos nunca chocan entre sí ni con la definición
            self._record_arity(fun_sym, n)
            return None

        if fun_sym.is_definition:
            where = ""
            if fun_sym.loc is not None:
                where = " (definida en la línea " + str(fun_sym.loc.line) + ")"
            self.err(n.loc, FUNCTION_REDEFINITION, "Redefinición de la función '" + n.name + "'" + where)
        else:
            fun_sym.is_definition = True
            fun_sym.is_builtin = False
            fun_sym.header = None
            fun_sym.return_type = n.ret_type
            fun_sym.typ = n.ret_type
            fun_sym.loc = n.loc
            self._record_arity(fun_sym, n)

        self.env.push_function(fun_sym)
        i = 0
        while i < len(n.params):
            p = n.params[i]
            psym = ParamSymbol(p.name, p.type_ann, p.loc)
            try:
                self.env.scope.declare(psym)
            except RedefinitionError:
                self.err(
                    p.loc,
                    VARIABLE_REDEFINITION,
                    "Parámetro duplicado '" + p.name + "' en la función '" + n.name + "'",
                )
            i += 1

        # el cuerpo comparte el scope de los parámetros
        saved = self.loop_depth
        self.loop_depth = 0
        self._visit_list(n.body.statements)
        self.loop_depth = saved
        self._pop()
        return None

    # la primera declaración con parámetros bien formados fija la aridad
    def _record_arity(self, fun_sym, n):
        if fun_sym.params is not None or not n.params_complete:
            return
        params = []
        i = 0
        while i < len(n.params):
            p = n.params[i]
            params.append(ParamSymbol(p.name, p.type_ann, p.loc))
            i += 1
        fun_sym.params = params

    # sentencias
    def visit_IfStmt(self, n):
        self.visit(n.cond)
        self._visit_substatement(n.then_branch)
        self._visit_substatement(n.else_branch)
        return None

    def visit_WhileStmt(self, n):
        self.visit(n.cond)
        self.loop_depth += 1
        self._visit_substatement(n.body)
        self.loop_depth -= 1
        return None

    # maneja el for con sus tres componentes y ámbito propio
    def visit_ForStmt(self, n):
        self.env.push_block()
        init = n.init
        if init is not None and init.__class__.__name__ == "Block":
            # varias declaraciones en la cabecera: viven en el scope del for
            self._visit_list(init.statements)
        else:
            self.visit(init)
        self.visit(n.cond)
        self.visit(n.step)
        self.loop_depth += 1
        self._visit_substatement(n.body)
        self.loop_depth -= 1
        self._pop()
        return None

    def visit_ReturnStmt(self, n):
        self.visit(n.value)
        return None

    # valida uso de break dentro de bucles
    def visit_BreakStmt(self, n):
        if self.loop_depth <= 0:
            self.err(n.loc, BREAK_OUTSIDE_LOOP, "break sólo puede usarse dentro de bucles")
        return None

    # evalúa una expresión independiente por sus efectos
    def visit_ExprStmt(self, n):
        self.visit(n.expr)
        return None

    # expresiones
    def visit_BinaryExpr(self, n):
        # el destino de '=' se resuelve igual que una lectura.
        # cadenas como a + b + c son árboles cargados a la izquierda:
        # se baja por la izquierda con una pila para no agotar la recursión
        spine = []
        node = n
        while node is not None and node.__class__.__name__ == "BinaryExpr":
            spine.append(node)
            node = node.left
        self.visit(node)
        while len(spine) > 0:
            self.visit(spine.pop().right)
        return None

    def visit_UnaryExpr(self, n):
        self.visit(n.operand)
        return None

    def visit_CallExpr(self, n):
        f = self.env.lookup_function(n.name)
        if f is None and n.name not in self._forward:
            self.err(n.loc, UNDEFINED_FUNCTION, "Llamada a función no declarada: '" + n.name + "'")
        elif f is not None and f.params is not None and n.complete and len(n.args) != len(f.params):
            # los builtins de cabecera no tienen aridad conocida (printf es variádica)
            self.err(
                n.loc,
                ARGUMENT_COUNT_MISMATCH,
                "La función '"
                + n.name
                + "' espera "
                + str(len(f.params))
                + " argumento(s), se pasaron "
                + str(len(n.args)),
            )
        i = 0
        while i < len(n.args):
            self.visit(n.args[i])
            i += 1
        return None

    # resuelve un identificador por la cadena de scopes
    def visit_Identifier(self, n):
        sym, _ = self.env.resolve(n.name)
        if sym is None:
            self.err(n.loc, UNDEFINED_VARIABLE, "Uso de variable no declarada: '" + n.name + "'")
        return sym

    def visit_Literal(self, n):
        return None
