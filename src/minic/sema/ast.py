# clase que representa una ubicación en el código fuente (línea y columna, base 1)
class Loc:
    def __init__(self, line, col):
        self.line = int(line)
        self.col = int(col)

    def __repr__(self):
        return "Loc(" + str(self.line) + ", " + str(self.col) + ")"


def loc_of(tok):
    return Loc(tok.line, tok.column)


# clase base para todos los nodos del ast; todos tienen la loc de su token inicial
class Node:
    def __init__(self, loc):
        self.loc = loc


# programa raíz; sentencias de nivel superior y cabeceras incluidas
class Program(Node):
    def __init__(self, loc, statements=None, includes=None):
        Node.__init__(self, loc)
        self.statements = statements if statements is not None else []
        self.includes = includes if includes is not None else []


# bloque de sentencias (nuevo ámbito)
class Block(Node):
    def __init__(self, loc, statements=None):
        Node.__init__(self, loc)
        self.statements = statements if statements is not None else []


# declaración de variable; type_ann es None si faltó el tipo
class VarDecl(Node):
    def __init__(self, loc, type_ann, name, init, storage=None):
        Node.__init__(self, loc)
        self.type_ann = type_ann
        self.name = name
        self.init = init
        self.storage = storage if storage is not None else []


# parámetro de función con nombre y tipo (None si faltó)
class Param(Node):
    def __init__(self, loc, name, type_ann):
        Node.__init__(self, loc)
        self.name = name
        self.type_ann = type_ann


# declaración de función; body None para un prototipo
class FunctionDecl(Node):
    def __init__(self, loc, name, ret_type, params, body, storage=None, params_complete=True):
        Node.__init__(self, loc)
        self.name = name
        self.ret_type = ret_type
        self.params = params if params is not None else []
        self.body = body
        self.storage = storage if storage is not None else []
        self.params_complete = params_complete

    def is_definition(self):
        return self.body is not None


# sentencia condicional if/else
class IfStmt(Node):
    def __init__(self, loc, cond, then_branch, else_branch):
        Node.__init__(self, loc)
        self.cond = cond
        self.then_branch = then_branch
        self.else_branch = else_branch


# bucle while(cond)
class WhileStmt(Node):
    def __init__(self, loc, cond, body):
        Node.__init__(self, loc)
        self.cond = cond
        self.body = body


# bucle for clásico con init, cond, step y cuerpo
class ForStmt(Node):
    def __init__(self, loc, init, cond, step, body):
        Node.__init__(self, loc)
        self.init = init
        self.cond = cond
        self.step = step
        self.body = body


# return expr?
class ReturnStmt(Node):
    def __init__(self, loc, value):
        Node.__init__(self, loc)
        self.value = value


# break; sale del bucle actual
class BreakStmt(Node):
    def __init__(self, loc):
        Node.__init__(self, loc)


# sentencia de expresión evaluada por efectos
class ExprStmt(Node):
    def __init__(self, loc, expr):
        Node.__init__(self, loc)
        self.expr = expr


# operador binario, p. ej. a + b; la asignación es op '='
class BinaryExpr(Node):
    def __init__(self, loc, op, left, right):
        Node.__init__(self, loc)
        self.op = op
        self.left = left
        self.right = right


# operador unario, p. ej. -x o !x
class UnaryExpr(Node):
    def __init__(self, loc, op, operand):
        Node.__init__(self, loc)
        self.op = op
        self.operand = operand


# llamada a función por nombre; complete es False si la lista de argumentos quedó rota
class CallExpr(Node):
    def __init__(self, loc, name, args=None, complete=True):
        Node.__init__(self, loc)
        self.name = name
        self.args = args if args is not None else []
        self.complete = complete


# identificador simple
class Identifier(Node):
    def __init__(self, loc, name):
        Node.__init__(self, loc)
        self.name = name


# literal int, float, char o string con su clase de literal
class Literal(Node):
    def __init__(self, loc, value, kind):
        Node.__init__(self, loc)
        self.value = value
        self.kind = kind
