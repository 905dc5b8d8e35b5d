class DotBuilder:
    def __init__(self):
        self.lines = []
        self.counter = 0

    def nid(self):
        s = "n" + str(self.counter)
        self.counter = self.counter + 1
        return s

    def add(self, s):
        self.lines.append(s)

    def escape(self, s):
        res = ""
        i = 0
        while i < len(s):
            ch = s[i]
            if ch == '"':
                res = res + '\\"'
            elif ch == "\\":
                res = res + "\\\\"
            elif ch == "\n":
                res = res + "\\n"
            else:
                res = res + ch
            i = i + 1
        return res

    def build(self, root):
        self.lines = []
        self.counter = 0
        self.add("digraph AST {")
        self.add("node [shape=box, fontsize=10];")
        if root is not None:
            self._emit(root)
        self.add("}")
        return "\n".join(self.lines)

    # etiquetas con salto de línea real; escape() lo convierte al \n de DOT
    def _label_of(self, node):
        name = node.__class__.__name__
        if name == "FunctionDecl":
            ret = node.ret_type if node.ret_type is not None else "?"
            kind = "Function" if node.body is not None else "Prototype"
            return kind + "\n" + node.name + " : " + ret
        if name == "Param" or name == "VarDecl":
            return (
                name
                + "\n"
                + (node.name or "")
                + " : "
                + (node.type_ann if node.type_ann else "?")
            )
        if name == "Literal":
            return "Literal\n" + str(node.value)
        if name == "CallExpr":
            return "Call\n" + node.name

        # genérico
        if hasattr(node, "op"):
            return name + "\n" + node.op
        if hasattr(node, "name"):
            return name + "\n" + node.name
        return name

    def _children_of(self, node):
        out = []
        n = node.__class__.__name__
        if n == "Program" or n == "Block":
            i = 0
            arr = node.statements
            while i < len(arr):
                out.append(("stmt", arr[i]))
                i = i + 1
        elif n == "VarDecl":
            out.append(("init", node.init))
        elif n == "IfStmt":
            out.append(("cond", node.cond))
            out.append(("then", node.then_branch))
            out.append(("else", node.else_branch))
        elif n == "WhileStmt":
            out.append(("cond", node.cond))
            out.append(("body", node.body))
        elif n == "ForStmt":
            out.append(("init", node.init))
            out.append(("cond", node.cond))
            out.append(("step", node.step))
            out.append(("body", node.body))
        elif n == "ReturnStmt":
            out.append(("value", node.value))
        elif n == "ExprStmt":
            out.append(("expr", node.expr))
        elif n == "UnaryExpr":
            out.append(("expr", node.operand))
        elif n == "BinaryExpr":
            out.append(("L", node.left))
            out.append(("R", node.right))
        elif n == "CallExpr":
            i = 0
            while i < len(node.args):
                out.append(("arg", node.args[i]))
                i = i + 1
        elif n == "FunctionDecl":
            i = 0
            while i < len(node.params):
                out.append(("param", node.params[i]))
                i = i + 1
            out.append(("body", node.body))
        # los hijos ausentes (recuperación de errores) no se dibujan
        return [kid for kid in out if kid[1] is not None]

    def _open(self, node):
        my = self.nid()
        self.add(my + ' [label="' + self.escape(self._label_of(node)) + '"];')
        return my

    # recorrido con pila explícita: las cadenas de binarios pueden ser muy profundas
    def _emit(self, node):
        root = self._open(node)
        # cada marco: [id, hijos, siguiente hijo, id del hijo pendiente de arista]
        stack = [[root, self._children_of(node), 0, None]]
        while len(stack) > 0:
            top = stack[len(stack) - 1]
            if top[3] is not None:
                edge_lbl = top[1][top[2] - 1][0]
                self.add(
                    top[0] + " -> " + top[3] + ' [label="' + self.escape(edge_lbl) + '"];'
                )
                top[3] = None
            if top[2] < len(top[1]):
                ch = top[1][top[2]][1]
                top[2] = top[2] + 1
                child_id = self._open(ch)
                top[3] = child_id
                stack.append([child_id, self._children_of(ch), 0, None])
            else:
                stack.pop()
        return root
