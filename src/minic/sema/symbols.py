# MiniC - símbolos y ámbitos
# --------------------------
# Define los símbolos (var/param/func) y la pila de scopes usada por el
# checker. Los scopes viven en un arreglo y se enlazan por índice de
# padre; las funciones sólo se registran en el scope global.


class RedefinitionError(Exception):
    def __init__(self, name, previous):
        Exception.__init__(self, "Redeclaración en el mismo ámbito: " + name)
        self.name = name
        self.previous = previous


# Símbolos
class Symbol:
    def __init__(self, name, kind, typ, loc=None):
        self.name = name           # nombre visible en el código
        self.kind = kind           # 'var' | 'param' | 'func'
        self.typ = typ             # texto del tipo ('int', 'float', ...) o None si faltó
        self.loc = loc             # ubicación de la declaración
        self.scope_index = None    # índice del scope donde vive

    def to_dict(self):
        return {
            "name": self.name,
            "kind": self.kind,
            "type": self.typ,
            "line": self.loc.line if self.loc is not None else None,
        }


class VarSymbol(Symbol):
    def __init__(self, name, typ=None, loc=None):
        super().__init__(name, kind="var", typ=typ, loc=loc)


class ParamSymbol(VarSymbol):
    # tratamos el parámetro como una var con kind propio
    def __init__(self, name, typ, loc=None):
        super().__init__(name, typ, loc)
        self.kind = "param"


class FunctionSymbol(Symbol):
    def __init__(self, name, ret_typ=None, loc=None):
        super().__init__(name, kind="func", typ=ret_typ, loc=loc)
        self.return_type = ret_typ
        self.params = None         # lista de ParamSymbol; None si no se conoce la aridad
        self.is_definition = False # ya se vio un cuerpo
        self.is_builtin = False
        self.header = None         # cabecera que aportó el builtin


# -----------------------------
# Scopes (ámbitos)
# -----------------------------
class Scope:
    def __init__(self, index, parent=None, owner_kind="block", owner_symbol=None):
        self.index = index
        self.parent = parent           # índice del scope padre (None en el global)
        self.table = {}                # nombre -> Symbol (variables y parámetros)
        self.functions = {}            # nombre -> FunctionSymbol (sólo en el global)
        self.owner_kind = owner_kind   # "global" | "function" | "block"
        self.owner_symbol = owner_symbol

    def declare(self, sym):
        # valida redeclaración en el mismo ámbito
        if sym.name in self.table:
            raise RedefinitionError(sym.name, self.table[sym.name])
        sym.scope_index = self.index
        self.table[sym.name] = sym
        return sym

    # sustituye el símbolo previo (la declaración más reciente gana)
    def replace(self, sym):
        sym.scope_index = self.index
        self.table[sym.name] = sym
        return sym

    def lookup_here(self, name):
        return self.table.get(name, None)

    def summary(self, depth):
        symbols = []
        for name in self.table:
            symbols.append(self.table[name].to_dict())
        out = {"kind": self.owner_kind, "depth": depth, "symbols": symbols}
        if self.owner_symbol is not None:
            out["function"] = self.owner_symbol.name
        if self.owner_kind == "global":
            funcs = []
            for name in self.functions:
                f = self.functions[name]
                funcs.append(
                    {
                        "name": f.name,
                        "return_type": f.return_type,
                        "params": [p.name for p in f.params] if f.params is not None else None,
                        "header": f.header,
                        "builtin": f.is_builtin,
                        "defined": f.is_definition,
                    }
                )
            out["functions"] = funcs
        return out


# Entorno (pila de scopes)
class Env:
    """ Entorno con pila de scopes y utilidades de declaración/resolución. """
    def __init__(self):
        self.stack = []

    @property
    def scope(self):
        return self.stack[len(self.stack) - 1]

    @property
    def global_scope(self):
        return self.stack[0]

    # profundidad del scope actual (0 = global)
    def depth(self):
        return len(self.stack) - 1

    # --- manejo de scopes ---
    def _push(self, kind, owner=None):
        idx = len(self.stack)
        parent = None
        if idx > 0:
            parent = idx - 1
        s = Scope(idx, parent, kind, owner)
        self.stack.append(s)
        return s

    def push_global(self):
        return self._push("global")

    def push_block(self):
        return self._push("block")

    def push_function(self, funsym):
        return self._push("function", funsym)

    def pop(self):
        if len(self.stack) == 0:
            return None
        return self.stack.pop()

    # --- funciones (sólo en el global) ---
    def lookup_function(self, name):
        if len(self.stack) == 0:
            return None
        return self.global_scope.functions.get(name, None)

    def add_function(self, funsym):
        funsym.scope_index = 0
        self.global_scope.functions[funsym.name] = funsym
        return funsym

    # --- resolución ---
    def resolve(self, name):
        """Devuelve (symbol, defining_scope) o (None, None)"""
        if len(self.stack) == 0:
            return None, None
        i = len(self.stack) - 1
        while i is not None:
            s = self.stack[i]
            v = s.lookup_here(name)
            if v is not None:
                return v, s
            i = s.parent
        return None, None

