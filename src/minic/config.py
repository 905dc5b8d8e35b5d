# MiniC - configuración del analizador
# ------------------------------------
# Configuración inmutable compartida (sólo lectura) por todas las
# fases: lexer, parser y checker. Segura para análisis en paralelo.
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

INCLUDE_POLICIES = ("record", "reject")

# funciones que aporta cada cabecera estándar al espacio de funciones
DEFAULT_HEADER_BUILTINS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "stdio.h": ("printf", "scanf", "puts", "putchar", "getchar"),
        "stdlib.h": ("malloc", "free", "exit", "abs", "atoi", "rand", "srand"),
        "math.h": ("sqrt", "pow", "fabs", "sin", "cos"),
    }
)


@dataclass(frozen=True)
class AnalyzerConfig:
    include_policy: str = "record"
    header_builtins: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: DEFAULT_HEADER_BUILTINS
    )
    allow_forward_calls: bool = False
    record_scopes: bool = False

    def __post_init__(self):
        if self.include_policy not in INCLUDE_POLICIES:
            raise ValueError(
                "include_policy inválida: "
                + repr(self.include_policy)
                + " (esperado: "
                + ", ".join(INCLUDE_POLICIES)
                + ")"
            )

    # construye una config a partir de datos planos (dict de la UI, json...)
    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnalyzerConfig":
        known = ("include_policy", "header_builtins", "allow_forward_calls", "record_scopes")
        unknown = [k for k in data if k not in known]
        if unknown:
            raise ValueError("Opciones desconocidas: " + ", ".join(sorted(unknown)))
        kwargs: Dict[str, Any] = {}
        if "include_policy" in data:
            kwargs["include_policy"] = str(data["include_policy"])
        if "header_builtins" in data:
            headers = {}
            for header, names in data["header_builtins"].items():
                headers[str(header)] = tuple(str(n) for n in names)
            kwargs["header_builtins"] = MappingProxyType(headers)
        if "allow_forward_calls" in data:
            kwargs["allow_forward_calls"] = bool(data["allow_forward_calls"])
        if "record_scopes" in data:
            kwargs["record_scopes"] = bool(data["record_scopes"])
        return cls(**kwargs)

    def builtins_for(self, header):
        return self.header_builtins.get(header, ())


DEFAULT_CONFIG = AnalyzerConfig()
