# app.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import streamlit as st

# --- Rutas ---
ROOT = Path(__file__).resolve().parents[1]
TOOLS = ROOT / "tools"
if str(TOOLS) not in sys.path:
    sys.path.insert(0, str(TOOLS))

from analysis_core import analyze_internal, suggest_fixes, hover_at, format_code, token_dump  # noqa

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

# -----------------------------
# Estilos y estado base
# -----------------------------
st.set_page_config(page_title="MiniC Playground", layout="wide")

if "code" not in st.session_state:
    st.session_state.code = (
        "#include <stdio.h>\n\nint main()\n{\n    int a = 10;\n    printf(\"%d\\n\", a);\n    return 0;\n}\n"
    )
if "last_sample" not in st.session_state:
    st.session_state.last_sample = "(ninguno)"

st.markdown(
    """
    <style>
      :root { --panel:#111827; --muted:#1f2937; --acc:#22c55e; --err:#ef4444; --txt:#e5e7eb; --sub:#9ca3af; }
      .title {
        padding:8px 14px; border-radius:10px; background: linear-gradient(90deg, #22c55e, #06b6d4);
        color:#0b1220; font-weight:800; display:inline-block;
      }
      .ok  { background: rgba(34,197,94,.15); border-left:4px solid var(--acc); padding:10px; border-radius:8px; }
      .metric-box { border:1px solid var(--muted); border-radius:12px; padding:12px; text-align:center; }
      .metric-val { font-size:22px; font-weight:800; }
      .metric-lbl { font-size:12px; color:var(--sub); }
    </style>
    """,
    unsafe_allow_html=True,
)

st.markdown('<div class="title">MiniC Playground</div>', unsafe_allow_html=True)
st.caption("Front end de MiniC: diagnósticos, tokens, ámbitos, quick-fixes y AST")

# -----------------------------
# Sidebar: selector de fixtures + opciones del analizador
# -----------------------------
fixtures_dir = ROOT / "tests" / "fixtures"


def _list_sources() -> List[str]:
    """Devuelve rutas relativas a ROOT de los .c de tests/fixtures."""
    items: List[str] = []
    if fixtures_dir.exists():
        for p in sorted(fixtures_dir.rglob("*.c")):
            if p.is_file():
                items.append(str(p.relative_to(ROOT)).replace("\\", "/"))
    return items


samples = ["(ninguno)"] + _list_sources()

st.sidebar.subheader("Abrir archivo de pruebas")
sel_sample = st.sidebar.selectbox("Archivo (.c):", samples, index=0)

auto_analyze = st.sidebar.checkbox("Analizar automáticamente", value=True)
show_tokens = st.sidebar.checkbox("Mostrar tokens", value=False)
show_ast = st.sidebar.checkbox("Mostrar AST (Graphviz)", value=True)
show_scopes = st.sidebar.checkbox("Mostrar ámbitos", value=True)
show_quickfix = st.sidebar.checkbox("Mostrar Quick-fixes", value=True)

st.sidebar.subheader("Analizador")
include_policy = st.sidebar.selectbox("#include", ["record", "reject"], index=0)
allow_forward = st.sidebar.checkbox("Permitir llamadas hacia adelante", value=False)

if sel_sample != st.session_state.last_sample:
    try:
        if sel_sample != "(ninguno)":
            st.session_state.code = (ROOT / sel_sample).read_text(encoding="utf-8")
        st.session_state.last_sample = sel_sample
    except OSError as ex:
        st.sidebar.error("No se pudo cargar: " + str(ex))


def _metric(col, value: Any, label: str):
    with col:
        st.markdown(
            f'<div class="metric-box"><div class="metric-val">{value}</div><div class="metric-lbl">{label}</div></div>',
            unsafe_allow_html=True,
        )


# -----------------------------
# Editor
# -----------------------------
st.subheader("Código")
st.text_area("Fuente MiniC", key="code", height=380, label_visibility="collapsed")

c1, c2 = st.columns([1, 3])
with c1:
    if st.button("Formatear"):
        st.session_state.code = format_code(st.session_state.code)
        st.success("Código formateado.")
with c2:
    run_click = st.button("Analizar ahora")

# -----------------------------
# Análisis
# -----------------------------
result: Optional[Dict[str, Any]] = None
if run_click or auto_analyze:
    try:
        result = analyze_internal(
            st.session_state.code,
            include_ast=show_ast,
            include_scopes=show_scopes,
            include_tokens=show_tokens,
            options={"include_policy": include_policy, "allow_forward_calls": allow_forward},
        )
    except ValueError as ex:
        st.error("Configuración inválida: " + str(ex))

if result is not None:
    diags = result.get("diagnostics", []) or []
    syn = result.get("syntaxErrors", []) or []
    sem = [d for d in diags if d.get("phase") == "semantic"]

    m1, m2, m3 = st.columns(3)
    _metric(m1, len(syn), "Léx/Sint")
    _metric(m2, len(sem), "Semánticos")
    _metric(m3, ", ".join(result.get("includes", [])) or "-", "Cabeceras")

    tabs_labels = ["Diagnósticos"]
    if show_scopes:
        tabs_labels.append("Ámbitos")
    if show_ast:
        tabs_labels.append("AST")
    if show_quickfix:
        tabs_labels.append("Quick-fixes")
    if show_tokens:
        tabs_labels.append("Tokens")
    tabs = st.tabs(tabs_labels)

    t = 0
    with tabs[t]:
        if len(diags) == 0:
            st.markdown('<div class="ok">Sin errores: el archivo es aceptado.</div>', unsafe_allow_html=True)
        else:
            st.dataframe(diags, use_container_width=True)

        st.subheader("Hover (línea/columna)")
        h1, h2, h3 = st.columns([1, 1, 2])
        with h1:
            h_line = st.number_input("Línea", min_value=1, value=1, step=1)
        with h2:
            h_col = st.number_input("Columna", min_value=1, value=1, step=1)
        with h3:
            if st.button("Consultar Hover"):
                st.json(hover_at(st.session_state.code, int(h_line), int(h_col)))
    t += 1

    if show_scopes:
        with tabs[t]:
            st.subheader("Ámbitos (en orden de cierre)")
            for sc in result.get("scopes", []) or []:
                with st.expander(sc["kind"] + " (profundidad " + str(sc["depth"]) + ")"):
                    st.dataframe(sc["symbols"], use_container_width=True)
                    if sc.get("functions"):
                        st.markdown("**Funciones**")
                        st.dataframe(sc["functions"], use_container_width=True)
        t += 1

    if show_ast:
        with tabs[t]:
            st.subheader("Árbol sintáctico (AST)")
            dot = result.get("astDot")
            if dot:
                st.graphviz_chart(dot)
                st.download_button("Descargar DOT", data=dot, file_name="ast.dot", mime="text/vnd.graphviz")
            else:
                st.info("AST no solicitado / vacío.")
        t += 1

    if show_quickfix:
        with tabs[t]:
            st.subheader("Sugerencias (quick-fixes)")
            fixes = suggest_fixes(diags)
            if len(fixes) == 0:
                st.markdown('<div class="ok">No hay sugerencias.</div>', unsafe_allow_html=True)
            else:
                st.dataframe(fixes, use_container_width=True)
        t += 1

    if show_tokens:
        with tabs[t]:
            st.subheader("Tokens")
            st.dataframe(result.get("tokens", []) or [], use_container_width=True)
            st.code(token_dump(st.session_state.code), language="text")

st.caption("MiniC Playground • Streamlit UI")
