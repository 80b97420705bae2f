import io

import pandas as pd
import streamlit as st

from itinerary.core.lookup_loader import parse_airport_lookup
from itinerary.core.pipeline import prettify_text
from itinerary.core.errors import PrettifierError, LookupSchemaError
from itinerary.core.schema import Severity


SAMPLE_ITINERARY = (
    "Voo de #LHR para *##LFPG\n"
    "Partida: D(2024-03-05T10:00:00Z) às T24(2024-03-05T10:00:00+02:00)\n"
)


def _lookup_dataframe(lookup) -> pd.DataFrame:
    return pd.DataFrame([r.model_dump() for r in lookup.records])


def _show_diagnostics(diagnostics):
    for d in diagnostics:
        if d.severity in (Severity.ERROR, Severity.FATAL):
            st.error(d.message)
        elif d.severity == Severity.WARNING:
            st.warning(d.message)
        else:
            st.info(d.message)


st.set_page_config(page_title="Itinerary | Prettifier", layout="wide")
st.title("Itinerary — Prettifier de itinerários")

with st.sidebar:
    st.header("Tabela de aeroportos")
    lookup_file = st.file_uploader("airport-lookup.csv", type=["csv"])
    show_table = st.toggle("Mostrar tabela carregada", value=False)

if "lookup" not in st.session_state:
    st.session_state.lookup = None
if "lookup_name" not in st.session_state:
    st.session_state.lookup_name = None

if lookup_file is not None and lookup_file.name != st.session_state.lookup_name:
    text = lookup_file.getvalue().decode("utf-8-sig")
    try:
        st.session_state.lookup = parse_airport_lookup(io.StringIO(text, newline=None), source=lookup_file.name)
        st.session_state.lookup_name = lookup_file.name
    except LookupSchemaError as e:
        st.session_state.lookup = None
        st.session_state.lookup_name = None
        for p in e.problems:
            st.error(p)
    except PrettifierError as e:
        st.session_state.lookup = None
        st.session_state.lookup_name = None
        st.error(str(e))

lookup = st.session_state.lookup

if lookup is None:
    st.info("Envie o CSV de aeroportos no menu lateral para começar.")
    st.stop()

st.caption(f"Tabela: {st.session_state.lookup_name} — {len(lookup.records)} aeroportos, {len(lookup)} chaves")

if show_table:
    st.dataframe(_lookup_dataframe(lookup), use_container_width=True, hide_index=True)

col_in, col_out = st.columns(2)

with col_in:
    st.subheader("Entrada")
    uploaded = st.file_uploader("Itinerário (.txt)", type=["txt"])
    default_text = uploaded.getvalue().decode("utf-8") if uploaded is not None else SAMPLE_ITINERARY
    raw_text = st.text_area("Texto", value=default_text, height=400)

output, diagnostics = prettify_text(raw_text, lookup)

with col_out:
    st.subheader("Saída")
    st.code(output, language=None)
    st.download_button("⬇️ Baixar output.txt", data=output.encode("utf-8"), file_name="output.txt")
    _show_diagnostics(diagnostics)
