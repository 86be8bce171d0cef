"""Sales Sheet Import - Streamlit upload page."""

from pathlib import Path

import pandas as pd
import streamlit as st

from salesboard.errors import IngestionError, SourceError
from salesboard.header_detector import candidates_report
from salesboard.logger import LOG_FILE, get_logger
from salesboard.pipeline import ingest_bytes, ingest_url
from salesboard.sample import sample_csv_text
from salesboard.summary import calculate_totals, records_to_frame, validate_records
from salesboard.workbook import ALLOWED_SUFFIXES, read_workbook

logger = get_logger("app")

st.set_page_config(
    page_title="Sales Sheet Import",
    layout="wide",
)

# Initialize session state
if "result" not in st.session_state:
    st.session_state.result = None
if "error" not in st.session_state:
    st.session_state.error = None


def render_error(error: Exception) -> None:
    """Show an import failure with its kind and diagnostics."""
    kind = getattr(error, "kind", type(error).__name__)
    st.error(f"**{kind}**: {error}")

    details = dict(getattr(error, "details", {}) or {})
    attempts = getattr(error, "attempts", None)
    if attempts:
        details["attempts"] = attempts
    if details:
        with st.expander("Diagnostics", expanded=True):
            preview = details.pop("preview", None)
            if details:
                st.json({k: v if isinstance(v, (int, float, str, list, dict)) else str(v) for k, v in details.items()})
            if preview:
                st.code(preview, language="text")

    if isinstance(error, IngestionError):
        st.info("Tip: set the header row manually in the sidebar if detection picked the wrong row.")


def run_import(uploaded, url: str, sheet_name: str | None, header_row: int | None) -> None:
    st.session_state.result = None
    st.session_state.error = None
    try:
        with st.spinner("Reading sales data..."):
            if uploaded is not None:
                result = ingest_bytes(
                    uploaded.getvalue(),
                    uploaded.name,
                    sheet_name=sheet_name,
                    manual_header_row=header_row,
                )
            else:
                result = ingest_url(url, manual_header_row=header_row)
    except (IngestionError, SourceError, ValueError) as e:
        logger.error(f"Import failed: {type(e).__name__}: {e}")
        st.session_state.error = e
        return
    st.session_state.result = result


# --- Sidebar ---

st.sidebar.header("Data Source")
uploaded = st.sidebar.file_uploader(
    "Upload a sales sheet",
    type=[s.lstrip(".") for s in ALLOWED_SUFFIXES],
)
url = st.sidebar.text_input("...or a CSV / Google Sheets URL", value="")

sheet_name = None
if uploaded is not None and Path(uploaded.name).suffix.lower() not in (".csv", ".txt"):
    try:
        sheet_names = read_workbook(uploaded.getvalue(), suffix=Path(uploaded.name).suffix).sheet_names
    except (IngestionError, SourceError, ValueError) as e:
        st.sidebar.error(f"Could not read workbook: {e}")
        sheet_names = []
    if sheet_names:
        sheet_name = st.sidebar.selectbox("Sheet", sheet_names)

manual_header = st.sidebar.checkbox("Set header row manually", value=False)
header_row = None
if manual_header:
    header_row = int(st.sidebar.number_input("Header row (0-based)", min_value=0, value=0, step=1))

can_run = uploaded is not None or bool(url.strip())
if st.sidebar.button("Import", type="primary", use_container_width=True, disabled=not can_run):
    run_import(uploaded, url.strip(), sheet_name, header_row)

st.sidebar.divider()
st.sidebar.download_button(
    "Download sample CSV",
    data=sample_csv_text(with_bom=True).encode("utf-8"),
    file_name="sales_sample.csv",
    mime="text/csv",
)

enable_debug = st.sidebar.checkbox("Show Debug Log", value=False)
if enable_debug:
    with st.sidebar.expander("Debug Log", expanded=True):
        if LOG_FILE.exists():
            lines = LOG_FILE.read_text(encoding="utf-8", errors="replace").splitlines()
            st.code("\n".join(lines[-50:]) or "(empty)", language="text")
        else:
            st.info("Debug log file not found. Run an import to generate logs.")

# --- Main area ---

st.title("Sales Sheet Import")

if st.session_state.error is not None:
    render_error(st.session_state.error)
elif st.session_state.result is not None:
    result = st.session_state.result
    header = result.header

    source_label = f"sheet **{result.sheet_name}**" if result.sheet_name else "CSV"
    mode = "manual" if result.manual else "detected"
    st.success(
        f"Imported {len(result.records)} record(s) from {source_label}; "
        f"header row {header.row_index} ({mode}, confidence {header.confidence:.0%})"
    )

    totals = calculate_totals(result.records)
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Last Year", f"{totals['lastYear']:,.0f}")
    col2.metric("Target", f"{totals['target']:,.0f}")
    col3.metric("Actual", f"{totals['actual']:,.0f}")
    col4.metric("YoY Growth", f"{totals['yoyGrowth']}%")
    col5.metric("Achievement", f"{totals['achievementRate']}%")

    st.subheader("Records")
    st.dataframe(records_to_frame(result.records), use_container_width=True)

    report = validate_records(result.records)
    st.subheader(f"Data Quality ({report.quality_score:.1f}%)")
    for message in report.errors:
        st.error(message)
    for message in report.warnings:
        st.warning(message)
    for message in report.info:
        st.info(message)

    if result.candidates:
        with st.expander("Header candidates"):
            st.dataframe(candidates_report(result.candidates), use_container_width=True)
    with st.expander("Detected headers"):
        st.dataframe(pd.DataFrame({"Header": list(header.headers)}), use_container_width=True)
else:
    st.info(
        "Upload a CSV/Excel sales sheet or paste a URL in the sidebar, then press **Import**.\n\n"
        "The importer will:\n"
        "1. Find the header row among the first 15 rows\n"
        "2. Match product / last year / target / actual columns\n"
        "3. Skip blank and total rows\n"
        "4. Calculate YoY growth and target achievement"
    )
