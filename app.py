"""
Main Application File for the G85 Wafer Map Merge Streamlit tool.
Loads two or more G85 maps, aligns and merges them, and offers the merged
map and an Excel die report for download.
"""
import streamlit as st
import logging

from g85merge.core.errors import WaferMapError
from g85merge.enums import MergeMode
from g85merge.io.ingestion import load_wafer_maps
from g85merge.io.naming import generate_merged_filename
from g85merge.io.serializer import serialize
from g85merge.merge.modes import run_merge
from g85merge.state import SessionStore
from g85merge.utils.logger import configure_logging
from g85merge.views.merge_view import render_input_previews, render_merge_result, render_performance_panel

logger = logging.getLogger(__name__)

def run_pipeline(store: SessionStore, uploaded_files, mode: MergeMode, export_mutation: bool, first_is_control: bool) -> None:
    """Ingests the uploads, merges them and stores the outcome in the session."""
    result = load_wafer_maps(uploaded_files)
    store.input_maps = result.maps
    store.input_names = result.names
    store.is_sample = result.is_sample
    store.merge_mode = mode
    store.ingestion_messages = result.errors + result.warnings
    store.clear_result()
    store.merge_error = None

    if len(result.maps) < 2:
        store.merge_error = f"At least 2 readable maps are required, got {len(result.maps)}."
        return

    try:
        merged = run_merge(mode, result.maps, export_mutation=export_mutation, first_is_control=first_is_control)
    except WaferMapError as e:
        logger.error(f"Merge failed: {e}")
        store.merge_error = f"Merge failed: {e}"
        return

    store.set_result(merged, serialize(merged), generate_merged_filename(merged))

def main() -> None:
    """Main function to configure and run the Streamlit application."""
    st.set_page_config(layout="wide", page_title="G85 Wafer Map Merge")
    configure_logging()
    store = SessionStore()

    # --- Sidebar Control Panel ---
    with st.sidebar:
        st.title("🎛️ Control Panel")
        with st.form(key="merge_form"):
            with st.expander("📁 Wafer Maps", expanded=True):
                uploaded_files = st.file_uploader(
                    "Upload G85 maps (in merge order)", type=["g85", "xml"], accept_multiple_files=True,
                    help="Leave empty to run on generated sample wafers."
                )
            with st.expander("⚙️ Merge Options", expanded=True):
                mode_label = st.radio(
                    "Merge Mode", MergeMode.values(),
                    index=MergeMode.values().index(store.merge_mode.value),
                    help="Pairwise and Control + Scan use exactly two maps; Sequential accepts any number."
                )
                export_mutation = st.checkbox(
                    "Mark lot for export (Z)", value=False,
                    help="Inserts 'Z' into LotId and SubstrateNumber. Control + Scan and Sequential only."
                )
                first_is_control = st.checkbox(
                    "First map is a control map", value=False,
                    help="Sequential only: take ProductId, LotId and substrate attributes from the second map."
                )
            submitted = st.form_submit_button("🚀 Run Merge")

    st.title("🧩 G85 Wafer Map Merge")

    if submitted:
        with st.spinner("Merging maps..."):
            run_pipeline(store, uploaded_files, MergeMode(mode_label), export_mutation, first_is_control)
        st.rerun()

    for msg in store.ingestion_messages:
        st.warning(msg)

    if not store.input_maps and not store.merge_error:
        st.info("Upload G85 maps in the sidebar (or run on sample wafers) and click 'Run Merge'.")
    else:
        render_merge_result(store)
        st.divider()
        render_input_previews(store)

    render_performance_panel()

if __name__ == "__main__":
    main()
