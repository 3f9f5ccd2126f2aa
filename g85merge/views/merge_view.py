import streamlit as st
import pandas as pd
from g85merge.state import SessionStore
from g85merge.analytics.statistics import calculate_bin_statistics, defects_to_dataframe, summarize_map
from g85merge.io.exporters.excel import generate_die_report
from g85merge.io.naming import report_filename
from g85merge.plotting.maps import create_wafer_map_figure, create_bin_count_chart
from g85merge.utils.telemetry import PerformanceMonitor
from g85merge.views.utils import build_input_labels, build_input_summary

def render_input_previews(store: SessionStore) -> None:
    """Shows the loaded maps side by side (two per row) with a summary table."""
    if not store.input_maps:
        return

    st.subheader("Input Maps")
    if store.is_sample:
        st.info("No files uploaded. Showing generated sample wafers.")

    st.dataframe(build_input_summary(store), hide_index=True, width="stretch")

    labels = build_input_labels(store)
    for start in range(0, len(store.input_maps), 2):
        cols = st.columns(2)
        for col, wafer_map, label in zip(cols, store.input_maps[start:start + 2], labels[start:start + 2]):
            with col:
                fig = create_wafer_map_figure(wafer_map, title=label)
                st.plotly_chart(fig, width="stretch")

def render_merge_result(store: SessionStore) -> None:
    """Merged map view with its statistics and the download buttons."""
    if store.merge_error:
        st.error(store.merge_error)
        return

    merged = store.merged_map
    if merged is None:
        return

    st.subheader("Merged Map")
    summary = summarize_map(merged)
    kpi_cols = st.columns(4)
    kpi_cols[0].metric("Grid", f"{summary.rows} x {summary.columns}")
    kpi_cols[1].metric("Defects (EF)", f"{summary.defect_count:,}")
    kpi_cols[2].metric("Pass (01)", f"{summary.pass_count:,}")
    kpi_cols[3].metric("Yield", f"{summary.yield_percent:.2f}%")
    report = merged.validation
    if report is not None and report.dropped:
        st.caption(
            f"Validation dropped {report.dropped_dies} dies and {report.dropped_defects} "
            f"defect entries outside the grid."
        )

    map_col, stats_col = st.columns([2, 1])
    with map_col:
        st.plotly_chart(create_wafer_map_figure(merged, title=store.merged_filename or ""), width="stretch")
    with stats_col:
        st.plotly_chart(create_bin_count_chart(merged), width="stretch")
        st.dataframe(calculate_bin_statistics(merged), hide_index=True, width="stretch")

    with st.expander("Defect Index", expanded=False):
        st.dataframe(defects_to_dataframe(merged), hide_index=True, width="stretch")

    dl_cols = st.columns(2)
    dl_cols[0].download_button(
        "Download Merged G85",
        data=store.merged_text or "",
        file_name=store.merged_filename or "merged.g85",
        mime="application/xml",
        type="primary"
    )

    if store.report_bytes is None and dl_cols[1].button("Generate Excel Report"):
        with st.spinner("Generating Excel report..."):
            store.report_bytes = generate_die_report(merged, source_filename=store.merged_filename or "merged.g85")
        st.rerun()

    if store.report_bytes is not None:
        dl_cols[1].download_button(
            "Download Excel Report",
            data=store.report_bytes,
            file_name=report_filename(store.merged_filename or "merged.g85"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

def render_performance_panel() -> None:
    """Recent telemetry entries, newest first."""
    with st.expander("Performance Log", expanded=False):
        logs = PerformanceMonitor.get_logs()
        if logs:
            st.dataframe(pd.DataFrame(logs), hide_index=True, width="stretch")
        else:
            st.caption("No operations recorded yet.")
        if st.button("Clear Log"):
            PerformanceMonitor.clear_logs()
            st.rerun()
