"""
Streamlit real-time analytics dashboard (synthetic data)

Features
- Start/Stop a one-sample-per-second synthetic stream on top of 1000 seeded samples
- KPI cards (total users, revenue, active connections, throughput)
- Trend chart for a selected metric over a 1h / 6h / 24h window
- Throughput, response time, device, region and activity heatmap panels
- Recent samples table and CSV export of the current window

Run locally
  pip install -e .
  streamlit run dashboard.py
"""
from __future__ import annotations

import logging
import random
import sys
from datetime import datetime

import streamlit as st
import streamlit.components.v1 as components
from streamlit_autorefresh import st_autorefresh

import dashboard_config as cfg
from dashboard_views import (
    METRIC_LABELS,
    activity_heatmap,
    device_pie_figure,
    error_breakdown,
    heatmap_figure,
    metric_trend_figure,
    recent_rows,
    region_bar_figure,
    regional_summary,
    response_time_figure,
    summary_stats,
    throughput_figure,
)
from metrics_stream import Timeframe, to_frame
from stream_controller import StreamController, now_ms

logging.basicConfig(
    level=cfg.LOG_LEVEL,
    format="%(asctime)s [DASHBOARD] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Real-time Analytics Dashboard", layout="wide")

# Keep the scroll position across the once-per-second reruns
components.html(
    """
<script>
(function() {
  const key = 'st-scroll-pos:' + (window.location.pathname || 'root');
  const save = () => { try { sessionStorage.setItem(key, String(window.scrollY || 0)); } catch (e) {} };
  const restore = () => {
    const y = parseInt(sessionStorage.getItem(key) || '0', 10) || 0;
    window.requestAnimationFrame(() => window.scrollTo(0, y));
  };
  try { history.scrollRestoration = 'manual'; } catch (e) {}
  restore();
  [50, 300, 1000].forEach(t => setTimeout(restore, t));
  document.addEventListener('scroll', save, { passive: true });
})();
</script>
    """,
    height=0,
)

# Session state bootstrap
ss = st.session_state
if "controller" not in ss:
    ss.controller = StreamController.create(seed=cfg.RANDOM_SEED)
    logger.info("Dashboard session started with %d seeded samples", ss.controller.buffer_length())
if "heatmap" not in ss:
    ss.heatmap = activity_heatmap(random.Random(cfg.RANDOM_SEED))
ss.setdefault("timeframe", cfg.DEFAULT_TIMEFRAME)
ss.setdefault("metric", cfg.DEFAULT_METRIC)

controller: StreamController = ss.controller


# Button callbacks run before the script body, so the rerun renders the new state
def start_stream() -> None:
    ss.controller.start(now_ms())


def stop_stream() -> None:
    ss.controller.stop()


def reset_data() -> None:
    ss.controller.reset(now_ms())
    ss.heatmap = activity_heatmap(random.Random(cfg.RANDOM_SEED))


# ----------------------------- Sidebar ----------------------------- #

with st.sidebar:
    st.subheader("Controls")
    btn_cols = st.columns([1, 1])
    with btn_cols[0]:
        st.button("Start Stream", use_container_width=True, key="start_stream",
                  on_click=start_stream, disabled=controller.is_streaming)
    with btn_cols[1]:
        st.button("Stop Stream", use_container_width=True, key="stop_stream",
                  on_click=stop_stream, disabled=not controller.is_streaming)
    st.button("Reset Data", use_container_width=True, key="reset_data", on_click=reset_data)

    ss.timeframe = st.selectbox(
        "Timeframe",
        list(cfg.TIMEFRAMES),
        index=list(cfg.TIMEFRAMES).index(ss.timeframe),
        key="timeframe_select",
    )
    ss.metric = st.radio(
        "Trend metric",
        list(cfg.CHART_METRICS),
        index=list(cfg.CHART_METRICS).index(ss.metric),
        format_func=METRIC_LABELS.get,
        horizontal=True,
        key="metric_select",
    )
    st.caption(
        f"{'🟢 Streaming' if controller.is_streaming else '⚪ Paused'} · "
        f"{controller.buffer_length()} samples buffered"
    )

# ----------------------------- Ingest step per rerun ----------------------------- #

if controller.is_streaming:
    st_autorefresh(interval=cfg.TICK_MS, key="_autorefresh")
    controller.pump(now_ms())

# ----------------------------- Display ----------------------------- #

st.title("Real-time Analytics Dashboard")

try:
    window = controller.current_window(ss.timeframe)
except ValueError as e:
    st.warning(str(e))
    window = controller.current_window(Timeframe.ONE_HOUR)

metrics = controller.current_metrics()
kpi_cols = st.columns(4)
kpi_cols[0].metric("Total Users", f"{metrics.total_users:,}")
kpi_cols[1].metric("Revenue", f"${metrics.revenue:,.2f}")
kpi_cols[2].metric("Active Connections", f"{metrics.active_connections:,}")
kpi_cols[3].metric("Throughput", f"{metrics.throughput}/s")

if not window:
    st.info("Waiting for data…")
else:
    st.plotly_chart(metric_trend_figure(window, ss.metric), use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.plotly_chart(throughput_figure(window), use_container_width=True)
    with right:
        st.plotly_chart(response_time_figure(window), use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.plotly_chart(device_pie_figure(), use_container_width=True)
    with right:
        st.plotly_chart(region_bar_figure(regional_summary()), use_container_width=True)

    st.plotly_chart(heatmap_figure(ss.heatmap), use_container_width=True)

    breakdown = error_breakdown(window)
    err_cols = st.columns(3)
    err_cols[0].metric("Error-free samples", breakdown["ok"])
    err_cols[1].metric("Warning samples", breakdown["warning"])
    err_cols[2].metric("Critical samples", breakdown["critical"])

    with st.expander("Window statistics"):
        st.dataframe(summary_stats(window), use_container_width=True)

    st.subheader("Recent data")
    st.dataframe(recent_rows(window, cfg.RECENT_ROWS), use_container_width=True, hide_index=True)

    csv_bytes = to_frame(window).to_csv(index=False).encode("utf-8")
    st.download_button(
        "Export CSV",
        data=csv_bytes,
        file_name=f"metrics_{ss.timeframe}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv",
        mime="text/csv",
        key="export_csv",
    )
