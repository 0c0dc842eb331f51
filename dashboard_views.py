"""
Display-ready aggregates and plotly figures built from stream samples.
"""
from __future__ import annotations

import math
import random
from collections import Counter
from typing import Any, Dict, List, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from metrics_stream import METRIC_FIELDS, Sample, check_metric_field, metric_series, to_frame

# ----------------------------- Static breakdowns ----------------------------- #

DEVICE_DISTRIBUTION: List[Dict[str, Any]] = [
    {"name": "Desktop", "value": 45, "color": "#8b5cf6"},
    {"name": "Mobile", "value": 35, "color": "#06b6d4"},
    {"name": "Tablet", "value": 20, "color": "#10b981"},
]

REGIONS: List[Dict[str, Any]] = [
    {"region": "North America", "users": 450000, "growth": 12.5},
    {"region": "Europe", "users": 380000, "growth": 8.3},
    {"region": "Asia Pacific", "users": 520000, "growth": 18.7},
    {"region": "Latin America", "users": 180000, "growth": 15.2},
    {"region": "Africa", "users": 95000, "growth": 22.1},
]

DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

SEVERITIES = ("ok", "warning", "critical")
SEVERITY_COLORS = {"ok": "#16a34a", "warning": "#ca8a04", "critical": "#dc2626"}

METRIC_LABELS = {
    "users": "Users",
    "revenue": "Revenue",
    "connections": "Connections",
    "throughput": "Throughput",
    "errors": "Errors",
    "response_time": "Response Time",
}


def regional_summary(regions: Sequence[Dict[str, Any]] = REGIONS) -> pd.DataFrame:
    """Per-region users and growth with each region's share of all users (percent)."""
    df = pd.DataFrame(list(regions), columns=["region", "users", "growth"])
    total = df["users"].sum()
    df["share"] = (df["users"] / total * 100).round(1) if total else 0.0
    return df


def activity_heatmap(rng: random.Random) -> pd.DataFrame:
    """Weekday x hour activity grid: noise plus a daily sine cycle."""
    hours = list(range(24))
    grid = [
        [rng.uniform(0, 100) + math.sin(hour / 24 * math.pi * 2) * 30 for hour in hours]
        for _ in DAYS
    ]
    return pd.DataFrame(grid, index=DAYS, columns=hours)


# ----------------------------- Window aggregates ----------------------------- #

def error_severity(errors: int) -> str:
    if errors == 0:
        return "ok"
    if errors < 5:
        return "warning"
    return "critical"


def error_breakdown(samples: Sequence[Sample]) -> Dict[str, int]:
    counts = Counter(error_severity(s.errors) for s in samples)
    return {level: counts.get(level, 0) for level in SEVERITIES}


def summary_stats(samples: Sequence[Sample]) -> pd.DataFrame:
    """Mean/min/max of every metric field over `samples`, one row per field."""
    rows = []
    for field in METRIC_FIELDS:
        values = metric_series(samples, field)
        if values:
            rows.append({
                "metric": field,
                "mean": sum(values) / len(values),
                "min": min(values),
                "max": max(values),
            })
        else:
            rows.append({"metric": field, "mean": float("nan"), "min": float("nan"), "max": float("nan")})
    return pd.DataFrame(rows).set_index("metric")


def recent_rows(samples: Sequence[Sample], limit: int = 10) -> pd.DataFrame:
    """Newest-first table of the last `limit` samples, formatted for display."""
    tail = list(samples)[-limit:] if limit > 0 else []
    tail.reverse()
    return pd.DataFrame(
        [
            {
                "Time": pd.to_datetime(s.timestamp, unit="ms").strftime("%H:%M:%S"),
                "Users": f"{s.users:,}",
                "Revenue": f"${s.revenue:.2f}",
                "Connections": s.connections,
                "Throughput": f"{s.throughput}/s",
                "Errors": s.errors,
                "Severity": error_severity(s.errors),
                "Response Time": f"{s.response_time:.1f}ms",
            }
            for s in tail
        ],
        columns=["Time", "Users", "Revenue", "Connections", "Throughput", "Errors", "Severity", "Response Time"],
    )


# ----------------------------- Figures ----------------------------- #

def _stable_layout(fig: go.Figure, height: int) -> go.Figure:
    fig.update_layout(
        height=height,
        margin=dict(l=40, r=20, t=40, b=30),
        yaxis=dict(showgrid=True, zeroline=True),
        xaxis=dict(showgrid=True),
        uirevision="keep",  # preserve zoom/viewport across reruns
    )
    return fig


def metric_trend_figure(samples: Sequence[Sample], field: str) -> go.Figure:
    check_metric_field(field)
    df = to_frame(samples)
    fig = px.area(df, x="time", y=field, title=f"{METRIC_LABELS[field]} over time")
    return _stable_layout(fig, 320)


def throughput_figure(samples: Sequence[Sample]) -> go.Figure:
    df = to_frame(samples)
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=df["time"], y=df["throughput"], mode="lines", name="Throughput"))
    fig.add_trace(go.Bar(x=df["time"], y=df["errors"], name="Errors", yaxis="y2", opacity=0.5))
    fig.update_layout(
        title="Throughput & errors",
        yaxis2=dict(overlaying="y", side="right", showgrid=False, title="Errors"),
    )
    return _stable_layout(fig, 320)


def response_time_figure(samples: Sequence[Sample]) -> go.Figure:
    df = to_frame(samples)
    fig = px.line(df, x="time", y="response_time", title="Response time (ms)")
    return _stable_layout(fig, 280)


def device_pie_figure(devices: Sequence[Dict[str, Any]] = DEVICE_DISTRIBUTION) -> go.Figure:
    fig = go.Figure(
        go.Pie(
            labels=[d["name"] for d in devices],
            values=[d["value"] for d in devices],
            marker=dict(colors=[d["color"] for d in devices]),
            hole=0.45,
        )
    )
    fig.update_layout(title="Device distribution", height=300, margin=dict(l=20, r=20, t=40, b=20))
    return fig


def region_bar_figure(summary: pd.DataFrame) -> go.Figure:
    fig = px.bar(
        summary,
        x="users",
        y="region",
        orientation="h",
        hover_data=["growth", "share"],
        title="Users by region",
    )
    return _stable_layout(fig, 300)


def heatmap_figure(grid: pd.DataFrame) -> go.Figure:
    fig = go.Figure(
        go.Heatmap(
            z=grid.values,
            x=list(grid.columns),
            y=list(grid.index),
            colorscale="Viridis",
            zmin=0,
            zmax=130,
        )
    )
    fig.update_layout(title="Activity by weekday and hour", height=280, margin=dict(l=40, r=20, t=40, b=30))
    return fig
