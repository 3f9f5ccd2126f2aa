import plotly.graph_objects as go
import numpy as np
from typing import Dict, List, Optional
from g85merge.core.config import (
    PlotTheme, DEFAULT_THEME, STATUS_LABELS, bin_style_map
)
from g85merge.core.models import WaferMap
from g85merge.enums import DieStatus
from g85merge.analytics.statistics import calculate_bin_statistics, status_matrix
from g85merge.plotting.utils import apply_map_theme
from g85merge.utils.telemetry import track_performance

def _ordered_codes(matrix: np.ndarray) -> List[str]:
    """Known vocabulary first (in enum order), then any other codes alphabetically."""
    present = set(np.unique(matrix).tolist())
    known = [code for code in DieStatus.values() if code in present]
    return known + sorted(present - set(known))

def _discrete_colorscale(colors: List[str]) -> List[list]:
    """Stepped colorscale: value i of n falls inside band [i/n, (i+1)/n]."""
    n = len(colors)
    scale = []
    for i, color in enumerate(colors):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale

def _color_for(code: str, theme: PlotTheme, style_map: Dict[str, str]) -> str:
    return style_map.get(code, theme.unknown_bin_color)

@track_performance("Plot: Wafer Map")
def create_wafer_map_figure(
    wafer_map: WaferMap,
    title: str = "",
    theme_config: Optional[PlotTheme] = None,
    style_map: Optional[Dict[str, str]] = None
) -> go.Figure:
    """
    Renders the die grid as a heatmap, one cell per die, coloured by bin code.
    Absent positions are drawn as null dies.
    """
    theme = theme_config or DEFAULT_THEME
    styles = style_map if style_map is not None else bin_style_map

    fig = go.Figure()
    matrix = status_matrix(wafer_map)
    rows, cols = matrix.shape

    if matrix.size:
        codes = _ordered_codes(matrix)
        index_of = {code: i for i, code in enumerate(codes)}
        z = np.vectorize(index_of.get, otypes=[int])(matrix)
        ys, xs = np.indices(matrix.shape)
        hover = np.char.add(
            np.char.add(np.char.add("(", xs.astype(str)), np.char.add(",", ys.astype(str))),
            np.char.add(") - ", matrix)
        )

        fig.add_trace(go.Heatmap(
            z=z, text=hover, hovertemplate="%{text}<extra></extra>",
            colorscale=_discrete_colorscale([_color_for(c, theme, styles) for c in codes]),
            zmin=-0.5, zmax=len(codes) - 0.5, showscale=False, xgap=1, ygap=1
        ))

        # Legend entries (heatmaps have none of their own)
        for code in codes:
            label = STATUS_LABELS.get(code, "Other")
            fig.add_trace(go.Scatter(
                x=[None], y=[None], mode='markers',
                marker=dict(size=12, symbol='square', color=_color_for(code, theme, styles)),
                name=f"{label} ({code})", showlegend=True
            ))

    fig = apply_map_theme(fig, title=title or f"Wafer Map {rows} x {cols}", theme_config=theme)
    fig.update_xaxes(title_text="Column (X)")
    fig.update_yaxes(title_text="Row (Y)")
    return fig

def create_bin_count_chart(
    wafer_map: WaferMap,
    theme_config: Optional[PlotTheme] = None,
    style_map: Optional[Dict[str, str]] = None
) -> go.Figure:
    """Bar chart of die counts per bin code."""
    theme = theme_config or DEFAULT_THEME
    styles = style_map if style_map is not None else bin_style_map
    stats = calculate_bin_statistics(wafer_map)

    fig = go.Figure()
    if not stats.empty:
        fig.add_trace(go.Bar(
            x=stats['BIN_CODE'], y=stats['COUNT'],
            marker_color=[_color_for(c, theme, styles) for c in stats['BIN_CODE']],
            customdata=stats[['LABEL', 'PERCENT']].to_numpy(),
            hovertemplate="<b>%{x}</b> %{customdata[0]}<br>Count: %{y}<br>%{customdata[1]}% of grid<extra></extra>"
        ))

    fig = apply_map_theme(fig, title="Die Count by Bin", height=400, theme_config=theme)
    # Bar charts keep the default axis direction and aspect
    fig.update_yaxes(autorange=True, scaleanchor=None, title_text="Dies")
    fig.update_xaxes(title_text="Bin Code", type='category')
    return fig
