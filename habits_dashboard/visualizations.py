from __future__ import annotations

from habits_dashboard.constants import INTENSITY_LABELS
from habits_dashboard.metrics import Intensity
from habits_dashboard.theme import get_active_theme


def _active_theme():
    return get_active_theme()[1]


def apply_common_plot_style(fig, title, show_xgrid=True, show_ygrid=True):
    theme = _active_theme()
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=40, r=20, t=40, b=30),
        xaxis=dict(
            showgrid=show_xgrid,
            gridcolor=theme["plot_grid"],
            tickfont=dict(color=theme["text_soft"]),
            zeroline=False,
            showline=True,
            linecolor=theme["border"],
            mirror=True,
        ),
        yaxis=dict(
            showgrid=show_ygrid,
            gridcolor=theme["plot_grid"],
            zeroline=False,
            tickfont=dict(color=theme["text_soft"]),
            showline=True,
            linecolor=theme["border"],
            mirror=True,
        ),
    )
    return fig


def build_heatmap_matrix(grid, uom="times"):
    """Turn a weeks x days grid into plotly z/text matrices, one column per week."""
    if not grid:
        return [], [], []
    days_per_week = len(grid[0])
    z = [[None for _ in grid] for _ in range(days_per_week)]
    text = [["" for _ in grid] for _ in range(days_per_week)]
    for col, week in enumerate(grid):
        for row, cell in enumerate(week):
            z[row][col] = int(cell.intensity)
            label = INTENSITY_LABELS[int(cell.intensity)]
            text[row][col] = f"{cell.day.isoformat()} • {cell.value} {uom} • {label}"
    week_labels = [week[0].day.strftime("%b %d") for week in grid]
    return z, text, week_labels


def activity_heatmap(grid, uom="times", title=""):
    import plotly.graph_objects as go

    theme = _active_theme()
    colors = theme["intensity"]
    levels = len(Intensity)
    colorscale = []
    for level in range(levels):
        colorscale.append((level / levels, colors[level]))
        end = (level + 1) / levels
        colorscale.append((end if level == levels - 1 else end - 1e-6, colors[level]))

    z, hover_text, week_labels = build_heatmap_matrix(grid, uom)
    day_labels = [cell.day.strftime("%a") for cell in grid[0]] if grid else []

    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            text=hover_text,
            hoverinfo="text",
            colorscale=colorscale,
            showscale=False,
            zmin=0,
            zmax=levels - 1,
            xgap=3,
            ygap=3,
        )
    )
    fig.update_layout(
        title=title,
        title_font=dict(color=theme["text_main"], size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=20, r=20, t=40, b=20),
        height=240,
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(len(week_labels))),
            ticktext=week_labels,
            tickfont=dict(color=theme["text_soft"], size=10),
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(len(day_labels))),
            ticktext=day_labels,
            autorange="reversed",
            tickfont=dict(color=theme["text_soft"], size=10),
        ),
    )
    return fig


def daily_value_chart(days, target, title, color, height=260):
    import plotly.graph_objects as go

    dates = [item.day for item in days]
    values = [item.value for item in days]
    fig = go.Figure(
        data=go.Bar(
            x=dates,
            y=values,
            marker=dict(color=color, line=dict(width=0)),
        )
    )
    fig.add_hline(y=target, line_dash="dot", line_color=_active_theme()["accent"])
    apply_common_plot_style(fig, title, show_xgrid=False, show_ygrid=True)
    fig.update_layout(height=height)
    return fig
