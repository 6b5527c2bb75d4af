# common/plots.py
from __future__ import annotations
import logging
import warnings
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.cm import ScalarMappable
from matplotlib.colors import Normalize
from matplotlib.patches import Patch, Polygon, Rectangle
from matplotlib.ticker import FuncFormatter

from .colors import (
    ATTENDANCE_CMAP, BAR_COLOR, BOX_COLOR, LINE_COLOR, NO_DATA_COLOR, NO_DATA_HATCH,
    OUTLIER_COLOR, categorical_palette, colors_by_label, text_color_for, tile_shades,
)
from .constants import FIGSIZE, FIGURE_DPI, NO_DATA_LABEL
from .errors import RenderDegraded
from .geo import EmptyRegionSource, RegionSource, region_name_for, unmatched_regions

LOGGER = logging.getLogger(__name__)

DEFAULT_FIGSIZE = FIGSIZE

CHART_KINDS = ("line", "pie", "bar", "treemap", "choropleth", "boxplot")

# Small, readable defaults applied while a chart is drawn
RC_PARAMS = {
    "axes.titlesize": 11,
    "axes.labelsize": 9,
    "xtick.labelsize": 8,
    "ytick.labelsize": 8,
    "legend.fontsize": 8,
}

_thousands = FuncFormatter(lambda v, _pos: f"{v:,.0f}")


def _new_ax(ax=None, figsize=DEFAULT_FIGSIZE):
    """Return a figure/axes when ax is None; otherwise reuse the axes."""
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    return fig, ax


def _no_data(ax, message: str = NO_DATA_LABEL) -> plt.Axes:
    """Placeholder panel so a chart with nothing to show is never blank."""
    ax.add_patch(Rectangle((0.05, 0.1), 0.9, 0.8, facecolor=NO_DATA_COLOR,
                           hatch=NO_DATA_HATCH, edgecolor="grey", transform=ax.transAxes))
    ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=12,
            transform=ax.transAxes, bbox=dict(facecolor="white", edgecolor="grey"))
    ax.set_axis_off()
    return ax


def _warn_degraded(message: str) -> None:
    LOGGER.warning(message)
    warnings.warn(message, RenderDegraded, stacklevel=3)


# --- Mean attendance per year (line + points) ---
def plot_attendance_line(summary: pd.DataFrame,
                         ax: Optional[plt.Axes] = None,
                         title: str = "") -> plt.Axes:
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    if summary.empty:
        return _no_data(ax)

    x = summary["year"].to_numpy(dtype=int)
    y = summary["mean_attendance"].to_numpy(dtype=float)
    ax.plot(x, y, color=LINE_COLOR, linewidth=2, marker="o", markersize=5)
    ax.set_xticks(x)
    ax.tick_params(axis="x", rotation=60)
    ax.yaxis.set_major_formatter(_thousands)
    ax.set_xlabel("Year"); ax.set_ylabel("Mean attendance")
    ax.grid(axis="y", linestyle="--", alpha=0.6)
    return ax


# --- Share of final appearances (donut) ---
def plot_final_share_pie(summary: pd.DataFrame,
                         ax: Optional[plt.Axes] = None,
                         title: str = "") -> plt.Axes:
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    if summary.empty or float(summary["share"].sum()) <= 0:
        return _no_data(ax)

    ax.pie(
        summary["share"].to_numpy(dtype=float),
        labels=summary["team"].astype(str).tolist(),
        colors=categorical_palette(len(summary)),
        autopct="%1.1f%%",
        pctdistance=0.78,
        startangle=90,
        counterclock=False,
        wedgeprops={"width": 0.45, "edgecolor": "white"},
        textprops={"fontsize": 8},
    )
    ax.set_aspect("equal")
    return ax


# --- Ranked matchups (horizontal bars) ---
def plot_matchup_bar(summary: pd.DataFrame,
                     ax: Optional[plt.Axes] = None,
                     title: str = "") -> plt.Axes:
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    if summary.empty:
        return _no_data(ax)

    values = summary["mean_attendance"].to_numpy(dtype=float)
    y = np.arange(len(summary))
    ax.barh(y, values, color=BAR_COLOR, edgecolor="#222222", height=0.6)
    ax.set_yticks(y, summary["matchup"].astype(str).tolist())
    ax.invert_yaxis()      # highest first
    ax.xaxis.set_major_formatter(_thousands)
    ax.set_xlabel("Mean attendance")
    ax.set_xlim(0, values.max() * 1.15)
    ax.xaxis.grid(True, linestyle="--", alpha=0.6)
    ax.set_axisbelow(True)

    for i, v in enumerate(values):
        ax.text(v, i, f" {v:,.0f}", va="center", fontsize=7)
    return ax


# --- Goals per stage and team (two-level treemap) ---
def plot_goal_treemap(tally: pd.DataFrame,
                      ax: Optional[plt.Axes] = None,
                      title: str = "",
                      min_label_area: float = 0.004) -> plt.Axes:
    """
    Slice-and-dice treemap: one vertical slice per stage (width ~ stage
    goals), split into one tile per team (height ~ team goals). Stages keep
    the order of `tally`, which `stage_goal_tally` sorts by tournament stage.
    """
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    data = tally[tally["goals"] > 0]
    if data.empty:
        return _no_data(ax)

    stages = list(pd.unique(data["stage"]))
    stage_col = colors_by_label(stages)
    total = float(data["goals"].sum())

    x = 0.0
    handles = []
    for stage in stages:
        sub = data[data["stage"] == stage]
        stage_goals = float(sub["goals"].sum())
        w = stage_goals / total
        top = 1.0
        for (_, r), col in zip(sub.iterrows(), tile_shades(stage_col[stage], len(sub))):
            h = r["goals"] / stage_goals
            ax.add_patch(Rectangle((x, top - h), w, h, facecolor=col, edgecolor="white", linewidth=0.6))
            if w * h >= min_label_area:
                ax.text(x + w / 2, top - h / 2, f'{r["team"]}\n{int(r["goals"])}',
                        ha="center", va="center", fontsize=5.5, color=text_color_for(col), clip_on=True)
            top -= h
        ax.add_patch(Rectangle((x, 0.0), w, 1.0, fill=False, edgecolor="black", linewidth=1.0))
        handles.append(Patch(facecolor=stage_col[stage], label=f"{stage} ({int(stage_goals)})"))
        x += w

    ax.set_xlim(0, 1); ax.set_ylim(0, 1)
    ax.set_axis_off()
    ax.legend(handles=handles, loc="center left", bbox_to_anchor=(1.01, 0.5),
              frameon=False, title="Stage (goals)")
    return ax


# --- Attendance by host nation (choropleth) ---
def _host_values(hosts: pd.DataFrame) -> Dict[str, float]:
    """
    {region name (casefolded) -> mean attendance} for hosts with data. Hosts
    sharing a region (Germany FR / Germany) are pooled, weighted by matches.
    """
    sums: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for host, v, n in zip(hosts["host"], hosts["mean_attendance"], hosts["matches"]):
        if pd.isna(v) or n <= 0:
            continue
        key = region_name_for(host).casefold()
        sums[key] = sums.get(key, 0.0) + float(v) * int(n)
        counts[key] = counts.get(key, 0) + int(n)
    return {k: sums[k] / counts[k] for k in sums}


def _host_swatches(ax, hosts: pd.DataFrame, cmap, norm) -> None:
    """Fallback without polygons: one labelled swatch per host."""
    n = max(len(hosts), 1)
    step = 1.0 / n
    for i, (host, v) in enumerate(zip(hosts["host"], hosts["mean_attendance"])):
        y = 1.0 - (i + 1) * step
        has = pd.notna(v)
        ax.add_patch(Rectangle((0.02, y + 0.1 * step), 0.06, 0.8 * step,
                               facecolor=cmap(norm(v)) if has else NO_DATA_COLOR,
                               hatch=None if has else NO_DATA_HATCH, edgecolor="grey"))
        label = f"{host}: {v:,.0f}" if has else f"{host}: {NO_DATA_LABEL}"
        ax.text(0.1, y + step / 2, label, va="center", fontsize=7)
    ax.set_xlim(0, 1); ax.set_ylim(0, 1)


def plot_host_choropleth(hosts: pd.DataFrame,
                         regions: Optional[RegionSource] = None,
                         ax: Optional[plt.Axes] = None,
                         title: str = "") -> plt.Axes:
    """
    Fill each host nation's polygon by its mean attendance. Regions without a
    value (other countries, hosts without matches) get the "no data" color;
    hosts without a value are also hatched. Hosts that have no polygon are
    listed under the map. Both cases warn with `RenderDegraded`.
    """
    regions = regions if regions is not None else EmptyRegionSource()
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    if hosts.empty:
        return _no_data(ax)

    values = _host_values(hosts)
    cmap = matplotlib.colormaps[ATTENDANCE_CMAP]
    if values:
        lo, hi = min(values.values()), max(values.values())
        norm = Normalize(vmin=lo, vmax=hi if hi > lo else lo + 1.0)
    else:
        norm = Normalize(vmin=0.0, vmax=1.0)

    host_keys = {region_name_for(h).casefold() for h in hosts["host"]}
    no_data_hosts = hosts.loc[hosts["mean_attendance"].isna(), "host"].tolist()
    no_polygon = unmatched_regions(regions, hosts["host"])

    names = regions.names()
    if not names:
        _warn_degraded("No region polygons available; host attendance drawn as a list")
        _host_swatches(ax, hosts, cmap, norm)
    else:
        for name in names:
            key = name.casefold()
            v = values.get(key)
            is_host = key in host_keys
            for ring in regions.lookup(name) or []:
                ax.add_patch(Polygon(
                    ring, closed=True,
                    facecolor=cmap(norm(v)) if v is not None else NO_DATA_COLOR,
                    hatch=NO_DATA_HATCH if (is_host and v is None) else None,
                    edgecolor="white" if not is_host else "#444444",
                    linewidth=0.3 if not is_host else 0.6,
                ))
        ax.autoscale_view()
        ax.set_aspect("equal")
        if no_polygon:
            _warn_degraded(f"No polygon for host nation(s): {', '.join(no_polygon)}")
            ax.text(0.0, -0.02, f"{NO_DATA_LABEL} (no polygon): {', '.join(no_polygon)}",
                    transform=ax.transAxes, ha="left", va="top", fontsize=7)
    if no_data_hosts:
        _warn_degraded(f"No attendance data for host nation(s): {', '.join(no_data_hosts)}")

    ax.set_axis_off()
    if values:
        fig.colorbar(ScalarMappable(norm=norm, cmap=cmap), ax=ax, shrink=0.6,
                     label="Mean attendance", format=_thousands)
    ax.legend(handles=[Patch(facecolor=NO_DATA_COLOR, hatch=NO_DATA_HATCH, edgecolor="grey",
                             label=NO_DATA_LABEL)], loc="lower left", frameon=False)
    return ax


# --- Goals per match by decade (boxplot) ---
def plot_goals_boxplot(dist: pd.DataFrame,
                       ax: Optional[plt.Axes] = None,
                       title: str = "") -> plt.Axes:
    fig, ax = _new_ax(ax)
    ax.set_title(title)
    if dist.empty:
        return _no_data(ax)

    decades = sorted(int(d) for d in dist["decade"].unique())
    data = [dist.loc[dist["decade"] == d, "goals"].to_numpy(dtype=float) for d in decades]
    pos = np.arange(1, len(decades) + 1)

    bp = ax.boxplot(
        data, positions=pos, widths=0.6, patch_artist=True, showfliers=True,
        medianprops={"color": "black", "linewidth": 1.5},
        flierprops={"marker": "o", "markersize": 4, "markerfacecolor": OUTLIER_COLOR,
                    "markeredgecolor": OUTLIER_COLOR, "alpha": 0.8},
    )
    for box in bp["boxes"]:
        box.set_facecolor(BOX_COLOR)
    ax.set_xticks(pos, [f"{d}s" for d in decades])
    ax.set_xlabel("Decade"); ax.set_ylabel("Goals per match")
    ax.yaxis.grid(True, linestyle="--", alpha=0.6)
    ax.set_axisbelow(True)
    return ax


# --- Chart specs & rendering ----------------
@dataclass(frozen=True, eq=False)
class ChartSpec:
    kind: str
    title: str
    data: pd.DataFrame


class MatplotlibRenderer:
    """
    Draws a `ChartSpec` with matplotlib and returns PNG bytes.

    The region source is only used by choropleths. Figures have a fixed size
    and dpi and the PNG carries no software stamp, so the same spec always
    yields the same bytes.
    """

    def __init__(self, regions: Optional[RegionSource] = None,
                 figsize: Tuple[float, float] = DEFAULT_FIGSIZE,
                 dpi: int = FIGURE_DPI):
        self.regions = regions if regions is not None else EmptyRegionSource()
        self.figsize = figsize
        self.dpi = dpi

    def draw(self, spec: ChartSpec, ax: plt.Axes) -> plt.Axes:
        if spec.kind == "line":
            return plot_attendance_line(spec.data, ax=ax, title=spec.title)
        if spec.kind == "pie":
            return plot_final_share_pie(spec.data, ax=ax, title=spec.title)
        if spec.kind == "bar":
            return plot_matchup_bar(spec.data, ax=ax, title=spec.title)
        if spec.kind == "treemap":
            return plot_goal_treemap(spec.data, ax=ax, title=spec.title)
        if spec.kind == "choropleth":
            return plot_host_choropleth(spec.data, self.regions, ax=ax, title=spec.title)
        if spec.kind == "boxplot":
            return plot_goals_boxplot(spec.data, ax=ax, title=spec.title)
        raise ValueError(f"Unknown chart kind {spec.kind!r}; expected one of {CHART_KINDS}")

    def render(self, spec: ChartSpec) -> bytes:
        with plt.rc_context(RC_PARAMS):
            fig, ax = plt.subplots(figsize=self.figsize)
            try:
                self.draw(spec, ax)
                buf = BytesIO()
                fig.savefig(buf, format="png", dpi=self.dpi, bbox_inches="tight",
                            metadata={"Software": None})
            finally:
                plt.close(fig)
        LOGGER.debug("Rendered %s chart %r (%d bytes)", spec.kind, spec.title, buf.tell())
        return buf.getvalue()
