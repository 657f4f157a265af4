# floodcast/geometry.py
import math
from dataclasses import dataclass, field
from html import escape

import pandas as pd

from floodcast.risk import ThresholdTable, classify
from floodcast.viewport import CANVAS_HEIGHT, CANVAS_WIDTH, ViewBox

LINE_COLOR = "#3b82f6"
AREA_FILL = "rgba(59, 130, 246, 0.2)"
BAR_COLOR = "rgb(54, 162, 235)"
GRID_COLOR = "#e2e8f0"
AXIS_COLOR = "#94a3b8"
LABEL_COLOR = "#64748b"

Y_TICK_COUNT = 6

# Label density: (threshold, target label count)
LINE_X_LABELS = (20, 10)
BAR_X_LABELS = (14, 14)
BAR_VALUE_LABEL_MAX = 10


@dataclass(frozen=True)
class Extent:
    width: float = CANVAS_WIDTH
    height: float = CANVAS_HEIGHT
    padding: float = 50.0

    @property
    def x_min(self):
        return self.padding

    @property
    def plot_width(self):
        return self.width - 2 * self.padding

    @property
    def y_top(self):
        return self.padding

    @property
    def y_bottom(self):
        return self.height - self.padding


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    date: pd.Timestamp
    value: float


@dataclass(frozen=True)
class Bar:
    x: float
    y: float
    width: float
    height: float
    color: str
    date: pd.Timestamp
    value: float


@dataclass
class ChartGeometry:
    kind: str
    extent: Extent
    axis_min: float
    axis_max: float
    points: list = field(default_factory=list)
    bars: list = field(default_factory=list)
    line_path: str = ""
    area_path: str = ""
    y_ticks: list = field(default_factory=list)       # [(value, y)]
    x_labels: list = field(default_factory=list)      # [(x, text)]
    value_labels: list = field(default_factory=list)  # [(x, y, text)]


# -----------------------------
# Coordinate maps
# -----------------------------
def x_at(i: int, n: int, x_min: float, width: float) -> float:
    if n == 1:
        return x_min + width / 2.0
    return x_min + (i / max(n - 1, 1)) * width


def y_at(value: float, axis_min: float, axis_max: float, y_top: float, y_bottom: float) -> float:
    """Pixel y grows downward, so axis_min lands on y_bottom."""
    rng = axis_max - axis_min
    if rng == 0:
        return (y_top + y_bottom) / 2.0
    return y_bottom - ((value - axis_min) / rng) * (y_bottom - y_top)


def auto_axis(values) -> tuple:
    """0 up to the max rounded up to a multiple of 10; a flat series collapses to its value."""
    vals = [float(v) for v in values]
    if not vals:
        return 0.0, 0.0
    if min(vals) == max(vals):
        return vals[0], vals[0]
    top = math.ceil(max(vals) / 10.0) * 10.0
    return 0.0, top if top > 0 else 0.0


def thin_labels(n: int, threshold: int, target: int) -> list:
    """Indices that get a label; every k-th one once n exceeds the threshold."""
    if n <= threshold:
        return list(range(n))
    k = max(1, math.ceil(n / target))
    return [i for i in range(n) if i % k == 0]


def format_date(d) -> str:
    ts = pd.Timestamp(d)
    return f"{ts:%b} {ts.day}"


def _path(points) -> str:
    return " ".join(f"{'M' if i == 0 else 'L'} {p.x:.2f} {p.y:.2f}" for i, p in enumerate(points))


# -----------------------------
# Geometry
# -----------------------------
def build_geometry(series: pd.DataFrame, kind: str = "line", extent: Extent = None,
                   domain=None, table: ThresholdTable = None) -> ChartGeometry:
    """
    Map a forecast series to drawable geometry.

    - kind: 'line' or 'bar'
    - domain: fixed (axis_min, axis_max); None auto-scales to (0, ceil10(max))
    - table: threshold table used to color bars by risk tier
    Every row of the series yields exactly one point (and one bar for bar charts);
    label thinning only decides which of them carry text.
    """
    if kind not in ("line", "bar"):
        raise ValueError(f"Unknown chart kind: {kind}")
    extent = extent or Extent()
    values = series["value"].astype(float).tolist()
    dates = series["date"].tolist()
    n = len(values)

    if domain is not None:
        lo, hi = float(domain[0]), float(domain[1])
        if hi < lo:
            raise ValueError(f"Invalid axis domain ({lo}, {hi})")
    else:
        lo, hi = auto_axis(values)

    geo = ChartGeometry(kind=kind, extent=extent, axis_min=lo, axis_max=hi)

    def ymap(v):
        return y_at(v, lo, hi, extent.y_top, extent.y_bottom)

    geo.points = [
        Point(x_at(i, n, extent.x_min, extent.plot_width), ymap(v), dates[i], v)
        for i, v in enumerate(values)
    ]

    for i in range(Y_TICK_COUNT):
        tick = lo + (i / (Y_TICK_COUNT - 1)) * (hi - lo)
        geo.y_ticks.append((round(tick, 2), ymap(tick)))
    if hi == lo:
        geo.y_ticks = geo.y_ticks[:1]

    if kind == "line":
        if geo.points:
            geo.line_path = _path(geo.points)
            geo.area_path = (
                geo.line_path
                + f" L {geo.points[-1].x:.2f} {extent.y_bottom:.2f}"
                + f" L {geo.points[0].x:.2f} {extent.y_bottom:.2f} Z"
            )
        for i in thin_labels(n, *LINE_X_LABELS):
            geo.x_labels.append((geo.points[i].x, format_date(dates[i])))
        return geo

    slot = extent.plot_width / max(n, 1)
    bar_w = slot * 0.8
    base_y = extent.y_bottom if hi == lo else ymap(lo)
    for i, v in enumerate(values):
        cx = extent.x_min + slot * (i + 0.5)
        top = ymap(v)
        color = classify(v, table).color if table is not None else BAR_COLOR
        geo.bars.append(Bar(cx - bar_w / 2.0, min(top, base_y), bar_w, abs(base_y - top),
                            color, dates[i], v))
    for i in thin_labels(n, *BAR_X_LABELS):
        geo.x_labels.append((geo.bars[i].x + bar_w / 2.0, format_date(dates[i])))
    if n <= BAR_VALUE_LABEL_MAX:
        geo.value_labels = [(b.x + bar_w / 2.0, b.y - 5, f"{b.value:.1f}") for b in geo.bars]
    return geo


# -----------------------------
# SVG rendering
# -----------------------------
def render_svg(geo: ChartGeometry, view_box: ViewBox = None, height_px: int = 320) -> str:
    ext = geo.extent
    vb = view_box or ViewBox(0, 0, ext.width, ext.height)
    bg, grid, label = "#f8fafc", GRID_COLOR, LABEL_COLOR
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="100%" height="{height_px}" '
        f'viewBox="{vb.as_attr()}" preserveAspectRatio="xMidYMid meet">',
        f'<rect x="0" y="0" width="{ext.width:g}" height="{ext.height:g}" fill="{bg}"/>',
    ]
    for value, y in geo.y_ticks:
        parts.append(f'<line x1="{ext.x_min:g}" y1="{y:.2f}" x2="{ext.width - ext.padding:g}" '
                     f'y2="{y:.2f}" stroke="{grid}" stroke-width="1"/>')
        parts.append(f'<text x="{ext.x_min - 10:g}" y="{y:.2f}" text-anchor="end" '
                     f'dominant-baseline="middle" font-size="12" fill="{label}">{value:g}</text>')

    rotate = geo.kind == "bar"
    for x, text in geo.x_labels:
        ly = ext.y_bottom + 20
        transform = f' transform="rotate(45, {x:.2f}, {ly:g})"' if rotate else ""
        parts.append(f'<text x="{x:.2f}" y="{ly:g}" text-anchor="middle" font-size="12" '
                     f'fill="{label}"{transform}>{escape(text)}</text>')

    parts.append(f'<line x1="{ext.x_min:g}" y1="{ext.y_top:g}" x2="{ext.x_min:g}" y2="{ext.y_bottom:g}" '
                 f'stroke="{AXIS_COLOR}" stroke-width="3"/>')
    parts.append(f'<line x1="{ext.x_min:g}" y1="{ext.y_bottom:g}" x2="{ext.width - ext.padding:g}" '
                 f'y2="{ext.y_bottom:g}" stroke="{AXIS_COLOR}" stroke-width="3"/>')

    if geo.kind == "line":
        if geo.area_path:
            parts.append(f'<path d="{geo.area_path}" fill="{AREA_FILL}" stroke="none"/>')
            parts.append(f'<path d="{geo.line_path}" fill="none" stroke="{LINE_COLOR}" stroke-width="3" '
                         f'stroke-linecap="round" stroke-linejoin="round"/>')
        for p in geo.points:
            tip = escape(f"Date: {pd.Timestamp(p.date):%Y-%m-%d} | Risk: {p.value:.2f}")
            parts.append(f'<circle cx="{p.x:.2f}" cy="{p.y:.2f}" r="5" fill="{LINE_COLOR}" '
                         f'stroke="#ffffff" stroke-width="2"><title>{tip}</title></circle>')
    else:
        for b in geo.bars:
            tip = escape(f"Date: {pd.Timestamp(b.date):%Y-%m-%d} | Risk: {b.value:.2f}")
            parts.append(f'<rect x="{b.x:.2f}" y="{b.y:.2f}" width="{b.width:.2f}" height="{b.height:.2f}" '
                         f'fill="{b.color}" opacity="0.85" rx="2"><title>{tip}</title></rect>')
        for x, y, text in geo.value_labels:
            parts.append(f'<text x="{x:.2f}" y="{y:.2f}" text-anchor="middle" font-size="10" '
                         f'fill="{label}">{escape(text)}</text>')

    parts.append("</svg>")
    return "\n".join(parts)
