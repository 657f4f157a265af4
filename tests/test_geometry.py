import math

import pytest

from floodcast.geometry import (
    BAR_COLOR,
    Extent,
    auto_axis,
    build_geometry,
    format_date,
    render_svg,
    thin_labels,
    x_at,
    y_at,
)
from floodcast.risk import HIGH, LOW, SURFACE_RUNOFF_THRESHOLDS
from floodcast.viewport import Viewport


@pytest.mark.parametrize("n", [1, 2, 7, 25, 100, 365])
@pytest.mark.parametrize("kind", ["line", "bar"])
def test_one_point_per_row_regardless_of_thinning(make_series, n, kind):
    s = make_series([float(i % 17) for i in range(n)])
    geo = build_geometry(s, kind=kind)
    assert len(geo.points) == n
    if kind == "bar":
        assert len(geo.bars) == n
    assert len(geo.x_labels) <= n


def test_x_positions_span_plot_width():
    ext = Extent()
    xs = [x_at(i, 3, ext.x_min, ext.plot_width) for i in range(3)]
    assert xs == [50.0, 500.0, 950.0]


def test_single_point_is_centered():
    assert x_at(0, 1, 50.0, 900.0) == 500.0


def test_y_is_inverted():
    assert y_at(0, 0, 30, 50, 450) == 450
    assert y_at(30, 0, 30, 50, 450) == 50
    assert y_at(15, 0, 30, 50, 450) == 250


def test_identical_values_map_to_midpoint(make_series):
    geo = build_geometry(make_series([7.25] * 12), kind="line")
    ext = geo.extent
    mid = (ext.y_top + ext.y_bottom) / 2.0
    assert all(p.y == mid for p in geo.points)
    assert len(geo.y_ticks) == 1


def test_auto_axis_rounds_up_to_tens():
    assert auto_axis([8.88, 28.92]) == (0.0, 30.0)
    assert auto_axis([1, 2, 91.2]) == (0.0, 100.0)
    assert auto_axis([4.0, 20.0]) == (0.0, 20.0)
    assert auto_axis([]) == (0.0, 0.0)
    assert auto_axis([3.3, 3.3]) == (3.3, 3.3)


def test_auto_scaled_geometry(make_series):
    geo = build_geometry(make_series([8.88, 28.92]), kind="line")
    assert (geo.axis_min, geo.axis_max) == (0.0, 30.0)
    assert geo.y_ticks[0] == (0.0, 450.0)
    assert geo.y_ticks[-1] == (30.0, 50.0)
    assert len(geo.y_ticks) == 6
    assert geo.line_path.startswith("M 50.00 ")
    assert geo.area_path.endswith(" Z")


def test_fixed_domain_is_respected(make_series):
    geo = build_geometry(make_series([10.0, 35.0]), kind="line", domain=(0, 20))
    assert (geo.axis_min, geo.axis_max) == (0.0, 20.0)
    assert geo.points[0].y == 250.0
    # the data scale does not follow the viewport
    vp = Viewport()
    vp.zoom_at(+1).zoom_at(+1)
    again = build_geometry(make_series([10.0, 35.0]), kind="line", domain=(0, 20))
    assert [p.y for p in again.points] == [p.y for p in geo.points]


def test_invalid_domain(make_series):
    with pytest.raises(ValueError):
        build_geometry(make_series([1.0]), domain=(5, 1))


def test_unknown_kind(make_series):
    with pytest.raises(ValueError):
        build_geometry(make_series([1.0]), kind="pie")


def test_thin_labels():
    assert thin_labels(20, 20, 10) == list(range(20))
    assert thin_labels(25, 20, 10) == list(range(0, 25, math.ceil(25 / 10)))
    assert thin_labels(30, 14, 14) == [0, 3, 6, 9, 12, 15, 18, 21, 24, 27]
    assert thin_labels(0, 20, 10) == []


def test_line_label_thinning(make_series):
    geo = build_geometry(make_series([1.0] * 25), kind="line")
    assert len(geo.x_labels) == 9
    assert len(geo.points) == 25
    short = build_geometry(make_series([1.0] * 20), kind="line")
    assert len(short.x_labels) == 20


def test_bar_labels(make_series):
    many = build_geometry(make_series([5.0] * 30), kind="bar")
    assert len(many.x_labels) == 10
    assert many.value_labels == []
    few = build_geometry(make_series([5.0, 12.0, 28.92]), kind="bar")
    assert [t for _, _, t in few.value_labels] == ["5.0", "12.0", "28.9"]


def test_bars_colored_by_tier(make_series):
    geo = build_geometry(make_series([2.0, 28.92]), kind="bar", table=SURFACE_RUNOFF_THRESHOLDS)
    assert [b.color for b in geo.bars] == [LOW.color, HIGH.color]
    plain = build_geometry(make_series([2.0, 28.92]), kind="bar")
    assert {b.color for b in plain.bars} == {BAR_COLOR}


def test_bars_stand_on_axis(make_series):
    geo = build_geometry(make_series([15.0, 30.0]), kind="bar")
    ext = geo.extent
    for b in geo.bars:
        assert b.y + b.height == pytest.approx(ext.y_bottom)
    assert geo.bars[1].y == pytest.approx(ext.y_top)


def test_empty_series_geometry(make_series):
    geo = build_geometry(make_series([]), kind="line")
    assert geo.points == [] and geo.line_path == "" and geo.x_labels == []


def test_format_date():
    assert format_date("2025-04-05") == "Apr 5"


def test_render_svg_uses_view_box(make_series):
    s = make_series([8.88, 28.92, 14.0])
    vp = Viewport(height=500)
    vp.zoom_at(+1)
    svg = render_svg(build_geometry(s, kind="line"), vp.view_box())
    assert f'viewBox="{vp.view_box().as_attr()}"' in svg
    assert svg.count("<circle") == 3
    assert "Date: 2025-04-16 | Risk: 28.92" in svg

    bar_svg = render_svg(build_geometry(s, kind="bar"))
    assert bar_svg.count("<rect") == 1 + 3
    assert 'viewBox="0 0 1000 500"' in bar_svg
