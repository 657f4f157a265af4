import pytest

from floodcast.viewport import MAX_ZOOM, MIN_ZOOM, ViewBox, Viewport


def test_zoom_in_then_out_at_midpoint_round_trips():
    vp = Viewport()
    vp.zoom_at(+1, (500, 250))
    assert vp.zoom == pytest.approx(1.1)
    vp.zoom_at(-1, (500, 250))
    assert vp.zoom == pytest.approx(1.0)
    assert vp.pan_x == pytest.approx(0.0, abs=1e-9)
    assert vp.pan_y == pytest.approx(0.0, abs=1e-9)


def test_zoom_keeps_cursor_point_stationary_math():
    vp = Viewport(width=1000, height=500)
    vp.zoom_at(+1, (1000, 500))
    before_w, after_w = 1000.0, 1000.0 / 1.1
    before_h, after_h = 500.0, 500.0 / 1.1
    assert vp.pan_x == pytest.approx(-(after_w - before_w) * 1.0 / 2)
    assert vp.pan_y == pytest.approx(-(after_h - before_h) * 1.0 / 2)


def test_cursor_fraction_uses_pixel_size():
    a = Viewport().zoom_at(+1, (100, 50), pixel_size=(200, 100))
    b = Viewport().zoom_at(+1, (500, 250))
    assert a.pan_x == pytest.approx(b.pan_x)
    assert a.pan_y == pytest.approx(b.pan_y)


def test_zoom_is_clamped():
    vp = Viewport()
    for _ in range(40):
        vp.zoom_at(+1)
    assert vp.zoom == MAX_ZOOM
    pan = (vp.pan_x, vp.pan_y)
    vp.zoom_at(+1)
    assert (vp.pan_x, vp.pan_y) == pan

    for _ in range(80):
        vp.zoom_at(-1)
    assert vp.zoom == MIN_ZOOM


def test_zero_direction_is_a_no_op():
    vp = Viewport()
    vp.zoom_at(0, (10, 10))
    assert (vp.zoom, vp.pan_x, vp.pan_y) == (1.0, 0.0, 0.0)


def test_drag_right_moves_view_left():
    vp = Viewport()
    vp.pan_by(50, 0, pixel_size=(500, 250))
    assert vp.pan_x == pytest.approx(-100.0)
    vp.zoom = 2.0
    vp.pan_by(-50, 25, pixel_size=(500, 250))
    assert vp.pan_x == pytest.approx(-50.0)
    assert vp.pan_y == pytest.approx(-25.0)


def test_view_box_is_clamped_to_canvas():
    vp = Viewport()
    vp.zoom = 2.0
    vp.pan_x, vp.pan_y = -100.0, 900.0
    assert vp.view_box() == ViewBox(0.0, 250.0, 500.0, 250.0)
    vp.pan_x = 800.0
    assert vp.view_box().x == 500.0


def test_zoomed_out_view_cannot_pan():
    vp = Viewport()
    vp.zoom = 0.5
    vp.pan_x, vp.pan_y = 300.0, -300.0
    box = vp.view_box()
    assert (box.x, box.y) == (0.0, 0.0)
    assert (box.width, box.height) == (2000.0, 1000.0)


def test_reset_restores_identity_exactly():
    vp = Viewport()
    vp.zoom_at(+1, (123, 45)).zoom_at(+1, (900, 10)).pan_by(37, -12).zoom_at(-1, (5, 400))
    vp.pan_by(-400, 300, pixel_size=(640, 320))
    vp.reset()
    assert (vp.zoom, vp.pan_x, vp.pan_y) == (1, 0, 0)
    assert vp.view_box() == ViewBox(0.0, 0.0, 1000.0, 500.0)


def test_follow_resets_only_when_series_changes():
    vp = Viewport()
    vp.follow("a")
    vp.zoom_at(+1)
    vp.follow("a")
    assert vp.zoom == pytest.approx(1.1)
    vp.follow("b")
    assert vp.zoom == 1.0


def test_view_box_attribute():
    assert Viewport().view_box().as_attr() == "0 0 1000 500"


def test_invalid_configuration():
    with pytest.raises(ValueError):
        Viewport(min_zoom=0)
    with pytest.raises(ValueError):
        Viewport(step=1.0)
