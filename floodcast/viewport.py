# floodcast/viewport.py
from dataclasses import dataclass

CANVAS_WIDTH = 1000.0
CANVAS_HEIGHT = 500.0
ZOOM_STEP = 1.1
MIN_ZOOM = 0.5
MAX_ZOOM = 5.0


@dataclass(frozen=True)
class ViewBox:
    x: float
    y: float
    width: float
    height: float

    def as_attr(self) -> str:
        """SVG viewBox attribute value."""
        return f"{self.x:g} {self.y:g} {self.width:g} {self.height:g}"


class Viewport:
    """
    Zoom level and pan offset over a fixed logical canvas.

    The canvas is in data-space units (the SVG user space); the view window is
    canvas / zoom. Pan is stored unclamped; view_box() does the clamping so a
    drag past the edge does not lose the offset accumulated so far.
    """

    def __init__(self, width=CANVAS_WIDTH, height=CANVAS_HEIGHT,
                 min_zoom=MIN_ZOOM, max_zoom=MAX_ZOOM, step=ZOOM_STEP):
        if min_zoom <= 0 or max_zoom < min_zoom:
            raise ValueError(f"Invalid zoom range [{min_zoom}, {max_zoom}]")
        if step <= 1:
            raise ValueError("Zoom step must be greater than 1")
        self.width = float(width)
        self.height = float(height)
        self.min_zoom = float(min_zoom)
        self.max_zoom = float(max_zoom)
        self.step = float(step)
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.series_key = None

    def __repr__(self):
        return f"Viewport(zoom={self.zoom:.4g}, pan=({self.pan_x:.4g}, {self.pan_y:.4g}))"

    @property
    def view_width(self) -> float:
        return self.width / self.zoom

    @property
    def view_height(self) -> float:
        return self.height / self.zoom

    def zoom_at(self, direction: int, cursor=None, pixel_size=None):
        """
        Zoom in (direction > 0) or out (direction < 0) keeping the point under the
        cursor stationary. cursor and pixel_size are (x, y) in screen pixels;
        both default to the canvas itself (cursor at its center).
        """
        if direction == 0:
            return self
        pw, ph = pixel_size or (self.width, self.height)
        cx, cy = cursor or (pw / 2.0, ph / 2.0)

        factor = self.step if direction > 0 else 1.0 / self.step
        new_zoom = max(self.min_zoom, min(self.max_zoom, self.zoom * factor))

        w_before, h_before = self.view_width, self.view_height
        w_after, h_after = self.width / new_zoom, self.height / new_zoom

        self.pan_x -= (w_after - w_before) * (cx / pw) / 2.0
        self.pan_y -= (h_after - h_before) * (cy / ph) / 2.0
        self.zoom = new_zoom
        return self

    def pan_by(self, dx: float, dy: float, pixel_size=None):
        """Drag by (dx, dy) screen pixels; dragging right moves the view left."""
        pw, ph = pixel_size or (self.width, self.height)
        self.pan_x -= dx * (self.view_width / pw)
        self.pan_y -= dy * (self.view_height / ph)
        return self

    def reset(self):
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
        return self

    def follow(self, series_key):
        """Reset whenever the viewed series changes."""
        if series_key != self.series_key:
            self.series_key = series_key
            self.reset()
        return self

    def view_box(self) -> ViewBox:
        vw, vh = self.view_width, self.view_height
        x = max(0.0, min(self.width - vw, self.pan_x))
        y = max(0.0, min(self.height - vh, self.pan_y))
        return ViewBox(x, y, vw, vh)
