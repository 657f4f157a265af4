# floodcast/state.py
import itertools
import logging
import time
from dataclasses import asdict, dataclass
from datetime import date

import pandas as pd

from floodcast.aggregate import aggregate, window
from floodcast.client import NetworkError
from floodcast.geometry import Extent, build_geometry
from floodcast.risk import InvalidScore, classify, thresholds_for
from floodcast.sample_data import FALLBACK_COMMUNITIES, FALLBACK_PERIODS, sample_forecast
from floodcast.series import METRICS
from floodcast.viewport import Viewport

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
HISTORY_METRIC = "maximum_surface_runoff"
CHART_TYPES = ("line", "bar")

_ids = itertools.count()


@dataclass(frozen=True)
class HistoryItem:
    id: int
    community: str
    date: str
    risk: float
    message: str = ""


class DashboardState:
    """
    Everything the dashboard shows, owned in one place.

    The forecast and the per-chart viewports are only changed by the methods
    below (user actions or fetch completions); charts and risk summaries are
    recomputed from them on every read.
    """

    def __init__(self):
        self.page = "home"
        self.communities = list(FALLBACK_COMMUNITIES)
        self.periods = list(FALLBACK_PERIODS)
        self.catalog_message = ""
        self.catalog_live = False

        self.selected_community = None
        self.timeframe = FALLBACK_PERIODS[0]
        self.default_timeframe = FALLBACK_PERIODS[0]
        self.chart_type = "line"
        self.fullscreen = False

        self.forecast = None
        self.fetch_error = None
        self.history = []
        self.viewports = {metric: Viewport() for metric in METRICS}

        self._seq = 0
        self._pending = None          # (token, community, period, record_history)

    # -----------------------------
    # Catalog (communities / periods)
    # -----------------------------
    def apply_catalog(self, values=None):
        """
        Use the fetched lists when they are non-empty, else keep the bundled
        fallback. None means the discovery request failed.
        """
        values = values or {}
        fetched_c = [c for c in values.get("community", []) if str(c).strip()]
        fetched_p = [p for p in values.get("period", []) if str(p).strip()]
        self.communities = fetched_c or list(FALLBACK_COMMUNITIES)
        self.periods = fetched_p or list(FALLBACK_PERIODS)
        self.catalog_message = values.get("message", "")
        self.catalog_live = bool(fetched_c and fetched_p)
        if self.timeframe not in self.periods:
            self.timeframe = self.periods[0]
        if self.default_timeframe not in self.periods:
            self.default_timeframe = self.periods[0]

    # -----------------------------
    # Selection + fetch lifecycle
    # -----------------------------
    def select_community(self, community: str) -> int:
        self.selected_community = community
        self.timeframe = self.default_timeframe
        self.page = "prediction"
        return self._begin_fetch(record_history=True)

    def select_timeframe(self, timeframe: str) -> int:
        self.timeframe = timeframe
        if self.selected_community is None:
            return self._seq
        return self._begin_fetch(record_history=False)

    def _begin_fetch(self, record_history: bool) -> int:
        self._seq += 1
        self._pending = (self._seq, self.selected_community, self.timeframe, record_history)
        return self._seq

    @property
    def pending(self):
        """(token, community, period) of the request still to be made, or None."""
        if self._pending is None:
            return None
        return self._pending[:3]

    @property
    def loading(self) -> bool:
        return self._pending is not None

    def finish_fetch(self, token: int, bundle) -> bool:
        """Install a fetched forecast unless a newer selection superseded it."""
        if self._pending is None or token != self._pending[0]:
            logger.debug("Discarding stale forecast response (token %s, latest %s)", token, self._seq)
            return False
        record = self._pending[3]
        self._pending = None
        self.forecast = bundle
        for metric, vp in self.viewports.items():
            vp.follow((token, metric))
        if record:
            self._record_history()
        return True

    def fail_fetch(self, token: int, error: Exception) -> bool:
        if self._pending is None or token != self._pending[0]:
            logger.debug("Ignoring failure of stale request %s", token)
            return False
        _, community, period, _ = self._pending
        logger.warning("Forecast fetch for %s/%s failed, showing sample data: %s", community, period, error)
        applied = self.finish_fetch(token, sample_forecast(community, period))
        self.fetch_error = str(error)
        return applied

    # -----------------------------
    # Derived views
    # -----------------------------
    def chart_series(self, metric: str) -> pd.DataFrame:
        series = self.forecast.series[metric]
        # The sample covers every period at once; show the period's slice of it
        if self.forecast.is_sample:
            return window(series, self.timeframe)
        return series

    def risk_summary(self, metric: str):
        if self.forecast is None:
            return None
        table = thresholds_for(metric)
        score = aggregate(self.forecast.series[metric], self.timeframe)
        summary = self.forecast.summaries[metric]
        # a bad service average only costs the banner, not the timeframe score
        try:
            average_tier, average_error = classify(summary.average_risk, table), None
        except InvalidScore as e:
            logger.warning("Unusable average risk for %s: %s", metric, e)
            average_tier, average_error = None, str(e)
        return {
            "metric": metric,
            "label": METRICS[metric],
            "score": score,
            "tier": classify(score, table),
            "average_risk": summary.average_risk,
            "average_tier": average_tier,
            "average_error": average_error,
            "message": summary.message,
            "empty": self.forecast.series[metric].empty,
        }

    def chart(self, metric: str, kind: str = None, extent: Extent = None):
        """Geometry and view box for one metric's chart."""
        vp = self.viewports[metric]
        geo = build_geometry(self.chart_series(metric), kind=kind or self.chart_type,
                             extent=extent or Extent(width=vp.width, height=vp.height),
                             table=thresholds_for(metric))
        return geo, vp.view_box()

    # -----------------------------
    # Settings + history
    # -----------------------------
    def set_chart_type(self, kind: str):
        if kind not in CHART_TYPES:
            raise ValueError(f"Unknown chart type: {kind}")
        self.chart_type = kind

    def toggle_fullscreen(self):
        self.fullscreen = not self.fullscreen

    def _record_history(self):
        series = self.forecast.series.get(HISTORY_METRIC)
        risk = aggregate(series, self.timeframe) if series is not None else 0.0
        summary = self.forecast.summaries.get(HISTORY_METRIC)
        item = HistoryItem(
            id=int(time.time() * 1000) * 1000 + next(_ids) % 1000,
            community=self.selected_community,
            date=date.today().isoformat(),
            risk=risk,
            message=summary.message if summary else "",
        )
        self.history = [item] + self.history[:HISTORY_LIMIT - 1]

    def clear_history(self):
        self.history = []

    def history_frame(self) -> pd.DataFrame:
        cols = ["id", "community", "date", "risk", "message"]
        return pd.DataFrame([asdict(h) for h in self.history], columns=cols)


def load_forecast(state: DashboardState, fetch) -> bool:
    """
    Run the pending request through fetch(community, period) and hand the
    result (or the sample fallback) to the state. Returns True if applied.
    """
    pending = state.pending
    if pending is None:
        return False
    token, community, period = pending
    try:
        bundle = fetch(community, period)
    except NetworkError as e:
        return state.fail_fetch(token, e)
    applied = state.finish_fetch(token, bundle)
    if applied:
        state.fetch_error = None
    return applied
