# floodcast/series.py
import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Payload keys of the v2 forecast endpoint
METRICS = {
    "maximum_surface_runoff": "Maximum Surface Runoff",
    "total_precipitation": "Total Precipitation",
}
SUMMARY_KEYS = {
    "maximum_surface_runoff": "averg_maximum_surface_runoff",
    "total_precipitation": "averg_total_precipitation",
}


class ForecastFormatError(ValueError):
    """The forecast payload is missing something every response must carry."""


@dataclass(frozen=True)
class MetricSummary:
    average_risk: float
    message: str = ""


@dataclass
class ForecastBundle:
    """One API response: a series and a summary per metric."""
    community: str
    period: str
    series: dict = field(default_factory=dict)     # metric -> DataFrame['date','value']
    summaries: dict = field(default_factory=dict)  # metric -> MetricSummary
    is_sample: bool = False


def empty_series() -> pd.DataFrame:
    return pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"),
                         "value": pd.Series(dtype="float64")})


def series_from_records(records) -> pd.DataFrame:
    """
    Turn API records [{'Date': 'YYYY-MM-DD', 'Prediction': float}, ...] into a
    DataFrame with columns ['date', 'value'], keeping the order they arrived in.
    Records with an unreadable date or value are dropped (and logged).
    """
    if not records:
        return empty_series()
    if not isinstance(records, list):
        raise ForecastFormatError(f"Forecast series must be a list, got {type(records).__name__}")

    df = pd.DataFrame([r if isinstance(r, dict) else {} for r in records])
    missing = [c for c in ("Date", "Prediction") if c not in df.columns]
    if missing:
        raise ForecastFormatError(f"Forecast records missing field(s): {missing}")
    dates = pd.to_datetime(df["Date"], errors="coerce")
    values = pd.to_numeric(df["Prediction"], errors="coerce")
    out = pd.DataFrame({"date": dates, "value": values.astype(float)})

    bad = out["date"].isna() | out["value"].isna() | ~np.isfinite(out["value"])
    if bad.any():
        logger.warning("Dropping %d unreadable forecast record(s)", int(bad.sum()))
        out = out.loc[~bad]
    return out.reset_index(drop=True)


def _summary_from(obj, metric) -> MetricSummary:
    if not isinstance(obj, dict):
        raise ForecastFormatError(f"Missing summary object for {metric}")
    raw = obj.get("average risk", obj.get("average_risk"))
    try:
        avg = float(raw)
    except (TypeError, ValueError):
        raise ForecastFormatError(f"Summary for {metric} has no numeric 'average risk'") from None
    return MetricSummary(average_risk=avg, message=str(obj.get("message", "")))


def parse_forecast(payload, community: str, period: str) -> ForecastBundle:
    if not isinstance(payload, dict):
        raise ForecastFormatError("Forecast payload must be a JSON object")

    bundle = ForecastBundle(community=payload.get("community") or community, period=period)
    for metric in METRICS:
        if metric not in payload:
            raise ForecastFormatError(f"Forecast payload has no '{metric}' series")
        bundle.series[metric] = series_from_records(payload[metric])
        bundle.summaries[metric] = _summary_from(payload.get(SUMMARY_KEYS[metric]), metric)
    return bundle


def series_to_frame(bundle: ForecastBundle) -> pd.DataFrame:
    """Wide table (date + one column per metric) for display and CSV export."""
    wide = None
    for metric, df in bundle.series.items():
        part = df.rename(columns={"value": metric})
        wide = part if wide is None else wide.merge(part, on="date", how="outer")
    if wide is None:
        wide = empty_series()[["date"]]
    wide = wide.reset_index(drop=True)
    wide.insert(0, "community", bundle.community)
    return wide
