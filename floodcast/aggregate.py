# floodcast/aggregate.py
import pandas as pd

KNOWN_TIMEFRAMES = ["today", "tomorrow", "week", "month", "year"]

# How many leading points each timeframe's chart shows (None = all)
WINDOW_SIZES = {
    "today": 1,
    "tomorrow": 2,
    "week": 7,
    "month": 30,
    "year": None,
}


def _values(series) -> pd.Series:
    if isinstance(series, pd.DataFrame):
        return series["value"].astype(float).reset_index(drop=True)
    return pd.Series([float(p) for p in series], dtype="float64")


def aggregate(series, timeframe: str) -> float:
    """
    Reduce a forecast series to one score for the timeframe:
      today    -> first value
      tomorrow -> second value (first if there is only one)
      week     -> mean of the first 7 values (or fewer)
      month / year / anything else -> mean of the whole series
    An empty series scores 0.0 for every timeframe. No rounding happens here.
    """
    vals = _values(series)
    if vals.empty:
        return 0.0

    tf = (timeframe or "").lower()
    if tf == "today":
        return float(vals.iloc[0])
    if tf == "tomorrow":
        return float(vals.iloc[1] if len(vals) >= 2 else vals.iloc[0])
    if tf == "week":
        return float(vals.head(7).mean())
    return float(vals.mean())


def window(series: pd.DataFrame, timeframe: str) -> pd.DataFrame:
    """Leading slice of the series that a chart shows for the timeframe."""
    size = WINDOW_SIZES.get((timeframe or "").lower())
    if size is None:
        return series.reset_index(drop=True)
    return series.head(size).reset_index(drop=True)


def format_score(value: float) -> str:
    return f"{value:.2f}"
