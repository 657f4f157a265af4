import pandas as pd
import pytest
import requests


def _series(values, start="2025-04-15"):
    return pd.DataFrame({
        "date": pd.date_range(start, periods=len(values), freq="D"),
        "value": pd.Series(values, dtype="float64"),
    })


def _payload(runoff, precip=None, community="ilorin"):
    precip = runoff if precip is None else precip
    dates = pd.date_range("2025-04-15", periods=max(len(runoff), len(precip)), freq="D")

    def recs(vals):
        return [{"Date": f"{d:%Y-%m-%d}", "Prediction": v} for d, v in zip(dates, vals)]

    return {
        "community": community,
        "maximum_surface_runoff": recs(runoff),
        "total_precipitation": recs(precip),
        "averg_maximum_surface_runoff": {"average risk": 12.5, "message": "Runoff is moderate"},
        "averg_total_precipitation": {"average risk": 40.0, "message": "Rain expected"},
    }


@pytest.fixture
def make_series():
    return _series


@pytest.fixture
def make_payload():
    return _payload


class FakeResponse:
    def __init__(self, payload=None, status=200, bad_json=False):
        self.payload = payload
        self.status_code = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """Maps URL path suffixes to responses (or exceptions to raise)."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        for suffix, result in self.routes.items():
            if url.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                return result
        return FakeResponse(status=404)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse
