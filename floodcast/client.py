# floodcast/client.py
import logging
from urllib.parse import quote

import requests

from floodcast.series import ForecastBundle, ForecastFormatError, parse_forecast

logger = logging.getLogger(__name__)

VALUES_PATH = "/api/v2/forecast/values"
FORECAST_PATH = "/api/v2/forecast/{community}/{period}"


class NetworkError(RuntimeError):
    """Fetch failed, came back non-2xx, or could not be parsed."""


class ForecastClient:
    """
    Thin client for the forecast API. Every failure surfaces as NetworkError so
    the caller has one thing to catch before falling back to sample data.
    """

    def __init__(self, base_url: str, timeout: float = 15.0, session: requests.Session = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get_json(self, path: str):
        url = self.base_url + path
        try:
            resp = self.session.get(url, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException as e:
            logger.warning("GET %s failed: %s", url, e)
            raise NetworkError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            logger.warning("GET %s returned invalid JSON: %s", url, e)
            raise NetworkError(f"GET {url} returned invalid JSON") from e

    def get_values(self) -> dict:
        """Selectable communities and periods: {'community': [...], 'period': [...], 'message': str}."""
        js = self._get_json(VALUES_PATH)
        if not isinstance(js, dict):
            raise NetworkError("Values response is not a JSON object")
        return {
            "community": [str(c) for c in js.get("community") or []],
            "period": [str(p) for p in js.get("period") or []],
            "message": str(js.get("message", "")),
        }

    def get_forecast(self, community: str, period: str) -> ForecastBundle:
        path = FORECAST_PATH.format(
            community=quote(community.lower(), safe=""),
            period=quote(period.lower(), safe=""),
        )
        js = self._get_json(path)
        try:
            bundle = parse_forecast(js, community=community, period=period)
        except ForecastFormatError as e:
            logger.warning("Forecast for %s/%s is malformed: %s", community, period, e)
            raise NetworkError(f"Malformed forecast response: {e}") from e
        logger.info("Fetched forecast for %s/%s (%d runoff points)",
                    community, period, len(bundle.series["maximum_surface_runoff"]))
        return bundle
