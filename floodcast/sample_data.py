# floodcast/sample_data.py
# Bundled data shown when the forecast API cannot be reached.
from floodcast.aggregate import KNOWN_TIMEFRAMES
from floodcast.series import ForecastBundle, parse_forecast

FALLBACK_COMMUNITIES = [
    "Ilorin", "Lagos", "Abuja", "Port Harcourt", "Kano", "Enugu", "Kaduna", "Ibadan",
]
FALLBACK_PERIODS = list(KNOWN_TIMEFRAMES)

# Approximate city centres, for the community map
COMMUNITY_LOCATIONS = {
    "ilorin": (8.4966, 4.5421),
    "lagos": (6.5244, 3.3792),
    "abuja": (9.0765, 7.3986),
    "port harcourt": (4.8156, 7.0498),
    "kano": (12.0022, 8.5920),
    "enugu": (6.4584, 7.5464),
    "kaduna": (10.5105, 7.4165),
    "ibadan": (7.3775, 3.9470),
}

_DATES = [f"2025-03-{d:02d}" for d in range(7, 19)]
_RUNOFF = [18.29, 5.22, 11.25, 8.25, 13.96, 18.31, 15.5, 5.44, 12.58, 14.01, 5.53, 5.09]
_PRECIP = [8.9, 9.02, 8.1, 10.87, 11.56, 10.63, 14.12, 8.55, 9.27, 14.58, 11.18, 14.84]


def _records(values):
    return [{"Date": d, "Prediction": v} for d, v in zip(_DATES, values)]


SAMPLE_PAYLOAD = {
    "community": "ilorin",
    "maximum_surface_runoff": _records(_RUNOFF),
    "total_precipitation": _records(_PRECIP),
    "averg_maximum_surface_runoff": {
        "average risk": round(sum(_RUNOFF) / len(_RUNOFF), 2),
        "message": "Sample data: the forecast service is unavailable.",
    },
    "averg_total_precipitation": {
        "average risk": round(sum(_PRECIP) / len(_PRECIP), 2),
        "message": "Sample data: the forecast service is unavailable.",
    },
}


def sample_forecast(community: str, period: str) -> ForecastBundle:
    bundle = parse_forecast(SAMPLE_PAYLOAD, community=community, period=period)
    # Label the sample with the community the user picked
    bundle.community = community
    bundle.is_sample = True
    return bundle
