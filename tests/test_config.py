import logging

from floodcast.config import DEFAULT_API_BASE, Settings, load_settings


def test_defaults():
    assert load_settings({}) == Settings()
    assert load_settings({}).api_base == DEFAULT_API_BASE


def test_values_are_read_and_normalised():
    settings = load_settings({
        "FLOODCAST_API_BASE": " http://localhost:5000/ ",
        "FLOODCAST_HTTP_TIMEOUT": "2.5",
        "FLOODCAST_CACHE_TTL": "300",
        "FLOODCAST_LOG_LEVEL": "debug",
    })
    assert settings == Settings("http://localhost:5000", 2.5, 300, "DEBUG")


def test_bad_numbers_fall_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="floodcast.config"):
        settings = load_settings({"FLOODCAST_HTTP_TIMEOUT": "soon", "FLOODCAST_CACHE_TTL": "-1"})
    assert settings.http_timeout == 15.0
    assert settings.cache_ttl == 600
    assert "FLOODCAST_HTTP_TIMEOUT" in caplog.text
    assert "FLOODCAST_CACHE_TTL" in caplog.text


def test_blank_values_use_defaults():
    settings = load_settings({"FLOODCAST_API_BASE": "", "FLOODCAST_HTTP_TIMEOUT": "  "})
    assert settings == Settings()
