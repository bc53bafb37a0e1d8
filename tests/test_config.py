import pytest
from pydantic import ValidationError

from portfolio_tracker.config import AppSettings, get_settings


def test_defaults_match_engine_constants():
    settings = AppSettings()
    assert settings.solver_options() == {"initial_guess": 0.10, "max_iterations": 100, "tolerance": 1e-7}
    assert settings.period_bounds() == {"min_period_return": -0.9, "max_period_return": 10.0}
    assert settings.debug is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORTFOLIO_DEBUG", "true")
    monkeypatch.setenv("PORTFOLIO_MWR_MAX_ITERATIONS", "25")
    settings = get_settings()
    assert settings.debug is True
    assert settings.mwr_max_iterations == 25


def test_dict_for_logging_hides_endpoint():
    settings = AppSettings(telemetry_otlp_endpoint="http://collector:4317")
    assert settings.dict_for_logging()["telemetry_otlp_endpoint"] == "***"
    assert AppSettings().dict_for_logging()["telemetry_otlp_endpoint"] is None


def test_inverted_period_bounds_are_rejected():
    with pytest.raises(ValidationError):
        AppSettings(twr_min_period_return=5.0, twr_max_period_return=1.0)
