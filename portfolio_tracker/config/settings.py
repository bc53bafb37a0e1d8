"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Configuration options for the portfolio tracker."""

    app_name: str = Field(default="Portfolio Tracker")
    debug: bool = Field(default=False, description="Emit debug-level diagnostics.")

    mwr_initial_guess: float = Field(default=0.10)
    mwr_max_iterations: int = Field(default=100, gt=0)
    mwr_tolerance: float = Field(default=1e-7, gt=0.0)

    twr_min_period_return: float = Field(
        default=-0.9,
        description="Holding-period returns at or below this are discarded.",
    )
    twr_max_period_return: float = Field(
        default=10.0,
        description="Holding-period returns at or above this are discarded.",
    )

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="portfolio-tracker")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_period_bounds(self) -> AppSettings:
        if self.twr_min_period_return >= self.twr_max_period_return:
            raise ValueError("twr_min_period_return must be below twr_max_period_return")
        return self

    class Config:
        env_prefix = "PORTFOLIO_"
        env_file = ".env"
        env_file_encoding = "utf-8"

    def solver_options(self) -> dict[str, Any]:
        """Keyword arguments for :func:`portfolio_tracker.returns.calculate_mwr`."""

        return {
            "initial_guess": self.mwr_initial_guess,
            "max_iterations": self.mwr_max_iterations,
            "tolerance": self.mwr_tolerance,
        }

    def period_bounds(self) -> dict[str, float]:
        """Keyword arguments for :func:`portfolio_tracker.returns.calculate_twr`."""

        return {
            "min_period_return": self.twr_min_period_return,
            "max_period_return": self.twr_max_period_return,
        }

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"telemetry_otlp_endpoint"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "get_settings",
]
