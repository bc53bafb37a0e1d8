"""Core package for the portfolio tracker metrics engine."""

from .models import (
    Asset,
    AssetMetrics,
    AssetType,
    CashFlow,
    CurrencySummary,
    Portfolio,
    PricePoint,
    PriceSource,
    TimelineEvent,
    Transaction,
    TransactionType,
)
from .metrics import compute_asset_metrics
from .portfolio import InMemoryRepository, PortfolioRepository, update_portfolio
from .returns import build_timeline, calculate_mwr, calculate_twr, compute_twr
from .solver import solve_rate

__all__ = [
    "Asset",
    "AssetMetrics",
    "AssetType",
    "CashFlow",
    "CurrencySummary",
    "InMemoryRepository",
    "Portfolio",
    "PortfolioRepository",
    "PricePoint",
    "PriceSource",
    "TimelineEvent",
    "Transaction",
    "TransactionType",
    "build_timeline",
    "calculate_mwr",
    "calculate_twr",
    "compute_asset_metrics",
    "compute_twr",
    "solve_rate",
    "update_portfolio",
]
