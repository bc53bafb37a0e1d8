"""Time-weighted return tests."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from portfolio_tracker.models import Transaction, TransactionType
from portfolio_tracker.returns import build_timeline, calculate_twr, compute_twr

AS_OF = date(2023, 12, 31)


def buy(day: str, quantity: float, price: float) -> Transaction:
    return Transaction(date=date.fromisoformat(day), kind=TransactionType.BUY, quantity=quantity, price=price)


def sell(day: str, quantity: float, price: float) -> Transaction:
    return Transaction(date=date.fromisoformat(day), kind=TransactionType.SELL, quantity=quantity, price=price)


def test_empty_transactions_return_zero():
    assert calculate_twr([], 100, AS_OF) == 0


@pytest.mark.parametrize("price", [0, -10])
def test_non_positive_price_returns_zero(price):
    assert calculate_twr([buy("2023-01-01", 10, 150)], price, AS_OF) == 0


def test_no_buys_or_sells_returns_zero():
    dividend = Transaction(date=date(2023, 1, 1), kind=TransactionType.DIVIDEND, quantity=0, price=0)
    assert calculate_twr([dividend], 100, AS_OF) == 0


def test_single_buy_gain():
    assert calculate_twr([buy("2023-01-01", 10, 150)], 165, AS_OF) == pytest.approx(0.1, abs=1e-5)


def test_single_buy_loss():
    assert calculate_twr([buy("2023-01-01", 10, 150)], 135, AS_OF) == pytest.approx(-0.1, abs=1e-5)


def test_chained_buys_compound_each_period():
    transactions = [
        buy("2023-01-15", 2, 150),
        buy("2023-03-10", 3, 160),
        buy("2023-06-05", 2, 170),
        buy("2023-09-20", 4, 180),
        buy("2023-11-15", 1, 190),
    ]
    expected = (160 / 150) * (170 / 160) * (180 / 170) * (190 / 180) * (199.5 / 190) - 1
    result = calculate_twr(transactions, 199.5, AS_OF)
    assert result == pytest.approx(expected)
    assert result == pytest.approx(0.33, abs=1e-2)


def test_mixed_buys_and_sells():
    transactions = [
        buy("2023-01-15", 10, 150),
        buy("2023-03-10", 5, 140),
        sell("2023-05-20", 3, 160),
        buy("2023-07-15", 8, 170),
        sell("2023-09-05", 7, 185),
        buy("2023-11-20", 4, 175),
    ]
    assert calculate_twr(transactions, 192, AS_OF) == pytest.approx(0.28, abs=1e-2)


def test_full_liquidation_ignores_current_price():
    transactions = [buy("2023-01-01", 10, 150), sell("2023-06-01", 10, 180)]
    assert calculate_twr(transactions, 200, AS_OF) == pytest.approx(0.2, abs=1e-5)
    assert calculate_twr(transactions, 20, AS_OF) == pytest.approx(0.2, abs=1e-5)


def test_out_of_order_input_matches_sorted_input():
    shuffled = [buy("2023-06-01", 5, 180), buy("2023-01-01", 5, 150)]
    ordered = list(reversed(shuffled))
    assert calculate_twr(shuffled, 198, AS_OF) == pytest.approx(0.32, abs=1e-5)
    assert calculate_twr(shuffled, 198, AS_OF) == calculate_twr(ordered, 198, AS_OF)


def test_large_gain_within_band_is_kept():
    assert calculate_twr([buy("2023-01-01", 10, 10)], 60, AS_OF) == pytest.approx(5.0, abs=1e-5)


def test_outlier_period_is_discarded():
    # 10 -> 120 is an 1100% single-period gain
    assert calculate_twr([buy("2023-01-01", 10, 10)], 120, AS_OF) == 0


def test_outlier_period_dropped_but_others_kept():
    transactions = [buy("2023-01-01", 1, 10), buy("2023-02-01", 1, 200)]
    # first period (+1900%) is discarded, second (200 -> 220) is kept
    assert calculate_twr(transactions, 220, AS_OF) == pytest.approx(0.1)


def test_vested_and_dividends_stay_off_the_timeline():
    vested = Transaction(date=date(2023, 3, 1), kind=TransactionType.VESTED, quantity=50, price=0)
    transactions = [buy("2023-01-01", 10, 100), vested]
    timeline = build_timeline(transactions, 110, AS_OF)
    assert [event.is_transaction for event in timeline] == [True, False]
    assert timeline[-1].holdings_after == 10
    assert calculate_twr(transactions, 110, AS_OF) == pytest.approx(0.1)


def test_timeline_tracks_holdings_and_values():
    timeline = build_timeline(
        [sell("2023-05-01", 4, 120), buy("2023-01-01", 10, 100)], 130, AS_OF
    )
    assert [e.date for e in timeline] == [date(2023, 1, 1), date(2023, 5, 1), AS_OF]
    assert [e.holdings_after for e in timeline] == [10, 6, 6]
    assert [e.value_after for e in timeline] == [1000, 720, 780]
    assert timeline[-1].is_transaction is False


def test_same_day_valuation_sorts_after_transaction():
    timeline = build_timeline([buy("2023-12-31", 10, 100)], 105, AS_OF)
    assert [e.is_transaction for e in timeline] == [True, False]


def test_valuation_before_last_trade_moves_to_trade_date():
    transactions = [buy("2023-01-01", 10, 100), buy("2023-06-01", 10, 120)]
    timeline = build_timeline(transactions, 130, date(2023, 3, 1))
    assert timeline[-1].is_transaction is False
    assert timeline[-1].date == date(2023, 6, 1)
    assert compute_twr(timeline) == pytest.approx(130 / 100 - 1)


def test_compounded_loss_is_clamped():
    transactions = [buy("2023-01-01", 1, 100), buy("2023-02-01", 1, 20), buy("2023-03-01", 1, 4)]
    # two -80% periods compound to -96%, below the -90% floor
    assert calculate_twr(transactions, 4, AS_OF) == pytest.approx(-0.9)


def test_compounded_gain_is_clamped():
    transactions = [buy("2023-01-01", 1, 10), buy("2023-02-01", 1, 80), buy("2023-03-01", 1, 640)]
    # two +700% periods compound to +6300%, above the 1000% ceiling
    assert calculate_twr(transactions, 640, AS_OF) == pytest.approx(10)


def test_custom_period_bounds():
    assert calculate_twr([buy("2023-01-01", 10, 10)], 60, AS_OF, max_period_return=4) == 0


def test_diagnostics_go_only_to_supplied_logger(caplog):
    sink = logging.getLogger("tests.twr.sink")
    transactions = [buy("2023-01-01", 1, 1), buy("2023-06-01", 1, 13)]
    with caplog.at_level(logging.DEBUG):
        # early valuation date and a +1200% period both produce diagnostics
        calculate_twr(transactions, 13, date(2023, 3, 1), diagnostics=sink)
    names = {record.name for record in caplog.records}
    assert names == {"tests.twr.sink"}
    assert any("precedes last trade" in record.getMessage() for record in caplog.records)


def test_build_timeline_accepts_diagnostics(caplog):
    sink = logging.getLogger("tests.timeline.sink")
    with caplog.at_level(logging.DEBUG):
        build_timeline([buy("2023-06-01", 1, 10)], 10, date(2023, 1, 1), diagnostics=sink)
    assert [record.name for record in caplog.records] == ["tests.timeline.sink"]
