import numpy as np
import pytest

from dice_derby.bookie import Bookie, quote
from dice_derby.engine import RaceSettings
from dice_derby.odds_table import HORSE_IDS, BetCategory, BetKey, multiplier_for


@pytest.fixture(scope="module")
def report():
    return Bookie(RaceSettings(), seed=3).run_monte_carlo(simulations=200)


def test_positions_are_permutations(report):
    assert report.positions.shape == (200, 7)
    assert (np.sort(report.positions, axis=1) == np.arange(7)).all()


def test_hit_rates_add_up(report):
    def total(category):
        return sum(report.hit_rates[BetKey.for_horse(category, h)] for h in HORSE_IDS)

    assert total(BetCategory.WIN) == pytest.approx(1.0)
    assert total(BetCategory.PLACE) == pytest.approx(2.0)
    assert total(BetCategory.SHOW) == pytest.approx(3.0)

    colour_winners = sum(
        report.hit_rates[BetKey.color(c)]
        for c in (BetCategory.COLOR_BLUE, BetCategory.COLOR_YELLOW, BetCategory.COLOR_RED)
    )
    assert colour_winners + report.win_probability(7) == pytest.approx(1.0)
    assert report.hit_rates[BetKey.color(BetCategory.COLOR_BLUE)] == pytest.approx(
        sum(report.win_probability(h) for h in (1, 2, 3))
    )


def test_expected_return_uses_multiplier(report):
    for key, rate in report.hit_rates.items():
        assert report.expected_returns[key] == pytest.approx(rate * multiplier_for(key) - 1.0)
    assert len(report.best_bets(3)) == 3
    assert quote(BetCategory.WIN, 4, report=report) == report.expected_returns[BetKey.for_horse(BetCategory.WIN, 4)]


def test_same_seed_same_report():
    a = Bookie(RaceSettings(), seed=8).run_monte_carlo(simulations=50)
    b = Bookie(RaceSettings(), seed=8).run_monte_carlo(simulations=50)
    assert np.array_equal(a.positions, b.positions)


def test_rejects_zero_simulations():
    with pytest.raises(ValueError):
        Bookie(RaceSettings()).run_monte_carlo(simulations=0)


def test_quote_rejects_malformed_keys(report):
    with pytest.raises(ValueError):
        quote(BetCategory.WIN, None, report=report)
    with pytest.raises(ValueError):
        quote(BetCategory.COLOR_RED, 6, report=report)
    with pytest.raises(ValueError):
        quote(BetCategory.SHOW, 8, report=report)
