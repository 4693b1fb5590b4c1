"""Outcome engine tests: phase odds, scripted wins, win skew and near misses."""
from collections import Counter

import pytest

from conftest import ScriptedRNG
from olympus_slot.logic.models import Symbol
from olympus_slot.logic.outcome import (
    SCRIPTED_WIN_SYMBOLS,
    UPPER_WIN_SYMBOLS,
    OutcomeEngine,
    get_current_odds,
    get_phase,
)
from olympus_slot.logic.rng import SeededRNG


class TestPhaseOdds:
    """Win probability per spin-count range."""

    @pytest.mark.parametrize("spin", [1, 2, 3, 4, 5])
    def test_hook_phase(self, spin: int):
        assert get_current_odds(spin) == 0.90
        assert get_phase(spin) == 1

    @pytest.mark.parametrize("spin", [6, 7, 8, 9, 10])
    def test_sustain_phase(self, spin: int):
        assert get_current_odds(spin) == 0.50
        assert get_phase(spin) == 2

    @pytest.mark.parametrize("spin", [11, 12, 13, 14, 15])
    def test_extract_phase(self, spin: int):
        assert get_current_odds(spin) == 0.10
        assert get_phase(spin) == 3

    def test_engine_method_matches_table(self):
        engine = OutcomeEngine(rng=SeededRNG(seed=1))
        assert [engine.get_current_odds(s) for s in (1, 6, 11)] == [0.90, 0.50, 0.10]


class TestDecideWin:
    """A single draw against the phase odds; win iff draw < odds."""

    def test_draw_equal_to_odds_loses(self):
        engine = OutcomeEngine(rng=ScriptedRNG([0.90]))
        assert engine.decide_win(1) is False

    def test_draw_below_odds_wins(self):
        engine = OutcomeEngine(rng=ScriptedRNG([0.8999]))
        assert engine.decide_win(1) is True

    def test_extract_phase_boundary(self):
        engine = OutcomeEngine(rng=ScriptedRNG([0.10, 0.09]))
        assert engine.decide_win(11) is False
        assert engine.decide_win(11) is True

    def test_observed_rates_track_phases(self):
        engine = OutcomeEngine(rng=SeededRNG(seed=7))
        n = 5000
        for spin, expected in ((3, 0.90), (8, 0.50), (13, 0.10)):
            wins = sum(engine.decide_win(spin) for _ in range(n))
            assert abs(wins / n - expected) < 0.03


class TestWinSymbol:
    """Scripted early wins and the late-game skew toward small prizes."""

    def test_scripted_sequence_values(self):
        assert SCRIPTED_WIN_SYMBOLS == (
            Symbol.TRIDENT,
            Symbol.TROPHY,
            Symbol.TRIDENT,
            Symbol.DIAMOND,
            Symbol.TRIDENT,
        )

    @pytest.mark.parametrize("spin", [1, 2, 3, 4, 5])
    def test_early_wins_follow_script(self, spin: int):
        """Every winning spin 1..5 lands on the scripted symbol, whatever the RNG says."""
        engine = OutcomeEngine(rng=SeededRNG(seed=spin))
        for _ in range(50):
            outcome = engine.decide(spin)
            if outcome.did_win:
                assert outcome.win_symbol == SCRIPTED_WIN_SYMBOLS[spin - 1]

    def test_early_win_consumes_single_draw(self):
        rng = ScriptedRNG([0.0, 0.99])
        engine = OutcomeEngine(rng=rng)
        outcome = engine.decide(2)
        assert outcome.win_symbol == Symbol.TROPHY
        # The second scripted value was not used for symbol selection
        assert rng.random() == 0.99

    @pytest.mark.parametrize(
        "draw,expected",
        [(0.0, Symbol.TRIDENT), (0.59, Symbol.TRIDENT), (0.60, Symbol.TROPHY), (0.84, Symbol.TROPHY)],
    )
    def test_late_low_tiers(self, draw: float, expected: Symbol):
        engine = OutcomeEngine(rng=ScriptedRNG([draw]))
        assert engine.choose_win_symbol(6) == expected

    def test_late_upper_tier_is_uniform_over_four(self):
        rng = ScriptedRNG(seed=3)
        engine = OutcomeEngine(rng=rng)
        seen = Counter()
        for _ in range(2000):
            rng.push(0.85)
            seen[engine.choose_win_symbol(12)] += 1
        assert set(seen) == set(UPPER_WIN_SYMBOLS)
        for count in seen.values():
            assert 400 < count < 600

    def test_late_wins_skew_small(self):
        engine = OutcomeEngine(rng=SeededRNG(seed=11))
        seen = Counter(engine.choose_win_symbol(9) for _ in range(4000))
        assert seen[Symbol.TRIDENT] > seen[Symbol.TROPHY] > seen[Symbol.LIGHTNING]


class TestNearMiss:
    """Every loss shows exactly two matching reels."""

    def test_exactly_two_match(self):
        engine = OutcomeEngine(rng=SeededRNG(seed=99))
        for _ in range(2000):
            triplet = engine.choose_near_miss()
            assert sorted(Counter(triplet).values()) == [1, 2]

    def test_odd_reel_position_varies(self):
        engine = OutcomeEngine(rng=SeededRNG(seed=5))
        positions = set()
        for _ in range(300):
            triplet = engine.choose_near_miss()
            counts = Counter(triplet)
            odd = next(s for s, c in counts.items() if c == 1)
            positions.add(triplet.index(odd))
        assert positions == {0, 1, 2}

    def test_loss_outcome_uses_near_miss(self):
        engine = OutcomeEngine(rng=ScriptedRNG([0.95], seed=8))
        outcome = engine.decide(1)
        assert outcome.did_win is False
        assert outcome.win_symbol is None
        assert sorted(Counter(outcome.target_symbols).values()) == [1, 2]

    def test_win_outcome_shows_three_of_a_kind(self):
        engine = OutcomeEngine(rng=ScriptedRNG([0.0]))
        outcome = engine.decide(4)
        assert outcome.did_win is True
        assert outcome.target_symbols == (Symbol.DIAMOND,) * 3
