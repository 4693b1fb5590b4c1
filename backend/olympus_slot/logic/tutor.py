"""Tutor message rules.

Every rule is evaluated against a read-only view of the session. Rules that
consume a notification return the updated flags in their decision; the
controller is the one that stores them.
"""
from dataclasses import dataclass, field
from typing import Any

from olympus_slot.logic.models import (
    HIGH_TIER_SYMBOLS,
    JACKPOT_SYMBOL,
    NotificationFlags,
    OneShot,
    SessionState,
    SpinOutcome,
    StreakToggle,
    WinResolution,
)
from olympus_slot.logic.outcome import get_current_odds, get_phase
from olympus_slot.logic.rng import ProductionRNG, RNGBase


# Loss-branch rule
LOSING_STREAK_KEYS = ("losing_streak1", "losing_streak2")
LOSING_STREAK_MIN_SPINS = 5

# Threshold rules
FINAL_WORDS_SPIN = 14
WINNING_OVERALL_ABOVE = 1050
LOSING_OVERALL_BELOW = 950
LOW_CREDITS_BELOW = 400


@dataclass(frozen=True)
class TutorDecision:
    """A message key to show, plus the flags to store afterwards."""

    key: str
    flags: NotificationFlags
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RealityCheck:
    """Elapsed time and net result reported by the periodic reality check."""

    minutes: int
    net_change: int


class TutorMessageSelector:
    """Precedence-ordered rule engine; at most one key per evaluation."""

    def __init__(self, rng: RNGBase | None = None):
        self.rng = rng or ProductionRNG()

    def select_after_spin(
        self,
        state: SessionState,
        outcome: SpinOutcome,
        resolution: WinResolution | None,
    ) -> TutorDecision | None:
        """Evaluate the win or loss branch for a spin that just resolved."""
        flags = state.flags
        if outcome.did_win and resolution is not None:
            symbol = resolution.symbol
            if symbol == JACKPOT_SYMBOL and flags.first_jackpot is OneShot.UNFIRED:
                return TutorDecision("win_jackpot", flags.fire("first_jackpot"))
            if symbol in HIGH_TIER_SYMBOLS and flags.first_high_win is OneShot.UNFIRED:
                return TutorDecision("win_high", flags.fire("first_high_win"))
            if resolution.is_ldw and flags.first_ldw is OneShot.UNFIRED:
                return TutorDecision("first_ldw", flags.fire("first_ldw"))
            if not resolution.is_ldw and flags.first_real_win is OneShot.UNFIRED:
                return TutorDecision("first_win", flags.fire("first_real_win"))
            return None

        if state.losses > state.wins and state.spin_count > LOSING_STREAK_MIN_SPINS:
            return TutorDecision(
                self.rng.choice(LOSING_STREAK_KEYS),
                flags,
                {"wins": state.wins, "losses": state.losses},
            )
        return None

    def select_threshold(self, state: SessionState) -> TutorDecision | None:
        """Evaluate the spin-independent credit and spin-count thresholds."""
        flags = state.flags
        if state.spin_count == FINAL_WORDS_SPIN:
            return TutorDecision("final_words", flags)
        if (
            state.credits > WINNING_OVERALL_ABOVE
            and flags.overall_streak is StreakToggle.WINNING_ARMED
        ):
            return TutorDecision("winning_overall", flags.flip_streak())
        if (
            state.credits < LOSING_OVERALL_BELOW
            and flags.overall_streak is StreakToggle.LOSING_ARMED
        ):
            return TutorDecision("losing_overall", flags.flip_streak())
        if state.credits < LOW_CREDITS_BELOW and flags.low_credit_warning is OneShot.UNFIRED:
            return TutorDecision(
                "low_credits", flags.fire("low_credit_warning"), {"credits": state.credits}
            )
        return None

    def spin_encourage_key(self, spin_count: int, max_spins: int) -> str | None:
        """Key shown as a spin starts."""
        if 0 < spin_count <= max_spins:
            return f"spin_encourage_{spin_count}"
        return None

    def phase_notice(self, spin_count: int, max_spins: int) -> dict[str, Any] | None:
        """
        Parameters for the phase-change notice, if the next spin enters a new phase.

        The odds percentage is derived from the phase table so the notice can
        never disagree with the odds actually used.
        """
        if spin_count <= 0 or spin_count >= max_spins:
            return None
        nxt = spin_count + 1
        if get_phase(nxt) == get_phase(spin_count):
            return None
        return {
            "phase": get_phase(nxt),
            "odds": round(get_current_odds(nxt) * 100),
        }

    def reality_check(
        self,
        credits: int,
        start_time: float,
        now: float,
        starting_credits: int,
    ) -> RealityCheck | None:
        """Whole minutes played and net change; nothing before the first minute."""
        minutes = int((now - start_time) // 60)
        if minutes < 1:
            return None
        return RealityCheck(minutes=minutes, net_change=credits - starting_credits)
