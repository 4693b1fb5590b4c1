"""Symbols, reel strips and session state models."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Symbol(str, Enum):
    """Reel glyphs, highest prize first."""
    LIGHTNING = "⚡"
    TEMPLE = "🏛️"
    STAR = "⭐"
    DIAMOND = "💎"
    TROPHY = "🏆"
    TRIDENT = "🔱"


PAYOUTS: dict[Symbol, int] = {
    Symbol.LIGHTNING: 120,
    Symbol.TEMPLE: 90,
    Symbol.STAR: 70,
    Symbol.DIAMOND: 60,
    Symbol.TROPHY: 40,
    Symbol.TRIDENT: 25,
}

# Tier groupings used by win selection and tutor rules
JACKPOT_SYMBOL = Symbol.LIGHTNING
HIGH_TIER_SYMBOLS = (Symbol.TEMPLE, Symbol.STAR)

REELS = 3
STRIP_LENGTH = 24

_L, _T, _S, _D, _C, _R = (
    Symbol.LIGHTNING,
    Symbol.TEMPLE,
    Symbol.STAR,
    Symbol.DIAMOND,
    Symbol.TROPHY,
    Symbol.TRIDENT,
)

REEL_STRIPS: tuple[tuple[Symbol, ...], ...] = (
    (_L, _D, _T, _C, _S, _R, _D, _C, _T, _L, _S, _R,
     _D, _C, _L, _T, _S, _R, _D, _C, _T, _S, _L, _R),
    (_D, _C, _R, _S, _L, _T, _C, _S, _D, _R, _L, _T,
     _D, _C, _S, _R, _L, _T, _S, _C, _D, _R, _L, _T),
    (_C, _L, _S, _D, _R, _T, _L, _D, _S, _C, _R, _T,
     _L, _C, _S, _D, _R, _T, _C, _L, _S, _D, _R, _T),
)


def validate_reel_strips(strips: tuple[tuple[Symbol, ...], ...]) -> None:
    """Raise ValueError unless every strip has the fixed length and carries every symbol."""
    if len(strips) != REELS:
        raise ValueError(f"expected {REELS} reel strips, got {len(strips)}")
    for i, strip in enumerate(strips):
        if len(strip) != STRIP_LENGTH:
            raise ValueError(f"reel {i} has {len(strip)} symbols, expected {STRIP_LENGTH}")
        missing = set(Symbol) - set(strip)
        if missing:
            names = sorted(s.name for s in missing)
            raise ValueError(f"reel {i} is missing symbols: {names}")


validate_reel_strips(REEL_STRIPS)


class SpinOutcome(BaseModel):
    """Decided result of one spin, before any balance is touched."""

    model_config = ConfigDict(frozen=True)

    did_win: bool
    win_symbol: Symbol | None = None
    target_symbols: tuple[Symbol, Symbol, Symbol]


class WinResolution(BaseModel):
    """Prize lookup and LDW classification for a winning symbol."""

    model_config = ConfigDict(frozen=True)

    symbol: Symbol
    prize: int
    is_ldw: bool


class ReelStop(BaseModel):
    """Where one reel comes to rest."""

    model_config = ConfigDict(frozen=True)

    reel: int
    symbol: Symbol
    index: int
    offset: float


class OneShot(str, Enum):
    """Lifecycle of a message that may fire at most once per session."""
    UNFIRED = "unfired"
    FIRED = "fired"


class StreakToggle(str, Enum):
    """Which of the overall winning/losing messages is armed next."""
    WINNING_ARMED = "winning_armed"
    LOSING_ARMED = "losing_armed"


class NotificationFlags(BaseModel):
    """
    Notification state per message category.

    The five one-shots go UNFIRED -> FIRED and never come back.
    The overall streak toggle flips between its two armed states each time
    one of its messages fires.
    """

    model_config = ConfigDict(frozen=True)

    first_real_win: OneShot = OneShot.UNFIRED
    first_ldw: OneShot = OneShot.UNFIRED
    first_jackpot: OneShot = OneShot.UNFIRED
    first_high_win: OneShot = OneShot.UNFIRED
    low_credit_warning: OneShot = OneShot.UNFIRED
    overall_streak: StreakToggle = StreakToggle.WINNING_ARMED

    def fire(self, name: str) -> "NotificationFlags":
        """Return a copy with the named one-shot consumed."""
        if getattr(self, name) is not OneShot.UNFIRED:
            raise ValueError(f"notification {name} already fired")
        return self.model_copy(update={name: OneShot.FIRED})

    def flip_streak(self) -> "NotificationFlags":
        """Return a copy with the overall streak toggle flipped."""
        if self.overall_streak is StreakToggle.WINNING_ARMED:
            nxt = StreakToggle.LOSING_ARMED
        else:
            nxt = StreakToggle.WINNING_ARMED
        return self.model_copy(update={"overall_streak": nxt})

    @property
    def winning_streak_notified(self) -> bool:
        return self.overall_streak is StreakToggle.LOSING_ARMED


class EndCause(str, Enum):
    """Why a session ended."""
    OUT_OF_CREDITS = "outOfCredits"
    REACHED_MAX_SPINS = "reachedMaxSpins"


class EndGameStatus(BaseModel):
    """Result of an end-of-game evaluation."""

    model_config = ConfigDict(frozen=True)

    terminal: bool
    out_of_credits: bool
    reached_max_spins: bool

    @property
    def cause(self) -> EndCause | None:
        if not self.terminal:
            return None
        if self.out_of_credits:
            return EndCause.OUT_OF_CREDITS
        return EndCause.REACHED_MAX_SPINS


class CashOutSummary(BaseModel):
    """Numbers shown when the player walks away."""

    model_config = ConfigDict(frozen=True)

    starting_credits: int
    final_credits: int
    net_change: int
    text: str
    credit_history: list[int] = Field(default_factory=list)


class SessionState(BaseModel):
    """
    Long-lived session state.

    Only GameStateController assigns these fields; everything else gets
    the state for reading.
    """

    credits: int = 1000
    spin_count: int = 0
    wins: int = 0
    losses: int = 0
    is_spinning: bool = False
    credit_history: list[int] = Field(default_factory=list)
    house_earnings: int = 0
    start_time: float = 0.0
    flags: NotificationFlags = Field(default_factory=NotificationFlags)

    # Set by cash-out or end of game; blocks further play
    is_frozen: bool = False
    end_cause: EndCause | None = None

    @classmethod
    def new(cls, starting_credits: int, start_time: float) -> "SessionState":
        """Create a fresh session with the starting balance recorded."""
        return cls(
            credits=starting_credits,
            credit_history=[starting_credits],
            start_time=start_time,
        )


class SpinRejection(str, Enum):
    """Why a spin request was ignored."""
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    SESSION_FROZEN = "SESSION_FROZEN"
    MAX_SPINS_REACHED = "MAX_SPINS_REACHED"
