"""Phase-based win/loss decisions and reel target selection."""
from olympus_slot.logic.models import Symbol, SpinOutcome
from olympus_slot.logic.rng import ProductionRNG, RNGBase


# === Odds phases: (last spin of phase, win probability) ===
PHASES: tuple[tuple[int, float], ...] = (
    (5, 0.90),   # hook
    (10, 0.50),  # sustain
    (15, 0.10),  # extract
)

# Spins 1..5 always pay these symbols when they win
SCRIPTED_WIN_SYMBOLS: tuple[Symbol, ...] = (
    Symbol.TRIDENT,
    Symbol.TROPHY,
    Symbol.TRIDENT,
    Symbol.DIAMOND,
    Symbol.TRIDENT,
)

# Late-game win symbol weights
LOWEST_TIER_CUTOFF = 0.60
SECOND_TIER_CUTOFF = 0.85
UPPER_WIN_SYMBOLS: tuple[Symbol, ...] = (
    Symbol.LIGHTNING,
    Symbol.TEMPLE,
    Symbol.STAR,
    Symbol.DIAMOND,
)

ALL_SYMBOLS: tuple[Symbol, ...] = tuple(Symbol)


def get_phase(spin_count: int) -> int:
    """Return the 1-based phase a spin number falls in."""
    for phase, (last_spin, _) in enumerate(PHASES, start=1):
        if spin_count <= last_spin:
            return phase
    return len(PHASES)


def get_current_odds(spin_count: int) -> float:
    """Win probability for the given spin number."""
    return PHASES[get_phase(spin_count) - 1][1]


class OutcomeEngine:
    """
    Decides every spin's result.

    Implements:
    - Phase odds (hook 90%, sustain 50%, extract 10%)
    - Scripted generous wins for the first five spins
    - Late-game skew toward the smallest prizes
    - Near-miss triplets on every loss
    """

    def __init__(self, rng: RNGBase | None = None):
        self.rng = rng or ProductionRNG()

    def get_current_odds(self, spin_count: int) -> float:
        return get_current_odds(spin_count)

    def decide_win(self, spin_count: int) -> bool:
        """One uniform draw against the phase odds."""
        return self.rng.random() < get_current_odds(spin_count)

    def choose_win_symbol(self, spin_count: int) -> Symbol:
        """Pick the symbol a winning spin lands on."""
        if 1 <= spin_count <= len(SCRIPTED_WIN_SYMBOLS):
            return SCRIPTED_WIN_SYMBOLS[spin_count - 1]

        r = self.rng.random()
        if r < LOWEST_TIER_CUTOFF:
            return Symbol.TRIDENT
        if r < SECOND_TIER_CUTOFF:
            return Symbol.TROPHY
        return self.rng.choice(UPPER_WIN_SYMBOLS)

    def choose_near_miss(self) -> tuple[Symbol, Symbol, Symbol]:
        """
        Build a losing triplet where exactly two reels match.

        The odd symbol is rejection-sampled so it never equals the pair,
        then the three positions are shuffled.
        """
        miss = self.rng.choice(ALL_SYMBOLS)
        other = self.rng.choice(ALL_SYMBOLS)
        while other == miss:
            other = self.rng.choice(ALL_SYMBOLS)
        a, b, c = self.rng.shuffled([miss, miss, other])
        return (a, b, c)

    def decide(self, spin_count: int) -> SpinOutcome:
        """Produce the full outcome for a spin that has already been charged."""
        if self.decide_win(spin_count):
            symbol = self.choose_win_symbol(spin_count)
            return SpinOutcome(
                did_win=True,
                win_symbol=symbol,
                target_symbols=(symbol, symbol, symbol),
            )
        return SpinOutcome(did_win=False, target_symbols=self.choose_near_miss())
