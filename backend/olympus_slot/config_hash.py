"""Config hash shared by telemetry and the simulation script.

Both must compute it identically so simulation output can be matched to the
sessions that produced live telemetry.
"""
import hashlib
import json

from olympus_slot.config import Settings, settings as default_settings
from olympus_slot.logic.models import PAYOUTS, REEL_STRIPS
from olympus_slot.logic.outcome import PHASES, SCRIPTED_WIN_SYMBOLS


def get_config_hash(settings: Settings | None = None) -> str:
    """
    Hash the game-relevant configuration.

    Returns 16-char hex hash of the canonical JSON snapshot.
    """
    settings = settings or default_settings
    config_snapshot = {
        "starting_credits": settings.starting_credits,
        "cost_per_spin": settings.cost_per_spin,
        "max_spins": settings.max_spins,
        "payouts": {symbol.value: prize for symbol, prize in PAYOUTS.items()},
        "phases": [list(phase) for phase in PHASES],
        "scripted_wins": [symbol.value for symbol in SCRIPTED_WIN_SYMBOLS],
        "reel_strips": [[symbol.value for symbol in strip] for strip in REEL_STRIPS],
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
