"""Request and response models for the session API."""
from typing import Any

from pydantic import BaseModel, Field

from olympus_slot.config import settings
from olympus_slot.logic.models import PAYOUTS, REEL_STRIPS
from olympus_slot.logic.outcome import PHASES


# === Request Models ===


class SpinRequest(BaseModel):
    """POST /spin request body."""

    symbolHeight: float = Field(..., description="Rendered height of one reel symbol, in pixels")


class ResetRequest(BaseModel):
    """POST /reset request body."""

    seed: int | None = Field(default=None, description="Seed for a reproducible session")


# === Response Models ===


class PhaseInfo(BaseModel):
    """One odds phase."""

    lastSpin: int
    winProbability: float


class Configuration(BaseModel):
    """Static game configuration for the front end."""

    startingCredits: int = settings.starting_credits
    costPerSpin: int = settings.cost_per_spin
    maxSpins: int = settings.max_spins
    payouts: dict[str, int] = Field(
        default_factory=lambda: {symbol.value: prize for symbol, prize in PAYOUTS.items()}
    )
    reelStrips: list[list[str]] = Field(
        default_factory=lambda: [[symbol.value for symbol in strip] for strip in REEL_STRIPS]
    )
    phases: list[PhaseInfo] = Field(
        default_factory=lambda: [
            PhaseInfo(lastSpin=last_spin, winProbability=odds) for last_spin, odds in PHASES
        ]
    )
    reelStopDelays: list[float] = Field(default_factory=lambda: list(settings.reel_stop_delays_s))


class InitResponse(BaseModel):
    """GET /init response."""

    protocolVersion: str = settings.protocol_version
    configuration: Configuration = Field(default_factory=Configuration)
    session: dict[str, Any]


class ReelStopInfo(BaseModel):
    """Stop target for one reel."""

    reel: int
    symbol: str
    index: int
    offset: float


class TimelineInfo(BaseModel):
    """One scheduled point of the spin."""

    name: str
    at: float


class SpinResponse(BaseModel):
    """POST /spin response. A rejected spin is not an error."""

    protocolVersion: str = settings.protocol_version
    accepted: bool
    reason: str | None = None
    spinCount: int
    targetSymbols: list[str] = Field(default_factory=list)
    stops: list[ReelStopInfo] = Field(default_factory=list)
    timeline: list[TimelineInfo] = Field(default_factory=list)


class StateResponse(BaseModel):
    """GET /state response."""

    protocolVersion: str = settings.protocol_version
    session: dict[str, Any]
    events: list[dict[str, Any]] = Field(default_factory=list)


class CashOutResponse(BaseModel):
    """POST /cashout response."""

    protocolVersion: str = settings.protocol_version
    accepted: bool
    startingCredits: int | None = None
    finalCredits: int | None = None
    netChange: int | None = None
    text: str | None = None
    creditHistory: list[int] = Field(default_factory=list)
