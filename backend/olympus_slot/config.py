"""Application configuration with game defaults and environment overrides."""
from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Session settings; every field can be overridden with a SLOT_ env var."""

    model_config = ConfigDict(env_prefix="SLOT_")

    # Server
    debug: bool = False
    protocol_version: str = "1.0"

    # Economy
    starting_credits: int = 1000
    cost_per_spin: int = 60
    max_spins: int = 15

    # Spin timeline (seconds from spin start)
    reel_stop_delays_s: list[float] = [1.5, 2.5, 3.5]
    resolve_delay_s: float = 0.1  # after the last reel stops
    ending_handoff_delay_s: float = 2.5
    intro_delay_s: float = 2.0

    # Reality check (wall clock)
    reality_check_interval_s: float = 60.0

    # Messages
    locale: str = "en"
    tutor_lines_path: str | None = None

    # Reproducible demo sessions
    rng_seed: int | None = None

    @field_validator("reel_stop_delays_s")
    @classmethod
    def _delays_strictly_increase(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("reel_stop_delays_s must not be empty")
        if any(b <= a for a, b in zip(value, value[1:])) or value[0] < 0:
            raise ValueError("reel_stop_delays_s must be non-negative and strictly increasing")
        return value


settings = Settings()
