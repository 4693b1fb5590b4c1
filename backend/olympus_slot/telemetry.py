"""Session telemetry events and sinks."""
import logging
from dataclasses import dataclass
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log telemetry event."""
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class SpinResolvedEvent:
    """spin_resolved telemetry event."""

    session_id: str
    spin_count: int
    did_win: bool
    win_symbol: str | None
    prize: int
    is_ldw: bool
    credits: int
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "spin_count": self.spin_count,
            "did_win": self.did_win,
            "win_symbol": self.win_symbol,
            "prize": self.prize,
            "is_ldw": self.is_ldw,
            "credits": self.credits,
            "config_hash": self.config_hash,
        }


@dataclass
class SpinRejectedEvent:
    """spin_rejected telemetry event."""

    session_id: str
    reason: str  # "ROUND_IN_PROGRESS" | "INSUFFICIENT_CREDITS" | ...
    spin_count: int
    credits: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "reason": self.reason,
            "spin_count": self.spin_count,
            "credits": self.credits,
        }


@dataclass
class SessionEndedEvent:
    """session_ended telemetry event."""

    session_id: str
    cause: str  # "outOfCredits" | "reachedMaxSpins" | "cashedOut"
    spin_count: int
    credits: int
    house_earnings: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "session_id": self.session_id,
            "cause": self.cause,
            "spin_count": self.spin_count,
            "credits": self.credits,
            "house_earnings": self.house_earnings,
        }


class TelemetryService:
    """Service for emitting session telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Sink failures are counted and logged, never raised into the session."""
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_spin_resolved(self, event: SpinResolvedEvent) -> None:
        self._safe_emit("spin_resolved", event.to_dict())

    def emit_spin_rejected(self, event: SpinRejectedEvent) -> None:
        self._safe_emit("spin_rejected", event.to_dict())

    def emit_session_ended(self, event: SessionEndedEvent) -> None:
        self._safe_emit("session_ended", event.to_dict())


# Global instance
telemetry_service = TelemetryService()
