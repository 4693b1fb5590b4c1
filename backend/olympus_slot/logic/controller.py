"""Session controller: the only writer of SessionState."""
import logging
import uuid
from functools import partial
from typing import Any

from pydantic import BaseModel, Field

from olympus_slot.config import Settings, settings as default_settings
from olympus_slot.config_hash import get_config_hash
from olympus_slot.display import (
    Channel,
    Cue,
    DisplayBridge,
    DisplayMessage,
    SessionDisplay,
    SessionStats,
)
from olympus_slot.logic.models import (
    PAYOUTS,
    REELS,
    CashOutSummary,
    EndCause,
    EndGameStatus,
    ReelStop,
    SessionState,
    SpinOutcome,
    SpinRejection,
    WinResolution,
)
from olympus_slot.logic.outcome import OutcomeEngine, get_current_odds, get_phase
from olympus_slot.logic.payout import PayoutCalculator
from olympus_slot.logic.reels import ReelMapper
from olympus_slot.logic.rng import ProductionRNG, RNGBase, SeededRNG
from olympus_slot.logic.scheduler import (
    AsyncioScheduler,
    Scheduler,
    SequenceStep,
    TimedSequence,
    TimerHandle,
)
from olympus_slot.logic.tutor import TutorDecision, TutorMessageSelector
from olympus_slot.messages import MessageCatalog
from olympus_slot.telemetry import (
    SessionEndedEvent,
    SpinRejectedEvent,
    SpinResolvedEvent,
    TelemetryService,
    telemetry_service,
)


logger = logging.getLogger(__name__)

CASHED_OUT = "cashedOut"

ENDING_MESSAGE_KEYS: dict[EndCause, str] = {
    EndCause.OUT_OF_CREDITS: "ending_out_of_credits",
    EndCause.REACHED_MAX_SPINS: "ending_max_spins",
}


class TimelineEntry(BaseModel):
    """A scheduled point of a spin, in seconds from spin start."""

    name: str
    at: float


class SpinTicket(BaseModel):
    """What an accepted spin request hands to the animation layer."""

    spin_count: int
    outcome: SpinOutcome
    stops: list[ReelStop]
    timeline: list[TimelineEntry] = Field(default_factory=list)


class GameStateController:
    """
    Owns a single play session.

    Implements:
    - Spin guard and up-front cost charge
    - Outcome decision and reel stop mapping
    - Ordered reel-stop / resolve sequence on the scheduler
    - Payout application and credit history
    - Tutor, threshold and phase messages
    - End of game, cash-out and the periodic reality check
    """

    def __init__(
        self,
        settings: Settings | None = None,
        rng: RNGBase | None = None,
        scheduler: Scheduler | None = None,
        display: SessionDisplay | None = None,
        messages: MessageCatalog | None = None,
        telemetry: TelemetryService | None = None,
        session_id: str | None = None,
    ):
        self.settings = settings or default_settings
        if len(self.settings.reel_stop_delays_s) != REELS:
            raise ValueError(
                f"need {REELS} reel stop delays, got {len(self.settings.reel_stop_delays_s)}"
            )
        if rng is None:
            if self.settings.rng_seed is not None:
                rng = SeededRNG(seed=self.settings.rng_seed)
            else:
                rng = ProductionRNG()
        self.rng = rng
        self.scheduler = scheduler or AsyncioScheduler()
        self.display = DisplayBridge(display)
        self.messages = messages or MessageCatalog.load(
            self.settings.locale, self.settings.tutor_lines_path
        )
        self.telemetry = telemetry or telemetry_service
        self.session_id = session_id or str(uuid.uuid4())
        self.config_hash = get_config_hash(self.settings)

        self.outcomes = OutcomeEngine(rng=self.rng)
        self.reels = ReelMapper(rng=self.rng)
        self.payouts = PayoutCalculator(self.settings.cost_per_spin)
        self.tutor = TutorMessageSelector(rng=self.rng)

        self._state = SessionState.new(self.settings.starting_credits, self.scheduler.time())
        self._ended = False
        self._reality_timer: TimerHandle | None = None

    # === Read access ===

    @property
    def state(self) -> SessionState:
        """Live state, for reading only."""
        return self._state

    @property
    def spin_allowed(self) -> bool:
        return self.rejection_reason() is None

    def rejection_reason(self) -> SpinRejection | None:
        """Why a spin requested now would be ignored, or None if it would run."""
        s = self._state
        if s.is_frozen:
            return SpinRejection.SESSION_FROZEN
        if s.is_spinning:
            return SpinRejection.ROUND_IN_PROGRESS
        if s.credits < self.settings.cost_per_spin:
            return SpinRejection.INSUFFICIENT_CREDITS
        if s.spin_count >= self.settings.max_spins:
            return SpinRejection.MAX_SPINS_REACHED
        return None

    def stats(self) -> SessionStats:
        s = self._state
        return SessionStats(credits=s.credits, spin_count=s.spin_count, wins=s.wins, losses=s.losses)

    def next_phase(self) -> tuple[int, float]:
        """Phase and odds the upcoming spin will use."""
        upcoming = min(self._state.spin_count + 1, self.settings.max_spins)
        return get_phase(upcoming), get_current_odds(upcoming)

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view for the display layer."""
        s = self._state
        phase, odds = self.next_phase()
        return {
            "sessionId": self.session_id,
            "credits": s.credits,
            "spinCount": s.spin_count,
            "wins": s.wins,
            "losses": s.losses,
            "isSpinning": s.is_spinning,
            "spinAllowed": self.spin_allowed,
            "creditHistory": list(s.credit_history),
            "houseEarnings": s.house_earnings,
            "phase": phase,
            "odds": odds,
            "isFrozen": s.is_frozen,
            "endCause": s.end_cause.value if s.end_cause else None,
        }

    # === Lifecycle ===

    def start(self) -> None:
        """Push the initial view and start the intro and reality-check timers."""
        self.display.call("show_payouts", {symbol.value: prize for symbol, prize in PAYOUTS.items()})
        self._refresh()
        self.scheduler.call_later(self.settings.intro_delay_s, self._show_tutor, "intro")
        self._schedule_reality_check()

    def stop(self) -> None:
        """Cancel the reality check; in-flight spins still run to completion."""
        if self._reality_timer is not None:
            self._reality_timer.cancel()
            self._reality_timer = None

    # === Spin ===

    def request_spin(self, symbol_height: float = 1.0) -> SpinTicket | None:
        """
        Start a spin.

        Ignored (returns None) while spinning, when credits are short, when
        the session is frozen, or when the spin limit is reached. Otherwise
        the cost is charged immediately and the reel sequence is scheduled.
        """
        reason = self.rejection_reason()
        if reason is not None:
            logger.debug("Spin ignored: %s", reason.value)
            self.telemetry.emit_spin_rejected(
                SpinRejectedEvent(
                    session_id=self.session_id,
                    reason=reason.value,
                    spin_count=self._state.spin_count,
                    credits=self._state.credits,
                )
            )
            return None

        s = self._state
        cost = self.settings.cost_per_spin
        s.is_spinning = True
        s.spin_count += 1
        s.credits -= cost
        s.house_earnings += cost
        self._refresh()

        encourage = self.tutor.spin_encourage_key(s.spin_count, self.settings.max_spins)
        if encourage:
            self._show_tutor(encourage)
        self.display.call("play_cue", Cue.SPIN_START, {"spinCount": s.spin_count})

        outcome = self.outcomes.decide(s.spin_count)
        stops = self.reels.map_targets(outcome.target_symbols, symbol_height)

        delays = self.settings.reel_stop_delays_s
        steps = [
            SequenceStep(
                f"reel_stop_{stop.reel}",
                delay,
                partial(self._on_reel_stop, stop, outcome, stop.reel == len(stops) - 1),
            )
            for stop, delay in zip(stops, delays)
        ]
        steps.append(
            SequenceStep("resolve", delays[-1] + self.settings.resolve_delay_s, partial(self.resolve_spin, outcome))
        )
        TimedSequence(self.scheduler, steps).start()

        logger.debug(
            "Spin %d: win=%s targets=%s",
            s.spin_count,
            outcome.did_win,
            [t.value for t in outcome.target_symbols],
        )
        return SpinTicket(
            spin_count=s.spin_count,
            outcome=outcome,
            stops=stops,
            timeline=[TimelineEntry(name=step.name, at=step.at) for step in steps],
        )

    def _on_reel_stop(self, stop: ReelStop, outcome: SpinOutcome, is_last: bool) -> None:
        self.display.call(
            "play_cue",
            Cue.REEL_STOP,
            {"reel": stop.reel, "index": stop.index, "offset": stop.offset, "symbol": stop.symbol.value},
        )
        if is_last:
            cue = Cue.WIN if outcome.did_win else Cue.LOSE
            self.display.call("play_cue", cue, {"spinCount": self._state.spin_count})

    def resolve_spin(self, outcome: SpinOutcome) -> WinResolution | None:
        """
        Settle a spin once its last reel has stopped.

        Order: payout, clear the spin guard, record history, tutor rules,
        end-of-game check.
        """
        s = self._state
        if not s.is_spinning:
            logger.warning("resolve_spin called with no spin in flight; ignored")
            return None

        resolution: WinResolution | None = None
        if outcome.did_win and outcome.win_symbol is not None:
            resolution = self.payouts.resolve_win(outcome.win_symbol)
            self._apply_win(resolution)
        else:
            self._apply_loss()

        s.is_spinning = False
        s.credit_history.append(s.credits)

        self.telemetry.emit_spin_resolved(
            SpinResolvedEvent(
                session_id=self.session_id,
                spin_count=s.spin_count,
                did_win=resolution is not None,
                win_symbol=resolution.symbol.value if resolution else None,
                prize=resolution.prize if resolution else 0,
                is_ldw=resolution.is_ldw if resolution else False,
                credits=s.credits,
                config_hash=self.config_hash,
            )
        )

        self._refresh()
        self._show_educational_info()

        self._apply_tutor(self.tutor.select_after_spin(s, outcome, resolution))
        self.evaluate_thresholds()
        self.evaluate_end_game()
        return resolution

    def _apply_win(self, resolution: WinResolution) -> None:
        s = self._state
        s.wins += 1
        s.credits += resolution.prize
        s.house_earnings -= resolution.prize

        if resolution.is_ldw:
            text = "{} {}".format(
                self.messages.get("win_message_loss", prize=resolution.prize),
                self.messages.get("loss_disguised_as_win"),
            )
            key = "win_message_loss"
        else:
            text = f"{self.messages.get('win_message_generic')} {resolution.prize}!"
            key = "win_message_generic"
        self._show(Channel.RESULT, key, text)

    def _apply_loss(self) -> None:
        self._state.losses += 1
        self._show(Channel.RESULT, "lose_message", self.messages.get("lose_message"))

    # === Messages ===

    def evaluate_thresholds(self) -> str | None:
        """Run the credit and spin-count threshold rules once."""
        decision = self.tutor.select_threshold(self._state)
        self._apply_tutor(decision)
        return decision.key if decision else None

    def _apply_tutor(self, decision: TutorDecision | None) -> None:
        if decision is None:
            return
        self._state.flags = decision.flags
        self._show_tutor(decision.key, **decision.params)

    def _show_tutor(self, key: str, **params: Any) -> None:
        self._show(Channel.TUTOR, key, self.messages.tutor(key, **params))

    def _show(self, channel: Channel, key: str, text: str) -> None:
        self.display.call("show_message", DisplayMessage(channel=channel, key=key, text=text))

    def _show_educational_info(self) -> None:
        phase, odds = self.next_phase()
        text = self.messages.get("education_phase", phase=phase, odds=round(odds * 100))
        self.display.call("show_educational_info", phase, odds, text)
        notice = self.tutor.phase_notice(self._state.spin_count, self.settings.max_spins)
        if notice:
            self._show(Channel.MODAL, "phase_change", self.messages.get("phase_change", **notice))

    def _net_result_text(self, net_change: int) -> str:
        key = "cashout_profit" if net_change >= 0 else "cashout_loss"
        return self.messages.get(key, change=abs(net_change))

    def _refresh(self) -> None:
        self.display.call("update_stats", self.stats())
        enabled = self.spin_allowed
        self.display.call("set_controls_enabled", enabled, not self._state.is_frozen and not self._state.is_spinning)

    # === End of session ===

    def evaluate_end_game(self) -> EndGameStatus:
        """
        Check the terminal condition.

        The first terminal evaluation freezes the session and schedules the
        hand-off; later evaluations only report.
        """
        s = self._state
        out_of_credits = s.credits < self.settings.cost_per_spin
        reached_max_spins = s.spin_count >= self.settings.max_spins
        status = EndGameStatus(
            terminal=not s.is_spinning and (out_of_credits or reached_max_spins),
            out_of_credits=out_of_credits,
            reached_max_spins=reached_max_spins,
        )
        if status.terminal and not self._ended:
            self._end_session(status.cause)
        return status

    def _end_session(self, cause: EndCause) -> None:
        s = self._state
        self._ended = True
        s.is_frozen = True
        s.end_cause = cause
        self.stop()
        self.display.call("set_controls_enabled", False, False)

        key = ENDING_MESSAGE_KEYS[cause]
        self._show(Channel.RESULT, key, self.messages.get(key))
        logger.info("Session %s ended: %s after %d spins", self.session_id, cause.value, s.spin_count)
        self.telemetry.emit_session_ended(
            SessionEndedEvent(
                session_id=self.session_id,
                cause=cause.value,
                spin_count=s.spin_count,
                credits=s.credits,
                house_earnings=s.house_earnings,
            )
        )
        self.scheduler.call_later(
            self.settings.ending_handoff_delay_s,
            self.display.call,
            "session_ended",
            cause.value,
        )

    def request_cash_out(self) -> CashOutSummary | None:
        """
        Walk away with the current balance.

        Ignored while a spin is in flight or once the session is frozen.
        """
        s = self._state
        if s.is_spinning or s.is_frozen:
            logger.debug("Cash-out ignored (spinning=%s frozen=%s)", s.is_spinning, s.is_frozen)
            return None

        starting = s.credit_history[0]
        net_change = s.credits - starting
        text = self.messages.get(
            "cashout_summary",
            start=starting,
            end=s.credits,
            result=self._net_result_text(net_change),
        )
        s.is_frozen = True
        self.stop()
        self.display.call("render_history", list(s.credit_history))
        self._show(Channel.CASHOUT, "cashout_summary", text)
        self.display.call("set_controls_enabled", False, False)
        self.telemetry.emit_session_ended(
            SessionEndedEvent(
                session_id=self.session_id,
                cause=CASHED_OUT,
                spin_count=s.spin_count,
                credits=s.credits,
                house_earnings=s.house_earnings,
            )
        )
        return CashOutSummary(
            starting_credits=starting,
            final_credits=s.credits,
            net_change=net_change,
            text=text,
            credit_history=list(s.credit_history),
        )

    # === Reality check ===

    def _schedule_reality_check(self) -> None:
        self._reality_timer = self.scheduler.call_later(
            self.settings.reality_check_interval_s, self._reality_check_tick
        )

    def _reality_check_tick(self) -> None:
        s = self._state
        check = self.tutor.reality_check(
            credits=s.credits,
            start_time=s.start_time,
            now=self.scheduler.time(),
            starting_credits=s.credit_history[0],
        )
        if check is not None:
            plural = ""
            if self.messages.get("lang") == "en" and check.minutes != 1:
                plural = "s"
            text = self.messages.get(
                "reality_check_body",
                minutes=check.minutes,
                s=plural,
                result=self._net_result_text(check.net_change),
            )
            self._show(Channel.REALITY_CHECK, "reality_check_body", text)
        self._schedule_reality_check()
