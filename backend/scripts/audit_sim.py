#!/usr/bin/env python3
"""
Headless session simulation.

Plays complete sessions on a virtual clock and writes one CSV summary row:
win rate per phase, how many wins were losses disguised as wins, final
balances and why sessions ended.

Usage:
    python -m scripts.audit_sim --sessions 10000 --seed AUDIT_2026 --out out/audit.csv
"""
import argparse
import csv
import hashlib
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from olympus_slot.config import Settings, settings as default_settings
from olympus_slot.config_hash import get_config_hash
from olympus_slot.display import EventQueueDisplay
from olympus_slot.logic.controller import GameStateController
from olympus_slot.logic.outcome import PHASES, get_phase
from olympus_slot.logic.rng import SeededRNG
from olympus_slot.logic.scheduler import VirtualScheduler
from olympus_slot.messages import MessageCatalog
from olympus_slot.telemetry import TelemetryService


class _NullSink:
    """Drops telemetry; simulations would otherwise log every spin."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        pass


class _DiscardingDisplay(EventQueueDisplay):
    """Event queue that never grows."""

    def _push(self, event_type: str, **data: Any) -> None:
        pass


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    sessions: int = 0
    spins: int = 0
    phase_spins: Counter = field(default_factory=Counter)
    phase_wins: Counter = field(default_factory=Counter)
    ldw_wins: int = 0
    real_wins: int = 0
    total_final_credits: int = 0
    total_house_earnings: int = 0
    end_causes: Counter = field(default_factory=Counter)

    def phase_win_rate(self, phase: int) -> float:
        spins = self.phase_spins[phase]
        return self.phase_wins[phase] / spins if spins else 0.0

    @property
    def ldw_share(self) -> float:
        wins = self.ldw_wins + self.real_wins
        return self.ldw_wins / wins if wins else 0.0

    @property
    def mean_final_credits(self) -> float:
        return self.total_final_credits / self.sessions if self.sessions else 0.0

    @property
    def mean_house_earnings(self) -> float:
        return self.total_house_earnings / self.sessions if self.sessions else 0.0


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def play_session(
    rng: SeededRNG,
    settings: Settings,
    messages: MessageCatalog,
    telemetry: TelemetryService,
    stats: SimulationStats,
) -> GameStateController:
    """Spin until the session stops accepting spins; returns the finished controller."""
    scheduler = VirtualScheduler()
    controller = GameStateController(
        settings=settings,
        rng=rng,
        scheduler=scheduler,
        display=_DiscardingDisplay(),
        messages=messages,
        telemetry=telemetry,
    )
    spin_duration = settings.reel_stop_delays_s[-1] + settings.resolve_delay_s

    while controller.spin_allowed:
        ticket = controller.request_spin()
        if ticket is None:
            break
        scheduler.advance(spin_duration + 1.0)

        phase = get_phase(ticket.spin_count)
        stats.spins += 1
        stats.phase_spins[phase] += 1
        if ticket.outcome.did_win and ticket.outcome.win_symbol is not None:
            stats.phase_wins[phase] += 1
            if controller.payouts.is_ldw(ticket.outcome.win_symbol):
                stats.ldw_wins += 1
            else:
                stats.real_wins += 1

    state = controller.state
    stats.sessions += 1
    stats.total_final_credits += state.credits
    stats.total_house_earnings += state.house_earnings
    stats.end_causes[state.end_cause.value if state.end_cause else "none"] += 1
    return controller


def run_simulation(
    sessions: int,
    seed_str: str,
    settings: Settings | None = None,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless sessions.

    Args:
        sessions: Number of complete sessions to play
        seed_str: Seed string for reproducibility
        settings: Game settings (defaults to the environment's)
        verbose: Print progress

    Returns:
        SimulationStats with aggregated results
    """
    settings = settings or default_settings
    rng = SeededRNG(seed=seed_to_int(seed_str))
    messages = MessageCatalog()
    telemetry = TelemetryService(sink=_NullSink())
    stats = SimulationStats()

    progress_interval = max(1, sessions // 100)
    for i in range(sessions):
        if verbose and i % progress_interval == 0:
            print(f"\rProgress: {i / sessions * 100:.1f}%", end="", flush=True)
        play_session(rng, settings, messages, telemetry, stats)

    if verbose:
        print("\rProgress: 100.0%")
    return stats


def summary_row(stats: SimulationStats, seed_str: str, settings: Settings) -> dict[str, Any]:
    """Flatten stats into the CSV row."""
    row: dict[str, Any] = {
        "config_hash": get_config_hash(settings),
        "seed": seed_str,
        "sessions": stats.sessions,
        "spins": stats.spins,
        "timestamp": get_timestamp_iso(),
    }
    for phase in range(1, len(PHASES) + 1):
        row[f"phase{phase}_win_rate"] = round(stats.phase_win_rate(phase), 6)
    row["ldw_share"] = round(stats.ldw_share, 6)
    row["mean_final_credits"] = round(stats.mean_final_credits, 2)
    row["mean_house_earnings"] = round(stats.mean_house_earnings, 2)
    row["out_of_credits"] = stats.end_causes["outOfCredits"]
    row["reached_max_spins"] = stats.end_causes["reachedMaxSpins"]
    return row


def write_csv(row: dict[str, Any], output_path: str) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(row.keys()))
        writer.writeheader()
        writer.writerow(row)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate complete slot sessions")
    parser.add_argument("--sessions", type=int, default=10000, help="Number of sessions")
    parser.add_argument("--seed", type=str, default="AUDIT_2026", help="Seed string")
    parser.add_argument("--out", type=str, default="out/audit.csv", help="Output CSV path")
    parser.add_argument("--verbose", action="store_true", help="Print progress")
    args = parser.parse_args(argv)

    if args.sessions <= 0:
        parser.error("--sessions must be positive")

    stats = run_simulation(args.sessions, args.seed, verbose=args.verbose)
    row = summary_row(stats, args.seed, default_settings)
    write_csv(row, args.out)

    print(f"Sessions: {row['sessions']}  spins: {row['spins']}")
    for phase in range(1, len(PHASES) + 1):
        print(f"Phase {phase} win rate: {row[f'phase{phase}_win_rate']:.4f}")
    print(f"LDW share of wins: {row['ldw_share']:.4f}")
    print(f"Mean final credits: {row['mean_final_credits']:.2f}")
    print(f"Written to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
