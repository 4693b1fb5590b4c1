"""Telemetry and config hash tests."""
import re

from conftest import SPIN_SETTLE_S, RecordingTelemetrySink
from olympus_slot.config_hash import get_config_hash
from olympus_slot.telemetry import SessionEndedEvent, TelemetryService


class TestConfigHash:

    def test_format(self, game_settings):
        assert re.fullmatch(r"[0-9a-f]{16}", get_config_hash(game_settings))

    def test_stable(self, game_settings):
        assert get_config_hash(game_settings) == get_config_hash(game_settings.model_copy())

    def test_changes_with_game_settings(self, game_settings):
        cheaper = game_settings.model_copy(update={"cost_per_spin": 50})
        assert get_config_hash(cheaper) != get_config_hash(game_settings)

    def test_ignores_presentation_settings(self, game_settings):
        slower = game_settings.model_copy(update={"intro_delay_s": 5.0, "locale": "de"})
        assert get_config_hash(slower) == get_config_hash(game_settings)


class TestTelemetryService:

    def test_spin_resolved_carries_config_hash(self, make_controller, scheduler, telemetry_sink, game_settings):
        controller = make_controller()
        controller.request_spin()
        scheduler.advance(SPIN_SETTLE_S)

        events = telemetry_sink.get_events("spin_resolved")
        assert len(events) == 1
        assert events[0]["config_hash"] == get_config_hash(game_settings)
        assert events[0]["session_id"] == "test-session"
        assert events[0]["spin_count"] == 1

    def test_cash_out_emits_session_ended(self, make_controller, telemetry_sink):
        controller = make_controller()
        controller.request_cash_out()
        assert [e["cause"] for e in telemetry_sink.get_events("session_ended")] == ["cashedOut"]

    def test_set_sink(self):
        service = TelemetryService(sink=RecordingTelemetrySink())
        replacement = RecordingTelemetrySink()
        service.set_sink(replacement)
        service.emit_session_ended(
            SessionEndedEvent(session_id="s", cause="cashedOut", spin_count=0, credits=1000, house_earnings=0)
        )
        assert len(replacement.events) == 1

    def test_sink_errors_are_counted(self):
        class FailingSink:
            def emit(self, event_name, data):
                raise RuntimeError("down")

        service = TelemetryService(sink=FailingSink())
        service.emit_session_ended(
            SessionEndedEvent(session_id="s", cause="cashedOut", spin_count=0, credits=1000, house_earnings=0)
        )
        assert service._sink_errors == 1
