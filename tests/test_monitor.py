"""
Tests for the monitor loop
"""
import pytest
from unittest.mock import MagicMock, call
from netdisplay.config import MonitorConfig
from netdisplay.monitor import MonitorContext, build_context, handle_cycle_error, run, run_cycle
from netdisplay.system_info import LookupResult


@pytest.fixture
def ctx():
    """Context with mocked components"""
    selector = MagicMock()
    selector.select.return_value = "wlan0"
    sampler = MagicMock()
    sampler.measure.return_value = (1024.0, 2048.0)
    resolver = MagicMock()
    resolver.resolve.return_value = ("192.168.1.20", "203.0.113.7")

    return MonitorContext(
        config=MonitorConfig(),
        selector=selector,
        sampler=sampler,
        resolver=resolver,
        renderer=MagicMock(),
        counters=MagicMock(),
        sleep=MagicMock(),
    )


class TestRunCycle:
    """Test suite for single cycles"""

    def test_cycle_renders_snapshot(self, ctx):
        """Test that a cycle draws what the components report"""
        snapshot = run_cycle(ctx)

        ctx.sampler.measure.assert_called_once_with("wlan0")
        ctx.resolver.resolve.assert_called_once_with("wlan0")
        ctx.renderer.render.assert_called_once_with(snapshot)
        assert snapshot.public_address == "203.0.113.7"
        assert snapshot.local_address == "192.168.1.20"
        assert snapshot.upload_rate == 1024.0
        assert snapshot.download_rate == 2048.0
        assert ctx.cycle_counter == 1

    def test_cache_invalidated_after_sixty_cycles(self, ctx):
        """Test that the counter cache is cleared once after 60 cycles"""
        for _ in range(59):
            run_cycle(ctx)
        ctx.counters.invalidate_cache.assert_not_called()
        assert ctx.cycle_counter == 59

        run_cycle(ctx)
        ctx.counters.invalidate_cache.assert_called_once_with()
        assert ctx.cycle_counter == 0

    def test_cache_reset_period_repeats(self, ctx):
        """Test that the cache reset fires every 60 cycles"""
        assert run(ctx, max_cycles=120) == 120
        assert ctx.counters.invalidate_cache.call_count == 2
        assert ctx.cycle_counter == 0


class TestErrorRecovery:
    """Test suite for the error path"""

    def test_failure_shows_error_and_backs_off(self, ctx):
        """Test that a failing cycle shows the error screen, then pauses"""
        ctx.resolver.resolve.side_effect = RuntimeError("display bus disconnected badly")
        events = MagicMock()
        events.attach_mock(ctx.renderer.render_error, "render_error")
        events.attach_mock(ctx.sleep, "sleep")

        run(ctx, max_cycles=1)

        assert events.mock_calls == [
            call.render_error("display bus disconnected badly"),
            call.sleep(5.0),
        ]
        ctx.renderer.render_error.assert_called_once()
        ctx.renderer.render.assert_not_called()

    def test_error_message_is_truncated_on_screen(self):
        """Test that only 20 characters of the error reach the panel"""
        from netdisplay.display import DisplayRenderer
        renderer = DisplayRenderer(MagicMock())
        surface = renderer.display.open_surface.return_value.__enter__.return_value

        ctx = MonitorContext(
            config=MonitorConfig(), selector=MagicMock(), sampler=MagicMock(),
            resolver=MagicMock(), renderer=renderer, counters=MagicMock(), sleep=MagicMock(),
        )
        handle_cycle_error(ctx, ValueError("x" * 50))

        surface.draw_text.assert_any_call(0, 16, "x" * 20, "white")
        ctx.sleep.assert_called_once_with(5.0)

    def test_error_does_not_count_as_cycle(self, ctx):
        """Test that failed cycles do not advance the cycle counter"""
        ctx.renderer.render.side_effect = [OSError("write failed"), None]
        run(ctx, max_cycles=2)
        assert ctx.cycle_counter == 1
        ctx.counters.invalidate_cache.assert_called_once_with()

    def test_error_screen_failure_is_contained(self, ctx):
        """Test that a broken error screen does not stop the loop"""
        ctx.selector.select.side_effect = RuntimeError("first")
        ctx.renderer.render_error.side_effect = OSError("bus gone")

        assert run(ctx, max_cycles=3) == 3
        assert ctx.sleep.call_count == 3

    def test_loop_continues_after_failure(self, ctx):
        """Test that the next cycle runs normally after a failure"""
        ctx.sampler.measure.side_effect = [KeyError("wlan0"), (0.0, 0.0)]
        run(ctx, max_cycles=2)
        assert ctx.renderer.render.call_count == 1
        assert ctx.renderer.render_error.call_count == 1


class TestRun:
    """Test suite for loop control"""

    def test_keyboard_interrupt_stops_loop(self, ctx):
        """Test that Ctrl+C ends the loop"""
        ctx.selector.select.side_effect = KeyboardInterrupt
        assert run(ctx) == 1

    def test_stop_flag(self, ctx):
        """Test that stop() ends the loop after the current cycle"""
        ctx.renderer.render.side_effect = lambda snapshot: ctx.stop()
        assert run(ctx) == 1
        assert ctx.running is False


class TestBuildContext:
    """Test suite for build_context"""

    def test_components_wired_to_config(self):
        """Test that build_context passes configuration to every component"""
        config = MonitorConfig(wireless_interface="wlp2s0", wired_interface="enp1s0",
                               sample_window=2.0, public_ip_url="https://echo.example/ip")
        counters = MagicMock()
        counters.counters.side_effect = [{"enp1s0": (0, 0)}, {"enp1s0": (4096, 8192)}]
        query = MagicMock()
        query.interface_has_address.side_effect = lambda name: name == "enp1s0"
        query.primary_local_address.return_value = LookupResult.found("10.0.0.2")
        http = MagicMock()
        http.get_text.return_value = "198.51.100.4"
        display = MagicMock()
        sleep = MagicMock()

        ctx = build_context(config, display, counters=counters, query=query, http=http, sleep=sleep)
        ctx.sampler._clock = MagicMock(side_effect=[50.0, 52.0])
        snapshot = run_cycle(ctx)

        assert snapshot.local_address == "10.0.0.2"
        assert snapshot.public_address == "198.51.100.4"
        assert (snapshot.upload_rate, snapshot.download_rate) == (2048.0, 4096.0)
        sleep.assert_called_once_with(2.0)
        http.get_text.assert_called_once_with("https://echo.example/ip", 5.0)
