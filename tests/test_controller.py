import asyncio
import time
import unittest

from livechart.chart.controller import ControllerState, WindowController
from livechart.errors import InvalidStateError
from livechart.models.market import volume_point
from livechart.series.generator import make_rng
from tests.fakes import FailingSink, RecordingSink, ZeroRandom

SLOW_TICK_MS = 60_000


class TestWindowController(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.sink = RecordingSink()
        self.controller = WindowController(self.sink, rng=make_rng(21))

    def tearDown(self):
        self.controller.dispose()

    async def test_initialize_pushes_full_window_and_volume(self):
        self.controller.initialize(capacity=100, tick_interval_ms=SLOW_TICK_MS)

        self.assertEqual(self.controller.state, ControllerState.RUNNING)
        self.assertEqual(self.sink.kinds(), ["series", "volume_series"])

        bars = self.sink.events[0][1]
        points = self.sink.events[1][1]
        self.assertEqual(len(bars), 100)
        self.assertEqual(bars[0].open, 100.0)
        self.assertEqual(points, [volume_point(b) for b in bars])

    async def test_default_start_time_ends_near_now(self):
        loop_now = int(time.time())
        self.controller.initialize(capacity=10, tick_interval_ms=SLOW_TICK_MS)

        bars = self.controller.snapshot()
        self.assertAlmostEqual(bars[0].time, loop_now - 10, delta=2)

    async def test_advance_replaces_oldest_with_newest(self):
        self.controller.initialize(capacity=20, tick_interval_ms=SLOW_TICK_MS, start_time=1000)
        before = self.controller.snapshot()

        bar = self.controller.advance()

        self.assertEqual(bar.time, 1020)
        self.assertEqual(bar.open, before[-1].close)
        self.assertEqual(self.controller.snapshot(), before[1:] + [bar])
        self.assertEqual(self.sink.events[-2], ("bar", bar))
        self.assertEqual(self.sink.events[-1], ("volume", volume_point(bar)))

    async def test_window_invariants_hold_across_ticks(self):
        self.controller.initialize(capacity=30, tick_interval_ms=SLOW_TICK_MS, start_time=0)

        for _ in range(100):
            self.controller.advance()
            bars = self.controller.snapshot()
            self.assertEqual(len(bars), 30)
            for a, b in zip(bars, bars[1:]):
                self.assertEqual(b.time, a.time + 1)
                self.assertEqual(b.open, a.close)

    async def test_reinitialize_is_ignored(self):
        self.controller.initialize(capacity=5, tick_interval_ms=SLOW_TICK_MS)
        first = self.controller.snapshot()

        self.controller.initialize(capacity=50, tick_interval_ms=10)

        self.assertEqual(self.controller.snapshot(), first)
        self.assertEqual(self.sink.kinds(), ["series", "volume_series"])
        self.assertEqual(self.controller.tick_interval_ms, SLOW_TICK_MS)

    async def test_advance_before_initialize_raises(self):
        with self.assertRaises(InvalidStateError):
            self.controller.advance()

    async def test_advance_after_dispose_raises(self):
        self.controller.initialize(capacity=5, tick_interval_ms=SLOW_TICK_MS)
        self.controller.dispose()

        with self.assertRaises(InvalidStateError):
            self.controller.advance()

    async def test_initialize_after_dispose_raises(self):
        self.controller.dispose()

        with self.assertRaises(InvalidStateError):
            self.controller.initialize(capacity=5, tick_interval_ms=SLOW_TICK_MS)

    async def test_dispose_is_idempotent(self):
        self.controller.dispose()
        self.controller.dispose()
        self.assertEqual(self.controller.state, ControllerState.DISPOSED)

        other = WindowController(RecordingSink(), rng=make_rng(1))
        other.initialize(capacity=5, tick_interval_ms=SLOW_TICK_MS)
        other.dispose()
        other.dispose()
        self.assertEqual(other.state, ControllerState.DISPOSED)

    async def test_timer_advances_window(self):
        self.controller.initialize(capacity=10, tick_interval_ms=10, start_time=0)

        await asyncio.sleep(0.1)

        ticks = self.sink.kinds().count("bar")
        self.assertGreaterEqual(ticks, 2)
        self.assertEqual(len(self.controller.snapshot()), 10)
        self.assertEqual(self.controller.snapshot()[-1].time, 9 + ticks)

    async def test_no_events_after_dispose(self):
        self.controller.initialize(capacity=10, tick_interval_ms=10)
        await asyncio.sleep(0.03)
        timer = self.controller._timer

        self.controller.dispose()
        count = len(self.sink.events)
        await asyncio.sleep(0.05)

        self.assertEqual(len(self.sink.events), count)
        self.assertTrue(timer.done())

    async def test_disposed_state_stops_a_fire_already_in_flight(self):
        # Timer is left alive on purpose; only the state guard stands in the way.
        self.controller.initialize(capacity=10, tick_interval_ms=10)
        timer = self.controller._timer
        self.controller.state = ControllerState.DISPOSED
        count = len(self.sink.events)

        await asyncio.sleep(0.05)

        self.assertEqual(len(self.sink.events), count)
        self.assertTrue(timer.done())

    async def test_zero_random_ticks_are_flat(self):
        controller = WindowController(RecordingSink(), rng=ZeroRandom())
        controller.initialize(capacity=3, tick_interval_ms=SLOW_TICK_MS, start_time=1000)
        try:
            bar = controller.advance()
        finally:
            controller.dispose()

        self.assertEqual(bar.time, 1003)
        self.assertEqual((bar.open, bar.high, bar.low, bar.close), (100.0,) * 4)
        self.assertEqual(bar.volume, 500)
        self.assertEqual(volume_point(bar).color_class, "down")

    async def test_failing_tick_logs_and_disposes(self):
        controller = WindowController(FailingSink(), rng=make_rng(4))

        with self.assertLogs("window_controller", "ERROR") as logs:
            controller.initialize(capacity=5, tick_interval_ms=10)
            await asyncio.sleep(0.05)

        self.assertEqual(controller.state, ControllerState.DISPOSED)
        self.assertIsNone(controller._timer)
        self.assertEqual(len(controller.snapshot()), 5)
        self.assertTrue(any("tick failed" in line for line in logs.output))

        # dispose() after the timer died is still a quiet no-op
        controller.dispose()


class TestInitializeWithoutLoop(unittest.TestCase):
    def test_no_running_loop_leaves_controller_untouched(self):
        sink = RecordingSink()
        controller = WindowController(sink, rng=make_rng(1))

        with self.assertRaises(RuntimeError):
            controller.initialize(capacity=5, tick_interval_ms=1000)

        self.assertEqual(controller.state, ControllerState.UNINITIALIZED)
        self.assertEqual(sink.events, [])
        self.assertEqual(controller.snapshot(), [])
        self.assertIsNone(controller._timer)
