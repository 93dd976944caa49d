"""
Tests for the frame loop and the playback clock.
"""
from unittest.mock import MagicMock

import pytest

from stepgrid.core import FrameLoop, PlaybackClock, SnapshotStore


class TestFrameLoop:
    """Repaint only when something changed or the transport runs."""

    def test_first_tick_paints(self, qapp):
        repaint = MagicMock()
        loop = FrameLoop(SnapshotStore(), repaint)
        assert loop.tick()
        repaint.assert_called_once()

    def test_unchanged_snapshot_skipped(self, qapp):
        store = SnapshotStore()
        loop = FrameLoop(store, MagicMock())
        loop.tick()
        assert not loop.tick()
        store.publish(snap=2)
        assert loop.tick()
        assert loop.frames == 2

    def test_playing_paints_every_tick(self, qapp):
        store = SnapshotStore()
        loop = FrameLoop(store)
        store.publish(is_playing=True, playback_step=0.0)
        assert loop.tick()
        assert loop.tick()

    def test_invalidate_forces_repaint(self, qapp):
        loop = FrameLoop(SnapshotStore())
        loop.tick()
        loop.invalidate()
        assert loop.tick()

    def test_start_stop(self, qapp):
        loop = FrameLoop(SnapshotStore(), interval_ms=16)
        loop.start()
        assert loop.is_running
        loop.set_interval(0)
        assert loop.interval_ms == 1
        loop.stop()
        assert not loop.is_running


class TestPlaybackClock:
    """Transport position from elapsed time."""

    def test_step_duration(self, qapp):
        # 120 BPM, four steps per beat
        assert PlaybackClock(bpm=120).step_ms == pytest.approx(125.0)

    def test_advance_wraps_at_pattern_end(self, qapp):
        clock = PlaybackClock(bpm=120, steps=16)
        assert clock.advance(250.0) == pytest.approx(2.0)
        assert clock.advance(125.0 * 17) == pytest.approx(1.0)

    def test_bpm_clamped(self, qapp):
        assert PlaybackClock(bpm=1000).bpm == 300
        assert PlaybackClock(bpm=1).bpm == 20

    def test_play_stop_signals(self, qapp):
        clock = PlaybackClock()
        events = []
        clock.playback_started.connect(lambda: events.append("start"))
        clock.playback_stopped.connect(lambda: events.append("stop"))
        clock.toggle_playback()
        assert clock.is_playing
        clock.toggle_playback()
        assert not clock.is_playing
        assert clock.position == 0.0
        assert events == ["start", "stop"]
