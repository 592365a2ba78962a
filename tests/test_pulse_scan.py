"""Tests for burst detection and schedule checking."""

from __future__ import annotations

import numpy as np
import pytest

from VTSE.SMM.config import StimConfig
from VTSE.SVM.pulse_scan import MERGE_GAP, check_schedule, scan_column, scan_pulses


def test_scan_column_finds_runs():
    column = np.array([0, 0, 5, -3, 2, 0, 0, 0, 0, 9, 9, 0])
    pulses = scan_column(column, col_index=3, first_sample=100)
    assert [(p.start, p.length) for p in pulses] == [(102, 3), (109, 2)]
    assert pulses[0].column == 3
    assert pulses[0].peak == 5.0


def test_zero_crossings_do_not_split_a_burst():
    column = np.array([1, 2] + [0] * MERGE_GAP + [3, 4])
    pulses = scan_column(column, 0)
    assert len(pulses) == 1
    assert pulses[0].length == 4 + MERGE_GAP


def test_empty_column():
    assert scan_column(np.zeros(50), 0) == []


def test_scan_pulses_checks_shape():
    with pytest.raises(ValueError, match="shape"):
        scan_pulses(np.zeros((10, 6)), StimConfig(channels=4))


def test_scan_pulses_per_column():
    frames = np.zeros((20, 4))
    frames[2:5, 1] = 1
    frames[10:12, 3] = -1
    bursts = scan_pulses(frames, StimConfig(channels=2))
    assert [len(col) for col in bursts] == [0, 1, 0, 1]


class TestCheckSchedule:
    def test_clean_render(self, small_config, render):
        report = check_schedule(render(small_config, 9_600), small_config)
        assert report.ok
        assert report.frames == 9_600
        assert report.pulses == 18          # 9 playing slots, 2 hands
        assert report.longest_pulse <= report.pulse_limit

    def test_sound_in_pause_is_flagged(self, small_config, render):
        frames = render(small_config, 9_600)
        frames[5_000, 0] = 123              # sample 5001 lies in paused cycle 2
        report = check_schedule(frames, small_config)
        assert report.pause_violations == 1
        assert not report.ok

    def test_missing_finger_is_flagged(self, small_config, render):
        frames = render(small_config, 9_600)
        frames[800:1_599, :3] = 0           # silence the left hand in slot 1
        report = check_schedule(frames, small_config)
        assert report.irregular_slots == 1

    def test_repeat_is_flagged(self, small_config, render):
        config = small_config._replace(randomize=False, pause_cycles=frozenset())
        frames = render(config, 2_400)
        # move slot 2's left burst onto the channel used in slot 1
        frames[1_599:2_399, 1] = frames[1_599:2_399, 2]
        frames[1_599:2_399, 2] = 0
        report = check_schedule(frames, config)
        assert report.back_to_back == 1

    def test_overlong_burst_is_flagged(self, small_config):
        frames = np.zeros((2_000, 6), dtype=np.int16)
        frames[10:600, 0] = 100
        report = check_schedule(frames, small_config)
        assert report.overlong_pulses == 1
        assert report.longest_pulse == 590
