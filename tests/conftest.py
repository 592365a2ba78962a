"""Shared fixtures for the VTSE test suite."""

from __future__ import annotations

import numpy as np
import pytest

from VTSE.SMM.config import Blocked, StimConfig
from VTSE.SGM.frame_builder import to_pcm16
from VTSE.SGM.sequencer import initialize, iter_frames


@pytest.fixture
def reference_config() -> StimConfig:
    """Stock F2Heal run: 4 fingers, 250 Hz / 100 ms, 666 ms cycle, pauses 3+4 of 5."""
    return StimConfig(
        channels=4,
        sample_rate_hz=44_100,
        stim_freq_hz=250,
        stim_duration_ms=100,
        cycle_period_ms=666,
        pause_cycle_period=5,
        pause_cycles=frozenset({3, 4}),
        mode=Blocked(),
        seed=4,
    )


@pytest.fixture
def small_config() -> StimConfig:
    """Low-rate run that is quick to render in full."""
    return StimConfig(
        channels=3,
        sample_rate_hz=8_000,
        stim_freq_hz=100,
        stim_duration_ms=50,
        cycle_period_ms=300,
        pause_cycle_period=4,
        pause_cycles=frozenset({2}),
        seed=7,
    )


def render_frames(config: StimConfig, n: int, seed=None) -> np.ndarray:
    """int16 frames (n, hands*channels) straight from the sequencer."""
    state = initialize(config, seed=seed)
    return np.array([to_pcm16(f) for f in iter_frames(state, config, n)])


@pytest.fixture
def render():
    return render_frames
