# =============================================================================
# cycle_clock.py — Sample → Cycle Arithmetic
# =============================================================================
#
# Pure functions of (sample, config).  Nothing here holds state.
#
# TIMING GUARANTEE:
#   Every boundary is found with integer floor division on the absolute sample
#   index.  The slot width (cycle_period / channels) is usually fractional in
#   samples, e.g. 666 ms / 4 at 44.1 kHz = 7342.65 samples; truncation decides
#   which sample a slot starts on and must never be replaced by round().
#
#   44100 Hz, 666 ms, 4 channels:
#       slot 0 → samples [0, 7342]
#       slot 1 → samples [7343, 14685]
# =============================================================================

from __future__ import annotations

from VTSE.SMM.config import StimConfig
from VTSE.SMM.constants import MS_PER_SECOND


def absolute_slot(sample: int, config: StimConfig) -> int:
    """Unwrapped slot index of `sample`, counted from sample 0."""
    return (
        sample * MS_PER_SECOND * config.channels
        // (config.sample_rate_hz * config.cycle_period_ms)
    )


def active_cycle(sample: int, config: StimConfig) -> int:
    """Slot (= channel position within the cycle) that `sample` falls in."""
    return absolute_slot(sample, config) % config.channels


def pause_super_cycle(sample: int, config: StimConfig) -> int:
    """Index of the whole cycle containing `sample`, within the pause period."""
    return (
        sample * MS_PER_SECOND
        // (config.sample_rate_hz * config.cycle_period_ms)
    ) % config.pause_cycle_period


def in_pause(sample: int, config: StimConfig) -> bool:
    return pause_super_cycle(sample, config) in config.pause_cycles


def pulse_samples(config: StimConfig) -> int:
    """Length of one sine burst in samples."""
    return config.stim_duration_ms * config.sample_rate_hz // MS_PER_SECOND


def cycle_samples(config: StimConfig) -> int:
    """Whole-cycle length in samples (truncated; the clock itself never accumulates it)."""
    return config.cycle_period_ms * config.sample_rate_hz // MS_PER_SECOND


def slot_start(slot_index: int, config: StimConfig) -> int:
    """
    First sample of absolute slot `slot_index` (counted from sample 0, not
    wrapped), i.e. the smallest sample for which
    floor(sample * 1000 * channels / (rate * period)) == slot_index.
    """
    denom = config.sample_rate_hz * config.cycle_period_ms
    numer = MS_PER_SECOND * config.channels
    return -(-slot_index * denom // numer)     # ceiling division
