# =============================================================================
# config.py — SMM Run Configuration
# =============================================================================
#
# A run is fully described by one immutable StimConfig.  The scheduling mode is
# a tagged variant chosen once, here, so that contradictory flag combinations
# can never reach the generation loop:
#
#   Blocked()                 one finger per slot, in (shuffled) channel order
#   RandomPhaseShift(ms)      every finger fires each slot, offset by a random
#                             delay drawn from [0, ms)
#   FixedPhaseShift()         every finger fires each slot, offset by a
#                             quarter-stim-period ladder in shuffled order
#
# Problems split in two classes:
#   fatal    → ConfigError, raised before a single sample is produced
#   advisory → returned as warning strings, the run proceeds
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from VTSE.SMM.constants import (
    HANDS, MS_PER_SECOND,
    DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE, DEFAULT_STIM_FREQ,
    DEFAULT_STIM_DURATION, DEFAULT_CYCLE_PERIOD,
    DEFAULT_PAUSE_CYCLE_PERIOD, DEFAULT_REPETITIONS,
)


class ConfigError(ValueError):
    """Fatal configuration problem; nothing has been generated yet."""


# ── Scheduling modes ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Blocked:
    """Sequential channel activation: exactly one channel per slot."""

    label = "Blocked"


@dataclass(frozen=True)
class RandomPhaseShift:
    """All channels fire each slot, each delayed by a random offset."""

    interval_ms: int
    label = "RandomPhaseShift"


@dataclass(frozen=True)
class FixedPhaseShift:
    """All channels fire each slot on a shuffled quarter-period ladder."""

    label = "FixedPhaseShift"


SchedulingMode = Union[Blocked, RandomPhaseShift, FixedPhaseShift]

PHASE_SHIFT_MODES = (RandomPhaseShift, FixedPhaseShift)


def resolve_mode(phaseshift_ms: Optional[int], fixed_phaseshift: bool) -> SchedulingMode:
    """
    Turn the two command-line switches into exactly one scheduling mode.

    Raises:
        ConfigError: both switches were given at once.
    """
    if phaseshift_ms is not None and fixed_phaseshift:
        raise ConfigError(
            "Conflicting scheduling modes: --phaseshift and --fixedphaseshift "
            "cannot be combined"
        )
    if phaseshift_ms is not None:
        return RandomPhaseShift(phaseshift_ms)
    if fixed_phaseshift:
        return FixedPhaseShift()
    return Blocked()


# ── Configuration record ─────────────────────────────────────────────────────

class StimConfig(NamedTuple):
    channels:           int = DEFAULT_CHANNELS
    sample_rate_hz:     int = DEFAULT_SAMPLE_RATE
    stim_freq_hz:       int = DEFAULT_STIM_FREQ
    stim_duration_ms:   int = DEFAULT_STIM_DURATION
    cycle_period_ms:    int = DEFAULT_CYCLE_PERIOD
    pause_cycle_period: int = DEFAULT_PAUSE_CYCLE_PERIOD
    pause_cycles:       frozenset = frozenset()
    repetitions:        int = DEFAULT_REPETITIONS
    randomize:          bool = True
    mode:               SchedulingMode = Blocked()
    seed:               Optional[int] = None

    @property
    def hands(self) -> int:
        return HANDS

    @property
    def total_channels(self) -> int:
        """Width of one output frame (hands * channels)."""
        return HANDS * self.channels

    @property
    def phase_shifted(self) -> bool:
        return isinstance(self.mode, PHASE_SHIFT_MODES)


# ── Validation ───────────────────────────────────────────────────────────────

_POSITIVE_FIELDS = (
    "channels",
    "sample_rate_hz",
    "stim_freq_hz",
    "stim_duration_ms",
    "cycle_period_ms",
    "pause_cycle_period",
    "repetitions",
)


def check_config(config: StimConfig) -> None:
    """
    Reject configurations the sequencer cannot run.

    Raises:
        ConfigError: on the first fatal problem found.
    """
    for name in _POSITIVE_FIELDS:
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise ConfigError(f"{name} must be positive, got {value}")

    if not isinstance(config.mode, (Blocked,) + PHASE_SHIFT_MODES):
        raise ConfigError(f"Unknown scheduling mode: {config.mode!r}")

    if config.seed is not None and config.seed < 0:
        raise ConfigError(f"seed must be a non-negative integer, got {config.seed}")

    # A slot narrower than one sample would make the clock skip channels.
    if config.cycle_period_ms * config.sample_rate_hz < config.channels * MS_PER_SECOND:
        raise ConfigError(
            f"Cycle period of {config.cycle_period_ms}ms is shorter than one "
            f"sample per channel at {config.sample_rate_hz}Hz"
        )

    if isinstance(config.mode, Blocked) and config.randomize and config.channels < 2:
        raise ConfigError(
            "Randomized blocked mode needs at least 2 channels per hand "
            "(a single channel always repeats itself)"
        )

    if isinstance(config.mode, RandomPhaseShift):
        interval = config.mode.interval_ms
        if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
            raise ConfigError(f"Phase shift interval must be a positive integer, got {interval!r}")
        if interval * config.sample_rate_hz // MS_PER_SECOND < 1:
            raise ConfigError(
                f"Phase shift interval of {interval}ms is shorter than one sample"
            )


def validate_config(config: StimConfig) -> list[str]:
    """
    Run the fatal checks, then collect advisory warnings.

    Returns:
        Human-readable warning strings; empty when the run is clean.
    """
    check_config(config)
    warnings: list[str] = []

    # Does the sine burst end on a full period (a zero crossing)?
    if (config.stim_freq_hz * config.stim_duration_ms) % MS_PER_SECOND != 0:
        warnings.append("Stimulation period and frequency do not match!")

    if 2 * config.stim_freq_hz > config.sample_rate_hz:
        warnings.append(
            f"Stimulation frequency {config.stim_freq_hz}Hz is above the "
            f"Nyquist limit of {config.sample_rate_hz // 2}Hz"
        )

    if config.stim_duration_ms * config.channels > config.cycle_period_ms:
        warnings.append("Overlapping stimulation periods not supported!")

    for pause in sorted(config.pause_cycles):
        if pause < 0 or pause >= config.pause_cycle_period:
            warnings.append(f"This pause will have no effect: {pause}")

    if isinstance(config.mode, RandomPhaseShift):
        interval = config.mode.interval_ms
        if (interval + config.stim_duration_ms) * config.channels > config.cycle_period_ms:
            over = interval + config.stim_duration_ms - config.cycle_period_ms // config.channels
            warnings.append(f"Phase shift is too large: {over}ms over limit")

    elif isinstance(config.mode, FixedPhaseShift):
        period_ms = MS_PER_SECOND // config.stim_freq_hz
        ladder_top = (config.channels - 1) * period_ms // 4 * config.sample_rate_hz // MS_PER_SECOND
        pulse = config.stim_duration_ms * config.sample_rate_hz // MS_PER_SECOND
        slot = config.cycle_period_ms * config.sample_rate_hz // (MS_PER_SECOND * config.channels)
        if ladder_top + pulse > slot:
            warnings.append(
                f"Fixed phase ladder is too long: {ladder_top + pulse - slot} samples over limit"
            )

    return warnings
