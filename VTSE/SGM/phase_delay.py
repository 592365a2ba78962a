# =============================================================================
# phase_delay.py — Phase-shift Delay / Jitter Generator
# =============================================================================
#
# In the phase-shift modes every finger is stimulated in every slot; what
# changes is the start offset of each finger's burst relative to the slot
# start.  Offsets are integer sample counts, one per channel, per hand.
#
#   RandomPhaseShift(ms):  channels-1 offsets drawn uniformly from
#                          [0, ms * rate // 1000); the remaining one is 0.
#                          The array is then shuffled, so *which* finger is
#                          the unshifted reference changes from slot to slot.
#
#   FixedPhaseShift():     ladder of quarter stimulation periods, shuffled so
#                          the ladder position, not the finger, is random.
#                          Step i is i * period_ms // 4 * rate // 1000, with
#                          period_ms = 1000 // stim_freq, truncated at every
#                          division (e.g. 300 Hz at 44.1 kHz: 0, 0, 44, 88).
# =============================================================================

from __future__ import annotations

import logging

import numpy as np

from VTSE.SMM.config import FixedPhaseShift, RandomPhaseShift, StimConfig
from VTSE.SMM.constants import MS_PER_SECOND

log = logging.getLogger(__name__)


def shift_interval_samples(config: StimConfig) -> int:
    """Upper (exclusive) bound of a random delay, in samples."""
    return config.mode.interval_ms * config.sample_rate_hz // MS_PER_SECOND


def quarter_period_ladder(config: StimConfig) -> list[int]:
    """Deterministic offsets i * (stim period / 4), in samples."""
    period_ms = MS_PER_SECOND // config.stim_freq_hz
    return [
        i * period_ms // 4 * config.sample_rate_hz // MS_PER_SECOND
        for i in range(config.channels)
    ]


def _random_delays(rng: np.random.Generator, config: StimConfig) -> list[int]:
    delays = [0] * config.channels
    upper = shift_interval_samples(config)
    # the last element keeps delay 0: the reference channel
    for i in range(config.channels - 1):
        delays[i] = int(rng.integers(0, upper))
    return [delays[i] for i in rng.permutation(config.channels)]


def _fixed_delays(rng: np.random.Generator, config: StimConfig) -> list[int]:
    ladder = quarter_period_ladder(config)
    return [ladder[i] for i in rng.permutation(config.channels)]


def gen_phase_delay(rng: np.random.Generator, config: StimConfig) -> list[list[int]]:
    """
    Generate a fresh per-channel delay array for every hand.

    Returns:
        config.hands lists of config.channels non-negative sample offsets.

    Raises:
        ValueError: the configuration is not in a phase-shift mode.
    """
    if isinstance(config.mode, RandomPhaseShift):
        draw = _random_delays
    elif isinstance(config.mode, FixedPhaseShift):
        draw = _fixed_delays
    else:
        raise ValueError(f"Phase delays need a phase-shift mode, got {config.mode!r}")

    delays = [draw(rng, config) for _ in range(config.hands)]
    log.info("New phase shift: %s", " - ".join(str(d) for d in delays))
    return delays
