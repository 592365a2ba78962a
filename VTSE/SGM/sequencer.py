# =============================================================================
# sequencer.py — Stimulation Sequencer State Machine
# =============================================================================
#
# Turns a monotonically increasing sample counter into the stimulation
# schedule.  One SequencerState per run, created by initialize(), advanced one
# tick at a time, thrown away at the end.  Configuration is never stored on
# the state; it is passed into every call.
#
# Per advance():
#   1. sample += 1
#   2. new_slot = absolute_slot(sample)
#   3. new_slot != slot    → a new slot starts here (cycle_start = sample).
#        whole cycle done  → Blocked mode counts the wrap and draws a new
#                            channel order once `repetitions` wraps have
#                            been played.
#        phase-shift modes → count the slot and draw new delays once
#                            `repetitions` slots have been played.
#   4. slot = new_slot, cycle = new_slot % channels
#
#   Slot changes are detected on the unwrapped slot index, so a single
#   channel (where the wrapped cycle is always 0) still starts a new burst
#   every cycle.
#
# REPRODUCIBILITY:
#   The shared numpy Generator is consumed in a fixed order (hand 0 then
#   hand 1, regeneration points fixed by the clock), so a given seed and
#   config always yield the same frames.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np

from VTSE.SMM.config import StimConfig, validate_config
from .channel_order import gen_channel_order
from .cycle_clock import absolute_slot
from .phase_delay import gen_phase_delay
from .tone_synth import synthesize

log = logging.getLogger(__name__)


@dataclass
class SequencerState:
    rng:                np.random.Generator
    seed:               int
    sample:             int = 0
    slot:               int = 0      # unwrapped slot index
    cycle:              int = 0
    cycle_start:        int = 0
    repetition_counter: int = 1
    channel_order:      list[list[int]] = field(default_factory=list)
    channel_delay:      list[list[int]] = field(default_factory=list)
    # schedule of the slot that just ended, so an overrunning burst can finish
    prev_cycle_start:   Optional[int] = None
    prev_delay:         Optional[list[list[int]]] = None


def resolve_seed(seed: Optional[int]) -> int:
    """Return `seed`, or fresh OS entropy when it is None."""
    if seed is not None:
        return int(seed)
    return int(np.random.SeedSequence().entropy)


def regenerate(state: SequencerState, config: StimConfig) -> None:
    """Draw a new channel order (Blocked) or new delays (phase shift)."""
    if config.phase_shifted:
        state.channel_delay = gen_phase_delay(state.rng, config)
    else:
        previous = state.channel_order or None
        state.channel_order = gen_channel_order(state.rng, config, previous)


def _count_repetition(state: SequencerState, config: StimConfig) -> None:
    if state.repetition_counter < config.repetitions:
        state.repetition_counter += 1
    else:
        state.repetition_counter = 1
        regenerate(state, config)


def initialize(config: StimConfig, seed: Optional[int] = None) -> SequencerState:
    """
    Validate `config` and build the run state with its first schedule.

    Args:
        config: run configuration.
        seed:   overrides config.seed when given.

    Raises:
        ConfigError: the configuration cannot be run.
    """
    for warning in validate_config(config):
        log.warning(warning)

    resolved = resolve_seed(seed if seed is not None else config.seed)
    state = SequencerState(rng=np.random.default_rng(resolved), seed=resolved)
    state.slot = absolute_slot(0, config)
    state.cycle = state.slot % config.channels
    regenerate(state, config)
    return state


def advance(state: SequencerState, config: StimConfig) -> None:
    """Move the state machine forward by one sample tick."""
    state.sample += 1
    new_slot = absolute_slot(state.sample, config)

    if new_slot != state.slot:
        wrapped = new_slot // config.channels != state.slot // config.channels
        if wrapped and not config.phase_shifted:
            _count_repetition(state, config)

        if config.phase_shifted:
            state.prev_cycle_start = state.cycle_start
            state.prev_delay = state.channel_delay
        state.cycle_start = state.sample

        if config.phase_shifted:
            _count_repetition(state, config)

        log.debug("Cycle #%d at %d", new_slot % config.channels, state.sample)

    state.slot = new_slot
    state.cycle = new_slot % config.channels


def sample_frame(state: SequencerState, config: StimConfig) -> list[float]:
    """Amplitudes of every channel at the current sample, (hand, channel) order."""
    return [
        synthesize(hand, channel, state, config)
        for hand in range(config.hands)
        for channel in range(config.channels)
    ]


def advance_and_sample(state: SequencerState, config: StimConfig) -> list[float]:
    """Advance one tick and return that tick's frame."""
    advance(state, config)
    return sample_frame(state, config)


def iter_frames(
    state: SequencerState,
    config: StimConfig,
    n_samples: int,
) -> Iterator[list[float]]:
    """Yield `n_samples` consecutive frames."""
    for _ in range(n_samples):
        yield advance_and_sample(state, config)
