# =============================================================================
# tone_synth.py — Gated Sine Synthesizer
# =============================================================================
#
# Returns the instantaneous amplitude of one (hand, channel) at the state's
# current sample.  Timing is integer samples throughout; only the sine
# argument and its result are floating point:
#
#     sin(elapsed * stim_freq * 2 * pi / sample_rate)
#
# so every burst starts at sin(0) = 0 and a burst of a whole number of stim
# periods also ends on a zero crossing.
#
# Blocked mode:       burst runs for elapsed = 0 .. pulse_samples inclusive,
#                     measured from the slot start, on the slot's channel only.
# Phase-shift modes:  burst window (start, start + pulse_samples), both ends
#                     exclusive, start = slot start + channel delay.  The
#                     previous slot's window is still honoured, so a burst
#                     that overruns into the next slot finishes instead of
#                     being cut; if both windows cover the sample, the one
#                     that started first wins.
# =============================================================================

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from VTSE.SMM.config import StimConfig
from .cycle_clock import in_pause, pulse_samples

if TYPE_CHECKING:
    from .sequencer import SequencerState


def sine_at(elapsed: int, config: StimConfig) -> float:
    arg = elapsed * config.stim_freq_hz * 2
    return math.sin(arg * math.pi / config.sample_rate_hz)


def sample_blocked(hand: int, channel: int, state: SequencerState, config: StimConfig) -> float:
    active_channel = state.channel_order[hand][state.cycle]
    if channel != active_channel:
        return 0.0

    elapsed = state.sample - state.cycle_start
    if elapsed > pulse_samples(config):
        return 0.0

    return sine_at(elapsed, config)


def window_start(
    hand: int,
    channel: int,
    state: SequencerState,
    config: StimConfig,
) -> Optional[int]:
    """
    Start sample of the phase-shifted window that covers the current sample,
    or None when the channel is silent.
    """
    length = pulse_samples(config)
    candidates = [state.cycle_start + state.channel_delay[hand][channel]]
    if state.prev_delay is not None and state.prev_cycle_start is not None:
        candidates.append(state.prev_cycle_start + state.prev_delay[hand][channel])

    for start in sorted(candidates):
        if start < state.sample < start + length:
            return start
    return None


def sample_phaseshifted(hand: int, channel: int, state: SequencerState, config: StimConfig) -> float:
    start = window_start(hand, channel, state, config)
    if start is None:
        return 0.0
    return sine_at(state.sample - start, config)


def synthesize(hand: int, channel: int, state: SequencerState, config: StimConfig) -> float:
    """Amplitude in [-1, 1]; silent throughout a pause cycle."""
    if in_pause(state.sample, config):
        return 0.0
    if config.phase_shifted:
        return sample_phaseshifted(hand, channel, state, config)
    return sample_blocked(hand, channel, state, config)
