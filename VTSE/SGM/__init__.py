# =============================================================================
# SGM — Signal Generation Module
# Subfolder of VTSE (Vibro-Tactile Stimulation Engine)
# =============================================================================
#
# Generates deterministic multi-channel stimulation PCM from a StimConfig.
#
# Modules:
#   cycle_clock.py   — sample index → slot / pause super-cycle arithmetic
#   channel_order.py — blocked-mode channel orders (no-repeat shuffles)
#   phase_delay.py   — phase-shift per-channel delays (random / fixed ladder)
#   sequencer.py     — state machine; initialize() / advance_and_sample()
#   tone_synth.py    — gated sine amplitude per (hand, channel, sample)
#   frame_builder.py — float frames → interleaved int16 PCM blocks
#   export.py        — file naming and FLAC/WAV rendering via soundfile
#   stim_gen.py      — command-line generator
#
# Constants and configuration live in VTSE/SMM/
# Verification tools live in VTSE/SVM/
# =============================================================================

from .sequencer import (
    SequencerState,
    advance,
    advance_and_sample,
    initialize,
    iter_frames,
)

__all__ = [
    "SequencerState",
    "advance",
    "advance_and_sample",
    "initialize",
    "iter_frames",
]
