# =============================================================================
# constants.py — SMM Stimulation Constants and Run Defaults
# =============================================================================
#
# Every other VTSE sub-module imports its fixed numbers from here.
# The DEFAULT_* values are the stock F2Heal run: 4 fingers per hand, a 250 Hz
# sine burst of 100 ms, one full sweep over all fingers every 666 ms, and
# pauses on cycles 3 and 4 of every 5-cycle pause super-cycle.

# -----------------------------------------------------------------------------
# TOPOLOGY
# -----------------------------------------------------------------------------

HANDS = 2                 # left / right — independent channel groups
HAND_NAMES = ("L", "R")

# FLAC streams carry at most 8 channels → at most 4 channels per hand.
FLAC_MAX_CHANNELS = 8

# -----------------------------------------------------------------------------
# PCM OUTPUT
# -----------------------------------------------------------------------------

PCM_BITS = 16
PCM_MAX  = 32767          # i16::MAX — amplitude scale for a full-height sine
PCM_SUBTYPE = "PCM_16"

OUTPUT_FORMATS = {
    # format key → (soundfile container name, file extension)
    "flac": ("FLAC", "flac"),
    "wav":  ("WAV",  "wav"),
}
DEFAULT_FORMAT = "flac"
DEFAULT_OUTDIR = "output"

# Frames per block handed to the encoder (1 s at the default rate)
BLOCK_FRAMES = 44_100

# -----------------------------------------------------------------------------
# RUN DEFAULTS  (match the original command-line defaults)
# -----------------------------------------------------------------------------

DEFAULT_CHANNELS           = 4
DEFAULT_SAMPLE_RATE        = 44_100    # Hz
DEFAULT_STIM_FREQ          = 250       # Hz
DEFAULT_STIM_DURATION      = 100       # ms — one sine burst
DEFAULT_CYCLE_PERIOD       = 666       # ms — all fingers stimulated once
DEFAULT_PAUSE_CYCLE_PERIOD = 5         # cycles per pause super-cycle
DEFAULT_REPETITIONS        = 1         # regenerate the schedule on every wrap

# All clock arithmetic is done in integer milliseconds → samples.
MS_PER_SECOND = 1_000
