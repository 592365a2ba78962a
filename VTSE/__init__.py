# =============================================================================
# Vibro-Tactile Stimulation Engine (VTSE)
# Offline generator for F2Heal multi-finger stimulation audio.
# =============================================================================
#
# ── WHAT A RUN PRODUCES ──────────────────────────────────────────────────────
#   One multi-channel 16-bit PCM file (FLAC or WAV).  Two hands (L/R) of N
#   channels each; one channel drives one finger actuator.  A finger is
#   "stimulated" by a short sine burst (default 250 Hz for 100 ms).
#
# ── TIMELINE ─────────────────────────────────────────────────────────────────
#   cycle       : cycle_period ms in which every finger gets one burst
#   slot        : cycle_period / N — one finger's turn in blocked mode
#   pause cycle : whole cycles that are silent, chosen by index within a
#                 pause super-cycle of pause_cycle_period cycles
#
#   All boundaries are derived from the absolute sample index with integer
#   floor division.  No float time ever accumulates across samples.
#
# ── SCHEDULING MODES ─────────────────────────────────────────────────────────
#   Blocked           one finger per slot; the order is shuffled per cycle
#                     (or held for `repetitions` cycles) and never starts
#                     with the finger that ended the previous cycle.
#   RandomPhaseShift  every finger fires every slot, each offset by a random
#                     delay; one finger per slot stays unshifted.
#   FixedPhaseShift   every finger fires every slot on a quarter-period
#                     delay ladder, shuffled across fingers.
#
# ── REPRODUCIBILITY ──────────────────────────────────────────────────────────
#   Every random draw comes from one seeded numpy Generator consumed in a
#   fixed order.  Same seed + same config → byte-identical output.
#
# ── Module layout ────────────────────────────────────────────────────────────
#   SMM/  — constants, StimConfig, validation
#   SGM/  — sequencer core, PCM assembly, export, generator CLI
#   SVM/  — read-back verification, checker CLI, self-validation suite
# =============================================================================

__version__ = "0.3.0"
