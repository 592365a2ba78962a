# =============================================================================
# VTSE/SVM/__init__.py — Signal Verification Module
# =============================================================================
#
# The SVM contains the tools for verifying that rendered stimulation output
# follows the schedule its configuration promises.
#
# Sub-modules:
#   pulse_scan.py   — finds sine bursts in frames and checks the schedule rules
#   stim_check.py   — checks a rendered FLAC/WAV file (CLI + importable)
#   validate.py     — self-validation suite for the whole VTSE stack
# =============================================================================
