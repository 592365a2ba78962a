# =============================================================================
# VTSE/SMM/__init__.py — Stimulation Mapping Module
# =============================================================================
#
# The SMM is the single source of truth for the run: topology, PCM format,
# command-line defaults, and the validated StimConfig every other module
# receives as an explicit argument.
#
# Sub-modules:
#   constants.py  — topology, PCM scale, output formats, run defaults
#   config.py     — StimConfig, scheduling-mode variants, validation
# =============================================================================
