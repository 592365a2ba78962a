#!/usr/bin/env python3
# =============================================================================
# stim_gen.py — F2Heal Stimulation File Generator (CLI)
# =============================================================================
#
# Renders a multi-channel stimulation file: two hands of N fingers each, one
# 16-bit PCM channel per finger.
#
# Usage:
#   python -m VTSE.SGM.stim_gen -s 60
#   python -m VTSE.SGM.stim_gen -s 60 -p 3 -p 4 -r 4 -v
#   python -m VTSE.SGM.stim_gen -s 60 --phaseshift 30
#   python -m VTSE.SGM.stim_gen -s 60 --fixedphaseshift --repetitions 3
#   python -m VTSE.SGM.stim_gen -s 60 -c 8 --format wav --norandom
#
# Verbosity:
#   -v     print the configuration block
#   -vv    also log every new channel order / phase shift
#   -vvv   also log every slot change
#
# Exit status: 0 on success, 2 when the configuration is rejected.
# =============================================================================

from __future__ import annotations

import argparse
import logging
import sys

try:
    import soundfile  # noqa: F401
    import numpy  # noqa: F401
except ImportError:
    print("[!!] soundfile and numpy are required:  pip install soundfile numpy")
    sys.exit(1)

from VTSE.SMM.config import ConfigError, RandomPhaseShift, StimConfig, resolve_mode
from VTSE.SMM.constants import (
    DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE, DEFAULT_STIM_FREQ,
    DEFAULT_STIM_DURATION, DEFAULT_CYCLE_PERIOD, DEFAULT_PAUSE_CYCLE_PERIOD,
    DEFAULT_REPETITIONS, DEFAULT_FORMAT, DEFAULT_OUTDIR, OUTPUT_FORMATS,
)
from VTSE.SGM.export import check_output, construct_fname, render

DIVIDER = "=" * 68


def display_config(config: StimConfig, seconds: int) -> None:
    mode = config.mode
    print(f"\n{DIVIDER}")
    print(f"  Generating {mode.label} output for:")
    print(DIVIDER)
    print(f"   Channels [L/R]          : {config.channels}")
    print(f"   Sample Rate             : {config.sample_rate_hz}Hz")
    print(f"   Duration                : {seconds}s")
    print("")
    print("   Stimulation details:")
    print(f"     Stimulation Frequency : {config.stim_freq_hz}Hz")
    print(f"     Stimulation Period    : {config.stim_duration_ms}ms")
    print(f"     Cycle Period          : {config.cycle_period_ms}ms")
    if isinstance(mode, RandomPhaseShift):
        print(f"     Phase Shift Interval  : {mode.interval_ms}ms")
    print(f"     Repetitions           : {config.repetitions}")
    print(f"     Randomized            : {'yes' if config.randomize else 'no'}")
    print("")
    if not config.pause_cycles:
        print("   Without pauses")
    else:
        print(f"   Pause cycle period      : {config.pause_cycle_period}")
        print(f"   Pause on cycles         : {sorted(config.pause_cycles)}")
    print("")
    if config.seed is None:
        print("   Randomized seed")
    else:
        print(f"   Random seed             : {config.seed}")
    print(DIVIDER)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vtse-gen",
        description="Create F2Heal multi-channel stimulation audio output",
    )
    parser.add_argument(
        "-s", "--secondsoutput", type=int, required=True,
        help="Duration in seconds of output",
    )
    parser.add_argument(
        "-c", "--channels", type=int, default=DEFAULT_CHANNELS,
        help=f"Channels or fingers per side (L/R), default {DEFAULT_CHANNELS}",
    )
    parser.add_argument(
        "--samplerate", type=int, default=DEFAULT_SAMPLE_RATE,
        help=f"Output sample rate in Hz, default {DEFAULT_SAMPLE_RATE}",
    )
    parser.add_argument(
        "--stimfreq", type=int, default=DEFAULT_STIM_FREQ,
        help=f"Frequency of finger stimulation in Hz, default {DEFAULT_STIM_FREQ}",
    )
    parser.add_argument(
        "--stimperiod", type=int, default=DEFAULT_STIM_DURATION,
        help=f"Duration of one finger stimulation in ms, default {DEFAULT_STIM_DURATION}",
    )
    parser.add_argument(
        "--cycleperiod", type=int, default=DEFAULT_CYCLE_PERIOD,
        help=f"Duration of one cycle (all fingers stimulated) in ms, default {DEFAULT_CYCLE_PERIOD}",
    )
    parser.add_argument(
        "--phaseshift", type=int, default=None, metavar="MS",
        help="Simultaneous stimulation with random phase shifts drawn from [0, MS)",
    )
    parser.add_argument(
        "--fixedphaseshift", action="store_true",
        help="Simultaneous stimulation on a shuffled quarter-period delay ladder",
    )
    parser.add_argument(
        "--pauzecycleperiod", "--pausecycleperiod", dest="pause_cycle_period",
        type=int, default=DEFAULT_PAUSE_CYCLE_PERIOD,
        help=f"Duration (in cycles) of one pause super-cycle, default {DEFAULT_PAUSE_CYCLE_PERIOD}",
    )
    parser.add_argument(
        "-p", "--pauzes", "--pauses", dest="pauses", type=int, action="append", default=[],
        help="Cycle within the pause super-cycle with no output; repeatable",
    )
    parser.add_argument(
        "-r", "--randomseed", type=int, default=None,
        help="Random seed (default: fresh OS entropy)",
    )
    parser.add_argument(
        "--norandom", action="store_true",
        help="Play channels in order 1->2->..->N instead of shuffling (blocked mode)",
    )
    parser.add_argument(
        "--repetitions", type=int, default=DEFAULT_REPETITIONS,
        help="Cycles a generated order / phase shift is held before a new one is drawn",
    )
    parser.add_argument(
        "--format", choices=sorted(OUTPUT_FORMATS), default=DEFAULT_FORMAT,
        help=f"Output container, default {DEFAULT_FORMAT}",
    )
    parser.add_argument(
        "-o", "--outdir", default=DEFAULT_OUTDIR,
        help=f"Output directory, default {DEFAULT_OUTDIR}/",
    )
    parser.add_argument(
        "-v", "--verbosity", action="count", default=0,
        help="Output verbosity; repeat for more",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> StimConfig:
    """Map parsed arguments onto a StimConfig (mode conflicts raise ConfigError)."""
    return StimConfig(
        channels=args.channels,
        sample_rate_hz=args.samplerate,
        stim_freq_hz=args.stimfreq,
        stim_duration_ms=args.stimperiod,
        cycle_period_ms=args.cycleperiod,
        pause_cycle_period=args.pause_cycle_period,
        pause_cycles=frozenset(args.pauses),
        repetitions=args.repetitions,
        randomize=not args.norandom,
        mode=resolve_mode(args.phaseshift, args.fixedphaseshift),
        seed=args.randomseed,
    )


def _log_level(verbosity: int) -> int:
    if verbosity >= 3:
        return logging.DEBUG
    if verbosity == 2:
        return logging.INFO
    return logging.WARNING


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=_log_level(args.verbosity), format="[%(levelname)s] %(message)s")

    try:
        config = config_from_args(args)
        check_output(config, args.secondsoutput, args.format)
        if args.verbosity > 0:
            display_config(config, args.secondsoutput)

        fname = construct_fname(config, args.secondsoutput, args.format)
        print(f"Writing output to: {args.outdir}/{fname}")
        result = render(config, args.secondsoutput, fmt=args.format, outdir=args.outdir)
    except ConfigError as exc:
        print(f"[!!] ERROR: {exc}")
        return 2

    print(f"  Frames written    : {result.frames:,}")
    if config.seed is None:
        print(f"  Seed used         : {result.seed}  (pass -r {result.seed} to reproduce)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
