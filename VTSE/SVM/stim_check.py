#!/usr/bin/env python3
# =============================================================================
# stim_check.py — Rendered Stimulation File Checker
# =============================================================================
#
# Reads a FLAC/WAV written by stim_gen, recovers the run configuration from
# its self-describing file name, and verifies the signal against it.
#
# Usage:
#   python -m VTSE.SVM.stim_check output/Sine-Blocked-...-60s.flac
#   python -m VTSE.SVM.stim_check <file> --timeline 20
#
# Output sections:
#   [1] File info          — sample rate, channels, duration
#   [2] Configuration      — as decoded from the file name
#   [3] Format checks      — rate / channel count / length vs configuration
#   [4] Schedule report    — pauses, slots, repeats, burst lengths
#   [5] Burst timeline     — first N bursts (optional)
#   [6] VERDICT            — PASS / FAIL with reasons
#
# Exit status: 0 on PASS, 1 on FAIL.
# =============================================================================

from __future__ import annotations

import argparse
import os
import sys

try:
    import soundfile as sf
    import numpy as np  # noqa: F401
except ImportError:
    print("[!!] soundfile and numpy are required:  pip install soundfile numpy")
    sys.exit(1)

from VTSE.SMM.constants import HAND_NAMES, OUTPUT_FORMATS
from VTSE.SGM.export import parse_fname
from VTSE.SVM.pulse_scan import check_schedule, scan_pulses

DIVIDER = "=" * 68


def run_check(path: str, timeline: int = 0) -> bool:
    """
    Run every check on one rendered file and print the report.
    Returns True when the file matches its configuration.
    """
    verdict_pass = True
    reasons: list[str] = []

    # -----------------------------------------------------------------------
    # [1] File info
    # -----------------------------------------------------------------------
    print(f"\n{DIVIDER}")
    print("  VTSE Stimulation File Check")
    print(DIVIDER)

    if not os.path.exists(path):
        print(f"  [!!] File not found: {path}")
        return False

    info = sf.info(path)
    print(f"  File     : {os.path.basename(path)}")
    print(f"  Rate     : {info.samplerate} Hz")
    print(f"  Channels : {info.channels}")
    print(f"  Duration : {info.frames / info.samplerate:.2f} s  ({info.frames:,} frames)")
    print(f"  Format   : {info.format} / {info.subtype}")

    # -----------------------------------------------------------------------
    # [2] Configuration
    # -----------------------------------------------------------------------
    try:
        config, seconds, fmt = parse_fname(path)
    except ValueError as exc:
        print(f"  [!!] {exc}")
        return False

    print("\n  -- Configuration (from file name) --")
    print(f"  Mode              : {config.mode.label}")
    print(f"  Channels [L/R]    : {config.channels}")
    print(f"  Stimulation       : {config.stim_freq_hz}Hz for {config.stim_duration_ms}ms")
    print(f"  Cycle period      : {config.cycle_period_ms}ms")
    if config.pause_cycles:
        print(f"  Pauses            : {sorted(config.pause_cycles)} of {config.pause_cycle_period}")
    print(f"  Seed              : {config.seed if config.seed is not None else '(entropy)'}")

    # -----------------------------------------------------------------------
    # [3] Format checks
    # -----------------------------------------------------------------------
    print("\n  -- Format Checks --")
    expected_frames = seconds * config.sample_rate_hz
    format_checks = [
        ("sample rate", info.samplerate, config.sample_rate_hz),
        ("channel count", info.channels, config.total_channels),
        ("frame count", info.frames, expected_frames),
        ("container", info.format, OUTPUT_FORMATS[fmt][0]),
    ]
    for label, got, want in format_checks:
        if got == want:
            print(f"  [PASS] {label}: {got}")
        else:
            verdict_pass = False
            reasons.append(f"{label} is {got}, expected {want}")
            print(f"  [FAIL] {label}: {got} (expected {want})")

    if info.channels != config.total_channels:
        print(f"\n{DIVIDER}\n  VERDICT: FAIL — channel layout does not match\n{DIVIDER}\n")
        return False

    # -----------------------------------------------------------------------
    # [4] Schedule report
    # -----------------------------------------------------------------------
    data, _ = sf.read(path, dtype="int16", always_2d=True)
    report = check_schedule(data, config, first_sample=1)

    print("\n  -- Schedule Report --")
    print(f"  Bursts found      : {report.pulses:,}")
    print(f"  Longest burst     : {report.longest_pulse} samples  (limit: {report.pulse_limit})")
    print(f"  Pause violations  : {report.pause_violations:,} samples")
    if not config.phase_shifted:
        print(f"  Irregular slots   : {report.irregular_slots}")
        print(f"  Back-to-back hits : {report.back_to_back}")

    if report.pause_violations:
        reasons.append(f"{report.pause_violations} non-silent samples inside pauses")
    if report.overlong_pulses:
        reasons.append(f"{report.overlong_pulses} bursts longer than {report.pulse_limit} samples")
    if report.irregular_slots:
        reasons.append(f"{report.irregular_slots} slots without exactly one finger per hand")
    if report.back_to_back:
        reasons.append(f"{report.back_to_back} fingers stimulated twice in a row")
    if not report.ok:
        verdict_pass = False

    # -----------------------------------------------------------------------
    # [5] Burst timeline
    # -----------------------------------------------------------------------
    if timeline > 0:
        print(f"\n  -- Burst Timeline (first {timeline}) --")
        bursts = sorted(
            (p for col in scan_pulses(data, config, first_sample=1) for p in col),
            key=lambda p: (p.start, p.column),
        )
        print(f"  {'Channel':<8} {'Start (s)':>10}  {'Samples':>8}  {'Peak':>6}")
        print(f"  {'-'*8} {'-'*10}  {'-'*8}  {'-'*6}")
        for p in bursts[:timeline]:
            hand, channel = divmod(p.column, config.channels)
            name = f"{HAND_NAMES[hand]}{channel + 1}"
            print(f"  {name:<8} {p.start / config.sample_rate_hz:>10.4f}  {p.length:>8}  {p.peak:>6.0f}")

    # -----------------------------------------------------------------------
    # [6] Verdict
    # -----------------------------------------------------------------------
    print(f"\n{DIVIDER}")
    if verdict_pass:
        print("  VERDICT: PASS — output matches its configuration")
    else:
        print("  VERDICT: FAIL")
        for r in reasons:
            print(f"    - {r}")
    print(f"{DIVIDER}\n")

    return verdict_pass


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vtse-check",
        description="Verify a rendered VTSE stimulation file",
    )
    parser.add_argument("file", help="Path to a FLAC/WAV written by vtse-gen")
    parser.add_argument(
        "--timeline", type=int, default=0, metavar="N",
        help="Print the first N detected bursts",
    )
    args = parser.parse_args(argv)
    return 0 if run_check(args.file, timeline=args.timeline) else 1


if __name__ == "__main__":
    sys.exit(main())
