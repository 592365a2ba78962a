#!/usr/bin/env python3
# =============================================================================
# validate.py — VTSE Self-Validation Suite
# =============================================================================
#
# Run directly:  python -m VTSE.SVM.validate
#
# Tests:
#   1. Cycle clock          — slot / pause boundaries on the integer grid
#   2. Channel orders       — permutations, no-repeat rule, identity order
#   3. Phase delays         — reference channel, bounds, quarter-period ladder
#   4. Sequencer            — reference 1 s scenario, reproducibility
#   5. Export round trip    — FLAC written and read back bit-exact
# =============================================================================

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import numpy as np

from VTSE.SMM.config import Blocked, FixedPhaseShift, RandomPhaseShift, StimConfig
from VTSE.SGM.channel_order import gen_channel_order
from VTSE.SGM.cycle_clock import active_cycle, pause_super_cycle, pulse_samples, slot_start
from VTSE.SGM.frame_builder import to_pcm16
from VTSE.SGM.phase_delay import gen_phase_delay, quarter_period_ladder, shift_interval_samples
from VTSE.SGM.sequencer import initialize, iter_frames
from VTSE.SVM.pulse_scan import check_schedule

PASS = "[PASS]"
FAIL = "[FAIL]"
INFO = "[INFO]"

# Reference run: 4 fingers, 250 Hz / 100 ms, 666 ms cycle, pauses 3+4 of 5
REFERENCE = StimConfig(
    channels=4,
    sample_rate_hz=44_100,
    stim_freq_hz=250,
    stim_duration_ms=100,
    cycle_period_ms=666,
    pause_cycle_period=5,
    pause_cycles=frozenset({3, 4}),
    mode=Blocked(),
    seed=4,
)


class Checker:
    def __init__(self) -> None:
        self.failures = 0

    def check(self, label: str, condition: bool, detail: str = "") -> bool:
        if condition:
            print(f"  {PASS} {label}")
        else:
            print(f"  {FAIL} {label}{(' -- ' + detail) if detail else ''}")
            self.failures += 1
        return condition


def _section(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def _render_frames(config: StimConfig, n: int) -> np.ndarray:
    state = initialize(config)
    return np.array([to_pcm16(f) for f in iter_frames(state, config, n)])


def check_clock(c: Checker) -> None:
    _section("TEST 1 — Cycle Clock")
    cfg = REFERENCE
    c.check("slot 0 covers sample 7342", active_cycle(7342, cfg) == 0)
    c.check("slot 1 starts at sample 7343", active_cycle(7343, cfg) == 1)
    c.check("slot_start(1) = 7343", slot_start(1, cfg) == 7343,
            f"got {slot_start(1, cfg)}")
    c.check("cycle wraps to slot 0 at sample 29371",
            active_cycle(29370, cfg) == 3 and active_cycle(29371, cfg) == 0)
    c.check("pause super-cycle 1 starts at sample 29371",
            pause_super_cycle(29370, cfg) == 0 and pause_super_cycle(29371, cfg) == 1)
    c.check("pulse = 4410 samples", pulse_samples(cfg) == 4410)


def check_orders(c: Checker) -> None:
    _section("TEST 2 — Channel Orders")
    rng = np.random.default_rng(1)
    cfg = REFERENCE._replace(channels=3)
    orders = gen_channel_order(rng, cfg)
    c.check("first order is a permutation per hand",
            all(sorted(o) == [0, 1, 2] for o in orders))

    repeats = 0
    for _ in range(300):
        new = gen_channel_order(rng, cfg, orders)
        repeats += sum(1 for h in range(cfg.hands) if new[h][0] == orders[h][-1])
        orders = new
    c.check("no-repeat rule over 300 generations", repeats == 0,
            f"{repeats} repeats")

    fixed = gen_channel_order(rng, cfg._replace(randomize=False), orders)
    c.check("unrandomized order is identity", fixed == [[0, 1, 2], [0, 1, 2]])


def check_delays(c: Checker) -> None:
    _section("TEST 3 — Phase Delays")
    rng = np.random.default_rng(2)
    cfg = REFERENCE._replace(mode=RandomPhaseShift(30))
    upper = shift_interval_samples(cfg)
    ok_zero = ok_range = True
    for _ in range(200):
        for delays in gen_phase_delay(rng, cfg):
            ok_zero &= 0 in delays
            ok_range &= all(0 <= d < upper for d in delays)
    c.check("random: a zero-delay reference channel every time", ok_zero)
    c.check(f"random: every delay in [0, {upper})", ok_range)

    cfg = REFERENCE._replace(mode=FixedPhaseShift())
    ladder = quarter_period_ladder(cfg)
    c.check("fixed: ladder 0/44/88/132 at 250 Hz", ladder == [0, 44, 88, 132],
            f"got {ladder}")
    c.check("fixed: every draw is a permutation of the ladder",
            all(sorted(d) == ladder for d in gen_phase_delay(rng, cfg)))


def check_sequencer(c: Checker) -> None:
    _section("TEST 4 — Sequencer (reference scenario)")
    n = REFERENCE.sample_rate_hz
    frames = _render_frames(REFERENCE, n)
    c.check("1 s of frames", frames.shape == (n, 8), f"got {frames.shape}")

    report = check_schedule(frames, REFERENCE, first_sample=1)
    print(f"  {INFO} {report.pulses} bursts, longest {report.longest_pulse} samples")
    c.check("no pause violations", report.pause_violations == 0)
    c.check("one finger per hand per slot", report.irregular_slots == 0,
            f"{report.irregular_slots} irregular slots")
    c.check("no finger hit twice in a row", report.back_to_back == 0)
    c.check("bursts within pulse_samples + 1", report.overlong_pulses == 0)

    again = _render_frames(REFERENCE, n)
    c.check("same seed → identical frames", np.array_equal(frames, again))

    # 4 s reaches pause cycles 3 and 4
    long_cfg = REFERENCE._replace(seed=11)
    long_frames = _render_frames(long_cfg, 4 * n)
    paused = [
        i for i in range(long_frames.shape[0])
        if pause_super_cycle(i + 1, long_cfg) in long_cfg.pause_cycles
    ]
    c.check("pause cycles present in 4 s", len(paused) > 0)
    c.check("pause cycles are silent", not long_frames[paused].any())


def check_export(c: Checker) -> None:
    _section("TEST 5 — Export Round Trip")
    try:
        import soundfile as sf
    except ImportError:
        print(f"  {INFO} soundfile not available — skipping export round trip")
        print(f"  {INFO} Install with: pip install soundfile")
        return

    from VTSE.SGM.export import parse_fname, render

    cfg = REFERENCE._replace(sample_rate_hz=8_000, stim_freq_hz=100)
    with tempfile.TemporaryDirectory() as td:
        result = render(cfg, 2, outdir=td)
        data, sr = sf.read(str(result.path), dtype="int16", always_2d=True)
        c.check("file written at 8 kHz", sr == 8_000)
        c.check("frame count = 2 s", data.shape == (16_000, 8), f"got {data.shape}")
        c.check("PCM matches the generator",
                np.array_equal(data, _render_frames(cfg, 16_000)))
        parsed, seconds, fmt = parse_fname(Path(result.path).name)
        c.check("file name decodes back to the config",
                parsed == cfg and seconds == 2 and fmt == "flac")


def run_validation() -> int:
    """Run every section; return the number of failed checks."""
    c = Checker()
    check_clock(c)
    check_orders(c)
    check_delays(c)
    check_sequencer(c)
    check_export(c)

    print("\n" + "=" * 60)
    if c.failures == 0:
        print("  ALL TESTS PASSED")
    else:
        print(f"  {c.failures} TEST(S) FAILED")
    print("=" * 60 + "\n")
    return c.failures


def main() -> int:
    return 0 if run_validation() == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
