# =============================================================================
# pulse_scan.py — Stimulation Pulse Scanner
# =============================================================================
#
# Works backwards from rendered frames (float or int16, shape (n, hands*N))
# to the schedule that produced them, and checks it against the rules the
# sequencer promises:
#
#   pause silence   : every channel is exactly 0 inside a pause cycle
#   one per slot    : (blocked) one finger per hand per non-paused slot
#   no repeat       : (blocked) consecutive slots never hit the same finger
#   burst length    : no burst longer than pulse_samples + 1
#
# Burst detection
# ---------------
# A burst is a run of non-zero samples.  A sine burst can hit an exact zero
# crossing on an integer sample (e.g. 250 Hz at 48 kHz), so runs separated by
# at most MERGE_GAP zero samples are joined into one burst.
# =============================================================================

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from VTSE.SMM.config import StimConfig
from VTSE.SMM.constants import MS_PER_SECOND
from VTSE.SGM.cycle_clock import absolute_slot, in_pause, pulse_samples, slot_start

MERGE_GAP = 2    # zero samples tolerated inside one burst


class Pulse(NamedTuple):
    column: int      # frame column = hand * channels + channel
    start:  int      # absolute sample index of the first non-zero sample
    length: int      # samples from first to last non-zero sample
    peak:   float    # largest |amplitude| in the burst


class ScheduleReport(NamedTuple):
    frames:           int
    pulses:           int
    pause_violations: int    # samples inside a pause with any non-zero channel
    irregular_slots:  int    # blocked: complete slots without exactly 1 finger per hand
    back_to_back:     int    # blocked: same finger in two consecutive slots
    overlong_pulses:  int
    longest_pulse:    int
    pulse_limit:      int    # pulse_samples + 1

    @property
    def ok(self) -> bool:
        return not (
            self.pause_violations
            or self.irregular_slots
            or self.back_to_back
            or self.overlong_pulses
        )


def _as_frames(frames, config: StimConfig) -> np.ndarray:
    data = np.asarray(frames)
    if data.ndim != 2 or data.shape[1] != config.total_channels:
        raise ValueError(
            f"expected frames of shape (n, {config.total_channels}), got {data.shape}"
        )
    return data


def scan_column(column: np.ndarray, col_index: int, first_sample: int = 0) -> list[Pulse]:
    """Find bursts in one channel's samples."""
    nz = np.flatnonzero(column)
    if nz.size == 0:
        return []

    # split wherever the gap between non-zero samples exceeds MERGE_GAP
    breaks = np.flatnonzero(np.diff(nz) > MERGE_GAP + 1)
    starts = np.concatenate(([nz[0]], nz[breaks + 1]))
    ends   = np.concatenate((nz[breaks], [nz[-1]]))

    pulses = []
    for s, e in zip(starts, ends):
        peak = float(np.max(np.abs(column[s:e + 1])))
        pulses.append(Pulse(
            column=col_index,
            start=first_sample + int(s),
            length=int(e - s + 1),
            peak=peak,
        ))
    return pulses


def scan_pulses(frames, config: StimConfig, first_sample: int = 0) -> list[list[Pulse]]:
    """
    Bursts per frame column.

    Parameters
    ----------
    frames       : array-like (n, hands * channels)
    config       : configuration the frames were rendered with
    first_sample : absolute sample index of row 0

    Returns
    -------
    list indexed by column of Pulse lists, in time order
    """
    data = _as_frames(frames, config)
    return [
        scan_column(data[:, col], col, first_sample)
        for col in range(config.total_channels)
    ]


def _slot_fingers(active: np.ndarray, config: StimConfig, hand: int) -> list[int]:
    cols = slice(hand * config.channels, (hand + 1) * config.channels)
    return [int(c) for c in np.flatnonzero(active[:, cols].any(axis=0))]


def check_schedule(frames, config: StimConfig, first_sample: int = 1) -> ScheduleReport:
    """
    Check rendered frames against the scheduling rules.

    `first_sample` is the absolute sample index of row 0; frames produced by
    advance_and_sample() start at sample 1.
    """
    data   = _as_frames(frames, config)
    n      = data.shape[0]
    active = data != 0

    # ── pause silence ────────────────────────────────────────────────────────
    sounding = first_sample + np.flatnonzero(active.any(axis=1)).astype(np.int64)
    cycle_idx = (
        sounding * MS_PER_SECOND // (config.sample_rate_hz * config.cycle_period_ms)
    ) % config.pause_cycle_period
    pause_violations = int(np.isin(cycle_idx, list(config.pause_cycles)).sum())

    # ── bursts ───────────────────────────────────────────────────────────────
    pulses  = [p for col in scan_pulses(data, config, first_sample) for p in col]
    limit   = pulse_samples(config) + 1
    longest = max((p.length for p in pulses), default=0)
    overlong = sum(1 for p in pulses if p.length > limit)

    # ── blocked-mode slot rules ──────────────────────────────────────────────
    irregular = 0
    repeats   = 0
    if not config.phase_shifted and n:
        last_sample = first_sample + n          # exclusive
        slot = absolute_slot(first_sample, config)
        if slot_start(slot, config) < first_sample:
            slot += 1                           # skip the partial leading slot
        previous = [None] * config.hands

        while slot_start(slot + 1, config) <= last_sample:
            lo, hi = slot_start(slot, config), slot_start(slot + 1, config)
            rows = active[lo - first_sample:hi - first_sample]
            paused = in_pause(lo, config)
            for hand in range(config.hands):
                fingers = _slot_fingers(rows, config, hand)
                if not paused and len(fingers) != 1:
                    irregular += 1
                if len(fingers) == 1:
                    if previous[hand] == fingers[0]:
                        repeats += 1
                    previous[hand] = fingers[0]
                else:
                    previous[hand] = None
            slot += 1

    return ScheduleReport(
        frames=n,
        pulses=len(pulses),
        pause_violations=pause_violations,
        irregular_slots=irregular,
        back_to_back=repeats,
        overlong_pulses=overlong,
        longest_pulse=longest,
        pulse_limit=limit,
    )

