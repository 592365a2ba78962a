# =============================================================================
# export.py — FLAC / WAV Export Bridge
# =============================================================================
#
# Runs a complete generation pass and hands the frames to libsndfile (via
# soundfile) as 16-bit interleaved PCM with hands * channels channels.
#
# FILE NAMES are self-describing so a rendered file can be checked later
# without any side-car metadata:
#
#   Sine-Blocked-250SFREQ-100SPER-666CPER--3_4P5--4RSEED--4LR-44100Hz-60s.flac
#   Sine-30PhaseShifted-250SFREQ-100SPER-666CPER--4LR-44100Hz-60s.flac
#   Sine-FixedPhaseShifted-250SFREQ-100SPER-666CPER--2REP--NORAND--4LR-44100Hz-10s.wav
#
# construct_fname() writes them, parse_fname() reads them back.
# =============================================================================

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import NamedTuple, Optional, Union

import soundfile as sf

from VTSE.SMM.config import (
    Blocked, ConfigError, FixedPhaseShift, RandomPhaseShift, StimConfig,
)
from VTSE.SMM.constants import (
    BLOCK_FRAMES, DEFAULT_FORMAT, DEFAULT_OUTDIR, DEFAULT_PAUSE_CYCLE_PERIOD,
    FLAC_MAX_CHANNELS, OUTPUT_FORMATS, PCM_SUBTYPE,
)
from .frame_builder import FrameBuilder
from .sequencer import initialize, iter_frames

log = logging.getLogger(__name__)


class RenderResult(NamedTuple):
    path:   Path
    frames: int      # frames written (one per sample tick)
    seed:   int      # seed actually used — re-run with it to reproduce


# ── Output checks ────────────────────────────────────────────────────────────

def check_output(config: StimConfig, seconds: int, fmt: str) -> None:
    """
    Reject output settings the container cannot hold.

    Raises:
        ConfigError: unknown format, non-positive duration, or more channels
                     than the container supports.
    """
    if fmt not in OUTPUT_FORMATS:
        raise ConfigError(f"Unknown output format {fmt!r}; choose from {sorted(OUTPUT_FORMATS)}")
    if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
        raise ConfigError(f"Output duration must be a positive number of seconds, got {seconds!r}")
    if fmt == "flac" and config.total_channels > FLAC_MAX_CHANNELS:
        raise ConfigError(
            f"FLAC supports at most {FLAC_MAX_CHANNELS} channels; "
            f"{config.channels} per hand gives {config.total_channels}. Use --format wav."
        )


# ── File naming ──────────────────────────────────────────────────────────────

def construct_fname(config: StimConfig, seconds: int, fmt: str = DEFAULT_FORMAT) -> str:
    """Build the self-describing output file name (no directory)."""
    mode = config.mode
    if isinstance(mode, RandomPhaseShift):
        result = f"Sine-{mode.interval_ms}PhaseShifted-"
    elif isinstance(mode, FixedPhaseShift):
        result = "Sine-FixedPhaseShifted-"
    else:
        result = "Sine-Blocked-"

    result += f"{config.stim_freq_hz}SFREQ-"
    result += f"{config.stim_duration_ms}SPER-"
    result += f"{config.cycle_period_ms}CPER--"

    if config.pause_cycles:
        result += "_".join(str(p) for p in sorted(config.pause_cycles))
        result += f"P{config.pause_cycle_period}--"

    if config.seed is not None:
        result += f"{config.seed}RSEED--"
    if config.repetitions != 1:
        result += f"{config.repetitions}REP--"
    if not config.randomize:
        result += "NORAND--"

    result += f"{config.channels}LR-{config.sample_rate_hz}Hz-{seconds}s"
    result += "." + OUTPUT_FORMATS[fmt][1]
    return result


_FNAME_RE = re.compile(
    r"^Sine-(?:(?P<blocked>Blocked)|(?P<shift>\d+)PhaseShifted|(?P<fixed>Fixed)PhaseShifted)-"
    r"(?P<freq>\d+)SFREQ-(?P<dur>\d+)SPER-(?P<cycle>\d+)CPER--"
    r"(?:(?P<pauses>\d+(?:_\d+)*)P(?P<pperiod>\d+)--)?"
    r"(?:(?P<seed>\d+)RSEED--)?"
    r"(?:(?P<reps>\d+)REP--)?"
    r"(?P<norand>NORAND--)?"
    r"(?P<channels>\d+)LR-(?P<rate>\d+)Hz-(?P<secs>\d+)s\.(?P<ext>flac|wav)$"
)


def parse_fname(name: Union[str, Path]) -> tuple[StimConfig, int, str]:
    """
    Recover (config, seconds, fmt) from a name made by construct_fname().

    Raises:
        ValueError: the name does not follow the naming scheme.
    """
    base = Path(name).name
    m = _FNAME_RE.match(base)
    if m is None:
        raise ValueError(f"Not a VTSE output file name: {base!r}")

    if m["shift"] is not None:
        mode = RandomPhaseShift(int(m["shift"]))
    elif m["fixed"] is not None:
        mode = FixedPhaseShift()
    else:
        mode = Blocked()

    pauses = frozenset(int(p) for p in m["pauses"].split("_")) if m["pauses"] else frozenset()
    config = StimConfig(
        channels=int(m["channels"]),
        sample_rate_hz=int(m["rate"]),
        stim_freq_hz=int(m["freq"]),
        stim_duration_ms=int(m["dur"]),
        cycle_period_ms=int(m["cycle"]),
        pause_cycle_period=int(m["pperiod"]) if m["pperiod"] else DEFAULT_PAUSE_CYCLE_PERIOD,
        pause_cycles=pauses,
        repetitions=int(m["reps"]) if m["reps"] else 1,
        randomize=m["norand"] is None,
        mode=mode,
        seed=int(m["seed"]) if m["seed"] else None,
    )
    fmt = next(key for key, (_, ext) in OUTPUT_FORMATS.items() if ext == m["ext"])
    return config, int(m["secs"]), fmt


# ── Rendering ────────────────────────────────────────────────────────────────

def render(
    config: StimConfig,
    seconds: int,
    path: Optional[Union[str, Path]] = None,
    fmt: str = DEFAULT_FORMAT,
    outdir: Union[str, Path] = DEFAULT_OUTDIR,
    block_frames: int = BLOCK_FRAMES,
) -> RenderResult:
    """
    Generate `seconds` of stimulation and write it to disk.

    Args:
        config:       run configuration (config.seed None → entropy seed).
        seconds:      output duration; seconds * sample_rate_hz frames.
        path:         explicit output path; default outdir/construct_fname().
        fmt:          "flac" or "wav".
        outdir:       directory for the default path, created if missing.
        block_frames: frames per block handed to the encoder.

    Raises:
        ConfigError: the configuration or output settings are invalid.
    """
    check_output(config, seconds, fmt)
    state = initialize(config)

    if path is None:
        path = Path(outdir) / construct_fname(config, seconds, fmt)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    samples_to_go = seconds * config.sample_rate_hz
    container = OUTPUT_FORMATS[fmt][0]
    log.info("Writing %d frames x %d channels to %s", samples_to_go, config.total_channels, path)

    with sf.SoundFile(
        str(path), mode="w",
        samplerate=config.sample_rate_hz,
        channels=config.total_channels,
        subtype=PCM_SUBTYPE,
        format=container,
    ) as out:
        builder = FrameBuilder(config.total_channels, out.write, block_frames)
        for frame in iter_frames(state, config, samples_to_go):
            builder.push(frame)
        builder.flush()

    return RenderResult(path=path, frames=builder.frames_written, seed=state.seed)
