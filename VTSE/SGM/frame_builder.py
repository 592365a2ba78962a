# =============================================================================
# frame_builder.py — Interleaved PCM Frame Assembler
# =============================================================================
#
# Sits between the sequencer (one float frame per tick) and the encoder
# (blocks of interleaved 16-bit PCM).  A frame is the hands * channels
# amplitudes of one tick, ordered L0 L1 .. Ln R0 R1 .. Rn.
#
# CONVERSION:
#   pcm = trunc(amplitude * 32767)   — truncation toward zero, never round(),
#   so the integer stream matches a plain float → int cast bit for bit.
#
# BUFFERING:
#   Frames are copied into a fixed numpy block; each full block is handed to
#   the sink, and flush() hands over the partial tail.  Nothing is dropped or
#   padded: frames out == frames in.
# =============================================================================

from __future__ import annotations

from typing import Callable, Sequence

import numpy as np

from VTSE.SMM.constants import BLOCK_FRAMES, PCM_MAX


def to_pcm16(frame: Sequence[float]) -> np.ndarray:
    """Scale one float frame in [-1, 1] to an int16 row (truncating)."""
    return (np.asarray(frame, dtype=np.float64) * PCM_MAX).astype(np.int16)


class FrameBuilder:
    """
    Collects per-tick frames into int16 blocks of shape (block_frames, width).

    Example:
        blocks = []
        builder = FrameBuilder(width=8, sink=blocks.append, block_frames=1024)
        for frame in iter_frames(state, config, n):
            builder.push(frame)
        builder.flush()
    """

    def __init__(
        self,
        width: int,
        sink: Callable[[np.ndarray], None],
        block_frames: int = BLOCK_FRAMES,
    ) -> None:
        if width <= 0:
            raise ValueError(f"frame width must be positive, got {width}")
        if block_frames <= 0:
            raise ValueError(f"block_frames must be positive, got {block_frames}")

        self.width   = width
        self._sink   = sink
        self._block  = np.zeros((block_frames, width), dtype=np.int16)
        self._fill   = 0       # rows used in the current block
        self._total  = 0       # rows handed to the sink so far

    @property
    def frames_written(self) -> int:
        return self._total

    def push(self, frame: Sequence[float]) -> None:
        """Append one float frame."""
        if len(frame) != self.width:
            raise ValueError(f"expected {self.width} channels per frame, got {len(frame)}")

        self._block[self._fill] = to_pcm16(frame)
        self._fill += 1
        if self._fill == len(self._block):
            self._emit(self._fill)

    def flush(self) -> None:
        """Hand any buffered frames to the sink."""
        if self._fill:
            self._emit(self._fill)

    def _emit(self, rows: int) -> None:
        # the sink gets its own copy; the block buffer is reused
        self._sink(self._block[:rows].copy())
        self._total += rows
        self._fill = 0
