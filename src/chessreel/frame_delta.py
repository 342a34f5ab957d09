from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import FRAME_DELAY_CS, FINAL_FRAME_DELAY_CS
from .errors import EncodingError


@dataclass(frozen=True)
class FlushedFrame:
    """A frame ready for the animated image: indices with the sentinel substituted."""
    pixels: np.ndarray
    transparent_index: int
    duration_cs: int

    @property
    def transparent_count(self) -> int:
        return int(np.count_nonzero(self.pixels == self.transparent_index))


class FrameDeltaCompressor:
    """
    Holds at most one indexed frame until its successor (or the end of the game)
    is known. When a frame is flushed, every pixel equal to the frame shown before
    it becomes the transparent index, so the previous canvas shows through.
    Only the directly preceding frame is compared.
    """

    def __init__(self, transparent_index: int,
                 frame_delay_cs: int = FRAME_DELAY_CS,
                 final_frame_delay_cs: int = FINAL_FRAME_DELAY_CS):
        self.transparent_index = transparent_index
        self.frame_delay_cs = frame_delay_cs
        self.final_frame_delay_cs = final_frame_delay_cs
        self._pending: Optional[Tuple[np.ndarray, np.ndarray]] = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def submit(self, indexed: np.ndarray) -> Optional[FlushedFrame]:
        """Buffers indexed and returns the frame it displaced, if any."""
        indexed = np.array(indexed, dtype=np.uint8).reshape(-1)
        if self._pending is None:
            unchanged = np.zeros(indexed.shape, dtype=bool)
        else:
            previous = self._pending[0]
            if previous.shape != indexed.shape:
                raise EncodingError(f"Frame has {indexed.size} pixels, previous frame had {previous.size}")
            unchanged = indexed == previous

        displaced, self._pending = self._pending, (indexed, unchanged)
        if displaced is None:
            return None
        return self._flush(displaced, self.frame_delay_cs)

    def finish(self) -> Optional[FlushedFrame]:
        """Flushes the held frame with the final duration; None when nothing is held."""
        if self._pending is None:
            return None
        held, self._pending = self._pending, None
        return self._flush(held, self.final_frame_delay_cs)

    def _flush(self, held: Tuple[np.ndarray, np.ndarray], duration_cs: int) -> FlushedFrame:
        pixels, unchanged = held
        return FlushedFrame(
            pixels=np.where(unchanged, np.uint8(self.transparent_index), pixels).astype(np.uint8),
            transparent_index=self.transparent_index,
            duration_cs=duration_cs,
        )
