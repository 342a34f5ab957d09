"""Streaming animated GIF output.

The header, global palette and loop block are written as soon as the writer is
created; each frame is appended when it is handed over, so at most one frame
is ever held in memory by the pipeline. Block layout and LZW coding come from
Pillow's GIF plugin.
"""
from typing import BinaryIO, Callable, Optional, Tuple

import numpy as np
from PIL import Image, GifImagePlugin

from .config import BOARD_PIXEL_SIZE, LOOP_FOREVER, MAX_DELAY_CS
from .errors import EncodingError
from .frame_delta import FlushedFrame
from .palette import Palette

GIF_TRAILER = b";"
DISPOSE_KEEP = 1


def log_nothing(message: str, log_type: str = "debug") -> None:
    """Default logger: discards every message."""


class AnimatedGifWriter:
    def __init__(self, fp: BinaryIO, palette: Palette,
                 size: Tuple[int, int] = (BOARD_PIXEL_SIZE, BOARD_PIXEL_SIZE),
                 loop: int = LOOP_FOREVER,
                 logger: Callable[[str, str], None] = log_nothing,
                 close_fp: bool = False):
        self.fp = fp
        self.palette = palette
        self.size = size
        self.logger = logger
        self.frames_written: int = 0
        self._close_fp = close_fp
        self._closed = False

        template = Image.new('P', size, 0)
        template.putpalette(palette.rgb_values())
        header, _ = GifImagePlugin.getheader(template, None, {"loop": loop, "optimize": False})
        for chunk in header:
            self.fp.write(chunk)
        self.logger(f"GIF header written: {size[0]}x{size[1]}, {len(palette)} palette entries, "
                    f"transparent index {palette.transparent_index}", "debug")

    @classmethod
    def open(cls, path: str, palette: Palette, **kwargs) -> "AnimatedGifWriter":
        """Creates path and returns a writer that closes it when done."""
        fp = open(path, "wb")
        try:
            return cls(fp, palette, close_fp=True, **kwargs)
        except BaseException:
            fp.close()
            raise

    def write_frame(self, frame: FlushedFrame) -> None:
        if self._closed:
            raise EncodingError("Cannot write a frame after the GIF was closed")
        width, height = self.size
        pixels = np.asarray(frame.pixels, dtype=np.uint8).reshape(-1)
        if pixels.size != width * height:
            raise EncodingError(f"Frame has {pixels.size} pixels, canvas is {width}x{height}")
        if pixels.size and int(pixels.max()) >= len(self.palette):
            raise EncodingError(f"Palette index {int(pixels.max())} out of range for {len(self.palette)} entries")
        if frame.transparent_index != self.palette.transparent_index:
            raise EncodingError(f"Frame transparency index {frame.transparent_index} does not match "
                                f"palette sentinel {self.palette.transparent_index}")
        if not 0 <= frame.duration_cs <= MAX_DELAY_CS:
            raise EncodingError(f"Frame delay {frame.duration_cs}cs outside 0..{MAX_DELAY_CS}")

        im = Image.frombytes('P', self.size, pixels.tobytes())
        for chunk in GifImagePlugin.getdata(im, duration=frame.duration_cs * 10,
                                            transparency=frame.transparent_index,
                                            disposal=DISPOSE_KEEP):
            self.fp.write(chunk)
        self.frames_written += 1
        self.logger(f"Frame {self.frames_written}: {frame.duration_cs}cs, "
                    f"{frame.transparent_count} transparent pixels", "debug")

    def close(self) -> None:
        """Writes the trailer and releases the destination. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            self.fp.write(GIF_TRAILER)
            self.fp.flush()
        finally:
            if self._close_fp:
                self.fp.close()

    def __enter__(self) -> "AnimatedGifWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
