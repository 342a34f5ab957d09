"""Palettes and truecolor-to-index quantization.

A palette holds the real colors followed by one reserved slot, the transparent
sentinel. Quantization never selects the sentinel, so it only appears in frames
where the delta pass puts it.
"""
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from PIL import Image

from .config import PALETTE_BUCKET_SHIFT
from .errors import EncodingError

RGB = Tuple[int, int, int]

MAX_PALETTE_SIZE = 256

# Colors of the board and the piece sprites, known before any frame exists.
FIXED_COLORS: Tuple[RGB, ...] = (
    (255, 206, 158),
    (209, 139, 71),
    (159, 129, 99),
    (111, 90, 69),
    (131, 87, 44),
    (91, 61, 31),
    (47, 38, 29),
    (0, 0, 0),
    (79, 64, 49),
    (207, 167, 128),
    (63, 51, 39),
    (39, 26, 13),
    (175, 141, 108),
    (169, 112, 57),
    (143, 116, 89),
    (127, 102, 78),
    (156, 104, 53),
    (118, 78, 40),
    (192, 155, 118),
    (79, 63, 48),
    (255, 255, 255),
)

# Value stored in the sentinel slot; decoders never display it.
TRANSPARENT_SLOT_COLOR: RGB = (255, 0, 255)


def _rgb_pixels(image: Image.Image) -> np.ndarray:
    """(N, 3) uint8 array of the image's pixels, row-major, alpha dropped."""
    if image.mode not in ('RGB', 'RGBA'):
        image = image.convert('RGBA')
    return np.asarray(image, dtype=np.uint8)[..., :3].reshape(-1, 3)


def _pack(rgb: np.ndarray, bits: int = 8) -> np.ndarray:
    channels = rgb.astype(np.uint32)
    return (channels[:, 0] << (2 * bits)) | (channels[:, 1] << bits) | channels[:, 2]


class Palette:
    def __init__(self, colors: Sequence[RGB]):
        if not colors:
            raise EncodingError("Palette needs at least one color")
        if len(colors) + 1 > MAX_PALETTE_SIZE:
            raise EncodingError(
                f"{len(colors)} colors plus the transparent slot exceed {MAX_PALETTE_SIZE} palette entries")
        self.colors: Tuple[RGB, ...] = tuple(tuple(int(c) for c in color) for color in colors)
        self.transparent_index: int = len(self.colors)
        self._table = np.array(self.colors, dtype=np.int16)

    @classmethod
    def fixed(cls) -> "Palette":
        """The streaming palette: usable before any frame has been rendered."""
        return cls(FIXED_COLORS)

    @classmethod
    def from_images(cls, images: Iterable[Image.Image], bucket_shift: int = PALETTE_BUCKET_SHIFT) -> "Palette":
        """
        Collects the colors actually used by images. Colors falling in the same
        coarse bucket (channel >> bucket_shift) collapse onto the first one seen,
        in frame order and then row-major order.
        """
        bits = 8 - bucket_shift
        seen = {}
        for image in images:
            rgb = _rgb_pixels(image)
            keys = _pack(rgb >> bucket_shift, bits)
            _, first = np.unique(keys, return_index=True)
            for pos in np.sort(first):
                key = int(keys[pos])
                if key not in seen:
                    seen[key] = tuple(int(c) for c in rgb[pos])
        return cls(list(seen.values()))

    def __len__(self) -> int:
        return len(self.colors) + 1

    def rgb_values(self) -> List[int]:
        """Flat [r, g, b, r, g, b, ...] including the sentinel slot."""
        flat: List[int] = []
        for color in self.colors + (TRANSPARENT_SLOT_COLOR,):
            flat.extend(color)
        return flat

    def quantize(self, image: Image.Image) -> np.ndarray:
        """
        Maps every pixel to the nearest real color by Manhattan distance over R, G, B.
        Ties go to the lowest index. Returns a flat uint8 array, row-major.
        """
        rgb = _rgb_pixels(image)
        keys = _pack(rgb)
        unique_keys, inverse = np.unique(keys, return_inverse=True)
        unique_rgb = np.stack(
            [(unique_keys >> 16) & 0xFF, (unique_keys >> 8) & 0xFF, unique_keys & 0xFF], axis=1
        ).astype(np.int16)
        distances = np.abs(unique_rgb[:, None, :] - self._table[None, :, :]).sum(axis=2)
        # argmin returns the first minimum, i.e. the lowest index on ties
        nearest = distances.argmin(axis=1).astype(np.uint8)
        return nearest[inverse.reshape(-1)]
