"""Piece sprites: loading from disk and the built-in drawn set.

Sprites are keyed by python-chess piece symbols ('K' white king, 'p' black pawn, ...)
and are always SQUARE_PIXEL_SIZE x SQUARE_PIXEL_SIZE RGBA images.
"""
import os
from typing import Callable, Dict, Optional

from PIL import Image, ImageDraw, UnidentifiedImageError

from .config import SQUARE_PIXEL_SIZE, PIECES_DIR
from .errors import AssetError

# Map FEN characters to filenames
PIECE_FILES: Dict[str, str] = {
    'K': 'wk.png', 'Q': 'wq.png', 'R': 'wr.png',
    'B': 'wb.png', 'N': 'wn.png', 'P': 'wp.png',
    'k': 'bk.png', 'q': 'bq.png', 'r': 'br.png',
    'b': 'bb.png', 'n': 'bn.png', 'p': 'bp.png',
}

_SUPERSAMPLE = 4
_CANVAS = SQUARE_PIXEL_SIZE * _SUPERSAMPLE
_STROKE = 6

_WHITE_FILL = (255, 255, 255, 255)
_WHITE_OUTLINE = (0, 0, 0, 255)
_BLACK_FILL = (0, 0, 0, 255)
_BLACK_OUTLINE = (111, 90, 69, 255)

# Shapes are drawn on a 200x200 canvas, back to front.
_BASE = ("rectangle", (40, 158, 160, 180))
_SHAPES = {
    'p': [
        ("polygon", [(70, 160), (84, 100), (116, 100), (130, 160)]),
        ("ellipse", (70, 90, 130, 108)),
        ("ellipse", (76, 42, 124, 92)),
        _BASE,
    ],
    'r': [
        ("rectangle", (54, 28, 78, 56)),
        ("rectangle", (88, 28, 112, 56)),
        ("rectangle", (122, 28, 146, 56)),
        ("rectangle", (54, 52, 146, 80)),
        ("rectangle", (66, 80, 134, 160)),
        _BASE,
    ],
    'n': [
        ("polygon", [(60, 160), (70, 120), (96, 94), (60, 100), (46, 82), (84, 42),
                     (100, 26), (110, 44), (134, 60), (150, 104), (144, 160)]),
        ("eye", (104, 56, 114, 66)),
        _BASE,
    ],
    'b': [
        ("ellipse", (88, 22, 112, 46)),
        ("ellipse", (66, 42, 134, 150)),
        ("slit", [(104, 74), (120, 100)]),
        ("rectangle", (62, 142, 138, 160)),
        _BASE,
    ],
    'q': [
        ("polygon", [(56, 160), (42, 64), (78, 112), (100, 46), (122, 112), (158, 64), (144, 160)]),
        ("ellipse", (32, 44, 52, 64)),
        ("ellipse", (90, 26, 110, 46)),
        ("ellipse", (148, 44, 168, 64)),
        _BASE,
    ],
    'k': [
        ("rectangle", (92, 12, 108, 66)),
        ("rectangle", (76, 26, 124, 42)),
        ("ellipse", (62, 60, 138, 112)),
        ("polygon", [(56, 160), (50, 92), (150, 92), (144, 160)]),
        _BASE,
    ],
}


def _draw_piece(symbol: str) -> Image.Image:
    white = symbol.isupper()
    fill = _WHITE_FILL if white else _BLACK_FILL
    outline = _WHITE_OUTLINE if white else _BLACK_OUTLINE

    canvas = Image.new('RGBA', (_CANVAS, _CANVAS), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    for kind, geometry in _SHAPES[symbol.lower()]:
        if kind == "polygon":
            draw.polygon(geometry, fill=fill, outline=outline, width=_STROKE)
        elif kind == "ellipse":
            draw.ellipse(geometry, fill=fill, outline=outline, width=_STROKE)
        elif kind == "rectangle":
            draw.rectangle(geometry, fill=fill, outline=outline, width=_STROKE)
        elif kind == "eye":
            draw.ellipse(geometry, fill=outline)
        elif kind == "slit":
            draw.line(geometry, fill=outline, width=_STROKE)
    return canvas.resize((SQUARE_PIXEL_SIZE, SQUARE_PIXEL_SIZE), Image.LANCZOS)


def draw_piece_sprites() -> Dict[str, Image.Image]:
    """Draws the built-in sprite set, so no image files are needed."""
    return {symbol: _draw_piece(symbol) for symbol in PIECE_FILES}


def load_piece_sprites(assets_dir: str) -> Dict[str, Image.Image]:
    """
    Loads wk.png ... bp.png from assets_dir, converted to RGBA and scaled to one square.
    Any missing or undecodable file is an AssetError.
    """
    sprites: Dict[str, Image.Image] = {}
    for symbol, fn in PIECE_FILES.items():
        path = os.path.join(assets_dir, fn)
        try:
            with Image.open(path) as raw:
                piece = raw.convert('RGBA')
        except FileNotFoundError:
            raise AssetError(f"Missing piece sprite: {path}") from None
        except (UnidentifiedImageError, OSError) as e:
            raise AssetError(f"Cannot decode piece sprite {path}: {e}") from e
        if piece.size != (SQUARE_PIXEL_SIZE, SQUARE_PIXEL_SIZE):
            piece = piece.resize((SQUARE_PIXEL_SIZE, SQUARE_PIXEL_SIZE), Image.LANCZOS)
        sprites[symbol] = piece
    return sprites


def save_piece_sprites(sprites: Dict[str, Image.Image], output_dir: str,
                       logger: Optional[Callable[[str, str], None]] = None) -> None:
    os.makedirs(output_dir, exist_ok=True)
    for symbol, fn in PIECE_FILES.items():
        out_path = os.path.join(output_dir, fn)
        sprites[symbol].save(out_path)
        if logger:
            logger(f"Wrote {out_path}", "debug")


def default_sprites(assets_dir: Optional[str] = None) -> Dict[str, Image.Image]:
    """Sprites from assets_dir (or the configured PIECES_DIR), else the built-in set."""
    assets_dir = assets_dir or PIECES_DIR
    if assets_dir:
        return load_piece_sprites(assets_dir)
    return draw_piece_sprites()
