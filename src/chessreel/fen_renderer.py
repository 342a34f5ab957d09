from PIL import Image, ImageDraw

import chess
from typing import Callable, Dict, Optional

from .chess_utils import BoardLike, iter_pieces, square_to_pixels
from .config import BOARD_PIXEL_SIZE, SQUARE_PIXEL_SIZE, LIGHT_SQUARE_COLOR, DARK_SQUARE_COLOR
from .errors import AssetError, NotationError
from .sprites import default_sprites


def blank_board() -> Image.Image:
    """
    Draws the empty checkerboard: a cell is light when (x // 50) ^ (y // 50) is even.
    """
    board = Image.new('RGBA', (BOARD_PIXEL_SIZE, BOARD_PIXEL_SIZE), LIGHT_SQUARE_COLOR + (255,))
    draw = ImageDraw.Draw(board)
    for row in range(8):
        for col in range(8):
            if (row ^ col) % 2 == 0:
                continue
            x0, y0 = col * SQUARE_PIXEL_SIZE, row * SQUARE_PIXEL_SIZE
            draw.rectangle([x0, y0, x0 + SQUARE_PIXEL_SIZE - 1, y0 + SQUARE_PIXEL_SIZE - 1],
                           fill=DARK_SQUARE_COLOR + (255,))
    return board


def render_board(board: BoardLike, sprites: Dict[str, Image.Image], flip: bool = False) -> Image.Image:
    """Composites every piece of board onto a fresh checkerboard."""
    img = blank_board()
    for square, symbol in iter_pieces(board):
        piece = sprites.get(symbol)
        if piece is None:
            raise AssetError(f"No sprite for piece '{symbol}'")
        img.alpha_composite(piece, dest=square_to_pixels(square, flip))
    return img


def parse_board_fen(fen: str) -> chess.BaseBoard:
    """Reads the piece placement of a FEN; the remaining fields are optional."""
    fields = fen.split()
    if not fields:
        raise NotationError("Empty FEN", token=fen)
    try:
        return chess.BaseBoard(fields[0])
    except ValueError as e:
        raise NotationError(f"Invalid FEN '{fen}': {e}", token=fields[0]) from e


def render_position(fen: str, output, flip: bool = False,
                    sprites: Optional[Dict[str, Image.Image]] = None,
                    logger: Optional[Callable[[str, str], None]] = None) -> Image.Image:
    """
    Renders a single position to a true-color PNG (no palette reduction).
    output may be a path or a binary file object.
    """
    board = parse_board_fen(fen)
    result = render_board(board, sprites if sprites is not None else default_sprites(), flip)
    result.save(output, format='PNG')
    if logger:
        logger(f"Rendered position → {output}", "user")
    return result
