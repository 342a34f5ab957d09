import chess
from typing import Iterator, Optional, Protocol, Tuple

from .config import SQUARE_PIXEL_SIZE, FLIP_ORIGIN


class PieceLike(Protocol):
    def symbol(self) -> str: ...


class BoardLike(Protocol):
    """Read-only square lookup; python-chess boards satisfy it."""

    def piece_at(self, square: int) -> Optional[PieceLike]: ...


def flip_offset(offset: Tuple[int, int]) -> Tuple[int, int]:
    """Rotates a cell offset 180 degrees about the board center."""
    x, y = offset
    return FLIP_ORIGIN - x, FLIP_ORIGIN - y


def square_to_pixels(square: int, flip: bool = False) -> Tuple[int, int]:
    """
    Converts a square index to the pixel offset of the top-left corner of its cell.
    Rank 8 is drawn at the top unless the board is flipped.
    """
    file_index = chess.square_file(square)
    rank_index = chess.square_rank(square)
    offset = (file_index * SQUARE_PIXEL_SIZE, (7 - rank_index) * SQUARE_PIXEL_SIZE)
    if flip:
        return flip_offset(offset)
    return offset


def iter_pieces(board: BoardLike) -> Iterator[Tuple[int, str]]:
    """Yields (square, piece symbol) for every occupied square, a1 first."""
    for square in chess.SQUARES:
        piece = board.piece_at(square)
        if piece is not None:
            yield square, piece.symbol()
