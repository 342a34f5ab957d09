"""Render chess games to animated GIFs and positions to PNG diagrams."""
from .chess_utils import square_to_pixels, flip_offset
from .errors import ChessReelError, NotationError, AssetError, EncodingError
from .fen_renderer import blank_board, render_board, render_position
from .frame_delta import FlushedFrame, FrameDeltaCompressor
from .game_renderer import GameRenderer, render_game
from .gif_writer import AnimatedGifWriter
from .palette import Palette
from .sprites import draw_piece_sprites, load_piece_sprites

__version__ = "0.1.0"

__all__ = [
    "square_to_pixels", "flip_offset",
    "ChessReelError", "NotationError", "AssetError", "EncodingError",
    "blank_board", "render_board", "render_position",
    "FlushedFrame", "FrameDeltaCompressor",
    "GameRenderer", "render_game",
    "AnimatedGifWriter", "Palette",
    "draw_piece_sprites", "load_piece_sprites",
]
