import io
import os
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

import chess
import chess.pgn
import numpy as np
from PIL import Image

from .chess_utils import BoardLike
from .config import (
    STREAM_MODE, BATCH_MODE, MODES, DEFAULT_MODE,
    FRAME_DELAY_CS, FINAL_FRAME_DELAY_CS, MAX_DELAY_CS,
)
from .errors import ConfigError, NotationError
from .fen_renderer import render_board
from .frame_delta import FlushedFrame, FrameDeltaCompressor
from .gif_writer import AnimatedGifWriter, log_nothing
from .palette import Palette
from .sprites import default_sprites


class GameRenderer:
    """
    Turns a sequence of positions into animated GIF frames.

    In stream mode the writer is opened immediately with the fixed palette and each
    frame is encoded as soon as its successor is rendered. In batch mode every raster
    is kept until render_final_frame, which derives a palette from the frames' own
    colors before opening the writer. Both modes share the same delta pass and timing.

    open_writer is called once with the palette and must return an object with
    write_frame(FlushedFrame) and close().
    """

    def __init__(self,
                 open_writer: Callable[[Palette], Any],
                 sprites: Optional[Dict[str, Image.Image]] = None,
                 flip: bool = False,
                 mode: str = STREAM_MODE,
                 frame_delay_cs: int = FRAME_DELAY_CS,
                 final_frame_delay_cs: int = FINAL_FRAME_DELAY_CS,
                 logger: Callable[[str, str], None] = log_nothing):
        if mode not in MODES:
            raise ConfigError(f"Unknown encoding mode '{mode}', expected one of {', '.join(MODES)}")
        for name, delay in (("frame delay", frame_delay_cs), ("final frame delay", final_frame_delay_cs)):
            if not 0 <= delay <= MAX_DELAY_CS:
                raise ConfigError(f"{name} must be between 0 and {MAX_DELAY_CS} centiseconds, got {delay}")
        self.open_writer = open_writer
        self.sprites = sprites if sprites is not None else default_sprites()
        self.flip = flip
        self.mode = mode
        self.frame_delay_cs = frame_delay_cs
        self.final_frame_delay_cs = final_frame_delay_cs
        self.logger = logger

        self.frame_count: int = 0
        self.palette: Optional[Palette] = None
        self._writer = None
        self._compressor: Optional[FrameDeltaCompressor] = None
        self._images: List[Image.Image] = []

        if self.mode == STREAM_MODE:
            self.palette = Palette.fixed()
            self._writer = self.open_writer(self.palette)
            self._compressor = self._new_compressor()

    def _new_compressor(self) -> FrameDeltaCompressor:
        return FrameDeltaCompressor(self.palette.transparent_index,
                                    frame_delay_cs=self.frame_delay_cs,
                                    final_frame_delay_cs=self.final_frame_delay_cs)

    def _write(self, frame: Optional[FlushedFrame]) -> None:
        if frame is None:
            return
        self._writer.write_frame(frame)
        self.frame_count += 1

    def render_frame(self, board: BoardLike) -> None:
        img = render_board(board, self.sprites, self.flip)
        if self.mode == BATCH_MODE:
            self._images.append(img)
            return
        self._write(self._compressor.submit(self.palette.quantize(img)))

    def render_final_frame(self) -> None:
        """Flushes the last frame with the final duration and closes the output."""
        try:
            if self.mode == BATCH_MODE:
                self._encode_batch()
            else:
                self._write(self._compressor.finish())
        finally:
            self.close()
        self.logger(f"Animation finished: {self.frame_count} frames.", "debug")

    def _encode_batch(self) -> None:
        if not self._images:
            return
        self.palette = Palette.from_images(self._images)
        self.logger(f"Adaptive palette: {len(self.palette.colors)} colors from {len(self._images)} frames.", "debug")
        indexed_frames: List[np.ndarray] = [self.palette.quantize(img) for img in self._images]
        self._images = []

        self._writer = self.open_writer(self.palette)
        self._compressor = self._new_compressor()
        for indexed in indexed_frames:
            self._write(self._compressor.submit(indexed))
        self._write(self._compressor.finish())

    def render_moves(self, board: chess.Board, moves: Iterable[chess.Move]) -> int:
        """
        Renders board, then the position after each move, then the final frame.
        On any error the output is closed and the error re-raised.
        """
        try:
            self.render_frame(board)
            for move in moves:
                board.push(move)
                self.render_frame(board)
        except BaseException:
            self.close()
            raise
        self.render_final_frame()
        return self.frame_count

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()


_SAN_TOKEN = re.compile(r"san: '([^']*)'")


def _notation_error(error: Exception) -> NotationError:
    match = _SAN_TOKEN.search(str(error))
    return NotationError(str(error), token=match.group(1) if match else None)


def starting_board(game: chess.pgn.Game) -> chess.Board:
    """Initial position of game, honoring its FEN and Variant tags."""
    try:
        return game.board()
    except ValueError as e:
        raise NotationError(f"Invalid starting position: {e}",
                            token=game.headers.get("FEN") or game.headers.get("Variant")) from e


def _gif_opener(output, logger: Callable[[str, str], None]) -> Callable[[Palette], AnimatedGifWriter]:
    if hasattr(output, "write"):
        return lambda palette: AnimatedGifWriter(output, palette, logger=logger)
    return lambda palette: AnimatedGifWriter.open(os.fspath(output), palette, logger=logger)


def render_game(pgn: str, output, flip: bool = False, mode: str = DEFAULT_MODE,
                sprites: Optional[Dict[str, Image.Image]] = None,
                frame_delay_cs: int = FRAME_DELAY_CS,
                final_frame_delay_cs: int = FINAL_FRAME_DELAY_CS,
                logger: Callable[[str, str], None] = log_nothing) -> Optional[int]:
    """
    Renders the mainline of the first game in pgn as an animated GIF.
    Returns the number of frames written, or None when pgn holds no game
    (in that case output is not touched).
    """
    game = chess.pgn.read_game(io.StringIO(pgn))
    if game is None:
        logger("No game found in PGN input. Nothing written.", "user")
        return None
    if game.errors:
        raise _notation_error(game.errors[0])

    board = starting_board(game)
    moves = list(game.mainline_moves())
    logger(f"Rendering {game.headers.get('White', '?')} vs {game.headers.get('Black', '?')}: "
           f"{len(moves)} moves, {mode} mode.", "debug")

    renderer = GameRenderer(_gif_opener(output, logger), sprites=sprites, flip=flip, mode=mode,
                            frame_delay_cs=frame_delay_cs, final_frame_delay_cs=final_frame_delay_cs,
                            logger=logger)
    renderer.render_moves(board, moves)
    logger(f"Rendered game to {output} ({renderer.frame_count} frames)", "user")
    return renderer.frame_count
