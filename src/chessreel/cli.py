from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional

from .config import (
    DEFAULT_GAME_OUTPUT, DEFAULT_POSITION_OUTPUT, DEFAULT_MODE, MODES,
    FRAME_DELAY_CS, FINAL_FRAME_DELAY_CS, MAX_DELAY_CS, check_config,
)
from .errors import ChessReelError
from .fen_renderer import render_position
from .game_renderer import render_game
from .sprites import default_sprites, draw_piece_sprites, save_piece_sprites


def console_logger(verbose: bool = False) -> Callable[[str, str], None]:
    """Prints "user" messages to stderr; "debug" ones only when verbose."""
    def add_to_output(message: str, log_type: str = "user") -> None:
        if log_type == "user" or verbose:
            print(message, file=sys.stderr)
    return add_to_output


def delay_cs(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid delay: {text!r}") from None
    if not 0 <= value <= MAX_DELAY_CS:
        raise argparse.ArgumentTypeError(f"delay must be between 0 and {MAX_DELAY_CS} centiseconds, got {value}")
    return value


def cmd_game(args: argparse.Namespace) -> int:
    logger = console_logger(args.verbose)
    pgn = args.pgn if args.pgn is not None else sys.stdin.read()
    frames = render_game(
        pgn, args.output, flip=args.flip, mode=args.mode,
        sprites=default_sprites(args.pieces),
        frame_delay_cs=args.frame_delay, final_frame_delay_cs=args.final_delay,
        logger=logger,
    )
    return 0 if frames is not None else 1


def cmd_position(args: argparse.Namespace) -> int:
    logger = console_logger(args.verbose)
    render_position(args.fen, args.output, flip=args.flip,
                    sprites=default_sprites(args.pieces), logger=logger)
    return 0


def cmd_sprites(args: argparse.Namespace) -> int:
    logger = console_logger(args.verbose)
    save_piece_sprites(draw_piece_sprites(), args.directory, logger)
    logger(f"Built-in piece sprites written to {args.directory}", "user")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="chessreel", description="Render chess games to GIF and positions to PNG")
    ap.add_argument("-v", "--verbose", action="store_true", help="show debug output")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sg = sub.add_parser("game", help="create a gif from a pgn string")
    sg.add_argument("pgn", nargs="?", default=None, help="the game pgn (reads from stdin if not provided)")
    sg.add_argument("--flip", action="store_true", help="display the board from black's perspective")
    sg.add_argument("-o", "--output", default=DEFAULT_GAME_OUTPUT, help="output filename")
    sg.add_argument("--mode", choices=MODES, default=DEFAULT_MODE,
                    help="stream: fixed palette, one pending frame; batch: palette from the frames")
    sg.add_argument("--pieces", default=None, help="directory with wk.png ... bp.png")
    sg.add_argument("--frame-delay", type=delay_cs, default=FRAME_DELAY_CS, help="centiseconds per move")
    sg.add_argument("--final-delay", type=delay_cs, default=FINAL_FRAME_DELAY_CS, help="centiseconds on the last position")
    sg.set_defaults(fn=cmd_game)

    sp = sub.add_parser("position", help="render a given position to png")
    sp.add_argument("fen", help="the position as a FEN string")
    sp.add_argument("--flip", action="store_true", help="display the board from black's perspective")
    sp.add_argument("-o", "--output", default=DEFAULT_POSITION_OUTPUT, help="output filename")
    sp.add_argument("--pieces", default=None, help="directory with wk.png ... bp.png")
    sp.set_defaults(fn=cmd_position)

    ss = sub.add_parser("sprites", help="export the built-in piece sprites")
    ss.add_argument("directory")
    ss.set_defaults(fn=cmd_sprites)

    args = ap.parse_args(argv)
    try:
        check_config()
        return int(args.fn(args))
    except (ChessReelError, OSError) as e:
        print(f"chessreel: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
