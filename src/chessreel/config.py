import os
from dotenv import dotenv_values
import sys

from .errors import ConfigError

# Determine base directory
if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
    BASE_DIR = sys._MEIPASS
else:
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# .env is looked up in the working directory first, then beside the package
dotenv_path = os.path.join(os.getcwd(), ".env")
if not os.path.exists(dotenv_path):
    dotenv_path = os.path.join(BASE_DIR, ".env")

config_env = {}
if os.path.exists(dotenv_path):
    config_env = dotenv_values(dotenv_path)

# Problems found while reading settings; reported by check_config()
CONFIG_ERRORS: list = []


def _env(name: str) -> str | None:
    # the process environment overrides .env
    return os.environ.get(name) or config_env.get(name)


def _env_int(name: str, default: int, low: int = 0, high: int | None = None) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        CONFIG_ERRORS.append(f"{name} must be an integer, got {raw!r}")
        return default
    if value < low or (high is not None and value > high):
        CONFIG_ERRORS.append(f"{name} must be between {low} and {high}, got {value}")
        return default
    return value


def check_config() -> None:
    """Raises ConfigError describing every invalid setting."""
    if CONFIG_ERRORS:
        raise ConfigError("; ".join(CONFIG_ERRORS))


# --- Board geometry ---
SQUARE_PIXEL_SIZE: int = 50
BOARD_PIXEL_SIZE: int = SQUARE_PIXEL_SIZE * 8
FLIP_ORIGIN: int = BOARD_PIXEL_SIZE - SQUARE_PIXEL_SIZE  # 350

LIGHT_SQUARE_COLOR: tuple = (0xFF, 0xCE, 0x9E)
DARK_SQUARE_COLOR: tuple = (0xD1, 0x8B, 0x47)

# --- Piece sprites ---
# Directory holding wk.png ... bp.png. Empty means the built-in drawn set.
PIECES_DIR: str | None = _env("CHESSREEL_PIECES_DIR")

# --- Animation timing (GIF centiseconds) ---
MAX_DELAY_CS: int = 0xFFFF  # 16-bit delay field
FRAME_DELAY_CS: int = _env_int("CHESSREEL_FRAME_DELAY_CS", 62, high=MAX_DELAY_CS)
FINAL_FRAME_DELAY_CS: int = _env_int("CHESSREEL_FINAL_FRAME_DELAY_CS", 500, high=MAX_DELAY_CS)
LOOP_FOREVER: int = 0

# --- Encoding ---
STREAM_MODE: str = "stream"
BATCH_MODE: str = "batch"
MODES: tuple = (STREAM_MODE, BATCH_MODE)
DEFAULT_MODE: str = (_env("CHESSREEL_MODE") or STREAM_MODE).lower()
if DEFAULT_MODE not in MODES:
    CONFIG_ERRORS.append(f"CHESSREEL_MODE must be one of {', '.join(MODES)}, got {DEFAULT_MODE!r}")
    DEFAULT_MODE = STREAM_MODE
PALETTE_BUCKET_SHIFT: int = 5  # adaptive palette groups colors by channel // 32

# --- Outputs ---
DEFAULT_GAME_OUTPUT: str = "game.gif"
DEFAULT_POSITION_OUTPUT: str = "position.png"


if __name__ == "__main__":
    print(f"Runtime BASE_DIR: {BASE_DIR}")
    print(f"Dotenv Path: {dotenv_path} (exists: {os.path.exists(dotenv_path)})")
    print(f"BOARD_PIXEL_SIZE: {BOARD_PIXEL_SIZE}, SQUARE_PIXEL_SIZE: {SQUARE_PIXEL_SIZE}")
    print(f"PIECES_DIR: {PIECES_DIR or '<built-in>'}")
    print(f"FRAME_DELAY_CS: {FRAME_DELAY_CS}, FINAL_FRAME_DELAY_CS: {FINAL_FRAME_DELAY_CS}")
    print(f"DEFAULT_MODE: {DEFAULT_MODE}")
    for problem in CONFIG_ERRORS:
        print(f"INVALID: {problem}")
