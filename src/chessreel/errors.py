from typing import Optional


class ChessReelError(Exception):
    """Base class for every error raised by chessreel."""


class NotationError(ChessReelError):
    """Malformed PGN, FEN or move text."""

    def __init__(self, message: str, token: Optional[str] = None):
        super().__init__(message)
        self.token: Optional[str] = token


class AssetError(ChessReelError):
    """A piece sprite is missing or cannot be decoded."""


class EncodingError(ChessReelError):
    """Frame dimensions or palette do not fit the animated image container."""


class ConfigError(ChessReelError, ValueError):
    """A setting from the environment, .env or the command line is out of range."""
