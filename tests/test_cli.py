import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from PIL import Image

from chessreel import config
from chessreel.cli import console_logger, main
from chessreel.sprites import PIECE_FILES


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.stderr = io.StringIO()

    def tearDown(self):
        self._tmp.cleanup()

    def _main(self, *argv):
        with contextlib.redirect_stderr(self.stderr):
            return main(list(argv))

    def test_position(self):
        out = os.path.join(self.tmp, "pos.png")
        self.assertEqual(self._main("position", "4k3/8/8/8/8/8/8/4K3 w - - 0 1", "--flip", "-o", out), 0)
        with Image.open(out) as im:
            self.assertEqual(im.size, (400, 400))

    def test_game(self):
        out = os.path.join(self.tmp, "game.gif")
        self.assertEqual(self._main("game", "1. e4 e5 2. Nf3 Nc6 *", "-o", out, "--mode", "batch"), 0)
        with Image.open(out) as im:
            self.assertEqual(im.n_frames, 5)
        self.assertIn("5 frames", self.stderr.getvalue())

    def test_game_with_custom_sprites(self):
        pieces = os.path.join(self.tmp, "pieces")
        self.assertEqual(self._main("sprites", pieces), 0)
        self.assertEqual(sorted(os.listdir(pieces)), sorted(PIECE_FILES.values()))
        out = os.path.join(self.tmp, "game.gif")
        self.assertEqual(self._main("game", "1. e4 *", "-o", out, "--pieces", pieces, "--final-delay", "300"), 0)
        with Image.open(out) as im:
            im.seek(1)
            self.assertEqual(im.info["duration"], 3000)

    def test_bad_input_reports_error(self):
        out = os.path.join(self.tmp, "pos.png")
        self.assertEqual(self._main("position", "garbage", "-o", out), 1)
        self.assertIn("chessreel:", self.stderr.getvalue())
        self.assertEqual(self._main("game", "1. e4 e4 *", "-o", os.path.join(self.tmp, "g.gif")), 1)

    def test_delay_out_of_range_is_a_usage_error(self):
        out = os.path.join(self.tmp, "game.gif")
        for flag, value in (("--frame-delay", "-5"), ("--frame-delay", "70000"), ("--final-delay", "-1")):
            with self.assertRaises(SystemExit) as ctx:
                self._main("game", "1. e4 *", "-o", out, flag, value)
            self.assertEqual(ctx.exception.code, 2)
        self.assertIn("delay must be between 0 and 65535", self.stderr.getvalue())
        self.assertFalse(os.path.exists(out))

    def test_invalid_settings_reported(self):
        out = os.path.join(self.tmp, "game.gif")
        problems = ["CHESSREEL_MODE must be one of stream, batch, got 'turbo'"]
        with mock.patch.object(config, "CONFIG_ERRORS", problems):
            self.assertEqual(self._main("game", "1. e4 *", "-o", out), 1)
        self.assertIn("chessreel: CHESSREEL_MODE must be one of", self.stderr.getvalue())
        self.assertFalse(os.path.exists(out))

    def test_missing_sprite_dir(self):
        out = os.path.join(self.tmp, "pos.png")
        self.assertEqual(self._main("position", "8/8/8/8/8/8/8/8", "--pieces", os.path.join(self.tmp, "nope"), "-o", out), 1)

    def test_console_logger_levels(self):
        with contextlib.redirect_stderr(self.stderr):
            quiet = console_logger(False)
            quiet("shown", "user")
            quiet("hidden", "debug")
            console_logger(True)("verbose", "debug")
        text = self.stderr.getvalue()
        self.assertIn("shown", text)
        self.assertNotIn("hidden", text)
        self.assertIn("verbose", text)


if __name__ == "__main__":
    unittest.main()
