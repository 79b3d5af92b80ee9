"""
Holomorph — CLI Tests
Argument parsing, dimension handling, and each subcommand's dispatch.

Run with: pytest tests/test_cli.py -v
"""

import argparse
import os
import sys
from unittest.mock import patch

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import holomorph
from holomorph import main, parse_dimensions, resolve_dimensions, RESOLUTIONS, DEFAULT_DIMENSIONS
from core.video_io import save_frame, load_frame


@pytest.fixture
def image_file(tmp_path, random_frame):
    path = tmp_path / "photo.png"
    save_frame(random_frame, str(path))
    return path


# ---------------------------------------------------------------------------
# DIMENSIONS
# ---------------------------------------------------------------------------

class TestDimensions:

    def test_parse(self):
        assert parse_dimensions("800,600") == (800, 600)

    @pytest.mark.parametrize("value", ["800x600", "800", "a,b", "0,600", "1,2,3"])
    def test_parse_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_dimensions(value)

    def test_default(self):
        args = argparse.Namespace(resolution=None, dimensions=None)
        assert resolve_dimensions(args) == DEFAULT_DIMENSIONS == (640, 480)

    def test_preset_overrides_dimensions(self):
        args = argparse.Namespace(resolution="hd", dimensions=(10, 10))
        assert resolve_dimensions(args) == (1280, 720)

    def test_custom(self):
        args = argparse.Namespace(resolution=None, dimensions=(320, 200))
        assert resolve_dimensions(args) == (320, 200)

    def test_presets_include_common_sizes(self):
        assert RESOLUTIONS["full-hd"] == (1920, 1080)
        assert RESOLUTIONS["four-k"] == (3840, 2160)
        assert len(RESOLUTIONS) == 16


# ---------------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------------

class TestParseCommand:

    def test_prints_tree(self, capsys):
        main(["parse", "z^2 + 1"])
        assert capsys.readouterr().out.strip() == "((z ^ 2) + 1)"

    def test_error_exits_with_caret(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["parse", "z + $"])
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert "      ^" in err
        assert "Error:" in err


class TestApplyCommand:

    def test_writes_output(self, tmp_path, image_file, random_frame, capsys):
        out = tmp_path / "out.png"
        main(["apply", "z", "--image", str(image_file), "-o", str(out)])
        assert "Image saved as" in capsys.readouterr().out
        np.testing.assert_array_equal(load_frame(out), random_frame)

    def test_missing_image_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["apply", "z", "--image", str(tmp_path / "missing.png")])
        assert exc.value.code == 1

    def test_image_required(self):
        with pytest.raises(SystemExit) as exc:
            main(["apply", "z"])
        assert exc.value.code == 2


class TestPolyCommand:

    def test_identity_polynomial(self, tmp_path, image_file, random_frame, capsys):
        out = tmp_path / "poly.png"
        main(["poly", "--image", str(image_file), "--coefficients", "0, 1", "-o", str(out)])
        assert "Function: z" in capsys.readouterr().out
        np.testing.assert_array_equal(load_frame(out), random_frame)

    def test_rational(self, tmp_path, image_file, capsys):
        out = tmp_path / "rat.png"
        main(["poly", "-i", str(image_file), "-c", "1", "-d", "0,1", "-o", str(out)])
        assert "Function: (1 / z)" in capsys.readouterr().out
        assert tuple(load_frame(out)[32, 32]) == (0, 0, 0)

    def test_oversized_image_rejected(self, tmp_path, image_file):
        out = tmp_path / "big.png"
        with patch("core.safety.MAX_PIXELS", 100):
            with pytest.raises(SystemExit) as exc:
                main(["poly", "-i", str(image_file), "-c", "0, 1", "-o", str(out)])
        assert exc.value.code == 1
        assert not out.exists()

    def test_bad_coefficients(self, image_file):
        with pytest.raises(SystemExit) as exc:
            main(["poly", "-i", str(image_file), "-c", "1, nan"])
        assert exc.value.code == 1


class TestOtherCommands:

    def test_video_dispatch(self, capsys):
        with patch("holomorph.render_video", return_value="out.mp4") as render:
            main(["video", "1/z", "--input", "clip.mp4", "--quality", "lo"])
        render.assert_called_once_with("clip.mp4", "1/z", None, quality="lo")
        assert "Video saved as: out.mp4" in capsys.readouterr().out

    def test_webcam_dispatch(self):
        with patch("core.webcam.run_webcam", return_value=0) as run:
            main(["webcam", "z^3", "--resolution", "hd", "--camera", "1"])
        run.assert_called_once_with("z^3", 1280, 720, camera=1)

    def test_webcam_custom_dimensions(self):
        with patch("core.webcam.run_webcam", return_value=0) as run:
            main(["webcam", "z", "--dimensions", "320,240"])
        run.assert_called_once_with("z", 320, 240, camera=0)

    def test_webcam_bad_expression(self):
        with patch("core.webcam.run_webcam") as run:
            with pytest.raises(SystemExit):
                main(["webcam", "z +"])
        run.assert_not_called()

    def test_list_functions_compact(self, capsys):
        main(["list-functions", "--compact"])
        out = capsys.readouterr().out
        assert "hyperbolic: sinh, cosh, tanh, asinh, acosh, atanh" in out

    def test_list_functions_category(self, capsys):
        main(["list-functions", "--category", "trig"])
        out = capsys.readouterr().out
        assert "cot" in out
        assert "sinh" not in out

    def test_serve_dispatch(self):
        with patch("server.start") as start:
            main(["serve", "--port", "9000"])
        start.assert_called_once_with(port=9000)

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert holomorph.__version__ in capsys.readouterr().out
