"""
Holomorph — Render Pipeline Tests
Image render end to end on disk; video render with FFmpeg mocked out.

Run with: pytest tests/test_render.py -v
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import patch, MagicMock

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.expression import ParseError
from core.render import sanitize_expression, output_path_for, render_image, render_video
from core.safety import SafetyError
from core.video_io import save_frame, load_frame
from conftest import MOCK_VIDEO_INFO, _make_ramp_frame


@pytest.fixture
def image_file(tmp_path, random_frame):
    path = tmp_path / "photo.png"
    save_frame(random_frame, str(path))
    return path


@pytest.fixture
def video_file(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00" * 64)
    return path


def _mock_pipe():
    pipe = MagicMock()
    pipe.stdin = MagicMock()
    pipe.wait = MagicMock()
    return pipe


# ---------------------------------------------------------------------------
# NAMING
# ---------------------------------------------------------------------------

class TestNaming:

    def test_division_and_spaces(self):
        assert sanitize_expression("1/z + sin(z)") == "1divz+sin(z)"

    def test_path_hostile_characters(self):
        assert sanitize_expression('a\\b:c*d?"e') == "a_b_c_d__e"

    def test_length_capped(self):
        assert len(sanitize_expression("z+" * 200)) == 100

    def test_output_path(self):
        out = output_path_for("photos/cat.jpg", "z^2", now=datetime(2024, 1, 2, 3, 4, 5))
        assert out == Path("output") / "cat_z^2_20240102030405.jpeg"

    def test_output_path_custom_dir_and_suffix(self, tmp_path):
        out = output_path_for("clip.mov", "1/z", suffix=".mp4", output_dir=tmp_path,
                              now=datetime(2024, 1, 2, 3, 4, 5))
        assert out == tmp_path / "clip_1divz_20240102030405.mp4"


# ---------------------------------------------------------------------------
# IMAGES
# ---------------------------------------------------------------------------

class TestRenderImage:

    def test_identity_round_trip(self, tmp_path, image_file, random_frame):
        out = render_image(str(image_file), "z", str(tmp_path / "out.png"))
        assert out.exists()
        np.testing.assert_array_equal(load_frame(out), random_frame)

    def test_default_output_path(self, tmp_path, image_file):
        with patch("core.render.OUTPUT_DIR", tmp_path / "output"):
            out = render_image(str(image_file), "z^2")
        assert out.parent == tmp_path / "output"
        assert out.name.startswith("photo_z^2_")
        assert out.suffix == ".jpeg"
        assert out.exists()

    def test_bad_expression_writes_nothing(self, tmp_path, image_file):
        with pytest.raises(ParseError):
            render_image(str(image_file), "z +", str(tmp_path / "out.png"))
        assert not (tmp_path / "out.png").exists()

    def test_missing_input(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            render_image(str(tmp_path / "missing.png"), "z")

    def test_video_extension_rejected(self, video_file):
        with pytest.raises(SafetyError):
            render_image(str(video_file), "z")


# ---------------------------------------------------------------------------
# VIDEO
# ---------------------------------------------------------------------------

class TestRenderVideo:

    def _frames(self, count=3):
        return [_make_ramp_frame(16, 8) for _ in range(count)]

    def test_writes_every_frame(self, tmp_path, video_file):
        frames = self._frames()
        pipe = _mock_pipe()
        with patch("core.render.probe_video", return_value=MOCK_VIDEO_INFO.copy()), \
             patch("core.render.stream_frames", return_value=iter(frames)), \
             patch("core.render.open_output_pipe", return_value=pipe) as mock_open:
            out = render_video(str(video_file), "z", str(tmp_path / "out.mp4"))

        assert out == tmp_path / "out.mp4"
        assert pipe.stdin.write.call_count == 3
        for c, frame in zip(pipe.stdin.write.call_args_list, frames):
            assert c.args[0] == frame.tobytes()
        pipe.stdin.close.assert_called_once()
        pipe.wait.assert_called_once()

        args, kwargs = mock_open.call_args
        assert args[1:3] == (16, 8)
        assert kwargs["audio_source"] is None

    def test_audio_passed_through(self, tmp_path, video_file):
        info = MOCK_VIDEO_INFO.copy()
        info["has_audio"] = True
        with patch("core.render.probe_video", return_value=info), \
             patch("core.render.stream_frames", return_value=iter(self._frames(1))), \
             patch("core.render.open_output_pipe", return_value=_mock_pipe()) as mock_open:
            render_video(str(video_file), "z", str(tmp_path / "out.mp4"))
        assert mock_open.call_args.kwargs["audio_source"] == os.path.realpath(video_file)

    def test_progress_callback(self, tmp_path, video_file):
        seen = []
        with patch("core.render.probe_video", return_value=MOCK_VIDEO_INFO.copy()), \
             patch("core.render.stream_frames", return_value=iter(self._frames())), \
             patch("core.render.open_output_pipe", return_value=_mock_pipe()):
            render_video(str(video_file), "z^2", str(tmp_path / "out.mp4"),
                         progress_callback=lambda i, total: seen.append((i, total)))
        assert seen == [(0, 3), (1, 3), (2, 3)]

    def test_frames_transformed(self, tmp_path, video_file):
        pipe = _mock_pipe()
        with patch("core.render.probe_video", return_value=MOCK_VIDEO_INFO.copy()), \
             patch("core.render.stream_frames", return_value=iter(self._frames(1))), \
             patch("core.render.open_output_pipe", return_value=pipe):
            render_video(str(video_file), "1/z", str(tmp_path / "out.mp4"))
        written = np.frombuffer(pipe.stdin.write.call_args.args[0], dtype=np.uint8)
        assert tuple(written.reshape(8, 16, 3)[4, 8]) == (0, 0, 0)

    def test_pipe_closed_on_failure(self, tmp_path, video_file):
        def broken_stream(*args, **kwargs):
            yield _make_ramp_frame(16, 8)
            raise RuntimeError("decoder died")

        pipe = _mock_pipe()
        with patch("core.render.probe_video", return_value=MOCK_VIDEO_INFO.copy()), \
             patch("core.render.stream_frames", side_effect=broken_stream), \
             patch("core.render.open_output_pipe", return_value=pipe):
            with pytest.raises(RuntimeError, match="decoder died"):
                render_video(str(video_file), "z", str(tmp_path / "out.mp4"))
        pipe.stdin.close.assert_called_once()

    def test_bad_expression_never_probes(self, video_file):
        with patch("core.render.probe_video") as probe:
            with pytest.raises(ParseError):
                render_video(str(video_file), "foo(z)")
        probe.assert_not_called()
