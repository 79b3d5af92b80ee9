"""
Holomorph — Image & Video I/O
Image files load/save through Pillow; video frames stream through FFmpeg
subprocess pipes as raw RGB24 so the lookup table can gather them directly.
"""

import subprocess
import shutil
import json
from pathlib import Path

import numpy as np
from PIL import Image

# Encoder presets for open_output_pipe
QUALITY_PRESETS = {
    "lo": ["-c:v", "libx264", "-crf", "28", "-preset", "fast", "-pix_fmt", "yuv420p"],
    "mid": ["-c:v", "libx264", "-crf", "23", "-preset", "medium", "-pix_fmt", "yuv420p"],
    "hi": ["-c:v", "libx264", "-crf", "17", "-preset", "slow", "-pix_fmt", "yuv420p"],
}


def get_ffmpeg():
    """Find FFmpeg binary."""
    path = shutil.which("ffmpeg")
    if not path:
        raise RuntimeError("FFmpeg not found. Install with: brew install ffmpeg")
    return path


def get_ffprobe():
    """Find FFprobe binary."""
    path = shutil.which("ffprobe")
    if not path:
        raise RuntimeError("FFprobe not found. Install with: brew install ffmpeg")
    return path


def probe_video(video_path: str) -> dict:
    """Get video metadata: resolution, fps, duration, has_audio."""
    video_path = str(video_path)
    cmd = [
        get_ffprobe(),
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        video_path,
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=30)
    data = json.loads(result.stdout)

    video_stream = None
    has_audio = False
    for stream in data.get("streams", []):
        if stream["codec_type"] == "video" and video_stream is None:
            video_stream = stream
        if stream["codec_type"] == "audio":
            has_audio = True

    if not video_stream:
        raise ValueError(f"No video stream found in {video_path}")

    fps_parts = video_stream.get("r_frame_rate", "30/1").split("/")
    fps = float(fps_parts[0]) / float(fps_parts[1]) if len(fps_parts) == 2 else 30.0

    return {
        "width": int(video_stream["width"]),
        "height": int(video_stream["height"]),
        "fps": fps,
        "duration": float(data.get("format", {}).get("duration", 0)),
        "has_audio": has_audio,
        "codec": video_stream.get("codec_name", "unknown"),
        "total_frames": int(float(data.get("format", {}).get("duration", 0)) * fps),
    }


def load_frame(frame_path: str) -> np.ndarray:
    """Load an image file as a numpy array (H, W, 3) uint8 RGB."""
    img = Image.open(str(frame_path)).convert("RGB")
    return np.array(img)


def save_frame(array: np.ndarray, output_path: str):
    """Save a numpy array (H, W, 3) as an image. Format follows the extension."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.fromarray(np.clip(array, 0, 255).astype(np.uint8))
    img.save(str(output_path))


def encode_png(array: np.ndarray) -> bytes:
    """Encode a frame as PNG bytes (HTTP responses)."""
    from io import BytesIO
    buf = BytesIO()
    Image.fromarray(np.clip(array, 0, 255).astype(np.uint8)).save(buf, format="PNG")
    return buf.getvalue()


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, ...) to (H, W, 3) uint8 RGB."""
    from io import BytesIO
    img = Image.open(BytesIO(data)).convert("RGB")
    return np.array(img)


def stream_frames(video_path: str, width: int | None = None, height: int | None = None):
    """Yield decoded frames one at a time as (H, W, 3) uint8 arrays.

    Args:
        video_path: Input video.
        width, height: Frame size; probed when omitted.
    """
    video_path = str(video_path)
    if width is None or height is None:
        info = probe_video(video_path)
        width, height = info["width"], info["height"]

    cmd = [
        get_ffmpeg(),
        "-v", "quiet",
        "-i", video_path,
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-",
    ]
    frame_bytes = width * height * 3
    proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL)
    try:
        while True:
            raw = proc.stdout.read(frame_bytes)
            if len(raw) < frame_bytes:
                break
            yield np.frombuffer(raw, dtype=np.uint8).reshape(height, width, 3)
    finally:
        proc.stdout.close()
        if proc.poll() is None:
            proc.kill()
        proc.wait(timeout=10)


def open_output_pipe(output_path: str, width: int, height: int, fps: float,
                     quality: str = "mid", audio_source: str | None = None):
    """Start an FFmpeg encoder reading raw RGB24 frames from stdin.

    Write frame.tobytes() to proc.stdin, then close stdin and wait().
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        get_ffmpeg(),
        "-y",
        "-v", "quiet",
        "-f", "rawvideo",
        "-pix_fmt", "rgb24",
        "-s", f"{width}x{height}",
        "-r", str(fps),
        "-i", "-",
    ]
    if audio_source:
        cmd += ["-i", str(audio_source), "-map", "0:v", "-map", "1:a?", "-shortest"]
    cmd += QUALITY_PRESETS.get(quality, QUALITY_PRESETS["mid"])
    if audio_source:
        cmd += ["-c:a", "aac", "-b:a", "192k"]
    cmd.append(str(output_path))

    return subprocess.Popen(cmd, stdin=subprocess.PIPE, stderr=subprocess.DEVNULL)
