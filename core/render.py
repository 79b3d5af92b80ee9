"""
Holomorph — File Render Pipeline
Still images go through the direct bilinear path. Videos go through one
lookup table built from the first frame's size and reused for every frame.
"""

import re
import time
from datetime import datetime
from pathlib import Path

from core.expression import parse
from core.lookup import LookupCache
from core.resample import remap_image
from core.safety import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, preflight, validate_dimensions
from core.video_io import load_frame, save_frame, probe_video, stream_frames, open_output_pipe

OUTPUT_DIR = Path("output")
MAX_NAME_LEN = 100


def sanitize_expression(expression: str) -> str:
    """Make an expression safe for use inside a file name.

    '/' becomes 'div', whitespace is dropped, and other path-hostile
    characters become '_'.
    """
    safe = expression.replace("/", "div")
    safe = re.sub(r"\s+", "", safe)
    safe = re.sub(r'[\\:*?"<>|]', "_", safe)
    return safe[:MAX_NAME_LEN]


def output_path_for(input_path: str, expression: str, suffix: str = ".jpeg",
                    output_dir: Path | None = None, now: datetime | None = None) -> Path:
    """Default output name: <dir>/<stem>_<expression>_<YYYYmmddHHMMSS><suffix>."""
    stem = Path(input_path).stem
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    out_dir = Path(output_dir) if output_dir is not None else OUTPUT_DIR
    return out_dir / f"{stem}_{sanitize_expression(expression)}_{stamp}{suffix}"


def render_image(input_path: str, expression: str, output_path: str | None = None) -> Path:
    """Transform an image file and save the result.

    Args:
        input_path: Source image.
        expression: Expression over z.
        output_path: Destination (default: output_path_for(...)).

    Returns:
        Path of the written image.
    """
    tree = parse(expression)
    info = preflight(input_path, allowed=IMAGE_EXTENSIONS)
    frame = load_frame(info["path"])
    validate_dimensions(frame.shape[1], frame.shape[0])

    result = remap_image(frame, tree)

    out = Path(output_path) if output_path else output_path_for(input_path, expression)
    save_frame(result, str(out))
    return out


def render_video(input_path: str, expression: str, output_path: str | None = None,
                 quality: str = "mid", progress_callback=None) -> Path:
    """Transform every frame of a video through one cached lookup table.

    Args:
        input_path: Source video.
        expression: Expression over z.
        output_path: Destination (default: output_path_for(..., ".mp4")).
        quality: Encoder preset ('lo', 'mid', 'hi').
        progress_callback: Optional fn(frame_index, total_frames).

    Returns:
        Path of the written video.
    """
    tree = parse(expression)
    info = preflight(input_path, allowed=VIDEO_EXTENSIONS)
    meta = probe_video(info["path"])
    width, height = meta["width"], meta["height"]
    validate_dimensions(width, height)

    out = Path(output_path) if output_path else output_path_for(input_path, expression, ".mp4")
    total = meta["total_frames"]
    cache = LookupCache()

    print(f"  Rendering: {width}x{height} @ {meta['fps']:.2f}fps, ~{total} frames")

    pipe = open_output_pipe(
        str(out), width, height, fps=meta["fps"], quality=quality,
        audio_source=info["path"] if meta["has_audio"] else None,
    )
    start_time = time.time()
    count = 0
    try:
        for frame in stream_frames(info["path"], width, height):
            table = cache.get(tree, width, height)
            pipe.stdin.write(table.apply(frame).tobytes())
            count += 1

            if progress_callback:
                progress_callback(count - 1, total)
            elif total > 10 and count % (total // 10) == 0:
                pct = count / total * 100
                print(f"  Rendering: {pct:.0f}% ({count}/{total} frames)")
    finally:
        pipe.stdin.close()
        pipe.wait(timeout=60)

    elapsed = time.time() - start_time
    print(f"  Render complete: {count} frames in {elapsed:.1f}s")
    return out
