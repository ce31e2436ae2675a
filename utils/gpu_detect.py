"""
Encoder detection utilities.

Detects NVENC availability via the encoders listed by ``ffmpeg -encoders``.
Reusable in CLI and GUI contexts without Qt dependencies.
"""

from __future__ import annotations

import subprocess

from utils.common_utils import get_subprocess_silent_kwargs, read_text


def ffmpeg_output(ffmpeg_bin: str, args: list[str], timeout: int = 8) -> str:
    """Run ffmpeg with given args and return its text output, or empty string on error."""
    try:
        res = subprocess.run(
            [ffmpeg_bin, *args],
            capture_output=True,
            timeout=timeout,
            **get_subprocess_silent_kwargs(),
        )
    except (OSError, subprocess.SubprocessError):
        return ""
    if res.returncode != 0:
        return read_text(res.stdout) + "\n" + read_text(res.stderr)
    return read_text(res.stdout)


def is_nvenc_available(ffmpeg_bin: str, timeout: int = 8) -> bool:
    """Return True if ffmpeg reports the h264_nvenc encoder.

    Parameters
    ----------
    ffmpeg_bin : str
        ffmpeg executable to query.
    timeout : int
        Subprocess timeout in seconds.
    """
    enc = ffmpeg_output(ffmpeg_bin, ["-hide_banner", "-encoders"], timeout)
    return "h264_nvenc" in enc


__all__ = [
    "ffmpeg_output",
    "is_nvenc_available",
]
