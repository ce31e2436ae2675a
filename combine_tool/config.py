"""
Static configuration for the combine tool.

Centralizes FFmpeg defaults, logging setup values and the quality presets
used when encoding audio (and video, when re-encoding is requested). Import
from here so the CLI, the GUI and the workflow stay consistent.
"""

from __future__ import annotations

import os
from typing import Tuple

from utils.common_utils import VIDEO_EXTS

# Program version reported by --version
VERSION = "0.1.0"

# FFmpeg 配置
FFMPEG_CONFIG = {
    "binary": "ffmpeg",
    "probe_binary": "ffprobe",
    "timeout": None,          # 单次调用超时（秒），None 表示不限制
    "stderr_tail_chars": 800,  # 失败时保留的 stderr 末尾长度
}

# 日志配置
LOG_CONFIG = {
    "level": "DEBUG" if os.getenv("DEBUG", "0") == "1" else "INFO",
    "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    "file": None,             # 例如 "video_combine.log"；None 表示只输出到控制台
    "encoding": "utf-8",
}

# Unity gain; used whenever no volume is given
DEFAULT_VOLUME = 1.0

# Environment variable holding an explicit ffmpeg path
FFMPEG_ENV_VAR = "VIDEO_COMBINE_FFMPEG"

# 文件对话框过滤器
VIDEO_FILE_FILTER = "视频文件 ({});;所有文件 (*.*)".format(" ".join(f"*{e}" for e in sorted(VIDEO_EXTS)))
OUTPUT_FILE_FILTER = "视频文件 (*.mp4 *.mkv)"

# NVENC CQ values per preset (lower is higher quality/larger size)
QUALITY_NVENC_CQ = {
    "balanced": "27",
    "compact": "29",
    "tiny": "31",
}

# x264 CRF values per preset (lower is higher quality/larger size)
QUALITY_X264_CRF = {
    "balanced": "22",
    "compact": "24",
    "tiny": "26",
}

# AAC audio bitrate per preset
QUALITY_AAC_BITRATE = {
    "balanced": "192k",
    "compact": "128k",
    "tiny": "96k",
}

QUALITY_CHOICES = tuple(QUALITY_AAC_BITRATE)


def resolve_quality(quality: str) -> Tuple[str, str, str]:
    """Resolve a logical quality preset to encoder parameters.

    Parameters
    ----------
    quality : str
        Preset name. Supported values: "balanced", "compact", "tiny".

    Returns
    -------
    Tuple[str, str, str]
        A tuple of (nvenc_cq, x264_crf, aac_bitrate) strings.

    Notes
    -----
    Defaults to the "balanced" preset when an unknown value is provided.
    """
    q = quality if quality in QUALITY_NVENC_CQ else "balanced"
    return (
        QUALITY_NVENC_CQ[q],
        QUALITY_X264_CRF[q],
        QUALITY_AAC_BITRATE[q],
    )


__all__ = [
    "VERSION",
    "FFMPEG_CONFIG",
    "LOG_CONFIG",
    "DEFAULT_VOLUME",
    "FFMPEG_ENV_VAR",
    "VIDEO_FILE_FILTER",
    "OUTPUT_FILE_FILTER",
    "QUALITY_NVENC_CQ",
    "QUALITY_X264_CRF",
    "QUALITY_AAC_BITRATE",
    "QUALITY_CHOICES",
    "resolve_quality",
]
