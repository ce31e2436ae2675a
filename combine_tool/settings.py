"""
Common settings dataclass for the combine workflow.

This module centralizes configuration so it can be shared by GUI, CLI, and
programmatic usage, keeping the business logic independent from any UI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import DEFAULT_VOLUME, FFMPEG_CONFIG

# 输出文件已存在时的处理策略
OVERWRITE = "overwrite"
REFUSE = "refuse"
ASK = "ask"
OVERWRITE_POLICIES = (OVERWRITE, REFUSE, ASK)


@dataclass
class Settings:
    """Configuration settings for one combine run.

    Attributes
    ----------
    default_volume : float
        Volume factor used when the user does not give one.
    on_exists : str
        What to do when the output file already exists: 'overwrite',
        'refuse' or 'ask'.
    audio_tracks : Optional[int]
        Number of audio tracks per input. When None, the first input is
        probed with ffprobe.
    ffmpeg_path : Optional[str]
        Explicit ffmpeg executable. When None, the bundled copy or PATH is used.
    quality : str
        Encoding preset: 'balanced', 'compact' or 'tiny'.
    reencode_video : bool
        Re-encode the video stream instead of stream-copying it.
    gpu : bool
        Use NVENC when re-encoding, if ffmpeg reports it.
    timeout : Optional[float]
        Timeout in seconds for the ffmpeg run; None waits indefinitely.
    last_dir : Optional[str]
        Directory the GUI file dialogs open in.
    """

    default_volume: float = DEFAULT_VOLUME
    on_exists: str = OVERWRITE
    audio_tracks: Optional[int] = None
    ffmpeg_path: Optional[str] = None
    quality: str = "balanced"
    reencode_video: bool = False
    gpu: bool = False
    timeout: Optional[float] = FFMPEG_CONFIG["timeout"]
    last_dir: Optional[str] = None


__all__ = ["Settings", "OVERWRITE", "REFUSE", "ASK", "OVERWRITE_POLICIES"]
