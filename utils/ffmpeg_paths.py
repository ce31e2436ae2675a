"""
FFmpeg/FFprobe path resolution utilities with configurable priority and logging.

This module centralizes how the application locates ffmpeg and ffprobe
executables in both development and PyInstaller-frozen runtimes. The search
order is:

1. An explicit path (``--ffmpeg`` flag or Settings.ffmpeg_path).
2. The ``VIDEO_COMBINE_FFMPEG`` environment variable.
3. A bundled ``ffmpeg/bin`` directory (sys._MEIPASS when frozen, otherwise
   ``vendor/ffmpeg/bin`` under the project root).
4. The system PATH.

ffprobe is looked up next to the resolved ffmpeg first, then on PATH.
"""

from __future__ import annotations

import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

# Project root directory (repository root), used when not frozen.
PROJECT_ROOT = Path(__file__).resolve().parents[1]


@dataclass
class FFResolution:
    """Result of resolving FFmpeg/FFprobe paths.

    Attributes
    ----------
    ffmpeg_path : Optional[str]
        Resolved path to ffmpeg executable, or None if not found.
    ffprobe_path : Optional[str]
        Resolved path to ffprobe executable, or None if not found.
    source : str
        One of: 'explicit', 'env', 'bundled_meipass', 'bundled_vendor', 'system', 'none'.
    """

    ffmpeg_path: Optional[str]
    ffprobe_path: Optional[str]
    source: str


def _log(logger: Optional[Callable[[str], None]], msg: str) -> None:
    if logger:
        try:
            logger(msg)
        except Exception:
            pass


def runtime_base_dir() -> Path:
    """Return sys._MEIPASS when frozen by PyInstaller, otherwise PROJECT_ROOT."""
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(getattr(sys, "_MEIPASS")).resolve()
    return PROJECT_ROOT


def bundled_bin_dir() -> Tuple[Optional[Path], Optional[str]]:
    """Return bundled ffmpeg/bin directory and a source tag.

    It first checks the PyInstaller runtime base directory (sys._MEIPASS) and
    then falls back to the repository vendor path.
    """
    base = runtime_base_dir()
    meipass_bin = base / "ffmpeg" / "bin"
    if getattr(sys, "frozen", False) and meipass_bin.exists():
        return meipass_bin, "bundled_meipass"
    vendor_bin = PROJECT_ROOT / "vendor" / "ffmpeg" / "bin"
    if vendor_bin.exists():
        return vendor_bin, "bundled_vendor"
    return None, None


def _which_in(name: str, directory: Path) -> Optional[str]:
    return shutil.which(name, path=str(directory))


def _explicit_binary(candidate: str) -> Optional[str]:
    """Accept either an executable path or a bare command name."""
    p = Path(candidate).expanduser()
    if p.is_file() and os.access(p, os.X_OK):
        return str(p)
    return shutil.which(candidate)


def resolve_ffmpeg_paths(
    ffmpeg_path: Optional[str] = None,
    env_var: Optional[str] = "VIDEO_COMBINE_FFMPEG",
    prefer_bundled: bool = True,
    logger: Optional[Callable[[str], None]] = None,
) -> FFResolution:
    """Resolve ffmpeg/ffprobe paths.

    Parameters
    ----------
    ffmpeg_path : Optional[str]
        Explicit ffmpeg executable or command name; wins over everything else.
    env_var : Optional[str]
        Environment variable consulted when no explicit path is given.
    prefer_bundled : bool
        Search the bundled ffmpeg/bin directory before the system PATH.
    logger : Optional[Callable[[str], None]]
        Optional logging callback for decisions.

    Returns
    -------
    FFResolution
        Resolved paths and the source tag. Paths are None when not found.
    """
    found: Optional[str] = None
    source = "none"

    if ffmpeg_path:
        found = _explicit_binary(ffmpeg_path)
        source = "explicit"
        _log(logger, f"Explicit ffmpeg: {ffmpeg_path} -> {found}")
        if not found:
            # 显式指定但不可用时不再回退，避免误用其他版本
            return FFResolution(ffmpeg_path=None, ffprobe_path=None, source="none")
    elif env_var and os.getenv(env_var):
        found = _explicit_binary(os.environ[env_var])
        source = "env"
        _log(logger, f"{env_var}={os.environ[env_var]} -> {found}")
        if not found:
            return FFResolution(ffmpeg_path=None, ffprobe_path=None, source="none")

    if not found and prefer_bundled:
        bdir, tag = bundled_bin_dir()
        if bdir:
            found = _which_in("ffmpeg", bdir)
            if found:
                source = tag or "bundled"
                _log(logger, f"Resolved ffmpeg from bundled: {found}")
        else:
            _log(logger, "Bundled ffmpeg directory not found")

    if not found:
        found = shutil.which("ffmpeg")
        if found:
            source = "system"
            _log(logger, f"Using system ffmpeg: {found}")
        else:
            _log(logger, "System ffmpeg not found")
            return FFResolution(ffmpeg_path=None, ffprobe_path=None, source="none")

    ffprobe = _which_in("ffprobe", Path(found).parent) or shutil.which("ffprobe")
    return FFResolution(ffmpeg_path=found, ffprobe_path=ffprobe, source=source)


__all__ = [
    "PROJECT_ROOT",
    "FFResolution",
    "runtime_base_dir",
    "bundled_bin_dir",
    "resolve_ffmpeg_paths",
]
