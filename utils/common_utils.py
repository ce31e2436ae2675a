from __future__ import annotations

import os
import subprocess

VIDEO_EXTS = {".mp4", ".mov", ".mkv", ".avi", ".webm", ".flv", ".m4v"}


def is_video_file(name: str) -> bool:
    """判断是否为常见视频文件。"""
    ext = os.path.splitext(str(name))[1].lower()
    return ext in VIDEO_EXTS


def read_text(b: bytes | str | None) -> str:
    """Decode subprocess output using utf-8 with fallback on Windows codepage."""
    if b is None:
        return ""
    if isinstance(b, str):
        return b
    try:
        return b.decode("utf-8", errors="ignore")
    except Exception:
        try:
            return b.decode("mbcs", errors="ignore")
        except Exception:
            return ""


def get_subprocess_silent_kwargs() -> dict:
    """Windows 下隐藏子进程控制台窗口；其他平台返回空字典。"""
    if os.name != "nt":
        return {}
    si = subprocess.STARTUPINFO()
    si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    return {"startupinfo": si, "creationflags": subprocess.CREATE_NO_WINDOW}
