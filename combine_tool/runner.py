"""
Run ffmpeg / ffprobe and surface their outcome.

`ProcessRunner` wraps a single ffmpeg invocation: it tracks a tiny state
machine (IDLE -> RUNNING -> SUCCEEDED | FAILED), turns a missing binary into
`ToolNotFound` and a non-zero exit into `ProcessingFailed` carrying the tail
of ffmpeg's stderr.
"""

from __future__ import annotations

import enum
import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from utils.common_utils import get_subprocess_silent_kwargs, read_text
from utils.ffmpeg_paths import FFResolution, resolve_ffmpeg_paths

from .config import FFMPEG_CONFIG, FFMPEG_ENV_VAR
from .errors import ProcessingFailed, ToolNotFound

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunResult:
    """Outcome of a successful run."""

    returncode: int
    stdout: str
    stderr: str
    duration: float


def _tail(text: str, limit: Optional[int] = None) -> str:
    limit = limit or FFMPEG_CONFIG["stderr_tail_chars"]
    text = text.strip()
    return text[-limit:]


def resolve_tools(ffmpeg_path: Optional[str] = None) -> FFResolution:
    """Locate ffmpeg (and ffprobe) or raise `ToolNotFound`."""
    res = resolve_ffmpeg_paths(
        ffmpeg_path=ffmpeg_path,
        env_var=FFMPEG_ENV_VAR,
        logger=lambda m: logger.debug("[ffmpeg] %s", m),
    )
    if not res.ffmpeg_path:
        raise ToolNotFound("ffmpeg")
    logger.debug("ffmpeg=%s ffprobe=%s (%s)", res.ffmpeg_path, res.ffprobe_path, res.source)
    return res


class ProcessRunner:
    """Execute one external tool invocation.

    Parameters
    ----------
    timeout : Optional[float]
        Seconds to wait for the process; None waits indefinitely.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout
        self.state = RunState.IDLE
        self.result: Optional[RunResult] = None

    def run(self, args: Sequence[str]) -> RunResult:
        """Run `args` to completion.

        Raises
        ------
        ToolNotFound
            If the executable cannot be started because it does not exist.
        ProcessingFailed
            If the process exits non-zero or times out.
        """
        cmd: List[str] = [str(a) for a in args]
        self.state = RunState.RUNNING
        logger.debug("run: %s", subprocess.list2cmdline(cmd))
        started = time.monotonic()
        try:
            res = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.timeout,
                **get_subprocess_silent_kwargs(),
            )
        except FileNotFoundError:
            self.state = RunState.FAILED
            raise ToolNotFound(Path(cmd[0]).name) from None
        except subprocess.TimeoutExpired as e:
            self.state = RunState.FAILED
            raise ProcessingFailed(
                f"{Path(cmd[0]).name} 超时（{self.timeout} 秒）",
                returncode=None,
                stderr_tail=_tail(read_text(e.stderr)),
            ) from None

        duration = time.monotonic() - started
        stderr_text = read_text(res.stderr)
        if res.returncode != 0:
            self.state = RunState.FAILED
            tail = _tail(stderr_text)
            logger.error("%s exited with %s, stderr tail:\n%s", Path(cmd[0]).name, res.returncode, tail)
            raise ProcessingFailed(
                f"{Path(cmd[0]).name} 处理失败（退出码 {res.returncode}）",
                returncode=res.returncode,
                stderr_tail=tail,
            )
        self.state = RunState.SUCCEEDED
        self.result = RunResult(
            returncode=res.returncode,
            stdout=read_text(res.stdout),
            stderr=stderr_text,
            duration=duration,
        )
        logger.debug("finished in %.1fs", duration)
        return self.result


def ffmpeg_version(ffmpeg_bin: str) -> str:
    """Return the first line of ``ffmpeg -version``."""
    res = ProcessRunner(timeout=10).run([ffmpeg_bin, "-hide_banner", "-version"])
    return _first_line(res.stdout)


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def probe_audio_tracks(ffprobe_bin: Optional[str], media: Union[str, Path]) -> int:
    """Count the audio streams of `media` with ffprobe.

    Raises
    ------
    ToolNotFound
        If ffprobe is not available.
    ProcessingFailed
        If ffprobe cannot read the file.
    """
    if not ffprobe_bin:
        raise ToolNotFound("ffprobe", "未找到 ffprobe，无法探测音轨数量；可通过 --tracks 手动指定")
    cmd = [
        ffprobe_bin,
        "-v",
        "error",
        "-select_streams",
        "a",
        "-show_entries",
        "stream=index",
        "-of",
        "csv=p=0",
        str(media),
    ]
    try:
        res = subprocess.run(cmd, capture_output=True, timeout=30, **get_subprocess_silent_kwargs())
    except FileNotFoundError:
        raise ToolNotFound("ffprobe") from None
    except subprocess.TimeoutExpired:
        raise ProcessingFailed(f"ffprobe 探测超时: {media}") from None
    if res.returncode != 0:
        raise ProcessingFailed(
            f"ffprobe 无法读取: {media}",
            returncode=res.returncode,
            stderr_tail=_tail(read_text(res.stderr)),
        )
    lines = [ln for ln in read_text(res.stdout).splitlines() if ln.strip()]
    return len(lines)


__all__ = [
    "RunState",
    "RunResult",
    "ProcessRunner",
    "resolve_tools",
    "ffmpeg_version",
    "probe_audio_tracks",
]
