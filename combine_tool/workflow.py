"""
Business workflow for combining videos.

This module keeps the orchestration free of any UI code so the CLI and the
GUI worker share it:

1) apply the overwrite policy for the output file
2) locate ffmpeg (nothing is written when it is missing)
3) determine how many audio tracks each input carries
4) write the concat list, run ffmpeg into a temporary sibling of the output
   and rename it into place on success

A failed run never leaves a partial file at the output path.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from utils.gpu_detect import is_nvenc_available

from .command_builder import CombineCommand, build_combine_command
from .errors import CombineError, InvalidArguments, OutputExists, ProcessingFailed
from .gather import Selection
from .runner import ProcessRunner, probe_audio_tracks, resolve_tools
from .settings import ASK, OVERWRITE, REFUSE, Settings

logger = logging.getLogger(__name__)


@dataclass
class WorkflowCallbacks:
    """Callbacks used by the workflow to report status back to the caller.

    Attributes
    ----------
    on_log : Optional[Callable[[str], None]]
        Called for each user-facing log message.
    on_phase : Optional[Callable[[str], None]]
        Called when the phase changes: 'prepare', 'combine', 'finished'.
    on_error : Optional[Callable[[str], None]]
        Called with the message of a terminal error before it is re-raised.
    confirm_overwrite : Optional[Callable[[Path], bool]]
        Asked when the output exists and the policy is 'ask'. Without it,
        'ask' behaves like 'refuse'.
    """

    on_log: Optional[Callable[[str], None]] = None
    on_phase: Optional[Callable[[str], None]] = None
    on_error: Optional[Callable[[str], None]] = None
    confirm_overwrite: Optional[Callable[[Path], bool]] = None


@dataclass
class CombineResult:
    """Outcome of a successful combine."""

    output: Path
    command: CombineCommand
    audio_tracks: int
    duration: float

    @property
    def output_size(self) -> Optional[int]:
        """Output file size in bytes, if the file exists."""
        try:
            return self.output.stat().st_size
        except OSError:
            return None


def _safe_call(fn: Optional[Callable[..., Any]], *args: Any) -> Any:
    """Call a callback safely, ignoring any exceptions."""
    if fn is None:
        return None
    try:
        return fn(*args)
    except Exception:
        # Avoid callback errors breaking the workflow.
        logger.debug("callback %r failed", fn, exc_info=True)
        return None


def check_output_target(output: Path, policy: str, confirm: Optional[Callable[[Path], bool]] = None) -> None:
    """Apply the overwrite policy to an existing output file.

    Parameters
    ----------
    output : Path
        Target file.
    policy : str
        'overwrite', 'refuse' or 'ask'.
    confirm : Optional[Callable[[Path], bool]]
        Consulted for 'ask'; a False answer (or no callback) refuses.

    Raises
    ------
    OutputExists
        When the file exists and may not be replaced.
    InvalidArguments
        For an unknown policy.
    """
    if policy not in (OVERWRITE, REFUSE, ASK):
        raise InvalidArguments(f"未知的覆盖策略: {policy}")
    if not output.exists():
        return
    if policy == OVERWRITE:
        logger.info("输出文件已存在，将覆盖: %s", output)
        return
    if policy == ASK and confirm is not None and bool(_safe_call(confirm, output)):
        return
    raise OutputExists(str(output))


def partial_path(output: Path) -> Path:
    """Temporary file ffmpeg writes to; keeps the extension so the format is unchanged."""
    return output.with_name(f".{output.stem}.partial{output.suffix}")


def concat_list_path(output: Path) -> Path:
    """Concat list file written next to the output."""
    return output.with_name(f".{output.stem}.concat_list.txt")


def _remove_quietly(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
            logger.debug("removed %s", path)
    except OSError as e:
        logger.warning("无法删除临时文件 %s: %s", path, e)


def run_combine(
    selection: Selection,
    settings: Settings,
    cb: Optional[WorkflowCallbacks] = None,
    runner: Optional[ProcessRunner] = None,
) -> CombineResult:
    """Run the complete combine workflow for one selection.

    Parameters
    ----------
    selection : Selection
        Validated inputs, output and volume.
    settings : Settings
        Run settings.
    cb : Optional[WorkflowCallbacks]
        Status callbacks.
    runner : Optional[ProcessRunner]
        Runner to use; a fresh one is created when omitted.

    Returns
    -------
    CombineResult
        The written output and the command that produced it.

    Raises
    ------
    InvalidArguments
        When the output may not be overwritten or the input has no audio.
    ToolNotFound
        When ffmpeg (or ffprobe, if probing is needed) is missing.
    ProcessingFailed
        When ffmpeg reports an error.
    """
    cb = cb or WorkflowCallbacks()
    runner = runner or ProcessRunner(timeout=settings.timeout)
    output = selection.output.expanduser().absolute()

    try:
        _safe_call(cb.on_phase, "prepare")
        check_output_target(output, settings.on_exists, cb.confirm_overwrite)
        tools = resolve_tools(settings.ffmpeg_path)

        tracks = settings.audio_tracks
        if tracks is None:
            tracks = probe_audio_tracks(tools.ffprobe_path, selection.inputs[0])
            _safe_call(cb.on_log, f"探测到音轨数量: {tracks}")
        if tracks < 1:
            raise InvalidArguments(f"输入文件没有音轨，无法混音: {selection.inputs[0]}")

        use_nvenc = bool(settings.reencode_video and settings.gpu and is_nvenc_available(tools.ffmpeg_path))
        if settings.reencode_video and settings.gpu and not use_nvenc:
            _safe_call(cb.on_log, "未检测到 NVENC，使用 libx264 编码")

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InvalidArguments(f"无法创建输出目录 {output.parent}: {e}") from e
        tmp_out = partial_path(output)
        command = build_combine_command(
            selection.inputs,
            tmp_out,
            selection.volume,
            list_path=concat_list_path(output),
            audio_tracks=tracks,
            ffmpeg_bin=tools.ffmpeg_path,
            quality=settings.quality,
            reencode_video=settings.reencode_video,
            use_nvenc=use_nvenc,
        )
    except CombineError as e:
        _safe_call(cb.on_error, str(e))
        raise

    _safe_call(cb.on_phase, "combine")
    _safe_call(cb.on_log, f"合并 {len(selection.inputs)} 个文件 -> {output}（音量 {selection.volume}）")
    logger.debug("ffmpeg cmd: %s", command.to_string())
    succeeded = False
    try:
        try:
            command.write_concat_list()
        except OSError as e:
            raise ProcessingFailed(f"无法写入拼接列表 {command.list_path}: {e}") from e
        result = runner.run(command.args)
        try:
            os.replace(tmp_out, output)
        except OSError as e:
            raise ProcessingFailed(f"无法写入输出文件 {output}: {e}") from e
        succeeded = True
    except CombineError as e:
        _safe_call(cb.on_error, str(e))
        raise
    finally:
        _remove_quietly(command.list_path)
        if not succeeded:
            _remove_quietly(tmp_out)

    _safe_call(cb.on_phase, "finished")
    _safe_call(cb.on_log, f"完成: {output}")
    logger.info("combined %d file(s) into %s in %.1fs", len(selection.inputs), output, result.duration)
    return CombineResult(output=output, command=command, audio_tracks=tracks, duration=result.duration)


__all__ = [
    "WorkflowCallbacks",
    "CombineResult",
    "check_output_target",
    "partial_path",
    "concat_list_path",
    "run_combine",
]
