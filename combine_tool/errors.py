"""
Exception types raised by the combine workflow.

Both front ends (CLI and GUI) catch `CombineError` and report it to the
user; the concrete subclass decides the CLI exit code.
"""

from __future__ import annotations

from typing import Optional


class CombineError(Exception):
    """Base class for all errors reported to the user."""

    exit_code = 1


class InvalidArguments(CombineError, ValueError):
    """Missing or malformed inputs, output path or volume."""

    exit_code = 2


class OutputExists(InvalidArguments):
    """The output file exists and the overwrite policy does not allow replacing it."""

    def __init__(self, path: str) -> None:
        super().__init__(f"输出文件已存在: {path}")
        self.path = path


class ToolNotFound(CombineError, FileNotFoundError):
    """ffmpeg (or ffprobe) could not be located."""

    exit_code = 3

    def __init__(self, tool: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"未找到 {tool}，请安装后加入 PATH，或通过 --ffmpeg 指定路径")
        self.tool = tool


class ProcessingFailed(CombineError, RuntimeError):
    """The external tool ran but exited with an error.

    Attributes
    ----------
    returncode : Optional[int]
        Process exit status; None when the process timed out.
    stderr_tail : str
        Last part of the tool's diagnostic output.
    """

    exit_code = 1

    def __init__(self, message: str, returncode: Optional[int] = None, stderr_tail: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr_tail = stderr_tail

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr_tail:
            return f"{base}\n{self.stderr_tail}"
        return base


__all__ = [
    "CombineError",
    "InvalidArguments",
    "OutputExists",
    "ToolNotFound",
    "ProcessingFailed",
]
