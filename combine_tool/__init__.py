"""Concatenate videos and mix their audio tracks with ffmpeg.

Modules
-------
- gather: validate inputs, output path and volume from CLI flags or the GUI.
- command_builder: build the single ffmpeg invocation.
- runner: locate and run ffmpeg / ffprobe.
- workflow: orchestrate one combine run.
- cli: command-line entry point.
"""

from .errors import CombineError, InvalidArguments, OutputExists, ProcessingFailed, ToolNotFound
from .gather import Selection, gather_selection
from .settings import Settings
from .workflow import CombineResult, WorkflowCallbacks, run_combine

__all__ = [
    "CombineError",
    "InvalidArguments",
    "OutputExists",
    "ProcessingFailed",
    "ToolNotFound",
    "Selection",
    "gather_selection",
    "Settings",
    "CombineResult",
    "WorkflowCallbacks",
    "run_combine",
]
