"""
GUI background worker for running the combine workflow.

This module isolates the business execution from the GUI widgets, so that
the main window can focus on UI responsibilities. The worker bridges
workflow callbacks to Qt signals.
"""

from __future__ import annotations

from PySide6 import QtCore

from combine_tool.errors import CombineError
from combine_tool.gather import Selection
from combine_tool.settings import Settings
from combine_tool.workflow import WorkflowCallbacks, run_combine


class CombineWorker(QtCore.QObject):
    """Background worker running one combine.

    Signals
    -------
    log(str)
        Emitted when there is a new log message.
    phase(str)
        Emitted when the workflow phase changes ('prepare', 'combine', 'finished').
    finished(str)
        Emitted with the output path on success.
    error(str)
        Emitted with the message of a terminal error.
    """

    log = QtCore.Signal(str)
    phase = QtCore.Signal(str)
    finished = QtCore.Signal(str)
    error = QtCore.Signal(str)

    def __init__(self, selection: Selection, settings: Settings):
        super().__init__()
        self.selection = selection
        self.settings = settings

    @QtCore.Slot()
    def run(self) -> None:
        """Run the workflow on the worker thread and report through signals."""
        callbacks = WorkflowCallbacks(
            on_log=self.log.emit,
            on_phase=self.phase.emit,
        )
        try:
            result = run_combine(self.selection, self.settings, callbacks)
        except CombineError as e:
            self.error.emit(str(e))
            return
        except Exception as e:
            self.error.emit(f"未预期的错误: {e}")
            return
        self.finished.emit(str(result.output))


__all__ = ["CombineWorker"]
