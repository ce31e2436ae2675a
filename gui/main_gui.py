"""
Video Combine GUI (PySide6)

A small window around combine_tool.workflow:

- 文件 → 导入视频… (Ctrl+I) adds one or more files to the list
- the list order is the concatenation order (move up/down, remove, clear)
- the volume field scales the first audio track
- 合并 asks for the output file and runs ffmpeg on a background QThread

Errors are shown in a message box; the window stays open.
"""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

# Ensure imports work both in development and PyInstaller-frozen runtime.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if not getattr(sys, "frozen", False):
    if str(PROJECT_ROOT) not in sys.path:
        sys.path.insert(0, str(PROJECT_ROOT))

from combine_tool.config import OUTPUT_FILE_FILTER, VIDEO_FILE_FILTER
from combine_tool.errors import CombineError
from combine_tool.gather import gather_selection, merge_inputs, parse_volume
from combine_tool.settings import OVERWRITE, Settings
from combine_tool.workflow import check_output_target
from gui.utils import theme
from gui.workers.combine_worker import CombineWorker


class MainWindow(QtWidgets.QMainWindow):
    """Main application window.

    Parameters
    ----------
    settings : Settings
        Run settings; `last_dir` is updated as the user browses.
    inputs : Optional[List[str]]
        Files pre-loaded into the list (from ``-i`` flags).
    volume : Optional[str]
        Initial volume text (from ``-v``).
    """

    def __init__(
        self,
        settings: Settings,
        inputs: Optional[List[str]] = None,
        volume: Optional[str] = None,
    ) -> None:
        super().__init__()
        self.settings = settings
        self._thread: Optional[QtCore.QThread] = None
        self._worker: Optional[CombineWorker] = None
        self._is_running = False

        self.setWindowTitle("视频合并")
        self.resize(560, 420)
        self.setMinimumSize(420, 320)

        self._build_menu()
        self._build_central(volume)
        self._set_inputs(list(inputs or []))
        self._set_stage("idle")

    # ----------------------------- 页面构建 ----------------------------- #
    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("文件(&F)")
        self.act_import = QtGui.QAction("导入视频…", self)
        self.act_import.setShortcut(QtGui.QKeySequence("Ctrl+I"))
        self.act_import.triggered.connect(self._on_import_videos)
        menu.addAction(self.act_import)
        menu.addSeparator()
        act_quit = QtGui.QAction("退出", self)
        act_quit.setShortcut(QtGui.QKeySequence(QtGui.QKeySequence.Quit))
        act_quit.triggered.connect(self.close)
        menu.addAction(act_quit)

    def _build_central(self, volume: Optional[str]) -> None:
        panel = QtWidgets.QWidget(self)
        vbox = QtWidgets.QVBoxLayout(panel)
        vbox.setContentsMargins(10, 10, 10, 10)
        vbox.setSpacing(8)

        group = QtWidgets.QGroupBox("输入视频（按顺序拼接，可重复，Ctrl+I 导入）")
        g = QtWidgets.QVBoxLayout(group)
        self.video_list = QtWidgets.QListWidget()
        self.video_list.setSelectionMode(QtWidgets.QAbstractItemView.ExtendedSelection)
        g.addWidget(self.video_list)

        btns_row = QtWidgets.QHBoxLayout()
        for label, slot in (
            ("导入…", self._on_import_videos),
            ("上移", lambda: self._on_move_selected(-1)),
            ("下移", lambda: self._on_move_selected(1)),
            ("移除选中", self._on_remove_selected),
            ("清空", self._on_clear),
        ):
            btn = QtWidgets.QPushButton(label)
            btn.clicked.connect(slot)
            btns_row.addWidget(btn)
        g.addLayout(btns_row)
        vbox.addWidget(group, 1)

        form = QtWidgets.QFormLayout()
        self.volume_edit = QtWidgets.QLineEdit()
        self.volume_edit.setPlaceholderText(str(self.settings.default_volume))
        if volume is not None:
            self.volume_edit.setText(str(volume))
        form.addRow("第一音轨音量:", self.volume_edit)
        vbox.addLayout(form)

        ctl_row = QtWidgets.QHBoxLayout()
        self.status_label = QtWidgets.QLabel()
        self.combine_btn = QtWidgets.QPushButton("合并")
        self.combine_btn.setStyleSheet(theme.build_primary_button_stylesheet())
        self.combine_btn.clicked.connect(self._on_combine_clicked)
        ctl_row.addWidget(self.status_label, 1)
        ctl_row.addWidget(self.combine_btn)
        vbox.addLayout(ctl_row)

        self.setCentralWidget(panel)

    # ----------------------------- 列表操作 ----------------------------- #
    def inputs(self) -> List[str]:
        """Current input files in list order."""
        return [self.video_list.item(i).text() for i in range(self.video_list.count())]

    def _set_inputs(self, paths: List[str]) -> None:
        self.video_list.clear()
        self.video_list.addItems(paths)

    def _on_import_videos(self) -> None:
        """导入一个或多个视频，追加到列表末尾（允许重复，非视频文件跳过）。"""
        files, _ = QtWidgets.QFileDialog.getOpenFileNames(
            self,
            "导入视频",
            self.settings.last_dir or "",
            VIDEO_FILE_FILTER,
        )
        if not files:
            return
        self.settings.last_dir = os.path.dirname(files[0])
        merged, skipped = merge_inputs(self.inputs(), files)
        self._set_inputs(merged)
        if skipped:
            QtWidgets.QMessageBox.information(
                self,
                "提示",
                "以下文件不是支持的视频格式，已跳过:\n" + "\n".join(skipped),
            )

    def _on_move_selected(self, step: int) -> None:
        row = self.video_list.currentRow()
        target = row + step
        if row < 0 or target < 0 or target >= self.video_list.count():
            return
        item = self.video_list.takeItem(row)
        self.video_list.insertItem(target, item)
        self.video_list.setCurrentRow(target)

    def _on_remove_selected(self) -> None:
        for item in self.video_list.selectedItems():
            self.video_list.takeItem(self.video_list.row(item))

    def _on_clear(self) -> None:
        self.video_list.clear()

    # ----------------------------- 合并流程 ----------------------------- #
    def _ask_output_path(self) -> Optional[str]:
        """弹出保存对话框；覆盖确认由 check_output_target 统一处理。"""
        start = self.settings.last_dir or ""
        inputs = self.inputs()
        if inputs:
            first = Path(inputs[0])
            start = str(first.with_name(f"{first.stem}_combined.mp4"))
        fname, _ = QtWidgets.QFileDialog.getSaveFileName(
            self,
            "选择输出文件",
            start,
            OUTPUT_FILE_FILTER,
            options=QtWidgets.QFileDialog.DontConfirmOverwrite,
        )
        if not fname:
            return None
        if not Path(fname).suffix:
            fname += ".mp4"
        self.settings.last_dir = os.path.dirname(fname)
        return fname

    def _confirm_overwrite(self, path: Path) -> bool:
        ret = QtWidgets.QMessageBox.question(
            self,
            "确认覆盖",
            f"输出文件已存在:\n{path}\n\n是否覆盖？",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
            QtWidgets.QMessageBox.No,
        )
        return ret == QtWidgets.QMessageBox.Yes

    def _on_combine_clicked(self) -> None:
        """校验输入 → 选择输出 → 处理覆盖策略 → 后台运行。"""
        if self._is_running:
            return
        inputs = self.inputs()
        volume_text = self.volume_edit.text()
        try:
            # 先校验不依赖输出路径的部分，避免无效输入时弹出保存框
            if not inputs:
                gather_selection(inputs, None, volume_text, self.settings)
            parse_volume(volume_text, self.settings.default_volume)
            out = self._ask_output_path()
            if out is None:
                return
            selection = gather_selection(inputs, out, volume_text, self.settings)
            # GUI 中询问必须在主线程完成，之后工作线程按覆盖处理
            check_output_target(selection.output, self.settings.on_exists, self._confirm_overwrite)
        except CombineError as e:
            QtWidgets.QMessageBox.warning(self, "提示", str(e))
            return

        run_settings = dataclasses.replace(self.settings, on_exists=OVERWRITE)
        self._start_worker(CombineWorker(selection, run_settings))

    def _start_worker(self, worker: CombineWorker) -> None:
        self._thread = QtCore.QThread(self)
        self._worker = worker
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.phase.connect(self._set_stage)
        self._worker.log.connect(self.statusBar().showMessage)
        self._worker.finished.connect(self._on_finished)
        self._worker.error.connect(self._on_error)
        self._thread.finished.connect(self._thread.deleteLater)

        self._is_running = True
        self.combine_btn.setEnabled(False)
        self.act_import.setEnabled(False)
        self._thread.start()

    def _set_stage(self, stage: str) -> None:
        self.status_label.setText(theme.STAGE_TEXT_MAP.get(stage, stage))
        self.status_label.setStyleSheet(theme.build_status_stylesheet(stage))

    def _on_finished(self, output: str) -> None:
        self._reset_run_state()
        self._set_stage("finished")
        QtWidgets.QMessageBox.information(self, "完成", f"已生成:\n{output}")

    def _on_error(self, msg: str) -> None:
        self._reset_run_state()
        self._set_stage("failed")
        QtWidgets.QMessageBox.critical(self, "错误", msg)

    def _reset_run_state(self) -> None:
        """复位运行状态与按钮，安全结束线程。"""
        self._is_running = False
        self.combine_btn.setEnabled(True)
        self.act_import.setEnabled(True)
        if self._thread and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait(3000)
        self._thread = None
        self._worker = None

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        """任务运行中不允许关闭窗口（ffmpeg 无法中途取消）。"""
        if self._is_running:
            QtWidgets.QMessageBox.information(self, "提示", "合并仍在进行，请等待完成后再关闭。")
            event.ignore()
            return
        event.accept()


def run_gui(settings: Settings, inputs: Optional[List[str]] = None, volume: Optional[str] = None) -> int:
    """Application entry point.

    Creates the Qt application, displays the main window and returns the
    event loop's exit code.
    """
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    w = MainWindow(settings, inputs=inputs, volume=volume)
    w.show()
    return app.exec()


def main() -> None:
    sys.exit(run_gui(Settings()))


if __name__ == "__main__":
    main()
