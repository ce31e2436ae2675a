#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
命令行入口测试：退出码与参数映射
"""

import sys
import tempfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from combine_tool import cli
from combine_tool.errors import ProcessingFailed
from combine_tool.runner import RunResult
from combine_tool.settings import ASK, OVERWRITE
from utils.ffmpeg_paths import FFResolution

TOOLS = FFResolution("/usr/bin/ffmpeg", "/usr/bin/ffprobe", "system")


class FakeRunner:
    instances = []

    def __init__(self, timeout=None):
        self.calls = []
        FakeRunner.instances.append(self)

    def run(self, args):
        self.calls.append(list(args))
        Path(args[-1]).write_bytes(b"combined")
        return RunResult(returncode=0, stdout="", stderr="", duration=0.2)


def _inputs(d: Path, *names):
    out = []
    for n in names:
        p = d / n
        p.write_bytes(b"\x00")
        out.append(str(p))
    return out


def test_parser_flags():
    args = cli.build_parser().parse_args(["-i", "a.mkv", "--input", "b.mkv", "-o", "o.mp4", "-v", "1.5", "-c", "-t", "2"])
    assert args.input == ["a.mkv", "b.mkv"]
    assert args.output == "o.mp4"
    assert args.volume == "1.5"
    assert args.cli_mode is True
    assert args.tracks == 2


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert "0.1.0" in capsys.readouterr().out


def test_default_overwrite_policy_depends_on_mode():
    parser = cli.build_parser()
    assert cli.settings_from_args(parser.parse_args(["-c"])).on_exists == OVERWRITE
    assert cli.settings_from_args(parser.parse_args([])).on_exists == ASK
    assert cli.settings_from_args(parser.parse_args(["-c", "--on-exists", "refuse"])).on_exists == "refuse"


def test_cli_success():
    FakeRunner.instances = []
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        a, b = _inputs(d, "a.mkv", "b.mkv")
        out = d / "out.mp4"
        with patch("combine_tool.cli.resolve_tools", return_value=TOOLS), \
             patch("combine_tool.cli.ffmpeg_version", return_value="ffmpeg version 6.1"), \
             patch("combine_tool.workflow.resolve_tools", return_value=TOOLS), \
             patch("combine_tool.workflow.ProcessRunner", FakeRunner):
            code = cli.main(["-c", "-i", a, "-i", b, "-o", str(out), "-v", "1.5", "-t", "2"])
        assert code == 0
        assert out.read_bytes() == b"combined"
        args = FakeRunner.instances[0].calls[0]
        assert "volume=1.5" in args[args.index("-filter_complex") + 1]


def test_missing_output_exits_2_without_subprocess(capsys):
    """缺少 -o：InvalidArguments，退出码 2，不启动任何子进程"""
    with tempfile.TemporaryDirectory() as temp_dir:
        (a,) = _inputs(Path(temp_dir), "a.mkv")
        with patch("combine_tool.runner.subprocess.run") as run, \
             patch("utils.gpu_detect.subprocess.run") as gpu_run:
            code = cli.main(["-c", "-i", a])
        assert code == 2
        run.assert_not_called()
        gpu_run.assert_not_called()
        assert "[error]" in capsys.readouterr().err


def test_no_inputs_exits_2():
    with tempfile.TemporaryDirectory() as temp_dir:
        with patch("combine_tool.runner.subprocess.run") as run:
            code = cli.main(["-c", "-o", str(Path(temp_dir) / "o.mp4")])
        assert code == 2
        run.assert_not_called()


def test_bad_volume_exits_2():
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        code = cli.main(["-c", "-i", a, "-o", str(d / "o.mp4"), "-v", "loud"])
        assert code == 2


def test_missing_ffmpeg_exits_3_and_writes_nothing():
    """找不到 ffmpeg：ToolNotFound，退出码 3，不生成输出文件"""
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        out = d / "o.mp4"
        with patch("combine_tool.runner.resolve_ffmpeg_paths", return_value=FFResolution(None, None, "none")):
            code = cli.main(["-c", "-i", a, "-o", str(out)])
        assert code == 3
        assert sorted(p.name for p in d.iterdir()) == ["a.mkv"]


def test_processing_failure_exits_1():
    class FailingRunner(FakeRunner):
        def run(self, args):
            raise ProcessingFailed("ffmpeg 处理失败（退出码 1）", returncode=1, stderr_tail="moov atom not found")

    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        with patch("combine_tool.cli.resolve_tools", return_value=TOOLS), \
             patch("combine_tool.cli.ffmpeg_version", return_value="ffmpeg version 6.1"), \
             patch("combine_tool.workflow.resolve_tools", return_value=TOOLS), \
             patch("combine_tool.workflow.ProcessRunner", FailingRunner):
            code = cli.main(["-c", "-i", a, "-o", str(d / "o.mp4"), "-t", "1"])
        assert code == 1
        assert not (d / "o.mp4").exists()


def test_gui_mode_delegates_to_run_gui():
    """不带 -c 时打开图形界面，并传入已有输入与音量"""
    fake_gui = MagicMock()
    fake_gui.run_gui.return_value = 0
    with patch.dict(sys.modules, {"gui.main_gui": fake_gui}):
        code = cli.main(["-i", "a.mkv", "-v", "0.5"])
    assert code == 0
    settings = fake_gui.run_gui.call_args[0][0]
    assert settings.on_exists == ASK
    assert fake_gui.run_gui.call_args.kwargs == {"inputs": ["a.mkv"], "volume": "0.5"}


def _combine_patches(runner_cls=FakeRunner):
    return (
        patch("combine_tool.cli.resolve_tools", return_value=TOOLS),
        patch("combine_tool.cli.ffmpeg_version", return_value="ffmpeg version 6.1"),
        patch("combine_tool.workflow.resolve_tools", return_value=TOOLS),
        patch("combine_tool.workflow.ProcessRunner", runner_cls),
    )


def test_unusable_output_directory_exits_2(capsys):
    """输出目录的父路径是普通文件：报告错误并返回 2，而不是抛出异常"""
    FakeRunner.instances = []
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        (d / "blocker").write_bytes(b"")
        p1, p2, p3, p4 = _combine_patches()
        with p1, p2, p3, p4:
            code = cli.main(["-c", "-i", a, "-o", str(d / "blocker" / "o.mp4"), "-t", "1"])
        assert code == 2
        assert all(not r.calls for r in FakeRunner.instances)
        assert "[error]" in capsys.readouterr().err


def test_failed_rename_exits_1_and_cleans_up(capsys):
    FakeRunner.instances = []
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        p1, p2, p3, p4 = _combine_patches()
        with p1, p2, p3, p4, patch("combine_tool.workflow.os.replace", side_effect=PermissionError("denied")):
            code = cli.main(["-c", "-i", a, "-o", str(d / "o.mp4"), "-t", "1"])
        assert code == 1
        assert sorted(p.name for p in d.iterdir()) == ["a.mkv"]
        assert "denied" in capsys.readouterr().err


def test_unwritable_concat_list_exits_1():
    FakeRunner.instances = []
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        p1, p2, p3, p4 = _combine_patches()
        with p1, p2, p3, p4, \
             patch("combine_tool.workflow.CombineCommand.write_concat_list", side_effect=OSError("disk full")):
            code = cli.main(["-c", "-i", a, "-o", str(d / "o.mp4"), "-t", "1"])
        assert code == 1
        assert FakeRunner.instances[0].calls == []


def test_ask_without_terminal_refuses_existing_output():
    """--on-exists ask 且 stdin 不是终端：不覆盖，返回 2，不启动 ffmpeg"""
    FakeRunner.instances = []
    with tempfile.TemporaryDirectory() as temp_dir:
        d = Path(temp_dir)
        (a,) = _inputs(d, "a.mkv")
        out = d / "o.mp4"
        out.write_bytes(b"keep")
        p1, p2, p3, p4 = _combine_patches()
        with p1, p2, p3, p4, patch("combine_tool.cli.sys.stdin") as stdin, \
             patch("builtins.input") as ask:
            stdin.isatty.return_value = False
            code = cli.main(["-c", "-i", a, "-o", str(out), "-t", "1", "--on-exists", "ask"])
        assert code == 2
        ask.assert_not_called()
        assert all(not r.calls for r in FakeRunner.instances)
        assert out.read_bytes() == b"keep"


def test_ask_on_terminal_follows_answer():
    for answer, expected_code, expected_bytes in (("y", 0, b"combined"), ("n", 2, b"keep"), (EOFError(), 2, b"keep")):
        FakeRunner.instances = []
        with tempfile.TemporaryDirectory() as temp_dir:
            d = Path(temp_dir)
            (a,) = _inputs(d, "a.mkv")
            out = d / "o.mp4"
            out.write_bytes(b"keep")
            p1, p2, p3, p4 = _combine_patches()
            with p1, p2, p3, p4, patch("combine_tool.cli.sys.stdin") as stdin, \
                 patch("builtins.input", side_effect=[answer]):
                stdin.isatty.return_value = True
                code = cli.main(["-c", "-i", a, "-o", str(out), "-t", "1", "--on-exists", "ask"])
            assert code == expected_code
            assert out.read_bytes() == expected_bytes


def test_log_level_is_validated(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-c", "--log-level", "LOUD"])
    assert excinfo.value.code == 2
    assert "--log-level" in capsys.readouterr().err
    args = cli.build_parser().parse_args(["--log-level", "debug"])
    assert args.log_level == "DEBUG"
