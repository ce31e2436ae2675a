#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ffmpeg 命令构建测试
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from combine_tool.command_builder import (
    build_audio_filter,
    build_combine_command,
    build_concat_list,
    concat_list_entry,
    format_volume,
)


def _entries(concat_list: str):
    return [line for line in concat_list.splitlines() if line]


def _abs(p: str) -> str:
    return os.path.abspath(p).replace("\\", "/")


def test_two_inputs_example():
    """a.mkv + b.mkv -> out.mp4，第一音轨音量 1.5"""
    cmd = build_combine_command(["a.mkv", "b.mkv"], "out.mp4", 1.5, "list.txt", audio_tracks=2)
    assert _entries(cmd.concat_list) == [f"file '{_abs('a.mkv')}'", f"file '{_abs('b.mkv')}'"]
    args = cmd.args
    assert args[0] == "ffmpeg"
    assert args[args.index("-f") + 1] == "concat"
    assert args[args.index("-i") + 1] == "list.txt"
    graph = args[args.index("-filter_complex") + 1]
    assert "[0:a:0]volume=1.5[a0]" in graph
    assert "[0:a:1]volume=1.0[a1]" in graph
    assert "[a0][a1]amix=inputs=2" in graph
    assert graph.endswith("[aout]")
    assert "-map" in args and "[aout]" in args and "0:v:0" in args
    assert args[-1] == "out.mp4"
    assert args.count("out.mp4") == 1


def test_every_input_once_and_in_order():
    names = [f"clip_{i}.mp4" for i in (3, 1, 2, 5, 4)]
    cmd = build_combine_command(names, "result.mkv", 1.0, "l.txt")
    assert _entries(cmd.concat_list) == [concat_list_entry(n) for n in names]
    assert cmd.inputs == [Path(n) for n in names]
    assert cmd.args.count("result.mkv") == 1


def test_unity_volume_still_explicit():
    """音量 1.0 仍然生成显式的 volume 滤镜"""
    graph = build_audio_filter(1.0, 1)
    assert graph.startswith("[0:a:0]volume=1.0[a0]")
    assert "amix=inputs=1" in graph


def test_default_volume_equivalent_to_unity():
    a = build_combine_command(["a.mkv"], "o.mp4", 1.0, "l.txt")
    b = build_combine_command(["a.mkv"], "o.mp4", 1, "l.txt")
    assert a.args == b.args
    assert a.concat_list == b.concat_list


def test_single_input_uses_full_pipeline():
    """单个输入同样经过 concat 与混音"""
    cmd = build_combine_command(["only.mkv"], "o.mp4", 0.5, "l.txt")
    assert "concat" in cmd.args
    graph = cmd.args[cmd.args.index("-filter_complex") + 1]
    assert "volume=0.5" in graph and "amix" in graph
    assert len(_entries(cmd.concat_list)) == 1


def test_empty_inputs_is_programming_error():
    with pytest.raises(ValueError):
        build_combine_command([], "o.mp4", 1.0, "l.txt")
    with pytest.raises(ValueError):
        build_audio_filter(1.0, 0)


def test_video_copy_by_default_and_reencode_options():
    copy = build_combine_command(["a.mkv"], "o.mkv", 1.0, "l.txt")
    assert copy.args[copy.args.index("-c:v") + 1] == "copy"
    assert "-movflags" not in copy.args

    x264 = build_combine_command(["a.mkv"], "o.mp4", 1.0, "l.txt", reencode_video=True, quality="tiny")
    assert x264.args[x264.args.index("-c:v") + 1] == "libx264"
    assert x264.args[x264.args.index("-crf") + 1] == "26"
    assert x264.args[x264.args.index("-b:a") + 1] == "96k"
    assert "+faststart" in x264.args

    nvenc = build_combine_command(["a.mkv"], "o.mp4", 1.0, "l.txt", reencode_video=True, use_nvenc=True)
    assert nvenc.args[nvenc.args.index("-c:v") + 1] == "h264_nvenc"


def test_concat_list_quotes_single_quotes():
    entry = concat_list_entry("/videos/it's here.mkv")
    assert entry.endswith("it'\\''s here.mkv'")
    assert entry.startswith("file '")


@pytest.mark.skipif(os.name == "nt", reason="反斜杠在 Windows 上是路径分隔符")
def test_concat_list_keeps_backslash_in_posix_names():
    """POSIX 文件名中的反斜杠是普通字符，必须原样写入"""
    assert concat_list_entry("/tmp/a\\b.mkv") == "file '/tmp/a\\b.mkv'"


def test_concat_list_uses_forward_slashes_on_windows():
    with patch("combine_tool.command_builder.os.name", "nt"), \
         patch("combine_tool.command_builder.os.path.abspath", return_value="C:\\videos\\a.mkv"):
        assert concat_list_entry("a.mkv") == "file 'C:/videos/a.mkv'"


def test_format_volume():
    assert format_volume(1) == "1.0"
    assert format_volume(1.5) == "1.5"
    assert format_volume(0.7) == "0.7"


def test_write_concat_list_and_to_string():
    with tempfile.TemporaryDirectory() as temp_dir:
        lst = Path(temp_dir) / "sub" / "list.txt"
        cmd = build_combine_command(["a b.mkv"], Path(temp_dir) / "o.mp4", 1.0, lst)
        written = cmd.write_concat_list()
        assert written == lst
        assert lst.read_text(encoding="utf-8") == build_concat_list(["a b.mkv"])
        assert cmd.to_string().startswith("ffmpeg -hide_banner")
