"""
Command-line interface for combining videos.

Without ``-c/--cli-mode`` the GUI is opened (pre-filled with any ``-i`` inputs
and ``-v`` volume). With it, the inputs are validated, ffmpeg is run once and
the outcome is printed; the exit code tells what happened:

- 0: success
- 1: ffmpeg ran and failed
- 2: invalid arguments (including a refused overwrite)
- 3: ffmpeg/ffprobe not found
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from utils.log_utils import setup_logging

from .config import QUALITY_CHOICES, VERSION
from .errors import CombineError, ProcessingFailed
from .gather import gather_from_args
from .runner import ffmpeg_version, resolve_tools
from .settings import ASK, OVERWRITE, OVERWRITE_POLICIES, Settings
from .workflow import WorkflowCallbacks, run_combine

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR")


def _print_log(msg: str) -> None:
    print(msg)


def _print_phase(name: str) -> None:
    print(f"[phase] {name}")


def _confirm_on_tty(path: Path) -> bool:
    """Ask on the terminal whether `path` may be overwritten; False when not interactive."""
    if not sys.stdin or not sys.stdin.isatty():
        return False
    try:
        answer = input(f"输出文件已存在: {path}\n是否覆盖? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def build_parser() -> argparse.ArgumentParser:
    """Build an ArgumentParser for the combine CLI.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    p = argparse.ArgumentParser(
        prog="video-combine",
        description="拼接多个视频并混合音轨（第一条音轨可调整音量），由 ffmpeg 完成实际处理",
    )
    p.add_argument("-i", "--input", action="append", default=None, help="输入视频文件，可重复指定，按顺序拼接")
    p.add_argument("-o", "--output", default=None, help="输出文件路径，扩展名决定封装格式")
    p.add_argument("-v", "--volume", default=None, help="第一条音轨的音量倍数（默认 1.0）")
    p.add_argument("-c", "--cli-mode", action="store_true", help="仅命令行运行，不打开图形界面")
    p.add_argument("-t", "--tracks", type=int, default=None, help="每个输入的音轨数量；省略时用 ffprobe 探测")
    p.add_argument(
        "--on-exists",
        choices=OVERWRITE_POLICIES,
        default=None,
        help="输出文件已存在时的处理方式（命令行默认 overwrite，图形界面默认 ask）",
    )
    p.add_argument("--quality", choices=QUALITY_CHOICES, default="balanced", help="编码质量档位")
    p.add_argument("--reencode", action="store_true", help="重新编码视频（默认直接复制视频流）")
    p.add_argument("--gpu", action="store_true", help="重新编码时启用 NVENC（若可用）")
    p.add_argument("--ffmpeg", default=None, help="ffmpeg 可执行文件路径")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVEL_CHOICES,
        default=None,
        help="日志级别（默认 INFO，环境变量 DEBUG=1 时为 DEBUG）",
    )
    p.add_argument("--log-file", default=None, help="额外写入的日志文件")
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return p


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Map parsed flags onto a Settings object."""
    return Settings(
        on_exists=args.on_exists or (OVERWRITE if args.cli_mode else ASK),
        audio_tracks=args.tracks,
        ffmpeg_path=args.ffmpeg,
        quality=args.quality,
        reencode_video=bool(args.reencode),
        gpu=bool(args.gpu),
    )


def run_cli(args: argparse.Namespace, settings: Settings) -> int:
    """Validate, combine and report; returns the process exit code."""
    try:
        selection = gather_from_args(args, settings)
        tools = resolve_tools(settings.ffmpeg_path)
        try:
            print(f"[ffmpeg] {ffmpeg_version(tools.ffmpeg_path)}")
        except ProcessingFailed as e:
            logger.warning("无法获取 ffmpeg 版本: %s", e)

        cb = WorkflowCallbacks(
            on_log=_print_log,
            on_phase=_print_phase,
            confirm_overwrite=_confirm_on_tty,
        )
        result = run_combine(selection, settings, cb)
    except CombineError as e:
        print(f"[error] {e}", file=sys.stderr)
        logger.debug("combine failed", exc_info=True)
        return e.exit_code

    size = result.output_size
    if size is not None:
        print(f"[done] {result.output} ({size / (1024 * 1024):.1f} MB)")
    else:
        print(f"[done] {result.output}")
    return 0


def main(argv: List[str] | None = None) -> int:
    """CLI entry point.

    Parameters
    ----------
    argv : List[str] | None
        Optional argument list; if None, argparse uses sys.argv.

    Returns
    -------
    int
        Exit code: 0 on success, non-zero on failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    settings = settings_from_args(args)

    if not args.cli_mode:
        # 延迟导入，命令行模式不依赖 Qt
        from gui.main_gui import run_gui

        return run_gui(settings, inputs=args.input or [], volume=args.volume)

    return run_cli(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
