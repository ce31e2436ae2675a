"""
Collect and validate the user's selection.

Both the command line and the GUI end up here: raw input paths, an output
path and a volume text are turned into a validated `Selection`, or an
`InvalidArguments` error explaining what is wrong.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple, Union

from utils.common_utils import is_video_file

from .errors import InvalidArguments
from .settings import Settings

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Selection:
    """A validated combine request.

    Attributes
    ----------
    inputs : List[Path]
        Input files in concatenation order (never empty).
    output : Path
        Target file; its extension selects the container.
    volume : float
        Factor applied to the first audio track.
    """

    inputs: List[Path]
    output: Path
    volume: float


def parse_volume(value: Union[str, float, int, None], default: float) -> float:
    """Parse a volume factor.

    Parameters
    ----------
    value : str | float | int | None
        Raw value from a flag or a text field. None or blank means `default`.
    default : float
        Factor used when no value is given.

    Returns
    -------
    float
        A finite, non-negative factor.

    Raises
    ------
    InvalidArguments
        If the value is not a number, is NaN/infinite, or is negative.
    """
    if value is None:
        return float(default)
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return float(default)
    else:
        text = value
    try:
        volume = float(text)
    except (TypeError, ValueError):
        raise InvalidArguments(f"音量必须是数字: {value!r}") from None
    if math.isnan(volume) or math.isinf(volume):
        raise InvalidArguments(f"音量必须是有限数字: {value!r}")
    if volume < 0:
        raise InvalidArguments(f"音量不能为负数: {value!r}")
    return volume


def _check_input(raw: PathLike) -> Path:
    p = Path(raw).expanduser()
    if not p.exists():
        raise InvalidArguments(f"输入文件不存在: {p}")
    if not p.is_file():
        raise InvalidArguments(f"输入路径不是文件: {p}")
    if not os.access(p, os.R_OK):
        raise InvalidArguments(f"输入文件不可读: {p}")
    return p


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.resolve() == b.resolve()
    except OSError:
        return False


def gather_selection(
    inputs: Optional[Iterable[PathLike]],
    output: Optional[PathLike],
    volume: Union[str, float, int, None],
    settings: Settings,
) -> Selection:
    """Validate a raw selection coming from either front end.

    Parameters
    ----------
    inputs : Iterable[str | Path] | None
        Input paths in the order they should be concatenated.
    output : str | Path | None
        Output file path.
    volume : str | float | int | None
        Raw volume factor; None or blank uses `settings.default_volume`.
    settings : Settings
        Run settings.

    Returns
    -------
    Selection
        The validated selection.

    Raises
    ------
    InvalidArguments
        On missing inputs, unreadable inputs, a missing or unusable output
        path, or an unparsable volume.
    """
    raw_inputs = [p for p in (inputs or []) if str(p).strip()]
    if not raw_inputs:
        raise InvalidArguments("请至少提供一个输入文件")
    checked = [_check_input(p) for p in raw_inputs]

    if output is None or not str(output).strip():
        raise InvalidArguments("请提供输出文件路径")
    out = Path(str(output).strip()).expanduser()
    if out.is_dir():
        raise InvalidArguments(f"输出路径是目录，请提供文件路径: {out}")
    if not out.suffix:
        raise InvalidArguments(f"输出文件缺少扩展名（用于确定封装格式）: {out}")
    for p in checked:
        if _same_file(p, out):
            raise InvalidArguments(f"输出文件不能与输入文件相同: {out}")

    factor = parse_volume(volume, settings.default_volume)
    return Selection(inputs=checked, output=out, volume=factor)


def merge_inputs(existing: Iterable[PathLike], added: Iterable[PathLike]) -> Tuple[List[str], List[str]]:
    """Append newly imported paths to the list.

    Order is kept: existing entries first, then new ones in selection order.
    Repeats are kept, so a clip can appear more than once just like a
    repeated ``-i`` flag. Imported paths without a known video extension
    are not added.

    Returns
    -------
    Tuple[List[str], List[str]]
        The merged list and the skipped (non-video) paths.
    """
    merged = [str(p) for p in existing]
    skipped: List[str] = []
    for p in added:
        if not str(p).strip():
            continue
        if is_video_file(str(p)):
            merged.append(str(p))
        else:
            skipped.append(str(p))
    return merged, skipped


def gather_from_args(args: Any, settings: Settings) -> Selection:
    """Build a selection from parsed command-line flags.

    `args` is the namespace produced by `combine_tool.cli.build_parser`.
    """
    return gather_selection(
        getattr(args, "input", None),
        getattr(args, "output", None),
        getattr(args, "volume", None),
        settings,
    )


__all__ = ["Selection", "parse_volume", "gather_selection", "merge_inputs", "gather_from_args"]
