"""
Build the single FFmpeg invocation that combines the selected videos.

The inputs are read in order through FFmpeg's concat demuxer (a list file
naming every input), so one input still goes through the same pipeline as
many. Audio track 0 is scaled by the volume factor, every other track is
kept at unity, and all tracks are mixed into one output stream with `amix`.

Example for two inputs carrying two audio tracks each and volume 1.5::

    ffmpeg -hide_banner -y -f concat -safe 0 -i out.concat_list.txt
        -filter_complex "[0:a:0]volume=1.5[a0];[0:a:1]volume=1.0[a1];
                         [a0][a1]amix=inputs=2:duration=longest:dropout_transition=0:normalize=0[aout]"
        -map 0:v:0 -map [aout] -c:v copy -c:a aac -b:a 192k out.mp4
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from .config import resolve_quality

PathLike = Union[str, Path]

# 需要把 moov 提前的封装格式
_FASTSTART_SUFFIXES = {".mp4", ".mov", ".m4v"}


@dataclass
class CombineCommand:
    """Structured description of one FFmpeg run.

    Attributes
    ----------
    args : List[str]
        Full argument vector, starting with the ffmpeg executable.
    concat_list : str
        Content of the concat demuxer list file, one input per line in order.
    list_path : Path
        Where `concat_list` must be written before running `args`.
    output : Path
        File the command writes.
    inputs : List[Path]
        The inputs, in concatenation order.
    """

    args: List[str]
    concat_list: str
    list_path: Path
    output: Path
    inputs: List[Path] = field(default_factory=list)

    def to_string(self) -> str:
        """Return a shell-quoted command line for logs."""
        return shlex.join(self.args)

    def write_concat_list(self) -> Path:
        """Write the concat list file and return its path."""
        self.list_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.list_path, "w", encoding="utf-8") as f:
            f.write(self.concat_list)
        return self.list_path


def format_volume(volume: float) -> str:
    """Render a volume factor for the `volume` filter (1 -> '1.0', 1.5 -> '1.5')."""
    return repr(float(volume))


def concat_list_entry(path: PathLike) -> str:
    """Return one `file '...'` line of a concat demuxer list.

    Paths are made absolute (forward slashes on Windows, where backslash is
    only a separator); single quotes are closed, escaped and reopened as the
    demuxer's quoting requires.
    """
    abspath = os.path.abspath(str(path))
    if os.name == "nt":
        abspath = abspath.replace("\\", "/")
    quoted = abspath.replace("'", "'\\''")
    return f"file '{quoted}'"


def build_concat_list(inputs: Sequence[PathLike]) -> str:
    """Return the concat list text naming every input in order."""
    return "".join(concat_list_entry(p) + "\n" for p in inputs)


def build_audio_filter(volume: float, audio_tracks: int) -> str:
    """Build the filter graph scaling track 0 and mixing all tracks.

    Parameters
    ----------
    volume : float
        Factor for audio track 0. Always emitted, even when it is 1.0.
    audio_tracks : int
        Number of audio tracks in the (concatenated) input; at least 1.

    Returns
    -------
    str
        A `-filter_complex` graph whose output pad is `[aout]`.
    """
    if audio_tracks < 1:
        raise ValueError(f"audio_tracks must be >= 1, got {audio_tracks}")
    chains = []
    labels = []
    for idx in range(audio_tracks):
        factor = volume if idx == 0 else 1.0
        chains.append(f"[0:a:{idx}]volume={format_volume(factor)}[a{idx}]")
        labels.append(f"[a{idx}]")
    chains.append(
        "".join(labels)
        + f"amix=inputs={audio_tracks}:duration=longest:dropout_transition=0:normalize=0[aout]"
    )
    return ";".join(chains)


def _video_codec_args(reencode_video: bool, use_nvenc: bool, quality: str) -> List[str]:
    if not reencode_video:
        return ["-c:v", "copy"]
    nvenc_cq, x264_crf, _ = resolve_quality(quality)
    if use_nvenc:
        return [
            "-c:v",
            "h264_nvenc",
            "-preset",
            "p5",
            "-rc",
            "vbr",
            "-cq",
            nvenc_cq,
            "-b:v",
            "0",
        ]
    return [
        "-c:v",
        "libx264",
        "-crf",
        x264_crf,
        "-preset",
        "medium",
    ]


def build_combine_command(
    inputs: Sequence[PathLike],
    output: PathLike,
    volume: float,
    list_path: PathLike,
    audio_tracks: int = 1,
    ffmpeg_bin: str = "ffmpeg",
    quality: str = "balanced",
    reencode_video: bool = False,
    use_nvenc: bool = False,
) -> CombineCommand:
    """Build the combine invocation.

    Parameters
    ----------
    inputs : Sequence[str | Path]
        Input files in concatenation order; must not be empty.
    output : str | Path
        Output file; appears exactly once, as the last argument.
    volume : float
        Factor applied to audio track 0.
    list_path : str | Path
        Path the concat list will be written to.
    audio_tracks : int
        Audio tracks per input.
    ffmpeg_bin : str
        ffmpeg executable placed at args[0].
    quality : str
        Preset for the audio bitrate and, when re-encoding, the video quality.
    reencode_video : bool
        Encode video instead of stream-copying it.
    use_nvenc : bool
        Encode with h264_nvenc rather than libx264 (only with `reencode_video`).

    Returns
    -------
    CombineCommand
        The argument vector plus the concat list content.

    Raises
    ------
    ValueError
        If `inputs` is empty or `audio_tracks` < 1.
    """
    if not inputs:
        raise ValueError("inputs must not be empty")
    in_paths = [Path(p) for p in inputs]
    out_path = Path(output)
    lst = Path(list_path)
    _, _, aac_bitrate = resolve_quality(quality)

    args = [
        ffmpeg_bin,
        "-hide_banner",
        "-y",
        "-f",
        "concat",
        "-safe",
        "0",
        "-i",
        str(lst),
        "-filter_complex",
        build_audio_filter(volume, audio_tracks),
        "-map",
        "0:v:0",
        "-map",
        "[aout]",
    ]
    args += _video_codec_args(reencode_video, use_nvenc, quality)
    args += [
        "-c:a",
        "aac",
        "-b:a",
        aac_bitrate,
    ]
    if out_path.suffix.lower() in _FASTSTART_SUFFIXES:
        args += ["-movflags", "+faststart"]
    args.append(str(out_path))

    return CombineCommand(
        args=args,
        concat_list=build_concat_list(in_paths),
        list_path=lst,
        output=out_path,
        inputs=in_paths,
    )


__all__ = [
    "CombineCommand",
    "format_volume",
    "concat_list_entry",
    "build_concat_list",
    "build_audio_filter",
    "build_combine_command",
]
