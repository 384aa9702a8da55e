"""FFmpeg and ffprobe utilities."""
import asyncio
import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from segcut.config import settings
from segcut.pipeline.errors import PreconditionFailed, SegCutError
from segcut.pipeline.timecode import format_seconds, parse_time

logger = logging.getLogger(__name__)


@dataclass
class VideoInfo:
    """Video metadata container."""
    duration: float
    width: int
    height: int
    fps: float
    video_codec: str
    audio_codec: Optional[str]
    format_name: str
    bit_rate: Optional[int]
    raw: dict

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "video_codec": self.video_codec,
            "audio_codec": self.audio_codec,
            "format_name": self.format_name,
            "bit_rate": self.bit_rate,
        }


class FFmpegError(SegCutError):
    """FFmpeg related error."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


AUDIO_CODECS = {
    "mp3": "libmp3lame",
    "aac": "aac",
    "m4a": "aac",
    "wav": "pcm_s16le",
    "flac": "flac",
    "ogg": "libvorbis",
    "opus": "libopus",
}


def check_ffmpeg_available() -> bool:
    """Check if ffmpeg is available."""
    return shutil.which(settings.ffmpeg_path) is not None


def check_ffprobe_available() -> bool:
    """Check if ffprobe is available."""
    return shutil.which(settings.ffprobe_path) is not None


async def probe(video_path: str | Path) -> dict:
    """
    Run ffprobe and return its JSON output.

    Raises:
        FFmpegError: If the file is missing or ffprobe fails
    """
    video_path = Path(video_path)
    if not video_path.exists():
        raise FFmpegError(f"Video file not found: {video_path}")

    cmd = [
        settings.ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(video_path)
    ]

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await proc.communicate()

    if proc.returncode != 0:
        raise FFmpegError(f"ffprobe failed: {stderr.decode(errors='ignore')}", stderr.decode(errors="ignore"))

    try:
        return json.loads(stdout.decode())
    except json.JSONDecodeError as e:
        raise FFmpegError(f"Failed to parse ffprobe output: {e}")


def _parse_fps(value: str) -> float:
    if "/" in value:
        num, den = value.split("/")
        return float(num) / float(den) if float(den) > 0 else 0.0
    return float(value)


async def get_video_info(video_path: str | Path) -> VideoInfo:
    """
    Get video metadata using ffprobe.

    Args:
        video_path: Path to video file

    Returns:
        VideoInfo with video metadata

    Raises:
        FFmpegError: If ffprobe fails
    """
    data = await probe(video_path)

    video_stream = None
    audio_stream = None
    for stream in data.get("streams", []):
        if stream.get("codec_type") == "video" and video_stream is None:
            video_stream = stream
        elif stream.get("codec_type") == "audio" and audio_stream is None:
            audio_stream = stream

    if not video_stream:
        raise FFmpegError("No video stream found")

    try:
        fps = _parse_fps(video_stream.get("r_frame_rate", "0/1"))
        duration = float(data.get("format", {}).get("duration", 0))
        if duration == 0:
            duration = float(video_stream.get("duration", 0))
    except (ValueError, ZeroDivisionError) as e:
        raise FFmpegError(f"Failed to parse ffprobe output: {e}")

    return VideoInfo(
        duration=duration,
        width=int(video_stream.get("width", 0)),
        height=int(video_stream.get("height", 0)),
        fps=fps,
        video_codec=video_stream.get("codec_name", "unknown"),
        audio_codec=audio_stream.get("codec_name") if audio_stream else None,
        format_name=data.get("format", {}).get("format_name", "unknown"),
        bit_rate=int(data.get("format", {}).get("bit_rate", 0)) or None,
        raw=data,
    )


def duration_from_probe(data: dict) -> float:
    """
    Read ``format.duration`` from ffprobe output.

    Raises:
        PreconditionFailed: If the field is missing, unparseable or zero
    """
    raw = (data or {}).get("format", {}).get("duration")
    if raw in (None, ""):
        raise PreconditionFailed("Could not determine video duration from video info")
    try:
        duration = parse_time(raw)
    except SegCutError as e:
        raise PreconditionFailed(f"Could not parse video duration {raw!r}: {e}") from e
    if duration <= 0:
        raise PreconditionFailed(f"Video duration must be positive (got {raw!r})")
    return duration


async def probe_duration(video_path: str | Path) -> float:
    """Probe the source and return its duration in seconds."""
    return duration_from_probe(await probe(video_path))


async def run_ffmpeg(args: List[str]) -> str:
    """
    Run ffmpeg with the given arguments.

    Args:
        args: Arguments after the ffmpeg binary

    Returns:
        ffmpeg's stderr output (its log)

    Raises:
        FFmpegError: If ffmpeg exits with a nonzero status
    """
    cmd = [settings.ffmpeg_path, "-hide_banner", "-y", *args]
    logger.debug(f"Running: {' '.join(cmd)}")

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    _, stderr = await proc.communicate()
    output = stderr.decode("utf-8", errors="ignore")

    if proc.returncode != 0:
        raise FFmpegError(f"ffmpeg exited with status {proc.returncode}: {output}", output)

    return output


class FFmpegEncoder:
    """Builds and runs the ffmpeg commands used by the edit pipeline."""

    async def extract_segment(
        self,
        source_path: str | Path,
        output_path: str | Path,
        start_time: float,
        end_time: float
    ) -> Path:
        """Stream-copy [start_time, end_time) of the source into output_path."""
        await run_ffmpeg([
            "-i", str(source_path),
            "-ss", format_seconds(start_time),
            "-to", format_seconds(end_time),
            "-c", "copy",
            str(output_path)
        ])
        return Path(output_path)

    async def concat(self, manifest_path: str | Path, output_path: str | Path) -> Path:
        """Stream-copy the files listed in a concat manifest into output_path."""
        await run_ffmpeg([
            "-f", "concat",
            "-safe", "0",
            "-i", str(manifest_path),
            "-c", "copy",
            str(output_path)
        ])
        return Path(output_path)

    async def trim(
        self,
        source_path: str | Path,
        output_path: str | Path,
        start_time: float,
        end_time: Optional[float] = None,
        duration: Optional[float] = None
    ) -> str:
        """Re-encode a single window of the source, seeking before the input."""
        args = ["-ss", format_seconds(start_time), "-i", str(source_path)]
        if duration is not None:
            args += ["-t", format_seconds(duration)]
        elif end_time is not None:
            args += ["-t", format_seconds(end_time - start_time)]
        args += ["-c:v", "libx264", "-preset", "medium", "-c:a", "aac", str(output_path)]
        return await run_ffmpeg(args)

    async def convert(
        self,
        source_path: str | Path,
        output_path: str | Path,
        options: Sequence[str] = ()
    ) -> str:
        """Transcode the source; ffmpeg picks codecs from the output extension unless options say otherwise."""
        return await run_ffmpeg(["-i", str(source_path), *options, str(output_path)])

    async def extract_audio(self, source_path: str | Path, output_path: str | Path, codec: str) -> str:
        """Drop the video stream and encode the audio with ``codec``."""
        return await run_ffmpeg(["-i", str(source_path), "-vn", "-acodec", codec, str(output_path)])

    async def split(self, source_path: str | Path, output_pattern: str, segment_seconds: float) -> str:
        """Stream-copy the source into consecutive chunks named by ``output_pattern``."""
        return await run_ffmpeg([
            "-i", str(source_path),
            "-f", "segment",
            "-segment_time", format_seconds(segment_seconds),
            "-c", "copy",
            output_pattern
        ])

    async def extract_frames(
        self,
        source_path: str | Path,
        output_dir: str | Path,
        frame_rate: str = "1",
        image_format: str = "jpg",
        quality: int = 95,
        start_time: Optional[float] = None,
        duration: Optional[float] = None
    ) -> str:
        """
        Write frames as ``<output_dir>/%05d.<image_format>``.

        Args:
            source_path: Source video
            output_dir: Existing directory for the images
            frame_rate: ffmpeg fps filter value ("1", "0.5", "1/30")
            image_format: Image extension
            quality: 1-100, mapped to -q:v for jpg and -compression_level for png
            start_time: Seconds to skip before the first frame
            duration: Seconds of video to sample
        """
        args = ["-i", str(source_path)]
        if start_time is not None:
            args += ["-ss", format_seconds(start_time)]
        if duration is not None:
            args += ["-t", format_seconds(duration)]
        args += ["-vf", f"fps={frame_rate}"]

        image_format = image_format.lower()
        if image_format in ("jpg", "jpeg"):
            # mjpeg qscale: 1 is best, 31 worst
            args += ["-q:v", str(max(1, min(31, round(31 - quality / 100 * 30))))]
        elif image_format == "png":
            args += ["-compression_level", str(max(0, min(9, round(9 - quality / 100 * 9))))]

        args.append(str(Path(output_dir) / f"%05d.{image_format}"))
        return await run_ffmpeg(args)
