"""Edit service layer.

Caller-facing video editing operations. Segment edits probe the source
duration, plan the retained intervals and hand them to a fresh
``SegmentPipeline``. Whole-file operations (trim, convert, audio and frame
extraction, splitting) go straight to the encoder.
"""
import logging
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from segcut.pipeline import (
    ConcatenationFailed,
    Interval,
    InvalidInterval,
    PipelineResult,
    ScratchSpace,
    SegCutError,
    SegmentPipeline,
    UnexpectedTimestampCount,
    extract_timestamp_pairs,
    pairs_to_intervals,
    parse_time,
)
from segcut.pipeline.timecode import TimeInput
from segcut.services.gemini_service import (
    GeminiVideoAnalyzer,
    keep_event_prompt,
    remove_event_prompt,
)
from segcut.utils.ffmpeg import AUDIO_CODECS, FFmpegEncoder, VideoInfo, get_video_info, probe_duration

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = re.compile(r"\.(mp4|avi|mov|mkv|webm)$", re.IGNORECASE)
SEQUENCE_PLACEHOLDER = re.compile(r"%0?\d*d")
FRAME_RATE = re.compile(r"\d+(\.\d+)?(/\d+(\.\d+)?)?")


@dataclass
class EventEditResult:
    """Result of an edit driven by a natural-language event description."""
    pipeline: PipelineResult
    event_description: str
    analysis: str
    matched: List[Interval]

    def to_dict(self) -> dict:
        data = self.pipeline.to_dict()
        data.update({
            "event_description": self.event_description,
            "analysis": self.analysis,
            "matched": [interval.to_dict() for interval in self.matched],
        })
        return data


def validate_input_path(path: str | Path) -> Path:
    """Return the input path, raising FileNotFoundError if it does not exist."""
    if not path:
        raise ValueError("File path is required")
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    return path


def prepare_output_path(path: str | Path) -> Path:
    """Return the output path with its parent directory created."""
    if not path:
        raise ValueError("File path is required")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_event_output_path(input_path: Path, output_path: str | Path) -> Path:
    """Treat an output path without a video extension as a directory."""
    output_path = Path(output_path)
    if not VIDEO_EXTENSIONS.search(output_path.name):
        output_path = output_path / f"{input_path.stem or 'video'}_edited.mp4"
    return output_path


class EditService:
    """Service for timestamp-based video edits."""

    def __init__(
        self,
        encoder: Optional[FFmpegEncoder] = None,
        analyzer: Optional[GeminiVideoAnalyzer] = None,
        scratch_dir: Optional[Path] = None
    ):
        self.encoder = encoder or FFmpegEncoder()
        self.analyzer = analyzer or GeminiVideoAnalyzer()
        self.scratch_dir = scratch_dir

    def _pipeline(self) -> SegmentPipeline:
        return SegmentPipeline(encoder=self.encoder, scratch_dir=self.scratch_dir)

    async def _staged(self, output_path: Path, encode) -> Path:
        """Run ``encode(path)`` into a scratch file, then move it onto output_path."""
        with ScratchSpace(self.scratch_dir) as scratch:
            staged_path = scratch.allocate("output", suffix=output_path.suffix or ".mp4")
            await encode(staged_path)
            scratch.promote(staged_path, output_path)
        return output_path

    async def get_info(self, video_path: str | Path) -> VideoInfo:
        """Get ffprobe metadata for a video."""
        return await get_video_info(validate_input_path(video_path))

    async def analyze(self, video_path: str | Path, prompt: Optional[str] = None) -> str:
        """Ask the analysis service about a video."""
        video_path = validate_input_path(video_path)
        duration = await probe_duration(video_path)
        return await self.analyzer.analyze(
            video_path,
            prompt or "Describe the contents of this video in detail.",
            duration=duration,
        )

    async def trim(
        self,
        input_path: str | Path,
        output_path: str | Path,
        start_time: TimeInput = 0,
        end_time: TimeInput = None,
        duration: TimeInput = None
    ) -> Path:
        """
        Re-encode a single window of a video.

        Args:
            input_path: Source video
            output_path: Output file
            start_time: Window start
            end_time: Window end (ignored when duration is given)
            duration: Window length
        """
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(output_path)

        start = parse_time(start_time if start_time not in (None, "") else 0)
        end = None
        length = None
        if duration not in (None, ""):
            length = parse_time(duration)
            Interval(start, start + length).validate()
        elif end_time not in (None, ""):
            end = parse_time(end_time)
            Interval(start, end).validate()

        logger.info(f"Trimming {input_path} from {start:.3f}s -> {output_path}")
        return await self._staged(
            output_path,
            lambda path: self.encoder.trim(input_path, path, start, end_time=end, duration=length)
        )

    async def concatenate(self, input_paths: Sequence[str | Path], output_path: str | Path) -> Path:
        """Stream-copy several videos into one, in the given order."""
        if not input_paths:
            raise ValueError("At least one input video is required")
        inputs = [validate_input_path(p).resolve() for p in input_paths]
        output_path = prepare_output_path(output_path)

        with ScratchSpace(self.scratch_dir) as scratch:
            manifest_path = scratch.write_manifest(inputs)
            merged_path = scratch.allocate("output", suffix=output_path.suffix or ".mp4")
            try:
                await self.encoder.concat(manifest_path, merged_path)
            except SegCutError as e:
                raise ConcatenationFailed(f"Failed to concatenate videos: {e}", getattr(e, "stderr", "")) from e
            scratch.promote(merged_path, output_path)

        logger.info(f"Concatenated {len(inputs)} video(s) into {output_path}")
        return output_path

    async def convert(
        self,
        input_path: str | Path,
        output_path: str | Path,
        options: Union[str, Sequence[str], None] = None
    ) -> Path:
        """
        Convert a video to the format implied by the output extension.

        Args:
            input_path: Source video
            output_path: Output file
            options: Extra ffmpeg output options, as a list or one shell-quoted string
        """
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(output_path)
        if isinstance(options, str):
            options = shlex.split(options)

        logger.info(f"Converting {input_path} -> {output_path}")
        options = list(options or [])
        return await self._staged(output_path, lambda path: self.encoder.convert(input_path, path, options))

    async def extract_audio(
        self,
        input_path: str | Path,
        output_path: str | Path,
        audio_format: str = "mp3"
    ) -> Path:
        """Write the audio track of a video to its own file."""
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(output_path)
        audio_format = (audio_format or "mp3").lower()
        codec = AUDIO_CODECS.get(audio_format, audio_format)

        logger.info(f"Extracting {audio_format} audio ({codec}) from {input_path} -> {output_path}")
        return await self._staged(output_path, lambda path: self.encoder.extract_audio(input_path, path, codec))

    async def split(
        self,
        input_path: str | Path,
        output_pattern: str | Path,
        segment_duration: TimeInput
    ) -> List[Path]:
        """
        Split a video into consecutive chunks of ``segment_duration``.

        ``output_pattern`` is an ffmpeg sequence pattern such as
        ``out/part_%03d.mp4``. Chunks are cut on keyframes, so their lengths
        are approximate.

        Returns:
            The chunk files, in order
        """
        input_path = validate_input_path(input_path)
        output_pattern = prepare_output_path(output_pattern)
        if not SEQUENCE_PLACEHOLDER.search(output_pattern.name):
            raise ValueError(
                f"Output pattern must contain a sequence placeholder such as %03d: {output_pattern}"
            )
        seconds = parse_time(segment_duration)
        if seconds <= 0:
            raise InvalidInterval(f"Segment duration must be positive (got {segment_duration!r})")

        logger.info(f"Splitting {input_path} into {seconds:.3f}s chunks -> {output_pattern}")
        await self.encoder.split(input_path, str(output_pattern), seconds)

        chunk_glob = SEQUENCE_PLACEHOLDER.sub("*", output_pattern.name)
        return sorted(output_pattern.parent.glob(chunk_glob))

    async def extract_frames(
        self,
        input_path: str | Path,
        output_dir: str | Path = "output",
        frame_rate: str = "1",
        image_format: str = "jpg",
        quality: int = 95,
        start_time: TimeInput = None,
        duration: TimeInput = None
    ) -> List[Path]:
        """
        Save frames of a video as numbered images.

        Args:
            input_path: Source video
            output_dir: Directory for the images, created if missing
            frame_rate: Frames per second to keep ("1", "0.5", "1/30")
            image_format: Image extension (jpg, png, ...)
            quality: 1-100
            start_time: Where to start sampling
            duration: How much video to sample

        Returns:
            The image files, in order
        """
        input_path = validate_input_path(input_path)
        frame_rate = str(frame_rate).strip()
        if not FRAME_RATE.fullmatch(frame_rate):
            raise ValueError(f'Invalid frame rate "{frame_rate}". Expected a number or a ratio such as 1/30.')
        if not 1 <= quality <= 100:
            raise ValueError(f"Quality must be between 1 and 100 (got {quality})")
        image_format = (image_format or "jpg").lower()
        start = parse_time(start_time) if start_time not in (None, "") else None
        length = parse_time(duration) if duration not in (None, "") else None

        output_dir = Path(output_dir or "output")
        output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Extracting frames at fps={frame_rate} from {input_path} -> {output_dir}")
        await self.encoder.extract_frames(
            input_path, output_dir,
            frame_rate=frame_rate,
            image_format=image_format,
            quality=quality,
            start_time=start,
            duration=length,
        )
        return sorted(output_dir.glob(f"[0-9][0-9][0-9][0-9][0-9].{image_format}"))

    async def remove_segments(
        self,
        input_path: str | Path,
        output_path: str | Path,
        segments: Sequence[Tuple[TimeInput, TimeInput]]
    ) -> PipelineResult:
        """
        Remove explicit time ranges from a video.

        Args:
            input_path: Source video
            output_path: Output file
            segments: (start_time, end_time) pairs to remove, any order

        Returns:
            PipelineResult with the retained intervals
        """
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(output_path)
        if not segments:
            raise ValueError("At least one segment to remove is required")
        remove = [Interval.from_times(start, end) for start, end in segments]

        total_duration = await probe_duration(input_path)
        return await self._pipeline().run_remove(input_path, output_path, remove, total_duration)

    async def remove_segment(
        self,
        input_path: str | Path,
        output_path: str | Path,
        start_time: TimeInput,
        end_time: TimeInput
    ) -> PipelineResult:
        """Remove a single time range from a video."""
        return await self.remove_segments(input_path, output_path, [(start_time, end_time)])

    async def keep_event(
        self,
        input_path: str | Path,
        output_path: str | Path,
        event_description: str
    ) -> EventEditResult:
        """
        Keep only the part of a video where the described event happens.

        Raises:
            NoTimestampsFound: If the analysis names no window
            UnexpectedTimestampCount: If the analysis names more than one window
        """
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(output_path)

        total_duration = await probe_duration(input_path)
        analysis = await self.analyzer.analyze(
            input_path, keep_event_prompt(event_description), duration=total_duration
        )

        pairs = extract_timestamp_pairs(analysis)
        if len(pairs) != 1:
            raise UnexpectedTimestampCount(
                f"Expected exactly one segment to keep, but found {len(pairs)}"
            )
        keep = pairs[0].to_interval()
        logger.info(f"Keeping {keep} for event {event_description!r}")

        result = await self._pipeline().run_keep(input_path, output_path, keep, total_duration)
        return EventEditResult(result, event_description, analysis, [keep])

    async def remove_event(
        self,
        input_path: str | Path,
        output_path: str | Path,
        event_description: str
    ) -> EventEditResult:
        """
        Remove every part of a video where the described event happens.

        An output path without a video extension is treated as a directory and
        ``<input stem>_edited.mp4`` is written inside it.
        """
        input_path = validate_input_path(input_path)
        output_path = prepare_output_path(resolve_event_output_path(input_path, output_path))

        total_duration = await probe_duration(input_path)
        analysis = await self.analyzer.analyze(
            input_path, remove_event_prompt(event_description), duration=total_duration
        )

        remove = pairs_to_intervals(extract_timestamp_pairs(analysis))
        logger.info(f"Removing {len(remove)} segment(s) for event {event_description!r}: {remove}")

        result = await self._pipeline().run_remove(input_path, output_path, remove, total_duration)
        return EventEditResult(result, event_description, analysis, remove)
