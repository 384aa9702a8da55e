"""Segment pipeline runner.

Extracts each retained interval with ffmpeg, writes a concat manifest and
merges the extracts into the output file:

    PLANNING -> EXTRACTING -> CONCATENATING -> DONE
                         (any) -> FAILED

Encoder calls are awaited one at a time. The merge is written to a scratch
file and moved onto the output path only after it succeeds, so a failed run
never leaves partial output.
"""
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import ConcatenationFailed, EmptyRetainSet, ExtractionFailed, SegCutError
from .intervals import Interval
from .planner import plan_keep, plan_retain
from .scratch import ScratchSpace

logger = logging.getLogger(__name__)


class Encoder(Protocol):
    """The subset of FFmpegEncoder the pipeline drives."""

    async def extract_segment(self, source_path, output_path, start_time: float, end_time: float): ...

    async def concat(self, manifest_path, output_path): ...


class PipelineState(str, enum.Enum):
    """Pipeline phase."""
    PLANNING = "planning"
    EXTRACTING = "extracting"
    CONCATENATING = "concatenating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Result from a pipeline run."""
    output_path: Path
    retained: List[Interval]
    total_duration: Optional[float]
    operation_id: str

    @property
    def retained_duration(self) -> float:
        return sum(interval.duration for interval in self.retained)

    @property
    def removed_duration(self) -> Optional[float]:
        if self.total_duration is None:
            return None
        return max(0.0, self.total_duration - self.retained_duration)

    def to_dict(self) -> dict:
        return {
            "output_path": str(self.output_path),
            "retained": [interval.to_dict() for interval in self.retained],
            "retained_duration": self.retained_duration,
            "removed_duration": self.removed_duration,
            "operation_id": self.operation_id,
        }


@dataclass
class SegmentPipeline:
    """One remove/keep operation over a single source video."""
    encoder: Encoder
    scratch_dir: Optional[Path] = None
    state: PipelineState = PipelineState.PLANNING
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.PLANNING])

    def _transition(self, state: PipelineState):
        logger.debug(f"Pipeline {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _plan(self, planner, *args) -> List[Interval]:
        try:
            return planner(*args)
        except SegCutError:
            self._transition(PipelineState.FAILED)
            raise

    async def run_remove(
        self,
        source_path: str | Path,
        output_path: str | Path,
        remove: List[Interval],
        total_duration: float
    ) -> PipelineResult:
        """Remove the given intervals from the source."""
        retain = self._plan(plan_retain, remove, total_duration)
        return await self.run(source_path, output_path, retain, total_duration)

    async def run_keep(
        self,
        source_path: str | Path,
        output_path: str | Path,
        keep: Interval,
        total_duration: float
    ) -> PipelineResult:
        """Keep only the given interval of the source."""
        retain = self._plan(plan_keep, keep, total_duration)
        return await self.run(source_path, output_path, retain, total_duration)

    async def run(
        self,
        source_path: str | Path,
        output_path: str | Path,
        retain: List[Interval],
        total_duration: Optional[float] = None
    ) -> PipelineResult:
        """
        Extract and merge already-planned retain intervals.

        Args:
            source_path: Source video
            output_path: Final output file
            retain: Ordered retain intervals
            total_duration: Source duration, for reporting

        Returns:
            PipelineResult describing the output

        Raises:
            ExtractionFailed: If any extraction fails
            ConcatenationFailed: If the merge fails
        """
        if self.state != PipelineState.PLANNING:
            raise RuntimeError(f"Pipeline already ran (state={self.state.value})")
        if not retain:
            self._transition(PipelineState.FAILED)
            raise EmptyRetainSet("No segments to keep; the entire video would be removed")

        output_path = Path(output_path)

        with ScratchSpace(self.scratch_dir) as scratch:
            try:
                self._transition(PipelineState.EXTRACTING)
                parts = []
                for index, interval in enumerate(retain):
                    part_path = scratch.allocate("part", suffix=output_path.suffix or ".mp4")
                    logger.info(
                        f"[{scratch.operation_id}] Extracting part {index + 1}/{len(retain)}: "
                        f"{interval.start:.3f}s-{interval.end:.3f}s"
                    )
                    try:
                        await self.encoder.extract_segment(source_path, part_path, interval.start, interval.end)
                    except SegCutError as e:
                        raise ExtractionFailed(
                            f"Failed to extract {interval.start:.3f}s-{interval.end:.3f}s: {e}",
                            getattr(e, "stderr", ""),
                        ) from e
                    parts.append(part_path)

                self._transition(PipelineState.CONCATENATING)
                manifest_path = scratch.write_manifest(parts)
                merged_path = scratch.allocate("output", suffix=output_path.suffix or ".mp4")
                logger.info(f"[{scratch.operation_id}] Concatenating {len(parts)} part(s) into {output_path}")
                try:
                    await self.encoder.concat(manifest_path, merged_path)
                except SegCutError as e:
                    raise ConcatenationFailed(f"Failed to concatenate segments: {e}", getattr(e, "stderr", "")) from e
                scratch.promote(merged_path, output_path)

            except BaseException:
                self._transition(PipelineState.FAILED)
                raise

        self._transition(PipelineState.DONE)
        return PipelineResult(
            output_path=output_path,
            retained=list(retain),
            total_duration=total_duration,
            operation_id=scratch.operation_id,
        )
