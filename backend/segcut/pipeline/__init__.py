"""Segment-editing engine: time parsing, interval planning, scratch files and the extract/concat pipeline."""
from .errors import (
    SegCutError,
    MissingTime,
    InvalidTimeFormat,
    InvalidInterval,
    NoTimestampsFound,
    UnexpectedTimestampCount,
    EmptyRetainSet,
    PreconditionFailed,
    ExtractionFailed,
    ConcatenationFailed,
    CollaboratorError,
    CollaboratorTimeout,
    CollaboratorRejected,
    PayloadTooLarge,
)
from .timecode import parse_time, format_timestamp, format_seconds
from .intervals import Interval, TimestampPair
from .timestamps import extract_timestamp_pairs, pairs_to_intervals
from .planner import plan_retain, plan_keep, synthesize_keep_removals
from .scratch import ScratchSpace
from .runner import SegmentPipeline, PipelineState, PipelineResult

__all__ = [
    "SegCutError",
    "MissingTime",
    "InvalidTimeFormat",
    "InvalidInterval",
    "NoTimestampsFound",
    "UnexpectedTimestampCount",
    "EmptyRetainSet",
    "PreconditionFailed",
    "ExtractionFailed",
    "ConcatenationFailed",
    "CollaboratorError",
    "CollaboratorTimeout",
    "CollaboratorRejected",
    "PayloadTooLarge",
    "parse_time",
    "format_timestamp",
    "format_seconds",
    "Interval",
    "TimestampPair",
    "extract_timestamp_pairs",
    "pairs_to_intervals",
    "plan_retain",
    "plan_keep",
    "synthesize_keep_removals",
    "ScratchSpace",
    "SegmentPipeline",
    "PipelineState",
    "PipelineResult",
]
