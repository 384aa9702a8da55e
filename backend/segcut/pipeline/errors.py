"""Error types raised by the segment-editing engine.

Parsing and planning errors mean the caller gave us malformed input and are
never retried. Encoder errors carry ffmpeg's stderr verbatim. Collaborator
errors carry guidance text instead of the raw upstream error.
"""


class SegCutError(Exception):
    """Base class for all segment editing errors."""
    pass


class MissingTime(SegCutError):
    """A time value was required but not supplied."""
    pass


class InvalidTimeFormat(SegCutError, ValueError):
    """A time value could not be parsed into seconds."""
    pass


class InvalidInterval(SegCutError, ValueError):
    """An interval does not satisfy 0 <= start < end."""
    pass


class NoTimestampsFound(SegCutError):
    """Analysis text did not contain a usable pair of timestamps."""
    pass


class UnexpectedTimestampCount(SegCutError):
    """Analysis text contained a different number of windows than required."""
    pass


class EmptyRetainSet(SegCutError):
    """Every part of the video would be removed."""
    pass


class PreconditionFailed(SegCutError):
    """The source duration is missing or unusable."""
    pass


class EncoderFailure(SegCutError):
    """An ffmpeg step of the pipeline failed."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class ExtractionFailed(EncoderFailure):
    """Extracting a retained interval failed."""
    pass


class ConcatenationFailed(EncoderFailure):
    """Merging the extracted intervals failed."""
    pass


class CollaboratorError(SegCutError):
    """The video analysis service could not produce an answer."""
    pass


class CollaboratorTimeout(CollaboratorError):
    """The video analysis service did not answer in time."""
    pass


class CollaboratorRejected(CollaboratorError):
    """The video analysis service refused the request."""
    pass


class PayloadTooLarge(CollaboratorError):
    """The video is too large to send to the analysis service."""
    pass
