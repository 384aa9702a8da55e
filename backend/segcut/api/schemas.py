"""Pydantic schemas for API requests and responses."""
from typing import Optional, List, Union
from pydantic import BaseModel, Field

TimeField = Union[str, float]


# =============================================================================
# Common Schemas
# =============================================================================

class IntervalResponse(BaseModel):
    """A half-open time window in seconds."""
    start: float
    end: float
    duration: float
    start_timestamp: str
    end_timestamp: str


class SegmentSpec(BaseModel):
    """A time range given as HH:MM:SS[.mmm], MM:SS[.mmm] or seconds."""
    start_time: TimeField = Field(..., description="Start of the range")
    end_time: TimeField = Field(..., description="End of the range")


# =============================================================================
# Request Schemas
# =============================================================================

class VideoInfoRequest(BaseModel):
    """Request for video metadata."""
    file_path: str = Field(..., description="Path to the video file")


class AnalyzeRequest(BaseModel):
    """Request to analyze a video with Gemini."""
    file_path: str = Field(..., description="Path to the video file")
    prompt: Optional[str] = Field(None, description="What to ask about the video")


class TrimRequest(BaseModel):
    """Request to trim a video to a single window."""
    input_path: str
    output_path: str
    start_time: TimeField = Field("0", description="Window start")
    end_time: Optional[TimeField] = Field(None, description="Window end")
    duration: Optional[TimeField] = Field(None, description="Window length (overrides end_time)")


class ConcatenateRequest(BaseModel):
    """Request to join videos end to end."""
    input_paths: List[str] = Field(..., min_length=1)
    output_path: str


class ConvertRequest(BaseModel):
    """Request to convert a video to another format."""
    input_path: str
    output_path: str
    options: List[str] = Field(default_factory=list, description="Extra ffmpeg output options")


class ExtractAudioRequest(BaseModel):
    """Request to extract the audio track of a video."""
    input_path: str
    output_path: str
    format: str = Field("mp3", description="Audio format (mp3, aac, wav, flac, ...)")


class SplitRequest(BaseModel):
    """Request to split a video into fixed-length chunks."""
    input_path: str
    output_pattern: str = Field(..., description="Sequence pattern, e.g. out/part_%03d.mp4")
    segment_duration: TimeField = Field(..., description="Length of each chunk")


class ExtractFramesRequest(BaseModel):
    """Request to save video frames as images."""
    input_path: str
    output_dir: str = "output"
    frame_rate: str = Field("1", description="Frames per second, e.g. 1, 0.5 or 1/30")
    format: str = "jpg"
    quality: int = Field(95, ge=1, le=100)
    start_time: Optional[TimeField] = None
    duration: Optional[TimeField] = None


class RemoveSegmentsRequest(BaseModel):
    """Request to cut several time ranges out of a video."""
    input_path: str
    output_path: str
    segments: List[SegmentSpec] = Field(..., min_length=1)


class RemoveSegmentRequest(BaseModel):
    """Request to cut one time range out of a video."""
    input_path: str
    output_path: str
    start_time: TimeField
    end_time: TimeField


class EventRequest(BaseModel):
    """Request to edit a video around a described event."""
    input_path: str
    output_path: str
    event_description: str = Field(..., min_length=1)


# =============================================================================
# Response Schemas
# =============================================================================

class VideoInfoResponse(BaseModel):
    """Video metadata."""
    duration: float
    width: int
    height: int
    fps: float
    video_codec: str
    audio_codec: Optional[str]
    format_name: str
    bit_rate: Optional[int]


class AnalyzeResponse(BaseModel):
    """Gemini's answer about a video."""
    file_path: str
    analysis: str


class OutputResponse(BaseModel):
    """Response for operations producing a single file."""
    output_path: str
    message: str


class FilesResponse(BaseModel):
    """Response for operations producing several files."""
    output_paths: List[str]
    message: str


class EditResponse(BaseModel):
    """Response for segment edits."""
    output_path: str
    message: str
    operation_id: str
    retained: List[IntervalResponse]
    retained_duration: float
    removed_duration: Optional[float] = None


class EventEditResponse(EditResponse):
    """Response for event-driven edits."""
    event_description: str
    analysis: str
    matched: List[IntervalResponse]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    ffmpeg_available: bool
    ffprobe_available: bool
    gemini_configured: bool
    message: Optional[str] = None
