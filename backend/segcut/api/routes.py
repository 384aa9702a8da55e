"""API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from segcut.config import settings
from segcut.pipeline.errors import (
    CollaboratorError,
    CollaboratorRejected,
    CollaboratorTimeout,
    EncoderFailure,
    PayloadTooLarge,
    PreconditionFailed,
    SegCutError,
)
from segcut.services.edit_service import EditService
from segcut.utils.ffmpeg import FFmpegError, check_ffmpeg_available, check_ffprobe_available
from segcut.api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ConcatenateRequest,
    ConvertRequest,
    EditResponse,
    EventEditResponse,
    EventRequest,
    ExtractAudioRequest,
    ExtractFramesRequest,
    FilesResponse,
    HealthResponse,
    OutputResponse,
    RemoveSegmentRequest,
    RemoveSegmentsRequest,
    SplitRequest,
    TrimRequest,
    VideoInfoRequest,
    VideoInfoResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_edit_service() -> EditService:
    """Dependency to get an edit service."""
    return EditService()


def error_status(error: Exception) -> int:
    """HTTP status for an editing error."""
    if isinstance(error, FileNotFoundError):
        return 404
    if isinstance(error, PayloadTooLarge):
        return 413
    if isinstance(error, CollaboratorTimeout):
        return 504
    if isinstance(error, (CollaboratorRejected, CollaboratorError)):
        return 502
    if isinstance(error, PreconditionFailed):
        return 422
    if isinstance(error, (EncoderFailure, FFmpegError)):
        return 500
    return 400


def to_http_exception(error: Exception) -> HTTPException:
    status_code = error_status(error)
    if status_code >= 500:
        logger.error(f"Edit failed: {error}")
    else:
        logger.info(f"Edit rejected ({status_code}): {error}")
    return HTTPException(status_code=status_code, detail=str(error))


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and dependencies."""
    ffmpeg_ok = check_ffmpeg_available()
    ffprobe_ok = check_ffprobe_available()
    gemini_ok = bool(settings.google_api_key.strip())

    missing = []
    if not ffmpeg_ok:
        missing.append("ffmpeg")
    if not ffprobe_ok:
        missing.append("ffprobe")
    if not gemini_ok:
        missing.append("GOOGLE_API_KEY")

    message = None
    if missing:
        message = f"Missing dependencies: {', '.join(missing)}"

    return HealthResponse(
        status="healthy" if not missing else "degraded",
        ffmpeg_available=ffmpeg_ok,
        ffprobe_available=ffprobe_ok,
        gemini_configured=gemini_ok,
        message=message
    )


# =============================================================================
# Video
# =============================================================================

@router.post("/video/info", response_model=VideoInfoResponse)
async def video_info(data: VideoInfoRequest, service: EditService = Depends(get_edit_service)):
    """Get video metadata."""
    try:
        info = await service.get_info(data.file_path)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return VideoInfoResponse(**info.to_dict())


@router.post("/video/analyze", response_model=AnalyzeResponse)
async def analyze_video(data: AnalyzeRequest, service: EditService = Depends(get_edit_service)):
    """Describe a video with Gemini."""
    try:
        analysis = await service.analyze(data.file_path, data.prompt)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return AnalyzeResponse(file_path=data.file_path, analysis=analysis)


@router.post("/video/trim", response_model=OutputResponse)
async def trim_video(data: TrimRequest, service: EditService = Depends(get_edit_service)):
    """Trim a video to one window."""
    try:
        output = await service.trim(
            data.input_path, data.output_path,
            start_time=data.start_time,
            end_time=data.end_time,
            duration=data.duration
        )
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return OutputResponse(
        output_path=str(output),
        message=f"Video trimming completed: {data.input_path} -> {output}"
    )


@router.post("/video/concatenate", response_model=OutputResponse)
async def concatenate_videos(data: ConcatenateRequest, service: EditService = Depends(get_edit_service)):
    """Join videos end to end."""
    try:
        output = await service.concatenate(data.input_paths, data.output_path)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return OutputResponse(
        output_path=str(output),
        message=f"Successfully concatenated {len(data.input_paths)} videos to {output}"
    )


@router.post("/video/convert", response_model=OutputResponse)
async def convert_video(data: ConvertRequest, service: EditService = Depends(get_edit_service)):
    """Convert a video to another format."""
    try:
        output = await service.convert(data.input_path, data.output_path, data.options)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return OutputResponse(
        output_path=str(output),
        message=f"Video conversion completed: {data.input_path} -> {output}"
    )


@router.post("/video/extract-audio", response_model=OutputResponse)
async def extract_audio(data: ExtractAudioRequest, service: EditService = Depends(get_edit_service)):
    """Extract the audio track of a video."""
    try:
        output = await service.extract_audio(data.input_path, data.output_path, data.format)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return OutputResponse(
        output_path=str(output),
        message=f"Audio extraction completed: {data.input_path} -> {output}"
    )


@router.post("/video/split", response_model=FilesResponse)
async def split_video(data: SplitRequest, service: EditService = Depends(get_edit_service)):
    """Split a video into fixed-length chunks."""
    try:
        chunks = await service.split(data.input_path, data.output_pattern, data.segment_duration)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return FilesResponse(
        output_paths=[str(path) for path in chunks],
        message=f"Successfully split video into {len(chunks)} segment(s) using pattern {data.output_pattern}"
    )


@router.post("/video/extract-frames", response_model=FilesResponse)
async def extract_frames(data: ExtractFramesRequest, service: EditService = Depends(get_edit_service)):
    """Save frames of a video as images."""
    try:
        frames = await service.extract_frames(
            data.input_path, data.output_dir,
            frame_rate=data.frame_rate,
            image_format=data.format,
            quality=data.quality,
            start_time=data.start_time,
            duration=data.duration
        )
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return FilesResponse(
        output_paths=[str(path) for path in frames],
        message=f"Extracted {len(frames)} frame(s) from {data.input_path} to {data.output_dir}"
    )


@router.post("/video/remove-segments", response_model=EditResponse)
async def remove_segments(data: RemoveSegmentsRequest, service: EditService = Depends(get_edit_service)):
    """Cut several time ranges out of a video."""
    try:
        result = await service.remove_segments(
            data.input_path, data.output_path,
            [(segment.start_time, segment.end_time) for segment in data.segments]
        )
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return EditResponse(
        message=f"Successfully removed {len(data.segments)} segment(s) from {data.input_path}. "
                f"Output saved to {result.output_path}",
        **result.to_dict()
    )


@router.post("/video/remove-segment", response_model=EditResponse)
async def remove_segment(data: RemoveSegmentRequest, service: EditService = Depends(get_edit_service)):
    """Cut one time range out of a video."""
    try:
        result = await service.remove_segment(
            data.input_path, data.output_path, data.start_time, data.end_time
        )
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return EditResponse(
        message=f"Successfully removed segment ({data.start_time} to {data.end_time}) from {data.input_path}. "
                f"Output saved to {result.output_path}",
        **result.to_dict()
    )


@router.post("/video/keep-event", response_model=EventEditResponse)
async def keep_event(data: EventRequest, service: EditService = Depends(get_edit_service)):
    """Keep only the part of a video where an event happens."""
    try:
        result = await service.keep_event(data.input_path, data.output_path, data.event_description)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return EventEditResponse(
        message=f'Successfully kept the segment for event "{data.event_description}" from {data.input_path}. '
                f"Output saved to {result.pipeline.output_path}",
        **result.to_dict()
    )


@router.post("/video/remove-event", response_model=EventEditResponse)
async def remove_event(data: EventRequest, service: EditService = Depends(get_edit_service)):
    """Remove every part of a video where an event happens."""
    try:
        result = await service.remove_event(data.input_path, data.output_path, data.event_description)
    except (SegCutError, ValueError, FileNotFoundError) as e:
        raise to_http_exception(e)
    return EventEditResponse(
        message=f'Successfully removed segments for event "{data.event_description}" from {data.input_path}. '
                f"Output saved to {result.pipeline.output_path}",
        **result.to_dict()
    )
