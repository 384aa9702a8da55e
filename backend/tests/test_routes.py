"""Tests for API routes and error mapping."""
import pytest
from fastapi import HTTPException

from fakes import FakeAnalyzer, FakeEncoder
from segcut.api import routes
from segcut.api.schemas import (
    EventRequest,
    ExtractFramesRequest,
    RemoveSegmentRequest,
    RemoveSegmentsRequest,
    SegmentSpec,
    SplitRequest,
)
from segcut.pipeline.errors import (
    CollaboratorError,
    CollaboratorRejected,
    CollaboratorTimeout,
    EmptyRetainSet,
    ExtractionFailed,
    InvalidTimeFormat,
    NoTimestampsFound,
    PayloadTooLarge,
    PreconditionFailed,
)
from segcut.services import edit_service
from segcut.services.edit_service import EditService


@pytest.fixture(autouse=True)
def fixed_duration(monkeypatch):
    async def _fake_probe_duration(path):
        return 30.0

    monkeypatch.setattr(edit_service, "probe_duration", _fake_probe_duration)


@pytest.mark.parametrize(
    "error, status",
    [
        (InvalidTimeFormat("bad"), 400),
        (NoTimestampsFound("none"), 400),
        (EmptyRetainSet("all"), 400),
        (FileNotFoundError("missing"), 404),
        (PreconditionFailed("duration"), 422),
        (PayloadTooLarge("big"), 413),
        (CollaboratorRejected("no"), 502),
        (CollaboratorError("Failed to analyze video: network down"), 502),
        (CollaboratorTimeout("slow"), 504),
        (ExtractionFailed("ffmpeg", "stderr"), 500),
    ],
)
def test_error_status(error, status):
    assert routes.error_status(error) == status


@pytest.mark.asyncio
async def test_remove_segments_route(scratch_dir, source_video, tmp_path):
    encoder = FakeEncoder()
    service = EditService(encoder=encoder, analyzer=FakeAnalyzer(), scratch_dir=scratch_dir)

    response = await routes.remove_segments(
        RemoveSegmentsRequest(
            input_path=str(source_video),
            output_path=str(tmp_path / "out.mp4"),
            segments=[SegmentSpec(start_time="00:00:05", end_time=10)],
        ),
        service=service,
    )

    assert [(r.start, r.end) for r in response.retained] == [(0, 5), (10, 30)]
    assert response.retained[1].end_timestamp == "00:00:30.000"
    assert response.removed_duration == pytest.approx(5.0)
    assert "Successfully removed 1 segment(s)" in response.message


@pytest.mark.asyncio
async def test_remove_segment_route_maps_invalid_time(scratch_dir, source_video, tmp_path):
    service = EditService(encoder=FakeEncoder(), analyzer=FakeAnalyzer(), scratch_dir=scratch_dir)

    with pytest.raises(HTTPException) as exc:
        await routes.remove_segment(
            RemoveSegmentRequest(
                input_path=str(source_video),
                output_path=str(tmp_path / "out.mp4"),
                start_time="ab:cd",
                end_time="10",
            ),
            service=service,
        )

    assert exc.value.status_code == 400
    assert "ab:cd" in exc.value.detail


@pytest.mark.asyncio
async def test_keep_event_route_returns_504_on_timeout(scratch_dir, source_video, tmp_path):
    analyzer = FakeAnalyzer(error=CollaboratorTimeout("The Gemini API request timed out"))
    service = EditService(encoder=FakeEncoder(), analyzer=analyzer, scratch_dir=scratch_dir)

    with pytest.raises(HTTPException) as exc:
        await routes.keep_event(
            EventRequest(
                input_path=str(source_video),
                output_path=str(tmp_path / "out.mp4"),
                event_description="a goal",
            ),
            service=service,
        )

    assert exc.value.status_code == 504


@pytest.mark.asyncio
async def test_remove_event_route(scratch_dir, source_video, tmp_path):
    analyzer = FakeAnalyzer("Barking from 00:00:02 to 00:00:04.")
    service = EditService(encoder=FakeEncoder(), analyzer=analyzer, scratch_dir=scratch_dir)

    response = await routes.remove_event(
        EventRequest(
            input_path=str(source_video),
            output_path=str(tmp_path / "clean.mp4"),
            event_description="the dog barks",
        ),
        service=service,
    )

    assert response.event_description == "the dog barks"
    assert [(m.start, m.end) for m in response.matched] == [(2.0, 4.0)]
    assert response.analysis.startswith("Barking")


@pytest.mark.asyncio
async def test_extraction_failure_route_returns_500_with_stderr(scratch_dir, source_video, tmp_path):
    service = EditService(encoder=FakeEncoder(fail_extract_at=0), analyzer=FakeAnalyzer(), scratch_dir=scratch_dir)

    with pytest.raises(HTTPException) as exc:
        await routes.remove_segment(
            RemoveSegmentRequest(
                input_path=str(source_video),
                output_path=str(tmp_path / "out.mp4"),
                start_time=5,
                end_time=10,
            ),
            service=service,
        )

    assert exc.value.status_code == 500
    assert "Invalid data found" in exc.value.detail
    assert list(scratch_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_health_reports_missing_api_key(monkeypatch):
    monkeypatch.setattr(routes.settings, "google_api_key", "")
    response = await routes.health_check()
    assert response.gemini_configured is False
    assert response.status == "degraded"
    assert "GOOGLE_API_KEY" in response.message


@pytest.mark.asyncio
async def test_split_route_lists_chunks(scratch_dir, source_video, tmp_path):
    service = EditService(encoder=FakeEncoder(), analyzer=FakeAnalyzer(), scratch_dir=scratch_dir)

    response = await routes.split_video(
        SplitRequest(
            input_path=str(source_video),
            output_pattern=str(tmp_path / "part_%02d.mp4"),
            segment_duration=15,
        ),
        service=service,
    )

    assert response.output_paths == [str(tmp_path / "part_00.mp4"), str(tmp_path / "part_01.mp4")]
    assert "2 segment(s)" in response.message


@pytest.mark.asyncio
async def test_extract_frames_route_missing_input_is_404(scratch_dir, tmp_path):
    service = EditService(encoder=FakeEncoder(), analyzer=FakeAnalyzer(), scratch_dir=scratch_dir)

    with pytest.raises(HTTPException) as exc:
        await routes.extract_frames(
            ExtractFramesRequest(input_path=str(tmp_path / "missing.mp4"), output_dir=str(tmp_path / "frames")),
            service=service,
        )

    assert exc.value.status_code == 404
