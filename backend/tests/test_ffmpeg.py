"""Tests for ffmpeg command construction and probe parsing."""
import pytest

from segcut.pipeline.errors import PreconditionFailed
from segcut.utils import ffmpeg
from segcut.utils.ffmpeg import FFmpegEncoder, FFmpegError, duration_from_probe


class _FakeProcess:
    def __init__(self, returncode=0, stdout=b"", stderr=b""):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr


@pytest.fixture
def recorded_commands(monkeypatch):
    commands = []

    async def _fake_run(args):
        commands.append(args)
        return ""

    monkeypatch.setattr(ffmpeg, "run_ffmpeg", _fake_run)
    return commands


class TestDurationFromProbe:
    """Tests for reading format.duration."""

    def test_reads_format_duration(self):
        assert duration_from_probe({"format": {"duration": "30.016000"}}) == pytest.approx(30.016)

    @pytest.mark.parametrize("data", [{}, {"format": {}}, {"format": {"duration": ""}}, None])
    def test_missing_duration(self, data):
        with pytest.raises(PreconditionFailed):
            duration_from_probe(data)

    def test_unparseable_duration(self):
        with pytest.raises(PreconditionFailed, match="N/A"):
            duration_from_probe({"format": {"duration": "N/A"}})

    def test_zero_duration(self):
        with pytest.raises(PreconditionFailed):
            duration_from_probe({"format": {"duration": "0.000000"}})


@pytest.mark.asyncio
async def test_extract_segment_is_stream_copy_bounded(recorded_commands):
    await FFmpegEncoder().extract_segment("in.mp4", "part.mp4", 10.0, 30.5)
    assert recorded_commands == [
        ["-i", "in.mp4", "-ss", "10", "-to", "30.5", "-c", "copy", "part.mp4"]
    ]


@pytest.mark.asyncio
async def test_concat_uses_concat_demuxer(recorded_commands):
    await FFmpegEncoder().concat("list.txt", "out.mp4")
    assert recorded_commands == [
        ["-f", "concat", "-safe", "0", "-i", "list.txt", "-c", "copy", "out.mp4"]
    ]


@pytest.mark.asyncio
async def test_trim_converts_end_to_duration(recorded_commands):
    await FFmpegEncoder().trim("in.mp4", "out.mp4", 5.0, end_time=12.5)
    args = recorded_commands[0]
    assert args[:4] == ["-ss", "5", "-i", "in.mp4"]
    assert args[4:6] == ["-t", "7.5"]


@pytest.mark.asyncio
async def test_convert_passes_options_before_output(recorded_commands):
    await FFmpegEncoder().convert("in.mov", "out.webm", ["-c:v", "libvpx-vp9", "-b:v", "1M"])
    assert recorded_commands == [["-i", "in.mov", "-c:v", "libvpx-vp9", "-b:v", "1M", "out.webm"]]


@pytest.mark.asyncio
async def test_extract_audio_drops_video(recorded_commands):
    await FFmpegEncoder().extract_audio("in.mp4", "out.mp3", "libmp3lame")
    assert recorded_commands == [["-i", "in.mp4", "-vn", "-acodec", "libmp3lame", "out.mp3"]]


@pytest.mark.asyncio
async def test_split_uses_segment_muxer(recorded_commands):
    await FFmpegEncoder().split("in.mp4", "part_%03d.mp4", 60.0)
    assert recorded_commands == [
        ["-i", "in.mp4", "-f", "segment", "-segment_time", "60", "-c", "copy", "part_%03d.mp4"]
    ]


class TestExtractFrames:
    """Tests for frame extraction commands."""

    @pytest.mark.asyncio
    async def test_jpg_quality_maps_to_qscale(self, recorded_commands, tmp_path):
        await FFmpegEncoder().extract_frames("in.mp4", tmp_path, frame_rate="1/30", quality=50)
        args = recorded_commands[0]
        assert args[:2] == ["-i", "in.mp4"]
        assert args[args.index("-vf") + 1] == "fps=1/30"
        assert args[args.index("-q:v") + 1] == "16"
        assert args[-1] == str(tmp_path / "%05d.jpg")

    @pytest.mark.asyncio
    async def test_png_quality_maps_to_compression(self, recorded_commands, tmp_path):
        await FFmpegEncoder().extract_frames("in.mp4", tmp_path, image_format="PNG", quality=100)
        args = recorded_commands[0]
        assert args[args.index("-compression_level") + 1] == "0"
        assert "-q:v" not in args
        assert args[-1].endswith("%05d.png")

    @pytest.mark.asyncio
    async def test_window(self, recorded_commands, tmp_path):
        await FFmpegEncoder().extract_frames("in.mp4", tmp_path, start_time=5.0, duration=2.5)
        args = recorded_commands[0]
        assert args[2:6] == ["-ss", "5", "-t", "2.5"]


@pytest.mark.asyncio
async def test_run_ffmpeg_surfaces_stderr(monkeypatch):
    async def _fake_exec(*cmd, **kwargs):
        return _FakeProcess(returncode=1, stderr=b"moov atom not found")

    monkeypatch.setattr(ffmpeg.asyncio, "create_subprocess_exec", _fake_exec)

    with pytest.raises(FFmpegError) as exc:
        await ffmpeg.run_ffmpeg(["-i", "broken.mp4", "out.mp4"])
    assert exc.value.stderr == "moov atom not found"
    assert "moov atom not found" in str(exc.value)


@pytest.mark.asyncio
async def test_run_ffmpeg_passes_overwrite_flag(monkeypatch):
    seen = []

    async def _fake_exec(*cmd, **kwargs):
        seen.append(cmd)
        return _FakeProcess(stderr=b"ok")

    monkeypatch.setattr(ffmpeg.asyncio, "create_subprocess_exec", _fake_exec)

    assert await ffmpeg.run_ffmpeg(["-i", "a.mp4", "b.mp4"]) == "ok"
    assert seen[0][0] == ffmpeg.settings.ffmpeg_path
    assert "-y" in seen[0]


@pytest.mark.asyncio
async def test_get_video_info_parses_probe(monkeypatch, source_video):
    async def _fake_probe(path):
        return {
            "format": {"duration": "12.5", "format_name": "mov,mp4", "bit_rate": "1000"},
            "streams": [
                {"codec_type": "video", "codec_name": "h264", "width": 1920, "height": 1080, "r_frame_rate": "30000/1001"},
                {"codec_type": "audio", "codec_name": "aac"},
            ],
        }

    monkeypatch.setattr(ffmpeg, "probe", _fake_probe)
    info = await ffmpeg.get_video_info(source_video)

    assert info.duration == 12.5
    assert (info.width, info.height) == (1920, 1080)
    assert info.fps == pytest.approx(29.97, rel=1e-3)
    assert info.audio_codec == "aac"


@pytest.mark.asyncio
async def test_probe_missing_file(tmp_path):
    with pytest.raises(FFmpegError, match="not found"):
        await ffmpeg.probe(tmp_path / "missing.mp4")
