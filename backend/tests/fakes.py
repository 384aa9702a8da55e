"""Test doubles for the encoder and the video analysis service."""
from pathlib import Path

from segcut.utils.ffmpeg import FFmpegError


class FakeEncoder:
    """Records ffmpeg calls and writes placeholder files instead of encoding."""

    def __init__(self, fail_extract_at=None, fail_concat=False):
        self.fail_extract_at = fail_extract_at
        self.fail_concat = fail_concat
        self.extract_calls = []
        self.concat_calls = []
        self.manifests = []
        self.trim_calls = []
        self.convert_calls = []
        self.audio_calls = []
        self.split_calls = []
        self.frame_calls = []

    async def extract_segment(self, source_path, output_path, start_time, end_time):
        if self.fail_extract_at is not None and len(self.extract_calls) == self.fail_extract_at:
            self.extract_calls.append((start_time, end_time))
            Path(output_path).write_bytes(b"partial")
            raise FFmpegError("ffmpeg exited with status 1: Invalid data found", "Invalid data found")
        self.extract_calls.append((start_time, end_time))
        Path(output_path).write_bytes(f"{start_time}-{end_time}".encode())
        return Path(output_path)

    async def concat(self, manifest_path, output_path):
        self.concat_calls.append((Path(manifest_path), Path(output_path)))
        self.manifests.append(Path(manifest_path).read_text(encoding="utf-8"))
        if self.fail_concat:
            Path(output_path).write_bytes(b"half-written")
            raise FFmpegError("ffmpeg exited with status 1: concat failed", "concat failed")
        Path(output_path).write_bytes(b"merged")
        return Path(output_path)

    async def trim(self, source_path, output_path, start_time, end_time=None, duration=None):
        self.trim_calls.append((start_time, end_time, duration))
        Path(output_path).write_bytes(b"trimmed")
        return ""

    async def convert(self, source_path, output_path, options=()):
        self.convert_calls.append((Path(output_path), list(options)))
        Path(output_path).write_bytes(b"converted")
        return ""

    async def extract_audio(self, source_path, output_path, codec):
        self.audio_calls.append((Path(output_path), codec))
        Path(output_path).write_bytes(b"audio")
        return ""

    async def split(self, source_path, output_pattern, segment_seconds):
        self.split_calls.append((output_pattern, segment_seconds))
        for index in range(2):
            Path(output_pattern % index).write_bytes(b"chunk")
        return ""

    async def extract_frames(self, source_path, output_dir, **kwargs):
        self.frame_calls.append((Path(output_dir), kwargs))
        image_format = kwargs["image_format"]
        for index in (1, 2):
            (Path(output_dir) / f"{index:05d}.{image_format}").write_bytes(b"frame")
        return ""


class FakeAnalyzer:
    """Returns canned analysis text."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def analyze(self, video_path, prompt, duration=None):
        self.prompts.append((Path(video_path), prompt, duration))
        if self.error is not None:
            raise self.error
        return self.text
