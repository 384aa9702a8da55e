"""Shared fixtures."""
import pytest


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def source_video(tmp_path):
    path = tmp_path / "source.mp4"
    path.write_bytes(b"\x00" * 1024)
    return path
