"""Scratch artifact allocation and cleanup.

Each operation owns a ``ScratchSpace``. Paths are prefixed with an
operation id so concurrent operations never share a file, and everything
allocated is deleted when the ``with`` block exits, however it exits.
"""
import logging
import shutil
import uuid
from pathlib import Path
from typing import Iterable, List, Optional

from segcut.config import settings

logger = logging.getLogger(__name__)


def _quote_concat_path(path: Path) -> str:
    # concat demuxer: close the quote, emit an escaped quote, reopen
    return str(path).replace("'", "'\\''")


def render_manifest(paths: Iterable[Path]) -> str:
    """Render an ffmpeg concat-demuxer file list, one line per path."""
    return "\n".join(f"file '{_quote_concat_path(Path(p))}'" for p in paths) + "\n"


class ScratchSpace:
    """Operation-scoped temporary files."""

    def __init__(self, base_dir: Optional[Path] = None, operation_id: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.scratch_dir)
        self.operation_id = operation_id or uuid.uuid4().hex
        self._artifacts: List[Path] = []
        self._released = False

    def __enter__(self) -> "ScratchSpace":
        self.base_dir.mkdir(parents=True, exist_ok=True)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    @property
    def artifacts(self) -> List[Path]:
        return list(self._artifacts)

    def allocate(self, role: str, suffix: str = ".mp4") -> Path:
        """
        Reserve a new scratch path.

        Args:
            role: Short label for the artifact (``part``, ``manifest``)
            suffix: File extension including the dot

        Returns:
            Absolute path unique to this operation
        """
        if self._released:
            raise RuntimeError(f"Scratch space {self.operation_id} has already been released")

        path = (self.base_dir / f"segcut-{self.operation_id}-{role}-{len(self._artifacts)}{suffix}").resolve()
        self._artifacts.append(path)
        return path

    def write_manifest(self, paths: Iterable[Path]) -> Path:
        """Write a concat manifest for ``paths`` (order preserved)."""
        manifest_path = self.allocate("manifest", suffix=".txt")
        manifest_path.write_text(render_manifest(paths), encoding="utf-8")
        return manifest_path

    def promote(self, path: Path, destination: str | Path) -> Path:
        """
        Move a finished artifact onto its final path.

        The destination is only replaced once the artifact is complete, so a
        failed step never leaves a half-written file at ``destination``.
        """
        if path not in self._artifacts:
            raise ValueError(f"{path} is not an artifact of operation {self.operation_id}")
        destination = Path(destination)
        shutil.move(str(path), str(destination))
        logger.debug(f"Promoted {path.name} to {destination}")
        return destination

    def release(self) -> None:
        """Delete every allocated artifact. Safe to call more than once."""
        if self._released:
            return
        self._released = True

        for path in self._artifacts:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove scratch file {path}: {e}")
        logger.debug(f"Released {len(self._artifacts)} scratch artifact(s) for operation {self.operation_id}")
