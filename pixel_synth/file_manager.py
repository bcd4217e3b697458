"""File management utilities for the Gradio interface.

This module provides a per-session file manager that handles temporary file
creation, tracking, and cleanup for generated MIDI files and their WAV
previews, so files are overwritten instead of accumulating.
"""

import logging
import os
import random
import re
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def track_filename(title: str | None = None, extension: str = ".mid") -> str:
    """Build a download filename for a generated track.

    Args:
        title: Optional track title; reduced to a safe upper-case slug.
        extension: File extension including the dot.

    Returns:
        A name such as ``"NEON_RAIN.mid"``, or ``"DARK_SYNTH_1234.mid"`` when
        no usable title is given.
    """
    slug = re.sub(r"[^A-Za-z0-9]+", "_", title or "").strip("_").upper()
    if not slug:
        slug = f"DARK_SYNTH_{random.randrange(9999)}"
    return f"{slug}{extension}"


class GradioFileManager:
    """Manages temporary files for a Gradio session.

    Implements a single-active-file pattern where only one file of each type
    (MIDI, WAV) exists at any time. Files are overwritten on parameter
    changes to prevent accumulation.

    Attributes:
        session_dir: Path to the session's temporary directory.
        current_files: Dictionary tracking current active files by type.
    """

    def __init__(self, session_id: str | None = None):
        """Initialize the file manager with an optional session ID.

        Args:
            session_id: Optional unique session identifier. If None, a fresh
                       uniquely named directory is created.
        """
        # Use Gradio's temp directory if available, otherwise system temp
        base_dir = os.environ.get("GRADIO_TEMP_DIR", tempfile.gettempdir())

        if session_id:
            self.session_dir = Path(base_dir) / f"pixel-synth-{session_id}"
        else:
            self.session_dir = Path(tempfile.mkdtemp(prefix="pixel-synth-", dir=base_dir))

        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.current_files: dict[str, Path] = {}

    def get_temp_path(self, file_type: str, filename: str) -> str:
        """Get the path for the active file of the specified type.

        A new filename for a type replaces (and deletes) the previous file of
        that type, so each type has at most one file on disk.

        Args:
            file_type: Type of file (e.g., "midi", "wav").
            filename: Base name of the file, including extension.

        Returns:
            Absolute path to the temporary file as a string.
        """
        file_path = self.session_dir / filename
        previous = self.current_files.get(file_type)
        if previous is not None and previous != file_path:
            self.cleanup_file(file_type)

        self.current_files[file_type] = file_path
        return str(file_path)

    def write_file(self, file_type: str, content: bytes, filename: str) -> str:
        """Write content to the active file of a type, overwriting it.

        Args:
            file_type: Type of file (e.g., "midi").
            content: Binary content to write to the file.
            filename: Base name of the file, including extension.

        Returns:
            Path to the written file as a string.
        """
        file_path = self.get_temp_path(file_type, filename)

        # Write atomically to prevent partial reads
        temp_path = file_path + ".tmp"
        with open(temp_path, "wb") as f:
            f.write(content)
        os.replace(temp_path, file_path)

        return file_path

    def track(self, file_type: str, path: str) -> None:
        """Register a file produced elsewhere (e.g. a WAV render) for cleanup."""
        previous = self.current_files.get(file_type)
        if previous is not None and previous != Path(path):
            self.cleanup_file(file_type)
        self.current_files[file_type] = Path(path)

    def cleanup_file(self, file_type: str) -> None:
        """Remove a specific file type if it exists.

        Args:
            file_type: Type of file to remove.
        """
        file_path = self.current_files.pop(file_type, None)
        if file_path is not None and file_path.exists():
            try:
                file_path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove {file_path}: {e}")

    def cleanup_all(self) -> None:
        """Remove all tracked files and the session directory.

        Safe to call multiple times.
        """
        for file_type in list(self.current_files):
            self.cleanup_file(file_type)

        if self.session_dir.exists():
            try:
                self.session_dir.rmdir()
            except OSError as e:
                logger.warning(f"Could not remove {self.session_dir}: {e}")
