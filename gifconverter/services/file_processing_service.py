"""
Provides services for discovering source files and managing the output tree.

This module contains the filesystem side of the pipeline:
- `ProcessFiles` finds every file under the input folder.
- `output_path_for` and `processed_path_for` map a source file onto the
  mirrored output tree.
- `FilesystemGateway` serializes directory creation, writes and moves across
  concurrent workers.
- `reset_temp_folder` clears the scratch directory at the end of a run.
"""

import os
import shutil
import threading
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from ..config.common import (
    COMPRESSION_SUFFIX_TEMPLATE,
    OUTPUT_EXTENSION,
    PARTIAL_FILE_SUFFIX,
    PROCESSED_DIR_NAME,
)
from ..domain.exceptions import FilesystemError


class ProcessFiles:
    """
    Discovers the files to convert.

    Every regular file below `source_dir` is a candidate; there is no
    extension filter, files that are not videos fail at the probe stage.
    Anything inside `exclude_dir` (the output folder, when it is nested in the
    input folder) is skipped so a run never picks up its own output.

    Attributes:
        source_dir (Path | None): The root directory scanned.
        files (Tuple[Path, ...]): Discovered files, sorted.
    """

    def __init__(self, path: Path, exclude_dir: Optional[Path] = None):
        self.exclude_dir = exclude_dir.resolve() if exclude_dir else None
        self.files: Tuple[Path, ...] = tuple()
        self.source_dir = self._get_source_directory_from_path(path)

        if self.source_dir is None:
            logger.warning(f"No valid source directory found for path: {path}. Processing will be skipped.")
            return

        self.set_files_to_process()

    @staticmethod
    def _get_source_directory_from_path(input_path: Path) -> Path | None:
        if input_path is None:
            return None
        resolved_path = input_path.resolve()
        if not resolved_path.exists():
            logger.error(f"Input path does not exist: {resolved_path}")
            return None
        if resolved_path.is_dir():
            return resolved_path
        logger.warning(f"Input path {resolved_path} is not a directory.")
        return None

    def _is_excluded(self, path: Path) -> bool:
        return self.exclude_dir is not None and path.resolve().is_relative_to(self.exclude_dir)

    def set_files_to_process(self):
        # Paths stay as listed: a symlinked file keeps its own place in the tree.
        discovered = [
            p for p in self.source_dir.rglob("*")
            if p.is_file() and not self._is_excluded(p)
        ]
        self.files = tuple(sorted(discovered))
        logger.debug(f"Found {len(self.files)} file(s) under {self.source_dir}")


def output_name_for(source: Path, step: int) -> str:
    """
    Output file name for `source`: the final extension becomes `.gif`, and a
    ` [c<step>]` token is inserted before it when compression step `step` is
    greater than zero.
    """
    suffix = COMPRESSION_SUFFIX_TEMPLATE.format(step=step) if step > 0 else ""
    return f"{source.stem}{suffix}{OUTPUT_EXTENSION}"


def output_path_for(source: Path, input_root: Path, output_root: Path, step: int) -> Path:
    """Mirrors `source` from the input tree onto the output tree as a GIF."""
    relative = source.relative_to(input_root)
    return output_root / relative.parent / output_name_for(source, step)


def processed_path_for(source: Path, input_root: Path, output_root: Path) -> Path:
    """Where `source` is relocated once converted: `<output_root>/_processed/<relative path>`."""
    return output_root / PROCESSED_DIR_NAME / source.relative_to(input_root)


class FilesystemGateway:
    """
    The only place where workers touch the output namespace.

    A single lock guards every directory check-and-create, write and move, so
    two workers never race on the same directory or path.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def ensure_dir(self, directory: Path):
        with self._lock:
            try:
                if not directory.is_dir():
                    directory.mkdir(parents=True, exist_ok=True)
                    logger.debug(f"Created directory: {directory}")
            except OSError as e:
                raise FilesystemError(f"Cannot create directory '{directory}': {e}") from e

    def write_bytes(self, path: Path, data: bytes):
        """
        Writes `data` to `path` through a sibling `.part` file that is renamed
        into place, so `path` only ever holds a complete file.
        """
        partial_path = path.with_name(path.name + PARTIAL_FILE_SUFFIX)
        with self._lock:
            try:
                partial_path.write_bytes(data)
                os.replace(partial_path, path)
            except OSError as e:
                partial_path.unlink(missing_ok=True)
                raise FilesystemError(f"Cannot write '{path}': {e}") from e

    def move(self, source: Path, destination: Path):
        """Moves `source` to `destination`, creating the destination directory first."""
        with self._lock:
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(source), str(destination))
            except OSError as e:
                raise FilesystemError(f"Cannot move '{source}' to '{destination}': {e}") from e


def reset_temp_folder(temp_folder: Path):
    """Deletes the scratch folder and recreates it empty."""
    try:
        if temp_folder.exists():
            shutil.rmtree(temp_folder)
        temp_folder.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Cleared temporary folder: {temp_folder}")
    except OSError as e:
        logger.error(f"Failed to clear temporary folder {temp_folder}: {e}")
