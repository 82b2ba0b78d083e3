"""
Temporary file and directory lifecycle for a single request.

Every path a request allocates is registered on a ``TempResources`` release
list at creation time; the list is drained exactly once on every exit path.
Deletion is best-effort: a path that is already gone is not an error and a
failed delete is logged, never raised.
"""

import os
import secrets
import shutil
import tempfile
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional

from loguru import logger

_MAX_NAME_ATTEMPTS = 5


@dataclass(frozen=True)
class TempFileSet:
    """Input/output locations owned by one request."""
    unique_id: str
    input_path: str
    output_path: str


@dataclass(frozen=True)
class CleanupRecord:
    path: str
    cleaned: bool
    size_bytes: Optional[int] = None
    error: Optional[str] = None


def _unique_id() -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def create_temp_paths(input_suffix: str = ".bin", temp_dir: Optional[str] = None) -> TempFileSet:
    """
    Allocate a unique input/output path pair in the temp area.

    The input file is reserved with an exclusive create so that two requests
    can never be handed the same path; on a clash a new id is drawn.

    Args:
        input_suffix: Extension for the downloaded file, e.g. ``.mp3``
        temp_dir: Base directory, defaults to the system temp directory

    Returns:
        TempFileSet: Paths for the downloaded input and the extracted audio
    """
    base_dir = temp_dir or tempfile.gettempdir()
    os.makedirs(base_dir, exist_ok=True)
    if input_suffix and not input_suffix.startswith("."):
        input_suffix = f".{input_suffix}"

    for _ in range(_MAX_NAME_ATTEMPTS):
        unique_id = _unique_id()
        input_path = os.path.join(base_dir, f"input-{unique_id}{input_suffix}")
        output_path = os.path.join(base_dir, f"output-{unique_id}.mp3")
        try:
            fd = os.open(input_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            logger.warning(f"Temp path collision on {input_path}, drawing a new id")
            continue
        os.close(fd)
        return TempFileSet(unique_id=unique_id, input_path=input_path, output_path=output_path)

    raise RuntimeError(f"Could not allocate a unique temp path in {base_dir}")


def create_temp_dir(prefix: str = "video-frames-", temp_dir: Optional[str] = None) -> str:
    base_dir = temp_dir or tempfile.gettempdir()
    os.makedirs(base_dir, exist_ok=True)
    return tempfile.mkdtemp(prefix=f"{prefix}{int(time.time() * 1000)}-", dir=base_dir)


def cleanup_files(paths: Iterable[Optional[str]]) -> List[CleanupRecord]:
    """Delete files and directories, tolerating ones that no longer exist."""
    records = []
    for path in paths:
        if not path or not os.path.lexists(path):
            continue
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
                records.append(CleanupRecord(path=path, cleaned=True))
            else:
                size = os.path.getsize(path)
                os.remove(path)
                records.append(CleanupRecord(path=path, cleaned=True, size_bytes=size))
        except FileNotFoundError:
            # Removed by someone else between the check and the delete
            continue
        except OSError as e:
            logger.warning(f"Could not delete temp path {path}: {e}")
            records.append(CleanupRecord(path=path, cleaned=False, error=str(e)))
    return records


class TempResources:
    """Release list for the temp paths of one request or one video analysis."""

    def __init__(self, temp_dir: Optional[str] = None):
        self.temp_dir = temp_dir
        self._paths: List[str] = []
        self._released = False

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    @property
    def released(self) -> bool:
        return self._released

    def register(self, path: str) -> str:
        if self._released:
            raise RuntimeError("Cannot register a temp path after release")
        self._paths.append(path)
        return path

    def file_set(self, input_suffix: str = ".bin") -> TempFileSet:
        file_set = create_temp_paths(input_suffix=input_suffix, temp_dir=self.temp_dir)
        self.register(file_set.input_path)
        self.register(file_set.output_path)
        return file_set

    def directory(self, prefix: str = "video-frames-") -> str:
        return self.register(create_temp_dir(prefix=prefix, temp_dir=self.temp_dir))

    def release(self) -> List[CleanupRecord]:
        """Drain the release list. Later calls are no-ops."""
        if self._released:
            return []
        self._released = True
        try:
            records = cleanup_files(reversed(self._paths))
        except Exception as e:
            logger.opt(exception=True).error(f"Unexpected error while cleaning temp paths: {e}")
            records = []
        failed = [r for r in records if not r.cleaned]
        if failed:
            logger.warning(f"{len(failed)} temp path(s) could not be deleted: {[r.path for r in failed]}")
        logger.debug(f"Released temp paths: {[r.path for r in records if r.cleaned]}")
        return records

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.release()
        return False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        self.release()
        return False
