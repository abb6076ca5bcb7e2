"""Exiftool wrapper for metadata extraction."""

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass

from mediasort.errors import MediasortError

logger = logging.getLogger(__name__)


class ExiftoolNotFoundError(MediasortError):
    """Raised when exiftool is not installed."""


@dataclass
class ExiftoolResult:
    """Result from exiftool extraction."""

    source_file: str
    metadata: dict
    error: str | None = None


class ExiftoolRunner:
    """Wrapper for exiftool command execution.

    Only the tags needed for sorting are requested so that a directory
    batch stays cheap even for large video files.
    """

    EXIFTOOL_ARGS = [
        "-json",
        "-G0",
        "-n",
        "-DateTimeOriginal",
        "-CreateDate",
        "-ModifyDate",
        "-Make",
        "-Model",
    ]

    def __init__(self, executable: str = "exiftool") -> None:
        self.executable = executable
        self.version = self._check_exiftool()

    def _check_exiftool(self) -> str:
        path = shutil.which(self.executable)
        if not path:
            raise ExiftoolNotFoundError(
                "exiftool is required for embedded metadata but was not found.\n"
                "Please install exiftool: https://exiftool.org/install.html"
            )

        result = subprocess.run(
            [self.executable, "-ver"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def extract_batch(self, file_paths: list[str]) -> list[ExiftoolResult]:
        """Extract metadata from multiple files in a single exiftool call."""
        if not file_paths:
            return []

        cmd = [self.executable] + self.EXIFTOOL_ARGS + file_paths

        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as e:
            return [ExiftoolResult(fp, {}, str(e)) for fp in file_paths]

        # exiftool exits with 1 when some of the files had no readable metadata
        if result.returncode not in (0, 1):
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            error = stderr or f"exiftool exited with {result.returncode}"
            return [ExiftoolResult(fp, {}, error) for fp in file_paths]

        # SourceFile echoes the path bytes; decode them the way os.fsdecode does
        # so names that are not valid UTF-8 still match the requested paths
        stdout = result.stdout.decode("utf-8", errors="surrogateescape")
        try:
            data_list = json.loads(stdout) if stdout.strip() else []
        except json.JSONDecodeError as e:
            return [ExiftoolResult(fp, {}, f"JSON parse error: {e}") for fp in file_paths]

        if not isinstance(data_list, list):
            return [ExiftoolResult(fp, {}, "Unexpected exiftool output") for fp in file_paths]

        data_by_source = {
            d.get("SourceFile", ""): d for d in data_list if isinstance(d, dict)
        }

        results = []
        for fp in file_paths:
            if fp in data_by_source:
                results.append(ExiftoolResult(fp, data_by_source[fp]))
            else:
                logger.debug("No exiftool output for %s", fp)
                results.append(ExiftoolResult(fp, {}, "No output from exiftool"))

        return results
