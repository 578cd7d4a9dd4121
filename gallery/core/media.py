"""
Duration probing for selected clips via ffprobe.
"""
import asyncio
import json
import logging
import os
import shutil
from typing import List, Optional
from gallery.core.errors import ProbeError

logger = logging.getLogger(__name__)

class DurationProbe:
    """
    Reads a media file's decoded duration with ffprobe.

    Raises ProbeError for anything that prevents a duration from being read:
    missing binary, non-zero exit, timeout, unparseable output.
    """

    def __init__(self, bin_name: str = "ffprobe", timeout: float = 15.0):
        self.bin = bin_name
        self.timeout = float(timeout)

    def is_available(self) -> bool:
        return shutil.which(self.bin) is not None

    def _build_cmd(self, path: str) -> List[str]:
        return [
            self.bin,
            "-v", "error",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            path,
        ]

    async def probe(self, path: str) -> float:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._build_cmd(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                close_fds=os.name != "nt",
            )
        except OSError as e:
            logger.warning(f"ffprobe could not be started ({self.bin}): {e}")
            raise ProbeError(f"ffprobe unavailable: {e}") from e

        try:
            stdout_b, stderr_b = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            logger.error(f"ffprobe timeout for {path}")
            raise ProbeError(f"ffprobe timeout after {self.timeout}s")

        stdout = (stdout_b or b"").decode("utf-8", errors="replace")
        stderr = (stderr_b or b"").decode("utf-8", errors="replace")
        if process.returncode != 0:
            logger.warning(f"ffprobe error for {path}: {stderr.strip()}")
            raise ProbeError(stderr.strip() or "ffprobe command failed")

        duration = parse_duration(stdout)
        if duration is None:
            logger.warning(f"ffprobe reported no duration for {path}")
            raise ProbeError("No duration in ffprobe output")
        return duration

def parse_duration(output: str) -> Optional[float]:
    """Container duration first, then the first stream that carries one."""
    try:
        data = json.loads(output) if output.strip() else None
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    candidates = [(data.get("format") or {}).get("duration")]
    candidates += [s.get("duration") for s in data.get("streams") or [] if isinstance(s, dict)]
    for value in candidates:
        try:
            duration = float(value)
        except (TypeError, ValueError):
            continue
        if duration > 0:
            return duration
    return None
