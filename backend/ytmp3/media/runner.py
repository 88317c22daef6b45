"""Asynchronous wrapper around the yt-dlp command-line tool.

Every call spawns one independent yt-dlp process.  Arguments are passed as an
argv list (no shell), and the URL always follows ``--`` so it can never be
parsed as an option.
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ytmp3.config import get_config

logger = logging.getLogger(__name__)


class DownloaderError(RuntimeError):
    """yt-dlp could not be run, timed out, or exited non-zero."""


class YtDlpRunner:
    """Runs yt-dlp for metadata lookups and MP3 extraction."""

    def __init__(
        self,
        binary: str = "yt-dlp",
        info_timeout: float = 60,
        convert_timeout: float = 300,
    ) -> None:
        self.binary = binary
        self.info_timeout = info_timeout
        self.convert_timeout = convert_timeout

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def fetch_info(self, url: str) -> Dict[str, Any]:
        """Return yt-dlp's JSON metadata for *url* without downloading."""
        stdout = await self._run(
            ["--dump-json", "--no-download", "--", url],
            timeout=self.info_timeout,
        )
        try:
            info = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise DownloaderError(f"yt-dlp returned invalid JSON: {exc}") from exc
        if not isinstance(info, dict):
            raise DownloaderError("yt-dlp returned unexpected JSON")
        return info

    async def extract_audio(self, url: str, output_path: Path, audio_quality: str) -> None:
        """Download *url* and transcode its audio track to MP3 at *output_path*."""
        await self._run(
            [
                "--extract-audio",
                "--audio-format", "mp3",
                "--audio-quality", audio_quality,
                "--output", str(output_path),
                "--no-playlist",
                "--",
                url,
            ],
            timeout=self.convert_timeout,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(self, args: List[str], timeout: Optional[float] = None) -> str:
        """Run yt-dlp with *args*; return stdout or raise DownloaderError."""
        cmd = [self.binary] + args
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise DownloaderError(f"{self.binary} not found") from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            try:
                proc.kill()
            except ProcessLookupError:
                pass  # exited between the timeout and the kill
            await proc.wait()
            raise DownloaderError(f"{self.binary} timed out after {timeout}s") from exc

        stdout = stdout_b.decode(errors="replace").strip()
        stderr = stderr_b.decode(errors="replace").strip()
        if proc.returncode != 0:
            logger.warning(
                "%s exited with %s: %s", self.binary, proc.returncode, stderr or stdout
            )
            raise DownloaderError(
                f"{self.binary} failed (exit {proc.returncode}): {stderr or stdout}"
            )
        return stdout


_runner: Optional[YtDlpRunner] = None


def get_runner() -> YtDlpRunner:
    """Return the shared runner, built from the current settings."""
    global _runner
    if _runner is None:
        settings = get_config().downloader
        _runner = YtDlpRunner(
            binary=settings.binary,
            info_timeout=settings.info_timeout_seconds,
            convert_timeout=settings.convert_timeout_seconds,
        )
    return _runner
