"""Pydantic schemas for the info and convert endpoints.

Response bodies use the camelCase keys the browser front-end reads
(``downloadUrl``, ``fileSize``); the Python side uses snake_case and
serialises by alias.
"""
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class AudioQuality(str, Enum):
    """MP3 bitrates yt-dlp is asked for."""
    LOW = "128K"
    MEDIUM = "192K"
    HIGH = "320K"


_QUALITY_BY_REQUEST = {
    "128": AudioQuality.LOW,
    "192": AudioQuality.MEDIUM,
}


def resolve_audio_quality(quality: Union[str, int, None]) -> AudioQuality:
    """Map the requested bitrate onto a supported :class:`AudioQuality`.

    ``"128"`` and ``"192"`` (string or number) select those bitrates; any
    other value, including ``None``, falls back to 320K.
    """
    if quality is None:
        return AudioQuality.HIGH
    return _QUALITY_BY_REQUEST.get(str(quality).strip(), AudioQuality.HIGH)


class InfoRequest(BaseModel):
    url: Optional[str] = Field(None, description="Video page URL")


class VideoInfo(BaseModel):
    """The slice of yt-dlp's JSON dump returned to clients."""
    title: Optional[str] = Field(None, description="Video title")
    duration: str = Field(..., description="Length formatted as M:SS")
    thumbnail: Optional[str] = Field(None, description="Thumbnail URL")
    uploader: Optional[str] = Field(None, description="Channel or uploader name")
    id: Optional[str] = Field(None, description="Extractor video ID")


class ConvertRequest(BaseModel):
    url: Optional[str] = Field(None, description="Video page URL")
    quality: Optional[Union[str, int]] = Field(
        None, description="Requested bitrate: 128, 192 or 320"
    )


class ConvertResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    download_url: str = Field(..., alias="downloadUrl")
    file_size: str = Field(..., alias="fileSize")
    quality: AudioQuality


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
