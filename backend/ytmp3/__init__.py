"""ytmp3: HTTP front for yt-dlp metadata lookup and MP3 conversion."""

__version__ = "0.1.0"
