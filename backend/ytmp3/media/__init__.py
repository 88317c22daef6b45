"""Video metadata lookup and MP3 conversion.

Both operations run the yt-dlp binary as a subprocess; nothing here talks to
the video site directly.
"""
