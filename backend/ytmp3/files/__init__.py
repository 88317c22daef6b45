"""Converted file storage for ytmp3.

Converted MP3s are kept in a flat downloads directory, named by millisecond
timestamp.  A file is deleted after its first download, or by the reaper once
it is older than an hour.
"""
