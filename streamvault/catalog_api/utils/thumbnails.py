"""Episode thumbnail resolution."""
from __future__ import annotations

import re

_DRIVE_FILE_ID = re.compile(r"/d/([^/?#]+)")


def drive_thumbnail_url(video_url: str | None) -> str | None:
    """Return a Google Drive thumbnail URL when ``video_url`` embeds a file id."""

    if not video_url:
        return None
    match = _DRIVE_FILE_ID.search(video_url)
    if match is None:
        return None
    return f"https://drive.google.com/thumbnail?id={match.group(1)}&sz=w1280"


def resolve_thumbnail(
    thumbnail_url: str | None, video_url: str | None, placeholder_url: str
) -> str:
    """Pick the explicit thumbnail, then one derived from the video, then the placeholder."""

    if thumbnail_url:
        return thumbnail_url
    return drive_thumbnail_url(video_url) or placeholder_url
