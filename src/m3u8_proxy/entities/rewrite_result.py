"""Playlist rewrite result entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RewriteResult:
    """Outcome of rewriting one playlist.

    Attributes:
        text: The rewritten playlist
        segment_urls: Absolute segment and key URLs found in a media playlist,
            in the order they appear
        is_master: Whether the playlist was treated as a master playlist
    """

    text: str
    segment_urls: list[str] = field(default_factory=list)
    is_master: bool = False
