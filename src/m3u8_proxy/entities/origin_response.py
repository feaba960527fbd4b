"""Origin response domain entity."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OriginResponse:
    """A fully read response from the origin server.

    Attributes:
        status_code: HTTP status returned by the origin
        reason_phrase: HTTP status text
        content: Response body
        headers: Response headers with lower-cased names
    """

    status_code: int
    content: bytes
    reason_phrase: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded as text (manifests are UTF-8 in practice)."""
        return self.content.decode("utf-8", errors="replace")
