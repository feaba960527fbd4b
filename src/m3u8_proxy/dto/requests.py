"""Request DTOs and query parsing for API endpoints."""

import json
from dataclasses import dataclass, field

from pydantic import TypeAdapter, ValidationError

# JSON scalars are accepted and sent as their JSON text; objects, arrays and null are not
_HEADERS_ADAPTER = TypeAdapter(dict[str, str | bool | int | float])


@dataclass(frozen=True)
class HeaderParseResult:
    """Outcome of parsing the ``headers`` query parameter.

    Attributes:
        ok: Whether the parameter was usable
        headers: Parsed headers (empty on failure)
        error: Description of the problem when ``ok`` is False
    """

    ok: bool
    headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None


def parse_forwarded_headers(raw: str | None) -> HeaderParseResult:
    """Parse the JSON object of headers a player wants forwarded to origin.

    A missing or empty parameter means no extra headers.

    Example:
        ```python
        parse_forwarded_headers('{"Referer": "https://example.com/"}').headers
        # {'Referer': 'https://example.com/'}
        parse_forwarded_headers("{bad json").ok
        # False
        ```
    """
    if not raw:
        return HeaderParseResult(ok=True)

    try:
        parsed = _HEADERS_ADAPTER.validate_json(raw)
    except ValidationError as e:
        return HeaderParseResult(ok=False, error=f"Invalid headers format: {e.error_count()} error(s)")

    headers = {
        name: value if isinstance(value, str) else json.dumps(value)
        for name, value in parsed.items()
    }
    return HeaderParseResult(ok=True, headers=headers)
