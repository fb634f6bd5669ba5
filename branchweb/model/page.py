"""The page (or process) context the client runs in."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

LINK_IDENTIFIER_KEY = "r"


def link_identifier_from_url(url: str | None) -> str | None:
    """Extract the incoming link identifier from a page URL.

    Branch appends ``#r:<id>`` to pages opened from one of its links; an
    ``r`` query parameter is accepted as well.

    Examples:
        >>> link_identifier_from_url("https://shop.example.com/item#r:abc123")
        'abc123'
        >>> link_identifier_from_url("https://shop.example.com/item") is None
        True
    """
    if not url:
        return None
    parts = urlsplit(url)

    prefix = f"{LINK_IDENTIFIER_KEY}:"
    if parts.fragment.startswith(prefix):
        value = parts.fragment[len(prefix):]
        if value:
            return value

    values = parse_qs(parts.query).get(LINK_IDENTIFIER_KEY)
    if values and values[0]:
        return values[0]
    return None


@dataclass(frozen=True)
class PageContext:
    """Where the client is running, as reported with events and sessions.

    Attributes:
        url: Current page URL.
        user_agent: Browser or client user agent string.
        language: Preferred language tag.
        link_identifier: Identifier of the Branch link the user arrived from.
    """

    url: str = ""
    user_agent: str = ""
    language: str = ""
    link_identifier: str | None = None

    @classmethod
    def from_url(cls, url: str = "", user_agent: str = "", language: str = "") -> "PageContext":
        """Build a context, reading the link identifier from the URL."""
        return cls(
            url=url,
            user_agent=user_agent,
            language=language,
            link_identifier=link_identifier_from_url(url),
        )

    def event_metadata(self) -> dict[str, Any]:
        """Fixed context fields attached to every tracked event."""
        return {
            "url": self.url,
            "user_agent": self.user_agent,
            "language": self.language,
        }
