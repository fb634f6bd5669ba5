"""Link creation request model."""

import copy
import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Trailing "#r:<link identifier>" appended to pages opened from a Branch link
LINK_IDENTIFIER_FRAGMENT = re.compile(r"#r:[a-z0-9-_]+$", re.IGNORECASE)

DESKTOP_URL_KEY = "$desktop_url"


def strip_link_identifier(url: str) -> str:
    """Remove a trailing ``#r:<id>`` fragment from a URL.

    Examples:
        >>> strip_link_identifier("http://x.com#r:abc123")
        'http://x.com'
    """
    return LINK_IDENTIFIER_FRAGMENT.sub("", url)


@dataclass
class LinkRequest:
    """Parameters for creating a deep link.

    ``data`` holds arbitrary link data, including the reserved ``$``-prefixed
    keys (``$desktop_url``, ``$og_title``, ...). Any other top-level keys the
    caller passes are kept in ``extra`` and sent unchanged.
    """

    data: dict[str, Any] = field(default_factory=dict)
    tags: list[str] | None = None
    channel: str | None = None
    feature: str | None = None
    stage: str | None = None
    type: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("tags", "channel", "feature", "stage", "type")

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "LinkRequest":
        """Build a request from a caller mapping without mutating it."""
        obj = copy.deepcopy(dict(obj))
        data = obj.pop("data", None) or {}
        known = {name: obj.pop(name) for name in cls._FIELDS if name in obj}
        return cls(data=dict(data), extra=obj, **known)

    def to_params(self, source: str) -> dict[str, Any]:
        """Normalize the request into API parameters.

        Sets ``source``, strips a link identifier fragment from
        ``$desktop_url`` and serializes ``data`` to a JSON string.

        Args:
            source: SDK identifier sent as ``source``.

        Returns:
            Parameters ready for the link resource.
        """
        data = dict(self.data)
        desktop_url = data.get(DESKTOP_URL_KEY)
        if isinstance(desktop_url, str):
            data[DESKTOP_URL_KEY] = strip_link_identifier(desktop_url)

        params: dict[str, Any] = dict(self.extra)
        for name in self._FIELDS:
            value = getattr(self, name)
            if value is not None:
                params[name] = value
        params["source"] = source
        params["data"] = json.dumps(data)
        return params
