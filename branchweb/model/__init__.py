"""Branch client domain models - plain dataclasses and enums.

These models have no dependencies on storage, transport or configuration.
"""

from branchweb.model.link import LinkRequest, strip_link_identifier
from branchweb.model.page import PageContext, link_identifier_from_url
from branchweb.model.session import ClickRecord, LifecycleState, Session

__all__ = [
    # Session
    "ClickRecord",
    "LifecycleState",
    "Session",
    # Link
    "LinkRequest",
    "strip_link_identifier",
    # Page
    "PageContext",
    "link_identifier_from_url",
]
