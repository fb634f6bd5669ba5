"""Domain models for the Branch session."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class LifecycleState(Enum):
    """Initialization state of a SessionManager."""

    UNINITIALIZED = "uninitialized"
    PENDING = "pending"
    READY = "ready"


@dataclass
class Session:
    """Server-issued identity and link bundle for one visit.

    Attributes:
        session_id: Server-generated ID of the session.
        identity_id: Server-generated ID of the user identity.
        link: Server-generated session link, used for synchronous link creation.
        device_fingerprint: Server-generated browser/device fingerprint.
    """

    session_id: str
    identity_id: str
    link: str | None = None
    device_fingerprint: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any] | None) -> "Session | None":
        """Build a Session from a persisted record or an open-session response.

        A record missing either ID is treated as absent, so the session and
        identity IDs are always present together.

        Args:
            record: Mapping with ``session_id``, ``identity_id``, ``link`` and
                ``device_fingerprint_id`` keys, or None.

        Returns:
            Session instance, or None if the record is absent or malformed.
        """
        if not record:
            return None
        session_id = record.get("session_id")
        identity_id = record.get("identity_id")
        if not session_id or not identity_id:
            return None
        return cls(
            session_id=str(session_id),
            identity_id=str(identity_id),
            link=record.get("link"),
            device_fingerprint=record.get("device_fingerprint_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record layout."""
        return {
            "session_id": self.session_id,
            "identity_id": self.identity_id,
            "link": self.link,
            "device_fingerprint_id": self.device_fingerprint,
        }


@dataclass(frozen=True)
class ClickRecord:
    """A registered link click, kept until an SMS is sent for it."""

    click_id: str

    STORAGE_KEY = "click_id"
