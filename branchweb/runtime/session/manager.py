"""Session manager owning the Branch session lifecycle.

This module decides whether a persisted session can be reused or a fresh
handshake is needed, tracks the initialization state, and is the only writer
of the persisted session record.
"""

import asyncio
import logging
from typing import Any

from branchweb.api import resources
from branchweb.api.facade import RequestFacade
from branchweb.core.callbacks import Callback, deliver
from branchweb.errors import AlreadyInitialized, NotInitialized
from branchweb.model.page import PageContext
from branchweb.model.session import ClickRecord, LifecycleState, Session
from branchweb.stores.storage import SessionStorage

logger = logging.getLogger(__name__)

# Response fields that replace the current identity when present
IDENTITY_FIELDS = ("session_id", "identity_id", "link")

BANNER_SHOWN_KEY = "bannerShown"


class SessionManager:
    """Manages the session lifecycle: UNINITIALIZED -> PENDING -> READY.

    ``initialize`` moves to PENDING before any I/O, so a second call is
    rejected even while the first is still in flight. Feature operations call
    ``require_initialized``: before ``initialize`` it fails fast, during
    PENDING it waits for the handshake to finish.

    A failed handshake still ends in READY with no session. There is no
    rollback, so a failed manager cannot be initialized again.

    Example:
        >>> manager = SessionManager(MemoryStorage(), facade, PageContext.from_url(url))
        >>> record = await manager.initialize("5680621892404085")
        >>> manager.session.identity_id
        '98807509250212101'
    """

    def __init__(self, storage: SessionStorage, facade: RequestFacade, page: PageContext | None = None):
        """Initialize the session manager.

        Args:
            storage: Backend holding the persisted session record.
            facade: Request façade used for the handshake.
            page: Page context; its link identifier is read during initialize.
        """
        self.storage = storage
        self.facade = facade
        self.page = page or PageContext()
        self.app_id: str | None = None
        self._state = LifecycleState.UNINITIALIZED
        self._session: Session | None = None
        self._ready = asyncio.Event()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def initialized(self) -> bool:
        """True once initialize has started, matching the browser SDK's flag."""
        return self._state is not LifecycleState.UNINITIALIZED

    async def initialize(self, app_id: str, callback: Callback | None = None) -> dict[str, Any] | None:
        """Start the session, reusing a persisted one when possible.

        Args:
            app_id: Branch app ID.
            callback: Optional ``(error, data)`` callable.

        Returns:
            The persisted record on a cache hit, otherwise the open-session response.

        Raises:
            AlreadyInitialized: If initialize was already called on this manager.
            TransportError: If the handshake failed.
        """
        return await deliver(self._initialize(app_id), callback)

    async def _initialize(self, app_id: str) -> dict[str, Any]:
        if self._state is not LifecycleState.UNINITIALIZED:
            logger.warning(f"initialize() called while {self._state.value}")
            raise AlreadyInitialized()

        self._state = LifecycleState.PENDING
        self.app_id = str(app_id)
        try:
            record = self.storage.read_all()
            cached = Session.from_record(record)
            link_identifier = self.page.link_identifier

            if cached is not None and not link_identifier:
                self._session = cached
                logger.info(f"Reusing persisted session {cached.session_id}")
                return record

            if cached is not None:
                # Arriving from a link always opens a fresh session
                logger.info(f"Link identifier {link_identifier} present, refreshing session")
            else:
                logger.debug("No persisted session, opening a new one")

            return await self._handshake(link_identifier)
        finally:
            self._state = LifecycleState.READY
            self._ready.set()

    async def _handshake(self, link_identifier: str | None) -> dict[str, Any]:
        fingerprint = await self.facade.call(resources.fingerprint, {"app_id": self.app_id})
        if isinstance(fingerprint, dict):
            fingerprint = fingerprint.get("browser_fingerprint_id")

        params: dict[str, Any] = {
            "app_id": self.app_id,
            "is_referrable": 1,
            "browser_fingerprint_id": fingerprint or None,
        }
        if link_identifier:
            params["link_identifier"] = link_identifier

        data = await self.facade.call(resources.open_session, params)
        if not isinstance(data, dict):
            data = {}

        self._session = Session.from_record(data)
        self.storage.write_all(data)

        if self._session is None:
            logger.warning("Open-session response has no session, it will not be reused")
        else:
            logger.info(f"Opened session {self._session.session_id} for identity {self._session.identity_id}")
        return data

    async def require_initialized(self) -> None:
        """Guard used by every feature operation.

        Raises:
            NotInitialized: If initialize has not been called.
        """
        if self._state is LifecycleState.UNINITIALIZED:
            raise NotInitialized()
        if self._state is LifecycleState.PENDING:
            logger.debug("Waiting for pending initialization")
            await self._ready.wait()

    def request_context(self) -> dict[str, Any]:
        """Session fields the façade adds to resources that need them."""
        return {
            "app_id": self.app_id,
            "session_id": self._session.session_id if self._session else None,
            "identity_id": self._session.identity_id if self._session else None,
        }

    def apply_identity(self, data: Any) -> None:
        """Replace session fields from an identity-bearing response and persist them."""
        if not isinstance(data, dict):
            return
        updates = {key: data[key] for key in IDENTITY_FIELDS if data.get(key)}
        if not updates:
            return

        record = self.storage.read_all() or {}
        if self._session is not None:
            record.update(self._session.to_dict())
        record.update(updates)

        session = Session.from_record(record)
        if session is None:
            logger.warning(f"Ignoring identity update without a complete session: {sorted(updates)}")
            return

        self._session = session
        self.storage.write_all(record)
        logger.info(f"Session updated: identity {session.identity_id}")

    @property
    def click_id(self) -> str | None:
        """Click ID of the last registered link click, if any."""
        return self.storage.read_key(ClickRecord.STORAGE_KEY) or None

    def remember_click(self, click: ClickRecord) -> None:
        """Persist a registered click for a later SMS send."""
        self.storage.write_key(ClickRecord.STORAGE_KEY, click.click_id)
        logger.debug(f"Stored click {click.click_id}")

    @property
    def banner_shown(self) -> bool:
        return bool(self.storage.read_key(BANNER_SHOWN_KEY))

    def mark_banner_shown(self) -> None:
        self.storage.write_key(BANNER_SHOWN_KEY, True)
