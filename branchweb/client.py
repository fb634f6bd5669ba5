"""The Branch client: session, identity, events, links, SMS and credits.

``Branch`` wires the storage backend, the request façade and the session
manager together and exposes the public operations. Every operation checks
that the session was initialized before doing anything else, makes one call
through the façade, and returns its data. Pass ``callback=`` to receive
``(error, data)`` instead of exceptions.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from branchweb.api import resources
from branchweb.api.facade import RequestFacade
from branchweb.banner import BannerDocument, BannerOptions, inject_banner
from branchweb.core.callbacks import Callback, deliver
from branchweb.core.config.models import Config
from branchweb.errors import InvalidRequest, MalformedResponse
from branchweb.model.link import LinkRequest
from branchweb.model.page import PageContext
from branchweb.model.session import ClickRecord, Session
from branchweb.runtime.session.manager import SessionManager
from branchweb.stores.storage import SessionStorage, create_storage

logger = logging.getLogger(__name__)

SMS_CHANNEL = "sms"


class Branch:
    """Client for the Branch deep linking API.

    Example:
        >>> async with Branch(config, page=PageContext.from_url(url)) as branch:
        ...     await branch.initialize("5680621892404085")
        ...     url = await branch.link({"channel": "facebook", "data": {"foo": "bar"}})
    """

    def __init__(
        self,
        config: Config | None = None,
        storage: SessionStorage | None = None,
        page: PageContext | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Build the client.

        Args:
            config: Client configuration; defaults apply when omitted.
            storage: Session record backend. Built from ``config.storage`` when omitted.
            page: Page context (URL, user agent, language, link identifier).
            http_client: HTTP client for the façade, e.g. one with a mock transport.
        """
        self.config = config or Config()
        self.storage = storage or create_storage(self.config.storage)
        self.page = page or PageContext()
        self.facade = RequestFacade(self.config.api, client=http_client, context=self._request_context)
        self.sessions = SessionManager(self.storage, self.facade, self.page)

    def _request_context(self) -> dict[str, Any]:
        return self.sessions.request_context()

    async def __aenter__(self) -> "Branch":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP client."""
        await self.facade.aclose()

    @property
    def session(self) -> Session | None:
        return self.sessions.session

    @property
    def initialized(self) -> bool:
        return self.sessions.initialized

    # -- session ---------------------------------------------------------

    async def initialize(self, app_id: str | None = None, callback: Callback | None = None) -> dict[str, Any] | None:
        """Start or resume the Branch session.

        Args:
            app_id: Branch app ID. Falls back to ``config.app_id``.
            callback: Optional ``(error, data)`` callable.

        Returns:
            Session data: ``session_id``, ``identity_id``, ``link``,
            ``device_fingerprint_id`` and, when the user arrived from a link,
            ``data`` and ``referring_identity``.
        """
        resolved = app_id if app_id is not None else self.config.app_id
        if resolved is None:
            return await deliver(self._missing_app_id(), callback)
        return await self.sessions.initialize(resolved, callback=callback)

    @staticmethod
    async def _missing_app_id() -> None:
        raise InvalidRequest("An app_id is required, pass one or set it in the config")

    # -- identity --------------------------------------------------------

    async def set_identity(self, identity: str, callback: Callback | None = None) -> Any:
        """Identify the current user.

        Returns:
            ``identity_id``, ``link``, ``referring_data`` and ``referring_identity``.
        """
        return await deliver(self._set_identity(identity), callback)

    async def _set_identity(self, identity: str) -> Any:
        await self.sessions.require_initialized()
        data = await self.facade.call(resources.profile, {"identity": identity})
        self.sessions.apply_identity(data)
        return data

    async def logout(self, callback: Callback | None = None) -> Any:
        """Log out, replacing the session and identity IDs.

        Returns:
            The new ``session_id``, ``identity_id`` and ``link``.
        """
        return await deliver(self._logout(), callback)

    async def _logout(self) -> Any:
        await self.sessions.require_initialized()
        data = await self.facade.call(resources.logout, {})
        self.sessions.apply_identity(data)
        return data

    # -- events ----------------------------------------------------------

    async def event(
        self,
        event: str,
        metadata: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> Any:
        """Track an event with optional metadata.

        The page URL, user agent and language are always attached and take
        precedence over caller keys of the same name.
        """
        return await deliver(self._event(event, metadata), callback)

    async def _event(self, event: str, metadata: Mapping[str, Any] | None) -> Any:
        await self.sessions.require_initialized()
        merged = {**copy.deepcopy(dict(metadata or {})), **self.page.event_metadata()}
        return await self.facade.call(resources.event, {"event": event, "metadata": merged})

    # -- links -----------------------------------------------------------

    async def link(self, request: LinkRequest | Mapping[str, Any], callback: Callback | None = None) -> str | None:
        """Create a deep link.

        Args:
            request: Link tags, channel, feature, stage, type and ``data``.
            callback: Optional ``(error, url)`` callable.

        Returns:
            The deep link URL, e.g. ``https://bnc.lt/l/3HZMytU-BW``.
        """
        return await deliver(self._link(request), callback)

    async def _link(self, request: LinkRequest | Mapping[str, Any]) -> str:
        await self.sessions.require_initialized()
        if not isinstance(request, LinkRequest):
            request = LinkRequest.from_dict(request)

        data = await self.facade.call(resources.link, request.to_params(self.config.api.sdk_source))
        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise MalformedResponse(resources.link.name, "url")
        return url

    async def link_click(self, url: str, callback: Callback | None = None) -> Any:
        """Register a click on a Branch link and remember its click ID."""
        return await deliver(self._link_click(url), callback)

    async def _link_click(self, url: str) -> Any:
        await self.sessions.require_initialized()
        link_url = url.removeprefix(self.config.api.link_domain)

        data = await self.facade.call(resources.link_click, {"link_url": link_url, "click": "click"})
        click_id = data.get("click_id") if isinstance(data, dict) else None
        if not click_id:
            raise MalformedResponse(resources.link_click.name, "click_id")
        self.sessions.remember_click(ClickRecord(click_id=str(click_id)))
        return data

    # -- SMS -------------------------------------------------------------

    async def send_sms(self, request: Mapping[str, Any], callback: Callback | None = None) -> Any:
        """Text a link to ``request["phone"]``.

        Reuses the last clicked link when there is one, otherwise creates a
        new link with the rest of ``request`` as link data.
        """
        return await deliver(self._send_sms(request), callback)

    async def _send_sms(self, request: Mapping[str, Any]) -> Any:
        await self.sessions.require_initialized()
        if self.sessions.click_id:
            return await self._send_sms_existing(_phone(request))
        return await self._send_sms_new(request)

    async def send_sms_new(self, request: Mapping[str, Any], callback: Callback | None = None) -> Any:
        """Create a new SMS-channel link, register a click on it and text it."""
        return await deliver(self._send_sms_new(request), callback)

    async def _send_sms_new(self, request: Mapping[str, Any]) -> Any:
        await self.sessions.require_initialized()
        phone = _phone(request)

        link_request = LinkRequest.from_dict({key: value for key, value in request.items() if key != "phone"})
        link_request.channel = SMS_CHANNEL

        url = await self._link(link_request)
        await self._link_click(url)
        return await self._send_sms_existing(phone)

    async def send_sms_existing(self, phone: str, callback: Callback | None = None) -> Any:
        """Text the last clicked link to ``phone``."""
        return await deliver(self._send_sms_existing(phone), callback)

    async def _send_sms_existing(self, phone: str) -> Any:
        await self.sessions.require_initialized()
        click_id = self.sessions.click_id
        if not click_id:
            raise InvalidRequest("No link click registered, use send_sms_new() instead")
        if not phone:
            raise InvalidRequest("A phone number is required")

        return await self.facade.call(resources.sms_send, {"link_url": click_id, "phone": phone})

    # -- referrals and credits -------------------------------------------

    async def referrals(self, callback: Callback | None = None) -> Any:
        """Referral counts per event for the current user.

        Returns:
            e.g. ``{"install": {"total": 5, "unique": 2}, "open": {...}}``.
        """
        return await deliver(self._referrals(), callback)

    async def _referrals(self) -> Any:
        await self.sessions.require_initialized()
        return await self.facade.call(resources.referrals, {})

    async def credits(self, callback: Callback | None = None) -> Any:
        """Credit balances per bucket for the current user."""
        return await deliver(self._credits(), callback)

    async def _credits(self) -> Any:
        await self.sessions.require_initialized()
        identity_id = self.session.identity_id if self.session else None
        return await self.facade.call(resources.credits, {"identity_id": identity_id})

    async def redeem(self, amount: int, bucket: str, callback: Callback | None = None) -> Any:
        """Redeem ``amount`` credits from ``bucket``."""
        return await deliver(self._redeem(amount, bucket), callback)

    async def _redeem(self, amount: int, bucket: str) -> Any:
        await self.sessions.require_initialized()
        return await self.facade.call(resources.redeem, {"amount": amount, "bucket": bucket})

    # -- banner ----------------------------------------------------------

    def banner(self, options: BannerOptions | Mapping[str, Any], document: BannerDocument) -> bool:
        """Show the smart banner once per session.

        Returns:
            True if the banner was inserted into ``document``.
        """
        if not isinstance(options, BannerOptions):
            options = BannerOptions.from_dict(options)
        if options.link is None and self.session is not None:
            options.link = self.session.link

        shown = inject_banner(document, options, already_shown=self.sessions.banner_shown)
        if shown:
            self.sessions.mark_banner_shown()
        return shown


def _phone(request: Mapping[str, Any]) -> str:
    phone = request.get("phone")
    if not phone:
        raise InvalidRequest("A phone number is required")
    return str(phone)


# Composition root
_branch: Branch | None = None


def init_branch(
    config: Config | None = None,
    storage: SessionStorage | None = None,
    page: PageContext | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Branch:
    """Create the process-wide client. Only one may exist at a time.

    Raises:
        RuntimeError: If a client was already created and not closed.
    """
    global _branch
    if _branch is not None:
        raise RuntimeError("Branch client already exists. Use get_branch() or close_branch() first.")
    _branch = Branch(config, storage=storage, page=page, http_client=http_client)
    return _branch


def get_branch() -> Branch:
    """Get the process-wide client (must be created first)."""
    if _branch is None:
        raise RuntimeError("Branch client not created. Call init_branch() first.")
    return _branch


async def close_branch() -> None:
    """Close and forget the process-wide client."""
    global _branch
    if _branch is not None:
        await _branch.aclose()
        _branch = None
