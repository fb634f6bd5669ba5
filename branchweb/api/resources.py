"""Static catalog of the remote endpoints the client talks to."""

from dataclasses import dataclass
from enum import Enum


class Destination(Enum):
    """Which base URL a resource lives under."""

    API = "api"
    LINK_SERVICE = "link_service"


@dataclass(frozen=True)
class Resource:
    """Descriptor for one remote endpoint.

    Attributes:
        name: Short name used in logs and errors.
        destination: Base URL the path is joined to.
        path: Path, with ``{placeholders}`` filled from the call parameters.
        method: HTTP verb.
        context: Session fields added to the parameters when not given explicitly.
    """

    name: str
    destination: Destination
    path: str
    method: str = "GET"
    context: tuple[str, ...] = ()


fingerprint = Resource("fingerprint", Destination.LINK_SERVICE, "/_r", "GET", ("app_id",))

open_session = Resource("open", Destination.API, "/v1/open", "POST", ("app_id",))

profile = Resource("profile", Destination.API, "/v1/profile", "POST", ("app_id", "session_id", "identity_id"))

logout = Resource("logout", Destination.API, "/v1/logout", "POST", ("app_id", "session_id"))

event = Resource("event", Destination.API, "/v1/event", "POST", ("app_id", "session_id"))

link = Resource("link", Destination.API, "/v1/url", "POST", ("app_id", "identity_id"))

link_click = Resource("link_click", Destination.LINK_SERVICE, "/{link_url}", "GET")

sms_send = Resource("sms_send", Destination.LINK_SERVICE, "/c/{link_url}", "POST")

referrals = Resource("referrals", Destination.API, "/v1/referrals/{identity_id}", "GET", ("app_id", "identity_id"))

credits = Resource("credits", Destination.API, "/v1/credits/{identity_id}", "GET", ("app_id", "identity_id"))

redeem = Resource("redeem", Destination.API, "/v1/redeem", "POST", ("app_id", "identity_id"))

ALL_RESOURCES = (
    fingerprint,
    open_session,
    profile,
    logout,
    event,
    link,
    link_click,
    sms_send,
    referrals,
    credits,
    redeem,
)
