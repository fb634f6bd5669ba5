"""Smart banner directing visitors to the app."""

import html
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)

BANNER_ID = "branch-banner"

BANNER_STYLES = f"""<style type="text/css" id="{BANNER_ID}-css">
#{BANNER_ID} {{ position: absolute; top: -76px; left: 0; width: 100%; height: 76px; z-index: 99999;
  font-family: Helvetica, Arial, sans-serif; background: #efefef; border-bottom: 1px solid #ddd;
  transition: top 0.5s ease; }}
#{BANNER_ID} .icon img {{ width: 63px; height: 63px; margin: 6px 10px; float: left; border-radius: 12px; }}
#{BANNER_ID} .content {{ padding: 10px 0; }}
#{BANNER_ID} .title {{ font-size: 14px; font-weight: bold; color: #333; }}
#{BANNER_ID} .description {{ font-size: 12px; color: #666; }}
#{BANNER_ID} .button {{ float: right; margin: 22px 10px; padding: 6px 12px; border-radius: 4px;
  background: #4a90e2; color: #fff; text-decoration: none; font-size: 13px; }}
</style>"""


class BannerDocument(Protocol):
    """The page the banner is injected into."""

    def has_element(self, element_id: str) -> bool: ...

    def append_to_head(self, markup: str) -> None: ...

    def append_to_body(self, markup: str) -> None: ...


@dataclass
class HtmlDocument:
    """In-memory document collecting head and body fragments."""

    head: list[str] = field(default_factory=list)
    body: list[str] = field(default_factory=list)

    def has_element(self, element_id: str) -> bool:
        marker = f'id="{element_id}"'
        return any(marker in fragment for fragment in self.head + self.body)

    def append_to_head(self, markup: str) -> None:
        self.head.append(markup)

    def append_to_body(self, markup: str) -> None:
        self.body.append(markup)

    def render(self) -> str:
        return (
            "<html><head>" + "".join(self.head) + "</head>"
            "<body>" + "".join(self.body) + "</body></html>"
        )


@dataclass
class BannerOptions:
    """Banner content. ``link`` defaults to the session link."""

    title: str = ""
    description: str = ""
    icon: str = ""
    download_app_button_text: str = "Download"
    link: str | None = None

    @classmethod
    def from_dict(cls, obj: Mapping[str, Any]) -> "BannerOptions":
        """Accept both snake_case and the browser SDK's camelCase button key.

        Keys the banner does not render, such as ``data``, are ignored.
        """
        return cls(
            title=obj.get("title", ""),
            description=obj.get("description", ""),
            icon=obj.get("icon", ""),
            download_app_button_text=obj.get(
                "download_app_button_text", obj.get("downloadAppButtonText", "Download")
            ),
            link=obj.get("link"),
        )


def banner_markup(options: BannerOptions) -> str:
    """Build the banner's HTML."""
    href = html.escape(options.link or "#", quote=True)
    icon = ""
    if options.icon:
        icon = f'<div class="icon"><img src="{html.escape(options.icon, quote=True)}"></div>'
    return (
        f'<div id="{BANNER_ID}">'
        f"{icon}"
        f'<a class="button" href="{href}">{html.escape(options.download_app_button_text)}</a>'
        '<div class="content">'
        f'<div class="title">{html.escape(options.title)}</div>'
        f'<div class="description">{html.escape(options.description)}</div>'
        "</div>"
        "</div>"
    )


def inject_banner(document: BannerDocument, options: BannerOptions, already_shown: bool) -> bool:
    """Insert the banner unless it is on the page or was shown this session.

    Returns:
        True if the banner was inserted.
    """
    if document.has_element(BANNER_ID) or already_shown:
        logger.debug("Banner already present or shown, skipping")
        return False

    document.append_to_head(BANNER_STYLES)
    document.append_to_body(banner_markup(options))
    logger.info(f"Banner injected: {options.title!r}")
    return True
