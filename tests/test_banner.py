"""Tests for the smart banner."""

from branchweb.banner import BANNER_ID, BannerOptions, HtmlDocument, banner_markup, inject_banner
from conftest import APP_ID, OPEN_RESPONSE

OPTIONS = {
    "icon": "http://icons.example.com/app.png",
    "title": "Branch Demo App",
    "description": "The Branch demo app!",
    "openAppButtonText": "Open",
    "downloadAppButtonText": "Get the app",
    "data": {"foo": "bar"},
}


def test_options_accept_browser_keys():
    options = BannerOptions.from_dict(OPTIONS)

    assert options.download_app_button_text == "Get the app"
    assert "Get the app" in banner_markup(options)


def test_markup_escapes_content():
    markup = banner_markup(BannerOptions(title="<b>Shop</b>", link='https://bnc.lt/i/"x"'))

    assert f'id="{BANNER_ID}"' in markup
    assert "&lt;b&gt;Shop&lt;/b&gt;" in markup
    assert "&quot;x&quot;" in markup


def test_inject_into_empty_document():
    document = HtmlDocument()

    assert inject_banner(document, BannerOptions.from_dict(OPTIONS), already_shown=False) is True
    assert len(document.head) == 1
    assert document.has_element(BANNER_ID)
    assert "Branch Demo App" in document.render()


def test_inject_skips_when_present_or_shown():
    document = HtmlDocument(body=[f'<div id="{BANNER_ID}"></div>'])
    assert inject_banner(document, BannerOptions(), already_shown=False) is False
    assert document.head == []

    assert inject_banner(HtmlDocument(), BannerOptions(), already_shown=True) is False


async def test_branch_banner_once_per_session(make_branch, storage):
    branch = make_branch()
    await branch.initialize(APP_ID)

    first = HtmlDocument()
    second = HtmlDocument()

    assert branch.banner(OPTIONS, first) is True
    assert branch.banner(OPTIONS, second) is False
    assert storage.read_key("bannerShown") is True
    assert OPEN_RESPONSE["link"] in first.render()
    assert second.body == []
    await branch.aclose()
