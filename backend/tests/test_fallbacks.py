"""Static fallback table tests."""

import pytest

from clipforge.services import fallbacks
from clipforge.services.fallbacks import ContentType


@pytest.mark.parametrize("table", [
    fallbacks.FALLBACK_SCRIPTS,
    fallbacks.FALLBACK_IMAGES,
    fallbacks.RENDER_TEMPLATES,
])
def test_every_content_type_has_an_entry(table):
    assert set(table) == set(ContentType)
    assert all(table.values())


@pytest.mark.parametrize("raw,expected", [
    ("tiktok", ContentType.TIKTOK),
    (" VSL ", ContentType.VSL),
    ("Reels", ContentType.REELS),
    ("podcast", ContentType.CUSTOM),
    ("", ContentType.CUSTOM),
    (None, ContentType.CUSTOM),
])
def test_parse(raw, expected):
    assert ContentType.parse(raw) == expected


def test_short_form_types_share_the_short_form_script():
    assert fallbacks.fallback_script(ContentType.TIKTOK) == fallbacks.fallback_script(ContentType.REELS)
    assert fallbacks.fallback_script(ContentType.VSL) == fallbacks.fallback_script(ContentType.ADS)
    assert fallbacks.fallback_script(ContentType.CUSTOM) == fallbacks.DEFAULT_FALLBACK_SCRIPT


def test_vertical_types():
    assert ContentType.TIKTOK.is_vertical
    assert ContentType.SHORTS.is_vertical
    assert not ContentType.VSL.is_vertical


@pytest.mark.parametrize("content_type", list(ContentType))
def test_fallback_video_url_is_deterministic(content_type):
    url = fallbacks.fallback_video_url(content_type)
    assert url == fallbacks.fallback_video_url(content_type)
    assert url.startswith(fallbacks.FALLBACK_CDN)
    assert content_type.value in url


def test_render_template_overrides():
    assert fallbacks.render_template(ContentType.VSL) == "vsl-template-id"
    assert fallbacks.render_template(ContentType.VSL, {"vsl": "tpl-123"}) == "tpl-123"
    assert fallbacks.render_template(ContentType.ADS, {"vsl": "tpl-123"}) == "ads-template-id"
