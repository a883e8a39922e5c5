from __future__ import annotations

import io

import pytest
from PIL import Image

from badgecard.core.exceptions import RenderError
from badgecard.models.profile import Profile
from badgecard.services.badges import Badge
from badgecard.services.image_composer import (
    AVATAR_SIZE,
    BADGE_HEIGHT,
    PADDING,
    ImageComposer,
    badge_icon_url,
    compute_layout,
)

from fakes import make_png

ICON_BASE = "https://icons.example/PNG"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def profile() -> Profile:
    return Profile(
        id="80351110224678912",
        username="nelly",
        discriminator="1337",
        avatar="8342729096ea3675442027381ff50dfe",
    )


@pytest.fixture
def composer(asset_client) -> ImageComposer:
    return ImageComposer(asset_client, badge_icon_base_url=ICON_BASE + "/")


def test_badge_icon_url_substitutes_icon_name() -> None:
    assert badge_icon_url(Badge.BUG_HUNTER_2, ICON_BASE) == f"{ICON_BASE}/Bug_Hunter_level2.png"
    assert badge_icon_url(Badge.NITRO, ICON_BASE + "/") == f"{ICON_BASE}/nitro.png"


def test_layout_without_badges_is_avatar_and_text() -> None:
    layout = compute_layout(name_width=100, tag_width=40, text_height=30, badge_widths=[])

    assert layout.width == 2 * PADDING + AVATAR_SIZE + 10 + 140
    assert layout.height == 2 * PADDING + AVATAR_SIZE
    assert layout.avatar_origin == (PADDING, PADDING)
    assert layout.tag_origin[0] == layout.name_origin[0] + 100
    assert layout.badge_origins == ()


def test_layout_places_badges_left_to_right_after_text() -> None:
    layout = compute_layout(name_width=100, tag_width=0, text_height=30, badge_widths=[32, 48, 32])

    xs = [x for x, _ in layout.badge_origins]
    assert xs == sorted(xs)
    assert xs[0] > layout.name_origin[0] + 100
    assert xs[1] - xs[0] >= 32
    assert xs[2] - xs[1] >= 48
    assert xs[2] + 32 < layout.width
    assert all(y + BADGE_HEIGHT <= layout.height for _, y in layout.badge_origins)


@pytest.mark.asyncio
async def test_render_produces_transparent_png(composer, asset_client, profile) -> None:
    image_bytes = await composer.render(profile, [Badge.STAFF, Badge.NITRO])

    assert image_bytes.startswith(PNG_MAGIC)
    image = Image.open(io.BytesIO(image_bytes))
    assert image.mode == "RGBA"
    assert image.getpixel((0, 0))[3] == 0
    # Avatar centre is opaque, its bounding-box corner is masked out.
    assert image.getpixel((PADDING + AVATAR_SIZE // 2, image.height // 2))[3] == 255
    assert image.getpixel((PADDING, PADDING))[3] == 0


@pytest.mark.asyncio
async def test_render_fetches_avatar_then_badges_in_order(composer, asset_client, profile) -> None:
    await composer.render(profile, [Badge.HYPESQUAD_BALANCE, Badge.EARLY_SUPPORTER, Badge.NITRO])

    assert asset_client.requested == [
        profile.avatar_url(AVATAR_SIZE),
        f"{ICON_BASE}/HypeSquad_Balance.png",
        f"{ICON_BASE}/early_supporter.png",
        f"{ICON_BASE}/nitro.png",
    ]


@pytest.mark.asyncio
async def test_render_is_deterministic(composer, profile) -> None:
    badges = [Badge.PARTNER, Badge.BUG_HUNTER]

    first = await composer.render(profile, badges)
    second = await composer.render(profile, badges)

    assert first == second


@pytest.mark.asyncio
async def test_badges_widen_the_card(composer, profile) -> None:
    plain = Image.open(io.BytesIO(await composer.render(profile, [])))
    badged = Image.open(io.BytesIO(await composer.render(profile, [Badge.STAFF, Badge.NITRO])))

    assert badged.width > plain.width


@pytest.mark.asyncio
async def test_unreachable_icon_raises_render_error(composer, asset_client, profile) -> None:
    asset_client.error = RenderError("Asset returned HTTP 404.")

    with pytest.raises(RenderError):
        await composer.render(profile, [Badge.STAFF])


@pytest.mark.asyncio
async def test_undecodable_avatar_raises_render_error(composer, asset_client, profile) -> None:
    asset_client.payloads[profile.avatar_url(AVATAR_SIZE)] = b"not an image"

    with pytest.raises(RenderError):
        await composer.render(profile, [])


@pytest.mark.asyncio
async def test_wide_icons_keep_aspect_ratio(composer, asset_client, profile) -> None:
    asset_client.payloads[f"{ICON_BASE}/nitro.png"] = make_png((128, 64))

    narrow = Image.open(io.BytesIO(await composer.render(profile, [Badge.STAFF])))
    wide = Image.open(io.BytesIO(await composer.render(profile, [Badge.NITRO])))

    assert wide.width - narrow.width == BADGE_HEIGHT
