"""
Render a Discord identity card (avatar, name, badges) as a transparent PNG.

Layout is computed by a pure function from measured text and icon sizes, so the
same profile and badge sequence always produce the same image given the same
downloaded assets.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from PIL import Image, ImageChops, ImageDraw, ImageFont

from badgecard.clients.cdn import AssetClient
from badgecard.core.exceptions import RenderError
from badgecard.models.profile import Profile
from badgecard.services.badges import Badge

logger = logging.getLogger(__name__)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

PADDING = 10
AVATAR_SIZE = 128
AVATAR_GAP = 10
BADGE_HEIGHT = 32
BADGE_GAP = 4
BADGE_REGION_PADDING = 15
FONT_SIZE = 28
NAME_COLOR = (255, 255, 255, 255)
TAG_COLOR = (185, 187, 190, 255)

BADGE_ICON_NAMES: dict[Badge, str] = {
    Badge.STAFF: "Discord_Staff",
    Badge.PARTNER: "discord_partner",
    Badge.HYPESQUAD_EVENT: "HypeSquad_Event",
    Badge.BUG_HUNTER: "Bug_Hunter",
    Badge.HYPESQUAD_BRAVERY: "HypeSquad_Bravery",
    Badge.HYPESQUAD_BRILLIANCE: "HypeSquad_Brilliance",
    Badge.HYPESQUAD_BALANCE: "HypeSquad_Balance",
    Badge.EARLY_SUPPORTER: "early_supporter",
    Badge.BUG_HUNTER_2: "Bug_Hunter_level2",
    Badge.VERIFIED_BOT_DEVELOPER: "Verified_Bot_Developer",
    Badge.CERTIFIED_MODERATOR: "Discord_certified_moderator",
    Badge.NITRO: "nitro",
}


def badge_icon_url(badge: Badge, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/{BADGE_ICON_NAMES[badge]}.png"


@dataclass(frozen=True)
class CardLayout:
    """Pixel positions of every element on the card."""

    width: int
    height: int
    avatar_origin: tuple[int, int]
    name_origin: tuple[int, int]
    tag_origin: tuple[int, int]
    badge_origins: tuple[tuple[int, int], ...]


def compute_layout(
    *,
    name_width: int,
    tag_width: int,
    text_height: int,
    badge_widths: Sequence[int],
) -> CardLayout:
    """Place the main region (avatar and name) left of the badges region."""
    main_width = AVATAR_SIZE + AVATAR_GAP + name_width + tag_width
    main_height = max(AVATAR_SIZE, text_height)

    badges_width = 0
    badges_height = 0
    if badge_widths:
        badges_width = (
            2 * BADGE_REGION_PADDING
            + sum(badge_widths)
            + BADGE_GAP * (len(badge_widths) - 1)
        )
        badges_height = 2 * BADGE_REGION_PADDING + BADGE_HEIGHT

    width = 2 * PADDING + main_width + badges_width
    height = 2 * PADDING + max(main_height, badges_height)
    center_y = height // 2

    avatar_origin = (PADDING, center_y - AVATAR_SIZE // 2)
    text_x = PADDING + AVATAR_SIZE + AVATAR_GAP
    text_y = center_y - text_height // 2
    name_origin = (text_x, text_y)
    tag_origin = (text_x + name_width, text_y)

    badge_origins = []
    cursor = PADDING + main_width + BADGE_REGION_PADDING
    badge_y = center_y - BADGE_HEIGHT // 2
    for badge_width in badge_widths:
        badge_origins.append((cursor, badge_y))
        cursor += badge_width + BADGE_GAP

    return CardLayout(
        width=width,
        height=height,
        avatar_origin=avatar_origin,
        name_origin=name_origin,
        tag_origin=tag_origin,
        badge_origins=tuple(badge_origins),
    )


class ImageComposer:
    """Compose identity cards from a profile and an ordered badge sequence."""

    def __init__(
        self,
        asset_client: AssetClient,
        *,
        badge_icon_base_url: str,
        font_path: Optional[Path] = None,
    ) -> None:
        self._assets = asset_client
        self._badge_icon_base_url = badge_icon_base_url
        self._font_path = font_path

    async def render(self, profile: Profile, badges: Sequence[Badge]) -> bytes:
        """Download the avatar and badge icons, then draw and encode the card."""
        urls = [profile.avatar_url(AVATAR_SIZE)]
        urls.extend(badge_icon_url(badge, self._badge_icon_base_url) for badge in badges)
        avatar_bytes, *icon_bytes = await self._assets.fetch_many(urls)

        try:
            return await asyncio.to_thread(self._compose, profile, avatar_bytes, icon_bytes)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.warning("Failed to compose card for user %s: %s", profile.id, exc)
            raise RenderError(f"Failed to compose card for user {profile.id}.") from exc

    def _load_font(self) -> FontType:
        if self._font_path is not None:
            return ImageFont.truetype(str(self._font_path), FONT_SIZE)
        return ImageFont.load_default(size=FONT_SIZE)

    def _compose(self, profile: Profile, avatar_bytes: bytes, icon_bytes: Sequence[bytes]) -> bytes:
        font = self._load_font()
        name = profile.username
        tag = profile.display_tag

        name_width = int(round(font.getlength(name)))
        tag_width = int(round(font.getlength(tag))) if tag else 0
        text_height = font.getbbox(name + tag)[3]

        icons = [_scale_to_height(_open_rgba(data), BADGE_HEIGHT) for data in icon_bytes]
        layout = compute_layout(
            name_width=name_width,
            tag_width=tag_width,
            text_height=text_height,
            badge_widths=[icon.width for icon in icons],
        )

        canvas = Image.new("RGBA", (layout.width, layout.height), (0, 0, 0, 0))
        canvas.alpha_composite(_circular_avatar(_open_rgba(avatar_bytes)), dest=layout.avatar_origin)

        draw = ImageDraw.Draw(canvas)
        draw.text(layout.name_origin, name, font=font, fill=NAME_COLOR)
        if tag:
            draw.text(layout.tag_origin, tag, font=font, fill=TAG_COLOR)

        for icon, origin in zip(icons, layout.badge_origins):
            canvas.alpha_composite(icon, dest=origin)

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG")
        return buffer.getvalue()


def _open_rgba(data: bytes) -> Image.Image:
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.convert("RGBA")


def _scale_to_height(image: Image.Image, height: int) -> Image.Image:
    width = max(1, round(image.width * height / image.height))
    return image.resize((width, height), Image.Resampling.LANCZOS)


def _circular_avatar(image: Image.Image) -> Image.Image:
    avatar = image.resize((AVATAR_SIZE, AVATAR_SIZE), Image.Resampling.LANCZOS)
    mask = Image.new("L", avatar.size, 0)
    ImageDraw.Draw(mask).ellipse((0, 0, AVATAR_SIZE - 1, AVATAR_SIZE - 1), fill=255)
    avatar.putalpha(ImageChops.multiply(avatar.getchannel("A"), mask))
    return avatar


__all__ = [
    "BADGE_ICON_NAMES",
    "CardLayout",
    "ImageComposer",
    "badge_icon_url",
    "compute_layout",
]
