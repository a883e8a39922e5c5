"""Map Discord user flag bits and premium tier to displayable badges."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Badge(str, Enum):
    STAFF = "staff"
    PARTNER = "partner"
    HYPESQUAD_EVENT = "hypesquad-event"
    BUG_HUNTER = "bug-hunter"
    HYPESQUAD_BRAVERY = "hypesquad-bravery"
    HYPESQUAD_BRILLIANCE = "hypesquad-brilliance"
    HYPESQUAD_BALANCE = "hypesquad-balance"
    EARLY_SUPPORTER = "early-supporter"
    BUG_HUNTER_2 = "bug-hunter-2"
    VERIFIED_BOT_DEVELOPER = "verified-bot-developer"
    CERTIFIED_MODERATOR = "certified-moderator"
    NITRO = "nitro"


# Ascending by bit index; rendering order follows this table.
BADGE_BITS: tuple[tuple[int, Badge], ...] = (
    (0, Badge.STAFF),
    (1, Badge.PARTNER),
    (2, Badge.HYPESQUAD_EVENT),
    (3, Badge.BUG_HUNTER),
    (6, Badge.HYPESQUAD_BRAVERY),
    (7, Badge.HYPESQUAD_BRILLIANCE),
    (8, Badge.HYPESQUAD_BALANCE),
    (9, Badge.EARLY_SUPPORTER),
    (14, Badge.BUG_HUNTER_2),
    (17, Badge.VERIFIED_BOT_DEVELOPER),
    (18, Badge.CERTIFIED_MODERATOR),
)


def resolve_badges(flags: Optional[int], premium_type: Optional[int]) -> list[Badge]:
    """
    Return the badges for a flags bitmask, in table order, with Nitro last.

    Bits without a table entry are ignored.
    """
    flags = flags or 0
    badges = [badge for bit, badge in BADGE_BITS if flags & (1 << bit)]
    if premium_type:
        badges.append(Badge.NITRO)
    return badges


__all__ = ["BADGE_BITS", "Badge", "resolve_badges"]
