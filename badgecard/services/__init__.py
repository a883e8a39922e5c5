"""Service layer exports."""

from .badges import Badge, resolve_badges
from .identity import IdentityCardService
from .image_composer import ImageComposer
from .token_cipher import TokenCipherService
from .token_lifecycle import TokenLifecycleManager

__all__ = [
    "Badge",
    "IdentityCardService",
    "ImageComposer",
    "TokenCipherService",
    "TokenLifecycleManager",
    "resolve_badges",
]
