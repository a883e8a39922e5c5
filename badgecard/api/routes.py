"""
FastAPI routes for the identity card service.
"""

from __future__ import annotations

import html
import logging
from http import HTTPStatus
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from badgecard.clients import DiscordOAuthClient
from badgecard.core.exceptions import (
    BadgeCardError,
    ClientInputError,
    StoreError,
    UnknownUserError,
)
from badgecard.dependencies import get_discord_oauth_client, get_identity_card_service
from badgecard.services import IdentityCardService

router = APIRouter()

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to render identity card."


def _error(status_code: HTTPStatus, message: str) -> HTTPException:
    """Error responses carry a `{"message", "code"}` object as their detail."""
    return HTTPException(
        status_code=status_code,
        detail={"message": message, "code": int(status_code)},
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/", status_code=HTTPStatus.OK, response_class=Response)
async def render_identity_card(
    service: Annotated[IdentityCardService, Depends(get_identity_card_service)],
    userid: Optional[str] = Query(
        default=None,
        description="Discord user id of a previously authorized account.",
    ),
) -> Response:
    """Return the user's identity card as a transparent PNG."""
    try:
        if not userid:
            raise ClientInputError("Missing userid parameter")
        image = await service.render_card(userid)
    except ClientInputError as exc:
        raise _error(HTTPStatus.BAD_REQUEST, str(exc)) from exc
    except UnknownUserError as exc:
        raise _error(HTTPStatus.NOT_FOUND, "User not found") from exc
    except BadgeCardError as exc:
        logger.warning("Identity card request for user %s failed: %r", userid, exc)
        raise _error(HTTPStatus.INTERNAL_SERVER_ERROR, GENERIC_FAILURE) from exc

    return Response(content=image, media_type="image/png")


@router.get("/auth", status_code=HTTPStatus.OK, response_class=HTMLResponse)
async def handle_discord_oauth_callback(
    oauth_client: Annotated[DiscordOAuthClient, Depends(get_discord_oauth_client)],
    service: Annotated[IdentityCardService, Depends(get_identity_card_service)],
    code: Optional[str] = Query(
        default=None,
        description="Authorization code returned by Discord.",
    ),
) -> Response:
    """Complete the OAuth exchange, or send the browser to the consent screen."""
    if not code:
        return RedirectResponse(
            url=oauth_client.build_authorization_url(),
            status_code=HTTPStatus.TEMPORARY_REDIRECT,
        )

    try:
        profile = await service.complete_authorization(code)
    except StoreError as exc:
        logger.error("Failed to persist credentials after authorization: %r", exc)
        raise _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to store token") from exc
    except BadgeCardError as exc:
        logger.warning("Authorization callback failed: %r", exc)
        raise _error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to get token") from exc

    display_name = html.escape(f"{profile.username}{profile.display_tag}")
    return HTMLResponse(
        content=(
            f"<h1>You have been authenticated as {display_name}</h1>\n"
            "<p>You can now close this tab</p>\n"
        )
    )


__all__ = ["router"]
