"""
FastAPI routes for the IAM procedures and provider verification.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse

from stamp_iam.core.config import AppSettings
from stamp_iam.core.errors import UnknownProviderError
from stamp_iam.dependencies import (
    get_app_settings,
    get_channel_hub,
    get_oauth_clients,
    get_provider_registry,
)
from stamp_iam.handshake import ChannelHub, channel_name
from stamp_iam.providers import ProviderRegistry
from stamp_iam.schemas import (
    AuthUrlRequest,
    AuthUrlResponse,
    ProviderVerification,
    RedirectData,
    RedirectMessage,
    RequestPayload,
    VerifyResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_CALLBACK_PAGE = """<!doctype html>
<html>
  <head><title>{title}</title></head>
  <body>
    <p>{body}</p>
    <script>window.close();</script>
  </body>
</html>
"""


def _platform_client(platform: str, oauth_clients: Dict[str, Any]) -> Any:
    client = oauth_clients.get(platform)
    if client is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Unsupported platform '{platform}'.",
        )
    return client


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post(
    "/{platform}/generateAuthUrl",
    status_code=HTTPStatus.OK,
    response_model=AuthUrlResponse,
    response_model_by_alias=True,
)
async def generate_auth_url(
    platform: str,
    payload: AuthUrlRequest,
    oauth_clients: Annotated[Dict[str, Any], Depends(get_oauth_clients)],
) -> AuthUrlResponse:
    """Issue an authorization URL whose state is a fresh session key."""
    client = _platform_client(platform, oauth_clients)
    auth_url, session_key = client.build_authorization_url(payload.callback)
    logger.info(
        "Issued authorization URL",
        extra={"platform": platform, "session_key": session_key},
    )
    return AuthUrlResponse(auth_url=auth_url)


@router.get("/{platform}/callback", response_class=HTMLResponse)
async def oauth_callback(
    platform: str,
    oauth_clients: Annotated[Dict[str, Any], Depends(get_oauth_clients)],
    hub: Annotated[ChannelHub, Depends(get_channel_hub)],
    state: str = Query(..., description="Session key issued with the authorization URL."),
    code: Optional[str] = Query(None, description="Authorization code from the provider."),
    error: Optional[str] = Query(None, description="Error reported by the provider."),
) -> HTMLResponse:
    """Popup landing page: forward the redirect to the initiating side."""
    _platform_client(platform, oauth_clients)

    if error or not code:
        logger.info(
            "Authorization not completed: %s",
            error or "missing code",
            extra={"platform": platform, "session_key": state},
        )
        return HTMLResponse(
            _CALLBACK_PAGE.format(
                title="Authorization cancelled",
                body="Authorization was not completed. You can close this window.",
            )
        )

    message = RedirectMessage(target=platform, data=RedirectData(code=code, state=state))
    hub.post_message(channel_name(platform), message)
    return HTMLResponse(
        _CALLBACK_PAGE.format(
            title="Authorization complete",
            body="Authorization complete. You can close this window.",
        )
    )


@router.post("/verify", status_code=HTTPStatus.OK, response_model_exclude_none=True)
async def verify_credentials(
    payload: RequestPayload,
    registry: Annotated[ProviderRegistry, Depends(get_provider_registry)],
) -> VerifyResponse:
    """Verify the requested provider types against the supplied proofs."""
    provider_types = payload.requested_types()
    if not provider_types:
        raise HTTPException(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            detail="Request must name at least one provider type.",
        )

    try:
        results = await registry.verify(provider_types, payload)
    except UnknownProviderError as exc:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND,
            detail=f"Unknown provider type '{exc.args[0]}'.",
        ) from exc

    return VerifyResponse(
        credentials=[
            ProviderVerification(type=name, valid=result.valid, record=result.record)
            for name, result in results
        ]
    )


__all__ = ["router"]
