"""
StackSpot identity client.

Performs the OAuth2 client-credentials exchange against the StackSpot IDM
token endpoint.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Dict, Optional

import httpx

from authcore.core.config import StackSpotSettings
from authcore.core.errors import AuthenticationFailedError
from authcore.models.token import TokenResponse

logger = logging.getLogger(__name__)


class StackSpotIdentityClient:
    """Exchange a client id/secret pair for a scoped access token."""

    def __init__(
        self,
        settings: StackSpotSettings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport

    @property
    def token_url(self) -> str:
        return self._settings.token_url

    def exchange_client_credentials(
        self, client_id: str, client_secret: str, scope: str = ""
    ) -> TokenResponse:
        """
        POST a form-encoded client-credentials grant.

        ``scope`` is omitted from the request when empty.
        """
        payload: Dict[str, str] = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        if scope:
            payload["scope"] = scope

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    self.token_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise AuthenticationFailedError(
                f"Token request to StackSpot failed: {exc}", transient=True
            ) from exc

        if response.status_code != HTTPStatus.OK:
            logger.warning("StackSpot token endpoint returned %s", response.status_code)
            raise AuthenticationFailedError(
                f"StackSpot authentication failed: status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise AuthenticationFailedError(
                "StackSpot token endpoint returned a non-JSON body."
            ) from exc

        if not isinstance(token_payload, dict):
            raise AuthenticationFailedError("StackSpot token endpoint returned an unexpected payload.")

        access_token = token_payload.get("access_token")
        expires_in = token_payload.get("expires_in")
        if not access_token or expires_in is None:
            raise AuthenticationFailedError("Incomplete token payload returned from StackSpot.")

        try:
            return TokenResponse(access_token=access_token, expires_in=int(expires_in))
        except (TypeError, ValueError) as exc:
            # pydantic's ValidationError is a ValueError.
            raise AuthenticationFailedError(
                "StackSpot token endpoint returned a malformed token payload."
            ) from exc


__all__ = ["StackSpotIdentityClient"]
