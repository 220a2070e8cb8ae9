"""
FastAPI routes for credential setup and token issuance.

Used when the core runs as a long-lived local or serverless service instead of
a one-shot CLI invocation.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from authcore.core.config import AppSettings
from authcore.core.errors import (
    AuthCoreError,
    InvalidInputError,
    NoGeneratorRegisteredError,
    NotConfiguredError,
    ProviderError,
    TokenGenerationFailedError,
    describe_failure,
)
from authcore.dependencies import (
    get_app_settings,
    get_auth_service,
    get_generator_registry,
    get_github_provider,
    get_token_cache,
    get_vault_provider,
)
from authcore.models.token import ProviderAlias, Scope
from authcore.schemas import (
    AuthStatusResponse,
    CachedTokenStatus,
    ClientCredentialsPayload,
    GitHubTokenPayload,
    TokenIssueResponse,
    VaultConfigPayload,
)
from authcore.services import (
    AuthService,
    GeneratorRegistry,
    GitHubProvider,
    TokenCache,
    VaultProvider,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_http_error(exc: AuthCoreError) -> HTTPException:
    """Map a core failure kind onto an HTTP status the caller can act on."""
    detail = {"error": type(exc).__name__, "message": str(exc), "hint": describe_failure(exc)}
    if isinstance(exc, InvalidInputError):
        status_code = HTTPStatus.BAD_REQUEST
    elif isinstance(exc, NotConfiguredError):
        status_code = HTTPStatus.CONFLICT
    elif isinstance(exc, NoGeneratorRegisteredError):
        status_code = HTTPStatus.NOT_FOUND
    elif isinstance(exc, (TokenGenerationFailedError, ProviderError)) and exc.transient:
        status_code = HTTPStatus.SERVICE_UNAVAILABLE
    elif isinstance(exc, TokenGenerationFailedError):
        status_code = HTTPStatus.BAD_GATEWAY
    elif isinstance(exc, ProviderError):
        status_code = HTTPStatus.BAD_REQUEST
    else:
        status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    return HTTPException(status_code=status_code, detail=detail)


@router.post("/auth/credentials", status_code=HTTPStatus.NO_CONTENT)
def setup_credentials(
    payload: ClientCredentialsPayload,
    service: AuthService = Depends(get_auth_service),
) -> Response:
    """Store the StackSpot client pair."""
    try:
        service.setup_credentials(payload.client_id, payload.client_secret)
    except AuthCoreError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.put("/auth/providers/vault", status_code=HTTPStatus.NO_CONTENT)
def configure_vault(
    payload: VaultConfigPayload,
    provider: VaultProvider = Depends(get_vault_provider),
) -> Response:
    try:
        provider.save_config(payload.vault_url, payload.aws_role, payload.secret_path)
    except AuthCoreError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.put("/auth/providers/github", status_code=HTTPStatus.NO_CONTENT)
def configure_github(
    payload: GitHubTokenPayload,
    provider: GitHubProvider = Depends(get_github_provider),
) -> Response:
    try:
        provider.save_token(payload.token)
    except AuthCoreError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/auth/status", response_model=AuthStatusResponse)
def auth_status(
    service: AuthService = Depends(get_auth_service),
    registry: GeneratorRegistry = Depends(get_generator_registry),
    cache: TokenCache = Depends(get_token_cache),
    settings: AppSettings = Depends(get_app_settings),
) -> AuthStatusResponse:
    """Report configuration and cached token state without contacting any provider."""
    tokens: List[CachedTokenStatus] = []
    for alias in registry.aliases():
        for scope in Scope:
            record = cache.peek(scope, alias)
            tokens.append(
                CachedTokenStatus(
                    scope=scope.value,
                    alias=alias,
                    cached=record is not None,
                    expires_at=record.expires_at if record else None,
                    valid=record.is_valid() if record else False,
                )
            )
    return AuthStatusResponse(
        configured=service.is_setup(),
        auth_mode=settings.auth.mode,
        providers=registry.aliases(),
        tokens=tokens,
    )


@router.post("/tokens/{scope}", response_model=TokenIssueResponse)
def issue_token(
    scope: Scope,
    alias: str = Query(ProviderAlias.STACKSPOT_API.value),
    service: AuthService = Depends(get_auth_service),
) -> TokenIssueResponse:
    """Return a valid token for ``scope``, generating one when the cache is cold."""
    try:
        if alias == ProviderAlias.STACKSPOT_API.value:
            token = service.get_valid_token(scope)
        else:
            token = service.get_token_for(scope, alias)
    except AuthCoreError as exc:
        logger.warning("Token request for %s/%s failed: %s", scope.value, alias, exc)
        raise _to_http_error(exc) from exc
    return TokenIssueResponse(scope=scope.value, alias=alias, access_token=token)


@router.delete("/tokens/{scope}", status_code=HTTPStatus.NO_CONTENT)
def invalidate_token(
    scope: Scope,
    alias: str = Query(ProviderAlias.STACKSPOT_API.value),
    service: AuthService = Depends(get_auth_service),
) -> Response:
    try:
        service.invalidate_token(scope, alias)
    except AuthCoreError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.delete("/tokens", status_code=HTTPStatus.NO_CONTENT)
def invalidate_all_tokens(
    alias: str = Query(ProviderAlias.STACKSPOT_API.value),
    service: AuthService = Depends(get_auth_service),
) -> Response:
    try:
        service.invalidate_all_tokens(alias)
    except AuthCoreError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


__all__ = ["router"]
