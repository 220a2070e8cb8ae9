"""
Error taxonomy shared by the credential store, token cache and identity providers.

Every failure surfaced by the core derives from ``AuthCoreError`` so callers can
distinguish kinds (re-run setup versus retry later) without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class AuthCoreError(Exception):
    """Base class for all credential and token federation failures."""


class InvalidInputError(AuthCoreError, ValueError):
    """Raised when a required field is empty."""


class NotConfiguredError(AuthCoreError):
    """Raised when credentials or provider configuration are absent.

    ``setup_command`` names the CLI invocation that supplies the missing piece.
    """

    def __init__(
        self, message: str, *, setup_command: str = "authcore user --id ... --secret ..."
    ) -> None:
        super().__init__(message)
        self.setup_command = setup_command


class NotFoundError(AuthCoreError, KeyError):
    """Raised by a credential store when a key is missing."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key not found in credential store: {self.key}"


class StoreError(AuthCoreError):
    """Raised when the credential store backend rejects a read or write."""


class NoGeneratorRegisteredError(AuthCoreError):
    """Raised when a token is requested for an alias without a provider."""

    def __init__(self, alias: str) -> None:
        super().__init__(f"No generator registered for alias: {alias}")
        self.alias = alias


class ProviderError(AuthCoreError):
    """Base class for identity provider failures.

    ``transient`` is set when the failure came from the network (timeout,
    connection refused) rather than from the remote service rejecting us.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.transient = transient


class AuthenticationFailedError(ProviderError):
    """The client-credentials token endpoint refused the exchange."""


class CloudAuthFailedError(ProviderError):
    """Role-based login to the secrets manager failed."""


class SecretFetchFailedError(ProviderError):
    """The secrets manager did not return a usable credential payload."""


class InvalidTokenError(ProviderError):
    """A static token failed its liveness check."""


class TokenGenerationFailedError(AuthCoreError):
    """Wraps any provider failure surfaced through the token cache."""

    def __init__(self, scope: str, alias: str, cause: AuthCoreError) -> None:
        super().__init__(
            f"Failed to generate token for scope {scope} with {alias}: {cause}"
        )
        self.scope = scope
        self.alias = alias
        self.cause = cause

    @property
    def transient(self) -> bool:
        return bool(getattr(self.cause, "transient", False))


def describe_failure(exc: AuthCoreError) -> str:
    """Return a short, user-facing suggestion for the given failure kind."""
    cause = exc.cause if isinstance(exc, TokenGenerationFailedError) else exc
    if isinstance(cause, ProviderError) and cause.transient:
        return "The identity backend could not be reached. Try again shortly."
    if isinstance(cause, InvalidInputError):
        return "Both a client id and a client secret are required."
    if isinstance(cause, NotConfiguredError):
        return f"Configuration is missing. Run `{cause.setup_command}`."
    if isinstance(cause, AuthenticationFailedError):
        return "Credentials were rejected. Re-run `authcore user --id ... --secret ...`."
    if isinstance(cause, CloudAuthFailedError):
        return "Vault login failed. Check the AWS role and the Vault URL (`authcore vault`)."
    if isinstance(cause, SecretFetchFailedError):
        return "Vault did not return the client credentials. Check the secret path."
    if isinstance(cause, InvalidTokenError):
        return "The GitHub token was rejected. Store a new one with `authcore github --token ...`."
    if isinstance(cause, NoGeneratorRegisteredError):
        return "No identity provider handles that alias."
    if isinstance(cause, StoreError):
        return "The credential store could not be accessed."
    return "Token request failed."


__all__ = [
    "AuthCoreError",
    "AuthenticationFailedError",
    "CloudAuthFailedError",
    "InvalidInputError",
    "InvalidTokenError",
    "NoGeneratorRegisteredError",
    "NotConfiguredError",
    "NotFoundError",
    "ProviderError",
    "SecretFetchFailedError",
    "StoreError",
    "TokenGenerationFailedError",
    "describe_failure",
]
