"""Command-line surface for credential setup and scoped token access.

Example usages::

    # Store a StackSpot client pair in the OS keyring.
    python -m scripts.auth_cli user --id CLIENT_ID --secret CLIENT_SECRET

    # Configure the Vault-mediated provider.
    python -m scripts.auth_cli vault --url https://vault.example.com --role stackspot-role

    # Print a token for the execution scope (cached until it expires).
    python -m scripts.auth_cli token execution

    # Drop every cached StackSpot token, e.g. after the API answered 401.
    python -m scripts.auth_cli invalidate --all
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional, cast

from authcore.core.config import get_settings
from authcore.core.errors import (
    AuthCoreError,
    InvalidInputError,
    NotConfiguredError,
    ProviderError,
    TokenGenerationFailedError,
    describe_failure,
)
from authcore.core.logging import configure_logging
from authcore.dependencies import get_generator_registry
from authcore.models.token import ProviderAlias, Scope
from authcore.services import (
    GeneratorRegistry,
    GitHubProvider,
    TokenCache,
    VaultProvider,
    build_auth_service,
)

EXIT_OK = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_NOT_CONFIGURED = 3
EXIT_AUTH_FAILED = 4
EXIT_TRANSIENT = 5


def _exit_code_for(exc: AuthCoreError) -> int:
    cause = exc.cause if isinstance(exc, TokenGenerationFailedError) else exc
    if isinstance(cause, InvalidInputError):
        return EXIT_INVALID_INPUT
    if isinstance(cause, NotConfiguredError):
        return EXIT_NOT_CONFIGURED
    if isinstance(cause, ProviderError):
        return EXIT_TRANSIENT if cause.transient else EXIT_AUTH_FAILED
    return EXIT_RUNTIME_ERROR


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Configure identity backends and obtain scoped access tokens."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    scope_choices = [scope.value for scope in Scope]

    def add_alias_argument(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--alias",
            default=ProviderAlias.STACKSPOT_API.value,
            help="Identity provider alias (default: stackspot-api).",
        )

    user_parser = subparsers.add_parser("user", help="Store the StackSpot client id and secret.")
    user_parser.add_argument("--id", dest="client_id", required=True, help="Client ID")
    user_parser.add_argument("--secret", dest="client_secret", required=True, help="Client Secret")

    vault_parser = subparsers.add_parser(
        "vault", help="Configure the Vault-mediated StackSpot provider."
    )
    vault_parser.add_argument("--url", required=True, help="Vault base URL.")
    vault_parser.add_argument("--role", required=True, help="Vault role bound to the AWS identity.")
    vault_parser.add_argument(
        "--path", default="", help="Secret path holding client_id/client_secret."
    )

    github_parser = subparsers.add_parser("github", help="Validate and store a GitHub token.")
    github_parser.add_argument("--token", required=True, help="Personal access token.")

    token_parser = subparsers.add_parser("token", help="Print a valid token for a scope.")
    token_parser.add_argument("scope", choices=scope_choices)
    add_alias_argument(token_parser)

    invalidate_parser = subparsers.add_parser(
        "invalidate", help="Delete cached tokens so the next request regenerates them."
    )
    target = invalidate_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("scope", nargs="?", choices=scope_choices)
    target.add_argument("--all", action="store_true", help="Invalidate every scope.")
    add_alias_argument(invalidate_parser)

    subparsers.add_parser("status", help="Show configuration and cached token state.")
    subparsers.add_parser("whoami", help="Show the GitHub user behind the stored token.")
    subparsers.add_parser("repos", help="List repositories visible to the stored GitHub token.")

    return parser


def _print_status(registry: GeneratorRegistry) -> int:
    service = build_auth_service(registry)
    cache = TokenCache(registry.store, registry)
    print(f"Auth mode: {get_settings().auth.mode}")
    print(f"StackSpot credentials configured: {'yes' if service.is_setup() else 'no'}")
    for alias in registry.aliases():
        for scope in Scope:
            record = cache.peek(scope, alias)
            if record is None:
                continue
            state = "valid" if record.is_valid() else "expired"
            print(f"  {alias:<16} {scope.value:<10} {state} until {record.expires_at.isoformat()}")
    return EXIT_OK


def main(argv: list[str] | None = None, registry: Optional[GeneratorRegistry] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(get_settings().log_level)
    registry = registry if registry is not None else get_generator_registry()
    service = build_auth_service(registry)

    def setup_user() -> int:
        service.setup_credentials(args.client_id, args.client_secret)
        print("Credentials saved successfully.")
        return EXIT_OK

    def setup_vault() -> int:
        provider = cast(VaultProvider, registry.get(ProviderAlias.HASHICORP_VAULT))
        provider.save_config(args.url, args.role, args.path)
        print("Vault configuration saved.")
        return EXIT_OK

    def setup_github() -> int:
        provider = cast(GitHubProvider, registry.get(ProviderAlias.GITHUB))
        provider.save_token(args.token)
        print("GitHub token validated and saved.")
        return EXIT_OK

    def print_token() -> int:
        scope = Scope(args.scope)
        if args.alias == ProviderAlias.STACKSPOT_API.value:
            token = service.get_valid_token(scope)
        else:
            token = service.get_token_for(scope, args.alias)
        print(token)
        return EXIT_OK

    def invalidate() -> int:
        if args.all:
            service.invalidate_all_tokens(args.alias)
            print("All cached tokens removed.")
        else:
            service.invalidate_token(Scope(args.scope), args.alias)
            print(f"Cached token for {args.scope} removed.")
        return EXIT_OK

    def whoami() -> int:
        provider = cast(GitHubProvider, registry.get(ProviderAlias.GITHUB))
        user = provider.get_user()
        print(f"{user.login} ({user.name or 'no name'})")
        return EXIT_OK

    def list_repos() -> int:
        provider = cast(GitHubProvider, registry.get(ProviderAlias.GITHUB))
        for repo in provider.list_repositories():
            print(repo.get("full_name") or repo.get("name", ""))
        return EXIT_OK

    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "user": setup_user,
        "vault": setup_vault,
        "github": setup_github,
        "token": print_token,
        "invalidate": invalidate,
        "status": lambda: _print_status(registry),
        "whoami": whoami,
        "repos": list_repos,
    }

    try:
        return handlers[command]()
    except AuthCoreError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(describe_failure(exc), file=sys.stderr)
        return _exit_code_for(exc)


def run() -> None:  # pragma: no cover - console script entry point
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
