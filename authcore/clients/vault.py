"""
HashiCorp Vault client.

Logs in through the AWS IAM auth method and reads KV secrets. The IAM login
signs an ``sts:GetCallerIdentity`` request with the caller's AWS credentials;
Vault replays it against STS to prove the caller's role.
"""

from __future__ import annotations

import base64
import json
import logging
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional

import boto3
import httpx
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.exceptions import BotoCoreError

from authcore.core.config import VaultSettings
from authcore.core.errors import CloudAuthFailedError, SecretFetchFailedError

logger = logging.getLogger(__name__)

_STS_BODY = "Action=GetCallerIdentity&Version=2011-06-15"


def _b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("utf-8")


class VaultClient:
    """Thin wrapper around the Vault HTTP API endpoints this core needs."""

    def __init__(
        self,
        settings: VaultSettings,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        session_factory: Optional[Callable[[], boto3.Session]] = None,
    ) -> None:
        self._settings = settings
        self._timeout = timeout
        self._transport = transport
        self._session_factory = session_factory or (
            lambda: boto3.Session(region_name=settings.region_name)
        )

    def _sts_url(self) -> str:
        region = self._settings.region_name
        if region == "us-east-1":
            return "https://sts.amazonaws.com/"
        return f"https://sts.{region}.amazonaws.com/"

    def build_iam_login_payload(self, role: str) -> Dict[str, str]:
        """Sign a GetCallerIdentity request and package it for ``auth/aws/login``."""
        try:
            credentials = self._session_factory().get_credentials()
        except BotoCoreError as exc:
            raise CloudAuthFailedError(f"Unable to resolve AWS credentials: {exc}") from exc
        if credentials is None:
            raise CloudAuthFailedError("No AWS credentials available for Vault IAM login.")

        url = self._sts_url()
        headers = {"Content-Type": "application/x-www-form-urlencoded; charset=utf-8"}
        if self._settings.iam_server_id:
            headers["X-Vault-AWS-IAM-Server-ID"] = self._settings.iam_server_id

        request = AWSRequest(method="POST", url=url, data=_STS_BODY, headers=headers)
        try:
            SigV4Auth(credentials, "sts", self._settings.region_name).add_auth(request)
        except BotoCoreError as exc:
            raise CloudAuthFailedError(f"Failed to sign STS request: {exc}") from exc

        signed_headers = {name: [value] for name, value in request.headers.items()}
        return {
            "role": role,
            "iam_http_request_method": "POST",
            "iam_request_url": _b64(url),
            "iam_request_body": _b64(_STS_BODY),
            "iam_request_headers": _b64(json.dumps(signed_headers)),
        }

    def aws_login(self, vault_url: str, role: str) -> str:
        """Authenticate with the AWS IAM method and return the Vault client token."""
        payload = self.build_iam_login_payload(role)
        login_url = f"{vault_url.rstrip('/')}/v1/auth/{self._settings.aws_auth_mount}/login"

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(login_url, json=payload)
        except httpx.HTTPError as exc:
            raise CloudAuthFailedError(
                f"Vault login request failed: {exc}", transient=True
            ) from exc

        if response.status_code != HTTPStatus.OK:
            logger.warning("Vault AWS login returned %s", response.status_code)
            raise CloudAuthFailedError(
                f"AWS authentication to Vault failed: status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            client_token = response.json()["auth"]["client_token"]
        except (ValueError, KeyError, TypeError) as exc:
            raise CloudAuthFailedError("Vault login response did not include a client token.") from exc
        if not client_token:
            raise CloudAuthFailedError("Vault login response did not include a client token.")
        return client_token

    def read_secret(self, vault_url: str, path: str, vault_token: str) -> Dict[str, Any]:
        """Read a secret and return its data map (KV v2 ``data.data`` or KV v1 ``data``)."""
        secret_url = f"{vault_url.rstrip('/')}/v1/{path.lstrip('/')}"

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(secret_url, headers={"X-Vault-Token": vault_token})
        except httpx.HTTPError as exc:
            raise SecretFetchFailedError(
                f"Vault secret request failed: {exc}", transient=True
            ) from exc

        if response.status_code != HTTPStatus.OK:
            logger.warning("Vault secret read at %s returned %s", path, response.status_code)
            raise SecretFetchFailedError(
                f"Failed to read secret {path}: status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()["data"]
        except (ValueError, KeyError, TypeError) as exc:
            raise SecretFetchFailedError(f"Secret {path} returned an unexpected payload.") from exc
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            raise SecretFetchFailedError(f"Secret {path} returned an unexpected payload.")
        return data


__all__ = ["VaultClient"]
